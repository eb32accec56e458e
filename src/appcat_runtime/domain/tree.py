"""Dotted-path access and cloning for untyped parameter trees.

Purpose
-------
Provide the only place in the runtime that inspects the shape of nested
configuration data. Chart values, user specs, and observed descriptors
are all plain ``dict`` trees; the helpers here read and write them by dotted
path and clone them so merged results never alias the defaults.

Contents
--------
* :data:`ParameterTree` – alias for the nested mapping type.
* :func:`get_value` – read a value by dotted path (``PathNotFound`` /
  ``TypeMismatch`` on failure).
* :func:`set_value` – write a value by dotted path, creating intermediate
  mappings.
* :func:`clone_tree` / :func:`clone_value` – deep copies of mappings and
  sequences.
* :func:`kind_of` – human-readable kind names used in error messages.

System Role
-----------
Consumed by :mod:`appcat_runtime.application.merge` and
:mod:`appcat_runtime.application.synthesize`. The module performs no I/O and
holds no state.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, Final

from .errors import InvalidPath, PathNotFound, TypeMismatch

ParameterTree = dict[str, Any]
"""Nested mapping of string keys to scalars, mappings, or lists."""

DEFAULT_SENTINEL: Final[str] = "spec"
"""Leading segment ignored by :func:`get_value` so paths may echo the source root."""


def get_value(tree: Mapping[str, Any], path: str, *, sentinel: str | None = DEFAULT_SENTINEL) -> Any:
    """Return the value stored at dotted *path* inside *tree*.

    Why
    ----
    Field mappings address the user spec with paths such as
    ``spec.size.cpu``; the leading ``spec`` echoes the composite resource and is
    skipped.

    Parameters
    ----------
    tree:
        Mapping to walk.
    path:
        Dot-delimited address. An empty path returns *tree* itself.
    sentinel:
        Leading segment to ignore; ``None`` disables the behaviour.

    Raises
    ------
    PathNotFound
        A segment does not exist.
    TypeMismatch
        A non-terminal segment resolved to a non-mapping value.
    InvalidPath
        The path contains empty segments.

    Examples
    --------
    >>> get_value({"size": {"cpu": "500m"}}, "spec.size.cpu")
    '500m'
    >>> get_value({"size": {"cpu": "500m"}}, "")
    {'size': {'cpu': '500m'}}
    >>> get_value({"size": "big"}, "size.cpu")
    Traceback (most recent call last):
    ...
    appcat_runtime.domain.errors.TypeMismatch: path size.cpu: expected mapping at size, got str
    """

    if path == "":
        return tree
    parts = _split(path)
    if sentinel is not None and parts[0] == sentinel:
        parts = parts[1:]

    current: Any = tree
    parent = None
    for part in parts:
        if not isinstance(current, Mapping):
            raise TypeMismatch(path, parent or part, expected="mapping", actual=kind_of(current))
        if part not in current:
            raise PathNotFound(path, part)
        current = current[part]
        parent = part
    return current


def set_value(tree: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Assign *value* at dotted *path*, creating intermediate mappings on the way.

    Existing values at the final segment are overwritten. ``set_value`` never
    raises :class:`PathNotFound`.

    Raises
    ------
    InvalidPath
        *path* is empty or contains empty segments.
    TypeMismatch
        An intermediate segment already holds a non-mapping value.

    Examples
    --------
    >>> data = {"auth": {"enabled": True}}
    >>> set_value(data, "master.resources.requests.cpu", "1000m")
    >>> data["master"]
    {'resources': {'requests': {'cpu': '1000m'}}}
    >>> set_value({"master": "x"}, "master.y", 1)
    Traceback (most recent call last):
    ...
    appcat_runtime.domain.errors.TypeMismatch: path master.y: expected mapping at master, got str
    """

    if path == "":
        raise InvalidPath(path, "empty path")
    parts = _split(path)

    cursor: MutableMapping[str, Any] = tree
    for part in parts[:-1]:
        if part not in cursor:
            cursor[part] = {}
        child = cursor[part]
        if not isinstance(child, MutableMapping):
            raise TypeMismatch(path, part, expected="mapping", actual=kind_of(child))
        cursor = child
    cursor[parts[-1]] = value


def clone_tree(tree: Mapping[str, Any]) -> ParameterTree:
    """Return a deep copy of *tree* that shares no mutable substructure.

    Examples
    --------
    >>> source = {"a": {"b": [1, {"c": 2}]}}
    >>> copy = clone_tree(source)
    >>> copy["a"]["b"][1]["c"] = 3
    >>> source["a"]["b"][1]["c"]
    2
    """

    return {key: clone_value(value) for key, value in tree.items()}


def clone_value(value: Any) -> Any:
    """Clone nested values while preserving list and tuple types.

    Examples
    --------
    >>> clone_value(("a", ["b"]))
    ('a', ['b'])
    """

    if isinstance(value, Mapping):
        return clone_tree(value)
    if isinstance(value, list):
        return [clone_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(clone_value(item) for item in value)
    return value


def kind_of(value: Any) -> str:
    """Name the kind of *value* the way configuration authors think about it.

    Examples
    --------
    >>> kind_of({}), kind_of([]), kind_of("x"), kind_of(None), kind_of(True)
    ('mapping', 'sequence', 'str', 'null', 'bool')
    """

    if value is None:
        return "null"
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (list, tuple)):
        return "sequence"
    return type(value).__name__


def _split(path: str) -> list[str]:
    """Split *path* on dots, rejecting empty segments."""

    parts = path.split(".")
    if any(part == "" for part in parts):
        raise InvalidPath(path, "empty segment")
    return parts
