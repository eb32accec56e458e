"""Environment variable adapter for runtime settings.

Purpose
-------
Translate process environment variables into the nested mapping consumed by
:meth:`appcat_runtime.domain.settings.RuntimeSettings.from_mapping`.

Key behaviours
--------------
* Enforces a prefix (``APPCAT_RUNTIME`` by default) so only relevant keys are
  captured.
* Supports ``__`` as a nesting delimiter (``FOO__BAR`` → ``{"foo": {"bar": ...}}``).
* Performs light type coercion for common scalar types (bools, ints, floats,
  ``null``/``none``).
"""

from __future__ import annotations

import os
from typing import Final, Mapping

from ...observability import log_debug

DEFAULT_ENV_PREFIX: Final[str] = "APPCAT_RUNTIME"


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('appcat-runtime')
    'APPCAT_RUNTIME'
    """

    return slug.replace("-", "_").upper()


class DefaultEnvLoader:
    """Load environment variables that belong to the runtime namespace."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def load(self, prefix: str = DEFAULT_ENV_PREFIX, *, coerce: bool = True) -> dict[str, object]:
        """Return a nested mapping containing variables with the supplied *prefix*.

        Keys are stored in lowercase. With ``coerce=False`` values stay the raw
        environment text.

        Examples
        --------
        >>> env = {
        ...     'APPCAT_RUNTIME_PASSWORD_LENGTH': '24',
        ...     'APPCAT_RUNTIME_LABELS__TEAM': 'data',
        ...     'HOME': '/root',
        ... }
        >>> payload = DefaultEnvLoader(environ=env).load('APPCAT_RUNTIME')
        >>> payload['password_length'], payload['labels']
        (24, {'team': 'data'})
        """

        prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else prefix
        collected: dict[str, object] = {}
        for key, value in self._environ.items():
            if prefix and not key.startswith(prefix):
                continue
            stripped = key[len(prefix) :] if prefix else key
            if not stripped:
                continue
            assign_nested(collected, stripped, _coerce(value) if coerce else value)
        log_debug("env_variables_loaded", role="settings", keys=sorted(collected.keys()))
        return collected


def assign_nested(target: dict[str, object], key: str, value: object) -> None:
    """Assign ``value`` inside ``target`` using ``__`` as a nesting delimiter.

    Examples
    --------
    >>> data: dict[str, object] = {}
    >>> assign_nested(data, 'SERVICE__TIMEOUT', 5)
    >>> data
    {'service': {'timeout': 5}}
    """

    parts = key.split("__")
    cursor = target
    for part in parts[:-1]:
        cursor = _ensure_child_mapping(cursor, part.lower())
    cursor[parts[-1].lower()] = value


def _ensure_child_mapping(mapping: dict[str, object], key: str) -> dict[str, object]:
    """Ensure ``mapping[key]`` is a ``dict`` (creating or validating as necessary)."""

    if key not in mapping:
        mapping[key] = {}
    child = mapping[key]
    if not isinstance(child, dict):
        raise ValueError(f"Cannot override scalar with mapping for key {key}")
    return child


def _coerce(value: str) -> object:
    """Coerce textual environment values to Python primitives where possible.

    Examples
    --------
    >>> _coerce('true'), _coerce('10'), _coerce('3.5'), _coerce('hello')
    (True, 10, 3.5, 'hello')
    """

    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    try:
        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)
        return float(value)
    except ValueError:
        return value
