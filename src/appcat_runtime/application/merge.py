"""Application-layer merge of service defaults with the user's composite spec.

Purpose
-------
Turn a service's default chart values plus the user's composite ``spec`` into
one merged set of chart values, driven by the service's field mapping table.
The module is free of I/O so it can be reused by alternative composition
roots.

Contents
    - ``merge_configs``: public entry point.
    - ``_ordered_entries``: deterministic iteration over the mapping table.
    - ``_apply_entry``: copies one user value into the merged tree.

System Role
-----------
Receives a :class:`ServiceConfig` from :mod:`appcat_runtime.core` and returns a
:class:`MergedConfig` for :mod:`appcat_runtime.application.synthesize`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator

from ..domain.errors import InvalidPath, PathNotFound, TypeMismatch
from ..domain.models import MergedConfig, ServiceConfig
from ..domain.tree import DEFAULT_SENTINEL, ParameterTree, clone_tree, clone_value, get_value, set_value
from ..observability import log_debug, log_error, log_warning


def merge_configs(
    service_config: ServiceConfig,
    user_spec: Mapping[str, Any],
    *,
    sentinel: str | None = DEFAULT_SENTINEL,
) -> MergedConfig:
    """Merge *user_spec* into the service defaults following the mapping table.

    Why
    ----
    Service authors declare which user-facing fields land where in the chart
    values; users only override what they care about and defaults stand for
    everything else.

    What
    ----
    Clones the defaults, then for each mapping entry (ordered by source path)
    copies the user's value to the destination path. Missing user values are
    skipped; destination conflicts abort the merge.

    Parameters
    ----------
    service_config:
        Validated service configuration.
    user_spec:
        The composite resource ``spec``; never mutated.
    sentinel:
        Leading source-path segment to ignore (``spec`` by default).

    Returns
    -------
    MergedConfig
        Chart identity, merged values, and the unchanged connection template.

    Raises
    ------
    TypeMismatch
        A source or destination path crosses a non-mapping value.
    InvalidPath
        A mapping entry uses an empty or malformed path.

    Examples
    --------
    >>> config = ServiceConfig.from_mapping({
    ...     "chart": {"repository": "r", "name": "redis", "defaultVersion": "1.0"},
    ...     "defaultHelmValues": {"resources": {"cpu": "250m"}},
    ...     "mapping": {"spec.size.cpu": "resources.cpu"},
    ...     "connectionSecret": None,
    ... })
    >>> merge_configs(config, {"size": {"cpu": "500m"}}).values
    {'resources': {'cpu': '500m'}}
    >>> merge_configs(config, {}).values
    {'resources': {'cpu': '250m'}}
    """

    values = clone_tree(service_config.default_values)
    applied = 0
    for source, destination in _ordered_entries(service_config.mapping):
        if _apply_entry(values, user_spec, source, destination, sentinel):
            applied += 1

    log_debug("config_merged", role="merge", mappings=len(service_config.mapping), applied=applied)
    return MergedConfig(
        chart=service_config.chart,
        values=values,
        connection_secret=service_config.connection_secret,
    )


def _ordered_entries(mapping: Mapping[object, object]) -> Iterator[tuple[str, str]]:
    """Yield ``(source, destination)`` pairs sorted by source path.

    Entries with non-string paths are skipped with a warning.

    Examples
    --------
    >>> list(_ordered_entries({"spec.b": "y", "spec.a": "x", "spec.c": 3}))
    [('spec.a', 'x'), ('spec.b', 'y')]
    """

    valid: list[tuple[str, str]] = []
    for source, destination in mapping.items():
        if not isinstance(source, str) or not isinstance(destination, str):
            log_warning(
                "mapping_entry_skipped",
                role="merge",
                source=repr(source),
                destination=repr(destination),
                reason="non-string path",
            )
            continue
        valid.append((source, destination))
    yield from sorted(valid)


def _apply_entry(
    values: ParameterTree,
    user_spec: Mapping[str, Any],
    source: str,
    destination: str,
    sentinel: str | None,
) -> bool:
    """Copy the user value at *source* to *destination*; return ``True`` when applied."""

    try:
        value = get_value(user_spec, source, sentinel=sentinel)
    except PathNotFound:
        log_debug("user_value_absent", role="merge", source=source)
        return False
    try:
        set_value(values, destination, clone_value(value))
    except (TypeMismatch, InvalidPath) as exc:
        log_error("mapping_failed", role="merge", source=source, destination=destination, error=str(exc))
        raise
    log_debug("user_value_mapped", role="merge", source=source, destination=destination)
    return True
