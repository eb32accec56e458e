"""Runtime settings value object.

Purpose
-------
Collect the handful of knobs the runtime exposes to operators (secret length,
response TTL, label values, the path sentinel) in one immutable object.
Loading from the environment lives in :mod:`appcat_runtime.adapters.env.default`
and :func:`appcat_runtime.core.load_settings`; this module only validates.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from .errors import InvalidFormat


@dataclass(frozen=True, slots=True)
class RuntimeSettings:
    """Operator-tunable runtime behaviour.

    Attributes
    ----------
    password_length:
        Number of characters in a freshly generated secret value.
    response_ttl_seconds:
        TTL advertised on function responses.
    managed_by:
        Value of the ``app.kubernetes.io/managed-by`` label on secrets.
    path_sentinel:
        Leading segment ignored when reading user-spec paths.

    Examples
    --------
    >>> RuntimeSettings.from_mapping({"password_length": 16}).password_length
    16
    >>> RuntimeSettings.from_mapping({"password_length": "many"})
    Traceback (most recent call last):
    ...
    appcat_runtime.domain.errors.InvalidFormat: setting password_length must be int, got str
    """

    password_length: int = 32
    response_ttl_seconds: int = 60
    managed_by: str = "crossplane"
    path_sentinel: str = "spec"

    def __post_init__(self) -> None:
        if self.password_length <= 0:
            raise InvalidFormat("setting password_length must be positive")
        if self.response_ttl_seconds < 0:
            raise InvalidFormat("setting response_ttl_seconds must not be negative")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RuntimeSettings:
        """Build settings from *data*, ignoring unknown keys."""

        kwargs: dict[str, Any] = {}
        for spec in fields(cls):
            if spec.name not in data:
                continue
            value = data[spec.name]
            expected = int if spec.type == "int" else str
            if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
                raise InvalidFormat(f"setting {spec.name} must be int, got {type(value).__name__}")
            if expected is str:
                value = str(value)
            kwargs[spec.name] = value
        return cls(**kwargs)


DEFAULT_SETTINGS = RuntimeSettings()
"""Settings used when callers do not pass their own."""

TEXT_SETTINGS: tuple[str, ...] = tuple(spec.name for spec in fields(RuntimeSettings) if spec.type == "str")
"""Settings taken verbatim from their source text, without scalar coercion."""
