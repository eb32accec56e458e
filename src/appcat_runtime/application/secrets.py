"""Secret value lifecycle: reuse what was observed, generate only once.

Purpose
-------
Keep generated credentials stable across reconciliation passes. A value is
generated on the first synthesis for an instance and read back from the
observed descriptors on every later pass, so the chart and the connection
secret never churn.

Contents
    - ``resolve_secret``: pure function of the observed snapshot (plus one
      generator call when nothing was observed).
    - ``observed_secret``: the read-back half on its own.
    - ``_from_release`` / ``_from_secret`` / ``_from_rendered_fields``: per-role
      lookups.
    - ``decode_secret_value``: ``stringData``/``data`` decoding for Secret
      descriptors.

System Role
-----------
Called by :func:`appcat_runtime.application.synthesize.synthesize_resources`.
The module never caches anything itself; idempotence comes entirely from the
snapshot the caller supplies.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from typing import Any

from ..domain.errors import InvalidPath, PathNotFound, TypeMismatch
from ..domain.models import DEPLOYMENT_ROLE, PASSWORD_PLACEHOLDER, SECRET_ROLE, ConnectionSecretTemplate
from ..domain.tree import get_value
from ..observability import log_debug, log_info, make_event
from .ports import SecretGenerator
from .templates import PASSWORD_VARIABLE, extract_variable

RELEASE_VALUES_PATH = "spec.forProvider.values"
"""Location of the chart values inside an observed Helm release descriptor."""


def resolve_secret(
    observed: Mapping[str, Mapping[str, Any] | None],
    instance_name: str,
    template: ConnectionSecretTemplate | None,
    *,
    generator: SecretGenerator,
    length: int = 32,
    namespace: str = "",
) -> str:
    """Return the secret value for *instance_name*, reusing an observed one.

    What
    ----
    Looks for a non-empty value first in the observed Helm release (at the
    template's ``password_path`` inside the chart values), then in the observed
    connection secret: under the template's password key, or recovered from a
    rendered field whose template embeds ``${password}``. Falls back to
    ``generator.generate(length)``.

    Parameters
    ----------
    observed:
        Previously observed descriptors keyed by role.
    instance_name / namespace:
        Fill the other placeholders when recovering the value from a rendered
        field. Never used to derive a fresh value.
    template:
        Connection template telling where the value was stored.
    generator:
        Source of fresh values.
    length:
        Length of a freshly generated value.

    Examples
    --------
    >>> class Fixed:
    ...     def generate(self, length):
    ...         return "n" * length
    >>> template = ConnectionSecretTemplate(password_path="auth.password")
    >>> observed = {"helmrelease": {"spec": {"forProvider": {"values": {"auth": {"password": "abc123"}}}}}}
    >>> resolve_secret(observed, "my-redis", template, generator=Fixed())
    'abc123'
    >>> resolve_secret({}, "my-redis", template, generator=Fixed(), length=4)
    'nnnn'
    """

    existing = observed_secret(observed, template, {"instanceName": instance_name, "namespace": namespace})
    if existing is not None:
        log_info("secret_reused", **make_event("secret", instance_name))
        return existing
    log_info("secret_generated", **make_event("secret", instance_name, {"length": length}))
    return generator.generate(length)


def observed_secret(
    observed: Mapping[str, Mapping[str, Any] | None],
    template: ConnectionSecretTemplate | None,
    variables: Mapping[str, str] | None = None,
) -> str | None:
    """Return a previously stored secret value or ``None`` when nothing usable exists.

    *variables* holds the non-secret placeholder values (``instanceName``,
    ``namespace``) the observed fields were rendered with.
    """

    if template is None:
        return None
    if template.password_path:
        value = _from_release(observed.get(DEPLOYMENT_ROLE), template.password_path)
        if value:
            return value
    password_key = template.password_key
    if password_key:
        value = _from_secret(observed.get(SECRET_ROLE), password_key)
        if value:
            return value
    return _from_rendered_fields(observed.get(SECRET_ROLE), template, variables or {})


def _from_release(release: Mapping[str, Any] | None, password_path: str) -> str | None:
    """Read the secret from the chart values of an observed release."""

    if not release:
        return None
    try:
        value = get_value(release, f"{RELEASE_VALUES_PATH}.{password_path}", sentinel=None)
    except (PathNotFound, TypeMismatch, InvalidPath) as exc:
        log_debug("observed_secret_unavailable", role=DEPLOYMENT_ROLE, reason=str(exc))
        return None
    return value if isinstance(value, str) else None


def _from_secret(secret: Mapping[str, Any] | None, key: str) -> str | None:
    """Read the secret from an observed Secret descriptor."""

    if not secret:
        return None
    return decode_secret_value(secret, key)


def _from_rendered_fields(
    secret: Mapping[str, Any] | None,
    template: ConnectionSecretTemplate,
    variables: Mapping[str, str],
) -> str | None:
    """Recover the secret from observed fields whose template embeds it in other text."""

    if not secret:
        return None
    for item in template.fields:
        if not item.key or PASSWORD_PLACEHOLDER not in item.value:
            continue
        rendered = decode_secret_value(secret, item.key)
        if rendered is None:
            continue
        value = extract_variable(item.value, rendered, PASSWORD_VARIABLE, variables)
        if value:
            return value
        log_debug("observed_secret_unmatched", role=SECRET_ROLE, key=item.key)
    return None


def decode_secret_value(secret: Mapping[str, Any], key: str) -> str | None:
    """Get a decoded value from a Secret descriptor (plain ``stringData`` or base64 ``data``).

    Examples
    --------
    >>> decode_secret_value({"data": {"password": "YWJjMTIz"}}, "password")
    'abc123'
    >>> decode_secret_value({"stringData": {"password": "plain"}}, "password")
    'plain'
    >>> decode_secret_value({}, "password") is None
    True
    """

    string_data = secret.get("stringData") or {}
    if isinstance(string_data, Mapping):
        value = string_data.get(key)
        if isinstance(value, str):
            return value
    data = secret.get("data") or {}
    if not isinstance(data, Mapping):
        return None
    value = data.get(key)
    if not isinstance(value, str):
        return None
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, ValueError, UnicodeDecodeError):
        log_debug("observed_secret_undecodable", role=SECRET_ROLE, key=key)
        return value
