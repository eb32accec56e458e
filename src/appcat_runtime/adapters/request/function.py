"""Composition function request/response codec.

Purpose
-------
Translate the mapping form of a function request (observed composite, observed
composed resources, function input) into domain objects, and the synthesis
result back into the mapping form of a function response. Transport framing
is not handled here; callers hand in already-decoded mappings.

Contents
--------
* :class:`FunctionRequest` – parsed request pieces.
* :func:`parse_request` – request mapping → :class:`FunctionRequest`.
* :func:`build_response` – :class:`SynthesisResult` → response mapping.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ...domain.errors import MissingField, PathNotFound, TypeMismatch
from ...domain.models import InstanceIdentity, SecretReference, SynthesisResult
from ...domain.tree import clone_tree, get_value, kind_of

READY_TRUE = "READY_TRUE"


@dataclass(frozen=True, slots=True)
class FunctionRequest:
    """Everything the engine needs from one function request.

    Attributes
    ----------
    user_spec:
        Copy of the composite ``spec``.
    service_config:
        Copy of the function input ``data`` (validated later by
        :meth:`ServiceConfig.from_mapping`).
    identity:
        Composite name and namespace.
    observed:
        Previously observed descriptors keyed by role.
    secret_ref:
        ``spec.writeConnectionSecretToRef`` when present.
    """

    user_spec: dict[str, Any]
    service_config: dict[str, Any]
    identity: InstanceIdentity
    observed: dict[str, dict[str, Any]] = field(default_factory=dict)
    secret_ref: SecretReference | None = None


def parse_request(request: Mapping[str, Any]) -> FunctionRequest:
    """Parse a function request mapping.

    Raises
    ------
    MissingField
        The composite, its ``spec``/``metadata.name``/``metadata.namespace``,
        the function input, or its ``data`` are absent.
    TypeMismatch
        ``spec`` or ``data`` is not a mapping.

    Examples
    --------
    >>> parsed = parse_request({
    ...     "observed": {"composite": {"resource": {
    ...         "metadata": {"name": "my-redis", "namespace": "ns1"},
    ...         "spec": {"replicas": 3},
    ...     }}},
    ...     "input": {"data": {"chart": {}}},
    ... })
    >>> parsed.identity, parsed.user_spec
    (InstanceIdentity(name='my-redis', namespace='ns1'), {'replicas': 3})
    """

    composite = _composite(request)
    user_spec = _required_mapping(composite, "spec", "composite")
    identity = InstanceIdentity(
        name=_required_str(composite, "metadata.name"),
        namespace=_required_str(composite, "metadata.namespace"),
    )

    function_input = request.get("input")
    if not isinstance(function_input, Mapping):
        raise MissingField("input", "function request carries no input")
    service_config = _required_mapping(function_input, "data", "input")

    return FunctionRequest(
        user_spec=clone_tree(user_spec),
        service_config=clone_tree(service_config),
        identity=identity,
        observed=_observed_resources(request),
        secret_ref=SecretReference.from_mapping(user_spec.get("writeConnectionSecretToRef")),
    )


def build_response(result: SynthesisResult, *, ttl_seconds: int = 60) -> dict[str, Any]:
    """Return the response mapping for *result*.

    Examples
    --------
    >>> result = SynthesisResult(descriptors={"secret": {"kind": "Secret"}}, connection_details={"url": "x"})
    >>> response = build_response(result, ttl_seconds=30)
    >>> response["meta"], response["desired"]["composite"]["connectionDetails"]
    ({'ttl': '30s'}, {'url': 'x'})
    """

    return {
        "meta": {"ttl": f"{ttl_seconds}s"},
        "desired": {
            "composite": {
                "connectionDetails": dict(result.connection_details),
                "ready": READY_TRUE,
            },
            "resources": {
                role: {"resource": clone_tree(descriptor)} for role, descriptor in result.descriptors.items()
            },
        },
    }


def _composite(request: Mapping[str, Any]) -> Mapping[str, Any]:
    try:
        composite = get_value(request, "observed.composite.resource", sentinel=None)
    except (PathNotFound, TypeMismatch) as exc:
        raise MissingField("observed.composite", "function request carries no composite") from exc
    if not isinstance(composite, Mapping):
        raise MissingField("observed.composite", "function request carries no composite")
    return composite


def _observed_resources(request: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Return observed descriptors keyed by role, unwrapping ``resource`` envelopes."""

    try:
        resources = get_value(request, "observed.resources", sentinel=None)
    except (PathNotFound, TypeMismatch):
        return {}
    if not isinstance(resources, Mapping):
        return {}
    observed: dict[str, dict[str, Any]] = {}
    for role, entry in resources.items():
        if not isinstance(entry, Mapping):
            continue
        resource = entry.get("resource", entry)
        if isinstance(resource, Mapping):
            observed[str(role)] = clone_tree(resource)
    return observed


def _required_mapping(source: Mapping[str, Any], key: str, owner: str) -> Mapping[str, Any]:
    if key not in source:
        raise MissingField(key, f"not found in {owner}")
    value = source[key]
    if not isinstance(value, Mapping):
        raise TypeMismatch(key, key, expected="mapping", actual=kind_of(value))
    return value


def _required_str(source: Mapping[str, Any], path: str) -> str:
    try:
        value = get_value(source, path, sentinel=None)
    except (PathNotFound, TypeMismatch) as exc:
        raise MissingField(path, "not found in composite") from exc
    if not isinstance(value, str) or not value:
        raise MissingField(path, "not a non-empty string")
    return value
