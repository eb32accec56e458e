"""Composition root for ``appcat_runtime``.

Purpose
-------
Provide the entry points that wire the request codec, the merge engine, the
synthesizer, and the default adapters together while emitting structured
observability signals.

Contents
--------
* :func:`load_settings` – runtime settings from the environment.
* :func:`render_service` – merge + synthesize for callers holding parsed pieces.
* :func:`run_function` – full request mapping → response mapping.

System Role
-----------
This module is the canonical place for choosing adapters. The CLI and any
transport wrapper call into it; nothing below it imports adapters directly.
"""

from __future__ import annotations

from typing import Any, Mapping

from .adapters.builders.kubernetes import KubernetesDescriptorFactory
from .adapters.env.default import DEFAULT_ENV_PREFIX, DefaultEnvLoader
from .adapters.request.function import build_response, parse_request
from .adapters.secrets.default import SystemSecretGenerator
from .application.merge import merge_configs
from .application.ports import DescriptorFactory, SecretGenerator
from .application.synthesize import synthesize_resources
from .domain.errors import SynthesisError
from .domain.models import InstanceIdentity, SecretReference, ServiceConfig, SynthesisResult
from .domain.settings import TEXT_SETTINGS, RuntimeSettings
from .observability import bind_trace_id, log_error, log_info, make_event


def load_settings(environ: Mapping[str, str] | None = None, *, prefix: str = DEFAULT_ENV_PREFIX) -> RuntimeSettings:
    """Return :class:`RuntimeSettings` with ``APPCAT_RUNTIME_*`` overrides applied.

    Examples
    --------
    >>> load_settings({"APPCAT_RUNTIME_PASSWORD_LENGTH": "16"}).password_length
    16
    >>> load_settings({}).response_ttl_seconds
    60
    >>> load_settings({"APPCAT_RUNTIME_MANAGED_BY": "null"}).managed_by
    'null'
    """

    loader = DefaultEnvLoader(environ=environ)
    payload = loader.load(prefix)
    text = loader.load(prefix, coerce=False)
    payload.update({name: text[name] for name in TEXT_SETTINGS if name in text})
    return RuntimeSettings.from_mapping(payload)


def render_service(
    service_config: Mapping[str, Any],
    user_spec: Mapping[str, Any],
    identity: InstanceIdentity,
    *,
    observed: Mapping[str, Mapping[str, Any] | None] | None = None,
    secret_ref: SecretReference | None = None,
    generator: SecretGenerator | None = None,
    factory: DescriptorFactory | None = None,
    settings: RuntimeSettings | None = None,
) -> SynthesisResult:
    """Validate *service_config*, merge *user_spec* into it, and synthesize descriptors.

    Examples
    --------
    >>> result = render_service(
    ...     {
    ...         "chart": {"repository": "r", "name": "redis", "defaultVersion": "1.0"},
    ...         "defaultHelmValues": {"auth": {"enabled": True}},
    ...         "mapping": {"spec.replicas": "replicaCount"},
    ...         "connectionSecret": {"fields": [{"key": "url", "value": "redis://${instanceName}:6379"}]},
    ...     },
    ...     {"replicas": 3},
    ...     InstanceIdentity("my-redis", "ns1"),
    ... )
    >>> result.values()
    {'auth': {'enabled': True}, 'replicaCount': 3}
    >>> result.connection_details
    {'url': 'redis://my-redis:6379'}
    """

    active = settings or RuntimeSettings()
    config = ServiceConfig.from_mapping(service_config)
    log_info(
        "service_config_loaded",
        **make_event("merge", identity.name, {"chart": config.chart.name, "mappings": len(config.mapping)}),
    )
    merged = merge_configs(config, user_spec, sentinel=active.path_sentinel or None)
    return synthesize_resources(
        merged,
        identity,
        observed or {},
        generator=generator or SystemSecretGenerator(),
        factory=factory or KubernetesDescriptorFactory(),
        secret_ref=secret_ref,
        settings=active,
    )


def run_function(
    request: Mapping[str, Any],
    *,
    generator: SecretGenerator | None = None,
    factory: DescriptorFactory | None = None,
    settings: RuntimeSettings | None = None,
) -> dict[str, Any]:
    """Run one composition function request and return the response mapping.

    Side Effects
    ------------
    Binds the trace identifier to ``<namespace>/<name>`` of the composite and
    emits structured log events. Failures are logged as ``function_failed`` and
    re-raised; no partial response is produced.
    """

    active = settings or RuntimeSettings()
    bind_trace_id(None)
    try:
        parsed = parse_request(request)
        bind_trace_id(f"{parsed.identity.namespace}/{parsed.identity.name}")
        log_info("function_called", **make_event("function", parsed.identity.name))
        result = render_service(
            parsed.service_config,
            parsed.user_spec,
            parsed.identity,
            observed=parsed.observed,
            secret_ref=parsed.secret_ref,
            generator=generator,
            factory=factory,
            settings=active,
        )
    except SynthesisError as exc:
        log_error("function_failed", error=str(exc), error_type=type(exc).__name__)
        raise
    response = build_response(result, ttl_seconds=active.response_ttl_seconds)
    log_info(
        "function_completed",
        **make_event("function", parsed.identity.name, {"resources": len(result.descriptors)}),
    )
    return response


__all__ = [
    "load_settings",
    "render_service",
    "run_function",
]
