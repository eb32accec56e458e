"""Resource synthesis: merged configuration in, desired descriptors out.

Purpose
-------
Orchestrate secret resolution, value injection, descriptor building, and
template rendering for one composite instance. The function is synchronous,
performs no I/O, and never mutates its inputs; the only non-deterministic step
is the generator call made when no secret was observed.

Contents
    - ``synthesize_resources``: public entry point.
    - ``_inject_secret_settings``: writes the secret value and the secret name
      into the chart values according to the template.
    - ``_render_connection``: renders the connection values.
    - ``secret_labels``: standard identifying labels for the secret descriptor.

System Role
-----------
Called by :mod:`appcat_runtime.core` with the output of
:func:`appcat_runtime.application.merge.merge_configs`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..domain.errors import MissingField
from ..domain.models import (
    DEPLOYMENT_ROLE,
    SECRET_ROLE,
    ConnectionSecretTemplate,
    InstanceIdentity,
    MergedConfig,
    SecretReference,
    SynthesisResult,
)
from ..domain.settings import DEFAULT_SETTINGS, RuntimeSettings
from ..domain.tree import ParameterTree, clone_tree, set_value
from ..observability import log_info, make_event
from .ports import DescriptorFactory, SecretGenerator
from .secrets import resolve_secret
from .templates import render_template, template_variables


def synthesize_resources(
    merged: MergedConfig,
    identity: InstanceIdentity,
    observed: Mapping[str, Mapping[str, Any] | None],
    *,
    generator: SecretGenerator,
    factory: DescriptorFactory,
    secret_ref: SecretReference | None = None,
    settings: RuntimeSettings = DEFAULT_SETTINGS,
) -> SynthesisResult:
    """Produce the desired descriptors and connection values for *identity*.

    Why
    ----
    The Helm release and the connection secret must agree on the credential
    and on the secret name; building both in one pass keeps those cross-field
    invariants in a single place.

    What
    ----
    1. Validates the chart identity and the merged values.
    2. Resolves the secret value (reused when observed).
    3. Injects the secret value and the secret name into a copy of the values
       where the template asks for it.
    4. Builds the release descriptor.
    5. Renders the template fields into connection values and, when the
       template writes a secret, the secret descriptor.

    Raises
    ------
    MissingField
        Chart identity fields or the merged values are absent.
    TypeMismatch / InvalidPath
        An injection path conflicts with the chart values.

    Examples
    --------
    >>> from appcat_runtime.adapters.builders.kubernetes import KubernetesDescriptorFactory
    >>> from appcat_runtime.domain.models import ChartIdentity
    >>> class Fixed:
    ...     def generate(self, length):
    ...         return "s3cret"
    >>> merged = MergedConfig(ChartIdentity("r", "redis", "1.0"), {"replicaCount": 3}, None)
    >>> result = synthesize_resources(
    ...     merged, InstanceIdentity("my-redis", "ns1"), {},
    ...     generator=Fixed(), factory=KubernetesDescriptorFactory(),
    ... )
    >>> sorted(result.descriptors), result.connection_details
    (['helmrelease'], {})
    """

    merged.chart.require()
    if merged.values is None:
        raise MissingField("helmValues", "merged config carries no chart values")
    template = merged.connection_secret

    secret_value = resolve_secret(
        observed,
        identity.name,
        template,
        generator=generator,
        length=settings.password_length,
        namespace=identity.namespace,
    )
    secret_name, secret_namespace = (secret_ref or SecretReference()).resolve(identity)

    values = clone_tree(merged.values)
    if template is not None:
        _inject_secret_settings(values, template, secret_value, secret_name)

    log_info(
        "release_synthesized",
        **make_event(
            DEPLOYMENT_ROLE,
            identity.name,
            {"chart": merged.chart.name, "version": merged.chart.default_version, "namespace": identity.namespace},
        ),
    )
    descriptors: dict[str, dict[str, Any]] = {
        DEPLOYMENT_ROLE: factory.release(
            name=identity.name,
            namespace=identity.namespace,
            repository=merged.chart.repository or "",
            chart=merged.chart.name or "",
            version=merged.chart.default_version or "",
            values=values,
        )
    }

    if template is None:
        return SynthesisResult(descriptors=descriptors, secret_value=secret_value)

    rendered = _render_connection(template, identity, secret_value)
    if template.write_secret:
        descriptors[SECRET_ROLE] = factory.secret(
            name=secret_name,
            namespace=secret_namespace,
            data=rendered,
            labels=secret_labels(identity, settings),
        )
        log_info(
            "secret_synthesized",
            **make_event(
                SECRET_ROLE,
                identity.name,
                {"secret_name": secret_name, "secret_namespace": secret_namespace, "fields": len(rendered)},
            ),
        )
    connection_details = rendered if template.publish_connection_details else {}
    return SynthesisResult(
        descriptors=descriptors,
        connection_details=connection_details,
        secret_value=secret_value,
    )


def _inject_secret_settings(
    values: ParameterTree,
    template: ConnectionSecretTemplate,
    secret_value: str,
    secret_name: str,
) -> None:
    """Write the secret value and the connection secret name into *values*."""

    if template.password_path:
        set_value(values, template.password_path, secret_value)
    if template.existing_secret_path:
        set_value(values, template.existing_secret_path, secret_name)
        log_info(
            "existing_secret_configured",
            role=DEPLOYMENT_ROLE,
            path=template.existing_secret_path,
            secret_name=secret_name,
        )


def _render_connection(
    template: ConnectionSecretTemplate,
    identity: InstanceIdentity,
    secret_value: str,
) -> dict[str, str]:
    """Render every template field; later duplicates of a key win."""

    variables = template_variables(identity.name, identity.namespace, secret_value)
    rendered: dict[str, str] = {}
    for item in template.fields:
        if not item.key:
            continue
        rendered[item.key] = render_template(item.value, variables)
    return rendered


def secret_labels(identity: InstanceIdentity, settings: RuntimeSettings = DEFAULT_SETTINGS) -> dict[str, str]:
    """Return the standard labels identifying a managed connection secret.

    Examples
    --------
    >>> secret_labels(InstanceIdentity("my-redis", "ns1"))["app.kubernetes.io/instance"]
    'my-redis'
    """

    return {
        "app.kubernetes.io/managed-by": settings.managed_by,
        "app.kubernetes.io/instance": identity.name,
        "app.kubernetes.io/component": "connection-secret",
    }
