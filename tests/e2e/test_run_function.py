"""Composition root tests: request mapping in, response mapping out."""

from __future__ import annotations

import logging

import pytest

from appcat_runtime.core import render_service, run_function
from appcat_runtime.domain.errors import MissingField, TypeMismatch
from appcat_runtime.domain.models import InstanceIdentity, SecretReference
from appcat_runtime.domain.settings import RuntimeSettings
from appcat_runtime.observability import TRACE_ID
from tests.support import CountingGenerator, function_request, redis_service_config

PASSWORD_TEMPLATE = {
    "passwordPath": "auth.password",
    "fields": [
        {"key": "password", "value": "${password}"},
        {"key": "url", "value": "redis://:${password}@${instanceName}:6379"},
    ],
}


def test_redis_request_end_to_end() -> None:
    response = run_function(function_request(), generator=CountingGenerator())

    release = response["desired"]["resources"]["helmrelease"]["resource"]
    assert release["spec"]["forProvider"]["values"]["replicaCount"] == 3
    assert release["spec"]["forProvider"]["values"]["auth"]["enabled"] is True
    assert response["desired"]["composite"]["connectionDetails"]["url"] == "redis://my-redis:6379"
    assert response["desired"]["composite"]["ready"] == "READY_TRUE"


def test_second_pass_over_response_is_stable() -> None:
    """Feeding the desired resources back as observed must not rotate the credential."""

    config = redis_service_config(connectionSecret=PASSWORD_TEMPLATE)
    first = run_function(function_request(service_config=config), generator=CountingGenerator())
    observed = {role: entry["resource"] for role, entry in first["desired"]["resources"].items()}

    generator = CountingGenerator(prefix="rotated-")
    second = run_function(function_request(service_config=config, observed=observed), generator=generator)

    assert generator.calls == []
    assert second == first
    assert second["desired"]["composite"]["connectionDetails"]["password"] == "generated-1"


def test_secret_reuse_after_user_change() -> None:
    config = redis_service_config(connectionSecret=PASSWORD_TEMPLATE)
    first = run_function(function_request(service_config=config), generator=CountingGenerator())
    observed = {role: entry["resource"] for role, entry in first["desired"]["resources"].items()}

    second = run_function(
        function_request(spec={"replicas": 5}, service_config=config, observed=observed),
        generator=CountingGenerator(prefix="rotated-"),
    )
    values = second["desired"]["resources"]["helmrelease"]["resource"]["spec"]["forProvider"]["values"]
    assert values == {"auth": {"enabled": True, "password": "generated-1"}, "replicaCount": 5}


def test_settings_control_ttl_and_length() -> None:
    generator = CountingGenerator()
    config = redis_service_config(connectionSecret=PASSWORD_TEMPLATE)
    response = run_function(
        function_request(service_config=config),
        generator=generator,
        settings=RuntimeSettings(password_length=8, response_ttl_seconds=5),
    )
    assert response["meta"] == {"ttl": "5s"}
    assert generator.calls == [8]


def test_failure_is_logged_and_raised(caplog: pytest.LogCaptureFixture) -> None:
    config = redis_service_config(defaultHelmValues={"replicaCount": 1}, mapping={"spec.replicas": "replicaCount.x"})
    with caplog.at_level(logging.ERROR, logger="appcat_runtime"):
        with pytest.raises(TypeMismatch):
            run_function(function_request(service_config=config), generator=CountingGenerator())
    failed = [record for record in caplog.records if record.getMessage() == "function_failed"]
    assert failed and failed[0].context["trace_id"] == "ns1/my-redis"
    assert failed[0].context["error_type"] == "TypeMismatch"


def test_missing_composite_raises_before_binding_trace() -> None:
    with pytest.raises(MissingField):
        run_function({"input": {"data": redis_service_config()}})
    assert TRACE_ID.get() is None


def test_render_service_with_secret_reference() -> None:
    config = redis_service_config(
        connectionSecret={"existingSecretPath": "auth.existingSecret", "fields": [{"key": "port", "value": "6379"}]}
    )
    result = render_service(
        config,
        {"replicas": 1},
        InstanceIdentity("my-redis", "ns1"),
        secret_ref=SecretReference(name="creds"),
        generator=CountingGenerator(),
    )
    assert result.values()["auth"]["existingSecret"] == "creds"
    assert result.descriptors["secret"]["metadata"]["name"] == "creds"
