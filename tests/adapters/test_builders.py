"""Descriptor builder tests: shapes of the Helm release and Secret descriptors."""

from __future__ import annotations

import base64

from appcat_runtime.adapters.builders.kubernetes import (
    HELM_RELEASE_API_VERSION,
    HelmReleaseBuilder,
    KubernetesDescriptorFactory,
    SecretBuilder,
)


def test_release_descriptor_shape() -> None:
    release = (
        HelmReleaseBuilder("my-redis")
        .with_namespace("ns1")
        .with_chart("https://charts.example", "redis", "19.6.4")
        .with_values({"replicaCount": 3})
        .with_label("team", "data")
        .with_annotation("note", "x")
        .build()
    )
    assert release == {
        "apiVersion": HELM_RELEASE_API_VERSION,
        "kind": "Release",
        "metadata": {
            "name": "my-redis",
            "namespace": "ns1",
            "labels": {"team": "data"},
            "annotations": {"note": "x"},
        },
        "spec": {
            "forProvider": {
                "chart": {"repository": "https://charts.example", "name": "redis", "version": "19.6.4"},
                "values": {"replicaCount": 3},
                "namespace": "ns1",
            }
        },
    }


def test_release_values_are_copied() -> None:
    values = {"auth": {"enabled": True}}
    builder = HelmReleaseBuilder("r").with_values(values)
    values["auth"]["enabled"] = False
    first = builder.build()
    first["spec"]["forProvider"]["values"]["auth"]["enabled"] = None
    assert builder.build()["spec"]["forProvider"]["values"] == {"auth": {"enabled": True}}


def test_release_without_namespace_omits_it() -> None:
    release = HelmReleaseBuilder("r").build()
    assert "namespace" not in release["metadata"]
    assert "namespace" not in release["spec"]["forProvider"]


def test_secret_descriptor_encodes_data() -> None:
    secret = (
        SecretBuilder("creds", "ns1")
        .with_data("url", "redis://my-redis:6379")
        .with_string_data("note", "plain")
        .with_labels({"a": "b"})
        .build()
    )
    assert secret["apiVersion"] == "v1"
    assert secret["kind"] == "Secret"
    assert secret["metadata"] == {"name": "creds", "namespace": "ns1", "labels": {"a": "b"}}
    assert base64.b64decode(secret["data"]["url"]).decode() == "redis://my-redis:6379"
    assert secret["stringData"] == {"note": "plain"}


def test_secret_without_string_data_omits_key() -> None:
    assert "stringData" not in SecretBuilder("creds", "ns1").build()


def test_factory_builds_both_descriptors() -> None:
    factory = KubernetesDescriptorFactory()
    release = factory.release(
        name="my-redis", namespace="ns1", repository="r", chart="redis", version="1.0", values={"a": 1}
    )
    secret = factory.secret(name="my-redis", namespace="ns1", data={"port": "6379"}, labels={"x": "y"})
    assert release["spec"]["forProvider"]["chart"] == {"repository": "r", "name": "redis", "version": "1.0"}
    assert secret["data"] == {"port": base64.b64encode(b"6379").decode()}
    assert secret["metadata"]["labels"] == {"x": "y"}
