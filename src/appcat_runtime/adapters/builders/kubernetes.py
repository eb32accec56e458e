"""Fluent builders for the Kubernetes descriptors the runtime emits.

Purpose
-------
Serialise synthesized pieces into plain ``dict`` descriptors
(``apiVersion``/``kind``/``metadata``/``spec``) ready to be placed on a function
response. The builders carry no synthesis logic; they only shape data.

Contents
--------
* :class:`HelmReleaseBuilder` – ``helm.crossplane.io/v1beta1`` ``Release``.
* :class:`SecretBuilder` – ``v1`` ``Secret`` with base64 ``data``.
* :class:`KubernetesDescriptorFactory` – implements the
  :class:`appcat_runtime.application.ports.DescriptorFactory` port.
"""

from __future__ import annotations

import base64
from typing import Any, Mapping

from ...domain.tree import clone_tree

HELM_RELEASE_API_VERSION = "helm.crossplane.io/v1beta1"
SECRET_API_VERSION = "v1"


class HelmReleaseBuilder:
    """Build a Helm release descriptor.

    Examples
    --------
    >>> release = (
    ...     HelmReleaseBuilder("my-redis")
    ...     .with_namespace("ns1")
    ...     .with_chart("https://charts.example", "redis", "1.0")
    ...     .with_values({"replicaCount": 3})
    ...     .build()
    ... )
    >>> release["kind"], release["spec"]["forProvider"]["chart"]["name"]
    ('Release', 'redis')
    >>> release["spec"]["forProvider"]["values"]
    {'replicaCount': 3}
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._namespace: str | None = None
        self._chart: dict[str, str] = {}
        self._values: dict[str, Any] = {}
        self._labels: dict[str, str] = {}
        self._annotations: dict[str, str] = {}

    def with_namespace(self, namespace: str) -> HelmReleaseBuilder:
        self._namespace = namespace
        return self

    def with_chart(self, repository: str, name: str, version: str) -> HelmReleaseBuilder:
        self._chart = {"repository": repository, "name": name, "version": version}
        return self

    def with_values(self, values: Mapping[str, Any]) -> HelmReleaseBuilder:
        self._values = clone_tree(values)
        return self

    def with_label(self, key: str, value: str) -> HelmReleaseBuilder:
        self._labels[key] = value
        return self

    def with_annotation(self, key: str, value: str) -> HelmReleaseBuilder:
        self._annotations[key] = value
        return self

    def build(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {"name": self._name}
        if self._namespace:
            metadata["namespace"] = self._namespace
        if self._labels:
            metadata["labels"] = dict(self._labels)
        if self._annotations:
            metadata["annotations"] = dict(self._annotations)
        for_provider: dict[str, Any] = {"chart": dict(self._chart), "values": clone_tree(self._values)}
        if self._namespace:
            for_provider["namespace"] = self._namespace
        return {
            "apiVersion": HELM_RELEASE_API_VERSION,
            "kind": "Release",
            "metadata": metadata,
            "spec": {"forProvider": for_provider},
        }


class SecretBuilder:
    """Build a Secret descriptor; ``data`` values are base64-encoded on build.

    Examples
    --------
    >>> secret = SecretBuilder("creds", "ns1").with_data("password", "abc123").with_label("a", "b").build()
    >>> secret["data"], secret["metadata"]["labels"]
    ({'password': 'YWJjMTIz'}, {'a': 'b'})
    """

    def __init__(self, name: str, namespace: str) -> None:
        self._name = name
        self._namespace = namespace
        self._data: dict[str, str] = {}
        self._string_data: dict[str, str] = {}
        self._labels: dict[str, str] = {}
        self._annotations: dict[str, str] = {}

    def with_data(self, key: str, value: str) -> SecretBuilder:
        self._data[key] = value
        return self

    def with_string_data(self, key: str, value: str) -> SecretBuilder:
        self._string_data[key] = value
        return self

    def with_label(self, key: str, value: str) -> SecretBuilder:
        self._labels[key] = value
        return self

    def with_labels(self, labels: Mapping[str, str]) -> SecretBuilder:
        self._labels.update(labels)
        return self

    def with_annotation(self, key: str, value: str) -> SecretBuilder:
        self._annotations[key] = value
        return self

    def build(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {"name": self._name, "namespace": self._namespace}
        if self._labels:
            metadata["labels"] = dict(self._labels)
        if self._annotations:
            metadata["annotations"] = dict(self._annotations)
        descriptor: dict[str, Any] = {
            "apiVersion": SECRET_API_VERSION,
            "kind": "Secret",
            "metadata": metadata,
            "data": {key: _b64(value) for key, value in self._data.items()},
        }
        if self._string_data:
            descriptor["stringData"] = dict(self._string_data)
        return descriptor


class KubernetesDescriptorFactory:
    """Default :class:`DescriptorFactory` backed by the builders above."""

    def release(
        self,
        *,
        name: str,
        namespace: str,
        repository: str,
        chart: str,
        version: str,
        values: Mapping[str, Any],
    ) -> dict[str, Any]:
        return (
            HelmReleaseBuilder(name)
            .with_namespace(namespace)
            .with_chart(repository, chart, version)
            .with_values(values)
            .build()
        )

    def secret(
        self,
        *,
        name: str,
        namespace: str,
        data: Mapping[str, str],
        labels: Mapping[str, str],
    ) -> dict[str, Any]:
        builder = SecretBuilder(name, namespace).with_labels(labels)
        for key, value in data.items():
            builder = builder.with_data(key, value)
        return builder.build()


def _b64(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")
