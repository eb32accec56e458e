"""Example input generation helpers.

Purpose
-------
Produce a ready-to-run redis service configuration and function request so
operators can try ``appcat-runtime render`` without a cluster. This module
belongs to the outer ring of the architecture and has no runtime coupling to
the composition root.

Contents
    - ``ExampleSpec``: dataclass capturing a relative path and text content.
    - ``generate_examples``: writes the example files.
    - ``_build_specs``: yields the example documents.
    - ``_should_write`` / ``_ensure_parent``: tiny filesystem helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

import yaml

SERVICE_CONFIG_FILE = "service-config.yaml"
REQUEST_FILE = "request.yaml"

REDIS_SERVICE_CONFIG: dict[str, Any] = {
    "chart": {
        "repository": "https://charts.bitnami.com/bitnami",
        "name": "redis",
        "defaultVersion": "19.6.4",
    },
    "defaultHelmValues": {
        "architecture": "standalone",
        "auth": {"enabled": True},
        "master": {"resources": {"requests": {"cpu": "250m", "memory": "256Mi"}}},
    },
    "mapping": {
        "spec.size.cpu": "master.resources.requests.cpu",
        "spec.size.memory": "master.resources.requests.memory",
        "spec.replicas": "replica.replicaCount",
    },
    "connectionSecret": {
        "passwordPath": "auth.password",
        "fields": [
            {"key": "host", "value": "${instanceName}-master.${namespace}.svc.cluster.local"},
            {"key": "port", "value": "6379"},
            {"key": "password", "value": "${password}"},
            {"key": "url", "value": "redis://:${password}@${instanceName}-master.${namespace}.svc.cluster.local:6379"},
        ],
    },
}
"""Service configuration mirroring the redis composition shipped with the runtime."""


@dataclass(slots=True)
class ExampleSpec:
    """Describe a single example file to be written to disk."""

    relative_path: Path
    content: str


def generate_examples(
    destination: str | Path,
    *,
    instance: str = "test-redis",
    namespace: str = "default",
    force: bool = False,
) -> list[Path]:
    """Write the example service config and request under *destination*.

    Parameters
    ----------
    destination:
        Directory that will receive the files.
    instance / namespace:
        Identity of the example composite resource.
    force:
        When ``True`` existing files are overwritten; otherwise they are
        skipped.

    Returns
    -------
    list[Path]
        File paths written during this invocation.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> sorted(path.name for path in generate_examples(tmp.name))
    ['request.yaml', 'service-config.yaml']
    >>> generate_examples(tmp.name)
    []
    >>> tmp.cleanup()
    """

    dest = Path(destination)
    written: list[Path] = []
    for spec in _build_specs(instance=instance, namespace=namespace):
        path = dest / spec.relative_path
        if not _should_write(path, force):
            continue
        _ensure_parent(path)
        path.write_text(spec.content, encoding="utf-8")
        written.append(path)
    return written


def example_request(instance: str = "test-redis", namespace: str = "default") -> dict[str, Any]:
    """Return a function request for a small redis instance."""

    return {
        "observed": {
            "composite": {
                "resource": {
                    "apiVersion": "appcat.vshn.io/v1alpha1",
                    "kind": "XVSHNRedis",
                    "metadata": {"name": instance, "namespace": namespace},
                    "spec": {"size": {"cpu": "500m", "memory": "2Gi"}, "replicas": 1},
                }
            },
            "resources": {},
        },
        "input": {"data": REDIS_SERVICE_CONFIG},
    }


def _build_specs(*, instance: str, namespace: str) -> Iterator[ExampleSpec]:
    yield ExampleSpec(
        Path(SERVICE_CONFIG_FILE),
        "# Service configuration consumed as the composition function input\n"
        + yaml.safe_dump(REDIS_SERVICE_CONFIG, sort_keys=False),
    )
    yield ExampleSpec(
        Path(REQUEST_FILE),
        "# Function request for a first reconciliation (no observed resources yet)\n"
        + yaml.safe_dump(example_request(instance, namespace), sort_keys=False),
    )


def _should_write(path: Path, force: bool) -> bool:
    """Return ``True`` when *path* should be written respecting *force*."""

    return force or not path.exists()


def _ensure_parent(path: Path) -> None:
    """Create parent directories for *path* when missing."""

    path.parent.mkdir(parents=True, exist_ok=True)
