"""Shared test helpers: deterministic generators and input builders.

The builders mirror the documented redis scenario so individual tests only
spell out the fields they care about.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from appcat_runtime.domain.tree import clone_tree


@dataclass
class CountingGenerator:
    """Secret generator returning ``<prefix><n>`` values and recording calls."""

    prefix: str = "generated-"
    calls: list[int] = field(default_factory=list)

    def generate(self, length: int) -> str:
        self.calls.append(length)
        return f"{self.prefix}{len(self.calls)}"


def redis_service_config(**overrides: Any) -> dict[str, Any]:
    """Return the redis service config used across the suite with *overrides* applied."""

    config: dict[str, Any] = {
        "chart": {"repository": "r", "name": "redis", "defaultVersion": "1.0"},
        "defaultHelmValues": {"auth": {"enabled": True}},
        "mapping": {"spec.replicas": "replicaCount"},
        "connectionSecret": {"fields": [{"key": "url", "value": "redis://${instanceName}:6379"}]},
    }
    config.update(overrides)
    return config


def function_request(
    *,
    spec: dict[str, Any] | None = None,
    service_config: dict[str, Any] | None = None,
    observed: dict[str, dict[str, Any]] | None = None,
    name: str = "my-redis",
    namespace: str = "ns1",
) -> dict[str, Any]:
    """Return a function request mapping for a redis composite."""

    return {
        "observed": {
            "composite": {
                "resource": {
                    "apiVersion": "appcat.vshn.io/v1alpha1",
                    "kind": "XVSHNRedis",
                    "metadata": {"name": name, "namespace": namespace},
                    "spec": clone_tree(spec if spec is not None else {"replicas": 3}),
                }
            },
            "resources": {role: {"resource": resource} for role, resource in (observed or {}).items()},
        },
        "input": {"data": service_config if service_config is not None else redis_service_config()},
    }
