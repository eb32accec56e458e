"""Merge engine tests: user values land on mapped chart paths, defaults survive.

Each scenario builds a :class:`ServiceConfig` from its wire form so the alias
handling and the mapping-table semantics are exercised together.
"""

from __future__ import annotations

import logging

import pytest
from hypothesis import given
from hypothesis import strategies as st

from appcat_runtime.application.merge import merge_configs
from appcat_runtime.domain.errors import InvalidPath, TypeMismatch
from appcat_runtime.domain.models import ServiceConfig
from tests.support import redis_service_config


def _config(defaults: dict, mapping: dict) -> ServiceConfig:
    return ServiceConfig.from_mapping(
        redis_service_config(defaultHelmValues=defaults, mapping=mapping, connectionSecret=None)
    )


def test_merge_overrides_mapped_value_and_keeps_siblings() -> None:
    """A mapped user value should replace only its destination leaf."""

    config = _config(
        {"master": {"resources": {"requests": {"cpu": "250m", "memory": "256Mi"}}}},
        {"spec.size.cpu": "master.resources.requests.cpu"},
    )
    merged = merge_configs(config, {"size": {"cpu": "1000m"}})
    assert merged.values == {"master": {"resources": {"requests": {"cpu": "1000m", "memory": "256Mi"}}}}


def test_merge_without_user_values_returns_defaults() -> None:
    defaults = {"auth": {"enabled": True}, "replicaCount": 1}
    merged = merge_configs(_config(defaults, {"spec.replicas": "replicaCount"}), {})
    assert merged.values == defaults


def test_merge_skips_absent_user_values() -> None:
    config = _config({}, {"spec.size.cpu": "cpu", "spec.replicas": "replicaCount"})
    merged = merge_configs(config, {"replicas": 2})
    assert merged.values == {"replicaCount": 2}


def test_merge_creates_missing_destination_branches() -> None:
    config = _config({}, {"spec.size.memory": "master.resources.requests.memory"})
    merged = merge_configs(config, {"size": {"memory": "2Gi"}})
    assert merged.values == {"master": {"resources": {"requests": {"memory": "2Gi"}}}}


def test_merge_copies_whole_subtrees() -> None:
    config = _config({"resources": {"limits": {"cpu": "1"}}}, {"spec.size": "resources.requests"})
    user_spec = {"size": {"cpu": "500m", "memory": "1Gi"}}
    merged = merge_configs(config, user_spec)

    assert merged.values == {"resources": {"limits": {"cpu": "1"}, "requests": {"cpu": "500m", "memory": "1Gi"}}}
    merged.values["resources"]["requests"]["cpu"] = "2"
    assert user_spec["size"]["cpu"] == "500m"


def test_merge_never_mutates_inputs() -> None:
    defaults = {"auth": {"enabled": True}}
    user_spec = {"replicas": 3, "auth": {"enabled": False}}
    config = _config(defaults, {"spec.replicas": "replicaCount", "spec.auth.enabled": "auth.enabled"})

    merged = merge_configs(config, user_spec)

    assert merged.values == {"auth": {"enabled": False}, "replicaCount": 3}
    assert defaults == {"auth": {"enabled": True}}
    assert user_spec == {"replicas": 3, "auth": {"enabled": False}}


def test_merge_destination_conflict_raises_type_mismatch() -> None:
    """A destination crossing a scalar default aborts the whole merge."""

    config = _config({"master": "x"}, {"spec.size.cpu": "master.y"})
    with pytest.raises(TypeMismatch) as info:
        merge_configs(config, {"size": {"cpu": "1"}})
    assert info.value.path == "master.y"
    assert info.value.segment == "master"


def test_merge_source_conflict_raises_type_mismatch() -> None:
    config = _config({}, {"spec.size.cpu": "cpu"})
    with pytest.raises(TypeMismatch):
        merge_configs(config, {"size": "large"})


def test_merge_rejects_empty_destination() -> None:
    config = _config({}, {"spec.replicas": ""})
    with pytest.raises(InvalidPath):
        merge_configs(config, {"replicas": 1})


def test_merge_skips_non_string_destination(caplog: pytest.LogCaptureFixture) -> None:
    config = _config({"replicaCount": 1}, {"spec.replicas": 7, "spec.size.cpu": "cpu"})
    with caplog.at_level(logging.WARNING, logger="appcat_runtime"):
        merged = merge_configs(config, {"replicas": 3, "size": {"cpu": "1"}})
    assert merged.values == {"replicaCount": 1, "cpu": "1"}
    assert any(record.getMessage() == "mapping_entry_skipped" for record in caplog.records)


def test_merge_aliased_destinations_apply_in_source_order() -> None:
    """When two sources share a destination, the lexicographically last source wins."""

    config = _config({}, {"spec.b": "target", "spec.a": "target"})
    merged = merge_configs(config, {"a": "from-a", "b": "from-b"})
    assert merged.values == {"target": "from-b"}


def test_merge_without_sentinel_reads_literal_keys() -> None:
    config = _config({}, {"spec.replicas": "replicaCount"})
    merged = merge_configs(config, {"spec": {"replicas": 4}}, sentinel=None)
    assert merged.values == {"replicaCount": 4}


def test_merge_passes_chart_and_template_through() -> None:
    config = ServiceConfig.from_mapping(redis_service_config())
    merged = merge_configs(config, {"replicas": 3})
    assert merged.chart == config.chart
    assert merged.connection_secret is config.connection_secret
    assert merged.values == {"auth": {"enabled": True}, "replicaCount": 3}


def test_merge_accepts_alias_keys() -> None:
    config = ServiceConfig.from_mapping(
        {
            "chart": {"repository": "r", "name": "redis", "defaultVersion": "1.0"},
            "defaultParameterTree": {"auth": {"enabled": True}},
            "fieldMapping": {"spec.replicas": "replicaCount"},
            "connectionSecret": None,
        }
    )
    assert merge_configs(config, {"replicas": 2}).values == {"auth": {"enabled": True}, "replicaCount": 2}


LEAF = st.one_of(st.integers(), st.text(max_size=5), st.booleans())
SEGMENT = st.sampled_from(["cpu", "memory", "disk", "replicas"])


@given(st.dictionaries(SEGMENT, LEAF, max_size=4))
def test_merge_places_every_supplied_value(user_values) -> None:
    """Every supplied leaf should appear under its mapped destination; the rest stay default."""

    mapping = {f"spec.size.{segment}": f"resources.{segment}" for segment in ["cpu", "memory", "disk", "replicas"]}
    defaults = {"resources": {"cpu": "default", "memory": "default", "disk": "default", "replicas": "default"}}
    merged = merge_configs(_config(defaults, mapping), {"size": dict(user_values)})

    for segment, default in defaults["resources"].items():
        assert merged.values["resources"][segment] == user_values.get(segment, default)
