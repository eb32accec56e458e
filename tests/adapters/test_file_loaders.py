"""Structured document loader tests covering each format and the failure modes."""

from __future__ import annotations

from pathlib import Path

import pytest

from appcat_runtime.adapters.file_loaders.structured import (
    JSONFileLoader,
    TOMLFileLoader,
    YAMLFileLoader,
    load_document,
)
from appcat_runtime.domain.errors import InvalidFormat, NotFound


def _write(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


def test_yaml_loader_reads_mapping(tmp_path: Path) -> None:
    path = _write(tmp_path, "config.yaml", "chart:\n  name: redis\nmapping:\n  spec.replicas: replicaCount\n")
    data = YAMLFileLoader().load(str(path))
    assert data == {"chart": {"name": "redis"}, "mapping": {"spec.replicas": "replicaCount"}}


def test_yaml_loader_empty_document_is_empty_mapping(tmp_path: Path) -> None:
    assert YAMLFileLoader().load(str(_write(tmp_path, "empty.yaml", ""))) == {}


def test_yaml_loader_rejects_invalid_yaml(tmp_path: Path) -> None:
    path = _write(tmp_path, "broken.yaml", "chart: [unclosed\n")
    with pytest.raises(InvalidFormat):
        YAMLFileLoader().load(str(path))


def test_yaml_loader_rejects_sequence_document(tmp_path: Path) -> None:
    path = _write(tmp_path, "list.yaml", "- a\n- b\n")
    with pytest.raises(InvalidFormat):
        YAMLFileLoader().load(str(path))


def test_json_loader_reads_mapping(tmp_path: Path) -> None:
    path = _write(tmp_path, "spec.json", '{"replicas": 3}')
    assert JSONFileLoader().load(str(path)) == {"replicas": 3}


def test_json_loader_rejects_invalid_json(tmp_path: Path) -> None:
    path = _write(tmp_path, "spec.json", "{not json")
    with pytest.raises(InvalidFormat):
        JSONFileLoader().load(str(path))


def test_toml_loader_reads_mapping(tmp_path: Path) -> None:
    path = _write(tmp_path, "spec.toml", "replicas = 3\n[size]\ncpu = '500m'\n")
    assert TOMLFileLoader().load(str(path)) == {"replicas": 3, "size": {"cpu": "500m"}}


def test_toml_loader_rejects_invalid_toml(tmp_path: Path) -> None:
    path = _write(tmp_path, "spec.toml", "replicas = = 3\n")
    with pytest.raises(InvalidFormat):
        TOMLFileLoader().load(str(path))


def test_missing_file_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        YAMLFileLoader().load(str(tmp_path / "absent.yaml"))


@pytest.mark.parametrize(
    ("name", "body"),
    [
        ("spec.yml", "replicas: 3\n"),
        ("spec.JSON", '{"replicas": 3}'),
        ("spec.toml", "replicas = 3\n"),
        ("spec.txt", "replicas: 3\n"),
    ],
)
def test_load_document_dispatches_on_suffix(tmp_path: Path, name: str, body: str) -> None:
    assert load_document(_write(tmp_path, name, body)) == {"replicas": 3}
