"""Structured document loaders for requests, service configs, and specs.

Purpose
-------
Convert on-disk artifacts into Python mappings the CLI hands to the engine.
Adapters are small wrappers around ``yaml.safe_load``/``json``/``tomllib`` so
error handling and observability live in one place.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`YAMLFileLoader` – loader for the Kubernetes-native YAML format.
* :class:`JSONFileLoader` – minimal JSON loader.
* :class:`TOMLFileLoader` – loader for TOML documents.
* :func:`load_document` – dispatch on file suffix.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from ...application.ports import DocumentLoader
from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    format_name = "unknown"

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing."""

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Input document not found: {path}")
        payload = file_path.read_bytes()
        log_debug("document_read", role="input", path=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, Any]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping([1], path="demo")
        Traceback (most recent call last):
        ...
        appcat_runtime.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data

    def _loaded(self, data: object, path: str) -> Mapping[str, Any]:
        result = self._ensure_mapping(data, path=path)
        log_debug("document_loaded", role="input", path=path, format=self.format_name)
        return result

    def _invalid(self, path: str, exc: Exception) -> InvalidFormat:
        log_error("document_invalid", role="input", path=path, format=self.format_name, error=str(exc))
        return InvalidFormat(f"Invalid {self.format_name.upper()} in {path}: {exc}")


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents; an empty document yields an empty mapping."""

    format_name = "yaml"

    def load(self, path: str) -> Mapping[str, Any]:
        try:
            data = yaml.safe_load(self._read(path))
        except yaml.YAMLError as exc:
            raise self._invalid(path, exc) from exc
        if data is None:
            data = {}
        return self._loaded(data, path)


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format_name = "json"

    def load(self, path: str) -> Mapping[str, Any]:
        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        return self._loaded(data, path)


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    format_name = "toml"

    def load(self, path: str) -> Mapping[str, Any]:
        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        return self._loaded(data, path)


_LOADERS: dict[str, DocumentLoader] = {
    ".yaml": YAMLFileLoader(),
    ".yml": YAMLFileLoader(),
    ".json": JSONFileLoader(),
    ".toml": TOMLFileLoader(),
}


def load_document(path: str | Path) -> Mapping[str, Any]:
    """Load *path* with the loader registered for its suffix (YAML when unknown).

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "spec.yaml"
    >>> _ = target.write_text("replicas: 3\\n", encoding="utf-8")
    >>> load_document(target)["replicas"]
    3
    >>> tmp.cleanup()
    """

    loader = _LOADERS.get(Path(path).suffix.lower(), _LOADERS[".yaml"])
    return loader.load(str(path))
