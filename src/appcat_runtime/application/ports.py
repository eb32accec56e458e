"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts the synthesizer relies on so it can be driven
by deterministic fakes in tests and by the real adapters in production.

Contents
--------
* :class:`SecretGenerator` – produces fresh secret values.
* :class:`DescriptorFactory` – turns synthesized pieces into descriptor
  mappings.
* :class:`DocumentLoader` – reads a structured input document into a mapping.

System Role
-----------
Adapters under :mod:`appcat_runtime.adapters` implement these protocols; the
application layer never imports them directly except as defaults wired in by
the composition root.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class SecretGenerator(Protocol):
    """Produce cryptographically random secret values.

    Why
    ----
    The only non-deterministic step of synthesis sits behind this port so the
    rest of the engine stays a pure function of its inputs.
    """

    def generate(self, length: int) -> str:
        """Return a new secret value exactly *length* characters long."""


@runtime_checkable
class DescriptorFactory(Protocol):
    """Build descriptor mappings for the desired state."""

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
        """Return the Helm release descriptor."""

    def secret(
        self,
        *,
        name: str,
        namespace: str,
        data: Mapping[str, str],
        labels: Mapping[str, str],
    ) -> dict[str, Any]:
        """Return the connection secret descriptor."""


@runtime_checkable
class DocumentLoader(Protocol):
    """Load one structured document (YAML, JSON, TOML) from disk."""

    def load(self, path: str) -> Mapping[str, Any]:
        """Return the document at *path* as a mapping."""
