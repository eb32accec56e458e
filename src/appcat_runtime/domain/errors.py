"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the merge engine, the synthesizer,
the adapters, and the CLI. The hierarchy lives in the domain layer so outer
layers may depend on it without creating cycles.

Contents
--------
* :class:`SynthesisError` – umbrella base class for every failure the runtime
  raises.
* :class:`MissingField` – a required input field is absent.
* :class:`PathNotFound` – a dotted-path lookup could not resolve.
* :class:`TypeMismatch` – a traversal step expected a mapping and found
  something else.
* :class:`InvalidPath` – an empty or malformed dotted path.
* :class:`InvalidFormat` – an input document could not be parsed.
* :class:`NotFound` – an input document does not exist.

System Role
-----------
The engine never retries. Every fatal condition surfaces as one of these types
with enough context (path, expected vs. actual kind) to diagnose a
configuration authoring error. Callers catch :class:`SynthesisError` to handle
all runtime failures uniformly.
"""

from __future__ import annotations


class SynthesisError(Exception):
    """Base type for all exceptions emitted by ``appcat_runtime``.

    Why
    ----
    Provide a single catch-all type for callers that only need to fail the
    current reconciliation attempt.
    """


class MissingField(SynthesisError):
    """Raised when a required input field is absent.

    Typical Sources
    ---------------
    Service configuration top-level keys, chart identity fields, the composite
    resource metadata, or the merged parameter tree.

    Examples
    --------
    >>> str(MissingField("chart.name"))
    'required field chart.name is missing'
    """

    def __init__(self, field: str, detail: str | None = None) -> None:
        self.field = field
        message = f"required field {field} is missing"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class PathNotFound(SynthesisError):
    """Raised when a dotted-path lookup cannot resolve a segment.

    Non-fatal when it occurs for an optional user-spec lookup during merge; the
    merger treats it as "the user did not supply this value".

    Examples
    --------
    >>> str(PathNotFound("spec.size.cpu", "size"))
    'path spec.size.cpu: key size not found'
    """

    def __init__(self, path: str, segment: str) -> None:
        self.path = path
        self.segment = segment
        super().__init__(f"path {path}: key {segment} not found")


class TypeMismatch(SynthesisError):
    """Raised when a traversal step expected a mapping but found another kind.

    Always fatal: it signals a structural conflict between the configuration
    and the declared mapping.

    Examples
    --------
    >>> err = TypeMismatch("master.y", "master", expected="mapping", actual="str")
    >>> str(err)
    'path master.y: expected mapping at master, got str'
    >>> err.expected, err.actual
    ('mapping', 'str')
    """

    def __init__(self, path: str, segment: str, *, expected: str, actual: str) -> None:
        self.path = path
        self.segment = segment
        self.expected = expected
        self.actual = actual
        super().__init__(f"path {path}: expected {expected} at {segment}, got {actual}")


class InvalidPath(SynthesisError):
    """Raised for empty or malformed dotted paths.

    Examples
    --------
    >>> str(InvalidPath("a..b", "empty segment"))
    "invalid path 'a..b': empty segment"
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"invalid path {path!r}: {reason}")


class InvalidFormat(SynthesisError):
    """Raised when an input document or setting cannot be parsed.

    Typical Sources
    ---------------
    Structured document loaders (:mod:`yaml`, :mod:`json`, :mod:`tomllib`) and
    environment-driven runtime settings.
    """


class NotFound(SynthesisError):
    """Represents a missing input document."""
