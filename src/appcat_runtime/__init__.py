"""Public package surface for the composition function runtime.

Re-exports the composition root (:func:`run_function`, :func:`render_service`,
:func:`load_settings`), the pure engine stages (:func:`merge_configs`,
:func:`synthesize_resources`, :func:`resolve_secret`, :func:`render_template`),
the dotted-path helpers, the domain value objects, and the error taxonomy so
``import appcat_runtime`` is enough for most callers.
"""

from __future__ import annotations

from .application.merge import merge_configs
from .application.secrets import resolve_secret
from .application.synthesize import synthesize_resources
from .application.templates import render_template
from .core import load_settings, render_service, run_function
from .domain.errors import (
    InvalidFormat,
    InvalidPath,
    MissingField,
    NotFound,
    PathNotFound,
    SynthesisError,
    TypeMismatch,
)
from .domain.models import (
    ChartIdentity,
    ConnectionSecretTemplate,
    InstanceIdentity,
    MergedConfig,
    SecretFieldTemplate,
    SecretReference,
    ServiceConfig,
    SynthesisResult,
)
from .domain.settings import RuntimeSettings
from .domain.tree import clone_tree, get_value, set_value
from .observability import bind_trace_id, get_logger

__all__ = [
    "ChartIdentity",
    "ConnectionSecretTemplate",
    "InstanceIdentity",
    "InvalidFormat",
    "InvalidPath",
    "MergedConfig",
    "MissingField",
    "NotFound",
    "PathNotFound",
    "RuntimeSettings",
    "SecretFieldTemplate",
    "SecretReference",
    "ServiceConfig",
    "SynthesisError",
    "SynthesisResult",
    "TypeMismatch",
    "bind_trace_id",
    "clone_tree",
    "get_logger",
    "get_value",
    "load_settings",
    "merge_configs",
    "render_service",
    "render_template",
    "resolve_secret",
    "run_function",
    "set_value",
    "synthesize_resources",
]
