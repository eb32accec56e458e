"""Example input helpers for ``appcat_runtime``."""

from .generate import REDIS_SERVICE_CONFIG, ExampleSpec, example_request, generate_examples

__all__ = [
    "REDIS_SERVICE_CONFIG",
    "ExampleSpec",
    "example_request",
    "generate_examples",
]
