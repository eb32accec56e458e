"""Cryptographically secure secret value generation.

Implements the :class:`appcat_runtime.application.ports.SecretGenerator` port
with :mod:`secrets` as the randomness source. Values are the URL-safe base64
encoding of ``length`` random bytes, truncated to ``length`` characters.
"""

from __future__ import annotations

import base64
import secrets


def generate_password(length: int = 32) -> str:
    """Return *length* characters of URL-safe base64-encoded randomness.

    Examples
    --------
    >>> len(generate_password(32))
    32
    >>> set(generate_password(64)) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")
    True
    """

    if length <= 0:
        raise ValueError("secret length must be positive")
    raw = secrets.token_bytes(length)
    return base64.urlsafe_b64encode(raw).decode("ascii")[:length]


class SystemSecretGenerator:
    """Default generator drawing from the operating system CSPRNG."""

    def generate(self, length: int) -> str:
        return generate_password(length)
