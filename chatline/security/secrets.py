"""Reading secrets such as the token signing key from the environment."""
from __future__ import annotations

import os

__all__ = ["MissingSecretError", "require_secret"]

# Values shipped in sample env files; never valid as a real key.
SAMPLE_VALUES = frozenset({"changeme", "change-me", "secret", "jwt-secret", "your-secret-here"})


class MissingSecretError(RuntimeError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name} must be set to a real value, not left empty or as a sample")
        self.name = name


def require_secret(name: str) -> str:
    """Return the trimmed value of ``name`` or raise :class:`MissingSecretError`."""

    value = (os.getenv(name) or "").strip()
    if not value or value.lower() in SAMPLE_VALUES:
        raise MissingSecretError(name)
    return value
