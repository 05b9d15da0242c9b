"""External API adapters."""

from __future__ import annotations


class AdapterError(RuntimeError):
    def __init__(self, code: str, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


class ConfigError(RuntimeError):
    """A required secret is missing from the environment."""
