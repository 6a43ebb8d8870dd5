from __future__ import annotations

from typing import Optional


class ConfigError(ValueError):
    """Invalid rate, duration, thread count, timeout or target."""


class ParseError(ValueError):
    """Malformed port specification."""

    def __init__(self, message: str, token: Optional[str] = None):
        super().__init__(message)
        self.token = token


class ScanError(RuntimeError):
    """A worker hit something other than a connect failure."""
