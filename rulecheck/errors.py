"""Error types raised by rulecheck."""

from __future__ import annotations


class RulecheckError(Exception):
    """Base class for rulecheck errors."""


class ConfigError(RulecheckError, ValueError):
    """Malformed ruleset or configuration input."""


class NotFoundError(RulecheckError, FileNotFoundError):
    """Project root does not exist or is not a directory."""


class UnsupportedFormatError(RulecheckError, ValueError):
    """Requested report format is not one of the supported formats."""


class BinaryContentError(RulecheckError, ValueError):
    """File content cannot be decoded as text."""


class ContentUnavailableError(RulecheckError, ValueError):
    """File text was not cached during the scan."""
