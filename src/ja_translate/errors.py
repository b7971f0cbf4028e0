"""
Exception types for ja-translate.
"""

from __future__ import annotations


class TranslateError(Exception):
    """Base class for ja-translate errors."""


class ConfigurationError(TranslateError):
    """A glossary or batch configuration is missing or cannot be parsed."""


class WriteError(TranslateError, OSError):
    """An output directory or file could not be written."""
