"""
ja-translate: English to Japanese translation for developer content.

This package provides tools for:
- Glossary-driven term substitution with protected code, URLs and paths
- Optional LLM refinement through OpenRouter
- Batch translation of markdown trees with per-file reports
"""

__version__ = "0.1.0"

from ja_translate.config import BatchConfig, Settings, Tone, TranslationOptions, load_config
from ja_translate.errors import ConfigurationError, TranslateError, WriteError
from ja_translate.terminology import Glossary, load_glossary
from ja_translate.translation import (
    BatchReport,
    BatchTranslator,
    TranslationResult,
    Translator,
    TranslatorContext,
)

__all__ = [
    # Config
    "Settings",
    "load_config",
    "BatchConfig",
    "TranslationOptions",
    "Tone",
    # Errors
    "TranslateError",
    "ConfigurationError",
    "WriteError",
    # Terminology
    "Glossary",
    "load_glossary",
    # Translation
    "Translator",
    "TranslationResult",
    "TranslatorContext",
    "BatchTranslator",
    "BatchReport",
]
