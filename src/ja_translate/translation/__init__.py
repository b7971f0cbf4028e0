"""
Translation pipeline for ja-translate.

Provides:
- Protected span masking and restoration
- Glossary and phrase-table translation with optional LLM refinement
- Chunked batch translation of directory trees
"""

from ja_translate.translation.batch import BatchFileResult, BatchReport, BatchTranslator, FileStatus
from ja_translate.translation.context import TranslatorContext
from ja_translate.translation.protector import SpanProtector
from ja_translate.translation.translator import (
    TranslationResult,
    TranslationStats,
    TranslationValidation,
    Translator,
)

__all__ = [
    "BatchFileResult",
    "BatchReport",
    "BatchTranslator",
    "FileStatus",
    "SpanProtector",
    "TranslationResult",
    "TranslationStats",
    "TranslationValidation",
    "Translator",
    "TranslatorContext",
]
