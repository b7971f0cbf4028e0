"""
Glossary loading for the English to Japanese translator.

The glossary is a YAML document with categorized term mappings, a list of
terms that must stay in English, context-specific sub-dictionaries, and
free-text translator notes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from ja_translate.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Merge order when the document does not dictate one
CATEGORY_KEYS = ("ai_terms", "dev_tools", "languages", "ui_ux", "business")
KEEP_KEYS = ("keep_english", "keep_as_is")
CONTEXT_KEY = "context_patterns"
NOTES_KEY = "translation_notes"

_TERMS = TypeAdapter(dict[str, str])
_CONTEXTS = TypeAdapter(dict[str, dict[str, str]])
_STRINGS = TypeAdapter(list[str])


@dataclass(frozen=True)
class Glossary:
    """Read-only term dictionary used by the translator."""

    categories: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    keep_as_is: frozenset[str] = field(default_factory=frozenset)
    context_patterns: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    translation_notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", _freeze(self.categories))
        object.__setattr__(self, "context_patterns", _freeze(self.context_patterns))
        object.__setattr__(
            self, "keep_as_is", frozenset(term.casefold() for term in self.keep_as_is)
        )
        object.__setattr__(self, "translation_notes", tuple(self.translation_notes))

    def is_kept(self, term: str) -> bool:
        """Return True if the term must stay untranslated."""
        return term.casefold() in self.keep_as_is

    @cached_property
    def _merged(self) -> dict[str, str]:
        # Keyed by case-folded term so "API" and "api" collapse; last write wins
        merged: dict[str, tuple[str, str]] = {}
        for table in (*self.categories.values(), *self.context_patterns.values()):
            for term, translation in table.items():
                merged[term.casefold()] = (term, translation)
        return dict(merged.values())

    def terms(self) -> dict[str, str]:
        """Return the flat substitution table (categories, then context patterns)."""
        return dict(self._merged)

    @cached_property
    def _sorted(self) -> tuple[tuple[str, str], ...]:
        return tuple(sorted(self._merged.items(), key=lambda item: len(item[0]), reverse=True))

    def sorted_terms(self) -> tuple[tuple[str, str], ...]:
        """Return (term, translation) pairs, longest term first."""
        return self._sorted

    def __len__(self) -> int:
        return len(self._merged)


def _freeze(tables: Mapping[str, Mapping[str, str]]) -> Mapping[str, Mapping[str, str]]:
    return MappingProxyType({name: MappingProxyType(dict(table)) for name, table in tables.items()})


def load_glossary(source: Path | str) -> Glossary:
    """
    Load a glossary from a YAML file.

    Args:
        source: Path to the glossary YAML document.

    Returns:
        Loaded Glossary.

    Raises:
        ConfigurationError: If the file is missing or malformed.
    """
    path = Path(source)
    if not path.exists():
        raise ConfigurationError(f"Glossary file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load glossary {path}: {e}") from e

    glossary = parse_glossary(document, origin=str(path))
    logger.info("Glossary loaded: %d terms from %s", len(glossary), path)
    return glossary


def parse_glossary(document: Any, origin: str = "<glossary>") -> Glossary:
    """
    Build a Glossary from an already parsed document.

    Every top-level mapping of string to string that is not one of the
    reserved keys is treated as a term category.
    """
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"Glossary {origin} must be a mapping")

    try:
        # Known categories first, in their conventional order, then any extras
        names = [key for key in CATEGORY_KEYS if key in document]
        names += [
            key
            for key in document
            if key not in CATEGORY_KEYS
            and key not in KEEP_KEYS
            and key not in (CONTEXT_KEY, NOTES_KEY)
        ]
        categories = {str(name): _TERMS.validate_python(document[name] or {}) for name in names}

        keep: list[str] = []
        for key in KEEP_KEYS:
            keep += _STRINGS.validate_python(document.get(key) or [])

        contexts = _CONTEXTS.validate_python(document.get(CONTEXT_KEY) or {})
        notes = _STRINGS.validate_python(document.get(NOTES_KEY) or [])
    except ValidationError as e:
        raise ConfigurationError(f"Malformed glossary {origin}: {e}") from e

    return Glossary(
        categories=categories,
        keep_as_is=frozenset(keep),
        context_patterns=contexts,
        translation_notes=tuple(notes),
    )
