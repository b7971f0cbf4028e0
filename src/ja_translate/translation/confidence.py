"""
Confidence scoring for translation results.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from ja_translate.config import ConfidenceMode
from ja_translate.translation.protector import PLACEHOLDER_PATTERN, SpanMap

_WORD = re.compile(r"\S+")


class ConfidenceScorer(Protocol):
    """Scores how much of a translation can be trusted, in [0, 1]."""

    def score(self, masked_text: str, span_map: SpanMap, replaced_words: int) -> float: ...


@dataclass(frozen=True)
class FixedConfidence:
    """Constant confidence, independent of the text."""

    value: float = 0.85

    def score(self, masked_text: str, span_map: SpanMap, replaced_words: int) -> float:
        return self.value


@dataclass(frozen=True)
class CoverageConfidence:
    """
    Confidence from the share of text handled deterministically.

    Protected spans pass through verbatim and glossary terms have vetted
    translations; the rest relies on phrase rules or the LLM. The handled
    share is mapped linearly onto [floor, 1.0].
    """

    floor: float = 0.5

    def score(self, masked_text: str, span_map: SpanMap, replaced_words: int) -> float:
        protected_chars = sum(len(original) for original in span_map.values())
        prose = PLACEHOLDER_PATTERN.sub(" ", masked_text)
        prose_chars = len(prose.strip())
        total_chars = protected_chars + prose_chars
        if total_chars == 0:
            return 1.0

        protected_ratio = protected_chars / total_chars
        words = len(_WORD.findall(prose))
        glossary_ratio = min(1.0, replaced_words / words) if words else 0.0

        handled = protected_ratio + (1.0 - protected_ratio) * glossary_ratio
        return round(self.floor + (1.0 - self.floor) * handled, 4)


def create_scorer(mode: ConfidenceMode | str) -> ConfidenceScorer:
    """Return the scorer for a configured confidence mode."""
    if ConfidenceMode(mode) == ConfidenceMode.COVERAGE:
        return CoverageConfidence()
    return FixedConfidence()
