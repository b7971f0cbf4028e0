"""
Glossary-based English to Japanese translator.

Pipeline per call:
1. Mask protected spans (code, URLs, links, file paths)
2. Substitute glossary terms, longest first
3. Apply the phrase table, then the optional LLM refinement
4. Restore protected spans
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from ja_translate.config import Settings, TranslationOptions
from ja_translate.errors import WriteError
from ja_translate.terminology import Glossary, load_glossary
from ja_translate.translation.confidence import ConfidenceScorer, FixedConfidence, create_scorer
from ja_translate.translation.phrases import apply_phrase_table
from ja_translate.translation.protector import SPAN_CLASSES, SpanProtector, find_placeholders
from ja_translate.translation.refiner import LLMRefiner

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r"^#{1,6}\s", re.MULTILINE)
CODE_BLOCK_PATTERN = SPAN_CLASSES[0].pattern

# Replacements are parked behind private-use tokens until the glossary pass
# ends, so a shorter term cannot match inside a longer term's translation.
# A token is an open mark, decimal digits, and a close mark: twelve code
# points taken from a private-use block that does not occur in the input.
_HOLD_BLOCK_SIZE = 12
_PRIVATE_USE_RANGES = ((0xE000, 0xF8FF), (0xF0000, 0xFFFFD))


@dataclass(frozen=True)
class TranslationResult:
    """Result of a single translation call."""

    original_text: str
    translated_text: str
    glossary_matches: tuple[str, ...]
    confidence: float
    timestamp: str
    engine: str = "mock"
    processing_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["glossary_matches"] = list(self.glossary_matches)
        return data


@dataclass
class ValidationIssue:
    """A problem found while validating a translation."""

    type: Literal["structure", "content", "glossary", "formatting"]
    severity: Literal["low", "medium", "high"]
    description: str
    suggestion: str | None = None


@dataclass
class TranslationValidation:
    """Advisory validation outcome."""

    is_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass
class TranslationStats:
    """Size and glossary statistics for a translation."""

    original_word_count: int
    translated_word_count: int
    glossary_terms_used: int
    glossary_coverage: float
    text_expansion_ratio: float
    timestamp: str


@dataclass(frozen=True)
class _TermRule:
    term: str
    # None for keep-as-is terms, which are held verbatim
    translation: str | None
    pattern: re.Pattern[str]


def _term_pattern(term: str) -> re.Pattern[str]:
    """Case-insensitive whole-word pattern; boundaries only next to word characters."""
    prefix = r"\b" if re.match(r"\w", term) else ""
    suffix = r"\b" if re.search(r"\w$", term) else ""
    return re.compile(prefix + re.escape(term) + suffix, re.IGNORECASE)


class _HoldTokens:
    """Parks replacement text during one glossary pass."""

    def __init__(self, text: str):
        base = _free_private_use_block(text)
        self._open = chr(base)
        self._close = chr(base + 1)
        self._digit = base + 2
        self._pattern = re.compile(
            re.escape(self._open)
            + f"([{chr(self._digit)}-{chr(self._digit + 9)}]+)"
            + re.escape(self._close)
        )
        self._values: list[str] = []

    def hold(self, value: str) -> str:
        index = len(self._values)
        self._values.append(value)
        digits = "".join(chr(self._digit + int(d)) for d in str(index))
        return self._open + digits + self._close

    def release(self, text: str) -> str:
        def value(match: re.Match[str]) -> str:
            index = int("".join(str(ord(c) - self._digit) for c in match.group(1)))
            return self._values[index]

        return self._pattern.sub(value, text)


def _free_private_use_block(text: str) -> int:
    used = {ord(c) for c in text}
    for low, high in _PRIVATE_USE_RANGES:
        for base in range(low, high - _HOLD_BLOCK_SIZE + 2, _HOLD_BLOCK_SIZE):
            if used.isdisjoint(range(base, base + _HOLD_BLOCK_SIZE)):
                return base
    raise ValueError("No free private-use block for glossary hold tokens")


class Translator:
    """
    Translates English markdown to Japanese using a glossary.

    The glossary is read-only and each call keeps its own span map, so one
    instance can serve concurrent calls.
    """

    def __init__(
        self,
        glossary: Glossary,
        *,
        refiner: LLMRefiner | None = None,
        scorer: ConfidenceScorer | None = None,
        min_confidence: float = 0.7,
        default_options: TranslationOptions | None = None,
    ):
        """
        Initialize translator.

        Args:
            glossary: Loaded glossary.
            refiner: Optional LLM pass run after the phrase table.
            scorer: Confidence scorer. Defaults to a fixed 0.85.
            min_confidence: Threshold below which validation flags a result.
            default_options: Options used when a call passes none.
        """
        self.glossary = glossary
        self.refiner = refiner
        self.scorer = scorer or FixedConfidence()
        self.min_confidence = min_confidence
        self.default_options = default_options or TranslationOptions()
        self._protector = SpanProtector()
        self._rules = self._build_rules(glossary)

    @classmethod
    def from_settings(cls, settings: Settings, refiner: LLMRefiner | None = None) -> Translator:
        """
        Build a translator from settings.

        Raises:
            ConfigurationError: If the glossary cannot be loaded.
        """
        glossary = load_glossary(settings.paths.glossary)
        return cls(
            glossary,
            refiner=refiner,
            scorer=create_scorer(settings.translation.confidence),
            min_confidence=settings.translation.min_confidence,
            default_options=settings.translation.options,
        )

    @property
    def engine_name(self) -> str:
        return self.refiner.name if self.refiner else "mock"

    @staticmethod
    def _build_rules(glossary: Glossary) -> list[_TermRule]:
        rules = [
            _TermRule(term, translation, _term_pattern(term))
            for term, translation in glossary.sorted_terms()
            if not glossary.is_kept(term)
        ]
        # Kept terms join the longest-first order so they shield themselves
        # from shorter terms without blocking longer ones that contain them
        rules += [_TermRule(term, None, _term_pattern(term)) for term in glossary.keep_as_is]
        rules.sort(key=lambda rule: len(rule.term), reverse=True)
        return rules

    def apply_glossary(self, text: str) -> tuple[str, list[str], int]:
        """
        Substitute glossary terms in text.

        Returns:
            Tuple of (translated text, matched terms in match order,
            number of source words replaced).
        """
        holds = _HoldTokens(text)
        matches: list[str] = []
        replaced_words = 0

        result = text
        for rule in self._rules:
            if rule.translation is None:
                result = rule.pattern.sub(lambda m: holds.hold(m.group(0)), result)
                continue

            translation = rule.translation
            result, count = rule.pattern.subn(lambda m, t=translation: holds.hold(t), result)
            if count:
                matches.append(rule.term)
                replaced_words += count * len(rule.term.split())

        return holds.release(result), matches, replaced_words

    async def translate(
        self,
        text: str,
        options: TranslationOptions | None = None,
    ) -> TranslationResult:
        """
        Translate text.

        Args:
            text: English markdown.
            options: Translation options; defaults to the translator's.

        Returns:
            TranslationResult for this call.
        """
        options = options or self.default_options
        start_time = time.perf_counter()

        masked_text, span_map = self._protector.mask(text)

        translated = masked_text
        glossary_matches: list[str] = []
        replaced_words = 0
        if options.use_glossary:
            translated, glossary_matches, replaced_words = self.apply_glossary(masked_text)

        translated = apply_phrase_table(translated)

        if self.refiner is not None:
            translated = await self.refiner.refine(translated, options)

        translated = self._protector.restore(translated, span_map)

        processing_time_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Translated %d chars (%d spans protected, %d glossary terms) in %.1fms",
            len(text),
            len(span_map),
            len(glossary_matches),
            processing_time_ms,
        )

        return TranslationResult(
            original_text=text,
            translated_text=translated,
            glossary_matches=tuple(glossary_matches),
            confidence=self.scorer.score(masked_text, span_map, replaced_words),
            timestamp=datetime.now(timezone.utc).isoformat(),
            engine=self.engine_name,
            processing_time_ms=processing_time_ms,
        )

    async def translate_file(
        self,
        input_path: Path | str,
        output_path: Path | str,
        options: TranslationOptions | None = None,
    ) -> TranslationResult:
        """
        Translate a file and write the output plus a metadata sidecar.

        Raises:
            FileNotFoundError: If the input file does not exist.
            WriteError: If the output or metadata cannot be written.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        options = options or self.default_options

        if not input_path.is_file():
            raise FileNotFoundError(f"Input file not found: {input_path}")

        logger.info("Translating file: %s", input_path)
        content = input_path.read_text(encoding="utf-8")
        result = await self.translate(content, options)

        metadata_path = metadata_path_for(output_path)
        metadata = {
            "input_file": str(input_path),
            "output_file": str(output_path),
            "glossary_matches": list(result.glossary_matches),
            "confidence": result.confidence,
            "timestamp": result.timestamp,
            "engine": result.engine,
            "options": options.model_dump(mode="json", by_alias=True),
        }

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(result.translated_text, encoding="utf-8")
            metadata_path.write_text(
                json.dumps(metadata, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            raise WriteError(f"Cannot write translation to {output_path}: {e}") from e

        logger.info("File translated and saved to: %s", output_path)
        return result

    def validate(self, result: TranslationResult) -> TranslationValidation:
        """Check a result for low confidence and lost markdown structure."""
        issues: list[ValidationIssue] = []
        suggestions: list[str] = []

        if result.confidence < self.min_confidence:
            issues.append(
                ValidationIssue(
                    type="content",
                    severity="medium",
                    description=f"Low translation confidence ({result.confidence:.2f})",
                )
            )
            suggestions.append("Have a human reviewer check this translation")

        original_headings = len(HEADING_PATTERN.findall(result.original_text))
        translated_headings = len(HEADING_PATTERN.findall(result.translated_text))
        if original_headings != translated_headings:
            issues.append(
                ValidationIssue(
                    type="structure",
                    severity="high",
                    description=(
                        f"Markdown heading count changed ({original_headings} -> "
                        f"{translated_headings})"
                    ),
                )
            )
            suggestions.append("Check the heading levels")

        original_blocks = len(CODE_BLOCK_PATTERN.findall(result.original_text))
        translated_blocks = len(CODE_BLOCK_PATTERN.findall(result.translated_text))
        if original_blocks != translated_blocks:
            issues.append(
                ValidationIssue(
                    type="formatting",
                    severity="high",
                    description=(
                        f"Code block count changed ({original_blocks} -> {translated_blocks})"
                    ),
                )
            )
            suggestions.append("Check the code fences around each code block")

        # Placeholder-shaped text that was already in the source is not leftover
        leftover = set(find_placeholders(result.translated_text)) - set(
            find_placeholders(result.original_text)
        )
        if leftover:
            issues.append(
                ValidationIssue(
                    type="formatting",
                    severity="high",
                    description=f"Unrestored placeholders: {', '.join(sorted(leftover))}",
                )
            )
            suggestions.append("Re-run the translation; protected spans were not restored")

        return TranslationValidation(
            is_valid=not issues,
            issues=issues,
            suggestions=suggestions,
        )

    def stats(self, result: TranslationResult) -> TranslationStats:
        """Word counts, glossary usage and expansion ratio for a result."""
        original_words = len(result.original_text.split())
        return TranslationStats(
            original_word_count=original_words,
            translated_word_count=len(result.translated_text.split()),
            glossary_terms_used=len(result.glossary_matches),
            glossary_coverage=(
                round(len(result.glossary_matches) / original_words, 4) if original_words else 0.0
            ),
            text_expansion_ratio=(
                round(len(result.translated_text) / len(result.original_text), 4)
                if result.original_text
                else 0.0
            ),
            timestamp=result.timestamp,
        )


def metadata_path_for(output_path: Path) -> Path:
    """Sidecar metadata path: ``guide.ja.md`` -> ``guide.ja.md.translation-meta.json``."""
    return output_path.with_name(f"{output_path.name}.translation-meta.json")
