"""
Protected span masking.

Spans that must pass through translation unchanged (code, URLs, links,
file paths) are swapped for numbered placeholders before any substitution
runs, and swapped back afterwards.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Placeholder -> original text, in masking order
SpanMap = dict[str, str]


@dataclass(frozen=True)
class SpanClass:
    """A kind of protected span and the pattern that finds it."""

    name: str
    pattern: re.Pattern[str]


# Order is significant: a span claimed by an earlier class is already a
# placeholder when later patterns run.
SPAN_CLASSES: tuple[SpanClass, ...] = (
    SpanClass("CODE_BLOCK", re.compile(r"```[\s\S]*?```")),
    SpanClass("INLINE_CODE", re.compile(r"`[^`]+`")),
    SpanClass("URL", re.compile(r"https?://\S+")),
    SpanClass("LINK", re.compile(r"\[[^\]]+\]\([^)]+\)")),
    SpanClass("FILE_PATH", re.compile(r"(?:\./|/)\S+\.[A-Za-z0-9]+")),
)

PLACEHOLDER_PATTERN = re.compile(
    r"__(?:" + "|".join(span.name for span in SPAN_CLASSES) + r")_\d+__"
)


class SpanProtector:
    """Masks and restores protected spans."""

    def __init__(self, span_classes: tuple[SpanClass, ...] = SPAN_CLASSES):
        self.span_classes = span_classes

    def mask(self, text: str) -> tuple[str, SpanMap]:
        """
        Replace protected spans with placeholders.

        Numbers whose ``<CLASS>_<N>`` text already occurs in the input are
        skipped, so no placeholder can be confused with literal text.

        Args:
            text: Source text.

        Returns:
            Tuple of (masked text, placeholder map).
        """
        span_map: SpanMap = {}
        counter = 0

        def replace(name: str, match: re.Match[str]) -> str:
            nonlocal counter
            while f"{name}_{counter}" in text:
                counter += 1
            placeholder = f"__{name}_{counter}__"
            counter += 1
            span_map[placeholder] = match.group(0)
            return placeholder

        masked = text
        for span in self.span_classes:
            masked = span.pattern.sub(lambda m, name=span.name: replace(name, m), masked)

        return masked, span_map

    def restore(self, text: str, span_map: SpanMap) -> str:
        """
        Put the original spans back in place of their placeholders.

        Later spans may contain earlier placeholders (a URL inside a link),
        so placeholders are restored newest first.
        """
        restored = text
        for placeholder, original in reversed(span_map.items()):
            restored = restored.replace(placeholder, original)
        return restored


def find_placeholders(text: str) -> list[str]:
    """Return placeholder tokens still present in text."""
    return PLACEHOLDER_PATTERN.findall(text)
