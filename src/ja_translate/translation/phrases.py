"""
Fixed phrase-level substitutions applied after the glossary pass.
"""

from __future__ import annotations

import re

# Common documentation headings and phrases
BASIC_PHRASES: dict[str, str] = {
    "Getting Started": "はじめに",
    "Quick Start": "クイックスタート",
    "Installation": "インストール",
    "Configuration": "設定",
    "Documentation": "ドキュメント",
    "Examples": "例",
    "Tutorial": "チュートリアル",
    "Guide": "ガイド",
    "Overview": "概要",
    "Features": "機能",
    "How to use": "使用方法",
    "Step by step": "ステップバイステップ",
    "Prerequisites": "前提条件",
    "Requirements": "要件",
    "Dependencies": "依存関係",
    "License": "ライセンス",
    "Contributing": "貢献",
    "Issues": "課題",
    "Feedback": "フィードバック",
    "Support": "サポート",
}

# (pattern, replacement) sentence rewrites, case-sensitive
SENTENCE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    # "This is a ..." -> "これは...です"
    (re.compile(r"This is an? ([^.]+)\."), r"これは\1です。"),
    # "You can ..." -> "...することができます"
    (re.compile(r"You can ([^.]+)\."), r"\1することができます。"),
)

_PHRASE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(rf"\b{re.escape(english)}\b", re.IGNORECASE), japanese)
    for english, japanese in BASIC_PHRASES.items()
)


def apply_phrase_table(text: str) -> str:
    """Apply heading phrases, then sentence rewrites."""
    result = text
    for pattern, japanese in _PHRASE_PATTERNS:
        result = pattern.sub(japanese, result)
    for pattern, replacement in SENTENCE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result
