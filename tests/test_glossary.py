from pathlib import Path

import pytest

from ja_translate.errors import ConfigurationError
from ja_translate.terminology import Glossary, load_glossary, parse_glossary


def test_bundled_glossary_loads(bundled_glossary: Glossary) -> None:
    terms = bundled_glossary.terms()

    assert terms["repository"] == "リポジトリ"
    assert terms["getting started"] == "はじめに"
    assert bundled_glossary.is_kept("GitHub")
    assert bundled_glossary.translation_notes


def test_categories_merge_in_order_with_last_write_winning() -> None:
    glossary = parse_glossary(
        {
            "business": {"plan": "プラン(business)"},
            "ai_terms": {"plan": "プラン(ai)"},
            "extra": {"plan": "プラン(extra)", "widget": "ウィジェット"},
        }
    )

    # Known categories merge in their fixed order, extras after them
    assert list(glossary.categories) == ["ai_terms", "business", "extra"]
    assert glossary.terms()["plan"] == "プラン(extra)"
    assert glossary.terms()["widget"] == "ウィジェット"


def test_context_patterns_merge_after_categories() -> None:
    glossary = parse_glossary(
        {
            "dev_tools": {"deployment": "展開"},
            "context_patterns": {"development": {"deployment": "デプロイ"}},
        }
    )

    assert glossary.terms() == {"deployment": "デプロイ"}


def test_case_variants_collapse_to_one_entry() -> None:
    glossary = parse_glossary({"ai_terms": {"Token": "トークン1", "token": "トークン2"}})

    assert len(glossary) == 1
    assert glossary.terms() == {"token": "トークン2"}


def test_sorted_terms_are_longest_first() -> None:
    glossary = parse_glossary({"ai_terms": {"AI": "人工知能", "AI agent": "AIエージェント", "LLM": "LLM"}})

    assert [term for term, _ in glossary.sorted_terms()] == ["AI agent", "LLM", "AI"]


def test_keep_lists_are_case_insensitive() -> None:
    glossary = parse_glossary({"keep_english": ["GitHub"], "keep_as_is": ["MCP"]})

    assert glossary.is_kept("github")
    assert glossary.is_kept("mcp")
    assert not glossary.is_kept("gitlab")


def test_glossary_tables_are_read_only(make_glossary) -> None:
    glossary = make_glossary({"commit": "コミット"})

    with pytest.raises(TypeError):
        glossary.categories["terms"]["commit"] = "x"  # type: ignore[index]


def test_empty_document_yields_empty_glossary() -> None:
    glossary = parse_glossary(None)

    assert len(glossary) == 0
    assert glossary.sorted_terms() == ()


def test_non_mapping_document_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        parse_glossary(["not", "a", "mapping"])


def test_malformed_category_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Malformed glossary"):
        parse_glossary({"ai_terms": ["token", "prompt"]})


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_glossary(tmp_path / "missing.yaml")


def test_load_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "glossary.yaml"
    path.write_text("ai_terms: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_glossary(path)


def test_load_from_file(tmp_path: Path) -> None:
    path = tmp_path / "glossary.yaml"
    path.write_text(
        'dev_tools:\n  "commit": "コミット"\nkeep_english:\n  - "Git"\n', encoding="utf-8"
    )

    glossary = load_glossary(path)

    assert glossary.terms() == {"commit": "コミット"}
    assert glossary.is_kept("git")
