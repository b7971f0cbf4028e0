import json
from pathlib import Path

import pytest

from ja_translate.config import (
    DEFAULT_GLOSSARY_PATH,
    BatchConfig,
    ConfidenceMode,
    EngineType,
    Settings,
    Tone,
    create_default_batch_config,
    create_default_config,
    load_batch_config,
    load_config,
)
from ja_translate.errors import ConfigurationError


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)

    settings = Settings()

    assert settings.paths.glossary == DEFAULT_GLOSSARY_PATH
    assert settings.paths.glossary.is_file()
    assert settings.translation.engine == EngineType.MOCK
    assert settings.translation.confidence == ConfidenceMode.FIXED
    assert settings.translation.min_confidence == 0.7
    assert settings.translation.options.target_tone == Tone.TECHNICAL
    assert settings.processing.parallel_limit == 3
    assert settings.translation.openrouter_api_key == ""


def test_api_key_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")

    assert Settings().translation.openrouter_api_key == "sk-test"


def test_from_yaml_substitutes_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MY_KEY", "sk-from-env")
    path = tmp_path / "config.yaml"
    path.write_text(
        "translation:\n"
        "  engine: openrouter\n"
        "  openrouter_api_key: ${MY_KEY}\n"
        "  options:\n"
        "    targetTone: casual\n"
        "processing:\n"
        "  parallel_limit: 5\n",
        encoding="utf-8",
    )

    settings = Settings.from_yaml(path)

    assert settings.translation.engine == EngineType.OPENROUTER
    assert settings.translation.openrouter_api_key == "sk-from-env"
    assert settings.translation.options.target_tone == Tone.CASUAL
    assert settings.processing.parallel_limit == 5


def test_from_yaml_missing_file_returns_defaults(tmp_path: Path) -> None:
    settings = Settings.from_yaml(tmp_path / "missing.yaml")

    assert settings.translation.locale == "ja"


def test_from_yaml_expands_references_inside_strings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOG_ROOT", "/var/log/ja")
    monkeypatch.delenv("UNSET_NAME", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "logging:\n"
        "  file: ${LOG_ROOT}/translation.log\n"
        "project:\n"
        "  description: site-${UNSET_NAME}\n",
        encoding="utf-8",
    )

    settings = Settings.from_yaml(path)

    assert settings.logging.file == Path("/var/log/ja/translation.log")
    assert settings.project.description == "site-"


def test_from_yaml_empty_file_returns_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("# nothing configured\n", encoding="utf-8")

    assert Settings.from_yaml(path).processing.parallel_limit == 3


@pytest.mark.parametrize("content", ["translation: [unclosed\n", "- just\n- a list\n"])
def test_from_yaml_rejects_bad_documents(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        Settings.from_yaml(path)


def test_load_config_searches_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".ja-translate.yaml").write_text("translation:\n  locale: ja-JP\n", encoding="utf-8")

    assert load_config().translation.locale == "ja-JP"


def test_default_settings_file_loads(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"

    create_default_config(path)
    settings = load_config(path)

    assert settings.translation.engine == EngineType.MOCK
    assert settings.logging.file == Path("./logs/translation.log")


def test_batch_config_uses_camel_case_keys(tmp_path: Path) -> None:
    path = tmp_path / "batch.json"
    path.write_text(
        json.dumps(
            {
                "sourceDir": "./docs",
                "outputDir": "./docs/ja",
                "filePatterns": ["*.md"],
                "parallelLimit": 2,
                "overwriteExisting": True,
                "options": {"targetTone": "formal", "useGlossary": False},
            }
        ),
        encoding="utf-8",
    )

    config = load_batch_config(path)

    assert config.source_dir == Path("./docs")
    assert config.file_patterns == ["*.md"]
    assert config.parallel_limit == 2
    assert config.overwrite_existing is True
    assert config.create_backup is True
    assert config.options.target_tone == Tone.FORMAL
    assert config.options.use_glossary is False


def test_default_batch_config_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "batch.json"

    created = create_default_batch_config(path)
    data = json.loads(path.read_text(encoding="utf-8"))

    assert list(data) == [
        "sourceDir",
        "outputDir",
        "filePatterns",
        "excludePatterns",
        "options",
        "parallelLimit",
        "createBackup",
        "overwriteExisting",
    ]
    assert data["options"]["preserveCodeBlocks"] is True
    assert load_batch_config(path) == created == BatchConfig()


def test_load_batch_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_batch_config(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        '{"parallelLimit": 0}',
        '{"options": {"targetTone": "pirate"}}',
    ],
)
def test_load_batch_config_rejects_bad_documents(tmp_path: Path, content: str) -> None:
    path = tmp_path / "batch.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_batch_config(path)
