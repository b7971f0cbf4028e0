"""
Configuration management for ja-translate.

Handles application settings (YAML + environment variables), per-call
translation options, and JSON batch configuration files.
"""

from __future__ import annotations

import json
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from ja_translate.errors import ConfigurationError

# Load .env file if present (before Settings initialization)
load_dotenv()

DEFAULT_GLOSSARY_PATH = Path(__file__).parent / "terminology" / "glossary.yaml"


class Tone(str, Enum):
    """Target tone of the Japanese output."""

    FORMAL = "formal"
    CASUAL = "casual"
    TECHNICAL = "technical"


class EngineType(str, Enum):
    """Translation engine run after glossary and phrase substitution."""

    MOCK = "mock"
    OPENROUTER = "openrouter"


class ConfidenceMode(str, Enum):
    """How translation confidence is scored."""

    FIXED = "fixed"
    COVERAGE = "coverage"


class TranslationOptions(BaseModel):
    """Per-call translation options."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Code blocks are always masked; kept for compatibility with existing configs
    preserve_code_blocks: bool = Field(default=True)
    preserve_urls: bool = Field(default=True)
    # Advisory only: structure is protected by span masking, nothing more
    preserve_markdown_structure: bool = Field(default=True)
    use_glossary: bool = Field(default=True)
    target_tone: Tone = Field(default=Tone.TECHNICAL)


class BatchConfig(BaseModel):
    """Configuration for a batch translation run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_dir: Path = Field(default=Path("./content"))
    output_dir: Path = Field(default=Path("./content/ja"))
    file_patterns: list[str] = Field(default_factory=lambda: ["*.md", "*.mdx"])
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["node_modules/**", ".git/**", "dist/**", "*.ja.md"]
    )
    options: TranslationOptions = Field(default_factory=TranslationOptions)
    parallel_limit: int = Field(default=3, ge=1)
    create_backup: bool = Field(default=True)
    overwrite_existing: bool = Field(default=False)
    generate_report: bool = Field(default=True)
    report_path: Path | None = Field(default=None)


class PathsConfig(BaseModel):
    """Locations of data files."""

    glossary: Path = Field(default=DEFAULT_GLOSSARY_PATH)

    @field_validator("glossary")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Resolve ~ and relative paths."""
        return Path(v).expanduser().resolve()


class TranslationConfig(BaseModel):
    """Engine, LLM and default option settings."""

    locale: str = Field(default="ja")
    engine: EngineType = Field(default=EngineType.MOCK)
    default_model: str = Field(default="anthropic/claude-sonnet-4.5")
    # OpenRouter API key (only required if engine is "openrouter")
    openrouter_api_key: str = Field(default="")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, ge=256, le=32000)
    timeout_seconds: float = Field(default=120.0, ge=10, le=600)
    max_retries: int = Field(default=3, ge=1, le=10)
    # Minimum delay between LLM requests (seconds)
    request_interval: float = Field(default=0.0, ge=0.0, le=60.0)
    confidence: ConfidenceMode = Field(default=ConfidenceMode.FIXED)
    min_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    options: TranslationOptions = Field(default_factory=TranslationOptions)


class ProcessingConfig(BaseModel):
    """Configuration for batch processing."""

    parallel_limit: int = Field(default=3, ge=1, le=64)


class LoggingConfig(BaseModel):
    """Console and rotating file logging."""

    level: str = Field(default="INFO")
    file: Path | None = Field(default=Path("./logs/translation.log"))
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    max_file_size_mb: int = Field(default=10, ge=1, le=100)
    backup_count: int = Field(default=5, ge=1, le=20)


class ProjectConfig(BaseModel):
    """Name and description of the translated site."""

    name: str = Field(default="ai-code-ecosystem-japan")
    description: str = Field(default="")


class Settings(BaseSettings):
    """Application settings: YAML file, then environment, then defaults."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        extra="ignore",
    )

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def __init__(self, **data: Any) -> None:
        super().__init__(**data)
        # OPENROUTER_API_KEY is honoured even though the field is nested
        if not self.translation.openrouter_api_key:
            self.translation.openrouter_api_key = os.getenv("OPENROUTER_API_KEY", "")

    @classmethod
    def from_yaml(cls, path: Path | str) -> Settings:
        """
        Build settings from a YAML file.

        ``${NAME}`` references are expanded from the environment. A missing
        file gives the defaults.

        Raises:
            ConfigurationError: If the file is not a YAML mapping.
        """
        path = Path(path)
        if not path.is_file():
            return cls()

        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Settings file {path} must contain a mapping")

        return cls(**_expand_env(raw))


_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _expand_env(node: Any) -> Any:
    """Replace ${NAME} references in every string of a parsed YAML tree."""
    if isinstance(node, dict):
        return {key: _expand_env(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_expand_env(item) for item in node]
    if isinstance(node, str):
        return _ENV_REF.sub(lambda m: os.getenv(m.group(1), ""), node)
    return node


SETTINGS_FILE_NAMES = ("config.yaml", "config.yml", ".ja-translate.yaml")


def load_config(path: Path | str | None = None) -> Settings:
    """
    Load settings from ``path``, else the first settings file found in the
    working directory, else the defaults.
    """
    if path is None:
        path = next((Path(name) for name in SETTINGS_FILE_NAMES if Path(name).is_file()), None)
    return Settings.from_yaml(path) if path is not None else Settings()


def load_batch_config(path: Path | str) -> BatchConfig:
    """
    Load a batch configuration from a JSON file.

    Raises:
        ConfigurationError: If the file is missing, not JSON, or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {path} must contain a JSON object")

    try:
        return BatchConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid batch config {path}: {e}") from e


def create_default_batch_config(path: Path | str) -> BatchConfig:
    """Write the default batch configuration as JSON and return it."""
    config = BatchConfig()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(
        by_alias=True, mode="json", exclude={"generate_report", "report_path"}
    )
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return config


def create_default_config(path: Path | str = "config.yaml") -> None:
    """Create a default settings file."""
    default_config = """# ja-translate configuration
project:
  name: "ai-code-ecosystem-japan"
  description: "English to Japanese content translation"

# Glossary YAML (defaults to the glossary bundled with the package)
# paths:
#   glossary: "./agents/translation/glossary.yaml"

translation:
  # Locale marker inserted into output file names (README.md -> README.ja.md)
  locale: "ja"
  # Engine: "mock" (glossary + phrase table only) or "openrouter" (LLM refinement)
  engine: "mock"
  default_model: "anthropic/claude-sonnet-4.5"
  # openrouter_api_key: ${OPENROUTER_API_KEY}
  temperature: 0.3
  max_tokens: 4096
  # Minimum seconds between LLM requests
  request_interval: 0
  # Confidence scoring: "fixed" or "coverage"
  confidence: "fixed"
  # Results below this confidence are flagged by validation
  min_confidence: 0.7

  options:
    preserveCodeBlocks: true
    preserveUrls: true
    preserveMarkdownStructure: true
    useGlossary: true
    targetTone: "technical"

processing:
  # Files translated concurrently per chunk
  parallel_limit: 3

logging:
  level: "INFO"
  file: "./logs/translation.log"
  max_file_size_mb: 10
  backup_count: 5
"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(default_config)
