"""
LLM provider factory.
"""

from __future__ import annotations

from typing import Any

from ja_translate.config import EngineType
from ja_translate.errors import ConfigurationError
from ja_translate.llm.base import LLMProvider


def create_llm_provider(
    engine: EngineType | str,
    *,
    api_key: str | None = None,
    model: str = "default",
    **kwargs: Any,
) -> LLMProvider | None:
    """
    Create the LLM provider for a translation engine.

    Args:
        engine: Engine type. The mock engine needs no provider.
        api_key: API key (required for openrouter).
        model: Model name or alias.
        **kwargs: Additional provider-specific options (timeout, max_retries).

    Returns:
        LLMProvider instance, or None for the mock engine.

    Raises:
        ConfigurationError: If the engine is unknown or its API key is missing.
    """
    if isinstance(engine, str):
        try:
            engine = EngineType(engine.lower())
        except ValueError:
            valid = [e.value for e in EngineType]
            raise ConfigurationError(
                f"Invalid translation engine: {engine}. Valid options: {valid}"
            ) from None

    if engine == EngineType.MOCK:
        return None

    if engine == EngineType.OPENROUTER:
        if not api_key:
            raise ConfigurationError(
                "OpenRouter engine requires an API key (set OPENROUTER_API_KEY)"
            )

        from ja_translate.llm.openrouter import OpenRouterProvider

        return OpenRouterProvider(api_key=api_key, model=model, **kwargs)

    raise ConfigurationError(f"Unknown translation engine: {engine}")
