"""
Translator context.

Owns the process-wide pieces of a translation run (loaded glossary,
translator, LLM client) with an explicit open/close lifecycle instead of
module-level singletons.
"""

from __future__ import annotations

import logging
from types import TracebackType

from ja_translate.config import Settings
from ja_translate.llm import LLMProvider, create_llm_provider
from ja_translate.translation.refiner import LLMRefiner
from ja_translate.translation.translator import Translator

logger = logging.getLogger(__name__)


class TranslatorContext:
    """
    Explicitly initialized and torn-down translator holder.

    Usage:
        async with TranslatorContext(settings) as ctx:
            result = await ctx.translator.translate(text)
    """

    def __init__(self, settings: Settings, provider: LLMProvider | None = None):
        """
        Args:
            settings: Application settings.
            provider: LLM provider to use instead of the one configured in settings.
        """
        self.settings = settings
        self._provider = provider
        self._translator: Translator | None = None

    @property
    def translator(self) -> Translator:
        if self._translator is None:
            raise RuntimeError("TranslatorContext is not open")
        return self._translator

    def open(self) -> Translator:
        """
        Load the glossary and build the translator.

        Raises:
            ConfigurationError: If the glossary or engine is misconfigured.
        """
        if self._translator is not None:
            return self._translator

        config = self.settings.translation
        if self._provider is None:
            self._provider = create_llm_provider(
                config.engine,
                api_key=config.openrouter_api_key,
                model=config.default_model,
                timeout=config.timeout_seconds,
                max_retries=config.max_retries,
            )

        translator = Translator.from_settings(self.settings)
        if self._provider is not None:
            translator.refiner = LLMRefiner(
                self._provider,
                notes=translator.glossary.translation_notes,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                request_interval=config.request_interval,
            )

        self._translator = translator
        logger.debug("Translator context opened (engine: %s)", translator.engine_name)
        return translator

    async def close(self) -> None:
        """Release the LLM client and drop the translator."""
        if self._provider is not None:
            await self._provider.aclose()
            self._provider = None
        self._translator = None

    async def __aenter__(self) -> TranslatorContext:
        try:
            self.open()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
