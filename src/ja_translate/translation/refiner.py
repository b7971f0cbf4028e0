"""
LLM refinement pass.

Runs on masked text after glossary and phrase substitution, so code, URLs
and paths never reach the model. The model must hand every placeholder
token back untouched.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence

from ja_translate.config import Tone, TranslationOptions
from ja_translate.llm.base import LLMProvider
from ja_translate.translation.protector import find_placeholders

logger = logging.getLogger(__name__)

TONE_INSTRUCTIONS: dict[Tone, str] = {
    Tone.FORMAL: (
        "Use polite, formal Japanese (です・ます調, honorifics where a reader is addressed)."
    ),
    Tone.CASUAL: "Use friendly, conversational Japanese while keeping です・ます調.",
    Tone.TECHNICAL: "Use concise technical Japanese as found in developer documentation.",
}


class LLMRefiner:
    """Translates the English left over after glossary substitution."""

    def __init__(
        self,
        provider: LLMProvider,
        *,
        notes: Sequence[str] = (),
        temperature: float = 0.3,
        max_tokens: int = 4096,
        request_interval: float = 0.0,
    ):
        """
        Initialize the refiner.

        Args:
            provider: LLM provider to call.
            notes: Translator notes from the glossary, passed to the model.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens.
            request_interval: Minimum seconds between two requests.
        """
        self._provider = provider
        self._notes = tuple(notes)
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._request_interval = request_interval
        self._lock = asyncio.Lock()
        self._last_request = 0.0

    @property
    def name(self) -> str:
        return f"{self._provider.name}:{self._provider.model}"

    def system_prompt(self, tone: Tone) -> str:
        notes = "\n".join(f"- {note}" for note in self._notes)
        notes_block = f"\n\nTranslator notes:\n{notes}" if notes else ""
        return f"""You are an expert translator localizing developer content from English to Japanese.

1. Translate any remaining English prose into natural Japanese.
2. Text that is already Japanese has been checked against a glossary: keep it as is.
3. Tokens such as __URL_0__ or __CODE_BLOCK_3__ are placeholders. Copy every one of them
   exactly, once, in the position where it belongs.
4. Preserve markdown structure: headings, lists, tables, emphasis and line breaks.
5. {TONE_INSTRUCTIONS[tone]}{notes_block}

Provide only the translation without any explanations or notes."""

    async def _throttle(self) -> None:
        if self._request_interval <= 0:
            return
        async with self._lock:
            wait = self._last_request + self._request_interval - time.monotonic()
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request = time.monotonic()

    async def refine(self, masked_text: str, options: TranslationOptions) -> str:
        """
        Refine masked text with the LLM.

        Returns the input unchanged if the model dropped any placeholder,
        since restoring would otherwise lose protected content.
        """
        if not masked_text.strip():
            return masked_text

        await self._throttle()
        response = await self._provider.chat(
            system_prompt=self.system_prompt(options.target_tone),
            user_prompt=masked_text,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

        missing = set(find_placeholders(masked_text)) - set(find_placeholders(response.content))
        if missing:
            logger.warning(
                "LLM output dropped %d protected span(s); keeping unrefined text", len(missing)
            )
            return masked_text

        logger.debug(
            "LLM refinement: %d tokens in, %d out, %.0fms",
            response.input_tokens,
            response.output_tokens,
            response.latency_ms,
        )
        return response.content
