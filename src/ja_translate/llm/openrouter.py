"""
OpenRouter chat provider.

OpenRouter exposes Claude, GPT, Gemini and DeepSeek models behind one
OpenAI-compatible endpoint, billed per token.
"""

from __future__ import annotations

import asyncio
import logging
import time

from openai import AsyncOpenAI, OpenAIError

from ja_translate.llm.base import Completion, LLMProvider

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# Short names accepted for translation.default_model
MODEL_ALIASES = {
    "default": "anthropic/claude-sonnet-4.5",
    "fast": "anthropic/claude-3-haiku",
    "deepseek": "deepseek/deepseek-chat",
    "gemini": "google/gemini-pro-1.5",
}


class OpenRouterProvider(LLMProvider):
    """Chat completions through OpenRouter."""

    def __init__(
        self,
        api_key: str,
        model: str = "default",
        *,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = 120.0,
        max_retries: int = 3,
    ):
        """
        Args:
            api_key: OpenRouter API key.
            model: Alias from MODEL_ALIASES or a full OpenRouter model id.
            base_url: API endpoint.
            timeout: Per-request timeout in seconds.
            max_retries: Attempts per request, including the first.
        """
        self._model = MODEL_ALIASES.get(model, model)
        self._attempts = max(1, max_retries)
        # Retries happen in chat() so each failure is logged
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    @property
    def name(self) -> str:
        return "openrouter"

    @property
    def model(self) -> str:
        return self._model

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> Completion:
        """
        Request a completion, backing off 1s, 2s, 4s... between attempts.

        Raises:
            OpenAIError: The last API error once every attempt has failed.
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        started = time.perf_counter()

        attempt = 1
        while True:
            try:
                response = await self._client.chat.completions.create(
                    model=self._model,
                    messages=messages,  # type: ignore[arg-type]
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
                break
            except OpenAIError as e:
                if attempt >= self._attempts:
                    raise
                delay = 2 ** (attempt - 1)
                logger.warning(
                    "OpenRouter request failed (attempt %d/%d), retrying in %ds: %s",
                    attempt,
                    self._attempts,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)
                attempt += 1

        choice = response.choices[0]
        usage = response.usage
        return Completion(
            content=(choice.message.content or "").strip(),
            model=response.model or self._model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            latency_ms=(time.perf_counter() - started) * 1000,
            finish_reason=choice.finish_reason,
            attempts=attempt,
        )

    async def aclose(self) -> None:
        await self._client.close()
