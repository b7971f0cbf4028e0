"""
Chat model interface used by the LLM refinement pass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class Completion:
    """Text returned by a chat model, with usage figures for logging."""

    content: str
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: float = 0.0
    finish_reason: str | None = None
    attempts: int = 1


class LLMProvider(ABC):
    """A chat model that rewrites masked drafts into Japanese."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short provider name, used in ``TranslationResult.engine``."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Resolved model identifier."""

    @abstractmethod
    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> Completion:
        """
        Send one system + user exchange and return the reply.

        Args:
            system_prompt: Translation instructions.
            user_prompt: Masked text to refine.
            temperature: Sampling temperature.
            max_tokens: Upper bound on reply length.
        """

    async def aclose(self) -> None:
        """Release the underlying HTTP client, if the provider holds one."""
        return None
