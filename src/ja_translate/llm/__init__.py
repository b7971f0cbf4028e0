"""
LLM provider abstraction layer.

The translator can hand glossary-substituted text to an LLM for a final
refinement pass. Supported backends:
- OpenRouter: pay-per-token via the OpenAI-compatible API
"""

from ja_translate.llm.base import Completion, LLMProvider
from ja_translate.llm.factory import create_llm_provider

__all__ = [
    "Completion",
    "LLMProvider",
    "create_llm_provider",
]
