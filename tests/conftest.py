from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

import pytest

from ja_translate.config import DEFAULT_GLOSSARY_PATH
from ja_translate.llm.base import Completion, LLMProvider
from ja_translate.logging_setup import PACKAGE_LOGGER
from ja_translate.terminology import Glossary, load_glossary


class StubProvider(LLMProvider):
    """In-memory provider that answers with ``respond(user_prompt)``."""

    def __init__(self, respond: Callable[[str], str]):
        self._respond = respond
        self.prompts: list[str] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "stub"

    @property
    def model(self) -> str:
        return "stub-model"

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> Completion:
        self.prompts.append(user_prompt)
        return Completion(content=self._respond(user_prompt), model=self.model)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_glossary() -> Callable[..., Glossary]:
    def _make(
        terms: dict[str, str] | None = None,
        keep: tuple[str, ...] = (),
        contexts: dict[str, dict[str, str]] | None = None,
    ) -> Glossary:
        return Glossary(
            categories={"terms": terms or {}},
            keep_as_is=frozenset(keep),
            context_patterns=contexts or {},
        )

    return _make


@pytest.fixture(scope="session")
def bundled_glossary() -> Glossary:
    return load_glossary(DEFAULT_GLOSSARY_PATH)


@pytest.fixture
def stub_provider() -> Callable[[Callable[[str], str]], StubProvider]:
    return StubProvider
