"""Completion service contract and its ChatOpenAI-backed implementation.

The conversation core only depends on the CompletionService protocol: given an
ordered list of chat messages, a model name and a max_tokens ceiling it returns
one message per completion choice. Timeouts and retries belong to the
implementation, not to the core.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from chatAgent.config.settings import ChatSettings
from chatAgent.errors import ConfigError

LOGGER = logging.getLogger(__name__)


class CompletionService(Protocol):
    async def complete(
        self,
        messages: List[BaseMessage],
        *,
        model: str,
        max_tokens: int,
    ) -> List[BaseMessage]:
        """Return one message per completion choice."""
        ...


class OpenAICompletionService:
    """CompletionService backed by a langchain ChatOpenAI client."""

    def __init__(self, llm: ChatOpenAI) -> None:
        self._llm = llm

    async def complete(
        self,
        messages: List[BaseMessage],
        *,
        model: str,
        max_tokens: int,
    ) -> List[BaseMessage]:
        LOGGER.debug(f"Requesting completion: model={model}, max_tokens={max_tokens}, messages={len(messages)}")
        result = await self._llm.agenerate([messages], model=model, max_tokens=max_tokens)
        choices = [generation.message for generation in result.generations[0]]
        LOGGER.debug(f"Completion returned {len(choices)} choice(s)")
        return choices


def _chat_kwargs(settings: ChatSettings) -> Dict[str, object]:
    if not settings.api_key:
        raise ConfigError(
            f"Missing API key for model {settings.model}; set OPENAI_API_KEY in .env",
            user_message="缺少 API Key，请在 .env 中配置 OPENAI_API_KEY。",
        )
    kwargs: Dict[str, object] = {
        "model": settings.model,
        "api_key": settings.api_key,
        "temperature": settings.temperature,
        "frequency_penalty": settings.frequency_penalty,
    }
    if settings.base_url:
        kwargs["base_url"] = settings.base_url
    return kwargs


def build_completion_service(
    settings: ChatSettings,
    llm: Optional[ChatOpenAI] = None,
) -> OpenAICompletionService:
    """Construct the completion service for the configured model.

    Args:
        settings: Chat settings loaded from .env
        llm: Pre-built client (mainly for tests); built from settings when omitted

    Raises:
        ConfigError: If no API key is configured
    """

    if llm is None:
        llm = ChatOpenAI(**_chat_kwargs(settings))
    return OpenAICompletionService(llm)
