"""Runtime assembly for a budgeted chat conversation."""

from __future__ import annotations

import logging
from typing import Optional

from chatAgent.config import ChatSettings, get_settings
from chatAgent.context import ConversationContext, TokenCounter
from chatAgent.models import ModelProfileRegistry, build_default_registry

from .completion import CompletionService, build_completion_service

LOGGER = logging.getLogger(__name__)


def build_conversation(
    settings: Optional[ChatSettings] = None,
    *,
    completion: Optional[CompletionService] = None,
    counter: Optional[TokenCounter] = None,
    profiles: Optional[ModelProfileRegistry] = None,
) -> ConversationContext:
    """Create a ConversationContext from settings.

    The model profile and budgets are validated here so configuration problems
    surface before the first message is processed.

    Args:
        settings: Chat settings (defaults to the cached get_settings())
        completion: Completion service override (tests, custom backends)
        counter: Token counter override; built from the model's tiktoken encoding
        profiles: Model profile registry override

    Raises:
        ConfigError: Unknown model, invalid budgets, or missing API key
    """

    settings = settings or get_settings()
    profiles = profiles or build_default_registry()

    # Unknown models fail before credentials are checked
    profile = profiles.resolve(settings.model)
    counter = counter or TokenCounter.for_profile(profile)

    if completion is None:
        completion = build_completion_service(settings)

    conversation = ConversationContext.create(
        settings.model,
        completion,
        summary_budget=settings.budget.summary_budget,
        history_target=settings.budget.history_target,
        alias_budget=settings.budget.alias_budget,
        counter=counter,
        profiles=profiles,
    )
    LOGGER.info(
        f"Conversation ready: model={settings.model}, "
        f"history_budget={conversation.history_budget}, "
        f"history_target={conversation.budget.history_target}"
    )
    return conversation
