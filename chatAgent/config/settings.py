"""Environment-bound configuration objects.

This module provides Pydantic BaseSettings-based configuration loading from .env files.
All settings classes automatically load from environment variables with support for
multiple alias names (e.g., CHAT_MODEL and MODEL_CHAT both work).

Example:
    from chatAgent.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    model = settings.model
    history_target = settings.budget.history_target
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


class BudgetSettings(BaseSettings):
    """Token budgets reserved out of the model context window.

    - summary_budget: Maximum length of a generated summary (default: 512)
    - history_target: Size history is compressed down to (default: 2048)
    - alias_budget: Room for the participant alias table (default: 256)

    The sum of these plus the summary instruction overhead must stay below the
    model's context ceiling; this is validated when a conversation is built.
    """

    summary_budget: int = Field(
        default=512,
        ge=1,
        validation_alias=AliasChoices("SUMMARY_BUDGET", "CHAT_SUMMARY_BUDGET"),
    )
    history_target: int = Field(
        default=2048,
        ge=1,
        validation_alias=AliasChoices("HISTORY_TARGET", "CHAT_HISTORY_TARGET"),
    )
    alias_budget: int = Field(
        default=256,
        ge=1,
        validation_alias=AliasChoices("ALIAS_BUDGET", "CHAT_ALIAS_BUDGET"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class ChatSettings(BaseSettings):
    """Root application settings loaded from .env file.

    Holds the model identifier and credentials, the sampling knobs passed to the
    completion service, and the nested token budgets (BudgetSettings).

    Use get_settings() to obtain a cached singleton instance.
    """

    model: str = Field(
        default="gpt-4",
        validation_alias=AliasChoices("CHAT_MODEL", "MODEL_CHAT", "MODEL_CHAT_ID"),
    )
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "MODEL_CHAT_API_KEY"),
    )
    base_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_BASE_URL", "MODEL_CHAT_BASE_URL"),
    )

    # Sampling
    temperature: float = Field(default=0.3, ge=0.0, le=2.0, alias="CHAT_TEMPERATURE")
    frequency_penalty: float = Field(default=0.0, ge=-2.0, le=2.0, alias="CHAT_FREQUENCY_PENALTY")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    budget: BudgetSettings = Field(default_factory=BudgetSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> ChatSettings:
    """Return a cached singleton ChatSettings instance.

    Uses LRU cache to ensure only one Settings object is created per process.
    Call get_settings.cache_clear() after changing the environment in tests.
    """

    return ChatSettings()
