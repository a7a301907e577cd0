"""Configuration exports."""

from .settings import BudgetSettings, ChatSettings, get_settings

__all__ = ["BudgetSettings", "ChatSettings", "get_settings"]
