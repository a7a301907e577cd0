"""Typed errors raised by the chat context engine.

Every failure the conversation core can hit is reported as a subclass of
ChatContextError so callers can decide how to recover (reject the message,
retry, show it to the user). Nothing in the core terminates the process.
"""

from __future__ import annotations

from typing import Optional


class ChatContextError(Exception):
    """Base exception for chatAgent errors."""

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class ConfigError(ChatContextError):
    """Invalid configuration detected before a conversation starts."""
    pass


class BudgetExceeded(ChatContextError):
    """An incoming message cannot fit even after dropping all history."""

    def __init__(self, needed: int, available: int):
        super().__init__(
            f"Message needs {needed} tokens but only {available} tokens are "
            f"available for history",
            user_message="消息过长，无法放入上下文窗口，请缩短后重试。",
        )
        self.needed = needed
        self.available = available


class ProtocolViolation(ChatContextError):
    """The completion service returned a number of choices other than one."""

    def __init__(self, choices: int):
        super().__init__(f"Expected exactly one completion choice, got {choices}")
        self.choices = choices


class ParticipantNotFound(ChatContextError, KeyError):
    """A participant reference does not match any registry entry."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
