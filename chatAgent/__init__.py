"""Top-level package exports for chatAgent."""

from .context import ConversationContext, Message, ParticipantRef, UserAliasRegistry
from .errors import BudgetExceeded, ChatContextError, ConfigError, ParticipantNotFound, ProtocolViolation
from .runtime.app import build_conversation

__all__ = [
    "ConversationContext",
    "Message",
    "ParticipantRef",
    "UserAliasRegistry",
    "BudgetExceeded",
    "ChatContextError",
    "ConfigError",
    "ParticipantNotFound",
    "ProtocolViolation",
    "build_conversation",
]
