"""Runtime wiring for chat conversations."""

from .app import build_conversation
from .completion import CompletionService, OpenAICompletionService, build_completion_service

__all__ = ["CompletionService", "OpenAICompletionService", "build_completion_service", "build_conversation"]
