"""Utilities for chatAgent."""

from .logging_utils import (
    log_agent_response,
    log_compression,
    log_error,
    log_user_message,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "log_user_message",
    "log_agent_response",
    "log_compression",
    "log_error",
]
