"""Logging utilities for chatAgent."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

LOGS_DIR = Path("logs")


def setup_logging(level: Union[int, str] = logging.INFO, logs_dir: Optional[Path] = None) -> logging.Logger:
    """Setup logging configuration for chatAgent.

    Detailed logs go to a timestamped file under ``logs/``; only warnings and
    errors reach the console so they do not interleave with the chat.

    Args:
        level: File logging level (default: INFO)
        logs_dir: Directory for log files (default: ./logs)

    Returns:
        Configured logger instance
    """
    logs_dir = logs_dir or LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"chatagent_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    # Root logger for every chatAgent.* module
    logger = logging.getLogger("chatAgent")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Clear existing handlers
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []

    # File handler (detailed logs)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_formatter)

    # Console handler (user-friendly)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("chatAgent session started")
    logger.info(f"Log file: {log_file}")
    logger.info("=" * 80)

    return logger


def log_user_message(logger: logging.Logger, speaker: str, content: str) -> None:
    """Log participant input (truncated preview)."""
    logger.info(f"{speaker} input: {content[:100]}{'...' if len(content) > 100 else ''}")


def log_agent_response(logger: logging.Logger, content: Optional[str]) -> None:
    """Log assistant response; None means the model chose to stay silent."""
    if content is None:
        logger.info("Agent response: <silent>")
        return
    logger.info(f"Agent response: {content[:100]}{'...' if len(content) > 100 else ''}")


def log_compression(logger: logging.Logger, result) -> None:
    """Log a history compression report.

    Args:
        logger: Logger instance
        result: CompressionResult returned by ConversationContext
    """
    logger.info(f"\n{'='*80}")
    logger.info("History compressed:")
    logger.info(f"  Messages: {result.before_count} → {result.after_count} (summarized {result.summarized_count})")
    logger.info(f"  Tokens: {result.before_tokens:,} → {result.after_tokens:,} ({result.compression_ratio:.1%})")
    logger.debug(f"  Summary: {result.summary[:500]}")
    logger.info(f"{'='*80}\n")


def log_error(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """Log error with context.

    Args:
        logger: Logger instance
        error: Exception instance
        context: Additional context about where the error occurred
    """
    logger.error(f"Error occurred: {type(error).__name__}: {str(error)}")
    if context:
        logger.error(f"  Context: {context}")
