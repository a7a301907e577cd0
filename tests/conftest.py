"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
Token counting uses a whitespace encoder (one token per word) so tests run offline
and token costs can be computed by hand:

    user message, n words, tagged u{i}:  3 + n + 1 ("User") + 1 + 1 ("u{i}") = n + 6
    assistant / system message, n words: 3 + n + 1                          = n + 4
    summary instruction (7 words):       3 + 7 + 1                          = 11
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from langchain_core.messages import AIMessage

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from chatAgent.context import BudgetConfig, ConversationContext, TokenCounter
from chatAgent.models import build_default_registry


def whitespace_encode(text):
    return text.split()


def words(count: int, word: str = "w") -> str:
    """Text of exactly `count` whitespace tokens."""
    return " ".join([word] * count)


def make_completion(*contents):
    """Completion service mock; each call returns one choice per content given."""
    completion = Mock()
    completion.complete = AsyncMock(return_value=[AIMessage(content=c) for c in contents])
    return completion


@pytest.fixture
def gpt4_profile():
    return build_default_registry().resolve("gpt-4")


@pytest.fixture
def counter(gpt4_profile):
    return TokenCounter(whitespace_encode, gpt4_profile)


@pytest.fixture
def tight_budget():
    """gpt-4 window with history_target=50 and history_budget=61."""
    return BudgetConfig(
        max_tokens=8192,
        summary_budget=8000,
        summary_instruction_overhead=11,
        history_target=50,
        alias_budget=120,
    )


@pytest.fixture
def completion():
    return make_completion("summary of earlier chat")


@pytest.fixture
def conversation(gpt4_profile, counter, tight_budget, completion):
    return ConversationContext("gpt-4", gpt4_profile, counter, tight_budget, completion)
