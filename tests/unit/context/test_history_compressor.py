"""Unit tests for HistoryCompressor.

Tests cutover selection and the summarization request.
"""

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from chatAgent.context import HistoryCompressor
from chatAgent.context.messages import PROMPT_COMPRESS, SUMMARY_NAME
from chatAgent.errors import ProtocolViolation

from conftest import make_completion, words


@pytest.fixture
def compressor(counter, tight_budget):
    return HistoryCompressor(counter, tight_budget)


class TestCutover:
    """Test how many recent messages are kept verbatim."""

    def test_keeps_longest_fitting_suffix(self, compressor):
        # history_target=50, new=10 -> permitted=40
        assert compressor.select_keep_count([30, 15, 20, 20], new_tokens=10) == 2

    def test_exact_fit_is_kept(self, compressor):
        assert compressor.select_keep_count([5, 40], new_tokens=10) == 1

    def test_newest_alone_too_large_keeps_nothing(self, compressor):
        assert compressor.select_keep_count([1, 2, 41], new_tokens=10) == 0

    def test_every_message_over_target(self, compressor):
        assert compressor.select_keep_count([60, 70, 80], new_tokens=0) == 0

    def test_permitted_never_negative(self, compressor):
        assert compressor.permitted_tokens(500) == 0
        assert compressor.select_keep_count([1], new_tokens=500) == 0

    def test_empty_history(self, compressor):
        assert compressor.select_keep_count([], new_tokens=10) == 0

    def test_kept_cost_within_target(self, compressor):
        costs = [7, 9, 11, 13, 6, 8]
        keep = compressor.select_keep_count(costs, new_tokens=20)

        assert sum(costs[len(costs) - keep:]) <= 50 - 20


class TestSummaryRequest:
    """Test the request sent to the completion service."""

    def test_instruction_appended_last(self, compressor):
        discarded = [HumanMessage(content="hi", name="u0"), AIMessage(content="hello")]

        request = compressor.build_request(discarded)

        assert request[:2] == discarded
        assert isinstance(request[-1], SystemMessage)
        assert request[-1].content == PROMPT_COMPRESS

    def test_previous_summary_carried_first(self, compressor):
        request = compressor.build_request([AIMessage(content="x")], previous_summary="earlier")

        assert request[0].content == "earlier"
        assert request[0].name == SUMMARY_NAME
        assert request[-1].content == PROMPT_COMPRESS

    def test_previous_summary_dropped_when_window_full(self, counter):
        from chatAgent.context import BudgetConfig

        budget = BudgetConfig(
            max_tokens=100,
            summary_budget=60,
            summary_instruction_overhead=11,
            history_target=10,
            alias_budget=5,
        )
        compressor = HistoryCompressor(counter, budget)

        request = compressor.build_request(
            [AIMessage(content=words(10))],
            previous_summary=words(20),
        )

        assert all(m.name != SUMMARY_NAME for m in request)

    @pytest.mark.asyncio
    async def test_summarize_uses_summary_budget(self, compressor):
        completion = make_completion("  condensed  ")

        summary = await compressor.summarize([AIMessage(content="x")], completion, "gpt-4")

        assert summary == "condensed"
        kwargs = completion.complete.await_args.kwargs
        assert kwargs == {"model": "gpt-4", "max_tokens": 8000}

    @pytest.mark.asyncio
    async def test_summarize_rejects_multiple_choices(self, compressor):
        completion = make_completion("a", "b")

        with pytest.raises(ProtocolViolation) as exc_info:
            await compressor.summarize([AIMessage(content="x")], completion, "gpt-4")

        assert exc_info.value.choices == 2

    @pytest.mark.asyncio
    async def test_summarize_rejects_no_choices(self, compressor):
        with pytest.raises(ProtocolViolation):
            await compressor.summarize([AIMessage(content="x")], make_completion(), "gpt-4")
