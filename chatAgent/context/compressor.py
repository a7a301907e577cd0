"""
历史压缩器

负责：
1. 从最新消息向前累加，选出可完整保留的最近消息（keep_count）
2. 将被丢弃的旧消息 + 固定压缩指令发送给 LLM 生成摘要
3. 生成压缩报告
"""

from typing import List, Optional, Sequence
from dataclasses import dataclass
import logging

from langchain_core.messages import BaseMessage

from chatAgent.errors import ProtocolViolation

from .budget import BudgetConfig
from .messages import summary_instruction, summary_message
from .token_counter import TokenCounter

logger = logging.getLogger(__name__)


@dataclass
class CompressionResult:
    """压缩结果"""
    summary: str
    before_count: int
    after_count: int  # = keep_count
    before_tokens: int
    after_tokens: int
    compression_ratio: float

    @property
    def summarized_count(self) -> int:
        return self.before_count - self.after_count


class HistoryCompressor:
    """历史压缩器（只计算与调用 LLM，不修改会话状态）"""

    def __init__(self, counter: TokenCounter, budget: BudgetConfig):
        self.counter = counter
        self.budget = budget

    def permitted_tokens(self, new_tokens: int) -> int:
        return max(0, self.budget.history_target - new_tokens)

    def select_keep_count(self, message_costs: Sequence[int], new_tokens: int) -> int:
        """
        计算保留的最近消息数

        从后往前扫描，保留总开销不超过 permitted 的最长后缀；
        如果最新一条消息本身就超出 permitted，则 keep_count = 0。
        """
        permitted = self.permitted_tokens(new_tokens)
        kept_tokens = 0
        keep_count = 0
        for cost in reversed(message_costs):
            if kept_tokens + cost > permitted:
                break
            kept_tokens += cost
            keep_count += 1

        logger.debug(
            f"Cutover: permitted={permitted} tokens, keep {keep_count}/{len(message_costs)} "
            f"messages (~{kept_tokens} tokens)"
        )
        return keep_count

    def build_request(
        self,
        discarded: List[BaseMessage],
        previous_summary: Optional[str] = None,
    ) -> List[BaseMessage]:
        """
        构造摘要请求：[旧摘要] + 被丢弃的消息 + 压缩指令

        旧摘要只在请求和摘要输出都能放进窗口时才带上，否则丢弃。
        """
        request = list(discarded)
        request.append(summary_instruction())

        if previous_summary:
            carried = summary_message(previous_summary)
            needed = (
                self.counter.count_messages(request)
                + self.counter.count_message(carried)
                + self.budget.summary_budget
            )
            if needed < self.budget.max_tokens:
                request.insert(0, carried)
            else:
                logger.debug(
                    f"Previous summary dropped from compression request "
                    f"({needed} >= {self.budget.max_tokens} tokens)"
                )
        return request

    async def summarize(
        self,
        discarded: List[BaseMessage],
        completion,
        model: str,
        previous_summary: Optional[str] = None,
    ) -> str:
        """
        使用 LLM 生成摘要

        Raises:
            ProtocolViolation: 返回的 choice 数量不是 1
        """
        request = self.build_request(discarded, previous_summary)
        logger.info(f"Compressing {len(discarded)} messages in single LLM call")

        choices = await completion.complete(
            request,
            model=model,
            max_tokens=self.budget.summary_budget,
        )
        if len(choices) != 1:
            raise ProtocolViolation(len(choices))

        return str(choices[0].content).strip()
