"""
Token 预算配置

构造时校验：
    history_target + summary_budget + alias_budget + summary_instruction_overhead < max_tokens
违反即抛出 ConfigError，绝不在运行时静默截断。
"""

from dataclasses import dataclass
import logging

from chatAgent.errors import ConfigError
from chatAgent.models.registry import ModelProfile

from .messages import summary_instruction, summary_message
from .token_counter import TokenCounter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetConfig:
    """静态预算配置（单位均为 token）"""
    max_tokens: int
    summary_budget: int
    summary_instruction_overhead: int
    history_target: int
    alias_budget: int

    def __post_init__(self):
        for field_name in ("max_tokens", "summary_budget", "history_target", "alias_budget"):
            if getattr(self, field_name) <= 0:
                raise ConfigError(f"{field_name} must be positive, got {getattr(self, field_name)}")
        if self.summary_instruction_overhead < 0:
            raise ConfigError(
                f"summary_instruction_overhead must not be negative, "
                f"got {self.summary_instruction_overhead}"
            )

        reserved = (
            self.history_target
            + self.summary_budget
            + self.alias_budget
            + self.summary_instruction_overhead
        )
        if reserved >= self.max_tokens:
            raise ConfigError(
                f"Context budget overrun. History target ({self.history_target}), "
                f"summary ({self.summary_budget}), alias ({self.alias_budget}) and "
                f"summary instruction ({self.summary_instruction_overhead}) budgets "
                f"must total less than {self.max_tokens} tokens"
            )

    @property
    def history_budget(self) -> int:
        """存储历史与生成可使用的硬上限"""
        return (
            self.max_tokens
            - self.alias_budget
            - self.summary_budget
            - self.summary_instruction_overhead
        )

    @classmethod
    def for_model(
        cls,
        profile: ModelProfile,
        counter: TokenCounter,
        summary_budget: int,
        history_target: int,
        alias_budget: int,
    ) -> "BudgetConfig":
        """
        按模型推导预算

        - 指令开销 = 压缩指令消息本身的 token 开销
        - 摘要预算 = 请求的摘要长度 + 空摘要消息的框架开销
        """
        instruction_overhead = counter.count_message(summary_instruction())
        summary_frame = counter.count_message(summary_message())

        budget = cls(
            max_tokens=profile.max_tokens,
            summary_budget=summary_budget + summary_frame,
            summary_instruction_overhead=instruction_overhead,
            history_target=history_target,
            alias_budget=alias_budget,
        )
        logger.debug(
            f"Budget for {profile.name}: max={budget.max_tokens}, "
            f"history_budget={budget.history_budget}, target={budget.history_target}, "
            f"summary={budget.summary_budget}, alias={budget.alias_budget}, "
            f"instruction={budget.summary_instruction_overhead}"
        )
        return budget
