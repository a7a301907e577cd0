"""
会话上下文 - 统一入口

负责：
1. 持有参与者注册表、消息历史、摘要和预算配置（唯一的可变状态所有者）
2. 每条新消息做预算检查，超限时先压缩历史再追加
3. 渲染历史并请求模型生成回复

一个 ConversationContext 同一时刻只允许一个操作在进行（调用方负责串行化）。
挂起点只有对 completion service 的调用。
"""

from typing import List, Optional, Tuple, Union
import logging

from langchain_core.messages import BaseMessage

from chatAgent.errors import BudgetExceeded, ProtocolViolation
from chatAgent.models.registry import ModelProfile, ModelProfileRegistry, build_default_registry

from .aliases import ParticipantRef, UserAliasRegistry
from .budget import BudgetConfig
from .compressor import CompressionResult, HistoryCompressor
from .messages import ASSISTANT, Message, Sender, UserSender, alias_message, summary_message
from .token_counter import TokenCounter

logger = logging.getLogger(__name__)


class ConversationContext:
    """
    预算受限的多人会话上下文

    职责：
    1. add_message: 解析发送者 → 预算检查 → (压缩) → 追加
    2. compress_history: 用摘要替换最旧的一段历史
    3. generate_response: 摘要 + 别名表 + 历史 → 模型回复
    """

    def __init__(
        self,
        model: str,
        profile: ModelProfile,
        counter: TokenCounter,
        budget: BudgetConfig,
        completion,
        registry: Optional[UserAliasRegistry] = None,
    ):
        self.model = model
        self.profile = profile
        self.counter = counter
        self.budget = budget
        self.completion = completion
        self.users = registry if registry is not None else UserAliasRegistry()
        self.compressor = HistoryCompressor(counter, budget)

        self._messages: List[Message] = []
        self._summary: Optional[str] = None

    @classmethod
    def create(
        cls,
        model: str,
        completion,
        *,
        summary_budget: int,
        history_target: int,
        alias_budget: int,
        counter: Optional[TokenCounter] = None,
        profiles: Optional[ModelProfileRegistry] = None,
    ) -> "ConversationContext":
        """
        解析模型 profile、编码和预算后创建上下文

        Raises:
            ConfigError: 未知模型或预算配置越界
        """
        profiles = profiles or build_default_registry()
        profile = profiles.resolve(model)
        counter = counter or TokenCounter.for_profile(profile)
        budget = BudgetConfig.for_model(
            profile,
            counter,
            summary_budget=summary_budget,
            history_target=history_target,
            alias_budget=alias_budget,
        )
        return cls(model, profile, counter, budget, completion)

    # ===== 状态访问 =====

    @property
    def history(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def summary(self) -> Optional[str]:
        return self._summary

    @property
    def history_budget(self) -> int:
        return self.budget.history_budget

    def get_user_aliases(self, index: int) -> Optional[List[str]]:
        return self.users.get_aliases(index)

    def _user_index(self, message: Message) -> Optional[int]:
        ref = message.participant
        if ref is None:
            return None
        return self.users.find_index(ref)

    def chat_to_history(self, last_n: Optional[int] = None) -> List[BaseMessage]:
        """将最近 last_n 条（默认全部）历史渲染为 chat 消息，User 发送者带 u{i} 标签"""
        count = len(self._messages) if last_n is None else min(max(last_n, 0), len(self._messages))
        selected = self._messages[len(self._messages) - count:]
        return [m.to_chat_message(self._user_index(m)) for m in selected]

    def history_tokens(self) -> int:
        """当前存储历史的 token 开销（不含摘要）"""
        return self.counter.count_messages(self.chat_to_history())

    # ===== 消息写入 =====

    async def add_message(
        self,
        text: str,
        sender: Union[Sender, ParticipantRef],
    ) -> Optional[CompressionResult]:
        """
        追加一条消息，必要时先压缩历史

        Returns:
            本次触发的压缩结果；未触发压缩时为 None

        Raises:
            BudgetExceeded: 消息本身超过历史预算，状态不变
            ProtocolViolation: 摘要请求返回的 choice 数量不是 1，状态不变
        """
        if isinstance(sender, ParticipantRef):
            sender = UserSender(sender)

        user_index = None
        if isinstance(sender, UserSender):
            user_index = self.users.ensure(sender.ref)
            sender = UserSender(self.users.ref(user_index))

        message = Message(sender=sender, text=text)
        history_cost = self.history_tokens()
        incoming_cost = self.counter.count_message(message.to_chat_message(user_index))

        result = None
        if history_cost + incoming_cost >= self.history_budget:
            logger.info(
                f"History over budget: {history_cost} + {incoming_cost} >= "
                f"{self.history_budget} tokens"
            )
            result = await self.compress_history(incoming_cost)

        self._messages.append(message)
        return result

    async def add(self, message: Message) -> Optional[CompressionResult]:
        return await self.add_message(message.text, message.sender)

    # ===== 压缩 =====

    async def compress_history(self, new_tokens: int) -> Optional[CompressionResult]:
        """
        用摘要替换最旧的一段历史，为 new_tokens 腾出空间

        摘要每次重新生成并整体替换旧摘要。LLM 调用成功前不修改任何状态。
        """
        if new_tokens >= self.history_budget:
            raise BudgetExceeded(needed=new_tokens, available=self.history_budget - 1)

        rendered = self.chat_to_history()
        costs = [self.counter.count_message(m) for m in rendered]
        before_tokens = sum(costs)
        keep_count = self.compressor.select_keep_count(costs, new_tokens)
        discard_count = len(rendered) - keep_count

        if discard_count == 0:
            logger.debug("Nothing to compress")
            return None

        summary = await self.compressor.summarize(
            rendered[:discard_count],
            self.completion,
            self.model,
            previous_summary=self._summary,
        )

        self._summary = summary
        del self._messages[:discard_count]

        after_tokens = sum(costs[discard_count:])
        result = CompressionResult(
            summary=summary,
            before_count=len(rendered),
            after_count=keep_count,
            before_tokens=before_tokens,
            after_tokens=after_tokens,
            compression_ratio=after_tokens / before_tokens if before_tokens > 0 else 1.0,
        )
        logger.info(
            f"Compression complete: {result.before_count} → {result.after_count} messages, "
            f"{before_tokens} → {after_tokens} tokens ({result.compression_ratio:.1%})"
        )
        return result

    # ===== 生成 =====

    def build_prompt(self) -> List[BaseMessage]:
        """摘要（若有）+ 别名表（若有）+ 完整历史"""
        prompt: List[BaseMessage] = []
        if self._summary is not None:
            prompt.append(summary_message(self._summary))

        table_budget = self.budget.alias_budget - self.counter.count_message(alias_message())
        table = self.users.render_alias_table(self.counter, table_budget)
        if table:
            prompt.append(alias_message(table))

        prompt.extend(self.chat_to_history())
        return prompt

    async def generate_response(self) -> Optional[Message]:
        """
        请求模型对当前历史生成回复

        回复不会自动写入历史，由调用方决定是否 add_message。

        Returns:
            助手消息；模型返回空文本（选择沉默）时为 None

        Raises:
            ProtocolViolation: choice 数量不是 1
        """
        prompt = self.build_prompt()
        choices = await self.completion.complete(
            prompt,
            model=self.model,
            max_tokens=self.history_budget,
        )
        if len(choices) != 1:
            logger.error(f"Completion returned {len(choices)} choices for model {self.model}")
            raise ProtocolViolation(len(choices))

        content = str(choices[0].content)
        if not content:
            logger.debug("Model returned empty content; no response warranted")
            return None
        return Message(sender=ASSISTANT, text=content)
