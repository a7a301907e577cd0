"""
Token 计数器

负责：
1. 包装注入的编码器（text → token ids，仅使用其长度）
2. 计算单条聊天消息的 token 开销（role + content + 可选 name）
3. 计算消息序列的 token 开销（逐条求和，不做缓存）
"""

from typing import Callable, Iterable, Sequence

from langchain_core.messages import BaseMessage
import logging

from chatAgent.models.registry import ModelProfile

logger = logging.getLogger(__name__)

Encoder = Callable[[str], Sequence[int]]

ROLE_LABELS = {
    "system": "System",
    "ai": "Assistant",
    "human": "User",
}


def role_label(message: BaseMessage) -> str:
    """返回参与计数的角色标签"""
    try:
        return ROLE_LABELS[message.type]
    except KeyError:
        raise ValueError(f"Unsupported chat message type: {message.type}") from None


class TokenCounter:
    """基于模型 profile 的 token 计数器"""

    def __init__(self, encode: Encoder, profile: ModelProfile):
        self.encode = encode
        self.profile = profile

    @classmethod
    def for_profile(cls, profile: ModelProfile) -> "TokenCounter":
        """使用 tiktoken 为模型选择编码（构造时选定一次，之后复用）"""
        import tiktoken

        encoding = tiktoken.get_encoding(profile.encoding)
        logger.debug(f"Loaded tiktoken encoding '{profile.encoding}' for model {profile.name}")
        return cls(encoding.encode_ordinary, profile)

    def count_text(self, text: str) -> int:
        return len(self.encode(text)) if text else 0

    def count_message(self, message: BaseMessage) -> int:
        """
        单条消息开销：

        tokens_per_message + content + role 标签
        + (tokens_per_name + name，仅当消息带 name)
        """
        tokens = (
            self.profile.tokens_per_message
            + self.count_text(str(message.content))
            + self.count_text(role_label(message))
        )
        name = getattr(message, "name", None)
        if name:
            tokens += self.profile.tokens_per_name + self.count_text(name)
        return tokens

    def count_messages(self, messages: Iterable[BaseMessage]) -> int:
        return sum(self.count_message(m) for m in messages)
