"""
上下文管理模块

提供预算受限的多人会话上下文，支持：
- 精确的 Token 计数（按模型 profile 计算消息框架开销）
- 超出历史预算时自动摘要最旧的历史，保留最近消息原文
- 参与者别名注册表（u{i} 位置索引）
"""

from .aliases import ParticipantRef, UserAliasRegistry
from .budget import BudgetConfig
from .compressor import CompressionResult, HistoryCompressor
from .conversation import ConversationContext
from .messages import (
    ASSISTANT,
    SYSTEM,
    AssistantSender,
    Message,
    Sender,
    SystemSender,
    UserSender,
)
from .token_counter import TokenCounter

__all__ = [
    "ParticipantRef",
    "UserAliasRegistry",
    "BudgetConfig",
    "CompressionResult",
    "HistoryCompressor",
    "ConversationContext",
    "ASSISTANT",
    "SYSTEM",
    "AssistantSender",
    "Message",
    "Sender",
    "SystemSender",
    "UserSender",
    "TokenCounter",
]
