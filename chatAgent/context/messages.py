"""
会话消息模型

Sender 有三种形态：System / Assistant / User(参与者引用)。
Message 创建后不可变，历史按时间顺序追加。
"""

from dataclasses import dataclass
from typing import Optional, Union

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .aliases import ParticipantRef

PROMPT_COMPRESS = "Summarize the chat history precisely and concisely"
SUMMARY_NAME = "Context"
ALIASES_NAME = "Aliases"


@dataclass(frozen=True)
class SystemSender:
    pass


@dataclass(frozen=True)
class AssistantSender:
    pass


@dataclass(frozen=True)
class UserSender:
    ref: ParticipantRef


Sender = Union[SystemSender, AssistantSender, UserSender]

SYSTEM = SystemSender()
ASSISTANT = AssistantSender()


@dataclass(frozen=True)
class Message:
    """一条会话消息"""
    sender: Sender
    text: str

    @property
    def participant(self) -> Optional[ParticipantRef]:
        if isinstance(self.sender, UserSender):
            return self.sender.ref
        return None

    def to_chat_message(self, user_index: Optional[int] = None) -> BaseMessage:
        """
        转换为 chat completion 消息

        user_index 以 `u{i}` 作为 name 标签传给模型；真实别名不直接写入 name。
        """
        name = f"u{user_index}" if user_index is not None else None

        if isinstance(self.sender, SystemSender):
            return SystemMessage(content=self.text, name=name)
        if isinstance(self.sender, AssistantSender):
            return AIMessage(content=self.text, name=name)
        return HumanMessage(content=self.text, name=name)


def summary_instruction() -> SystemMessage:
    """压缩时追加在历史末尾的固定指令"""
    return SystemMessage(content=PROMPT_COMPRESS)


def summary_message(summary: Optional[str] = None) -> SystemMessage:
    """承载摘要的前置上下文消息（name=Context）"""
    return SystemMessage(content=summary or "", name=SUMMARY_NAME)


def alias_message(table: Optional[str] = None) -> SystemMessage:
    """承载参与者别名表的上下文消息（name=Aliases）"""
    return SystemMessage(content=table or "", name=ALIASES_NAME)
