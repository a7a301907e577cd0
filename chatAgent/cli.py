"""GroupChatCLI - Command-Line Interface for a budgeted group conversation.

Several participants share one terminal; `/user <name>` switches who is speaking.
Each message is added to the conversation and the assistant is asked for a reply,
which it may decline by returning empty text.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from chatAgent.context import AssistantSender, ConversationContext, Message, ParticipantRef, UserSender
from chatAgent.errors import ChatContextError
from chatAgent.utils.logging_utils import log_agent_response, log_compression, log_error, log_user_message

LOGGER = logging.getLogger(__name__)

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
ASSISTANT_COLOR = "\033[36m"
USER_COLORS = ["\033[32m", "\033[33m", "\033[35m", "\033[34m", "\033[31m"]


def colorize(text: str, color: str) -> str:
    return f"{color}{text}{RESET}"


class GroupChatCLI:
    """Terminal loop around a ConversationContext.

    Provides:
    - Command routing (/quit, /help, /user, /anon, /users, /history, /summary)
    - Main input/output loop
    - Speaker switching between participants
    """

    COMMANDS: Dict[str, str] = {
        "/quit": "退出程序",
        "/exit": "退出程序",
        "/help": "显示帮助信息",
        "/user <name>": "切换发言者（不存在则注册）",
        "/anon": "以新的匿名参与者发言",
        "/users": "列出参与者及其别名",
        "/history": "显示当前保留的历史",
        "/summary": "显示当前摘要",
    }

    def __init__(self, conversation: ConversationContext, speaker: str = "user"):
        self.conversation = conversation
        self.speaker: ParticipantRef = self._find_or_register(speaker)
        self._command_handlers = self._build_command_handlers()
        self._running = False

        LOGGER.info(f"{self.__class__.__name__} initialized (model={conversation.model})")

    def _build_command_handlers(self) -> Dict[str, Callable]:
        return {
            "/quit": self._handle_quit,
            "/exit": self._handle_quit,
            "/help": self._handle_help,
            "/user": self._handle_user,
            "/anon": self._handle_anon,
            "/users": self._handle_users,
            "/history": self._handle_history,
            "/summary": self._handle_summary,
        }

    # ========== Participants ==========

    def _find_or_register(self, name: str) -> ParticipantRef:
        for index, aliases in self.conversation.users:
            if name in aliases:
                return self.conversation.users.ref(index)
        return self.conversation.users.register_existing([name])

    def speaker_label(self, ref: ParticipantRef) -> str:
        index = self.conversation.users.find_index(ref)
        name = ref.display_name or f"u{index}"
        color = USER_COLORS[(index or 0) % len(USER_COLORS)]
        return colorize(name, BOLD + color)

    def format_message(self, message: Message) -> str:
        if isinstance(message.sender, UserSender):
            label = self.speaker_label(message.sender.ref)
        elif isinstance(message.sender, AssistantSender):
            label = colorize("assistant", BOLD + ASSISTANT_COLOR)
        else:
            label = colorize("system", DIM)
        return f"{label}> {message.text}"

    # ========== Main Loop ==========

    async def run(self):
        """Main CLI loop."""
        self._running = True
        self.print_welcome()

        while self._running:
            try:
                user_input = await self.get_input()

                if not user_input:
                    continue

                if user_input.startswith("/"):
                    should_continue = await self.handle_command(user_input)
                    if not should_continue:
                        break
                else:
                    await self.handle_user_message(user_input)

            except (KeyboardInterrupt, EOFError):
                print("\n再见！")
                LOGGER.info("Session interrupted by user")
                break

        LOGGER.info("CLI shutting down")

    def print_welcome(self):
        budget = self.conversation.budget
        print("\n" + "=" * 60)
        print("  chatAgent - 预算受限的多人对话")
        print("=" * 60)
        print(f"\n配置:")
        print(f"  - 模型: {self.conversation.model}")
        print(f"  - 上下文窗口: {budget.max_tokens:,} tokens")
        print(f"  - 历史预算: {budget.history_budget:,} tokens (压缩目标 {budget.history_target:,})")
        print(f"\n输入 /help 查看命令列表")
        print("=" * 60 + "\n")

    async def get_input(self) -> str:
        prompt = f"{self.speaker_label(self.speaker)}> "
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, lambda: input(prompt).strip())

    async def handle_command(self, cmd: str) -> bool:
        parts = cmd.split(maxsplit=1)
        cmd_name = parts[0].lower()
        cmd_arg = parts[1] if len(parts) > 1 else None

        handler = self._command_handlers.get(cmd_name)
        if handler:
            return await handler(cmd_arg)

        print(f"❌ 未知命令: {cmd_name}")
        print("   输入 /help 查看可用命令")
        return True

    async def handle_user_message(self, text: str):
        """Add the speaker's message, then ask the assistant for a reply."""
        label = self.speaker.display_name or "anonymous"
        log_user_message(LOGGER, label, text)

        try:
            result = await self.conversation.add_message(text, UserSender(self.speaker))
            if result is not None:
                log_compression(LOGGER, result)
                print(colorize(
                    f"[历史已压缩: {result.before_count} → {result.after_count} 条消息]", DIM
                ))

            response = await self.conversation.generate_response()
            log_agent_response(LOGGER, response.text if response else None)
            if response is None:
                return

            print(self.format_message(response))
            result = await self.conversation.add_message(response.text, response.sender)
            if result is not None:
                log_compression(LOGGER, result)

        except ChatContextError as e:
            log_error(LOGGER, e, context="handle_user_message")
            print(f"❌ {e.user_message}")

    # ========== Command Handlers ==========

    async def _handle_quit(self, arg: Optional[str]) -> bool:
        print("会话结束。")
        LOGGER.info("Exit requested by /quit command")
        return False

    async def _handle_help(self, arg: Optional[str]) -> bool:
        print("\n可用命令:")
        for cmd, desc in self.COMMANDS.items():
            print(f"  {cmd:<20} {desc}")
        print()
        return True

    async def _handle_user(self, arg: Optional[str]) -> bool:
        if not arg:
            print("❌ 请提供参与者名称，例如: /user alice")
            return True
        self.speaker = self._find_or_register(arg.strip())
        return True

    async def _handle_anon(self, arg: Optional[str]) -> bool:
        self.speaker = self.conversation.users.register_new()
        return True

    async def _handle_users(self, arg: Optional[str]) -> bool:
        print()
        for index, aliases in self.conversation.users:
            names = ", ".join(aliases) if aliases else "(unknown)"
            print(f"  u{index}: {names}")
        print()
        return True

    async def _handle_history(self, arg: Optional[str]) -> bool:
        history: List[Message] = list(self.conversation.history)
        if not history:
            print("(空)\n")
            return True
        print()
        for message in history:
            print(self.format_message(message))
        print(colorize(
            f"\n[{self.conversation.history_tokens():,} / {self.conversation.history_budget:,} tokens]\n",
            DIM,
        ))
        return True

    async def _handle_summary(self, arg: Optional[str]) -> bool:
        summary = self.conversation.summary
        print(f"\n{summary}\n" if summary else "(无摘要)\n")
        return True
