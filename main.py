#!/usr/bin/env python3
"""chatAgent CLI Entrypoint

启动预算受限的多人对话命令行

使用方式:
    # 交互式模式（默认模型来自 .env 的 CHAT_MODEL）
    python main.py

    # 指定模型与压缩目标
    python main.py --model gpt-3.5-turbo --history-target 1024

    # 以指定参与者身份开始发言
    python main.py --speaker alice
"""
import argparse
import asyncio
import logging
import sys

from chatAgent.cli import GroupChatCLI
from chatAgent.config import get_settings
from chatAgent.errors import ConfigError
from chatAgent.runtime import build_conversation
from chatAgent.utils import setup_logging


def parse_args():
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description="chatAgent - 预算受限的多人对话",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--model", type=str, help="模型名称（覆盖 CHAT_MODEL）")
    parser.add_argument("--summary-budget", type=int, help="摘要预算（tokens）")
    parser.add_argument("--history-target", type=int, help="压缩后历史目标大小（tokens）")
    parser.add_argument("--alias-budget", type=int, help="别名表预算（tokens）")
    parser.add_argument("--speaker", type=str, default="user", help="初始发言者名称（默认: user）")

    return parser.parse_args()


async def main():
    """主函数"""
    args = parse_args()

    settings = get_settings()
    logger = setup_logging(getattr(logging, settings.log_level.upper(), logging.INFO))

    if args.model:
        settings.model = args.model
    if args.summary_budget:
        settings.budget.summary_budget = args.summary_budget
    if args.history_target:
        settings.budget.history_target = args.history_target
    if args.alias_budget:
        settings.budget.alias_budget = args.alias_budget

    try:
        conversation = build_conversation(settings)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        print(f"❌ 配置错误: {e.user_message}")
        sys.exit(1)

    cli = GroupChatCLI(conversation, speaker=args.speaker)
    await cli.run()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
