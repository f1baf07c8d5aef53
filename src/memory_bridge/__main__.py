"""
Diagnostic command line for a configured memory backend.

Usage:
    python -m memory_bridge --session s1 get
    python -m memory_bridge --session s1 window
    python -m memory_bridge --session s1 add --role human --content "hi"
    python -m memory_bridge --session s1 clear

Backend settings come from MEMORY_BRIDGE_* environment variables, .env or
the YAML config file (see memory_bridge.config).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from .config.loader import config_manager
from .memory import WindowedChatMemory
from .supply import supply_memory_from_settings
from .system.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memory_bridge", description="Inspect a session memory backend")
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--session", required=True, help="Session id")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("get", help="Print the full history")
    commands.add_parser("window", help="Print the context window")
    add = commands.add_parser("add", help="Append one message")
    add.add_argument("--role", choices=["human", "ai"], required=True)
    add.add_argument("--content", required=True)
    commands.add_parser("clear", help="Clear the session")
    return parser


def _print_messages(messages: Sequence[BaseMessage]) -> None:
    for message in messages:
        print(f"{message.type}: {message.content}")


async def _run(args: argparse.Namespace, memory: WindowedChatMemory) -> None:
    history = memory.chat_memory
    if args.command == "get":
        _print_messages(await history.aget_messages())
    elif args.command == "window":
        _print_messages(await memory.abuffer_as_messages())
    elif args.command == "add":
        message_cls = HumanMessage if args.role == "human" else AIMessage
        await history.aadd_message(message_cls(content=args.content))
    elif args.command == "clear":
        await history.aclear()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config_manager.load_config(config_path=args.config, force_reload=True)
    settings = config_manager.settings

    log_config = settings.logging
    setup_logging(
        level=args.log_level or log_config.level,
        log_file=Path(log_config.file) if log_config.file else None,
        redact_credentials=log_config.redact_credentials,
    )

    memory = supply_memory_from_settings(args.session, settings)
    asyncio.run(_run(args, memory))
    return 0


if __name__ == "__main__":
    sys.exit(main())
