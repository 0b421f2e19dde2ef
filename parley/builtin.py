# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Built-in `help` and `man` commands.

- `help [filter]` lists every command the requesting identity may use and that
  has a help text. Group children are listed as `<group> <child>`.
- `man <command> [subcommand]` shows the usage and manual of a command, a group
  or one of its sub commands.
"""
from __future__ import annotations

import re
from typing import Any

from parley.command import BaseCommand, Command, CommandGroup, CommandKind
from parley.event import Identity, MessageEvent, Reply
from parley.formatting import PlainFormatter, TextFormatter
from parley.registry import Registry
from parley.utils import chunk_lines

DEFAULT_MAX_MESSAGE_LENGTH = 2000


def manual_of(command: BaseCommand) -> str:
    if command.has_manual():
        return command.get_manual()
    if command.has_help():
        return command.help_text
    return "No manual available"


def _compile_filter(text: str) -> re.Pattern[str]:
    try:
        return re.compile(text, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(text), re.IGNORECASE)


def register_builtin_commands(
    registry: Registry,
    formatter: TextFormatter | None = None,
    max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
) -> tuple[Command, Command]:
    """Registers `help` and `man` on `registry` and returns both commands."""
    formatter = formatter or PlainFormatter()
    bold = formatter.bold
    escape = formatter.escape

    async def help_handler(
        identity: Identity, args: dict[str, Any], reply: Reply, event: MessageEvent
    ) -> None:
        pattern = _compile_filter(args["filter"]) if args.get("filter") else None
        nodes = [
            node
            for node in await registry.available_for(identity)
            if node.has_help()
            and (
                pattern is None
                or pattern.search(node.name)
                or pattern.search(node.help_text)
            )
        ]
        reply(f"{bold(str(len(nodes)))} Commands found:")
        rows: list[tuple[str, str]] = []
        for node in nodes:
            match node.kind:
                case CommandKind.GROUP:
                    assert isinstance(node, CommandGroup)
                    for sub in await node.get_available_commands(identity):
                        rows.append((f"{node.full_name} {sub.name}", sub.help_text))
                case CommandKind.COMMAND:
                    rows.append((node.full_name, node.help_text))
        if not rows:
            return
        if formatter.listing_as_code:
            width = max(len(name) for name, _ in rows)
            lines = [f"{name.ljust(width)}  {help_text}" for name, help_text in rows]
            limit = max_message_length - len(formatter.code(""))
            for chunk in chunk_lines(lines, limit):
                reply(formatter.code(chunk))
            return
        lines = [f"{bold(name)} {escape(help_text)}" for name, help_text in rows]
        limit = max_message_length - len(formatter.block_prefix)
        for chunk in chunk_lines(lines, limit):
            reply(f"{formatter.block_prefix}{chunk}")

    async def man_handler(
        identity: Identity, args: dict[str, Any], reply: Reply, event: MessageEvent
    ) -> None:
        name = args["command"]
        if name.startswith(registry.prefix):
            name = name[len(registry.prefix) :]
        subcommand = args.get("subcommand")
        nodes = await Registry.check_permissions(registry.find(name), identity)
        if not nodes:
            reply(
                f"No command with name {bold(args['command'])} found! "
                "Did you misstype the command?"
            )
            return
        for node in nodes:
            match node.kind:
                case CommandKind.GROUP:
                    assert isinstance(node, CommandGroup)
                    if subcommand:
                        for sub in await node.get_available_commands(identity, subcommand):
                            reply(
                                f"{formatter.block_prefix}{bold('Usage:')} "
                                f"{escape(node.full_name)} {escape(sub.get_usage())}\n"
                                f"{escape(manual_of(sub))}"
                            )
                        continue
                    reply(f"{bold(node.full_name)} - {escape(manual_of(node))}")
                    for sub in await node.get_available_commands(identity):
                        reply(
                            f"{bold(f'{node.full_name} {sub.get_usage()}')} - "
                            f"{escape(sub.help_text)}"
                        )
                case CommandKind.COMMAND:
                    response = (
                        f"{formatter.block_prefix}Manual for command: "
                        f"{bold(node.full_name)}\n"
                        f"{bold('Usage:')} "
                        f"{escape(node.get_prefix() + node.get_usage())}\n"
                        f"{escape(manual_of(node))}"
                    )
                    if node.aliases:
                        response += f"\n{bold('Alias')}: {escape(', '.join(node.aliases))}"
                    reply(response)

    help_command = (
        registry.register_command("help")
        .help("Displays this text")
        .manual("Displays a list of useable commands")
        .manual("you can search/filter for a specific commands by adding a keyword")
        .add_argument(lambda arg: arg.string().set_name("filter").min(1).optional())
        .exec(help_handler)
    )
    man_command = (
        registry.register_command("man")
        .help("Displays detailed help about a command if available")
        .manual("Displays detailed usage help for a specific command")
        .manual("Arguments with Arrow Brackets (eg. < > ) are mandatory arguments")
        .manual("Arguments with Square Brackets (eg. [ ] ) are optional arguments")
        .add_argument(lambda arg: arg.string().set_name("command").min(1))
        .add_argument(
            lambda arg: arg.string()
            .set_name("subcommand")
            .min(1)
            .optional(display_default=False)
        )
        .exec(man_handler)
    )
    return help_command, man_command
