import io
from argparse import Namespace

import pytest
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document
from rich.console import Console

from parley.__main__ import build_shell, get_parser, main
from parley.completer import CommandCompleter
from parley.config import ParleyConfig
from parley.console import PARLEY_THEME
from parley.dispatcher import Dispatcher
from parley.event import Identity
from parley.formatting import RichFormatter
from parley.registry import Registry
from parley.shell import ParleyShell


def make_registry() -> Registry:
    registry = Registry()
    registry.register_command("ping").alias("pong").exec(
        lambda identity, args, reply, event: reply(f"pong for {identity.display_name}")
    )
    registry.register_command("roll")
    money = registry.register_command_group("money")
    money.add_command("add")
    money.add_command("remove")
    registry.register_command("old").disable()
    return registry


def completions(registry: Registry, text: str) -> list[str]:
    completer = CommandCompleter(registry)
    return [
        completion.text
        for completion in completer.get_completions(Document(text), CompleteEvent())
    ]


def test_completes_command_names():
    assert completions(make_registry(), "!r") == ["!roll"]
    assert completions(make_registry(), "!p") == ["!ping", "!pong"]
    assert completions(make_registry(), "!po") == ["!pong"]
    assert "!old" not in completions(make_registry(), "")


def test_completes_sub_commands():
    assert completions(make_registry(), "!money a") == ["add"]
    assert completions(make_registry(), "!money ") == ["add", "remove"]
    assert completions(make_registry(), "!ping ") == []
    assert completions(make_registry(), "!money add ") == []


def make_shell(registry: Registry, formatter=None) -> tuple[ParleyShell, io.StringIO]:
    output = io.StringIO()
    console = Console(file=output, theme=PARLEY_THEME, width=120)
    dispatcher = Dispatcher(registry, formatter=formatter)
    shell = ParleyShell(dispatcher, identity=Identity(uid="me", name="Me"), console=console)
    return shell, output


@pytest.mark.asyncio
async def test_handle_line_prints_replies():
    shell, output = make_shell(make_registry())
    assert await shell.handle_line("!ping")
    assert "pong for Me" in output.getvalue()


@pytest.mark.asyncio
async def test_handle_line_exit_and_blank():
    shell, output = make_shell(make_registry())
    assert await shell.handle_line("   ")
    assert not await shell.handle_line("exit")
    assert output.getvalue() == ""


@pytest.mark.asyncio
async def test_rich_formatter_replies_keep_usage_brackets():
    registry = make_registry()
    registry.register_command("give").add_argument(
        lambda arg: arg.number().set_name("amount").optional(1)
    )
    shell, output = make_shell(registry, formatter=RichFormatter())
    await shell.handle_line("!give x")
    assert "Argument parsed with an error [amount=1]" in output.getvalue()


def test_build_shell_registers_builtins():
    args = Namespace(user="tester", debug_hooks=True)
    shell = build_shell(ParleyConfig(announce_unknown_command=False), args)
    names = [node.name for node in shell.dispatcher.registry]
    assert names == ["help", "man"]
    assert shell.identity.uid == "tester"
    assert shell.dispatcher.announce_unknown_command is False
    assert isinstance(shell.dispatcher.formatter, RichFormatter)


def test_parser_options():
    args = get_parser().parse_args(["--log-mode", "json", "--user", "bob"])
    assert args.log_mode == "json"
    assert args.user == "bob"
    assert args.config is None


def test_main_exits_on_missing_config(tmp_path):
    with pytest.raises(SystemExit) as error:
        main(["--config", str(tmp_path / "missing.yaml")])
    assert error.value.code == 1
