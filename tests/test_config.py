import logging
import textwrap

import pytest

from parley.argument import GroupArgument, GroupMode, NumberArgument, StringArgument
from parley.command import CommandGroup
from parley.config import LogLevel, ParleyConfig, build_registry, import_handler, load_config
from parley.dispatcher import Dispatcher
from parley.event import Identity, MessageEvent
from parley.exceptions import ConfigError

HANDLERS = textwrap.dedent(
    """
    def roll(identity, args, reply, event):
        reply(f"{identity.display_name} rolled a d{args['sides']}")


    async def add(identity, args, reply, event):
        reply(f"added {args['amount']}")


    NOT_CALLABLE = 42
    """
)


@pytest.fixture
def handlers_module(tmp_path, monkeypatch):
    (tmp_path / "parley_config_handlers.py").write_text(HANDLERS, encoding="UTF-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    return "parley_config_handlers"


def write(tmp_path, name: str, content: str):
    path = tmp_path / name
    path.write_text(textwrap.dedent(content), encoding="UTF-8")
    return path


def test_defaults():
    config = ParleyConfig()
    assert config.prefix == "!"
    assert config.announce_unknown_command is True
    assert config.log_level is LogLevel.INFO
    assert config.max_message_length == 2000
    assert config.commands == []


def test_load_yaml(tmp_path, handlers_module):
    path = write(
        tmp_path,
        "parley.yaml",
        f"""
        prefix: "?"
        announce_unknown_command: false
        log_level: debug
        self_uid: bot
        commands:
          - name: roll
            handler: {handlers_module}.roll
            aliases: [dice]
            help: Rolls a dice
            manual:
              - Rolls a dice with the given number of sides
            arguments:
              - kind: number
                name: sides
                integer: true
                minimum: 2
                optional: true
                default: 6
          - name: money
            help: Manages money
            commands:
              - name: add
                handler: {handlers_module}:add
                arguments:
                  - {{kind: number, name: amount, positive: true}}
        """,
    )
    config = load_config(path)
    assert config.prefix == "?"
    assert config.announce_unknown_command is False
    assert config.log_level is LogLevel.DEBUG
    assert config.self_uid == "bot"

    registry = build_registry(config)
    roll, money = list(registry)
    assert roll.full_command_names == ["?roll", "?dice"]
    assert roll.get_manual() == "Rolls a dice with the given number of sides"
    sides = roll.arguments[0]
    assert isinstance(sides, NumberArgument)
    assert (sides.minimum, sides.integer_only, sides.default) == (2, True, 6)
    assert isinstance(money, CommandGroup)
    assert money.get_usage() == "?money add"


@pytest.mark.asyncio
async def test_configured_commands_dispatch(tmp_path, handlers_module):
    path = write(
        tmp_path,
        "parley.toml",
        f"""
        prefix = "!"

        [[commands]]
        name = "roll"
        handler = "{handlers_module}.roll"

        [[commands.arguments]]
        kind = "number"
        name = "sides"
        integer = true
        optional = true
        default = 6

        [[commands]]
        name = "money"

        [[commands.commands]]
        name = "add"
        handler = "{handlers_module}.add"

        [[commands.commands.arguments]]
        kind = "number"
        name = "amount"
        integer = true
        """,
    )
    registry = load_config(path).build_registry()
    replies = []
    dispatcher = Dispatcher(registry, lambda target, event: replies.append)
    alice = Identity(uid="alice-uid", name="Alice")
    await dispatcher.handle_message(MessageEvent(text="!roll", identity=alice))
    await dispatcher.handle_message(MessageEvent(text="!roll 20", identity=alice))
    await dispatcher.handle_message(MessageEvent(text="!money add 5", identity=alice))
    assert replies == ["Alice rolled a d6", "Alice rolled a d20", "added 5"]


def test_string_and_group_arguments():
    config = ParleyConfig.model_validate(
        {
            "commands": [
                {
                    "name": "mass",
                    "arguments": [
                        {
                            "kind": "or",
                            "name": "target",
                            "arguments": [
                                {"kind": "string", "name": "word", "whitelist": ["all"]},
                                {"kind": "client", "name": "who"},
                            ],
                        },
                        {
                            "kind": "rest",
                            "name": "message",
                            "min_length": 3,
                            "pattern": "^[a-z ]+$",
                            "lower_case": True,
                        },
                    ],
                }
            ]
        }
    )
    (mass,) = list(build_registry(config))
    target, message = mass.arguments
    assert isinstance(target, GroupArgument)
    assert target.mode is GroupMode.OR
    assert [child.name for child in target.arguments] == ["word", "who"]
    assert isinstance(message, StringArgument)
    assert mass.validate("all HELLO there") == {
        "target": {"word": "all"},
        "word": "all",
        "message": "hello there",
    }


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="No such config file"):
        load_config(tmp_path / "missing.yaml")


def test_unsupported_format(tmp_path):
    path = write(tmp_path, "parley.json", "{}")
    with pytest.raises(ConfigError, match="Unsupported config format: .json"):
        load_config(path)


def test_non_mapping_document(tmp_path):
    path = write(tmp_path, "parley.yaml", "- a\n- b\n")
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(path)


def test_invalid_values(tmp_path):
    path = write(tmp_path, "parley.yaml", "log_level: LOUD\n")
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(path)
    path = write(tmp_path, "bad.yaml", "commands:\n  - name: x\n    arguments:\n      - kind: boolean\n")
    with pytest.raises(ConfigError):
        load_config(path)


def test_unparsable_toml(tmp_path):
    path = write(tmp_path, "parley.toml", "prefix = \n")
    with pytest.raises(ConfigError, match="Could not parse"):
        load_config(path)


def test_empty_yaml_is_default_config(tmp_path):
    path = write(tmp_path, "parley.yaml", "")
    assert load_config(path) == ParleyConfig()


def test_import_handler(handlers_module):
    assert callable(import_handler(f"{handlers_module}.roll"))
    assert callable(import_handler(f"{handlers_module}:add"))
    with pytest.raises(ConfigError, match="Invalid handler path"):
        import_handler("roll")
    with pytest.raises(ConfigError, match="Could not import"):
        import_handler("parley_no_such_module.roll")
    with pytest.raises(ConfigError, match="has no attribute"):
        import_handler(f"{handlers_module}.missing")
    with pytest.raises(ConfigError, match="is not callable"):
        import_handler(f"{handlers_module}.NOT_CALLABLE")


def test_group_arguments_are_rejected():
    config = ParleyConfig.model_validate(
        {
            "commands": [
                {
                    "name": "money",
                    "arguments": [{"kind": "number", "name": "amount"}],
                    "commands": [{"name": "add"}],
                }
            ]
        }
    )
    with pytest.raises(ConfigError, match="can not declare arguments"):
        build_registry(config)


def test_log_level_conversion():
    assert LogLevel("warning") is LogLevel.WARNING
    assert LogLevel.DEBUG.to_logging() == logging.DEBUG
    with pytest.raises(ValueError):
        ParleyConfig(log_mode="xml")
