# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""config.py
Configuration loader for Parley deployments.

A configuration file (YAML or TOML) holds the dispatch policy and, optionally,
declarative commands whose handlers are imported by dotted path:

    prefix: "!"
    announce_unknown_command: true
    log_level: INFO
    commands:
      - name: roll
        handler: my_bot.dice.roll
        help: Rolls a dice
        arguments:
          - kind: number
            name: sides
            integer: true
            minimum: 2
            optional: true
            default: 6
      - name: money
        commands:
          - name: add
            handler: my_bot.money.add
            arguments:
              - {kind: number, name: amount, positive: true}
"""
from __future__ import annotations

import importlib
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import toml
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from parley.argument import (
    Argument,
    ArgumentFactory,
    ArgumentKind,
    GroupArgument,
    IdentityResolver,
    NumberArgument,
    StringArgument,
)
from parley.command import DEFAULT_PREFIX, Command, CommandGroup
from parley.exceptions import ConfigError
from parley.logger import logger
from parley.registry import Registry


class LogLevel(Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"

    @classmethod
    def _missing_(cls, value: object) -> LogLevel:
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.value == normalized:
                    return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Invalid {cls.__name__}: '{value}'. Must be one of: {valid}")

    def to_logging(self) -> int:
        return logging.getLevelName(self.value)


def import_handler(dotted_path: str) -> Callable[..., Any]:
    """
    Resolve a dotted path such as `my_bot.dice.roll` (or `my_bot.dice:roll`)
    to a callable.

    Raises:
        ConfigError: If the module or attribute does not exist or is not callable.
    """
    if ":" in dotted_path:
        module_path, _, attr = dotted_path.partition(":")
    else:
        module_path, _, attr = dotted_path.rpartition(".")
    if not module_path or not attr:
        raise ConfigError(f"Invalid handler path: '{dotted_path}'")
    try:
        module = importlib.import_module(module_path)
    except ImportError as error:
        logger.error("Failed to import module '%s': %s", module_path, error)
        raise ConfigError(
            f"Could not import '{dotted_path}': {error}. Ensure the module is "
            "installed and discoverable via PYTHONPATH."
        ) from error
    try:
        handler = getattr(module, attr)
    except AttributeError as error:
        logger.error(
            "Module '%s' does not have attribute '%s': %s", module_path, attr, error
        )
        raise ConfigError(
            f"Module '{module_path}' has no attribute '{attr}'"
        ) from error
    if not callable(handler):
        raise ConfigError(f"Resolved attribute '{dotted_path}' is not callable.")
    return handler


class RawArgument(BaseModel):
    """Declarative argument of a configured command."""

    kind: str
    name: str = "_"
    display_name: str | None = None
    optional: bool = False
    default: Any = None
    display_default: bool = True

    min_length: int | None = None
    max_length: int | None = None
    whitelist: list[str] = Field(default_factory=list)
    pattern: str | None = None
    upper_case: bool = False
    lower_case: bool = False

    minimum: float | None = None
    maximum: float | None = None
    integer: bool = False
    positive: bool = False
    negative: bool = False

    arguments: list[RawArgument] = Field(default_factory=list)

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, kind: str) -> str:
        kind = kind.strip().lower()
        if kind in ("or", "and"):
            return kind
        return ArgumentKind(kind).value

    def to_argument(self, factory: ArgumentFactory) -> Argument:
        argument = factory.create(self.kind)
        argument.set_name(self.name, self.display_name)
        match argument:
            case GroupArgument():
                for child in self.arguments:
                    argument.add_argument(child.to_argument(factory))
            case NumberArgument():
                argument.minimum = self.minimum
                argument.maximum = self.maximum
                argument.integer_only = self.integer
                argument.positive_only = self.positive
                argument.negative_only = self.negative
            case StringArgument():
                argument.min_length = self.min_length
                argument.max_length = self.max_length
                if self.whitelist:
                    argument.whitelist(self.whitelist)
                if self.pattern is not None:
                    argument.match(self.pattern)
                if self.upper_case:
                    argument.force_upper_case()
                if self.lower_case:
                    argument.force_lower_case()
        if self.optional:
            argument.optional(self.default, self.display_default)
        return argument


class RawCommand(BaseModel):
    """Declarative command; a `commands` list turns it into a group."""

    name: str
    handler: str | None = None
    aliases: list[str] = Field(default_factory=list)
    help: str = ""
    manual: list[str] | str = Field(default_factory=list)
    prefix: str = ""
    enabled: bool = True
    arguments: list[RawArgument] = Field(default_factory=list)
    commands: list[RawCommand] = Field(default_factory=list)

    @property
    def is_group(self) -> bool:
        return len(self.commands) > 0

    def configure(self, command: Command | CommandGroup, factory: ArgumentFactory) -> None:
        command.alias(*self.aliases)
        if self.help:
            command.help(self.help)
        manual = [self.manual] if isinstance(self.manual, str) else self.manual
        for line in manual:
            command.manual(line)
        if self.prefix:
            command.force_prefix(self.prefix)
        if not self.enabled:
            command.disable()
        if self.handler:
            command.exec(import_handler(self.handler))
        if isinstance(command, Command):
            for raw_argument in self.arguments:
                command.add_argument(raw_argument.to_argument(factory))
        elif self.arguments:
            raise ConfigError(
                f"Command group '{self.name}' can not declare arguments, "
                "declare them on its sub commands instead."
            )


class ParleyConfig(BaseModel):
    """Parley configuration model."""

    prefix: str = DEFAULT_PREFIX
    announce_unknown_command: bool = True
    log_level: LogLevel = LogLevel.INFO
    log_mode: str | None = None
    self_uid: str | None = None
    max_message_length: int = 2000
    commands: list[RawCommand] = Field(default_factory=list)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, level: Any) -> LogLevel:
        return LogLevel(level)

    @field_validator("log_mode")
    @classmethod
    def validate_log_mode(cls, mode: str | None) -> str | None:
        if mode is not None and mode not in ("cli", "json"):
            raise ValueError(f"Invalid log mode: {mode}. Must be one of: cli, json")
        return mode

    def build_registry(self, identity_resolver: IdentityResolver | None = None) -> Registry:
        return build_registry(self, identity_resolver)


def build_registry(
    config: ParleyConfig, identity_resolver: IdentityResolver | None = None
) -> Registry:
    """Create a `Registry` holding every configured command."""
    registry = Registry(prefix=config.prefix, identity_resolver=identity_resolver)
    for raw_command in config.commands:
        if raw_command.is_group:
            group = registry.register_command_group(raw_command.name)
            raw_command.configure(group, registry.arguments)
            for raw_child in raw_command.commands:
                if raw_child.is_group:
                    raise ConfigError(
                        f"Sub command '{raw_child.name}' of '{raw_command.name}' "
                        "can not have sub commands of its own."
                    )
                raw_child.configure(group.add_command(raw_child.name), registry.arguments)
        else:
            command = registry.register_command(raw_command.name)
            raw_command.configure(command, registry.arguments)
    logger.debug("Loaded %s commands from configuration.", len(config.commands))
    return registry


def load_config(file_path: Path | str) -> ParleyConfig:
    """
    Load Parley configuration from a YAML or TOML file.

    Args:
        file_path (Path | str): Path to the config file.

    Returns:
        ParleyConfig: The validated configuration.

    Raises:
        ConfigError: If the file is missing, has an unsupported format, can not
            be parsed, or does not hold a valid configuration mapping.
    """
    path = Path(file_path)
    if not path.is_file():
        raise ConfigError(f"No such config file: {file_path}")

    suffix = path.suffix
    try:
        with path.open("r", encoding="UTF-8") as config_file:
            if suffix in (".yaml", ".yml"):
                raw_config = yaml.safe_load(config_file)
            elif suffix == ".toml":
                raw_config = toml.load(config_file)
            else:
                raise ConfigError(f"Unsupported config format: {suffix}")
    except (yaml.YAMLError, toml.TomlDecodeError) as error:
        raise ConfigError(f"Could not parse {path}: {error}") from error

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a mapping.\n"
            "Example:\n"
            "prefix: '!'\n"
            "commands:\n"
            "  - name: 'roll'\n"
            "    handler: 'my_bot.dice.roll'"
        )

    try:
        return ParleyConfig.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigError(f"Invalid configuration in {path}:\n{error}") from error
