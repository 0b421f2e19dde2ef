# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""command.py

Defines `Command` and `CommandGroup`, the invocable nodes of a `Registry`.

A `Command` owns an ordered list of Arguments, permission predicates, one or
more handlers, help/manual texts and an optional `Throttle`. A `CommandGroup`
is a namespace of child Commands selected by the first token of the argument
text; it may carry its own handlers for the case where no sub command is given.

Dispatching a node runs, in order: the enabled check, the permission check, the
throttle, argument validation, and finally the handlers.

Handlers run sequentially in declaration order and every handler runs, even if
an earlier one failed. Failures are collected and raised together as a
`HandlerError` once all handlers have finished.
"""
from __future__ import annotations

import asyncio
import re
from enum import Enum
from typing import Any, Callable, ClassVar, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from parley.argument import Argument, ArgumentFactory, ArgumentKind
from parley.context import ExecutionContext
from parley.event import Identity, MessageEvent, Reply
from parley.exceptions import (
    CommandDisabledError,
    HandlerError,
    InvalidArgumentError,
    InvalidCommandNameError,
    ParseError,
    PermissionDeniedError,
    SubCommandNotFoundError,
    ThrottleError,
    TooManyArgumentsError,
)
from parley.hook_manager import HookManager, HookType
from parley.logger import logger
from parley.throttle import Throttle
from parley.utils import ensure_async, maybe_await, split_token

DEFAULT_PREFIX = "!"

PermissionPredicate = Callable[..., Any]
Handler = Callable[..., Any]


def check_command_name(name: str) -> str:
    """Validates and normalizes a command or alias name."""
    if not isinstance(name, str):
        raise InvalidCommandNameError("Expected a string as command name!")
    if len(name) < 1:
        raise InvalidCommandNameError("Command should have a minimum length of 1!")
    if re.search(r"\s", name):
        raise InvalidCommandNameError(f"Command '{name}' should not contain spaces!")
    return name.lower()


class CommandKind(Enum):
    COMMAND = "command"
    GROUP = "group"

    def __str__(self) -> str:
        return self.value


class ValidationResult(NamedTuple):
    result: dict[str, Any]
    remaining: str
    errors: list[ParseError]


class BaseCommand(BaseModel):
    """
    Fields shared by `Command` and `CommandGroup`.

    Attributes:
        name (str): Lower-cased command name without prefix.
        aliases (list[str]): Lower-cased alternative names.
        enabled (bool): Disabled commands fail with `CommandDisabledError`.
        forced_prefix (str): Prefix used instead of the registry's default prefix.
        help_text (str): Brief description shown by `help`.
        manual_lines (list[str]): Detailed description shown by `man`.
        permission_predicates (list[Callable]): `(identity) -> bool`, may be async.
        handlers (list[Callable]): `(identity, args, reply, event)`, may be async.
        throttle (Throttle | None): Rate limit charged once per dispatch.
        hooks (HookManager): Lifecycle hooks around the handlers.
    """

    name: str
    aliases: list[str] = Field(default_factory=list)
    enabled: bool = True
    forced_prefix: str = ""
    help_text: str = ""
    manual_lines: list[str] = Field(default_factory=list)
    permission_predicates: list[PermissionPredicate] = Field(default_factory=list)
    handlers: list[Handler] = Field(default_factory=list)
    throttle: Throttle | None = None
    hooks: HookManager = Field(default_factory=HookManager)

    kind: ClassVar[CommandKind]

    _registry: Any = PrivateAttr(default=None)
    _parent: Any = PrivateAttr(default=None)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, name: str) -> str:
        return check_command_name(name)

    @field_validator("aliases")
    @classmethod
    def normalize_aliases(cls, aliases: list[str]) -> list[str]:
        return [check_command_name(alias) for alias in aliases]

    @field_validator("handlers", mode="before")
    @classmethod
    def wrap_handlers_as_async(cls, handlers: list[Any]) -> list[Any]:
        return [ensure_async(handler) for handler in handlers]

    def alias(self, *names: str) -> BaseCommand:
        """Adds one or more aliases. Duplicate names are accepted but logged."""
        for name in names:
            name = check_command_name(name)
            if not self._is_safe_name(name):
                logger.warning(
                    "[Command:%s] alias '%s' is already in use, "
                    "commands may not work as expected.",
                    self.name,
                    name,
                )
            self.aliases.append(name)
        return self

    def _is_safe_name(self, name: str) -> bool:
        if self._parent is not None:
            return self._parent.is_safe_name(name)
        if self._registry is not None:
            return self._registry.is_safe_name(name)
        return True

    def enable(self) -> BaseCommand:
        self.enabled = True
        return self

    def disable(self) -> BaseCommand:
        self.enabled = False
        return self

    def help(self, text: str) -> BaseCommand:
        """Sets a help text, which should be a very brief description."""
        self.help_text = text
        return self

    def has_help(self) -> bool:
        return self.help_text != ""

    def manual(self, text: str) -> BaseCommand:
        """Adds a line to the manual. Can be called multiple times."""
        self.manual_lines.append(text)
        return self

    def clear_manual(self) -> BaseCommand:
        self.manual_lines = []
        return self

    def has_manual(self) -> bool:
        return len(self.manual_lines) > 0

    def get_manual(self) -> str:
        return "\n".join(self.manual_lines)

    def force_prefix(self, prefix: str) -> BaseCommand:
        self.forced_prefix = prefix
        return self

    def get_prefix(self) -> str:
        if self.forced_prefix:
            return self.forced_prefix
        if self._registry is not None:
            return self._registry.prefix
        return DEFAULT_PREFIX

    def exec(self, handler: Handler) -> BaseCommand:
        """Registers a handler, called with `(identity, args, reply, event)`."""
        self.handlers.append(ensure_async(handler))
        return self

    def add_throttle(self, throttle: Throttle) -> BaseCommand:
        self.throttle = throttle
        return self

    def check_permission(self, predicate: PermissionPredicate) -> BaseCommand:
        """Registers a permission predicate, called with the requesting identity."""
        if not callable(predicate):
            raise TypeError(f"{predicate} is not callable")
        self.permission_predicates.append(predicate)
        return self

    @property
    def full_name(self) -> str:
        return f"{self.get_prefix()}{self.name}"

    @property
    def full_aliases(self) -> list[str]:
        return [f"{self.get_prefix()}{alias}" for alias in self.aliases]

    @property
    def command_names(self) -> list[str]:
        return [self.name, *self.aliases]

    @property
    def full_command_names(self) -> list[str]:
        return [self.full_name, *self.full_aliases]

    def answers_to(self, name: str) -> bool:
        return name.lower() in self.command_names

    async def is_allowed(self, identity: Identity) -> bool:
        """Low level permission check: every predicate has to allow the identity."""
        results = await asyncio.gather(
            *(maybe_await(predicate(identity)) for predicate in self.permission_predicates)
        )
        return all(results)

    async def has_permission(self, identity: Identity) -> bool:
        return await self.is_allowed(identity)

    def handle_throttle(self, identity: Identity) -> None:
        if self.throttle is None:
            return
        if self.throttle.is_throttled(identity):
            retry_after = self.throttle.time_until_available(identity)
            raise ThrottleError(
                f"You can use this command again in {retry_after / 1000:.1f} seconds!",
                retry_after=retry_after,
            )
        self.throttle.use(identity)

    async def run_handlers(
        self,
        text: str,
        args: dict[str, Any],
        reply: Reply,
        event: MessageEvent,
    ) -> list[Any]:
        """Runs every handler in declaration order inside the hook lifecycle."""
        context = ExecutionContext(
            name=self.full_name,
            text=text,
            identity=event.identity,
            kwargs=args,
            action=self,
        )
        context.start_timer()
        try:
            await self.hooks.trigger(HookType.BEFORE, context)
            results: list[Any] = []
            errors: list[tuple[int, Exception]] = []
            for index, handler in enumerate(self.handlers):
                try:
                    results.append(await handler(event.identity, args, reply, event))
                except Exception as error:
                    logger.warning(
                        "[Command:%s] handler %s failed: %s",
                        self.name,
                        index,
                        error,
                    )
                    errors.append((index, error))
            if errors:
                raise HandlerError(
                    f"{len(errors)} of {len(self.handlers)} handlers of "
                    f"'{self.full_name}' failed.",
                    errors,
                )
            context.result = results
            await self.hooks.trigger(HookType.ON_SUCCESS, context)
            return results
        except Exception as error:
            context.exception = error
            await self.hooks.trigger_error(context)
            raise error
        finally:
            context.stop_timer()
            await self.hooks.trigger(HookType.AFTER, context)
            await self.hooks.trigger(HookType.ON_TEARDOWN, context)

    def _ensure_enabled(self) -> None:
        if not self.enabled:
            raise CommandDisabledError(f"Command {self.full_name} is disabled!")

    def get_usage(self) -> str:
        raise NotImplementedError

    async def dispatch(self, text: str, event: MessageEvent, reply: Reply) -> Any:
        raise NotImplementedError

    def __str__(self) -> str:
        return (
            f"{type(self).__name__}(name='{self.name}', aliases={self.aliases}, "
            f"enabled={self.enabled})"
        )


class Command(BaseCommand):
    """
    One invocable command with its own ordered Arguments.

    Example:
        registry.register_command("ping")
            .help("Replies with pong")
            .add_argument(lambda arg: arg.number().set_name("amount").optional(1))
            .exec(lambda identity, args, reply, event: reply("pong"))
    """

    arguments: list[Argument] = Field(default_factory=list)

    kind: ClassVar[CommandKind] = CommandKind.COMMAND

    def add_argument(
        self, argument: Argument | Callable[[ArgumentFactory], Argument]
    ) -> Command:
        """Adds an Argument, or a callable receiving an `ArgumentFactory`."""
        if callable(argument) and not isinstance(argument, Argument):
            factory = (
                self._registry.arguments if self._registry is not None else ArgumentFactory()
            )
            argument = argument(factory)
        if not isinstance(argument, Argument):
            raise InvalidArgumentError(
                f"Expected a callable or an instance of Argument but got {argument!r}"
            )
        self.arguments.append(argument)
        return self

    def get_usage(self) -> str:
        return " ".join([self.name, *(arg.get_manual() for arg in self.arguments)])

    def validate_args(self, text: str) -> ValidationResult:
        """
        Validates `text` against every Argument, left to right and without
        backtracking.

        A failing optional Argument records its default and consumes nothing;
        its `ParseError` is kept in `errors`. A failing required Argument
        raises immediately.
        """
        remaining = text.strip()
        result: dict[str, Any] = {}
        errors: list[ParseError] = []
        for argument in self.arguments:
            try:
                value, rest = argument.validate(remaining)
            except ParseError as error:
                if not argument.is_optional:
                    raise
                result[argument.name] = argument.default
                errors.append(error)
                continue
            self._record(result, argument, value)
            remaining = rest.strip()
        return ValidationResult(result, remaining, errors)

    @staticmethod
    def _record(result: dict[str, Any], argument: Argument, value: Any) -> None:
        match argument.kind:
            case ArgumentKind.GROUP:
                # unnamed groups only contribute their children
                if argument.name != "_":
                    result[argument.name] = value
                result.update(value)
            case (
                ArgumentKind.STRING
                | ArgumentKind.REST
                | ArgumentKind.NUMBER
                | ArgumentKind.IDENTITY
            ):
                result[argument.name] = value
            case _:
                raise InvalidArgumentError(f"Unknown argument kind '{argument.kind}'")

    def validate(self, text: str) -> dict[str, Any]:
        """
        Resolves the arguments of `text`.

        Raises:
            ParseError: A required Argument did not validate.
            TooManyArgumentsError: Text was left after all Arguments.
        """
        result, remaining, errors = self.validate_args(text)
        if len(remaining) > 0:
            raise TooManyArgumentsError(
                "Too many arguments!", errors[0] if errors else None
            )
        return result

    async def dispatch(self, text: str, event: MessageEvent, reply: Reply) -> list[Any]:
        self._ensure_enabled()
        if not await self.has_permission(event.identity):
            raise PermissionDeniedError("no permission to execute this command")
        self.handle_throttle(event.identity)
        args = self.validate(text)
        return await self.run_handlers(text, args, reply, event)


class CommandGroup(BaseCommand):
    """
    A namespace of child Commands, selected by the first token of the text.

    Example:
        money = registry.register_command_group("money")
        money.add_command("add").add_argument(lambda arg: arg.number().set_name("amount"))
    """

    commands: list[Command] = Field(default_factory=list)

    kind: ClassVar[CommandKind] = CommandKind.GROUP

    def is_safe_name(self, name: str) -> bool:
        name = check_command_name(name)
        return not any(
            command.enabled and command.answers_to(name) for command in self.commands
        )

    def add_command(self, name: str | Command) -> Command:
        """Adds a sub command, either by name or as a prepared `Command`."""
        command = name if isinstance(name, Command) else Command(name=name)
        if not self.is_safe_name(command.name):
            logger.warning(
                "[CommandGroup:%s] there is already a sub command named '%s', "
                "commands may not work as expected.",
                self.name,
                command.name,
            )
        command._registry = self._registry
        command._parent = self
        self.commands.append(command)
        return command

    def find_command_by_name(self, name: str) -> Command:
        name = name.lower()
        if len(name) == 0:
            raise SubCommandNotFoundError(
                f"No subcommand specified for Command {self.full_name}"
            )
        for command in self.commands:
            if command.answers_to(name):
                return command
        raise SubCommandNotFoundError(
            f'Command with name "{name}" has not been found on Command {self.full_name}!'
        )

    async def get_available_commands(
        self, identity: Identity | None = None, name: str | None = None
    ) -> list[Command]:
        """Enabled sub commands, optionally filtered by name and by permission."""
        commands = [
            command
            for command in self.commands
            if command.enabled and (not name or command.answers_to(name))
        ]
        if identity is None:
            return commands
        allowed = await asyncio.gather(
            *(command.has_permission(identity) for command in commands)
        )
        return [command for command, ok in zip(commands, allowed) if ok]

    def get_usage(self) -> str:
        return f"{self.full_name} {'|'.join(cmd.name for cmd in self.commands)}"

    async def has_permission(self, identity: Identity) -> bool:
        """
        The group's own predicates have to pass. A group with handlers of its
        own is then usable; otherwise at least one child has to be permitted.
        """
        if not await self.is_allowed(identity):
            return False
        if self.handlers:
            return True
        results = await asyncio.gather(
            *(command.has_permission(identity) for command in self.commands)
        )
        return any(results)

    def validate(self, text: str) -> dict[str, Any]:
        return {}

    async def dispatch(self, text: str, event: MessageEvent, reply: Reply) -> Any:
        self._ensure_enabled()
        if not await self.has_permission(event.identity):
            raise PermissionDeniedError("not enough permission to execute this command")
        token, rest = split_token(text.strip())
        if len(token) == 0 and self.handlers:
            self.handle_throttle(event.identity)
            return await self.run_handlers(text, {}, reply, event)
        return await self.find_command_by_name(token).dispatch(rest, event, reply)
