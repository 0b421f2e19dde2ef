# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the `Registry`, the ordered collection of top-level commands and groups.

The Registry is built once at startup and then handed to a `Dispatcher`. It
owns the default prefix and the active identity resolver, which reaches every
`IdentityArgument` through `Registry.arguments`.

Example:
    registry = Registry(prefix="!")
    registry.register_command("ping").exec(lambda identity, args, reply, event: reply("pong"))
"""
from __future__ import annotations

import asyncio
from typing import Iterator

from parley.argument import ArgumentFactory, IdentityResolver
from parley.command import (
    DEFAULT_PREFIX,
    BaseCommand,
    Command,
    CommandGroup,
    check_command_name,
)
from parley.event import Identity
from parley.exceptions import InvalidCommandNameError
from parley.logger import logger
from parley.utils import split_token


class Registry:
    """
    Holds every top-level `Command` and `CommandGroup`.

    Attributes:
        prefix (str): Default prefix of all nodes without a forced prefix.
        arguments (ArgumentFactory): Argument factory bound to the identity resolver.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        identity_resolver: IdentityResolver | None = None,
    ) -> None:
        self.prefix = prefix
        self.arguments = ArgumentFactory(identity_resolver)
        self._commands: list[BaseCommand] = []

    @property
    def identity_resolver(self) -> IdentityResolver | None:
        return self.arguments.identity_resolver

    @property
    def commands(self) -> list[BaseCommand]:
        return list(self._commands)

    def register_command(self, name: str) -> Command:
        """Creates and registers a new Command."""
        return self.add(Command(name=name))

    def register_command_group(self, name: str) -> CommandGroup:
        """Creates and registers a new CommandGroup."""
        return self.add(CommandGroup(name=name))

    def add(self, node: BaseCommand):
        """Registers a prepared node; duplicate names are accepted and logged."""
        if not self.is_safe_name(node.name):
            logger.warning(
                "[Registry] there is already a command named '%s', "
                "commands may not work as expected.",
                node.name,
            )
        node._registry = self
        if isinstance(node, CommandGroup):
            for command in node.commands:
                command._registry = self
        self._commands.append(node)
        logger.debug("[Registry] registered %s '%s'", node.kind, node.full_name)
        return node

    @staticmethod
    def is_valid_command_name(name: str) -> bool:
        try:
            check_command_name(name)
        except InvalidCommandNameError:
            return False
        return True

    def is_safe_name(self, name: str) -> bool:
        """False when an enabled node already answers to `name`."""
        return len(self.find(check_command_name(name))) == 0

    def find(self, name: str) -> list[BaseCommand]:
        """Enabled nodes answering to the unprefixed `name`."""
        name = name.lower()
        return [node for node in self._commands if node.enabled and node.answers_to(name)]

    def resolve(self, token: str) -> list[BaseCommand]:
        """
        Nodes whose prefixed names match `token`.

        Enabled matches win; if there are none, disabled matches are returned so
        that their dispatch reports them as disabled.
        """
        token = token.lower()
        matches = [
            node
            for node in self._commands
            if token in (name.lower() for name in node.full_command_names)
        ]
        enabled = [node for node in matches if node.enabled]
        return enabled or matches

    def is_possible_command(self, text: str) -> bool:
        """Whether `text` starts with the prefix or with a prefixed command name."""
        if text.startswith(self.prefix):
            return True
        token, _ = split_token(text)
        return len(self.resolve(token)) > 0

    async def available_for(self, identity: Identity) -> list[BaseCommand]:
        """Enabled nodes the identity is permitted to use."""
        return await self.check_permissions(
            [node for node in self._commands if node.enabled], identity
        )

    @staticmethod
    async def check_permissions(
        nodes: list[BaseCommand], identity: Identity
    ) -> list[BaseCommand]:
        allowed = await asyncio.gather(*(node.has_permission(identity) for node in nodes))
        return [node for node, ok in zip(nodes, allowed) if ok]

    def __iter__(self) -> Iterator[BaseCommand]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __str__(self) -> str:
        return f"Registry(prefix='{self.prefix}', commands={len(self._commands)})"
