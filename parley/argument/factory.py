# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Argument factory used by the registration surface.

`Command.add_argument()` and `GroupArgument.add_argument()` accept a callable
which receives an `ArgumentFactory`:

    registry.register_command("ping").add_argument(
        lambda arg: arg.number().set_name("amount").min(1).max(10).optional(1)
    )

The factory owned by a `Registry` hands the registry's identity resolver to
every `IdentityArgument` it creates.
"""
from __future__ import annotations

from parley.argument.base import Argument, ArgumentKind
from parley.argument.group import GroupArgument, GroupMode
from parley.argument.identity import IdentityArgument, IdentityResolver
from parley.argument.number import NumberArgument
from parley.argument.string import RestArgument, StringArgument


class ArgumentFactory:
    """Creates fresh, unnamed Arguments of each kind."""

    def __init__(self, identity_resolver: IdentityResolver | None = None):
        self.identity_resolver = identity_resolver

    def string(self) -> StringArgument:
        return StringArgument()

    def number(self) -> NumberArgument:
        return NumberArgument()

    def identity(self) -> IdentityArgument:
        return IdentityArgument(resolver=self.identity_resolver)

    client = identity

    def rest(self) -> RestArgument:
        return RestArgument()

    def or_(self) -> GroupArgument:
        return GroupArgument(mode=GroupMode.OR, factory=self)

    def and_(self) -> GroupArgument:
        return GroupArgument(mode=GroupMode.AND, factory=self)

    def create(self, kind: ArgumentKind | GroupMode | str) -> Argument:
        """Create an argument from its kind name: string, number, identity, rest, or, and."""
        if isinstance(kind, str) and kind.strip().lower() in ("or", "and"):
            kind = GroupMode(kind)
        if isinstance(kind, GroupMode):
            return GroupArgument(mode=kind, factory=self)
        match ArgumentKind(kind):
            case ArgumentKind.STRING:
                return self.string()
            case ArgumentKind.REST:
                return self.rest()
            case ArgumentKind.NUMBER:
                return self.number()
            case ArgumentKind.IDENTITY:
                return self.identity()
            case ArgumentKind.GROUP:
                return self.or_()
        raise ValueError(f"Unknown argument kind '{kind}'")


def create_argument(kind: ArgumentKind | str) -> Argument:
    return ArgumentFactory().create(kind)


def create_group_argument(mode: GroupMode | str) -> GroupArgument:
    return GroupArgument(mode=GroupMode(mode))
