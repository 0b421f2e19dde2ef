# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines `GroupArgument`, a combinator that composes several Arguments into one
argument slot.

- `GroupMode.OR` models "one of several shapes", e.g. either a number or a
  keyword. Children are tried in declaration order and the first one that
  validates wins.
- `GroupMode.AND` models a fixed tuple validated as a unit. Every child has to
  validate in order against the shrinking remainder; the first failure is
  raised unchanged.

The value of a group is a dict mapping each resolved child's name to its value.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from parley.argument.base import Argument, ArgumentKind
from parley.exceptions import InvalidArgumentError, ParseError

if TYPE_CHECKING:
    from parley.argument.factory import ArgumentFactory


class GroupMode(Enum):
    OR = "or"
    AND = "and"

    @classmethod
    def _missing_(cls, value: object) -> GroupMode:
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        raise ValueError(
            f"Unexpected GroupArgument type, expected one of "
            f"{[member.value for member in cls]} but got {value!r}"
        )

    def __str__(self) -> str:
        return self.value


@dataclass
class GroupArgument(Argument):
    mode: GroupMode = GroupMode.OR
    arguments: list[Argument] = field(default_factory=list)
    factory: ArgumentFactory | None = field(default=None, repr=False, compare=False)

    kind: ClassVar[ArgumentKind] = ArgumentKind.GROUP

    def __post_init__(self) -> None:
        super().__post_init__()
        self.mode = GroupMode(self.mode)

    def validate(self, text: str) -> tuple[dict[str, Any], str]:
        match self.mode:
            case GroupMode.OR:
                return self._validate_or(text)
            case GroupMode.AND:
                return self._validate_and(text)
        raise InvalidArgumentError(f"Got invalid group type '{self.mode}'")

    def _validate_or(self, text: str) -> tuple[dict[str, Any], str]:
        errors: list[Exception] = []
        for argument in self.arguments:
            try:
                value, rest = argument.validate(text)
            except ParseError as error:
                errors.append(error)
                continue
            return {argument.name: value}, rest.strip()
        raise ParseError("No valid match found", self, errors)

    def _validate_and(self, text: str) -> tuple[dict[str, Any], str]:
        resolved: dict[str, Any] = {}
        for argument in self.arguments:
            value, text = argument.validate(text)
            text = text.strip()
            resolved[argument.name] = value
        return resolved, text

    def add_argument(
        self, argument: Argument | Callable[[ArgumentFactory], Argument]
    ) -> GroupArgument:
        """
        Adds a child argument.

        Accepts an Argument, or a callable receiving an `ArgumentFactory` and
        returning one: `group.add_argument(lambda arg: arg.number().set_name("n"))`
        """
        if callable(argument) and not isinstance(argument, Argument):
            from parley.argument.factory import ArgumentFactory

            argument = argument(self.factory or ArgumentFactory())
        if not isinstance(argument, Argument):
            raise InvalidArgumentError(
                f"Expected a callable or an instance of Argument but got {argument!r}"
            )
        self.arguments.append(argument)
        return self

    def get_label(self) -> str:
        if self.name != "_" or not self.arguments:
            return super().get_label()
        separator = "|" if self.mode is GroupMode.OR else " "
        return separator.join(argument.get_label() for argument in self.arguments)
