# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the abstract `Argument` and the `ArgumentKind` discriminator.

An Argument is one named, typed slot of a command. Its `validate()` receives the
not yet consumed part of the argument text and returns the parsed value
together with the remaining text, or raises `ParseError`.

Arguments can be declared with keywords:

    NumberArgument(name="amount", minimum=1, maximum=10)

or with the chained builder style:

    NumberArgument().set_name("amount").min(1).max(10).optional(1)
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, TypeVar

from parley.exceptions import InvalidArgumentError

A = TypeVar("A", bound="Argument")

_NAME_PATTERN = re.compile(r"^[a-z0-9_]+$", re.IGNORECASE)


class ArgumentKind(Enum):
    """
    Discriminator for the Argument variants.

    Aliases:
        "client" → "identity"
    """

    STRING = "string"
    REST = "rest"
    NUMBER = "number"
    IDENTITY = "identity"
    GROUP = "group"

    @classmethod
    def _missing_(cls, value: object) -> ArgumentKind:
        if not isinstance(value, str):
            raise ValueError(f"Invalid {cls.__name__}: {value!r}")
        normalized = value.strip().lower()
        if normalized == "client":
            normalized = "identity"
        for member in cls:
            if member.value == normalized:
                return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Invalid {cls.__name__}: '{value}'. Must be one of: {valid}")

    def __str__(self) -> str:
        return self.value


def check_argument_name(name: str) -> str:
    if not isinstance(name, str):
        raise InvalidArgumentError("Argument name needs to be a string")
    if len(name) < 1:
        raise InvalidArgumentError("Argument name needs to be at least 1 char long")
    if not _NAME_PATTERN.match(name):
        raise InvalidArgumentError(
            f"Argument name '{name}' should contain only chars A-z, 0-9 and _"
        )
    return name


@dataclass
class Argument(ABC):
    """
    Base class of every argument type.

    Attributes:
        name (str): Key under which the parsed value is passed to handlers.
        display_name (str | None): Name shown in usage texts, defaults to `name`.
        is_optional (bool): Whether a failed parse falls back to `default`.
        default (Any): Fallback value of an optional argument.
        display_default (bool): Whether the usage text shows `=default`.
    """

    name: str = "_"
    display_name: str | None = None
    is_optional: bool = False
    default: Any = None
    display_default: bool = True

    kind: ClassVar[ArgumentKind]

    def __post_init__(self) -> None:
        check_argument_name(self.name)
        if self.display_name is None:
            self.display_name = self.name

    @abstractmethod
    def validate(self, text: str) -> tuple[Any, str]:
        """
        Validate the beginning of `text`.

        Returns:
            tuple[Any, str]: The parsed value and the text that was not consumed.

        Raises:
            ParseError: If the text does not satisfy this argument.
        """

    def set_name(self: A, name: str, display: str | None = None) -> A:
        """
        Sets the name used as key when the command gets dispatched.

        Args:
            name (str): Name of the argument, only A-z, 0-9 and _ are allowed.
            display (str | None): Name shown in usage texts, defaults to `name`.
        """
        self.name = check_argument_name(name)
        self.display_name = name if display is None else display
        return self

    def optional(self: A, default: Any = None, display_default: bool = True) -> A:
        """
        Marks the argument as optional.

        When the argument can not be parsed, `default` is used instead and the
        argument consumes nothing.
        """
        self.is_optional = True
        self.default = default
        self.display_default = display_default
        return self

    def has_default(self) -> bool:
        return self.default is not None

    def get_label(self) -> str:
        return self.display_name or self.name

    def get_manual(self) -> str:
        """Render the argument for usage texts: `<name>`, `[name]` or `[name=default]`."""
        label = self.get_label()
        if not self.is_optional:
            return f"<{label}>"
        if self.display_default and self.has_default():
            return f"[{label}={self.default}]"
        return f"[{label}]"

    def __str__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}', optional={self.is_optional})"
