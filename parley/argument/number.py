# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""Numeric argument."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

from parley.argument.base import Argument, ArgumentKind
from parley.exceptions import ParseError
from parley.utils import split_token

_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def format_number(number: float) -> str:
    if float(number).is_integer():
        return str(int(number))
    return str(number)


@dataclass
class NumberArgument(Argument):
    """
    A single token parsed as a number.

    Checks run in order: numeric syntax, minimum, maximum, integer, positive,
    negative. The value is a `float`, or an `int` when `integer` is set.
    """

    minimum: float | None = None
    maximum: float | None = None
    integer_only: bool = False
    positive_only: bool = False
    negative_only: bool = False

    kind: ClassVar[ArgumentKind] = ArgumentKind.NUMBER

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.positive_only and self.negative_only:
            raise ValueError("positive_only and negative_only are mutually exclusive")

    def validate(self, text: str) -> tuple[float | int, str]:
        token, rest = split_token(text)
        if not _NUMBER.match(token):
            raise ParseError(f'"{token}" is not a valid number', self)
        number = float(token)
        shown = format_number(number)
        if self.minimum is not None and self.minimum > number:
            raise ParseError(
                "Number not greater or equal! "
                f"Expected at least {format_number(self.minimum)}, but got {shown}",
                self,
            )
        if self.maximum is not None and self.maximum < number:
            raise ParseError(
                "Number not less or equal! "
                f"Expected at most {format_number(self.maximum)}, but got {shown}",
                self,
            )
        if self.integer_only and not number.is_integer():
            raise ParseError(f"Given Number is not an Integer! ({shown})", self)
        if self.positive_only and number <= 0:
            raise ParseError(f"Given Number is not Positive! ({shown})", self)
        if self.negative_only and number >= 0:
            raise ParseError(f"Given Number is not Negative! ({shown})", self)
        if self.integer_only:
            return int(number), rest
        return number, rest

    def min(self, minimum: float) -> NumberArgument:
        self.minimum = minimum
        return self

    def max(self, maximum: float) -> NumberArgument:
        self.maximum = maximum
        return self

    def integer(self) -> NumberArgument:
        """The number must not have a fractional part."""
        self.integer_only = True
        return self

    def positive(self) -> NumberArgument:
        self.negative_only = False
        self.positive_only = True
        return self

    def negative(self) -> NumberArgument:
        self.positive_only = False
        self.negative_only = True
        return self
