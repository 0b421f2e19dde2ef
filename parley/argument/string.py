# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""Text arguments: `StringArgument` consumes one token, `RestArgument` the whole rest."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

from parley.argument.base import Argument, ArgumentKind
from parley.exceptions import ParseError
from parley.utils import split_token


@dataclass
class StringArgument(Argument):
    """
    A single whitespace delimited word.

    Checks run in a fixed order and the first failing one determines the error:
    case folding, minimum length, maximum length, whitelist, pattern.
    """

    min_length: int | None = None
    max_length: int | None = None
    whitelist_words: list[str] | None = None
    pattern: re.Pattern[str] | str | None = None
    upper_case: bool = False
    lower_case: bool = False

    kind: ClassVar[ArgumentKind] = ArgumentKind.STRING

    def __post_init__(self) -> None:
        super().__post_init__()
        if isinstance(self.pattern, str):
            self.pattern = re.compile(self.pattern)
        if self.upper_case and self.lower_case:
            raise ValueError("upper_case and lower_case are mutually exclusive")

    def validate(self, text: str) -> tuple[str, str]:
        token, rest = split_token(text)
        return self.validate_string(token, rest)

    def validate_string(self, value: str, rest: str) -> tuple[str, str]:
        if self.upper_case:
            value = value.upper()
        if self.lower_case:
            value = value.lower()
        if self.min_length is not None and self.min_length > len(value):
            raise ParseError(
                "String length not greater or equal! "
                f"Expected at least {self.min_length}, but got {len(value)}",
                self,
            )
        if self.max_length is not None and self.max_length < len(value):
            raise ParseError(
                "String length not less or equal! "
                f"Maximum {self.max_length} chars allowed, but got {len(value)}",
                self,
            )
        if self.whitelist_words is not None and value not in self.whitelist_words:
            raise ParseError(
                f"Invalid Input for {value}. "
                f"Allowed words: {', '.join(self.whitelist_words)}",
                self,
            )
        if isinstance(self.pattern, re.Pattern) and not self.pattern.search(value):
            raise ParseError(
                f"Regex mismatch, the input '{value}' did not match "
                f"the expression {self.pattern.pattern}",
                self,
            )
        return value, rest

    def match(self, pattern: re.Pattern[str] | str) -> StringArgument:
        """The input must match the given regular expression."""
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self

    def min(self, length: int) -> StringArgument:
        self.min_length = length
        return self

    def max(self, length: int) -> StringArgument:
        self.max_length = length
        return self

    def force_upper_case(self) -> StringArgument:
        self.lower_case = False
        self.upper_case = True
        return self

    def force_lower_case(self) -> StringArgument:
        self.upper_case = False
        self.lower_case = True
        return self

    def whitelist(self, words: list[str]) -> StringArgument:
        """Restrict the input to the given words. Can be called multiple times."""
        if self.whitelist_words is None:
            self.whitelist_words = []
        self.whitelist_words.extend(words)
        return self


@dataclass
class RestArgument(StringArgument):
    """Consumes all of the remaining text. Only useful as the last argument."""

    kind: ClassVar[ArgumentKind] = ArgumentKind.REST

    def validate(self, text: str) -> tuple[str, str]:
        return self.validate_string(text, "")
