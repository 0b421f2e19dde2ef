# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines all custom exception classes used by Parley.

Dispatch errors describe why a single message could not be turned into a
handler call. They are recoverable: the `Dispatcher` catches each of them and
turns it into a reply for the user. The remaining errors signal misuse of the
registration surface or a broken configuration and are raised at startup.

Exception Hierarchy:
- ParleyError
    ├── DispatchError
    │     ├── ParseError
    │     ├── TooManyArgumentsError
    │     ├── CommandNotFoundError
    │     │     └── SubCommandNotFoundError
    │     ├── PermissionDeniedError
    │     ├── ThrottleError
    │     └── CommandDisabledError
    ├── HandlerError
    ├── IdentityNotFound
    ├── InvalidCommandNameError
    ├── InvalidArgumentError
    └── ConfigError
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from parley.argument.base import Argument


class ParleyError(Exception):
    """Base exception for Parley."""


class DispatchError(ParleyError):
    """Base class for errors raised while dispatching a single message."""


class ParseError(DispatchError):
    """Raised when an Argument could not be validated against the input."""

    def __init__(
        self,
        message: str,
        argument: Argument,
        errors: list[Exception] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.argument = argument
        self.errors: list[Exception] = errors or []


class TooManyArgumentsError(DispatchError):
    """Raised when text is left over after every Argument has been consumed."""

    def __init__(self, message: str, parse_error: ParseError | None = None):
        super().__init__(message)
        self.parse_error = parse_error


class CommandNotFoundError(DispatchError):
    """Raised when no registered command answers to a name."""


class SubCommandNotFoundError(CommandNotFoundError):
    """Raised when a CommandGroup has no child answering to a name."""


class PermissionDeniedError(DispatchError):
    """Raised when a permission predicate rejects the requesting identity."""


class ThrottleError(DispatchError):
    """Raised when the requesting identity has exhausted its throttle points."""

    def __init__(self, message: str, retry_after: float = 0):
        super().__init__(message)
        self.retry_after = retry_after


class CommandDisabledError(DispatchError):
    """Raised when a disabled command gets dispatched."""


class HandlerError(ParleyError):
    """Raised after a command ran all of its handlers and at least one failed."""

    def __init__(self, message: str, errors: list[tuple[int, Exception]]):
        super().__init__(message)
        self.errors = errors


class IdentityNotFound(ParleyError):
    """Raised by an identity resolver when the text holds no identity reference."""


class InvalidCommandNameError(ParleyError):
    """Raised when a command or alias name is empty or contains whitespace."""


class InvalidArgumentError(ParleyError):
    """Raised when an Argument is declared with an invalid name or definition."""


class ConfigError(ParleyError):
    """Raised when a configuration file can not be loaded."""
