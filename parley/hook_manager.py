# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the `HookManager` and `HookType` used to observe the dispatch lifecycle.

Commands run their hooks around their handlers; the `Dispatcher` runs its hooks
around the dispatch of every resolved command. When a dispatch is rejected the
outcome specific hook (`on_denied`, `on_throttled` or `on_invalid`) runs before
the generic `on_error` hooks:

    hooks = HookManager()
    hooks.register("throttled", lambda context: metrics.incr("throttled"))
    hooks.register(HookType.ON_ERROR, alert)

A failing hook is logged and skipped, it never changes the dispatch outcome.
"""
from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable, Union

from parley.context import ExecutionContext
from parley.exceptions import (
    CommandDisabledError,
    CommandNotFoundError,
    ParseError,
    PermissionDeniedError,
    ThrottleError,
    TooManyArgumentsError,
)
from parley.logger import logger
from parley.utils import maybe_await

Hook = Union[
    Callable[[ExecutionContext], None], Callable[[ExecutionContext], Awaitable[None]]
]


class HookType(Enum):
    """
    Lifecycle phases and dispatch outcomes a hook can be registered for.

    Aliases:
        "success" → "on_success"
        "error" → "on_error"
        "denied" → "on_denied"
        "throttled" → "on_throttled"
        "invalid" → "on_invalid"
        "teardown" → "on_teardown"
    """

    BEFORE = "before"
    ON_SUCCESS = "on_success"
    ON_DENIED = "on_denied"
    ON_THROTTLED = "on_throttled"
    ON_INVALID = "on_invalid"
    ON_ERROR = "on_error"
    AFTER = "after"
    ON_TEARDOWN = "on_teardown"

    @classmethod
    def _missing_(cls, value: object) -> HookType:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if not normalized.startswith("on_") and normalized not in ("before", "after"):
                normalized = f"on_{normalized}"
            for member in cls:
                if member.value == normalized:
                    return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Invalid {cls.__name__}: {value!r}. Must be one of: {valid}")

    @classmethod
    def for_error(cls, error: BaseException | None) -> HookType | None:
        """The outcome hook of a rejected dispatch, None for other failures."""
        match error:
            case PermissionDeniedError() | CommandDisabledError():
                return cls.ON_DENIED
            case ThrottleError():
                return cls.ON_THROTTLED
            case ParseError() | TooManyArgumentsError() | CommandNotFoundError():
                return cls.ON_INVALID
        return None

    def __str__(self) -> str:
        return self.value


class HookManager:
    """Tracks sync and async callbacks per lifecycle phase."""

    def __init__(self) -> None:
        self._hooks: dict[HookType, list[Hook]] = {
            hook_type: [] for hook_type in HookType
        }

    def register(self, hook_type: HookType | str, hook: Hook) -> Hook:
        """
        Register a new hook for a given lifecycle phase or outcome.

        Raises:
            ValueError: If the hook type is invalid.
            TypeError: If the hook is not callable.
        """
        if not callable(hook):
            raise TypeError(f"{hook!r} is not callable")
        self._hooks[HookType(hook_type)].append(hook)
        return hook

    def clear(self, hook_type: HookType | str | None = None) -> None:
        if hook_type is None:
            for registered in self._hooks.values():
                registered.clear()
        else:
            self._hooks[HookType(hook_type)].clear()

    async def trigger(self, hook_type: HookType, context: ExecutionContext) -> None:
        """Invoke all hooks registered for `hook_type` in registration order."""
        for hook in self._hooks[hook_type]:
            try:
                await maybe_await(hook(context))
            except Exception as hook_error:
                logger.warning(
                    "[Hook:%s] raised an exception during '%s' for '%s': %s",
                    getattr(hook, "__name__", repr(hook)),
                    hook_type,
                    context.name,
                    hook_error,
                    exc_info=hook_error,
                )

    async def trigger_error(self, context: ExecutionContext) -> None:
        """Run the outcome hook of `context.exception`, then the `on_error` hooks."""
        outcome = HookType.for_error(context.exception)
        if outcome is not None:
            await self.trigger(outcome, context)
        await self.trigger(HookType.ON_ERROR, context)

    def __str__(self) -> str:
        lines = ["<HookManager>"]
        for hook_type, hooks in self._hooks.items():
            names = ", ".join(getattr(hook, "__name__", repr(hook)) for hook in hooks)
            lines.append(f"  {hook_type.value}: {names or '-'}")
        return "\n".join(lines)
