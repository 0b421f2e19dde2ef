# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the `Dispatcher`, the entry point for inbound chat messages.

`Dispatcher.handle_message(event)`:

1. ignores events from the dispatcher's own identity,
2. ignores text that can not be a command,
3. splits the text into a command token and the argument text,
4. resolves the token against the `Registry`, announcing unknown commands
   when configured to do so,
5. dispatches every resolved node and turns each failure into a reply.

Nothing raised by a command escapes `handle_message`: dispatch errors become
templated replies, everything else is logged with its traceback and reported
generically.
"""
from __future__ import annotations

import asyncio
import inspect
from typing import Any

from parley.command import BaseCommand
from parley.context import ExecutionContext
from parley.event import MessageEvent, Reply, ReplyFactory, ReplyTarget
from parley.exceptions import (
    CommandDisabledError,
    CommandNotFoundError,
    DispatchError,
    HandlerError,
    ParseError,
    PermissionDeniedError,
    ThrottleError,
    TooManyArgumentsError,
)
from parley.formatting import PlainFormatter, TextFormatter
from parley.hook_manager import HookManager, HookType
from parley.logger import logger
from parley.registry import Registry
from parley.utils import split_command

UNHANDLED_ERROR_MESSAGE = (
    "An unhandled exception occurred, check the logs for more information"
)


class Dispatcher:
    """
    Routes `MessageEvent`s to the commands of a `Registry`.

    Args:
        registry (Registry): The commands to dispatch to.
        reply_factory (ReplyFactory | None): Maps `(reply_target, event)` to a
            reply delegate. Without one, or when it returns None, replies are
            logged as undelivered.
        announce_unknown_command (bool): Reply when no command matches.
        self_uid (str | None): Messages from this uid are ignored.
        formatter (TextFormatter | None): Markup of generated replies.
        hooks (HookManager | None): Hooks run around every node dispatch.
    """

    def __init__(
        self,
        registry: Registry,
        reply_factory: ReplyFactory | None = None,
        *,
        announce_unknown_command: bool = True,
        self_uid: str | None = None,
        formatter: TextFormatter | None = None,
        hooks: HookManager | None = None,
    ) -> None:
        self.registry = registry
        self.reply_factory = reply_factory
        self.announce_unknown_command = announce_unknown_command
        self.self_uid = self_uid
        self.formatter = formatter or PlainFormatter()
        self.hooks = hooks or HookManager()
        self._pending_replies: set[asyncio.Future] = set()

    def get_reply(self, event: MessageEvent) -> Reply:
        """
        Builds the reply delegate for `event`.

        Asynchronous delegates are scheduled right away, so handlers may call
        `reply()` without awaiting it. The returned future can still be awaited.
        A delegate or factory that raises is logged, the message is dropped.
        """
        delegate = None
        if self.reply_factory is not None:
            try:
                delegate = self.reply_factory(event.reply_target, event)
            except Exception as error:
                logger.error(
                    "[Dispatcher] reply factory failed for %s: %s",
                    event.reply_target.name.lower(),
                    error,
                    exc_info=error,
                )
        if delegate is None:
            delegate = self._undelivered_reply(event.reply_target)

        def reply(message: str) -> asyncio.Future | None:
            try:
                result = delegate(message)
            except Exception as error:
                logger.error(
                    "[Dispatcher] failed to deliver reply %r: %s",
                    message,
                    error,
                    exc_info=error,
                )
                return None
            if not inspect.isawaitable(result):
                return None
            future = asyncio.ensure_future(result)
            self._pending_replies.add(future)
            future.add_done_callback(self._pending_replies.discard)
            return future

        return reply

    @staticmethod
    def _undelivered_reply(target: ReplyTarget) -> Reply:
        def reply(message: str) -> None:
            logger.warning(
                "[Dispatcher] no reply channel set for %s, message %r not sent!",
                target.name.lower(),
                message,
            )

        return reply

    async def flush_replies(self) -> None:
        """Wait for every scheduled asynchronous reply."""
        while self._pending_replies:
            pending = list(self._pending_replies)
            results = await asyncio.gather(*pending, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.error(
                        "[Dispatcher] failed to deliver a reply: %s",
                        result,
                        exc_info=result,
                    )
            self._pending_replies.difference_update(pending)

    async def handle_message(self, event: MessageEvent) -> None:
        """Handles one inbound chat message."""
        if self.self_uid is not None and event.identity.uid == self.self_uid:
            logger.debug("[Dispatcher] will not handle messages from myself")
            return
        if not self.registry.is_possible_command(event.text):
            logger.debug("[Dispatcher] no possible command in %r", event.text)
            return
        token, arg_text = split_command(event.text)
        nodes = self.registry.resolve(token)
        reply = self.get_reply(event)
        try:
            if not nodes:
                if self.announce_unknown_command:
                    reply(self.render_not_found(token))
                return
            for node in nodes:
                await self.dispatch(node, arg_text, event, reply)
        finally:
            await self.flush_replies()

    async def dispatch(
        self, node: BaseCommand, arg_text: str, event: MessageEvent, reply: Reply
    ) -> Any:
        """Dispatches one node and turns any failure into a reply."""
        identity = event.identity
        context = ExecutionContext(
            name=node.full_name,
            text=arg_text,
            identity=identity,
            action=node,
        )
        context.start_timer()
        logger.info("%s (%s) used %s", identity.display_name, identity.uid, node.full_name)
        try:
            await self.hooks.trigger(HookType.BEFORE, context)
            context.result = await node.dispatch(arg_text, event, reply)
            await self.hooks.trigger(HookType.ON_SUCCESS, context)
            logger.debug(
                '[Dispatcher] Command "%s" finished successfully after %.0fms',
                node.full_name,
                (context.duration or 0) * 1000,
            )
            return context.result
        except DispatchError as error:
            context.exception = error
            logger.debug(
                '[Dispatcher] Command "%s" failed after %.0fms: %s',
                node.full_name,
                (context.duration or 0) * 1000,
                error,
            )
            if isinstance(error, PermissionDeniedError):
                logger.info(
                    "%s (%s) is missing permissions for %s",
                    identity.display_name,
                    identity.uid,
                    node.full_name,
                )
            await self.hooks.trigger_error(context)
            reply(self.render_error(node, error))
        except HandlerError as error:
            context.exception = error
            for index, handler_error in error.errors:
                logger.error(
                    "[Dispatcher] handler %s of %s raised %s: %s",
                    index,
                    node.full_name,
                    type(handler_error).__name__,
                    handler_error,
                    exc_info=handler_error,
                )
            await self.hooks.trigger_error(context)
            reply(UNHANDLED_ERROR_MESSAGE)
        except Exception as error:
            context.exception = error
            logger.error(
                "[Dispatcher] unhandled exception in %s: %s",
                node.full_name,
                error,
                exc_info=error,
            )
            await self.hooks.trigger_error(context)
            reply(UNHANDLED_ERROR_MESSAGE)
        finally:
            context.stop_timer()
            await self.hooks.trigger(HookType.AFTER, context)
            await self.hooks.trigger(HookType.ON_TEARDOWN, context)
        return None

    def render_not_found(self, token: str) -> str:
        bold = self.formatter.bold
        return (
            f"There is no enabled command named {bold(token.lower())}, "
            f"check {bold(f'{self.registry.prefix}help')} "
            "to get a list of available commands!"
        )

    def render_error(self, node: BaseCommand, error: DispatchError) -> str:
        """Renders a dispatch error as the reply for the requesting user."""
        formatter = self.formatter
        bold = formatter.bold
        man = bold(f"{self.registry.prefix}man {node.name}")
        help_command = bold(f"{self.registry.prefix}help")
        lines: list[str] = []
        match error:
            case ThrottleError():
                return formatter.escape(str(error))
            case CommandNotFoundError():
                lines.append(formatter.escape(str(error)))
                lines.append(f"For Command usage see {man}")
            case PermissionDeniedError():
                lines.append("You do not have permissions to use this command!")
                lines.append(f"To get a list of available commands see {help_command}")
            case CommandDisabledError():
                lines.append(formatter.escape(str(error)))
                lines.append(f"To get a list of available commands see {help_command}")
            case ParseError():
                lines.append(
                    f"Argument {bold(error.argument.get_manual())} is invalid: "
                    f"{formatter.escape(error.message)}"
                )
                lines.append(f"Invalid Command usage! For Command usage see {man}")
            case TooManyArgumentsError():
                lines.append("Too many Arguments received for this Command!")
                if error.parse_error is not None:
                    lines.append(
                        "Argument parsed with an error "
                        f"{bold(error.parse_error.argument.get_manual())}"
                    )
                    lines.append(f"Returned with {bold(error.parse_error.message)}")
                lines.append(f"Invalid Command usage! For Command usage see {man}")
            case _:
                return UNHANDLED_ERROR_MESSAGE
        return formatter.block_prefix + "\n".join(lines)
