# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Local console transport.

`ParleyShell` reads chat lines from a Prompt Toolkit session, wraps each one in
a `MessageEvent` from a local identity and prints every reply through the rich
console. It is handy to try out a command set without connecting to a chat
backend.
"""
from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from parley.completer import CommandCompleter
from parley.console import console as default_console
from parley.dispatcher import Dispatcher
from parley.event import Identity, MessageEvent, Reply, ReplyTarget
from parley.formatting import RichFormatter
from parley.logger import logger

EXIT_WORDS = ("exit", "quit")


class ParleyShell:
    """
    Interactive read-dispatch-print loop over a `Dispatcher`.

    Args:
        dispatcher (Dispatcher): Dispatcher receiving every line.
        identity (Identity | None): The local user, defaults to uid `local`.
        console (Console | None): Console used for replies.
        prompt (str): Prompt shown before each line.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        identity: Identity | None = None,
        console: Console | None = None,
        prompt: str = "parley > ",
    ) -> None:
        self.dispatcher = dispatcher
        self.identity = identity or Identity(uid="local", name="local")
        self.console = console or default_console
        self.prompt = prompt
        self._prompt_session: PromptSession | None = None
        if dispatcher.reply_factory is None:
            dispatcher.reply_factory = self.reply_factory

    @property
    def prompt_session(self) -> PromptSession:
        if self._prompt_session is None:
            self._prompt_session = PromptSession(
                message=self.prompt,
                history=InMemoryHistory(),
                multiline=False,
                completer=CommandCompleter(self.dispatcher.registry),
            )
        return self._prompt_session

    def reply_factory(self, target: ReplyTarget, event: MessageEvent) -> Reply:
        markup = isinstance(self.dispatcher.formatter, RichFormatter)

        def reply(message: str) -> None:
            self.console.print(message, markup=markup, highlight=False)

        return reply

    def event_for(self, text: str) -> MessageEvent:
        return MessageEvent(text=text, identity=self.identity, reply_target=ReplyTarget.DIRECT)

    async def handle_line(self, text: str) -> bool:
        """Dispatch one line. Returns False when the shell should stop."""
        text = text.strip()
        if not text:
            return True
        if text.lower() in EXIT_WORDS:
            return False
        await self.dispatcher.handle_message(self.event_for(text))
        return True

    async def run(self) -> None:
        """Runs the shell until `exit`, EOF or a keyboard interrupt."""
        logger.info("Starting shell for %s", self.identity)
        self.console.print(
            f"Type {self.dispatcher.registry.prefix}help to list commands, "
            "exit to quit.",
            style="notice",
            markup=False,
        )
        try:
            while True:
                try:
                    with patch_stdout(raw=True):
                        line = await self.prompt_session.prompt_async()
                except (EOFError, KeyboardInterrupt):
                    logger.info("EOF or KeyboardInterrupt. Exiting shell.")
                    break
                if not await self.handle_line(line):
                    break
        finally:
            logger.info("Exiting shell for %s", self.identity)
