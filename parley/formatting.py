# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Chat markup for replies generated by Parley itself.

Every transport renders emphasis differently: Discord speaks Markdown,
TeamSpeak speaks BBCode, and the local shell prints through `rich`. The
`Dispatcher` and the built-in commands only call `bold()` and `code()` on the
formatter they were given.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from rich.markup import escape


class TextFormatter(ABC):
    """Renders inline emphasis for one chat backend."""

    #: Leading text prepended to multi line replies.
    block_prefix: str = ""
    #: Render the `help` listing as aligned `code()` blocks instead of bold names.
    listing_as_code: bool = False

    def escape(self, text: str) -> str:
        """Neutralize markup in text that did not come from this formatter."""
        return text

    @abstractmethod
    def bold(self, text: str) -> str: ...

    def code(self, text: str) -> str:
        return text


class PlainFormatter(TextFormatter):
    def bold(self, text: str) -> str:
        return text


class MarkdownFormatter(TextFormatter):
    """Discord flavoured Markdown."""

    listing_as_code = True

    def bold(self, text: str) -> str:
        return f"**{text}**"

    def code(self, text: str) -> str:
        return f"```\n{text}\n```"


class BBCodeFormatter(TextFormatter):
    """TeamSpeak BBCode. Chat lines start on a fresh line."""

    block_prefix = "\n"

    def bold(self, text: str) -> str:
        return f"[b]{text}[/b]"


class RichFormatter(TextFormatter):
    """Console markup understood by `rich.console.Console.print`."""

    def escape(self, text: str) -> str:
        return escape(text)

    def bold(self, text: str) -> str:
        return f"[bold]{escape(text)}[/bold]"
