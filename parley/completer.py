# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Provides `CommandCompleter`, a Prompt Toolkit completer for the local shell.

It completes:
- prefixed command names and aliases of every enabled top-level command
- sub command names and aliases after the name of a `CommandGroup`
"""
from __future__ import annotations

import os
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from parley.command import CommandGroup
from parley.registry import Registry


class CommandCompleter(Completer):
    """
    Prompt Toolkit completer for chat lines typed into `ParleyShell`.

    Args:
        registry (Registry): The commands to complete.
    """

    def __init__(self, registry: Registry):
        self.registry = registry

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()
        cursor_at_end_of_token = text.endswith((" ", "\t"))

        if not tokens or (len(tokens) == 1 and not cursor_at_end_of_token):
            stub = tokens[0] if tokens else ""
            yield from self._yield_lcp_completions(self._command_names(), stub.lower())
            return

        if len(tokens) > 2 or (len(tokens) == 2 and cursor_at_end_of_token):
            return
        stub = "" if cursor_at_end_of_token else tokens[-1].lower()
        groups = [
            node
            for node in self.registry.resolve(tokens[0])
            if isinstance(node, CommandGroup)
        ]
        names = [
            name
            for group in groups
            for command in group.commands
            if command.enabled
            for name in command.command_names
        ]
        yield from self._yield_lcp_completions(names, stub)

    def _command_names(self) -> list[str]:
        return [
            name
            for node in self.registry
            if node.enabled
            for name in node.full_command_names
        ]

    def _yield_lcp_completions(self, suggestions: list[str], stub: str):
        """
        Yield completions for `stub` using longest-common-prefix logic.

        A single match is inserted fully. Multiple matches sharing a longer
        prefix insert that prefix and still list every match.
        """
        matches = sorted({s for s in suggestions if s.startswith(stub)})
        if not matches:
            return

        lcp = os.path.commonprefix(matches)

        if len(matches) > 1 and len(lcp) > len(stub):
            yield Completion(lcp, start_position=-len(stub), display=lcp)
        for match in matches:
            yield Completion(match, start_position=-len(stub), display=match)
