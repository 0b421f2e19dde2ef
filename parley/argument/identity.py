# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Identity references and the pluggable strategies that resolve them.

An `IdentityResolver` receives the remaining argument text and returns the
canonical identity string it found at the start of the text together with the
rest, or raises `IdentityNotFound`. Exactly one strategy is active per
deployment; it is configured on the `Registry` and handed to every
`IdentityArgument` its argument factory creates.

Built-in strategies:
- `token_identity_resolver`: the first token is the identity (default).
- `ts3_identity_resolver`: a TeamSpeak client URL or a 28 char unique id.
- `DiscordIdentityResolver`: a `<@id>` mention or `@name#1234`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, ClassVar

from parley.argument.base import Argument, ArgumentKind
from parley.exceptions import IdentityNotFound, ParseError
from parley.utils import split_token

IdentityResolver = Callable[[str], tuple[str, str]]

_TS3_IDENTITY = re.compile(
    r"^(\[URL=client://\d*/(?P<url_uid>[/+a-z0-9]{27}=)~[^\]]*\][^\[]*\[/URL\]"
    r"|(?P<uid>[/+a-z0-9]{27}=)) *(?P<rest>.*)$",
    re.IGNORECASE | re.DOTALL,
)
_DISCORD_IDENTITY = re.compile(
    r"^(<@!?(?P<id>\d{17,20})>|@(?P<name>.*?)#\d{4}) *(?P<rest>.*)$",
    re.IGNORECASE | re.DOTALL,
)


def token_identity_resolver(text: str) -> tuple[str, str]:
    token, rest = split_token(text)
    if not token:
        raise IdentityNotFound("Identity not found!")
    return token, rest


def ts3_identity_resolver(text: str) -> tuple[str, str]:
    match = _TS3_IDENTITY.match(text)
    if not match:
        raise IdentityNotFound("Client not found!")
    return match.group("url_uid") or match.group("uid"), match.group("rest")


class DiscordIdentityResolver:
    """
    Resolves Discord mentions.

    `<@123...>` yields the id directly. `@name#1234` is looked up through
    `lookup_by_name`, which returns the canonical id or None.
    """

    def __init__(self, lookup_by_name: Callable[[str], str | None] | None = None):
        self.lookup_by_name = lookup_by_name

    def __call__(self, text: str) -> tuple[str, str]:
        match = _DISCORD_IDENTITY.match(text)
        if not match:
            raise IdentityNotFound("Client not found!")
        if match.group("id"):
            return match.group("id"), match.group("rest")
        name = match.group("name")
        uid = self.lookup_by_name(name) if self.lookup_by_name and name else None
        if not uid:
            raise IdentityNotFound("Client not found!")
        return uid, match.group("rest")


@dataclass
class IdentityArgument(Argument):
    """A reference to a user, resolved to its canonical identity string."""

    resolver: IdentityResolver | None = None

    kind: ClassVar[ArgumentKind] = ArgumentKind.IDENTITY

    def validate(self, text: str) -> tuple[str, str]:
        resolver = self.resolver or token_identity_resolver
        try:
            return resolver(text)
        except IdentityNotFound as error:
            raise ParseError(str(error) or "Identity not found!", self) from error
