# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Message ingress and reply egress types.

A transport turns every inbound chat message into a `MessageEvent` and hands it
to `Dispatcher.handle_message`. Replies flow back through a `ReplyFactory`,
which maps the event's `ReplyTarget` to a `(message) -> None` delegate. Parley
only ever calls that delegate with strings and never touches the transport.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable, Union

from pydantic import BaseModel, ConfigDict


class ReplyTarget(Enum):
    """Where a reply to a message should be delivered."""

    DIRECT = 1
    CHANNEL = 2
    BROADCAST = 3

    @classmethod
    def _missing_(cls, value: object) -> ReplyTarget:
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.name == normalized:
                    return member
        valid = ", ".join(member.name.lower() for member in cls)
        raise ValueError(f"Invalid {cls.__name__}: '{value}'. Must be one of: {valid}")


class Identity(BaseModel):
    """The requesting user. `uid` is the canonical identity string."""

    uid: str
    name: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def display_name(self) -> str:
        return self.name or self.uid

    def __str__(self) -> str:
        return f"{self.display_name} ({self.uid})"


class MessageEvent(BaseModel):
    """One inbound chat message."""

    text: str
    identity: Identity
    reply_target: ReplyTarget = ReplyTarget.DIRECT
    raw: Any = None

    model_config = ConfigDict(arbitrary_types_allowed=True)


Reply = Callable[[str], Union[None, Awaitable[None]]]
ReplyFactory = Callable[[ReplyTarget, MessageEvent], Reply]
