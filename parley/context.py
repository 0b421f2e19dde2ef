# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Execution context for a single dispatch.

`ExecutionContext` captures what was dispatched, for whom, with which resolved
arguments, and how it ended. It is handed to every lifecycle hook (see
`parley.hook_manager`) and is used for timing and structured log lines.
"""
from __future__ import annotations

import time
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from parley.event import Identity


class ExecutionContext(BaseModel):
    """
    Runtime metadata and state of one dispatch.

    Attributes:
        name (str): Full (prefixed) name of the command being dispatched.
        text (str): Raw argument text handed to the command.
        identity (Identity | None): The requesting identity.
        kwargs (dict): Resolved arguments, filled in once validation succeeded.
        action (Any): The command or group being dispatched.
        result (Any | None): Handler results, if successful.
        exception (Exception | None): The exception raised, if dispatch failed.
        extra (dict): Metadata for custom introspection by hooks.
    """

    name: str
    text: str = ""
    identity: Identity | None = None
    kwargs: dict[str, Any] = Field(default_factory=dict)
    action: Any = None
    result: Any | None = None
    exception: Exception | None = None

    start_time: float | None = None
    end_time: float | None = None
    start_wall: datetime | None = None
    end_wall: datetime | None = None

    extra: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def start_timer(self):
        self.start_wall = datetime.now()
        self.start_time = time.perf_counter()

    def stop_timer(self):
        self.end_time = time.perf_counter()
        self.end_wall = datetime.now()

    @property
    def duration(self) -> float | None:
        if self.start_time is None:
            return None
        if self.end_time is None:
            return time.perf_counter() - self.start_time
        return self.end_time - self.start_time

    @property
    def success(self) -> bool:
        return self.exception is None

    @property
    def status(self) -> str:
        return "OK" if self.success else "ERROR"

    def to_log_line(self) -> str:
        """Flat log line summarizing the dispatch, logged by `debug.log_after`."""
        duration_str = f"{self.duration:.3f}s" if self.duration is not None else "n/a"
        exception_str = (
            f"{type(self.exception).__name__}: {self.exception}"
            if self.exception
            else "None"
        )
        identity_str = self.identity.uid if self.identity else "n/a"
        return (
            f"[{self.name}] identity={identity_str} status={self.status} "
            f"duration={duration_str} arguments={self.kwargs!r} "
            f"exception={exception_str}"
        )

    def __str__(self) -> str:
        duration_str = f"{self.duration:.3f}s" if self.duration is not None else "n/a"
        outcome = (
            f"Result: {self.result!r}" if self.success else f"Exception: {self.exception}"
        )
        return (
            f"<ExecutionContext '{self.name}' | {self.status} | "
            f"Duration: {duration_str} | {outcome}>"
        )
