# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Per-identity rate limiting.

A `Throttle` keeps one point bucket per identity. Every use costs
`penalty_per_use` points; while an identity sits at or below zero points it is
throttled. Every `tick_interval` milliseconds after the last use,
`restore_per_tick` points come back until the bucket is full again, at which
point the bucket is dropped so idle identities do not accumulate. Without a
running event loop no timers fire and due ticks are applied on the next access.

Example:
    throttle = Throttle(initial_points=3, penalty_per_use=1, tick_interval=5000)
    registry.register_command("roll").add_throttle(throttle)
"""
from __future__ import annotations

from dataclasses import dataclass

from parley.event import Identity
from parley.logger import logger
from parley.scheduler import AsyncioScheduler, Scheduler, TimerHandle


@dataclass
class Bucket:
    points: float
    next_restore: float = 0
    timer: TimerHandle | None = None
    stopped: bool = False


class Throttle:
    """
    Token bucket keyed by identity.

    Attributes:
        initial (float): Points of a fresh bucket and the restoration cap.
        penalty (float): Points one use costs.
        restore (float): Points restored per tick.
        tickrate (float): Milliseconds between restoration ticks.
    """

    def __init__(
        self,
        initial_points: float = 1,
        penalty_per_use: float = 1,
        restore_per_tick: float = 1,
        tick_interval: float = 1000,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.initial = initial_points
        self.penalty = penalty_per_use
        self.restore = restore_per_tick
        self.tickrate = tick_interval
        self.scheduler = scheduler or AsyncioScheduler()
        self._buckets: dict[str, Bucket] = {}

    def initial_points(self, points: float) -> Throttle:
        self.initial = points
        return self

    def penalty_per_use(self, points: float) -> Throttle:
        self.penalty = points
        return self

    def restore_per_tick(self, points: float) -> Throttle:
        self.restore = points
        return self

    def tick_rate(self, milliseconds: float) -> Throttle:
        self.tickrate = milliseconds
        return self

    @staticmethod
    def _key(identity: Identity | str) -> str:
        return identity.uid if isinstance(identity, Identity) else str(identity)

    def use(self, identity: Identity | str) -> bool:
        """
        Charge one use to `identity`.

        Returns:
            bool: Whether the identity is throttled after this use.
        """
        key = self._key(identity)
        bucket = self._catch_up(key)
        if bucket is None:
            bucket = self._buckets[key] = Bucket(points=self.initial)
        bucket.points -= self.penalty
        self._refresh_timer(key)
        logger.debug("[Throttle] '%s' has %s points left.", key, bucket.points)
        return self.is_throttled(identity)

    def is_throttled(self, identity: Identity | str) -> bool:
        bucket = self._catch_up(self._key(identity))
        if bucket is None:
            return False
        return bucket.points <= 0

    def time_until_available(self, identity: Identity | str) -> float:
        """Milliseconds until the next restoration tick, 0 if not throttled."""
        if not self.is_throttled(identity):
            return 0
        bucket = self._buckets[self._key(identity)]
        return max(bucket.next_restore - self.scheduler.now(), 0)

    def points(self, identity: Identity | str) -> float:
        bucket = self._catch_up(self._key(identity))
        return self.initial if bucket is None else bucket.points

    def _catch_up(self, key: str) -> Bucket | None:
        """Apply restoration ticks that are due but did not fire, e.g. without an event loop."""
        bucket = self._buckets.get(key)
        if bucket is None:
            return None
        now = self.scheduler.now()
        if bucket.stopped or self.tickrate <= 0 or bucket.next_restore > now:
            return bucket
        while bucket.next_restore <= now:
            bucket.points += self.restore
            if bucket.points >= self.initial:
                if bucket.timer is not None:
                    bucket.timer.cancel()
                del self._buckets[key]
                logger.debug("[Throttle] '%s' fully restored.", key)
                return None
            bucket.next_restore += self.tickrate
        if bucket.timer is not None:
            bucket.timer.cancel()
        bucket.timer = self.scheduler.call_later(
            bucket.next_restore - now, lambda: self._restore_points(key)
        )
        return bucket

    def stop(self) -> Throttle:
        """Cancel all scheduled restorations until the identity is charged again."""
        for bucket in self._buckets.values():
            bucket.stopped = True
            if bucket.timer is not None:
                bucket.timer.cancel()
                bucket.timer = None
        return self

    def _refresh_timer(self, key: str) -> None:
        bucket = self._buckets.get(key)
        if bucket is None:
            return
        if bucket.timer is not None:
            bucket.timer.cancel()
        bucket.stopped = False
        bucket.timer = self.scheduler.call_later(
            self.tickrate, lambda: self._restore_points(key)
        )
        bucket.next_restore = self.scheduler.now() + self.tickrate

    def _restore_points(self, key: str) -> None:
        bucket = self._buckets.get(key)
        if bucket is None:
            return
        bucket.timer = None
        bucket.points += self.restore
        if bucket.points >= self.initial:
            del self._buckets[key]
            logger.debug("[Throttle] '%s' fully restored.", key)
        else:
            self._refresh_timer(key)

    def __len__(self) -> int:
        return len(self._buckets)

    def __str__(self) -> str:
        return (
            f"Throttle(initial={self.initial}, penalty={self.penalty}, "
            f"restore={self.restore}, tickrate={self.tickrate}ms, "
            f"buckets={len(self._buckets)})"
        )
