"""Expiry settings for calls."""

from __future__ import annotations

import dataclasses
import enum
import functools
from datetime import datetime, timedelta, timezone
from typing import Any

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ExpiryKind(enum.IntEnum):
    """Which form an :class:`Expiry` takes."""

    UNSPECIFIED = 0
    DELAY = 1
    DATE_TIME = 2


def _to_nanos(when: datetime) -> int:
    delta = when - _EPOCH
    nanos = (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000
    if nanos < 0:
        raise ValueError(f"expiry {when.isoformat()} is before the Unix epoch")
    return nanos


def _as_aware(when: datetime) -> datetime:
    return when.replace(tzinfo=timezone.utc) if when.tzinfo is None else when


@functools.total_ordering
@dataclasses.dataclass(frozen=True, eq=False)
class Expiry:
    """An expiry: unspecified (the default), a delay from call time, or a fixed time."""

    kind: ExpiryKind = ExpiryKind.UNSPECIFIED
    delay: timedelta | None = None
    when: datetime | None = None

    def _key(self) -> tuple:
        if self.kind is ExpiryKind.DELAY:
            return (self.kind, self.delay)
        if self.kind is ExpiryKind.DATE_TIME:
            return (self.kind, self.when)
        return (self.kind,)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expiry):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Expiry):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @classmethod
    def unspecified(cls) -> Expiry:
        """An expiry that leaves the agent's own setting in place."""
        return cls()

    @classmethod
    def after(cls, delay: timedelta) -> Expiry:
        """An expiry that falls ``delay`` after the moment the call is made."""
        if not isinstance(delay, timedelta):
            raise TypeError("Expiry.after requires a timedelta")
        if delay < timedelta(0):
            raise ValueError("expiry delay must not be negative")
        return cls(kind=ExpiryKind.DELAY, delay=delay)

    @classmethod
    def at(cls, when: datetime) -> Expiry:
        """An expiry at a fixed point in time; naive datetimes are taken as UTC."""
        if not isinstance(when, datetime):
            raise TypeError("Expiry.at requires a datetime")
        return cls(kind=ExpiryKind.DATE_TIME, when=_as_aware(when))

    @classmethod
    def from_value(cls, value: Any) -> Expiry:
        """Build an expiry from a timedelta, a datetime, or an existing expiry."""
        if isinstance(value, Expiry):
            return value
        if isinstance(value, timedelta):
            return cls.after(value)
        if isinstance(value, datetime):
            return cls.at(value)
        raise TypeError(f"cannot make an Expiry from {type(value).__name__}")

    def ingress_expiry(self, now: datetime | None = None) -> int | None:
        """Return the expiry in nanoseconds since the Unix epoch, or None if unspecified.

        ``now`` is the moment the call is made; it defaults to the current time.
        """
        if self.kind is ExpiryKind.UNSPECIFIED:
            return None
        if self.kind is ExpiryKind.DATE_TIME:
            return _to_nanos(self.when)
        start = datetime.now(timezone.utc) if now is None else _as_aware(now)
        return _to_nanos(start + self.delay)