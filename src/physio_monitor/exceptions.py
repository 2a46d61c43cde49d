"""Errors raised at the session boundary when a reading is refused."""

from __future__ import annotations

from datetime import datetime


class ReadingRejected(ValueError):
    """A reading was refused before it could mutate any session state.

    Always recoverable: the caller decides whether to skip, log or end the
    session.
    """


class InvalidReading(ReadingRejected):
    """A channel value is missing, unparseable or not finite."""


class OutOfOrderReading(ReadingRejected):
    """The reading's timestamp does not advance past the last accepted one."""

    def __init__(self, timestamp: datetime, last_accepted: datetime) -> None:
        self.timestamp = timestamp
        self.last_accepted = last_accepted
        super().__init__(
            f"Reading at {timestamp.isoformat()} does not advance past "
            f"{last_accepted.isoformat()}."
        )
