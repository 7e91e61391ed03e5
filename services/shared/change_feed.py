"""Live subscriptions and in-process events.

``ChangeFeed`` turns PostgreSQL LISTEN/NOTIFY into a stream of snapshots:
a subscriber gets the current state straight away and a fresh one after
every matching change. ``EventBus`` is the in-process counterpart used for
session events (sign-in and sign-out).
"""

import logging
from collections.abc import Callable, Iterator
from typing import Any

from .database import Database, NotificationListener

logger = logging.getLogger(__name__)

# Channels fed by the triggers in db/migrations; payload is the job_id.
JOB_POSTINGS_CHANNEL = "job_postings"
JOB_APPLICATIONS_CHANNEL = "job_applications"
CHANNELS = (JOB_POSTINGS_CHANNEL, JOB_APPLICATIONS_CHANNEL)

DEFAULT_WAIT_SECONDS = 15.0


class Subscription:
    """A sequence of snapshots for one query.

    The first call to ``next_snapshot`` returns the current state without
    waiting. Later calls block until a notification with a matching key
    arrives (or the timeout elapses, returning None).
    """

    def __init__(
        self,
        listener: NotificationListener,
        load_snapshot: Callable[[], Any],
        key: str | None = None,
    ):
        self.listener = listener
        self.load_snapshot = load_snapshot
        self.key = key
        self.closed = False
        self._delivered_initial = False

    def _matches(self, payloads: list[str]) -> bool:
        if self.key is None:
            return bool(payloads)
        return self.key in payloads

    def next_snapshot(self, timeout: float = DEFAULT_WAIT_SECONDS) -> Any | None:
        """Return the next snapshot, or None if nothing changed within timeout.

        Raises:
            RuntimeError: If the subscription is closed
        """
        if self.closed:
            raise RuntimeError("Subscription is closed")
        if not self._delivered_initial:
            self._delivered_initial = True
            return self.load_snapshot()
        payloads = self.listener.wait(timeout)
        if not self._matches(payloads):
            return None
        return self.load_snapshot()

    def __iter__(self) -> Iterator[Any]:
        while not self.closed:
            snapshot = self.next_snapshot()
            if snapshot is not None:
                yield snapshot

    def close(self) -> None:
        """Unsubscribe and release the listening connection."""
        if self.closed:
            return
        self.closed = True
        self.listener.close()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ChangeFeed:
    """Factory for snapshot subscriptions over database notifications."""

    def __init__(self, database: Database):
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def subscribe(
        self,
        channel: str,
        load_snapshot: Callable[[], Any],
        key: Any = None,
    ) -> Subscription:
        """Subscribe to changes on a channel.

        Args:
            channel: One of CHANNELS
            load_snapshot: Callable returning the current state
            key: Only react to notifications whose payload equals this key
                (e.g. a job_id); None reacts to every notification

        Returns:
            Subscription that must be closed by the caller

        Raises:
            ValueError: If the channel is unknown
        """
        if channel not in CHANNELS:
            raise ValueError(f"Unknown channel '{channel}'. Must be one of: {', '.join(CHANNELS)}")
        listener = self.db.listen(channel)
        logger.debug(f"Subscribed to {channel} (key={key})")
        return Subscription(listener, load_snapshot, key=None if key is None else str(key))


class EventBus:
    """Synchronous publish/subscribe for in-process events."""

    def __init__(self):
        self._subscribers: list[Callable[[Any], None]] = []

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Register a callback and return a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: Any) -> None:
        """Deliver an event to every subscriber.

        A subscriber that raises is logged and skipped; the others still
        receive the event.
        """
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event subscriber {callback!r} failed: {e}", exc_info=True)

    def __contains__(self, callback: object) -> bool:
        return callback in self._subscribers

    def __len__(self) -> int:
        return len(self._subscribers)
