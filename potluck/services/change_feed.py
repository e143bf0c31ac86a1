"""
Change feed - "something changed" notifications for potluck registrations.

Subscribers register a zero-argument callback per potluck and react by
reloading the whole board; notifications carry no payload.

Two sources publish into the feed:

- In-process commits. SQLAlchemy session hooks collect the potluck IDs of
  every Registration inserted, updated or deleted in a session and publish
  them after the transaction commits. Bulk statements bypass the unit of
  work, so services that issue them call ``mark_registrations_changed``.
- Other processes sharing the database. ``RegistrationWatcher`` runs on a
  daemon thread and polls a cheap fingerprint of each subscribed potluck's
  registrations.

Example usage:
    from potluck.services.change_feed import subscribe

    unsubscribe = subscribe(potluck.id, lambda: board_frame.reload())
    ...
    unsubscribe()
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Set, Tuple

from sqlalchemy import event, func
from sqlalchemy.orm import Session

from potluck.models.registration import Registration

logger = logging.getLogger(__name__)

_INFO_KEY = "potluck_changed_registrations"

Listener = Callable[[], None]


class ChangeFeed:
    """
    Registry of per-potluck change listeners.

    Listener exceptions are logged and never reach the publisher.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: Dict[int, List[Listener]] = {}

    def subscribe(self, potluck_id: int, on_change: Listener) -> Callable[[], None]:
        """
        Register ``on_change`` for a potluck.

        Returns:
            Callable that removes the listener; calling it twice is harmless
        """
        with self._lock:
            self._listeners.setdefault(potluck_id, []).append(on_change)

        def _unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(potluck_id)
                if listeners and on_change in listeners:
                    listeners.remove(on_change)
                    if not listeners:
                        del self._listeners[potluck_id]

        return _unsubscribe

    def publish(self, potluck_id: int) -> int:
        """
        Notify every listener of a potluck.

        Returns:
            Number of listeners called
        """
        with self._lock:
            listeners = list(self._listeners.get(potluck_id, ()))

        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.error(
                    f"Change listener for potluck {potluck_id} failed: {e}", exc_info=True
                )
        return len(listeners)

    def subscribed_potlucks(self) -> List[int]:
        """IDs of potlucks with at least one listener."""
        with self._lock:
            return list(self._listeners)

    def clear(self) -> None:
        """Drop all listeners."""
        with self._lock:
            self._listeners.clear()


_feed: Optional[ChangeFeed] = None
_feed_lock = threading.Lock()


def get_change_feed() -> ChangeFeed:
    """Get the process-wide change feed."""
    global _feed

    with _feed_lock:
        if _feed is None:
            _feed = ChangeFeed()
        return _feed


def subscribe(potluck_id: int, on_change: Listener) -> Callable[[], None]:
    """Subscribe to registration changes of one potluck on the global feed."""
    return get_change_feed().subscribe(potluck_id, on_change)


def mark_registrations_changed(session: Session, potluck_id: int) -> None:
    """
    Record that a potluck's registrations changed inside ``session``.

    The notification is published once the session commits.
    """
    session.info.setdefault(_INFO_KEY, set()).add(potluck_id)


# ============================================================================
# Session hooks
# ============================================================================


@event.listens_for(Session, "after_flush")
def _collect_registration_changes(session, flush_context):
    for collection in (session.new, session.dirty, session.deleted):
        for obj in collection:
            if isinstance(obj, Registration) and obj.potluck_id is not None:
                mark_registrations_changed(session, obj.potluck_id)


@event.listens_for(Session, "after_commit")
def _publish_registration_changes(session):
    changed: Set[int] = session.info.pop(_INFO_KEY, set())
    if not changed:
        return
    feed = get_change_feed()
    for potluck_id in sorted(changed):
        feed.publish(potluck_id)


@event.listens_for(Session, "after_rollback")
def _discard_registration_changes(session):
    session.info.pop(_INFO_KEY, None)


# ============================================================================
# Cross-process watcher
# ============================================================================


Fingerprint = Tuple[int, Optional[object], Optional[int]]


def registration_fingerprint(potluck_id: int, session: Session) -> Fingerprint:
    """
    Cheap summary of a potluck's registrations.

    Any insert, update or delete changes at least one of row count, newest
    ``updated_at`` or highest ID.
    """
    count, newest, max_id = (
        session.query(
            func.count(Registration.id),
            func.max(Registration.updated_at),
            func.max(Registration.id),
        )
        .filter(Registration.potluck_id == potluck_id)
        .one()
    )
    return count, newest, max_id


class RegistrationWatcher:
    """
    Background poller that publishes changes made by other processes.

    Runs on a daemon thread and compares the registration fingerprint of
    every subscribed potluck every ``poll_interval`` seconds. The first
    observation of a potluck only records its fingerprint.

    Attributes:
        _poll_interval: Seconds between polls
        _feed: Feed to publish into
        _stop_event: Threading event for signaling shutdown
        _thread: Background daemon thread
        _fingerprints: Last fingerprint seen per potluck
    """

    def __init__(self, poll_interval: float = 5.0, feed: Optional[ChangeFeed] = None):
        self._poll_interval = poll_interval
        self._feed = feed or get_change_feed()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._fingerprints: Dict[int, Fingerprint] = {}

    def start(self) -> None:
        """Start polling. Does nothing if already running."""
        if self._thread and self._thread.is_alive():
            logger.warning("Registration watcher is already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            name="RegistrationWatcherThread",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Registration watcher started (interval: {self._poll_interval}s)")

    def stop(self, timeout: float = 2.0) -> None:
        """Signal the thread to stop and wait for it."""
        if not self._thread or not self._thread.is_alive():
            return

        self._stop_event.set()
        self._thread.join(timeout=timeout)

        if self._thread.is_alive():
            logger.warning("Registration watcher thread did not stop within timeout")
        else:
            logger.info("Registration watcher stopped")

    def poll_once(self) -> List[int]:
        """
        Compare fingerprints once and publish for every changed potluck.

        Returns:
            IDs of potlucks that were published
        """
        from potluck.services.database import session_scope

        changed = []
        subscribed = self._feed.subscribed_potlucks()

        with session_scope() as session:
            current = {pid: registration_fingerprint(pid, session) for pid in subscribed}

        for potluck_id, fingerprint in current.items():
            previous = self._fingerprints.get(potluck_id)
            self._fingerprints[potluck_id] = fingerprint
            if previous is not None and previous != fingerprint:
                changed.append(potluck_id)

        # Forget potlucks nobody listens to any more
        for potluck_id in list(self._fingerprints):
            if potluck_id not in current:
                del self._fingerprints[potluck_id]

        for potluck_id in changed:
            self._feed.publish(potluck_id)
        return changed

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                # Never crash the watcher thread
                logger.error(f"Error while polling registrations: {e}", exc_info=True)
            self._stop_event.wait(timeout=self._poll_interval)
