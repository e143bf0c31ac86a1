"""Tests for the registration change feed and the background watcher."""

import time
from unittest.mock import MagicMock

import pytest

from potluck.services import category_service, potluck_service, registration_service
from potluck.services.change_feed import (
    ChangeFeed,
    RegistrationWatcher,
    mark_registrations_changed,
    registration_fingerprint,
    subscribe,
)
from potluck.services.database import session_scope


class TestChangeFeed:
    """Tests for the in-memory listener registry."""

    def test_publish_calls_listeners_of_that_potluck_only(self):
        feed = ChangeFeed()
        first, other = MagicMock(), MagicMock()
        feed.subscribe(1, first)
        feed.subscribe(2, other)

        assert feed.publish(1) == 1

        first.assert_called_once_with()
        other.assert_not_called()

    def test_publish_without_listeners(self):
        assert ChangeFeed().publish(5) == 0

    def test_unsubscribe_is_idempotent(self):
        feed = ChangeFeed()
        listener = MagicMock()
        unsubscribe = feed.subscribe(1, listener)

        unsubscribe()
        unsubscribe()
        feed.publish(1)

        listener.assert_not_called()
        assert feed.subscribed_potlucks() == []

    def test_failing_listener_does_not_stop_others(self, caplog):
        feed = ChangeFeed()
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        feed.subscribe(1, broken)
        feed.subscribe(1, healthy)

        assert feed.publish(1) == 2

        healthy.assert_called_once_with()
        assert "boom" in caplog.text

    def test_clear(self):
        feed = ChangeFeed()
        feed.subscribe(1, MagicMock())
        feed.clear()
        assert feed.subscribed_potlucks() == []


# ============================================================================
# Session hook tests
# ============================================================================


class TestCommitPublishes:
    """Committed registration writes reach subscribers of the global feed."""

    def test_save_publishes_after_commit(self, board_setup, main_dishes):
        listener = MagicMock()
        subscribe(board_setup.id, listener)

        registration_service.save_registration(
            board_setup.id, main_dishes.id, "Ann", "Stew", slot_number=1
        )

        listener.assert_called_once_with()

    def test_other_potluck_not_notified(self, board_setup, main_dishes):
        other = potluck_service.create_potluck("Winter Potluck")
        listener = MagicMock()
        subscribe(other.id, listener)

        registration_service.save_registration(
            board_setup.id, main_dishes.id, "Ann", "Stew", slot_number=1
        )

        listener.assert_not_called()

    def test_delete_publishes(self, board_setup, main_dishes):
        saved = registration_service.save_registration(
            board_setup.id, main_dishes.id, "Ann", "Stew", slot_number=1
        )
        listener = MagicMock()
        subscribe(board_setup.id, listener)

        registration_service.delete_registration(saved.id)

        listener.assert_called_once_with()

    def test_rollback_does_not_publish(self, board_setup, main_dishes):
        listener = MagicMock()
        subscribe(board_setup.id, listener)

        with pytest.raises(RuntimeError):
            with session_scope() as session:
                registration_service.save_registration(
                    board_setup.id,
                    main_dishes.id,
                    "Ann",
                    "Stew",
                    slot_number=1,
                    session=session,
                )
                raise RuntimeError("abort")

        listener.assert_not_called()
        assert registration_service.list_registrations(board_setup.id) == []

    def test_manual_mark_publishes_on_commit(self, potluck):
        listener = MagicMock()
        subscribe(potluck.id, listener)

        with session_scope() as session:
            mark_registrations_changed(session, potluck.id)
            listener.assert_not_called()

        listener.assert_called_once_with()

    def test_delete_category_publishes(self, board_setup, desserts):
        registration_service.save_registration(
            board_setup.id, desserts.id, "Ann", "Cake", slot_number=1
        )
        listener = MagicMock()
        subscribe(board_setup.id, listener)

        category_service.delete_category(desserts.id)

        listener.assert_called_once_with()

    def test_delete_potluck_publishes(self, board_setup, desserts):
        registration_service.save_registration(
            board_setup.id, desserts.id, "Ann", "Cake", slot_number=1
        )
        listener = MagicMock()
        subscribe(board_setup.id, listener)

        potluck_service.delete_potluck(board_setup.id)

        listener.assert_called_once_with()


# ============================================================================
# Watcher tests
# ============================================================================


class TestRegistrationFingerprint:
    """Tests for registration_fingerprint()."""

    def test_empty_potluck(self, potluck, test_db):
        count, _newest, max_id = registration_fingerprint(potluck.id, test_db())
        assert count == 0
        assert max_id is None

    def test_changes_on_insert_and_delete(self, board_setup, main_dishes, test_db):
        before = registration_fingerprint(board_setup.id, test_db())
        saved = registration_service.save_registration(
            board_setup.id, main_dishes.id, "Ann", "Stew", slot_number=1
        )
        after_insert = registration_fingerprint(board_setup.id, test_db())
        registration_service.delete_registration(saved.id)
        after_delete = registration_fingerprint(board_setup.id, test_db())

        assert after_insert != before
        assert after_delete != after_insert


class TestRegistrationWatcher:
    """Tests for RegistrationWatcher polling."""

    def test_first_poll_only_records(self, board_setup):
        feed = ChangeFeed()
        listener = MagicMock()
        feed.subscribe(board_setup.id, listener)
        watcher = RegistrationWatcher(feed=feed)

        assert watcher.poll_once() == []
        listener.assert_not_called()

    def test_poll_publishes_external_change(self, board_setup, main_dishes):
        # A private feed stands in for another process: the in-process commit
        # hook publishes to the global feed only.
        feed = ChangeFeed()
        listener = MagicMock()
        feed.subscribe(board_setup.id, listener)
        watcher = RegistrationWatcher(feed=feed)
        watcher.poll_once()

        registration_service.save_registration(
            board_setup.id, main_dishes.id, "Ann", "Stew", slot_number=1
        )

        assert watcher.poll_once() == [board_setup.id]
        listener.assert_called_once_with()
        assert watcher.poll_once() == []

    def test_unsubscribed_potlucks_are_not_polled(self, board_setup, main_dishes):
        feed = ChangeFeed()
        unsubscribe = feed.subscribe(board_setup.id, MagicMock())
        watcher = RegistrationWatcher(feed=feed)
        watcher.poll_once()
        unsubscribe()

        registration_service.save_registration(
            board_setup.id, main_dishes.id, "Ann", "Stew", slot_number=1
        )

        assert watcher.poll_once() == []

    def test_start_and_stop(self, test_db):
        feed = ChangeFeed()
        watcher = RegistrationWatcher(poll_interval=0.01, feed=feed)

        watcher.start()
        time.sleep(0.05)
        watcher.stop()

        assert watcher._thread is not None
        assert not watcher._thread.is_alive()

    def test_stop_without_start(self):
        RegistrationWatcher(feed=ChangeFeed()).stop()
