"""Tests for database helpers: retry, seeding and engine creation."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from potluck.models.category import Category
from potluck.services import database
from potluck.utils.constants import DEFAULT_CATEGORIES


def _operational_error():
    return OperationalError("INSERT ...", {}, Exception("database is locked"))


class TestWithRetry:
    """Tests for database.with_retry()."""

    def test_success_first_try(self):
        operation = MagicMock(return_value="ok")
        assert database.with_retry(operation) == "ok"
        operation.assert_called_once_with()

    def test_retries_transient_errors(self):
        operation = MagicMock(side_effect=[_operational_error(), _operational_error(), "ok"])
        with patch("potluck.services.database.time.sleep") as sleep:
            assert database.with_retry(operation, attempts=3, backoff=0.5) == "ok"
        assert operation.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]

    def test_gives_up_after_last_attempt(self):
        operation = MagicMock(side_effect=_operational_error())
        with patch("potluck.services.database.time.sleep"):
            with pytest.raises(OperationalError):
                database.with_retry(operation, attempts=2)
        assert operation.call_count == 2

    def test_other_errors_not_retried(self):
        operation = MagicMock(side_effect=ValueError("bad"))
        with pytest.raises(ValueError):
            database.with_retry(operation)
        operation.assert_called_once_with()


class TestSeedDefaultCategories:
    """Tests for database.seed_default_categories()."""

    def test_seeds_empty_catalog(self, test_db):
        created = database.seed_default_categories()

        assert created == len(DEFAULT_CATEGORIES)
        keys = {c.storage_key for c in test_db().query(Category).all()}
        assert keys == {c["storage_key"] for c in DEFAULT_CATEGORIES}

    def test_idempotent(self, test_db):
        database.seed_default_categories()
        assert database.seed_default_categories() == 0
        assert test_db().query(Category).count() == len(DEFAULT_CATEGORIES)

    def test_skips_non_empty_catalog(self, main_dishes, test_db):
        assert database.seed_default_categories() == 0
        assert test_db().query(Category).count() == 1


class TestCreateDatabaseEngine:
    """Tests for database.create_database_engine()."""

    def test_memory_engine_enables_foreign_keys(self):
        engine = database.create_database_engine("sqlite:///:memory:")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        engine.dispose()

    def test_init_database_creates_tables(self):
        engine = database.create_database_engine("sqlite:///:memory:")
        database.init_database(engine)
        with engine.connect() as conn:
            tables = {
                row[0]
                for row in conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
            }
        assert {"potlucks", "categories", "potluck_categories", "registrations"} <= tables
        engine.dispose()


class TestResetDatabase:
    """Tests for database.reset_database()."""

    def test_requires_confirmation(self):
        with pytest.raises(ValueError, match="confirm=True"):
            database.reset_database()
