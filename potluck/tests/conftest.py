"""Pytest configuration and fixtures for service layer tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker

from potluck import models  # noqa: F401
from potluck.models.base import Base
from potluck.services import enrichment_service
from potluck.services.change_feed import get_change_feed
from potluck.tests.fakes import FakeStore
from potluck.utils.config import reset_config


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Run every test without external services or a shared change feed.

    Enrichment is switched off and API keys are removed, so no test ever
    reaches OpenAI or Giphy unless it patches them in explicitly.
    """
    monkeypatch.setenv("POTLUCK_ENRICHMENT", "0")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GIPHY_API_KEY", raising=False)
    monkeypatch.delenv("POTLUCK_DATABASE_URL", raising=False)
    reset_config()
    enrichment_service.reset_client()
    get_change_feed().clear()

    yield

    get_change_feed().clear()
    enrichment_service.reset_client()
    reset_config()


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the database to the test
    4. Drops all tables after the test completes
    """
    engine = create_engine("sqlite:///:memory:", echo=False)

    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import potluck.services.database as db_module

    original_get_session = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)

    db_module.get_session_factory = original_get_session


@pytest.fixture(scope="function")
def potluck(test_db):
    """Provide a sample potluck."""
    from potluck.services import potluck_service

    return potluck_service.create_potluck("Summer Potluck", title_da="Sommer Potluck")


@pytest.fixture(scope="function")
def main_dishes(test_db):
    """Provide a slotted category with three default slots."""
    from potluck.services import category_service

    return category_service.create_category(
        name="Main Dishes",
        title_en="Main Dishes",
        title_da="Hovedretter",
        singular_en="Main Dish",
        singular_da="Hovedret",
        slots=3,
    )


@pytest.fixture(scope="function")
def desserts(test_db):
    """Provide a slotted category with two default slots."""
    from potluck.services import category_service

    return category_service.create_category(
        name="Desserts",
        singular_en="Dessert",
        placeholder_en="Cake, pie, ice cream...",
        slots=2,
    )


@pytest.fixture(scope="function")
def additional(test_db):
    """Provide an unbounded category."""
    from potluck.services import category_service

    return category_service.create_category(
        name="Additional Items",
        singular_en="Item",
        slots=0,
        is_unbounded=True,
        storage_key="additional",
    )


@pytest.fixture(scope="function")
def board_setup(potluck, main_dishes, desserts, additional):
    """Enable main dishes, desserts and additional items on the sample potluck."""
    from potluck.services import potluck_service

    for category in (main_dishes, desserts, additional):
        potluck_service.set_category_enabled(potluck.id, category.id, True)
    return potluck


@pytest.fixture
def fake_store():
    return FakeStore()
