"""Tests for registration_service: saves, deletes, slot renumbering and the store."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from potluck.models.registration import Registration
from potluck.services import registration_service
from potluck.services.exceptions import (
    CategoryNotFoundById,
    PotluckNotFound,
    RegistrationNotFound,
    ValidationError,
)
from potluck.services.registration_service import RegistrationStore
from potluck.services.slot_engine import build_slots
from potluck.tests.fakes import make_registration


def _slotted(potluck, category, *names):
    return [
        registration_service.save_registration(
            potluck.id, category.id, name, f"{name}'s dish", slot_number=i
        )
        for i, name in enumerate(names, 1)
    ]


@pytest.fixture
def no_sleep():
    with patch("potluck.services.database.time.sleep") as sleep:
        yield sleep


# ============================================================================
# save_registration tests
# ============================================================================


class TestSaveRegistration:
    """Tests for registration_service.save_registration()."""

    def test_create_slotted(self, potluck, main_dishes):
        reg = registration_service.save_registration(
            potluck.id, main_dishes.id, "Ann", "Lasagna", slot_number=1
        )
        assert reg.id is not None
        assert reg.uuid is not None
        assert reg.slot_number == 1
        assert reg.potluck_id == potluck.id
        assert reg.is_slotted

    def test_create_unbounded(self, potluck, additional):
        reg = registration_service.save_registration(potluck.id, additional.id, "Bo", "Napkins")
        assert reg.slot_number is None
        assert not reg.is_slotted

    def test_strips_fields(self, potluck, main_dishes):
        reg = registration_service.save_registration(
            potluck.id, main_dishes.id, "  Ann ", " Lasagna ", slot_number=1
        )
        assert reg.name == "Ann"
        assert reg.description == "Lasagna"

    def test_update_keeps_identity(self, potluck, main_dishes):
        reg = registration_service.save_registration(
            potluck.id, main_dishes.id, "Ann", "Lasagna", slot_number=1
        )
        updated = registration_service.save_registration(
            potluck.id,
            main_dishes.id,
            "Ann",
            "Veggie lasagna",
            slot_number=1,
            registration_id=reg.id,
        )
        assert updated.id == reg.id
        assert updated.uuid == reg.uuid
        assert len(registration_service.list_registrations(potluck.id)) == 1

    @pytest.mark.parametrize("name,description", [("", "Pie"), ("Ann", ""), ("  ", "  ")])
    def test_blank_fields_raise(self, potluck, main_dishes, name, description):
        with pytest.raises(ValidationError, match="cannot be empty"):
            registration_service.save_registration(
                potluck.id, main_dishes.id, name, description, slot_number=1
            )

    def test_too_long_name_raises(self, potluck, main_dishes):
        with pytest.raises(ValidationError, match="cannot exceed"):
            registration_service.save_registration(
                potluck.id, main_dishes.id, "x" * 101, "Pie", slot_number=1
            )

    def test_slotted_category_requires_slot(self, potluck, main_dishes):
        with pytest.raises(ValidationError, match="requires a slot number"):
            registration_service.save_registration(potluck.id, main_dishes.id, "Ann", "Pie")

    @pytest.mark.parametrize("slot_number", [0, -2])
    def test_slot_number_must_be_positive(self, potluck, main_dishes, slot_number):
        with pytest.raises(ValidationError, match="positive integer"):
            registration_service.save_registration(
                potluck.id, main_dishes.id, "Ann", "Pie", slot_number=slot_number
            )

    def test_unbounded_category_rejects_slot(self, potluck, additional):
        with pytest.raises(ValidationError, match="does not use slots"):
            registration_service.save_registration(
                potluck.id, additional.id, "Ann", "Cups", slot_number=1
            )

    def test_unknown_potluck_raises(self, main_dishes):
        with pytest.raises(PotluckNotFound):
            registration_service.save_registration(999, main_dishes.id, "Ann", "Pie", slot_number=1)

    def test_unknown_category_raises(self, potluck):
        with pytest.raises(CategoryNotFoundById):
            registration_service.save_registration(potluck.id, 999, "Ann", "Pie", slot_number=1)

    def test_vanished_registration_is_recreated(self, potluck, main_dishes):
        reg = registration_service.save_registration(
            potluck.id, main_dishes.id, "Ann", "Pie", slot_number=1
        )
        registration_service.delete_registration(reg.id)

        again = registration_service.save_registration(
            potluck.id, main_dishes.id, "Ann", "Pie", slot_number=1, registration_id=reg.id
        )

        assert again.id is not None
        assert len(registration_service.list_registrations(potluck.id)) == 1

    def test_new_registration_gets_gif(self, potluck, main_dishes):
        with patch(
            "potluck.services.registration_service.find_gif_for_description",
            return_value="https://media.giphy.com/pie.gif",
        ) as find_gif:
            reg = registration_service.save_registration(
                potluck.id, main_dishes.id, "Ann", "Apple pie", slot_number=1
            )

        find_gif.assert_called_once_with("Apple pie")
        assert reg.gif_url == "https://media.giphy.com/pie.gif"

    def test_existing_gif_is_reused(self, potluck, main_dishes):
        reg = registration_service.save_registration(
            potluck.id,
            main_dishes.id,
            "Ann",
            "Apple pie",
            slot_number=1,
            gif_url="https://media.giphy.com/pie.gif",
        )

        with patch(
            "potluck.services.registration_service.find_gif_for_description"
        ) as find_gif:
            updated = registration_service.save_registration(
                potluck.id,
                main_dishes.id,
                "Ann",
                "Cherry pie",
                slot_number=1,
                registration_id=reg.id,
            )

        find_gif.assert_not_called()
        assert updated.gif_url == "https://media.giphy.com/pie.gif"

    def test_empty_gif_url_clears_image_without_lookup(self, potluck, main_dishes):
        reg = registration_service.save_registration(
            potluck.id,
            main_dishes.id,
            "Ann",
            "Apple pie",
            slot_number=1,
            gif_url="https://media.giphy.com/pie.gif",
        )

        with patch(
            "potluck.services.registration_service.find_gif_for_description"
        ) as find_gif:
            updated = registration_service.save_registration(
                potluck.id,
                main_dishes.id,
                "Ann",
                "Apple pie",
                slot_number=1,
                registration_id=reg.id,
                gif_url="",
            )

        find_gif.assert_not_called()
        assert updated.gif_url is None

    def test_picked_gif_replaces_stored_one(self, potluck, main_dishes):
        _slotted(potluck, main_dishes, "Ann")
        reg = registration_service.save_registration(
            potluck.id,
            main_dishes.id,
            "Bo",
            "Stew",
            slot_number=2,
            gif_url="https://media.giphy.com/old.gif",
        )

        updated = registration_service.save_registration(
            potluck.id,
            main_dishes.id,
            "Bo",
            "Beef stew",
            slot_number=reg.slot_number,
            registration_id=reg.id,
            gif_url=" https://media.giphy.com/new.gif ",
        )

        assert updated.id == reg.id
        assert updated.slot_number == 2
        assert updated.gif_url == "https://media.giphy.com/new.gif"
        stored = registration_service.list_registrations(potluck.id)
        assert [(r.name, r.description) for r in stored] == [
            ("Ann", "Ann's dish"),
            ("Bo", "Beef stew"),
        ]

    def test_enrichment_disabled_saves_without_gif(self, potluck, main_dishes):
        reg = registration_service.save_registration(
            potluck.id, main_dishes.id, "Ann", "Apple pie", slot_number=1
        )
        assert reg.gif_url is None


# ============================================================================
# Query tests
# ============================================================================


class TestListRegistrations:
    """Tests for registration_service.list_registrations()."""

    def test_empty(self, potluck):
        assert registration_service.list_registrations(potluck.id) == []

    def test_creation_order(self, potluck, main_dishes, additional):
        registration_service.save_registration(potluck.id, additional.id, "First", "Cups")
        registration_service.save_registration(
            potluck.id, main_dishes.id, "Second", "Stew", slot_number=2
        )
        registration_service.save_registration(potluck.id, additional.id, "Third", "Plates")

        names = [r.name for r in registration_service.list_registrations(potluck.id)]
        assert names == ["First", "Second", "Third"]

    def test_only_own_potluck(self, potluck, main_dishes):
        from potluck.services import potluck_service

        other = potluck_service.create_potluck("Winter Potluck")
        registration_service.save_registration(
            other.id, main_dishes.id, "Zed", "Soup", slot_number=1
        )
        assert registration_service.list_registrations(potluck.id) == []


class TestGetRegistration:
    """Tests for registration_service.get_registration()."""

    def test_found(self, potluck, main_dishes):
        reg = registration_service.save_registration(
            potluck.id, main_dishes.id, "Ann", "Pie", slot_number=1
        )
        assert registration_service.get_registration(reg.id).name == "Ann"

    def test_missing_raises(self, test_db):
        with pytest.raises(RegistrationNotFound):
            registration_service.get_registration(12345)


class TestHasIncompleteEntries:
    """Tests for registration_service.has_incomplete_entries()."""

    def test_complete(self):
        assert not registration_service.has_incomplete_entries(
            [make_registration(1), None, make_registration(2)]
        )

    def test_blank_description(self):
        assert registration_service.has_incomplete_entries(
            [make_registration(1, description="  ")]
        )

    def test_empty(self):
        assert not registration_service.has_incomplete_entries([])


# ============================================================================
# Delete and renumbering tests
# ============================================================================


class TestDeleteRegistration:
    """Tests for registration_service.delete_registration()."""

    def test_delete_closes_gap(self, potluck, main_dishes):
        """Clearing B from [A, B, C] moves C from slot 3 to slot 2."""
        a, b, c = _slotted(potluck, main_dishes, "A", "B", "C")

        assert registration_service.delete_registration(b.id) is True

        remaining = registration_service.list_registrations(potluck.id)
        slots = {r.name: r.slot_number for r in remaining}
        assert slots == {"A": 1, "C": 2}

        rebuilt = build_slots(main_dishes.slots, remaining)
        assert [r.name if r else None for r in rebuilt] == ["A", "C", None]

    def test_delete_missing_is_not_an_error(self, test_db):
        assert registration_service.delete_registration(424242) is False

    def test_delete_twice(self, potluck, main_dishes):
        (a,) = _slotted(potluck, main_dishes, "A")
        assert registration_service.delete_registration(a.id) is True
        assert registration_service.delete_registration(a.id) is False

    def test_delete_unbounded_does_not_renumber(self, potluck, main_dishes, additional):
        _slotted(potluck, main_dishes, "A", "B")
        item = registration_service.save_registration(potluck.id, additional.id, "X", "Cups")

        with patch.object(registration_service, "reorganize_slots") as reorganize:
            registration_service.delete_registration(item.id)

        reorganize.assert_not_called()

    def test_delete_only_renumbers_same_category(self, potluck, main_dishes, desserts):
        a, b = _slotted(potluck, main_dishes, "A", "B")
        registration_service.save_registration(potluck.id, desserts.id, "D", "Cake", slot_number=2)

        registration_service.delete_registration(a.id)

        by_name = {r.name: r for r in registration_service.list_registrations(potluck.id)}
        assert by_name["B"].slot_number == 1
        assert by_name["D"].slot_number == 2


class TestReorganizeSlots:
    """Tests for registration_service.reorganize_slots()."""

    def test_renumbers_gaps_in_order(self, potluck, main_dishes):
        for name, slot in (("A", 1), ("C", 7), ("B", 3)):
            registration_service.save_registration(
                potluck.id, main_dishes.id, name, "Dish", slot_number=slot
            )

        changed = registration_service.reorganize_slots(potluck.id, main_dishes.id)

        assert changed == 2
        slots = {r.name: r.slot_number for r in registration_service.list_registrations(potluck.id)}
        assert slots == {"A": 1, "B": 2, "C": 3}

    def test_already_compact_is_unchanged(self, potluck, main_dishes):
        _slotted(potluck, main_dishes, "A", "B")
        assert registration_service.reorganize_slots(potluck.id, main_dishes.id) == 0

    def test_duplicate_slots_keep_creation_order(self, potluck, main_dishes):
        for name in ("First", "Second"):
            registration_service.save_registration(
                potluck.id, main_dishes.id, name, "Dish", slot_number=2
            )

        registration_service.reorganize_slots(potluck.id, main_dishes.id)

        slots = {r.name: r.slot_number for r in registration_service.list_registrations(potluck.id)}
        assert slots == {"First": 1, "Second": 2}


# ============================================================================
# RegistrationStore tests
# ============================================================================


class TestRegistrationStore:
    """Tests for RegistrationStore sentinels and retries."""

    def test_save_and_load(self, potluck, main_dishes):
        store = RegistrationStore(potluck.id)
        saved = store.save(main_dishes.id, "Ann", "Pie", slot_number=1)
        assert isinstance(saved, Registration)
        assert [r.id for r in store.load()] == [saved.id]

    def test_save_validation_failure_returns_none(self, potluck, main_dishes):
        store = RegistrationStore(potluck.id)
        assert store.save(main_dishes.id, "", "Pie", slot_number=1) is None
        assert store.load() == []

    def test_save_unknown_category_returns_none(self, potluck):
        assert RegistrationStore(potluck.id).save(999, "Ann", "Pie", slot_number=1) is None

    def test_delete_missing_counts_as_success(self, potluck):
        assert RegistrationStore(potluck.id).delete(31337) is True

    def test_save_retries_transient_errors(self, potluck, main_dishes, no_sleep):
        store = RegistrationStore(potluck.id)
        real_save = registration_service.save_registration
        calls = []

        def flaky(*args, **kwargs):
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("INSERT", {}, Exception("database is locked"))
            return real_save(*args, **kwargs)

        with patch.object(registration_service, "save_registration", side_effect=flaky):
            saved = store.save(main_dishes.id, "Ann", "Pie", slot_number=1)

        assert saved is not None
        assert len(calls) == 2
        no_sleep.assert_called_once()

    def test_retried_save_looks_up_gif_once(self, potluck, main_dishes, no_sleep):
        store = RegistrationStore(potluck.id)
        real_save = registration_service.save_registration
        calls = []

        def flaky(*args, **kwargs):
            calls.append(kwargs)
            if len(calls) < 3:
                raise OperationalError("INSERT", {}, Exception("database is locked"))
            return real_save(*args, **kwargs)

        with patch(
            "potluck.services.registration_service.find_gif_for_description",
            return_value="https://media.giphy.com/pie.gif",
        ) as find_gif, patch.object(registration_service, "save_registration", side_effect=flaky):
            saved = store.save(main_dishes.id, "Ann", "Apple pie", slot_number=1)

        find_gif.assert_called_once_with("Apple pie")
        assert len(calls) == 3
        assert all(c["gif_url"] == "https://media.giphy.com/pie.gif" for c in calls)
        assert all(c["enrich"] is False for c in calls)
        assert saved.gif_url == "https://media.giphy.com/pie.gif"

    def test_invalid_save_skips_gif_lookup(self, potluck, main_dishes):
        with patch(
            "potluck.services.registration_service.find_gif_for_description"
        ) as find_gif:
            assert RegistrationStore(potluck.id).save(main_dishes.id, "Ann", " ") is None
        find_gif.assert_not_called()

    def test_save_gives_up_after_bounded_attempts(self, potluck, main_dishes, no_sleep):
        store = RegistrationStore(potluck.id)
        error = OperationalError("INSERT", {}, Exception("database is locked"))

        with patch.object(
            registration_service, "save_registration", side_effect=error
        ) as save:
            assert store.save(main_dishes.id, "Ann", "Pie", slot_number=1) is None

        assert save.call_count == 3

    def test_delete_database_error_returns_false(self, potluck, no_sleep):
        store = RegistrationStore(potluck.id)
        error = OperationalError("DELETE", {}, Exception("disk I/O error"))

        with patch.object(registration_service, "delete_registration", side_effect=error):
            assert store.delete(1) is False
