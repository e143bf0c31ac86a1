"""Tests for the unbounded "additional items" list."""

import pytest

from potluck.services.additional_items import AdditionalItems
from potluck.tests.fakes import make_category


@pytest.fixture
def category():
    return make_category(category_id=9, slots=0, is_unbounded=True)


def _names(items):
    return [r.name for r in items.items]


class TestAppend:
    """Tests for AdditionalItems.append()."""

    def test_append_to_empty_list(self, category, fake_store):
        items = AdditionalItems(category, [], fake_store)

        saved = items.append("Ann", "Napkins")

        assert saved is not None
        assert fake_store.saves[-1]["slot_number"] is None
        assert fake_store.saves[-1]["registration_id"] is None
        assert items.items == [saved]

    def test_append_goes_after_existing_items(self, category, fake_store):
        existing = [fake_store.save(9, n, "Thing") for n in ("A", "B")]
        items = AdditionalItems(category, existing, fake_store)

        items.append("C", "Games")
        items.append("D", "Plates")

        assert _names(items) == ["A", "B", "C", "D"]

    @pytest.mark.parametrize("name,description", [("", "Cups"), ("Ann", " "), (None, None)])
    def test_blank_fields_rejected(self, category, fake_store, name, description):
        items = AdditionalItems(category, [], fake_store)
        assert items.append(name, description) is None
        assert fake_store.saves == []
        assert len(items) == 0

    def test_store_failure_leaves_list(self, category, fake_store):
        items = AdditionalItems(category, [], fake_store)
        fake_store.fail_saves = True
        assert items.append("Ann", "Napkins") is None
        assert items.items == []


class TestUpdateAt:
    """Tests for AdditionalItems.update_at()."""

    def test_update_keeps_identity_and_position(self, category, fake_store):
        existing = [fake_store.save(9, n, "Thing") for n in ("A", "B", "C")]
        items = AdditionalItems(category, existing, fake_store)

        saved = items.update_at(1, "B", "Paper plates")

        assert fake_store.saves[-1]["registration_id"] == existing[1].id
        assert saved.id == existing[1].id
        assert items[1].description == "Paper plates"
        assert _names(items) == ["A", "B", "C"]

    def test_out_of_range_rejected(self, category, fake_store):
        items = AdditionalItems(category, [], fake_store)
        assert items.update_at(0, "A", "Thing") is None
        assert fake_store.saves == []

    def test_blank_update_rejected(self, category, fake_store):
        existing = [fake_store.save(9, "A", "Thing")]
        items = AdditionalItems(category, existing, fake_store)
        fake_store.saves.clear()

        assert items.update_at(0, "A", "") is None
        assert fake_store.saves == []


class TestRemoveAt:
    """Tests for AdditionalItems.remove_at()."""

    def test_remove_shifts_later_items_down(self, category, fake_store):
        existing = [fake_store.save(9, n, "Thing") for n in ("A", "B", "C", "D")]
        items = AdditionalItems(category, existing, fake_store)

        assert items.remove_at(1) is True

        assert fake_store.deletes == [existing[1].id]
        assert _names(items) == ["A", "C", "D"]
        assert items[1] is existing[2]
        assert items[2] is existing[3]

    def test_remove_does_not_rewrite_remaining_items(self, category, fake_store):
        existing = [fake_store.save(9, n, "Thing") for n in ("A", "B", "C")]
        items = AdditionalItems(category, existing, fake_store)
        fake_store.saves.clear()

        items.remove_at(0)

        assert fake_store.saves == []

    def test_out_of_range_is_noop(self, category, fake_store):
        items = AdditionalItems(category, [], fake_store)
        assert items.remove_at(0) is False
        assert fake_store.deletes == []

    def test_store_failure_keeps_item(self, category, fake_store):
        existing = [fake_store.save(9, "A", "Thing")]
        items = AdditionalItems(category, existing, fake_store)
        fake_store.fail_deletes = True

        assert items.remove_at(0) is False
        assert _names(items) == ["A"]


class TestSaveAt:
    """Tests for AdditionalItems.save_at()."""

    def test_blank_fields_remove_item(self, category, fake_store):
        existing = [fake_store.save(9, n, "Thing") for n in ("A", "B")]
        items = AdditionalItems(category, existing, fake_store)

        assert items.save_at(0, "", "") is True
        assert _names(items) == ["B"]

    def test_filled_fields_update_item(self, category, fake_store):
        existing = [fake_store.save(9, "A", "Thing")]
        items = AdditionalItems(category, existing, fake_store)

        assert items.save_at(0, "A", "Other thing") is True
        assert items[0].description == "Other thing"

    def test_no_empty_entries_in_list(self, category, fake_store):
        items = AdditionalItems(category, [], fake_store)
        items.append("A", "Thing")
        items.append("B", "Thing")
        items.save_at(0, "", "")
        assert all(item is not None for item in items.items)
        assert len(items) == 1
