"""Tests for the card projection used by the board widgets."""

import pytest

from potluck.services.additional_items import AdditionalItems
from potluck.services.board_service import CategoryBoard
from potluck.services.slot_engine import CategorySlots
from potluck.ui.projection import (
    accent_color,
    draft_key,
    project_additional,
    project_section,
    project_slots,
    section_title,
)
from potluck.tests.fakes import make_category, make_registration
from potluck.utils.constants import ACCENT_COLORS, DEFAULT_ACCENT_COLOR


@pytest.fixture
def mains():
    return make_category(
        category_id=1,
        slots=3,
        name="Main Dishes",
        title_en="Main Dishes",
        title_da="Hovedretter",
        singular_en="Main Dish",
        singular_da="Hovedret",
        placeholder_en="Lasagna, curry...",
        color_class="from-red-400 to-red-600",
    )


class TestProjectSlots:
    """Tests for project_slots()."""

    def test_headings_number_from_one(self, mains):
        cards = project_slots(mains, [None, None, None])
        assert [c.heading for c in cards] == ["Main Dish #1", "Main Dish #2", "Main Dish #3"]
        assert [c.slot_number for c in cards] == [1, 2, 3]
        assert all(c.is_empty for c in cards)

    def test_occupied_card_carries_registration(self, mains):
        reg = make_registration(5, slot_number=1, name="Ann")
        cards = project_slots(mains, [reg, None])
        assert cards[0].registration is reg
        assert not cards[0].is_empty
        assert cards[1].is_empty

    def test_danish(self, mains):
        cards = project_slots(mains, [None], language="da")
        assert cards[0].heading == "Hovedret #1"
        # No Danish placeholder set: falls back to the generic prompt
        assert cards[0].placeholder == "Beskriv hvad du medbringer..."

    def test_placeholder_from_category(self, mains):
        assert project_slots(mains, [None])[0].placeholder == "Lasagna, curry..."

    def test_fallbacks_without_singular(self):
        category = make_category(category_id=2, slots=1, name="Snacks")
        cards = project_slots(category, [None])
        assert cards[0].heading == "Dish #1"
        assert cards[0].placeholder == "Describe what you're bringing..."


class TestProjectAdditional:
    """Tests for project_additional()."""

    def test_empty_list_has_only_add_card(self):
        category = make_category(category_id=9, slots=0, is_unbounded=True, singular_en="Item")
        cards = project_additional(category, [])
        assert len(cards) == 1
        assert cards[0].is_add_card
        assert cards[0].index == 0
        assert cards[0].heading == "Add item"

    def test_items_then_add_card(self):
        category = make_category(category_id=9, slots=0, is_unbounded=True, singular_en="Item")
        items = [make_registration(i, category_id=9, name=n) for i, n in ((1, "A"), (2, "B"))]

        cards = project_additional(category, items)

        assert [c.heading for c in cards] == ["Item", "Item", "Add item"]
        assert [c.index for c in cards] == [0, 1, 2]
        assert all(c.slot_number is None for c in cards)
        assert [c.is_add_card for c in cards] == [False, False, True]


class TestProjectSection:
    """Tests for project_section() dispatch."""

    def test_slotted_entry(self, mains, fake_store):
        entry = CategoryBoard(mains, 0, CategorySlots(mains, [], fake_store))
        cards = project_section(entry)
        assert len(cards) == 3
        assert not any(c.is_add_card for c in cards)

    def test_unbounded_entry(self, fake_store):
        category = make_category(category_id=9, slots=0, is_unbounded=True)
        entry = CategoryBoard(category, 1, AdditionalItems(category, [], fake_store))
        cards = project_section(entry)
        assert len(cards) == 1
        assert cards[0].is_add_card


class TestSectionStyling:
    """Tests for section_title() and accent_color()."""

    def test_title_per_language(self, mains):
        assert section_title(mains, "en") == "Main Dishes"
        assert section_title(mains, "da") == "Hovedretter"

    def test_title_falls_back_to_name(self):
        assert section_title(make_category(name="Snacks"), "da") == "Snacks"

    def test_accent_from_color_class(self, mains):
        assert accent_color(mains) == ACCENT_COLORS["red"]

    @pytest.mark.parametrize("color_class", [None, "", "bg-white", "from-teal-400"])
    def test_accent_default(self, color_class):
        category = make_category(color_class=color_class)
        assert accent_color(category) == DEFAULT_ACCENT_COLOR


class TestDraftKey:
    """Tests for draft_key()."""

    def test_occupied_card_keyed_by_registration(self, mains):
        reg = make_registration(42, slot_number=2)
        card = project_slots(mains, [None, reg])[1]
        assert draft_key("main_dishes", card) == ("main_dishes", "registration", 42)

    def test_empty_card_keyed_by_position(self, mains):
        card = project_slots(mains, [None, None])[1]
        assert draft_key("main_dishes", card) == ("main_dishes", "empty", 1)

    def test_registration_key_survives_reindex(self, mains):
        reg = make_registration(42, slot_number=3)
        before = project_slots(mains, [None, None, reg])[2]
        after = project_slots(mains, [None, reg])[1]
        assert draft_key("main_dishes", before) == draft_key("main_dishes", after)
