"""
View projection - turns reconciled board sections into card descriptions.

Pure functions with no widget code, so the board layout can be checked
without a display. The widgets in potluck.ui.components render these cards.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from potluck.models.registration import Registration
from potluck.utils.constants import ACCENT_COLORS, DEFAULT_ACCENT_COLOR
from potluck.utils.translations import get_translation, localized


@dataclass(frozen=True)
class Card:
    """
    One registration card.

    Attributes:
        index: Position in the section's list (0-based)
        slot_number: 1-based slot for slotted cards, None for list items
        heading: Card heading ("Main Dish #2" / item heading)
        placeholder: Description placeholder
        registration: Registration shown, None for an empty card
        is_add_card: True for the trailing "add new item" card
    """

    index: int
    slot_number: Optional[int]
    heading: str
    placeholder: str
    registration: Optional[Registration] = None
    is_add_card: bool = False

    @property
    def is_empty(self) -> bool:
        return self.registration is None


def placeholder_text(category, language: str) -> str:
    """Category placeholder for the language, else the generic prompt."""
    placeholder = localized(category, "placeholder", language).strip()
    return placeholder or get_translation(language, "describe_bringing")


def singular_title(category, language: str) -> str:
    """Category singular name for the language, else "Dish"/"Ret"."""
    return localized(category, "singular", language).strip() or get_translation(language, "dish")


def section_title(category, language: str) -> str:
    return localized(category, "title", language) or category.name


def accent_color(category) -> str:
    """Hex accent for a category, from the color word in its color_class."""
    for token in (category.color_class or "").split():
        parts = token.split("-")
        if len(parts) >= 2 and parts[1] in ACCENT_COLORS:
            return ACCENT_COLORS[parts[1]]
    return DEFAULT_ACCENT_COLOR


def project_slots(
    category,
    slots: Sequence[Optional[Registration]],
    language: str = "en",
) -> List[Card]:
    """
    One card per slot, headed "<Singular> #<slot number>".

    Args:
        category: Slotted category
        slots: Reconciled slot list (see potluck.services.slot_engine)
        language: "en" or "da"
    """
    singular = singular_title(category, language)
    placeholder = placeholder_text(category, language)
    return [
        Card(
            index=index,
            slot_number=index + 1,
            heading=f"{singular} #{index + 1}",
            placeholder=placeholder,
            registration=registration,
        )
        for index, registration in enumerate(slots)
    ]


def project_additional(
    category,
    items: Sequence[Registration],
    language: str = "en",
) -> List[Card]:
    """
    One card per item plus a trailing blank "add" card.

    Args:
        category: Unbounded category
        items: Registrations in list order
        language: "en" or "da"
    """
    singular = singular_title(category, language)
    placeholder = placeholder_text(category, language)
    cards = [
        Card(
            index=index,
            slot_number=None,
            heading=singular,
            placeholder=placeholder,
            registration=registration,
        )
        for index, registration in enumerate(items)
    ]
    cards.append(
        Card(
            index=len(items),
            slot_number=None,
            heading=get_translation(language, "add_item"),
            placeholder=placeholder,
            is_add_card=True,
        )
    )
    return cards


def project_section(entry, language: str = "en") -> List[Card]:
    """Cards for a board entry (see potluck.services.board_service.CategoryBoard)."""
    if entry.is_unbounded:
        return project_additional(entry.category, entry.section.items, language)
    return project_slots(entry.category, entry.section.slots, language)


def draft_key(storage_key: str, card: Card):
    """
    Identity of a card across board reloads.

    Occupied cards follow their registration; empty cards their position.
    """
    if card.registration is not None:
        return storage_key, "registration", card.registration.id
    return storage_key, "empty", card.index
