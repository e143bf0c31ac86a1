"""
CategorySection widget - one slotted category on the board.

Renders the category heading and a grid of RegistrationCards, one per slot.
"""

from typing import Callable, Dict, List

import customtkinter as ctk

from potluck.services.board_service import CategoryBoard
from potluck.ui.components.registration_card import RegistrationCard
from potluck.ui.projection import Card, accent_color, draft_key, project_slots, section_title
from potluck.utils.constants import CARD_COLUMNS, PADDING_MEDIUM, PADDING_SMALL


class CategorySection(ctk.CTkFrame):
    """
    Board section for a slotted category.

    Args:
        parent: Parent widget
        entry: Board entry of the category
        language: "en" or "da"
        on_save: Called with (entry, card widget, name, description)
        on_clear: Called with (entry, card widget)
    """

    def __init__(
        self,
        parent,
        entry: CategoryBoard,
        language: str,
        on_save: Callable,
        on_clear: Callable,
        **kwargs,
    ):
        super().__init__(parent, **kwargs)

        self.entry = entry
        self.language = language
        self.on_save = on_save
        self.on_clear = on_clear
        self.cards: List[RegistrationCard] = []

        for column in range(CARD_COLUMNS):
            self.grid_columnconfigure(column, weight=1, uniform="cards")

        self._create_header()
        self._create_cards()

    def project(self) -> List[Card]:
        return project_slots(self.entry.category, self.entry.section.slots, self.language)

    def _create_header(self):
        category = self.entry.category
        ctk.CTkLabel(
            self,
            text=f"{category.icon or ''} {section_title(category, self.language)}".strip(),
            font=ctk.CTkFont(size=18, weight="bold"),
            text_color=accent_color(category),
            anchor="w",
        ).grid(
            row=0,
            column=0,
            columnspan=CARD_COLUMNS,
            padx=PADDING_MEDIUM,
            pady=(PADDING_MEDIUM, PADDING_SMALL),
            sticky="ew",
        )

    def _create_cards(self):
        accent = accent_color(self.entry.category)
        for position, card in enumerate(self.project()):
            widget = RegistrationCard(
                self,
                card,
                self.language,
                accent,
                on_save=lambda w, name, desc: self.on_save(self.entry, w, name, desc),
                on_clear=lambda w: self.on_clear(self.entry, w),
            )
            widget.grid(
                row=1 + position // CARD_COLUMNS,
                column=position % CARD_COLUMNS,
                padx=PADDING_SMALL,
                pady=PADDING_SMALL,
                sticky="nsew",
            )
            self.cards.append(widget)

    def refresh(self):
        """Re-render the cards from the entry's current local state."""
        for widget in self.cards:
            widget.destroy()
        self.cards = []
        self._create_cards()

    def drafts(self) -> Dict:
        """Unsaved typed values keyed by draft_key()."""
        return {
            draft_key(self.entry.storage_key, widget.card): widget.values()
            for widget in self.cards
            if widget.is_dirty()
        }

    def restore_drafts(self, drafts: Dict):
        for widget in self.cards:
            values = drafts.get(draft_key(self.entry.storage_key, widget.card))
            if values is not None:
                widget.set_values(*values)

    def has_incomplete_cards(self) -> bool:
        return any(widget.is_incomplete() for widget in self.cards)
