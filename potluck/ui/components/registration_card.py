"""
RegistrationCard widget - one sign-up card on the board.

Shows the card heading, the guest's name and dish, an optional GIF link and
Save / Clear buttons. The card never talks to the store itself; the owning
section passes the typed values to its callbacks.
"""

import webbrowser
from typing import Callable, Optional, Tuple

import customtkinter as ctk

from potluck.ui.projection import Card
from potluck.utils.constants import PADDING_MEDIUM, PADDING_SMALL
from potluck.utils.translations import get_translation


class RegistrationCard(ctk.CTkFrame):
    """
    Editable card for one slot or list item.

    Args:
        parent: Parent widget
        card: Projected card to show
        language: "en" or "da"
        accent: Border color of the card
        on_save: Called with (this card widget, name, description)
        on_clear: Called with (this card widget); no Clear button when None
    """

    def __init__(
        self,
        parent,
        card: Card,
        language: str,
        accent: str,
        on_save: Callable[["RegistrationCard", str, str], None],
        on_clear: Optional[Callable[["RegistrationCard"], None]] = None,
        **kwargs,
    ):
        super().__init__(parent, **kwargs)

        self.card = card
        self.language = language
        self.on_save = on_save
        self.on_clear = on_clear
        self._saving = False

        self.configure(corner_radius=8, border_width=2, border_color=accent)
        self._create_widgets()

    def _t(self, key: str) -> str:
        return get_translation(self.language, key)

    def _create_widgets(self):
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self,
            text=self.card.heading,
            font=ctk.CTkFont(size=14, weight="bold"),
            anchor="w",
        ).grid(row=0, column=0, padx=PADDING_MEDIUM, pady=(PADDING_MEDIUM, 0), sticky="ew")

        registration = self.card.registration
        if registration is not None:
            ctk.CTkLabel(
                self,
                text=f"{self._t('by')} {registration.name}",
                text_color="gray60",
                anchor="w",
            ).grid(row=1, column=0, padx=PADDING_MEDIUM, sticky="ew")
        elif not self.card.is_add_card:
            ctk.CTkLabel(
                self,
                text=self._t("click_to_sign_up"),
                text_color="gray60",
                anchor="w",
            ).grid(row=1, column=0, padx=PADDING_MEDIUM, sticky="ew")

        self.name_entry = ctk.CTkEntry(self, placeholder_text=self._t("enter_name"))
        self.name_entry.grid(row=2, column=0, padx=PADDING_MEDIUM, pady=PADDING_SMALL, sticky="ew")

        self.description_entry = ctk.CTkEntry(self, placeholder_text=self.card.placeholder)
        self.description_entry.grid(
            row=3, column=0, padx=PADDING_MEDIUM, pady=PADDING_SMALL, sticky="ew"
        )

        if registration is not None:
            self.name_entry.insert(0, registration.name or "")
            self.description_entry.insert(0, registration.description or "")

        if registration is not None and registration.gif_url:
            gif_link = ctk.CTkLabel(
                self,
                text="GIF",
                text_color="#3b82f6",
                cursor="hand2",
                anchor="w",
            )
            gif_link.grid(row=4, column=0, padx=PADDING_MEDIUM, sticky="w")
            gif_link.bind("<Button-1>", lambda e: webbrowser.open(registration.gif_url))

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=5, column=0, padx=PADDING_MEDIUM, pady=(0, PADDING_MEDIUM), sticky="ew")

        self.save_btn = ctk.CTkButton(
            btn_frame,
            text=self._t("add_item") if self.card.is_add_card else self._t("save"),
            width=90,
            command=self._on_save,
        )
        self.save_btn.pack(side="right", padx=(PADDING_SMALL, 0))

        if registration is not None and self.on_clear is not None:
            clear_key = "clear" if self.card.slot_number is not None else "remove"
            self.clear_btn = ctk.CTkButton(
                btn_frame,
                text=self._t(clear_key),
                width=90,
                fg_color="gray",
                command=self._on_clear,
            )
            self.clear_btn.pack(side="right")
        else:
            self.clear_btn = None

    def values(self) -> Tuple[str, str]:
        """Currently typed (name, description)."""
        return self.name_entry.get(), self.description_entry.get()

    def set_values(self, name: str, description: str):
        """Replace the typed values (used to restore drafts after a reload)."""
        self.name_entry.delete(0, "end")
        self.description_entry.delete(0, "end")
        if name:
            self.name_entry.insert(0, name)
        if description:
            self.description_entry.insert(0, description)

    def is_dirty(self) -> bool:
        """True when the typed values differ from what is stored."""
        registration = self.card.registration
        saved = (
            (registration.name or "", registration.description or "")
            if registration is not None
            else ("", "")
        )
        name, description = self.values()
        return (name.strip(), description.strip()) != saved

    def is_incomplete(self) -> bool:
        """True when exactly one of name and description has been typed."""
        name, description = self.values()
        return bool(name.strip()) != bool(description.strip())

    def set_saving(self, saving: bool):
        """Disable the buttons while a save is in flight."""
        self._saving = saving
        state = "disabled" if saving else "normal"
        if saving:
            self.save_btn.configure(state=state, text=self._t("saving"))
        else:
            text = self._t("add_item") if self.card.is_add_card else self._t("save")
            self.save_btn.configure(state=state, text=text)
        if self.clear_btn is not None:
            self.clear_btn.configure(state=state)

    def _on_save(self):
        if self._saving:
            return
        name, description = self.values()
        self.on_save(self, name, description)

    def _on_clear(self):
        if self._saving or self.on_clear is None:
            return
        self.on_clear(self)
