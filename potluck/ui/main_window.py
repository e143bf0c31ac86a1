"""
Main application window for Potluck Planner.

Shows the sign-up board of one potluck with a potluck picker, a language
toggle, an admin menu and a status bar.

Threading:
- Saves and removals run on short-lived worker threads so the window stays
  responsive while a GIF is looked up.
- Change notifications arrive on whichever thread committed (a worker or
  the registration watcher).
Neither touches widgets directly: both put events on a queue that the Tk
thread drains with ``after``.
"""

import logging
import queue
import threading
import tkinter as tk
from tkinter import messagebox
from typing import Dict, List, Optional

import customtkinter as ctk
from sqlalchemy.exc import SQLAlchemyError

from potluck.services import potluck_service
from potluck.services.board_service import Board, CategoryBoard, load_board
from potluck.services.change_feed import subscribe
from potluck.services.exceptions import ServiceError
from potluck.ui.admin import (
    CategoriesDialog,
    PotluckCategoriesDialog,
    PotluckDialog,
    RegistrationsDialog,
)
from potluck.ui.components import AdditionalSection, CategorySection, RegistrationCard
from potluck.utils.constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_LANGUAGE,
    PADDING_MEDIUM,
    SUPPORTED_LANGUAGES,
    UI_QUEUE_POLL_MS,
)
from potluck.utils.datetime_utils import format_event_datetime
from potluck.utils.translations import get_translation, localized

logger = logging.getLogger(__name__)

_RELOAD = "reload"
_DONE = "done"


class MainWindow(ctk.CTk):
    """
    Main application window.

    Args:
        initial_slug: Potluck to show first (default: newest active potluck)
    """

    def __init__(self, initial_slug: Optional[str] = None):
        super().__init__()

        self.language = DEFAULT_LANGUAGE
        self.board: Optional[Board] = None
        self.sections: List[CategorySection] = []
        self._potluck_id: Optional[int] = None
        self._potluck_choices: Dict[str, int] = {}
        self._unsubscribe = None
        self._events: "queue.Queue" = queue.Queue()

        self.title(f"{APP_NAME} - v{APP_VERSION}")
        self.geometry("1200x850")
        self.minsize(800, 600)

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=0)  # Header
        self.grid_rowconfigure(1, weight=1)  # Board
        self.grid_rowconfigure(2, weight=0)  # Status bar

        self._create_menu_bar()
        self._create_header()
        self._create_board_area()
        self._create_status_bar()

        self.protocol("WM_DELETE_WINDOW", self._on_exit)
        self._drain_job = self.after(UI_QUEUE_POLL_MS, self._drain_events)

        self._load_potlucks(initial_slug=initial_slug)

    def _t(self, key: str) -> str:
        return get_translation(self.language, key)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _create_menu_bar(self):
        """Create the native tkinter menu bar."""
        self.menu_bar = tk.Menu(self)
        self.config(menu=self.menu_bar)

        file_menu = tk.Menu(self.menu_bar, tearoff=0)
        file_menu.add_command(label="Reload", command=self.reload_board)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self._on_exit)
        self.menu_bar.add_cascade(label="File", menu=file_menu)

        admin_menu = tk.Menu(self.menu_bar, tearoff=0)
        admin_menu.add_command(label="Potlucks...", command=self._show_potluck_dialog)
        admin_menu.add_command(label="Categories...", command=self._show_categories_dialog)
        admin_menu.add_command(
            label="Potluck Categories...", command=self._show_potluck_categories_dialog
        )
        admin_menu.add_command(label="Registrations...", command=self._show_registrations_dialog)
        self.menu_bar.add_cascade(label="Admin", menu=admin_menu)

        help_menu = tk.Menu(self.menu_bar, tearoff=0)
        help_menu.add_command(label="About", command=self._show_about)
        self.menu_bar.add_cascade(label="Help", menu=help_menu)

    def _create_header(self):
        header = ctk.CTkFrame(self, corner_radius=0)
        header.grid(row=0, column=0, sticky="ew")
        header.grid_columnconfigure(1, weight=1)

        self.potluck_menu = ctk.CTkOptionMenu(
            header,
            values=[""],
            width=260,
            command=self._on_potluck_selected,
        )
        self.potluck_menu.grid(row=0, column=0, padx=PADDING_MEDIUM, pady=PADDING_MEDIUM)

        self.title_label = ctk.CTkLabel(
            header,
            text="",
            font=ctk.CTkFont(size=22, weight="bold"),
        )
        self.title_label.grid(row=0, column=1, padx=PADDING_MEDIUM, sticky="ew")

        self.language_toggle = ctk.CTkSegmentedButton(
            header,
            values=[lang.upper() for lang in SUPPORTED_LANGUAGES],
            command=self._on_language_selected,
        )
        self.language_toggle.set(self.language.upper())
        self.language_toggle.grid(row=0, column=2, padx=PADDING_MEDIUM, pady=PADDING_MEDIUM)

        self.subtitle_label = ctk.CTkLabel(header, text="", text_color="gray60")
        self.subtitle_label.grid(row=1, column=0, columnspan=3, padx=PADDING_MEDIUM, sticky="ew")

    def _create_board_area(self):
        self.board_frame = ctk.CTkScrollableFrame(self, corner_radius=10)
        self.board_frame.grid(row=1, column=0, padx=10, pady=10, sticky="nsew")
        self.board_frame.grid_columnconfigure(0, weight=1)

    def _create_status_bar(self):
        status_frame = ctk.CTkFrame(self, height=30, corner_radius=0)
        status_frame.grid(row=2, column=0, sticky="ew")
        status_frame.grid_columnconfigure(0, weight=1)

        self.status_label = ctk.CTkLabel(status_frame, text="Ready", anchor="w")
        self.status_label.grid(row=0, column=0, padx=10, pady=5, sticky="w")

    def update_status(self, message: str):
        """
        Update the status bar message.

        Args:
            message: Status message to display
        """
        self.status_label.configure(text=message)

    # ------------------------------------------------------------------
    # Potluck selection
    # ------------------------------------------------------------------

    def _load_potlucks(self, initial_slug: Optional[str] = None):
        potlucks = potluck_service.list_potlucks()
        self._potluck_choices = {f"{p.title_en} ({p.slug})": p.id for p in potlucks}

        if not potlucks:
            self.potluck_menu.configure(values=[self._t("no_potlucks")])
            self.potluck_menu.set(self._t("no_potlucks"))
            self._select_potluck(None)
            return

        self.potluck_menu.configure(values=list(self._potluck_choices))

        selected_id = self._potluck_id
        if selected_id not in self._potluck_choices.values():
            active = potluck_service.get_active_potluck(slug=initial_slug)
            selected_id = active.id if active is not None else potlucks[0].id

        label = next(k for k, v in self._potluck_choices.items() if v == selected_id)
        self.potluck_menu.set(label)
        self._select_potluck(selected_id)

    def _on_potluck_selected(self, label: str):
        potluck_id = self._potluck_choices.get(label)
        if potluck_id is not None and potluck_id != self._potluck_id:
            self._select_potluck(potluck_id)

    def _select_potluck(self, potluck_id: Optional[int]):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        self._potluck_id = potluck_id
        if potluck_id is not None:
            self._unsubscribe = subscribe(
                potluck_id, lambda: self._on_registrations_changed(potluck_id)
            )
        self.reload_board()

    def _on_language_selected(self, value: str):
        self.language = value.lower()
        self.reload_board()

    # ------------------------------------------------------------------
    # Board
    # ------------------------------------------------------------------

    def _on_registrations_changed(self, potluck_id: int):
        # Runs on the committing thread; never touch widgets here
        self._events.put((_RELOAD, potluck_id))

    def _drain_events(self):
        reload_needed = False
        try:
            while True:
                kind, payload = self._events.get_nowait()
                if kind == _RELOAD:
                    reload_needed = reload_needed or payload == self._potluck_id
                elif kind == _DONE:
                    self._finish_write(*payload)
        except queue.Empty:
            pass

        if reload_needed:
            self.reload_board()
        self._drain_job = self.after(UI_QUEUE_POLL_MS, self._drain_events)

    def _collect_drafts(self) -> Dict:
        drafts = {}
        for section in self.sections:
            drafts.update(section.drafts())
        return drafts

    def reload_board(self):
        """Rebuild the board from the store, keeping unsaved typing."""
        drafts = self._collect_drafts()
        self._render_header()

        if self._potluck_id is None:
            self.board = None
            self._render_board(drafts)
            return

        self.update_status(self._t("loading_signups"))
        try:
            self.board = load_board(self._potluck_id)
        except (ServiceError, SQLAlchemyError) as e:
            logger.error(f"Failed to load board for potluck {self._potluck_id}: {e}")
            self.update_status(f"Could not load sign-ups: {e}")
            return

        self._render_board(drafts)
        self.update_status("Ready")

    def _render_header(self):
        if self._potluck_id is None:
            self.title_label.configure(text=self._t("no_potlucks"))
            self.subtitle_label.configure(text="")
            return

        try:
            potluck = potluck_service.get_potluck_by_id(self._potluck_id)
        except ServiceError:
            self._potluck_id = None
            self.title_label.configure(text=self._t("no_potlucks"))
            self.subtitle_label.configure(text="")
            return

        self.title_label.configure(
            text=localized(potluck, "title", self.language) or potluck.title_en
        )
        subtitle = localized(potluck, "subtitle", self.language)
        when = format_event_datetime(potluck.event_datetime)
        self.subtitle_label.configure(text=" - ".join(part for part in (subtitle, when) if part))

    def _render_board(self, drafts: Dict):
        for section in self.sections:
            section.destroy()
        self.sections = []

        if self.board is None:
            return

        for row, entry in enumerate(self.board):
            section_cls = AdditionalSection if entry.is_unbounded else CategorySection
            section = section_cls(
                self.board_frame,
                entry,
                self.language,
                on_save=self._save_card,
                on_clear=self._clear_card,
            )
            section.grid(row=row, column=0, padx=PADDING_MEDIUM, pady=PADDING_MEDIUM, sticky="ew")
            section.restore_drafts(drafts)
            self.sections.append(section)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _save_card(
        self,
        entry: CategoryBoard,
        widget: RegistrationCard,
        name: str,
        description: str,
    ):
        widget.set_saving(True)
        self._run_write(
            entry, widget, lambda: entry.save(widget.card.index, name, description), "save_failed"
        )

    def _clear_card(self, entry: CategoryBoard, widget: RegistrationCard):
        widget.set_saving(True)
        self._run_write(entry, widget, lambda: entry.clear(widget.card.index), "remove_failed")

    def _run_write(self, entry, widget, operation, failure_key: str):
        def _worker():
            try:
                ok = operation()
            except Exception as e:
                logger.error(f"Write for '{entry.storage_key}' failed: {e}", exc_info=True)
                ok = False
            self._events.put((_DONE, (entry, widget, ok, failure_key)))

        threading.Thread(target=_worker, name="RegistrationWriteThread", daemon=True).start()

    def _finish_write(self, entry: CategoryBoard, widget: RegistrationCard, ok: bool, failure_key):
        if widget.winfo_exists():
            widget.set_saving(False)

        if not ok:
            self.update_status(self._t(failure_key))
            messagebox.showerror(APP_NAME, self._t(failure_key), parent=self)
            return

        # Show the new local state right away; the change feed reload follows
        for section in self.sections:
            if section.entry is entry:
                section.refresh()
                break

    # ------------------------------------------------------------------
    # Dialogs
    # ------------------------------------------------------------------

    def _show_potluck_dialog(self):
        PotluckDialog(self, on_close=lambda: self._load_potlucks())

    def _show_categories_dialog(self):
        CategoriesDialog(self, on_close=self.reload_board)

    def _show_potluck_categories_dialog(self):
        if self._potluck_id is None:
            messagebox.showinfo(APP_NAME, "Create a potluck first.", parent=self)
            return
        PotluckCategoriesDialog(self, self._potluck_id, on_close=self.reload_board)

    def _show_registrations_dialog(self):
        if self._potluck_id is None:
            messagebox.showinfo(APP_NAME, "Create a potluck first.", parent=self)
            return
        RegistrationsDialog(self, self._potluck_id, on_close=self.reload_board)

    def _show_about(self):
        messagebox.showinfo(
            "About",
            f"{APP_NAME}\nVersion {APP_VERSION}\n\n"
            "Sign-up board for potluck events: guests claim numbered slots per "
            "category and add extra items.",
            parent=self,
        )

    def _has_incomplete_cards(self) -> bool:
        return any(section.has_incomplete_cards() for section in self.sections)

    def _on_exit(self):
        """Handle application exit, warning about half-filled cards."""
        if self._has_incomplete_cards():
            if not messagebox.askyesno(APP_NAME, self._t("incomplete_warning"), parent=self):
                return
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.after_cancel(self._drain_job)
        self.destroy()
