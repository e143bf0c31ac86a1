"""
Potlucks Admin Dialog.

Lists potlucks and provides add, edit and delete. New potlucks start with
every catalog category enabled in catalog order.
"""

from tkinter import messagebox, ttk
from typing import Callable, Optional

import customtkinter as ctk

from potluck.services import category_service, potluck_service
from potluck.services.database import session_scope
from potluck.services.exceptions import ServiceError, ValidationError
from potluck.utils.datetime_utils import format_event_datetime, parse_event_datetime


class PotluckDialog(ctk.CTkToplevel):
    """
    Admin dialog for potlucks.

    Args:
        parent: Parent window
        on_close: Optional callback when window closes
    """

    def __init__(self, parent, on_close: Optional[Callable] = None):
        super().__init__(parent)

        self.on_close = on_close

        self.title("Potlucks")
        self.geometry("720x440")
        self.minsize(600, 340)

        self._create_layout()
        self._refresh_list()

        self.protocol("WM_DELETE_WINDOW", self._on_close)

    def _on_close(self):
        if self.on_close:
            self.on_close()
        self.destroy()

    def _create_layout(self):
        main_frame = ctk.CTkFrame(self)
        main_frame.pack(fill="both", expand=True, padx=10, pady=10)

        list_frame = ctk.CTkFrame(main_frame)
        list_frame.pack(side="left", fill="both", expand=True, padx=(0, 5))

        columns = ("title", "slug", "date", "active")
        self.tree = ttk.Treeview(
            list_frame,
            columns=columns,
            show="headings",
            selectmode="browse",
        )
        self.tree.heading("title", text="Title")
        self.tree.heading("slug", text="Slug")
        self.tree.heading("date", text="Date")
        self.tree.heading("active", text="Active")

        self.tree.column("title", width=200, minwidth=120)
        self.tree.column("slug", width=140, minwidth=100)
        self.tree.column("date", width=130, minwidth=100)
        self.tree.column("active", width=60, minwidth=50)

        scrollbar = ttk.Scrollbar(list_frame, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=scrollbar.set)

        self.tree.pack(side="left", fill="both", expand=True)
        scrollbar.pack(side="right", fill="y")

        self.tree.bind("<Double-1>", lambda e: self._show_edit_dialog())

        button_frame = ctk.CTkFrame(main_frame)
        button_frame.pack(side="right", fill="y", padx=(5, 0))

        ctk.CTkButton(button_frame, text="Add", width=100, command=self._show_add_dialog).pack(
            pady=(0, 5)
        )
        ctk.CTkButton(button_frame, text="Edit", width=100, command=self._show_edit_dialog).pack(
            pady=5
        )
        ctk.CTkButton(button_frame, text="Delete", width=100, command=self._delete_selected).pack(
            pady=5
        )

    def _refresh_list(self):
        for item in self.tree.get_children():
            self.tree.delete(item)

        for potluck in potluck_service.list_potlucks():
            self.tree.insert(
                "",
                "end",
                iid=str(potluck.id),
                values=(
                    potluck.title_en,
                    potluck.slug,
                    format_event_datetime(potluck.event_datetime),
                    "Yes" if potluck.is_active else "",
                ),
            )

    def _get_selected_potluck_id(self) -> Optional[int]:
        selection = self.tree.selection()
        if not selection:
            return None
        return int(selection[0])

    def _show_add_dialog(self):
        dialog = _PotluckFormDialog(self, title="Add Potluck")
        self.wait_window(dialog)

        if not dialog.result:
            return

        fields = dict(dialog.result)
        title_en = fields.pop("title_en")
        slug = fields.pop("slug") or None
        try:
            with session_scope() as session:
                potluck = potluck_service.create_potluck(
                    title_en, slug=slug, session=session, **fields
                )
                for category in category_service.list_categories(session=session):
                    potluck_service.set_category_enabled(
                        potluck.id, category.id, True, session=session
                    )
            self._refresh_list()
        except ValidationError as e:
            messagebox.showerror("Error", "; ".join(e.errors), parent=self)

    def _show_edit_dialog(self):
        potluck_id = self._get_selected_potluck_id()
        if potluck_id is None:
            messagebox.showinfo("Info", "Select a potluck to edit.", parent=self)
            return

        potluck = potluck_service.get_potluck_by_id(potluck_id)
        dialog = _PotluckFormDialog(self, title="Edit Potluck", potluck=potluck)
        self.wait_window(dialog)

        if dialog.result:
            fields = dict(dialog.result)
            if not fields["slug"]:
                fields.pop("slug")
            try:
                potluck_service.update_potluck(potluck_id, **fields)
                self._refresh_list()
            except ValidationError as e:
                messagebox.showerror("Error", "; ".join(e.errors), parent=self)

    def _delete_selected(self):
        potluck_id = self._get_selected_potluck_id()
        if potluck_id is None:
            messagebox.showinfo("Info", "Select a potluck to delete.", parent=self)
            return

        potluck = potluck_service.get_potluck_by_id(potluck_id)
        if not messagebox.askokcancel(
            "Confirm Delete",
            f"Delete potluck '{potluck.title_en}' and all of its sign-ups?\n\n"
            f"This cannot be undone.",
            parent=self,
        ):
            return

        try:
            potluck_service.delete_potluck(potluck_id)
            self._refresh_list()
        except ServiceError as e:
            messagebox.showerror("Error", str(e), parent=self)


class _PotluckFormDialog(ctk.CTkToplevel):
    """Form dialog for adding/editing a potluck."""

    _TEXT_FIELDS = (
        ("title_en", "Title (English):"),
        ("title_da", "Title (Danish):"),
        ("slug", "Slug (optional):"),
        ("subtitle_en", "Subtitle (English):"),
        ("subtitle_da", "Subtitle (Danish):"),
        ("footer_en", "Footer (English):"),
        ("footer_da", "Footer (Danish):"),
        ("organizer_name", "Organizer:"),
        ("organizer_email", "Organizer e-mail:"),
    )

    def __init__(self, parent, title: str = "Potluck", potluck=None):
        super().__init__(parent)

        self.result = None
        self.title(title)
        self.geometry("420x640")
        self.resizable(False, True)
        self.transient(parent)
        self.grab_set()

        form_frame = ctk.CTkScrollableFrame(self)
        form_frame.pack(fill="both", expand=True, padx=15, pady=15)

        self.entries = {}
        for field, label in self._TEXT_FIELDS:
            ctk.CTkLabel(form_frame, text=label).pack(anchor="w", pady=(0, 2))
            entry = ctk.CTkEntry(form_frame, width=360)
            entry.pack(fill="x", pady=(0, 10))
            if potluck is not None:
                entry.insert(0, getattr(potluck, field) or "")
            self.entries[field] = entry

        ctk.CTkLabel(form_frame, text="Date (YYYY-MM-DD HH:MM):").pack(anchor="w", pady=(0, 2))
        self.date_entry = ctk.CTkEntry(form_frame, width=200)
        self.date_entry.pack(anchor="w", pady=(0, 10))
        if potluck is not None:
            self.date_entry.insert(0, format_event_datetime(potluck.event_datetime))

        self.active_var = ctk.BooleanVar(value=True if potluck is None else bool(potluck.is_active))
        ctk.CTkCheckBox(form_frame, text="Active", variable=self.active_var).pack(
            anchor="w", pady=(0, 10)
        )

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.pack(fill="x", padx=15, pady=(0, 15))

        ctk.CTkButton(btn_frame, text="Save", command=self._on_save).pack(
            side="right", padx=(5, 0)
        )
        ctk.CTkButton(btn_frame, text="Cancel", fg_color="gray", command=self.destroy).pack(
            side="right"
        )

    def _on_save(self):
        result = {field: entry.get().strip() for field, entry in self.entries.items()}
        if not result["title_en"]:
            messagebox.showerror("Error", "English title is required.", parent=self)
            return

        try:
            result["event_datetime"] = parse_event_datetime(self.date_entry.get())
        except ValueError as e:
            messagebox.showerror("Error", str(e), parent=self)
            return

        result["is_active"] = self.active_var.get()
        self.result = result
        self.destroy()
