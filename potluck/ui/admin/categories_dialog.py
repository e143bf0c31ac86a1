"""
Categories Admin Dialog.

Manages the category catalog shared by all potlucks: add, edit and delete.
Which categories a potluck shows, and in what order, is managed in
PotluckCategoriesDialog.
"""

from tkinter import messagebox, ttk
from typing import Callable, Optional

import customtkinter as ctk

from potluck.services import category_service
from potluck.services.exceptions import ServiceError, ValidationError
from potluck.utils.constants import DEFAULT_CATEGORY_ICON, DEFAULT_CATEGORY_SLOTS


class CategoriesDialog(ctk.CTkToplevel):
    """
    Admin dialog for the category catalog.

    Args:
        parent: Parent window
        on_close: Optional callback when window closes
    """

    def __init__(self, parent, on_close: Optional[Callable] = None):
        super().__init__(parent)

        self.on_close = on_close
        self._categories = []

        self.title("Categories")
        self.geometry("720x480")
        self.minsize(600, 380)

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

        columns = ("name", "storage_key", "slots", "kind")
        self.tree = ttk.Treeview(
            list_frame,
            columns=columns,
            show="headings",
            selectmode="browse",
        )
        self.tree.heading("name", text="Name")
        self.tree.heading("storage_key", text="Key")
        self.tree.heading("slots", text="Slots")
        self.tree.heading("kind", text="Kind")

        self.tree.column("name", width=180, minwidth=120)
        self.tree.column("storage_key", width=140, minwidth=100)
        self.tree.column("slots", width=60, minwidth=50)
        self.tree.column("kind", width=90, minwidth=70)

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
        """Reload categories from the database."""
        for item in self.tree.get_children():
            self.tree.delete(item)

        self._categories = category_service.list_categories()

        for cat in self._categories:
            self.tree.insert(
                "",
                "end",
                iid=str(cat.id),
                values=(
                    cat.name,
                    cat.storage_key,
                    "-" if cat.is_unbounded else cat.slots,
                    "List" if cat.is_unbounded else "Slotted",
                ),
            )

    def _get_selected_category_id(self) -> Optional[int]:
        selection = self.tree.selection()
        if not selection:
            return None
        return int(selection[0])

    def _show_add_dialog(self):
        dialog = _CategoryFormDialog(self, title="Add Category")
        self.wait_window(dialog)

        if dialog.result:
            try:
                category_service.create_category(**dialog.result)
                self._refresh_list()
            except ValidationError as e:
                messagebox.showerror("Error", "; ".join(e.errors), parent=self)

    def _show_edit_dialog(self):
        cat_id = self._get_selected_category_id()
        if cat_id is None:
            messagebox.showinfo("Info", "Select a category to edit.", parent=self)
            return

        category = category_service.get_category_by_id(cat_id)

        dialog = _CategoryFormDialog(self, title="Edit Category", category=category)
        self.wait_window(dialog)

        if dialog.result:
            fields = dict(dialog.result)
            name = fields.pop("name")
            try:
                category_service.update_category(cat_id, name=name, **fields)
                self._refresh_list()
            except ValidationError as e:
                messagebox.showerror("Error", "; ".join(e.errors), parent=self)

    def _delete_selected(self):
        cat_id = self._get_selected_category_id()
        if cat_id is None:
            messagebox.showinfo("Info", "Select a category to delete.", parent=self)
            return

        category = category_service.get_category_by_id(cat_id)

        if not messagebox.askokcancel(
            "Confirm Delete",
            f"Delete category '{category.name}'?\n\n"
            f"It is removed from every potluck together with its sign-ups. "
            f"This cannot be undone.",
            parent=self,
        ):
            return

        try:
            category_service.delete_category(cat_id)
            self._refresh_list()
        except ServiceError as e:
            messagebox.showerror("Error", str(e), parent=self)


class _CategoryFormDialog(ctk.CTkToplevel):
    """Form dialog for adding/editing a category."""

    _TEXT_FIELDS = (
        ("title_en", "Title (English):"),
        ("title_da", "Title (Danish):"),
        ("singular_en", "Singular (English):"),
        ("singular_da", "Singular (Danish):"),
        ("placeholder_en", "Placeholder (English):"),
        ("placeholder_da", "Placeholder (Danish):"),
        ("icon", "Icon:"),
    )

    def __init__(self, parent, title: str = "Category", category=None):
        super().__init__(parent)

        self.result = None
        self.title(title)
        self.geometry("420x620")
        self.resizable(False, True)
        self.transient(parent)
        self.grab_set()

        form_frame = ctk.CTkScrollableFrame(self)
        form_frame.pack(fill="both", expand=True, padx=15, pady=15)

        ctk.CTkLabel(form_frame, text="Name:").pack(anchor="w", pady=(0, 2))
        self.name_entry = ctk.CTkEntry(form_frame, width=360)
        self.name_entry.pack(fill="x", pady=(0, 10))
        self.name_entry.insert(0, category.name if category else "")

        self.entries = {}
        for field, label in self._TEXT_FIELDS:
            ctk.CTkLabel(form_frame, text=label).pack(anchor="w", pady=(0, 2))
            entry = ctk.CTkEntry(form_frame, width=360)
            entry.pack(fill="x", pady=(0, 10))
            if category is not None:
                entry.insert(0, getattr(category, field) or "")
            elif field == "icon":
                entry.insert(0, DEFAULT_CATEGORY_ICON)
            self.entries[field] = entry

        ctk.CTkLabel(form_frame, text="Default slots:").pack(anchor="w", pady=(0, 2))
        self.slots_entry = ctk.CTkEntry(form_frame, width=100)
        self.slots_entry.pack(anchor="w", pady=(0, 10))
        self.slots_entry.insert(0, str(category.slots if category else DEFAULT_CATEGORY_SLOTS))

        self.unbounded_var = ctk.BooleanVar(value=bool(category and category.is_unbounded))
        ctk.CTkCheckBox(
            form_frame,
            text="List of additional items (no numbered slots)",
            variable=self.unbounded_var,
        ).pack(anchor="w", pady=(0, 10))

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.pack(fill="x", padx=15, pady=(0, 15))

        ctk.CTkButton(btn_frame, text="Save", command=self._on_save).pack(
            side="right", padx=(5, 0)
        )
        ctk.CTkButton(btn_frame, text="Cancel", fg_color="gray", command=self.destroy).pack(
            side="right"
        )

    def _on_save(self):
        name = self.name_entry.get().strip()
        if not name:
            messagebox.showerror("Error", "Name is required.", parent=self)
            return

        try:
            slots = int(self.slots_entry.get().strip())
        except ValueError:
            messagebox.showerror("Error", "Slots must be a number.", parent=self)
            return
        if slots < 0:
            messagebox.showerror("Error", "Slots cannot be negative.", parent=self)
            return

        result = {"name": name, "slots": slots, "is_unbounded": self.unbounded_var.get()}
        for field, entry in self.entries.items():
            result[field] = entry.get().strip()

        self.result = result
        self.destroy()
