"""
Potluck Categories Dialog - which categories a potluck shows, and in what order.

Enabled categories are listed first in display order, followed by the
disabled rest of the catalog.
"""

from tkinter import messagebox, ttk
from typing import Callable, Optional

import customtkinter as ctk

from potluck.services import category_service, potluck_service
from potluck.services.exceptions import ServiceError


class PotluckCategoriesDialog(ctk.CTkToplevel):
    """
    Admin dialog for a potluck's category line-up.

    Args:
        parent: Parent window
        potluck_id: Potluck being edited
        on_close: Optional callback when window closes
    """

    def __init__(self, parent, potluck_id: int, on_close: Optional[Callable] = None):
        super().__init__(parent)

        self.potluck_id = potluck_id
        self.on_close = on_close
        self._enabled_ids = []

        potluck = potluck_service.get_potluck_by_id(potluck_id)
        self.title(f"Categories - {potluck.title_en}")
        self.geometry("560x440")
        self.minsize(460, 340)

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

        columns = ("position", "name", "enabled")
        self.tree = ttk.Treeview(
            list_frame,
            columns=columns,
            show="headings",
            selectmode="browse",
        )
        self.tree.heading("position", text="#")
        self.tree.heading("name", text="Category")
        self.tree.heading("enabled", text="Shown")

        self.tree.column("position", width=40, minwidth=30)
        self.tree.column("name", width=220, minwidth=120)
        self.tree.column("enabled", width=70, minwidth=50)

        scrollbar = ttk.Scrollbar(list_frame, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=scrollbar.set)

        self.tree.pack(side="left", fill="both", expand=True)
        scrollbar.pack(side="right", fill="y")

        self.tree.bind("<Double-1>", lambda e: self._toggle_selected())

        button_frame = ctk.CTkFrame(main_frame)
        button_frame.pack(side="right", fill="y", padx=(5, 0))

        ctk.CTkButton(button_frame, text="Enable", width=100, command=self._enable_selected).pack(
            pady=(0, 5)
        )
        ctk.CTkButton(
            button_frame, text="Disable", width=100, command=self._disable_selected
        ).pack(pady=5)

        ttk.Separator(button_frame, orient="horizontal").pack(fill="x", pady=10)

        self.move_up_btn = ctk.CTkButton(
            button_frame, text="Move Up", width=100, command=self._move_up
        )
        self.move_up_btn.pack(pady=5)

        self.move_down_btn = ctk.CTkButton(
            button_frame, text="Move Down", width=100, command=self._move_down
        )
        self.move_down_btn.pack(pady=5)

    def _refresh_list(self, select_id: Optional[int] = None):
        for item in self.tree.get_children():
            self.tree.delete(item)

        bindings = potluck_service.list_potluck_categories(self.potluck_id)
        self._enabled_ids = [b.category_id for b in bindings]

        for position, binding in enumerate(bindings, start=1):
            self.tree.insert(
                "",
                "end",
                iid=str(binding.category_id),
                values=(position, binding.category.name, "Yes"),
            )

        for category in category_service.list_categories():
            if category.id in self._enabled_ids:
                continue
            self.tree.insert("", "end", iid=str(category.id), values=("", category.name, ""))

        if select_id is not None and self.tree.exists(str(select_id)):
            self.tree.selection_set(str(select_id))
            self.tree.see(str(select_id))

    def _get_selected_category_id(self) -> Optional[int]:
        selection = self.tree.selection()
        if not selection:
            return None
        return int(selection[0])

    def _set_enabled(self, enabled: bool):
        cat_id = self._get_selected_category_id()
        if cat_id is None:
            messagebox.showinfo("Info", "Select a category first.", parent=self)
            return

        try:
            potluck_service.set_category_enabled(self.potluck_id, cat_id, enabled)
        except ServiceError as e:
            messagebox.showerror("Error", str(e), parent=self)
            return
        self._refresh_list(select_id=cat_id)

    def _enable_selected(self):
        self._set_enabled(True)

    def _disable_selected(self):
        self._set_enabled(False)

    def _toggle_selected(self):
        cat_id = self._get_selected_category_id()
        if cat_id is not None:
            self._set_enabled(cat_id not in self._enabled_ids)

    def _move_up(self):
        cat_id = self._get_selected_category_id()
        if cat_id is None:
            return
        if potluck_service.move_category_up(self.potluck_id, cat_id):
            self._refresh_list(select_id=cat_id)

    def _move_down(self):
        cat_id = self._get_selected_category_id()
        if cat_id is None:
            return
        if potluck_service.move_category_down(self.potluck_id, cat_id):
            self._refresh_list(select_id=cat_id)
