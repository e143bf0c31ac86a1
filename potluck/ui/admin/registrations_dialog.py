"""
Registrations Admin Dialog.

Lists every sign-up of one potluck so an admin can correct a name or
description, pick a different GIF, clear a GIF or remove the entry.
Slot and category stay as the guest chose them.
"""

from tkinter import messagebox, ttk
from typing import Callable, Optional

import customtkinter as ctk

from potluck.services import category_service, registration_service
from potluck.services.enrichment_service import search_gifs
from potluck.services.exceptions import ServiceError, ValidationError


class RegistrationsDialog(ctk.CTkToplevel):
    """
    Admin dialog for the registrations of a potluck.

    Args:
        parent: Parent window
        potluck_id: Potluck whose registrations are listed
        on_close: Optional callback when window closes
    """

    def __init__(self, parent, potluck_id: int, on_close: Optional[Callable] = None):
        super().__init__(parent)

        self.potluck_id = potluck_id
        self.on_close = on_close
        self._registrations = {}

        self.title("Registrations")
        self.geometry("860x480")
        self.minsize(700, 380)

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

        columns = ("category", "slot", "name", "description", "gif")
        self.tree = ttk.Treeview(
            list_frame,
            columns=columns,
            show="headings",
            selectmode="browse",
        )
        self.tree.heading("category", text="Category")
        self.tree.heading("slot", text="Slot")
        self.tree.heading("name", text="Name")
        self.tree.heading("description", text="Description")
        self.tree.heading("gif", text="GIF")

        self.tree.column("category", width=130, minwidth=90)
        self.tree.column("slot", width=50, minwidth=40)
        self.tree.column("name", width=130, minwidth=90)
        self.tree.column("description", width=220, minwidth=120)
        self.tree.column("gif", width=50, minwidth=40)

        scrollbar = ttk.Scrollbar(list_frame, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=scrollbar.set)

        self.tree.pack(side="left", fill="both", expand=True)
        scrollbar.pack(side="right", fill="y")

        self.tree.bind("<Double-1>", lambda e: self._show_edit_dialog())

        button_frame = ctk.CTkFrame(main_frame)
        button_frame.pack(side="right", fill="y", padx=(5, 0))

        ctk.CTkButton(button_frame, text="Edit", width=100, command=self._show_edit_dialog).pack(
            pady=(0, 5)
        )
        ctk.CTkButton(button_frame, text="Delete", width=100, command=self._delete_selected).pack(
            pady=5
        )
        ctk.CTkButton(button_frame, text="Refresh", width=100, command=self._refresh_list).pack(
            pady=5
        )

    def _refresh_list(self):
        """Reload registrations from the database."""
        for item in self.tree.get_children():
            self.tree.delete(item)

        titles = {c.id: c.title_en or c.name for c in category_service.list_categories()}
        registrations = registration_service.list_registrations(self.potluck_id)
        registrations.sort(
            key=lambda r: (titles.get(r.category_id, ""), r.slot_number or 0, r.id)
        )
        self._registrations = {r.id: r for r in registrations}

        for reg in registrations:
            self.tree.insert(
                "",
                "end",
                iid=str(reg.id),
                values=(
                    titles.get(reg.category_id, "?"),
                    "-" if reg.slot_number is None else reg.slot_number,
                    reg.name,
                    reg.description,
                    "Yes" if reg.gif_url else "",
                ),
            )

    def _get_selected_registration(self):
        selection = self.tree.selection()
        if not selection:
            return None
        return self._registrations.get(int(selection[0]))

    def _show_edit_dialog(self):
        reg = self._get_selected_registration()
        if reg is None:
            messagebox.showinfo("Info", "Select a registration to edit.", parent=self)
            return

        dialog = _RegistrationFormDialog(self, registration=reg)
        self.wait_window(dialog)

        if dialog.result:
            try:
                registration_service.save_registration(
                    self.potluck_id,
                    reg.category_id,
                    dialog.result["name"],
                    dialog.result["description"],
                    slot_number=reg.slot_number,
                    registration_id=reg.id,
                    gif_url=dialog.result["gif_url"],
                )
                self._refresh_list()
            except ValidationError as e:
                messagebox.showerror("Error", "; ".join(e.errors), parent=self)
            except ServiceError as e:
                messagebox.showerror("Error", str(e), parent=self)

    def _delete_selected(self):
        reg = self._get_selected_registration()
        if reg is None:
            messagebox.showinfo("Info", "Select a registration to delete.", parent=self)
            return

        if not messagebox.askokcancel(
            "Confirm Delete",
            f"Delete '{reg.description}' by {reg.name}?\n\nThis cannot be undone.",
            parent=self,
        ):
            return

        try:
            registration_service.delete_registration(reg.id)
            self._refresh_list()
        except ServiceError as e:
            messagebox.showerror("Error", str(e), parent=self)


class _RegistrationFormDialog(ctk.CTkToplevel):
    """Form dialog for editing a registration and choosing its GIF."""

    def __init__(self, parent, registration):
        super().__init__(parent)

        self.result = None
        self._found = []
        self.title("Edit Registration")
        self.geometry("480x440")
        self.resizable(False, False)
        self.transient(parent)
        self.grab_set()

        form_frame = ctk.CTkFrame(self, fg_color="transparent")
        form_frame.pack(fill="both", expand=True, padx=15, pady=15)

        ctk.CTkLabel(form_frame, text="Name:").pack(anchor="w", pady=(0, 2))
        self.name_entry = ctk.CTkEntry(form_frame, width=440)
        self.name_entry.pack(fill="x", pady=(0, 10))
        self.name_entry.insert(0, registration.name or "")

        ctk.CTkLabel(form_frame, text="Description:").pack(anchor="w", pady=(0, 2))
        self.description_entry = ctk.CTkEntry(form_frame, width=440)
        self.description_entry.pack(fill="x", pady=(0, 10))
        self.description_entry.insert(0, registration.description or "")

        ctk.CTkLabel(form_frame, text="GIF URL (leave empty for no image):").pack(
            anchor="w", pady=(0, 2)
        )
        self.gif_entry = ctk.CTkEntry(form_frame, width=440)
        self.gif_entry.pack(fill="x", pady=(0, 10))
        self.gif_entry.insert(0, registration.gif_url or "")

        ctk.CTkLabel(form_frame, text="Search Giphy:").pack(anchor="w", pady=(0, 2))
        search_frame = ctk.CTkFrame(form_frame, fg_color="transparent")
        search_frame.pack(fill="x", pady=(0, 10))
        self.search_entry = ctk.CTkEntry(search_frame)
        self.search_entry.pack(side="left", fill="x", expand=True, padx=(0, 5))
        self.search_entry.insert(0, registration.description or "")
        ctk.CTkButton(search_frame, text="Search GIFs", width=110, command=self._on_search).pack(
            side="right"
        )

        self.results_menu = ctk.CTkOptionMenu(
            form_frame,
            values=["(no results)"],
            command=self._on_result_selected,
            width=440,
        )
        self.results_menu.pack(fill="x", pady=(0, 10))
        self.results_menu.set("(no results)")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.pack(fill="x", padx=15, pady=(0, 15))

        ctk.CTkButton(btn_frame, text="Save", command=self._on_save).pack(
            side="right", padx=(5, 0)
        )
        ctk.CTkButton(
            btn_frame, text="Clear GIF", fg_color="gray", command=self._on_clear_gif
        ).pack(side="left")
        ctk.CTkButton(btn_frame, text="Cancel", fg_color="gray", command=self.destroy).pack(
            side="right"
        )

    def _on_search(self):
        term = self.search_entry.get().strip()
        if not term:
            messagebox.showinfo("Info", "Enter a search term.", parent=self)
            return

        self._found = search_gifs(term)
        if not self._found:
            self.results_menu.configure(values=["(no results)"])
            self.results_menu.set("(no results)")
            messagebox.showinfo(
                "Info",
                "No GIFs found. Check GIPHY_API_KEY or try another term.",
                parent=self,
            )
            return

        labels = [f"{i}. {url}" for i, url in enumerate(self._found, start=1)]
        self.results_menu.configure(values=labels)
        self.results_menu.set(labels[0])
        self._on_result_selected(labels[0])

    def _on_result_selected(self, label: str):
        number, _, _ = label.partition(".")
        if not number.isdigit() or not self._found:
            return
        url = self._found[int(number) - 1]
        self.gif_entry.delete(0, "end")
        self.gif_entry.insert(0, url)

    def _on_clear_gif(self):
        self.gif_entry.delete(0, "end")

    def _on_save(self):
        name = self.name_entry.get().strip()
        description = self.description_entry.get().strip()
        if not name or not description:
            messagebox.showerror("Error", "Name and description are required.", parent=self)
            return

        self.result = {
            "name": name,
            "description": description,
            # Empty string stores no image instead of looking one up
            "gif_url": self.gif_entry.get().strip(),
        }
        self.destroy()
