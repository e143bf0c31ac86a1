"""
Unbounded ("additional items") categories.

Items are a plain list in store order with no slot numbers and no empty
entries. New items go to the end; removing one shifts the rest down. The
blank "add" card shown after the items is not part of the list.
"""

import logging
from typing import Iterable, List, Optional

from potluck.models.registration import Registration
from potluck.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


class AdditionalItems:
    """
    Working item list of one unbounded category within one potluck.

    Args:
        category: Category with ``id``
        registrations: Current registrations of this category, in store order
        store: Registration store bound to the potluck
    """

    def __init__(self, category, registrations: Iterable[Registration], store):
        self.category = category
        self.store = store
        self._items: List[Registration] = list(registrations)

    @property
    def items(self) -> List[Registration]:
        """Copy of the current item list."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Registration:
        return self._items[index]

    def registrations(self) -> List[Registration]:
        return list(self._items)

    def rebuild(self, registrations: Iterable[Registration]) -> List[Registration]:
        """Replace local state with authoritative data."""
        self._items = list(registrations)
        return self.items

    def _valid(self, operation: str, name: str, description: str) -> bool:
        if (name or "").strip() and (description or "").strip():
            return True
        log_operation(
            logger,
            operation=operation,
            outcome="validation_rejected",
            level=logging.DEBUG,
            category_id=self.category.id,
        )
        return False

    def append(self, name: str, description: str) -> Optional[Registration]:
        """
        Add a new item after all existing ones.

        Returns:
            The saved Registration, or None when rejected or the store failed
        """
        if not self._valid("append_item", name, description):
            return None

        saved = self.store.save(
            self.category.id,
            name.strip(),
            description.strip(),
            slot_number=None,
        )
        if saved is None:
            return None

        self._items = self._items + [saved]
        return saved

    def update_at(self, index: int, name: str, description: str) -> Optional[Registration]:
        """
        Rewrite the item at ``index`` under the same identity.

        Returns:
            The saved Registration, or None when rejected, out of range or
            the store failed
        """
        if not 0 <= index < len(self._items):
            logger.warning(f"update_at: index {index} out of range ({len(self._items)} items)")
            return None
        if not self._valid("update_item", name, description):
            return None

        current = self._items[index]
        saved = self.store.save(
            self.category.id,
            name.strip(),
            description.strip(),
            slot_number=None,
            registration_id=current.id,
        )
        if saved is None:
            return None

        updated = list(self._items)
        updated[index] = saved
        self._items = updated
        return saved

    def remove_at(self, index: int) -> bool:
        """
        Delete the item at ``index``; later items move down by one.

        Returns:
            True when the item was deleted
        """
        if not 0 <= index < len(self._items):
            return False

        if not self.store.delete(self._items[index].id):
            return False

        self._items = self._items[:index] + self._items[index + 1:]
        return True

    def save_at(self, index: int, name: str, description: str) -> bool:
        """
        Save what a guest typed into an item card.

        Blank name and description removes the item.

        Returns:
            True when the store accepted the change
        """
        if not (name or "").strip() and not (description or "").strip():
            return self.remove_at(index)
        return self.update_at(index, name, description) is not None
