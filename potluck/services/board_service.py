"""
Board Service - the sign-up board of one potluck.

The board is rebuilt from scratch on every load: enabled categories in
display order, each with its registrations reconciled into a CategorySlots
(slotted categories) or AdditionalItems (unbounded categories). Nothing is
merged with a previous board; change notifications simply trigger another
load_board().
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Union

from potluck.models.category import Category
from potluck.models.registration import Registration
from potluck.services import potluck_service, registration_service
from potluck.services.additional_items import AdditionalItems
from potluck.services.database import session_scope
from potluck.services.logging_utils import get_service_logger
from potluck.services.registration_service import RegistrationStore
from potluck.services.slot_engine import CategorySlots

logger = get_service_logger(__name__)

Section = Union[CategorySlots, AdditionalItems]


@dataclass
class CategoryBoard:
    """One category on the board."""

    category: Category
    sort_order: int
    section: Section

    @property
    def storage_key(self) -> str:
        return self.category.storage_key

    @property
    def is_unbounded(self) -> bool:
        return bool(self.category.is_unbounded)

    def save(self, index: int, name: str, description: str) -> bool:
        """
        Save what was typed into card ``index``.

        For unbounded categories an index past the last item appends a new one.

        Returns:
            True when the store accepted the change
        """
        if self.is_unbounded:
            if index >= len(self.section):
                return self.section.append(name, description) is not None
            return self.section.save_at(index, name, description)
        return self.section.save_slot(index, name, description)

    def clear(self, index: int) -> bool:
        """Remove the registration shown on card ``index``."""
        if self.is_unbounded:
            return self.section.remove_at(index)
        return self.section.clear_slot(index)


class Board:
    """
    Reconciled view state of one potluck.

    Attributes:
        potluck_id: Potluck shown
        store: Store used for every write from this board
        categories: Sections in display order
    """

    def __init__(self, potluck_id: int, store: RegistrationStore, categories: List[CategoryBoard]):
        self.potluck_id = potluck_id
        self.store = store
        self.categories = categories
        self._by_key: Dict[str, CategoryBoard] = {c.storage_key: c for c in categories}

    def __iter__(self) -> Iterator[CategoryBoard]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    def get(self, storage_key: str) -> Optional[CategoryBoard]:
        """Section for a storage key, or None."""
        return self._by_key.get(storage_key)

    def registrations(self) -> List[Registration]:
        """Every registration shown on the board."""
        result = []
        for entry in self.categories:
            result.extend(entry.section.registrations())
        return result

    def has_incomplete_entries(self) -> bool:
        return registration_service.has_incomplete_entries(self.registrations())


def build_board(
    potluck_id: int,
    bindings,
    registrations: List[Registration],
    store: RegistrationStore,
) -> Board:
    """
    Assemble a Board from already loaded bindings and registrations.

    Registrations filed under categories that are not enabled are left out.
    """
    by_category: Dict[int, List[Registration]] = {}
    for registration in registrations:
        by_category.setdefault(registration.category_id, []).append(registration)

    entries = []
    for binding in bindings:
        category = binding.category
        if category is None:
            continue
        category_registrations = by_category.get(category.id, [])
        if category.is_unbounded:
            section: Section = AdditionalItems(category, category_registrations, store)
        else:
            section = CategorySlots(category, category_registrations, store)
        entries.append(CategoryBoard(category, binding.sort_order, section))

    return Board(potluck_id, store, entries)


def load_board(potluck_id: int, store: Optional[RegistrationStore] = None) -> Board:
    """
    Load the board of a potluck from the store.

    Args:
        potluck_id: Potluck ID
        store: Optional store for writes (a new one is bound to the potluck otherwise)

    Returns:
        Freshly built Board
    """
    store = store or RegistrationStore(potluck_id)
    with session_scope() as session:
        bindings = potluck_service.list_potluck_categories(potluck_id, session=session)
        registrations = registration_service.list_registrations(potluck_id, session=session)

    board = build_board(potluck_id, bindings, registrations, store)
    logger.debug(
        f"Loaded board for potluck {potluck_id}: "
        f"{len(board)} categories, {len(registrations)} registrations"
    )
    return board
