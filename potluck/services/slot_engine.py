"""
Slot reconciliation for slotted categories.

A slotted category shows numbered "Dish #N" cards. Its working list holds one
entry per slot: ``None`` for an empty slot or the Registration occupying it.
The list is a disposable projection of the store and is rebuilt on every
reload.

Invariants kept by every operation here:

- the list is at least ``category.slots`` long
- the last entry is always ``None`` (one ready-to-fill slot)
- trailing ``None`` entries beyond the default count are trimmed to one

Interior gaps (a cleared middle slot) stay in the local list; the store
closes them by renumbering on delete, and the next reload picks that up.

Slot numbers are 1-based in the store, list indices are 0-based: index ``i``
is written as ``slot_number = i + 1``.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from potluck.models.registration import Registration
from potluck.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)

SlotList = List[Optional[Registration]]


def _precedence_key(registration: Registration):
    created = registration.created_at
    if isinstance(created, datetime) and created.tzinfo is not None:
        created = created.replace(tzinfo=None)
    return (
        created is None,
        created or datetime.min,
        registration.id if registration.id is not None else float("inf"),
    )


def ensure_trailing_empty_slot(slots: SlotList) -> SlotList:
    """
    Return a copy of ``slots`` whose last entry is ``None``.

    Appends a single ``None`` when the list is empty or its last slot is
    occupied; never adds a second trailing ``None``.
    """
    result = list(slots)
    if not result or result[-1] is not None:
        result.append(None)
    return result


def trim_trailing_empty(slots: SlotList, default_slots: int) -> SlotList:
    """
    Return a copy of ``slots`` with surplus trailing empty slots removed.

    While the list is longer than ``default_slots`` and its last two entries
    are both empty, the last one is dropped. The result never goes below the
    default count and keeps exactly one trailing ``None`` beyond it.
    Applying it twice gives the same list as applying it once.
    """
    result = list(slots)
    while (
        len(result) > default_slots
        and len(result) >= 2
        and result[-1] is None
        and result[-2] is None
    ):
        result.pop()
    return result


def build_slots(default_slots: int, registrations: Iterable[Registration]) -> SlotList:
    """
    Place registrations into a slot list.

    The list is ``max(default_slots, highest slot number)`` long, each
    registration sits at ``slot_number - 1`` and a trailing empty slot is
    added when the last one is occupied.

    Registrations without a slot number, or with one below 1, are skipped.
    When two registrations claim the same slot the earlier-created one keeps
    it (ties by id) and the conflict is logged.

    Args:
        default_slots: The category's default slot count (>= 0)
        registrations: Registrations of one category

    Returns:
        New slot list
    """
    placed = {}
    for registration in registrations:
        slot_number = registration.slot_number
        if slot_number is None:
            continue
        if slot_number < 1:
            log_operation(
                logger,
                operation="build_slots",
                outcome="invalid_slot_number",
                level=logging.WARNING,
                registration_id=registration.id,
                slot_number=slot_number,
            )
            continue

        current = placed.get(slot_number)
        if current is None:
            placed[slot_number] = registration
            continue

        winner, loser = sorted((current, registration), key=_precedence_key)
        placed[slot_number] = winner
        log_operation(
            logger,
            operation="build_slots",
            outcome="duplicate_slot_number",
            level=logging.WARNING,
            slot_number=slot_number,
            kept_registration_id=winner.id,
            dropped_registration_id=loser.id,
        )

    size = max(default_slots, max(placed, default=0))
    slots: SlotList = [None] * size
    for slot_number, registration in placed.items():
        slots[slot_number - 1] = registration
    return ensure_trailing_empty_slot(slots)


class CategorySlots:
    """
    Working slot list of one slotted category within one potluck.

    Writes go through ``store`` (a RegistrationStore or anything with the
    same ``save``/``delete`` signature). Local state only changes after the
    store reports success.

    Args:
        category: Category with ``id`` and ``slots``
        registrations: Current registrations of this category
        store: Registration store bound to the potluck
    """

    def __init__(self, category, registrations: Iterable[Registration], store):
        self.category = category
        self.store = store
        self._slots: SlotList = build_slots(self.default_slots, registrations)

    @property
    def default_slots(self) -> int:
        return self.category.slots or 0

    @property
    def slots(self) -> SlotList:
        """Copy of the current slot list."""
        return list(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> Optional[Registration]:
        return self._slots[index]

    def registrations(self) -> List[Registration]:
        """Occupied slots in slot order."""
        return [r for r in self._slots if r is not None]

    def rebuild(self, registrations: Iterable[Registration]) -> SlotList:
        """Replace local state with a fresh build from authoritative data."""
        self._slots = build_slots(self.default_slots, registrations)
        return self.slots

    def fill_slot(self, index: int, name: str, description: str) -> Optional[Registration]:
        """
        Write a registration into slot ``index`` (0-based).

        Both fields must be non-blank; otherwise nothing is written. An
        occupied slot keeps its registration identity. An index past the end
        of the list extends it.

        Returns:
            The saved Registration, or None when rejected or the store failed
        """
        if index < 0:
            logger.warning(f"fill_slot: negative index {index} rejected")
            return None

        name = (name or "").strip()
        description = (description or "").strip()
        if not name or not description:
            log_operation(
                logger,
                operation="fill_slot",
                outcome="validation_rejected",
                level=logging.DEBUG,
                category_id=self.category.id,
                index=index,
            )
            return None

        existing = self._slots[index] if index < len(self._slots) else None
        saved = self.store.save(
            self.category.id,
            name,
            description,
            slot_number=index + 1,
            registration_id=existing.id if existing is not None else None,
        )
        if saved is None:
            return None

        updated = list(self._slots)
        while len(updated) <= index:
            updated.append(None)
        updated[index] = saved
        updated = ensure_trailing_empty_slot(updated)
        self._slots = trim_trailing_empty(updated, self.default_slots)
        return saved

    def clear_slot(self, index: int) -> bool:
        """
        Delete the registration in slot ``index``.

        Returns:
            True when a registration was deleted; False for an empty or
            out-of-range slot or a store failure
        """
        if index < 0 or index >= len(self._slots) or self._slots[index] is None:
            return False

        registration = self._slots[index]
        if not self.store.delete(registration.id):
            return False

        updated = list(self._slots)
        updated[index] = None
        updated = trim_trailing_empty(updated, self.default_slots)
        self._slots = ensure_trailing_empty_slot(updated)
        return True

    def save_slot(self, index: int, name: str, description: str) -> bool:
        """
        Save what a guest typed into a slot card.

        Blank name and description on an occupied slot clears it; anything
        else is a fill.

        Returns:
            True when the store accepted the change
        """
        blank = not (name or "").strip() and not (description or "").strip()
        occupied = 0 <= index < len(self._slots) and self._slots[index] is not None
        if blank and occupied:
            return self.clear_slot(index)
        return self.fill_slot(index, name, description) is not None
