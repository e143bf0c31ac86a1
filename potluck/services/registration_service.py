"""
Registration Service - the authoritative store of guest registrations.

This module owns every write to the registrations table:

- save_registration(): upsert by identity, with best-effort GIF enrichment
- delete_registration(): idempotent delete followed by slot renumbering
- reorganize_slots(): closes gaps in a slotted category (1..n)

RegistrationStore wraps these functions for the slot engine. The engine
works with sentinels, so the store logs every failure and returns None or
False instead of raising.

Session Management Pattern:
- All functions accept optional `session` parameter
- If session is provided, use it directly (allows callers to manage transactions)
- If session is None, create a new session_scope for the operation
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from potluck.models.category import Category
from potluck.models.potluck import Potluck
from potluck.models.registration import Registration
from potluck.services.change_feed import mark_registrations_changed
from potluck.services.database import session_scope, with_retry
from potluck.services.enrichment_service import find_gif_for_description
from potluck.services.exceptions import (
    CategoryNotFoundById,
    DatabaseError,
    PotluckNotFound,
    RegistrationNotFound,
    ServiceError,
    ValidationError,
)
from potluck.services.logging_utils import get_service_logger, log_operation
from potluck.utils.constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH

logger = get_service_logger(__name__)


# ============================================================================
# Validation
# ============================================================================


def validate_registration_fields(name: Optional[str], description: Optional[str]) -> List[str]:
    """
    Check name and description of a registration.

    Returns:
        List of error messages (empty when valid)
    """
    errors = []
    name = (name or "").strip()
    description = (description or "").strip()

    if not name:
        errors.append("Name cannot be empty")
    elif len(name) > MAX_NAME_LENGTH:
        errors.append(f"Name cannot exceed {MAX_NAME_LENGTH} characters")

    if not description:
        errors.append("Description cannot be empty")
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        errors.append(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")

    return errors


def _check_slot_number(category: Category, slot_number: Optional[int]) -> None:
    if category.is_unbounded:
        if slot_number is not None:
            raise ValidationError(
                [f"Category '{category.name}' does not use slots (got slot {slot_number})"]
            )
        return

    if slot_number is None:
        raise ValidationError([f"Category '{category.name}' requires a slot number"])
    if isinstance(slot_number, bool) or not isinstance(slot_number, int) or slot_number < 1:
        raise ValidationError([f"Slot number must be a positive integer (got {slot_number!r})"])


# ============================================================================
# Queries
# ============================================================================


def list_registrations(potluck_id: int, session: Optional[Session] = None) -> List[Registration]:
    """
    List all registrations of a potluck in creation order.

    Args:
        potluck_id: Potluck ID
        session: Optional database session

    Returns:
        Registrations ordered by created_at, then id
    """

    def _impl(sess: Session) -> List[Registration]:
        return (
            sess.query(Registration)
            .filter(Registration.potluck_id == potluck_id)
            .order_by(Registration.created_at, Registration.id)
            .all()
        )

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def get_registration(registration_id: int, session: Optional[Session] = None) -> Registration:
    """
    Get a registration by ID.

    Raises:
        RegistrationNotFound: If the registration doesn't exist
    """

    def _impl(sess: Session) -> Registration:
        registration = sess.get(Registration, registration_id)
        if registration is None:
            raise RegistrationNotFound(registration_id)
        return registration

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def has_incomplete_entries(registrations: Iterable[Optional[Registration]]) -> bool:
    """
    True when any registration has a blank name or description.

    ``None`` entries (empty slots) are ignored.
    """
    for registration in registrations:
        if registration is None:
            continue
        if not (registration.name or "").strip() or not (registration.description or "").strip():
            return True
    return False


# ============================================================================
# Writes
# ============================================================================


def resolve_gif_url(
    description: str,
    registration_id: Optional[int] = None,
    session: Optional[Session] = None,
) -> Optional[str]:
    """
    GIF for a registration about to be saved.

    Reuses the stored row's image when it has one; otherwise looks one up
    for the description.
    """
    if registration_id is not None:
        try:
            existing = get_registration(registration_id, session=session).gif_url
        except RegistrationNotFound:
            existing = None
        if existing:
            return existing
    return find_gif_for_description((description or "").strip())


def save_registration(
    potluck_id: int,
    category_id: int,
    name: str,
    description: str,
    slot_number: Optional[int] = None,
    registration_id: Optional[int] = None,
    gif_url: Optional[str] = None,
    enrich: bool = True,
    session: Optional[Session] = None,
) -> Registration:
    """
    Create or update a registration (upsert by identity).

    When no ``gif_url`` is given and the stored row has none, the description
    is enriched with a GIF (see resolve_gif_url). Enrichment runs before the
    write and its failures never abort the save. An empty string ``gif_url``
    stores no image and skips enrichment.

    Args:
        potluck_id: Potluck the registration belongs to
        category_id: Category the registration is filed under
        name: Guest name (non-blank)
        description: What the guest brings (non-blank)
        slot_number: 1-based slot for slotted categories, None for unbounded ones
        registration_id: Existing registration to update; None creates a new one
        gif_url: Explicit image URL (skips enrichment)
        enrich: False when the caller already resolved ``gif_url``
        session: Optional database session

    Returns:
        The saved Registration

    Raises:
        ValidationError: Blank fields or a slot number that doesn't fit the category
        PotluckNotFound: Unknown potluck
        CategoryNotFoundById: Unknown category
    """
    errors = validate_registration_fields(name, description)
    if errors:
        raise ValidationError(errors)
    name = name.strip()
    description = description.strip()

    if gif_url is None and enrich:
        gif_url = resolve_gif_url(description, registration_id, session=session)
    gif_url = (gif_url or "").strip() or None

    def _impl(sess: Session) -> Registration:
        if sess.get(Potluck, potluck_id) is None:
            raise PotluckNotFound(potluck_id)
        category = sess.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundById(category_id)
        _check_slot_number(category, slot_number)

        registration = None
        if registration_id is not None:
            registration = sess.get(Registration, registration_id)
            if registration is None:
                # Deleted elsewhere since the caller loaded it
                logger.warning(
                    f"Registration {registration_id} no longer exists, creating a new one"
                )

        created = registration is None
        if created:
            registration = Registration(potluck_id=potluck_id)
            sess.add(registration)

        registration.potluck_id = potluck_id
        registration.category_id = category_id
        registration.name = name
        registration.description = description
        registration.slot_number = slot_number
        registration.gif_url = gif_url

        sess.flush()
        sess.refresh(registration)
        log_operation(
            logger,
            operation="save_registration",
            outcome="created" if created else "updated",
            registration_id=registration.id,
            potluck_id=potluck_id,
            category_id=category_id,
            slot_number=slot_number,
        )
        return registration

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def reorganize_slots(
    potluck_id: int,
    category_id: int,
    session: Optional[Session] = None,
) -> int:
    """
    Renumber the slotted registrations of one category as 1..n.

    Relative order is kept: ascending previous slot number, ties broken by
    creation time and id.

    Returns:
        Number of registrations whose slot number changed
    """

    def _impl(sess: Session) -> int:
        registrations = (
            sess.query(Registration)
            .filter(
                Registration.potluck_id == potluck_id,
                Registration.category_id == category_id,
                Registration.slot_number.isnot(None),
            )
            .order_by(Registration.slot_number, Registration.created_at, Registration.id)
            .all()
        )

        changed = 0
        for position, registration in enumerate(registrations, start=1):
            if registration.slot_number != position:
                registration.slot_number = position
                changed += 1

        if changed:
            sess.flush()
            log_operation(
                logger,
                operation="reorganize_slots",
                outcome="renumbered",
                potluck_id=potluck_id,
                category_id=category_id,
                changed=changed,
            )
        return changed

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def delete_registration(registration_id: int, session: Optional[Session] = None) -> bool:
    """
    Delete a registration and close the gap it leaves.

    Deleting an ID that doesn't exist is not an error, so repeating a delete
    is safe.

    Returns:
        True if a row was deleted, False if it was already gone
    """

    def _impl(sess: Session) -> bool:
        registration = sess.get(Registration, registration_id)
        if registration is None:
            log_operation(
                logger,
                operation="delete_registration",
                outcome="already_deleted",
                level=logging.DEBUG,
                registration_id=registration_id,
            )
            return False

        potluck_id = registration.potluck_id
        category_id = registration.category_id
        was_slotted = registration.slot_number is not None

        sess.delete(registration)
        sess.flush()
        mark_registrations_changed(sess, potluck_id)

        if was_slotted:
            reorganize_slots(potluck_id, category_id, session=sess)

        log_operation(
            logger,
            operation="delete_registration",
            outcome="success",
            registration_id=registration_id,
            potluck_id=potluck_id,
            category_id=category_id,
        )
        return True

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


# ============================================================================
# Engine-facing store
# ============================================================================


class RegistrationStore:
    """
    Registration store bound to one potluck.

    Every method converts service and database errors into sentinels:
    ``save`` returns None and ``delete`` returns False on failure. Writes
    are retried on transient database errors.
    """

    def __init__(self, potluck_id: int):
        self.potluck_id = potluck_id

    def load(self) -> List[Registration]:
        """All registrations of the potluck, in creation order."""
        return list_registrations(self.potluck_id)

    def save(
        self,
        category_id: int,
        name: str,
        description: str,
        slot_number: Optional[int] = None,
        registration_id: Optional[int] = None,
        gif_url: Optional[str] = None,
    ) -> Optional[Registration]:
        """
        Upsert a registration; None on any failure.

        The GIF is resolved once, before the retried database write.
        """
        try:
            errors = validate_registration_fields(name, description)
            if errors:
                raise ValidationError(errors)
            if gif_url is None:
                gif_url = resolve_gif_url(description, registration_id)
            return with_retry(
                lambda: save_registration(
                    self.potluck_id,
                    category_id,
                    name,
                    description,
                    slot_number=slot_number,
                    registration_id=registration_id,
                    gif_url=gif_url,
                    enrich=False,
                )
            )
        except ValidationError as e:
            log_operation(
                logger,
                operation="save_registration",
                outcome="validation_failed",
                level=logging.WARNING,
                potluck_id=self.potluck_id,
                category_id=category_id,
                errors=e.errors,
            )
        except ServiceError as e:
            log_operation(
                logger,
                operation="save_registration",
                outcome="rejected",
                level=logging.WARNING,
                potluck_id=self.potluck_id,
                category_id=category_id,
                error=str(e),
            )
        except SQLAlchemyError as e:
            error = DatabaseError("failed to save registration", original_error=e)
            logger.error(str(error), exc_info=True)
        return None

    def delete(self, registration_id: int) -> bool:
        """Delete a registration; True when it is gone afterwards."""
        try:
            with_retry(lambda: delete_registration(registration_id))
            return True
        except SQLAlchemyError as e:
            error = DatabaseError(
                f"failed to delete registration {registration_id}", original_error=e
            )
            logger.error(str(error), exc_info=True)
            return False
