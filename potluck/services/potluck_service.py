"""
Potluck Service - potlucks and their category line-up.

Provides:
- Potluck CRUD
- Category bindings: upsert by (potluck, category), enable/disable
- Reordering enabled categories (move up / move down)

Session Management Pattern:
- All functions accept optional `session` parameter
- If session is provided, use it directly (allows callers to manage transactions)
- If session is None, create a new session_scope for the operation
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from potluck.models.category import Category
from potluck.models.potluck import Potluck
from potluck.models.potluck_category import PotluckCategory
from potluck.models.registration import Registration
from potluck.services.change_feed import mark_registrations_changed
from potluck.services.database import session_scope
from potluck.services.exceptions import (
    CategoryNotFoundById,
    PotluckNotFound,
    PotluckNotFoundBySlug,
    ValidationError,
)
from potluck.services.logging_utils import get_service_logger, log_operation
from potluck.utils.slug_utils import create_slug

logger = get_service_logger(__name__)

_EDITABLE_FIELDS = (
    "slug",
    "title_en",
    "title_da",
    "subtitle_en",
    "subtitle_da",
    "footer_en",
    "footer_da",
    "event_datetime",
    "is_active",
    "organizer_name",
    "organizer_email",
    "icon",
)


def _potluck_slug(value: str) -> str:
    return create_slug(value).replace("_", "-")


def _require_potluck(sess: Session, potluck_id: int) -> Potluck:
    potluck = sess.get(Potluck, potluck_id)
    if potluck is None:
        raise PotluckNotFound(potluck_id)
    return potluck


# ============================================================================
# Potluck CRUD
# ============================================================================


def create_potluck(
    title_en: str,
    slug: Optional[str] = None,
    session: Optional[Session] = None,
    **fields: Any,
) -> Potluck:
    """
    Create a new potluck.

    Args:
        title_en: English title (required)
        slug: URL-friendly identifier (derived from the title if omitted)
        **fields: Any other editable potluck field (title_da, event_datetime, ...)

    Returns:
        Created Potluck

    Raises:
        ValidationError: Empty title, unknown field or duplicate slug
    """
    if not title_en or not title_en.strip():
        raise ValidationError(["Potluck title cannot be empty"])
    unknown = [f for f in fields if f not in _EDITABLE_FIELDS]
    if unknown:
        raise ValidationError([f"Unknown potluck field(s): {', '.join(sorted(unknown))}"])

    final_slug = _potluck_slug(slug or title_en)
    if not final_slug:
        raise ValidationError(["Potluck slug cannot be empty"])

    def _impl(sess: Session) -> Potluck:
        if sess.query(Potluck).filter(Potluck.slug == final_slug).first():
            raise ValidationError([f"Potluck with slug '{final_slug}' already exists"])

        potluck = Potluck(slug=final_slug, title_en=title_en.strip(), **fields)
        if not potluck.title_da:
            potluck.title_da = potluck.title_en
        sess.add(potluck)
        sess.flush()
        sess.refresh(potluck)
        log_operation(
            logger,
            operation="create_potluck",
            outcome="success",
            potluck_id=potluck.id,
            slug=final_slug,
        )
        return potluck

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def list_potlucks(session: Optional[Session] = None) -> List[Potluck]:
    """List all potlucks, newest first."""

    def _impl(sess: Session) -> List[Potluck]:
        return sess.query(Potluck).order_by(Potluck.created_at.desc(), Potluck.id.desc()).all()

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def get_potluck_by_id(potluck_id: int, session: Optional[Session] = None) -> Potluck:
    """
    Get a potluck by ID.

    Raises:
        PotluckNotFound: If the potluck doesn't exist
    """

    def _impl(sess: Session) -> Potluck:
        return _require_potluck(sess, potluck_id)

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def get_potluck_by_slug(slug: str, session: Optional[Session] = None) -> Potluck:
    """
    Get a potluck by slug.

    Raises:
        PotluckNotFoundBySlug: If the potluck doesn't exist
    """

    def _impl(sess: Session) -> Potluck:
        potluck = sess.query(Potluck).filter(Potluck.slug == slug).first()
        if potluck is None:
            raise PotluckNotFoundBySlug(slug)
        return potluck

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def get_active_potluck(
    slug: Optional[str] = None,
    session: Optional[Session] = None,
) -> Optional[Potluck]:
    """
    Pick the potluck to show on startup.

    Args:
        slug: Explicit potluck; when None the newest active potluck is used

    Returns:
        Potluck, or None when nothing matches
    """

    def _impl(sess: Session) -> Optional[Potluck]:
        query = sess.query(Potluck)
        if slug:
            query = query.filter(Potluck.slug == slug)
        else:
            query = query.filter(Potluck.is_active.is_(True))
        return query.order_by(Potluck.created_at.desc(), Potluck.id.desc()).first()

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def update_potluck(potluck_id: int, session: Optional[Session] = None, **fields: Any) -> Potluck:
    """
    Update potluck fields.

    Raises:
        PotluckNotFound: If the potluck doesn't exist
        ValidationError: Unknown field, empty title or duplicate slug
    """
    unknown = [f for f in fields if f not in _EDITABLE_FIELDS]
    if unknown:
        raise ValidationError([f"Unknown potluck field(s): {', '.join(sorted(unknown))}"])
    if "title_en" in fields and not (fields["title_en"] or "").strip():
        raise ValidationError(["Potluck title cannot be empty"])
    if "event_datetime" in fields and fields["event_datetime"] is not None:
        if not isinstance(fields["event_datetime"], datetime):
            raise ValidationError(["event_datetime must be a datetime"])

    def _impl(sess: Session) -> Potluck:
        potluck = _require_potluck(sess, potluck_id)

        if "slug" in fields:
            new_slug = _potluck_slug(fields["slug"] or "")
            if not new_slug:
                raise ValidationError(["Potluck slug cannot be empty"])
            clash = (
                sess.query(Potluck)
                .filter(Potluck.slug == new_slug, Potluck.id != potluck_id)
                .first()
            )
            if clash:
                raise ValidationError([f"Potluck with slug '{new_slug}' already exists"])
            fields["slug"] = new_slug

        for field, value in fields.items():
            setattr(potluck, field, value)

        sess.flush()
        sess.refresh(potluck)
        return potluck

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def delete_potluck(potluck_id: int, session: Optional[Session] = None) -> None:
    """
    Delete a potluck with its category bindings and registrations.

    Raises:
        PotluckNotFound: If the potluck doesn't exist
    """

    def _impl(sess: Session) -> None:
        potluck = _require_potluck(sess, potluck_id)
        sess.query(Registration).filter(Registration.potluck_id == potluck_id).delete(
            synchronize_session="fetch"
        )
        sess.query(PotluckCategory).filter(PotluckCategory.potluck_id == potluck_id).delete(
            synchronize_session="fetch"
        )
        sess.delete(potluck)
        sess.flush()
        mark_registrations_changed(sess, potluck_id)
        log_operation(logger, operation="delete_potluck", outcome="success", potluck_id=potluck_id)

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


# ============================================================================
# Category bindings
# ============================================================================


def list_potluck_categories(
    potluck_id: int,
    enabled_only: bool = True,
    session: Optional[Session] = None,
) -> List[PotluckCategory]:
    """
    List a potluck's category bindings in display order.

    The bound Category is loaded with each binding.

    Args:
        potluck_id: Potluck ID
        enabled_only: Skip disabled bindings (default True)

    Returns:
        Bindings ordered by sort_order, then id
    """

    def _impl(sess: Session) -> List[PotluckCategory]:
        query = (
            sess.query(PotluckCategory)
            .options(joinedload(PotluckCategory.category))
            .filter(PotluckCategory.potluck_id == potluck_id)
        )
        if enabled_only:
            query = query.filter(PotluckCategory.is_enabled.is_(True))
        return query.order_by(PotluckCategory.sort_order, PotluckCategory.id).all()

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def upsert_potluck_category(
    potluck_id: int,
    category_id: int,
    sort_order: int,
    is_enabled: bool = True,
    session: Optional[Session] = None,
) -> PotluckCategory:
    """
    Create or update the binding of a category to a potluck.

    There is at most one binding per (potluck, category) pair.

    Raises:
        PotluckNotFound: Unknown potluck
        CategoryNotFoundById: Unknown category
    """

    def _impl(sess: Session) -> PotluckCategory:
        _require_potluck(sess, potluck_id)
        if sess.get(Category, category_id) is None:
            raise CategoryNotFoundById(category_id)

        binding = (
            sess.query(PotluckCategory)
            .filter(
                PotluckCategory.potluck_id == potluck_id,
                PotluckCategory.category_id == category_id,
            )
            .first()
        )
        if binding is None:
            binding = PotluckCategory(potluck_id=potluck_id, category_id=category_id)
            sess.add(binding)

        binding.sort_order = sort_order
        binding.is_enabled = is_enabled
        sess.flush()
        sess.refresh(binding)
        return binding

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def set_category_enabled(
    potluck_id: int,
    category_id: int,
    enabled: bool,
    session: Optional[Session] = None,
) -> Optional[PotluckCategory]:
    """
    Enable or disable a category for a potluck.

    Enabling appends the category after all existing bindings; enabling an
    already enabled category leaves its position alone. Disabling removes
    the binding.

    Returns:
        The binding when enabled, None when disabled
    """

    def _impl(sess: Session) -> Optional[PotluckCategory]:
        binding = (
            sess.query(PotluckCategory)
            .filter(
                PotluckCategory.potluck_id == potluck_id,
                PotluckCategory.category_id == category_id,
            )
            .first()
        )

        if not enabled:
            if binding is not None:
                sess.delete(binding)
                sess.flush()
                log_operation(
                    logger,
                    operation="disable_category",
                    outcome="success",
                    potluck_id=potluck_id,
                    category_id=category_id,
                )
            return None

        if binding is not None and binding.is_enabled:
            return binding

        max_order = (
            sess.query(func.max(PotluckCategory.sort_order))
            .filter(PotluckCategory.potluck_id == potluck_id)
            .scalar()
        )
        next_order = 0 if max_order is None else max_order + 1
        return upsert_potluck_category(
            potluck_id, category_id, sort_order=next_order, is_enabled=True, session=sess
        )

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def _move_category(potluck_id: int, category_id: int, step: int, sess: Session) -> bool:
    bindings = (
        sess.query(PotluckCategory)
        .filter(
            PotluckCategory.potluck_id == potluck_id,
            PotluckCategory.is_enabled.is_(True),
        )
        .order_by(PotluckCategory.sort_order, PotluckCategory.id)
        .with_for_update()
        .all()
    )

    index = next((i for i, b in enumerate(bindings) if b.category_id == category_id), None)
    operation = "move_category_up" if step < 0 else "move_category_down"
    if index is None or not 0 <= index + step < len(bindings):
        log_operation(
            logger,
            operation=operation,
            outcome="noop",
            level=logging.DEBUG,
            potluck_id=potluck_id,
            category_id=category_id,
        )
        return False

    current = bindings[index]
    neighbour = bindings[index + step]

    # Equal keys would make the swap a no-op; renumber in current order first
    if current.sort_order == neighbour.sort_order:
        for position, binding in enumerate(bindings):
            binding.sort_order = position

    current.sort_order, neighbour.sort_order = neighbour.sort_order, current.sort_order
    sess.flush()
    log_operation(
        logger,
        operation=operation,
        outcome="success",
        potluck_id=potluck_id,
        category_id=category_id,
        swapped_with=neighbour.category_id,
    )
    return True


def move_category_up(
    potluck_id: int,
    category_id: int,
    session: Optional[Session] = None,
) -> bool:
    """
    Swap a category's position with the enabled category before it.

    Both bindings are written in one transaction.

    Returns:
        True if the order changed; False at the top or when the category
        is not enabled for the potluck
    """
    if session is not None:
        return _move_category(potluck_id, category_id, -1, session)

    with session_scope() as sess:
        return _move_category(potluck_id, category_id, -1, sess)


def move_category_down(
    potluck_id: int,
    category_id: int,
    session: Optional[Session] = None,
) -> bool:
    """
    Swap a category's position with the enabled category after it.

    Both bindings are written in one transaction.

    Returns:
        True if the order changed; False at the bottom or when the category
        is not enabled for the potluck
    """
    if session is not None:
        return _move_category(potluck_id, category_id, 1, session)

    with session_scope() as sess:
        return _move_category(potluck_id, category_id, 1, sess)
