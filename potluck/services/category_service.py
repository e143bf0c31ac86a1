"""
Category Service - CRUD operations for the category catalog.

Session Management Pattern:
- All functions accept optional `session` parameter
- If session is provided, use it directly (allows callers to manage transactions)
- If session is None, create a new session_scope for the operation
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from potluck.models.category import Category
from potluck.models.potluck_category import PotluckCategory
from potluck.models.registration import Registration
from potluck.services.change_feed import mark_registrations_changed
from potluck.services.database import session_scope
from potluck.services.exceptions import (
    CategoryNotFoundById,
    CategoryNotFoundByName,
    ValidationError,
)
from potluck.services.logging_utils import get_service_logger, log_operation
from potluck.utils.constants import (
    DEFAULT_CATEGORIES,
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_ICON,
    DEFAULT_CATEGORY_SLOTS,
    MAX_NAME_LENGTH,
)
from potluck.utils.slug_utils import create_slug, unique_storage_key

logger = get_service_logger(__name__)

# Fields an admin may edit after creation
_EDITABLE_FIELDS = (
    "title_en",
    "title_da",
    "singular_en",
    "singular_da",
    "placeholder_en",
    "placeholder_da",
    "icon",
    "color_class",
    "slots",
    "is_unbounded",
)


def _validate_name(name: Optional[str]) -> str:
    if not name or not name.strip():
        raise ValidationError(["Category name cannot be empty"])
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError([f"Category name cannot exceed {MAX_NAME_LENGTH} characters"])
    return name


def _validate_slots(slots: Any) -> int:
    if isinstance(slots, bool) or not isinstance(slots, int):
        raise ValidationError(["Slot count must be a whole number"])
    if slots < 0:
        raise ValidationError(["Slot count cannot be negative"])
    return slots


# ============================================================================
# CRUD Operations
# ============================================================================


def list_categories(session: Optional[Session] = None) -> List[Category]:
    """
    List all categories ordered by English title, then name.

    Args:
        session: Optional database session

    Returns:
        List of Category objects
    """

    def _impl(sess: Session) -> List[Category]:
        return sess.query(Category).order_by(Category.title_en, Category.name).all()

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def create_category(
    name: str,
    title_en: str = "",
    title_da: str = "",
    singular_en: str = "",
    singular_da: str = "",
    placeholder_en: str = "",
    placeholder_da: str = "",
    icon: str = DEFAULT_CATEGORY_ICON,
    color_class: str = DEFAULT_CATEGORY_COLOR,
    slots: int = DEFAULT_CATEGORY_SLOTS,
    is_unbounded: bool = False,
    storage_key: Optional[str] = None,
    session: Optional[Session] = None,
) -> Category:
    """
    Create a new category.

    The storage key is assigned here and never re-derived: an explicit
    ``storage_key`` is used as its base, otherwise the slugified name.
    Collisions get a numeric suffix ("desserts_2").

    Args:
        name: Unique internal name
        title_en: English heading (defaults to name)
        slots: Default slot count (>= 0)
        is_unbounded: List-style category without slot numbers
        storage_key: Optional explicit board key
        session: Optional database session

    Returns:
        Created Category instance

    Raises:
        ValidationError: If name is empty/duplicate or slots is invalid
    """
    name = _validate_name(name)
    slots = _validate_slots(slots)

    def _impl(sess: Session) -> Category:
        if sess.query(Category).filter(Category.name == name).first():
            raise ValidationError([f"Category with name '{name}' already exists"])

        base_key = create_slug(storage_key) if storage_key else create_slug(name)
        if not base_key:
            base_key = "category"

        category = Category(
            name=name,
            storage_key=unique_storage_key(base_key, sess),
            title_en=title_en or name,
            title_da=title_da or title_en or name,
            singular_en=singular_en,
            singular_da=singular_da,
            placeholder_en=placeholder_en,
            placeholder_da=placeholder_da,
            icon=icon,
            color_class=color_class,
            slots=slots,
            is_unbounded=is_unbounded,
        )
        sess.add(category)
        sess.flush()
        sess.refresh(category)
        log_operation(
            logger,
            operation="create_category",
            outcome="success",
            category_id=category.id,
            storage_key=category.storage_key,
        )
        return category

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def get_category_by_id(category_id: int, session: Optional[Session] = None) -> Category:
    """
    Get a category by ID.

    Raises:
        CategoryNotFoundById: If category doesn't exist
    """

    def _impl(sess: Session) -> Category:
        category = sess.query(Category).filter(Category.id == category_id).first()
        if category is None:
            raise CategoryNotFoundById(category_id)
        return category

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def get_category_by_name(name: str, session: Optional[Session] = None) -> Category:
    """
    Get a category by name.

    Raises:
        CategoryNotFoundByName: If category doesn't exist
    """

    def _impl(sess: Session) -> Category:
        category = sess.query(Category).filter(Category.name == name).first()
        if category is None:
            raise CategoryNotFoundByName(name)
        return category

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def update_category(
    category_id: int,
    name: Optional[str] = None,
    session: Optional[Session] = None,
    **fields: Any,
) -> Category:
    """
    Update a category's fields.

    The storage key is not editable; renaming a category keeps its key.
    Changing ``is_unbounded`` re-files existing registrations in the same
    transaction so the board keeps showing them.

    Args:
        category_id: Category ID to update
        name: New name (optional)
        **fields: Any of title_en, title_da, singular_en, singular_da,
            placeholder_en, placeholder_da, icon, color_class, slots, is_unbounded

    Returns:
        Updated Category instance

    Raises:
        CategoryNotFoundById: If category doesn't exist
        ValidationError: If name is empty/duplicate, slots invalid or a field is unknown
    """
    unknown = [f for f in fields if f not in _EDITABLE_FIELDS]
    if unknown:
        raise ValidationError([f"Unknown category field(s): {', '.join(sorted(unknown))}"])
    if "slots" in fields and fields["slots"] is not None:
        fields["slots"] = _validate_slots(fields["slots"])

    def _impl(sess: Session) -> Category:
        category = sess.query(Category).filter(Category.id == category_id).first()
        if category is None:
            raise CategoryNotFoundById(category_id)

        if name is not None:
            new_name = _validate_name(name)
            existing = (
                sess.query(Category)
                .filter(Category.name == new_name, Category.id != category_id)
                .first()
            )
            if existing:
                raise ValidationError([f"Category with name '{new_name}' already exists"])
            category.name = new_name

        was_unbounded = bool(category.is_unbounded)
        for field, value in fields.items():
            if value is not None:
                setattr(category, field, value)
        if bool(category.is_unbounded) != was_unbounded:
            _convert_registrations(sess, category)

        sess.flush()
        sess.refresh(category)
        return category

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def _convert_registrations(sess: Session, category: Category) -> None:
    """
    Re-file a category's registrations after it switched kind.

    Unbounded categories hold no slot numbers; slotted ones number each
    potluck's registrations 1..n in creation order.
    """
    registrations = (
        sess.query(Registration)
        .filter(Registration.category_id == category.id)
        .order_by(Registration.potluck_id, Registration.created_at, Registration.id)
        .all()
    )
    positions: Dict[int, int] = {}
    for registration in registrations:
        if category.is_unbounded:
            registration.slot_number = None
        else:
            positions[registration.potluck_id] = positions.get(registration.potluck_id, 0) + 1
            registration.slot_number = positions[registration.potluck_id]

    affected = {r.potluck_id for r in registrations}
    for potluck_id in affected:
        mark_registrations_changed(sess, potluck_id)
    log_operation(
        logger,
        operation="convert_registrations",
        outcome="unbounded" if category.is_unbounded else "slotted",
        category_id=category.id,
        registrations=len(registrations),
    )


def delete_category(category_id: int, session: Optional[Session] = None) -> None:
    """
    Delete a category, its potluck bindings and its registrations.

    Raises:
        CategoryNotFoundById: If category doesn't exist
    """

    def _impl(sess: Session) -> None:
        category = sess.query(Category).filter(Category.id == category_id).first()
        if category is None:
            raise CategoryNotFoundById(category_id)

        affected_potlucks = {
            row[0]
            for row in sess.query(Registration.potluck_id)
            .filter(Registration.category_id == category_id)
            .distinct()
        }
        bindings = (
            sess.query(PotluckCategory)
            .filter(PotluckCategory.category_id == category_id)
            .delete(synchronize_session="fetch")
        )
        registrations = (
            sess.query(Registration)
            .filter(Registration.category_id == category_id)
            .delete(synchronize_session="fetch")
        )
        sess.delete(category)
        sess.flush()
        for potluck_id in affected_potlucks:
            mark_registrations_changed(sess, potluck_id)
        log_operation(
            logger,
            operation="delete_category",
            outcome="success",
            category_id=category_id,
            bindings_removed=bindings,
            registrations_removed=registrations,
        )

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def get_default_categories() -> List[Dict[str, Any]]:
    """
    Return the built-in catalog as plain dictionaries.

    Used to seed an empty database and as a fallback catalog for display.
    """
    return [dict(data) for data in DEFAULT_CATEGORIES]
