"""Slug generation utilities for category storage keys.

Storage keys identify a category's slot list on the board. They are assigned
explicitly when a category is created; when none is supplied one is derived
from the category name by deterministic slugification.

Examples:
    >>> create_slug("Side Dishes")
    'side_dishes'

    >>> create_slug("Crème Brûlée")
    'creme_brulee'
"""

import re
import unicodedata
from typing import Optional

from sqlalchemy.orm import Session


def create_slug(name: str) -> str:
    """Generate a URL-safe slug from a display name.

    Algorithm:
        1. Normalize Unicode to NFD (decompose accented characters)
        2. Encode to ASCII, ignoring non-ASCII characters
        3. Convert to lowercase
        4. Replace whitespace and hyphens with underscores
        5. Remove all non-alphanumeric characters except underscores
        6. Collapse and strip underscores

    Args:
        name: Display name to convert

    Returns:
        Slug string (lowercase, alphanumeric + underscores only)
    """
    normalized = unicodedata.normalize("NFD", name)
    slug = normalized.encode("ascii", "ignore").decode("ascii")
    slug = slug.lower()
    slug = re.sub(r"[\s\-]+", "_", slug)
    slug = re.sub(r"[^a-z0-9_]", "", slug)
    slug = re.sub(r"_+", "_", slug)
    return slug.strip("_")


def unique_storage_key(
    base_key: str,
    session: Session,
    exclude_id: Optional[int] = None,
) -> str:
    """
    Return ``base_key`` or ``base_key_N`` so that no other category uses it.

    Args:
        base_key: Candidate key
        session: Database session for the uniqueness check
        exclude_id: Category ID to ignore (for updates)

    Returns:
        Unique storage key
    """
    from potluck.models.category import Category

    def _taken(candidate: str) -> bool:
        query = session.query(Category).filter(Category.storage_key == candidate)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        return query.first() is not None

    if not _taken(base_key):
        return base_key

    counter = 2
    while _taken(f"{base_key}_{counter}"):
        counter += 1
    return f"{base_key}_{counter}"
