"""
Category model for potluck dish grouping.

A category is a catalog entry ("Main Dishes", "Desserts", ...) that a
potluck can enable. Slotted categories offer a fixed number of numbered
"Dish #N" cards; unbounded categories are a plain list of items.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class Category(BaseModel):
    """
    Category model.

    Attributes:
        name: Unique internal name (e.g., "Side Dishes")
        storage_key: Unique key identifying the category's list on the board
        title_en / title_da: Section headings
        singular_en / singular_da: Card heading prefix ("Dish" -> "Dish #2")
        placeholder_en / placeholder_da: Description placeholder text
        icon: Icon token (emoji or icon name)
        color_class: Color token
        slots: Default number of slots (>= 0)
        is_unbounded: True for list-style categories without slot numbers
    """

    __tablename__ = "categories"

    name = Column(String(100), nullable=False, unique=True)
    storage_key = Column(String(100), nullable=False, unique=True)

    title_en = Column(String(200), nullable=False, default="")
    title_da = Column(String(200), nullable=False, default="")
    singular_en = Column(String(100), nullable=False, default="")
    singular_da = Column(String(100), nullable=False, default="")
    placeholder_en = Column(Text, nullable=False, default="")
    placeholder_da = Column(Text, nullable=False, default="")

    icon = Column(String(50), nullable=False, default="")
    color_class = Column(String(100), nullable=False, default="")
    slots = Column(Integer, nullable=False, default=3)
    is_unbounded = Column(Boolean, nullable=False, default=False)

    potluck_bindings = relationship(
        "PotluckCategory",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("slots >= 0", name="ck_category_slots_non_negative"),
        Index("idx_category_storage_key", "storage_key"),
    )

    def __repr__(self) -> str:
        return f"<Category(name='{self.name}', slots={self.slots})>"
