"""
PotluckCategory model - binds a catalog category to a potluck.

Junction table carrying per-potluck sort order and enabled flag.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class PotluckCategory(BaseModel):
    """
    Potluck/category binding.

    Attributes:
        potluck_id: Foreign key to Potluck (CASCADE delete)
        category_id: Foreign key to Category (CASCADE delete)
        sort_order: Display position within the potluck
        is_enabled: Whether the category is shown on the board
    """

    __tablename__ = "potluck_categories"

    potluck_id = Column(
        Integer,
        ForeignKey("potlucks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sort_order = Column(Integer, nullable=False, default=0)
    is_enabled = Column(Boolean, nullable=False, default=True)

    potluck = relationship("Potluck", back_populates="category_bindings")
    category = relationship("Category", back_populates="potluck_bindings")

    __table_args__ = (
        UniqueConstraint("potluck_id", "category_id", name="uq_potluck_category"),
        Index("idx_potluck_category_order", "potluck_id", "sort_order"),
    )

    def __repr__(self) -> str:
        return (
            f"PotluckCategory(potluck_id={self.potluck_id}, "
            f"category_id={self.category_id}, sort_order={self.sort_order})"
        )
