"""
Registration model - a guest's pledge to bring something.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class Registration(BaseModel):
    """
    Registration model.

    Attributes:
        potluck_id: Foreign key to Potluck (CASCADE delete)
        category_id: Foreign key to Category (CASCADE delete)
        name: Guest display name
        description: What the guest is bringing
        slot_number: 1-based slot for slotted categories, NULL for unbounded ones
        gif_url: Optional image found for the description
    """

    __tablename__ = "registrations"

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
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    slot_number = Column(Integer, nullable=True)
    gif_url = Column(String(500), nullable=True)

    potluck = relationship("Potluck", back_populates="registrations")
    category = relationship("Category")

    __table_args__ = (
        Index("idx_registration_potluck_category", "potluck_id", "category_id"),
    )

    @property
    def is_slotted(self) -> bool:
        """True when the registration occupies a numbered slot."""
        return self.slot_number is not None

    def __repr__(self) -> str:
        return (
            f"Registration(id={self.id}, name='{self.name}', "
            f"category_id={self.category_id}, slot_number={self.slot_number})"
        )
