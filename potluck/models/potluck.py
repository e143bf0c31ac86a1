"""
Potluck model - a single sign-up event.
"""

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class Potluck(BaseModel):
    """
    Potluck event.

    Attributes:
        slug: Unique URL-friendly identifier
        title_en / title_da: Event title
        subtitle_en / subtitle_da: Optional subtitle
        footer_en / footer_da: Optional footer text
        event_datetime: When the potluck takes place
        is_active: Whether the potluck accepts sign-ups
        organizer_name / organizer_email: Contact details
        icon: Header icon token
    """

    __tablename__ = "potlucks"

    slug = Column(String(100), nullable=False, unique=True, index=True)
    title_en = Column(String(200), nullable=False)
    title_da = Column(String(200), nullable=False, default="")
    subtitle_en = Column(Text, nullable=False, default="")
    subtitle_da = Column(Text, nullable=False, default="")
    footer_en = Column(Text, nullable=False, default="")
    footer_da = Column(Text, nullable=False, default="")
    event_datetime = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    organizer_name = Column(String(200), nullable=False, default="")
    organizer_email = Column(String(200), nullable=False, default="")
    icon = Column(String(50), nullable=False, default="Flame")

    category_bindings = relationship(
        "PotluckCategory",
        back_populates="potluck",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    registrations = relationship(
        "Registration",
        back_populates="potluck",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Potluck(slug='{self.slug}')>"
