"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .category import Category
from .potluck import Potluck
from .potluck_category import PotluckCategory
from .registration import Registration

__all__ = [
    "Base",
    "BaseModel",
    "Category",
    "Potluck",
    "PotluckCategory",
    "Registration",
]
