"""
Base model class for all database models.

Provides common fields for all models:
- Integer primary key
- UUID column (stable identity exposed to other clients)
- Timestamp fields (created_at, updated_at)
"""

import uuid as uuid_lib

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base

from potluck.utils.datetime_utils import utc_now

Base = declarative_base()


class BaseModel(Base):
    """
    Abstract base model with common fields and methods.

    Attributes:
        id: Primary key
        uuid: UUID identifier stored as string for SQLite compatibility
        created_at: Timestamp when record was created
        updated_at: Timestamp when record was last modified
    """

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(
        String(36), unique=True, nullable=False, default=lambda: str(uuid_lib.uuid4()), index=True
    )
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        attrs = []
        if getattr(self, "id", None) is not None:
            attrs.append(f"id={self.id}")
        if getattr(self, "name", None) is not None:
            attrs.append(f"name='{self.name}'")
        return f"{class_name}({', '.join(attrs)})"
