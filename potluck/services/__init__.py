"""Services package - business logic layer for Potluck Planner.

Architecture:
- Services: Stateless functions organized by domain (category, potluck, registration)
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Input validation before database operations

Service Modules:
- category_service: Category catalog CRUD
- potluck_service: Potlucks, category bindings and their order
- registration_service: Registration store (upsert, delete, slot renumbering)
- slot_engine: Slot reconciliation for slotted categories
- additional_items: List handling for unbounded categories
- board_service: Loads the reconciled board of a potluck
- change_feed: Registration change notifications
- enrichment_service: Description normalizer and GIF lookup

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: Session management and database utilities
- logging_utils: Structured operation logging
"""

# Service modules
from . import (
    database,
    change_feed,
    enrichment_service,
    category_service,
    registration_service,
    potluck_service,
    slot_engine,
    additional_items,
    board_service,
)

from .board_service import Board, CategoryBoard, load_board
from .registration_service import RegistrationStore
from .slot_engine import (
    CategorySlots,
    build_slots,
    ensure_trailing_empty_slot,
    trim_trailing_empty,
)
from .additional_items import AdditionalItems

__all__ = [
    "database",
    "change_feed",
    "enrichment_service",
    "category_service",
    "registration_service",
    "potluck_service",
    "slot_engine",
    "additional_items",
    "board_service",
    "Board",
    "CategoryBoard",
    "load_board",
    "RegistrationStore",
    "CategorySlots",
    "build_slots",
    "ensure_trailing_empty_slot",
    "trim_trailing_empty",
    "AdditionalItems",
]
