"""Service layer exception classes for Potluck Planner.

Exception Hierarchy:
    ServiceError (base)
    ├── PotluckNotFound
    ├── PotluckNotFoundBySlug
    ├── CategoryNotFoundById
    ├── CategoryNotFoundByName
    ├── RegistrationNotFound
    ├── ValidationError
    └── DatabaseError
"""


class ServiceError(Exception):
    """Base exception for all service layer errors."""

    pass


class PotluckNotFound(ServiceError):
    """Raised when a potluck cannot be found by ID.

    Example:
        >>> raise PotluckNotFound(12)
        PotluckNotFound: Potluck with ID 12 not found
    """

    def __init__(self, potluck_id: int):
        self.potluck_id = potluck_id
        super().__init__(f"Potluck with ID {potluck_id} not found")


class PotluckNotFoundBySlug(ServiceError):
    """Raised when a potluck cannot be found by slug."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Potluck '{slug}' not found")


class CategoryNotFoundById(ServiceError):
    """Raised when a category cannot be found by ID."""

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category with ID {category_id} not found")


class CategoryNotFoundByName(ServiceError):
    """Raised when a category cannot be found by name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Category '{name}' not found")


class RegistrationNotFound(ServiceError):
    """Raised when a registration cannot be found by ID."""

    def __init__(self, registration_id: int):
        self.registration_id = registration_id
        super().__init__(f"Registration with ID {registration_id} not found")


class ValidationError(ServiceError):
    """Raised when data validation fails.

    Args:
        errors: List of human-readable validation messages
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
