"""
Configuration management for the Potluck Planner application.

This module handles:
- Database path configuration
- Environment-specific configuration (development vs. production)
- External service credentials (OpenAI, Giphy)
- Change feed polling interval
"""

import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DEFAULT_POLL_INTERVAL_SECONDS,
    HTTP_TIMEOUT_SECONDS,
    OPENAI_DEFAULT_MODEL,
)

_TRUE_VALUES = ("1", "true", "yes", "on")


class Config:
    """
    Application configuration manager.

    Values are read from the environment once, at construction time:

    - POTLUCK_ENV: 'production' (default) or 'development'
    - POTLUCK_DATABASE_URL: SQLAlchemy URL overriding the file database
    - OPENAI_API_KEY / POTLUCK_OPENAI_MODEL: description normalizer
    - GIPHY_API_KEY: image lookup
    - POTLUCK_ENRICHMENT: set to 0/false to skip normalizer and image lookup
    - POTLUCK_POLL_INTERVAL: seconds between change-feed polls
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
        """
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION

        if environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_documents_dir()

        self._database_dir = self._base_dir
        self._database_path = self._database_dir / DATABASE_FILENAME
        self._database_url_override = os.environ.get("POTLUCK_DATABASE_URL")

        self.openai_api_key: Optional[str] = os.environ.get("OPENAI_API_KEY") or None
        self.openai_model: str = os.environ.get("POTLUCK_OPENAI_MODEL", OPENAI_DEFAULT_MODEL)
        self.giphy_api_key: Optional[str] = os.environ.get("GIPHY_API_KEY") or None
        self.enrichment_enabled: bool = (
            os.environ.get("POTLUCK_ENRICHMENT", "true").strip().lower() in _TRUE_VALUES
        )
        self.poll_interval: float = float(
            os.environ.get("POTLUCK_POLL_INTERVAL", DEFAULT_POLL_INTERVAL_SECONDS)
        )
        self.http_timeout: float = float(HTTP_TIMEOUT_SECONDS)

    def _get_project_data_dir(self) -> Path:
        """Project data/ directory used in development."""
        project_root = Path(__file__).parent.parent.parent
        return project_root / "data"

    def _get_user_documents_dir(self) -> Path:
        """User's Documents folder with an app subdirectory."""
        if os.name == "nt":
            documents = Path(os.path.expanduser("~")) / "Documents"
        else:
            documents = Path.home() / "Documents"
        return documents / "PotluckPlanner"

    def ensure_directories(self):
        """Create the data directory if it doesn't exist."""
        self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            POTLUCK_DATABASE_URL when set, otherwise a sqlite URL for database_path
        """
        if self._database_url_override:
            return self._database_url_override
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def database_exists(self) -> bool:
        """Check if the database file exists."""
        return self._database_path.exists()

    def __repr__(self) -> str:
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    POTLUCK_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get("POTLUCK_ENV", "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        import logging

        logger = logging.getLogger(__name__)
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton to prevent database switching."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
