"""
Main entry point for the Potluck Planner application.

This module initializes logging and the database, starts the registration
watcher and launches the main window.
"""

import argparse
import logging
import sys
import traceback
from typing import Optional

import customtkinter as ctk

from potluck.services.change_feed import RegistrationWatcher
from potluck.services.database import close_connections, initialize_app_database
from potluck.utils.config import get_config
from potluck.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)

# Global watcher instance
_watcher: Optional[RegistrationWatcher] = None


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="potluck-planner",
        description="Sign-up board for potluck events",
    )
    parser.add_argument(
        "--potluck",
        metavar="SLUG",
        help="Potluck to open (default: the newest active potluck)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def initialize_application() -> bool:
    """
    Initialize the application.

    Sets up the database and starts polling for changes made by other
    instances sharing it.

    Returns:
        True if initialization successful, False otherwise
    """
    global _watcher

    try:
        logger.info("Initializing database...")
        initialize_app_database()

        _watcher = RegistrationWatcher(poll_interval=get_config().poll_interval)
        _watcher.start()
        return True

    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        traceback.print_exc()
        return False


def main(argv=None):
    """
    Main application entry point.

    Initializes the application and launches the main window.
    """
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    ctk.set_appearance_mode("system")
    ctk.set_default_color_theme("blue")

    config = get_config()
    logger.info(f"Starting {config.app_name} v{config.app_version}")
    logger.info(f"Environment: {config.environment}")

    if not initialize_application():
        logger.error("Application initialization failed. Exiting.")
        sys.exit(1)

    # Imported late so the database is ready before any widget loads data
    from potluck.ui.main_window import MainWindow

    try:
        app = MainWindow(initial_slug=args.potluck)
        app.mainloop()

    except Exception as e:
        logger.error(f"Application crashed: {e}")
        traceback.print_exc()
        sys.exit(1)

    finally:
        if _watcher:
            _watcher.stop()
        close_connections()

    logger.info("Application closed successfully")
    sys.exit(0)


if __name__ == "__main__":
    main()
