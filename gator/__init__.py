"""
Gator - Command Line RSS Aggregator
===================================

Follows RSS feeds, polls them on a fixed interval and stores their posts.

Main Components:
- Database: SQLite with connection pooling and schema management
- Configuration: environment variables with Pydantic validation, JSON session file
- Ingestion: RSS parsing, fetching and de-duplicated post storage
- Scheduler: fixed-interval poll loop with graceful shutdown
- CLI: click commands for users, feeds, follows and browsing
"""

__version__ = "1.0.0"
__author__ = "Gator Development Team"
__description__ = "Command line RSS feed aggregator"

# Core imports for easy access
from .config.settings import get_settings
from .database.connection import get_db_manager
from .database.schema import DatabaseSchema
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import GatorError

__all__ = [
    "get_settings",
    "get_db_manager",
    "DatabaseSchema",
    "configure_application_logging",
    "get_logger_for_component",
    "GatorError",
]
