"""
User Repository
===============

Repository pattern implementation for registered users.
"""

import sqlite3
from typing import List, Optional

from ..database.connection import DatabaseConnection, translate_integrity_error
from ..database.models import User, to_db_timestamp
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DatabaseError, DuplicateUrlError, ErrorCode


class UserRepository:
    """Repository for User CRUD operations."""

    def __init__(self, db_connection: DatabaseConnection):
        """Initialize user repository.

        Args:
            db_connection: Database connection manager
        """
        self.db = db_connection
        self.logger = get_logger_for_component("user_repository")

    def create_user(self, name: str) -> User:
        """Create a new user.

        Args:
            name: Unique user name

        Returns:
            Created User

        Raises:
            DuplicateUrlError: If a user with this name already exists
            DatabaseError: If creation fails
        """
        user = User(name=name)
        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    "INSERT INTO users (id, name, created_at, updated_at) VALUES (?, ?, ?, ?)",
                    (
                        user.id, user.name,
                        to_db_timestamp(user.created_at), to_db_timestamp(user.updated_at),
                    ),
                )
                conn.commit()

        except sqlite3.IntegrityError as e:
            error = translate_integrity_error(e)
            if isinstance(error, DuplicateUrlError):
                error.user_message = f'User with name "{name}" already exists'
            raise error from e
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to create user: {e}") from e

        self.logger.info(f"Created user {user.name}")
        return user

    def get_user_by_name(self, name: str) -> Optional[User]:
        """Get user by name, or None."""
        try:
            row = self.db.execute_one("SELECT * FROM users WHERE name = ?", (name,))
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get user {name}: {e}") from e

        return User(**dict(row)) if row else None

    def get_users(self) -> List[User]:
        """Get all users ordered by name."""
        try:
            rows = self.db.execute_query("SELECT * FROM users ORDER BY name")
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to list users: {e}") from e

        return [User(**dict(row)) for row in rows]

    def delete_all_users(self) -> int:
        """Delete every user; feeds, follows and posts go with them.

        Returns:
            Number of users deleted
        """
        try:
            deleted = self.db.execute_update("DELETE FROM users")
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to reset users: {e}", error_code=ErrorCode.DATABASE_TRANSACTION
            ) from e

        self.logger.info(f"Deleted {deleted} users")
        return deleted
