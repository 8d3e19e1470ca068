"""
Gator Database Connection Management
====================================

Connection pool and transaction management for SQLite, with translation of
SQLite failures into the Gator exception hierarchy.
"""

import sqlite3
import threading
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Generator, List
from queue import Queue, Empty, Full

from ..utils.exceptions import DatabaseError, DuplicateUrlError, StoreUnavailableError, ErrorCode

logger = logging.getLogger(__name__)

# Extended result names carried by sqlite3.IntegrityError (Python 3.11+)
UNIQUE_VIOLATION = "SQLITE_CONSTRAINT_UNIQUE"
PRIMARY_KEY_VIOLATION = "SQLITE_CONSTRAINT_PRIMARYKEY"


def is_unique_violation(error: sqlite3.Error) -> bool:
    """Whether ``error`` is a UNIQUE / PRIMARY KEY constraint violation."""
    return getattr(error, "sqlite_errorname", None) in (UNIQUE_VIOLATION, PRIMARY_KEY_VIOLATION)


def translate_integrity_error(error: sqlite3.IntegrityError, url: Optional[str] = None) -> DatabaseError:
    """Map an IntegrityError onto DuplicateUrlError or a generic DatabaseError."""
    if is_unique_violation(error):
        return DuplicateUrlError(f"Unique constraint violated: {error}", url=url)
    return DatabaseError(
        f"Constraint violated: {error}",
        error_code=ErrorCode.DATABASE_CONSTRAINT,
    )


class DatabaseConnection:
    """Thread-safe SQLite database connection manager with pooling."""

    def __init__(self, db_path: str = "data/gator.db", pool_size: int = 5):
        """Initialize database connection manager.

        Args:
            db_path: Path to SQLite database file
            pool_size: Maximum number of connections in pool

        Raises:
            StoreUnavailableError: If the database file cannot be opened
        """
        self.db_path = Path(db_path)
        self.pool_size = pool_size
        self.pool: Queue = Queue(maxsize=pool_size)
        self.lock = threading.Lock()
        self._total_connections = 0

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._initialize_pool()

    def _initialize_pool(self) -> None:
        """Initialize the connection pool."""
        for _ in range(self.pool_size):
            conn = self._create_connection()
            self.pool.put(conn)

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new configured SQLite connection."""
        try:
            conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=30.0
            )

            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
        except sqlite3.Error as e:
            raise StoreUnavailableError(
                f"Cannot open database {self.db_path}: {e}"
            ) from e

        conn.row_factory = sqlite3.Row

        with self.lock:
            self._total_connections += 1

        logger.debug(f"Created database connection #{self._total_connections}")
        return conn

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a connection from the pool with automatic return.

        Usage:
            with db.get_connection() as conn:
                rows = conn.execute("SELECT * FROM feeds").fetchall()

        Raises:
            StoreUnavailableError: If no working connection can be obtained
        """
        start_time = time.time()
        conn = None

        try:
            try:
                conn = self.pool.get(timeout=10.0)
            except Empty:
                logger.warning("Connection pool exhausted, creating new connection")
                conn = self._create_connection()

            try:
                conn.execute("SELECT 1").fetchone()
            except sqlite3.Error as e:
                raise StoreUnavailableError(f"Database connection is not usable: {e}") from e

            acquisition_time = time.time() - start_time
            if acquisition_time > 1.0:
                logger.warning(f"Database connection acquisition took {acquisition_time:.2f}s")

            yield conn

        except sqlite3.Error as e:
            logger.debug(f"Database error, rolling back: {e}")
            if conn:
                try:
                    conn.rollback()
                except sqlite3.Error:
                    logger.warning("Rollback failed after database error")
            raise
        finally:
            if conn:
                self._release(conn)

    def _release(self, conn: sqlite3.Connection) -> None:
        """Return a connection to the pool, or close it when the pool is full."""
        try:
            self.pool.put_nowait(conn)
        except Full:
            conn.close()
            with self.lock:
                self._total_connections -= 1

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Execute operations within a database transaction.

        Usage:
            with db.transaction() as conn:
                conn.execute("INSERT INTO feeds ...")
                conn.execute("INSERT INTO feed_follows ...")
                # Commit on success, rollback on exception
        """
        with self.get_connection() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                yield conn
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.debug(f"Transaction rolled back due to error: {e}")
                raise

    def execute_query(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        """Execute a SELECT query and return all rows."""
        with self.get_connection() as conn:
            return conn.execute(query, params).fetchall()

    def execute_one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a query and return the first row, or None."""
        with self.get_connection() as conn:
            return conn.execute(query, params).fetchone()

    def execute_update(self, query: str, params: tuple = ()) -> int:
        """Execute an INSERT/UPDATE/DELETE and return the affected row count."""
        with self.get_connection() as conn:
            cursor = conn.execute(query, params)
            conn.commit()
            return cursor.rowcount

    def close_all_connections(self) -> None:
        """Close all connections in the pool."""
        logger.debug("Closing all database connections")

        while not self.pool.empty():
            try:
                conn = self.pool.get_nowait()
                conn.close()
            except (Empty, sqlite3.Error):
                break

        with self.lock:
            self._total_connections = 0


# Global database manager instance
_db_manager: Optional[DatabaseConnection] = None


def get_db_manager(db_path: str = "data/gator.db", pool_size: int = 5) -> DatabaseConnection:
    """Get global database manager instance (singleton pattern).

    Args:
        db_path: Path to database file
        pool_size: Connection pool size, used on first call only

    Returns:
        Database connection manager instance
    """
    global _db_manager

    if _db_manager is None:
        _db_manager = DatabaseConnection(db_path, pool_size=pool_size)

    return _db_manager
