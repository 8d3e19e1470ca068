"""
Gator Database Schema
=====================

SQLite schema with foreign key constraints and indexes.

Tables:
- users: registered users
- feeds: RSS sources, unique by URL, owned by a user
- feed_follows: users following feeds
- posts: items ingested from feeds, unique by URL
"""

import sqlite3
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

EXPECTED_TABLES = {"users", "feeds", "feed_follows", "posts"}


class DatabaseSchema:
    """Database schema manager for the Gator SQLite database."""

    def __init__(self, db_path: str = "data/gator.db"):
        """Initialize database schema manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        with self.get_connection() as conn:
            # Create tables in dependency order
            self._create_users_table(conn)
            self._create_feeds_table(conn)
            self._create_feed_follows_table(conn)
            self._create_posts_table(conn)

            self._create_indexes(conn)

            conn.commit()
            logger.info("Database schema created successfully")

    def _create_users_table(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT UNIQUE NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """
        )

    def _create_feeds_table(self, conn: sqlite3.Connection) -> None:
        """Create feeds table; last_fetched_at is NULL until the first poll."""
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS feeds (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                url TEXT UNIQUE NOT NULL,
                user_id TEXT NOT NULL,
                last_fetched_at TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
            )
        """
        )

    def _create_feed_follows_table(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS feed_follows (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                feed_id TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
                FOREIGN KEY (feed_id) REFERENCES feeds(id) ON DELETE CASCADE,
                UNIQUE(user_id, feed_id)
            )
        """
        )

    def _create_posts_table(self, conn: sqlite3.Connection) -> None:
        """Create posts table; the UNIQUE url is what de-duplicates ingestion."""
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS posts (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                url TEXT UNIQUE NOT NULL,
                description TEXT,
                published_at TEXT,
                feed_id TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (feed_id) REFERENCES feeds(id) ON DELETE CASCADE
            )
        """
        )

    def _create_indexes(self, conn: sqlite3.Connection) -> None:
        indexes = [
            "CREATE INDEX IF NOT EXISTS idx_feeds_last_fetched ON feeds(last_fetched_at)",
            "CREATE INDEX IF NOT EXISTS idx_feeds_user ON feeds(user_id)",
            "CREATE INDEX IF NOT EXISTS idx_feed_follows_user ON feed_follows(user_id)",
            "CREATE INDEX IF NOT EXISTS idx_posts_feed ON posts(feed_id)",
            "CREATE INDEX IF NOT EXISTS idx_posts_published ON posts(published_at)",
        ]

        for index_sql in indexes:
            conn.execute(index_sql)

    def get_connection(self) -> sqlite3.Connection:
        """Get database connection with foreign keys enabled."""
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row
        return conn

    def verify_schema(self) -> bool:
        """Verify that every expected table exists."""
        try:
            with self.get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT name FROM sqlite_master
                    WHERE type='table' AND name NOT LIKE 'sqlite_%'
                """
                )
                tables = {row[0] for row in cursor.fetchall()}
        except sqlite3.Error as e:
            logger.error(f"Schema verification failed: {e}")
            return False

        missing = EXPECTED_TABLES - tables
        if missing:
            logger.error(f"Missing tables: {sorted(missing)}")
            return False

        logger.debug("Database schema verification passed")
        return True

