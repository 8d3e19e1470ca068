"""
Feed Repository
===============

Repository pattern implementation for RSS feed records, including the two
queries the poll loop drives: picking the next feed and marking it fetched.
"""

import sqlite3
from typing import List, Optional

from ..database.connection import DatabaseConnection, translate_integrity_error
from ..database.models import Feed, FeedWithUser, to_db_timestamp, utc_now
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DatabaseError, NotFoundError, ErrorCode


class FeedRepository:
    """Repository for managing RSS feed data in the database."""

    def __init__(self, db_connection: DatabaseConnection):
        """Initialize feed repository.

        Args:
            db_connection: Database connection manager
        """
        self.db = db_connection
        self.logger = get_logger_for_component("feed_repository")

    def create_feed(self, name: str, url: str, user_id: str) -> Feed:
        """Create a new feed.

        Args:
            name: Display name
            url: Feed URL (globally unique)
            user_id: Owning user ID

        Returns:
            Created Feed

        Raises:
            DuplicateUrlError: If a feed with this URL already exists
            DatabaseError: If the insert fails otherwise
        """
        feed = Feed(name=name, url=url, user_id=user_id)
        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO feeds (
                        id, name, url, user_id, last_fetched_at, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        feed.id,
                        feed.name,
                        feed.url,
                        feed.user_id,
                        None,
                        to_db_timestamp(feed.created_at),
                        to_db_timestamp(feed.updated_at),
                    ),
                )
                conn.commit()

        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e, url=url) from e
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to create feed: {e}") from e

        self.logger.info(f"Created feed {feed.id} for user {user_id}: {feed.url}")
        return feed

    def get_feed_by_id(self, feed_id: str) -> Optional[Feed]:
        """Get feed by ID, or None."""
        return self._fetch_one("SELECT * FROM feeds WHERE id = ?", (feed_id,))

    def get_feed_by_url(self, url: str) -> Optional[Feed]:
        """Get feed by URL, or None."""
        return self._fetch_one("SELECT * FROM feeds WHERE url = ?", (url,))

    def get_feeds_by_user_id(self, user_id: str) -> List[Feed]:
        """Get feeds created by a user."""
        try:
            rows = self.db.execute_query(
                "SELECT * FROM feeds WHERE user_id = ? ORDER BY created_at", (user_id,)
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get feeds for user {user_id}: {e}") from e

        return [Feed(**dict(row)) for row in rows]

    def get_all_feeds_with_users(self) -> List[FeedWithUser]:
        """Get every feed together with its creator's name."""
        try:
            rows = self.db.execute_query(
                """
                SELECT feeds.*, users.name AS user_name
                FROM feeds
                LEFT JOIN users ON users.id = feeds.user_id
                ORDER BY feeds.created_at
            """
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to list feeds: {e}") from e

        result = []
        for row in rows:
            data = dict(row)
            user_name = data.pop("user_name")
            result.append(FeedWithUser(feed=Feed(**data), user_name=user_name))
        return result

    def get_next_feed_to_fetch(self) -> Optional[Feed]:
        """Get the feed polled longest ago.

        Never-fetched feeds (NULL) come before any timestamp; ties fall back
        to creation order.

        Returns:
            Feed to poll next, or None when there are no feeds
        """
        return self._fetch_one(
            """
            SELECT * FROM feeds
            ORDER BY last_fetched_at ASC NULLS FIRST, created_at ASC
            LIMIT 1
        """
        )

    def mark_feed_fetched(self, feed_id: str) -> Feed:
        """Set ``last_fetched_at`` and ``updated_at`` to now.

        Args:
            feed_id: Feed ID

        Returns:
            The updated Feed

        Raises:
            NotFoundError: If the feed no longer exists
        """
        now = to_db_timestamp(utc_now())
        try:
            with self.db.transaction() as conn:
                cursor = conn.execute(
                    "UPDATE feeds SET last_fetched_at = ?, updated_at = ? WHERE id = ?",
                    (now, now, feed_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(f"Feed {feed_id} not found", resource="feed")
                row = conn.execute("SELECT * FROM feeds WHERE id = ?", (feed_id,)).fetchone()

        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to mark feed {feed_id} fetched: {e}",
                error_code=ErrorCode.DATABASE_TRANSACTION,
            ) from e

        self.logger.debug(f"Marked feed {feed_id} fetched at {now}")
        return Feed(**dict(row))

    def _fetch_one(self, query: str, params: tuple = ()) -> Optional[Feed]:
        try:
            row = self.db.execute_one(query, params)
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to query feeds: {e}", query=query) from e

        return Feed(**dict(row)) if row else None
