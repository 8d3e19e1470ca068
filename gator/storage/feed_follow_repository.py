"""
Feed Follow Repository
======================

Which users follow which feeds.
"""

import sqlite3
from typing import List

from ..database.connection import DatabaseConnection, translate_integrity_error
from ..database.models import FeedFollow, to_db_timestamp
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DatabaseError, NotFoundError

_JOINED_SELECT = """
    SELECT feed_follows.*, users.name AS user_name, feeds.name AS feed_name
    FROM feed_follows
    INNER JOIN users ON users.id = feed_follows.user_id
    INNER JOIN feeds ON feeds.id = feed_follows.feed_id
"""


class FeedFollowRepository:
    """Repository for feed follow records."""

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection
        self.logger = get_logger_for_component("feed_follow_repository")

    def create_feed_follow(self, user_id: str, feed_id: str) -> FeedFollow:
        """Follow a feed.

        Returns:
            The new follow with user and feed names joined in

        Raises:
            DuplicateUrlError: If the user already follows the feed
            DatabaseError: If the user or feed does not exist, or the insert fails
        """
        follow = FeedFollow(user_id=user_id, feed_id=feed_id)
        try:
            with self.db.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO feed_follows (id, user_id, feed_id, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                """,
                    (
                        follow.id, follow.user_id, follow.feed_id,
                        to_db_timestamp(follow.created_at), to_db_timestamp(follow.updated_at),
                    ),
                )
                row = conn.execute(
                    _JOINED_SELECT + " WHERE feed_follows.id = ?", (follow.id,)
                ).fetchone()

        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e) from e
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to follow feed {feed_id}: {e}") from e

        self.logger.info(f"User {user_id} now follows feed {feed_id}")
        return FeedFollow(**dict(row))

    def get_feed_follows_for_user(self, user_id: str) -> List[FeedFollow]:
        """Get all follows of a user, oldest first."""
        try:
            rows = self.db.execute_query(
                _JOINED_SELECT + " WHERE feed_follows.user_id = ? ORDER BY feed_follows.created_at",
                (user_id,),
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get follows for user {user_id}: {e}") from e

        return [FeedFollow(**dict(row)) for row in rows]

    def delete_feed_follow(self, user_id: str, feed_url: str) -> FeedFollow:
        """Unfollow the feed at ``feed_url``.

        Returns:
            The deleted follow

        Raises:
            NotFoundError: If the feed does not exist or the user does not follow it
        """
        try:
            with self.db.transaction() as conn:
                feed = conn.execute("SELECT id FROM feeds WHERE url = ?", (feed_url,)).fetchone()
                if not feed:
                    raise NotFoundError(f'Feed with URL "{feed_url}" not found', resource="feed")

                row = conn.execute(
                    _JOINED_SELECT + " WHERE feed_follows.user_id = ? AND feed_follows.feed_id = ?",
                    (user_id, feed["id"]),
                ).fetchone()
                if not row:
                    raise NotFoundError(
                        f'You are not following feed with URL "{feed_url}"', resource="feed_follow"
                    )

                conn.execute("DELETE FROM feed_follows WHERE id = ?", (row["id"],))

        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to unfollow {feed_url}: {e}") from e

        self.logger.info(f"User {user_id} unfollowed {feed_url}")
        return FeedFollow(**dict(row))
