"""
Post Repository
===============

Repository pattern implementation for posts ingested from feeds.

The UNIQUE constraint on ``posts.url`` is the authoritative de-duplication
mechanism. ``get_post_by_url`` is only a fast path; a concurrent writer can
still win between the lookup and the insert, in which case ``create_post``
raises ``DuplicateUrlError``.
"""

import sqlite3
from datetime import datetime
from typing import List, Optional, Dict, Any

from ..database.connection import DatabaseConnection, translate_integrity_error
from ..database.models import Post, PostWithFeed, to_db_timestamp, utc_now
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DatabaseError, NotFoundError, ErrorCode


class PostRepository:
    """Repository for Post CRUD operations with database abstraction."""

    UPDATABLE_FIELDS = ("title", "description", "published_at")

    def __init__(self, db_connection: DatabaseConnection):
        """Initialize post repository.

        Args:
            db_connection: Database connection manager
        """
        self.db = db_connection
        self.logger = get_logger_for_component("post_repository")

    def create_post(
        self,
        title: str,
        url: str,
        description: Optional[str],
        published_at: Optional[datetime],
        feed_id: str,
    ) -> Post:
        """Create a new post.

        Args:
            title: Post title
            url: Post URL (globally unique)
            description: Optional description
            published_at: Optional publication time
            feed_id: Source feed ID

        Returns:
            Created Post

        Raises:
            DuplicateUrlError: If a post with this URL already exists
            DatabaseError: If creation fails otherwise
        """
        post = Post(
            title=title,
            url=url,
            description=description,
            published_at=published_at,
            feed_id=feed_id,
        )

        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO posts (id, title, url, description, published_at,
                                       feed_id, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        post.id, post.title, post.url, post.description,
                        to_db_timestamp(post.published_at), post.feed_id,
                        to_db_timestamp(post.created_at), to_db_timestamp(post.updated_at),
                    )
                )
                conn.commit()

        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e, url=url) from e
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to create post: {e}",
                error_code=ErrorCode.DATABASE_ERROR
            ) from e

        self.logger.debug(f"Created post: {post.id}")
        return post

    def get_post_by_url(self, url: str) -> Optional[Post]:
        """Get post by URL.

        Args:
            url: Post URL

        Returns:
            Post or None if not found
        """
        try:
            row = self.db.execute_one("SELECT * FROM posts WHERE url = ?", (url,))
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get post {url}: {e}") from e

        return Post(**dict(row)) if row else None

    def get_posts_by_feed_id(self, feed_id: str) -> List[Post]:
        """Get posts of a feed, newest publication first."""
        try:
            rows = self.db.execute_query(
                """
                SELECT * FROM posts
                WHERE feed_id = ?
                ORDER BY published_at DESC NULLS LAST
                """,
                (feed_id,)
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get posts for feed {feed_id}: {e}") from e

        return [Post(**dict(row)) for row in rows]

    def get_recent_posts(self, limit: int = 10) -> List[Post]:
        """Get the most recently published posts across all feeds."""
        try:
            rows = self.db.execute_query(
                "SELECT * FROM posts ORDER BY published_at DESC NULLS LAST LIMIT ?",
                (limit,)
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get recent posts: {e}") from e

        return [Post(**dict(row)) for row in rows]

    def get_posts_for_user(self, user_id: str, limit: int = 10) -> List[PostWithFeed]:
        """Get the latest posts from the feeds a user follows.

        Args:
            user_id: Following user ID
            limit: Maximum number of posts to return

        Returns:
            Posts with their feed names, newest publication first
        """
        try:
            rows = self.db.execute_query(
                """
                SELECT posts.*, feeds.name AS feed_name
                FROM posts
                INNER JOIN feeds ON feeds.id = posts.feed_id
                INNER JOIN feed_follows ON feed_follows.feed_id = feeds.id
                WHERE feed_follows.user_id = ?
                ORDER BY posts.published_at DESC NULLS LAST
                LIMIT ?
                """,
                (user_id, limit)
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get posts for user {user_id}: {e}") from e

        result = []
        for row in rows:
            data = dict(row)
            feed_name = data.pop("feed_name")
            result.append(PostWithFeed(post=Post(**data), feed_name=feed_name))
        return result

    def update_post(self, post_id: str, **updates: Any) -> Post:
        """Update title, description or published_at of a post.

        Not used by the poll loop, which never rewrites stored posts.

        Raises:
            NotFoundError: If no post has this ID
            DatabaseError: If an unknown field is given or the update fails
        """
        unknown = set(updates) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise DatabaseError(f"Cannot update post fields: {sorted(unknown)}")

        values: Dict[str, Any] = dict(updates)
        if "published_at" in values:
            values["published_at"] = to_db_timestamp(values["published_at"])
        values["updated_at"] = to_db_timestamp(utc_now())

        assignments = ", ".join(f"{field} = ?" for field in values)
        try:
            with self.db.transaction() as conn:
                cursor = conn.execute(
                    f"UPDATE posts SET {assignments} WHERE id = ?",
                    (*values.values(), post_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(f"Post {post_id} not found", resource="post")
                row = conn.execute("SELECT * FROM posts WHERE id = ?", (post_id,)).fetchone()

        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to update post {post_id}: {e}") from e

        self.logger.debug(f"Updated post {post_id}: {sorted(updates)}")
        return Post(**dict(row))

    def delete_posts_by_feed_id(self, feed_id: str) -> int:
        """Delete all posts of a feed.

        Returns:
            Number of posts deleted
        """
        try:
            return self.db.execute_update("DELETE FROM posts WHERE feed_id = ?", (feed_id,))
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to delete posts for feed {feed_id}: {e}") from e
