"""
Gator Storage Layer
===================

Repository pattern implementations for data access abstraction.

This module provides:
- User, feed, feed follow and post repositories
- Translation of SQLite constraint failures into DuplicateUrlError
"""

from .user_repository import UserRepository
from .feed_repository import FeedRepository
from .feed_follow_repository import FeedFollowRepository
from .post_repository import PostRepository

__all__ = [
    "UserRepository",
    "FeedRepository",
    "FeedFollowRepository",
    "PostRepository",
]
