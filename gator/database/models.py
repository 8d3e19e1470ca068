"""
Gator Data Models
=================

Pydantic data models for the records Gator stores. These correspond to the
database schema and provide validation and type hints.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator
import uuid


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_db_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for storage.

    Timestamps are stored as UTC ISO-8601 text with a fixed layout so that
    string order in SQLite matches chronological order.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _new_id() -> str:
    return str(uuid.uuid4())


class _Record(BaseModel):
    """Fields every stored record carries."""
    id: str = Field(default_factory=_new_id, description="Record ID")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator('created_at', 'updated_at')
    @classmethod
    def ensure_utc(cls, v):
        """Treat naive timestamps as UTC."""
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class User(_Record):
    """Registered user."""
    name: str = Field(..., min_length=1, max_length=255, description="Unique user name")

    def __str__(self) -> str:
        return f"User({self.name})"


class Feed(_Record):
    """Subscribed RSS source."""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    url: str = Field(..., min_length=1, description="Feed URL, globally unique")
    user_id: str = Field(..., description="Owning user ID")
    last_fetched_at: Optional[datetime] = Field(default=None, description="Start of the last poll cycle")

    @field_validator('last_fetched_at')
    @classmethod
    def ensure_fetch_utc(cls, v):
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def __str__(self) -> str:
        return f"Feed({self.name}:{self.url})"


class FeedFollow(_Record):
    """A user following a feed, with the joined names for display."""
    user_id: str = Field(..., description="Following user ID")
    feed_id: str = Field(..., description="Followed feed ID")
    user_name: Optional[str] = Field(default=None, description="Joined user name")
    feed_name: Optional[str] = Field(default=None, description="Joined feed name")


class Post(_Record):
    """An item ingested from a feed."""
    title: str = Field(..., description="Post title")
    url: str = Field(..., min_length=1, description="Post URL, globally unique")
    description: Optional[str] = Field(default=None, description="Post description")
    published_at: Optional[datetime] = Field(default=None, description="Publication time, None if unparseable")
    feed_id: str = Field(..., description="Source feed ID")

    @field_validator('published_at')
    @classmethod
    def ensure_published_utc(cls, v):
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def __str__(self) -> str:
        return f"Post({self.title[:50]})"


class FeedWithUser(BaseModel):
    """Feed joined with its creator, for listings."""
    feed: Feed
    user_name: Optional[str] = None


class PostWithFeed(BaseModel):
    """Post joined with its feed, for browsing."""
    post: Post
    feed_name: str
