"""
Post Ingestor
=============

Persists parsed channel items as posts, exactly once per URL.

Each item is handled independently: an existing URL is skipped, a new one is
inserted. A lost insert race (``DuplicateUrlError``) counts as skipped too,
since the store's unique constraint is what actually guarantees
de-duplication. Other per-item failures are logged and the batch moves on;
only ``StoreUnavailableError`` aborts it.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from feedparser.datetimes import _parse_date

from ..database.connection import DatabaseConnection
from ..ingestion.feed_parser import ChannelItem
from ..storage.post_repository import PostRepository
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DatabaseError, DuplicateUrlError, StoreUnavailableError


@dataclass
class IngestResult:
    """Per-feed ingestion counts."""

    saved: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.saved + self.skipped + self.failed


def parse_pub_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an item's pubDate into an aware UTC datetime.

    Uses feedparser's date handlers, which cover RFC 822 (with or without
    a time), W3DTF/ISO-8601, asctime and the common malformed variants.
    Results are normalized to UTC.

    Returns:
        The timestamp, or None if the string is not a valid date
    """
    if not value or not value.strip():
        return None

    parsed = _parse_date(value.strip())
    if not parsed:
        return None

    try:
        return datetime(*parsed[:6], tzinfo=timezone.utc)
    except (ValueError, TypeError):
        return None


class PostIngestor:
    """Stores channel items as posts for one feed at a time."""

    def __init__(self, db_connection: DatabaseConnection, post_repository: Optional[PostRepository] = None):
        """Initialize post ingestor.

        Args:
            db_connection: Database connection manager
            post_repository: Repository to use (built from db_connection if omitted)
        """
        self.post_repository = post_repository or PostRepository(db_connection)
        self.logger = get_logger_for_component("post_ingestor")

    def ingest(self, feed_id: str, items: Iterable[ChannelItem]) -> IngestResult:
        """Persist every item not already stored.

        Args:
            feed_id: Feed the items came from
            items: Parsed channel items, processed in order

        Returns:
            Saved / skipped / failed counts

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        result = IngestResult()

        for item in items:
            try:
                if self.post_repository.get_post_by_url(item.link) is not None:
                    result.skipped += 1
                    continue

                self.post_repository.create_post(
                    title=item.title,
                    url=item.link,
                    description=item.description or None,
                    published_at=parse_pub_date(item.pub_date),
                    feed_id=feed_id,
                )
                result.saved += 1

            except DuplicateUrlError:
                result.skipped += 1
            except StoreUnavailableError:
                raise
            except DatabaseError as e:
                result.failed += 1
                self.logger.error(
                    f"Failed to save post {item.title!r}: {e}",
                    extra={"feed_id": feed_id, "post_url": item.link},
                )

        self.logger.debug(
            f"Ingested feed {feed_id}: {result.saved} saved, "
            f"{result.skipped} skipped, {result.failed} failed"
        )
        return result
