"""
RSS Feed Fetcher
================

Single-attempt HTTP retrieval of a feed, handed to the RSS parser. Transport
failures become ``FeedFetchError``; bad documents surface as the parser's
``MalformedFeedError``.
"""

import asyncio
import ssl
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

import aiohttp
import certifi

from ..config.settings import get_settings
from ..ingestion.feed_parser import ChannelRecord, parse_feed
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import FeedFetchError, ErrorCode


class FeedFetcher:
    """Fetches and parses one RSS feed per call, with no retry."""

    def __init__(self, user_agent: Optional[str] = None):
        """Initialize feed fetcher.

        Args:
            user_agent: Identifying User-Agent header (default from config)
        """
        self.user_agent = user_agent or get_settings().fetcher.user_agent
        self.logger = get_logger_for_component("feed_fetcher")

        # SSL context for secure requests
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Get configured aiohttp session.

        No timeout is set beyond aiohttp's default client timeout.
        """
        connector = aiohttp.TCPConnector(ssl=self.ssl_context)

        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/rss+xml, application/xml, text/xml, */*",
        }

        async with aiohttp.ClientSession(connector=connector, headers=headers) as session:
            yield session

    async def fetch_feed(
        self, feed_url: str, session: Optional[aiohttp.ClientSession] = None
    ) -> ChannelRecord:
        """Fetch and parse a single RSS feed.

        Args:
            feed_url: URL of the RSS feed
            session: aiohttp session to use; a new one is opened if omitted

        Returns:
            Parsed channel record

        Raises:
            FeedFetchError: On a non-2xx status or a network failure
            MalformedFeedError: If the body is not a complete RSS channel
        """
        if session is None:
            async with self.get_session() as own_session:
                return await self.fetch_feed(feed_url, own_session)

        start_time = datetime.now(timezone.utc)
        self.logger.debug(f"Fetching feed: {feed_url}")

        try:
            async with session.get(feed_url) as response:
                if not 200 <= response.status < 300:
                    raise FeedFetchError(
                        f"Failed to fetch feed: {response.reason or response.status}",
                        status=response.status,
                        feed_url=feed_url,
                    )

                content = await response.read()

        except asyncio.TimeoutError as e:
            raise FeedFetchError(
                "Failed to fetch feed: request timed out",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_NETWORK_ERROR,
            ) from e
        except (aiohttp.ClientError, OSError) as e:
            raise FeedFetchError(
                f"Failed to fetch feed: {e}",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_NETWORK_ERROR,
            ) from e

        channel = parse_feed(content, feed_url=feed_url)

        self.logger.info(
            f"Fetched {len(channel.items)} items from {feed_url} "
            f"in {(datetime.now(timezone.utc) - start_time).total_seconds():.2f}s"
        )
        return channel
