"""
Gator Processing Module
=======================

Feed retrieval and post persistence for the aggregation loop.
"""

from .feed_fetcher import FeedFetcher
from .post_ingestor import IngestResult, PostIngestor, parse_pub_date

__all__ = [
    'FeedFetcher',
    'IngestResult',
    'PostIngestor',
    'parse_pub_date',
]
