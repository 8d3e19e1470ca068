"""
Gator Ingestion Module
======================

RSS document parsing.

This module handles:
- Validating the rss/channel structure
- Extracting channel metadata and complete items
"""

from .feed_parser import ChannelItem, ChannelRecord, parse_feed

__all__ = [
    "ChannelItem",
    "ChannelRecord",
    "parse_feed",
]
