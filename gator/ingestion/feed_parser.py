"""
RSS Feed Parser
===============

Turns raw feed text into a ``ChannelRecord``.

feedparser decides whether the document is RSS at all. Field values are then
read from the literal ``rss/channel`` and ``rss/channel/item`` children, so
feedparser's aliases (``guid`` standing in for ``link``, ``content:encoded``
for ``description``, ``dcterms:issued`` for ``pubDate``, ``itunes:subtitle``
for the channel description) never satisfy a required field.

The channel must carry a title, link and description; items lacking any of
title, link, description or pubDate are dropped without comment. Values are
kept as published, without HTML sanitizing.
"""

import io
from dataclasses import dataclass, field
from typing import List, Optional, Union
from xml.etree import ElementTree as ET

import feedparser

from ..utils.logging import get_logger_for_component
from ..utils.exceptions import MalformedFeedError

logger = get_logger_for_component("feed_parser")

# feedparser versions that come from an <rss> root (RDF 0.90/1.0 do not)
_RDF_VERSIONS = {"rss090", "rss10"}

_ITEM_FIELDS = ("title", "link", "description", "pubDate")


@dataclass
class ChannelItem:
    """One ``<item>`` of a channel, all four fields non-empty."""

    title: str
    link: str
    description: str
    pub_date: str


@dataclass
class ChannelRecord:
    """The ``<channel>`` metadata block plus its items in source order."""

    title: str
    link: str
    description: str
    items: List[ChannelItem] = field(default_factory=list)


def _child_text(element: ET.Element, tag: str) -> str:
    return (element.findtext(tag) or "").strip()


def _is_rss_channel(parsed: feedparser.FeedParserDict) -> bool:
    version = parsed.get("version", "") or ""
    return version.startswith("rss") and version not in _RDF_VERSIONS


def parse_feed(content: Union[str, bytes], feed_url: Optional[str] = None) -> ChannelRecord:
    """Parse RSS text into a channel record.

    Args:
        content: Raw feed document
        feed_url: Source URL, used for error context only

    Returns:
        ChannelRecord with zero or more complete items

    Raises:
        MalformedFeedError: If there is no rss/channel root, the document is
            not well-formed XML, or the channel lacks title, link or description
    """
    raw = content.encode("utf-8") if isinstance(content, str) else content

    # A stream is never mistaken for a URL or file path
    parsed = feedparser.parse(io.BytesIO(raw), sanitize_html=False, resolve_relative_uris=False)

    if not _is_rss_channel(parsed):
        raise MalformedFeedError(
            "Invalid RSS feed: missing channel element", feed_url=feed_url
        )

    if parsed.get("bozo"):
        logger.debug(
            f"Feed parsing warning for {feed_url or 'feed'}: {parsed.get('bozo_exception')}"
        )

    try:
        root = ET.fromstring(content.lstrip())
    except ET.ParseError as e:
        raise MalformedFeedError(
            f"Invalid RSS feed: {e}", feed_url=feed_url
        ) from e

    channel = root.find("channel") if root.tag == "rss" else None
    if channel is None:
        raise MalformedFeedError(
            "Invalid RSS feed: missing channel element", feed_url=feed_url
        )

    title = _child_text(channel, "title")
    link = _child_text(channel, "link")
    description = _child_text(channel, "description")

    if not title or not link or not description:
        raise MalformedFeedError(
            "Invalid RSS feed: missing required channel metadata", feed_url=feed_url
        )

    items = []
    for element in channel.findall("item"):
        values = [_child_text(element, tag) for tag in _ITEM_FIELDS]
        if all(values):
            items.append(ChannelItem(*values))

    return ChannelRecord(title=title, link=link, description=description, items=items)
