"""
Feed Management Commands
========================

Commands for adding, listing, following and browsing RSS feeds.

Commands:
- addfeed <name> <url> - add a feed and follow it
- feeds - list every feed with its creator
- follow <url> - follow an existing feed
- following - list followed feeds
- unfollow <url> - stop following a feed
- browse [limit] - show the latest posts from followed feeds
"""

from typing import Optional

from rich.markup import escape

from .context import CommandContext, require_login
from ..database.models import User
from ..utils.logging import get_logger_for_component
from ..utils.validators import validate_feed_url
from ..utils.exceptions import CommandError, DuplicateUrlError, ErrorCode, NotFoundError

_FEEDS_RULE = "----------------------"
_POSTS_RULE = "====================================="


class FeedCommandHandler:
    """Handler for feed-related commands."""

    def __init__(self, ctx: CommandContext):
        """Initialize feed command handler.

        Args:
            ctx: Shared command dependencies
        """
        self.ctx = ctx
        self.logger = get_logger_for_component("feed_commands")

    @require_login
    def add_feed(self, user: User, name: str, url: str) -> None:
        """Create a feed owned by the current user and follow it."""
        url = validate_feed_url(url)

        try:
            feed = self.ctx.feeds.create_feed(name, url, user.id)
        except DuplicateUrlError as e:
            raise CommandError(
                f'Feed with URL "{url}" already exists',
                command="addfeed",
                error_code=ErrorCode.VALIDATION_DUPLICATE,
            ) from e

        follow = self.ctx.follows.create_feed_follow(user.id, feed.id)

        console = self.ctx.console
        console.print("Feed created successfully!")
        console.print(f"* ID: {feed.id}")
        console.print(f"* Name: {escape(feed.name)}")
        console.print(f"* URL: {escape(feed.url)}")
        console.print(f"Following feed: {escape(follow.feed_name or feed.name)}")
        console.print(f"User: {escape(follow.user_name or user.name)}")

    def list_feeds(self) -> None:
        feeds = self.ctx.feeds.get_all_feeds_with_users()
        console = self.ctx.console

        if not feeds:
            console.print("No feeds found in the database.")
            return

        console.print("Feeds in the database:")
        console.print(_FEEDS_RULE)
        for entry in feeds:
            console.print(f"* Name: {escape(entry.feed.name)}")
            console.print(f"* URL: {escape(entry.feed.url)}")
            console.print(f"* Created by: {escape(entry.user_name or 'Unknown')}")
            console.print(_FEEDS_RULE)

    @require_login
    def follow(self, user: User, url: str) -> None:
        feed = self.ctx.feeds.get_feed_by_url(url)
        if feed is None:
            raise NotFoundError(f'Feed with URL "{url}" not found', resource="feed")

        try:
            follow = self.ctx.follows.create_feed_follow(user.id, feed.id)
        except DuplicateUrlError as e:
            raise CommandError(
                "You are already following this feed",
                command="follow",
                error_code=ErrorCode.VALIDATION_DUPLICATE,
            ) from e

        self.ctx.console.print(f"Following feed: {escape(follow.feed_name or feed.name)}")
        self.ctx.console.print(f"User: {escape(follow.user_name or user.name)}")

    @require_login
    def following(self, user: User) -> None:
        follows = self.ctx.follows.get_feed_follows_for_user(user.id)
        console = self.ctx.console

        if not follows:
            console.print("You are not following any feeds.")
            return

        console.print("Feeds you are following:")
        console.print("------------------------")
        for follow in follows:
            console.print(f"* {escape(follow.feed_name or follow.feed_id)}")

    @require_login
    def unfollow(self, user: User, url: str) -> None:
        self.ctx.follows.delete_feed_follow(user.id, url)
        self.ctx.console.print(f"Successfully unfollowed feed with URL: {escape(url)}")

    @require_login
    def browse(self, user: User, limit: Optional[int] = None) -> None:
        """Print the newest posts from the feeds the user follows.

        Args:
            user: Logged-in user
            limit: Number of posts, defaults to the configured browse limit
        """
        if limit is None:
            limit = self.ctx.settings.browse_limit
        if limit < 1:
            raise CommandError(
                f"Invalid limit {limit}: must be a positive number", command="browse"
            )

        posts = self.ctx.posts.get_posts_for_user(user.id, limit=limit)
        console = self.ctx.console

        if not posts:
            console.print("No posts found. Follow some feeds and run agg first.")
            return

        console.print(f"Found {len(posts)} posts for user {escape(user.name)}:")
        for entry in posts:
            post = entry.post
            published = (
                post.published_at.strftime("%a %b %d %Y %H:%M UTC")
                if post.published_at else "unknown date"
            )
            console.print(f"{published} from {escape(entry.feed_name)}")
            console.print(f"--- {escape(post.title)} ---")
            if post.description:
                console.print(f"    {escape(post.description)}")
            console.print(f"Link: {escape(post.url)}")
            console.print(_POSTS_RULE)
