"""
Tests for Command Handlers
==========================

User, feed and aggregate commands run against a temp database, a temp
session file and a captured rich console.
"""

import asyncio
import io
from unittest.mock import AsyncMock, Mock

import pytest
from rich.console import Console

from gator.commands import (
    AggregateCommandHandler,
    CommandContext,
    FeedCommandHandler,
    UserCommandHandler,
)
from gator.config.session import read_session
from gator.config.settings import GatorSettings
from gator.utils.exceptions import (
    CommandError,
    ConfigurationError,
    ErrorCode,
    NotFoundError,
)

FEED_URL = "https://example.com/rss.xml"


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def ctx(db_connection, session_file, output):
    console = Console(file=output, soft_wrap=True, color_system=None, highlight=False)
    return CommandContext(
        settings=GatorSettings(),
        db=db_connection,
        session=read_session(str(session_file)),
        console=console,
    )


@pytest.fixture
def users(ctx):
    return UserCommandHandler(ctx)


@pytest.fixture
def feeds(ctx):
    return FeedCommandHandler(ctx)


@pytest.fixture
def logged_in(users):
    users.register("kahya")


class TestUserCommands:
    """Test suite for UserCommandHandler."""

    def test_register_logs_in(self, users, ctx, output, session_file):
        users.register("kahya")

        assert ctx.session.current_user_name == "kahya"
        assert read_session(str(session_file)).current_user_name == "kahya"
        assert 'User "kahya" created successfully!' in output.getvalue()

    def test_register_duplicate(self, users):
        users.register("kahya")

        with pytest.raises(CommandError) as exc_info:
            users.register("kahya")

        assert exc_info.value.user_message == 'User with name "kahya" already exists'

    def test_login(self, users, ctx, output):
        users.register("kahya")
        users.register("holgith")

        users.login("kahya")

        assert ctx.session.current_user_name == "kahya"
        assert "User set to: kahya" in output.getvalue()

    def test_login_unknown_user(self, users):
        with pytest.raises(NotFoundError) as exc_info:
            users.login("nobody")

        assert exc_info.value.user_message == 'User "nobody" does not exist'

    def test_users_marks_current(self, users, output):
        users.register("kahya")
        users.register("holgith")
        output.truncate(0)
        output.seek(0)

        users.users()

        assert output.getvalue().splitlines() == ["* holgith (current)", "* kahya"]

    def test_reset(self, users, ctx, output):
        users.register("kahya")

        users.reset()

        assert ctx.users.get_users() == []
        assert "Database reset successful" in output.getvalue()


class TestFeedCommands:
    """Test suite for FeedCommandHandler."""

    def test_login_required(self, feeds):
        with pytest.raises(CommandError) as exc_info:
            feeds.add_feed("Blog", FEED_URL)

        assert exc_info.value.error_code == ErrorCode.NOT_LOGGED_IN
        assert "No user is currently logged in" in exc_info.value.user_message

    def test_session_user_missing_from_store(self, feeds, ctx):
        ctx.session.set_user("ghost")

        with pytest.raises(NotFoundError, match='Current user "ghost" not found'):
            feeds.following()

    def test_add_feed_follows_it(self, feeds, ctx, output, logged_in):
        feeds.add_feed("Blog", FEED_URL)

        text = output.getvalue()
        assert "Feed created successfully!" in text
        assert "Following feed: Blog" in text
        assert "User: kahya" in text

        user = ctx.users.get_user_by_name("kahya")
        assert [f.feed_name for f in ctx.follows.get_feed_follows_for_user(user.id)] == ["Blog"]

    def test_add_duplicate_feed(self, feeds, logged_in):
        feeds.add_feed("Blog", FEED_URL)

        with pytest.raises(CommandError) as exc_info:
            feeds.add_feed("Blog again", FEED_URL)

        assert exc_info.value.user_message == f'Feed with URL "{FEED_URL}" already exists'

    def test_add_feed_invalid_url(self, feeds, logged_in):
        with pytest.raises(CommandError):
            feeds.add_feed("Blog", "not-a-url")

    def test_list_feeds(self, feeds, output, logged_in):
        feeds.add_feed("Blog", FEED_URL)
        output.truncate(0)
        output.seek(0)

        feeds.list_feeds()

        text = output.getvalue()
        assert "* Name: Blog" in text
        assert f"* URL: {FEED_URL}" in text
        assert "* Created by: kahya" in text

    def test_list_feeds_empty(self, feeds, output):
        feeds.list_feeds()
        assert "No feeds found in the database." in output.getvalue()

    def test_follow_and_unfollow(self, feeds, users, ctx, output, logged_in):
        feeds.add_feed("Blog", FEED_URL)
        users.register("holgith")

        feeds.follow(FEED_URL)
        assert "User: holgith" in output.getvalue()

        feeds.unfollow(FEED_URL)
        assert f"Successfully unfollowed feed with URL: {FEED_URL}" in output.getvalue()

        holgith = ctx.users.get_user_by_name("holgith")
        assert ctx.follows.get_feed_follows_for_user(holgith.id) == []

    def test_follow_twice(self, feeds, logged_in):
        feeds.add_feed("Blog", FEED_URL)

        with pytest.raises(CommandError) as exc_info:
            feeds.follow(FEED_URL)

        assert exc_info.value.user_message == "You are already following this feed"

    def test_follow_unknown_feed(self, feeds, logged_in):
        with pytest.raises(NotFoundError, match="not found"):
            feeds.follow("https://missing.example.com/rss")

    def test_unfollow_not_following(self, feeds, users, logged_in):
        feeds.add_feed("Blog", FEED_URL)
        users.register("holgith")

        with pytest.raises(NotFoundError, match="not following"):
            feeds.unfollow(FEED_URL)

    def test_following(self, feeds, output, logged_in):
        feeds.following()
        assert "You are not following any feeds." in output.getvalue()

        feeds.add_feed("Blog", FEED_URL)
        feeds.following()
        assert "* Blog" in output.getvalue()

    def test_browse_default_limit(self, feeds, ctx, output, logged_in):
        feeds.add_feed("Blog", FEED_URL)
        feed = ctx.feeds.get_feed_by_url(FEED_URL)
        for n in range(3):
            ctx.posts.create_post(f"Post {n}", f"https://example.com/{n}", f"Body {n}", None, feed.id)
        output.truncate(0)
        output.seek(0)

        feeds.browse()

        text = output.getvalue()
        assert "Found 2 posts for user kahya:" in text
        assert text.count("Link: ") == 2

    def test_browse_explicit_limit(self, feeds, ctx, output, logged_in):
        feeds.add_feed("Blog", FEED_URL)
        feed = ctx.feeds.get_feed_by_url(FEED_URL)
        for n in range(3):
            ctx.posts.create_post(f"Post {n}", f"https://example.com/{n}", None, None, feed.id)

        feeds.browse(5)

        assert "Found 3 posts" in output.getvalue()

    def test_browse_invalid_limit(self, feeds, logged_in):
        with pytest.raises(CommandError):
            feeds.browse(0)

    def test_browse_nothing(self, feeds, output, logged_in):
        feeds.browse()
        assert "No posts found" in output.getvalue()


class TestAggregateCommand:
    """Test suite for AggregateCommandHandler."""

    def test_invalid_duration_fails_before_loop(self, ctx):
        scheduler = Mock()
        scheduler.run = AsyncMock(return_value=0)

        with pytest.raises(ConfigurationError):
            AggregateCommandHandler(ctx, scheduler=scheduler).aggregate("90")

        scheduler.run.assert_not_called()

    def test_announces_interval_and_shutdown(self, ctx, output):
        scheduler = Mock()
        scheduler.run = AsyncMock(return_value=4)

        cycles = AggregateCommandHandler(ctx, scheduler=scheduler).aggregate("5m")

        assert cycles == 4
        text = output.getvalue()
        assert "Collecting feeds every 5m0s" in text
        assert "Shutting down feed aggregator..." in text

        interval = scheduler.run.call_args.args[0]
        assert interval.total_seconds() == 300

    def test_default_scheduler(self, ctx):
        stop = asyncio.Event()
        stop.set()

        assert AggregateCommandHandler(ctx).aggregate("1s", stop_event=stop) == 0
