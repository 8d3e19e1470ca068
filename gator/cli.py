"""
Gator Command Line Interface
============================

Usage:
    gator register <name>             # Create a user and log in
    gator login <name>                # Switch to an existing user
    gator reset                       # Delete all users and their data
    gator users                       # List users
    gator agg <time_between_reqs>     # Poll feeds until Ctrl+C, e.g. 30s, 5m
    gator addfeed <name> <url>        # Add a feed and follow it
    gator feeds                       # List all feeds
    gator follow <url>                # Follow an existing feed
    gator following                   # List followed feeds
    gator unfollow <url>              # Stop following a feed
    gator browse [limit]              # Show the latest posts
"""

import functools
import sys

import click
from rich.console import Console
from rich.markup import escape

from .commands import (
    AggregateCommandHandler,
    CommandContext,
    FeedCommandHandler,
    UserCommandHandler,
)
from .config.settings import get_settings
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import GatorError, get_user_friendly_message

console = Console(soft_wrap=True)
error_console = Console(stderr=True, soft_wrap=True)
logger = get_logger_for_component("cli")


def _command_context() -> CommandContext:
    """Build the shared command context once per invocation."""
    obj = click.get_current_context().ensure_object(dict)

    if "gator" not in obj:
        settings = get_settings()
        configure_application_logging(
            log_level="DEBUG" if obj.get("debug") else settings.get_effective_log_level(),
            log_file=settings.logging.file_path,
            enable_console=settings.logging.console_logging,
            structured_logging=settings.logging.structured_logging,
            max_file_size_mb=settings.logging.max_file_size_mb,
            backup_count=settings.logging.backup_count,
        )
        obj["gator"] = CommandContext.create(settings, console=console)

    return obj["gator"]


def handle_errors(func):
    """Print errors for the user and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except GatorError as e:
            logger.debug(f"Command failed: {e}", extra=e.to_dict())
            error_console.print(f"[bold red]Error:[/bold red] {escape(e.user_message)}")
            sys.exit(1)
        except Exception as e:
            logger.error(f"Unexpected command failure: {e}", exc_info=True)
            error_console.print(
                f"[bold red]Error:[/bold red] {escape(get_user_friendly_message(e))}"
            )
            sys.exit(1)

    return wrapper


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug):
    """Gator - a command line RSS feed aggregator."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("name")
@handle_errors
def register(name):
    """Create a user and log in as them."""
    UserCommandHandler(_command_context()).register(name)


@cli.command()
@click.argument("name")
@handle_errors
def login(name):
    """Log in as an existing user."""
    UserCommandHandler(_command_context()).login(name)


@cli.command()
@handle_errors
def reset():
    """Delete every user, feed, follow and post."""
    UserCommandHandler(_command_context()).reset()


@cli.command()
@handle_errors
def users():
    """List registered users."""
    UserCommandHandler(_command_context()).users()


@cli.command()
@click.argument("time_between_reqs")
@handle_errors
def agg(time_between_reqs):
    """Fetch one feed every TIME_BETWEEN_REQS (e.g. 1s, 5m, 2h) until Ctrl+C."""
    AggregateCommandHandler(_command_context()).aggregate(time_between_reqs)


@cli.command()
@click.argument("name")
@click.argument("url")
@handle_errors
def addfeed(name, url):
    """Add a feed and follow it."""
    FeedCommandHandler(_command_context()).add_feed(name, url)


@cli.command()
@handle_errors
def feeds():
    """List all feeds and who added them."""
    FeedCommandHandler(_command_context()).list_feeds()


@cli.command()
@click.argument("url")
@handle_errors
def follow(url):
    """Follow an existing feed by URL."""
    FeedCommandHandler(_command_context()).follow(url)


@cli.command()
@handle_errors
def following():
    """List the feeds you follow."""
    FeedCommandHandler(_command_context()).following()


@cli.command()
@click.argument("url")
@handle_errors
def unfollow(url):
    """Stop following a feed."""
    FeedCommandHandler(_command_context()).unfollow(url)


@cli.command()
@click.argument("limit", type=int, required=False)
@handle_errors
def browse(limit):
    """Show the latest posts from followed feeds."""
    FeedCommandHandler(_command_context()).browse(limit)


def main():
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
