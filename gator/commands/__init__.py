"""
Gator Commands
==============

Handlers behind each CLI command, grouped by what they manage.
"""

from .context import CommandContext, require_login
from .user_commands import UserCommandHandler
from .feed_commands import FeedCommandHandler
from .aggregate_command import AggregateCommandHandler

__all__ = [
    "CommandContext",
    "require_login",
    "UserCommandHandler",
    "FeedCommandHandler",
    "AggregateCommandHandler",
]
