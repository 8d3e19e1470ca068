"""
Aggregate Command
=================

``agg <time_between_reqs>``: run the feed scheduler in the foreground until
SIGINT or SIGTERM.
"""

import asyncio
from typing import Optional

from .context import CommandContext
from ..scheduler.aggregator import FeedScheduler
from ..utils.validators import format_duration, parse_duration


class AggregateCommandHandler:
    """Handler for the long-running ``agg`` command."""

    def __init__(self, ctx: CommandContext, scheduler: Optional[FeedScheduler] = None):
        self.ctx = ctx
        self.scheduler = scheduler or FeedScheduler.from_database(
            ctx.db, user_agent=ctx.settings.fetcher.user_agent
        )

    def aggregate(self, time_between_reqs: str, stop_event: Optional[asyncio.Event] = None) -> int:
        """Poll feeds every ``time_between_reqs`` until stopped.

        The duration is validated before anything runs.

        Returns:
            Number of cycles run

        Raises:
            ConfigurationError: If the duration is malformed
        """
        interval = parse_duration(time_between_reqs)

        self.ctx.console.print(f"Collecting feeds every {format_duration(interval)}")
        cycles = asyncio.run(self.scheduler.run(interval, stop_event=stop_event))
        self.ctx.console.print("Shutting down feed aggregator...")

        return cycles
