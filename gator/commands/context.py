"""
Command Context
===============

Everything a command handler needs, passed explicitly: settings, the
database, the session and an output console.
"""

import functools
from dataclasses import dataclass, field
from typing import Callable, Optional

from rich.console import Console

from ..config.session import Session, read_session
from ..config.settings import GatorSettings, get_settings
from ..database.connection import DatabaseConnection, get_db_manager
from ..database.models import User
from ..database.schema import DatabaseSchema
from ..storage import FeedFollowRepository, FeedRepository, PostRepository, UserRepository
from ..utils.exceptions import CommandError, DatabaseError, ErrorCode, NotFoundError


@dataclass
class CommandContext:
    """Dependencies shared by all command handlers."""

    settings: GatorSettings
    db: DatabaseConnection
    session: Session
    console: Console = field(default_factory=lambda: Console(soft_wrap=True))

    def __post_init__(self):
        self.users = UserRepository(self.db)
        self.feeds = FeedRepository(self.db)
        self.follows = FeedFollowRepository(self.db)
        self.posts = PostRepository(self.db)

    @classmethod
    def create(
        cls, settings: Optional[GatorSettings] = None, console: Optional[Console] = None
    ) -> "CommandContext":
        """Open the configured database and session file.

        The schema is created on first use.

        Raises:
            DatabaseError: If the schema cannot be verified
            ConfigurationError: If the session file is unreadable
        """
        settings = settings or get_settings()

        schema = DatabaseSchema(settings.database.path)
        schema.create_tables()
        if not schema.verify_schema():
            raise DatabaseError(
                f"Database schema verification failed for {settings.database.path}",
                error_code=ErrorCode.DATABASE_SCHEMA,
            )

        db = get_db_manager(settings.database.path, pool_size=settings.database.pool_size)
        session = read_session(settings.session.file_path, db_url=settings.database.path)

        return cls(settings=settings, db=db, session=session, console=console or Console(soft_wrap=True))

    def current_user(self) -> User:
        """Resolve the session's user.

        Raises:
            CommandError: If nobody is logged in
            NotFoundError: If the session names a user that no longer exists
        """
        user_name = self.session.current_user_name
        if not user_name:
            raise CommandError(
                "No user is currently logged in. Please login first.",
                error_code=ErrorCode.NOT_LOGGED_IN,
            )

        user = self.users.get_user_by_name(user_name)
        if user is None:
            raise NotFoundError(
                f'Current user "{user_name}" not found in database', resource="user"
            )
        return user


def require_login(handler: Callable) -> Callable:
    """Decorate a handler method to receive the logged-in ``User``.

    The wrapped method is called as ``handler(self, user, *args)``; callers
    invoke it without the user.
    """

    @functools.wraps(handler)
    def wrapper(self, *args, **kwargs):
        user = self.ctx.current_user()
        return handler(self, user, *args, **kwargs)

    return wrapper
