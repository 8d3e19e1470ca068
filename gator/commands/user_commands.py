"""
User Commands
=============

Account handling: register, login, reset and listing users.

Commands:
- register <name> - create a user and log in as them
- login <name> - switch the session to an existing user
- reset - delete every user and, by cascade, all their data
- users - list users, marking the current one
"""

from rich.markup import escape

from .context import CommandContext
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import CommandError, DatabaseError, ErrorCode, NotFoundError


class UserCommandHandler:
    """Handler for user account commands."""

    def __init__(self, ctx: CommandContext):
        self.ctx = ctx
        self.logger = get_logger_for_component("user_commands")

    def register(self, name: str) -> None:
        if self.ctx.users.get_user_by_name(name) is not None:
            raise CommandError(
                f'User with name "{name}" already exists',
                command="register",
                error_code=ErrorCode.VALIDATION_DUPLICATE,
            )

        user = self.ctx.users.create_user(name)
        self.ctx.session.set_user(user.name)

        self.ctx.console.print(f'User "{escape(user.name)}" created successfully!')
        self.ctx.console.print(f"User data: id={user.id} created_at={user.created_at.isoformat()}")

    def login(self, name: str) -> None:
        if self.ctx.users.get_user_by_name(name) is None:
            raise NotFoundError(f'User "{name}" does not exist', resource="user")

        self.ctx.session.set_user(name)
        self.ctx.console.print(f"User set to: {escape(name)}")

    def reset(self) -> None:
        """Delete all users; feeds, follows and posts cascade."""
        try:
            deleted = self.ctx.users.delete_all_users()
        except DatabaseError as e:
            e.user_message = f"Failed to reset database: {e.user_message}"
            raise

        self.logger.info(f"Reset removed {deleted} users")
        self.ctx.console.print("Database reset successful - all users have been deleted")

    def users(self) -> None:
        current = self.ctx.session.current_user_name
        for user in self.ctx.users.get_users():
            marker = " (current)" if user.name == current else ""
            self.ctx.console.print(f"* {escape(user.name)}{marker}")
