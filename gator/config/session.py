"""
Gator Session File
==================

The logged-in user is kept in a small JSON file (``~/.gatorconfig.json`` by
default) and handed to command handlers as an explicit ``Session`` value.

File format::

    {"db_url": "data/gator.db", "current_user_name": "kahya"}
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from ..utils.exceptions import ConfigurationError, ErrorCode
from ..utils.logging import get_logger_for_component


logger = get_logger_for_component("session")


class SessionData(BaseModel):
    """Contents of the session file."""
    db_url: Optional[str] = Field(default=None, description="Database the session belongs to")
    current_user_name: Optional[str] = Field(default=None, description="Logged-in user name")


class Session:
    """Current-user state backed by a JSON file.

    Reads happen once at construction; ``set_user`` writes through.
    """

    def __init__(self, path: Path, data: Optional[SessionData] = None):
        self.path = Path(path)
        self.data = data or SessionData()

    @property
    def current_user_name(self) -> Optional[str]:
        return self.data.current_user_name

    def set_user(self, user_name: str) -> None:
        """Remember ``user_name`` as the logged-in user and persist it."""
        self.data.current_user_name = user_name
        self.save()

    def save(self) -> None:
        """Write the session file, creating parent directories as needed.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self.data.model_dump(), indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise ConfigurationError(
                f"Failed to write session file {self.path}: {e}",
                config_key="session.file_path",
                error_code=ErrorCode.CONFIG_INVALID,
            ) from e

        logger.debug(f"Session saved to {self.path}")


def read_session(path: str, db_url: Optional[str] = None) -> Session:
    """Load the session file at ``path``.

    A missing file is an empty session. ``db_url`` is recorded when the file
    does not name one yet.

    Raises:
        ConfigurationError: If the file exists but is not a valid session
    """
    session_path = Path(path).expanduser()

    if not session_path.exists():
        return Session(session_path, SessionData(db_url=db_url))

    try:
        raw = json.loads(session_path.read_text(encoding="utf-8"))
        data = SessionData.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigurationError(
            f"Failed to read session file {session_path}: {e}",
            config_key="session.file_path",
            error_code=ErrorCode.CONFIG_PARSE_ERROR,
        ) from e

    if data.db_url is None:
        data.db_url = db_url

    return Session(session_path, data)
