"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for Gator tests.

- Temp-file SQLite database with the full schema per test
- Repositories bound to that database
- A sample user and feed, and a sample RSS document
"""

import pytest
import tempfile
import os
import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
_TEST_DIR = Path(tempfile.gettempdir()) / "gator_tests"
os.environ["GATOR_DATABASE__PATH"] = str(_TEST_DIR / "gator_test.db")
os.environ["GATOR_LOGGING__FILE_PATH"] = str(_TEST_DIR / "gator_test.log")
os.environ["GATOR_LOGGING__CONSOLE_LOGGING"] = "false"
os.environ["GATOR_SESSION__FILE_PATH"] = str(_TEST_DIR / "gatorconfig.json")
os.environ["GATOR_DEBUG"] = "true"


SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example Blog</title>
    <link>https://example.com</link>
    <description>Posts about examples</description>
    <item>
      <title>First Post</title>
      <link>https://example.com/posts/first</link>
      <description>The very first post</description>
      <pubDate>Mon, 02 Jan 2006 15:04:05 +0000</pubDate>
    </item>
  </channel>
</rss>
"""


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def temp_db():
    """Create a temporary database file with the schema applied."""
    from gator.database.schema import DatabaseSchema

    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    DatabaseSchema(db_path).create_tables()

    yield db_path

    # Cleanup, including WAL side files
    for suffix in ("", "-wal", "-shm"):
        try:
            os.unlink(db_path + suffix)
        except FileNotFoundError:
            pass


@pytest.fixture
def db_connection(temp_db):
    """Create a database connection manager for testing."""
    from gator.database.connection import DatabaseConnection

    connection = DatabaseConnection(temp_db, pool_size=2)
    yield connection

    # Cleanup connections
    connection.close_all_connections()


@pytest.fixture
def user_repo(db_connection):
    from gator.storage import UserRepository

    return UserRepository(db_connection)


@pytest.fixture
def feed_repo(db_connection):
    from gator.storage import FeedRepository

    return FeedRepository(db_connection)


@pytest.fixture
def follow_repo(db_connection):
    from gator.storage import FeedFollowRepository

    return FeedFollowRepository(db_connection)


@pytest.fixture
def post_repo(db_connection):
    from gator.storage import PostRepository

    return PostRepository(db_connection)


# ============================================================================
# Sample Data
# ============================================================================


@pytest.fixture
def sample_user(user_repo):
    """A stored user named kahya."""
    return user_repo.create_user("kahya")


@pytest.fixture
def sample_feed(feed_repo, sample_user):
    """A stored, never-fetched feed owned by sample_user."""
    return feed_repo.create_feed("Example Blog", "https://example.com/rss.xml", sample_user.id)


@pytest.fixture
def sample_rss():
    """Single-item RSS 2.0 document."""
    return SAMPLE_RSS


@pytest.fixture
def session_file(tmp_path):
    """Path for a throwaway session file."""
    return tmp_path / "gatorconfig.json"
