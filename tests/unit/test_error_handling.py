"""
Error Handling Tests for Gator
==============================

Exception hierarchy, error codes, SQLite constraint translation and
the logging helpers used around failures.
"""

import json
import logging
import sqlite3

import pytest

from gator.database.connection import is_unique_violation, translate_integrity_error
from gator.utils.exceptions import (
    CommandError,
    ConfigurationError,
    DatabaseError,
    DuplicateUrlError,
    ErrorCode,
    FeedError,
    FeedFetchError,
    GatorError,
    MalformedFeedError,
    NotFoundError,
    StoreUnavailableError,
    get_user_friendly_message,
)
from gator.utils.logging import (
    PerformanceLogger,
    StructuredFormatter,
    configure_application_logging,
    get_logger_for_component,
)


class TestExceptionHierarchy:
    def test_feed_errors_share_base(self):
        assert issubclass(FeedFetchError, FeedError)
        assert issubclass(MalformedFeedError, FeedError)

    def test_database_errors_share_base(self):
        assert issubclass(DuplicateUrlError, DatabaseError)
        assert issubclass(StoreUnavailableError, DatabaseError)

    def test_everything_is_a_gator_error(self):
        for cls in (ConfigurationError, DatabaseError, NotFoundError, FeedError, CommandError):
            assert issubclass(cls, GatorError)

    def test_str_includes_code(self):
        error = MalformedFeedError("Invalid RSS feed: missing channel element")
        assert str(error) == "[F003] Invalid RSS feed: missing channel element"

    def test_to_dict(self):
        error = FeedFetchError("Failed to fetch feed: Not Found", status=404, feed_url="https://example.com/rss")

        data = error.to_dict()

        assert data["error_type"] == "FeedFetchError"
        assert data["error_code"] == "F002"
        assert data["context"] == {"status": 404, "feed_url": "https://example.com/rss"}
        assert data["recoverable"] is True

    def test_store_unavailable_is_not_recoverable(self):
        error = StoreUnavailableError("database is gone")
        assert error.error_code == ErrorCode.DATABASE_CONNECTION
        assert error.recoverable is False

    def test_user_friendly_message(self):
        assert get_user_friendly_message(NotFoundError('User "x" does not exist')) == 'User "x" does not exist'
        assert get_user_friendly_message(ValueError("bad")) == "An unexpected error occurred: bad"


class TestConstraintTranslation:
    @pytest.fixture
    def conn(self):
        conn = sqlite3.connect(":memory:")
        conn.execute("CREATE TABLE parent (id TEXT PRIMARY KEY)")
        conn.execute("CREATE TABLE t (url TEXT UNIQUE, parent_id TEXT REFERENCES parent(id))")
        conn.execute("PRAGMA foreign_keys = ON")
        yield conn
        conn.close()

    def test_unique_violation(self, conn):
        conn.execute("INSERT INTO t (url) VALUES ('a')")
        with pytest.raises(sqlite3.IntegrityError) as exc_info:
            conn.execute("INSERT INTO t (url) VALUES ('a')")

        assert is_unique_violation(exc_info.value)
        error = translate_integrity_error(exc_info.value, url="a")
        assert isinstance(error, DuplicateUrlError)
        assert error.context["url"] == "a"

    def test_primary_key_violation(self, conn):
        conn.execute("INSERT INTO parent (id) VALUES ('p')")
        with pytest.raises(sqlite3.IntegrityError) as exc_info:
            conn.execute("INSERT INTO parent (id) VALUES ('p')")

        assert is_unique_violation(exc_info.value)

    def test_foreign_key_violation_is_not_duplicate(self, conn):
        with pytest.raises(sqlite3.IntegrityError) as exc_info:
            conn.execute("INSERT INTO t (url, parent_id) VALUES ('b', 'missing')")

        assert not is_unique_violation(exc_info.value)
        error = translate_integrity_error(exc_info.value)
        assert not isinstance(error, DuplicateUrlError)
        assert error.error_code == ErrorCode.DATABASE_CONSTRAINT


class TestDatabaseConnection:
    def test_transaction_rolls_back(self, db_connection, sample_user):
        with pytest.raises(RuntimeError):
            with db_connection.transaction() as conn:
                conn.execute("DELETE FROM users")
                raise RuntimeError("abort")

        assert db_connection.execute_one("SELECT COUNT(*) AS n FROM users")["n"] == 1


class TestLoggingHelpers:
    def test_structured_formatter_includes_extra(self):
        record = logging.LogRecord("gator.test", logging.INFO, __file__, 1, "hello", None, None)
        record.feed_url = "https://example.com/rss"

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "hello"
        assert data["extra"] == {"feed_url": "https://example.com/rss"}

    def test_component_logger_context(self):
        adapter = get_logger_for_component("scheduler", feed_url="https://example.com/rss")

        assert adapter.logger.name == "gator.scheduler"
        assert adapter.extra == {"component": "scheduler", "feed_url": "https://example.com/rss"}

    def test_performance_logger_records_duration(self):
        adapter = get_logger_for_component("test")

        with PerformanceLogger(adapter, "operation") as perf:
            pass

        assert perf.duration >= 0.0

    def test_performance_logger_does_not_swallow(self):
        adapter = get_logger_for_component("test")

        with pytest.raises(ValueError):
            with PerformanceLogger(adapter, "operation"):
                raise ValueError("boom")

    def test_performance_logger_reports_failure(self, caplog):
        adapter = get_logger_for_component("test")

        with caplog.at_level(logging.INFO, logger="gator.test"):
            with pytest.raises(ValueError):
                with PerformanceLogger(adapter, "operation"):
                    raise ValueError("boom")

        record = caplog.records[-1]
        assert record.getMessage().startswith("Failed operation in")
        assert record.success is False


class TestLoggingConfiguration:
    @pytest.fixture(autouse=True)
    def restore(self):
        yield
        configure_application_logging(log_file=None, enable_console=False)

    def test_file_is_json_lines(self, tmp_path):
        log_file = tmp_path / "logs" / "gator.log"
        logger = configure_application_logging(log_level="debug", log_file=str(log_file), enable_console=False)

        get_logger_for_component("scheduler").info("tick", extra={"feed_id": "f1"})
        for handler in logger.handlers:
            handler.flush()

        data = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert data["logger"] == "gator.scheduler"
        assert data["message"] == "tick"
        assert data["extra"] == {"component": "scheduler", "feed_id": "f1"}

    def test_structured_console(self, capsys):
        configure_application_logging(log_file=None, structured_logging=True)

        get_logger_for_component("cli").warning("careful")

        data = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert data["level"] == "WARNING"
        assert data["message"] == "careful"

    def test_reconfigure_replaces_handlers(self):
        configure_application_logging(log_file=None)
        logger = configure_application_logging(log_file=None)

        assert len(logger.handlers) == 1
        assert logging.getLogger("aiohttp").level == logging.WARNING
