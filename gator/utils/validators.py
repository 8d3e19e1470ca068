"""
Gator Input Validators
======================

Validation for command inputs: feed URLs and polling durations.
"""

import re
from datetime import timedelta
from urllib.parse import urlparse

from .exceptions import ConfigurationError, CommandError, ErrorCode


DURATION_PATTERN = re.compile(r"^(\d+)(ms|s|m|h)$")

_UNIT_MILLISECONDS = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
}


def parse_duration(value: str) -> timedelta:
    """Parse a polling interval such as ``1s``, ``5m`` or ``2h``.

    Args:
        value: Duration string matching ``^\\d+(ms|s|m|h)$``

    Returns:
        The interval as a timedelta

    Raises:
        ConfigurationError: If the string is not a valid duration
    """
    match = DURATION_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ConfigurationError(
            f"Invalid duration {value!r}: expected a number followed by ms, s, m or h",
            config_key="time_between_reqs",
            error_code=ErrorCode.CONFIG_INVALID_DURATION,
        )

    amount, unit = match.groups()
    milliseconds = int(amount) * _UNIT_MILLISECONDS[unit]
    if milliseconds <= 0:
        raise ConfigurationError(
            f"Invalid duration {value!r}: interval must be positive",
            config_key="time_between_reqs",
            error_code=ErrorCode.CONFIG_INVALID_DURATION,
        )

    return timedelta(milliseconds=milliseconds)


def format_duration(interval: timedelta) -> str:
    """Render an interval as ``1h2m3s`` / ``500ms``."""
    total_ms = int(interval.total_seconds() * 1000)
    if total_ms < 1000:
        return f"{total_ms}ms"

    hours, rem = divmod(total_ms, 3600 * 1000)
    minutes, rem = divmod(rem, 60 * 1000)
    seconds, millis = divmod(rem, 1000)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}.{millis:03d}s".replace(".000s", "s"))
    return "".join(parts)


def validate_feed_url(url: str) -> str:
    """Check that a feed URL is an absolute http(s) URL.

    Raises:
        CommandError: If the URL is missing or malformed
    """
    if not url or not url.strip():
        raise CommandError(
            "Feed URL is required", error_code=ErrorCode.VALIDATION_REQUIRED_FIELD
        )

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
        raise CommandError(
            f"Invalid feed URL {url!r}: must be an absolute http(s) URL",
            error_code=ErrorCode.FEED_INVALID_URL,
        )
    return url
