"""
Shared helpers for timestamp and URL checks.
"""

import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from dateutil import parser as dateparser


UTC_TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z\Z")


def parse_timestamp_maybe(text: str) -> Optional[datetime]:
    """
    Parse a UTC ISO 8601 date-time, returning None on failure.

    Only the extended form with seconds and a trailing 'Z' is accepted
    (YYYY-MM-DDTHH:MM:SS[.fff]Z). Bare dates, truncated times, basic-format
    and offset timestamps are rejected, as are impossible calendar dates.

    Args:
        text: Timestamp string (e.g., "2024-07-01T00:00:00Z")

    Returns:
        Timezone-aware datetime or None

    Examples:
        >>> parse_timestamp_maybe("2024-07-01T12:30:00Z")
        datetime.datetime(2024, 7, 1, 12, 30, tzinfo=tzutc())
        >>> parse_timestamp_maybe("2024-07-01") is None
        True
    """
    if not UTC_TIMESTAMP_RE.match(text):
        return None

    try:
        return dateparser.isoparse(text)
    except (ValueError, OverflowError):
        return None


def is_http_url(text: str) -> bool:
    """
    Check for an absolute http(s) URL.

    Examples:
        >>> is_http_url("https://reporter.nih.gov/project-details/11111111")
        True
        >>> is_http_url("reporter.nih.gov/project-details")
        False
    """
    parsed = urlparse(text)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
