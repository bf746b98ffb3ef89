#!/usr/bin/env python3
"""
Common utilities shared across SEC change-feed modules.
Centralizes request headers, rate limiting and date handling.
"""

import time
import threading
from datetime import date, datetime, timezone
from typing import Dict, Optional


# =============================================================================
# Request Headers
# =============================================================================

def get_sec_headers(user_agent: str) -> Dict[str, str]:
    """
    Get standard headers for SEC API requests.

    Args:
        user_agent: Contact string SEC requires ("Name email@example.com")

    Returns:
        dict: Headers dictionary with User-Agent
    """
    return {
        'User-Agent': user_agent,
        'Accept-Encoding': 'gzip, deflate',
        'Accept': 'application/json, text/html, text/plain, */*'
    }


# =============================================================================
# Rate Limiting
# =============================================================================

class RateLimiter:
    """
    Thread-safe rate limiter for SEC API compliance.
    SEC enforces 10 requests per second limit.
    """

    def __init__(self, max_requests_per_second: float = 10):
        self.max_requests_per_second = max_requests_per_second
        self.min_interval = 1.0 / max_requests_per_second
        self.last_request_time = 0.0
        self.lock = threading.Lock()

    def wait_if_needed(self) -> None:
        """Wait if necessary to respect rate limit."""
        with self.lock:
            current_time = time.time()
            time_since_last = current_time - self.last_request_time

            if time_since_last < self.min_interval:
                sleep_time = self.min_interval - time_since_last
                time.sleep(sleep_time)

            self.last_request_time = time.time()

    def __enter__(self):
        self.wait_if_needed()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


# =============================================================================
# Date Utilities
# =============================================================================

def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string.

    Returns:
        The date, or None for empty or malformed input
    """
    value = (value or "").strip()
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def in_date_range(filing_date: Optional[str], start: Optional[date], end: Optional[date]) -> bool:
    """
    Check a filing date against an inclusive window.

    A missing or unparsable filing date is outside every window.
    """
    parsed = parse_iso_date(filing_date)
    if parsed is None:
        return False
    if start and parsed < start:
        return False
    if end and parsed > end:
        return False
    return True


def format_utc(moment: datetime) -> str:
    """UTC timestamp as ISO-8601 with milliseconds and a Z suffix."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
