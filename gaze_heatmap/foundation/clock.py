"""Clock utilities.

Dwell time is measured in integer milliseconds so running totals stay
exact under addition.  This module is the single source of "now" so tests
can monkey-patch it trivially.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Return the current wall-clock time in whole milliseconds."""
    return time.time_ns() // 1_000_000


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)
