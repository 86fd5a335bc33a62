"""Freshness arithmetic.

The delay returned by :func:`compute_refresh_delay` has three meanings that
must not be collapsed:

* ``None``  -- the resource is not subject to timed refresh at all (a value
  is known and neither ``Expires`` nor a refresh interval ever applied);
* ``0.0``   -- stale, a request is due now;
* ``> 0``   -- fresh for that many more seconds.
"""

from __future__ import annotations

from datetime import UTC
from email.utils import parsedate_to_datetime


def compute_refresh_delay(
    *,
    now: float,
    expires_at: float | None,
    last_fetch_timestamp: float | None,
    refresh_interval: float | None,
    has_value: bool,
) -> float | None:
    """Seconds until the next refresh is due, per the rules above.

    When both the server expiry and the client refresh interval are still
    running, the shorter one wins.
    """
    delay = 0.0

    if expires_at and expires_at > now:
        delay = expires_at - now

    if last_fetch_timestamp and refresh_interval and last_fetch_timestamp + refresh_interval > now:
        remaining = last_fetch_timestamp + refresh_interval - now
        if delay == 0 or delay > remaining:
            delay = remaining

    if delay == 0 and has_value and not expires_at and not refresh_interval:
        return None
    return delay


def parse_expires(value: str | None) -> float | None:
    """Parse an ``Expires`` HTTP-date into epoch seconds.

    Missing or unparsable values (including the common ``Expires: 0``)
    mean no expiry. Dates without a zone are read as UTC.
    """
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.timestamp()
