"""
Viewing window around a concert's scheduled start.

The window is derived on every call, never stored: it opens 15 minutes
before the start and closes 3 hours after it. Both ends are inclusive.
"""
from datetime import timedelta

from utils.helpers import as_utc

OPENS_BEFORE_START = timedelta(minutes=15)
CLOSES_AFTER_START = timedelta(hours=3)


def window_bounds(concert_start):
    """Return (opens_at, closes_at) for a concert start time"""
    if concert_start is None:
        raise ValueError("Concert has no scheduled start")
    start = as_utc(concert_start)
    return start - OPENS_BEFORE_START, start + CLOSES_AFTER_START


def is_within_window(concert_start, now):
    opens_at, closes_at = window_bounds(concert_start)
    return opens_at <= as_utc(now) <= closes_at


def has_opened(concert_start, now):
    opens_at, _ = window_bounds(concert_start)
    return as_utc(now) >= opens_at


def has_ended(concert_start, now):
    _, closes_at = window_bounds(concert_start)
    return as_utc(now) > closes_at
