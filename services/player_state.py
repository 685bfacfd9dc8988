"""
What the stream player shows while waiting for a concert.

The server never stores this; a polling client keeps one StreamWatcher per
concert page and feeds it the clock and every probe result.

    not_yet_open -> window_open_waiting -> probing_live -> live_confirmed

The first probe moves the watcher into probing_live and a successful one
into live_confirmed. Every state moves to ended once the window closes.
Once a probe has succeeded the watcher stays in live_confirmed for the rest
of the window, even if later probes fail, and keeps probing. ended is final.
"""
import random
from datetime import timedelta
from enum import Enum

from .viewing_window import has_ended, has_opened

POLL_INTERVAL = timedelta(seconds=15)
MAX_POLL_INTERVAL = timedelta(minutes=2)
BACKOFF_AFTER_FAILURES = 3


class PlayerState(Enum):
    NOT_YET_OPEN = 'not_yet_open'
    WINDOW_OPEN_WAITING = 'window_open_waiting'
    PROBING_LIVE = 'probing_live'
    LIVE_CONFIRMED = 'live_confirmed'
    ENDED = 'ended'


class StreamWatcher:
    def __init__(self, concert_start, rng=None):
        self.concert_start = concert_start
        self.state = PlayerState.NOT_YET_OPEN
        self.ever_live = False
        self.last_probe_ok = False
        self.consecutive_failures = 0
        self._rng = rng or random.Random()

    def advance(self, now):
        """Apply transitions that depend on the clock alone"""
        if self.state is PlayerState.ENDED:
            return self.state
        if has_ended(self.concert_start, now):
            self.state = PlayerState.ENDED
        elif self.state is PlayerState.NOT_YET_OPEN and has_opened(self.concert_start, now):
            self.state = PlayerState.WINDOW_OPEN_WAITING
        return self.state

    def begin_probe(self, now):
        """A probe is being taken at `now`; leaves window_open_waiting"""
        self.advance(now)
        if self.state is PlayerState.WINDOW_OPEN_WAITING:
            self.state = PlayerState.PROBING_LIVE
        return self.state

    def record_probe(self, now, available):
        """Feed one probe result taken at `now`"""
        self.begin_probe(now)
        if self.state in (PlayerState.NOT_YET_OPEN, PlayerState.ENDED):
            return self.state

        self.last_probe_ok = available
        if available:
            self.ever_live = True
            self.consecutive_failures = 0
            self.state = PlayerState.LIVE_CONFIRMED
        else:
            self.consecutive_failures += 1
        return self.state

    @property
    def should_probe(self):
        return self.state not in (PlayerState.NOT_YET_OPEN, PlayerState.ENDED)

    @property
    def playback_eligible(self):
        return self.state is PlayerState.LIVE_CONFIRMED

    def next_poll_delay(self):
        """Seconds until the next poll.

        Fixed cadence, backing off exponentially with full jitter once the
        playlist has failed several probes in a row.
        """
        base = POLL_INTERVAL.total_seconds()
        extra_failures = self.consecutive_failures - BACKOFF_AFTER_FAILURES
        if extra_failures < 0:
            return base
        ceiling = min(base * (2 ** (extra_failures + 1)), MAX_POLL_INTERVAL.total_seconds())
        return self._rng.uniform(base, ceiling)
