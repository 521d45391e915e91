"""
Request timing: monotonic start/stop capture and UTC timestamps for records.
"""

import time
from datetime import datetime, timezone
from typing import Callable


class Clock:
    """
    Captures request start instants and measures elapsed time.
    The time sources are injectable so tests can freeze them.
    """

    def __init__(
        self,
        monotonic_ns: Callable[[], int] = time.perf_counter_ns,
        utcnow: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._monotonic_ns = monotonic_ns
        self._utcnow = utcnow

    def start(self) -> int:
        """Instant at which the request entered the pipeline, in nanoseconds."""
        return self._monotonic_ns()

    def elapsed_micros(self, start: int) -> int:
        """Microseconds since `start`, never negative."""
        return max(0, self._monotonic_ns() - start) // 1000

    def now(self) -> datetime:
        return self._utcnow()


def duration_seconds(micros: int) -> float:
    """Convert a microsecond duration to seconds rounded to milliseconds."""
    return round(micros / 1_000_000, 3)


def iso8601(moment: datetime) -> str:
    """Format as YYYY-MM-DDTHH:MM:SSZ in UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return "%04d-%02d-%02dT%02d:%02d:%02dZ" % (
        moment.year,
        moment.month,
        moment.day,
        moment.hour,
        moment.minute,
        moment.second,
    )


default_clock = Clock()
