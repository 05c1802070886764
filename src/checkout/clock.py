"""Clock — источник текущего момента для проверок срока годности.

Время передаётся явно, а не читается внутри сравнения дат:
проверки детерминированы и тестируются без подмены системного времени.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock в UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Детерминированные часы: момент задаётся явно и сдвигается через advance()."""

    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now
