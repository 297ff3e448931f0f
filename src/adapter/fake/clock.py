"""Controllable implementation of the Clock port for testing."""

from datetime import datetime, timedelta, timezone


class FakeClock:
    def __init__(self, now: datetime | None = None):
        self.current = now or datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, days: int = 0, hours: int = 0, seconds: int = 0) -> datetime:
        self.current += timedelta(days=days, hours=hours, seconds=seconds)
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now
