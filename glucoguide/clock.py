from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app

CLOCK_EXTENSION_KEY = "glucoguide.clock"


def resolve_zoneinfo(tz_name: str | None):
    if not tz_name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        return ZoneInfo("UTC")


class Clock:
    def today(self) -> date:
        raise NotImplementedError

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def __init__(self, time_zone: str | None = "UTC"):
        self.zone = resolve_zoneinfo(time_zone)

    def now(self) -> datetime:
        return datetime.now(self.zone)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock pinned to one calendar day; advance() moves it across day boundaries."""

    def __init__(self, day: date):
        self.day = day

    def now(self) -> datetime:
        return datetime.combine(self.day, datetime.min.time())

    def today(self) -> date:
        return self.day

    def advance(self, days: int = 1) -> date:
        self.day = self.day + timedelta(days=days)
        return self.day


def get_clock() -> Clock:
    clock = current_app.extensions.get(CLOCK_EXTENSION_KEY)
    if clock is None:
        clock = SystemClock(current_app.config.get("APP_TIME_ZONE"))
    return clock
