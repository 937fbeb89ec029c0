# core/schedule.py
"""
Shutdown schedule: turn an hour/minute pair into the next future occurrence
of that time-of-day (local, naive datetimes).
"""
from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Callable, Tuple

from core.errors import ScheduleError

log = logging.getLogger(__name__)

SCHEDULE_FMT = "%Y-%m-%d %H:%M:%S"


def _parse_number(text: str) -> int:
    try:
        return int(str(text).strip())
    except ValueError as e:
        raise ScheduleError(f"Failed to parse number: {e}") from None


def parse_hour(text: str) -> int:
    hour = _parse_number(text)
    if not 0 <= hour <= 23:
        raise ScheduleError("Hours must be between 0 and 23")
    return hour


def parse_minute(text: str) -> int:
    minute = _parse_number(text)
    if not 0 <= minute <= 59:
        raise ScheduleError("Minutes must be between 0 and 59")
    return minute


def parse_hhmm(s: str) -> Tuple[int, int]:
    try:
        hh, mm = s.split(":")
    except ValueError:
        raise ScheduleError(f"Expected HH:MM, got '{s}'") from None
    return parse_hour(hh), parse_minute(mm)


def resolve(hour: int, minute: int, now: datetime) -> datetime:
    """Next instant strictly after `now` with the given hour:minute:00.000."""
    if not 0 <= hour <= 23:
        raise ScheduleError("Hours must be between 0 and 23")
    if not 0 <= minute <= 59:
        raise ScheduleError("Minutes must be between 0 and 59")
    scheduled = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if scheduled <= now:
        scheduled = scheduled + timedelta(days=1)
    return scheduled


def format_schedule(ts: datetime) -> str:
    return ts.strftime(SCHEDULE_FMT)


def prompt_schedule(read: Callable[[str], str] = input,
                    clock: Callable[[], datetime] = datetime.now) -> datetime:
    """Ask for hours then minutes until both are valid; any bad answer restarts at hours."""
    while True:
        print("\nInsert time for scheduled server shutdown")
        try:
            hour = parse_hour(read("Hours > "))
            minute = parse_minute(read("Minutes > "))
        except ScheduleError as e:
            log.warning(f"[SCHEDULE] {e}")
            continue
        return resolve(hour, minute, clock())
