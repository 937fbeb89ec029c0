# core/reminders.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Reminder:
    minutes: int
    message: str

    @property
    def window(self) -> timedelta:
        return timedelta(minutes=self.minutes)


# Checked smallest window first.
REMINDERS: Tuple[Reminder, ...] = (
    Reminder(1, "Server closing in one minute!"),
    Reminder(5, "Server closing in five minutes!"),
    Reminder(15, "Server closing in fifteen minutes."),
    Reminder(30, "Server closing in thirty minutes."),
    Reminder(60, "Server closing in one hour."),
)


@dataclass
class ReminderSchedule:
    """
    One-shot shutdown reminders.

    The state is the smallest threshold fired so far: a threshold is still
    pending only while it is larger than nothing fired yet and smaller than
    that marker. Once a smaller reminder fires, every larger one is gone for
    good, so a window skipped over between two ticks is never announced.
    """
    reminders: Tuple[Reminder, ...] = REMINDERS
    fired: List[Reminder] = field(default_factory=list)

    @property
    def last_fired(self) -> Optional[Reminder]:
        return self.fired[-1] if self.fired else None

    def is_fired(self, minutes: int) -> bool:
        return any(r.minutes == minutes for r in self.fired)

    def _pending(self, reminder: Reminder) -> bool:
        last = self.last_fired
        return last is None or reminder.minutes < last.minutes

    def due(self, remaining: timedelta) -> Optional[Reminder]:
        """Return (and mark fired) at most one reminder for this tick."""
        for reminder in sorted(self.reminders, key=lambda r: r.minutes):
            if not self._pending(reminder):
                # every larger threshold is gated behind this one
                return None
            if remaining < reminder.window:
                self.fired.append(reminder)
                return reminder
        return None
