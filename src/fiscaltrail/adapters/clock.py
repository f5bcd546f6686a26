"""Clock adapters."""

from datetime import date

from ..ports.clock import ClockPort


class SystemClock(ClockPort):
    """Clock backed by the system date."""

    def today(self) -> date:
        return date.today()


class FixedClock(ClockPort):
    """Clock frozen at a given date."""

    def __init__(self, fixed: date) -> None:
        self.fixed = fixed

    def today(self) -> date:
        return self.fixed
