"""Historical window policy for retroactive processing."""

from datetime import date, datetime

from ..ports.clock import ClockPort

DEFAULT_YEARS_BACK = 10
DEFAULT_YEARS_FORWARD = 1


def shift_years(value: date, years: int) -> date:
    """Move a date by whole years; Feb 29 rolls over to Mar 1 in common years."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return date(value.year + years, 3, 1)


def coerce_date(value: object) -> date | None:
    """Return value as a date, or None if it is not one."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    return None


class HistoricalWindowPolicy:
    """Decides which dates are eligible for historical reconstruction.

    The window runs from ``years_back`` years before today up to
    ``years_forward`` years after it, both ends inclusive. It is derived
    from the clock on every call, never cached.
    """

    def __init__(
        self,
        clock: ClockPort,
        years_back: int = DEFAULT_YEARS_BACK,
        years_forward: int = DEFAULT_YEARS_FORWARD,
    ) -> None:
        self.clock = clock
        self.years_back = years_back
        self.years_forward = years_forward

    def current_year(self) -> int:
        return self.clock.today().year

    def minimum_date(self) -> date:
        return shift_years(self.clock.today(), -self.years_back)

    def maximum_date(self) -> date:
        return shift_years(self.clock.today(), self.years_forward)

    def is_in_window(self, value: object) -> bool:
        """Check a date against the window. Anything that is not a date is outside."""
        candidate = coerce_date(value)
        if candidate is None:
            return False
        today = self.clock.today()
        minimum = shift_years(today, -self.years_back)
        maximum = shift_years(today, self.years_forward)
        return minimum <= candidate <= maximum

    def exercise_year_allowed(self, year: int) -> bool:
        current = self.current_year()
        return current - self.years_back <= year <= current + self.years_forward

    def reconstruction_years(self) -> list[int]:
        """Fiscal years recomputed by a run, oldest first."""
        current = self.current_year()
        return list(range(current - self.years_back, current + 1))
