"""Clock port - interface for the current date."""

from abc import ABC, abstractmethod
from datetime import date


class ClockPort(ABC):
    """Interface for reading today's date.

    Domain code never calls ``date.today()`` directly so that window
    checks stay deterministic under test.
    """

    @abstractmethod
    def today(self) -> date:
        """Return the current date."""
        pass
