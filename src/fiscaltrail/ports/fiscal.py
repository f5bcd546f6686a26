"""Fiscal ports - interfaces for the recomputation collaborators."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import Contract, FiscalSummary, RentEntry


class RentSchedulePort(ABC):
    """Interface for regenerating the rent schedule of a contract."""

    @abstractmethod
    def regenerate(self, contract: "Contract") -> list["RentEntry"]:
        """Replace the contract's rent entries.

        Returns the new entries.
        """
        pass

    @abstractmethod
    def prune(self, property_id: int, keep_contract_ids: set[int]) -> None:
        """Drop the property's rent entries of contracts not in keep_contract_ids."""
        pass


class FiscalSummaryPort(ABC):
    """Interface for per-year fiscal summary computation."""

    @abstractmethod
    def recompute(self, property_id: int, year: int) -> "FiscalSummary":
        """Create or overwrite the summary for one property and year.

        Raises FiscalSummaryError if inputs are invalid or the underlying
        data is inconsistent.
        """
        pass


class CarryForwardPort(ABC):
    """Interface for loss carryforward computation."""

    @abstractmethod
    def recompute(self, property_id: int) -> None:
        """Rebuild the carryforward chain from the stored fiscal summaries.

        Raises CarryForwardError if summaries are missing or malformed.
        """
        pass
