"""Store port - read access to persisted entities."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import (
        CarryForward,
        Contract,
        Document,
        FiscalSummary,
        Property,
    )


class StorePort(ABC):
    """Interface for the entity store.

    Reconstruction only reads through this port; writes go through the
    collaborator adapters.
    """

    @abstractmethod
    def get_all_properties(self) -> list["Property"]:
        pass

    @abstractmethod
    def get_all_contracts(self) -> list["Contract"]:
        pass

    @abstractmethod
    def get_all_documents(self) -> list["Document"]:
        pass

    @abstractmethod
    def get_fiscal_summaries(self, property_id: int) -> list["FiscalSummary"]:
        """Return stored fiscal summaries for a property, ascending by year."""
        pass

    @abstractmethod
    def get_carry_forwards(self, property_id: int) -> list["CarryForward"]:
        """Return the stored carryforward chain, ascending by origin year."""
        pass
