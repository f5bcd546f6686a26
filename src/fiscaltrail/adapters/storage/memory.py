"""In-memory store adapter."""

import logging

from ...domain.models import (
    CarryForward,
    Contract,
    Document,
    FiscalSummary,
    Property,
    RentEntry,
)
from ...ports.store import StorePort

logger = logging.getLogger(__name__)


class MemoryStore(StorePort):
    """Store keeping every collection in process memory.

    Besides the read port it exposes the write methods the fiscal adapters
    use. Subclasses persist by overriding ``_changed``.
    """

    def __init__(
        self,
        properties: list[Property] | None = None,
        contracts: list[Contract] | None = None,
        documents: list[Document] | None = None,
    ) -> None:
        self.properties = list(properties or [])
        self.contracts = list(contracts or [])
        self.documents = list(documents or [])
        self.rent_schedules: dict[int, list[RentEntry]] = {}
        self.fiscal_summaries: dict[tuple[int, int], FiscalSummary] = {}
        self.carry_forwards: dict[int, list[CarryForward]] = {}

    def get_all_properties(self) -> list[Property]:
        return list(self.properties)

    def get_all_contracts(self) -> list[Contract]:
        return list(self.contracts)

    def get_all_documents(self) -> list[Document]:
        return list(self.documents)

    def get_property(self, property_id: int) -> Property | None:
        return next((p for p in self.properties if p.id == property_id), None)

    def get_fiscal_summaries(self, property_id: int) -> list[FiscalSummary]:
        return sorted(
            (s for (pid, _), s in self.fiscal_summaries.items() if pid == property_id),
            key=lambda s: s.exercise_year,
        )

    def get_fiscal_summary(self, property_id: int, year: int) -> FiscalSummary | None:
        return self.fiscal_summaries.get((property_id, year))

    def get_carry_forwards(self, property_id: int) -> list[CarryForward]:
        return list(self.carry_forwards.get(property_id, []))

    def get_rent_entries(self, property_id: int) -> list[RentEntry]:
        return [
            entry
            for entries in self.rent_schedules.values()
            for entry in entries
            if entry.property_id == property_id
        ]

    def save_rent_schedule(self, contract_id: int, entries: list[RentEntry]) -> None:
        self.rent_schedules[contract_id] = list(entries)
        self._changed()

    def prune_rent_schedules(self, property_id: int, keep_ids: set[int]) -> list[int]:
        """Remove the property's schedules whose contract id is not kept.

        Returns the removed contract ids.
        """
        removed = [
            contract_id
            for contract_id, entries in self.rent_schedules.items()
            if contract_id not in keep_ids
            and any(e.property_id == property_id for e in entries)
        ]
        for contract_id in removed:
            del self.rent_schedules[contract_id]
        if removed:
            self._changed()
        return removed

    def save_fiscal_summary(self, summary: FiscalSummary) -> None:
        self.fiscal_summaries[(summary.property_id, summary.exercise_year)] = summary
        self._changed()

    def save_carry_forwards(self, property_id: int, entries: list[CarryForward]) -> None:
        self.carry_forwards[property_id] = list(entries)
        self._changed()

    def _changed(self) -> None:
        pass
