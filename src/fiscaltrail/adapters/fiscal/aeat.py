"""Reference AEAT adapters for fiscal summaries and loss carryforwards."""

import logging
from datetime import datetime
from decimal import Decimal

from ...domain.exceptions import CarryForwardError, FiscalSummaryError
from ...domain.models import ASSIGNED_STATUS, CarryForward, Document, FiscalSummary
from ...domain.window import HistoricalWindowPolicy
from ...ports.fiscal import CarryForwardPort, FiscalSummaryPort
from ..storage.memory import MemoryStore

logger = logging.getLogger(__name__)

BOX_BY_FISCAL_TYPE = {
    "financiacion": "box_0105",
    "reparacion-conservacion": "box_0106",
    "comunidad": "box_0109",
    "servicios-personales": "box_0112",
    "suministros": "box_0113",
    "seguros": "box_0114",
    "tributos-locales": "box_0115",
    "amortizacion-muebles": "box_0117",
}
CAPEX_FISCAL_TYPE = "capex-mejora-ampliacion"
LIVE_YEARS = 4
ZERO = Decimal("0")


def exercise_status(year: int, current_year: int) -> str:
    """The last four fiscal years are still open ("Vivo")."""
    return "Vivo" if current_year - year <= LIVE_YEARS else "Prescrito"


def _document_year(document: Document) -> int | None:
    if document.exercise_year is not None:
        return document.exercise_year
    return document.issue_date.year if document.issue_date else None


class AeatFiscalSummaryAdapter(FiscalSummaryPort):
    """Aggregates rent and classified expenses into the yearly summary."""

    def __init__(self, store: MemoryStore, policy: HistoricalWindowPolicy) -> None:
        self.store = store
        self.policy = policy

    def recompute(self, property_id: int, year: int) -> FiscalSummary:
        if year not in self.policy.reconstruction_years():
            raise FiscalSummaryError(property_id, year, "year outside reconstruction window")
        if self.store.get_property(property_id) is None:
            raise FiscalSummaryError(property_id, year, "unknown property")

        summary = FiscalSummary(
            property_id=property_id,
            exercise_year=year,
            status=exercise_status(year, self.policy.current_year()),
        )
        summary.income = sum(
            (e.amount for e in self.store.get_rent_entries(property_id) if e.due_date.year == year),
            ZERO,
        )

        for document in self.store.get_all_documents():
            if not document.belongs_to(property_id):
                continue
            if document.metadata.status != ASSIGNED_STATUS or _document_year(document) != year:
                continue
            amount = document.amount
            classification = document.metadata.aeat_classification
            if amount is None or amount <= 0 or classification is None:
                continue

            if classification.fiscal_type == CAPEX_FISCAL_TYPE:
                summary.capex_total += amount
            elif classification.fiscal_type in BOX_BY_FISCAL_TYPE:
                box = BOX_BY_FISCAL_TYPE[classification.fiscal_type]
                setattr(summary, box, getattr(summary, box) + amount)
            else:
                logger.debug(
                    f"Document {document.filename}: unclassified type {classification.fiscal_type!r}"
                )

        # Financing and repairs are only deductible up to the year's income
        summary.deductible_excess = max(ZERO, summary.financing_and_repairs - summary.income)

        now = datetime.now()
        existing = self.store.get_fiscal_summary(property_id, year)
        summary.created_at = existing.created_at if existing and existing.created_at else now
        summary.updated_at = now
        self.store.save_fiscal_summary(summary)
        return summary


class AeatCarryForwardAdapter(CarryForwardPort):
    """Rebuilds the excess chain: oldest excess is used first, four-year expiry."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    def recompute(self, property_id: int) -> None:
        summaries = self.store.get_fiscal_summaries(property_id)
        if not summaries:
            raise CarryForwardError(property_id, "no fiscal summaries")

        chain: list[CarryForward] = []
        for summary in summaries:
            headroom = max(ZERO, summary.income - summary.financing_and_repairs)
            for entry in chain:
                if headroom <= 0:
                    break
                if entry.remaining_amount <= 0 or summary.exercise_year > entry.expiration_year:
                    continue
                used = min(entry.remaining_amount, headroom)
                entry.applied_amount += used
                entry.remaining_amount -= used
                headroom -= used

            if summary.deductible_excess > 0:
                chain.append(
                    CarryForward(
                        property_id=property_id,
                        origin_year=summary.exercise_year,
                        excess_amount=summary.deductible_excess,
                        remaining_amount=summary.deductible_excess,
                    )
                )

        self.store.save_carry_forwards(property_id, chain)
        logger.debug(f"Property {property_id}: {len(chain)} carryforward entries")
