"""Rent schedule adapter: derives monthly installments from contracts."""

import calendar
import logging
from datetime import date

from ...domain.exceptions import RentScheduleError
from ...domain.models import Contract, RentEntry
from ...domain.window import HistoricalWindowPolicy
from ...ports.fiscal import RentSchedulePort
from ..storage.memory import MemoryStore

logger = logging.getLogger(__name__)


def monthly_due_dates(first: date, last: date, payment_day: int) -> list[date]:
    """Payment dates between first and last (inclusive).

    The payment day is clamped to the length of each month.
    """
    dates = []
    year, month = first.year, first.month
    while (year, month) <= (last.year, last.month):
        day = min(payment_day, calendar.monthrange(year, month)[1])
        due = date(year, month, day)
        if first <= due <= last:
            dates.append(due)
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return dates


class RentScheduleAdapter(RentSchedulePort):
    """Rent schedule limited to the historical window."""

    def __init__(self, store: MemoryStore, policy: HistoricalWindowPolicy) -> None:
        self.store = store
        self.policy = policy

    def regenerate(self, contract: Contract) -> list[RentEntry]:
        if contract.property_id is None:
            raise RentScheduleError(contract.id, "no property")
        if contract.start_date is None:
            raise RentScheduleError(contract.id, "no start date")
        if contract.monthly_rent is None or contract.payment_day is None:
            raise RentScheduleError(contract.id, "no rent terms")

        first = max(contract.start_date, self.policy.minimum_date())
        last = self.policy.maximum_date()
        if contract.end_date is not None:
            last = min(last, contract.end_date)

        entries = [
            RentEntry(
                contract_id=contract.id,
                property_id=contract.property_id,
                due_date=due,
                amount=contract.monthly_rent,
            )
            for due in monthly_due_dates(first, last, contract.payment_day)
        ]
        self.store.save_rent_schedule(contract.id, entries)
        logger.debug(f"Contract {contract.id}: {len(entries)} rent entries")
        return entries

    def prune(self, property_id: int, keep_contract_ids: set[int]) -> None:
        removed = self.store.prune_rent_schedules(property_id, keep_contract_ids)
        if removed:
            logger.info(
                f"Property {property_id}: dropped rent schedules of contracts {removed}"
            )
