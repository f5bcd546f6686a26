"""Fiscal collaborator adapters."""

from .aeat import AeatCarryForwardAdapter, AeatFiscalSummaryAdapter
from .rent import RentScheduleAdapter

__all__ = ["AeatCarryForwardAdapter", "AeatFiscalSummaryAdapter", "RentScheduleAdapter"]
