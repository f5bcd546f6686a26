"""Ports - interfaces for external dependencies."""

from .clock import ClockPort
from .fiscal import CarryForwardPort, FiscalSummaryPort, RentSchedulePort
from .store import StorePort

__all__ = [
    "CarryForwardPort",
    "ClockPort",
    "FiscalSummaryPort",
    "RentSchedulePort",
    "StorePort",
]
