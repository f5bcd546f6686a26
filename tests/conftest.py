"""Shared test fixtures."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from fiscaltrail.adapters.clock import FixedClock
from fiscaltrail.adapters.storage import MemoryStore
from fiscaltrail.domain.models import (
    AeatClassification,
    Contract,
    Document,
    DocumentMetadata,
    FinancialData,
    FiscalSummary,
    Property,
)
from fiscaltrail.domain.window import HistoricalWindowPolicy
from fiscaltrail.ports.fiscal import CarryForwardPort, FiscalSummaryPort, RentSchedulePort
from fiscaltrail.ports.store import StorePort

TODAY = date(2025, 6, 15)


def make_contract(
    id: int = 1,
    property_id: int | None = 1,
    start_date: date | None = date(2023, 1, 1),
    end_date: date | None = None,
    monthly_rent: Decimal | None = Decimal("1000"),
    payment_day: int | None = 5,
) -> Contract:
    return Contract(
        id=id,
        property_id=property_id,
        start_date=start_date,
        end_date=end_date,
        monthly_rent=monthly_rent,
        payment_day=payment_day,
    )


def make_document(
    id: int = 1,
    filename: str = "invoice.pdf",
    property_id: int | None = 1,
    issue_date: date | None = date(2024, 3, 15),
    amount: Decimal | None = Decimal("120.50"),
    exercise_year: int | None = None,
    fiscal_type: str | None = None,
    status: str | None = "Asignado",
) -> Document:
    classification = None
    if exercise_year is not None or fiscal_type is not None:
        classification = AeatClassification(exercise_year=exercise_year, fiscal_type=fiscal_type)
    return Document(
        id=id,
        filename=filename,
        metadata=DocumentMetadata(
            entity_type="property" if property_id is not None else None,
            entity_id=property_id,
            status=status,
            financial_data=FinancialData(amount=amount, issue_date=issue_date),
            aeat_classification=classification,
        ),
    )


@pytest.fixture
def contract_factory() -> Callable[..., Contract]:
    return make_contract


@pytest.fixture
def document_factory() -> Callable[..., Document]:
    return make_document


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen mid-2025."""
    return FixedClock(TODAY)


@pytest.fixture
def policy(clock: FixedClock) -> HistoricalWindowPolicy:
    return HistoricalWindowPolicy(clock)


@pytest.fixture
def mock_store() -> MagicMock:
    """Mock store port with empty collections."""
    mock = MagicMock(spec=StorePort)
    mock.get_all_properties.return_value = []
    mock.get_all_contracts.return_value = []
    mock.get_all_documents.return_value = []
    mock.get_fiscal_summaries.return_value = []
    mock.get_carry_forwards.return_value = []
    return mock


@pytest.fixture
def mock_fiscal() -> MagicMock:
    """Mock fiscal summary port."""
    mock = MagicMock(spec=FiscalSummaryPort)
    mock.recompute.side_effect = lambda pid, year: FiscalSummary(
        property_id=pid, exercise_year=year
    )
    return mock


@pytest.fixture
def mock_carry_forward() -> MagicMock:
    """Mock carryforward port."""
    return MagicMock(spec=CarryForwardPort)


@pytest.fixture
def mock_rent() -> MagicMock:
    """Mock rent schedule port."""
    mock = MagicMock(spec=RentSchedulePort)
    mock.regenerate.return_value = []
    return mock


@pytest.fixture
def memory_store() -> MemoryStore:
    """Store with one active property and nothing else."""
    return MemoryStore(properties=[Property(id=1, alias="Calle Mayor 1")])
