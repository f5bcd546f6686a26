"""Domain models."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

ACTIVE_STATE = "activo"
PROPERTY_ENTITY = "property"
ASSIGNED_STATUS = "Asignado"


@dataclass
class Property:
    """Rental property."""

    id: int
    alias: str
    state: str = ACTIVE_STATE


@dataclass
class Contract:
    """Lease contract owned by a property. Read-only to reconstruction."""

    id: int
    property_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    monthly_rent: Decimal | None = None
    payment_day: int | None = None


@dataclass
class FinancialData:
    amount: Decimal | None = None
    issue_date: date | None = None


@dataclass
class AeatClassification:
    exercise_year: int | None = None
    fiscal_type: str | None = None


@dataclass
class DocumentMetadata:
    entity_type: str | None = None
    entity_id: int | None = None
    status: str | None = None
    financial_data: FinancialData | None = None
    aeat_classification: AeatClassification | None = None


@dataclass
class Document:
    """Financial document (invoice, receipt) attributed to an entity."""

    id: int
    filename: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    @property
    def issue_date(self) -> date | None:
        financial = self.metadata.financial_data
        return financial.issue_date if financial else None

    @property
    def amount(self) -> Decimal | None:
        financial = self.metadata.financial_data
        return financial.amount if financial else None

    @property
    def exercise_year(self) -> int | None:
        classification = self.metadata.aeat_classification
        return classification.exercise_year if classification else None

    def belongs_to(self, property_id: int) -> bool:
        return (
            self.metadata.entity_type == PROPERTY_ENTITY
            and self.metadata.entity_id == property_id
        )


@dataclass
class RentEntry:
    """One rent installment derived from a contract."""

    contract_id: int
    property_id: int
    due_date: date
    amount: Decimal


@dataclass
class FiscalSummary:
    """Per-property, per-year aggregation used for the tax return.

    Boxes follow the AEAT rental income form numbering.
    """

    property_id: int
    exercise_year: int
    income: Decimal = Decimal("0")
    box_0105: Decimal = Decimal("0")  # Interest and financing
    box_0106: Decimal = Decimal("0")  # Repairs and conservation
    box_0109: Decimal = Decimal("0")  # Community fees
    box_0112: Decimal = Decimal("0")  # Personal services
    box_0113: Decimal = Decimal("0")  # Utilities
    box_0114: Decimal = Decimal("0")  # Insurance
    box_0115: Decimal = Decimal("0")  # Local taxes
    box_0117: Decimal = Decimal("0")  # Furniture amortization
    capex_total: Decimal = Decimal("0")
    deductible_excess: Decimal = Decimal("0")
    status: str = "Vivo"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def financing_and_repairs(self) -> Decimal:
        return self.box_0105 + self.box_0106

    @property
    def expenses(self) -> Decimal:
        return (
            self.box_0105
            + self.box_0106
            + self.box_0109
            + self.box_0112
            + self.box_0113
            + self.box_0114
            + self.box_0115
            + self.box_0117
        )

    @property
    def result(self) -> Decimal:
        return self.income - self.expenses


@dataclass
class CarryForward:
    """Excess financing and repair costs rolled forward from one year."""

    property_id: int
    origin_year: int
    excess_amount: Decimal
    applied_amount: Decimal = Decimal("0")
    remaining_amount: Decimal = Decimal("0")

    @property
    def expiration_year(self) -> int:
        return self.origin_year + 4


@dataclass
class ValidationResult:
    """Outcome of validating one contract or document."""

    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0


@dataclass
class ProcessingProgress:
    """Progress snapshot emitted at a phase boundary."""

    phase: str
    current: int
    total: int
    percentage: int
    details: str = ""


ProgressCallback = Callable[[ProcessingProgress], None]


@dataclass
class ProcessingResult:
    """Result of a reconstruction run for one property or a whole batch."""

    contracts_processed: int = 0
    documents_processed: int = 0
    fiscal_summaries_updated: int = 0
    carry_forwards_recalculated: int = 0
    errors: list[str] = field(default_factory=list)
    processing_time_ms: int = 0
    errors_by_property: dict[int, list[str]] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    def merge(self, other: "ProcessingResult", property_id: int | None = None) -> None:
        """Add another result's counters and errors to this one."""
        self.contracts_processed += other.contracts_processed
        self.documents_processed += other.documents_processed
        self.fiscal_summaries_updated += other.fiscal_summaries_updated
        self.carry_forwards_recalculated += other.carry_forwards_recalculated
        self.errors.extend(other.errors)
        if property_id is not None and other.errors:
            self.errors_by_property.setdefault(property_id, []).extend(other.errors)


@dataclass
class HistoricalStats:
    """How far back a property's historical data reaches."""

    oldest_contract: date | None
    oldest_document: date | None
    total_historical_years: int
    contracts_by_year: dict[str, int] = field(default_factory=dict)
    documents_by_year: dict[str, int] = field(default_factory=dict)
    fiscal_summaries_available: list[str] = field(default_factory=list)
