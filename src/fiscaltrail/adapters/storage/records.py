"""Conversion between YAML records and domain models.

Malformed values load as None with a warning so that validation reports
them instead of the load failing.
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ...domain.models import (
    ACTIVE_STATE,
    AeatClassification,
    CarryForward,
    Contract,
    Document,
    DocumentMetadata,
    FinancialData,
    FiscalSummary,
    Property,
    RentEntry,
)

logger = logging.getLogger(__name__)

SUMMARY_AMOUNT_FIELDS = (
    "income",
    "box_0105",
    "box_0106",
    "box_0109",
    "box_0112",
    "box_0113",
    "box_0114",
    "box_0115",
    "box_0117",
    "capex_total",
    "deductible_excess",
)


def parse_date(value: Any, context: str = "") -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        logger.warning(f"Invalid date {value!r} {context}".rstrip())
        return None


def parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        logger.warning(f"Invalid timestamp {value!r}")
        return None


def parse_decimal(value: Any, context: str = "") -> Decimal | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning(f"Invalid amount {value!r} {context}".rstrip())
        return None


def parse_int(value: Any, context: str = "") -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid integer {value!r} {context}".rstrip())
        return None


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _money(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def property_from_record(data: dict) -> Property:
    return Property(
        id=int(data["id"]),
        alias=str(data.get("alias") or f"Property {data['id']}"),
        state=str(data.get("state") or ACTIVE_STATE),
    )


def property_to_record(prop: Property) -> dict:
    return {"id": prop.id, "alias": prop.alias, "state": prop.state}


def contract_from_record(data: dict) -> Contract:
    context = f"in contract {data.get('id')}"
    return Contract(
        id=int(data["id"]),
        property_id=parse_int(data.get("property_id"), context),
        start_date=parse_date(data.get("start_date"), context),
        end_date=parse_date(data.get("end_date"), context),
        monthly_rent=parse_decimal(data.get("monthly_rent"), context),
        payment_day=parse_int(data.get("payment_day"), context),
    )


def contract_to_record(contract: Contract) -> dict:
    return {
        "id": contract.id,
        "property_id": contract.property_id,
        "start_date": _iso(contract.start_date),
        "end_date": _iso(contract.end_date),
        "monthly_rent": _money(contract.monthly_rent),
        "payment_day": contract.payment_day,
    }


def document_from_record(data: dict) -> Document:
    context = f"in document {data.get('filename')}"
    meta = data.get("metadata") or {}

    financial = None
    if meta.get("financial_data") is not None:
        raw = meta["financial_data"]
        financial = FinancialData(
            amount=parse_decimal(raw.get("amount"), context),
            issue_date=parse_date(raw.get("issue_date"), context),
        )

    classification = None
    if meta.get("aeat_classification") is not None:
        raw = meta["aeat_classification"]
        classification = AeatClassification(
            exercise_year=parse_int(raw.get("exercise_year"), context),
            fiscal_type=raw.get("fiscal_type"),
        )

    return Document(
        id=int(data["id"]),
        filename=str(data.get("filename") or f"document-{data['id']}"),
        metadata=DocumentMetadata(
            entity_type=meta.get("entity_type"),
            entity_id=parse_int(meta.get("entity_id"), context),
            status=meta.get("status"),
            financial_data=financial,
            aeat_classification=classification,
        ),
    )


def document_to_record(document: Document) -> dict:
    meta = document.metadata
    record: dict[str, Any] = {
        "entity_type": meta.entity_type,
        "entity_id": meta.entity_id,
        "status": meta.status,
    }
    if meta.financial_data is not None:
        record["financial_data"] = {
            "amount": _money(meta.financial_data.amount),
            "issue_date": _iso(meta.financial_data.issue_date),
        }
    if meta.aeat_classification is not None:
        record["aeat_classification"] = {
            "exercise_year": meta.aeat_classification.exercise_year,
            "fiscal_type": meta.aeat_classification.fiscal_type,
        }
    return {"id": document.id, "filename": document.filename, "metadata": record}


def rent_entry_from_record(data: dict) -> RentEntry:
    return RentEntry(
        contract_id=int(data["contract_id"]),
        property_id=int(data["property_id"]),
        due_date=date.fromisoformat(str(data["due_date"])),
        amount=Decimal(str(data["amount"])),
    )


def rent_entry_to_record(entry: RentEntry) -> dict:
    return {
        "contract_id": entry.contract_id,
        "property_id": entry.property_id,
        "due_date": entry.due_date.isoformat(),
        "amount": str(entry.amount),
    }


def summary_from_record(data: dict) -> FiscalSummary:
    amounts = {
        name: parse_decimal(data.get(name)) or Decimal("0")
        for name in SUMMARY_AMOUNT_FIELDS
    }
    return FiscalSummary(
        property_id=int(data["property_id"]),
        exercise_year=int(data["exercise_year"]),
        status=str(data.get("status") or "Vivo"),
        created_at=parse_datetime(data.get("created_at")),
        updated_at=parse_datetime(data.get("updated_at")),
        **amounts,
    )


def summary_to_record(summary: FiscalSummary) -> dict:
    record: dict[str, Any] = {
        "property_id": summary.property_id,
        "exercise_year": summary.exercise_year,
        "status": summary.status,
    }
    for name in SUMMARY_AMOUNT_FIELDS:
        record[name] = str(getattr(summary, name))
    record["created_at"] = _iso(summary.created_at)
    record["updated_at"] = _iso(summary.updated_at)
    return record


def carry_forward_from_record(data: dict) -> CarryForward:
    return CarryForward(
        property_id=int(data["property_id"]),
        origin_year=int(data["origin_year"]),
        excess_amount=Decimal(str(data["excess_amount"])),
        applied_amount=Decimal(str(data.get("applied_amount") or 0)),
        remaining_amount=Decimal(str(data.get("remaining_amount") or 0)),
    )


def carry_forward_to_record(entry: CarryForward) -> dict:
    return {
        "property_id": entry.property_id,
        "origin_year": entry.origin_year,
        "excess_amount": str(entry.excess_amount),
        "applied_amount": str(entry.applied_amount),
        "remaining_amount": str(entry.remaining_amount),
        "expiration_year": entry.expiration_year,
    }
