"""Store adapter backed by a single YAML data file."""

import logging
from pathlib import Path

import yaml

from ...domain.exceptions import StoreError
from .memory import MemoryStore
from .records import (
    carry_forward_from_record,
    carry_forward_to_record,
    contract_from_record,
    contract_to_record,
    document_from_record,
    document_to_record,
    property_from_record,
    property_to_record,
    rent_entry_from_record,
    rent_entry_to_record,
    summary_from_record,
    summary_to_record,
)

logger = logging.getLogger(__name__)


class YamlFileStore(MemoryStore):
    """Memory store that loads from and writes through to a YAML file.

    Every save rewrites the file, so recomputed summaries survive an
    interrupted run.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path
        if path.exists():
            self._load()
        else:
            logger.info(f"Data file not found, starting empty: {path}")

    def _load(self) -> None:
        try:
            data = yaml.safe_load(self.path.read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Expected a mapping at the top of {self.path}")

        try:
            self.properties = [property_from_record(r) for r in data.get("properties") or []]
            self.contracts = [contract_from_record(r) for r in data.get("contracts") or []]
            self.documents = [document_from_record(r) for r in data.get("documents") or []]

            for record in data.get("rent_schedules") or []:
                entry = rent_entry_from_record(record)
                self.rent_schedules.setdefault(entry.contract_id, []).append(entry)

            for record in data.get("fiscal_summaries") or []:
                summary = summary_from_record(record)
                self.fiscal_summaries[(summary.property_id, summary.exercise_year)] = summary

            for record in data.get("carry_forwards") or []:
                entry = carry_forward_from_record(record)
                self.carry_forwards.setdefault(entry.property_id, []).append(entry)
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise StoreError(f"Malformed record in {self.path}: {e}") from e

        logger.debug(
            f"Loaded {len(self.properties)} properties, {len(self.contracts)} contracts, "
            f"{len(self.documents)} documents from {self.path}"
        )

    def to_data(self) -> dict:
        return {
            "properties": [property_to_record(p) for p in self.properties],
            "contracts": [contract_to_record(c) for c in self.contracts],
            "documents": [document_to_record(d) for d in self.documents],
            "rent_schedules": [
                rent_entry_to_record(e)
                for contract_id in sorted(self.rent_schedules)
                for e in self.rent_schedules[contract_id]
            ],
            "fiscal_summaries": [
                summary_to_record(self.fiscal_summaries[key])
                for key in sorted(self.fiscal_summaries)
            ],
            "carry_forwards": [
                carry_forward_to_record(e)
                for property_id in sorted(self.carry_forwards)
                for e in self.carry_forwards[property_id]
            ],
        }

    def _changed(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(yaml.safe_dump(self.to_data(), sort_keys=False, allow_unicode=True))
        tmp.replace(self.path)
