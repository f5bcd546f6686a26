"""Domain services - orchestrate historical reconstruction."""

import logging
import time
from collections import Counter
from datetime import date

from ..ports.fiscal import CarryForwardPort, FiscalSummaryPort, RentSchedulePort
from ..ports.store import StorePort
from .control import CancellationToken, PropertyRunLocks
from .models import (
    ACTIVE_STATE,
    Contract,
    Document,
    HistoricalStats,
    ProcessingProgress,
    ProcessingResult,
    ProgressCallback,
)
from .validation import EntityValidator
from .window import HistoricalWindowPolicy

logger = logging.getLogger(__name__)

PHASE_LOAD = "Loading historical data"
PHASE_CONTRACTS = "Processing historical contracts"
PHASE_DOCUMENTS = "Processing historical documents"
PHASE_FISCAL = "Recomputing fiscal summaries"
PHASE_CARRY_FORWARD = "Recomputing loss carryforwards"
TOTAL_PHASES = 5


class RunCancelled(Exception):
    """Internal signal: the run stopped at a cancellation checkpoint."""

    def __init__(self, phase: str):
        self.phase = phase
        super().__init__(f"Reconstruction cancelled at: {phase}")


def emit_progress(on_progress: ProgressCallback | None, progress: ProcessingProgress) -> None:
    """Deliver progress to a callback; a failing callback never breaks a run."""
    if on_progress is None:
        return
    try:
        on_progress(progress)
    except Exception:
        logger.exception(f"Progress callback failed during '{progress.phase}'")


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _checkpoint(cancel: CancellationToken | None, phase: str) -> None:
    if cancel is not None and cancel.cancelled:
        raise RunCancelled(phase)


def _contract_order(contract: Contract) -> tuple[bool, date]:
    # Contracts without a start date go last
    return (contract.start_date is None, contract.start_date or date.min)


class PropertyReconstructor:
    """Rebuilds the fiscal history of one property.

    Pipeline (strictly sequential):
        1. Load contracts and documents
        2. Process contracts, oldest start date first
        3. Process documents, oldest issue date first
        4. Recompute fiscal summaries for every year of the window
        5. Recompute the loss carryforward chain

    Entity and year failures are recorded and skipped. The method never
    raises; unexpected failures become a single critical error.
    """

    def __init__(
        self,
        store: StorePort,
        policy: HistoricalWindowPolicy,
        fiscal_summaries: FiscalSummaryPort,
        carry_forwards: CarryForwardPort,
        rent_schedule: RentSchedulePort | None = None,
        locks: PropertyRunLocks | None = None,
    ) -> None:
        self.store = store
        self.policy = policy
        self.validator = EntityValidator(policy)
        self.fiscal_summaries = fiscal_summaries
        self.carry_forwards = carry_forwards
        self.rent_schedule = rent_schedule
        self.locks = locks or PropertyRunLocks()

    def reconstruct(
        self,
        property_id: int,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ProcessingResult:
        start = time.monotonic()
        result = ProcessingResult()
        logger.info(f"Historical reconstruction started for property {property_id}")

        with self.locks.hold(property_id):
            try:
                self._run(property_id, result, on_progress, cancel)
            except RunCancelled as e:
                logger.warning(f"Property {property_id}: {e}")
                result.errors.append(str(e))
            except Exception as e:
                logger.exception(f"Historical reconstruction failed for property {property_id}")
                result.errors.append(f"Critical error in historical reconstruction: {e}")

        result.processing_time_ms = _elapsed_ms(start)
        if result.success:
            logger.info(
                f"Property {property_id} reconstructed: "
                f"{result.contracts_processed} contracts, "
                f"{result.documents_processed} documents, "
                f"{result.fiscal_summaries_updated} fiscal years"
            )
        else:
            logger.warning(
                f"Property {property_id} reconstructed with {len(result.errors)} errors"
            )
        return result

    def _run(
        self,
        property_id: int,
        result: ProcessingResult,
        on_progress: ProgressCallback | None,
        cancel: CancellationToken | None,
    ) -> None:
        # 1. Load
        _checkpoint(cancel, PHASE_LOAD)
        emit_progress(
            on_progress,
            ProcessingProgress(
                PHASE_LOAD, 1, TOTAL_PHASES, 20, "Querying contracts and documents..."
            ),
        )
        contracts = [
            c for c in self.store.get_all_contracts() if c.property_id == property_id
        ]
        documents = [d for d in self.store.get_all_documents() if d.belongs_to(property_id)]

        # 2. Contracts
        _checkpoint(cancel, PHASE_CONTRACTS)
        emit_progress(
            on_progress,
            ProcessingProgress(
                PHASE_CONTRACTS, 2, TOTAL_PHASES, 40, f"{len(contracts)} contracts found"
            ),
        )
        processed: set[int] = set()
        for contract in sorted(contracts, key=_contract_order):
            _checkpoint(cancel, PHASE_CONTRACTS)
            if self._process_contract(contract, result):
                processed.add(contract.id)
        # Contracts not processed this run must not leave income behind
        if self.rent_schedule is not None:
            self.rent_schedule.prune(property_id, processed)

        # 3. Documents
        _checkpoint(cancel, PHASE_DOCUMENTS)
        emit_progress(
            on_progress,
            ProcessingProgress(
                PHASE_DOCUMENTS, 3, TOTAL_PHASES, 60, f"{len(documents)} documents found"
            ),
        )
        dated = [d for d in documents if d.issue_date is not None]
        for document in sorted(dated, key=lambda d: d.issue_date):
            _checkpoint(cancel, PHASE_DOCUMENTS)
            self._process_document(document, result)

        # 4. Fiscal summaries
        _checkpoint(cancel, PHASE_FISCAL)
        years = self.policy.reconstruction_years()
        emit_progress(
            on_progress,
            ProcessingProgress(
                PHASE_FISCAL, 4, TOTAL_PHASES, 80, f"Updating fiscal years {years[0]}-{years[-1]}"
            ),
        )
        for year in years:
            _checkpoint(cancel, PHASE_FISCAL)
            try:
                self.fiscal_summaries.recompute(property_id, year)
                result.fiscal_summaries_updated += 1
            except Exception as e:
                logger.warning(f"Property {property_id}: fiscal year {year} failed: {e}")
                result.errors.append(f"Error recomputing fiscal year {year}: {e}")

        # 5. Carryforwards, only once every year was attempted
        _checkpoint(cancel, PHASE_CARRY_FORWARD)
        emit_progress(
            on_progress,
            ProcessingProgress(
                PHASE_CARRY_FORWARD,
                5,
                TOTAL_PHASES,
                100,
                "Applying AEAT limits and expirations...",
            ),
        )
        try:
            self.carry_forwards.recompute(property_id)
            result.carry_forwards_recalculated = 1
        except Exception as e:
            logger.warning(f"Property {property_id}: carryforwards failed: {e}")
            result.errors.append(f"Error recomputing carryforwards: {e}")

    def _process_contract(self, contract: Contract, result: ProcessingResult) -> bool:
        # Leases running across the window edge are valid; rent is clipped later
        validation = self.validator.validate_contract(contract, check_window=False)
        if not validation.valid:
            logger.warning(f"Skipping contract {contract.id}: {validation.errors}")
            result.errors.append(f"Contract {contract.id}: {', '.join(validation.errors)}")
            return False

        try:
            if self.rent_schedule is not None:
                self.rent_schedule.regenerate(contract)
            result.contracts_processed += 1
            return True
        except Exception as e:
            logger.warning(f"Contract {contract.id} failed: {e}")
            result.errors.append(f"Error processing contract {contract.id}: {e}")
            return False

    def _process_document(self, document: Document, result: ProcessingResult) -> None:
        try:
            validation = self.validator.validate_document(document)
            if not validation.valid:
                logger.warning(f"Skipping document {document.filename}: {validation.errors}")
                result.errors.append(
                    f"Document {document.filename}: {', '.join(validation.errors)}"
                )
                return
            result.documents_processed += 1
        except Exception as e:
            logger.warning(f"Document {document.filename} failed: {e}")
            result.errors.append(f"Error processing document {document.filename}: {e}")


class BatchReconstructor:
    """Runs the property reconstruction over every active property.

    Properties are processed one at a time, ordered by id. Only the
    batch-level ticks reach ``on_progress`` so its percentage never goes
    backwards; per-property phase progress is logged at debug level.
    """

    def __init__(
        self,
        store: StorePort,
        reconstructor: PropertyReconstructor,
        active_state: str = ACTIVE_STATE,
    ) -> None:
        self.store = store
        self.reconstructor = reconstructor
        self.active_state = active_state

    def reconstruct_all(
        self,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ProcessingResult:
        start = time.monotonic()
        aggregated = ProcessingResult()

        try:
            properties = sorted(
                (p for p in self.store.get_all_properties() if p.state == self.active_state),
                key=lambda p: p.id,
            )
        except Exception as e:
            logger.exception("Failed to load properties")
            aggregated.errors.append(f"Critical error in batch reconstruction: {e}")
            aggregated.processing_time_ms = _elapsed_ms(start)
            return aggregated

        total = len(properties)
        logger.info(f"Batch reconstruction of {total} active properties")

        for index, prop in enumerate(properties):
            if cancel is not None and cancel.cancelled:
                aggregated.errors.append(
                    f"Batch reconstruction cancelled after {index} of {total} properties"
                )
                break

            emit_progress(
                on_progress,
                ProcessingProgress(
                    phase=f"Processing {prop.alias}",
                    current=index + 1,
                    total=total,
                    percentage=round(100 * (index + 1) / total),
                    details=f"Property {index + 1} of {total}",
                ),
            )
            property_result = self.reconstructor.reconstruct(
                prop.id, on_progress=_log_progress, cancel=cancel
            )
            aggregated.merge(property_result, property_id=prop.id)

        aggregated.processing_time_ms = _elapsed_ms(start)
        return aggregated


def _log_progress(progress: ProcessingProgress) -> None:
    logger.debug(
        f"{progress.phase} ({progress.current}/{progress.total}, "
        f"{progress.percentage}%): {progress.details}"
    )


class HistoricalStatsService:
    """Summarizes how much history is stored for a property."""

    def __init__(self, store: StorePort, policy: HistoricalWindowPolicy) -> None:
        self.store = store
        self.policy = policy

    def stats(self, property_id: int) -> HistoricalStats:
        contracts = [
            c for c in self.store.get_all_contracts() if c.property_id == property_id
        ]
        documents = [d for d in self.store.get_all_documents() if d.belongs_to(property_id)]
        summaries = self.store.get_fiscal_summaries(property_id)

        contract_dates = sorted(c.start_date for c in contracts if c.start_date)
        document_dates = sorted(d.issue_date for d in documents if d.issue_date)

        oldest_contract = contract_dates[0] if contract_dates else None
        oldest_document = document_dates[0] if document_dates else None

        current_year = self.policy.current_year()
        oldest_year = min(
            oldest_contract.year if oldest_contract else current_year,
            oldest_document.year if oldest_document else current_year,
        )

        return HistoricalStats(
            oldest_contract=oldest_contract,
            oldest_document=oldest_document,
            total_historical_years=current_year - oldest_year + 1,
            contracts_by_year=dict(Counter(str(d.year) for d in contract_dates)),
            documents_by_year=dict(Counter(str(d.year) for d in document_dates)),
            fiscal_summaries_available=sorted(str(s.exercise_year) for s in summaries),
        )
