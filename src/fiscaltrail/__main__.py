"""CLI entry point for fiscaltrail."""

import logging
import signal
import sys
from pathlib import Path

import click

from .adapters.clock import SystemClock
from .adapters.fiscal import (
    AeatCarryForwardAdapter,
    AeatFiscalSummaryAdapter,
    RentScheduleAdapter,
)
from .adapters.storage import YamlFileStore
from .config import Settings, load_settings
from .domain.control import CancellationToken
from .domain.exceptions import StoreError
from .domain.models import ProcessingProgress, ProcessingResult
from .domain.services import (
    BatchReconstructor,
    HistoricalStatsService,
    PropertyReconstructor,
)
from .domain.validation import EntityValidator
from .domain.window import HistoricalWindowPolicy

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_policy(settings: Settings) -> HistoricalWindowPolicy:
    return HistoricalWindowPolicy(
        SystemClock(),
        years_back=settings.window.years_back,
        years_forward=settings.window.years_forward,
    )


def open_store(settings: Settings) -> YamlFileStore:
    """Open the configured data file, exiting with an error if unreadable."""
    logger.debug(f"Data file: {settings.store.path}")
    try:
        return YamlFileStore(settings.store.path)
    except StoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def create_reconstructor(
    store: YamlFileStore, policy: HistoricalWindowPolicy
) -> PropertyReconstructor:
    """Wire the reference adapters into a property reconstructor."""
    return PropertyReconstructor(
        store=store,
        policy=policy,
        fiscal_summaries=AeatFiscalSummaryAdapter(store, policy),
        carry_forwards=AeatCarryForwardAdapter(store),
        rent_schedule=RentScheduleAdapter(store, policy),
    )


def format_processing_time(ms: int) -> str:
    """Render elapsed time as "42s" or "3m 5s"."""
    seconds = round(ms / 1000)
    if seconds < 60:
        return f"{seconds}s"
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes}m {remaining}s"


def format_progress(progress: ProcessingProgress) -> str:
    line = f"[{progress.percentage:3d}%] {progress.phase} ({progress.current}/{progress.total})"
    if progress.details:
        line += f" - {progress.details}"
    return line


def echo_result(result: ProcessingResult) -> None:
    click.echo(f"contracts: {result.contracts_processed}")
    click.echo(f"documents: {result.documents_processed}")
    click.echo(f"fiscal summaries: {result.fiscal_summaries_updated}")
    click.echo(f"carryforwards: {result.carry_forwards_recalculated}")
    click.echo(f"time: {format_processing_time(result.processing_time_ms)}")
    for error in result.errors:
        click.echo(f"✗ {error}", err=True)
    if result.success:
        click.echo("Reconstruction completed")
    else:
        click.echo(f"Reconstruction completed with {len(result.errors)} errors", err=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-c", "--config", type=click.Path(exists=True), help="Config file path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """Fiscaltrail - historical fiscal reconstruction."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None


@cli.command()
@click.option("--property", "property_id", type=int, help="Only this property (default: all active)")
@click.option("--quiet", is_flag=True, help="Do not print progress")
@click.pass_context
def reconstruct(ctx: click.Context, property_id: int | None, quiet: bool) -> None:
    """Rebuild fiscal summaries and carryforwards from historical data."""
    settings = load_settings(ctx.obj["config_path"])
    store = open_store(settings)
    policy = create_policy(settings)
    reconstructor = create_reconstructor(store, policy)

    if property_id is not None and store.get_property(property_id) is None:
        click.echo(f"Error: property {property_id} not found", err=True)
        sys.exit(1)

    def on_progress(progress: ProcessingProgress) -> None:
        if not quiet:
            click.echo(format_progress(progress))

    # Ctrl-C stops at the next checkpoint instead of mid-write
    cancel = CancellationToken()
    previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.cancel())
    try:
        if property_id is not None:
            result = reconstructor.reconstruct(property_id, on_progress, cancel)
        else:
            batch = BatchReconstructor(
                store, reconstructor, active_state=settings.reconstruction.active_state
            )
            result = batch.reconstruct_all(on_progress, cancel)
    finally:
        signal.signal(signal.SIGINT, previous)

    echo_result(result)
    if not result.success:
        sys.exit(1)


@cli.command()
@click.pass_context
def window(ctx: click.Context) -> None:
    """Show the admissible historical window."""
    settings = load_settings(ctx.obj["config_path"])
    policy = create_policy(settings)
    years = policy.reconstruction_years()
    click.echo(f"minimum date: {policy.minimum_date().isoformat()}")
    click.echo(f"maximum date: {policy.maximum_date().isoformat()}")
    click.echo(f"fiscal years: {years[0]}-{years[-1]} ({len(years)})")


@cli.command()
@click.option("--property", "property_id", type=int, help="Only this property")
@click.pass_context
def validate(ctx: click.Context, property_id: int | None) -> None:
    """Check stored contracts and documents for historical eligibility."""
    settings = load_settings(ctx.obj["config_path"])
    store = open_store(settings)
    validator = EntityValidator(create_policy(settings))

    contracts = store.get_all_contracts()
    documents = store.get_all_documents()
    if property_id is not None:
        contracts = [c for c in contracts if c.property_id == property_id]
        documents = [d for d in documents if d.belongs_to(property_id)]

    failures = 0
    for contract in contracts:
        validation = validator.validate_contract(contract)
        if not validation.valid:
            failures += 1
            click.echo(f"✗ contract {contract.id}: {', '.join(validation.errors)}", err=True)
    for document in documents:
        validation = validator.validate_document(document)
        if not validation.valid:
            failures += 1
            click.echo(f"✗ {document.filename}: {', '.join(validation.errors)}", err=True)

    checked = len(contracts) + len(documents)
    click.echo(f"\nValidated: {checked - failures} valid, {failures} invalid")
    if failures:
        sys.exit(1)


@cli.command()
@click.argument("property_id", type=int)
@click.pass_context
def stats(ctx: click.Context, property_id: int) -> None:
    """Show how much history is stored for a property."""
    settings = load_settings(ctx.obj["config_path"])
    store = open_store(settings)
    service = HistoricalStatsService(store, create_policy(settings))

    result = service.stats(property_id)
    click.echo(f"oldest contract: {result.oldest_contract or '-'}")
    click.echo(f"oldest document: {result.oldest_document or '-'}")
    click.echo(f"historical years: {result.total_historical_years}")
    for year, count in sorted(result.contracts_by_year.items()):
        click.echo(f"contracts {year}: {count}")
    for year, count in sorted(result.documents_by_year.items()):
        click.echo(f"documents {year}: {count}")
    available = ", ".join(result.fiscal_summaries_available) or "-"
    click.echo(f"fiscal summaries: {available}")


if __name__ == "__main__":
    cli()
