"""
CLI main module

Entry point of the catalog-cli command.
"""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from beverage_catalog.core import CatalogStore, check_catalog_health, init_db, settings
from beverage_catalog.ingest import ADAPTER_TYPES, load_sources_config, run_ingestion

console = Console()


def setup_logging(level: str = "INFO") -> None:
    """Configure logging"""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Beverage catalog ingestion CLI"""
    ctx.ensure_object(dict)
    log_level = "DEBUG" if debug else settings.log_level
    setup_logging(log_level)


# =============================================================================
# db command group
# =============================================================================


@cli.group()
def db() -> None:
    """Database management"""
    pass


@db.command("init")
def db_init() -> None:
    """Create the database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized")


@db.command("stats")
def db_stats() -> None:
    """Show record counts and health issues"""
    health = check_catalog_health()
    if health.status == "error":
        console.print(f"[red]Error:[/red] {health.error}")
        console.print("[yellow]Hint:[/yellow] run `catalog-cli db init`")
        sys.exit(1)

    table = Table(title=f"Catalog ({health.total} products)")
    table.add_column("Group", style="cyan")
    table.add_column("Name")
    table.add_column("Count", justify="right", style="green")

    for name, count in health.by_category.items():
        table.add_row("category", name, str(count))
    table.add_section()
    for name, count in health.by_source.items():
        table.add_row("source", name, str(count))

    console.print(table)

    status_style = "green" if health.status == "healthy" else "yellow"
    console.print(f"Status: [{status_style}]{health.status}[/{status_style}]")
    for issue in health.issues:
        console.print(f"  [yellow]![/yellow] {issue.message} ({issue.action})")


# =============================================================================
# ingest command
# =============================================================================


@cli.command()
@click.option(
    "--source",
    "sources",
    type=click.Choice(list(ADAPTER_TYPES)),
    multiple=True,
    help="Source to ingest (repeatable, default: all)",
)
@click.option(
    "--sources-file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Source configuration file (sources.yml)",
)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Sources run in parallel")
@click.option("--dry-run", is_flag=True, help="Parse only, skip persistence")
@click.option("--json", "output_json", is_flag=True, help="Print the report as JSON")
def ingest(
    sources: tuple[str, ...],
    sources_file: Path | None,
    workers: int | None,
    dry_run: bool,
    output_json: bool,
) -> None:
    """Fetch all sources and store new records"""
    try:
        sources_config = load_sources_config(sources_file) if sources_file else None
        run_settings = settings
        if workers is not None:
            run_settings = settings.model_copy(update={"ingest_max_workers": workers})

        if dry_run and not output_json:
            console.print("[yellow]Dry run mode[/yellow]")

        report = run_ingestion(
            settings=run_settings,
            sources=list(sources) or None,
            sources_config=sources_config,
            dry_run=dry_run,
        )

        if output_json:
            console.print_json(report.model_dump_json())
            return

        table = Table(title="Ingestion result")
        table.add_column("Source", style="cyan")
        table.add_column("Parsed", justify="right")
        table.add_column("Inserted", justify="right", style="green")
        table.add_column("Failed chunks", justify="right", style="yellow")
        table.add_column("Error", style="red")

        for name, entry in report.sources.items():
            table.add_row(
                name,
                "-" if entry.parsed is None else str(entry.parsed),
                "-" if entry.inserted is None else str(entry.inserted),
                str(entry.failed_chunks),
                entry.error or "",
            )

        table.add_section()
        table.add_row(
            "[bold]Total[/bold]",
            str(report.total_parsed),
            str(report.total_inserted),
            "",
            f"{len(report.errors)} errors" if report.errors else "",
        )

        console.print(table)
        console.print(f"[dim]Elapsed: {report.elapsed_seconds:.1f}s[/dim]")

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


# =============================================================================
# show command
# =============================================================================


@cli.command()
@click.argument("source")
@click.argument("source_id")
@click.option("--json", "output_json", is_flag=True, help="Print as JSON")
def show(source: str, source_id: str, output_json: bool) -> None:
    """Show one stored record"""
    try:
        record = CatalogStore().get_record(source, source_id)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if record is None:
        console.print(f"[yellow]Not found:[/yellow] {source}/{source_id}")
        sys.exit(1)

    if output_json:
        console.print_json(json.dumps(record.model_dump(mode="json"), ensure_ascii=False))
        return

    console.print(f"[bold cyan]{record.name}[/bold cyan]")
    for field_name in (
        "category", "subcategory", "brand", "price", "alcohol_content",
        "size", "country", "region", "description",
    ):
        value = getattr(record, field_name)
        if value is not None:
            console.print(f"  {field_name}: {value}")


# =============================================================================
# Entry point
# =============================================================================


def main() -> None:
    """CLI entry point"""
    cli()


if __name__ == "__main__":
    main()
