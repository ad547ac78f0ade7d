"""
Main CLI application for blockscan.

Provides the command-line interface for:
- Starting scans from URL lists
- Triggering the scan worker
- Reading scan results
- Managing configuration
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from blockscan import __version__
from blockscan.config import Settings, get_default_config_path, load_config
from blockscan.core.exceptions import BlockScanError, InputError
from blockscan.utils.logging import get_logger, setup_logging
from blockscan.utils.metrics import Metrics

# Initialize Typer app
app = typer.Typer(
    name="blockscan",
    help="blockscan - Check whether websites block AI crawlers",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
logger = get_logger(__name__)

METHOD_STYLES = {
    "robots.txt": "red",
    "HTTP Status": "red",
    "Content Detection": "red",
    "none": "green",
    "error": "yellow",
    "timeout": "yellow",
}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]blockscan[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """
    blockscan - Detect robots.txt, HTTP and content blocks against AI crawlers.

    Use 'blockscan --help' for command list.
    """
    ctx.obj = {"config_file": config_file, "verbose": verbose}


def _load_settings(ctx: typer.Context) -> Settings:
    """Load settings for a command and configure logging from them."""
    options = ctx.obj or {}
    config_file = options.get("config_file") or get_default_config_path()

    settings = load_config(config_file)
    if options.get("verbose"):
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)
    return settings


def _open_database(settings: Settings):
    from blockscan.storage import Database

    return Database.create(settings)


@app.command()
def enqueue(
    ctx: typer.Context,
    urls: Optional[list[str]] = typer.Argument(
        None,
        help="URLs to scan",
    ),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="CSV or text file with one or more URLs per line",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Start a scan of one or more URLs.

    Examples:
        blockscan enqueue https://example.com https://example.org
        blockscan enqueue --file sites.csv
    """
    from blockscan.inputs import clean_url_list, read_url_file
    from blockscan.pipeline import JobEnqueuer
    from blockscan.storage import JobQueue

    try:
        settings = _load_settings(ctx)

        candidates = list(urls or [])
        if file is not None:
            candidates.extend(read_url_file(file, require_urls=False))
        targets = clean_url_list(candidates)

        db = _open_database(settings)
        try:
            scan = JobEnqueuer(JobQueue(db)).enqueue(targets)
        finally:
            db.close()

    except InputError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(2)
    except BlockScanError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(Panel(
        f"[green]✓ Scan started[/green]\n\n"
        f"Scan ID: [bold]{scan.scan_id}[/bold]\n"
        f"URLs queued: [bold]{scan.total}[/bold]",
        title="Enqueued",
        border_style="green",
    ))


@app.command()
def work(
    ctx: typer.Context,
    jobs: int = typer.Option(
        1,
        "--jobs",
        "-j",
        help="Maximum number of jobs to process",
        min=1,
        max=10000,
    ),
    identity: Optional[str] = typer.Option(
        None,
        "--identity",
        "-i",
        help="Probe with a single crawler identity (e.g. GPTBot)",
    ),
) -> None:
    """
    Process queued jobs, one at a time.

    Stops early when the queue is empty.

    Example:
        blockscan work --jobs 20
    """
    from blockscan.detection import AI_CRAWLERS, get_identity

    if identity is not None:
        try:
            identities = (get_identity(identity),)
        except KeyError:
            names = ", ".join(i.name for i in AI_CRAWLERS)
            raise typer.BadParameter(
                f"Unknown identity '{identity}'. Choose from: {names}",
                param_hint="--identity",
            )
    else:
        identities = AI_CRAWLERS

    try:
        settings = _load_settings(ctx)
        malformed = asyncio.run(_work_async(settings, jobs, identities))
    except KeyboardInterrupt:
        console.print("\n[yellow]Worker cancelled by user[/yellow]")
        raise typer.Exit(1)
    except BlockScanError as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Worker failed")
        raise typer.Exit(1)

    if malformed:
        raise typer.Exit(1)


async def _work_async(settings: Settings, max_jobs: int, identities: tuple) -> int:
    """Run the worker up to max_jobs times. Returns the malformed-entry count."""
    from blockscan.detection import BrowserDetector, RobotsPolicyAnalyzer
    from blockscan.pipeline import OutcomeStatus, ScanWorker
    from blockscan.storage import JobQueue, ScanResultRepository

    db = _open_database(settings)
    try:
        worker = ScanWorker(
            queue=JobQueue(db),
            results=ScanResultRepository(db),
            robots_analyzer=RobotsPolicyAnalyzer(settings.robots, identities),
            detector=BrowserDetector(settings.browser, identities),
            settings=settings.worker,
        )

        processed = 0
        malformed = 0

        for _ in range(max_jobs):
            with console.status("[cyan]Scanning..."):
                outcome = await worker.process_one_job()

            if outcome.status is OutcomeStatus.NO_JOBS:
                console.print(f"[dim]{outcome.message}[/dim]")
                break

            if outcome.status is OutcomeStatus.MALFORMED_PAYLOAD:
                malformed += 1
                console.print(f"[red]✗[/red] {outcome.message}")
                continue

            processed += 1
            result = outcome.result
            style = METHOD_STYLES.get(result.blocking_method.value, "white")
            console.print(
                f"[{style}]●[/{style}] {result.url} "
                f"[{style}]{result.blocking_method.value}[/{style}] "
                f"[dim]{result.details}[/dim]"
            )

        pending = worker.queue.pending_count()
    finally:
        db.close()

    console.print(
        f"\nProcessed [bold]{processed}[/bold] job(s), "
        f"[bold]{pending}[/bold] still queued"
    )

    if settings.logging.level == "DEBUG":
        console.print(f"\n[dim]{Metrics.get().summary()}[/dim]")

    return malformed


@app.command()
def results(
    ctx: typer.Context,
    scan_id: str = typer.Argument(
        ...,
        help="Scan ID printed by 'blockscan enqueue'",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print results as JSON",
    ),
) -> None:
    """
    Show the results of a scan and whether it is complete.

    Example:
        blockscan results V1StGXR8_Z5jdHi6
    """
    from blockscan.pipeline import CompletionAggregator
    from blockscan.storage import JobQueue, ScanResultRepository

    try:
        settings = _load_settings(ctx)
        db = _open_database(settings)
        try:
            queue = JobQueue(db)
            store = ScanResultRepository(db)
            progress = CompletionAggregator(queue, store).get_progress(scan_id)
            pending = queue.pending_for_scan(scan_id)
            by_method = store.count_by_method(scan_id)
        finally:
            db.close()
    except BlockScanError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(progress.to_dict(), indent=2))
        return

    if not progress.results:
        console.print(f"[yellow]No results yet for scan {scan_id}[/yellow]")
        if pending:
            console.print(f"[dim]{pending} job(s) still queued[/dim]")
        return

    table = Table(
        title=f"Scan {scan_id} ({len(progress.results)} results)",
        show_header=True,
    )
    table.add_column("URL", style="cyan")
    table.add_column("Blocked", justify="center")
    table.add_column("Method")
    table.add_column("Details", style="dim")

    for result in progress.results:
        style = METHOD_STYLES.get(result.blocking_method.value, "white")
        table.add_row(
            result.url,
            "[red]yes[/red]" if result.is_blocked else "[green]no[/green]",
            f"[{style}]{result.blocking_method.value}[/{style}]",
            result.details,
        )

    console.print(table)
    breakdown = ", ".join(
        f"{method.value} {count}"
        for method, count in sorted(by_method.items(), key=lambda item: -item[1])
    )
    console.print(f"[dim]By method:[/dim] {breakdown}")

    if progress.is_complete:
        console.print(
            f"[green]✓ Scan complete[/green]: "
            f"{progress.blocked_count} of {len(progress.results)} URLs block AI crawlers"
        )
    else:
        console.print(f"[yellow]Scan in progress[/yellow] ({pending} job(s) queued)")


@app.command()
def status(ctx: typer.Context) -> None:
    """
    Show queue status.

    Displays the database location and the number of queued jobs.
    """
    from blockscan.storage import JobQueue

    try:
        settings = _load_settings(ctx)
        db = _open_database(settings)
        try:
            pending = JobQueue(db).pending_count()
            schema_version = db.get_schema_version()
        finally:
            db.close()
    except BlockScanError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Database", str(settings.storage.database_path))
    table.add_row("Schema version", str(schema_version))
    table.add_row("Queued jobs", str(pending))
    table.add_row("Time budget", f"{settings.worker.time_budget_seconds:g}s")

    console.print(table)


@app.command()
def config(
    ctx: typer.Context,
    show: bool = typer.Option(
        False,
        "--show",
        "-s",
        help="Show current configuration",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Create default configuration file",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path for config file",
    ),
) -> None:
    """
    Configuration management.

    View or initialize configuration files.

    Examples:
        blockscan config --show
        blockscan config --init --output ./my-config.yaml
    """
    if init:
        _init_config(output)
    elif show:
        _show_config(ctx)
    else:
        console.print(
            "Use --show to view config or --init to create default config")


def _show_config(ctx: typer.Context) -> None:
    """Show current configuration."""
    try:
        settings = _load_settings(ctx)
    except BlockScanError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    config_dict = settings.model_dump(mode="json")

    console.print(Panel(
        "[bold]Current Configuration[/bold]",
        border_style="blue",
    ))

    for section, values in config_dict.items():
        console.print(f"\n[bold cyan]{section}:[/bold cyan]")
        if isinstance(values, dict):
            for key, value in values.items():
                console.print(f"  {key}: [dim]{value}[/dim]")
        else:
            console.print(f"  {values}")


def _init_config(output: Optional[Path]) -> None:
    """Create default configuration file."""
    import yaml

    config_dict = Settings().model_dump(mode="json")

    output_path = output or Path("config.yaml")

    if output_path.exists():
        if not typer.confirm(f"File {output_path} exists. Overwrite?"):
            raise typer.Exit(0)

    with open(output_path, "w") as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved to: {output_path}")


if __name__ == "__main__":
    app()
