from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from wanwatch.__about__ import __version__
from wanwatch.config import get_settings

if TYPE_CHECKING:
    from wanwatch.db.session import Database
    from wanwatch.monitoring.intervals import IntervalSource
    from wanwatch.monitoring.models import MonitoringIntervals
    from wanwatch.monitoring.speedtest import SpeedTestResult

app = typer.Typer(help="WanWatch WAN connectivity monitor")
intervals_app = typer.Typer(help="Show or change the monitoring intervals")
app.add_typer(intervals_app, name="intervals")
console = Console()


def configure_logging(level: str) -> None:
    """Route log records through rich at ``level``."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print the package version and exit if requested."""
    if value:
        console.print(f"wanwatch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(  # noqa: UP007 - Optional for clarity in help
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    configure_logging(get_settings().log_level)


def run_migrations() -> None:
    import os
    import subprocess
    import sys

    settings = get_settings()

    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        env={**os.environ, "DATABASE_URL": settings.database_url},
    )
    if result.returncode != 0:
        typer.echo("Migration failed", err=True)
        raise typer.Exit(1)


@app.command()
def migrate() -> None:
    """Run Alembic migrations."""
    run_migrations()
    typer.echo("Migrations completed successfully")


@app.command()
def monitor() -> None:
    """Run migrations, then monitor connectivity until interrupted."""
    from .service import run_monitor

    run_migrations()
    settings = get_settings()
    try:
        asyncio.run(run_monitor(settings))
    except KeyboardInterrupt:
        typer.echo("Monitoring stopped")


@app.command()
def check_once() -> None:
    """Run a single connectivity check and update outage state."""
    from .service import check_once as run_check_once

    result = asyncio.run(run_check_once(get_settings()))
    status = "[green]CONNECTED[/green]" if result.is_connected else "[red]DISCONNECTED[/red]"
    latency = f"{result.latency_ms:.1f} ms" if result.latency_ms is not None else "-"
    console.print(f"{status} via {result.target} ({latency})")


@app.command()
def seed_targets() -> None:
    """Insert the default target list when no targets exist."""
    from .db.session import Database
    from .service import seed_targets as run_seed

    db = Database(get_settings().database_url)

    async def run() -> int:
        await db.init()
        try:
            return await run_seed(db)
        finally:
            await db.close()

    added = asyncio.run(run())
    if added:
        typer.echo(f"Seeded {added} monitoring targets")
    else:
        typer.echo("Targets already configured, nothing seeded")


def _interval_source() -> tuple[Database, IntervalSource]:
    """Build the database and interval source shared by the intervals commands."""
    from .db.session import Database
    from .db.stores import SqlIntervalStore
    from .monitoring.intervals import IntervalSource

    settings = get_settings()
    db = Database(settings.database_url)
    return db, IntervalSource.from_settings(SqlIntervalStore(db), settings)


@intervals_app.command("show")
def show_intervals() -> None:
    """Print the active and default monitoring intervals."""
    db, source = _interval_source()

    async def run() -> MonitoringIntervals:
        await db.init()
        try:
            return await source.get_intervals()
        finally:
            await db.close()

    current = asyncio.run(run())
    defaults = source.default_intervals()

    table = Table(title="Monitoring intervals (seconds)")
    table.add_column("")
    table.add_column("check", justify="right")
    table.add_column("outage check", justify="right")
    table.add_row(
        "current",
        str(current.check_interval_seconds),
        str(current.outage_check_interval_seconds),
    )
    table.add_row(
        "default",
        str(defaults.check_interval_seconds),
        str(defaults.outage_check_interval_seconds),
    )
    console.print(table)


@intervals_app.command("set")
def set_intervals(
    check: int = typer.Argument(..., help="Polling interval while connected"),
    outage: int = typer.Argument(..., help="Polling interval during an outage"),
) -> None:
    """Store an interval override."""
    from .monitoring.intervals import IntervalValidationError
    from .monitoring.models import MonitoringIntervals

    db, source = _interval_source()
    intervals = MonitoringIntervals(
        check_interval_seconds=check, outage_check_interval_seconds=outage
    )

    async def run() -> None:
        await db.init()
        try:
            await source.set_intervals(intervals)
        finally:
            await db.close()

    try:
        asyncio.run(run())
    except IntervalValidationError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    typer.echo("Intervals updated; send SIGHUP to a running monitor to apply them")


@intervals_app.command("reset")
def reset_intervals() -> None:
    """Remove the interval override and fall back to the defaults."""
    db, source = _interval_source()

    async def run() -> None:
        await db.init()
        try:
            await source.reset_intervals()
        finally:
            await db.close()

    asyncio.run(run())
    typer.echo("Intervals reset to defaults")


@app.command()
def speed_test() -> None:
    """Run one speed test and store the result."""
    from .db.session import Database
    from .db.stores import SqlSpeedTestStore
    from .monitoring.speedtest import SpeedTester

    settings = get_settings()
    db = Database(settings.database_url)
    tester = SpeedTester.from_settings(SqlSpeedTestStore(db), settings)

    async def run() -> SpeedTestResult | None:
        await db.init()
        try:
            return await tester.run()
        finally:
            await db.close()

    result = asyncio.run(run())
    if result is None:
        typer.echo("Speed test failed", err=True)
        raise typer.Exit(1)
    console.print(
        f"down {result.download_mbps:.2f} Mbps, up {result.upload_mbps:.2f} Mbps, "
        f"ping {result.ping_ms:.1f} ms"
    )


if __name__ == "__main__":
    app()
