"""Command line entry point.

`site-batch run` applies one operation to every site in the list and exits;
`site-batch menu` loads the list once and prompts for operations until the
operator quits.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Optional

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from .base import BatchResult
from .classifiers import HttpErrorClassifier
from .clients import ClientCredentials, RestSessionFactory
from .core import SessionFactory, Settings
from .logging_setup import setup_logging
from .observers import MetricsObserver
from .operations import OPERATION_DESCRIPTIONS, OPERATIONS, SiteOperation, build_operation
from .orchestrator import SiteBatchOrchestrator
from .reporting import render_batch_result
from .strategies import TargetListError
from .targets import load_targets

logger = logging.getLogger(__name__)
console = Console()

app = typer.Typer(
    help="Apply version policy and cleanup operations across a list of sites.",
    no_args_is_help=True,
)

SitesOption = Annotated[
    Optional[Path],
    typer.Option(
        "--sites",
        "-s",
        help="File with one site URL per line. Defaults to SITE_BATCH_SITES_FILE.",
    ),
]
DryRunOption = Annotated[
    bool,
    typer.Option("--dry-run", help="Open sessions but skip the remote operation."),
]


@asynccontextmanager
async def open_session_factory(settings: Settings) -> AsyncIterator[SessionFactory]:
    """Yield a session factory backed by one shared HTTP client for the whole batch."""
    credentials = ClientCredentials(
        client_id=settings.client_id,
        tenant=settings.tenant,
        access_token=settings.access_token,
    )
    if not settings.client_id or not settings.access_token.get_secret_value():
        logger.warning("⚠️  No client credentials configured; sites will likely deny access")

    async with httpx.AsyncClient(
        timeout=settings.request_timeout, follow_redirects=True
    ) as client:
        yield RestSessionFactory(client, credentials)


async def run_operation(
    settings: Settings,
    targets: list[str],
    operation: SiteOperation,
    dry_run: bool = False,
) -> BatchResult:
    """Run one batch and log the collected metrics."""
    metrics = MetricsObserver()
    async with open_session_factory(settings) as session_factory:
        orchestrator = SiteBatchOrchestrator(
            session_factory,
            config=settings.runner_config(dry_run=dry_run),
            error_classifier=HttpErrorClassifier(),
            observers=[metrics],
        )
        result = await orchestrator.run_batch(targets, operation)

    logger.debug(f"Batch metrics:\n{await metrics.export_json()}")
    return result


def _load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        console.print(f"[bold red]Invalid configuration:[/bold red]\n{escape(str(e))}")
        raise typer.Exit(code=1) from e


def _load_targets(settings: Settings, sites: Path | None) -> list[str]:
    try:
        targets = load_targets(sites or settings.sites_file)
    except TargetListError as e:
        logger.error(f"✗ {e}")
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1) from e
    if not targets:
        console.print("[yellow]The target list is empty; nothing to do.[/yellow]")
    return targets


def _build_operation(name: str, settings: Settings) -> SiteOperation:
    try:
        return build_operation(name, settings)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--operation") from e


def _menu_table() -> Table:
    table = Table(title="Site batch operations", show_header=False)
    table.add_column("Key", style="bold cyan", justify="right")
    table.add_column("Operation")
    for key, name in OPERATIONS.items():
        table.add_row(key, f"{OPERATION_DESCRIPTIONS[name]} [dim]({name})[/dim]")
    table.add_row("q", "Quit")
    return table


@app.command()
def run(
    operation: Annotated[
        str,
        typer.Option(
            "--operation",
            "-o",
            help=f"Operation to apply: {', '.join(OPERATION_DESCRIPTIONS)}.",
        ),
    ],
    sites: SitesOption = None,
    dry_run: DryRunOption = False,
):
    """Apply one operation to every site in the list."""
    settings = _load_settings()
    setup_logging(settings.log_level, settings.log_file)

    site_operation = _build_operation(operation, settings)
    targets = _load_targets(settings, sites)
    if not targets:
        return

    result = asyncio.run(run_operation(settings, targets, site_operation, dry_run=dry_run))
    render_batch_result(result, console)


@app.command()
def menu(
    sites: SitesOption = None,
    dry_run: DryRunOption = False,
):
    """Load the site list once, then prompt for operations until quit."""
    settings = _load_settings()
    setup_logging(settings.log_level, settings.log_file)

    targets = _load_targets(settings, sites)
    if not targets:
        return
    console.print(f"Loaded [bold]{len(targets)}[/bold] site(s).")

    while True:
        console.print(_menu_table())
        choice = Prompt.ask(
            "Select an operation", choices=[*OPERATIONS, "q"], console=console
        )
        if choice == "q":
            break

        try:
            site_operation = build_operation(OPERATIONS[choice], settings)
        except ValueError as e:
            console.print(f"[bold red]Cannot build operation:[/bold red] {e}")
            continue

        result = asyncio.run(run_operation(settings, targets, site_operation, dry_run=dry_run))
        render_batch_result(result, console)


def main():
    app()


if __name__ == "__main__":
    main()
