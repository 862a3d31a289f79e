"""Console rendering of batch results."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from .base import BatchResult, OutcomeStatus

STATUS_STYLES = {
    OutcomeStatus.SUCCEEDED: "green",
    OutcomeStatus.RETRIES_EXHAUSTED: "yellow",
    OutcomeStatus.FATAL_FAILURE: "red",
    OutcomeStatus.CONTEXT_FAILED: "magenta",
}


def format_payload(payload: Any, limit: int = 300) -> str:
    """Compact, truncated rendering of an operation payload."""
    if payload is None:
        return ""
    if isinstance(payload, str):
        text = payload
    else:
        try:
            text = json.dumps(payload, default=str, sort_keys=True)
        except (TypeError, ValueError):
            text = repr(payload)
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text


def build_outcome_table(result: BatchResult) -> Table:
    table = Table(title=f"{result.operation}: {result.succeeded}/{result.total_targets} succeeded")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Target", overflow="fold")
    table.add_column("Status")
    table.add_column("Attempts", justify="right")
    table.add_column("Backoff (s)", justify="right")
    table.add_column("Result", overflow="fold")

    for index, outcome in enumerate(result.outcomes, start=1):
        style = STATUS_STYLES.get(outcome.status, "")
        detail = format_payload(outcome.output) if outcome.success else (outcome.error or "")
        table.add_row(
            str(index),
            outcome.target,
            f"[{style}]{outcome.status.value}[/{style}]",
            str(outcome.attempts),
            f"{outcome.total_wait:.1f}",
            detail,
        )
    return table


def render_batch_result(result: BatchResult, console: Console | None = None) -> None:
    console = console or Console()
    console.print(build_outcome_table(result))
    if result.failed:
        counts = ", ".join(
            f"{status.value}: {count}"
            for status, count in result.by_status().items()
            if status is not OutcomeStatus.SUCCEEDED
        )
        console.print(f"[bold red]{result.failed} target(s) failed[/bold red] ({counts})")
