"""CLI command implementations for the bulk operations processor."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from src.core.result_aggregation import format_bulk_summary
from src.models.bulk_operation import BulkOperationType, BulkOptions, ProgressSnapshot
from src.models.config import Config
from src.utils.logger import configure_logging

if TYPE_CHECKING:
    from src.services.protocols import ItemSenderProtocol


def _get_config() -> Config:
    """Load configuration from .env file."""
    return Config()


def _load_items(path: Path) -> list[Any]:
    """Read a JSON array of items from a file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"{path} is not valid JSON: {exc}"
        raise click.BadParameter(msg, param_hint="ITEMS_FILE") from exc
    if not isinstance(data, list):
        msg = f"{path} must contain a JSON array of items"
        raise click.BadParameter(msg, param_hint="ITEMS_FILE")
    return data


def _echo_progress(progress: ProgressSnapshot) -> None:
    click.echo(
        f"[PROGRESS] {progress.processed}/{progress.total} "
        f"({progress.percentage:.0f}%) batch {progress.current_batch}/{progress.total_batches}",
        err=True,
    )


@click.command()
@click.argument(
    "items_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--url", required=True, help="Endpoint each item is sent to")
@click.option(
    "--operation",
    default=BulkOperationType.CREATE.value,
    type=click.Choice([op.value for op in BulkOperationType]),
    help="Operation type; selects the HTTP method",
)
@click.option("--batch-size", default=None, type=int, help="Items per batch (default: config)")
@click.option("--batch-delay-ms", default=None, type=int, help="Pause between batches")
@click.option("--parallel", is_flag=True, help="Send items within a batch concurrently")
@click.option("--max-concurrency", default=None, type=int, help="Max in-flight requests")
@click.option("--stop-on-error", is_flag=True, help="Stop at the first failed item")
@click.option("--max-retries", default=None, type=int, help="Retries per failed item")
@click.option("--progress", "show_progress", is_flag=True, help="Print progress to stderr")
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def send_items(
    items_file: Path,
    url: str,
    operation: str,
    batch_size: int | None,
    batch_delay_ms: int | None,
    parallel: bool,
    max_concurrency: int | None,
    stop_on_error: bool,
    max_retries: int | None,
    show_progress: bool,
    output_format: str,
) -> None:
    """Send every item in ITEMS_FILE to an HTTP endpoint as a bulk operation."""
    config = _get_config()
    configure_logging(config.log_level)

    from src.services.bulk_processor import BulkOperationsProcessor
    from src.services.http_item_client import HttpItemClient

    items = _load_items(items_file)
    operation_type = BulkOperationType(operation)

    overrides: dict[str, Any] = {
        "parallel": parallel,
        "continue_on_error": not stop_on_error,
    }
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    if batch_delay_ms is not None:
        overrides["batch_delay_ms"] = batch_delay_ms
    if max_concurrency is not None:
        overrides["max_concurrency"] = max_concurrency
    if max_retries is not None:
        overrides["max_retries"] = max_retries
    if show_progress:
        overrides["on_progress"] = _echo_progress
    retries = max_retries if max_retries is not None else config.bulk_max_retries
    overrides["retry_failed"] = retries > 0

    try:
        options = BulkOptions.from_config(config, **overrides)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    client: ItemSenderProtocol = HttpItemClient(
        url, operation_type, timeout=config.http_timeout_seconds
    )
    click.echo(f"[INFO] Sending {len(items)} items to {url} ({operation_type})...", err=True)
    try:
        result = BulkOperationsProcessor.process(operation_type, items, client.send, options)
    finally:
        client.close()

    if output_format == "json":
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        click.echo(format_bulk_summary(result))

    if not result.success:
        raise SystemExit(1)
