import asyncio
import logging
import time
from datetime import datetime, timezone
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from logship.core.config import ProcessorConfig
from logship.core.errors import LogshipError
from logship.core.interfaces import ILogsHandler
from logship.core.log_types import LOG_TYPES

console = Console()


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING - 10 * min(verbose, 2)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def _fmt_ms(ms: float | None) -> str:
    if not ms:
        return "-"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug)")
def cli(verbose: int) -> None:
    """logship — ship tenant logs in checkpointed batches."""
    _configure_logging(verbose)


@cli.command("run")
@click.option("--domain", required=True, help="Tenant domain, e.g. example.eu.auth0.com")
@click.option("--client-id", required=True, envvar="LOGSHIP_CLIENT_ID", help="Management API client id")
@click.option("--client-secret", required=True, envvar="LOGSHIP_CLIENT_SECRET", help="Management API client secret")
@click.option(
    "--checkpoint-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("./logship-checkpoint.json"),
    show_default=True,
    help="JSON document holding the checkpoint and run history",
)
@click.option("--sink", type=click.Choice(["jsonl", "parquet", "http"]), default="jsonl", show_default=True)
@click.option("--out", "out_path", type=click.Path(path_type=Path), default=Path("./logs"), show_default=True,
              help="Output directory for the jsonl and parquet sinks")
@click.option("--url", default="", help="Target URL for --sink http")
@click.option("--batch-size", type=int, default=100, show_default=True, help="Logs per handler call")
@click.option("--max-retries", type=int, default=5, show_default=True, help="Redeliveries allowed per run")
@click.option("--max-run-time", "max_run_time_seconds", type=int, default=20, show_default=True,
              help="Run time budget in seconds")
@click.option("--start-from", default=None, help="Checkpoint to start from when none is persisted")
@click.option("--log-type", "log_types", multiple=True, help="Log type code to ship; repeat to OR")
@click.option("--log-level", type=click.IntRange(1, 4), default=None, help="Ship all types at or above this level")
@click.option("--storage-limit-kib", type=int, default=400, show_default=True,
              help="Size bound of the checkpoint document")
@click.option("--rows-per-shard", type=click.IntRange(min=1), default=100_000, show_default=True)
def run_cmd(
    domain: str,
    client_id: str,
    client_secret: str,
    checkpoint_file: Path,
    sink: str,
    out_path: Path,
    url: str,
    batch_size: int,
    max_retries: int,
    max_run_time_seconds: int,
    start_from: str | None,
    log_types: tuple[str, ...],
    log_level: int | None,
    storage_limit_kib: int,
    rows_per_shard: int,
) -> None:
    """Ship logs once, resuming from the persisted checkpoint."""
    if sink == "http" and not url:
        raise click.UsageError("--sink http requires --url")

    from logship.api.run_logs import run_logs

    try:
        config = ProcessorConfig(
            domain=domain,
            client_id=client_id,
            client_secret=client_secret,
            batch_size=batch_size,
            max_retries=max_retries,
            max_run_time_seconds=max_run_time_seconds,
            start_from=start_from,
            log_types=list(log_types),
            log_level=log_level,
            storage_limit_kib=storage_limit_kib,
        )
    except LogshipError as e:
        raise click.UsageError(str(e)) from e

    async def run() -> None:
        handler: ILogsHandler
        closer = None
        if sink == "parquet":
            from logship.storage.shards import ParquetShardHandler, ShardsDir

            handler = ParquetShardHandler(ShardsDir(out_path), rows_per_shard=rows_per_shard)
        elif sink == "http":
            from logship.clients.forwarder import HttpForwardHandler

            forwarder = HttpForwardHandler(url)
            handler, closer = forwarder, forwarder.aclose
        else:
            from logship.storage.jsonl import JsonlFileHandler

            handler = JsonlFileHandler(out_path / "logs.jsonl")

        t0 = time.time()
        try:
            result = await run_logs(config=config, handler=handler, checkpoint_path=checkpoint_file)
        finally:
            if closer is not None:
                await closer()

        elapsed = time.time() - t0
        console.print(f"[bold]done[/]: {result.status.logs_processed} logs • {elapsed:.2f}s")
        console.print(f"[bold]checkpoint[/]: {result.checkpoint}")
        if result.status.warning:
            console.print(f"[yellow]warning[/]: {result.status.warning}")

    try:
        asyncio.run(run())
    except LogshipError as e:
        raise click.ClickException(str(e)) from e
    except Exception as e:
        raise click.ClickException(f"{type(e).__name__}: {e}") from e


@cli.command("status")
@click.option(
    "--checkpoint-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("./logship-checkpoint.json"),
    show_default=True,
)
@click.option("--last", type=int, default=10, show_default=True, help="Number of runs to show")
def status_cmd(checkpoint_file: Path, last: int) -> None:
    """Show the persisted checkpoint and recent run history."""
    from logship.storage.checkpoint import CheckpointStore
    from logship.storage.documents import JsonFileDocumentStore

    store = CheckpointStore(JsonFileDocumentStore(checkpoint_file))

    async def load():
        return await store.get_checkpoint(), await store.history()

    checkpoint, history = asyncio.run(load())
    console.print(f"[bold]checkpoint[/]: {checkpoint or '-'}")

    table = Table("start", "end", "logs", "checkpoint", "result")
    for st in history[-last:] if last > 0 else []:
        if st.error is not None:
            result = f"[red]{escape(str(st.error))}[/]"
        elif st.warning:
            result = f"[yellow]{escape(st.warning)}[/]"
        else:
            result = "[green]ok[/]"
        table.add_row(_fmt_ms(st.start), _fmt_ms(st.end), str(st.logs_processed), st.checkpoint or "-", result)
    console.print(table)


@cli.command("log-types")
@click.option("--min-level", type=click.IntRange(1, 4), default=1, show_default=True)
def log_types_cmd(min_level: int) -> None:
    """List known log type codes and their severity levels."""
    table = Table("code", "level", "event")
    for code, lt in sorted(LOG_TYPES.items(), key=lambda kv: (-kv[1].level, kv[0])):
        if lt.level >= min_level:
            table.add_row(code, str(lt.level), lt.event)
    console.print(table)


if __name__ == "__main__":
    cli()
