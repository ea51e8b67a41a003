"""
Command-line interface for the News Curator.

Uses Typer to provide a CLI with options for the most common configuration
settings. Supports loading .env files for API key configuration.
"""

from __future__ import annotations

from contextlib import nullcontext
import json
from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from .config import load_config
from .core.sources import default_sources, load_sources, merge_sources
from .core.types import CurationResult, ProgressEvent, Source
from .llm.tracing import flush, setup_langfuse
from .llm.usage import JsonlUsageLog, UsageLedger
from .runner import build_run_output_dir, run_curation
from .utils.logging import setup_llm_logger, setup_logging

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def run(
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    sources: Path | None = typer.Option(
        None,
        "--sources",
        "-s",
        exists=True,
        help="YAML list of extra sources, merged over the built-in registry by name.",
    ),
    min_score: float | None = typer.Option(
        None, "--min-score", help="Minimum final score to show."
    ),
    max_items: int | None = typer.Option(
        None, "--max-items", help="Maximum items sent to extraction."
    ),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="Override provider API key (or set OPENROUTER_API_KEY / GOOGLE_API_KEY / .env).",
    ),
):
    """Fetch all sources, extract and rank stories, and write curated.json.

    Args:
        output: Directory for run folders
        config: Optional path to YAML config file
        sources: Optional YAML file with extra sources
        min_score: Override of the selection threshold
        max_items: Override of the extraction budget
        progress: Whether to show progress bars
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
        api_key: Override extraction provider API key
    """
    load_dotenv()

    cfg = load_config(str(config) if config else None)

    if api_key:
        cfg.provider.api_key = api_key
    if min_score is not None:
        cfg.selection.min_score_to_show = min_score
    if max_items is not None:
        cfg.selection.total_limit = max_items
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file

    registry = _load_registry(sources)

    run_output_dir = build_run_output_dir(output)
    logger = setup_logging(cfg.logging, run_output_dir)
    llm_logger = setup_llm_logger(cfg.logging, run_output_dir)
    setup_langfuse(cfg.langfuse)
    ledger = UsageLedger()
    meter = JsonlUsageLog(run_output_dir / cfg.logging.usage_log_file, inner=ledger)

    progress_ctx = (
        Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=console,
        )
        if progress
        else nullcontext()
    )

    try:
        with progress_ctx as bar:
            on_progress = _progress_reporter(bar) if bar is not None else None
            result = run_curation(
                cfg,
                sources=registry,
                on_progress=on_progress,
                meter=meter,
                logger=logger,
                llm_logger=llm_logger,
            )
    except ValueError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    finally:
        flush()

    output_path = _write_result(run_output_dir, result, ledger)
    _print_result(result, ledger)
    console.print(f"Curated stories written: {output_path}")


@app.command(name="sources")
def list_sources(
    sources: Path | None = typer.Option(
        None, "--sources", "-s", exists=True, help="YAML list of extra sources."
    ),
):
    """List the source registry."""
    registry = _load_registry(sources)

    table = Table(title="Sources")
    table.add_column("Name")
    table.add_column("Tier", justify="right")
    table.add_column("Category")
    table.add_column("URL", overflow="fold")
    for source in sorted(registry, key=lambda s: (s.tier, s.name)):
        table.add_row(source.name, str(source.tier), source.category, source.url)
    console.print(table)


def _load_registry(sources: Path | None) -> list[Source]:
    registry = default_sources()
    if sources is None:
        return registry
    try:
        return merge_sources(registry, load_sources(sources))
    except ValueError as exc:
        console.print(f"[red]Invalid sources file:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc


def _progress_reporter(bar: Progress):
    tasks: dict[str, int] = {}

    def on_progress(event: ProgressEvent) -> None:
        task_id = tasks.get(event.stage)
        if task_id is None:
            task_id = bar.add_task(event.message or event.stage, total=event.total or None)
            tasks[event.stage] = task_id
        bar.update(
            task_id,
            completed=event.current,
            total=event.total or None,
            description=event.message or event.stage,
        )

    return on_progress


def _write_result(run_output_dir: Path, result: CurationResult, ledger: UsageLedger) -> Path:
    run_output_dir.mkdir(parents=True, exist_ok=True)
    payload = result.to_dict()
    payload["usage"] = ledger.summary()
    path = run_output_dir / "curated.json"
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def _print_result(result: CurationResult, ledger: UsageLedger) -> None:
    table = Table(title=f"Top stories ({len(result.stories)})")
    table.add_column("#", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Headline")
    table.add_column("Category")
    table.add_column("Sources")
    for idx, story in enumerate(result.stories, start=1):
        table.add_row(
            str(idx),
            f"{story.final_score:g}",
            escape(story.headline),
            story.category,
            ", ".join(story.sources),
        )
    console.print(table)

    breakdown = Table(title="Sources breakdown")
    breakdown.add_column("Source")
    breakdown.add_column("Found", justify="right")
    breakdown.add_column("Kept", justify="right")
    breakdown.add_column("Status")
    health = {h.source_name: h for h in result.health}
    for row in result.stats.breakdown:
        status = health.get(row.source_name)
        if status is None:
            label = "-"
        elif status.error:
            label = f"[red]{escape(status.error)}[/red]"
        elif status.ok:
            label = "[green]ok[/green]"
        else:
            label = "[yellow]empty[/yellow]"
        breakdown.add_row(row.source_name, str(row.found), str(row.kept), label)
    console.print(breakdown)

    summary = ledger.summary()
    console.print(
        f"Provider calls: {summary['calls']} "
        f"(failed {summary['failed_calls']}), est. cost ${summary['total_cost']:.4f}"
    )


if __name__ == "__main__":
    app()
