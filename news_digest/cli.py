"""
Command-line interface for the news digest.

Uses Typer to expose one aggregation pass and a source listing. Supports
loading .env files for API key configuration.
"""

from __future__ import annotations

import json
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import typer

from .config import get_api_key, load_config
from .llm.tracing import flush
from .runner import run_pipeline

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the JSON payload here instead of stdout."
    ),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="Override provider API key (or set SILICONFLOW_API_KEY / .env).",
    ),
    no_ai: bool = typer.Option(
        False, "--no-ai", help="Skip the provider and use extractive summaries only."
    ),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Directory for run.jsonl / llm.jsonl log files."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    entries_per_source: int | None = typer.Option(
        None, "--entries-per-source", help="Maximum entries taken from each feed."
    ),
):
    """Fetch all sources, summarize each entry, and emit {"feeds": [...]}.

    Exits with status 1 when the aggregation fails as a whole.
    """
    load_dotenv()

    cfg = load_config(str(config) if config else None)

    if api_key:
        cfg.provider.api_key = api_key
    if log_level:
        cfg.logging.level = log_level
    if log_dir is not None:
        cfg.logging.file = True
    if entries_per_source is not None:
        cfg.fetch.entries_per_source = entries_per_source

    response = run_pipeline(cfg, log_dir=log_dir, use_provider=not no_ai)
    flush()

    payload = json.dumps(response.body, ensure_ascii=False, indent=2)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload + "\n", encoding="utf-8")
        console.print(f"Wrote {len(response.body.get('feeds', []))} items to {output}")
    else:
        typer.echo(payload)

    if not response.ok:
        raise typer.Exit(code=1)


@app.command()
def sources(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
):
    """List configured sources and the active summarizer mode."""
    load_dotenv()
    cfg = load_config(str(config) if config else None)

    table = Table(title="Sources")
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Extra fields")
    for source in cfg.sources:
        table.add_row(source.name, source.url, ", ".join(source.extra_fields) or "-")
    console.print(table)

    mode = f"{cfg.provider.name} ({cfg.provider.model})" if get_api_key(cfg.provider) else "extractive fallback"
    console.print(f"Summarizer: {mode}")


if __name__ == "__main__":
    app()
