"""
Command-line interface for the contact intelligence pipeline.

Uses Typer to provide a CLI with options for the most commonly tuned
configuration settings; everything else comes from the YAML config file.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from .config import load_config, validate_config
from .errors import ContactIntelError
from .runner import run_pipeline

app = typer.Typer(add_completion=False)
console = Console()


@app.callback()
def main() -> None:
    """Score, de-duplicate and classify journalist contacts."""


@app.command()
def run(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True),
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    run_folder_mode: str | None = typer.Option(
        None,
        "--run-folder-mode",
        help="Output subfolder mode: input, timestamp, or input_timestamp.",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    confidence_threshold: float | None = typer.Option(
        None, "--confidence-threshold", help="Drop contacts below this confidence."
    ),
    max_per_source: int | None = typer.Option(
        None, "--max-per-source", help="Keep at most N contacts per source (0 = unlimited)."
    ),
    dedup: bool | None = typer.Option(
        None, "--dedup/--no-dedup", help="Enable or disable duplicate detection."
    ),
    freelancer: bool | None = typer.Option(
        None, "--freelancer/--no-freelancer", help="Enable or disable freelancer analysis."
    ),
    markdown: bool | None = typer.Option(
        None, "--markdown/--no-markdown", help="Also write a Markdown report."
    ),
):
    """Run the pipeline on a JSON batch snapshot.

    Assesses every page, scores and filters the extracted contacts, merges
    duplicates, builds freelancer profiles and writes results.json plus an
    HTML report.

    Args:
        input: Path to the JSON batch snapshot
        output: Directory for output reports
        config: Optional path to YAML config file
        progress: Whether to show progress bar
        run_folder_mode: Output folder naming strategy
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
        confidence_threshold: Minimum confidence for kept contacts
        max_per_source: Per-source contact cap
        dedup: Enable/disable duplicate detection
        freelancer: Enable/disable freelancer analysis
        markdown: Enable/disable the extra Markdown report
    """
    try:
        cfg = load_config(str(config) if config else None)

        if run_folder_mode:
            cfg.output.run_folder_mode = run_folder_mode
        if log_level:
            cfg.logging.level = log_level
        if log_format:
            cfg.logging.format = log_format
        if log_file is not None:
            cfg.logging.file = log_file
        if confidence_threshold is not None:
            cfg.filter.confidence_threshold = confidence_threshold
        if max_per_source is not None:
            cfg.filter.max_contacts_per_source = max_per_source
        if dedup is not None:
            cfg.dedup.enabled = dedup
        if freelancer is not None:
            cfg.freelancer.enabled = freelancer
        if markdown is not None:
            cfg.output.include_markdown = markdown
        validate_config(cfg)

        output_path = run_pipeline(input, output, cfg, show_progress=progress, console=console)
    except ContactIntelError as exc:
        console.print(f"[red]Error[/red] ({exc.code}): {exc}")
        raise typer.Exit(code=1) from exc

    console.print(f"Report generated: {output_path}")
