"""
Main pipeline orchestration for the contact intelligence pipeline.

This module coordinates one batch run:
1. Parse the JSON batch snapshot
2. Assess the quality of every fetched page
3. Score every extracted contact against its page and assessment
4. Apply the post-scoring quality filters
5. Detect and merge duplicate contacts
6. Build freelancer profiles for contacts with byline history
7. Write results.json and render the reports

``process_batch`` holds stages 2-6 and touches no files, so callers that
already have a PipelineInput in memory can use it directly.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
import logging
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .analyzers.confidence_scorer import ConfidenceScorer
from .analyzers.duplicate_detector import DuplicateDetector
from .analyzers.freelancer_analyzer import FreelancerAnalyzer
from .analyzers.quality_assessor import ContentQualityAssessor
from .config import AppConfig, FilterConfig
from .core.helpers import resolve_now
from .core.patterns import PatternTables, build_tables
from .core.types import (
    ExtractedContact,
    OutletHistory,
    PipelineInput,
    PipelineResult,
)
from .errors import BatchItemError, ConfigError
from .input.json_parser import load_snapshot
from .logging_utils import log_event, setup_logging
from .output.json_writer import write_results
from .output.renderer import render_html, render_markdown
from .statistics import assessment_statistics, extraction_metrics


PIPELINE_STAGES = 5


def process_batch(
    batch: PipelineInput,
    cfg: AppConfig,
    tables: PatternTables | None = None,
    logger: logging.Logger | None = None,
    progress: Progress | None = None,
    task_id=None,
) -> PipelineResult:
    """Run assessment, scoring, filtering, deduplication and freelancer analysis.

    Items that fail inside a stage are skipped and reported in
    ``PipelineResult.failures``; the rest of the batch carries on.

    Args:
        batch: Parsed batch snapshot
        cfg: Application configuration
        tables: Lookup tables (built from ``cfg.tables`` if None)
        logger: Logger for stage events
        progress: Optional rich progress to advance once per stage
        task_id: Progress task to advance

    Returns:
        PipelineResult with canonical contacts, groups, profiles and statistics
    """
    tables = tables or build_tables(cfg.tables)
    now = resolve_now(batch.now)
    failures: dict[str, list[BatchItemError]] = defaultdict(list)

    assessor = ContentQualityAssessor(cfg.assessment, tables, logger)
    scorer = ConfidenceScorer(cfg.scoring, tables, logger)
    detector = DuplicateDetector(cfg.dedup, tables, logger)
    analyzer = FreelancerAnalyzer(cfg.freelancer, tables, logger)

    assessments = assessor.assess_many(
        [source.content for source in batch.sources], now, failures["assessment"]
    )
    by_url = {assessment.url: assessment for assessment in assessments}
    _advance(progress, task_id)

    scored = scorer.score_many(
        (
            (contact, source.content, by_url.get(source.content.url))
            for source in batch.sources
            for contact in source.contacts
        ),
        batch.target_criteria,
        failures["scoring"],
    )
    _advance(progress, task_id)

    kept = apply_quality_filters(scored, cfg.filter)
    log_event(
        logger,
        "Quality filters applied",
        event="quality_filters",
        scored=len(scored),
        kept=len(kept),
    )
    _advance(progress, task_id)

    detection = detector.detect(kept)
    _advance(progress, task_id)

    profiles = {}
    if cfg.freelancer.enabled:
        subjects = []
        for contact in detection.unique_contacts:
            histories = merged_histories(contact, batch.byline_histories)
            if histories:
                subjects.append((contact, histories))
        for profile in analyzer.analyze_many(subjects, now, failures["freelancer"]):
            profiles[profile.contact_id] = profile
    _advance(progress, task_id)

    statistics = {
        "assessment": assessment_statistics(assessments),
        "extraction": extraction_metrics(kept, detection),
        "filtered_out": len(scored) - len(kept),
        "freelancers": sum(1 for p in profiles.values() if p.is_freelancer),
        "profiles": len(profiles),
    }

    return PipelineResult(
        assessments=assessments,
        contacts=detection.unique_contacts,
        duplicates=detection.duplicate_contacts,
        duplicate_groups=detection.duplicate_groups,
        profiles=profiles,
        statistics=statistics,
        failures=[
            _failure_record(stage, error)
            for stage, errors in failures.items()
            for error in errors
        ],
    )


def apply_quality_filters(contacts: list[ExtractedContact], cfg: FilterConfig) -> list[ExtractedContact]:
    """Drop low-confidence and low-quality contacts and cap contacts per source.

    When ``max_contacts_per_source`` is positive, only the highest-confidence
    contacts of each source URL are kept. Input order is preserved.
    """
    kept = [
        c
        for c in contacts
        if c.confidence_score >= cfg.confidence_threshold and c.quality_score >= cfg.min_quality
    ]
    if cfg.max_contacts_per_source <= 0:
        return kept

    by_source: dict[str, list[ExtractedContact]] = defaultdict(list)
    for contact in kept:
        by_source[contact.source_url].append(contact)
    allowed = set()
    for members in by_source.values():
        ranked = sorted(members, key=lambda c: -c.confidence_score)
        allowed.update(c.id for c in ranked[: cfg.max_contacts_per_source])
    return [c for c in kept if c.id in allowed]


def merged_histories(
    contact: ExtractedContact, histories: dict[str, list[OutletHistory]]
) -> list[OutletHistory]:
    """Combine the byline histories of a contact and everything merged into it.

    Histories for the same outlet are joined; bylines are de-duplicated by URL.
    """
    ids = contact.metadata.merged_from or [contact.id]
    combined: dict[str, OutletHistory] = {}
    seen_urls: dict[str, set[str]] = defaultdict(set)
    for contact_id in ids:
        for history in histories.get(contact_id, []):
            current = combined.get(history.outlet_id)
            if current is None:
                current = OutletHistory(
                    outlet_id=history.outlet_id,
                    outlet_name=history.outlet_name,
                    outlet_domain=history.outlet_domain,
                )
                combined[history.outlet_id] = current
            for byline in history.bylines:
                if byline.url in seen_urls[history.outlet_id]:
                    continue
                seen_urls[history.outlet_id].add(byline.url)
                current.bylines.append(byline)
    return list(combined.values())


def run_pipeline(
    input_path: Path,
    output_dir: Path,
    cfg: AppConfig,
    show_progress: bool = True,
    console: Console | None = None,
) -> Path:
    """Run the complete pipeline on a snapshot file.

    Returns the path to the generated report (HTML unless the output
    format is "markdown").

    Args:
        input_path: Path to the JSON batch snapshot
        output_dir: Directory for output files
        cfg: Application configuration
        show_progress: Whether to display progress bars
        console: Rich console for output (creates default if None)

    Returns:
        Path to the generated report file
    """
    run_output_dir = _build_run_output_dir(output_dir, input_path, cfg)
    run_output_dir.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(cfg.logging, run_output_dir)

    log_event(
        logger,
        "Pipeline start",
        event="pipeline_start",
        input=str(input_path),
        output=str(run_output_dir),
    )

    tables = build_tables(cfg.tables)
    batch = load_snapshot(input_path)

    if not show_progress:
        result = process_batch(batch, cfg, tables, logger)
        report_path = _write_outputs(result, run_output_dir, input_path, cfg)
    else:
        console = console or Console()
        progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=console,
        )
        with progress:
            stage_task = progress.add_task("Stages", total=PIPELINE_STAGES + 1)
            result = process_batch(batch, cfg, tables, logger, progress, stage_task)
            report_path = _write_outputs(result, run_output_dir, input_path, cfg)
            progress.advance(stage_task, 1)
        _render_run_stats(result, console)

    log_event(
        logger,
        "Pipeline complete",
        event="pipeline_complete",
        output=str(report_path),
        contacts=len(result.contacts),
        duplicates=len(result.duplicates),
        profiles=len(result.profiles),
        failures=len(result.failures),
    )
    return report_path


def _write_outputs(result: PipelineResult, run_output_dir: Path, input_path: Path, cfg: AppConfig) -> Path:
    if cfg.output.write_json:
        write_results(result, run_output_dir / "results.json")

    title = f"Contact Intelligence Report - {input_path.stem}"
    md_path = run_output_dir / "report.md"
    if cfg.output.format == "markdown":
        render_markdown(result, md_path, title)
        return md_path

    html_path = run_output_dir / "report.html"
    render_html(result, html_path, title)
    if cfg.output.include_markdown:
        render_markdown(result, md_path, title)
    return html_path


def _render_run_stats(result: PipelineResult, console: Console) -> None:
    extraction = result.statistics.get("extraction", {})
    console.print(
        "[bold]Run summary[/bold]: "
        f"sources={len(result.assessments)}, contacts={extraction.get('total_contacts', 0)}, "
        f"unique={len(result.contacts)}, duplicates={len(result.duplicates)}, "
        f"profiles={len(result.profiles)}, failures={len(result.failures)}"
    )


def _failure_record(stage: str, error: BatchItemError) -> dict:
    cause = error.cause
    return {
        "stage": stage,
        "item": error.item,
        "code": getattr(cause, "code", type(cause).__name__),
        "error": str(cause),
    }


def _advance(progress: Progress | None, task_id) -> None:
    if progress is not None and task_id is not None:
        progress.advance(task_id, 1)


def _build_run_output_dir(output_dir: Path, input_path: Path, cfg: AppConfig) -> Path:
    """Build the output directory name based on configured mode.

    Raises:
        ConfigError: If run_folder_mode is not supported
    """
    stem = input_path.stem or "run"
    mode = (cfg.output.run_folder_mode or "input").lower()
    if mode == "input":
        run_dir_name = stem
    elif mode == "timestamp":
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        run_dir_name = f"{timestamp}-{stem}"
    elif mode == "input_timestamp":
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        run_dir_name = f"{stem}-{timestamp}"
    else:
        raise ConfigError(
            f"Unsupported output.run_folder_mode: {cfg.output.run_folder_mode}",
            {"run_folder_mode": cfg.output.run_folder_mode},
        )
    return output_dir / run_dir_name
