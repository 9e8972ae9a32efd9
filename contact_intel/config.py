"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- AssessmentConfig: Content quality weights and recommendation thresholds
- ScoringConfig: Contact confidence/quality weights
- DedupConfig: Duplicate detection thresholds and weights
- FreelancerConfig: Freelancer cutoffs, decay and recency windows
- FilterConfig: Post-scoring contact filters
- TablesConfig: Extensions to the built-in lookup tables
- OutputConfig: Output format settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import math
from typing import Any

import yaml

from .errors import ConfigError


@dataclass
class AssessmentConfig:
    """Configuration for content quality assessment.

    Attributes:
        weights: Weights of the six sub-scores in the overall score; must sum to 1.0
        credibility_floor: Recommend better sources below this credibility
        relevance_floor: Recommend richer sources below this relevance
        freshness_floor: Recommend newer sources below this freshness
        authority_floor: Recommend verifying authority below this score
        spam_ceiling: Flag spam-like content above this spam score
        richness_floor: Flag missing contact information below this richness
        overall_floor: Recommend alternative sources below this overall score
    """

    weights: dict[str, float] = field(
        default_factory=lambda: {
            "credibility": 0.30,
            "relevance": 0.25,
            "freshness": 0.15,
            "authority": 0.15,
            "spam_score": 0.10,
            "contact_info_richness": 0.05,
        }
    )
    credibility_floor: float = 0.6
    relevance_floor: float = 0.6
    freshness_floor: float = 0.5
    authority_floor: float = 0.6
    spam_ceiling: float = 0.4
    richness_floor: float = 0.3
    overall_floor: float = 0.6


@dataclass
class ScoringConfig:
    """Configuration for contact scoring.

    Attributes:
        confidence_weights: Weights of the six confidence factors; must sum to 1.0
        quality_weights: Weights of the five quality factors; must sum to 1.0
        verification_scores: Quality contribution of each verification status
    """

    confidence_weights: dict[str, float] = field(
        default_factory=lambda: {
            "name_clarity": 0.25,
            "email_presence": 0.20,
            "title_relevance": 0.15,
            "bio_completeness": 0.15,
            "social_verification": 0.15,
            "source_authority": 0.10,
        }
    )
    quality_weights: dict[str, float] = field(
        default_factory=lambda: {
            "source_credibility": 0.25,
            "content_freshness": 0.20,
            "information_consistency": 0.20,
            "contact_completeness": 0.20,
            "verification_status": 0.15,
        }
    )
    verification_scores: dict[str, float] = field(
        default_factory=lambda: {
            "CONFIRMED": 1.0,
            "PENDING": 0.7,
            "MANUAL_REVIEW": 0.4,
            "REJECTED": 0.1,
        }
    )


@dataclass
class DedupConfig:
    """Configuration for duplicate detection.

    Attributes:
        enabled: Whether to perform deduplication
        overall_threshold: Minimum overall similarity for a non-email match
        email_threshold: Email similarity that on its own marks a duplicate
        name_threshold: Name similarity that counts as a name signal
        outlet_threshold: Outlet similarity that counts as an outlet signal
        title_threshold: Title similarity that counts as a title signal
        bio_threshold: Bio similarity that counts as a bio signal
        social_threshold: Social profile overlap that counts as a social signal
        blocking_min_size: Batch size above which candidate pairs are blocked by cheap keys
        weights: Weights of the similarity signals; must sum to 1.0
    """

    enabled: bool = True
    overall_threshold: float = 0.8
    email_threshold: float = 0.95
    name_threshold: float = 0.85
    outlet_threshold: float = 0.75
    title_threshold: float = 0.8
    bio_threshold: float = 0.7
    social_threshold: float = 0.8
    blocking_min_size: int = 200
    weights: dict[str, float] = field(
        default_factory=lambda: {
            "email": 0.35,
            "name": 0.25,
            "outlet": 0.15,
            "title": 0.10,
            "bio": 0.10,
            "social": 0.05,
        }
    )


@dataclass
class FreelancerConfig:
    """Configuration for freelancer and outlet-relationship analysis.

    Attributes:
        enabled: Whether to analyze contacts with byline histories
        freelancer_threshold: Confidence above which a contact is a freelancer
        decay_days: Time constant of the exponential recency decay
        very_recent_days: Last byline within this window boosts recency x1.5
        recent_window_days: Window that counts as "recent" activity
        stale_days: Last byline older than this halves recency
        primary_outlet_threshold: Minimum combined score for a primary outlet
        activity_multipliers: Recency multiplier per activity level
    """

    enabled: bool = True
    freelancer_threshold: float = 0.6
    decay_days: float = 30.0
    very_recent_days: float = 7.0
    recent_window_days: float = 90.0
    stale_days: float = 180.0
    primary_outlet_threshold: float = 0.3
    activity_multipliers: dict[str, float] = field(
        default_factory=lambda: {"high": 1.3, "medium": 1.0, "low": 0.7}
    )


@dataclass
class FilterConfig:
    """Configuration for post-scoring contact filters.

    Attributes:
        confidence_threshold: Drop contacts below this confidence
        min_quality: Drop contacts below this quality score
        max_contacts_per_source: Keep at most N contacts per source (0 = unlimited)
    """

    confidence_threshold: float = 0.3
    min_quality: float = 0.3
    max_contacts_per_source: int = 0


@dataclass
class TablesConfig:
    """Extensions to the built-in lookup tables.

    Attributes:
        credible_domains: Extra domains treated as credible
        top_tier_domains: Extra domains treated as top tier
        spam_domain_markers: Extra substrings that mark a spam domain
        spam_patterns: Extra spam regexes (case-insensitive)
        spam_pattern_weight: Spam score added per extra pattern hit
        personal_email_domains: Extra personal mailbox providers
        nicknames: Extra formal name -> nicknames entries
        outlet_aliases: Extra groups of domains owned by the same outlet
    """

    credible_domains: list[str] = field(default_factory=list)
    top_tier_domains: list[str] = field(default_factory=list)
    spam_domain_markers: list[str] = field(default_factory=list)
    spam_patterns: list[str] = field(default_factory=list)
    spam_pattern_weight: float = 0.1
    personal_email_domains: list[str] = field(default_factory=list)
    nicknames: dict[str, list[str]] = field(default_factory=dict)
    outlet_aliases: list[list[str]] = field(default_factory=list)


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        format: "html" or "markdown"
        include_markdown: Whether to also generate markdown when format is "html"
        write_json: Whether to write the full results as results.json
        run_folder_mode: Output subfolder naming: "input", "timestamp" or "input_timestamp"
    """

    format: str = "html"
    include_markdown: bool = False
    write_json: bool = True
    run_folder_mode: str = "input"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    assessment: AssessmentConfig = field(default_factory=AssessmentConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    freelancer: FreelancerConfig = field(default_factory=FreelancerConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    tables: TablesConfig = field(default_factory=TablesConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}", {"path": path}) from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping", {"path": path})

    cfg = _merge_config(AppConfig(), raw)
    validate_config(cfg)
    return cfg


def validate_config(cfg: AppConfig) -> None:
    """Check that every weight table sums to 1.0."""
    validate_weights(cfg.assessment.weights, "assessment.weights")
    validate_weights(cfg.scoring.confidence_weights, "scoring.confidence_weights")
    validate_weights(cfg.scoring.quality_weights, "scoring.quality_weights")
    validate_weights(cfg.dedup.weights, "dedup.weights")


def validate_weights(weights: dict[str, float], name: str) -> None:
    total = sum(weights.values())
    if not math.isclose(total, 1.0, abs_tol=1e-6):
        raise ConfigError(f"{name} must sum to 1.0 (got {total:.4f})", {"weights": name})


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    try:
        return _fromdict(data)
    except TypeError as exc:
        raise ConfigError(f"Unknown configuration key: {exc}") from exc


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        assessment=AssessmentConfig(**data["assessment"]),
        scoring=ScoringConfig(**data["scoring"]),
        dedup=DedupConfig(**data["dedup"]),
        freelancer=FreelancerConfig(**data["freelancer"]),
        filter=FilterConfig(**data["filter"]),
        tables=TablesConfig(**data["tables"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
    )
