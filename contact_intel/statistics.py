"""Aggregate statistics over assessments and scored contacts."""

from __future__ import annotations

from collections import Counter
from typing import Any

from .core.types import ContentQualityAssessment, DetectionResult, ExtractedContact


def distribution(scores: list[float], high: float, low: float) -> dict[str, int]:
    """Bucket scores into high (> high), medium ([low, high]) and low (< low)."""
    return {
        "high": sum(1 for s in scores if s > high),
        "medium": sum(1 for s in scores if low <= s <= high),
        "low": sum(1 for s in scores if s < low),
    }


def assessment_statistics(assessments: list[ContentQualityAssessment], top_n: int = 5) -> dict[str, Any]:
    """Summarize a batch of content assessments.

    Quality buckets: high > 0.8, medium 0.6-0.8, low < 0.6.
    """
    scores = [a.overall_score for a in assessments]
    issues = Counter(rec for a in assessments for rec in a.recommendations)
    return {
        "total_assessments": len(assessments),
        "average_quality": _mean(scores),
        "quality_distribution": distribution(scores, high=0.8, low=0.6),
        "journalistic": sum(1 for a in assessments if a.is_journalistic),
        "with_contact_info": sum(1 for a in assessments if a.has_contact_info),
        "common_issues": [rec for rec, _ in issues.most_common(top_n)],
    }


def extraction_metrics(
    scored: list[ExtractedContact],
    detection: DetectionResult | None = None,
) -> dict[str, Any]:
    """Summarize scored contacts and the deduplication outcome.

    Confidence and quality buckets: high > 0.8, medium 0.5-0.8, low < 0.5.
    ``average_confidence`` is taken over the unique contacts when a
    detection result is supplied.
    """
    total = len(scored)
    methods = Counter(c.extraction_method.value for c in scored)
    unique = detection.unique_contacts if detection is not None else scored
    return {
        "total_contacts": total,
        "unique_contacts": len(unique),
        "average_confidence": _mean([c.confidence_score for c in unique]),
        "confidence_distribution": distribution([c.confidence_score for c in scored], high=0.8, low=0.5),
        "quality_distribution": distribution([c.quality_score for c in scored], high=0.8, low=0.5),
        "method_breakdown": dict(sorted(methods.items())),
        "social_profile_rate": round(sum(1 for c in scored if c.social_profiles) / max(total, 1), 4),
        "duplicate_groups": len(detection.duplicate_groups) if detection is not None else 0,
        "duplicate_rate": round(detection.duplicate_rate, 4) if detection is not None else 0.0,
    }


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 4)
