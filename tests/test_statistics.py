"""Tests for assessment and extraction statistics."""

import pytest

from contact_intel.core.types import (
    ContentQualityAssessment,
    DetectionResult,
    ExtractedContact,
    ExtractionMethod,
    SocialProfile,
)
from contact_intel.statistics import assessment_statistics, distribution, extraction_metrics


def _assessment(url: str, overall: float, recs: list[str], journalistic: bool = True) -> ContentQualityAssessment:
    return ContentQualityAssessment(
        url=url,
        credibility=overall,
        relevance=overall,
        freshness=overall,
        authority=overall,
        spam_score=0.0,
        contact_info_richness=0.0,
        overall_score=overall,
        is_journalistic=journalistic,
        recommendations=recs,
    )


def test_distribution_bucket_edges():
    buckets = distribution([0.9, 0.8, 0.6, 0.59, 0.2], high=0.8, low=0.6)

    assert buckets == {"high": 1, "medium": 2, "low": 2}


def test_assessment_statistics_summarizes_batch():
    stats = assessment_statistics(
        [
            _assessment("https://a.com", 0.9, ["Consider more recent content sources"]),
            _assessment("https://b.com", 0.7, ["Consider more recent content sources", "Verify source authority and credentials"]),
            _assessment("https://c.com", 0.4, ["Verify source authority and credentials"], journalistic=False),
            _assessment("https://d.com", 0.5, ["Consider more recent content sources"]),
        ]
    )

    assert stats["total_assessments"] == 4
    assert stats["average_quality"] == pytest.approx(0.625)
    assert stats["quality_distribution"] == {"high": 1, "medium": 1, "low": 2}
    assert stats["journalistic"] == 3
    assert stats["common_issues"][0] == "Consider more recent content sources"


def test_assessment_statistics_of_empty_batch():
    stats = assessment_statistics([])

    assert stats["total_assessments"] == 0
    assert stats["average_quality"] == 0.0
    assert stats["common_issues"] == []


def test_extraction_metrics_with_detection_result():
    contacts = [
        ExtractedContact(id="a", name="John Doe", confidence_score=0.9, quality_score=0.7,
                         social_profiles=[SocialProfile(platform="twitter", handle="@jdoe")]),
        ExtractedContact(id="b", name="John Doe", confidence_score=0.5, quality_score=0.6,
                         extraction_method=ExtractionMethod.RULE_BASED),
        ExtractedContact(id="c", name="Hannah Osei", confidence_score=0.7, quality_score=0.4),
    ]
    detection = DetectionResult(
        unique_contacts=[contacts[0], contacts[2]],
        duplicate_groups=[],
        duplicate_contacts=[contacts[1]],
        total_duplicates=1,
        duplicate_rate=1 / 3,
    )

    metrics = extraction_metrics(contacts, detection)

    assert metrics["total_contacts"] == 3
    assert metrics["unique_contacts"] == 2
    assert metrics["average_confidence"] == pytest.approx(0.8)
    assert metrics["confidence_distribution"] == {"high": 1, "medium": 2, "low": 0}
    assert metrics["method_breakdown"] == {"AI_BASED": 2, "RULE_BASED": 1}
    assert metrics["social_profile_rate"] == pytest.approx(0.3333)
    assert metrics["duplicate_rate"] == pytest.approx(0.3333)
