"""Tests for content quality assessment."""

from datetime import datetime, timedelta, timezone

from contact_intel.analyzers.quality_assessor import (
    EMPTY_BODY_RECOMMENDATION,
    ContentQualityAssessor,
    has_contact_info,
    is_journalistic,
)
from contact_intel.core.types import ContentMetadata, ParsedContent
from contact_intel.errors import BatchItemError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

_SENTENCE = (
    "Chip makers across Asia are expanding factory capacity as demand for "
    "advanced processors keeps rising, industry analysts told Reuters this week."
)


def _article_body(sentences: int = 20) -> str:
    return "By Maria Lopez, technology correspondent. " + " ".join([_SENTENCE] * sentences)


def _content(
    *,
    url: str = "https://www.reuters.com/technology/chip-capacity-2026-02-27/",
    title: str = "Chip makers race to expand capacity",
    body: str | None = None,
    published_at: datetime | None = NOW - timedelta(days=2),
) -> ParsedContent:
    return ParsedContent(
        url=url,
        content=_article_body() if body is None else body,
        title=title,
        author="Maria Lopez",
        published_at=published_at,
        language="en",
        metadata=ContentMetadata(word_count=400, reading_time=2, domain="reuters.com"),
    )


def test_recent_article_from_credible_outlet_scores_high():
    assessment = ContentQualityAssessor().assess(_content(), NOW)

    assert assessment.overall_score > 0.7
    assert assessment.freshness == 0.9
    assert assessment.credibility == 1.0
    assert assessment.authority == 1.0
    assert assessment.spam_score == 0.0
    for value in (
        assessment.credibility,
        assessment.relevance,
        assessment.freshness,
        assessment.authority,
        assessment.spam_score,
        assessment.contact_info_richness,
        assessment.overall_score,
    ):
        assert 0.0 <= value <= 1.0


def test_clickbait_raises_spam_score_and_lowers_overall():
    assessor = ContentQualityAssessor()
    clean = assessor.assess(_content(), NOW)
    spammy = assessor.assess(
        _content(
            title="YOU WON'T BELIEVE these chip deals",
            body=_article_body()
            + " YOU WON'T BELIEVE THESE DEALS!!!! ACT NOW!!!! LIMITED TIME ONLY!!!!"
            " CLICK HERE to claim your prize!!!!",
        ),
        NOW,
    )

    assert spammy.spam_score > 0.4
    assert spammy.spam_score > clean.spam_score
    assert spammy.overall_score < clean.overall_score
    assert "Content may contain spam-like characteristics" in spammy.recommendations


def test_freshness_steps_with_age():
    assessor = ContentQualityAssessor()

    def freshness(days):
        published = None if days is None else NOW - timedelta(days=days)
        return assessor.assess(_content(published_at=published), NOW).freshness

    assert freshness(0) == 1.0
    assert freshness(1) == 1.0
    assert freshness(5) == 0.9
    assert freshness(20) == 0.8
    assert freshness(60) == 0.6
    assert freshness(200) == 0.4
    assert freshness(800) == 0.2
    assert freshness(None) == 0.5


def test_suspicious_domain_is_less_credible():
    assessor = ContentQualityAssessor()
    credible = assessor.assess(_content(), NOW)
    suspicious = assessor.assess(
        _content(url="https://chip-deals-daily.xyz/articles/capacity"), NOW
    )

    assert suspicious.credibility < credible.credibility
    assert suspicious.authority < credible.authority


def test_empty_body_yields_neutral_assessment():
    assessment = ContentQualityAssessor().assess(_content(body="   "), NOW)

    assert assessment.credibility == 0.5
    assert assessment.relevance == 0.5
    assert assessment.spam_score == 0.0
    assert assessment.content_length == 0
    assert assessment.recommendations == [EMPTY_BODY_RECOMMENDATION]


def test_assessment_is_deterministic_for_fixed_now():
    assessor = ContentQualityAssessor()

    assert assessor.assess(_content(), NOW) == assessor.assess(_content(), NOW)


def test_assess_many_skips_failing_items():
    broken = ParsedContent(url="https://www.reuters.com/broken", content=12345)
    failures: list[BatchItemError] = []

    results = ContentQualityAssessor().assess_many([_content(), broken], NOW, failures)

    assert len(results) == 1
    assert results[0].url.startswith("https://www.reuters.com/technology")
    assert len(failures) == 1
    assert failures[0].item == "https://www.reuters.com/broken"


def test_contact_info_and_journalistic_flags():
    body = "Written by our reporter. Contact the newsroom by email for the full story."

    assert has_contact_info(body)
    assert is_journalistic(body.lower())
    assert not has_contact_info("Quarterly output rose by four percent.")
    assert not is_journalistic("quarterly output rose by four percent.")
