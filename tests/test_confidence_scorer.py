"""Tests for contact confidence, quality and relevance scoring."""

from datetime import datetime, timezone

import pytest

from contact_intel.analyzers.confidence_scorer import ConfidenceScorer, context_from
from contact_intel.core.types import (
    ContentMetadata,
    ContentQualityAssessment,
    ExtractedContact,
    ParsedContent,
    SocialProfile,
    TargetCriteria,
    VerificationStatus,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _page() -> ParsedContent:
    return ParsedContent(
        url="https://www.reuters.com/technology/chip-capacity-2026-02-27/",
        content="By Maria Lopez. Chip makers across Asia are expanding factory capacity.",
        title="Chip makers race to expand capacity",
        author="Maria Lopez",
        published_at=NOW,
        language="en",
        metadata=ContentMetadata(word_count=400, reading_time=2, domain="reuters.com"),
    )


def _assessment() -> ContentQualityAssessment:
    return ContentQualityAssessment(
        url=_page().url,
        credibility=0.9,
        relevance=0.8,
        freshness=0.9,
        authority=0.9,
        spam_score=0.0,
        contact_info_richness=0.4,
        overall_score=0.85,
        factors={"information_consistency": 0.9},
    )


def _full_contact(**overrides) -> ExtractedContact:
    fields = dict(
        id="c1",
        name="Maria Lopez",
        source_url=_page().url,
        title="Senior Technology Correspondent",
        email="maria.lopez@reuters.com",
        bio=(
            "Maria Lopez covers semiconductors for Reuters and writes about supply chains. "
            "Award-winning reporter with ten years of experience."
        ),
        social_profiles=[
            SocialProfile(platform="twitter", handle="@mlopez", url="https://twitter.com/mlopez"),
            SocialProfile(platform="linkedin", handle="marialopez", url="https://linkedin.com/in/marialopez"),
        ],
    )
    fields.update(overrides)
    return ExtractedContact(**fields)


def test_complete_contact_scores_higher_than_sparse_contact():
    scorer = ConfidenceScorer()
    context = context_from(_page(), _assessment())

    full = scorer.confidence(_full_contact(), context)
    sparse = scorer.confidence(ExtractedContact(id="c2", name="Jo"), context)

    assert 0.0 <= sparse.score < full.score <= 1.0
    assert full.score > 0.6
    assert full.factors["email_presence"] == 1.0
    assert set(full.factors) == {
        "name_clarity",
        "email_presence",
        "title_relevance",
        "bio_completeness",
        "social_verification",
        "source_authority",
    }


def test_score_returns_updated_copy_without_mutating_input():
    contact = _full_contact()

    scored = ConfidenceScorer().score(contact, _page(), _assessment())

    assert contact.confidence_score == 0.0
    assert contact.metadata.confidence_factors == {}
    assert scored is not contact
    assert 0.0 < scored.confidence_score <= 1.0
    assert 0.0 < scored.quality_score <= 1.0
    assert 0.0 < scored.relevance_score <= 1.0
    assert scored.metadata.confidence_factors["overall"] == scored.confidence_score
    assert scored.metadata.quality_factors["overall"] == scored.quality_score


def test_missing_assessment_uses_neutral_context():
    context = context_from(_page(), None)

    assert context.source_credibility == 0.5
    assert context.content_freshness == 0.5
    assert context.consistency_score == 0.8


def test_relevance_boosted_by_matching_target_criteria():
    scorer = ConfidenceScorer()
    contact = _full_contact(bio="Maria Lopez covers technology policy.")

    plain = scorer.relevance(contact, _page())
    targeted = scorer.relevance(contact, _page(), TargetCriteria(beats=["technology"], languages=["en"]))

    assert targeted == pytest.approx(min(plain + 0.15, 1.0))


def test_verification_status_maps_to_quality_factor():
    scorer = ConfidenceScorer()
    context = context_from(_page(), _assessment())

    confirmed = scorer.quality(_full_contact(verification_status=VerificationStatus.CONFIRMED), context)
    rejected = scorer.quality(_full_contact(verification_status=VerificationStatus.REJECTED), context)

    assert confirmed.factors["verification_status"] == 1.0
    assert rejected.factors["verification_status"] == 0.1
    assert confirmed.score > rejected.score


def test_weak_source_signals_are_floored():
    weak = ContentQualityAssessment(
        url=_page().url,
        credibility=0.1,
        relevance=0.5,
        freshness=0.2,
        authority=0.3,
        spam_score=0.0,
        contact_info_richness=0.0,
        overall_score=0.3,
        factors={"information_consistency": 0.1},
    )

    result = ConfidenceScorer().quality(_full_contact(), context_from(_page(), weak))

    assert result.factors["source_credibility"] == 0.3
    assert result.factors["content_freshness"] == 0.3
    assert result.factors["information_consistency"] == 0.3
    assert "Review and reconcile conflicting information" in result.improvement_suggestions


def test_generic_mailbox_scores_below_personal_address():
    scorer = ConfidenceScorer()
    context = context_from(_page(), _assessment())

    personal = scorer.confidence(_full_contact(), context)
    generic = scorer.confidence(_full_contact(email="newsroom@reuters.com"), context)

    assert generic.factors["email_presence"] < personal.factors["email_presence"]


def test_score_many_skips_contacts_that_fail():
    broken = _full_contact(id="broken", title=123)
    failures = []

    scored = ConfidenceScorer().score_many(
        [(_full_contact(), _page(), _assessment()), (broken, _page(), None)],
        failures=failures,
    )

    assert [c.id for c in scored] == ["c1"]
    assert [f.item for f in failures] == ["broken"]
