"""Tests for duplicate detection and merging."""

from datetime import datetime, timezone

import pytest

from contact_intel.analyzers.duplicate_detector import (
    DuplicateDetector,
    email_similarity,
    normalize_email,
)
from contact_intel.config import DedupConfig
from contact_intel.core.types import (
    ContactInfo,
    DuplicateGroup,
    DuplicateType,
    ExtractedContact,
    SocialProfile,
)
from contact_intel.errors import InputError


def _contact(contact_id: str, name: str, **fields) -> ExtractedContact:
    return ExtractedContact(id=contact_id, name=name, **fields)


def test_email_variants_are_the_same_address():
    a = _contact("a", "John Doe", email="j.doe@nyt.com", confidence_score=0.8)
    b = _contact("b", "Johnny Doe", email="jdoe@nyt.com", confidence_score=0.7)
    detector = DuplicateDetector()

    sim = detector.similarity(a, b)
    result = detector.detect([a, b])

    assert sim.email == 1.0
    assert detector.classify(sim) is DuplicateType.EMAIL
    assert len(result.duplicate_groups) == 1
    group = result.duplicate_groups[0]
    assert group.duplicate_type is DuplicateType.EMAIL
    assert group.contacts == ("a", "b")
    assert group.selected_contact == "a"
    assert group.id.startswith("dup_")


def test_email_normalization_ignores_case_and_plus_tags():
    assert normalize_email("Maria.Lopez+press@Reuters.com") == "marialopez@reuters.com"
    assert email_similarity("Maria.Lopez+press@Reuters.com", "marialopez@reuters.com") == 1.0
    assert email_similarity("maria@reuters.com", "mario@reuters.com") == 0.0


def test_similarity_is_symmetric():
    detector = DuplicateDetector()
    contacts = [
        _contact("a", "Dr. William Clinton", email="bill@cnn.com", title="Political Reporter",
                 source_url="https://edition.cnn.com/politics/a"),
        _contact("b", "Bill Clinton", title="Politics Reporter", source_url="https://cnn.com/b",
                 bio="Covers the White House and Congress for CNN."),
        _contact("c", "Hannah Osei", email="hosei@bbc.co.uk", source_url="https://www.bbc.com/news/c",
                 social_profiles=[SocialProfile(platform="twitter", handle="@hosei")]),
    ]

    for x in contacts:
        for y in contacts:
            assert detector.similarity(x, y) == detector.similarity(y, x)


def test_name_variants():
    detector = DuplicateDetector()

    assert detector.name_similarity("Bill Clinton", "William Clinton") == 0.85
    assert detector.name_similarity("John A. Smith", "John Smith") == 0.9
    assert detector.name_similarity("J. Smith", "John Smith") == 0.85
    assert detector.name_similarity("Smith John", "John Smith") == 0.95
    assert detector.name_similarity("Mr. John Smith Jr.", "john smith") == 1.0


def test_outlet_aliases_and_subdomains():
    detector = DuplicateDetector()

    assert detector.outlet_similarity("nytimes.com", "nyt.com") == 0.95
    assert detector.outlet_similarity("www.reuters.com", "reuters.com") == 1.0
    assert detector.outlet_similarity("edition.cnn.com", "cnn.com") == 0.95
    assert detector.outlet_similarity("uk.theguardian.com", "theguardian.com") == 0.9
    assert detector.outlet_similarity("reuters.com", "apnews.com") == 0.0


def test_merge_backfills_missing_fields_without_overwriting():
    base = _contact(
        "a",
        "Maria Lopez",
        email="maria.lopez@reuters.com",
        title="Technology Correspondent",
        confidence_score=0.9,
        social_profiles=[SocialProfile(platform="twitter", handle="@mlopez")],
    )
    donor = _contact(
        "b",
        "Maria Lopez",
        email="marialopez@reuters.com",
        title="Reporter",
        bio="Covers semiconductors.",
        confidence_score=0.6,
        contact_info=ContactInfo(location="Taipei"),
        social_profiles=[
            SocialProfile(platform="Twitter", handle="mlopez", verified=True),
            SocialProfile(platform="linkedin", handle="marialopez"),
        ],
    )
    detector = DuplicateDetector()
    group = detector.detect([donor, base]).duplicate_groups[0]

    merged = detector.merge(group, [donor, base])

    assert merged.id == "a"
    assert merged.email == "maria.lopez@reuters.com"
    assert merged.title == "Technology Correspondent"
    assert merged.bio == "Covers semiconductors."
    assert merged.contact_info.location == "Taipei"
    assert len(merged.social_profiles) == 2
    twitter = [p for p in merged.social_profiles if p.platform.lower() == "twitter"]
    assert twitter[0].verified
    assert merged.metadata.merged_from == ["a", "b"]
    assert merged.metadata.duplicate_group_id == group.id
    assert base.bio is None


def test_merge_requires_at_least_one_member():
    group = DuplicateGroup(
        id="dup_000000000000",
        contacts=("x", "y"),
        similarity_score=0.9,
        duplicate_type=DuplicateType.EMAIL,
        confidence_score=0.5,
        selected_contact="x",
        reasoning="",
    )

    with pytest.raises(InputError):
        DuplicateDetector().merge(group, [_contact("a", "Maria Lopez")])


def test_duplicate_rate_counts_non_selected_members():
    a = _contact("a", "John Doe", email="j.doe@nyt.com", confidence_score=0.9)
    b = _contact("b", "John Doe", email="jdoe@nyt.com", confidence_score=0.5)
    c = _contact("c", "Hannah Osei", email="hosei@bbc.co.uk", confidence_score=0.7)

    result = DuplicateDetector().detect([a, b, c])

    assert result.total_duplicates == 1
    assert result.duplicate_rate == pytest.approx(1 / 3)
    assert [u.id for u in result.unique_contacts] == ["a", "c"]
    assert len(result.duplicate_contacts) == 1
    assert result.duplicate_contacts[0].is_duplicate
    assert result.duplicate_contacts[0].duplicate_of == "a"
    assert not b.is_duplicate


def test_groups_are_closed_under_transitivity():
    a = _contact("a", "Dana W.", email="dana.whitfield@reuters.com",
                 source_url="https://www.reuters.com/world/a", confidence_score=0.9)
    b = _contact("b", "Dana Whitfield", email="danawhitfield@reuters.com", title="Health Reporter",
                 source_url="https://apnews.com/article/b", confidence_score=0.8)
    c = _contact("c", "Dana Whitfield", title="Health Reporter",
                 source_url="https://apnews.com/article/c", confidence_score=0.7)
    detector = DuplicateDetector()

    assert detector.classify(detector.similarity(a, c)) is None

    result = detector.detect([a, b, c])

    assert len(result.duplicate_groups) == 1
    group = result.duplicate_groups[0]
    assert set(group.contacts) == {"a", "b", "c"}
    assert group.duplicate_type is DuplicateType.EMAIL
    assert [u.id for u in result.unique_contacts] == ["a"]


def test_selection_prefers_confidence_then_earliest_created():
    early = _contact("z", "John Doe", email="jdoe@nyt.com", confidence_score=0.7,
                     created_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    late = _contact("a", "John Doe", email="j.doe@nyt.com", confidence_score=0.7,
                    created_at=datetime(2026, 2, 1, tzinfo=timezone.utc))

    group = DuplicateDetector().detect([late, early]).duplicate_groups[0]

    assert group.selected_contact == "z"


def test_blocking_still_finds_shared_key_duplicates():
    detector = DuplicateDetector(DedupConfig(blocking_min_size=0))
    a = _contact("a", "John Doe", email="j.doe@nyt.com")
    b = _contact("b", "Someone Else", email="jdoe@nyt.com")
    c = _contact("c", "Hannah Osei", email="hosei@bbc.co.uk")

    result = detector.detect([a, b, c])

    assert [g.contacts for g in result.duplicate_groups] == [("a", "b")]


def test_disabled_detection_passes_contacts_through():
    a = _contact("a", "John Doe", email="jdoe@nyt.com")
    b = _contact("b", "John Doe", email="jdoe@nyt.com")

    result = DuplicateDetector(DedupConfig(enabled=False)).detect([a, b])

    assert result.unique_contacts == [a, b]
    assert result.duplicate_groups == []
    assert result.duplicate_rate == 0.0
