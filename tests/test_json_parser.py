"""Tests for batch snapshot parsing."""

import copy
from datetime import datetime, timezone
import json
from pathlib import Path

import pytest

from contact_intel.core.types import ExtractionMethod, VerificationStatus
from contact_intel.errors import InputError
from contact_intel.input.json_parser import load_snapshot, parse_iso8601, parse_snapshot


def _snapshot() -> dict:
    return {
        "now": "2026-03-01T12:00:00Z",
        "targetCriteria": {"beats": ["technology"], "languages": ["en"]},
        "sources": [
            {
                "content": {
                    "url": "https://www.reuters.com/technology/chip-capacity",
                    "title": "Chip makers race to expand capacity",
                    "author": "Maria Lopez",
                    "content": "By Maria Lopez. Chip makers are expanding capacity.",
                    "publishedAt": "2026-02-27T09:00:00+00:00",
                    "language": "en",
                    "metadata": {"wordCount": 412, "readingTime": 2, "domain": "reuters.com"},
                },
                "contacts": [
                    {
                        "id": "c1",
                        "name": "Maria Lopez",
                        "email": "maria.lopez@reuters.com",
                        "extractionMethod": "hybrid",
                        "verificationStatus": "CONFIRMED",
                        "socialProfiles": [{"platform": "twitter", "handle": "@mlopez", "followers": 5200}],
                        "contactInfo": {"languages": ["en", "es"], "beats": ["technology"]},
                        "createdAt": "2026-02-28T08:00:00Z",
                    },
                    {"id": "c2"},
                    {"name": "No Identifier"},
                ],
            },
            {"content": {"title": "No url here"}, "contacts": []},
        ],
        "bylineHistories": {
            "c1": [
                {
                    "outletId": "o1",
                    "outletName": "Reuters",
                    "outletDomain": "reuters.com",
                    "bylines": [
                        {"title": "Foundry output", "url": "https://www.reuters.com/a", "publishedAt": "2026-02-20T10:00:00Z"},
                        {"title": "Undated", "url": "https://www.reuters.com/b", "publishedAt": "yesterday"},
                    ],
                },
                {"outletName": "Missing id"},
            ]
        },
    }


def test_parse_snapshot_reads_sources_contacts_and_histories():
    batch = parse_snapshot(_snapshot())

    assert batch.now == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert batch.target_criteria.beats == ["technology"]
    assert len(batch.sources) == 1

    source = batch.sources[0]
    assert source.content.metadata.word_count == 412
    assert source.content.published_at == datetime(2026, 2, 27, 9, 0, tzinfo=timezone.utc)

    assert [c.id for c in source.contacts] == ["c1"]
    contact = source.contacts[0]
    assert contact.source_url == "https://www.reuters.com/technology/chip-capacity"
    assert contact.extraction_method is ExtractionMethod.HYBRID
    assert contact.verification_status is VerificationStatus.CONFIRMED
    assert contact.social_profiles[0].followers == 5200
    assert contact.contact_info.languages == ["en", "es"]

    outlets = batch.byline_histories["c1"]
    assert [o.outlet_id for o in outlets] == ["o1"]
    assert [b.title for b in outlets[0].bylines] == ["Foundry output"]


def test_parse_snapshot_requires_sources_list():
    with pytest.raises(InputError):
        parse_snapshot({"bylineHistories": {}})


def test_unknown_enum_values_fall_back_to_defaults():
    data = _snapshot()
    data["sources"][0]["contacts"][0]["extractionMethod"] = "crowdsourced"
    data["sources"][0]["contacts"][0]["verificationStatus"] = None

    contact = parse_snapshot(data).sources[0].contacts[0]

    assert contact.extraction_method is ExtractionMethod.AI_BASED
    assert contact.verification_status is VerificationStatus.PENDING


def test_load_snapshot_from_file(tmp_path: Path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(_snapshot()), encoding="utf-8")

    batch = load_snapshot(path)

    assert len(batch.sources) == 1


def test_load_snapshot_rejects_invalid_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(InputError):
        load_snapshot(path)
    with pytest.raises(InputError):
        load_snapshot(tmp_path / "missing.json")


def test_parse_iso8601_accepts_zulu_and_naive():
    assert parse_iso8601("2026-02-08T21:59:59Z") == datetime(2026, 2, 8, 21, 59, 59, tzinfo=timezone.utc)
    assert parse_iso8601("2026-02-08T21:59:59").tzinfo is not None


def test_malformed_word_count_skips_only_that_source():
    data = _snapshot()
    bad = copy.deepcopy(data["sources"][0])
    bad["content"]["url"] = "https://www.reuters.com/technology/other"
    bad["content"]["metadata"] = {"wordCount": "n/a"}
    data["sources"].insert(0, bad)

    batch = parse_snapshot(data)

    assert [s.content.url for s in batch.sources] == ["https://www.reuters.com/technology/chip-capacity"]
    assert [c.id for c in batch.sources[0].contacts] == ["c1"]


def test_malformed_confidence_score_skips_only_that_contact():
    data = _snapshot()
    data["sources"][0]["contacts"].append({"id": "c9", "name": "Lena Park", "confidenceScore": "high"})

    batch = parse_snapshot(data)

    assert [c.id for c in batch.sources[0].contacts] == ["c1"]


def test_non_object_byline_is_skipped_and_outlet_kept():
    data = _snapshot()
    data["bylineHistories"]["c1"][0]["bylines"].insert(0, "oops")

    outlets = parse_snapshot(data).byline_histories["c1"]

    assert [o.outlet_id for o in outlets] == ["o1"]
    assert [b.title for b in outlets[0].bylines] == ["Foundry output"]
