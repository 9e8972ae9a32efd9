"""JSON parser for pipeline batch snapshots.

A snapshot bundles everything one pipeline run needs: fetched pages, the
contacts extracted from each page, per-contact byline histories and an
optional targeting block. Keys are camelCase, matching what the upstream
fetcher and extractor emit.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any

from ..core.types import (
    Byline,
    ContactInfo,
    ContentMetadata,
    ExtractedContact,
    ExtractionMethod,
    OutletHistory,
    ParsedContent,
    PipelineInput,
    SocialProfile,
    SourceBatch,
    TargetCriteria,
    VerificationStatus,
)
from ..errors import InputError

logger = logging.getLogger(__name__)


def load_snapshot(path: Path) -> PipelineInput:
    """Read and parse a snapshot file.

    Raises:
        InputError: If the file cannot be read or is not valid JSON
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InputError(f"Could not read snapshot {path}: {exc}", {"path": str(path)}) from exc
    if not isinstance(raw, dict):
        raise InputError(f"Snapshot {path} must contain a JSON object", {"path": str(path)})
    return parse_snapshot(raw)


def parse_snapshot(data: dict[str, Any]) -> PipelineInput:
    """Parse a snapshot dictionary into a PipelineInput.

    The snapshot structure:
        {
            "now": "2026-03-01T12:00:00Z",
            "targetCriteria": {"beats": ["technology"], "outlets": [], "languages": ["en"]},
            "sources": [
                {
                    "content": {
                        "url": "https://www.reuters.com/technology/chips",
                        "title": "Chip makers race to expand capacity",
                        "author": "Maria Lopez",
                        "content": "Plain-text body ...",
                        "publishedAt": "2026-02-27T09:00:00Z",
                        "language": "en",
                        "links": [], "images": [],
                        "metadata": {"wordCount": 412, "readingTime": 2, "domain": "reuters.com"}
                    },
                    "contacts": [
                        {"id": "c1", "name": "Maria Lopez", "email": "maria.lopez@reuters.com", ...}
                    ]
                }
            ],
            "bylineHistories": {
                "c1": [{"outletId": "o1", "outletName": "Reuters", "outletDomain": "reuters.com",
                        "bylines": [{"title": "...", "url": "...", "publishedAt": "...", "beats": []}]}]
            }
        }

    Sources without a url, contacts without an id or name and any item
    with a malformed field are skipped with a warning; the rest of the
    batch is kept. Unparseable timestamps are dropped with a warning.

    Raises:
        InputError: If the snapshot has no 'sources' list
    """
    sources_raw = data.get("sources")
    if not isinstance(sources_raw, list):
        raise InputError("Invalid snapshot format: missing 'sources' list")

    sources: list[SourceBatch] = []
    for index, item in enumerate(sources_raw):
        content_raw = item.get("content") if isinstance(item, dict) else None
        if not isinstance(content_raw, dict) or not content_raw.get("url"):
            logger.warning(f"Skipping source {index}: missing content url")
            continue
        try:
            content = _parse_content(content_raw)
        except (TypeError, ValueError) as exc:
            logger.warning(f"Skipping source {index}: malformed content ({exc})")
            continue
        contacts = []
        contacts_raw = item.get("contacts") or []
        if not isinstance(contacts_raw, list):
            logger.warning(f"Ignoring contacts of source {index}: expected a list")
            contacts_raw = []
        for contact_raw in contacts_raw:
            try:
                contact = _parse_contact(contact_raw, content.url)
            except (TypeError, ValueError) as exc:
                logger.warning(f"Skipping contact {contact_raw.get('id', 'unknown')}: malformed field ({exc})")
                continue
            if contact is not None:
                contacts.append(contact)
        sources.append(SourceBatch(content=content, contacts=contacts))

    histories: dict[str, list[OutletHistory]] = {}
    histories_raw = data.get("bylineHistories") or {}
    if not isinstance(histories_raw, dict):
        logger.warning("Ignoring bylineHistories: expected an object keyed by contact id")
        histories_raw = {}
    for contact_id, outlets_raw in histories_raw.items():
        if not isinstance(outlets_raw, list):
            logger.warning(f"Ignoring byline history for {contact_id}: expected a list")
            continue
        outlets = []
        for raw in outlets_raw:
            try:
                outlet = _parse_outlet(raw)
            except (TypeError, ValueError) as exc:
                logger.warning(f"Skipping outlet history for {contact_id}: malformed field ({exc})")
                continue
            if outlet is not None:
                outlets.append(outlet)
        histories[str(contact_id)] = outlets

    criteria = None
    criteria_raw = data.get("targetCriteria")
    if isinstance(criteria_raw, dict):
        criteria = TargetCriteria(
            beats=list(criteria_raw.get("beats") or []),
            outlets=list(criteria_raw.get("outlets") or []),
            languages=list(criteria_raw.get("languages") or []),
        )

    return PipelineInput(
        sources=sources,
        byline_histories=histories,
        target_criteria=criteria,
        now=_optional_datetime(data.get("now"), "now"),
    )


def parse_iso8601(value: str) -> datetime:
    """Parse an ISO 8601 timestamp string into a timezone-aware datetime."""
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_datetime(value: Any, field_name: str) -> datetime | None:
    if not value:
        return None
    try:
        return parse_iso8601(str(value))
    except ValueError:
        logger.warning(f"Ignoring unparseable {field_name} timestamp: {value!r}")
        return None


def _parse_content(raw: dict[str, Any]) -> ParsedContent:
    meta = raw.get("metadata") or {}
    return ParsedContent(
        url=str(raw["url"]),
        content=str(raw.get("content") or ""),
        title=raw.get("title") or None,
        author=raw.get("author") or None,
        published_at=_optional_datetime(raw.get("publishedAt"), "publishedAt"),
        language=raw.get("language") or None,
        links=list(raw.get("links") or []),
        images=list(raw.get("images") or []),
        metadata=ContentMetadata(
            word_count=int(meta.get("wordCount") or 0),
            reading_time=float(meta.get("readingTime") or 0),
            domain=str(meta.get("domain") or ""),
        ),
    )


def _parse_contact(raw: Any, source_url: str) -> ExtractedContact | None:
    if not isinstance(raw, dict) or not raw.get("id") or not raw.get("name"):
        contact_id = raw.get("id", "unknown") if isinstance(raw, dict) else "unknown"
        logger.warning(f"Skipping contact {contact_id}: missing required fields (id or name)")
        return None

    info_raw = raw.get("contactInfo")
    contact_info = None
    if isinstance(info_raw, dict):
        contact_info = ContactInfo(
            phone=info_raw.get("phone"),
            location=info_raw.get("location"),
            languages=list(info_raw.get("languages") or []),
            beats=list(info_raw.get("beats") or []),
            outlets=list(info_raw.get("outlets") or []),
        )

    return ExtractedContact(
        id=str(raw["id"]),
        name=str(raw["name"]),
        source_url=str(raw.get("sourceUrl") or source_url),
        extraction_id=str(raw.get("extractionId") or ""),
        search_id=str(raw.get("searchId") or ""),
        title=raw.get("title") or None,
        email=raw.get("email") or None,
        bio=raw.get("bio") or None,
        social_profiles=[_parse_social(p) for p in raw.get("socialProfiles") or [] if isinstance(p, dict)],
        confidence_score=float(raw.get("confidenceScore") or 0.0),
        relevance_score=float(raw.get("relevanceScore") or 0.0),
        quality_score=float(raw.get("qualityScore") or 0.0),
        extraction_method=_enum(ExtractionMethod, raw.get("extractionMethod"), ExtractionMethod.AI_BASED),
        verification_status=_enum(
            VerificationStatus, raw.get("verificationStatus"), VerificationStatus.PENDING
        ),
        contact_info=contact_info,
        created_at=_optional_datetime(raw.get("createdAt"), "createdAt"),
    )


def _parse_social(raw: dict[str, Any]) -> SocialProfile:
    return SocialProfile(
        platform=str(raw.get("platform") or ""),
        handle=str(raw.get("handle") or ""),
        url=str(raw.get("url") or ""),
        verified=bool(raw.get("verified", False)),
        followers=int(raw.get("followers") or 0),
        description=raw.get("description") or None,
    )


def _parse_outlet(raw: Any) -> OutletHistory | None:
    if not isinstance(raw, dict) or not raw.get("outletId"):
        logger.warning("Skipping outlet history without outletId")
        return None
    bylines = []
    for item in raw.get("bylines") or []:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object byline in outlet {raw['outletId']}")
            continue
        published = _optional_datetime(item.get("publishedAt"), "byline publishedAt")
        if published is None:
            continue
        try:
            beats = [str(beat) for beat in item.get("beats") or []]
        except TypeError:
            logger.warning(f"Ignoring malformed beats on byline {item.get('url')!r}")
            beats = []
        bylines.append(
            Byline(
                title=str(item.get("title") or ""),
                url=str(item.get("url") or ""),
                published_at=published,
                beats=beats,
            )
        )
    return OutletHistory(
        outlet_id=str(raw["outletId"]),
        outlet_name=str(raw.get("outletName") or ""),
        outlet_domain=str(raw.get("outletDomain") or ""),
        bylines=bylines,
    )


def _enum(enum_cls, value: Any, default):
    if value is None:
        return default
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        logger.warning(f"Unknown {enum_cls.__name__} {value!r}; using {default.value}")
        return default
