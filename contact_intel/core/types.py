"""
Core data types for the contact intelligence pipeline.

This module defines the records that flow between the pipeline stages:
- ParsedContent: A fetched web page, produced by an external fetcher
- ContentQualityAssessment: Credibility/relevance/spam assessment of a page
- ExtractedContact: A provisional contact record and its scores
- SimilarityResult / DuplicateGroup / DetectionResult: Deduplication output
- OutletHistory / OutletAssociation / FreelancerProfile: Outlet relationships
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ExtractionMethod(str, Enum):
    AI_BASED = "AI_BASED"
    RULE_BASED = "RULE_BASED"
    HYBRID = "HYBRID"
    MANUAL = "MANUAL"


class VerificationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    MANUAL_REVIEW = "MANUAL_REVIEW"
    REJECTED = "REJECTED"


class DuplicateType(str, Enum):
    EMAIL = "EMAIL"
    NAME = "NAME"
    OUTLET = "OUTLET"
    COMBINED = "COMBINED"


@dataclass
class ContentMetadata:
    """Fetcher-supplied metadata about a page.

    Attributes:
        word_count: Number of words in the plain-text body
        reading_time: Estimated reading time in minutes
        domain: Host name the page was served from
    """

    word_count: int = 0
    reading_time: float = 0
    domain: str = ""


@dataclass
class ParsedContent:
    """A fetched web page, consumed read-only by the assessor and scorer.

    Attributes:
        url: Canonical page URL
        content: Plain-text body
        title: Page headline, if known
        author: Byline author, if known
        published_at: Publication timestamp, if known
        language: ISO language code reported by the fetcher
        links: Outbound link URLs
        images: Image URLs
        metadata: Word count, reading time and domain
    """

    url: str
    content: str
    title: str | None = None
    author: str | None = None
    published_at: datetime | None = None
    language: str | None = None
    links: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    metadata: ContentMetadata = field(default_factory=ContentMetadata)


@dataclass
class ContentQualityAssessment:
    """Quality assessment of a single ParsedContent. Never mutated once built."""

    url: str
    credibility: float
    relevance: float
    freshness: float
    authority: float
    spam_score: float
    contact_info_richness: float
    overall_score: float
    content_length: int = 0
    language: str = "unknown"
    has_contact_info: bool = False
    is_journalistic: bool = False
    factors: dict[str, float] = field(default_factory=dict)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class SocialProfile:
    platform: str
    handle: str
    url: str = ""
    verified: bool = False
    followers: int = 0
    description: str | None = None


@dataclass
class ContactInfo:
    """Optional extra details an extractor may attach to a contact."""

    phone: str | None = None
    location: str | None = None
    languages: list[str] = field(default_factory=list)
    beats: list[str] = field(default_factory=list)
    outlets: list[str] = field(default_factory=list)


@dataclass
class ExtractionMetadata:
    """Scoring and merge bookkeeping attached to a contact.

    Attributes:
        confidence_factors: Named confidence sub-scores from the scorer
        quality_factors: Named quality sub-scores from the scorer
        duplicate_group_id: Group the record was merged from, if any
        merged_from: Contact ids folded into this record
        merge_reasoning: Human-readable reason for the merge
    """

    confidence_factors: dict[str, float] = field(default_factory=dict)
    quality_factors: dict[str, float] = field(default_factory=dict)
    duplicate_group_id: str | None = None
    merged_from: list[str] = field(default_factory=list)
    merge_reasoning: str | None = None


@dataclass
class ExtractedContact:
    """A provisional contact record produced by an external extractor.

    Scores are filled in by the ConfidenceScorer; ``is_duplicate`` and
    ``duplicate_of`` are set by the DuplicateDetector. Both stages return
    updated copies rather than mutating the caller's records.
    """

    id: str
    name: str
    source_url: str = ""
    extraction_id: str = ""
    search_id: str = ""
    title: str | None = None
    email: str | None = None
    bio: str | None = None
    social_profiles: list[SocialProfile] = field(default_factory=list)
    confidence_score: float = 0.0
    relevance_score: float = 0.0
    quality_score: float = 0.0
    extraction_method: ExtractionMethod = ExtractionMethod.AI_BASED
    verification_status: VerificationStatus = VerificationStatus.PENDING
    is_duplicate: bool = False
    duplicate_of: str | None = None
    contact_info: ContactInfo | None = None
    metadata: ExtractionMetadata = field(default_factory=ExtractionMetadata)
    created_at: datetime | None = None


@dataclass
class ScoringContext:
    """Assessment context the scorer needs for one contact."""

    content: ParsedContent
    source_credibility: float = 0.5
    content_freshness: float = 0.5
    consistency_score: float = 0.8


@dataclass
class TargetCriteria:
    """Caller-supplied targeting used to boost relevance."""

    beats: list[str] = field(default_factory=list)
    outlets: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)


@dataclass
class ConfidenceResult:
    score: float
    factors: dict[str, float]
    reasoning: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class QualityResult:
    score: float
    factors: dict[str, float]
    reasoning: list[str] = field(default_factory=list)
    improvement_suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SimilarityResult:
    """Pairwise similarity between two contacts; symmetric by construction."""

    overall: float
    email: float
    name: float
    title: float
    outlet: float
    bio: float = 0.0
    social: float = 0.0


@dataclass(frozen=True)
class DuplicateGroup:
    """A cluster of contacts that refer to the same person.

    Attributes:
        id: Stable id derived from the member ids
        contacts: Member contact ids, best candidate first
        similarity_score: Mean overall similarity of the linked member pairs
        duplicate_type: Strongest signal that linked the members
        confidence_score: Confidence score of the selected contact
        selected_contact: Id of the member used as the merge base
        reasoning: Human-readable explanation
    """

    id: str
    contacts: tuple[str, ...]
    similarity_score: float
    duplicate_type: DuplicateType
    confidence_score: float
    selected_contact: str
    reasoning: str


@dataclass
class DetectionResult:
    unique_contacts: list[ExtractedContact]
    duplicate_groups: list[DuplicateGroup]
    duplicate_contacts: list[ExtractedContact] = field(default_factory=list)
    total_duplicates: int = 0
    duplicate_rate: float = 0.0


@dataclass
class Byline:
    title: str
    url: str
    published_at: datetime
    beats: list[str] = field(default_factory=list)


@dataclass
class OutletHistory:
    """Byline history of one contact at one outlet, supplied by the extractor."""

    outlet_id: str
    outlet_name: str
    outlet_domain: str
    bylines: list[Byline] = field(default_factory=list)


@dataclass
class BylineBatch:
    """Fresh byline data for one outlet, used to refresh a stored profile."""

    outlet_id: str
    bylines: list[Byline] = field(default_factory=list)


@dataclass
class Evidence:
    type: str
    source: str
    content: str
    timestamp: datetime
    confidence: float


@dataclass
class OutletAssociation:
    """Relationship between a contact and one outlet.

    Attributes:
        relationship: staff, freelancer, contributor, stringer or unknown
        confidence: Strength of the relationship evidence in [0, 1]
        recency_score: Recency-weighted strength in [0, 1]
        activity_level: high, medium or low
        last_byline: Most recent byline timestamp, if any
        total_bylines: All bylines at the outlet
        recent_bylines: Bylines inside the recent window (90 days)
        average_frequency: Articles per month over the trailing year
        beats: Distinct beats seen in the bylines
        evidence: Signals that support the relationship label
    """

    outlet_id: str
    outlet_name: str
    outlet_domain: str
    relationship: str = "unknown"
    confidence: float = 0.0
    recency_score: float = 0.0
    activity_level: str = "low"
    last_byline: datetime | None = None
    total_bylines: int = 0
    recent_bylines: int = 0
    average_frequency: float = 0.0
    beats: list[str] = field(default_factory=list)
    evidence: list[Evidence] = field(default_factory=list)


@dataclass
class ActivitySummary:
    total_outlets: int = 0
    active_outlets: int = 0
    primary_outlet_score: float = 0.0
    diversity_index: float = 0.0
    recency_pattern: str = "consistent"
    last_activity: datetime | None = None


@dataclass
class ContactStrategy:
    preferred_outlet: str = "Unknown"
    contact_timing: str = "immediate"
    pitch_approach: str = "outlet_specific"
    notes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class FreelancerProfile:
    """Staff/freelancer classification and outlet strategy for one contact.

    Rebuildable from the contact and its byline histories at any time.
    """

    contact_id: str
    name: str
    email: str | None
    is_freelancer: bool
    confidence: float
    outlets: list[OutletAssociation] = field(default_factory=list)
    primary_outlet: OutletAssociation | None = None
    recent_activity: ActivitySummary = field(default_factory=ActivitySummary)
    contact_strategy: ContactStrategy = field(default_factory=ContactStrategy)
    reasoning: str = ""


@dataclass
class SourceBatch:
    """One fetched page plus the contacts extracted from it."""

    content: ParsedContent
    contacts: list[ExtractedContact] = field(default_factory=list)


@dataclass
class PipelineInput:
    """A complete batch snapshot handed to the pipeline by its caller."""

    sources: list[SourceBatch] = field(default_factory=list)
    byline_histories: dict[str, list[OutletHistory]] = field(default_factory=dict)
    target_criteria: TargetCriteria | None = None
    now: datetime | None = None


@dataclass
class PipelineResult:
    """Everything the pipeline produced for one batch.

    Attributes:
        assessments: One assessment per successfully assessed source
        contacts: Canonical, de-duplicated contacts
        duplicates: Non-selected duplicate members, flagged as duplicates
        duplicate_groups: Groups found by the detector
        profiles: Freelancer profiles keyed by canonical contact id
        statistics: Aggregated assessment and extraction metrics
        failures: Items that failed and were skipped
    """

    assessments: list[ContentQualityAssessment] = field(default_factory=list)
    contacts: list[ExtractedContact] = field(default_factory=list)
    duplicates: list[ExtractedContact] = field(default_factory=list)
    duplicate_groups: list[DuplicateGroup] = field(default_factory=list)
    profiles: dict[str, FreelancerProfile] = field(default_factory=dict)
    statistics: dict[str, Any] = field(default_factory=dict)
    failures: list[dict[str, Any]] = field(default_factory=list)
