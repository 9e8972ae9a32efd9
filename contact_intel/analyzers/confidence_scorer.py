"""
Confidence, quality and relevance scoring for extracted contacts.

Three independent, pure scoring operations over one contact plus the
assessment context of the page it came from:
- confidence: how much the contact's own fields can be trusted
- quality: how good the overall record is given its source
- relevance: how relevant the contact is to journalist outreach

``score`` runs all three and returns an updated copy of the contact.
"""

from __future__ import annotations

from dataclasses import replace
import logging
import re
from typing import Iterable

from ..config import ScoringConfig, validate_weights
from ..core.helpers import clamp, email_domain, round_score
from ..core.patterns import (
    BEAT_TERMS,
    BIO_CONTACT_TERMS,
    BIO_PROFESSIONAL_LANGUAGE,
    BIO_QUALITY_TERMS,
    CREDIBLE_EMAIL_DOMAIN_PATTERNS,
    CREDIBLE_PLATFORMS,
    DEFAULT_TABLES,
    EMAIL_FORMAT,
    GENERIC_MAILBOXES,
    MEDIA_OUTLET_NAMES,
    MEDIA_TERMS,
    NAME_SUSPICIOUS,
    NAME_TITLE_CONTAMINATION,
    NAME_UNREALISTIC,
    PROFESSIONAL_EMAIL_PATTERNS,
    PROFESSIONAL_ROLE_TERMS,
    RELEVANT_TITLE_TERMS,
    SENIORITY_TERMS,
    PatternTables,
    any_match,
)
from ..core.types import (
    ConfidenceResult,
    ContentQualityAssessment,
    ExtractedContact,
    ParsedContent,
    QualityResult,
    ScoringContext,
    SocialProfile,
    TargetCriteria,
)
from ..errors import BatchItemError, ContactIntelError, ScoringError
from ..logging_utils import log_item_failure


_BIO_OUTLET_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(name) for name in MEDIA_OUTLET_NAMES) + r")\b", re.IGNORECASE
)
_PERSONALIZED_LOCAL = re.compile(r"^([a-z]+\.[a-z]+|[a-z]+[0-9]|[a-z]{3,})")
_NAME_TOKEN = re.compile(r"[a-z]{2,}")

RELEVANCE_JOURNALIST_TERMS = (
    "journalist", "reporter", "editor", "author", "writer", "correspondent", "contributor",
)
RELEVANCE_OUTLET_TERMS = (
    "new york times", "washington post", "cnn", "bbc", "reuters", "associated press",
)


class ConfidenceScorer:
    """Score extracted contacts against their source context."""

    def __init__(
        self,
        cfg: ScoringConfig | None = None,
        tables: PatternTables | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg or ScoringConfig()
        self.tables = tables or DEFAULT_TABLES
        self.logger = logger or logging.getLogger(__name__)
        validate_weights(self.cfg.confidence_weights, "scoring.confidence_weights")
        validate_weights(self.cfg.quality_weights, "scoring.quality_weights")

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def confidence(self, contact: ExtractedContact, context: ScoringContext) -> ConfidenceResult:
        reasoning: list[str] = []
        recs: list[str] = []

        factors = {
            "name_clarity": self._name_confidence(contact.name, contact.email, reasoning, recs),
            "email_presence": self._email_confidence(contact.email, reasoning, recs),
            "title_relevance": self._title_confidence(contact.title, reasoning, recs),
            "bio_completeness": self._bio_confidence(contact.bio, reasoning, recs),
            "social_verification": self._social_confidence(contact.social_profiles, reasoning, recs),
            "source_authority": self._source_authority(context.source_credibility, reasoning),
        }
        score = _weighted(factors, self.cfg.confidence_weights)

        if score >= 0.8:
            reasoning.append("High confidence contact with complete information")
        elif score >= 0.6:
            reasoning.append("Medium confidence contact with some verification")
        else:
            reasoning.append("Lower confidence contact, needs additional verification")

        return ConfidenceResult(score=score, factors=factors, reasoning=reasoning, recommendations=recs)

    def quality(self, contact: ExtractedContact, context: ScoringContext) -> QualityResult:
        reasoning: list[str] = []
        suggestions: list[str] = []

        factors = {
            "source_credibility": _floor_below(
                context.source_credibility, 0.6, reasoning,
                ("Highly credible source", "Moderately credible source",
                 "Source credibility needs improvement"),
            ),
            "content_freshness": _floor_below(
                context.content_freshness, 0.5, reasoning,
                ("Recent content", "Moderately recent content", "Content may be outdated"),
            ),
            "information_consistency": _floor_below(
                context.consistency_score, 0.6, reasoning,
                ("Information is consistent", "Information is mostly consistent",
                 "Information consistency issues detected"),
            ),
            "contact_completeness": self._completeness(contact, reasoning, suggestions),
            "verification_status": self._verification_score(contact, reasoning, suggestions),
        }
        if factors["information_consistency"] < 0.6:
            suggestions.append("Review and reconcile conflicting information")

        score = _weighted(factors, self.cfg.quality_weights)

        if score >= 0.8:
            reasoning.append("High quality contact from authoritative source")
        elif score >= 0.6:
            reasoning.append("Good quality contact with moderate verification")
        else:
            reasoning.append("Quality concerns detected, needs review")

        return QualityResult(
            score=score, factors=factors, reasoning=reasoning, improvement_suggestions=suggestions
        )

    def relevance(
        self,
        contact: ExtractedContact,
        content: ParsedContent,
        criteria: TargetCriteria | None = None,
    ) -> float:
        score = 0.5

        body_lower = (content.content or "").lower()
        author_lower = (content.author or "").strip().lower()
        name_lower = (contact.name or "").strip().lower()
        bio_lower = (contact.bio or "").lower()
        title_lower = (contact.title or "").lower()
        contact_text = f"{name_lower} {title_lower} {bio_lower}"

        if any(term in contact_text for term in RELEVANCE_JOURNALIST_TERMS):
            score += 0.2
        if bio_lower and any(term in bio_lower for term in RELEVANCE_OUTLET_TERMS):
            score += 0.15
        if name_lower and (name_lower == author_lower or f"by {name_lower}" in body_lower):
            score += 0.15
        if contact.email and contact.email.lower() in body_lower:
            score += 0.1
        if title_lower and any(term in title_lower for term in RELEVANT_TITLE_TERMS):
            score += 0.1

        if criteria is not None:
            if criteria.beats and any(beat.lower() in bio_lower for beat in criteria.beats):
                score += 0.1
            if criteria.outlets:
                domain = (content.metadata.domain or "").lower()
                if any(
                    outlet.lower() in domain or outlet.lower() in bio_lower
                    for outlet in criteria.outlets
                ):
                    score += 0.1
            if criteria.languages:
                known = set(contact.contact_info.languages) if contact.contact_info else set()
                if any(lang == content.language or lang in known for lang in criteria.languages):
                    score += 0.05

        return round(clamp(score), 4)

    def score(
        self,
        contact: ExtractedContact,
        content: ParsedContent,
        assessment: ContentQualityAssessment | None = None,
        criteria: TargetCriteria | None = None,
    ) -> ExtractedContact:
        """Run all three scorers and return an updated copy of ``contact``.

        Raises:
            ScoringError: On any unexpected internal failure
        """
        try:
            context = context_from(content, assessment)
            conf = self.confidence(contact, context)
            qual = self.quality(contact, context)
            rel = self.relevance(contact, content, criteria)
        except ContactIntelError:
            raise
        except Exception as exc:
            contact_id = getattr(contact, "id", "") or ""
            raise ScoringError(f"Contact scoring failed: {exc}", contact_id, exc) from exc

        metadata = replace(
            contact.metadata,
            confidence_factors={**conf.factors, "overall": conf.score},
            quality_factors={**qual.factors, "overall": qual.score},
        )
        return replace(
            contact,
            confidence_score=conf.score,
            quality_score=qual.score,
            relevance_score=rel,
            metadata=metadata,
        )

    def score_many(
        self,
        items: Iterable[tuple[ExtractedContact, ParsedContent, ContentQualityAssessment | None]],
        criteria: TargetCriteria | None = None,
        failures: list[BatchItemError] | None = None,
    ) -> list[ExtractedContact]:
        """Score a batch of (contact, content, assessment) triples, skipping failures."""
        scored: list[ExtractedContact] = []
        for contact, content, assessment in items:
            try:
                scored.append(self.score(contact, content, assessment, criteria))
            except ScoringError as exc:
                error = BatchItemError(exc.contact_id, exc)
                log_item_failure(
                    self.logger,
                    "Scoring failed",
                    error,
                    event="scoring_failed",
                    contact_id=exc.contact_id,
                )
                if failures is not None:
                    failures.append(error)
        return scored

    # ------------------------------------------------------------------
    # Confidence factors
    # ------------------------------------------------------------------

    def _name_confidence(
        self, name: str | None, email: str | None, reasoning: list[str], recs: list[str]
    ) -> float:
        clean = (name or "").strip()
        if not clean:
            reasoning.append("Missing name")
            recs.append("Contact should have a valid name")
            return 0.0

        score = 0.0
        parts = clean.split()
        if len(parts) >= 2:
            score += 0.4
            reasoning.append("Complete name provided")
        else:
            score += 0.2
            reasoning.append("Single name provided")
            recs.append("Consider finding full name")

        if _is_realistic_name(clean):
            score += 0.3
            reasoning.append("Name format appears realistic")
        else:
            reasoning.append("Name format seems unusual")
            recs.append("Verify name authenticity")

        if any_match(NAME_TITLE_CONTAMINATION, clean):
            score -= 0.2
            reasoning.append("Name may contain title information")
            recs.append("Separate name from title")

        if any_match(NAME_SUSPICIOUS, clean):
            score -= 0.3
            reasoning.append("Name contains suspicious patterns")
            recs.append("Review name for authenticity")

        if 5 <= len(clean) <= 30:
            score += 0.1
            reasoning.append("Name length is appropriate")

        if email and "@" in email:
            local = email.split("@", 1)[0].lower()
            if any(token in local for token in _NAME_TOKEN.findall(clean.lower())):
                score += 0.1
                reasoning.append("Email matches contact name")

        return clamp(score)

    def _email_confidence(self, email: str | None, reasoning: list[str], recs: list[str]) -> float:
        if not email:
            reasoning.append("No email provided")
            recs.append("Add email address if available")
            return 0.0

        if not EMAIL_FORMAT.match(email.strip()):
            reasoning.append("Invalid email format")
            return 0.0

        score = 0.3
        reasoning.append("Valid email format")

        lowered = email.strip().lower()
        generic = _is_generic_email(lowered)
        if not generic and any_match(PROFESSIONAL_EMAIL_PATTERNS, lowered):
            score += 0.4
            reasoning.append("Professional email format")
        elif generic:
            score += 0.1
            reasoning.append("Generic email format")
            recs.append("Look for personal email alternative")

        domain = email_domain(lowered)
        if any_match(CREDIBLE_EMAIL_DOMAIN_PATTERNS, domain):
            score += 0.2
            reasoning.append("Email domain appears credible")
        elif any(marker in domain for marker in self.tables.disposable_email_markers):
            score -= 0.2
            reasoning.append("Email domain seems suspicious")
            recs.append("Verify email domain authenticity")

        if not generic and _PERSONALIZED_LOCAL.match(lowered.split("@", 1)[0]):
            score += 0.1
            reasoning.append("Email appears personalized")

        return clamp(score)

    @staticmethod
    def _title_confidence(title: str | None, reasoning: list[str], recs: list[str]) -> float:
        if not title:
            reasoning.append("No title provided")
            recs.append("Add professional title if available")
            return 0.0

        score = 0.0
        lowered = title.lower()

        matched = [term for term in PROFESSIONAL_ROLE_TERMS if term in lowered]
        if matched:
            score += 0.4
            reasoning.append(f"Professional title: {', '.join(matched)}")
        if any(term in lowered for term in MEDIA_TERMS):
            score += 0.2
            reasoning.append("Media-related title")
        if any(term in lowered for term in SENIORITY_TERMS):
            score += 0.1
            reasoning.append("Senior-level position indicated")
        if any(term in lowered for term in BEAT_TERMS):
            score += 0.1
            reasoning.append("Specific beat coverage indicated")

        if 10 <= len(title) <= 60:
            score += 0.1
            reasoning.append("Title length is appropriate")
        elif len(title) > 60:
            reasoning.append("Title is unusually long")
            recs.append("Verify title accuracy")

        return clamp(score)

    @staticmethod
    def _bio_confidence(bio: str | None, reasoning: list[str], recs: list[str]) -> float:
        if not bio:
            reasoning.append("No bio provided")
            recs.append("Add bio information if available")
            return 0.0

        score = 0.0
        if 50 <= len(bio) <= 300:
            score += 0.2
            reasoning.append("Bio length is appropriate")
        elif len(bio) < 30:
            reasoning.append("Bio is very short")
            recs.append("Expand bio information")
        elif len(bio) > 500:
            reasoning.append("Bio is unusually long")
            recs.append("Verify bio relevance")

        lowered = bio.lower()
        quality_hits = sum(1 for term in BIO_QUALITY_TERMS if term in lowered)
        if quality_hits >= 2:
            score += 0.3
            reasoning.append("Bio contains professional background information")
        elif quality_hits == 1:
            score += 0.15
            reasoning.append("Bio contains some professional information")

        if any(term in lowered for term in BIO_CONTACT_TERMS):
            score += 0.1
            reasoning.append("Bio includes contact information")

        outlets = _BIO_OUTLET_PATTERN.findall(bio)
        if outlets:
            score += 0.2
            reasoning.append(f"Bio mentions media outlets: {', '.join(outlets)}")

        if sum(1 for term in BIO_PROFESSIONAL_LANGUAGE if term in lowered) >= 2:
            score += 0.1
            reasoning.append("Bio uses professional language")

        return clamp(score)

    @staticmethod
    def _social_confidence(profiles: list[SocialProfile], reasoning: list[str], recs: list[str]) -> float:
        if not profiles:
            reasoning.append("No social media profiles provided")
            recs.append("Add social media profiles if available")
            return 0.0

        score = 0.2 if len(profiles) >= 2 else 0.1
        reasoning.append("Multiple social media profiles" if len(profiles) >= 2 else "Single social media profile")

        credible = [p for p in profiles if p.platform.lower() in CREDIBLE_PLATFORMS]
        if len(credible) >= 2:
            score += 0.3
            reasoning.append("Multiple credible platform profiles")
        elif credible:
            score += 0.15
            reasoning.append("Single credible platform profile")

        verified = sum(1 for p in profiles if p.verified)
        if verified:
            score += 0.2
            reasoning.append(f"Verified profiles: {verified}")

        followers = sum(p.followers or 0 for p in profiles)
        if followers > 10000:
            score += 0.1
            reasoning.append("Substantial follower count")
        elif followers > 1000:
            score += 0.05
            reasoning.append("Moderate follower count")

        if all(p.handle and p.url and p.description for p in profiles):
            score += 0.1
            reasoning.append("Complete profile information")

        return clamp(score)

    @staticmethod
    def _source_authority(credibility: float, reasoning: list[str]) -> float:
        if credibility >= 0.8:
            reasoning.append("Highly authoritative source")
        elif credibility >= 0.6:
            reasoning.append("Moderately authoritative source")
        else:
            reasoning.append("Source authority needs verification")
        return clamp(credibility)

    # ------------------------------------------------------------------
    # Quality factors
    # ------------------------------------------------------------------

    @staticmethod
    def _completeness(contact: ExtractedContact, reasoning: list[str], suggestions: list[str]) -> float:
        present = [
            bool((contact.name or "").strip()),
            bool((contact.email or "").strip()),
            bool((contact.title or "").strip()),
            bool((contact.bio or "").strip()),
            bool(contact.social_profiles),
        ]
        completeness = sum(present) / len(present)

        if completeness >= 0.8:
            reasoning.append("Contact information is complete")
        elif completeness >= 0.6:
            reasoning.append("Contact information is mostly complete")
        else:
            reasoning.append("Contact information is incomplete")
            suggestions.append("Add missing contact details")
        return completeness

    def _verification_score(
        self, contact: ExtractedContact, reasoning: list[str], suggestions: list[str]
    ) -> float:
        status = getattr(contact.verification_status, "value", contact.verification_status)
        score = self.cfg.verification_scores.get(str(status))
        if score is None:
            reasoning.append("Contact verification status unknown")
            suggestions.append("Determine verification status")
            return 0.5

        notes = {
            "CONFIRMED": ("Contact has been confirmed", None),
            "PENDING": ("Contact verification pending", "Complete contact verification"),
            "MANUAL_REVIEW": ("Contact requires manual review", "Review contact manually"),
            "REJECTED": ("Contact has been rejected", "Review rejection reasons"),
        }
        reason, suggestion = notes.get(str(status), (f"Contact status {status}", None))
        reasoning.append(reason)
        if suggestion:
            suggestions.append(suggestion)
        return clamp(score)


def context_from(
    content: ParsedContent, assessment: ContentQualityAssessment | None
) -> ScoringContext:
    """Build the scoring context for a page from its assessment, if any."""
    if assessment is None:
        return ScoringContext(content=content)
    return ScoringContext(
        content=content,
        source_credibility=assessment.credibility,
        content_freshness=assessment.freshness,
        consistency_score=assessment.factors.get("information_consistency", 0.8),
    )


def _weighted(factors: dict[str, float], weights: dict[str, float]) -> float:
    return round_score(sum(factors[key] * weight for key, weight in weights.items()))


def _floor_below(value: float, moderate: float, reasoning: list[str], notes: tuple[str, str, str]) -> float:
    """Pass scores at or above the moderate band through; floor weaker ones at 0.3."""
    high_note, moderate_note, low_note = notes
    value = clamp(value)
    if value >= 0.8:
        reasoning.append(high_note)
        return value
    if value >= moderate:
        reasoning.append(moderate_note)
        return value
    reasoning.append(low_note)
    return max(value, 0.3)


def _is_realistic_name(name: str) -> bool:
    if not 3 <= len(name) <= 50:
        return False
    return not any_match(NAME_UNREALISTIC, name)


def _is_generic_email(email: str) -> bool:
    return email.split("@", 1)[0] in GENERIC_MAILBOXES
