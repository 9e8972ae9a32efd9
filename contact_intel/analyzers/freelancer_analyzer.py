"""
Freelancer detection and multi-outlet relationship analysis.

Analysis runs in five ordered stages over one contact and its per-outlet
byline history:
1. Freelancer status from bio/title/email/social phrasing and cadence
2. Relationship with each outlet (staff, freelancer, contributor, ...)
3. Recency score per outlet with exponential decay
4. Primary outlet and activity summary (diversity, recency pattern)
5. Contact strategy (timing, pitch approach, notes, warnings)

``update_profile`` refreshes stages 2-3 only for outlets with new byline
data and then re-derives stages 4-5.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
import logging
import math
from typing import Iterable

from ..config import FreelancerConfig
from ..core.helpers import clamp, days_between, domain_matches, email_domain, ensure_utc, resolve_now
from ..core.patterns import (
    DEFAULT_TABLES,
    FREELANCER_BIO_PATTERNS,
    FREELANCER_SOCIAL_PATTERNS,
    FREELANCER_TITLE_PATTERNS,
    STRINGER_TITLE_PATTERN,
    PatternTables,
    any_match,
)
from ..core.types import (
    ActivitySummary,
    Byline,
    BylineBatch,
    ContactStrategy,
    Evidence,
    ExtractedContact,
    FreelancerProfile,
    OutletAssociation,
    OutletHistory,
)
from ..errors import BatchItemError, ContactIntelError, ScoringError
from ..logging_utils import log_event, log_item_failure


INACTIVE_WARNING = "No recent activity - may be inactive or between assignments"

_MENTION_SOURCE = "Title/bio analysis"
_STRINGER_SOURCE = "Title stringer analysis"
_EMAIL_SOURCE = "Email domain analysis"
_BYLINE_SOURCE = "Byline history"


@dataclass
class BylineStats:
    """Byline statistics for one outlet relative to a fixed "now"."""

    total: int
    recent: int
    last_byline: datetime | None
    frequency: float
    beats: list[str]

    @property
    def is_regular(self) -> bool:
        return self.frequency > 1 and self.recent > 0

    @property
    def frequency_score(self) -> float:
        if self.frequency > 8:
            return 0.4
        if self.frequency > 4:
            return 0.3
        if self.frequency > 1:
            return 0.2
        if self.frequency > 0:
            return 0.1
        return 0.0

    @property
    def activity_level(self) -> str:
        if self.frequency > 4 and self.recent > 2:
            return "high"
        if self.frequency > 1 and self.recent > 0:
            return "medium"
        return "low"


def byline_stats(bylines: list[Byline], now: datetime, recent_window_days: float = 90.0) -> BylineStats:
    """Count recent and trailing-year bylines; frequency is articles per month."""
    recent_cutoff = now - timedelta(days=recent_window_days)
    year_cutoff = now - timedelta(days=365)
    published = [ensure_utc(b.published_at) for b in bylines]

    beats: list[str] = []
    for byline in bylines:
        for beat in byline.beats:
            if beat not in beats:
                beats.append(beat)

    return BylineStats(
        total=len(bylines),
        recent=sum(1 for p in published if p > recent_cutoff),
        last_byline=max(published) if published else None,
        frequency=sum(1 for p in published if p > year_cutoff) / 12,
        beats=beats,
    )


def recency_score(
    days_since_last: float | None,
    recent_bylines: int,
    confidence: float,
    activity_level: str,
    cfg: FreelancerConfig | None = None,
) -> float:
    """Recency-weighted relationship strength in [0, 1].

    Non-increasing in ``days_since_last`` when every other argument is fixed.
    An outlet without bylines (``days_since_last`` is None) scores 0.
    """
    if days_since_last is None:
        return 0.0
    cfg = cfg or FreelancerConfig()
    days = max(days_since_last, 0.0)

    score = math.exp(-days / cfg.decay_days)
    if days <= cfg.very_recent_days:
        score *= 1.5
    if recent_bylines > 2:
        score *= 1.2
    if days > cfg.stale_days:
        score *= 0.5

    score *= confidence
    score *= cfg.activity_multipliers.get(activity_level, 1.0)
    return clamp(score)


def diversity_index(byline_counts: list[int]) -> float:
    """Shannon entropy of byline counts normalized by log2(outlet count)."""
    if len(byline_counts) <= 1:
        return 0.0
    total = sum(byline_counts)
    if total == 0:
        return 0.0
    entropy = 0.0
    for count in byline_counts:
        if count > 0:
            p = count / total
            entropy -= p * math.log2(p)
    return clamp(entropy / math.log2(len(byline_counts)))


class FreelancerAnalyzer:
    """Classify staff vs freelancer and rank outlet relationships."""

    def __init__(
        self,
        cfg: FreelancerConfig | None = None,
        tables: PatternTables | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg or FreelancerConfig()
        self.tables = tables or DEFAULT_TABLES
        self.logger = logger or logging.getLogger(__name__)

    def analyze(
        self,
        contact: ExtractedContact,
        outlets: list[OutletHistory],
        now: datetime | None = None,
    ) -> FreelancerProfile:
        """Build a full profile for ``contact`` from its byline histories.

        Raises:
            ScoringError: On any unexpected internal failure
        """
        try:
            return self._analyze(contact, outlets, resolve_now(now))
        except ContactIntelError:
            raise
        except Exception as exc:
            contact_id = getattr(contact, "id", "") or ""
            raise ScoringError(f"Freelancer analysis failed: {exc}", contact_id, exc) from exc

    def analyze_many(
        self,
        subjects: Iterable[tuple[ExtractedContact, list[OutletHistory]]],
        now: datetime | None = None,
        failures: list[BatchItemError] | None = None,
    ) -> list[FreelancerProfile]:
        now = resolve_now(now)
        profiles: list[FreelancerProfile] = []
        for contact, outlets in subjects:
            try:
                profiles.append(self.analyze(contact, outlets, now))
            except ScoringError as exc:
                error = BatchItemError(exc.contact_id, exc)
                log_item_failure(
                    self.logger,
                    "Freelancer analysis failed",
                    error,
                    event="freelancer_analysis_failed",
                    contact_id=exc.contact_id,
                )
                if failures is not None:
                    failures.append(error)
        return profiles

    def update_profile(
        self,
        profile: FreelancerProfile,
        batches: list[BylineBatch],
        now: datetime | None = None,
    ) -> FreelancerProfile:
        """Refresh outlets that have new byline data; leave the rest untouched.

        Batches for outlets the profile does not know are logged and ignored.
        Freelancer status and confidence are kept from the stored profile.
        """
        now = resolve_now(now)
        by_outlet = {batch.outlet_id: batch for batch in batches}
        known = {outlet.outlet_id for outlet in profile.outlets}
        for outlet_id in sorted(set(by_outlet) - known):
            log_event(
                self.logger,
                "Ignoring byline batch for unknown outlet",
                event="unknown_outlet_batch",
                contact_id=profile.contact_id,
                outlet_id=outlet_id,
            )

        outlets: list[OutletAssociation] = []
        for outlet in profile.outlets:
            batch = by_outlet.get(outlet.outlet_id)
            if batch is None:
                outlets.append(outlet)
                continue
            email_match = any(e.type == "email" for e in outlet.evidence)
            mentioned = any(e.source == _MENTION_SOURCE for e in outlet.evidence)
            stringer = any(e.source == _STRINGER_SOURCE for e in outlet.evidence)
            kept = [e for e in outlet.evidence if e.type != "byline"]
            outlets.append(
                self._association(
                    outlet.outlet_id,
                    outlet.outlet_name,
                    outlet.outlet_domain,
                    byline_stats(batch.bylines, now, self.cfg.recent_window_days),
                    email_match,
                    mentioned,
                    stringer,
                    kept,
                    now,
                )
            )

        primary = self._primary_outlet(outlets)
        summary = self._activity_summary(outlets, now)
        return replace(
            profile,
            outlets=outlets,
            primary_outlet=primary,
            recent_activity=summary,
            contact_strategy=self._strategy(profile.is_freelancer, outlets, primary, summary),
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _analyze(
        self, contact: ExtractedContact, histories: list[OutletHistory], now: datetime
    ) -> FreelancerProfile:
        is_freelancer, confidence, reasoning = self._freelancer_status(contact, histories)
        outlets = [self._relationship(contact, history, now) for history in histories]
        primary = self._primary_outlet(outlets)
        summary = self._activity_summary(outlets, now)
        return FreelancerProfile(
            contact_id=contact.id,
            name=contact.name,
            email=contact.email,
            is_freelancer=is_freelancer,
            confidence=confidence,
            outlets=outlets,
            primary_outlet=primary,
            recent_activity=summary,
            contact_strategy=self._strategy(is_freelancer, outlets, primary, summary),
            reasoning=reasoning,
        )

    def _freelancer_status(
        self, contact: ExtractedContact, histories: list[OutletHistory]
    ) -> tuple[bool, float, str]:
        score = 0.0
        indicators: list[str] = []

        if contact.bio:
            for pattern in FREELANCER_BIO_PATTERNS:
                if pattern.search(contact.bio):
                    score += 0.3
                    indicators.append(f"Bio contains freelancer indicator: {pattern.tag}")

        if contact.title:
            for pattern in FREELANCER_TITLE_PATTERNS:
                if pattern.search(contact.title):
                    score += 0.25
                    indicators.append(f"Title indicates freelancer: {contact.title}")

        domain = email_domain(contact.email)
        if domain and not any(domain_matches(domain, h.outlet_domain) for h in histories):
            if domain in self.tables.personal_email_domains:
                score += 0.2
                indicators.append("Uses personal email domain")

        if len(histories) > 1:
            score += 0.3 + (len(histories) - 1) * 0.1
            indicators.append(f"Writes for {len(histories)} outlets")

        if _irregular_cadence(histories):
            score += 0.2
            indicators.append("Irregular publishing pattern across outlets")

        social_text = " ".join(
            f"{p.handle} {p.description or ''}" for p in contact.social_profiles
        )
        if social_text.strip() and any_match(FREELANCER_SOCIAL_PATTERNS, social_text):
            score += 0.15
            indicators.append("Social media indicates freelancer status")

        confidence = round(clamp(score), 4)
        is_freelancer = confidence > self.cfg.freelancer_threshold
        if is_freelancer:
            reasoning = (
                f"Likely freelancer ({confidence * 100:.0f}% confidence): {', '.join(indicators)}"
            )
        else:
            reasoning = f"Likely staff writer ({(1 - confidence) * 100:.0f}% confidence)"
        return is_freelancer, confidence, reasoning

    def _relationship(
        self, contact: ExtractedContact, history: OutletHistory, now: datetime
    ) -> OutletAssociation:
        evidence: list[Evidence] = []

        domain = email_domain(contact.email)
        email_match = bool(domain) and domain_matches(domain, history.outlet_domain)
        if email_match:
            evidence.append(
                Evidence(
                    type="email",
                    source=_EMAIL_SOURCE,
                    content=f"Email domain matches outlet domain: {domain}",
                    timestamp=now,
                    confidence=0.9,
                )
            )

        outlet_name = history.outlet_name.strip().lower()
        mention_text = f"{contact.title or ''} {contact.bio or ''}".lower()
        mentioned = bool(outlet_name) and outlet_name in mention_text
        if mentioned:
            evidence.append(
                Evidence(
                    type="bio",
                    source=_MENTION_SOURCE,
                    content=f"Title or bio mentions outlet: {history.outlet_name}",
                    timestamp=now,
                    confidence=0.8,
                )
            )

        stringer = bool(contact.title) and STRINGER_TITLE_PATTERN.search(contact.title)
        if stringer:
            evidence.append(
                Evidence(
                    type="bio",
                    source=_STRINGER_SOURCE,
                    content=f"Title indicates stringer: {contact.title}",
                    timestamp=now,
                    confidence=0.6,
                )
            )

        stats = byline_stats(history.bylines, now, self.cfg.recent_window_days)
        return self._association(
            history.outlet_id,
            history.outlet_name,
            history.outlet_domain,
            stats,
            email_match,
            mentioned,
            bool(stringer),
            evidence,
            now,
        )

    def _association(
        self,
        outlet_id: str,
        outlet_name: str,
        outlet_domain: str,
        stats: BylineStats,
        email_match: bool,
        mentioned: bool,
        stringer: bool,
        evidence: list[Evidence],
        now: datetime,
    ) -> OutletAssociation:
        confidence = stats.frequency_score
        if email_match:
            confidence += 0.4
        if mentioned:
            confidence += 0.3
        confidence = round(clamp(confidence), 4)

        # staff/freelancer needs high-frequency regular output; a matching
        # domain with no bylines in the trailing year still counts as staff
        if stats.is_regular and stats.frequency > 4:
            relationship = "staff" if email_match else "freelancer"
        elif stats.frequency > 0:
            relationship = "stringer" if stringer else "contributor"
        else:
            relationship = "staff" if email_match else "unknown"

        evidence = list(evidence)
        if stats.total > 0:
            evidence.append(
                Evidence(
                    type="byline",
                    source=_BYLINE_SOURCE,
                    content=f"{stats.total} bylines, {stats.recent} in the last {self.cfg.recent_window_days:.0f} days",
                    timestamp=now,
                    confidence=stats.frequency_score,
                )
            )

        activity = stats.activity_level
        days = days_between(stats.last_byline, now) if stats.last_byline else None
        return OutletAssociation(
            outlet_id=outlet_id,
            outlet_name=outlet_name,
            outlet_domain=outlet_domain,
            relationship=relationship,
            confidence=confidence,
            recency_score=round(recency_score(days, stats.recent, confidence, activity, self.cfg), 4),
            activity_level=activity,
            last_byline=stats.last_byline,
            total_bylines=stats.total,
            recent_bylines=stats.recent,
            average_frequency=round(stats.frequency, 4),
            beats=stats.beats,
            evidence=evidence,
        )

    def _primary_outlet(self, outlets: list[OutletAssociation]) -> OutletAssociation | None:
        if not outlets:
            return None
        best = max(outlets, key=lambda o: 0.6 * o.recency_score + 0.4 * o.confidence)
        best_score = 0.6 * best.recency_score + 0.4 * best.confidence
        return best if best_score > self.cfg.primary_outlet_threshold else None

    def _activity_summary(self, outlets: list[OutletAssociation], now: datetime) -> ActivitySummary:
        window = now - timedelta(days=self.cfg.recent_window_days)
        month = now - timedelta(days=30)

        recent_30 = sum(1 for o in outlets if o.last_byline and ensure_utc(o.last_byline) > month)
        medium_90 = sum(1 for o in outlets if o.last_byline and ensure_utc(o.last_byline) > window)
        with_bylines = sum(1 for o in outlets if o.total_bylines > 0)

        if recent_30 > medium_90 * 0.8:
            pattern = "increasing"
        elif recent_30 == 0 and medium_90 > 0:
            pattern = "declining"
        elif medium_90 < with_bylines * 0.5:
            pattern = "sporadic"
        else:
            pattern = "consistent"

        last_dates = [ensure_utc(o.last_byline) for o in outlets if o.last_byline]
        return ActivitySummary(
            total_outlets=len(outlets),
            active_outlets=medium_90,
            primary_outlet_score=max((o.recency_score for o in outlets), default=0.0),
            diversity_index=round(diversity_index([o.total_bylines for o in outlets]), 4),
            recency_pattern=pattern,
            last_activity=max(last_dates) if last_dates else None,
        )

    @staticmethod
    def _strategy(
        is_freelancer: bool,
        outlets: list[OutletAssociation],
        primary: OutletAssociation | None,
        activity: ActivitySummary,
    ) -> ContactStrategy:
        notes: list[str] = []
        warnings: list[str] = []
        timing = "immediate"

        if is_freelancer:
            approach = "personal_brand"
            notes.append("Contact writes for multiple outlets - pitch to their personal brand/expertise")
            if activity.diversity_index > 0.7:
                notes.append("Highly diversified across outlets - consider broad, expertise-based pitches")
            if primary is not None and primary.recency_score > 0.7:
                notes.append(f"Most active at {primary.outlet_name} - consider outlet-specific angle")
                approach = "outlet_specific"
            if activity.active_outlets == 1:
                notes.append("Currently focused on one outlet - good timing for pitches")
        else:
            approach = "outlet_specific"
            notes.append("Staff writer - use outlet-specific pitches and follow outlet guidelines")
            if activity.recency_pattern == "declining":
                timing = "monitor"
                warnings.append("Activity appears to be declining - verify current status")

        if activity.active_outlets == 0:
            timing = "monitor"
            warnings.append(INACTIVE_WARNING)

        if activity.recency_pattern == "sporadic":
            timing = "monitor"
            notes.append("Sporadic publishing pattern - monitor for active periods")

        if len(outlets) > 3:
            notes.append(f"Writes for {len(outlets)} outlets - very well-connected freelancer")
            approach = "multi_outlet"

        return ContactStrategy(
            preferred_outlet=primary.outlet_name if primary is not None else "Unknown",
            contact_timing=timing,
            pitch_approach=approach,
            notes=notes,
            warnings=warnings,
        )


def _irregular_cadence(histories: list[OutletHistory]) -> bool:
    """True if any outlet has a gap between consecutive bylines >60 or <3 days."""
    for history in histories:
        dates = sorted(ensure_utc(b.published_at) for b in history.bylines)
        for earlier, later in zip(dates, dates[1:]):
            gap = days_between(earlier, later)
            if gap > 60 or gap < 3:
                return True
    return False
