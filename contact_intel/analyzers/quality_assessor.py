"""
Content quality assessment for fetched web pages.

Scores a ParsedContent on six independent axes, each starting from a
neutral base and nudged by heuristics from the shared pattern tables:
- credibility: domain reputation plus author/date/title/length/link signals
- relevance: how likely the page is to yield journalist contacts
- freshness: step function of the page age
- authority: top-tier domain, HTTPS, clean URL, structure, expertise
- spam_score: clickbait, shouting, punctuation, repetition, spam domains
- contact_info_richness: emails, phones, handles, titles, affiliations

The weighted overall score and a list of threshold-driven recommendations
are attached to the returned ContentQualityAssessment.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
import logging
import math
import re

from ..config import AssessmentConfig, validate_weights
from ..core.helpers import clamp, days_between, extract_domain, resolve_now, round_score
from ..core.patterns import (
    BYLINE_MARKERS,
    CONTACT_INDICATORS,
    CONTACT_SECTION_PATTERNS,
    DEFAULT_TABLES,
    EMAIL_PATTERN,
    EXPERTISE_PATTERNS,
    FRAGMENT_PATTERN,
    JOURNALIST_KEYWORDS,
    JOURNALISTIC_INDICATORS,
    OUTLET_AFFILIATION_PATTERN,
    OUTLET_MENTION_PATTERNS,
    PHONE_PATTERN,
    PROFESSIONAL_TITLE_PATTERNS,
    RICHNESS_CONTACT_SECTION,
    SOCIAL_HANDLE_PATTERN,
    SOCIAL_URL_PATTERN,
    STRUCTURE_PATTERNS,
    TRACKING_PARAMS,
    PatternTables,
    any_match,
)
from ..core.types import ContentQualityAssessment, ParsedContent
from ..errors import AssessmentError, BatchItemError, ContactIntelError
from ..logging_utils import log_item_failure


_ALL_CAPS_TOKEN = re.compile(r"\b[A-Z]{5,}\b")
_SENIOR_TITLE = PROFESSIONAL_TITLE_PATTERNS[0]

EMPTY_BODY_RECOMMENDATION = "Content body is empty; assessment is neutral"
ACCEPTABLE_RECOMMENDATION = "Content quality is acceptable for contact extraction"


class ContentQualityAssessor:
    """Assess the quality of fetched content as a source of contacts."""

    def __init__(
        self,
        cfg: AssessmentConfig | None = None,
        tables: PatternTables | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg or AssessmentConfig()
        self.tables = tables or DEFAULT_TABLES
        self.logger = logger or logging.getLogger(__name__)
        validate_weights(self.cfg.weights, "assessment.weights")

    def assess(self, content: ParsedContent, now: datetime | None = None) -> ContentQualityAssessment:
        """Assess one page.

        Malformed fields lower the affected sub-scores instead of raising.
        An empty body yields a neutral assessment.

        Raises:
            AssessmentError: On any unexpected internal failure
        """
        try:
            if not (content.content or "").strip():
                return self._neutral(content)
            return self._assess(content, resolve_now(now))
        except ContactIntelError:
            raise
        except Exception as exc:
            url = getattr(content, "url", "") or ""
            raise AssessmentError(f"Content quality assessment failed: {exc}", url, exc) from exc

    def assess_many(
        self,
        contents: list[ParsedContent],
        now: datetime | None = None,
        failures: list[BatchItemError] | None = None,
    ) -> list[ContentQualityAssessment]:
        """Assess a batch, skipping items that fail.

        Failed items are logged and, when ``failures`` is given, appended to it.
        """
        now = resolve_now(now)
        assessments: list[ContentQualityAssessment] = []
        for content in contents:
            try:
                assessments.append(self.assess(content, now))
            except AssessmentError as exc:
                error = BatchItemError(exc.url, exc)
                log_item_failure(
                    self.logger, "Assessment failed", error, event="assessment_failed", url=exc.url
                )
                if failures is not None:
                    failures.append(error)
        return assessments

    def _assess(self, content: ParsedContent, now: datetime) -> ContentQualityAssessment:
        domain = extract_domain(content.url)
        body_lower = content.content.lower()
        title_lower = (content.title or "").lower()

        credibility = self._credibility(content, domain)
        relevance = self._relevance(body_lower, title_lower)
        freshness = self._freshness(content.published_at, now)
        authority = self._authority(content, domain, body_lower)
        spam_score = self._spam_score(content, domain, body_lower)
        richness = self._contact_info_richness(body_lower)
        consistency = self._information_consistency(content, domain, body_lower)

        w = self.cfg.weights
        overall = round_score(
            credibility * w["credibility"]
            + relevance * w["relevance"]
            + freshness * w["freshness"]
            + authority * w["authority"]
            + (1 - spam_score) * w["spam_score"]
            + richness * w["contact_info_richness"]
        )

        factors = {
            "credibility": credibility,
            "relevance": relevance,
            "freshness": freshness,
            "authority": authority,
            "spam_score": spam_score,
            "contact_info_richness": richness,
            "information_consistency": consistency,
        }

        return ContentQualityAssessment(
            url=content.url,
            credibility=credibility,
            relevance=relevance,
            freshness=freshness,
            authority=authority,
            spam_score=spam_score,
            contact_info_richness=richness,
            overall_score=overall,
            content_length=len(content.content),
            language=content.language or "unknown",
            has_contact_info=has_contact_info(body_lower),
            is_journalistic=is_journalistic(body_lower, title_lower),
            factors=factors,
            recommendations=self._recommendations(factors, overall),
        )

    def _neutral(self, content: ParsedContent) -> ContentQualityAssessment:
        w = self.cfg.weights
        overall = round_score(
            0.5 * (w["credibility"] + w["relevance"] + w["freshness"] + w["authority"])
            + w["spam_score"]
        )
        factors = {
            "credibility": 0.5,
            "relevance": 0.5,
            "freshness": 0.5,
            "authority": 0.5,
            "spam_score": 0.0,
            "contact_info_richness": 0.0,
            "information_consistency": 0.5,
        }
        return ContentQualityAssessment(
            url=content.url,
            credibility=0.5,
            relevance=0.5,
            freshness=0.5,
            authority=0.5,
            spam_score=0.0,
            contact_info_richness=0.0,
            overall_score=overall,
            content_length=0,
            language=content.language or "unknown",
            factors=factors,
            recommendations=[EMPTY_BODY_RECOMMENDATION],
        )

    def _credibility(self, content: ParsedContent, domain: str) -> float:
        score = 0.5

        if self.tables.is_credible_domain(domain):
            score += 0.3
        elif self.tables.is_suspicious_domain(domain):
            score -= 0.2

        if content.author and content.author.strip():
            score += 0.1
        if content.published_at is not None:
            score += 0.05
        if content.title and 10 < len(content.title) < 200:
            score += 0.05

        word_count = content.metadata.word_count or len(content.content.split())
        if 200 <= word_count <= 2000:
            score += 0.05
        elif word_count < 100:
            score -= 0.1

        if 1 <= (content.metadata.reading_time or 0) <= 10:
            score += 0.05
        if content.language and content.language.lower()[:2] in self.tables.supported_languages:
            score += 0.05
        if len(content.links) > 5:
            score += 0.05
        if content.images:
            score += 0.05

        return clamp(score)

    def _relevance(self, body_lower: str, title_lower: str) -> float:
        score = 0.5

        if any(keyword in title_lower for keyword in JOURNALIST_KEYWORDS):
            score += 0.2
        if has_contact_info(body_lower):
            score += 0.2
        if any(marker in body_lower for marker in BYLINE_MARKERS):
            score += 0.1
        if any_match(OUTLET_MENTION_PATTERNS, body_lower):
            score += 0.1
        if any_match(PROFESSIONAL_TITLE_PATTERNS, body_lower):
            score += 0.1
        if EMAIL_PATTERN.search(body_lower):
            score += 0.05
        if SOCIAL_URL_PATTERN.search(body_lower):
            score += 0.05
        if any_match(CONTACT_SECTION_PATTERNS, body_lower):
            score += 0.1

        return clamp(score)

    @staticmethod
    def _freshness(published_at: datetime | None, now: datetime) -> float:
        if published_at is None:
            return 0.5
        days = math.floor(days_between(published_at, now))
        if days <= 1:
            return 1.0
        if days <= 7:
            return 0.9
        if days <= 30:
            return 0.8
        if days <= 90:
            return 0.6
        if days <= 365:
            return 0.4
        return 0.2

    def _authority(self, content: ParsedContent, domain: str, body_lower: str) -> float:
        score = 0.5

        if self.tables.is_top_tier_domain(domain):
            score += 0.3
        elif self.tables.is_credible_domain(domain):
            score += 0.2
        elif self.tables.is_suspicious_domain(domain):
            score -= 0.2

        url_lower = content.url.lower()
        if url_lower.startswith("https://"):
            score += 0.1
        if not any(f"{param}=" in url_lower for param in TRACKING_PARAMS):
            score += 0.1
        if any_match(STRUCTURE_PATTERNS, body_lower):
            score += 0.1
        if any_match(EXPERTISE_PATTERNS, body_lower):
            score += 0.1

        return clamp(score)

    def _spam_score(self, content: ParsedContent, domain: str, body_lower: str) -> float:
        body = content.content
        title = content.title or ""
        score = 0.0

        for pattern in self.tables.spam_patterns:
            if pattern.search(body) or pattern.search(title):
                score += pattern.weight

        if body.count("!") + body.count("?") > 10:
            score += 0.1

        if len(_ALL_CAPS_TOKEN.findall(body)) >= 5:
            score += 0.1

        if FRAGMENT_PATTERN.search(body_lower):
            score += 0.05

        words = body_lower.split()
        if words:
            frequent = sum(1 for count in Counter(words).values() if count > 10)
            if frequent / len(words) > 0.1:
                score += 0.1

        if domain and self.tables.is_spam_domain(domain):
            score += 0.3

        return clamp(score)

    @staticmethod
    def _contact_info_richness(body_lower: str) -> float:
        score = 0.0

        emails = len(EMAIL_PATTERN.findall(body_lower))
        if emails:
            score += 0.2 * min(emails / 3, 1)

        phones = sum(1 for _ in PHONE_PATTERN.finditer(body_lower))
        if phones:
            score += 0.15 * min(phones / 2, 1)

        socials = sum(1 for _ in SOCIAL_URL_PATTERN.finditer(body_lower)) + len(
            SOCIAL_HANDLE_PATTERN.findall(body_lower)
        )
        if socials:
            score += 0.15 * min(socials / 3, 1)

        titles = _SENIOR_TITLE.count(body_lower)
        if titles:
            score += 0.2 * min(titles / 2, 1)

        affiliations = OUTLET_AFFILIATION_PATTERN.count(body_lower)
        if affiliations:
            score += 0.15 * min(affiliations / 2, 1)

        if RICHNESS_CONTACT_SECTION.search(body_lower):
            score += 0.15

        return clamp(score)

    @staticmethod
    def _information_consistency(content: ParsedContent, domain: str, body_lower: str) -> float:
        score = 0.8

        if content.title:
            title_words = content.title.lower().split()
            if title_words:
                hits = sum(1 for word in title_words if len(word) > 3 and word in body_lower)
                score += 0.1 if hits / len(title_words) >= 0.5 else -0.1

        if content.author and content.author.strip().lower() in body_lower:
            score += 0.05
        if domain and domain in body_lower:
            score += 0.05

        return clamp(score)

    def _recommendations(self, factors: dict[str, float], overall: float) -> list[str]:
        cfg = self.cfg
        recs: list[str] = []
        if factors["credibility"] < cfg.credibility_floor:
            recs.append("Consider sources from established media organizations")
        if factors["relevance"] < cfg.relevance_floor:
            recs.append("Look for content with more contact information")
        if factors["freshness"] < cfg.freshness_floor:
            recs.append("Consider more recent content sources")
        if factors["authority"] < cfg.authority_floor:
            recs.append("Verify source authority and credentials")
        if factors["spam_score"] > cfg.spam_ceiling:
            recs.append("Content may contain spam-like characteristics")
        if factors["contact_info_richness"] < cfg.richness_floor:
            recs.append("Content lacks sufficient contact information")
        if overall < cfg.overall_floor:
            recs.append("Consider alternative sources with better quality indicators")
        if not recs:
            recs.append(ACCEPTABLE_RECOMMENDATION)
        return recs


def has_contact_info(text: str) -> bool:
    lowered = text.lower()
    return any(indicator in lowered for indicator in CONTACT_INDICATORS)


def is_journalistic(body_lower: str, title_lower: str = "") -> bool:
    """True when at least two distinct journalistic terms appear."""
    combined = f"{title_lower} {body_lower}"
    return sum(1 for term in JOURNALISTIC_INDICATORS if term in combined) >= 2
