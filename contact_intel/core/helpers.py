"""Small shared helpers for scores, domains and timestamps."""

from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import urlparse

SECONDS_PER_DAY = 24 * 60 * 60


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(value, high))


def round_score(value: float) -> float:
    """Clamp to [0, 1] and round to two decimals."""
    return round(clamp(value), 2)


def extract_domain(url: str | None) -> str:
    """Return the lowercased host of ``url``, or "" if it cannot be parsed."""
    if not url:
        return ""
    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return ""
    return (host or "").lower()


def normalize_domain(domain: str | None) -> str:
    d = (domain or "").strip().lower().rstrip(".")
    if d.startswith("www."):
        d = d[4:]
    return d


def domain_matches(domain: str, candidate: str) -> bool:
    """True if ``domain`` equals ``candidate`` or is one of its subdomains."""
    d = normalize_domain(domain)
    c = normalize_domain(candidate)
    if not d or not c:
        return False
    return d == c or d.endswith("." + c)


def email_domain(email: str | None) -> str:
    if not email or "@" not in email:
        return ""
    return normalize_domain(email.rsplit("@", 1)[1])


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_now(now: datetime | None) -> datetime:
    return ensure_utc(now) if now is not None else datetime.now(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> float:
    """Fractional days from ``earlier`` to ``later`` (negative if reversed)."""
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / SECONDS_PER_DAY
