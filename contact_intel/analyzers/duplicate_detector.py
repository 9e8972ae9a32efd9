"""
Contact deduplication using pairwise similarity and union-find clustering.

Pairs of contacts are compared on up to six signals (email, name, outlet,
title, bio, social). A pair is linked when its email addresses match after
alias normalization, or when its overall similarity clears the threshold
and at least one typed signal (name, outlet, bio, social) is strong.
Linked pairs are clustered by transitive closure; each cluster becomes a
DuplicateGroup whose best member is the merge base.

Pairwise comparison is O(n^2). Batches larger than ``blocking_min_size``
only compare contacts that share a cheap blocking key (normalized email,
name key or outlet domain).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
import hashlib
from itertools import combinations
import logging
import re

from rapidfuzz.distance import Levenshtein

from ..config import DedupConfig, validate_weights
from ..core.helpers import ensure_utc, extract_domain, normalize_domain, round_score
from ..core.patterns import DEFAULT_TABLES, DOMAIN_SUFFIX_LABELS, TITLE_CONNECTORS, PatternTables
from ..core.types import (
    DetectionResult,
    DuplicateGroup,
    DuplicateType,
    ExtractedContact,
    SimilarityResult,
    SocialProfile,
)
from ..errors import InputError
from ..logging_utils import log_event


_NAME_PUNCT = re.compile(r"[^\w\s]")
_HONORIFICS = {"mr", "mrs", "ms", "dr", "prof", "sir", "madam"}
_SUFFIXES = {"jr", "sr", "ii", "iii", "iv"}
_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)

_TYPE_STRENGTH = {
    DuplicateType.EMAIL: 4,
    DuplicateType.COMBINED: 3,
    DuplicateType.NAME: 2,
    DuplicateType.OUTLET: 1,
}

_TYPE_REASONS = {
    DuplicateType.EMAIL: "Email addresses match or are very similar",
    DuplicateType.COMBINED: "Several identity signals match",
    DuplicateType.NAME: "Name and title/position match",
    DuplicateType.OUTLET: "Media outlet and title/position match",
}


class DuplicateDetector:
    """Find and merge contacts that refer to the same person."""

    def __init__(
        self,
        cfg: DedupConfig | None = None,
        tables: PatternTables | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg or DedupConfig()
        self.tables = tables or DEFAULT_TABLES
        self.logger = logger or logging.getLogger(__name__)
        validate_weights(self.cfg.weights, "dedup.weights")

    # ------------------------------------------------------------------
    # Similarity
    # ------------------------------------------------------------------

    def similarity(self, a: ExtractedContact, b: ExtractedContact) -> SimilarityResult:
        """Compare two contacts. The result does not depend on argument order.

        Signals that either contact lacks are left out of the weighted
        overall score; with no shared signal the overall score is 0.
        """
        signals: dict[str, float] = {}

        if a.email and b.email:
            signals["email"] = email_similarity(a.email, b.email)
        if (a.name or "").strip() and (b.name or "").strip():
            signals["name"] = self.name_similarity(a.name, b.name)

        domain_a = _outlet_domain(a)
        domain_b = _outlet_domain(b)
        if domain_a and domain_b:
            signals["outlet"] = self.outlet_similarity(domain_a, domain_b)

        if (a.title or "").strip() and (b.title or "").strip():
            signals["title"] = self.title_similarity(a.title, b.title)
        if (a.bio or "").strip() and (b.bio or "").strip():
            signals["bio"] = bio_similarity(a.bio, b.bio)
        if a.social_profiles and b.social_profiles:
            signals["social"] = social_similarity(a.social_profiles, b.social_profiles)

        weights = self.cfg.weights
        total_weight = sum(weights[key] for key in signals)
        overall = 0.0
        if total_weight > 0:
            overall = sum(signals[key] * weights[key] for key in signals) / total_weight

        return SimilarityResult(
            overall=round_score(overall),
            email=signals.get("email", 0.0),
            name=signals.get("name", 0.0),
            title=signals.get("title", 0.0),
            outlet=signals.get("outlet", 0.0),
            bio=signals.get("bio", 0.0),
            social=signals.get("social", 0.0),
        )

    def name_similarity(self, name_a: str, name_b: str) -> float:
        ta = normalize_name(name_a)
        tb = normalize_name(name_b)
        if not ta or not tb:
            return 0.0
        if ta == tb:
            return 1.0
        if sorted(ta) == sorted(tb):
            return 0.95
        if _middle_initial_match(ta, tb):
            return 0.9
        if _first_initial_match(ta, tb):
            return 0.85
        if len(ta) == len(tb) and all(
            x == y or self.tables.nickname_equivalent(x, y) for x, y in zip(ta, tb)
        ):
            return 0.85
        return round(Levenshtein.normalized_similarity(" ".join(ta), " ".join(tb)), 4)

    def title_similarity(self, title_a: str, title_b: str) -> float:
        a = " ".join(title_a.lower().split())
        b = " ".join(title_b.lower().split())
        if a == b:
            return 1.0
        if _strip_connectors(a) == _strip_connectors(b):
            return 0.9

        score = _jaccard(set(a.split()), set(b.split()))
        for variants in self.tables.title_hierarchy.values():
            if any(v in a for v in variants) and any(v in b for v in variants):
                score = max(score, 0.85)
                break
        return round(score, 4)

    def outlet_similarity(self, domain_a: str, domain_b: str) -> float:
        a = normalize_domain(domain_a)
        b = normalize_domain(domain_b)
        if not a or not b:
            return 0.0
        if a == b:
            return 1.0
        if self._aliased(a, b):
            return 0.95
        if a.endswith("." + b) or b.endswith("." + a):
            return 0.9

        labels_a = {label for label in a.split(".") if label not in DOMAIN_SUFFIX_LABELS}
        labels_b = {label for label in b.split(".") if label not in DOMAIN_SUFFIX_LABELS}
        return round(_jaccard(labels_a, labels_b) * 0.8, 4)

    def _aliased(self, a: str, b: str) -> bool:
        for group in self.tables.outlet_aliases:
            hit_a = next((d for d in group if a == d or a.endswith("." + d)), None)
            hit_b = next((d for d in group if b == d or b.endswith("." + d)), None)
            if hit_a and hit_b:
                return True
        return False

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def classify(self, s: SimilarityResult) -> DuplicateType | None:
        """Return the duplicate type a similarity result supports, if any."""
        cfg = self.cfg
        if s.email >= cfg.email_threshold:
            return DuplicateType.EMAIL
        if s.overall < cfg.overall_threshold:
            return None

        name_ok = s.name >= cfg.name_threshold
        outlet_ok = s.outlet >= cfg.outlet_threshold
        title_ok = s.title >= cfg.title_threshold
        bio_ok = s.bio >= cfg.bio_threshold
        social_ok = s.social >= cfg.social_threshold

        if name_ok and outlet_ok:
            return DuplicateType.COMBINED
        if name_ok and (title_ok or bio_ok or social_ok):
            return DuplicateType.NAME
        if outlet_ok and title_ok:
            return DuplicateType.OUTLET
        if bio_ok or social_ok:
            return DuplicateType.COMBINED
        return None

    def detect(self, contacts: list[ExtractedContact]) -> DetectionResult:
        """Group duplicate contacts and merge each group into one record."""
        if not contacts or not self.cfg.enabled:
            return DetectionResult(unique_contacts=list(contacts), duplicate_groups=[])

        parent = list(range(len(contacts)))

        def find(i: int) -> int:
            while parent[i] != i:
                parent[i] = parent[parent[i]]
                i = parent[i]
            return i

        links: dict[tuple[int, int], tuple[DuplicateType, float]] = {}
        for i, j in self._candidate_pairs(contacts):
            sim = self.similarity(contacts[i], contacts[j])
            dup_type = self.classify(sim)
            if dup_type is None:
                continue
            links[(i, j)] = (dup_type, sim.overall)
            root_i, root_j = find(i), find(j)
            if root_i != root_j:
                parent[max(root_i, root_j)] = min(root_i, root_j)

        clusters: dict[int, list[int]] = defaultdict(list)
        for i in range(len(contacts)):
            clusters[find(i)].append(i)

        groups: list[DuplicateGroup] = []
        merged_by_selected: dict[str, ExtractedContact] = {}
        duplicate_of: dict[str, str] = {}
        for members in clusters.values():
            if len(members) < 2:
                continue
            group = self._build_group([contacts[i] for i in members], members, links)
            groups.append(group)
            merged_by_selected[group.selected_contact] = self.merge(group, contacts)
            for contact_id in group.contacts[1:]:
                duplicate_of[contact_id] = group.selected_contact

        groups.sort(key=lambda g: g.contacts)

        unique: list[ExtractedContact] = []
        duplicates: list[ExtractedContact] = []
        for contact in contacts:
            if contact.id in merged_by_selected:
                unique.append(merged_by_selected[contact.id])
            elif contact.id in duplicate_of:
                duplicates.append(
                    replace(contact, is_duplicate=True, duplicate_of=duplicate_of[contact.id])
                )
            else:
                unique.append(contact)

        total = sum(len(g.contacts) - 1 for g in groups)
        result = DetectionResult(
            unique_contacts=unique,
            duplicate_groups=groups,
            duplicate_contacts=duplicates,
            total_duplicates=total,
            duplicate_rate=total / len(contacts),
        )
        log_event(
            self.logger,
            "Duplicate detection complete",
            event="duplicate_groups",
            contacts=len(contacts),
            groups=len(groups),
            duplicates=total,
        )
        return result

    def _candidate_pairs(self, contacts: list[ExtractedContact]) -> list[tuple[int, int]]:
        n = len(contacts)
        if n <= self.cfg.blocking_min_size:
            return list(combinations(range(n), 2))

        buckets: dict[str, list[int]] = defaultdict(list)
        for i, contact in enumerate(contacts):
            for key in blocking_keys(contact):
                buckets[key].append(i)

        pairs: set[tuple[int, int]] = set()
        for members in buckets.values():
            pairs.update(combinations(members, 2))
        return sorted(pairs)

    def _build_group(
        self,
        members: list[ExtractedContact],
        indices: list[int],
        links: dict[tuple[int, int], tuple[DuplicateType, float]],
    ) -> DuplicateGroup:
        index_set = set(indices)
        group_links = [v for (i, j), v in links.items() if i in index_set and j in index_set]
        dup_type = max((t for t, _ in group_links), key=lambda t: _TYPE_STRENGTH[t])
        avg = sum(score for _, score in group_links) / len(group_links)

        ordered = sorted(members, key=selection_key)
        ids = tuple(c.id for c in ordered)
        digest = hashlib.md5("|".join(sorted(ids)).encode("utf-8")).hexdigest()[:12]
        reasoning = "; ".join(
            [
                _TYPE_REASONS[dup_type],
                f"Average similarity: {avg * 100:.1f}%",
                f"Group contains {len(ids)} contacts",
            ]
        )
        return DuplicateGroup(
            id=f"dup_{digest}",
            contacts=ids,
            similarity_score=round(avg, 4),
            duplicate_type=dup_type,
            confidence_score=ordered[0].confidence_score,
            selected_contact=ordered[0].id,
            reasoning=reasoning,
        )

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge(self, group: DuplicateGroup, contacts: list[ExtractedContact]) -> ExtractedContact:
        """Merge the members of ``group`` into one canonical record.

        The highest-confidence member is the base. Fields it lacks are
        filled from the other members in order; populated base fields are
        never overwritten. Social profiles are unioned.

        Raises:
            InputError: If none of the group's members are in ``contacts``
        """
        wanted = set(group.contacts)
        members = sorted((c for c in contacts if c.id in wanted), key=selection_key)
        if not members:
            raise InputError(f"No members of duplicate group {group.id} were supplied", {"group_id": group.id})

        base = members[0]
        updates: dict[str, object] = {}
        for field_name in ("email", "title", "bio", "source_url", "extraction_id", "search_id"):
            if (getattr(base, field_name) or "").strip():
                continue
            donor = next((getattr(m, field_name) for m in members[1:] if (getattr(m, field_name) or "").strip()), None)
            if donor:
                updates[field_name] = donor
        if base.contact_info is None:
            donor_info = next((m.contact_info for m in members[1:] if m.contact_info is not None), None)
            if donor_info is not None:
                updates["contact_info"] = donor_info

        metadata = replace(
            base.metadata,
            duplicate_group_id=group.id,
            merged_from=[m.id for m in members],
            merge_reasoning=group.reasoning,
        )
        return replace(
            base,
            social_profiles=merge_social_profiles(p for m in members for p in m.social_profiles),
            is_duplicate=False,
            duplicate_of=None,
            metadata=metadata,
            **updates,
        )


def selection_key(contact: ExtractedContact) -> tuple:
    """Order: highest confidence, then earliest created, then id."""
    created = ensure_utc(contact.created_at) if contact.created_at else _FAR_FUTURE
    return (-contact.confidence_score, created, contact.id)


def normalize_email(email: str) -> str:
    """Lowercase, drop any +tag and ignore dots/underscores in the local part."""
    lowered = email.strip().lower()
    if "@" not in lowered:
        return lowered
    local, domain = lowered.rsplit("@", 1)
    local = local.split("+", 1)[0].replace(".", "").replace("_", "")
    return f"{local}@{normalize_domain(domain)}"


def email_similarity(email_a: str, email_b: str) -> float:
    a = email_a.strip().lower()
    b = email_b.strip().lower()
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    return 1.0 if normalize_email(a) == normalize_email(b) else 0.0


def normalize_name(name: str) -> list[str]:
    text = _NAME_PUNCT.sub("", (name or "").lower().replace("-", " "))
    tokens = text.split()
    while tokens and tokens[0] in _HONORIFICS:
        tokens = tokens[1:]
    while len(tokens) > 1 and tokens[-1] in _SUFFIXES:
        tokens = tokens[:-1]
    return tokens


def name_key(name: str) -> str:
    tokens = normalize_name(name)
    if not tokens:
        return ""
    return f"{tokens[0][0]}:{tokens[-1]}"


def blocking_keys(contact: ExtractedContact) -> list[str]:
    keys = []
    if contact.email:
        keys.append("email:" + normalize_email(contact.email))
    key = name_key(contact.name)
    if key:
        keys.append("name:" + key)
    domain = _outlet_domain(contact)
    if domain:
        keys.append("domain:" + domain)
    return keys


def bio_similarity(bio_a: str, bio_b: str) -> float:
    a = bio_a.lower().strip()
    b = bio_b.lower().strip()
    if a == b:
        return 1.0
    words_a = {w for w in a.split() if len(w) > 2}
    words_b = {w for w in b.split() if len(w) > 2}
    return round(max(_jaccard(words_a, words_b), _jaccard(_phrases(a), _phrases(b))), 4)


def social_similarity(profiles_a: list[SocialProfile], profiles_b: list[SocialProfile]) -> float:
    if not profiles_a or not profiles_b:
        return 0.0
    handles_a = {(p.platform.lower(), _handle(p)) for p in profiles_a}
    handles_b = {(p.platform.lower(), _handle(p)) for p in profiles_b}
    common = len(handles_a & handles_b)
    return round(common / max(len(profiles_a), len(profiles_b)), 4)


def merge_social_profiles(profiles) -> list[SocialProfile]:
    """Union profiles by (platform, handle), preferring verified copies."""
    merged: dict[tuple[str, str], SocialProfile] = {}
    for profile in profiles:
        key = (profile.platform.lower(), _handle(profile))
        current = merged.get(key)
        if current is None or (profile.verified and not current.verified):
            merged[key] = profile
    return list(merged.values())


def _handle(profile: SocialProfile) -> str:
    return profile.handle.strip().lower().lstrip("@")


def _outlet_domain(contact: ExtractedContact) -> str:
    return normalize_domain(extract_domain(contact.source_url))


def _middle_initial_match(ta: list[str], tb: list[str]) -> bool:
    if ta[0] != tb[0] or ta[-1] != tb[-1]:
        return False
    middle_a, middle_b = ta[1:-1], tb[1:-1]
    if not middle_a or not middle_b:
        return len(middle_a) + len(middle_b) <= 1
    if len(middle_a) != len(middle_b):
        return False
    return all(x[0] == y[0] and (len(x) == 1 or len(y) == 1 or x == y) for x, y in zip(middle_a, middle_b))


def _first_initial_match(ta: list[str], tb: list[str]) -> bool:
    if len(ta) < 2 or len(tb) < 2 or ta[-1] != tb[-1]:
        return False
    first_a, first_b = ta[0], tb[0]
    if len(first_a) != 1 and len(first_b) != 1:
        return False
    return first_a[0] == first_b[0]


def _strip_connectors(title: str) -> str:
    return " ".join(TITLE_CONNECTORS.sub(" ", title).split())


def _phrases(text: str) -> set[str]:
    words = [w for w in text.split() if len(w) > 2]
    phrases = {" ".join(words[i:i + 2]) for i in range(len(words) - 1)}
    phrases.update(" ".join(words[i:i + 3]) for i in range(len(words) - 2))
    return phrases


def _jaccard(a: set[str], b: set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)
