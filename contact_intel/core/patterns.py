"""
Declarative lookup tables used by the analyzers.

Every heuristic list (credible domains, spam triggers, freelancer phrasing,
nicknames, outlet aliases, ...) lives here as data. Tables are immutable and
built once per process; ``build_tables`` extends the defaults with values
from the ``tables`` section of the YAML config, and the result is injected
into each analyzer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import re
from types import MappingProxyType
from typing import Iterable, Mapping

from ..config import TablesConfig


@dataclass(frozen=True)
class TaggedPattern:
    """A compiled regex with a tag for reasoning output and a score weight."""

    tag: str
    regex: re.Pattern[str]
    weight: float = 0.1

    def search(self, text: str) -> bool:
        return self.regex.search(text) is not None

    def count(self, text: str) -> int:
        return sum(1 for _ in self.regex.finditer(text))


def tagged(tag: str, pattern: str, weight: float = 0.1, flags: int = re.IGNORECASE) -> TaggedPattern:
    return TaggedPattern(tag=tag, regex=re.compile(pattern, flags), weight=weight)


def any_match(patterns: Iterable[TaggedPattern], text: str) -> bool:
    return any(p.search(text) for p in patterns)


CREDIBLE_DOMAINS = (
    # Major news organizations
    "nytimes.com", "washingtonpost.com", "wsj.com", "cnn.com", "bbc.co.uk", "bbc.com",
    "reuters.com", "ap.org", "apnews.com", "npr.org", "pbs.org", "time.com", "newsweek.com",
    "theguardian.com", "ft.com", "economist.com", "bloomberg.com", "wired.com",
    "techcrunch.com", "vox.com", "axios.com", "politico.com", "thehill.com",
    # Business publications
    "forbes.com", "fortune.com", "inc.com", "entrepreneur.com", "hbr.org",
    "fastcompany.com", "businessinsider.com", "marketwatch.com", "cnbc.com",
    # Academic and research institutions
    "mit.edu", "stanford.edu", "harvard.edu", "oxford.ac.uk", "cambridge.ac.uk",
    # Government organizations
    "whitehouse.gov", "congress.gov", "supremecourt.gov", "census.gov",
    # Company newsrooms
    "blog.google", "news.microsoft.com", "about.fb.com", "amazon.science",
    "netflixtechblog.com",
)

TOP_TIER_DOMAINS = (
    "nytimes.com", "washingtonpost.com", "wsj.com", "cnn.com", "bbc.co.uk",
    "reuters.com", "ap.org", "npr.org", "time.com",
)

SUSPICIOUS_DOMAIN_PATTERNS = (
    tagged("free_tld", r"\.(tk|ml|ga|cf)$"),
    tagged("numeric_host", r"^\d+\."),
    tagged("cheap_tld", r"\.(xyz|info|biz|click|download|stream)$"),
)

SPAM_DOMAIN_MARKERS = ("spam", "fake", "scam", "test", "demo", "placeholder")

SPAM_PATTERNS = (
    tagged("clickbait", r"\b(you won'?t believe|shocking|unbelievable|incredible|amazing|must see)\b"),
    tagged("clickbait_trick", r"\b(one simple trick|this one weird|doctors hate|the secret to)\b"),
    tagged("exclamation_run", r"!{3,}", flags=0),
    tagged("shouting", r"\b[A-Z]{5,}\b", flags=0),
    tagged("spam_trigger", r"\b(free|money|cash|prize|winner|congratulations|limited time|act now)\b"),
    tagged("spam_offer", r"\b(lose weight|make money|work from home|click here|buy now)\b"),
    tagged("placeholder", r"\b(test|demo|sample|example|placeholder|lorem ipsum)\b"),
    tagged("unfinished", r"^\s*(under construction|coming soon|website is loading)"),
)

JOURNALIST_KEYWORDS = (
    "journalist", "reporter", "editor", "author", "writer", "correspondent",
    "contributor", "columnist", "bureau chief", "news", "media",
)

JOURNALISTIC_INDICATORS = (
    "reporter", "journalist", "editor", "author", "writer", "correspondent",
    "news", "article", "story", "investigation", "analysis", "opinion",
    "byline", "dateline", "source", "interview", "press", "media",
)

CONTACT_INDICATORS = (
    "@", "email", "mailto:", "contact", "reach out", "phone", "call", "dial",
    "twitter.com", "linkedin.com", "instagram.com", "facebook.com",
    "editor", "reporter", "journalist", "author", "writer", "contributor",
)

BYLINE_MARKERS = ("by ", "reported by", "written by")

OUTLET_MENTION_PATTERNS = (
    tagged("national_outlet", r"\b(new york times|washington post|wall street journal|cnn|bbc|reuters|associated press)\b"),
    tagged("regional_outlet", r"\b(los angeles times|chicago tribune|miami herald|boston globe)\b"),
    tagged("tech_outlet", r"\b(techcrunch|wired|venturebeat|the verge)\b"),
)

PROFESSIONAL_TITLE_PATTERNS = (
    tagged("senior_role", r"\b(senior|lead|chief|executive|managing)\s+(editor|reporter|writer|producer|journalist)\b"),
    tagged("beat_role", r"\b(news|politics|business|tech|health)\s+(editor|reporter|correspondent)\b"),
)

CONTACT_SECTION_PATTERNS = (
    tagged("reach_out", r"\b(contact|reach out|follow|connect)\s+(us|me|the author)\b"),
    tagged("media_inquiries", r"\b(for media inquiries|press inquiries|journalist inquiries)\b"),
)

RICHNESS_CONTACT_SECTION = tagged(
    "contact_section", r"\b(contact\s+(information|details|email|phone)|reach\s+(out|me|us))\b"
)

OUTLET_AFFILIATION_PATTERN = tagged(
    "outlet_affiliation", r"\b(at|for|from)\s+(new york times|washington post|cnn|bbc|reuters|ap)\b"
)

EMAIL_PATTERN = re.compile(r"\b[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}\b", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"(?<!\d)(\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")
SOCIAL_URL_PATTERN = re.compile(r"\b(twitter|linkedin|instagram|facebook)\.com/\w+", re.IGNORECASE)
SOCIAL_HANDLE_PATTERN = re.compile(r"(?<![\w.])@\w+")

STRUCTURE_PATTERNS = (
    tagged("sections", r"\b(introduction|background|analysis|conclusion)\b"),
    tagged("attribution", r"\b(source|reference|citation|credit)\b"),
    tagged("byline_label", r"\b(editor|reporter|correspondent)\s*:\s*\w+"),
)

EXPERTISE_PATTERNS = (
    tagged("expert_role", r"\b(expert|specialist|analyst|researcher|professor|ph\.?d\.?)(?!\w)"),
    tagged("experience", r"\b\d+\s*years?\s*(of\s*)?experience\b"),
    tagged("award", r"\b(award|pulitzer|peabody|emmy)[- ]?(winning|winner|recipient)\b"),
)

FRAGMENT_PATTERN = re.compile(r"\b(and|but|or|so|because)\s*$", re.IGNORECASE | re.MULTILINE)

TRACKING_PARAMS = ("utm_source", "campaign", "affiliate", "ref")

SUPPORTED_LANGUAGES = ("en", "es", "fr", "de", "it", "pt", "ja", "ko", "zh")

# Contact scoring tables
PROFESSIONAL_ROLE_TERMS = (
    "editor", "reporter", "journalist", "author", "writer", "correspondent",
    "analyst", "expert", "consultant", "researcher", "specialist",
    "senior", "lead", "chief", "director", "manager", "head",
    "producer", "anchor", "host", "contributor", "columnist",
)
MEDIA_TERMS = ("news", "media", "publication", "broadcast", "journalism")
SENIORITY_TERMS = ("senior", "lead", "chief", "principal", "executive", "managing")
BEAT_TERMS = ("politics", "business", "technology", "health", "science", "arts", "sports")
RELEVANT_TITLE_TERMS = ("editor", "reporter", "journalist", "writer", "contributor", "correspondent")
BIO_QUALITY_TERMS = ("award", "published", "education", "experience", "background")
BIO_CONTACT_TERMS = ("email", "twitter", "linkedin", "contact", "reach")
BIO_PROFESSIONAL_LANGUAGE = ("specializes", "covers", "reports", "writes", "focuses", "expertise")
MEDIA_OUTLET_NAMES = (
    "new york times", "washington post", "wall street journal", "cnn", "bbc",
    "reuters", "associated press", "npr", "pbs",
)
CREDIBLE_PLATFORMS = ("linkedin", "twitter", "instagram", "facebook")

NAME_TITLE_CONTAMINATION = (
    tagged("honorific", r"^(mr|mrs|ms|dr|prof|sir|madam)\.?\s+"),
    tagged("suffix", r",?\s(jr|sr|ii|iii|iv|v)\.?$"),
    tagged("role_suffix", r"(editor|reporter|journalist|author)$"),
)
NAME_SUSPICIOUS = (
    tagged("long_lowercase", r"^[a-z]{20,}$", flags=0),
    tagged("repeated_chars", r"([a-z])\1{3,}"),
    tagged("symbols_only", r"^[\W_]+$"),
    tagged("all_digits", r"^[\d\s]+$"),
    tagged("placeholder", r"^(test|dummy|fake|sample|example)"),
)
NAME_UNREALISTIC = (
    tagged("digits", r"\d", flags=0),
    tagged("all_caps", r"^[A-Z\s.'-]+$", flags=0),
    tagged("all_lower", r"^[a-z\s.'-]+$", flags=0),
    tagged("placeholder", r"test|example|sample|demo"),
    tagged("initial_only", r"^[a-z]\.?$"),
)

EMAIL_FORMAT = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PROFESSIONAL_EMAIL_PATTERNS = (
    tagged("first_last", r"^[a-z]+\.[a-z]+@"),
    tagged("single_token", r"^[a-z]+[a-z0-9]*@[a-z]+\.[a-z]{2,}$"),
    tagged("initial_last", r"^[a-z]\.[a-z]+@[a-z]+\.[a-z]{2,}$"),
)
GENERIC_MAILBOXES = (
    "info", "contact", "hello", "news", "editor", "support", "admin", "team",
    "sales", "marketing", "press", "newsroom", "tips",
)
CREDIBLE_EMAIL_DOMAIN_PATTERNS = (
    tagged("news_org", r"(^|\.)(nytimes\.com|washingtonpost\.com|wsj\.com|cnn\.com|bbc\.(co\.uk|com)|reuters\.com|ap\.org|npr\.org|pbs\.org)$"),
    tagged("tech_org", r"(^|\.)(google\.com|microsoft\.com|apple\.com|amazon\.com|meta\.com)$"),
    tagged("academic", r"(\.edu|\.ac\.[a-z]{2})$"),
)
DISPOSABLE_EMAIL_MARKERS = (
    "10minutemail", "tempmail", "mailinator", "guerrillamail", "yopmail",
    "throwaway", "spam", "fake", "test",
)

# Deduplication tables
NICKNAMES = {
    "william": ("will", "bill", "billy", "liam"),
    "james": ("jim", "jimmy", "jamie"),
    "robert": ("bob", "bobby", "rob"),
    "michael": ("mike", "mikey"),
    "john": ("johnny", "jack"),
    "david": ("dave",),
    "richard": ("rick", "dick", "rich"),
    "joseph": ("joe", "joey"),
    "thomas": ("tom", "tommy"),
    "charles": ("charlie", "chuck"),
    "christopher": ("chris",),
    "daniel": ("dan", "danny"),
    "matthew": ("matt",),
    "anthony": ("tony",),
    "elizabeth": ("beth", "liz", "lizzy", "betty"),
    "jennifer": ("jen", "jenny"),
    "margaret": ("maggie", "peggy"),
    "susan": ("sue", "suzie"),
    "linda": ("lynn",),
    "patricia": ("pat", "patty"),
    "jessica": ("jess", "jessie"),
    "katherine": ("kate", "kathy", "katie"),
    "alexander": ("alex",),
    "samantha": ("sam",),
}

OUTLET_ALIASES = (
    ("nytimes.com", "nyt.com"),
    ("washingtonpost.com", "washpost.com"),
    ("wsj.com", "wallstreetjournal.com"),
    ("cnn.com", "cnnnews.com"),
    ("bbc.co.uk", "bbc.com"),
    ("reuters.com", "reuters.net"),
    ("apnews.com", "ap.org"),
)

TITLE_HIERARCHY = {
    "editor": ("managing editor", "executive editor", "senior editor", "editor"),
    "reporter": ("reporter", "journalist", "correspondent", "staff writer"),
    "producer": ("senior producer", "executive producer", "producer"),
    "director": ("director", "head", "manager"),
    "writer": ("writer", "author", "contributor", "columnist"),
}

TITLE_CONNECTORS = re.compile(r"\b(and|for|of|in|at)\b|&")

DOMAIN_SUFFIX_LABELS = ("com", "org", "net", "co", "uk", "edu", "gov", "io", "news")

# Freelancer tables
FREELANCER_BIO_PATTERNS = (
    tagged("freelance", r"freelance"),
    tagged("independent", r"independent"),
    tagged("contributor", r"contributor"),
    tagged("writes_for", r"writes for"),
    tagged("bylines_in", r"bylines in"),
    tagged("appeared_in", r"work has appeared in"),
    tagged("published_in", r"published in"),
    tagged("multi_outlet", r"covers .+ for multiple"),
)
FREELANCER_TITLE_PATTERNS = (
    tagged("freelance", r"freelance"),
    tagged("independent", r"independent"),
    tagged("contributor", r"contributor"),
    tagged("correspondent", r"correspondent"),
    tagged("stringer", r"stringer"),
)
FREELANCER_SOCIAL_PATTERNS = (
    tagged("freelance", r"freelance"),
    tagged("independent_journalist", r"independent journalist"),
    tagged("writes_for", r"writes for"),
    tagged("bylines", r"bylines:"),
)
PERSONAL_EMAIL_DOMAINS = (
    "gmail.com", "googlemail.com", "yahoo.com", "hotmail.com", "outlook.com",
    "icloud.com", "proton.me", "protonmail.com", "aol.com",
)
STRINGER_TITLE_PATTERN = tagged("stringer", r"stringer")


@dataclass(frozen=True)
class PatternTables:
    """Read-only lookup tables shared by all analyzers."""

    credible_domains: tuple[str, ...] = CREDIBLE_DOMAINS
    top_tier_domains: tuple[str, ...] = TOP_TIER_DOMAINS
    suspicious_domain_patterns: tuple[TaggedPattern, ...] = SUSPICIOUS_DOMAIN_PATTERNS
    spam_domain_markers: tuple[str, ...] = SPAM_DOMAIN_MARKERS
    spam_patterns: tuple[TaggedPattern, ...] = SPAM_PATTERNS
    supported_languages: tuple[str, ...] = SUPPORTED_LANGUAGES
    personal_email_domains: tuple[str, ...] = PERSONAL_EMAIL_DOMAINS
    disposable_email_markers: tuple[str, ...] = DISPOSABLE_EMAIL_MARKERS
    nicknames: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(NICKNAMES))
    )
    outlet_aliases: tuple[frozenset[str], ...] = tuple(frozenset(a) for a in OUTLET_ALIASES)
    title_hierarchy: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(TITLE_HIERARCHY))
    )

    def is_credible_domain(self, domain: str) -> bool:
        return _suffix_match(domain, self.credible_domains)

    def is_top_tier_domain(self, domain: str) -> bool:
        return _suffix_match(domain, self.top_tier_domains)

    def is_suspicious_domain(self, domain: str) -> bool:
        return bool(domain) and any_match(self.suspicious_domain_patterns, domain)

    def is_spam_domain(self, domain: str) -> bool:
        return any(marker in domain for marker in self.spam_domain_markers)

    def nickname_equivalent(self, a: str, b: str) -> bool:
        if a == b:
            return True
        for formal, nicks in self.nicknames.items():
            group = (formal, *nicks)
            if a in group and b in group:
                return True
        return False

    def outlet_alias(self, a: str, b: str) -> bool:
        return any(a in group and b in group for group in self.outlet_aliases)


def _suffix_match(domain: str, candidates: Iterable[str]) -> bool:
    if not domain:
        return False
    return any(domain == c or domain.endswith("." + c) for c in candidates)


DEFAULT_TABLES = PatternTables()


def build_tables(cfg: TablesConfig | None = None) -> PatternTables:
    """Extend the default tables with values from the ``tables`` config section."""
    if cfg is None:
        return DEFAULT_TABLES

    nicknames = dict(DEFAULT_TABLES.nicknames)
    for formal, nicks in cfg.nicknames.items():
        key = formal.lower()
        nicknames[key] = tuple(dict.fromkeys((*nicknames.get(key, ()), *(n.lower() for n in nicks))))

    aliases = DEFAULT_TABLES.outlet_aliases + tuple(
        frozenset(d.lower() for d in group) for group in cfg.outlet_aliases if len(group) >= 2
    )

    return replace(
        DEFAULT_TABLES,
        credible_domains=DEFAULT_TABLES.credible_domains + tuple(d.lower() for d in cfg.credible_domains),
        top_tier_domains=DEFAULT_TABLES.top_tier_domains + tuple(d.lower() for d in cfg.top_tier_domains),
        spam_domain_markers=DEFAULT_TABLES.spam_domain_markers + tuple(cfg.spam_domain_markers),
        spam_patterns=DEFAULT_TABLES.spam_patterns
        + tuple(
            tagged(f"custom_{i}", pattern, cfg.spam_pattern_weight)
            for i, pattern in enumerate(cfg.spam_patterns)
        ),
        personal_email_domains=DEFAULT_TABLES.personal_email_domains
        + tuple(d.lower() for d in cfg.personal_email_domains),
        nicknames=MappingProxyType(nicknames),
        outlet_aliases=aliases,
    )
