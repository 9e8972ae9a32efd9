"""
Report rendering for HTML and Markdown output.

Contacts are grouped by the domain of the page they were extracted from;
groups are ordered by size, then alphabetically. HTML goes through a
Jinja2 template, Markdown is assembled line by line.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
import re

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.helpers import extract_domain
from ..core.types import ExtractedContact, FreelancerProfile, PipelineResult


_NON_SLUG = re.compile(r"[^0-9a-z]+")


def _slugify(value: str) -> str:
    """Anchor id for a source group, e.g. "www.reuters.com" -> "www-reuters-com"."""
    return _NON_SLUG.sub("-", value.strip().lower()).strip("-") or "section"


def _group_contacts(contacts: list[ExtractedContact]) -> list[tuple[str, list[ExtractedContact]]]:
    grouped: dict[str, list[ExtractedContact]] = defaultdict(list)
    for contact in contacts:
        grouped[extract_domain(contact.source_url) or "unknown source"].append(contact)
    for items in grouped.values():
        items.sort(key=lambda c: (-c.confidence_score, c.name.lower()))
    return sorted(grouped.items(), key=lambda item: (-len(item[1]), item[0].lower()))


def _profile_label(profile: FreelancerProfile | None) -> str:
    if profile is None:
        return ""
    kind = "Freelancer" if profile.is_freelancer else "Staff"
    if profile.primary_outlet is not None:
        return f"{kind} ({profile.primary_outlet.outlet_name})"
    return kind


def render_html(result: PipelineResult, output_path: Path, title: str) -> None:
    """Render a pipeline result as an HTML report using the Jinja2 template.

    Args:
        result: Pipeline result to render
        output_path: Path where the HTML file will be written
        title: Report title displayed in the header
    """
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("report.html")

    used_ids: dict[str, int] = {}
    groups = []
    for group_name, items in _group_contacts(result.contacts):
        base_id = _slugify(group_name)
        count = used_ids.get(base_id, 0)
        used_ids[base_id] = count + 1
        groups.append(
            {
                "id": f"{base_id}-{count + 1}" if count else base_id,
                "name": group_name,
                "count": len(items),
                "contacts": [
                    {
                        "contact": contact,
                        "profile": result.profiles.get(contact.id),
                        "profile_label": _profile_label(result.profiles.get(contact.id)),
                    }
                    for contact in items
                ],
            }
        )

    html = template.render(
        title=title,
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        groups=groups,
        toc=[{"id": g["id"], "name": g["name"], "count": g["count"]} for g in groups],
        assessments=sorted(result.assessments, key=lambda a: -a.overall_score),
        duplicate_groups=result.duplicate_groups,
        failures=result.failures,
        statistics=result.statistics,
        total=len(result.contacts),
    )
    output_path.write_text(html, encoding="utf-8")


def render_markdown(result: PipelineResult, output_path: Path, title: str) -> None:
    extraction = result.statistics.get("extraction", {})
    lines = [
        f"# {title}",
        "",
        f"Total: {len(result.contacts)} unique contacts "
        f"({extraction.get('total_contacts', len(result.contacts))} extracted, "
        f"{len(result.duplicates)} duplicates)",
        "",
    ]

    for group, items in _group_contacts(result.contacts):
        lines.append(f"## {group}")
        lines.append("")
        for contact in items:
            lines.append(f"### {contact.name}")
            if contact.title:
                lines.append(f"- Title: {contact.title}")
            if contact.email:
                lines.append(f"- Email: {contact.email}")
            lines.append(
                f"- Scores: confidence {contact.confidence_score:.2f}, "
                f"quality {contact.quality_score:.2f}, relevance {contact.relevance_score:.2f}"
            )
            if contact.social_profiles:
                handles = ", ".join(f"{p.platform}:{p.handle}" for p in contact.social_profiles)
                lines.append(f"- Social: {handles}")
            profile = result.profiles.get(contact.id)
            if profile is not None:
                lines.append(f"- Profile: {_profile_label(profile)}")
                strategy = profile.contact_strategy
                lines.append(f"- Timing: {strategy.contact_timing}; approach: {strategy.pitch_approach}")
                for warning in strategy.warnings:
                    lines.append(f"  - Warning: {warning}")
            if contact.metadata.merged_from:
                lines.append(f"- Merged from: {', '.join(contact.metadata.merged_from)}")
            if contact.source_url:
                lines.append(f"- Source: {contact.source_url}")
            lines.append("")

    if result.duplicate_groups:
        lines.append("## Duplicate groups")
        lines.append("")
        for group in result.duplicate_groups:
            lines.append(
                f"- {group.id} [{group.duplicate_type.value}] {', '.join(group.contacts)}: {group.reasoning}"
            )
        lines.append("")

    if result.failures:
        lines.append("## Skipped items")
        lines.append("")
        for failure in result.failures:
            lines.append(f"- {failure['stage']} {failure['item']}: {failure['error']}")
        lines.append("")

    output_path.write_text("\n".join(lines), encoding="utf-8")
