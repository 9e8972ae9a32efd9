from pathlib import Path

from contact_intel.core.types import (
    ContactStrategy,
    DuplicateGroup,
    DuplicateType,
    ExtractedContact,
    ExtractionMetadata,
    FreelancerProfile,
    PipelineResult,
)
from contact_intel.output.json_writer import to_jsonable
from contact_intel.output.renderer import render_html, render_markdown


def _result() -> PipelineResult:
    contacts = [
        ExtractedContact(
            id="c1",
            name="Maria Lopez",
            email="maria.lopez@reuters.com",
            title="Technology Reporter",
            source_url="https://www.reuters.com/technology/a",
            confidence_score=0.82,
            metadata=ExtractionMetadata(merged_from=["c1", "c2"]),
        ),
        ExtractedContact(
            id="c3",
            name="Tom Becker",
            source_url="https://apnews.com/article/b",
            confidence_score=0.55,
        ),
        ExtractedContact(
            id="c4",
            name="Hannah Osei",
            source_url="https://www.reuters.com/world/c",
            confidence_score=0.61,
        ),
    ]
    return PipelineResult(
        contacts=contacts,
        duplicate_groups=[
            DuplicateGroup(
                id="dup_0123456789ab",
                contacts=("c1", "c2"),
                similarity_score=0.9,
                duplicate_type=DuplicateType.EMAIL,
                confidence_score=0.82,
                selected_contact="c1",
                reasoning="Email addresses match or are very similar",
            )
        ],
        profiles={
            "c1": FreelancerProfile(
                contact_id="c1",
                name="Maria Lopez",
                email="maria.lopez@reuters.com",
                is_freelancer=False,
                confidence=0.1,
                contact_strategy=ContactStrategy(
                    preferred_outlet="Reuters",
                    warnings=["Activity appears to be declining - verify current status"],
                ),
            )
        },
        statistics={"extraction": {"total_contacts": 4, "duplicate_rate": 0.25}},
        failures=[{"stage": "scoring", "item": "c9", "code": "SCORING_FAILED", "error": "bad title"}],
    )


def test_render_markdown_groups_contacts_by_source_domain(tmp_path: Path) -> None:
    output_path = tmp_path / "report.md"

    render_markdown(_result(), output_path, "Contacts")
    text = output_path.read_text(encoding="utf-8")

    assert text.startswith("# Contacts")
    assert text.index("## www.reuters.com") < text.index("## apnews.com")
    assert text.index("### Maria Lopez") < text.index("### Hannah Osei")
    assert "- Merged from: c1, c2" in text
    assert "- Profile: Staff" in text
    assert "Warning: Activity appears to be declining" in text
    assert "## Duplicate groups" in text
    assert "- scoring c9: bad title" in text


def test_render_html_escapes_contact_fields(tmp_path: Path) -> None:
    output_path = tmp_path / "report.html"
    result = _result()
    result.contacts[1].name = "Tom <script>alert(1)</script>"

    render_html(result, output_path, "Contacts")
    html = output_path.read_text(encoding="utf-8")

    assert "<title>Contacts</title>" in html
    assert 'href="#www-reuters-com"' in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "<script>alert(1)</script>" not in html
    assert "dup_0123456789ab" in html
    assert "duplicate rate 25.0%" in html


def test_to_jsonable_converts_enums_tuples_and_nested_dataclasses() -> None:
    data = to_jsonable(_result())

    group = data["duplicate_groups"][0]
    assert group["duplicate_type"] == "EMAIL"
    assert group["contacts"] == ["c1", "c2"]
    assert data["contacts"][0]["extraction_method"] == "AI_BASED"
    assert data["profiles"]["c1"]["contact_strategy"]["preferred_outlet"] == "Reuters"


def test_render_html_anchors_contacts_without_source(tmp_path: Path) -> None:
    output_path = tmp_path / "report.html"
    result = _result()
    result.contacts.append(ExtractedContact(id="c5", name="Lena Park", confidence_score=0.4))

    render_html(result, output_path, "Contacts")
    html = output_path.read_text(encoding="utf-8")

    assert 'href="#unknown-source"' in html
    assert 'id="unknown-source"' in html
