"""Unit tests for CVPipeline with the packaged template and a scripted engine."""

import asyncio
import base64

import pytest

from cvpress.contexts.templating.markup import render_markup
from cvpress.contexts.templating.registries import TemplateRegistry
from cvpress.exceptions import GenerationExhausted, TemplateLoadFailure
from cvpress.pipeline import CVPipeline


@pytest.fixture
def pipeline_factory(test_settings, scripted_engine):
    """Build pipelines sharing isolated settings; returns (pipeline, engine)."""

    def build(failures=0, **engine_kwargs):
        engine = scripted_engine(failures=failures, **engine_kwargs)
        return CVPipeline(test_settings, engine=engine), engine

    return build


@pytest.mark.unit
def test_generate_returns_pdf(pipeline_factory, full_record, fake_pdf):
    pipeline, engine = pipeline_factory()

    assert pipeline.generate(full_record, request_id="req-1") == fake_pdf
    assert len(engine.calls) == 1


@pytest.mark.unit
def test_markup_carries_normalized_record(pipeline_factory, full_record):
    """Test the engine receives markup built from the projection, not the raw record."""
    pipeline, engine = pipeline_factory()
    pipeline.generate(full_record)
    html = engine.calls[0]

    assert "Thandi Mokoena" in html
    assert "+27821234567" in html
    assert "CERTIFICATIONS &amp; QUALIFICATIONS" in html
    assert "ADDITIONAL EXPERIENCE" in html
    assert '<main class="content standard">' in html
    assert "<li>English</li>" in html
    assert "<li>Xhosa</li>" in html
    assert '<span class="line line-first">Jane Doe</span>' in html
    assert '<div class="entry-title">University of Cape Town</div>' in html
    assert "@job_title" not in html
    assert ">none<" not in html


@pytest.mark.unit
def test_phone_centered_without_email(pipeline_factory):
    pipeline, engine = pipeline_factory()
    pipeline.generate({"full_name": "Sipho Dlamini", "phone": "0831112222", "email": "@"})

    assert '<div class="contact centered">' in engine.calls[0]


@pytest.mark.unit
def test_contact_not_centered_with_email(pipeline_factory, full_record):
    pipeline, engine = pipeline_factory()
    pipeline.generate(full_record)

    assert '<div class="contact">' in engine.calls[0]


@pytest.mark.unit
def test_sparse_layout(pipeline_factory):
    """Test that a record without titled experience and tertiary education renders sparse."""
    pipeline, engine = pipeline_factory()
    pipeline.generate({"full_name": "Sipho Dlamini", "skills": "Cooking, Driving"})

    html = engine.calls[0]
    assert '<main class="content sparse">' in html
    assert "<li>Cooking</li>" in html
    assert "WORK EXPERIENCE" not in html


@pytest.mark.unit
def test_omitted_sections_have_no_headings(pipeline_factory):
    pipeline, engine = pipeline_factory()
    pipeline.generate({"full_name": "Sipho Dlamini", "certificates": "none", "reference_1": "@"})

    html = engine.calls[0]
    assert "CERTIFICATIONS" not in html
    assert "REFERENCES" not in html


@pytest.mark.unit
def test_generate_base64(pipeline_factory, full_record, fake_pdf):
    pipeline, _ = pipeline_factory()
    encoded = pipeline.generate_base64(full_record)

    assert base64.b64decode(encoded) == fake_pdf


@pytest.mark.unit
def test_agenerate_with_report(pipeline_factory, full_record):
    pipeline, _ = pipeline_factory(failures=1)
    report = asyncio.run(pipeline.agenerate_with_report(full_record, request_id="req-2"))

    assert report.attempts == 2
    assert report.failures[0].attempt == 1


@pytest.mark.unit
def test_exhaustion_surfaces_single_error(pipeline_factory, full_record):
    pipeline, engine = pipeline_factory(failures=10)

    with pytest.raises(GenerationExhausted) as exc_info:
        pipeline.generate(full_record)

    assert exc_info.value.user_message == "Failed to generate PDF. Please try again later."
    assert len(engine.calls) == 2


@pytest.mark.unit
def test_missing_template_is_fatal(test_settings, scripted_engine, full_record):
    """Test a missing template fails before any render attempt."""
    test_settings.template_name = "does-not-exist.html.jinja"
    engine = scripted_engine()
    pipeline = CVPipeline(test_settings, engine=engine)

    with pytest.raises(TemplateLoadFailure):
        pipeline.generate(full_record)

    assert engine.calls == []


@pytest.mark.unit
def test_shared_template_registry(test_settings, scripted_engine, full_record):
    """Test pipelines sharing a registry compile the template once."""
    registry = TemplateRegistry(test_settings.template_path)
    first = CVPipeline(test_settings, engine=scripted_engine(), template_registry=registry)
    second = CVPipeline(test_settings, engine=scripted_engine(), template_registry=registry)

    first.generate(full_record)
    template = registry.get_template(test_settings.template_name)
    second.generate(full_record)

    assert registry.get_template(test_settings.template_name) is template


@pytest.mark.unit
def test_project_uses_configured_country_code(test_settings):
    test_settings.default_country_code = "+1"
    pipeline = CVPipeline(test_settings, engine=object())

    assert pipeline.project({"phone": "05551234"})["phone"] == "+15551234"


@pytest.mark.unit
def test_preview_html_escapes_values(test_settings):
    pipeline = CVPipeline(test_settings, engine=object())
    html = pipeline.preview_html({"full_name": "<script>alert(1)</script>", "skills": "C++, R&D"})

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "<li>R&amp;D</li>" in html


@pytest.mark.unit
def test_default_settings_render_without_asset_warnings(test_settings, log_messages):
    """Test the packaged defaults need no font files."""
    pipeline = CVPipeline(test_settings, engine=object())
    html = pipeline.preview_html({"full_name": "Sipho Dlamini"})

    assert "@font-face" not in html
    assert not [m for m in log_messages if "unavailable" in m]


@pytest.mark.unit
def test_page_size_left_to_export_format(test_settings):
    """Test the markup does not pin a paper size that would fight page_format."""
    html = CVPipeline(test_settings, engine=object()).preview_html({"full_name": "Sipho Dlamini"})

    assert "@page { margin: 0; }" in html
    assert "size: A4" not in html


@pytest.mark.unit
def test_placeholder_passed_straight_to_template_stays_hidden(test_settings):
    """Test raw placeholders reaching the template are treated as absent."""
    pipeline = CVPipeline(test_settings, engine=object())
    template = pipeline.templates.get_template(test_settings.template_name)

    html = render_markup(template, {"full_name": "@full_name", "content_mode": "sparse"}, {})

    assert "@full_name" not in html
