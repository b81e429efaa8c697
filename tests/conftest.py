"""Shared fixtures: fake render engines, log capture, isolated settings."""

from typing import List

import pytest
from loguru import logger

from cvpress.exceptions import RenderEngineLaunchFailure, RenderSurfaceFailure
from cvpress.settings import load_settings

FAKE_PDF = b"%PDF-1.7\n% fake document\n%%EOF\n"


class ScriptedEngine:
    """
    Engine that fails on the first ``failures`` calls, then returns FAKE_PDF.

    Records every HTML document it was asked to export.
    """

    def __init__(self, failures: int = 0, error_factory=None):
        self.failures = failures
        self.error_factory = error_factory or (
            lambda call: RenderSurfaceFailure(f"Markup load timed out (call {call})")
        )
        self.calls: List[str] = []

    async def export_pdf(self, html: str) -> bytes:
        self.calls.append(html)
        if len(self.calls) <= self.failures:
            raise self.error_factory(len(self.calls))
        return FAKE_PDF


@pytest.fixture
def fake_pdf():
    """Bytes every ScriptedEngine success returns."""
    return FAKE_PDF


@pytest.fixture
def scripted_engine():
    """Factory for ScriptedEngine instances."""
    return ScriptedEngine


@pytest.fixture
def dropped_connection_error():
    """Error factory simulating a browser that died mid-attempt."""
    return lambda call: RenderEngineLaunchFailure(
        "Browser failed to launch: Target closed", connection_dropped=True
    )


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during the test."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the environment, with instant backoff."""
    return load_settings(
        use_env=False,
        overrides={
            "retry_backoff_s": 0.0,
            "disconnect_backoff_s": 0.0,
            "events_file": str(tmp_path / "events.log"),
        },
    )


@pytest.fixture
def full_record():
    """A complete raw record resembling a real submission."""
    return {
        "full_name": "Thandi  Mokoena",
        "designation": "Software Engineer",
        "phone": "0821234567",
        "email": "thandi@example.com",
        "physical_address": "12 Long Street\nCape Town",
        "career_goal": "Build reliable systems.",
        "education_matric": "Rondebosch High School\nNational Senior Certificate\n2012",
        "tertiary_education": "University of Cape Town\nBSc Computer Science\n2013 - 2016",
        "certificates": "AWS Solutions Architect",
        "other_qualifications": "none",
        "skills": "Python, SQL, Docker",
        "languages": "English & Xhosa",
        "cv_format_type_full_1": "Backend Engineer",
        "job_duration_1": "2017 - 2021",
        "job_duties_1": "Built payment APIs\nMentored juniors",
        "cv_format_type_full_2": "@job_title",
        "job_duration_2": "@",
        "job_duties_2": "",
        "reference_1": "Jane Doe\nCTO, Acme\n+27 82 000 0000",
        "reference_2": "   ",
        "additional_experience": "Volunteer tutor\nCode4Kids\n2019",
    }
