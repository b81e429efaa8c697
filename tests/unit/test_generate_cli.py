"""Unit tests for the generate_cv.py command line."""

import base64
import json

import pytest
from typer.testing import CliRunner

import generate_cv

runner = CliRunner()


@pytest.fixture
def record_file(tmp_path, full_record):
    path = tmp_path / "thandi.json"
    path.write_text(json.dumps(full_record), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch):
    """Keep the CLI from replacing the test session's loguru handlers."""
    monkeypatch.setattr(generate_cv, "setup_logger", lambda **kwargs: None)


@pytest.fixture
def cli_pipeline(monkeypatch, test_settings, scripted_engine):
    """Route the CLI through isolated settings and a scripted engine."""
    engine = scripted_engine()
    original_init = generate_cv.CVPipeline.__init__

    def init_with_engine(self, settings=None, **kwargs):
        original_init(self, test_settings, engine=engine)

    monkeypatch.setattr(generate_cv, "load_settings", lambda overrides=None: test_settings)
    monkeypatch.setattr(generate_cv.CVPipeline, "__init__", init_with_engine)
    return engine


@pytest.mark.unit
def test_generate_writes_pdf(record_file, cli_pipeline, fake_pdf):
    result = runner.invoke(generate_cv.app, ["generate", str(record_file)])

    assert result.exit_code == 0, result.output
    assert record_file.with_suffix(".pdf").read_bytes() == fake_pdf
    assert "PDF generated" in result.output


@pytest.mark.unit
def test_generate_base64_to_stdout(record_file, cli_pipeline, fake_pdf):
    result = runner.invoke(generate_cv.app, ["generate", str(record_file), "--base64"])

    assert result.exit_code == 0
    assert base64.b64decode(result.output.strip()) == fake_pdf


@pytest.mark.unit
def test_generate_failure_shows_user_message(record_file, monkeypatch, test_settings, scripted_engine):
    test_settings.retry_attempts = 0
    original_init = generate_cv.CVPipeline.__init__

    def init_failing(self, settings=None, **kwargs):
        original_init(self, test_settings, engine=scripted_engine(failures=5))

    monkeypatch.setattr(generate_cv, "load_settings", lambda overrides=None: test_settings)
    monkeypatch.setattr(generate_cv.CVPipeline, "__init__", init_failing)

    result = runner.invoke(generate_cv.app, ["generate", str(record_file)])

    assert result.exit_code == 1
    assert "Failed to generate PDF. Please try again later." in result.output


@pytest.mark.unit
def test_normalize_prints_projection(record_file, cli_pipeline):
    result = runner.invoke(generate_cv.app, ["normalize", str(record_file)])

    assert result.exit_code == 0
    projection = json.loads(result.output)
    assert projection["phone"] == "+27821234567"
    assert projection["work_experience_1"]["title"] == "Backend Engineer"
    assert projection["content_mode"] == "standard"


@pytest.mark.unit
def test_normalize_as_record(record_file, cli_pipeline):
    result = runner.invoke(generate_cv.app, ["normalize", str(record_file), "--as-record"])

    record = json.loads(result.output)
    assert record["cv_format_type_full_1"] == "Backend Engineer"
    assert "content_mode" not in record


@pytest.mark.unit
def test_bad_record_file(tmp_path, cli_pipeline):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")

    result = runner.invoke(generate_cv.app, ["normalize", str(path)])

    assert result.exit_code == 1
    assert "must be a JSON object" in result.output
