"""Unit tests for settings resolution."""

import os

import pytest
from omegaconf.errors import ValidationError

from cvpress.settings import DEFAULT_TEMPLATE_DIR, Settings, load_settings


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any CVPRESS_* variables inherited from the shell or a .env file."""
    for name in list(os.environ):
        if name.startswith("CVPRESS_"):
            monkeypatch.delenv(name)
    return monkeypatch


@pytest.mark.unit
def test_packaged_defaults(clean_env):
    settings = load_settings()

    assert isinstance(settings, Settings)
    assert settings.template_name == "option-premium-clean.html.jinja"
    assert settings.render_timeout_ms == 30000
    assert settings.retry_attempts == 1
    assert settings.default_country_code == "+27"
    assert settings.template_path == DEFAULT_TEMPLATE_DIR
    assert settings.events_path is None
    assert settings.assets == {}
    assert "--no-sandbox" in settings.launch_args


@pytest.mark.unit
def test_env_overrides_are_coerced(clean_env, tmp_path):
    clean_env.setenv("CVPRESS_RETRY_ATTEMPTS", "3")
    clean_env.setenv("CVPRESS_RETRY_BACKOFF_S", "0.5")
    clean_env.setenv("CVPRESS_TEMPLATE_DIR", str(tmp_path))
    clean_env.setenv("CVPRESS_EVENTS_FILE", str(tmp_path / "events.log"))

    settings = load_settings()

    assert settings.retry_attempts == 3
    assert settings.retry_backoff_s == 0.5
    assert settings.template_path == tmp_path
    assert settings.events_path == tmp_path / "events.log"


@pytest.mark.unit
def test_env_ignored_when_disabled(clean_env):
    clean_env.setenv("CVPRESS_RETRY_ATTEMPTS", "4")
    assert load_settings(use_env=False).retry_attempts == 1


@pytest.mark.unit
def test_overrides_win_over_env(clean_env):
    clean_env.setenv("CVPRESS_RETRY_ATTEMPTS", "4")
    assert load_settings(overrides={"retry_attempts": 0}).retry_attempts == 0


@pytest.mark.unit
def test_custom_yaml(clean_env, tmp_path):
    config = tmp_path / "settings.yaml"
    config.write_text("template_name: minimal.html.jinja\nsettle_ms: 0\n", encoding="utf-8")

    settings = load_settings(config_path=config)

    assert settings.template_name == "minimal.html.jinja"
    assert settings.settle_ms == 0
    assert settings.page_timeout_ms == 10000


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"retry_attempts": -1}, "retry_attempts"),
        ({"render_timeout_ms": 0}, "render_timeout_ms"),
        ({"page_timeout_ms": -5}, "page_timeout_ms"),
        ({"launch_poll_attempts": 0}, "launch_poll_attempts"),
        ({"disconnect_backoff_s": -1.0}, "Backoff"),
    ],
)
def test_out_of_range_values_rejected(clean_env, overrides, message):
    with pytest.raises(ValueError, match=message):
        load_settings(overrides=overrides)


@pytest.mark.unit
def test_wrong_type_rejected(clean_env):
    clean_env.setenv("CVPRESS_RETRY_ATTEMPTS", "twice")
    with pytest.raises(ValidationError):
        load_settings()


@pytest.mark.unit
def test_assets_mapped_from_yaml(clean_env, tmp_path):
    config = tmp_path / "settings.yaml"
    config.write_text("assets:\n  body_font: fonts/Body.woff2\n", encoding="utf-8")

    assert load_settings(config_path=config).assets == {"body_font": "fonts/Body.woff2"}
