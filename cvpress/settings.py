"""
Settings resolution for cvpress.

Layers, later overriding earlier:
1. Structured defaults (the Settings dataclass)
2. Packaged settings.yaml (or a caller-supplied YAML file)
3. CVPRESS_* environment variables (a .env file is loaded first)

OmegaConf validates and coerces the merged result against the dataclass, so
``CVPRESS_RETRY_ATTEMPTS=2`` arrives as an int.

Examples:
    >>> settings = load_settings()
    >>> settings.retry_attempts
    1

    >>> settings = load_settings(overrides={"retry_attempts": 0})
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()

PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_SETTINGS_PATH = PACKAGE_ROOT / "settings.yaml"
DEFAULT_TEMPLATE_DIR = PACKAGE_ROOT / "contexts" / "templating" / "template"

# Setting name -> environment variable that overrides it
ENV_OVERRIDES = {
    "template_name": "CVPRESS_TEMPLATE_NAME",
    "template_dir": "CVPRESS_TEMPLATE_DIR",
    "render_timeout_ms": "CVPRESS_RENDER_TIMEOUT_MS",
    "page_timeout_ms": "CVPRESS_PAGE_TIMEOUT_MS",
    "launch_timeout_ms": "CVPRESS_LAUNCH_TIMEOUT_MS",
    "retry_attempts": "CVPRESS_RETRY_ATTEMPTS",
    "retry_backoff_s": "CVPRESS_RETRY_BACKOFF_S",
    "disconnect_backoff_s": "CVPRESS_DISCONNECT_BACKOFF_S",
    "settle_ms": "CVPRESS_SETTLE_MS",
    "page_format": "CVPRESS_PAGE_FORMAT",
    "default_country_code": "CVPRESS_COUNTRY_CODE",
    "events_file": "CVPRESS_EVENTS_FILE",
    "log_level": "CVPRESS_LOG_LEVEL",
}


@dataclass
class Settings:
    """
    Configuration consumed by the pipeline.

    Attributes:
        template_name: File name of the CV template inside template_dir
        template_dir: Directory holding templates and asset files (None = packaged)
        render_timeout_ms: Budget for loading markup and waiting for network idle
        page_timeout_ms: Budget for creating a page in a fresh browser
        launch_timeout_ms: Budget for starting the browser process
        launch_poll_attempts: Responsiveness checks after launch
        launch_poll_interval_s: Delay between responsiveness checks
        retry_attempts: Extra attempts after the first failed render
        retry_backoff_s: Pause between attempts
        disconnect_backoff_s: Pause between attempts when the engine connection dropped
        settle_ms: Pause after network idle before exporting
        page_format: Paper format passed to the PDF export
        default_country_code: Prefix applied to phone numbers lacking one
        events_file: JSON Lines operator event log (None disables it)
        log_level: Console log level used by the CLI
        assets: Asset name -> path relative to template_dir
        launch_args: Extra Chromium command-line flags
    """

    template_name: str = "option-premium-clean.html.jinja"
    template_dir: Optional[str] = None
    render_timeout_ms: int = 30000
    page_timeout_ms: int = 10000
    launch_timeout_ms: int = 30000
    launch_poll_attempts: int = 3
    launch_poll_interval_s: float = 0.2
    retry_attempts: int = 1
    retry_backoff_s: float = 1.0
    disconnect_backoff_s: float = 3.0
    settle_ms: int = 250
    page_format: str = "A4"
    default_country_code: str = "+27"
    events_file: Optional[str] = None
    log_level: str = "INFO"
    assets: Dict[str, str] = field(default_factory=dict)
    launch_args: List[str] = field(default_factory=list)

    @property
    def template_path(self) -> Path:
        """Resolved template directory."""
        if self.template_dir is None:
            return DEFAULT_TEMPLATE_DIR
        return Path(self.template_dir)

    @property
    def events_path(self) -> Optional[Path]:
        """Resolved operator event log path, if enabled."""
        return Path(self.events_file) if self.events_file else None


def _env_overrides() -> Dict[str, str]:
    """Collect CVPRESS_* variables that are set in the environment."""
    overrides = {}
    for setting_name, env_var in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None and value != "":
            overrides[setting_name] = value
    return overrides


def _validate(settings: Settings) -> None:
    if settings.retry_attempts < 0:
        raise ValueError(f"retry_attempts must be >= 0, got: {settings.retry_attempts}")

    for name in ("render_timeout_ms", "page_timeout_ms", "launch_timeout_ms"):
        if getattr(settings, name) <= 0:
            raise ValueError(f"{name} must be positive, got: {getattr(settings, name)}")

    if settings.launch_poll_attempts < 1:
        raise ValueError(
            f"launch_poll_attempts must be >= 1, got: {settings.launch_poll_attempts}"
        )

    if settings.retry_backoff_s < 0 or settings.disconnect_backoff_s < 0:
        raise ValueError("Backoff durations must be >= 0")


def load_settings(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    use_env: bool = True,
) -> Settings:
    """
    Load settings from YAML defaults, environment variables and explicit overrides.

    Args:
        config_path: YAML file to load (default: packaged settings.yaml)
        overrides: Values applied last (useful for tests and the CLI)
        use_env: Apply CVPRESS_* environment variables (default: True)

    Returns:
        Validated Settings instance

    Raises:
        ValueError: If a value is out of range
        omegaconf.errors.ValidationError: If a value has the wrong type
    """
    if config_path is None:
        config_path = DEFAULT_SETTINGS_PATH

    layers = [OmegaConf.structured(Settings), OmegaConf.load(config_path)]
    if use_env:
        layers.append(OmegaConf.create(_env_overrides()))
    if overrides:
        layers.append(OmegaConf.create(overrides))

    settings = OmegaConf.to_object(OmegaConf.merge(*layers))
    _validate(settings)
    return settings
