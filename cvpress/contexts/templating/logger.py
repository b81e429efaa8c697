"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[template]"


# Wrapper functions with automatic [template] prefix


def _log_warning(message: str) -> None:
    """Log warning message with [template] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level templating-specific logging helpers


def log_asset_degraded(asset_name: str, error: Exception) -> None:
    """Log that an asset failed to load and will render without its payload."""
    _log_warning(f"Asset '{asset_name}' unavailable, rendering without it")
    _log_debug(f"  Cause: {error}")


def log_markup_rendered(template_name: str, markup_length: int) -> None:
    """Log a successful template render."""
    _log_debug(f"Rendered '{template_name}' to {markup_length} characters of markup")
