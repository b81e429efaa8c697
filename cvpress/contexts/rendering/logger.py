"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[render]"


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_attempt_start(request_id: str, attempt: int, max_attempts: int) -> None:
    """Log start of one render attempt."""
    _log_debug(f"{request_id}: generating PDF (attempt {attempt}/{max_attempts})")


def log_attempt_failure(request_id: str, failure) -> None:
    """
    Log a failed render attempt.

    Args:
        request_id: Generation request identifier
        failure: RenderFailure recorded for the attempt
    """
    _log_warning(f"{request_id}: attempt {failure.attempt} failed [{failure.kind}]")
    for line in failure.message.splitlines():
        _log_debug(f"  {line}")


def log_backoff(request_id: str, seconds: float, connection_dropped: bool) -> None:
    """Log the pause before the next attempt."""
    reason = "engine connection dropped" if connection_dropped else "retrying"
    _log_info(f"{request_id}: {reason}, waiting {seconds:.1f}s before next attempt")


def log_render_result(
    request_id: str,
    report,  # RenderReport
) -> None:
    """Log a successful render."""
    _log_success(
        f"{request_id}: PDF generated ({len(report.pdf)} bytes, "
        f"{report.attempts} attempt(s), {report.elapsed_s:.2f}s)"
    )


def log_render_exhausted(request_id: str, error) -> None:
    """
    Log exhaustion of all attempts with every recorded cause.

    Args:
        request_id: Generation request identifier
        error: GenerationExhausted
    """
    _log_error(f"{request_id}: PDF generation failed after {error.attempts} attempt(s)")
    for failure in error.failures:
        _log_error(f"  Attempt {failure.attempt} [{failure.kind}]: {failure.message.splitlines()[0]}")


def log_event_write_failed(events_file, event_type: str, error: Exception) -> None:
    """Log that an operator event could not be appended to the event log."""
    _log_warning(f"Could not write '{event_type}' event to {events_file}: {error}")
