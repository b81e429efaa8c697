"""
Typed failures surfaced by the cvpress core.

Every error carries an HTTP-style status code and a user-facing message so the
external transport layer can map it without inspecting internals. Operator
detail (paths, original errors, per-attempt causes) lives on the exception
attributes and in the full ``str()``, never in ``user_message``.
"""

from pathlib import Path
from typing import List, Optional


class CVPressError(Exception):
    """
    Base class for all cvpress failures.

    Attributes:
        message: Operator-facing error description
        status_code: Transport-level status the caller should report
        user_message: Safe message for end users
    """

    status_code: int = 500
    user_message: str = "Internal server error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TemplateLoadFailure(CVPressError):
    """
    Raised when a template source is missing or does not compile.

    Never cached by the template registry, so a later call can succeed once
    the source is fixed.

    Attributes:
        template_name: Name of the template that failed to load
        template_path: Path the registry looked for the template at
        original_error: The underlying Jinja2 or OS error
    """

    def __init__(
        self,
        message: str,
        template_name: Optional[str] = None,
        template_path: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.template_name = template_name
        self.template_path = template_path
        self.original_error = original_error
        self.user_message = f"Failed to load template: {template_name}"

        parts = [message]
        if template_path:
            parts.append(f"Template: {template_path}")
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class AssetLoadFailure(CVPressError):
    """
    Raised when a font or image asset cannot be read.

    Non-fatal: the asset registry catches it, logs a warning, and substitutes
    an empty payload.
    """

    def __init__(self, message: str, asset_path: Optional[Path] = None):
        self.asset_path = asset_path
        super().__init__(message)


class RenderError(CVPressError):
    """
    Base class for a single failed render attempt.

    Attributes:
        connection_dropped: True when the engine connection died mid-attempt,
            which calls for a longer backoff before relaunching
    """

    kind: str = "render_error"

    def __init__(self, message: str, connection_dropped: bool = False):
        self.connection_dropped = connection_dropped
        super().__init__(message)


class RenderEngineLaunchFailure(RenderError):
    """The browser process could not start or never became responsive."""

    kind = "engine_launch"


class RenderSurfaceFailure(RenderError):
    """Page creation failed or timed out, markup load timed out, or PDF export failed."""

    kind = "render_surface"


class TemplateRenderError(RenderError):
    """
    The compiled template raised while producing markup.

    Attributes:
        template_name: Name of the template being rendered
        original_error: The original Jinja2 error
    """

    kind = "template_render"

    def __init__(
        self,
        message: str,
        template_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.template_name = template_name
        self.original_error = original_error

        parts = [message]
        if template_name:
            parts.append(f"Template: {template_name}")
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class GenerationExhausted(CVPressError):
    """
    Raised when every render attempt has failed.

    This is the only rendering failure the pipeline lets reach the caller.

    Attributes:
        attempts: Number of attempts made
        failures: Recorded per-attempt failures (RenderFailure), for operators
    """

    user_message = "Failed to generate PDF. Please try again later."

    def __init__(self, attempts: int, failures: Optional[List] = None):
        self.attempts = attempts
        self.failures = list(failures or [])

        parts = [f"PDF generation failed after {attempts} attempt(s)"]
        for failure in self.failures:
            parts.append(f"  Attempt {failure.attempt} [{failure.kind}]: {failure.message}")

        super().__init__("\n".join(parts))
