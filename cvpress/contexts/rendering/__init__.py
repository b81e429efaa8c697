"""
Rendering Context

Responsibilities:
- Drives a fresh headless Chromium instance per render attempt
- Exports rendered markup to a paginated PDF
- Retries failed attempts with backoff and records their causes
- Guarantees browser teardown on every exit path

Owns: Engine lifecycle, PDF export, retry policy
Never: Modifies the projection or template content
"""

from cvpress.contexts.rendering.engine import PlaywrightEngine, is_connection_drop
from cvpress.contexts.rendering.renderer import (
    DocumentRenderer,
    RenderEngine,
    RenderFailure,
    RenderReport,
)

__all__ = [
    "DocumentRenderer",
    "PlaywrightEngine",
    "RenderEngine",
    "RenderFailure",
    "RenderReport",
    "is_connection_drop",
]
