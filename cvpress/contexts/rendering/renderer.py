"""
Document Renderer

Turns a display projection into PDF bytes: render markup, hand it to a
fresh engine instance, retry with backoff on failure. Per-attempt causes are
recorded for operators and collapsed into a single GenerationExhausted for
the caller.
"""

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, List, Mapping, Optional, Protocol

from jinja2 import Template
from tenacity import AsyncRetrying, RetryCallState, RetryError, stop_after_attempt

from cvpress.contexts.intake.normalizer import DisplayProjection
from cvpress.contexts.rendering.engine import PlaywrightEngine, is_connection_drop
from cvpress.contexts.rendering.logger import (
    log_attempt_failure,
    log_attempt_start,
    log_backoff,
    log_event_write_failed,
    log_render_exhausted,
    log_render_result,
)
from cvpress.contexts.templating.markup import render_markup
from cvpress.contexts.templating.registries import RenderAsset
from cvpress.exceptions import GenerationExhausted, RenderError
from cvpress.settings import Settings
from cvpress.utils.event_logging import log_render_event


class RenderEngine(Protocol):
    """Anything that can turn a complete HTML document into PDF bytes."""

    async def export_pdf(self, html: str) -> bytes: ...


@dataclass
class RenderFailure:
    """
    One failed render attempt.

    Attributes:
        attempt: 1-based attempt number
        kind: Error kind (engine_launch, render_surface, template_render, unexpected)
        message: Operator-facing error description
        connection_dropped: Whether the engine connection died
    """

    attempt: int
    kind: str
    message: str
    connection_dropped: bool = False


@dataclass
class RenderReport:
    """
    Result of a successful render.

    Attributes:
        pdf: Document bytes
        attempts: Attempts used, including the successful one
        failures: Failures recorded before success
        elapsed_s: Wall time across all attempts
    """

    pdf: bytes
    attempts: int
    failures: List[RenderFailure] = field(default_factory=list)
    elapsed_s: float = 0.0


class DocumentRenderer:
    """
    Renders projections to PDF with retry-with-backoff.

    The engine is injectable; by default a PlaywrightEngine launches a fresh
    headless browser per attempt.
    """

    def __init__(
        self,
        engine: Optional[RenderEngine] = None,
        retry_attempts: int = 1,
        retry_backoff_s: float = 1.0,
        disconnect_backoff_s: float = 3.0,
        events_file: Optional[Path] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            engine: PDF engine (default: PlaywrightEngine with default timeouts)
            retry_attempts: Extra attempts after the first (0 = single attempt)
            retry_backoff_s: Pause between attempts
            disconnect_backoff_s: Pause when the engine connection dropped
            events_file: JSON Lines operator event log (None disables it)
            sleep: Coroutine used for backoff pauses
        """
        if retry_attempts < 0:
            raise ValueError(f"retry_attempts must be >= 0, got: {retry_attempts}")

        self.engine = engine or PlaywrightEngine()
        self.retry_attempts = retry_attempts
        self.retry_backoff_s = retry_backoff_s
        self.disconnect_backoff_s = disconnect_backoff_s
        self.events_file = events_file
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, settings: Settings, engine: Optional[RenderEngine] = None
    ) -> "DocumentRenderer":
        return cls(
            engine=engine or PlaywrightEngine.from_settings(settings),
            retry_attempts=settings.retry_attempts,
            retry_backoff_s=settings.retry_backoff_s,
            disconnect_backoff_s=settings.disconnect_backoff_s,
            events_file=settings.events_path,
        )

    @property
    def max_attempts(self) -> int:
        return self.retry_attempts + 1

    def backoff_for(self, error: Optional[BaseException]) -> float:
        """Pause before the next attempt, longer when the engine connection dropped."""
        if is_connection_drop(error):
            return self.disconnect_backoff_s
        return self.retry_backoff_s

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.backoff_for(retry_state.outcome.exception())

    def _emit_event(self, event_type: str, request_id: str, **fields) -> None:
        # Event log write failures never change the render outcome
        try:
            log_render_event(self.events_file, event_type, request_id, **fields)
        except OSError as e:
            log_event_write_failed(self.events_file, event_type, e)

    def _record_failure(self, request_id: str, attempt: int, error: Exception) -> RenderFailure:
        failure = RenderFailure(
            attempt=attempt,
            kind=error.kind if isinstance(error, RenderError) else "unexpected",
            message=str(error) or type(error).__name__,
            connection_dropped=is_connection_drop(error),
        )
        log_attempt_failure(request_id, failure)
        self._emit_event(
            "render_attempt_failed",
            request_id,
            attempt=failure.attempt,
            kind=failure.kind,
            message=failure.message,
            connection_dropped=failure.connection_dropped,
        )
        return failure

    async def _render_once(
        self,
        projection: DisplayProjection,
        assets: Mapping[str, RenderAsset],
        template: Template,
    ) -> bytes:
        html = render_markup(template, projection, assets)
        return await self.engine.export_pdf(html)

    async def render_with_report(
        self,
        projection: DisplayProjection,
        assets: Mapping[str, RenderAsset],
        template: Template,
        request_id: Optional[str] = None,
    ) -> RenderReport:
        """
        Render a projection to PDF, retrying failed attempts.

        Args:
            projection: Output of intake normalize()
            assets: Output of AssetRegistry.get_assets()
            template: Compiled template from TemplateRegistry
            request_id: Identifier used in logs and events (default: random)

        Returns:
            RenderReport with the PDF and the failures recorded along the way

        Raises:
            GenerationExhausted: If every attempt failed
        """
        request_id = request_id or uuid.uuid4().hex[:12]
        failures: List[RenderFailure] = []
        start_time = time.time()

        def before_sleep(retry_state: RetryCallState) -> None:
            log_backoff(
                request_id,
                retry_state.next_action.sleep,
                is_connection_drop(retry_state.outcome.exception()),
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            before_sleep=before_sleep,
            sleep=self._sleep,
            reraise=False,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    log_attempt_start(request_id, attempt_number, self.max_attempts)
                    try:
                        pdf = await self._render_once(projection, assets, template)
                    except Exception as e:
                        failures.append(self._record_failure(request_id, attempt_number, e))
                        raise
        except RetryError as e:
            error = GenerationExhausted(attempts=len(failures), failures=failures)
            log_render_exhausted(request_id, error)
            self._emit_event(
                "render_exhausted",
                request_id,
                attempts=error.attempts,
                kinds=[failure.kind for failure in failures],
            )
            raise error from e.last_attempt.exception()

        report = RenderReport(
            pdf=pdf,
            attempts=len(failures) + 1,
            failures=failures,
            elapsed_s=time.time() - start_time,
        )
        log_render_result(request_id, report)
        self._emit_event(
            "render_succeeded",
            request_id,
            attempts=report.attempts,
            size=len(report.pdf),
            elapsed_s=round(report.elapsed_s, 2),
        )
        return report

    async def render(
        self,
        projection: DisplayProjection,
        assets: Mapping[str, RenderAsset],
        template: Template,
        request_id: Optional[str] = None,
    ) -> bytes:
        """
        Render a projection to PDF bytes.

        Raises:
            GenerationExhausted: If every attempt failed
        """
        report = await self.render_with_report(projection, assets, template, request_id)
        return report.pdf
