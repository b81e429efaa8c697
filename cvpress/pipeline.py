"""
CV generation pipeline.

Composes intake normalization, template/asset lookup and document rendering
into the interface consumed by the transport layer:

    pipeline = CVPipeline()
    pdf_bytes = pipeline.generate({"full_name": "Thandi Mokoena", "phone": "0821234567"})

Outcomes:
- PDF bytes on success
- TemplateLoadFailure when the configured template is missing or broken
- GenerationExhausted when every render attempt failed

Lower-level render failures never escape; they are logged and written to the
operator event log (when configured).
"""

import asyncio
import base64
import uuid
from typing import Optional

from loguru import logger

from cvpress.contexts.intake.normalizer import DisplayProjection, RawRecord, normalize
from cvpress.contexts.rendering.renderer import DocumentRenderer, RenderEngine, RenderReport
from cvpress.contexts.templating.markup import render_markup
from cvpress.contexts.templating.registries import AssetRegistry, TemplateRegistry
from cvpress.settings import Settings, load_settings


class CVPipeline:
    """
    Normalizer -> template cache -> renderer.

    One pipeline instance is meant to live for the whole process so its
    template and asset caches are shared by every request.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine: Optional[RenderEngine] = None,
        template_registry: Optional[TemplateRegistry] = None,
        asset_registry: Optional[AssetRegistry] = None,
    ):
        """
        Args:
            settings: Pipeline settings (default: load_settings())
            engine: PDF engine override (default: PlaywrightEngine from settings)
            template_registry: Shared template cache (default: one for settings.template_path)
            asset_registry: Shared asset cache (default: one for settings.assets)
        """
        self.settings = settings or load_settings()
        self.templates = template_registry or TemplateRegistry(self.settings.template_path)
        self.assets = asset_registry or AssetRegistry(
            self.settings.template_path, self.settings.assets
        )
        self.renderer = DocumentRenderer.from_settings(self.settings, engine=engine)

    def project(self, record: RawRecord) -> DisplayProjection:
        """Normalize a raw record with the configured country code."""
        return normalize(record, country_code=self.settings.default_country_code)

    def preview_html(self, record: RawRecord) -> str:
        """
        Render the CV markup only, without launching a browser.

        Raises:
            TemplateLoadFailure: If the template is missing or broken
            TemplateRenderError: If the template raises while rendering
        """
        template = self.templates.get_template(self.settings.template_name)
        return render_markup(template, self.project(record), self.assets.get_assets())

    async def agenerate_with_report(
        self, record: RawRecord, request_id: Optional[str] = None
    ) -> RenderReport:
        """
        Generate a CV and return the full render report.

        Raises:
            TemplateLoadFailure: If the template is missing or broken
            GenerationExhausted: If every render attempt failed
        """
        request_id = request_id or uuid.uuid4().hex[:12]
        logger.info(f"[pipeline] {request_id}: generating CV ({len(record or {})} fields received)")

        projection = self.project(record)
        template = self.templates.get_template(self.settings.template_name)
        assets = self.assets.get_assets()

        return await self.renderer.render_with_report(projection, assets, template, request_id)

    async def agenerate(self, record: RawRecord, request_id: Optional[str] = None) -> bytes:
        """Async variant of generate()."""
        report = await self.agenerate_with_report(record, request_id)
        return report.pdf

    def generate(self, record: RawRecord, request_id: Optional[str] = None) -> bytes:
        """
        Generate a CV PDF from a raw record.

        Runs its own event loop; from async code use agenerate() instead.

        Args:
            record: Raw field mapping, already schema-validated upstream
            request_id: Identifier used in logs and events (default: random)

        Returns:
            PDF bytes

        Raises:
            TemplateLoadFailure: If the template is missing or broken
            GenerationExhausted: If every render attempt failed
        """
        return asyncio.run(self.agenerate(record, request_id))

    def generate_base64(self, record: RawRecord, request_id: Optional[str] = None) -> str:
        """Generate a CV PDF and return it base64-encoded."""
        pdf = self.generate(record, request_id)
        encoded = base64.b64encode(pdf).decode("ascii")
        logger.debug(f"[pipeline] Encoded PDF: {len(pdf)} bytes -> {len(encoded)} base64 chars")
        return encoded
