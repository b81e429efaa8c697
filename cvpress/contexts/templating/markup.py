"""
Markup rendering: projection + assets -> HTML.
"""

from typing import Mapping

from jinja2 import Template, TemplateError

from cvpress.contexts.intake.normalizer import DisplayProjection
from cvpress.contexts.templating.logger import log_markup_rendered
from cvpress.contexts.templating.registries import RenderAsset
from cvpress.exceptions import TemplateRenderError

ASSETS_KEY = "assets"


def build_render_context(
    projection: DisplayProjection, assets: Mapping[str, RenderAsset]
) -> dict:
    """
    Merge a projection with the cached assets into one render-time context.

    Assets are exposed under the ``assets`` key so they cannot shadow projection fields.
    """
    context = dict(projection)
    context[ASSETS_KEY] = dict(assets)
    return context


def render_markup(
    template: Template, projection: DisplayProjection, assets: Mapping[str, RenderAsset]
) -> str:
    """
    Render a compiled template with a projection and assets.

    Args:
        template: Compiled template from TemplateRegistry
        projection: Output of intake normalize()
        assets: Output of AssetRegistry.get_assets()

    Returns:
        HTML markup

    Raises:
        TemplateRenderError: If the template raises during rendering
    """
    try:
        html = template.render(build_render_context(projection, assets))
    except TemplateError as e:
        raise TemplateRenderError(
            "Template failed to render", template_name=template.name, original_error=e
        ) from e

    log_markup_rendered(template.name, len(html))
    return html
