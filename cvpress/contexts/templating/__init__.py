"""
Templating Context

Responsibilities:
- Loads, compiles and caches Jinja2 CV templates
- Loads and caches embedded font assets
- Provides the helper filters/tests CV templates rely on
- Merges a display projection with assets into rendered markup

Owns: Template and asset caches, template helper functions, the HTML template
Never: Decides field visibility (intake) or drives the browser (rendering)
"""

from cvpress.contexts.templating.markup import render_markup
from cvpress.contexts.templating.registries import AssetRegistry, RenderAsset, TemplateRegistry

__all__ = ["AssetRegistry", "RenderAsset", "TemplateRegistry", "render_markup"]
