"""
Templating Registries

Process-lifetime registries for compiled CV templates and embedded binary
assets (fonts). Both are write-once-then-read-only: an entry is computed on
first use and never invalidated, so cached reads need no locking.
"""

import base64
import mimetypes
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    Template,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)

from cvpress.contexts.templating.helpers import register_helpers
from cvpress.contexts.templating.logger import _log_debug, log_asset_degraded
from cvpress.exceptions import AssetLoadFailure, TemplateLoadFailure
from cvpress.settings import DEFAULT_TEMPLATE_DIR

# Font types mimetypes does not know on every platform
FONT_MIME_TYPES = {
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
}


@dataclass(frozen=True)
class RenderAsset:
    """
    Named binary payload embedded into rendered markup.

    Attributes:
        name: Template-facing asset name (e.g., 'body_font')
        path: Source file
        data: Encoded payload ('' when the asset failed to load)
        encoding: Encoding of data
        mime_type: MIME type for data: URLs
    """

    name: str
    path: Path
    data: str
    encoding: str = "base64"
    mime_type: str = "application/octet-stream"

    @property
    def loaded(self) -> bool:
        return self.data != ""

    @property
    def data_url(self) -> str:
        """data: URL for CSS/HTML embedding ('' when not loaded)."""
        if not self.loaded:
            return ""
        return f"data:{self.mime_type};{self.encoding},{self.data}"


class TemplateRegistry:
    """
    Registry for loading and caching compiled Jinja2 CV templates.

    Templates live as files under ``templates_base_path`` and are looked up by
    file name (e.g., 'option-premium-clean.html.jinja'). HTML autoescaping is
    on; helpers that emit markup return ``Markup``.
    """

    def __init__(self, templates_base_path: Path = None):
        """
        Initialize the template registry.

        Args:
            templates_base_path: Directory holding template files. Defaults to
                the packaged cvpress/contexts/templating/template/
        """
        if templates_base_path is None:
            templates_base_path = DEFAULT_TEMPLATE_DIR

        self.templates_base_path = Path(templates_base_path)
        self._cache: Dict[str, Template] = {}
        self._lock = threading.Lock()

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_base_path)),
            autoescape=select_autoescape(
                enabled_extensions=("html", "htm", "jinja"), default_for_string=True
            ),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        register_helpers(self.env)

    def get_template(self, template_name: str) -> Template:
        """
        Get a compiled template by name, compiling and caching it on first use.

        Args:
            template_name: Template file name relative to templates_base_path

        Returns:
            Compiled Jinja2 Template

        Raises:
            TemplateLoadFailure: If the file is missing, unreadable or has syntax
                errors. Failures are not cached.
        """
        # Cached reads take no lock
        template = self._cache.get(template_name)
        if template is not None:
            return template

        with self._lock:
            # Another caller may have compiled it while we waited
            if template_name in self._cache:
                return self._cache[template_name]

            template_path = self.get_template_path(template_name)
            _log_debug(f"Compiling template: {template_path}")

            try:
                template = self.env.get_template(template_name)
            except TemplateNotFound as e:
                raise TemplateLoadFailure(
                    f"Template not found: '{template_name}'",
                    template_name=template_name,
                    template_path=template_path,
                    original_error=e,
                ) from e
            except TemplateSyntaxError as e:
                raise TemplateLoadFailure(
                    f"Template has syntax errors: '{template_name}' (line {e.lineno})",
                    template_name=template_name,
                    template_path=template_path,
                    original_error=e,
                ) from e
            except UnicodeDecodeError as e:
                raise TemplateLoadFailure(
                    f"Template is not valid UTF-8: '{template_name}'",
                    template_name=template_name,
                    template_path=template_path,
                    original_error=e,
                ) from e
            except OSError as e:
                raise TemplateLoadFailure(
                    f"Template could not be read: '{template_name}'",
                    template_name=template_name,
                    template_path=template_path,
                    original_error=e,
                ) from e

            self._cache[template_name] = template
            _log_debug(f"Template compiled and cached: {template_name}")
            return template

    def get_template_path(self, template_name: str) -> Path:
        """Get the file path for a template name."""
        return self.templates_base_path / template_name

    def clear_cache(self):
        """Clear the template cache."""
        with self._lock:
            self._cache.clear()

    def is_cached(self, template_name: str) -> bool:
        """Check if a template is in the cache."""
        return template_name in self._cache


class AssetRegistry:
    """
    Registry for embedded binary assets, read once and cached by file path.

    A failed read degrades to an empty payload plus a warning; the degraded
    asset is cached too, so the warning is logged once per path.
    """

    def __init__(self, assets_base_path: Path = None, asset_paths: Optional[Mapping[str, str]] = None):
        """
        Initialize the asset registry.

        Args:
            assets_base_path: Directory relative asset paths resolve against
            asset_paths: Asset name -> path (relative to assets_base_path, or absolute)
        """
        if assets_base_path is None:
            assets_base_path = DEFAULT_TEMPLATE_DIR

        self.assets_base_path = Path(assets_base_path)
        self.asset_paths = dict(asset_paths or {})
        self._cache: Dict[Path, RenderAsset] = {}
        self._lock = threading.Lock()

    def _resolve(self, relative_path: str) -> Path:
        path = Path(relative_path)
        if not path.is_absolute():
            path = self.assets_base_path / path
        return path.resolve()

    @staticmethod
    def _read_asset(name: str, path: Path) -> RenderAsset:
        try:
            payload = path.read_bytes()
        except OSError as e:
            raise AssetLoadFailure(f"Asset '{name}' could not be read: {e}", asset_path=path) from e

        mime_type = FONT_MIME_TYPES.get(path.suffix.lower()) or (
            mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        )
        return RenderAsset(
            name=name,
            path=path,
            data=base64.b64encode(payload).decode("ascii"),
            mime_type=mime_type,
        )

    def get_asset(self, name: str, relative_path: str) -> RenderAsset:
        """
        Get one asset, reading it on first use.

        Args:
            name: Template-facing asset name
            relative_path: Path relative to assets_base_path

        Returns:
            RenderAsset (empty payload if the file could not be read)
        """
        path = self._resolve(relative_path)
        asset = self._cache.get(path)
        if asset is not None:
            return asset

        with self._lock:
            if path in self._cache:
                return self._cache[path]

            try:
                asset = self._read_asset(name, path)
                _log_debug(f"Loaded asset '{name}' ({len(asset.data)} base64 chars)")
            except AssetLoadFailure as e:
                log_asset_degraded(name, e)
                asset = RenderAsset(name=name, path=path, data="")

            self._cache[path] = asset
            return asset

    def get_assets(self) -> Dict[str, RenderAsset]:
        """
        Get every configured asset keyed by name.

        Returns:
            Mapping of asset name -> RenderAsset
        """
        return {
            name: self.get_asset(name, relative_path)
            for name, relative_path in self.asset_paths.items()
        }

    def is_cached(self, relative_path: str) -> bool:
        """Check if the asset at a path has been loaded (or degraded)."""
        return self._resolve(relative_path) in self._cache
