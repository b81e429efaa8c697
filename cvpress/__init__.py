"""
cvpress - CV record to PDF rendering core

Turns a sparse record of personal and career fields into a rendered CV document.

Architecture:
- Intake Context: Field normalization into a display-ready projection
- Templating Context: Jinja2 template and font asset caching, template helpers
- Rendering Context: Headless Chromium PDF export with retry and teardown discipline
- Pipeline: Composes the three contexts for an external transport layer
"""

__version__ = "0.1.0"
