"""TypeScript rendering of builder specs."""

from tsbuilder.renderer.templates import TemplateRenderer

__all__ = ["TemplateRenderer"]
