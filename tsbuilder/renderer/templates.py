"""Jinja2 template rendering for generated builder units.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``tsbuilder/renderer/templates/`` directory and renders builder specs and
the index module to TypeScript text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from tsbuilder.config import EmitConfig
from tsbuilder.synthesizer.models import BuilderSpec, FunctionSpec, MethodSpec
from tsbuilder.utils import is_identifier


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

BUILDER_TEMPLATE = "builder.ts.j2"
INDEX_TEMPLATE = "index.ts.j2"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders builder specs to TypeScript source.

    Indentation, quote style and the names of the partial marker and schema
    namespace come from the :class:`EmitConfig` the renderer is built with.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        emit: Optional[EmitConfig] = None,
    ) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.emit = emit or EmitConfig()
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["quote"] = _quote_filter
        self.env.filters["member_access"] = _member_access_filter
        self.env.filters["signature"] = _signature_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context."""
        template = self.env.get_template(template_path)
        return template.render(emit=self.emit, i=self.emit.indent, **context)

    def render_builder(self, spec: BuilderSpec, source_stem: str) -> str:
        """TypeScript text of one builder unit."""
        return self.render(BUILDER_TEMPLATE, {"spec": spec, "source_stem": source_stem})

    def render_index(self, modules: list[str]) -> str:
        """TypeScript text re-exporting every generated unit."""
        return self.render(INDEX_TEMPLATE, {"modules": modules})


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _quote_filter(value: str, quote: str = "'") -> str:
    """Wrap *value* in a TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace(quote, "\\" + quote)
    return f"{quote}{escaped}{quote}"


def _member_access_filter(name: str, quote: str = "'") -> str:
    """``.name`` for identifiers, ``['na-me']`` otherwise."""
    if is_identifier(name):
        return f".{name}"
    return f"[{_quote_filter(name, quote)}]"


def _signature_filter(spec: MethodSpec | FunctionSpec) -> str:
    """``name<P extends T>(val: P): R`` for a method or function spec."""
    generics = ""
    if spec.type_parameters:
        parts = []
        for param in spec.type_parameters:
            text = param.name
            if param.constraint:
                text += f" extends {param.constraint}"
            if param.default:
                text += f" = {param.default}"
            parts.append(text)
        generics = "<" + ", ".join(parts) + ">"
    params = ", ".join(
        f"{p.name}{'?' if p.optional else ''}: {p.type}" for p in spec.parameters
    )
    return f"{spec.name}{generics}({params}): {spec.return_type}"
