"""Maps resolved field types to the value types builder setters accept."""

from __future__ import annotations

import re
from typing import Optional

from tsbuilder.config import EmitConfig
from tsbuilder.parser.models import ResolvedType, TypeDescription, TypeKind

_MODULE_REFERENCE = re.compile(r'import\("[^"]*"\)')


def rewrite_references(text: str, namespace: str) -> str:
    """Point every ``import("...")`` qualifier at the single schema namespace."""
    return _MODULE_REFERENCE.sub(namespace, text)


def map_parameter_type(resolved: ResolvedType, emit: Optional[EmitConfig] = None) -> str:
    """Render one constituent of a field type as a setter accepts it.

    Arrays are unwrapped one level and re-suffixed with ``[]``.  Primitives
    stay bare; anything composite is wrapped in the recursive-partial marker.
    """
    emit = emit or EmitConfig()
    target = resolved
    if resolved.is_array and resolved.element is not None:
        target = resolved.element

    text = rewrite_references(target.text, emit.namespace_alias)
    if not target.is_primitive:
        text = f"{emit.partial_type}<{text}>"
    elif target is not resolved and target.kind == TypeKind.RAW and " " in text:
        text = f"({text})"

    if target is not resolved:
        text += "[]"
    return text


def accepted_type(description: TypeDescription, emit: Optional[EmitConfig] = None) -> str:
    """Join the mapped constituents of *description* into one union type.

    ``true`` widens to ``boolean`` and ``false`` is dropped, so a plain
    boolean field accepts ``boolean`` rather than either literal.
    """
    rendered = [map_parameter_type(t, emit) for t in description.types]
    if not rendered:
        return "never"
    kept: list[str] = []
    for text in rendered:
        if text == "false":
            continue
        if text == "true":
            text = "boolean"
        if text not in kept:
            kept.append(text)
    return " | ".join(kept) or "boolean"
