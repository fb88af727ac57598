"""Pydantic v2 models for extracted TypeScript shapes.

Defines the read-only view the synthesizer works from: structural
declarations, their ordered fields, and each field's resolved type
description.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TypeKind(str, Enum):
    """Classification of a resolved type."""
    STRING = "string"
    NUMBER = "number"
    BIGINT = "bigint"
    BOOLEAN = "boolean"
    LITERAL = "literal"
    TEMPLATE = "template"
    ENUM = "enum"
    UNDEFINED = "undefined"
    NULL = "null"
    ANY = "any"
    UNKNOWN = "unknown"
    VOID = "void"
    NEVER = "never"
    SYMBOL = "symbol"
    OBJECT = "object"
    ARRAY = "array"
    TUPLE = "tuple"
    FUNCTION = "function"
    UNION = "union"
    INTERSECTION = "intersection"
    TYPE_PARAMETER = "type_parameter"
    ALIAS = "alias"
    RAW = "raw"


# Types passed to setters bare rather than wrapped in the partial marker.
# RAW covers text the parser could not read, which is used as-is.
PRIMITIVE_KINDS = frozenset({
    TypeKind.STRING,
    TypeKind.NUMBER,
    TypeKind.LITERAL,
    TypeKind.BOOLEAN,
    TypeKind.UNDEFINED,
    TypeKind.NULL,
    TypeKind.ANY,
    TypeKind.ENUM,
    TypeKind.RAW,
})

# Constituents whose apparent type (String, Number, Boolean, ...) has members
# of its own, so a union made only of them is never memberless.
APPARENT_MEMBER_KINDS = frozenset({
    TypeKind.STRING,
    TypeKind.NUMBER,
    TypeKind.BIGINT,
    TypeKind.BOOLEAN,
    TypeKind.LITERAL,
    TypeKind.TEMPLATE,
    TypeKind.ENUM,
    TypeKind.SYMBOL,
})


class DeclarationKind(str, Enum):
    """How a structural declaration was written in the source."""
    ALIAS = "alias"
    INTERFACE = "interface"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

class ResolvedType(BaseModel):
    """One resolved type with its display text.

    Module-qualified references render as ``import("<module>").Name``.
    """
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Display text of the type")
    kind: TypeKind = Field(..., description="Type classification")
    element: Optional[ResolvedType] = Field(
        default=None, description="Element type when kind is ARRAY"
    )

    @property
    def is_array(self) -> bool:
        return self.kind == TypeKind.ARRAY

    @property
    def is_primitive(self) -> bool:
        return self.kind in PRIMITIVE_KINDS


class TypeDescription(BaseModel):
    """A field type: one resolved type, or the constituents of a union."""
    model_config = ConfigDict(frozen=True)

    types: list[ResolvedType] = Field(default_factory=list, description="Union constituents")

    @property
    def is_union(self) -> bool:
        return len(self.types) > 1

    @property
    def text(self) -> str:
        return " | ".join(t.text for t in self.types)


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

class FieldModel(BaseModel):
    """A single named field of a structural declaration."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Property name as declared")
    type: TypeDescription = Field(..., description="Resolved field type")
    optional: bool = Field(default=False, description="Declared with '?'")
    readonly: bool = Field(default=False, description="Declared readonly")


class StructuralDeclaration(BaseModel):
    """A named type alias or interface and its ordered fields."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Declaration name, unique within the file")
    kind: DeclarationKind = Field(..., description="Alias or interface")
    fields: list[FieldModel] = Field(default_factory=list, description="Fields in declaration order")
    is_union: bool = Field(
        default=False, description="Whether the declaration's own type is a union"
    )
    members: list[ResolvedType] = Field(
        default_factory=list, description="Constituents of the declaration's own union type"
    )
    type_parameters: list[str] = Field(
        default_factory=list, description="Names of declared type parameters"
    )
    line: int = Field(default=0, description="1-based line of the declaration")

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def is_primitive_union(self) -> bool:
        """A union of primitives and literals, such as ``'a' | 'b'`` or ``string | number``."""
        return (
            self.is_union
            and bool(self.members)
            and all(t.kind in APPARENT_MEMBER_KINDS for t in self.members)
        )
