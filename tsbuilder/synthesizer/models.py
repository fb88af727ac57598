"""Pydantic v2 models for synthesized builder specifications.

A :class:`BuilderSpec` is the structured intermediate form between a
structural declaration and emitted code: the renderer turns it into
TypeScript text and :mod:`tsbuilder.synthesizer.runtime` turns it into a
live Python class.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class MethodKind(str, Enum):
    """Role of a builder method."""
    SETTER = "setter"
    TYPENAME = "typename"
    ACCESSOR = "accessor"


class SkipReason(str, Enum):
    """Why a declaration produced no builder."""
    NO_FIELDS = "no_fields"
    UNION = "union"
    GENERIC = "generic"


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------

class TypeParameterSpec(BaseModel):
    name: str
    constraint: Optional[str] = None
    default: Optional[str] = None


class ParameterSpec(BaseModel):
    name: str
    type: str
    optional: bool = False


class MethodSpec(BaseModel):
    """One method of the builder class."""

    name: str = Field(..., description="Method name as emitted")
    kind: MethodKind
    type_parameters: list[TypeParameterSpec] = Field(default_factory=list)
    parameters: list[ParameterSpec] = Field(default_factory=list)
    return_type: str = Field(..., description="Declared return type")
    field_name: Optional[str] = Field(
        default=None, description="Accumulator key written by setters and the tag method"
    )
    accepted_type: Optional[str] = Field(
        default=None, description="Setter value type, joined with ' | '"
    )
    value: Optional[str] = Field(default=None, description="Literal stamped by the tag method")


class AccumulatorSpec(BaseModel):
    """The private field bag every builder instance owns."""

    name: str = "obj"
    type: str = Field(..., description="Recursively-partial type of the bag")


class ClassSpec(BaseModel):
    name: str
    exported: bool = True
    accumulator: AccumulatorSpec
    methods: list[MethodSpec] = Field(default_factory=list)


class FunctionSpec(BaseModel):
    """The factory that wraps an optional seed in a new builder."""

    name: str
    exported: bool = True
    type_parameters: list[TypeParameterSpec] = Field(default_factory=list)
    parameters: list[ParameterSpec] = Field(default_factory=list)
    return_type: str
    constructs: str = Field(..., description="Class the factory instantiates")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class BuilderSpec(BaseModel):
    """Everything needed to emit one builder unit."""

    declaration_name: str
    target_type: str = Field(..., description="Full declared shape, e.g. SchemaTypes.User")
    typename_field: str = "__typename"
    builder_class: ClassSpec
    factory: FunctionSpec

    @property
    def class_name(self) -> str:
        return self.builder_class.name

    @property
    def setters(self) -> list[MethodSpec]:
        return [m for m in self.builder_class.methods if m.kind == MethodKind.SETTER]

    @property
    def typename_method(self) -> MethodSpec:
        return next(m for m in self.builder_class.methods if m.kind == MethodKind.TYPENAME)

    @property
    def accessor(self) -> MethodSpec:
        return next(m for m in self.builder_class.methods if m.kind == MethodKind.ACCESSOR)


class Skip(BaseModel):
    """A declaration that was deliberately not turned into a builder."""

    declaration_name: str
    reason: SkipReason
    diagnostic: Optional[str] = Field(
        default=None, description="Warning to show the user, if any"
    )
