"""TypeScript declaration parsing and structural type resolution."""

from tsbuilder.parser.checker import TypeResolver
from tsbuilder.parser.extractor import extract
from tsbuilder.parser.models import (
    DeclarationKind,
    FieldModel,
    ResolvedType,
    StructuralDeclaration,
    TypeDescription,
    TypeKind,
)
from tsbuilder.parser.source import SourceError, SourceFile, parse_source, read_source

__all__ = [
    "DeclarationKind",
    "FieldModel",
    "ResolvedType",
    "SourceError",
    "SourceFile",
    "StructuralDeclaration",
    "TypeDescription",
    "TypeKind",
    "TypeResolver",
    "extract",
    "parse_source",
    "read_source",
]
