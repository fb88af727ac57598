"""Turns a parsed source file into the structural declarations builders are made from."""

from __future__ import annotations

from tsbuilder.parser.checker import TypeResolver
from tsbuilder.parser.models import DeclarationKind, StructuralDeclaration
from tsbuilder.parser.source import SourceFile
from tsbuilder.parser.syntax import AliasDeclaration, InterfaceDeclaration


def extract(source: SourceFile) -> list[StructuralDeclaration]:
    """List every alias, then every interface, with its resolved fields.

    Within each group declarations keep their source order.
    """
    resolver = TypeResolver(source)
    declarations = [
        _declaration(resolver, alias, DeclarationKind.ALIAS) for alias in source.aliases
    ]
    declarations.extend(
        _declaration(resolver, iface, DeclarationKind.INTERFACE) for iface in source.interfaces
    )
    return declarations


def _declaration(
    resolver: TypeResolver,
    decl: AliasDeclaration | InterfaceDeclaration,
    kind: DeclarationKind,
) -> StructuralDeclaration:
    fields, is_union = resolver.properties(decl)
    members = []
    if is_union:
        members = resolver.describe(decl.body, resolver.declaration_env(decl)).types
    return StructuralDeclaration(
        name=decl.name,
        kind=kind,
        fields=fields,
        is_union=is_union,
        members=members,
        type_parameters=[param.name for param in decl.type_parameters],
        line=decl.line,
    )
