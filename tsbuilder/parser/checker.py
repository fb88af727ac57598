"""Structural type resolution over a parsed declaration file.

:class:`TypeResolver` turns syntax nodes into :class:`ResolvedType` values
the way the compiler's type checker would present them: local aliases are
expanded, generic aliases are instantiated, ``boolean`` splits into its two
literals inside unions, and references to named object types are printed
module-qualified as ``import("<module>").Name``.  It also answers the one
structural question the generator asks: which properties does a
declaration have, and is its own type a union?
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from tsbuilder.parser.models import FieldModel, ResolvedType, TypeDescription, TypeKind
from tsbuilder.parser.source import SourceFile, resolve_module
from tsbuilder.parser.syntax import (
    AliasDeclaration,
    ArrayType,
    EnumDeclaration,
    FunctionType,
    ImportType,
    IndexedAccessType,
    IndexSignature,
    InterfaceDeclaration,
    IntersectionType,
    LiteralType,
    MethodSignature,
    ObjectType,
    OperatorType,
    Parameter,
    PropertySignature,
    RawType,
    ReferenceType,
    TupleType,
    TypeNode,
    TypeParameter,
    TypeQuery,
    UnionType,
)

Env = dict[str, list[ResolvedType]]

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

_INTRINSICS = {
    "string": TypeKind.STRING,
    "number": TypeKind.NUMBER,
    "bigint": TypeKind.BIGINT,
    "symbol": TypeKind.SYMBOL,
    "any": TypeKind.ANY,
    "unknown": TypeKind.UNKNOWN,
    "never": TypeKind.NEVER,
    "void": TypeKind.VOID,
    "undefined": TypeKind.UNDEFINED,
    "null": TypeKind.NULL,
    "object": TypeKind.OBJECT,
}

# Intrinsic constituents come first in a union, in the compiler's own order;
# everything else keeps the order it was written in.
_INTRINSIC_ORDER = {
    name: rank
    for rank, name in enumerate(
        ("any", "unknown", "undefined", "null", "string", "number",
         "bigint", "false", "true", "symbol", "void")
    )
}

_ANY = ResolvedType(text="any", kind=TypeKind.ANY)
_UNKNOWN = ResolvedType(text="unknown", kind=TypeKind.UNKNOWN)
_NEVER = ResolvedType(text="never", kind=TypeKind.NEVER)
_UNDEFINED = ResolvedType(text="undefined", kind=TypeKind.UNDEFINED)
_FALSE = ResolvedType(text="false", kind=TypeKind.LITERAL)
_TRUE = ResolvedType(text="true", kind=TypeKind.LITERAL)


@dataclass
class _Property:
    """A property or method member together with the bindings it resolves under."""

    member: PropertySignature | MethodSignature
    env: Env

    @property
    def name(self) -> str:
        return self.member.name


def _string_literal(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _property_key(name: str) -> str:
    if _IDENTIFIER.match(name) or name.isdigit():
        return name
    return _string_literal(name)


def _wrap(resolved: ResolvedType) -> str:
    """Parenthesize composite text used as an array element."""
    if resolved.kind in (TypeKind.UNION, TypeKind.FUNCTION, TypeKind.INTERSECTION):
        return f"({resolved.text})"
    return resolved.text


class TypeResolver:
    """Resolves type nodes from one :class:`SourceFile`.

    Args:
        source: The parsed file whose declarations references are looked up in.
    """

    def __init__(self, source: SourceFile):
        self.source = source
        self.strict_null_checks = source.strict_null_checks
        self._active: set[str] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def describe(self, node: TypeNode, env: Optional[Env] = None) -> TypeDescription:
        """Flattened, normalized union constituents of *node*."""
        return TypeDescription(types=self._constituents(node, env or {}))

    def resolve(self, node: TypeNode, env: Optional[Env] = None) -> ResolvedType:
        """A single resolved type for *node*; unions become one UNION value.

        A reference to a union alias keeps the alias name instead, as in
        ``Status[]`` or ``Maybe<User>[]``.
        """
        env = env or {}
        resolved = self._single(self._constituents(node, env))
        if resolved.kind == TypeKind.UNION:
            named = self._alias_text(node, env)
            if named is not None:
                return ResolvedType(text=named, kind=TypeKind.ALIAS)
        return resolved

    def declaration_env(self, decl: AliasDeclaration | InterfaceDeclaration) -> Env:
        """Bindings that leave a declaration's own type parameters unresolved."""
        return {
            param.name: [ResolvedType(text=param.name, kind=TypeKind.TYPE_PARAMETER)]
            for param in decl.type_parameters
        }

    def properties(
        self, decl: AliasDeclaration | InterfaceDeclaration
    ) -> tuple[list[FieldModel], bool]:
        """Fields of *decl* in declaration order, and whether its type is a union.

        Interfaces list their own members first, then inherited ones.  For a
        union alias only the members every constituent shares are kept.
        """
        env = self.declaration_env(decl)
        seen = frozenset({decl.name})
        is_union = False
        if isinstance(decl, InterfaceDeclaration):
            props = self._interface_shape(decl, env, seen)
        else:
            parts = self._union_parts(decl.body, env, seen)
            if len(parts) > 1:
                is_union = True
                props = self._common_shape(parts, seen)
            else:
                props = self._shape(decl.body, env, seen) or []
        return [self._field(prop) for prop in props], is_union

    # ------------------------------------------------------------------
    # Constituents
    # ------------------------------------------------------------------

    def _constituents(self, node: TypeNode, env: Env) -> list[ResolvedType]:
        return self._normalize(self._collect(node, env))

    def _collect(self, node: TypeNode, env: Env) -> list[ResolvedType]:
        if isinstance(node, UnionType):
            collected: list[ResolvedType] = []
            for member in node.members:
                collected.extend(self._collect(member, env))
            return collected
        if isinstance(node, ReferenceType):
            return self._collect_reference(node, env)
        if isinstance(node, IndexedAccessType):
            prop = self._index(node, env)
            if prop is not None:
                return self._member_types(prop)
            obj = self.resolve(node.object, env).text
            index = self.resolve(node.index, env).text
            return [ResolvedType(text=f"{obj}[{index}]", kind=TypeKind.RAW)]
        if isinstance(node, OperatorType) and node.operator == "keyof":
            props = self._shape(node.operand, env, frozenset())
            if props is not None:
                return [
                    ResolvedType(text=_string_literal(p.name), kind=TypeKind.LITERAL)
                    for p in props
                ]
            operand = self.resolve(node.operand, env)
            return [ResolvedType(text=f"keyof {_wrap(operand)}", kind=TypeKind.RAW)]
        return [self._resolve_node(node, env)]

    def _collect_reference(self, node: ReferenceType, env: Env) -> list[ResolvedType]:
        name = node.name
        if name in env and not node.arguments:
            return list(env[name])
        if name == "boolean":
            return [_FALSE, _TRUE]
        if name in ("true", "false"):
            return [ResolvedType(text=name, kind=TypeKind.LITERAL)]
        if name in _INTRINSICS:
            kind = _INTRINSICS[name]
            return [] if kind == TypeKind.NEVER else [ResolvedType(text=name, kind=kind)]

        args = [self._constituents(arg, env) for arg in node.arguments]
        head, _, rest = name.partition(".")
        decl = self.source.lookup(head)

        if name in ("Array", "ReadonlyArray") and len(args) == 1 and decl is None:
            element = self.resolve(node.arguments[0], env)
            if name == "ReadonlyArray":
                return [ResolvedType(text=f"readonly {_wrap(element)}[]", kind=TypeKind.OBJECT)]
            return [ResolvedType(text=f"{_wrap(element)}[]", kind=TypeKind.ARRAY, element=element)]

        suffix = self._arguments_text(args)
        if decl is not None:
            if isinstance(decl, EnumDeclaration):
                kind = TypeKind.LITERAL if rest else TypeKind.ENUM
                return [ResolvedType(text=self._qualify(name), kind=kind)]
            if rest or isinstance(decl, InterfaceDeclaration):
                return [ResolvedType(text=self._qualify(name) + suffix, kind=TypeKind.OBJECT)]
            return self._collect_alias(decl, args)

        if rest:
            module = self.source.namespace_module(head)
            if module is not None:
                return [ResolvedType(text=self._qualify(rest, module) + suffix, kind=TypeKind.OBJECT)]
        imported = self.source.imported(head)
        if imported is not None:
            module, exported = imported
            qualified = f"{exported}.{rest}" if rest else exported
            return [ResolvedType(text=self._qualify(qualified, module) + suffix, kind=TypeKind.OBJECT)]
        return [ResolvedType(text=name + suffix, kind=TypeKind.OBJECT)]

    def _collect_alias(
        self, decl: AliasDeclaration, args: list[list[ResolvedType]]
    ) -> list[ResolvedType]:
        body = decl.body
        if decl.name in self._active:
            return [ResolvedType(text=self._qualify(decl.name), kind=TypeKind.RAW)]
        if isinstance(body, (ObjectType, IntersectionType, FunctionType)):
            kind = TypeKind.FUNCTION if isinstance(body, FunctionType) else TypeKind.OBJECT
            text = self._qualify(decl.name) + self._arguments_text(args)
            return [ResolvedType(text=text, kind=kind)]

        env = self._bind(decl.type_parameters, args)
        self._active.add(decl.name)
        try:
            return self._collect(body, env)
        finally:
            self._active.discard(decl.name)

    def _bind(self, params: tuple[TypeParameter, ...], args: list[list[ResolvedType]]) -> Env:
        env: Env = {}
        for i, param in enumerate(params):
            if i < len(args):
                env[param.name] = args[i]
            elif param.default is not None:
                env[param.name] = self._constituents(param.default, dict(env))
            else:
                env[param.name] = [_UNKNOWN]
        return env

    def _normalize(self, types: list[ResolvedType]) -> list[ResolvedType]:
        if any(t.kind == TypeKind.ANY for t in types):
            return [_ANY]
        if any(t.kind == TypeKind.UNKNOWN for t in types):
            return [_UNKNOWN]
        unique: list[ResolvedType] = []
        seen: set[str] = set()
        for t in types:
            if t.kind == TypeKind.NEVER or t.text in seen:
                continue
            seen.add(t.text)
            unique.append(t)
        if not self.strict_null_checks and len(unique) > 1:
            unique = [
                t for t in unique if t.kind not in (TypeKind.NULL, TypeKind.UNDEFINED)
            ] or unique
        last = len(_INTRINSIC_ORDER)
        return sorted(unique, key=lambda t: _INTRINSIC_ORDER.get(t.text, last))

    def _single(self, types: list[ResolvedType]) -> ResolvedType:
        if not types:
            return _NEVER
        if len(types) == 1:
            return types[0]
        texts = [t.text for t in types]
        if "false" in texts and "true" in texts:
            if len(texts) == 2:
                return ResolvedType(text="boolean", kind=TypeKind.BOOLEAN)
            texts = ["boolean" if t == "false" else t for t in texts if t != "true"]
        return ResolvedType(text=" | ".join(texts), kind=TypeKind.UNION)

    # ------------------------------------------------------------------
    # Single nodes
    # ------------------------------------------------------------------

    def _resolve_node(self, node: TypeNode, env: Env) -> ResolvedType:
        if isinstance(node, LiteralType):
            if node.kind == "string":
                return ResolvedType(text=_string_literal(node.text), kind=TypeKind.LITERAL)
            if node.kind == "template":
                return ResolvedType(text=node.text, kind=TypeKind.TEMPLATE)
            return ResolvedType(text=node.text, kind=TypeKind.LITERAL)
        if isinstance(node, ArrayType):
            element = self.resolve(node.element, env)
            return ResolvedType(text=f"{_wrap(element)}[]", kind=TypeKind.ARRAY, element=element)
        if isinstance(node, IntersectionType):
            parts = [_wrap(self.resolve(member, env)) for member in node.members]
            return ResolvedType(text=" & ".join(parts), kind=TypeKind.INTERSECTION)
        if isinstance(node, TupleType):
            return ResolvedType(text=self._tuple_text(node, env), kind=TypeKind.TUPLE)
        if isinstance(node, FunctionType):
            text = self._signature_text(node.parameters, env) + " => " + self.resolve(node.returns, env).text
            return ResolvedType(text=text, kind=TypeKind.FUNCTION)
        if isinstance(node, ObjectType):
            return ResolvedType(text=self._object_text(node, env), kind=TypeKind.OBJECT)
        if isinstance(node, OperatorType):
            if node.operator == "unique":
                return ResolvedType(text="unique symbol", kind=TypeKind.SYMBOL)
            inner = self.resolve(node.operand, env)
            if inner.kind in (TypeKind.ARRAY, TypeKind.TUPLE):
                return ResolvedType(text=f"readonly {inner.text}", kind=TypeKind.OBJECT)
            return inner
        if isinstance(node, TypeQuery):
            return ResolvedType(text=f"typeof {node.name}", kind=TypeKind.RAW)
        if isinstance(node, ImportType):
            module = resolve_module(node.module, self.source.directory)
            args = [self._constituents(arg, env) for arg in node.arguments]
            text = self._qualify(node.name, module) + self._arguments_text(args)
            return ResolvedType(text=text, kind=TypeKind.OBJECT)
        if isinstance(node, RawType):
            return ResolvedType(text=node.text, kind=TypeKind.RAW)
        # Unions, references and indexed access only reach here nested.
        return self.resolve(node, env)

    def _tuple_text(self, node: TupleType, env: Env) -> str:
        parts = []
        for element in node.elements:
            text = self.resolve(element.type, env).text
            if element.rest:
                parts.append(f"...{text}")
            elif element.name:
                mark = "?" if element.optional else ""
                parts.append(f"{element.name}{mark}: {text}")
            else:
                parts.append(text)
        return "[" + ", ".join(parts) + "]"

    def _signature_text(self, parameters: tuple[Parameter, ...], env: Env) -> str:
        parts = []
        for param in parameters:
            text = self.resolve(param.type, env).text if param.type is not None else "any"
            prefix = "..." if param.rest else ""
            mark = "?" if param.optional else ""
            parts.append(f"{prefix}{param.name}{mark}: {text}")
        return "(" + ", ".join(parts) + ")"

    def _object_text(self, node: ObjectType, env: Env) -> str:
        parts = []
        for member in node.members:
            if isinstance(member, IndexSignature):
                key = self.resolve(member.key_type, env).text
                value = self.resolve(member.value_type, env).text
                ro = "readonly " if member.readonly else ""
                parts.append(f"{ro}[{member.key_name}: {key}]: {value};")
                continue
            mark = "?" if member.optional else ""
            name = _property_key(member.name)
            if isinstance(member, MethodSignature):
                returns = self.resolve(member.returns, env).text if member.returns is not None else "any"
                parts.append(f"{name}{mark}{self._signature_text(member.parameters, env)}: {returns};")
                continue
            ro = "readonly " if member.readonly else ""
            text = self._single(self._member_types(_Property(member, env))).text
            parts.append(f"{ro}{name}{mark}: {text};")
        if not parts:
            return "{}"
        return "{ " + " ".join(parts) + " }"

    def _alias_text(self, node: TypeNode, env: Env) -> Optional[str]:
        if not isinstance(node, ReferenceType) or node.name in env:
            return None
        decl = self.source.lookup(node.name)
        if not isinstance(decl, AliasDeclaration) or decl.name in self._active:
            return None
        args = [self._constituents(arg, env) for arg in node.arguments]
        return self._qualify(node.name) + self._arguments_text(args)

    def _qualify(self, name: str, module: Optional[str] = None) -> str:
        return f'import("{module or self.source.module_path}").{name}'

    def _arguments_text(self, args: list[list[ResolvedType]]) -> str:
        if not args:
            return ""
        return "<" + ", ".join(self._single(arg).text for arg in args) + ">"

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def _member_types(self, prop: _Property) -> list[ResolvedType]:
        member = prop.member
        if isinstance(member, MethodSignature):
            returns = self.resolve(member.returns, prop.env).text if member.returns is not None else "any"
            text = self._signature_text(member.parameters, prop.env) + " => " + returns
            types = [ResolvedType(text=text, kind=TypeKind.FUNCTION)]
        elif member.type is None:
            types = [_ANY]
        else:
            types = self._collect(member.type, prop.env)
        if member.optional and self.strict_null_checks:
            types = [_UNDEFINED, *types]
        return self._normalize(types)

    def _field(self, prop: _Property) -> FieldModel:
        member = prop.member
        return FieldModel(
            name=member.name,
            type=TypeDescription(types=self._member_types(prop)),
            optional=member.optional,
            readonly=getattr(member, "readonly", False),
        )

    def _index(self, node: IndexedAccessType, env: Env) -> Optional[_Property]:
        index = node.index
        if not isinstance(index, LiteralType) or index.kind == "template":
            return None
        for prop in self._shape(node.object, env, frozenset()) or []:
            if prop.name == index.text:
                return prop
        return None

    def _shape(self, node: TypeNode, env: Env, seen: frozenset[str]) -> Optional[list[_Property]]:
        """Members of an object-like type, or None when it is not one."""
        if isinstance(node, ObjectType):
            return [
                _Property(member, env)
                for member in node.members
                if not isinstance(member, IndexSignature)
            ]
        if isinstance(node, IntersectionType):
            merged: dict[str, _Property] = {}
            for part in node.members:
                for prop in self._shape(part, env, seen) or []:
                    merged.setdefault(prop.name, prop)
            return list(merged.values())
        if isinstance(node, ReferenceType):
            if node.name in env:
                return None
            decl = self.source.lookup(node.name)
            if decl is None or isinstance(decl, EnumDeclaration) or decl.name in seen:
                return None
            args = [self._constituents(arg, env) for arg in node.arguments]
            bound = self._bind(decl.type_parameters, args)
            if isinstance(decl, InterfaceDeclaration):
                return self._interface_shape(decl, bound, seen | {decl.name})
            return self._shape(decl.body, bound, seen | {decl.name})
        if isinstance(node, IndexedAccessType):
            prop = self._index(node, env)
            if prop is not None and isinstance(prop.member, PropertySignature) and prop.member.type is not None:
                return self._shape(prop.member.type, prop.env, seen)
        return None

    def _interface_shape(
        self, decl: InterfaceDeclaration, env: Env, seen: frozenset[str]
    ) -> list[_Property]:
        props = self._shape(decl.body, env, seen) or []
        names = {prop.name for prop in props}
        for base in decl.heritage:
            for prop in self._shape(base, env, seen) or []:
                if prop.name not in names:
                    names.add(prop.name)
                    props.append(prop)
        return props

    def _union_parts(
        self, node: TypeNode, env: Env, seen: frozenset[str]
    ) -> list[tuple[TypeNode, Env]]:
        """Constituent nodes of a union-typed declaration body."""
        if isinstance(node, UnionType):
            parts: list[tuple[TypeNode, Env]] = []
            for member in node.members:
                parts.extend(self._union_parts(member, env, seen))
            return parts
        if isinstance(node, ReferenceType):
            if node.name == "boolean":
                return [(ReferenceType("false"), env), (ReferenceType("true"), env)]
            if node.name in env:
                bound = env[node.name]
                if len(bound) > 1:
                    return [(RawType(t.text), {}) for t in bound]
                return [(node, env)]
            decl = self.source.lookup(node.name)
            if (
                isinstance(decl, AliasDeclaration)
                and decl.name not in seen
                and isinstance(decl.body, (UnionType, ReferenceType))
            ):
                args = [self._constituents(arg, env) for arg in node.arguments]
                bound_env = self._bind(decl.type_parameters, args)
                return self._union_parts(decl.body, bound_env, seen | {decl.name})
        return [(node, env)]

    def _common_shape(
        self, parts: list[tuple[TypeNode, Env]], seen: frozenset[str]
    ) -> list[_Property]:
        shapes = [self._shape(node, env, seen) for node, env in parts]
        if any(shape is None for shape in shapes):
            return []
        common = set.intersection(*({prop.name for prop in shape} for shape in shapes))
        return [prop for prop in shapes[0] if prop.name in common]
