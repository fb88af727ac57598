"""Syntax-tree nodes for TypeScript declaration files.

The nodes are plain frozen dataclasses produced by the Lark grammar in
``grammar.lark`` (type expressions and object bodies) and by the statement
scanner in ``source.py`` (declarations and imports).  They carry no resolved
type information; ``checker.TypeResolver`` interprets them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Type expression nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReferenceType:
    """A (possibly dotted) type name with optional type arguments."""

    name: str
    arguments: tuple["TypeNode", ...] = ()


@dataclass(frozen=True)
class ImportType:
    """``import("module").Name<Args>``"""

    module: str
    name: str
    arguments: tuple["TypeNode", ...] = ()


@dataclass(frozen=True)
class LiteralType:
    text: str
    kind: str  # "string" | "number" | "template"


@dataclass(frozen=True)
class UnionType:
    members: tuple["TypeNode", ...]


@dataclass(frozen=True)
class IntersectionType:
    members: tuple["TypeNode", ...]


@dataclass(frozen=True)
class ArrayType:
    element: "TypeNode"


@dataclass(frozen=True)
class IndexedAccessType:
    object: "TypeNode"
    index: "TypeNode"


@dataclass(frozen=True)
class TupleElement:
    type: "TypeNode"
    name: str | None = None
    optional: bool = False
    rest: bool = False


@dataclass(frozen=True)
class TupleType:
    elements: tuple[TupleElement, ...]


@dataclass(frozen=True)
class Parameter:
    name: str
    type: "TypeNode | None"
    optional: bool = False
    rest: bool = False


@dataclass(frozen=True)
class FunctionType:
    parameters: tuple[Parameter, ...]
    returns: "TypeNode"


@dataclass(frozen=True)
class OperatorType:
    """``keyof T``, ``readonly T[]`` or ``unique symbol``."""

    operator: str
    operand: "TypeNode"


@dataclass(frozen=True)
class TypeQuery:
    """``typeof value``"""

    name: str


@dataclass(frozen=True)
class RawType:
    """Source text the grammar could not read.

    Resolution treats it as an opaque primitive and renders the text as-is.
    """

    text: str


# ---------------------------------------------------------------------------
# Object members
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropertySignature:
    name: str
    type: "TypeNode | None" = None
    optional: bool = False
    readonly: bool = False


@dataclass(frozen=True)
class MethodSignature:
    name: str
    parameters: tuple[Parameter, ...] = ()
    returns: "TypeNode | None" = None
    optional: bool = False


@dataclass(frozen=True)
class IndexSignature:
    key_name: str
    key_type: "TypeNode"
    value_type: "TypeNode"
    readonly: bool = False


Member = Union[PropertySignature, MethodSignature, IndexSignature]


@dataclass(frozen=True)
class ObjectType:
    members: tuple[Member, ...] = ()


TypeNode = Union[
    ReferenceType,
    ImportType,
    LiteralType,
    UnionType,
    IntersectionType,
    ArrayType,
    IndexedAccessType,
    TupleType,
    FunctionType,
    OperatorType,
    TypeQuery,
    ObjectType,
    RawType,
]


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypeParameter:
    name: str
    constraint: TypeNode | None = None
    default: TypeNode | None = None


@dataclass(frozen=True)
class AliasDeclaration:
    name: str
    body: TypeNode
    type_parameters: tuple[TypeParameter, ...] = ()
    exported: bool = False
    line: int = 0


@dataclass(frozen=True)
class InterfaceDeclaration:
    name: str
    body: ObjectType
    heritage: tuple[TypeNode, ...] = ()
    type_parameters: tuple[TypeParameter, ...] = ()
    exported: bool = False
    line: int = 0


@dataclass(frozen=True)
class EnumDeclaration:
    name: str
    members: tuple[str, ...] = ()
    const: bool = False
    line: int = 0


@dataclass(frozen=True)
class ImportDeclaration:
    """``import`` statement; *names* maps local name -> exported name."""

    module: str
    names: dict[str, str] = field(default_factory=dict)
    namespace: str | None = None
    default: str | None = None
    type_only: bool = False


Declaration = Union[AliasDeclaration, InterfaceDeclaration]


# ---------------------------------------------------------------------------
# Lark -> nodes
# ---------------------------------------------------------------------------


_ESCAPE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


def unquote(raw: str) -> str:
    """Strip the quotes from a string literal token and decode escapes."""
    return _ESCAPE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), raw[1:-1])


class _SyntaxBuilder(Transformer):
    """Turns the Lark parse tree into the dataclass nodes above."""

    def union_type(self, children):
        if len(children) == 1:
            return children[0]
        return UnionType(tuple(children))

    def intersection_type(self, children):
        if len(children) == 1:
            return children[0]
        return IntersectionType(tuple(children))

    def array_type(self, children):
        return ArrayType(children[0])

    def indexed_type(self, children):
        return IndexedAccessType(children[0], children[1])

    def keyof_type(self, children):
        return OperatorType("keyof", children[0])

    def readonly_type(self, children):
        return OperatorType("readonly", children[0])

    def unique_type(self, children):
        return OperatorType("unique", ReferenceType(str(children[0])))

    def typeof_type(self, children):
        return TypeQuery(children[0])

    def qualified_name(self, children):
        return ".".join(str(tok) for tok in children)

    def type_arguments(self, children):
        return tuple(children)

    def type_reference(self, children):
        arguments = children[1] if len(children) > 1 else ()
        return ReferenceType(children[0], arguments)

    def import_type(self, children):
        arguments = children[2] if len(children) > 2 else ()
        return ImportType(unquote(children[0]), children[1], arguments)

    def literal_type(self, children):
        tok = children[0]
        if tok.type == "STRING":
            return LiteralType(unquote(tok), "string")
        if tok.type == "TEMPLATE":
            return LiteralType(str(tok), "template")
        return LiteralType(str(tok), "number")

    def tuple_type(self, children):
        elements = [
            child if isinstance(child, TupleElement) else TupleElement(child)
            for child in children
        ]
        return TupleType(tuple(elements))

    def named_tuple_element(self, children):
        optional = any(isinstance(c, Token) and c.type == "OPTIONAL" for c in children)
        return TupleElement(children[-1], name=str(children[0]), optional=optional)

    def rest_element(self, children):
        return TupleElement(children[-1], rest=True)

    def fn_param(self, children):
        rest = optional = False
        name = ""
        for child in children:
            if isinstance(child, Token):
                if child.type == "ELLIPSIS":
                    rest = True
                elif child.type == "OPTIONAL":
                    optional = True
                else:
                    name = str(child)
        return Parameter(name, children[-1], optional=optional, rest=rest)

    def fn_params(self, children):
        return tuple(children)

    def function_type(self, children):
        parameters = children[0] if len(children) > 1 else ()
        return FunctionType(parameters, children[-1])

    def object_type(self, children):
        return ObjectType(tuple(children))

    def property_name(self, children):
        tok = children[0]
        if tok.type == "STRING":
            return unquote(tok)
        return str(tok)

    def property_signature(self, children):
        readonly = optional = False
        name = ""
        type_node = None
        for child in children:
            if isinstance(child, Token):
                if child.type == "READONLY":
                    readonly = True
                elif child.type == "OPTIONAL":
                    optional = True
            elif isinstance(child, str):
                name = child
            else:
                type_node = child
        return PropertySignature(name, type_node, optional=optional, readonly=readonly)

    def method_signature(self, children):
        optional = False
        name = ""
        parameters: tuple[Parameter, ...] = ()
        returns = None
        for child in children:
            if isinstance(child, Token):
                if child.type == "OPTIONAL":
                    optional = True
            elif isinstance(child, str):
                name = child
            elif isinstance(child, tuple):
                parameters = child
            else:
                returns = child
        return MethodSignature(name, parameters, returns, optional=optional)

    def index_signature(self, children):
        readonly = isinstance(children[0], Token) and children[0].type == "READONLY"
        rest = children[1:] if readonly else children
        return IndexSignature(str(rest[0]), rest[1], rest[2], readonly=readonly)


_TYPE_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    start="type",
    maybe_placeholders=False,
)


def parse_type(text: str) -> TypeNode:
    """Parse one type expression, falling back to :class:`RawType`."""
    source = text.strip()
    if not source:
        return RawType("")
    try:
        tree = _TYPE_PARSER.parse(source)
        return _SyntaxBuilder().transform(tree)
    except LarkError:
        return RawType(source)
