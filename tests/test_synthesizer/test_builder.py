"""Unit tests for builder synthesis (tsbuilder.synthesizer.builder).

Tests cover:
- Setter count, order, names and accepted types
- The two fixed methods and the factory
- Skip rules: no fields, union root, generic declarations
- Non-identifier property names and custom naming
"""

from __future__ import annotations

import pytest

from tsbuilder.config import Config, NamingConfig
from tsbuilder.parser.extractor import extract
from tsbuilder.parser.models import (
    DeclarationKind,
    FieldModel,
    ResolvedType,
    StructuralDeclaration,
    TypeDescription,
    TypeKind,
)
from tsbuilder.synthesizer.builder import synthesize
from tsbuilder.synthesizer.models import BuilderSpec, MethodKind, Skip, SkipReason

pytestmark = pytest.mark.unit


def _declaration(name: str, *fields: tuple[str, str, TypeKind]) -> StructuralDeclaration:
    return StructuralDeclaration(
        name=name,
        kind=DeclarationKind.ALIAS,
        fields=[
            FieldModel(name=f, type=TypeDescription(types=[ResolvedType(text=t, kind=k)]))
            for f, t, k in fields
        ],
    )


class TestSetters:
    def test_one_setter_per_field_plus_two(self, declarations):
        spec = synthesize(declarations["User"])
        assert isinstance(spec, BuilderSpec)
        assert len(spec.setters) == 8
        assert len(spec.builder_class.methods) == 10

    def test_setter_names_follow_field_order(self, declarations):
        spec = synthesize(declarations["User"])
        assert [m.name for m in spec.setters] == [
            "withName", "withAge", "withActive", "withRole",
            "withAddress", "withTags", "withFriends", "withId",
        ]

    def test_typename_field_has_no_setter(self, declarations):
        spec = synthesize(declarations["Address"])
        assert "__typename" not in [m.field_name for m in spec.setters]

    def test_accepted_types(self, declarations):
        spec = synthesize(declarations["User"])
        accepted = {m.field_name: m.accepted_type for m in spec.setters}
        assert accepted == {
            "name": "string",
            "age": "undefined | number",
            "active": "boolean",
            "role": "SchemaTypes.Role",
            "address": "DeepPartial<SchemaTypes.Address>",
            "tags": "string[]",
            "friends": "DeepPartial<SchemaTypes.Maybe<SchemaTypes.User>>[]",
            "id": "string",
        }

    def test_setter_signature(self, declarations):
        setter = synthesize(declarations["User"]).setters[0]
        assert setter.kind == MethodKind.SETTER
        assert setter.type_parameters[0].name == "P"
        assert setter.type_parameters[0].constraint == "string"
        assert [(p.name, p.type) for p in setter.parameters] == [("val", "P")]
        assert setter.return_type == "UserBuilder"

    def test_n_fields_give_n_setters(self):
        decl = _declaration(
            "Thing",
            ("a", "string", TypeKind.STRING),
            ("b", "number", TypeKind.NUMBER),
            ("c", 'import("/m").Other', TypeKind.OBJECT),
        )
        spec = synthesize(decl)
        assert len(spec.setters) == 3
        assert spec.setters[2].accepted_type == "DeepPartial<SchemaTypes.Other>"

    def test_quoted_property_name(self, parse):
        source = parse('type H = { "content-type": string; "2fa": boolean };')
        spec = synthesize(extract(source)[0])
        assert [(m.name, m.field_name) for m in spec.setters] == [
            ("withContentType", "content-type"),
            ("with_2fa", "2fa"),
        ]

    def test_colliding_setter_names_are_suffixed(self, parse):
        source = parse('type H = { "a-b": string; aB: string };')
        spec = synthesize(extract(source)[0])
        assert [m.name for m in spec.setters] == ["withAB", "withAB2"]

    def test_array_of_union_alias(self, parse):
        source = parse(
            """
            type Status = 'a' | 'b';
            type R = { r?: Status[] };
            """
        )
        spec = synthesize(extract(source)[1])
        assert spec.setters[0].accepted_type == "undefined | DeepPartial<SchemaTypes.Status>[]"


class TestFixedMethods:
    def test_order_and_kinds(self, declarations):
        methods = synthesize(declarations["User"]).builder_class.methods
        assert methods[-2].kind == MethodKind.TYPENAME
        assert methods[-1].kind == MethodKind.ACCESSOR

    def test_typename_method(self, declarations):
        tag = synthesize(declarations["User"]).typename_method
        assert tag.name == "includeTypename"
        assert tag.field_name == "__typename"
        assert tag.value == "User"
        assert tag.return_type == "UserBuilder"

    def test_accessor(self, declarations):
        accessor = synthesize(declarations["User"]).accessor
        assert accessor.name == "get"
        assert accessor.return_type == "SchemaTypes.User"

    def test_only_typename_field(self, parse):
        spec = synthesize(extract(parse('type T = { __typename: "T" };'))[0])
        assert isinstance(spec, BuilderSpec)
        assert spec.setters == []
        assert len(spec.builder_class.methods) == 2


class TestClassAndFactory:
    def test_names(self, declarations):
        spec = synthesize(declarations["User"])
        assert spec.class_name == "UserBuilder"
        assert spec.factory.name == "aUserBuilder"
        assert spec.factory.constructs == "UserBuilder"

    def test_accumulator(self, declarations):
        accumulator = synthesize(declarations["User"]).builder_class.accumulator
        assert accumulator.name == "obj"
        assert accumulator.type == "DeepPartial<SchemaTypes.User>"

    def test_factory_signature(self, declarations):
        factory = synthesize(declarations["User"]).factory
        param = factory.type_parameters[0]
        assert (param.name, param.constraint, param.default) == (
            "O", "DeepPartial<SchemaTypes.User>", "{}",
        )
        assert factory.parameters[0].optional is True
        assert factory.return_type == "UserBuilder"

    def test_custom_naming(self, declarations):
        config = Config(
            naming=NamingConfig(class_suffix="Factory", factory_prefix="new", setter_prefix="set")
        )
        spec = synthesize(declarations["Node"], config)
        assert spec.class_name == "NodeFactory"
        assert spec.factory.name == "newNodeFactory"
        assert [m.name for m in spec.setters] == ["setId"]


class TestSkip:
    def test_no_fields(self, declarations):
        result = synthesize(declarations["Empty"])
        assert isinstance(result, Skip)
        assert result.reason == SkipReason.NO_FIELDS
        assert result.diagnostic is None

    def test_union_root(self, declarations):
        result = synthesize(declarations["SearchResult"])
        assert isinstance(result, Skip)
        assert result.reason == SkipReason.UNION
        assert result.diagnostic == "Skipped type generation for union: SearchResult"

    def test_no_fields_takes_priority_over_union(self, declarations):
        result = synthesize(declarations["Maybe"])
        assert result.reason == SkipReason.NO_FIELDS

    @pytest.mark.parametrize(
        "text,name",
        [
            ("export type Status = 'ACTIVE' | 'DISABLED';", "Status"),
            ("export type Id = string | number;", "Id"),
            ("export type Flag = boolean;", "Flag"),
        ],
    )
    def test_primitive_union_root_warns(self, parse, text, name):
        declaration = extract(parse(text))[0]
        assert declaration.fields == []
        result = synthesize(declaration)
        assert isinstance(result, Skip)
        assert result.reason == SkipReason.UNION
        assert result.diagnostic == f"Skipped type generation for union: {name}"

    def test_nullable_primitive_union_is_silent(self, parse):
        result = synthesize(extract(parse("type Name = string | null;"))[0])
        assert result.reason == SkipReason.NO_FIELDS
        assert result.diagnostic is None

    def test_generic_declaration(self, parse):
        result = synthesize(extract(parse("interface Box<T> { value: T }"))[0])
        assert isinstance(result, Skip)
        assert result.reason == SkipReason.GENERIC
        assert "Box" in result.diagnostic

    def test_union_field_is_not_a_union_root(self, parse):
        spec = synthesize(extract(parse("type A = { v: string | number };"))[0])
        assert isinstance(spec, BuilderSpec)
        assert spec.setters[0].accepted_type == "string | number"
