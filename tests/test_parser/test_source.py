"""Unit tests for the declaration-file reader (tsbuilder.parser.source).

Tests cover:
- Locating aliases, interfaces and enums in source order
- Export flags, line numbers, heritage and type parameters
- Import bindings and module resolution
- Multi-line aliases, comments and duplicate declarations
- read_source error handling
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from tsbuilder.parser.source import (
    SourceError,
    parse_source,
    read_source,
    resolve_module,
    strip_comments,
)
from tsbuilder.parser.syntax import (
    LiteralType,
    ObjectType,
    ReferenceType,
    UnionType,
)

pytestmark = pytest.mark.unit


class TestStatements:
    def test_declarations_in_source_order(self, schema_source):
        assert [a.name for a in schema_source.aliases] == ["Maybe", "Address", "SearchResult", "Empty"]
        assert [i.name for i in schema_source.interfaces] == ["Node", "User", "Post"]
        assert [e.name for e in schema_source.enums] == ["Role"]

    def test_enum_members(self, schema_source):
        assert schema_source.enums[0].members == ("Admin", "Member")

    def test_exported_and_line(self, schema_source):
        maybe = schema_source.lookup("Maybe")
        assert maybe.exported is True
        assert maybe.line == 8

    def test_type_parameters(self, schema_source):
        maybe = schema_source.lookup("Maybe")
        assert [p.name for p in maybe.type_parameters] == ["T"]

    def test_heritage(self, schema_source):
        assert schema_source.lookup("User").heritage == (ReferenceType("Node"),)

    def test_lookup_missing(self, schema_source):
        assert schema_source.lookup("Nope") is None

    def test_other_statements_are_ignored(self, parse):
        source = parse(
            """
            const x = { type: 1 };
            function f(): void {}
            type Kept = { a: string };
            """
        )
        assert [a.name for a in source.aliases] == ["Kept"]

    def test_multiline_alias(self, parse):
        source = parse(
            """
            type Status =
              | "active"
              | "inactive";
            interface After { s: Status }
            """
        )
        status = source.lookup("Status")
        assert status.body == UnionType(
            (LiteralType("active", "string"), LiteralType("inactive", "string"))
        )
        assert source.lookup("After") is not None

    def test_alias_without_semicolon(self, parse):
        source = parse(
            """
            type A = string
            type B = { n: number }
            """
        )
        assert source.lookup("A").body == ReferenceType("string")
        assert isinstance(source.lookup("B").body, ObjectType)

    def test_duplicate_declaration_warns(self, parse):
        with patch("tsbuilder.parser.source.print_warning") as warn:
            source = parse(
                """
                type A = { a: string };
                type A = { b: string };
                """
            )
        assert len(source.aliases) == 1
        assert source.aliases[0].body.members[0].name == "a"
        warn.assert_called_once()

    def test_unreadable_member_keeps_name(self, parse):
        source = parse(
            """
            interface Odd {
              readonly: boolean;
              weird: T extends string ? A : B;
            }
            """
        )
        names = [m.name for m in source.lookup("Odd").body.members]
        assert names == ["readonly", "weird"]

    def test_computed_literal_key_in_unreadable_body(self, parse):
        with patch("tsbuilder.parser.source.print_warning") as warn:
            source = parse(
                """
                interface M {
                  ["comp"]: string;
                  weird: T extends string ? A : B;
                  [Symbol.iterator](): Iterator<string>;
                }
                """
            )
        names = [m.name for m in source.lookup("M").body.members]
        assert names == ["comp", "weird"]
        warn.assert_called_once()
        assert "Symbol.iterator" in warn.call_args[0][0]


class TestImports:
    def test_named_import(self, parse):
        source = parse('import { Foo as Bar, type Baz } from "./other";')
        assert source.imported("Bar") == ("/project/src/other", "Foo")
        assert source.imported("Baz") == ("/project/src/other", "Baz")

    def test_namespace_import(self, parse):
        source = parse("import * as T from './types';")
        assert source.namespace_module("T") == "/project/src/types"

    def test_package_import_is_kept(self, parse):
        source = parse("import { Dayjs } from 'dayjs';")
        assert source.imported("Dayjs") == ("dayjs", "Dayjs")

    def test_resolve_module_strips_extension(self):
        assert resolve_module("../lib/a.ts", "/project/src") == "/project/lib/a"


class TestComments:
    def test_comments_removed_strings_kept(self):
        text = "type A = 'a // b'; // trailing\n/* block */ type B = 1;"
        stripped = strip_comments(text)
        assert "'a // b'" in stripped
        assert "trailing" not in stripped
        assert "block" not in stripped

    def test_commented_declaration_is_ignored(self, parse):
        source = parse(
            """
            // type Hidden = { a: string };
            /* interface AlsoHidden { b: string } */
            type Shown = { c: string };
            """
        )
        assert [a.name for a in source.aliases] == ["Shown"]
        assert source.interfaces == []


class TestReadSource:
    def test_reads_file(self, schema_path: Path):
        source = read_source(schema_path)
        assert source.path == schema_path
        assert source.file_name == "schema.ts"
        assert source.stem == "schema"
        assert source.module_path == schema_path.resolve().as_posix()[: -len(".ts")]

    def test_strict_flag_is_carried(self, schema_path: Path):
        assert read_source(schema_path, strict_null_checks=False).strict_null_checks is False

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(SourceError, match="not found"):
            read_source(tmp_path / "missing.ts")

    def test_undecodable_file(self, tmp_path: Path):
        bad = tmp_path / "bad.ts"
        bad.write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(SourceError):
            read_source(bad)

    def test_empty_text(self):
        source = parse_source("")
        assert source.aliases == [] and source.interfaces == []
