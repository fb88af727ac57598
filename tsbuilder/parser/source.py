"""Source reader for TypeScript declaration files.

Locates the top-level statements the generator cares about -- type aliases,
interfaces, enums and imports -- with a small depth-aware scanner and hands
their type expressions to the Lark grammar.  Everything else in the file
(functions, classes, constants, namespaces) is skipped.  Nothing in here
raises on odd input: text the grammar cannot read is kept as a raw node.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from tsbuilder.parser.syntax import (
    AliasDeclaration,
    EnumDeclaration,
    ImportDeclaration,
    InterfaceDeclaration,
    Member,
    ObjectType,
    PropertySignature,
    RawType,
    TypeNode,
    TypeParameter,
    parse_type,
    unquote,
)
from tsbuilder.utils import print_warning


class SourceError(Exception):
    """Raised when an input file cannot be read."""


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_QUOTES = "'\"`"
_OPENERS = "([{<"
_CLOSERS = ")]}>"

_STATEMENT = re.compile(
    r"(?P<export>export\s+)?(?:default\s+)?(?:declare\s+)?"
    r"(?:(?P<keyword>type|interface)|(?P<const>const\s+)?(?P<enum>enum))\s+"
    r"(?P<name>[A-Za-z_$][\w$]*)"
)
_IMPORT = re.compile(
    r"import\s+(?P<clause>[^;'\"]*?)\s*from\s*(?P<q>['\"])(?P<module>[^'\"]+)(?P=q)"
)
_IMPORT_NAMED = re.compile(r"\{(?P<names>[^}]*)\}")
_IMPORT_NAMESPACE = re.compile(r"\*\s*as\s+(?P<name>[A-Za-z_$][\w$]*)")
_IMPORT_DEFAULT = re.compile(r"^(?:type\s+)?(?P<name>[A-Za-z_$][\w$]*)\s*(?:,|$)")
_IMPORT_SPECIFIER = re.compile(
    r"^(?:type\s+)?(?P<name>[A-Za-z_$][\w$]*)(?:\s+as\s+(?P<alias>[A-Za-z_$][\w$]*))?$"
)

_TYPE_PARAMETER = re.compile(
    r"^(?:(?:const|in|out)\s+)*(?P<name>[A-Za-z_$][\w$]*)"
    r"(?:\s+extends\s+(?P<constraint>[\s\S]+))?$"
)
_ENUM_MEMBER = re.compile(r"^(?P<name>[A-Za-z_$][\w$]*|'[^']*'|\"[^\"]*\")")

_MEMBER_NAME = r"[A-Za-z_$][\w$]*|'[^']*'|\"[^\"]*\"|\[\s*(?:'[^']*'|\"[^\"]*\"|\d+)\s*\]"
_MEMBER = re.compile(
    r"^(?P<readonly>readonly\s+)?(?P<name>" + _MEMBER_NAME + r")"
    r"\s*(?P<optional>\?)?\s*:\s*(?P<type>[\s\S]+)$"
)
_MEMBER_START = re.compile(r"^\s*(?:readonly\s+)?(?:" + _MEMBER_NAME + r")\s*\??\s*[:(]")

# A line break ends a type alias unless the text on either side shows that
# the expression carries on.
_CONTINUES_AFTER = ("=", "|", "&", ",", ":", "?", "<", "(", "[", "{", ".")
_CONTINUES_BEFORE = ("|", "&", "=>", "[", ".", "?", ":", ">", ")", "]", "}")
_TRAILING_OPERATOR = re.compile(r"\b(?:keyof|typeof|readonly|extends|infer|unique)$")

_MODULE_SUFFIXES = (".d.ts", ".tsx", ".ts", ".jsx", ".js", ".mts", ".cts")


# ---------------------------------------------------------------------------
# SourceFile
# ---------------------------------------------------------------------------


@dataclass
class SourceFile:
    """A parsed declaration file.

    Attributes:
        text: The original file content.
        module_path: Absolute module path without extension, as the compiler
            prints it inside ``import("...")`` type references.
        path: Where the file was read from, if it came from disk.
        strict_null_checks: Compiler posture the file is resolved under.
    """

    text: str
    module_path: str
    path: Path | None = None
    strict_null_checks: bool = True
    aliases: list[AliasDeclaration] = field(default_factory=list)
    interfaces: list[InterfaceDeclaration] = field(default_factory=list)
    enums: list[EnumDeclaration] = field(default_factory=list)
    imports: list[ImportDeclaration] = field(default_factory=list)

    @property
    def file_name(self) -> str:
        if self.path is not None:
            return self.path.name
        return f"{self.stem}.ts"

    @property
    def stem(self) -> str:
        """File name without its TypeScript extension."""
        name = self.path.name if self.path is not None else Path(self.module_path).name
        return _strip_module_suffix(name)

    @property
    def directory(self) -> str:
        return os.path.dirname(self.module_path)

    def lookup(self, name: str) -> AliasDeclaration | InterfaceDeclaration | EnumDeclaration | None:
        """Return the top-level declaration called *name*, if any."""
        for group in (self.aliases, self.interfaces, self.enums):
            for decl in group:
                if decl.name == name:
                    return decl
        return None

    def imported(self, name: str) -> tuple[str, str] | None:
        """Return ``(module, exported_name)`` for a locally imported name."""
        for imp in self.imports:
            if name in imp.names:
                return imp.module, imp.names[name]
            if imp.default == name:
                return imp.module, "default"
        return None

    def namespace_module(self, name: str) -> str | None:
        """Return the module behind an ``import * as name`` binding."""
        for imp in self.imports:
            if imp.namespace == name:
                return imp.module
        return None


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def read_source(path: str | Path, *, strict_null_checks: bool = True) -> SourceFile:
    """Read and parse a TypeScript file from disk.

    Args:
        path: The ``.ts`` file to read.
        strict_null_checks: Whether optional and nullable members keep their
            ``undefined``/``null`` constituents during resolution.

    Raises:
        SourceError: If the file does not exist or is not valid UTF-8.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceError(f"Source file not found: {file_path}")
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceError(f"Cannot read {file_path}: {exc}") from exc
    return parse_source(text, path=file_path, strict_null_checks=strict_null_checks)


def parse_source(
    text: str,
    *,
    path: Path | None = None,
    module_path: str | None = None,
    strict_null_checks: bool = True,
) -> SourceFile:
    """Parse TypeScript source text into a :class:`SourceFile`."""
    if module_path is None:
        resolved = path.resolve() if path is not None else Path("schema.ts").absolute()
        module_path = _strip_module_suffix(resolved.as_posix())
    source = SourceFile(
        text=text,
        module_path=module_path,
        path=path,
        strict_null_checks=strict_null_checks,
    )
    _scan_statements(strip_comments(text), source)
    return source


# ---------------------------------------------------------------------------
# Comment stripping
# ---------------------------------------------------------------------------


def strip_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments, keeping line breaks and strings."""
    out: list[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch in _QUOTES:
            end = _skip_string(text, i)
            out.append(text[i:end])
            i = end
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            stop = n if end == -1 else end + 2
            out.append("\n" * text.count("\n", i, stop) or " ")
            i = stop
        else:
            out.append(ch)
            i += 1
    return "".join(out)


# ---------------------------------------------------------------------------
# Statement scanning
# ---------------------------------------------------------------------------


def _scan_statements(text: str, source: SourceFile) -> None:
    seen: set[str] = set()
    i, n = 0, len(text)
    depth = 0
    while i < n:
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(depth - 1, 0)
        elif depth == 0 and ch.isalpha() and (i == 0 or not _is_ident_char(text[i - 1])):
            end = _read_statement(text, i, source, seen)
            if end is not None:
                i = end
                continue
        i += 1


def _read_statement(text: str, start: int, source: SourceFile, seen: set[str]) -> int | None:
    """Parse the statement at *start*; return where scanning resumes."""
    if text.startswith("import", start):
        match = _IMPORT.match(text, start)
        if match is None:
            return None
        source.imports.append(_build_import(match, source))
        return match.end()

    match = _STATEMENT.match(text, start)
    if match is None:
        return None

    name = match["name"]
    line = text.count("\n", 0, start) + 1
    exported = bool(match["export"])

    if match["keyword"] == "type":
        pos, params = _read_type_parameters(text, match.end())
        pos = _skip_ws(text, pos)
        if not text.startswith("=", pos):
            return match.end()
        end = _alias_end(text, pos + 1)
        body = _read_type(text[pos + 1:end])
        decl = AliasDeclaration(name, body, params, exported=exported, line=line)
        if _register(name, seen, line):
            source.aliases.append(decl)
        return end + 1 if text.startswith(";", end) else end

    if match["keyword"] == "interface":
        pos, params = _read_type_parameters(text, match.end())
        brace = _find_top_level(text, pos, "{")
        if brace is None:
            return match.end()
        end = _match_block(text, brace)
        heritage = _read_heritage(text[pos:brace])
        body = parse_object_body(text[brace:end])
        decl = InterfaceDeclaration(name, body, heritage, params, exported=exported, line=line)
        if _register(name, seen, line):
            source.interfaces.append(decl)
        return end

    brace = _find_top_level(text, match.end(), "{")
    if brace is None:
        return match.end()
    end = _match_block(text, brace, angles=False)
    members = []
    for item in _split_top_level(text[brace + 1:end - 1], ",", angles=False):
        member = _ENUM_MEMBER.match(item.strip())
        if member:
            raw = member["name"]
            members.append(unquote(raw) if raw[0] in "'\"" else raw)
    decl = EnumDeclaration(name, tuple(members), const=bool(match["const"]), line=line)
    if _register(name, seen, line):
        source.enums.append(decl)
    return end


def _register(name: str, seen: set[str], line: int) -> bool:
    if name in seen:
        print_warning(f"Ignoring duplicate declaration of {name} (line {line})")
        return False
    seen.add(name)
    return True


def _build_import(match: re.Match[str], source: SourceFile) -> ImportDeclaration:
    clause = match["clause"].strip()
    type_only = clause.startswith("type ") or clause.startswith("type{")
    if type_only:
        clause = clause[4:].strip()

    names: dict[str, str] = {}
    named = _IMPORT_NAMED.search(clause)
    if named:
        for item in named["names"].split(","):
            spec = _IMPORT_SPECIFIER.match(item.strip())
            if spec:
                names[spec["alias"] or spec["name"]] = spec["name"]

    namespace = _IMPORT_NAMESPACE.search(clause)
    default = _IMPORT_DEFAULT.match(clause)
    return ImportDeclaration(
        module=resolve_module(match["module"], source.directory),
        names=names,
        namespace=namespace["name"] if namespace else None,
        default=default["name"] if default else None,
        type_only=type_only,
    )


def resolve_module(specifier: str, directory: str) -> str:
    """Resolve an import specifier the way the compiler prints it."""
    if not specifier.startswith("."):
        return specifier
    joined = os.path.normpath(os.path.join(directory, specifier)).replace(os.sep, "/")
    return _strip_module_suffix(joined)


def _strip_module_suffix(name: str) -> str:
    for suffix in _MODULE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


# ---------------------------------------------------------------------------
# Declaration pieces
# ---------------------------------------------------------------------------


def _read_type_parameters(text: str, pos: int) -> tuple[int, tuple[TypeParameter, ...]]:
    pos = _skip_ws(text, pos)
    if not text.startswith("<", pos):
        return pos, ()
    end = _match_block(text, pos)
    params = []
    for item in _split_top_level(text[pos + 1:end - 1], ","):
        head, default = _split_default(item)
        match = _TYPE_PARAMETER.match(head.strip())
        if not match:
            continue
        constraint = match["constraint"]
        params.append(
            TypeParameter(
                match["name"],
                constraint=_read_type(constraint) if constraint else None,
                default=_read_type(default) if default else None,
            )
        )
    return end, tuple(params)


def _split_default(item: str) -> tuple[str, str | None]:
    """Split ``T extends X = Y`` at its top-level ``=``."""
    depth = 0
    i = 0
    while i < len(item):
        ch = item[i]
        if ch in _QUOTES:
            i = _skip_string(item, i)
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "<":
            depth += 1
        elif ch == ">" and item[i - 1] != "=":
            depth -= 1
        elif ch == "=" and depth == 0 and not item.startswith("=>", i):
            return item[:i], item[i + 1:]
        i += 1
    return item, None


def _read_heritage(header: str) -> tuple[TypeNode, ...]:
    header = header.strip()
    if not header.startswith("extends"):
        return ()
    clause = header[len("extends"):]
    return tuple(_read_type(part) for part in _split_top_level(clause, ",") if part.strip())


def _read_type(text: str) -> TypeNode:
    node = parse_type(text)
    stripped = text.strip()
    if isinstance(node, RawType) and stripped.startswith("{") and stripped.endswith("}"):
        return parse_object_body(stripped)
    return node


def parse_object_body(text: str) -> ObjectType:
    """Parse ``{ ... }`` as an object type, member by member if need be.

    Members the grammar cannot read individually keep their name with a raw
    type; index and mapped signatures that do not parse are dropped
    with a warning.
    """
    node = parse_type(text)
    if isinstance(node, ObjectType):
        return node
    inner = text.strip()[1:-1]
    members: list[Member] = []
    for chunk in _split_members(inner):
        match = _MEMBER.match(chunk)
        if match:
            members.append(
                PropertySignature(
                    _member_name(match["name"]),
                    parse_type(match["type"]),
                    optional=bool(match["optional"]),
                    readonly=bool(match["readonly"]),
                )
            )
            continue
        single = parse_type("{" + chunk + "}")
        if isinstance(single, ObjectType):
            members.extend(single.members)
        else:
            print_warning(f"Ignoring unreadable object member: {chunk}")
    return ObjectType(tuple(members))


def _member_name(raw: str) -> str:
    """Property name from a plain, quoted or computed literal key."""
    if raw[0] == "[":
        raw = raw[1:-1].strip()
    return unquote(raw) if raw[0] in "'\"" else raw


def _split_members(body: str) -> list[str]:
    members: list[str] = []
    for chunk in _split_top_level(body, ";,"):
        current: list[str] = []
        for line in _split_top_level(chunk, "\n"):
            if current and _MEMBER_START.match(line) and _complete("\n".join(current)):
                members.append("\n".join(current).strip())
                current = []
            current.append(line)
        if current and "\n".join(current).strip():
            members.append("\n".join(current).strip())
    return members


# ---------------------------------------------------------------------------
# Low-level scanning helpers
# ---------------------------------------------------------------------------


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _skip_string(text: str, pos: int) -> int:
    """Return the index just past the string literal opening at *pos*."""
    quote = text[pos]
    i = pos + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote or (ch == "\n" and quote != "`"):
            return i + 1
        i += 1
    return len(text)


def _match_block(text: str, pos: int, *, angles: bool = True) -> int:
    """Return the index just past the bracket that closes ``text[pos]``."""
    openers, closers = (_OPENERS, _CLOSERS) if angles else ("([{", ")]}")
    depth = 0
    i = pos
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch == ">" and i > 0 and text[i - 1] == "=":
            i += 1
            continue
        if ch in openers:
            depth += 1
        elif ch in closers:
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return len(text)


def _find_top_level(text: str, pos: int, target: str) -> int | None:
    depth = 0
    i = pos
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if depth == 0 and ch == target:
            return i
        if ch == ">" and text[i - 1] == "=":
            pass
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == ";" and depth == 0:
            return None
        i += 1
    return None


def _split_top_level(text: str, separators: str, *, angles: bool = True) -> list[str]:
    openers, closers = (_OPENERS, _CLOSERS) if angles else ("([{", ")]}")
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch == ">" and i > 0 and text[i - 1] == "=":
            pass
        elif ch in openers:
            depth += 1
        elif ch in closers:
            depth -= 1
        elif depth == 0 and ch in separators:
            parts.append(text[start:i])
            start = i + 1
        i += 1
    parts.append(text[start:])
    return parts


def _alias_end(text: str, start: int) -> int:
    """Return the index where the type alias body starting at *start* ends."""
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch == ">" and text[i - 1] == "=":
            pass
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            if depth == 0:
                return i
            depth -= 1
        elif depth == 0 and ch == ";":
            return i
        elif depth == 0 and ch == "\n" and _line_ends_statement(text, start, i):
            return i
        i += 1
    return len(text)


def _line_ends_statement(text: str, start: int, pos: int) -> bool:
    if not _complete(text[start:pos]):
        return False
    return not text[pos:].lstrip().startswith(_CONTINUES_BEFORE)


def _complete(fragment: str) -> bool:
    before = fragment.rstrip()
    if not before:
        return False
    if before.endswith(_CONTINUES_AFTER) or before.endswith("=>"):
        return False
    return _TRAILING_OPERATOR.search(before) is None
