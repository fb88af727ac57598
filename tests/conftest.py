"""Shared pytest fixtures for the builder generator test suite.

Provides reusable fixtures for:
- The sample schema file and its text
- Parsed source files (from disk and from inline text)
- Extracted declarations and default configuration
"""

from __future__ import annotations

import shutil
import textwrap
from pathlib import Path

import pytest

from tsbuilder.config import Config
from tsbuilder.parser.extractor import extract
from tsbuilder.parser.models import StructuralDeclaration
from tsbuilder.parser.source import SourceFile, parse_source

FIXTURES_DIR = Path(__file__).parent / "fixtures"

MODULE_PATH = "/project/src/schema"


# ---------------------------------------------------------------------------
# Schema sources
# ---------------------------------------------------------------------------

@pytest.fixture
def schema_text() -> str:
    """Content of the sample ``schema.ts`` fixture."""
    return (FIXTURES_DIR / "schema.ts").read_text(encoding="utf-8")


@pytest.fixture
def schema_path(tmp_path: Path) -> Path:
    """A private copy of ``schema.ts`` inside a temporary directory."""
    target = tmp_path / "src" / "schema.ts"
    target.parent.mkdir(parents=True)
    shutil.copyfile(FIXTURES_DIR / "schema.ts", target)
    return target


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Directory generated units are written to (not created up front)."""
    return tmp_path / "builders"


@pytest.fixture
def schema_source(schema_text: str) -> SourceFile:
    """The sample schema parsed under a fixed module path."""
    return parse_source(schema_text, module_path=MODULE_PATH)


@pytest.fixture
def parse():
    """Parse dedented inline TypeScript under the fixed module path."""
    def _parse(text: str, *, strict_null_checks: bool = True) -> SourceFile:
        return parse_source(
            textwrap.dedent(text),
            module_path=MODULE_PATH,
            strict_null_checks=strict_null_checks,
        )
    return _parse


# ---------------------------------------------------------------------------
# Derived data
# ---------------------------------------------------------------------------

@pytest.fixture
def declarations(schema_source: SourceFile) -> dict[str, StructuralDeclaration]:
    """Declarations of the sample schema keyed by name."""
    return {decl.name: decl for decl in extract(schema_source)}


@pytest.fixture
def config(output_dir: Path) -> Config:
    """Default configuration writing into ``output_dir``."""
    return Config(output_dir=output_dir)
