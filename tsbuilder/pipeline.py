"""Builder generation orchestrator.

Reads one TypeScript source file, synthesizes a builder for every usable
declaration and writes the units, the source copy and an index to the
output directory.

Usage::

    tsbuilder src/schema.ts --output ./src/builders
    python -m tsbuilder.pipeline src/schema.ts -o ./builders --no-strict-null-checks
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from tsbuilder.config import Config
from tsbuilder.parser.extractor import extract
from tsbuilder.parser.source import SourceError, SourceFile, read_source
from tsbuilder.renderer.templates import TemplateRenderer
from tsbuilder.synthesizer.builder import synthesize
from tsbuilder.synthesizer.models import BuilderSpec, Skip
from tsbuilder.utils import (
    console,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)
from tsbuilder.writer import OutputConflictError, OutputWriter

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GenerationError(Exception):
    """Raised when generated units cannot be written."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        super().__init__(message)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


class GenerationResult(BaseModel):
    """What one generation run produced."""

    builders: list[str] = Field(default_factory=list, description="Generated class names")
    skipped: list[Skip] = Field(default_factory=list)
    files: list[Path] = Field(default_factory=list, description="Every file written")
    duration: float = Field(default=0.0, ge=0)

    @property
    def diagnostics(self) -> list[str]:
        return [s.diagnostic for s in self.skipped if s.diagnostic]


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class BuilderGenerator:
    """Drives extraction, synthesis and output for one source file.

    Attributes:
        config: Generator configuration shared by every stage.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or Config()

    def plan(self, source: SourceFile) -> tuple[list[BuilderSpec], list[Skip]]:
        """Synthesize every declaration in *source*; nothing is written."""
        specs: list[BuilderSpec] = []
        skipped: list[Skip] = []
        for declaration in extract(source):
            outcome = synthesize(declaration, self.config)
            if isinstance(outcome, Skip):
                skipped.append(outcome)
            else:
                specs.append(outcome)
        return specs, skipped

    async def generate(
        self,
        input_path: str | Path,
        output_dir: str | Path | None = None,
    ) -> GenerationResult:
        """Generate builders for *input_path* into *output_dir*.

        Raises:
            SourceError: If the input file cannot be read.
            GenerationError: If any output file cannot be written, or two
                outputs would share a path.
        """
        start = time.monotonic()
        source = read_source(
            input_path, strict_null_checks=self.config.compiler.strict_null_checks
        )
        specs, skipped = self.plan(source)
        for skip in skipped:
            if skip.diagnostic:
                print_warning(skip.diagnostic)

        target = Path(output_dir) if output_dir is not None else self.config.output_dir
        writer = OutputWriter(target, TemplateRenderer(emit=self.config.emit))
        try:
            files = await writer.write(specs, source)
        except OutputConflictError as exc:
            raise GenerationError(f"Cannot write builders to {target}: {exc}", exc.path) from exc
        except OSError as exc:
            failed = Path(exc.filename) if exc.filename else None
            raise GenerationError(f"Failed to write builders to {target}: {exc}", failed) from exc

        return GenerationResult(
            builders=[spec.class_name for spec in specs],
            skipped=skipped,
            files=files,
            duration=time.monotonic() - start,
        )


async def generate_builders(
    input_path: str | Path,
    output_dir: str | Path,
    config: Optional[Config] = None,
) -> GenerationResult:
    """Convenience wrapper around :meth:`BuilderGenerator.generate`."""
    return await BuilderGenerator(config).generate(input_path, output_dir)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``tsbuilder`` and ``python -m tsbuilder.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="tsbuilder",
        description="Generate fluent builder classes for TypeScript types",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  tsbuilder src/schema.ts\n"
            "  tsbuilder src/schema.ts -o ./src/builders\n"
        ),
    )
    parser.add_argument("input", help="TypeScript file containing the type declarations")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: from config, ./generated)",
    )
    parser.add_argument(
        "--no-strict-null-checks",
        action="store_true",
        help="Resolve types as if strictNullChecks were off",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (default: read TSB_* environment variables)",
    )

    args = parser.parse_args(argv)

    try:
        config = Config.load(Path(args.config)) if args.config else Config.from_env()
    except (OSError, ValueError) as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)
    if args.output:
        config.output_dir = Path(args.output)
    if args.no_strict_null_checks:
        config.compiler.strict_null_checks = False

    try:
        result = asyncio.run(BuilderGenerator(config).generate(args.input))
    except (SourceError, GenerationError) as exc:
        print_error(str(exc))
        sys.exit(1)

    print_summary_table(
        {
            "Builders generated": str(len(result.builders)),
            "Declarations skipped": str(len(result.skipped)),
            "Files written": str(len(result.files)),
            "Output": str(config.output_dir),
            "Duration": format_duration(result.duration),
        },
        title="Builder Generation",
    )
    if result.builders:
        print_success(f"Generated {len(result.builders)} builder(s)")
    else:
        console.print("[dim]No builders generated[/dim]")


if __name__ == "__main__":
    main()
