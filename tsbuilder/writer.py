"""Persists generated builder units.

Writes one ``<ClassName>.ts`` per builder, a copy of the source file the
units import their types from, and an index re-exporting every unit.  All
writes run concurrently; the first failure propagates and already-written
files are left in place.
"""

from __future__ import annotations

import asyncio
import shutil
from collections import Counter
from pathlib import Path
from typing import Optional

from tsbuilder.config import EmitConfig
from tsbuilder.parser.source import SourceFile
from tsbuilder.renderer.templates import TemplateRenderer
from tsbuilder.synthesizer.models import BuilderSpec
from tsbuilder.utils import ensure_dir, write_text


class OutputConflictError(ValueError):
    """Raised when two generated files would land on the same path."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"More than one generated file targets {path}")


class OutputWriter:
    """Writes builder units for one source file into *output_dir*."""

    def __init__(
        self,
        output_dir: str | Path,
        renderer: Optional[TemplateRenderer] = None,
        emit: Optional[EmitConfig] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.renderer = renderer or TemplateRenderer(emit=emit)
        self.emit = emit or self.renderer.emit

    def unit_path(self, spec: BuilderSpec) -> Path:
        return self.output_dir / f"{spec.class_name}{self.emit.extension}"

    def index_path(self) -> Path:
        return self.output_dir / f"{self.emit.index_name}{self.emit.extension}"

    def targets(self, specs: list[BuilderSpec], source: SourceFile) -> list[Path]:
        """Every path :meth:`write` would produce, in the order it returns them."""
        paths = [self.unit_path(spec) for spec in specs]
        paths.append(self.output_dir / source.file_name)
        paths.append(self.index_path())
        return paths

    async def write(self, specs: list[BuilderSpec], source: SourceFile) -> list[Path]:
        """Write every unit, the source copy and the index.

        Returns:
            Written paths: units in spec order, then the source copy, then the index.

        Raises:
            OutputConflictError: If two outputs share a path, e.g. a source
                named ``index.ts``.  Nothing is written in that case.
            OSError: If any file cannot be written.
        """
        targets = self.targets(specs, source)
        duplicates = [path for path, count in Counter(targets).items() if count > 1]
        if duplicates:
            raise OutputConflictError(duplicates[0])

        ensure_dir(self.output_dir)
        tasks = [
            write_text(self.unit_path(spec), self.renderer.render_builder(spec, source.stem))
            for spec in specs
        ]
        tasks.append(self._copy_source(source))
        tasks.append(
            write_text(
                self.index_path(),
                self.renderer.render_index([spec.class_name for spec in specs]),
            )
        )
        return list(await asyncio.gather(*tasks))

    async def _copy_source(self, source: SourceFile) -> Path:
        target = self.output_dir / source.file_name
        if source.path is None:
            return await write_text(target, source.text)
        if source.path.resolve() == target.resolve():
            return target
        await asyncio.to_thread(shutil.copyfile, source.path, target)
        return target
