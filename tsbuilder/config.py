"""Builder generator configuration.

Centralised, typed configuration for the generator.  All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


class CompilerConfig(BaseModel):
    """How declarations are resolved."""

    strict_null_checks: bool = Field(
        default=True,
        description="Keep undefined/null constituents of optional and nullable members",
    )


class EmitConfig(BaseModel):
    """Shape of the emitted TypeScript text."""

    indent: str = Field(default="  ", min_length=1, pattern=r"^[ \t]+$")
    quote: str = Field(default="'", pattern=r"^['\"]$")
    namespace_alias: str = Field(
        default="SchemaTypes",
        pattern=r"^[A-Za-z_$][A-Za-z0-9_$]*$",
        description="Namespace the source module is imported under",
    )
    partial_type: str = Field(default="DeepPartial", pattern=r"^[A-Za-z_$][A-Za-z0-9_$]*$")
    partial_module: str = Field(default="ts-essentials", min_length=1)
    eslint_disable: bool = Field(default=True, description="Prefix units with /* eslint-disable */")
    extension: str = Field(default=".ts", pattern=r"^\.[A-Za-z]+$")
    index_name: str = Field(default="index", min_length=1)


class NamingConfig(BaseModel):
    """Names of the generated members."""

    typename_field: str = Field(default="__typename", min_length=1)
    class_suffix: str = Field(default="Builder")
    factory_prefix: str = Field(default="a")
    setter_prefix: str = Field(default="with", min_length=1)
    typename_method: str = Field(default="includeTypename", min_length=1)
    accessor_method: str = Field(default="get", min_length=1)


class Config(BaseModel):
    """Global generator configuration.

    Instances are typically created once by the CLI entry point (or with
    defaults by ``BuilderGenerator``) and then passed to the synthesizer,
    renderer and writer.
    """

    output_dir: Path = Field(default=Path("./generated"))
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    emit: EmitConfig = Field(default_factory=EmitConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<output_dir>/tsbuilder.json``.

        Returns:
            The path where the file was written.
        """
        target = Path(path) if path is not None else self.output_dir / "tsbuilder.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            TSB_OUTPUT_DIR, TSB_STRICT_NULL_CHECKS, TSB_NAMESPACE_ALIAS,
            TSB_TYPENAME_FIELD, TSB_INDENT, TSB_QUOTE.
        """
        compiler_kwargs: dict[str, Any] = {}
        if os.environ.get("TSB_STRICT_NULL_CHECKS"):
            compiler_kwargs["strict_null_checks"] = (
                os.environ["TSB_STRICT_NULL_CHECKS"].strip().lower() in _TRUTHY
            )

        emit_kwargs: dict[str, Any] = {}
        if os.environ.get("TSB_NAMESPACE_ALIAS"):
            emit_kwargs["namespace_alias"] = os.environ["TSB_NAMESPACE_ALIAS"]
        if os.environ.get("TSB_INDENT"):
            emit_kwargs["indent"] = os.environ["TSB_INDENT"]
        if os.environ.get("TSB_QUOTE"):
            emit_kwargs["quote"] = os.environ["TSB_QUOTE"]

        naming_kwargs: dict[str, Any] = {}
        if os.environ.get("TSB_TYPENAME_FIELD"):
            naming_kwargs["typename_field"] = os.environ["TSB_TYPENAME_FIELD"]

        return cls(
            output_dir=Path(os.environ.get("TSB_OUTPUT_DIR", "./generated")),
            compiler=CompilerConfig(**compiler_kwargs),
            emit=EmitConfig(**emit_kwargs),
            naming=NamingConfig(**naming_kwargs),
        )
