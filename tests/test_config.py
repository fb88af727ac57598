"""Unit tests for Config and related Pydantic models (tsbuilder.config).

Tests cover:
- CompilerConfig, EmitConfig and NamingConfig defaults and validation
- Config save/load round trip
- Config.from_env
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tsbuilder.config import CompilerConfig, Config, EmitConfig, NamingConfig

_ENV_VARS = (
    "TSB_OUTPUT_DIR",
    "TSB_STRICT_NULL_CHECKS",
    "TSB_NAMESPACE_ALIAS",
    "TSB_TYPENAME_FIELD",
    "TSB_INDENT",
    "TSB_QUOTE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    @pytest.mark.unit
    def test_compiler(self):
        assert CompilerConfig().strict_null_checks is True

    @pytest.mark.unit
    def test_emit(self):
        emit = EmitConfig()
        assert emit.indent == "  "
        assert emit.quote == "'"
        assert emit.namespace_alias == "SchemaTypes"
        assert emit.partial_type == "DeepPartial"
        assert emit.partial_module == "ts-essentials"
        assert emit.eslint_disable is True
        assert emit.extension == ".ts"
        assert emit.index_name == "index"

    @pytest.mark.unit
    def test_naming(self):
        naming = NamingConfig()
        assert naming.typename_field == "__typename"
        assert naming.class_suffix == "Builder"
        assert naming.factory_prefix == "a"
        assert naming.setter_prefix == "with"
        assert naming.typename_method == "includeTypename"
        assert naming.accessor_method == "get"

    @pytest.mark.unit
    def test_config(self):
        config = Config()
        assert config.output_dir == Path("./generated")
        assert isinstance(config.emit, EmitConfig)


class TestValidation:
    @pytest.mark.unit
    def test_bad_quote(self):
        with pytest.raises(ValidationError):
            EmitConfig(quote="`")

    @pytest.mark.unit
    def test_bad_namespace(self):
        with pytest.raises(ValidationError):
            EmitConfig(namespace_alias="schema-types")

    @pytest.mark.unit
    def test_bad_indent(self):
        with pytest.raises(ValidationError):
            EmitConfig(indent="")

    @pytest.mark.unit
    def test_empty_setter_prefix(self):
        with pytest.raises(ValidationError):
            NamingConfig(setter_prefix="")


class TestSerialisation:
    @pytest.mark.unit
    def test_save_and_load(self, tmp_path: Path):
        config = Config(
            output_dir=tmp_path / "out",
            compiler=CompilerConfig(strict_null_checks=False),
            emit=EmitConfig(quote='"'),
        )
        path = config.save(tmp_path / "cfg" / "tsbuilder.json")
        assert path.exists()
        loaded = Config.load(path)
        assert loaded == config

    @pytest.mark.unit
    def test_save_default_location(self, tmp_path: Path):
        config = Config(output_dir=tmp_path / "out")
        assert config.save() == tmp_path / "out" / "tsbuilder.json"


class TestFromEnv:
    @pytest.mark.unit
    def test_defaults(self, clean_env):
        config = Config.from_env()
        assert config == Config()

    @pytest.mark.unit
    def test_overrides(self, clean_env):
        clean_env.setenv("TSB_OUTPUT_DIR", "/tmp/builders")
        clean_env.setenv("TSB_STRICT_NULL_CHECKS", "false")
        clean_env.setenv("TSB_NAMESPACE_ALIAS", "Types")
        clean_env.setenv("TSB_TYPENAME_FIELD", "kind")
        clean_env.setenv("TSB_INDENT", "    ")
        clean_env.setenv("TSB_QUOTE", '"')
        config = Config.from_env()
        assert config.output_dir == Path("/tmp/builders")
        assert config.compiler.strict_null_checks is False
        assert config.emit.namespace_alias == "Types"
        assert config.naming.typename_field == "kind"
        assert config.emit.indent == "    "
        assert config.emit.quote == '"'

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["1", "true", "YES", "on"])
    def test_truthy_strict_flag(self, clean_env, raw):
        clean_env.setenv("TSB_STRICT_NULL_CHECKS", raw)
        assert Config.from_env().compiler.strict_null_checks is True
