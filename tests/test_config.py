"""Tests for configuration loading and validation."""
from pathlib import Path

import pytest

from xdrgen.compiler.config import (
    CompilerConfig, ConfigError, load_config, load_config_file, load_config_from_string,
)


def test_defaults():
    config = CompilerConfig()
    config.validate()
    assert config.runtime_module == "xdrgen.runtime"
    assert config.module_name(Path("proto/nfs.x")) == "nfs_xdr"


def test_from_string():
    config = load_config_from_string("""
        derives = ["json", "enum_string"]
        extended-grammar = true
        exclude = ["Clock"]
        module = "pkg.wire"
    """)
    assert config.derives == ["json", "enum_string"]
    assert config.extended_grammar is True
    assert config.exclude == ["Clock"]
    assert config.module_name(Path("x.x")) == "pkg.wire"


def test_unknown_derive():
    with pytest.raises(ConfigError, match="Unknown derive 'yaml'"):
        load_config_from_string('derives = ["yaml"]')


def test_unknown_key():
    with pytest.raises(ConfigError, match="Unknown configuration key: colour"):
        load_config_from_string('colour = "blue"')


def test_invalid_module_name():
    with pytest.raises(ConfigError):
        load_config_from_string('module = "not a module"')


def test_invalid_toml():
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config_from_string("derives = [")


def test_list_values_checked():
    with pytest.raises(ConfigError, match="'exclude' must be a list of strings"):
        load_config_from_string('exclude = "Clock"')


def test_pyproject_table(tmp_path):
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "demo"\n\n[tool.xdrgen]\nderives = ["schema"]\nformat = true\n'
    )
    config = load_config(tmp_path)
    assert config.derives == ["schema"]
    assert config.format is True


def test_xdrgen_toml_takes_precedence(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[tool.xdrgen]\nderives = ["schema"]\n')
    (tmp_path / "xdrgen.toml").write_text('derives = ["json"]\n')
    assert load_config(tmp_path).derives == ["json"]


def test_no_config_files(tmp_path):
    assert load_config(tmp_path) == CompilerConfig()


def test_explicit_pyproject_file(tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text('[tool.xdrgen]\nruntime-module = "vendored.xdr"\n')
    assert load_config_file(path).runtime_module == "vendored.xdr"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read"):
        load_config_file(tmp_path / "missing.toml")
