"""Compiler configuration: `[tool.xdrgen]` in pyproject.toml, or xdrgen.toml."""
from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

from xdrgen.backend.derives import DERIVE_NAMES

CONFIG_NAME = "xdrgen.toml"
PYPROJECT_NAME = "pyproject.toml"

# Dotted Python module path
MODULE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class ConfigError(Exception):
    pass


@dataclass
class CompilerConfig:
    module: str = ""                        # Output module name; default <stem>_xdr
    derives: list[str] = field(default_factory=list)
    format: bool = False
    extended_grammar: bool = False
    exclude: list[str] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)
    preamble: str = ""
    runtime_module: str = "xdrgen.runtime"

    def validate(self) -> None:
        unknown = [d for d in self.derives if d not in DERIVE_NAMES]
        if unknown:
            raise ConfigError(
                f"Unknown derive '{unknown[0]}'. Available: {', '.join(DERIVE_NAMES)}."
            )
        if self.module and not MODULE_PATTERN.match(self.module):
            raise ConfigError(f"Invalid module name '{self.module}'.")
        if not MODULE_PATTERN.match(self.runtime_module):
            raise ConfigError(f"Invalid runtime module '{self.runtime_module}'.")
        for key in ("derives", "exclude", "headers"):
            value = getattr(self, key)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{key}' must be a list of strings.")

    def module_name(self, source: Path) -> str:
        return self.module or f"{source.stem}_xdr"


def load_config(directory: Path | None = None) -> CompilerConfig:
    """Load configuration from `directory` (default: cwd).

    xdrgen.toml takes precedence over a `[tool.xdrgen]` table in
    pyproject.toml. With neither present the defaults are returned.
    """
    if directory is None:
        directory = Path.cwd()
    config_path = directory / CONFIG_NAME
    if config_path.exists():
        return load_config_file(config_path)
    pyproject = directory / PYPROJECT_NAME
    if pyproject.exists():
        with open(pyproject, "rb") as f:
            data = tomllib.load(f)
        return _parse_config(data.get("tool", {}).get("xdrgen", {}))
    return CompilerConfig()


def load_config_file(path: Path) -> CompilerConfig:
    """Load an explicit configuration file; pyproject.toml files are read from `[tool.xdrgen]`."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e.strerror}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    if path.name == PYPROJECT_NAME:
        data = data.get("tool", {}).get("xdrgen", {})
    return _parse_config(data)


def load_config_from_string(text: str) -> CompilerConfig:
    """Load configuration from the TOML text of an xdrgen.toml file."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e
    return _parse_config(data)


def _parse_config(data: dict) -> CompilerConfig:
    known = {f.name for f in fields(CompilerConfig)}
    # TOML keys are written with dashes
    values = {key.replace("-", "_"): value for key, value in data.items()}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration key: {unknown[0]}")
    config = CompilerConfig(**values)
    config.validate()
    return config
