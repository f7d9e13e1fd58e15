"""xdrgen - XDR (RFC 4506) interface compiler generating Python codecs."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("xdrgen")
    __dev__ = False
except PackageNotFoundError:
    # Development mode - read from pyproject.toml
    import tomllib
    from pathlib import Path
    try:
        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject, "rb") as f:
            __version__ = tomllib.load(f).get("project", {}).get("version", "unknown")
    except (OSError, tomllib.TOMLDecodeError):
        __version__ = "unknown"
    __dev__ = True

from xdrgen.compiler.config import CompilerConfig, ConfigError  # noqa: E402
from xdrgen.compiler.pipeline import CompilationError, compile_file, generate  # noqa: E402

__all__ = [
    "CompilerConfig", "ConfigError", "CompilationError", "compile_file", "generate",
    "__version__",
]
