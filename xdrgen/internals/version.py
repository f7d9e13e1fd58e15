from __future__ import annotations
import sys, platform, datetime
from importlib.metadata import version, PackageNotFoundError

from xdrgen import __version__ as app_ver, __dev__ as is_dev


def _dist_version(name: str) -> str:
    try:
        return version(name)
    except PackageNotFoundError:
        return "unknown"


def tool_versions() -> dict[str, str]:
    """Versions shown in the CLI banner."""
    return {
        "xdrgen": app_ver + (" (dev)" if is_dev else ""),
        "python": platform.python_version(),
        "lark": _dist_version("lark"),
    }


def banner_text(ansi: bool = False) -> str:
    bold, dim, reset = ("\x1b[1m", "\x1b[2m", "\x1b[0m") if ansi else ("", "", "")
    v = tool_versions()
    return (
        f"{bold}xdrgen XDR Interface Compiler{reset} • {v['xdrgen']}\n"
        f"{dim}Python {v['python']} • lark {v['lark']} • {datetime.date.today().isoformat()}{reset}\n"
    )


def print_banner(stream=None) -> None:
    stream = stream or sys.stdout
    if stream is sys.stdout and hasattr(stream, "reconfigure"):
        # The banner contains non-ASCII bullets
        stream.reconfigure(encoding="utf-8")
    print(banner_text(ansi=getattr(stream, "isatty", lambda: False)()), file=stream)
