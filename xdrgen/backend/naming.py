"""Identifier mapping from XDR names to Python names."""
from __future__ import annotations
import keyword

# Names the generated module binds at top level
MODULE_NAMES = frozenset({
    "enum", "dataclass", "xdr", "Any", "List", "Optional", "Union",
    "copy", "JSON_SCHEMA_DEFINITIONS",
})

# Builtins referenced by generated code and derives
BUILTIN_NAMES = frozenset({
    "int", "float", "bool", "str", "bytes", "list",
    "classmethod", "ValueError", "KeyError",
})


def py_name(name: str) -> str:
    """Python identifier for an XDR name.

    Keywords and names the generated code relies on get a trailing underscore.
    """
    if keyword.iskeyword(name) or name in MODULE_NAMES or name in BUILTIN_NAMES:
        return f"{name}_"
    return name


def pack_fn(name: str) -> str:
    return f"pack_{name}"


def unpack_fn(name: str) -> str:
    return f"unpack_{name}"


def payload_name(discriminant: str) -> str:
    """Attribute holding a union's arm value, renamed if the discriminant uses it."""
    return "value_" if py_name(discriminant) == "value" else "value"


def docstring(text: str, indent: str = "") -> str:
    """Render `text` as a triple-quoted docstring."""
    body = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if "\n" not in body:
        return f'{indent}"""{body}"""'
    lines = body.split("\n")
    out = [f'{indent}"""{lines[0]}']
    out.extend(f"{indent}{line}" if line else "" for line in lines[1:])
    out.append(f'{indent}"""')
    return "\n".join(out)


def comment(text: str, indent: str = "") -> str:
    """Render `text` as `#` comment lines."""
    return "\n".join(f"{indent}# {line}".rstrip() for line in text.split("\n"))
