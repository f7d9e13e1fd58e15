"""String conversion for generated enums: `str(Color.RED) == "RED"`."""
from __future__ import annotations
from typing import List

from xdrgen.semantics.ast import Definition, EnumDef
from xdrgen.backend.derives import Derive
from xdrgen.backend.naming import py_name


class EnumStringDerive(Derive):
    name = "enum_string"

    def members(self, d: Definition) -> List[str]:
        if not isinstance(d, EnumDef):
            return []
        cls = py_name(d.name)
        return [
            "def __str__(self) -> str:\n"
            "    return self.name",
            "@classmethod\n"
            f'def from_str(cls, text: str) -> "{cls}":\n'
            "    try:\n"
            "        return cls[text]\n"
            "    except KeyError:\n"
            f"        raise ValueError(f\"enum '{d.name}' - unknown variant: {{text!r}}\") from None",
        ]
