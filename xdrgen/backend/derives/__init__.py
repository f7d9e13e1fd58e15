"""Optional secondary generation passes.

Each derive contributes, independently of the others:

- imports: module imports it needs
- members: lines spliced into the class body of a definition
- functions: module-level code emitted after a definition's codec functions
- epilogue: module-level code emitted after every definition

A derive never changes the XDR codec itself.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Dict, List, Type

from xdrgen.semantics.ast import Definition

if TYPE_CHECKING:
    from xdrgen.backend.codegen_python import PythonCodegen


class Derive:
    name = ""

    def __init__(self, codegen: 'PythonCodegen') -> None:
        self.codegen = codegen

    @property
    def types(self):
        return self.codegen.types

    def imports(self) -> List[str]:
        return []

    def members(self, d: Definition) -> List[str]:
        return []

    def functions(self, d: Definition) -> List[str]:
        return []

    def epilogue(self) -> List[str]:
        return []


def _registry() -> Dict[str, Type[Derive]]:
    from xdrgen.backend.derives.json_codec import JsonDerive
    from xdrgen.backend.derives.json_schema import JsonSchemaDerive
    from xdrgen.backend.derives.enum_string import EnumStringDerive
    return {
        JsonDerive.name: JsonDerive,
        JsonSchemaDerive.name: JsonSchemaDerive,
        EnumStringDerive.name: EnumStringDerive,
    }


DERIVE_NAMES = ("json", "schema", "enum_string")


def make_derives(names: List[str], codegen: 'PythonCodegen') -> List[Derive]:
    """Instantiate the enabled derives in their canonical order."""
    registry = _registry()
    return [registry[n](codegen) for n in DERIVE_NAMES if n in names]
