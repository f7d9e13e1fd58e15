"""
AST Builder module for the XDR compiler.

Exports:
    ASTBuilder: Main class for building the typed AST from Lark parse trees
    XdrSyntaxError: Raised for source that does not match the grammar
"""
# Main ASTBuilder class
from xdrgen.semantics.ast_builder.builder import ASTBuilder

# Exception classes
from xdrgen.semantics.ast_builder.exceptions import XdrSyntaxError

__all__ = [
    'ASTBuilder',
    'XdrSyntaxError',
]
