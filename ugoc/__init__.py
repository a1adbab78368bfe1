"""
ugoc - uGo to LLVM IR code generator

Lowers a parsed uGo file (globals, functions, blocks, for-loops, integer
arithmetic and single-argument calls) into textual LLVM IR.
"""

__version__ = "0.1.0"
__author__ = "ugoc Contributors"
__license__ = "MIT"

from .scope import Object, Scope, universe
from .ir import (
    IRGenerator,
    CompileError,
    UnresolvedSymbolError,
    UnsupportedConstructError,
)
from .compiler import Compiler, CompilationResult

__all__ = [
    'Object',
    'Scope',
    'universe',
    'IRGenerator',
    'CompileError',
    'UnresolvedSymbolError',
    'UnsupportedConstructError',
    'Compiler',
    'CompilationResult',
]
