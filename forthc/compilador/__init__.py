"""Compilador package: Forth lexer, word classifier and x86-64 code generator"""

from .pipeline import compile_source, compile_bytes, pipeline_from_file, CompileIOError, OutputError, SourceError
from .words import classify, Instruction, Op

__all__ = [
    "compile_source",
    "compile_bytes",
    "pipeline_from_file",
    "CompileIOError",
    "SourceError",
    "OutputError",
    "classify",
    "Instruction",
    "Op",
]
