"""
Pipeline that takes Forth source and produces a GNU as source file (code.s).

Flujo completo:
1. Lexer: bytes -> words, comments removed
2. Clasificador: word -> Instruction (number, built-in word or unrecognized)
3. Generador: Instruction -> assembly fragment
4. Emisor: prologue + fragments + epilogue -> code.s
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import List, NamedTuple, Optional

from .forth_to_asm import CodegenContext, FORMAT_LABEL, compile_instructions
from .lex_forth import decode_source, tokenize_with_lines
from .words import Instruction, Op, classify

OUTPUT_NAME = 'code.s'
ENTRY_SYMBOL = '_start'
# written as-is into .asciz, the assembler turns \n into a newline
FORMAT_STRING = '%ld\\n'

PROLOGUE = (
    ".section .rodata\n"
    "\n"
    f"{FORMAT_LABEL}:\n"
    f"\t.asciz \"{FORMAT_STRING}\"\n"
    "\n"
    ".section .text\n"
    f".globl {ENTRY_SYMBOL}\n"
    f"{ENTRY_SYMBOL}:\n"
    "\tmov %rsp, %rbp\n"
)

EPILOGUE = (
    "\n"
    "\tmov $60, %rax\t# syscall: exit\n"
    "\tmov $0, %rdi\t# status = 0\n"
    "\tsyscall\n"
)


class CompileIOError(Exception):
    """File error around a compilation; path names the file involved"""

    def __init__(self, path, reason):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class SourceError(CompileIOError):
    """The Forth source could not be read"""


class OutputError(CompileIOError):
    """The assembly output could not be written"""


class Diagnostic(NamedTuple):
    token: str
    line: Optional[int] = None

    def __str__(self):
        if self.line is None:
            return f"Unrecognized token: {self.token}"
        return f"Unrecognized token: {self.token} (line {self.line})"


class CompileResult(NamedTuple):
    asm: str
    instructions: List[Instruction]
    diagnostics: List[Diagnostic]


def report(message, stream=None):
    print(message, file=stream if stream is not None else sys.stderr)


def compile_source(source_text: str) -> CompileResult:
    """Translate Forth text into a complete assembly program.

    Unrecognized words are reported on stderr and skipped; they never stop
    the compilation. Each call starts a fresh label counter, so compiling
    the same text twice gives the same output.
    """
    instructions = []
    diagnostics = []
    for word, line in tokenize_with_lines(source_text):
        instr = classify(word)
        instructions.append(instr)
        if instr.op is Op.UNRECOGNIZED:
            diag = Diagnostic(word, line)
            diagnostics.append(diag)
            report(diag)
    fragments = compile_instructions(instructions, CodegenContext())
    asm = ''.join([PROLOGUE] + fragments + [EPILOGUE])
    return CompileResult(asm, instructions, diagnostics)


def compile_bytes(data: bytes) -> CompileResult:
    return compile_source(decode_source(data))


def pipeline_from_file(source_file, out_dir: Path = None) -> Path:
    """Compile source_file and write the program to out_dir/code.s.

    out_dir defaults to the current working directory. Returns the path of
    the written file. Nothing is written if the source cannot be read.
    """
    source_file = Path(source_file)
    if out_dir is None:
        out_dir = Path.cwd()
    out_dir = Path(out_dir)

    try:
        data = source_file.read_bytes()
    except OSError as e:
        raise SourceError(source_file, e.strerror or str(e)) from e

    result = compile_bytes(data)

    s_path = out_dir / OUTPUT_NAME
    try:
        s_path.write_text(result.asm, encoding='utf-8')
    except OSError as e:
        raise OutputError(s_path, e.strerror or str(e)) from e
    return s_path
