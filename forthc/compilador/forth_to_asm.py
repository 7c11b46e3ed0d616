"""
Code generator: one fixed x86-64 (AT&T) fragment per Forth instruction.
The Forth data stack is the machine stack itself; every value is one 8-byte
slot reached through push/pop on %rsp.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from .words import Instruction, Op

FORMAT_LABEL = 'fmt'
PRINT_ROUTINE = 'printf'
# largest immediate push accepts (it is sign-extended from 32 bits)
MAX_PUSH_IMM = 0x7fffffff


class CodegenContext:
    """Per-compilation state. Holds the counter behind the .s labels."""

    def __init__(self):
        self.dump_count = 0

    def new_dump_id(self) -> int:
        n = self.dump_count
        self.dump_count += 1
        return n


def _push_number(instr: Instruction, ctx: CodegenContext) -> str:
    if instr.arg > MAX_PUSH_IMM:
        return (
            "\n"
            f"\tmovabs ${instr.arg}, %rax\n"
            "\tpushq %rax\n"
        )
    return f"\n\tpush ${instr.arg}\n"


def _duplicate(instr, ctx):
    return (
        "\n"
        "\tpop %rax\n"
        "\tpush %rax\n"
        "\tpush %rax\n"
    )


def _multiply(instr, ctx):
    return (
        "\n"
        "\tpop %rbx\n"
        "\tpop %rcx\n"
        "\timul %rbx, %rcx\n"
        "\tpush %rcx\n"
    )


def _print(instr, ctx):
    return (
        "\n"
        "\tpop %rsi\n"
        f"\tmov ${FORMAT_LABEL}, %rdi\n"
        "\txor %rax, %rax\n"
        f"\tcall {PRINT_ROUTINE}\n"
    )


def _add(instr, ctx):
    return (
        "\n"
        "\tpopq %rbx\n"
        "\tpopq %rax\n"
        "\taddq %rbx, %rax\n"
        "\tpushq %rax\n"
    )


def _swap(instr, ctx):
    return (
        "\n"
        "\tpopq %rax\n"
        "\tpopq %rbx\n"
        "\tpushq %rax\n"
        "\tpushq %rbx\n"
    )


def _nip(instr, ctx):
    # drop the slot under the top without reading it
    return (
        "\n"
        "\tpopq %rax\n"
        "\taddq $8, %rsp\n"
        "\tpushq %rax\n"
    )


def _tuck(instr, ctx):
    return (
        "\n"
        "\tpopq %rax\n"
        "\tpopq %rbx\n"
        "\tpushq %rax\n"
        "\tpushq %rbx\n"
        "\tpushq %rax\n"
    )


def _stack_dump(instr, ctx):
    # %rbp holds the stack pointer from _start, so the first pushed value
    # sits at -8(%rbp). Walk down to %rsp; printf may clobber %rbx.
    n = ctx.new_dump_id()
    loop_label = f"dots_loop_{n}"
    done_label = f"dots_done_{n}"
    return (
        "\n"
        "\tmov %rbp, %rbx\n"
        "\tsub $8, %rbx\n"
        f"{loop_label}:\n"
        "\tcmp %rsp, %rbx\n"
        f"\tjl {done_label}\n"
        "\tmov (%rbx), %rsi\n"
        f"\tmov ${FORMAT_LABEL}, %rdi\n"
        "\txor %rax, %rax\n"
        "\tpush %rbx\n"
        f"\tcall {PRINT_ROUTINE}\n"
        "\tpop %rbx\n"
        "\tsub $8, %rbx\n"
        f"\tjmp {loop_label}\n"
        f"{done_label}:\n"
    )


def _unrecognized(instr, ctx):
    return ""


_GENERATORS: Dict[Op, Callable[[Instruction, CodegenContext], str]] = {
    Op.PUSH_NUMBER: _push_number,
    Op.DUPLICATE: _duplicate,
    Op.MULTIPLY: _multiply,
    Op.PRINT: _print,
    Op.ADD: _add,
    Op.SWAP: _swap,
    Op.NIP: _nip,
    Op.TUCK: _tuck,
    Op.STACK_DUMP: _stack_dump,
    Op.UNRECOGNIZED: _unrecognized,
}

_missing = set(Op) - set(_GENERATORS)
if _missing:
    raise RuntimeError(f"No code generator for ops: {sorted(op.name for op in _missing)}")


def generate(instr: Instruction, ctx: CodegenContext) -> str:
    return _GENERATORS[instr.op](instr, ctx)


def compile_instructions(instrs: Iterable[Instruction], ctx: Optional[CodegenContext] = None) -> List[str]:
    if ctx is None:
        ctx = CodegenContext()
    return [generate(instr, ctx) for instr in instrs]


if __name__ == '__main__':
    import sys
    from .words import classify
    from .lex_forth import tokenize
    txt = sys.stdin.read()
    sys.stdout.write(''.join(compile_instructions(classify(t) for t in tokenize(txt))))
