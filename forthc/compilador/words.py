"""
Word classifier: maps one Forth token to one Instruction.

Every token classifies to something. Digit-only tokens that fit in 64 bits
are numbers, the eight built-in words map to their own op, everything else
(including signed literals such as -5) is UNRECOGNIZED.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, NamedTuple, Optional, Tuple, Union


class Op(Enum):
    PUSH_NUMBER = 'push_number'
    DUPLICATE = 'dup'
    MULTIPLY = '*'
    PRINT = '.'
    ADD = '+'
    SWAP = 'swap'
    NIP = 'nip'
    TUCK = 'tuck'
    STACK_DUMP = '.s'
    UNRECOGNIZED = 'unrecognized'


class Instruction(NamedTuple):
    op: Op
    # int for PUSH_NUMBER, original text for UNRECOGNIZED, None otherwise
    arg: Optional[Union[int, str]] = None


KEYWORDS: Dict[str, Op] = {
    'dup': Op.DUPLICATE,
    '*': Op.MULTIPLY,
    '.': Op.PRINT,
    '+': Op.ADD,
    'swap': Op.SWAP,
    'nip': Op.NIP,
    'tuck': Op.TUCK,
    '.s': Op.STACK_DUMP,
}

# op -> (values popped, values pushed)
STACK_EFFECTS: Dict[Op, Tuple[int, int]] = {
    Op.PUSH_NUMBER: (0, 1),
    Op.DUPLICATE: (1, 2),
    Op.MULTIPLY: (2, 1),
    Op.PRINT: (1, 0),
    Op.ADD: (2, 1),
    Op.SWAP: (2, 2),
    Op.NIP: (2, 1),
    Op.TUCK: (2, 3),
    Op.STACK_DUMP: (0, 0),
    Op.UNRECOGNIZED: (0, 0),
}

_DIGITS = frozenset('0123456789')

# one 8-byte stack slot
MAX_LITERAL = 2 ** 64 - 1


def is_number(token: str) -> bool:
    # str.isdigit() would also accept non-ASCII digits
    return bool(token) and all(ch in _DIGITS for ch in token)


def classify(token: str) -> Instruction:
    if is_number(token):
        n = int(token)
        if n <= MAX_LITERAL:
            return Instruction(Op.PUSH_NUMBER, n)
        return Instruction(Op.UNRECOGNIZED, token)
    op = KEYWORDS.get(token)
    if op is not None:
        return Instruction(op)
    return Instruction(Op.UNRECOGNIZED, token)
