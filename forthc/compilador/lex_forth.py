"""
Forth word lexer using PLY (lex).
Words are runs of anything that is not whitespace or a comment marker.
'/' and '\\' start a comment that runs to the end of the line, even in the
middle of a word (the part already read is kept as its own word).
"""
from __future__ import annotations

from typing import List, Tuple

import ply.lex as lex

tokens = (
    'WORD',
)

# Whitespace is only space, tab, CR and LF; anything else belongs to a word.
t_ignore = ' \t\r'

t_WORD = r'[^\ \t\r\n/\\]+'


def t_COMMENT(t):
    r"[/\\][^\n]*"
    pass


def t_newline(t):
    r"\n+"
    t.lexer.lineno += len(t.value)


def t_error(t):
    raise SyntaxError(f"Illegal character '{t.value[0]}' at line {t.lexer.lineno}")


def build_lexer(**kwargs):
    return lex.lex(**kwargs)


def tokenize_with_lines(text: str) -> List[Tuple[str, int]]:
    """Return (word, line) pairs in source order."""
    lexer = build_lexer()
    lexer.input(text)
    out = []
    while True:
        tok = lexer.token()
        if not tok:
            break
        out.append((tok.value, tok.lineno))
    return out


def tokenize(text: str) -> List[str]:
    return [word for word, _ in tokenize_with_lines(text)]


def decode_source(data: bytes) -> str:
    # one character per byte, so nothing can fail to decode
    return data.decode('latin-1')


def tokenize_bytes(data: bytes) -> List[str]:
    return tokenize(decode_source(data))


if __name__ == '__main__':
    sample = """
    \\ square five
    5 dup * .   / prints 25
    1 2 swap .s
    """
    for t in tokenize_with_lines(sample):
        print(t)
