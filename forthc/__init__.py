"""forthc: compiles a small Forth subset to x86-64 assembly."""

__version__ = "0.1.0"
