"""Test full program emission and the file driver"""
import re

import pytest

from forthc.compilador.pipeline import (
    EPILOGUE,
    OUTPUT_NAME,
    PROLOGUE,
    CompileResult,
    Diagnostic,
    CompileIOError,
    OutputError,
    SourceError,
    compile_bytes,
    compile_source,
    pipeline_from_file,
)
from forthc.compilador.forth_to_asm import compile_instructions
from forthc.compilador.words import Op


def test_program_layout():
    result = compile_source("42 .")
    assert isinstance(result, CompileResult)
    assert result.asm.startswith(PROLOGUE)
    assert result.asm.endswith(EPILOGUE)
    body = result.asm[len(PROLOGUE):-len(EPILOGUE)]
    assert body.index("push $42") < body.index("call printf")


def test_prologue_and_epilogue_contents():
    asm = compile_source("").asm
    assert asm == PROLOGUE + EPILOGUE
    assert ".section .rodata" in asm
    assert 'fmt:\n\t.asciz "%ld\\n"' in asm
    assert ".section .text" in asm
    assert ".globl _start\n_start:\n\tmov %rsp, %rbp\n" in asm
    assert "mov $60, %rax" in asm
    assert "mov $0, %rdi" in asm
    assert asm.rstrip().endswith("syscall")


def test_fragments_follow_token_order():
    asm = compile_source("3 4 + .").asm
    positions = [asm.index(s) for s in ("push $3", "push $4", "addq %rbx, %rax", "call printf")]
    assert positions == sorted(positions)


def test_unrecognized_token_is_reported_and_skipped(capsys):
    result = compile_source("foo 1 .")
    err = capsys.readouterr().err
    assert err.count("Unrecognized token") == 1
    assert "foo" in err
    assert result.diagnostics == [Diagnostic("foo", 1)]
    assert [i.op for i in result.instructions] == [Op.UNRECOGNIZED, Op.PUSH_NUMBER, Op.PRINT]
    assert "push $1" in result.asm
    assert "foo" not in result.asm


def test_signed_literals_are_unrecognized(capsys):
    result = compile_source("-5 +5 .")
    assert [d.token for d in result.diagnostics] == ["-5", "+5"]
    assert "push" not in result.asm
    assert "-5" in capsys.readouterr().err


def test_two_stack_dumps_get_distinct_labels():
    asm = compile_source("1 2 .s 3 .s").asm
    labels = re.findall(r"^(\w+):", asm, re.M)
    assert labels.count("dots_loop_0") == 1
    assert labels.count("dots_loop_1") == 1
    assert labels.count("dots_done_0") == 1
    assert labels.count("dots_done_1") == 1
    assert len(labels) == len(set(labels))


def test_compilations_are_independent():
    src = "1 .s 2 .s"
    assert compile_source(src).asm == compile_source(src).asm


def test_compile_bytes_strips_comments():
    result = compile_bytes(b"5 dup * . \\ square\n/ whole line\n")
    assert [i.op for i in result.instructions] == [Op.PUSH_NUMBER, Op.DUPLICATE, Op.MULTIPLY, Op.PRINT]
    assert result.diagnostics == []


def test_pipeline_writes_code_s(tmp_path):
    src = tmp_path / "code.fs"
    src.write_bytes(b"1 2 nip .\n")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    out = pipeline_from_file(src, out_dir=out_dir)
    assert out == out_dir / OUTPUT_NAME
    assert out.read_text(encoding="utf-8") == compile_source("1 2 nip .\n").asm


def test_pipeline_defaults_to_cwd(tmp_path, monkeypatch):
    src = tmp_path / "prog.fs"
    src.write_text("7 .", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    out = pipeline_from_file(str(src))
    assert out.resolve() == (tmp_path / "code.s").resolve()
    assert "push $7" in out.read_text(encoding="utf-8")


def test_pipeline_overwrites_previous_output(tmp_path):
    (tmp_path / OUTPUT_NAME).write_text("stale\n" * 100, encoding="utf-8")
    src = tmp_path / "prog.fs"
    src.write_text("1 .", encoding="utf-8")
    out = pipeline_from_file(src, out_dir=tmp_path)
    assert "stale" not in out.read_text(encoding="utf-8")


def test_missing_source_raises_and_writes_nothing(tmp_path):
    with pytest.raises(SourceError) as e:
        pipeline_from_file(tmp_path / "missing.fs", out_dir=tmp_path)
    assert "missing.fs" in str(e.value)
    assert not (tmp_path / OUTPUT_NAME).exists()


def test_unwritable_output_raises(tmp_path):
    src = tmp_path / "prog.fs"
    src.write_text("1 .", encoding="utf-8")
    target = tmp_path / "no" / "such" / "dir"
    with pytest.raises(OutputError) as e:
        pipeline_from_file(src, out_dir=target)
    assert not isinstance(e.value, SourceError)
    assert isinstance(e.value, CompileIOError)
    assert e.value.path == target / OUTPUT_NAME


def test_oversized_literal_is_reported(capsys):
    result = compile_source("18446744073709551616 1 .")
    assert [d.token for d in result.diagnostics] == ["18446744073709551616"]
    assert "18446744073709551616" in capsys.readouterr().err
    assert "18446744073709551616" not in result.asm
    assert "push $1\n" in result.asm


def test_wide_literal_uses_movabs():
    asm = compile_source("2147483648 .").asm
    assert "movabs $2147483648, %rax" in asm
    assert "push $2147483648" not in asm


def test_program_is_prologue_fragments_epilogue():
    result = compile_source("1 foo 2 .s + .")
    body = "".join(compile_instructions(result.instructions))
    assert result.asm == PROLOGUE + body + EPILOGUE
