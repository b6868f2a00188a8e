"""CLI tests for the jackc entry point."""

import io
import sys

import pytest

from jackc.cli import main

MAIN_SOURCE = """\
class Main {
    function void main() {
        do Output.printInt(1);
        return;
    }
}
"""

MAIN_VM = """\
function Main.main 0
push constant 1
call Output.printInt 1
pop temp 0
push constant 0
return
"""


def _stdin(monkeypatch, text: str) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(text.encode())))


def test_file_writes_vm_beside_source(tmp_path):
    src = tmp_path / "Main.jack"
    src.write_text(MAIN_SOURCE)
    assert main([str(src)]) == 0
    assert (tmp_path / "Main.vm").read_text() == MAIN_VM


def test_directory_compiles_every_unit(tmp_path):
    (tmp_path / "Main.jack").write_text(MAIN_SOURCE)
    (tmp_path / "Point.jack").write_text(
        "class Point { field int x; method int getX() { return x; } }"
    )
    (tmp_path / "notes.txt").write_text("ignored")
    assert main([str(tmp_path)]) == 0
    assert (tmp_path / "Main.vm").read_text() == MAIN_VM
    assert (tmp_path / "Point.vm").read_text().startswith("function Point.getX 0\n")
    assert not (tmp_path / "notes.vm").exists()


def test_output_flag(tmp_path):
    src = tmp_path / "Main.jack"
    src.write_text(MAIN_SOURCE)
    out = tmp_path / "out.vm"
    assert main([str(src), "-o", str(out)]) == 0
    assert out.read_text() == MAIN_VM
    assert not (tmp_path / "Main.vm").exists()


def test_stdin_to_stdout(monkeypatch, capsys):
    _stdin(monkeypatch, MAIN_SOURCE)
    assert main([]) == 0
    assert capsys.readouterr().out == MAIN_VM


def test_stop_at_tokens(tmp_path):
    src = tmp_path / "Main.jack"
    src.write_text("class Main { }")
    assert main(["--stop-at", "tokens", str(src)]) == 0
    assert (tmp_path / "MainT.xml").read_text() == (
        "<tokens>\n"
        "<keyword> class </keyword>\n"
        "<identifier> Main </identifier>\n"
        "<symbol> { </symbol>\n"
        "<symbol> } </symbol>\n"
        "</tokens>\n"
    )


def test_compile_error_reports_and_continues(tmp_path, capsys):
    (tmp_path / "Bad.jack").write_text(
        "class Bad { function void f() { let y = 1; return; } }"
    )
    (tmp_path / "Main.jack").write_text(MAIN_SOURCE)
    assert main([str(tmp_path)]) == 1
    err = capsys.readouterr().err
    assert "Bad.jack: undeclared identifier 'y' in Bad.f at line 1" in err
    assert err.startswith("error: ")
    assert not (tmp_path / "Bad.vm").exists()
    assert (tmp_path / "Main.vm").read_text() == MAIN_VM


def test_tokenize_error(monkeypatch, capsys):
    _stdin(monkeypatch, "class Main { # }")
    assert main([]) == 1
    assert "error: <stdin>: unexpected character" in capsys.readouterr().err


def test_empty_directory(tmp_path, capsys):
    assert main([str(tmp_path)]) == 1
    assert "no .jack files" in capsys.readouterr().err


def test_missing_path(tmp_path, capsys):
    assert main([str(tmp_path / "Nope.jack")]) == 1
    assert "cannot open" in capsys.readouterr().err


def test_help(capsys):
    assert main(["--help"]) == 0
    assert capsys.readouterr().out.startswith("jackc [OPTIONS]")


@pytest.mark.parametrize(
    "args,message",
    [
        (["--bogus"], "unknown flag '--bogus'"),
        (["--stop-at"], "--stop-at requires an argument"),
        (["--stop-at", "ast"], "unknown phase 'ast'"),
        (["-o"], "-o requires an argument"),
        (["a.jack", "b.jack"], "unexpected argument 'b.jack'"),
    ],
)
def test_usage_errors(args, message, capsys):
    assert main(args) == 2
    assert message in capsys.readouterr().err


def test_output_flag_rejected_for_directory(tmp_path, capsys):
    (tmp_path / "Main.jack").write_text(MAIN_SOURCE)
    assert main([str(tmp_path), "-o", str(tmp_path / "x.vm")]) == 2
    assert "-o cannot be used with a directory" in capsys.readouterr().err
