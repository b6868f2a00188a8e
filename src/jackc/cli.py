"""jackc CLI: compile .jack files to .vm files."""

from __future__ import annotations

import sys
from pathlib import Path

from .compiler import compile_tokens
from .errors import CompileError
from .tokens import TokenizeError, tokenize
from .xmlout import tokens_to_xml

PHASES: list[str] = ["tokens", "vm"]

SUFFIXES: dict[str, str] = {"tokens": "T.xml", "vm": ".vm"}

USAGE: str = """\
jackc [OPTIONS] [PATH] [-o OUTPUT]

Compile Jack classes to VM code. PATH is a .jack file or a directory of
.jack files; each Foo.jack is written to Foo.vm beside it. Without PATH,
one class is read from stdin and written to stdout.

Options:
  --stop-at PHASE     Stop after phase: tokens, vm (default: vm)
  -o, --output FILE   Write output to FILE (single input only)
  --help              Show this help message
"""


def read_source(input_file: str | None) -> tuple[str, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is not None:
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            print("error: cannot open '" + input_file + "'", file=sys.stderr)
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("error: invalid utf-8 in input", file=sys.stderr)
        return ("", 1)
    return (source, 0)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w") as f:
                f.write(output)
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return 1
        return 0
    sys.stdout.write(output)
    return 0


def run_pipeline(source: str, stop_at: str) -> str:
    """Compile one unit. Raises TokenizeError or CompileError."""
    tokens = tokenize(source)
    if stop_at == "tokens":
        return tokens_to_xml(tokens)
    lines = compile_tokens(tokens)
    return "".join(line + "\n" for line in lines)


def compile_unit(
    source: str, stop_at: str, output_file: str | None, label: str
) -> int:
    try:
        output = run_pipeline(source, stop_at)
    except TokenizeError as e:
        print("error: " + label + ": " + str(e), file=sys.stderr)
        return 1
    except CompileError as e:
        print("error: " + label + ": " + str(e), file=sys.stderr)
        return 1
    return write_output(output, output_file)


def output_path(source_path: Path, stop_at: str) -> str:
    return str(source_path.parent / (source_path.stem + SUFFIXES[stop_at]))


def compile_path(path: Path, stop_at: str, output_file: str | None) -> int:
    if path.is_dir():
        if output_file is not None:
            print("error: -o cannot be used with a directory", file=sys.stderr)
            return 2
        sources = sorted(path.glob("*.jack"))
        if len(sources) == 0:
            print("error: no .jack files in '" + str(path) + "'", file=sys.stderr)
            return 1
    else:
        sources = [path]
    exit_code = 0
    for source_path in sources:
        source, err = read_source(str(source_path))
        if err != 0:
            exit_code = err
            continue
        target = output_file if output_file is not None else output_path(source_path, stop_at)
        if compile_unit(source, stop_at, target, str(source_path)) != 0:
            exit_code = 1
    return exit_code


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    stop_at = "vm"
    input_path: str | None = None
    output_file: str | None = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--stop-at":
            if i + 1 >= len(args):
                print("error: --stop-at requires an argument", file=sys.stderr)
                return 2
            stop_at = args[i + 1]
            i += 2
        elif arg == "-o" or arg == "--output":
            if i + 1 >= len(args):
                print("error: " + arg + " requires an argument", file=sys.stderr)
                return 2
            output_file = args[i + 1]
            i += 2
        elif arg.startswith("-"):
            print("error: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif input_path is None:
            input_path = arg
            i += 1
        else:
            print("error: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
    if stop_at not in PHASES:
        print("error: unknown phase '" + stop_at + "'", file=sys.stderr)
        return 2

    if input_path is None:
        source, err = read_source(None)
        if err != 0:
            return err
        return compile_unit(source, stop_at, output_file, "<stdin>")
    path = Path(input_path)
    if not path.exists():
        print("error: cannot open '" + input_path + "'", file=sys.stderr)
        return 1
    return compile_path(path, stop_at, output_file)


if __name__ == "__main__":
    sys.exit(main())
