"""Data-driven code generation tests.

Test cases live in codegen/*.tests files. Format:

    === test name
    class Main { ... }
    ---
    function Main.main 0
    ...
    ---

The expected section is either the exact VM output, one instruction per
line, or a single line `error: <ErrorClass>`.
"""

from pathlib import Path

import pytest

from jackc import CompileError, compile_source

CODEGEN_DIR = Path(__file__).parent / "codegen"


def parse_codegen_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_codegen_tests() -> list[tuple[str, str, str]]:
    """Find all codegen tests, returns (test_id, input, expected)."""
    results = []
    for test_file in sorted(CODEGEN_DIR.glob("*.tests")):
        for name, input_code, expected in parse_codegen_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


def pytest_generate_tests(metafunc):
    """Parametrize tests over codegen test files."""
    if "codegen_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover_codegen_tests()
        ]
        metafunc.parametrize("codegen_input,codegen_expected", params)


def test_codegen(codegen_input: str, codegen_expected: str):
    """Verify compiled VM code matches the expected output."""
    if codegen_expected.startswith("error:"):
        error_name = codegen_expected[len("error:") :].strip()
        with pytest.raises(CompileError) as info:
            compile_source(codegen_input)
        assert type(info.value).__name__ == error_name, str(info.value)
        return
    output = "\n".join(compile_source(codegen_input))
    if output != codegen_expected:
        pytest.fail(
            f"Output mismatch:\n--- expected ---\n{codegen_expected}\n--- got ---\n{output}"
        )
