"""Pytest configuration for the jackc test suite."""

import sys
from pathlib import Path

import pytest

# Add src directory to path for jackc imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jackc import compile_source  # noqa: E402
from jackc.context import CompilationContext  # noqa: E402
from jackc.expressions import ExpressionCompiler  # noqa: E402
from jackc.vmwriter import VMWriter  # noqa: E402


@pytest.fixture
def compile_jack():
    """Compile the Jack source of one class into VM lines."""
    return compile_source


@pytest.fixture
def ctx() -> CompilationContext:
    """A context positioned inside subroutine Main.main."""
    context = CompilationContext(unit_name="Main")
    context.begin_subroutine("main", "function", "void")
    return context


@pytest.fixture
def expr_compiler(ctx: CompilationContext) -> ExpressionCompiler:
    return ExpressionCompiler(ctx, VMWriter())
