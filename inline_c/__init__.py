"""
inline_c — compile embedded C/C++ snippets, run them, assert on the outcome.

Quick start::

    from inline_c import assert_c

    assert_c('''
        #include <stdio.h>

        int main() {
            printf("Hello, World!");
            return 0;
        }
    ''').success().stdout("Hello, World!").no_stderr()

Layers
------
core     tokens, lexer, reconstruction, directives, flags, build, execute, cleanup.
policy   toolchain selection and argument conventions.
io       result schema and JSON report writer.
runner   the pipeline plus a small CLI.
"""

__version__ = "0.1.0"
PACKAGE_NAME = "inline_c"
SCHEMA_VERSION = "0.1"

from .errors import (
    CleanupError,
    InlineCError,
    ReconstructionError,
    RunError,
)

from .core.tokens import (
    Delimiter,
    Group,
    Ident,
    Literal,
    Other,
    Punct,
    Spacing,
    Span,
    Token,
)

from .core.lexer import lex
from .core.reconstruct import reconstruct
from .core.directives import extract_directives
from .core.flags import resolve_flags
from .policy.toolchain import Language, ToolchainConvention
from .io.schema import ExecutionResult, ExitStatus, Stage
from .assertion import Assert
from .runner import assert_c, assert_cxx, run

__all__ = [
    # pipeline
    "run",
    "assert_c",
    "assert_cxx",
    "Assert",
    "Language",
    "ToolchainConvention",
    # stages
    "lex",
    "reconstruct",
    "extract_directives",
    "resolve_flags",
    # tokens
    "Token",
    "Punct",
    "Ident",
    "Literal",
    "Group",
    "Other",
    "Spacing",
    "Delimiter",
    "Span",
    # results
    "ExecutionResult",
    "ExitStatus",
    "Stage",
    # errors
    "InlineCError",
    "ReconstructionError",
    "RunError",
    "CleanupError",
    # meta
    "PACKAGE_NAME",
    "SCHEMA_VERSION",
]
