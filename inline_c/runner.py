"""
Runner — top-level orchestration: snippet → compile → run → Assert.

This module ties reconstruction, directive extraction, flag
resolution, compilation, execution and cleanup together into
``run`` / ``assert_c`` / ``assert_cxx``, which can be called from a
test suite, from a CLI, or programmatically.

Each call is synchronous and self-contained: its temp files live in
a private directory and its view of the environment is a snapshot
taken at the start of the call.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Union

from inline_c.assertion import Assert
from inline_c.config import Settings, settings as default_settings
from inline_c.core.build import CompiledArtifact, compile_program
from inline_c.core.cleanup import TempArtifacts
from inline_c.core.directives import merge_variables
from inline_c.core.execute import execute_artifact
from inline_c.core.flags import resolve_flags
from inline_c.core.reconstruct import reconstruct
from inline_c.core.tokens import Token
from inline_c.errors import CleanupError, RunError
from inline_c.io.schema import ArtifactMeta, ExecutionResult, RunReport
from inline_c.io.writer import write_report
from inline_c.policy.toolchain import Language, Toolchain, select_toolchain

logger = logging.getLogger(__name__)

Snippet = Union[str, Sequence[Token]]


@dataclass
class RunOutcome:
    """Everything one pipeline invocation learned."""
    result: ExecutionResult
    toolchain: Toolchain
    variables: Dict[str, str] = field(default_factory=dict)
    artifact: Optional[ArtifactMeta] = None


# ── Helpers ──────────────────────────────────────────────────────────────────

def _working_dir(cwd: Optional[Path], settings: Settings) -> Path:
    try:
        if cwd is None:
            cwd = Path(settings.WORKING_DIR) if settings.WORKING_DIR else Path.cwd()
    except OSError as e:
        raise RunError(f"Cannot resolve working directory: {e}") from e

    if not cwd.is_dir():
        raise RunError(f"Working directory does not exist: {cwd}")
    return cwd


# ── Public API ───────────────────────────────────────────────────────────────

def run_pipeline(
    language: Language,
    program: str,
    *,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
    settings: Optional[Settings] = None,
) -> RunOutcome:
    """
    Compile and run *program*, returning the full RunOutcome.

    Parameters
    ----------
    language : Language
        C or C++.
    program : str
        Source text; ``#inline_c_rs`` directive lines are stripped.
    env : Mapping[str, str], optional
        Environment snapshot for meta variables, flag fallback and the
        children's inherited environment.  Defaults to ``os.environ``.
    cwd : Path, optional
        Compiler working directory.
    settings : Settings, optional
        Defaults to the module-level settings.

    Raises
    ------
    RunError
        Temp files could not be created or the working directory is
        unusable.
    CleanupError
        A recorded temp file could not be removed after a completed
        run; the outcome is attached as ``.result``.
    """
    if settings is None:
        settings = default_settings
    env = dict(os.environ if env is None else env)

    source, variables = merge_variables(program, env, settings.META_ENV_PREFIX)
    workdir = _working_dir(cwd, settings)

    toolchain = select_toolchain(
        language,
        variables,
        env,
        default_cc=settings.DEFAULT_CC,
        default_cxx=settings.DEFAULT_CXX,
        default_msvc=settings.DEFAULT_MSVC,
        forced=settings.TOOLCHAIN,
        cxx_standard=settings.CXX_STANDARD,
    )
    flags = resolve_flags(variables, env, toolchain)
    opt_flag = settings.OPT_LEVEL.to_flag(toolchain.convention)

    outcome: Optional[RunOutcome] = None
    try:
        with TempArtifacts(prefix=settings.TEMP_PREFIX, temp_dir=settings.TEMP_DIR) as artifacts:
            compiled = compile_program(
                source,
                toolchain,
                flags,
                variables,
                env,
                artifacts,
                cwd=workdir,
                opt_flag=opt_flag,
            )

            if isinstance(compiled, CompiledArtifact):
                result = execute_artifact(compiled, variables, env)
                outcome = RunOutcome(result, toolchain, variables, compiled.meta)
            else:
                outcome = RunOutcome(compiled, toolchain, variables)
    except CleanupError as e:
        e.result = Assert(outcome.result) if outcome is not None else None
        raise
    except OSError as e:
        raise RunError(f"Run failed: {e}") from e

    return outcome


def run(
    language: Language,
    program: str,
    *,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
    settings: Optional[Settings] = None,
) -> Assert:
    """Compile and run *program*; see ``run_pipeline``."""
    outcome = run_pipeline(language, program, env=env, cwd=cwd, settings=settings)
    return Assert(outcome.result)


def _program_text(snippet: Snippet) -> str:
    if isinstance(snippet, str):
        return snippet
    return reconstruct(snippet)


def assert_c(snippet: Snippet, **kwargs) -> Assert:
    """
    Run a C snippet, given as text or as a token sequence.

    Token sequences are reconstructed first, so a malformed
    ``#include`` raises ReconstructionError before anything is spawned.
    """
    return run(Language.C, _program_text(snippet), **kwargs)


def assert_cxx(snippet: Snippet, **kwargs) -> Assert:
    """C++ counterpart of ``assert_c``."""
    return run(Language.CXX, _program_text(snippet), **kwargs)


# ── CLI ──────────────────────────────────────────────────────────────────────

_CXX_SUFFIXES = {".cc", ".cpp", ".cxx", ".c++"}


def main():
    """CLI entry point for inline_c."""
    parser = argparse.ArgumentParser(
        description="inline_c — compile a C/C++ file, run it and report the outcome",
    )
    parser.add_argument(
        "input",
        help="Path to a C or C++ source file",
    )
    parser.add_argument(
        "--cxx",
        action="store_true",
        help="Compile as C++ (default: from the file suffix)",
    )
    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=None,
        help="Directory to write inline_c_report.json",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.input)
    if not path.exists():
        logger.error("File not found: %s", path)
        sys.exit(1)

    language = Language.CXX if args.cxx or path.suffix.lower() in _CXX_SUFFIXES else Language.C
    outcome = run_pipeline(language, path.read_text(encoding="utf-8"))
    result = outcome.result

    stdout = result.stdout.decode("utf-8", errors="replace")
    stderr = result.stderr.decode("utf-8", errors="replace")

    # Print summary
    print(f"Stage: {result.stage.value}")
    if result.status.interrupted:
        print(f"Signal: {result.status.signal}")
    else:
        print(f"Exit code: {result.status.code}")
    print(f"Stdout ({len(result.stdout)} bytes):\n{stdout}")
    print(f"Stderr ({len(result.stderr)} bytes):\n{stderr}")

    if args.output_dir:
        report = RunReport(
            source_path=str(path),
            language=language.value,
            toolchain=outcome.toolchain.convention.value,
            compiler=outcome.toolchain.compiler,
            stage=result.stage,
            exit_code=result.status.code,
            signal=result.status.signal,
            stdout=stdout,
            stderr=stderr,
            variables=outcome.variables,
            argv=result.argv,
        )
        report_path = write_report(report, args.output_dir)
        print(f"Report written to: {report_path}")

    sys.exit(result.status.code_or(1))


if __name__ == "__main__":
    main()
