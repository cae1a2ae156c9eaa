"""
Executor — run a compiled artifact and capture everything it produced.
"""
from __future__ import annotations

import logging
import subprocess
from typing import Mapping

from inline_c.core.build import CompiledArtifact, child_environment
from inline_c.errors import RunError
from inline_c.io.schema import ExecutionResult, ExitStatus, Stage

logger = logging.getLogger(__name__)


def execute_artifact(
    artifact: CompiledArtifact,
    variables: Mapping[str, str],
    env: Mapping[str, str],
) -> ExecutionResult:
    """
    Run *artifact* with no arguments, blocking until it exits.

    stdout and stderr are captured in full as bytes.  A process killed
    by a signal yields an ExitStatus without a code.
    """
    argv = [str(artifact.path)]
    try:
        proc = subprocess.run(
            argv,
            env=child_environment(env, variables),
            capture_output=True,
        )
    except (OSError, ValueError) as e:
        raise RunError(f"Failed to start {artifact.path}: {e}") from e

    status = ExitStatus.from_returncode(proc.returncode)
    if status.interrupted:
        logger.info("Program terminated by signal %d", status.signal)
    else:
        logger.info("Program exited with code %d", status.code)

    return ExecutionResult(
        stage=Stage.EXECUTE,
        status=status,
        stdout=proc.stdout,
        stderr=proc.stderr,
        argv=argv,
    )
