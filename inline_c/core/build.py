"""
Build invoker — one translation unit in, one executable (or a failed
compile result) out.

Steps:
  1. Write the compilable source into the invocation's private temp dir.
  2. Lay out output paths for the chosen toolchain convention.
  3. Run the compiler synchronously with the run variables layered on
     top of the inherited environment.
  4. On success, register every produced file for cleanup and record
     the artifact's identity (sha256, ELF header via pyelftools).
"""
from __future__ import annotations

import hashlib
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from inline_c.core.cleanup import TempArtifacts
from inline_c.errors import RunError
from inline_c.io.schema import ArtifactMeta, ExecutionResult, ExitStatus, Stage
from inline_c.policy.toolchain import Toolchain

logger = logging.getLogger(__name__)

# Exit codes reported when the compiler cannot be started at all
# (same meaning as in POSIX shells).
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126

SOURCE_STEM = "snippet"


@dataclass
class CompiledArtifact:
    """An executable plus everything created to produce it."""
    path: Path
    toolchain: Toolchain
    argv: List[str]
    temp_files: List[Path] = field(default_factory=list)
    meta: Optional[ArtifactMeta] = None


def child_environment(env: Mapping[str, str], variables: Mapping[str, str]) -> Dict[str, str]:
    """Run variables layered on top of (not replacing) *env*."""
    merged = dict(env)
    merged.update(variables)
    return merged


# ── Artifact identity ────────────────────────────────────────────────────────

def _sha256(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def describe_artifact(path: Path) -> ArtifactMeta:
    """Hash *path* and read its ELF header when it is an ELF file."""
    elf_type = None
    machine = None
    try:
        with open(path, "rb") as f:
            elf = ELFFile(f)
            elf_type = elf.header["e_type"]
            machine = elf.header["e_machine"]
    except ELFError:
        pass

    return ArtifactMeta(
        path=str(path),
        sha256=_sha256(path),
        size_bytes=path.stat().st_size,
        elf_type=elf_type,
        machine=machine,
    )


# ── Compilation ──────────────────────────────────────────────────────────────

def compile_program(
    source: str,
    toolchain: Toolchain,
    flags: List[str],
    variables: Mapping[str, str],
    env: Mapping[str, str],
    artifacts: TempArtifacts,
    cwd: Path,
    opt_flag: Optional[str] = None,
) -> Union[CompiledArtifact, ExecutionResult]:
    """
    Compile *source* with *toolchain*.

    Returns a CompiledArtifact on success, or the compiler's
    ExecutionResult (stage COMPILE) when it fails.  OSErrors from
    writing the source propagate to the caller.
    """
    src_path = artifacts.path(SOURCE_STEM + toolchain.language.suffix)
    src_path.write_text(source, encoding="utf-8")
    artifacts.register(src_path)

    exe_path = artifacts.path(SOURCE_STEM + toolchain.executable_suffix)
    obj_path = artifacts.path(SOURCE_STEM + ".obj") if toolchain.is_msvc else None

    argv = toolchain.command(
        source=str(src_path),
        output=str(exe_path),
        flags=flags,
        opt_flag=opt_flag,
        intermediate=str(obj_path) if obj_path is not None else None,
    )

    logger.info("Compiling %s with %s", src_path.name, toolchain.compiler)
    logger.debug("Compiler argv: %s", argv)

    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd),
            env=child_environment(env, variables),
            capture_output=True,
        )
    except FileNotFoundError as e:
        logger.error("Compiler not found: %s", toolchain.compiler)
        return ExecutionResult(
            stage=Stage.COMPILE,
            status=ExitStatus(code=EXIT_NOT_FOUND),
            stderr=f"Compiler not found: {toolchain.compiler} ({e})".encode(),
            argv=argv,
        )
    except PermissionError as e:
        logger.error("Compiler not executable: %s", toolchain.compiler)
        return ExecutionResult(
            stage=Stage.COMPILE,
            status=ExitStatus(code=EXIT_NOT_EXECUTABLE),
            stderr=f"Compiler not executable: {toolchain.compiler} ({e})".encode(),
            argv=argv,
        )
    except ValueError as e:
        # subprocess rejects env keys with "=" and NUL bytes anywhere
        raise RunError(f"Cannot start {toolchain.compiler}: {e}") from e

    if proc.returncode != 0:
        logger.info("Compilation failed with exit code %d", proc.returncode)
        return ExecutionResult(
            stage=Stage.COMPILE,
            status=ExitStatus.from_returncode(proc.returncode),
            stdout=proc.stdout,
            stderr=proc.stderr,
            argv=argv,
        )

    if obj_path is not None:
        artifacts.register(obj_path)
    artifacts.register(exe_path)

    meta = describe_artifact(exe_path)
    logger.debug(
        "Artifact %s: %d bytes, sha256=%s, elf_type=%s",
        exe_path.name, meta.size_bytes, meta.sha256[:12], meta.elf_type,
    )

    return CompiledArtifact(
        path=exe_path,
        toolchain=toolchain,
        argv=argv,
        temp_files=list(artifacts.paths),
        meta=meta,
    )
