"""
Schema — Pydantic models for pipeline results and the CLI report.

  ExitStatus       numeric code, or the signal that ended the process.
  ExecutionResult  one finished child process (compiler or program).
  ArtifactMeta     identity of a freshly compiled executable.
  RunReport        inline_c_report.json written by the CLI.

Runtime contract fields (present in RunReport):
  package_name, package_version, schema_version.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from inline_c import PACKAGE_NAME, SCHEMA_VERSION, __version__


class Stage(str, Enum):
    """Which child process produced a result."""
    COMPILE = "COMPILE"
    EXECUTE = "EXECUTE"


# ── Exit status ──────────────────────────────────────────────────────────────

class ExitStatus(BaseModel):
    """
    Terminal state of a child process.

    Exactly one of ``code`` / ``signal`` is set on POSIX; Windows
    processes always have a code.
    """
    model_config = ConfigDict(frozen=True)

    code: Optional[int] = None
    signal: Optional[int] = None

    @classmethod
    def from_returncode(cls, returncode: int) -> ExitStatus:
        """``subprocess`` reports death-by-signal N as ``-N``."""
        if returncode < 0:
            return cls(code=None, signal=-returncode)
        return cls(code=returncode)

    @property
    def success(self) -> bool:
        return self.code == 0

    @property
    def interrupted(self) -> bool:
        """No exit code is available (terminated by a signal)."""
        return self.code is None

    def code_or(self, placeholder: int = 1) -> int:
        """The exit code, or *placeholder* when the process was interrupted."""
        return placeholder if self.code is None else self.code


# ── Execution result ─────────────────────────────────────────────────────────

class ExecutionResult(BaseModel):
    """Captured outcome of one child process; immutable."""
    model_config = ConfigDict(frozen=True)

    stage: Stage
    status: ExitStatus
    stdout: bytes = b""
    stderr: bytes = b""
    argv: List[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status.success


# ── Artifact metadata ────────────────────────────────────────────────────────

class ArtifactMeta(BaseModel):
    """Identity of a compiled executable. ELF fields are None for PE/Mach-O."""
    model_config = ConfigDict(frozen=True)

    path: str
    sha256: str
    size_bytes: int
    elf_type: Optional[str] = None      # ET_EXEC | ET_DYN
    machine: Optional[str] = None       # e.g. EM_X86_64


# ── CLI report ───────────────────────────────────────────────────────────────

class RunReport(BaseModel):
    """
    inline_c_report.json — one pipeline run, text streams decoded.
    """
    package_name: str = PACKAGE_NAME
    package_version: str = __version__
    schema_version: str = SCHEMA_VERSION
    source_path: str
    language: str
    toolchain: Optional[str] = None
    compiler: Optional[str] = None
    stage: Stage
    exit_code: Optional[int] = None
    signal: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    variables: Dict[str, str] = Field(default_factory=dict)
    argv: List[str] = Field(default_factory=list)
