"""
Errors — the harness's own failure taxonomy.

Compiler diagnostics and failing programs are *results*, not errors;
only malformed input, I/O failures, and broken cleanup bookkeeping
raise.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class InlineCError(Exception):
    """Base class for every error raised by inline_c."""


class ReconstructionError(InlineCError, ValueError):
    """Malformed snippet input, detected before any process is spawned."""


class RunError(InlineCError, RuntimeError):
    """I/O failure during a run; the underlying error is in ``__cause__``."""


class CleanupError(InlineCError, RuntimeError):
    """A recorded temporary path could not be removed."""

    def __init__(self, message: str, path: Path, result: Optional[Any] = None):
        super().__init__(message)
        self.path = path
        self.result = result
