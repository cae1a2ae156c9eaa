"""
Cleanup — scoped ownership of one invocation's temporary files.

Usage::

    with TempArtifacts(prefix="inline_c_") as artifacts:
        src = artifacts.path("snippet.c")
        src.write_text(code)
        artifacts.register(src)
        ...

Every invocation gets its own private directory from ``mkdtemp``, so
concurrent runs never share a file name.  On exit each registered
path is deleted exactly once; a registered path that has vanished
means the bookkeeping is wrong and raises ``CleanupError``.  The
directory itself, with any compiler by-products, goes last.
"""
from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from inline_c.errors import CleanupError

logger = logging.getLogger(__name__)


class TempArtifacts:
    """Temporary files owned by a single pipeline invocation."""

    def __init__(self, prefix: str = "inline_c_", temp_dir: Optional[str] = None):
        self.prefix = prefix
        self.temp_dir = temp_dir
        self.root: Optional[Path] = None
        self.paths: List[Path] = []
        self._released = False

    def __enter__(self) -> TempArtifacts:
        self.root = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.temp_dir))
        logger.debug("Created temp dir %s", self.root)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            self.release()
            return False

        # The body already failed; its exception is the one that matters.
        try:
            self.release()
        except CleanupError as cleanup_exc:
            logger.warning("Cleanup failed after %s: %s", exc_type.__name__, cleanup_exc)
        return False

    def path(self, name: str) -> Path:
        """A path inside the private directory (not registered)."""
        if self.root is None:
            raise RuntimeError("TempArtifacts used outside its context")
        return self.root / name

    def register(self, path: Path) -> Path:
        """Record *path* for deletion on release."""
        if path not in self.paths:
            self.paths.append(path)
        return path

    def release(self) -> None:
        """Delete every registered path, then the private directory."""
        if self._released:
            return
        self._released = True

        failure: Optional[CleanupError] = None
        for path in self.paths:
            try:
                path.unlink()
            except FileNotFoundError as e:
                failure = failure or CleanupError(
                    f"Temporary file vanished before cleanup: {path}", path=path,
                )
                failure.__cause__ = failure.__cause__ or e
            except OSError as e:
                failure = failure or CleanupError(f"Failed to remove {path}: {e}", path=path)
                failure.__cause__ = failure.__cause__ or e

        if self.root is not None:
            shutil.rmtree(self.root, ignore_errors=True)
            logger.debug("Removed temp dir %s (%d tracked files)", self.root, len(self.paths))

        if failure is not None:
            raise failure
