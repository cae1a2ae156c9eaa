"""
Toolchain policy — which compiler to call and how to spell its arguments.

Two argument conventions exist:

  GNU   gcc / clang / cc:   <src> ... -o <exe>, linker args as -Wl,<arg>
  MSVC  cl.exe:             <src> ... -Fo<obj> -Fe<exe>, linker args after /link

The convention is chosen once per invocation by ``select_toolchain`` and
then carried around as a frozen ``Toolchain``; nothing else in the
package branches on the platform.
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)


class Language(str, Enum):
    """Snippet language"""
    C = "c"
    CXX = "c++"

    @property
    def suffix(self) -> str:
        """Source-file suffix the compiler driver recognises"""
        return ".c" if self is Language.C else ".cpp"

    @property
    def compiler_variable(self) -> str:
        """Variable naming the compiler for this language"""
        return "CC" if self is Language.C else "CXX"


class OptLevel(str, Enum):
    """Optimization levels"""
    O0 = "O0"
    O1 = "O1"
    O2 = "O2"
    O3 = "O3"

    def to_flag(self, convention: ToolchainConvention) -> str:
        """Convert to compiler flag"""
        if convention is ToolchainConvention.MSVC:
            # cl has no /O3
            return {"O0": "/Od", "O1": "/O1"}.get(self.value, "/O2")
        return f"-{self.value}"


class ToolchainConvention(str, Enum):
    """Output-argument convention of a compiler driver"""
    GNU = "gnu"
    MSVC = "msvc"


@dataclass(frozen=True)
class Toolchain:
    """A resolved compiler plus the convention used to drive it."""

    compiler: str
    convention: ToolchainConvention
    language: Language
    cxx_standard: str = "c++11"

    @property
    def is_msvc(self) -> bool:
        return self.convention is ToolchainConvention.MSVC

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.is_msvc or os.name == "nt" else ""

    def language_flags(self) -> List[str]:
        """The single extra flag C++ mode needs (nothing for C)."""
        if self.language is Language.C:
            return []
        if self.is_msvc:
            return ["/EHsc"]
        return [f"-std={self.cxx_standard}"]

    def wrap_linker_args(self, args: List[str]) -> List[str]:
        """Forward *args* to the linker through the compiler driver."""
        if not args:
            return []
        if self.is_msvc:
            # Everything after /link goes to link.exe, so this must come last
            return ["/link", *args]
        return [f"-Wl,{arg}" for arg in args]

    def output_args(self, output: str, intermediate: Optional[str] = None) -> List[str]:
        """Arguments naming the produced files."""
        if self.is_msvc:
            if intermediate is None:
                raise ValueError("MSVC-style builds need an intermediate object path")
            return [f"-Fo{intermediate}", f"-Fe{output}"]
        return ["-o", output]

    def command(
        self,
        source: str,
        output: str,
        flags: List[str],
        opt_flag: Optional[str] = None,
        intermediate: Optional[str] = None,
    ) -> List[str]:
        """
        Full compiler argv.

        The source file always comes first.  *flags* is the resolved flag
        set with linker arguments already wrapped, so on MSVC it may end
        with a ``/link`` section and the output arguments are placed
        before it.
        """
        head = [self.compiler, source, *self.language_flags()]
        if opt_flag:
            head.append(opt_flag)
        if self.is_msvc:
            return head + self.output_args(output, intermediate) + flags
        return head + flags + self.output_args(output)


# ── Selection ────────────────────────────────────────────────────────────────

def _is_msvc_driver(compiler: str) -> bool:
    name = os.path.basename(compiler).lower()
    return name in ("cl", "cl.exe")


def select_toolchain(
    language: Language,
    variables: Mapping[str, str],
    env: Mapping[str, str],
    *,
    default_cc: str = "cc",
    default_cxx: str = "c++",
    default_msvc: str = "cl",
    forced: Optional[ToolchainConvention] = None,
    cxx_standard: str = "c++11",
    platform: Optional[str] = None,
) -> Toolchain:
    """
    Pick the compiler and convention for one invocation.

    ``CC`` / ``CXX`` are looked up in the merged run variables first,
    then in *env*.  Without either, Windows hosts default to ``cl`` and
    everything else to ``cc`` / ``c++``.
    """
    if platform is None:
        platform = sys.platform
    windows = platform.startswith("win")

    var = language.compiler_variable
    compiler = variables.get(var) or env.get(var)

    if not compiler:
        if forced is ToolchainConvention.MSVC or (forced is None and windows):
            compiler = default_msvc
        else:
            compiler = default_cc if language is Language.C else default_cxx

    if forced is not None:
        convention = forced
    elif windows and _is_msvc_driver(compiler):
        convention = ToolchainConvention.MSVC
    else:
        convention = ToolchainConvention.GNU

    logger.debug("Selected %s toolchain: %s (%s)", convention.value, compiler, language.value)
    return Toolchain(
        compiler=compiler,
        convention=convention,
        language=language,
        cxx_standard=cxx_standard,
    )
