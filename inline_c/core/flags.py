"""
Flag resolver — classic Makefile variables to compiler arguments.

Each of CFLAGS, CPPFLAGS, CXXFLAGS and LDFLAGS is looked up in the run
variables, then in the caller's environment, and split on ASCII
whitespace.  The result is always ordered

    CFLAGS  CPPFLAGS  CXXFLAGS  <LDFLAGS wrapped for the linker>
"""
from __future__ import annotations

import logging
import re
from typing import List, Mapping

from inline_c.policy.toolchain import Toolchain

logger = logging.getLogger(__name__)

CFLAGS = "CFLAGS"
CPPFLAGS = "CPPFLAGS"
CXXFLAGS = "CXXFLAGS"
LDFLAGS = "LDFLAGS"

FLAG_VARIABLES = (CFLAGS, CPPFLAGS, CXXFLAGS, LDFLAGS)

_ASCII_WS_RE = re.compile(r"[ \t\n\r\f\v]+")


def split_flags(value: str) -> List[str]:
    """Split on ASCII whitespace only; no shell quoting."""
    return [part for part in _ASCII_WS_RE.split(value) if part]


def lookup_flags(
    name: str,
    variables: Mapping[str, str],
    env: Mapping[str, str],
) -> List[str]:
    """Resolve one flag variable: run variables, then *env*, then nothing."""
    value = variables.get(name)
    if value is None:
        value = env.get(name, "")
    return split_flags(value)


def resolve_flags(
    variables: Mapping[str, str],
    env: Mapping[str, str],
    toolchain: Toolchain,
) -> List[str]:
    """Build the ordered flag set for one compiler invocation."""
    flags: List[str] = []
    flags.extend(lookup_flags(CFLAGS, variables, env))
    flags.extend(lookup_flags(CPPFLAGS, variables, env))
    flags.extend(lookup_flags(CXXFLAGS, variables, env))
    flags.extend(toolchain.wrap_linker_args(lookup_flags(LDFLAGS, variables, env)))

    logger.debug("Resolved flags: %s", flags)
    return flags
