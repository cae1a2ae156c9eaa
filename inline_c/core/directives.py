"""
Directives — run-scoped environment variables embedded in a snippet.

Syntax, one whole line each::

    #inline_c_rs <name>: "<value>"

The value is taken as-is (no escape processing).  Directive lines,
with their line terminator, are removed before compilation.  A line
with anything after the closing quote is not a directive and is left
for the compiler to report.

Variables are layered: meta environment variables
(``<prefix><name>=<value>`` in the caller's environment) first, then
the in-source directives, so a directive always wins.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, Mapping, Tuple

from inline_c.errors import ReconstructionError

logger = logging.getLogger(__name__)

DIRECTIVE_KEYWORD = "inline_c_rs"

_DIRECTIVE_RE = re.compile(
    r'^[ \t]*#' + DIRECTIVE_KEYWORD + r'[ \t]+(?P<name>[^:\n]+):[ \t]*"(?P<value>[^"\n]*)"[ \t]*(?:\r?\n|\Z)',
    re.MULTILINE,
)


def _check_variable(name: str, value: str) -> None:
    """Directive variables become child environment entries."""
    if not name or "=" in name or "\0" in name:
        raise ReconstructionError(
            f"Invalid `#{DIRECTIVE_KEYWORD}` variable name {name!r}."
        )
    if "\0" in value:
        raise ReconstructionError(
            f"Invalid `#{DIRECTIVE_KEYWORD}` value for {name}: contains a NUL character."
        )


def extract_directives(program: str) -> Tuple[str, Dict[str, str]]:
    """
    Split *program* into (compilable source, directive variables).

    Duplicate names: the last directive wins.  Raises
    ReconstructionError for a name that cannot be an environment
    variable (empty, or containing ``=`` or NUL).
    """
    variables: Dict[str, str] = {}
    for mo in _DIRECTIVE_RE.finditer(program):
        name = mo.group("name").strip()
        _check_variable(name, mo.group("value"))
        variables[name] = mo.group("value")

    source = _DIRECTIVE_RE.sub("", program)
    if variables:
        logger.debug("Extracted directives: %s", sorted(variables))
    return source, variables


def meta_variables(env: Mapping[str, str], prefix: str) -> Dict[str, str]:
    """Variables named ``<prefix><name>``, keyed by ``<name>``."""
    return {
        name[len(prefix):]: value
        for name, value in env.items()
        if name.startswith(prefix) and len(name) > len(prefix)
    }


def merge_variables(
    program: str,
    env: Mapping[str, str],
    prefix: str,
) -> Tuple[str, Dict[str, str]]:
    """
    Seed from meta variables in *env*, then overlay in-source directives.

    Returns (compilable source, merged variables).
    """
    variables = meta_variables(env, prefix)
    source, directives = extract_directives(program)

    overridden = sorted(set(variables) & set(directives))
    if overridden:
        logger.debug("Directives override meta variables: %s", overridden)

    variables.update(directives)
    return source, variables
