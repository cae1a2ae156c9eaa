"""
Reconstructor — turn a token sequence back into compiler-ready text.

There is no C grammar here, only a handful of layout rules:

  - ``;`` ends a statement and is followed by a newline.
  - ``#`` starts a directive on its own line.
  - ``#include`` accepts exactly ``<...>`` or a string literal.
  - ``#define`` keeps its parameter list and body on one line, which
    needs line information: tokens without spans are rejected.
  - Groups render as ``(...)``, ``{\\n...\\n}``, ``[...]`` or transparently.

Macro bodies that continue over several physical lines only survive
when the front end already joined them into one logical line (the
bundled lexer splices backslash-newlines).  A front end that drops the
continuation markers and reports physical lines loses everything after
the first one.  That is a limit of the input, not of this module.
"""
from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Sequence

from inline_c.core.tokens import (
    Delimiter,
    Group,
    Ident,
    Literal,
    Punct,
    Spacing,
    Token,
)
from inline_c.errors import ReconstructionError

logger = logging.getLogger(__name__)


class _Peekable:
    """Minimal one-token lookahead over a token sequence."""

    def __init__(self, tokens: Sequence[Token]):
        self._it: Iterator[Token] = iter(tokens)
        self._head: Optional[Token] = None
        self._has_head = False

    def peek(self) -> Optional[Token]:
        if not self._has_head:
            self._head = next(self._it, None)
            self._has_head = True
        return self._head

    def next(self) -> Optional[Token]:
        token = self.peek()
        self._has_head = False
        return token


# ── Public API ───────────────────────────────────────────────────────────────

def reconstruct(tokens: Sequence[Token]) -> str:
    """
    Re-linearise *tokens* into C/C++ source text.

    Raises ReconstructionError for a malformed ``#include`` or for a
    ``#define`` whose tokens carry no line information.
    """
    out: List[str] = []
    _emit(tokens, out)
    text = "".join(out)
    logger.debug("Reconstructed %d tokens into %d characters", len(tokens), len(text))
    return text


# ── Emission ─────────────────────────────────────────────────────────────────

def _emit(tokens: Sequence[Token], out: List[str]) -> None:
    stream = _Peekable(tokens)

    while True:
        token = stream.next()
        if token is None:
            break

        if isinstance(token, Punct):
            if token.char == "#":
                out.append("\n#")
                _emit_directive(token, stream, out)
            elif token.char == ";":
                out.append(";\n")
            else:
                out.append(token.char)
                if token.spacing is Spacing.ALONE:
                    out.append(" ")

        elif isinstance(token, Ident):
            out.append(token.name)
            out.append(" ")

        elif isinstance(token, Group):
            _emit_group(token, out)

        else:
            out.append(str(token))


def _emit_group(token: Group, out: List[str]) -> None:
    inner: List[str] = []
    _emit(token.tokens, inner)
    body = "".join(inner)

    if token.delimiter is Delimiter.PARENTHESIS:
        out.append(f"({body})")
    elif token.delimiter is Delimiter.BRACE:
        out.append(f"{{\n{body}\n}}")
    elif token.delimiter is Delimiter.BRACKET:
        out.append(f"[{body}]")
    else:
        out.append(body)


def _emit_directive(hash_token: Punct, stream: _Peekable, out: List[str]) -> None:
    """Called right after ``#`` was emitted."""
    head = stream.peek()

    if isinstance(head, Ident) and head.name == "include":
        stream.next()
        _emit_include(stream, out)
        return

    if isinstance(head, Ident) and head.name == "define":
        if head.span is None:
            raise ReconstructionError(
                "`#define` in C requires tokens that carry source line information."
            )
        stream.next()
        out.append("define")
        _emit_rest_of_line(stream, out, head)
        return

    # Any other directive: when positions are known, end it where the
    # source line ends; otherwise let the tokens flow as usual.
    if hash_token.span is None:
        return

    if head is None or (head.span is not None and head.span.line != hash_token.span.line):
        # null directive: a lone `#`
        out.append("\n")
    elif head.span is not None:
        stream.next()
        out.append(_verbatim(head))
        _emit_rest_of_line(stream, out, head)


def _emit_include(stream: _Peekable, out: List[str]) -> None:
    opening = stream.next()

    if isinstance(opening, Punct):
        if opening.char != "<":
            raise ReconstructionError(
                f"Invalid opening token after `#include`, received `{opening!r}`."
            )

        out.append("include <")
        while True:
            token = stream.next()
            if isinstance(token, Punct):
                if token.char == ">":
                    break
                out.append(token.char)
            elif isinstance(token, Ident):
                out.append(token.name)
            else:
                raise ReconstructionError(
                    f"Invalid token in `#include` value, with `{token!r}`."
                )
        out.append(">\n")

    elif isinstance(opening, Literal):
        out.append(f"include {opening.text}\n")

    elif opening is None:
        raise ReconstructionError('`#include` must be followed by `<` or `"`.')

    else:
        raise ReconstructionError(
            f"Invalid opening token after `#include`, received `{opening!r}`."
        )


def _emit_rest_of_line(stream: _Peekable, out: List[str], anchor: Token) -> None:
    """
    Copy every following token that starts on *anchor*'s line, keeping
    the source's gaps, then end the line.
    """
    line = anchor.span.line
    previous = anchor

    while True:
        token = stream.peek()
        if token is None or token.span is None or token.span.line != line:
            break
        stream.next()
        if not previous.span.touches(token.span):
            out.append(" ")
        out.append(_verbatim(token))
        previous = token

    out.append("\n")


def _verbatim(token: Token) -> str:
    """Render *token* keeping the spacing its spans record."""
    if not isinstance(token, Group):
        return str(token)

    opening, closing = token.delimiter.pair
    parts = [opening]
    previous: Optional[Token] = None
    for inner in token.tokens:
        if previous is not None and not _glued(previous, inner):
            parts.append(" ")
        parts.append(_verbatim(inner))
        previous = inner
    parts.append(closing)
    return "".join(parts)


def _glued(left: Token, right: Token) -> bool:
    if left.span is not None and right.span is not None:
        return left.span.touches(right.span)
    return isinstance(left, Punct) and left.spacing is Spacing.JOINT
