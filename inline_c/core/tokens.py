"""
Tokens — the lexical units a host front end hands to the reconstructor.

A token is one of five frozen variants:

  Punct    a single punctuation character plus a spacing hint
  Ident    an identifier or keyword
  Literal  a string, character or numeric literal, kept verbatim
  Group    a delimited, nested token sequence
  Other    anything else, emitted verbatim

Every variant may carry a ``Span``.  Front ends that do not track
positions leave it as ``None``; the reconstructor then falls back to
line-blind emission.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple, Union


class Spacing(str, Enum):
    """Whether a punctuation character is glued to the next token."""
    ALONE = "ALONE"
    JOINT = "JOINT"


class Delimiter(str, Enum):
    PARENTHESIS = "PARENTHESIS"
    BRACE = "BRACE"
    BRACKET = "BRACKET"
    NONE = "NONE"

    @property
    def pair(self) -> Tuple[str, str]:
        return _DELIMITER_PAIRS[self]


_DELIMITER_PAIRS = {
    Delimiter.PARENTHESIS: ("(", ")"),
    Delimiter.BRACE: ("{", "}"),
    Delimiter.BRACKET: ("[", "]"),
    Delimiter.NONE: ("", ""),
}


@dataclass(frozen=True)
class Span:
    """Start and end position; lines are logical lines, ends are exclusive."""
    line: int
    column: int
    end_line: int
    end_column: int

    def touches(self, other: Span) -> bool:
        """True when *other* starts exactly where this span ends."""
        return self.end_line == other.line and self.end_column == other.column


@dataclass(frozen=True)
class Punct:
    char: str
    spacing: Spacing = Spacing.ALONE
    span: Optional[Span] = None

    def __str__(self) -> str:
        return self.char


@dataclass(frozen=True)
class Ident:
    name: str
    span: Optional[Span] = None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Literal:
    text: str
    span: Optional[Span] = None

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Other:
    text: str
    span: Optional[Span] = None

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Group:
    delimiter: Delimiter
    tokens: Tuple["Token", ...] = field(default_factory=tuple)
    span: Optional[Span] = None

    def __str__(self) -> str:
        opening, closing = self.delimiter.pair
        return opening + " ".join(str(t) for t in self.tokens) + closing


Token = Union[Punct, Ident, Literal, Group, Other]


def group(delimiter: Delimiter, tokens: Sequence[Token], span: Optional[Span] = None) -> Group:
    """Build a Group from any token sequence."""
    return Group(delimiter=delimiter, tokens=tuple(tokens), span=span)
