"""Lexical tokens and source locations."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum, auto


class TokKind(Enum):
    """Kinds of tokens produced by the lexer."""

    ERROR = auto()
    EOL = auto()

    # Expression separator
    EXPR_SEP = auto()

    # Numeric tokens
    INT_BIN = auto()
    INT_OCT = auto()
    INT_DEC = auto()
    INT_HEX = auto()
    FLOAT = auto()

    # String literal
    STRING = auto()

    # Operators
    DOT = auto()
    EXCLAMATION = auto()
    QUESTION = auto()
    PLUS = auto()
    MINUS = auto()
    ASTERISK = auto()
    SLASH = auto()
    PERCENT = auto()
    ASSIGN = auto()
    TILDE = auto()
    AMP = auto()
    HAT = auto()
    PIPE = auto()
    POW = auto()
    ROOT = auto()
    AT = auto()

    EQ = auto()
    NOT_EQ = auto()

    LESS = auto()
    LESS_EQ = auto()
    GREATER = auto()
    GREATER_EQ = auto()

    LOG_AND = auto()
    LOG_OR = auto()

    ARROW = auto()

    # Punctuation
    PAREN_OPEN = auto()
    PAREN_CLOSE = auto()
    COMMA = auto()
    SEMICOLON = auto()
    CURLY_OPEN = auto()
    CURLY_CLOSE = auto()
    BRACKET_OPEN = auto()
    BRACKET_CLOSE = auto()

    # Identifiers
    IDENTIFIER = auto()
    COMMAND = auto()

    # Keywords
    KW_RESULT = auto()
    KW_FUNCTION = auto()
    KW_COMPLEX = auto()
    KW_FRACTION = auto()
    KW_INT = auto()
    KW_FLOAT = auto()
    KW_BOOL = auto()
    KW_ARRAY = auto()
    KW_UNDEF = auto()
    KW_RET = auto()
    KW_TRUE = auto()
    KW_FALSE = auto()
    KW_I = auto()
    KW_E = auto()
    KW_PI = auto()
    KW_ENTRY = auto()
    KW_IMPORT = auto()
    KW_AS = auto()


_KEYWORDS = frozenset(
    {
        TokKind.KW_RESULT,
        TokKind.KW_FUNCTION,
        TokKind.KW_COMPLEX,
        TokKind.KW_FRACTION,
        TokKind.KW_INT,
        TokKind.KW_FLOAT,
        TokKind.KW_BOOL,
        TokKind.KW_ARRAY,
        TokKind.KW_UNDEF,
        TokKind.KW_RET,
        TokKind.KW_TRUE,
        TokKind.KW_FALSE,
        TokKind.KW_I,
        TokKind.KW_E,
        TokKind.KW_PI,
        TokKind.KW_ENTRY,
        TokKind.KW_IMPORT,
        TokKind.KW_AS,
    }
)

_LITERALS = frozenset(
    {
        TokKind.INT_BIN,
        TokKind.INT_OCT,
        TokKind.INT_DEC,
        TokKind.INT_HEX,
        TokKind.FLOAT,
        TokKind.KW_TRUE,
        TokKind.KW_FALSE,
        TokKind.KW_I,
        TokKind.KW_PI,
        TokKind.KW_E,
        TokKind.KW_UNDEF,
    }
)


@dataclass
class Location:
    """A position in a source file; the default instance is a dummy location."""

    line: int = 0
    column: int = 0
    file: str | None = None

    def incr_column_by(self, delta: int) -> Location:
        """Move the column forward by ``delta`` and return self."""
        self.column += delta
        return self


@dataclass(eq=False)
class Token:
    """A lexeme with its kind and location.

    Two tokens are equal when their kinds and values match; the location
    does not take part in the comparison.
    """

    value: str
    kind: TokKind
    at: Location = field(default_factory=Location)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.kind, self.value))

    def get_after(self) -> Token:
        """Return an error token positioned right after this one."""
        location = dataclasses.replace(self.at)
        location.incr_column_by(len(self.value))
        return Token(self.value, TokKind.ERROR, location)

    def is_kind(self, kind: TokKind) -> bool:
        return self.kind == kind

    def is_any(self, *args: TokKind) -> bool:
        return self.kind in args

    def is_eol(self) -> bool:
        return self.kind == TokKind.EOL

    def is_keyword(self) -> bool:
        return self.kind in _KEYWORDS

    def is_literal(self) -> bool:
        return self.kind in _LITERALS

    def is_identifier(self) -> bool:
        return self.kind == TokKind.IDENTIFIER