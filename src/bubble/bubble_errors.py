"""
Structured errors raised by the Bubble front-end.

Every error subclasses the builtin `SyntaxError`, so callers that only care about
"the source is invalid" can keep catching that. The subclasses tell lexical
faults apart from grammar faults and keep the data a diagnostic printer needs:
the offset, line and column of the fault and, for grammar faults, the
offending token and the token kinds that would have been accepted.

Hierarchy:
    FrontendError
        LexicalError
        BubbleSyntaxError
            UnexpectedTokenError
            UnexpectedEndOfInputError
            InvalidArraySizeError
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bubble.bubble_lexer import Token


class FrontendError(SyntaxError):
    """Base class for all front-end failures.

    Attributes:
        message (str): Human readable description, without location.
        position (int): Character offset of the fault in the source.
        line (int): 1-based line of the fault.
        column (int): 1-based column of the fault.
    """

    def __init__(self, message: str, position: int = 0, line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.position = position
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return self.message

    def location(self) -> str:
        return f"{self.line}:{self.column}"


class LexicalError(FrontendError):
    """The source text could not be split into tokens."""


class BubbleSyntaxError(FrontendError):
    """The token stream does not match the grammar.

    Attributes:
        token (Token | None): The offending token, None at end of input.
        expected (tuple[str, ...]): Token kinds accepted in the failing state.
    """

    def __init__(
        self,
        message: str,
        token: Token | None = None,
        expected: tuple[str, ...] = (),
        position: int = 0,
        line: int = 0,
        column: int = 0,
    ):
        if token is not None:
            position, line, column = token.start, token.line, token.col
        super().__init__(message, position, line, column)
        self.token = token
        self.expected = expected


class UnexpectedTokenError(BubbleSyntaxError):
    """A token that cannot be shifted or reduced in the current state."""


class UnexpectedEndOfInputError(BubbleSyntaxError):
    """Input ended while the grammar still required tokens."""


class InvalidArraySizeError(BubbleSyntaxError):
    """An array type size literal outside the unsigned 32-bit range."""


__all__ = [
    "BubbleSyntaxError",
    "FrontendError",
    "InvalidArraySizeError",
    "LexicalError",
    "UnexpectedEndOfInputError",
    "UnexpectedTokenError",
]
