"""
Lexical analyzer for the Bubble programming language.

This module provides the token stream consumed by the parser:

Classes:
    CharacterStream: Stream abstraction for reading characters with offset, line
        and column tracking.
    Token: A single token with kind, payload and source position.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace and `//` line comments
    - Longest-match recognition of operators and punctuation
    - Recognizes:
        * Identifiers and keywords
        * Integers (signed 64-bit range) and floats (`1.5`, `.5`)
        * Double-quoted strings with `\\n \\t \\r \\0 \\\\ \\"` escapes

Raises:
    LexicalError: On an invalid character, an unterminated string, an unknown
        escape, a malformed float or an integer that does not fit 64 bits.

Example:
    >>> lexer = Lexer(CharacterStream("let x = 42;"))
    >>> lexer.next_token()
    Token(LET, let)
"""

import math
from collections.abc import Iterator
from typing import Any

from bubble.bubble_constants import I64_MAX, keyword_hashmap, symbol_hashmap, token_hashmap
from bubble.bubble_errors import LexicalError

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"'}


def is_digit(ch: str) -> bool:
    return ch != "" and ch in "0123456789"


class CharacterStream:
    """
    Reads characters from a source string while tracking the position.

    Attributes:
        source (str): The input source string.
        position (int): Current offset in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            LexicalError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise LexicalError(
                "unexpected end of input", self.position, self.line, self.column
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token.

    Attributes:
        type (str): The token kind (e.g. 'IDENT', 'INT', 'LBRACE', 'EOF').
        value (str | int | float): The lexeme for fixed tokens, the payload otherwise.
        line (int): 1-based line where the token starts.
        col (int): 1-based column where the token starts.
        start (int): Offset of the first character.
        end (int): Offset one past the last character.
        end_line (int): Line of the character following the token.
        end_col (int): Column of the character following the token.
    """

    def __init__(
        self,
        type_: str,
        value: Any,
        line: int = 0,
        col: int = 0,
        start: int = 0,
        end: int = 0,
        end_line: int | None = None,
        end_col: int | None = None,
    ):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col
        self.start = start
        self.end = end
        self.end_line = line if end_line is None else end_line
        self.end_col = col if end_col is None else end_col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.start == other.start
            and self.end == other.end
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.start, self.end))


class Lexer:
    """Lexical analyzer for Bubble.

    Pulls characters from a CharacterStream and produces tokens one at a time
    through `next_token()`, or all remaining tokens by iteration.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            if tok.type == "EOF":
                return
            yield tok

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def error(self, message: str, start: int, line: int, col: int) -> LexicalError:
        return LexicalError(f"{message} at line {line}, col {col}", start, line, col)

    def skip_whitespace(self) -> None:
        """Skips whitespace and `//` comments."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n\v":
                self.advance()
            elif self.peek() == "/" and self.peek(1) == "/":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def make_token(self, type_: str, value: Any, start: int, line: int, col: int) -> Token:
        return Token(
            type_,
            value,
            line,
            col,
            start,
            self.stream.position,
            self.stream.line,
            self.stream.column,
        )

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator or punctuation lexeme.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        start, line, col = self.stream.position, self.stream.line, self.stream.column
        max_token = None
        candidate = ""

        for i in range(2):
            ch = self.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in symbol_hashmap:
                max_token = candidate

        if max_token:
            for _ in max_token:
                self.advance()
            return self.make_token(token_hashmap[max_token], max_token, start, line, col)

        return None

    def read_number(self, start: int, line: int, col: int) -> Token:
        digits = ""
        while is_digit(self.peek()):
            digits += self.advance()

        if self.peek() != ".":
            value = int(digits)
            if value > I64_MAX:
                raise self.error("Integer literal out of range", start, line, col)
            return self.make_token("INT", value, start, line, col)

        digits += self.advance()
        if not is_digit(self.peek()):
            raise self.error("Invalid float format", start, line, col)
        while is_digit(self.peek()):
            digits += self.advance()
        if self.peek() == ".":
            raise self.error("Invalid float format", start, line, col)
        number = float(digits)
        if math.isinf(number):
            raise self.error("Float literal out of range", start, line, col)
        return self.make_token("FLOAT", number, start, line, col)

    def read_string(self, start: int, line: int, col: int) -> Token:
        self.advance()  # opening quote
        val = ""
        while not self.stream.end_of_file():
            ch = self.advance()
            if ch == '"':
                return self.make_token("STRING", val, start, line, col)
            if ch == "\\":
                if self.stream.end_of_file():
                    break
                esc = self.advance()
                if esc not in ESCAPES:
                    raise self.error(f"Unknown escape sequence '\\{esc}'", start, line, col)
                val += ESCAPES[esc]
            else:
                val += ch
        raise self.error("Unterminated string", start, line, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token, or an EOF token once the source is exhausted.

        Raises:
            LexicalError: If the characters at the current position form no token.
        """
        self.skip_whitespace()

        start, line, col = self.stream.position, self.stream.line, self.stream.column
        if self.stream.end_of_file():
            return Token("EOF", "EOF", line, col, start, start)

        ch = self.peek()

        # 1. Identifier or keyword
        if ch.isascii() and ch.isalpha():
            ident = ""
            while self.peek() != "" and (
                (self.peek().isascii() and self.peek().isalnum()) or self.peek() == "_"
            ):
                ident += self.advance()
            if ident in keyword_hashmap:
                return self.make_token(keyword_hashmap[ident], ident, start, line, col)
            return self.make_token("IDENT", ident, start, line, col)

        # 2. Integer or float
        if is_digit(ch) or (ch == "." and is_digit(self.peek(1))):
            return self.read_number(start, line, col)

        # 3. String
        if ch == '"':
            return self.read_string(start, line, col)

        # 4. Operator or punctuation
        token = self.match_operator()
        if token:
            return token

        raise self.error(f"Invalid character {ch!r}", start, line, col)


def tokenize(source: str) -> list[Token]:
    """Returns every token of `source`, without the trailing EOF marker."""
    return list(Lexer(CharacterStream(source)))


__all__ = ["CharacterStream", "Lexer", "Token", "token_hashmap", "tokenize"]
