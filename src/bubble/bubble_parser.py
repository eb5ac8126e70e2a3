"""
Bubble Language Parser

Turns Bubble source into the immutable AST defined in `bubble_ast`.

The grammar is declared below and compiled once into a LALR(1) automaton by
lark. Tokens come from `bubble_lexer.Lexer`; a small bridge hands them to lark
with their kinds and positions, so the automaton is driven by one token of
lookahead at a time and never backtracks. Every ambiguity of the language
(operator precedence, associativity, the trailing naked expression of a block)
is settled by the shape of the rules. The automaton is built in strict mode, so
a shift/reduce or reduce/reduce conflict fails at import time.

AST nodes are built by `AstBuilder` callbacks as each rule is reduced; no parse
tree is materialized. All tokens, punctuation included, reach the callbacks so
that node spans cover the braces, parentheses and semicolons of their rule.

Precedence, loosest first:
    assignment (non-associative)  a = b
    addrof / deref (prefix)       addrof a or b  ==  addrof (a or b)
    array initializer             [1, 2, 3]
    array access                  a[i]
    or, and, == !=, < > <= >=, + -, * / %  (left associative)
    - not (prefix)
    ( ), calls, literals

Entry Points
------------
- `parse_program(source)`: one or more top-level declarations.
- `parse_block(source)`: one or more statements, without surrounding braces.

Raises
------
LexicalError
    The source cannot be tokenized.
BubbleSyntaxError
    The tokens do not form a program (or block). The first error aborts the
    parse and no partial tree is returned.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterator
from typing import Any

from lark import Lark, Token as LarkToken, Transformer
from lark.exceptions import UnexpectedToken
from lark.lexer import Lexer as LarkLexer

from bubble.bubble_ast import (
    AddrOf,
    ArrayAccess,
    ArrayInitializer,
    ArrayType,
    Assignment,
    BinaryOperation,
    BreakStatement,
    Call,
    ContinueStatement,
    Deref,
    ExpressionStatement,
    ForStatement,
    FunctionStatement,
    GlobalStatement,
    Group,
    IfStatement,
    LetStatement,
    Literal,
    LiteralKind,
    NamedType,
    Operator,
    Parameter,
    PointerType,
    Primitive,
    PrimitiveType,
    ReturnStatement,
    Span,
    Statements,
    StructStatement,
    WhileStatement,
)
from bubble.bubble_constants import ALL_TOKENS, ARRAY_SIZE_MAX
from bubble.bubble_errors import (
    InvalidArraySizeError,
    UnexpectedEndOfInputError,
    UnexpectedTokenError,
)
from bubble.bubble_lexer import CharacterStream, Lexer, Token

logger = logging.getLogger(__name__)

GRAMMAR = r"""
program: _global_statement+

_global_statement: function_statement
                 | extern_function
                 | struct_statement
                 | let_statement

function_statement: FUNCTION IDENT LPAREN parameters RPAREN COLON type block
                  | FUNCTION IDENT LPAREN parameters RPAREN block
extern_function: EXTERN FUNCTION IDENT LPAREN parameters RPAREN COLON type SEMICOLON
struct_statement: STRUCT IDENT LBRACE parameters RBRACE

parameters: [parameter (COMMA parameter)* COMMA?]
parameter: IDENT COLON type

?type: primitive_type
     | pointer_type
     | array_type
     | named_type
primitive_type: U8 | U16 | U32 | U64 | I8 | I16 | I32 | I64 | BOOL | STRING_TY | VOID
pointer_type: PTR type
array_type: LBRACKET INT SEMICOLON type RBRACKET
named_type: IDENT

block: LBRACE statements RBRACE

statements: _statement* naked_expression
          | _statement+
naked_expression: expression

_statement: if_statement
          | while_statement
          | for_statement
          | return_statement
          | break_statement
          | continue_statement
          | let_statement
          | expression_statement

if_statement: IF expression block (ELSE block)?
while_statement: WHILE expression block
for_statement: FOR for_init SEMICOLON expression SEMICOLON expression block
for_init: IDENT (COLON type)? EQUAL expression
return_statement: RETURN expression? SEMICOLON
break_statement: BREAK SEMICOLON
continue_statement: CONTINUE SEMICOLON
let_statement: LET IDENT (COLON type)? EQUAL expression SEMICOLON
expression_statement: expression SEMICOLON

?expression: addr_level EQUAL addr_level -> assignment
           | addr_level

?addr_level: ADDROF addr_level -> addr_of
           | DEREF addr_level -> deref
           | array_level

?array_level: LBRACKET expression_list RBRACKET -> array_initializer
            | access_level

?access_level: logic_or LBRACKET expression RBRACKET -> array_access
             | logic_or

?logic_or: logic_or OR logic_and -> binary_operation
         | logic_and

?logic_and: logic_and AND equality -> binary_operation
          | equality

?equality: equality (EQUAL_EQUAL | BANG_EQUAL) compare -> binary_operation
         | compare

?compare: compare (LESS | MORE | LESS_EQUAL | MORE_EQUAL) term -> binary_operation
        | term

?term: term (PLUS | MINUS) factor -> binary_operation
     | factor

?factor: factor (STAR | SLASH | PERCENT) unary -> binary_operation
       | unary

?unary: (MINUS | NOT) unary -> unary_operation
      | primary

?primary: LPAREN expression RPAREN -> group
        | IDENT LPAREN expression_list RPAREN -> call
        | literal

expression_list: [expression (COMMA expression)* COMMA?]

literal: TRUE -> true_literal
       | FALSE -> false_literal
       | NULL -> null_literal
       | INT -> integer_literal
       | FLOAT -> float_literal
       | IDENT -> identifier_literal
       | STRING -> string_literal
"""

OPERATORS: dict[str, Operator] = {
    "OR": Operator.OR,
    "AND": Operator.AND,
    "NOT": Operator.NOT,
    "EQUAL_EQUAL": Operator.EQUAL,
    "BANG_EQUAL": Operator.DIFFERENT,
    "LESS": Operator.LESS,
    "MORE": Operator.MORE,
    "LESS_EQUAL": Operator.LESS_EQUAL,
    "MORE_EQUAL": Operator.MORE_EQUAL,
    "PLUS": Operator.PLUS,
    "MINUS": Operator.MINUS,
    "STAR": Operator.MULTIPLY,
    "SLASH": Operator.DIVIDE,
    "PERCENT": Operator.MODULO,
}

PRIMITIVES: dict[str, Primitive] = {
    "U8": Primitive.U8,
    "U16": Primitive.U16,
    "U32": Primitive.U32,
    "U64": Primitive.U64,
    "I8": Primitive.I8,
    "I16": Primitive.I16,
    "I32": Primitive.I32,
    "I64": Primitive.I64,
    "BOOL": Primitive.BOOL,
    "STRING_TY": Primitive.STRING,
    "VOID": Primitive.VOID,
}


class TokenBridge(LarkLexer):
    """Feeds `bubble_lexer` tokens to the lark automaton.

    lark instantiates this class once and calls `lex` with the text given to
    `Lark.parse`. Each Bubble token becomes a lark token of the same kind, with
    its offsets and line/column information.
    """

    def __init__(self, lexer_conf: Any) -> None:
        pass

    def lex(self, data: str) -> Iterator[LarkToken]:  # type: ignore[override]
        for tok in Lexer(CharacterStream(data)):
            yield LarkToken(
                tok.type,
                tok.value,
                tok.start,
                tok.line,
                tok.col,
                tok.end_line,
                tok.end_col,
                tok.end,
            )


def _start(item: Any) -> int:
    if isinstance(item, LarkToken):
        return int(item.start_pos or 0)
    return int(item.span.start)


def _end(item: Any) -> int:
    if isinstance(item, LarkToken):
        return int(item.end_pos or 0)
    return int(item.span.end)


def _span(children: list[Any]) -> Span:
    """Span from the first to the last child of a reduced rule."""
    return Span(_start(children[0]), _end(children[-1]))


def _let(rest: list[Any], initializer: Any, span: Span) -> LetStatement:
    # rest starts at the name: IDENT (COLON type)? EQUAL ...
    type_ = rest[2] if rest[1].type == "COLON" else None
    return LetStatement(str(rest[0].value), type_, initializer, span=span)


class AstBuilder(Transformer):
    """Builds AST nodes as the LALR automaton reduces each rule.

    Callbacks receive the rule's children: lark tokens for terminals and
    already built nodes for nonterminals.
    """

    # Declarations

    def program(self, children: list[Any]) -> tuple[GlobalStatement, ...]:
        return tuple(children)

    def function_statement(self, children: list[Any]) -> FunctionStatement:
        name, parameters, body = children[1], children[3], children[-1]
        if len(children) == 8:
            return_type = children[6]
        else:
            # implicit `void`, zero-width at the opening brace
            return_type = PrimitiveType(
                Primitive.VOID, span=Span(body.span.start, body.span.start)
            )
        return FunctionStatement(
            str(name.value), parameters, return_type, False, body, span=_span(children)
        )

    def extern_function(self, children: list[Any]) -> FunctionStatement:
        name, parameters, return_type = children[2], children[4], children[7]
        return FunctionStatement(
            str(name.value), parameters, return_type, True, None, span=_span(children)
        )

    def struct_statement(self, children: list[Any]) -> StructStatement:
        return StructStatement(str(children[1].value), children[3], span=_span(children))

    def parameters(self, children: list[Any]) -> tuple[Parameter, ...]:
        return tuple(c for c in children if isinstance(c, Parameter))

    def parameter(self, children: list[Any]) -> Parameter:
        name, _, type_ = children
        return Parameter(type_, str(name.value), span=_span(children))

    # Types

    def primitive_type(self, children: list[Any]) -> PrimitiveType:
        return PrimitiveType(PRIMITIVES[children[0].type], span=_span(children))

    def pointer_type(self, children: list[Any]) -> PointerType:
        return PointerType(children[1], span=_span(children))

    def array_type(self, children: list[Any]) -> ArrayType:
        size_token, element = children[1], children[3]
        size = size_token.value
        if not 0 <= size <= ARRAY_SIZE_MAX:
            raise InvalidArraySizeError(
                f"Array size {size} does not fit an unsigned 32-bit integer",
                token=_bubble_token(size_token),
            )
        return ArrayType(size, element, span=_span(children))

    def named_type(self, children: list[Any]) -> NamedType:
        return NamedType(str(children[0].value), span=_span(children))

    # Statements

    def block(self, children: list[Any]) -> Statements:
        return dataclasses.replace(children[1], span=_span(children))

    def statements(self, children: list[Any]) -> Statements:
        return Statements(tuple(children), span=_span(children))

    def naked_expression(self, children: list[Any]) -> ExpressionStatement:
        return ExpressionStatement(children[0], True, span=_span(children))

    def expression_statement(self, children: list[Any]) -> ExpressionStatement:
        return ExpressionStatement(children[0], False, span=_span(children))

    def if_statement(self, children: list[Any]) -> IfStatement:
        else_branch = children[4] if len(children) == 5 else None
        return IfStatement(children[1], children[2], else_branch, span=_span(children))

    def while_statement(self, children: list[Any]) -> WhileStatement:
        _, condition, body = children
        return WhileStatement(condition, body, span=_span(children))

    def for_statement(self, children: list[Any]) -> ForStatement:
        init, condition, step, body = children[1], children[3], children[5], children[6]
        return ForStatement(init, condition, step, body, span=_span(children))

    def for_init(self, children: list[Any]) -> LetStatement:
        return _let(children, children[-1], _span(children))

    def let_statement(self, children: list[Any]) -> LetStatement:
        return _let(children[1:], children[-2], _span(children))

    def return_statement(self, children: list[Any]) -> ReturnStatement:
        value = children[1] if len(children) == 3 else None
        return ReturnStatement(value, span=_span(children))

    def break_statement(self, children: list[Any]) -> BreakStatement:
        return BreakStatement(span=_span(children))

    def continue_statement(self, children: list[Any]) -> ContinueStatement:
        return ContinueStatement(span=_span(children))

    # Expressions

    def assignment(self, children: list[Any]) -> Assignment:
        target, _, value = children
        return Assignment(target, value, span=_span(children))

    def addr_of(self, children: list[Any]) -> AddrOf:
        return AddrOf(children[1], span=_span(children))

    def deref(self, children: list[Any]) -> Deref:
        return Deref(children[1], span=_span(children))

    def array_initializer(self, children: list[Any]) -> ArrayInitializer:
        return ArrayInitializer(children[1], span=_span(children))

    def array_access(self, children: list[Any]) -> Literal:
        target, index = children[0], children[2]
        span = _span(children)
        return Literal(LiteralKind.ARRAY_ACCESS, ArrayAccess(target, index, span=span), span=span)

    def binary_operation(self, children: list[Any]) -> BinaryOperation:
        left, op, right = children
        return BinaryOperation(left, OPERATORS[op.type], right, span=_span(children))

    def unary_operation(self, children: list[Any]) -> BinaryOperation:
        op, operand = children
        return BinaryOperation(operand, OPERATORS[op.type], None, span=_span(children))

    def group(self, children: list[Any]) -> Group:
        return Group(children[1], span=_span(children))

    def call(self, children: list[Any]) -> Call:
        return Call(str(children[0].value), children[2], span=_span(children))

    def expression_list(self, children: list[Any]) -> tuple[Any, ...]:
        return tuple(c for c in children if not isinstance(c, LarkToken))

    def true_literal(self, children: list[Any]) -> Literal:
        return Literal(LiteralKind.TRUE, span=_span(children))

    def false_literal(self, children: list[Any]) -> Literal:
        return Literal(LiteralKind.FALSE, span=_span(children))

    def null_literal(self, children: list[Any]) -> Literal:
        return Literal(LiteralKind.NULL, span=_span(children))

    def integer_literal(self, children: list[Any]) -> Literal:
        return Literal(LiteralKind.INTEGER, children[0].value, span=_span(children))

    def float_literal(self, children: list[Any]) -> Literal:
        return Literal(LiteralKind.FLOAT, children[0].value, span=_span(children))

    def identifier_literal(self, children: list[Any]) -> Literal:
        return Literal(LiteralKind.IDENTIFIER, str(children[0].value), span=_span(children))

    def string_literal(self, children: list[Any]) -> Literal:
        return Literal(LiteralKind.STRING, str(children[0].value), span=_span(children))


def _bubble_token(tok: LarkToken) -> Token:
    return Token(
        tok.type,
        tok.value,
        tok.line or 0,
        tok.column or 0,
        tok.start_pos or 0,
        tok.end_pos or 0,
        tok.end_line,
        tok.end_column,
    )


def build_lark(grammar: str = GRAMMAR) -> Lark:
    """Compile `grammar` into a LALR(1) parser that builds AST nodes while parsing.

    Raises lark's `GrammarError` if the grammar has a shift/reduce or
    reduce/reduce conflict.
    """
    declared = " ".join(sorted(ALL_TOKENS))
    logger.debug("building LALR tables for %d terminals", len(ALL_TOKENS))
    return Lark(
        grammar + f"\n%declare {declared}\n",
        parser="lalr",
        lexer=TokenBridge,
        start=["program", "statements"],
        maybe_placeholders=False,
        strict=True,
        transformer=AstBuilder(),
    )


_LARK = build_lark()


class Parser:
    """
    Bubble parser.

    Wraps the shared LALR automaton. A Parser holds no per-parse state beyond
    the source it was given, so independent instances can run concurrently.

    Attributes
    ----------
    source : str
        The Bubble source to parse.

    Methods
    -------
    parse() -> tuple[GlobalStatement, ...]
        Parse the source as a whole program.
    parse_block() -> Statements
        Parse the source as a sequence of statements.
    """

    def __init__(self, source: str) -> None:
        self.source = source

    def parse(self) -> tuple[GlobalStatement, ...]:
        program: tuple[GlobalStatement, ...] = self._run("program")
        logger.debug("parsed %d top-level declarations", len(program))
        return program

    def parse_block(self) -> Statements:
        block: Statements = self._run("statements")
        logger.debug("parsed %d statements", len(block))
        return block

    def _run(self, start: str) -> Any:
        logger.debug("parsing %d characters as %s", len(self.source), start)
        try:
            return _LARK.parse(self.source, start=start)
        except UnexpectedToken as exc:
            raise self._syntax_error(exc) from None

    def _syntax_error(self, exc: UnexpectedToken) -> UnexpectedTokenError | UnexpectedEndOfInputError:
        expected = tuple(sorted(t for t in exc.expected if t != "$END"))
        if exc.token.type == "$END":
            end = len(self.source)
            return UnexpectedEndOfInputError(
                "Unexpected end of input",
                expected=expected,
                position=end,
                line=self.source.count("\n") + 1,
                column=end - self.source.rfind("\n"),
            )
        token = _bubble_token(exc.token)
        return UnexpectedTokenError(
            f"Unexpected token {token.type} ({token.value!r}) at line {token.line}, col {token.col}",
            token=token,
            expected=expected,
        )


def parse_program(source: str) -> tuple[GlobalStatement, ...]:
    """Parse `source` as a program: one or more top-level declarations."""
    return Parser(source).parse()


def parse_block(source: str) -> Statements:
    """Parse `source` as a block body: one or more statements, no braces."""
    return Parser(source).parse_block()


__all__ = [
    "AstBuilder",
    "GRAMMAR",
    "Parser",
    "TokenBridge",
    "build_lark",
    "parse_block",
    "parse_program",
]
