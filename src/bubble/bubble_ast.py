"""
Defines the abstract syntax tree (AST) of the Bubble programming language.

Every node is an immutable dataclass deriving from `Node`. Nodes carry a `Span`
(character offsets of the tokens they were built from) as a keyword-only field
that does not take part in equality, so two trees parsed from differently
formatted sources compare equal when their structure and payloads match.
`to_dict()` serializes a node including its spans.

Node families:
    Types:        PrimitiveType, PointerType, ArrayType, NamedType
    Expressions:  Assignment, AddrOf, Deref, ArrayInitializer, BinaryOperation,
                  Group, Call, Literal (ArrayAccess is a literal payload)
    Statements:   ExpressionStatement, IfStatement, WhileStatement, ForStatement,
                  ReturnStatement, BreakStatement, ContinueStatement, LetStatement
    Globals:      FunctionStatement, StructStatement, LetStatement

Example:
    >>> BinaryOperation(Literal(LiteralKind.INTEGER, 1), Operator.PLUS, Literal(LiteralKind.INTEGER, 2))
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, TypedDict, Union


@dataclass(frozen=True)
class Span:
    """Half-open range `[start, end)` of character offsets in the source."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"span start {self.start} is after its end {self.end}")

    def contains(self, other: Span) -> bool:
        return self.start <= other.start and other.end <= self.end


NO_SPAN = Span(0, 0)


class ASTDict(TypedDict, total=False):
    """Serialized form of a node: its kind, its span and one key per field."""

    kind: str
    span: list[int]


class Primitive(Enum):
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    BOOL = "bool"
    STRING = "string"
    VOID = "void"


class Operator(Enum):
    AND = "and"
    OR = "or"
    NOT = "not"
    EQUAL = "=="
    DIFFERENT = "!="
    LESS = "<"
    LESS_EQUAL = "<="
    MORE = ">"
    MORE_EQUAL = ">="
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"


class LiteralKind(Enum):
    TRUE = "true"
    FALSE = "false"
    NULL = "null"
    INTEGER = "integer"
    FLOAT = "float"
    IDENTIFIER = "identifier"
    STRING = "string"
    ARRAY_ACCESS = "array_access"


@dataclass(frozen=True)
class Node:
    """Base class of every AST node."""

    kind: ClassVar[str] = "node"
    span: Span = field(default=NO_SPAN, compare=False, repr=False, kw_only=True)

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {"kind": self.kind, "span": [self.span.start, self.span.end]}
        for f in dataclasses.fields(self):
            if f.name != "span":
                data[f.name] = _serialize(getattr(self, f.name))
        return data  # type: ignore[return-value]


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


# Types


@dataclass(frozen=True)
class PrimitiveType(Node):
    kind: ClassVar[str] = "primitive_type"
    primitive: Primitive


@dataclass(frozen=True)
class PointerType(Node):
    kind: ClassVar[str] = "pointer_type"
    pointee: Type


@dataclass(frozen=True)
class ArrayType(Node):
    """Fixed-size array type, `[size; element]`. The size is always a literal."""

    kind: ClassVar[str] = "array_type"
    size: int
    element: Type


@dataclass(frozen=True)
class NamedType(Node):
    """Reference to a user type (a struct) by name."""

    kind: ClassVar[str] = "named_type"
    name: str


Type = Union[PrimitiveType, PointerType, ArrayType, NamedType]


@dataclass(frozen=True)
class Parameter(Node):
    """A `name: Type` pair, used by function parameters and struct fields alike."""

    kind: ClassVar[str] = "parameter"
    type_: Type
    name: str


# Expressions


@dataclass(frozen=True)
class Assignment(Node):
    kind: ClassVar[str] = "assignment"
    target: Expression
    value: Expression


@dataclass(frozen=True)
class AddrOf(Node):
    kind: ClassVar[str] = "addr_of"
    operand: Expression


@dataclass(frozen=True)
class Deref(Node):
    kind: ClassVar[str] = "deref"
    operand: Expression


@dataclass(frozen=True)
class ArrayInitializer(Node):
    kind: ClassVar[str] = "array_initializer"
    elements: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class BinaryOperation(Node):
    """Binary operation, or a unary one (`-x`, `not x`) when `right` is None."""

    kind: ClassVar[str] = "binary_operation"
    left: Expression
    op: Operator
    right: Expression | None = None

    @property
    def is_unary(self) -> bool:
        return self.right is None


@dataclass(frozen=True)
class Group(Node):
    """A parenthesized expression."""

    kind: ClassVar[str] = "group"
    inner: Expression


@dataclass(frozen=True)
class Call(Node):
    kind: ClassVar[str] = "call"
    callee: str
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ArrayAccess(Node):
    kind: ClassVar[str] = "array_access"
    target: Expression
    index: Expression


@dataclass(frozen=True)
class Literal(Node):
    """
    A leaf value. `value` depends on `literal_kind`:

    - TRUE, FALSE, NULL: None
    - INTEGER: int, FLOAT: float
    - IDENTIFIER, STRING: str
    - ARRAY_ACCESS: ArrayAccess
    """

    kind: ClassVar[str] = "literal"
    literal_kind: LiteralKind
    value: int | float | str | ArrayAccess | None = None


Expression = Union[
    Assignment, AddrOf, Deref, ArrayInitializer, BinaryOperation, Group, Call, Literal
]


# Statements


@dataclass(frozen=True)
class LetStatement(Node):
    kind: ClassVar[str] = "let_statement"
    name: str
    type_: Type | None = None
    initializer: Expression | None = None


@dataclass(frozen=True)
class ExpressionStatement(Node):
    """An expression used as a statement. `naked` marks a block's trailing value."""

    kind: ClassVar[str] = "expression_statement"
    expression: Expression
    naked: bool = False


@dataclass(frozen=True)
class Statements(Node):
    """Ordered, non-empty statement sequence of a block."""

    kind: ClassVar[str] = "statements"
    statements: tuple[Statement, ...] = ()

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)

    def __getitem__(self, index: int) -> Statement:
        return self.statements[index]


@dataclass(frozen=True)
class IfStatement(Node):
    kind: ClassVar[str] = "if_statement"
    condition: Expression
    then_branch: Statements
    else_branch: Statements | None = None


@dataclass(frozen=True)
class WhileStatement(Node):
    kind: ClassVar[str] = "while_statement"
    condition: Expression
    body: Statements


@dataclass(frozen=True)
class ForStatement(Node):
    """`for` loop; `init` always declares a fresh loop variable."""

    kind: ClassVar[str] = "for_statement"
    init: LetStatement
    condition: Expression
    step: Expression
    body: Statements


@dataclass(frozen=True)
class ReturnStatement(Node):
    kind: ClassVar[str] = "return_statement"
    value: Expression | None = None


@dataclass(frozen=True)
class BreakStatement(Node):
    kind: ClassVar[str] = "break_statement"


@dataclass(frozen=True)
class ContinueStatement(Node):
    kind: ClassVar[str] = "continue_statement"


Statement = Union[
    ExpressionStatement,
    IfStatement,
    WhileStatement,
    ForStatement,
    ReturnStatement,
    BreakStatement,
    ContinueStatement,
    LetStatement,
]


# Global statements


@dataclass(frozen=True)
class FunctionStatement(Node):
    """
    A function definition or an extern prototype.

    Extern functions never have a body; every other function has one.
    A function declared without a return type returns `void`.
    """

    kind: ClassVar[str] = "function_statement"
    name: str
    parameters: tuple[Parameter, ...]
    return_type: Type
    is_extern: bool = False
    body: Statements | None = None

    def __post_init__(self) -> None:
        if self.is_extern and self.body is not None:
            raise ValueError(f"extern function '{self.name}' cannot have a body")
        if not self.is_extern and self.body is None:
            raise ValueError(f"function '{self.name}' requires a body")


@dataclass(frozen=True)
class StructStatement(Node):
    kind: ClassVar[str] = "struct_statement"
    name: str
    fields: tuple[Parameter, ...] = ()


GlobalStatement = Union[FunctionStatement, StructStatement, LetStatement]


def iter_children(node: Node) -> Iterator[Node]:
    """Yields the direct child nodes of `node` in field order."""
    for f in dataclasses.fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, tuple):
            yield from (v for v in value if isinstance(v, Node))


def walk(node: Node) -> Iterator[Node]:
    """Yields `node` and all of its descendants, depth first, pre-order."""
    yield node
    for child in iter_children(node):
        yield from walk(child)


__all__ = [
    "ASTDict",
    "AddrOf",
    "ArrayAccess",
    "ArrayInitializer",
    "ArrayType",
    "Assignment",
    "BinaryOperation",
    "BreakStatement",
    "Call",
    "ContinueStatement",
    "Deref",
    "Expression",
    "ExpressionStatement",
    "ForStatement",
    "FunctionStatement",
    "GlobalStatement",
    "Group",
    "IfStatement",
    "LetStatement",
    "Literal",
    "LiteralKind",
    "NO_SPAN",
    "NamedType",
    "Node",
    "Operator",
    "Parameter",
    "PointerType",
    "Primitive",
    "PrimitiveType",
    "ReturnStatement",
    "Span",
    "Statement",
    "Statements",
    "StructStatement",
    "Type",
    "WhileStatement",
    "iter_children",
    "walk",
]
