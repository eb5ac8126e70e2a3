import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from bubble.bubble_ast import (
    ArrayAccess,
    BinaryOperation,
    BreakStatement,
    ExpressionStatement,
    FunctionStatement,
    Group,
    Literal,
    LiteralKind,
    Operator,
    Parameter,
    Primitive,
    PrimitiveType,
    Span,
    Statements,
    iter_children,
    walk,
)


def int_lit(n: int, start: int = 0) -> Literal:
    return Literal(LiteralKind.INTEGER, n, span=Span(start, start + len(str(n))))


def ident(name: str) -> Literal:
    return Literal(LiteralKind.IDENTIFIER, name)


def test_span_rejects_inverted_range() -> None:
    with pytest.raises(ValueError):
        Span(3, 2)


def test_span_contains() -> None:
    assert Span(0, 10).contains(Span(2, 5))
    assert Span(0, 10).contains(Span(0, 10))
    assert not Span(2, 5).contains(Span(0, 10))


def test_equality_ignores_spans() -> None:
    assert int_lit(1, 0) == int_lit(1, 40)
    assert int_lit(1, 0).to_dict() != int_lit(1, 40).to_dict()


def test_nodes_are_immutable() -> None:
    node = int_lit(1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        node.value = 2  # type: ignore[misc]


def test_unary_operation_has_no_right_operand() -> None:
    neg = BinaryOperation(ident("x"), Operator.MINUS)
    assert neg.is_unary
    assert not BinaryOperation(ident("x"), Operator.PLUS, int_lit(1)).is_unary


def test_to_dict_serializes_enums_tuples_and_spans() -> None:
    node = FunctionStatement(
        "f",
        (Parameter(PrimitiveType(Primitive.I32), "a"),),
        PrimitiveType(Primitive.VOID),
        body=Statements((BreakStatement(span=Span(10, 16)),)),
        span=Span(0, 18),
    )
    data = node.to_dict()
    assert data["kind"] == "function_statement"
    assert data["span"] == [0, 18]
    assert data["parameters"][0]["type_"]["primitive"] == "i32"  # type: ignore[typeddict-item]
    assert data["body"]["statements"][0] == {"kind": "break_statement", "span": [10, 16]}  # type: ignore[typeddict-item]
    assert data["is_extern"] is False  # type: ignore[typeddict-item]


def test_array_access_literal_payload() -> None:
    access = Literal(LiteralKind.ARRAY_ACCESS, ArrayAccess(ident("a"), int_lit(0)))
    assert access.to_dict()["value"]["kind"] == "array_access"  # type: ignore[typeddict-item]


def test_extern_function_cannot_have_body() -> None:
    with pytest.raises(ValueError, match="cannot have a body"):
        FunctionStatement(
            "f", (), PrimitiveType(Primitive.VOID), True, Statements((BreakStatement(),))
        )


def test_function_requires_body() -> None:
    with pytest.raises(ValueError, match="requires a body"):
        FunctionStatement("f", (), PrimitiveType(Primitive.VOID))


def test_statements_sequence_protocol() -> None:
    first = ExpressionStatement(int_lit(1))
    last = ExpressionStatement(int_lit(2), naked=True)
    block = Statements((first, last))
    assert len(block) == 2
    assert list(block) == [first, last]
    assert block[-1].naked  # type: ignore[union-attr]


def test_iter_children_in_field_order() -> None:
    node = BinaryOperation(ident("a"), Operator.PLUS, ident("b"))
    assert list(iter_children(node)) == [ident("a"), ident("b")]


def test_walk_is_preorder() -> None:
    inner = BinaryOperation(ident("a"), Operator.MULTIPLY, int_lit(2))
    tree = Group(inner)
    kinds = [n.kind for n in walk(tree)]
    assert kinds == ["group", "binary_operation", "literal", "literal"]


@pytest.mark.parametrize(
    "op,symbol",
    [
        (Operator.AND, "and"),
        (Operator.DIFFERENT, "!="),
        (Operator.MORE_EQUAL, ">="),
        (Operator.MODULO, "%"),
    ],
)
def test_operator_symbols(op: Operator, symbol: str) -> None:
    assert op.value == symbol
    assert Operator(symbol) is op


@given(st.text(min_size=1), st.integers(), st.integers(min_value=0, max_value=100))  # type: ignore[misc]
def test_literal_equality_is_structural(name: str, n: int, offset: int) -> None:
    a = BinaryOperation(ident(name), Operator.PLUS, int_lit(n))
    b = dataclasses.replace(a, span=Span(offset, offset + 1))
    assert a == b
    assert hash(a) == hash(b)
