"""
Renders Bubble ASTs back into Bubble source code.

`SourcePrinter` walks a tree and emits canonical Bubble text: four-space
indentation, one statement per line, no trailing commas. Groups are printed as
the parentheses they came from, so printing a parsed tree and parsing the
result again yields a structurally equal tree.

Dispatch follows the node `kind`: statements and declarations go through
`emit_<kind>` (which appends lines), expressions and types through
`emit_expr_<kind>` / `emit_type_<kind>` (which return strings).

Raises:
    NotImplementedError: If a node kind has no emit method.

Example:
    >>> print(format_program(parse_program("function f() { 1 }")))
    function f(): void {
        1
    }
"""

from decimal import Decimal

from bubble.bubble_ast import (
    ArrayType,
    BinaryOperation,
    ExpressionStatement,
    ForStatement,
    FunctionStatement,
    IfStatement,
    LetStatement,
    Literal,
    LiteralKind,
    Node,
    Parameter,
    ReturnStatement,
    Statements,
    StructStatement,
    WhileStatement,
)

STRING_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r", "\0": "\\0"}


def quote_string(text: str) -> str:
    return '"' + "".join(STRING_ESCAPES.get(ch, ch) for ch in text) + '"'


def format_float(value: float) -> str:
    # no exponent syntax in the language
    text = format(Decimal(repr(value)), "f")
    if "." not in text:
        text += ".0"
    return text


class SourcePrinter:
    """Emits Bubble source from AST nodes.

    Attributes:
        lines (list[str]): Accumulated output lines.
        indent (int): Current indentation level.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.indent = 0

    def indent_str(self) -> str:
        return "    " * self.indent

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def write(self, line: str) -> None:
        self.lines.append(f"{self.indent_str()}{line}")

    def _visit(self, node: Node) -> None:
        method = getattr(self, f"emit_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"No emitter method for node kind '{node.kind}'")
        method(node)

    def print_program(self, program: tuple[Node, ...]) -> str:
        for i, node in enumerate(program):
            if i:
                self.lines.append("")
            self._visit(node)
        return self.get_output()

    def print_block(self, block: Statements) -> str:
        self.emit_statements(block)
        return self.get_output()

    # Declarations

    def emit_parameters(self, parameters: tuple[Parameter, ...]) -> str:
        return ", ".join(f"{p.name}: {self.emit_type(p.type_)}" for p in parameters)

    def emit_function_statement(self, node: FunctionStatement) -> None:
        signature = (
            f"function {node.name}({self.emit_parameters(node.parameters)})"
            f": {self.emit_type(node.return_type)}"
        )
        if node.is_extern:
            self.write(f"extern {signature};")
            return
        if node.body is None:
            raise ValueError(f"function '{node.name}' requires a body")
        self.emit_block(signature, node.body)

    def emit_struct_statement(self, node: StructStatement) -> None:
        self.write(f"struct {node.name} {{")
        self.indent += 1
        last = len(node.fields) - 1
        for i, f in enumerate(node.fields):
            separator = "," if i < last else ""
            self.write(f"{f.name}: {self.emit_type(f.type_)}{separator}")
        self.indent -= 1
        self.write("}")

    # Statements

    def emit_block(self, header: str, block: Statements, closer: str = "}") -> None:
        self.write(f"{header} {{")
        self.indent += 1
        self.emit_statements(block)
        self.indent -= 1
        self.write(closer)

    def emit_statements(self, node: Statements) -> None:
        for stmt in node:
            self._visit(stmt)

    def let_clause(self, node: LetStatement) -> str:
        annotation = f": {self.emit_type(node.type_)}" if node.type_ is not None else ""
        initializer = (
            f" = {self.emit_expr(node.initializer)}" if node.initializer is not None else ""
        )
        return f"{node.name}{annotation}{initializer}"

    def emit_let_statement(self, node: LetStatement) -> None:
        self.write(f"let {self.let_clause(node)};")

    def emit_expression_statement(self, node: ExpressionStatement) -> None:
        terminator = "" if node.naked else ";"
        self.write(f"{self.emit_expr(node.expression)}{terminator}")

    def emit_if_statement(self, node: IfStatement) -> None:
        header = f"if {self.emit_expr(node.condition)}"
        if node.else_branch is None:
            self.emit_block(header, node.then_branch)
            return
        self.emit_block(header, node.then_branch, closer="} else {")
        self.indent += 1
        self.emit_statements(node.else_branch)
        self.indent -= 1
        self.write("}")

    def emit_while_statement(self, node: WhileStatement) -> None:
        self.emit_block(f"while {self.emit_expr(node.condition)}", node.body)

    def emit_for_statement(self, node: ForStatement) -> None:
        header = (
            f"for {self.let_clause(node.init)}; {self.emit_expr(node.condition)};"
            f" {self.emit_expr(node.step)}"
        )
        self.emit_block(header, node.body)

    def emit_return_statement(self, node: ReturnStatement) -> None:
        if node.value is None:
            self.write("return;")
        else:
            self.write(f"return {self.emit_expr(node.value)};")

    def emit_break_statement(self, node: Node) -> None:
        self.write("break;")

    def emit_continue_statement(self, node: Node) -> None:
        self.write("continue;")

    # Types

    def emit_type(self, node: Node) -> str:
        method = getattr(self, f"emit_type_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"No emitter method for type kind '{node.kind}'")
        return str(method(node))

    def emit_type_primitive_type(self, node: Node) -> str:
        return str(node.primitive.value)  # type: ignore[attr-defined]

    def emit_type_pointer_type(self, node: Node) -> str:
        return f"ptr {self.emit_type(node.pointee)}"  # type: ignore[attr-defined]

    def emit_type_array_type(self, node: ArrayType) -> str:
        return f"[{node.size}; {self.emit_type(node.element)}]"

    def emit_type_named_type(self, node: Node) -> str:
        return str(node.name)  # type: ignore[attr-defined]

    # Expressions

    def emit_expr(self, node: Node) -> str:
        method = getattr(self, f"emit_expr_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"No emitter method for expression kind '{node.kind}'")
        return str(method(node))

    def emit_expr_assignment(self, node: Node) -> str:
        return f"{self.emit_expr(node.target)} = {self.emit_expr(node.value)}"  # type: ignore[attr-defined]

    def emit_expr_addr_of(self, node: Node) -> str:
        return f"addrof {self.emit_expr(node.operand)}"  # type: ignore[attr-defined]

    def emit_expr_deref(self, node: Node) -> str:
        return f"deref {self.emit_expr(node.operand)}"  # type: ignore[attr-defined]

    def emit_expr_array_initializer(self, node: Node) -> str:
        return "[" + ", ".join(self.emit_expr(e) for e in node.elements) + "]"  # type: ignore[attr-defined]

    def emit_expr_binary_operation(self, node: BinaryOperation) -> str:
        if node.right is None:
            separator = " " if node.op.value.isalpha() else ""
            return f"{node.op.value}{separator}{self.emit_expr(node.left)}"
        return f"{self.emit_expr(node.left)} {node.op.value} {self.emit_expr(node.right)}"

    def emit_expr_group(self, node: Node) -> str:
        return f"({self.emit_expr(node.inner)})"  # type: ignore[attr-defined]

    def emit_expr_call(self, node: Node) -> str:
        args = ", ".join(self.emit_expr(a) for a in node.arguments)  # type: ignore[attr-defined]
        return f"{node.callee}({args})"  # type: ignore[attr-defined]

    def emit_expr_literal(self, node: Literal) -> str:
        kind = node.literal_kind
        if kind in (LiteralKind.TRUE, LiteralKind.FALSE, LiteralKind.NULL):
            return kind.value
        if kind is LiteralKind.INTEGER or kind is LiteralKind.IDENTIFIER:
            return str(node.value)
        if kind is LiteralKind.FLOAT:
            return format_float(float(node.value))  # type: ignore[arg-type]
        if kind is LiteralKind.STRING:
            return quote_string(str(node.value))
        access = node.value
        return f"{self.emit_expr(access.target)}[{self.emit_expr(access.index)}]"  # type: ignore[union-attr]


def format_program(program: tuple[Node, ...]) -> str:
    """Render a parsed program as Bubble source."""
    return SourcePrinter().print_program(program)


def format_block(block: Statements) -> str:
    """Render a parsed block (as returned by `parse_block`) as Bubble source."""
    return SourcePrinter().print_block(block)


__all__ = ["SourcePrinter", "format_block", "format_program", "quote_string"]
