import pytest
from hypothesis import given
from hypothesis import strategies as st

from bubble.bubble_constants import keyword_hashmap
from bubble.bubble_errors import LexicalError
from bubble.bubble_lexer import CharacterStream, Lexer, Token, tokenize


def types(source: str) -> list[str]:
    return [tok.type for tok in tokenize(source)]


def test_punctuation_tokens() -> None:
    code = "( ) [ ] { } , ; : ="
    expected = [
        "LPAREN",
        "RPAREN",
        "LBRACKET",
        "RBRACKET",
        "LBRACE",
        "RBRACE",
        "COMMA",
        "SEMICOLON",
        "COLON",
        "EQUAL",
    ]
    lexer = Lexer(CharacterStream(code))
    assert [lexer.next_token().type for _ in expected] == expected


def test_operator_tokens() -> None:
    assert types("+ - * / % == != < > <= >= and or not") == [
        "PLUS",
        "MINUS",
        "STAR",
        "SLASH",
        "PERCENT",
        "EQUAL_EQUAL",
        "BANG_EQUAL",
        "LESS",
        "MORE",
        "LESS_EQUAL",
        "MORE_EQUAL",
        "AND",
        "OR",
        "NOT",
    ]


def test_longest_match_without_spaces() -> None:
    assert types("a<=b==c") == ["IDENT", "LESS_EQUAL", "IDENT", "EQUAL_EQUAL", "IDENT"]
    assert types("a=-b") == ["IDENT", "EQUAL", "MINUS", "IDENT"]


@pytest.mark.parametrize(
    "word,kind",
    [
        ("function", "FUNCTION"),
        ("extern", "EXTERN"),
        ("struct", "STRUCT"),
        ("let", "LET"),
        ("ptr", "PTR"),
        ("addrof", "ADDROF"),
        ("deref", "DEREF"),
        ("i16", "I16"),
        ("string", "STRING_TY"),
        ("null", "NULL"),
    ],
)
def test_keywords(word: str, kind: str) -> None:
    (tok,) = tokenize(word)
    assert tok.type == kind
    assert tok.value == word


def test_identifier_with_digits_and_underscore() -> None:
    (tok,) = tokenize("my_var2")
    assert tok.type == "IDENT"
    assert tok.value == "my_var2"


def test_keyword_prefix_is_identifier() -> None:
    (tok,) = tokenize("letter")
    assert tok.type == "IDENT"


def test_integer_token() -> None:
    (tok,) = tokenize("123")
    assert tok.type == "INT"
    assert tok.value == 123


@pytest.mark.parametrize("source,value", [("1.5", 1.5), (".5", 0.5), ("10.25", 10.25)])
def test_float_token(source: str, value: float) -> None:
    (tok,) = tokenize(source)
    assert tok.type == "FLOAT"
    assert tok.value == value


@pytest.mark.parametrize("source", ["1.", "1.2.3"])
def test_malformed_float(source: str) -> None:
    with pytest.raises(LexicalError, match="Invalid float format"):
        tokenize(source)


def test_integer_overflow() -> None:
    tokenize(str(2**63 - 1))
    with pytest.raises(LexicalError, match="out of range"):
        tokenize(str(2**63))


def test_float_overflow() -> None:
    (tok,) = tokenize("1" * 300 + ".0")
    assert tok.type == "FLOAT"
    with pytest.raises(LexicalError, match="Float literal out of range") as e:
        tokenize("x = " + "1" * 400 + ".0;")
    assert (e.value.line, e.value.column) == (1, 5)


def test_string_escapes() -> None:
    (tok,) = tokenize(r'"a\n\t\r\0\\\"b"')
    assert tok.type == "STRING"
    assert tok.value == 'a\n\t\r\0\\"b'


def test_unterminated_string() -> None:
    with pytest.raises(LexicalError, match="Unterminated string"):
        tokenize('"oops')


def test_unknown_escape() -> None:
    with pytest.raises(LexicalError, match="Unknown escape"):
        tokenize(r'"\q"')


def test_invalid_character_position() -> None:
    with pytest.raises(LexicalError) as e:
        tokenize("let x\n  = @;")
    assert (e.value.line, e.value.column, e.value.position) == (2, 5, 10)


def test_comments_and_whitespace_skipped() -> None:
    source = "// header\nlet\t x\r\n\v= 1; // trailing"
    assert types(source) == ["LET", "IDENT", "EQUAL", "INT", "SEMICOLON"]


def test_token_positions() -> None:
    first, second = tokenize("ab\n  cd")
    assert (first.start, first.end, first.line, first.col) == (0, 2, 1, 1)
    assert (second.start, second.end, second.line, second.col) == (5, 7, 2, 3)
    assert (second.end_line, second.end_col) == (2, 5)


def test_eof_is_repeatable() -> None:
    lexer = Lexer(CharacterStream("x"))
    lexer.next_token()
    assert lexer.next_token().type == "EOF"
    assert lexer.next_token().type == "EOF"


def test_stream_reads_past_end() -> None:
    stream = CharacterStream("")
    assert stream.peek() == ""
    with pytest.raises(LexicalError):
        stream.next()


def test_token_repr_and_equality() -> None:
    assert repr(Token("INT", 3)) == "Token(INT, 3)"
    assert Token("INT", 3, start=0, end=1) == Token("INT", 3, 1, 1, 0, 1)
    assert Token("INT", 3) != Token("INT", 4)


@given(st.integers(min_value=0, max_value=2**63 - 1))  # type: ignore[misc]
def test_integers_round_trip(n: int) -> None:
    (tok,) = tokenize(str(n))
    assert tok.type == "INT"
    assert tok.value == n


@given(st.from_regex(r"[A-Za-z][A-Za-z0-9_]{0,12}", fullmatch=True))  # type: ignore[misc]
def test_identifiers_or_keywords(word: str) -> None:
    (tok,) = tokenize(word)
    assert tok.type == keyword_hashmap.get(word, "IDENT")
    assert tok.end - tok.start == len(word)
