"""
Token taxonomy shared by the Bubble lexer and parser.

Token kinds are plain uppercase strings. Fixed lexemes map to their kind through
`token_hashmap`; payload-carrying kinds (`IDENT`, `STRING`, `INT`, `FLOAT`) are
produced by the lexer directly.

Exports:
    symbol_hashmap: punctuation and operator lexemes.
    keyword_hashmap: reserved words, including primitive type names.
    token_hashmap: union of both tables.
    PAYLOAD_TOKENS: kinds that carry a value.
    ALL_TOKENS: every kind the lexer can produce.
"""

symbol_hashmap: dict[str, str] = {
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACKET",
    "]": "RBRACKET",
    "{": "LBRACE",
    "}": "RBRACE",
    ",": "COMMA",
    ";": "SEMICOLON",
    ":": "COLON",
    "=": "EQUAL",
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    "/": "SLASH",
    "%": "PERCENT",
    "==": "EQUAL_EQUAL",
    "!=": "BANG_EQUAL",
    "<": "LESS",
    ">": "MORE",
    "<=": "LESS_EQUAL",
    ">=": "MORE_EQUAL",
}

keyword_hashmap: dict[str, str] = {
    "and": "AND",
    "or": "OR",
    "not": "NOT",
    "function": "FUNCTION",
    "struct": "STRUCT",
    "if": "IF",
    "else": "ELSE",
    "for": "FOR",
    "while": "WHILE",
    "return": "RETURN",
    "let": "LET",
    "break": "BREAK",
    "continue": "CONTINUE",
    "extern": "EXTERN",
    "true": "TRUE",
    "false": "FALSE",
    "null": "NULL",
    "u8": "U8",
    "u16": "U16",
    "u32": "U32",
    "u64": "U64",
    "i8": "I8",
    "i16": "I16",
    "i32": "I32",
    "i64": "I64",
    "bool": "BOOL",
    "void": "VOID",
    "string": "STRING_TY",
    "ptr": "PTR",
    "addrof": "ADDROF",
    "deref": "DEREF",
}

token_hashmap: dict[str, str] = {**symbol_hashmap, **keyword_hashmap}

PAYLOAD_TOKENS = frozenset({"IDENT", "STRING", "INT", "FLOAT"})

ALL_TOKENS = frozenset(token_hashmap.values()) | PAYLOAD_TOKENS

I64_MAX = 2**63 - 1
ARRAY_SIZE_MAX = 2**32 - 1
