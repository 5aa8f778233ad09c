"""Token types and tokens of the BCPL language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Every kind of token the BCPL lexer can produce."""

    EOF = auto()

    IDENTIFIER = auto()
    INTEGER_LITERAL = auto()
    FLOAT_LITERAL = auto()
    STRING_LITERAL = auto()
    CHAR_LITERAL = auto()

    KW_LET = auto()
    KW_AND = auto()
    KW_BE = auto()
    KW_VEC = auto()
    KW_IF = auto()
    KW_THEN = auto()
    KW_UNLESS = auto()
    KW_TEST = auto()
    KW_OR = auto()
    KW_WHILE = auto()
    KW_DO = auto()
    KW_UNTIL = auto()
    KW_REPEAT = auto()
    KW_REPEAT_WHILE = auto()
    KW_REPEAT_UNTIL = auto()
    KW_FOR = auto()
    KW_TO = auto()
    KW_BY = auto()
    KW_SWITCHON = auto()
    KW_INTO = auto()
    KW_CASE = auto()
    KW_DEFAULT = auto()
    KW_ENDCASE = auto()
    KW_GOTO = auto()
    KW_RETURN = auto()
    KW_RESULTIS = auto()
    KW_BREAK = auto()
    KW_LOOP = auto()
    KW_VALOF = auto()
    KW_MANIFEST = auto()
    KW_STATIC = auto()
    KW_GLOBAL = auto()
    KW_TRUE = auto()
    KW_FALSE = auto()
    KW_FINISH = auto()

    OP_ASSIGN = auto()
    OP_PLUS = auto()
    OP_MINUS = auto()
    OP_MULTIPLY = auto()
    OP_DIVIDE = auto()
    OP_REMAINDER = auto()
    OP_EQ = auto()
    OP_NE = auto()
    OP_LT = auto()
    OP_GT = auto()
    OP_LE = auto()
    OP_GE = auto()
    OP_LOG_AND = auto()
    OP_LOG_OR = auto()
    OP_LOG_NOT = auto()
    OP_LOG_EQV = auto()
    OP_LOG_NEQV = auto()
    OP_LSHIFT = auto()
    OP_RSHIFT = auto()
    OP_AT = auto()
    OP_BANG = auto()
    OP_CONDITIONAL = auto()

    OP_FLOAT_PLUS = auto()
    OP_FLOAT_MINUS = auto()
    OP_FLOAT_MULTIPLY = auto()
    OP_FLOAT_DIVIDE = auto()
    OP_FLOAT_EQ = auto()
    OP_FLOAT_NE = auto()
    OP_FLOAT_LT = auto()
    OP_FLOAT_GT = auto()
    OP_FLOAT_LE = auto()
    OP_FLOAT_GE = auto()
    OP_FLOAT_VEC_SUB = auto()

    OP_CHAR_SUB = auto()

    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LSECTION = auto()
    RSECTION = auto()
    COMMA = auto()
    COLON = auto()
    SEMICOLON = auto()

    ILLEGAL = auto()

    def __str__(self) -> str:
        return self.name

    @property
    def is_keyword(self) -> bool:
        return self.name.startswith("KW_")

    @property
    def spelling(self) -> str | None:
        """The source text of a keyword, operator or delimiter, else None."""
        if self.is_keyword:
            return self.name[3:].replace("_", "")
        return _SPELLINGS.get(self)

    @classmethod
    def from_keyword(cls, word: str) -> TokenType | None:
        """Return the keyword token type spelled ``word``, or None."""
        return _KEYWORDS.get(word)


_SPELLINGS: dict[TokenType, str] = {
    TokenType.OP_ASSIGN: ":=",
    TokenType.OP_PLUS: "+",
    TokenType.OP_MINUS: "-",
    TokenType.OP_MULTIPLY: "*",
    TokenType.OP_DIVIDE: "/",
    TokenType.OP_REMAINDER: "REM",
    TokenType.OP_EQ: "=",
    TokenType.OP_NE: "~=",
    TokenType.OP_LT: "<",
    TokenType.OP_GT: ">",
    TokenType.OP_LE: "<=",
    TokenType.OP_GE: ">=",
    TokenType.OP_LOG_AND: "&",
    TokenType.OP_LOG_OR: "|",
    TokenType.OP_LOG_NOT: "~",
    TokenType.OP_LOG_EQV: "EQV",
    TokenType.OP_LOG_NEQV: "NEQV",
    TokenType.OP_LSHIFT: "<<",
    TokenType.OP_RSHIFT: ">>",
    TokenType.OP_AT: "@",
    TokenType.OP_BANG: "!",
    TokenType.OP_CONDITIONAL: "->",
    TokenType.OP_FLOAT_PLUS: "+.",
    TokenType.OP_FLOAT_MINUS: "-.",
    TokenType.OP_FLOAT_MULTIPLY: "*.",
    TokenType.OP_FLOAT_DIVIDE: "/.",
    TokenType.OP_FLOAT_EQ: "=.",
    TokenType.OP_FLOAT_NE: "~=.",
    TokenType.OP_FLOAT_LT: "<.",
    TokenType.OP_FLOAT_GT: ">.",
    TokenType.OP_FLOAT_LE: "<=.",
    TokenType.OP_FLOAT_GE: ">=.",
    TokenType.OP_FLOAT_VEC_SUB: ".%",
    TokenType.OP_CHAR_SUB: "%",
    TokenType.LPAREN: "(",
    TokenType.RPAREN: ")",
    TokenType.LBRACE: "{",
    TokenType.RBRACE: "}",
    TokenType.LSECTION: "$(",
    TokenType.RSECTION: "$)",
    TokenType.COMMA: ",",
    TokenType.COLON: ":",
    TokenType.SEMICOLON: ";",
}

_KEYWORDS: dict[str, TokenType] = {
    member.name[3:].replace("_", ""): member
    for member in TokenType
    if member.name.startswith("KW_")
}


@dataclass(frozen=True)
class Token:
    """A single token scanned from BCPL source."""

    type: TokenType
    text: str = ""
    int_val: int = 0
    float_val: float = 0.0
    line: int = 0
    col: int = 0

    @staticmethod
    def type_to_string(token_type: TokenType) -> str:
        return token_type.name