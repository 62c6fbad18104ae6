"""Lexical analysis of module source text."""

from __future__ import annotations

from enum import Enum, auto

from .driver import CH_EOL, CH_EOT, CH_SPACE, CH_TAB, SourceText
from .errors import LexError

INT_MAX = 2**31 - 1


class Lex(Enum):
    """Kinds of lexemes. ``NONE`` marks reserved words that are not supported."""

    NONE = auto()
    NAME = auto()
    NUM = auto()
    MODULE = auto()
    IMPORT = auto()
    BEGIN = auto()
    END = auto()
    CONST = auto()
    VAR = auto()
    WHILE = auto()
    DO = auto()
    IF = auto()
    THEN = auto()
    ELSIF = auto()
    ELSE = auto()
    MULT = auto()
    DIV = auto()
    MOD = auto()
    PLUS = auto()
    MINUS = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()
    DOT = auto()
    COMMA = auto()
    COLON = auto()
    SEMI = auto()
    ASS = auto()
    LPAR = auto()
    RPAR = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    EOT = auto()


KEYWORDS: dict[str, Lex] = {
    "MODULE": Lex.MODULE,
    "IMPORT": Lex.IMPORT,
    "CONST": Lex.CONST,
    "VAR": Lex.VAR,
    "BEGIN": Lex.BEGIN,
    "END": Lex.END,
    "IF": Lex.IF,
    "THEN": Lex.THEN,
    "ELSIF": Lex.ELSIF,
    "ELSE": Lex.ELSE,
    "WHILE": Lex.WHILE,
    "DO": Lex.DO,
    "DIV": Lex.DIV,
    "MOD": Lex.MOD,
    "AND": Lex.AND,
    "OR": Lex.OR,
    **dict.fromkeys(
        (
            "ARRAY", "RECORD", "POINTER", "SET", "WITH", "CASE", "OF", "LOOP",
            "EXIT", "PROCEDURE", "FOR", "TO", "BY", "IN", "IS", "NIL", "TYPE",
            "REPEAT", "UNTIL", "RETURN",
        ),
        Lex.NONE,
    ),
}

_LEX_NAMES: dict[Lex, str] = {
    Lex.NAME: "имя",
    Lex.NUM: "число",
    Lex.DIV: "DIV",
    Lex.MOD: "MOD",
    Lex.MODULE: "MODULE",
    Lex.IMPORT: "IMPORT",
    Lex.BEGIN: "BEGIN",
    Lex.END: "END",
    Lex.CONST: "CONST",
    Lex.VAR: "VAR",
    Lex.WHILE: "WHILE",
    Lex.DO: "DO",
    Lex.IF: "IF",
    Lex.THEN: "THEN",
    Lex.ELSIF: "ELSIF",
    Lex.ELSE: "ELSE",
    Lex.MULT: "*",
    Lex.PLUS: "+",
    Lex.MINUS: "-",
    Lex.EQ: "=",
    Lex.NE: "#",
    Lex.LT: "<",
    Lex.LE: "<=",
    Lex.GT: ">",
    Lex.GE: ">=",
    Lex.DOT: ".",
    Lex.COMMA: ",",
    Lex.COLON: ":",
    Lex.SEMI: ";",
    Lex.ASS: ":=",
    Lex.LPAR: "(",
    Lex.RPAR: ")",
    Lex.AND: "&",
    Lex.OR: "OR",
    Lex.NOT: "~",
    Lex.EOT: "конец текста",
}

_SINGLE: dict[str, Lex] = {
    ";": Lex.SEMI,
    ".": Lex.DOT,
    ",": Lex.COMMA,
    "+": Lex.PLUS,
    "-": Lex.MINUS,
    "*": Lex.MULT,
    ")": Lex.RPAR,
    "=": Lex.EQ,
    "#": Lex.NE,
    "&": Lex.AND,
    "~": Lex.NOT,
}

# A second character that turns a one-character lexeme into a two-character one.
_PAIRS: dict[str, tuple[Lex, Lex]] = {
    ":": (Lex.COLON, Lex.ASS),
    "<": (Lex.LT, Lex.LE),
    ">": (Lex.GT, Lex.GE),
}


def lex_name(lex: Lex) -> str:
    """Return how a lexeme kind is written in messages."""
    return _LEX_NAMES.get(lex, "лексема не найдена")


def _is_letter(ch: str) -> bool:
    return "A" <= ch <= "Z" or "a" <= ch <= "z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Scanner:
    """Splits source text into lexemes, one per ``next_lex`` call."""

    def __init__(self, source: SourceText) -> None:
        self.source = source
        self.lex = Lex.NONE
        self.name_value = ""
        self.num_value = 0
        self.lex_position = 0
        source.next_ch()

    def next_lex(self) -> Lex:
        """Read the next lexeme, store it in ``lex`` and return it."""
        src = self.source
        while src.ch in (CH_SPACE, CH_TAB, CH_EOL):
            src.next_ch()

        self.lex_position = src.position
        ch = src.ch

        if _is_letter(ch):
            self._scan_name()
        elif _is_digit(ch):
            self._scan_number()
        elif ch in _PAIRS:
            single, double = _PAIRS[ch]
            src.next_ch()
            if src.ch == "=":
                self.lex = double
                src.next_ch()
            else:
                self.lex = single
        elif ch == "(":
            src.next_ch()
            if src.ch == "*":
                self._skip_comment()
                return self.next_lex()
            self.lex = Lex.LPAR
        elif ch in _SINGLE:
            self.lex = _SINGLE[ch]
            src.next_ch()
        elif ch == CH_EOT:
            self.lex = Lex.EOT
        else:
            self._lex_error("Недопустимый символ")
        return self.lex

    def _lex_error(self, message: str) -> None:
        position = self.source.position
        self.source.skip_line()
        raise LexError(message, position)

    def _scan_name(self) -> None:
        src = self.source
        chars = []
        # Only the digits 1 to 8 continue a name.
        while _is_letter(src.ch) or "0" < src.ch < "9":
            chars.append(src.ch)
            src.next_ch()
        self.name_value = "".join(chars)
        self.lex = KEYWORDS.get(self.name_value, Lex.NAME)

    def _scan_number(self) -> None:
        src = self.source
        value = 0
        while _is_digit(src.ch):
            digit = ord(src.ch) - ord("0")
            if value > (INT_MAX - digit) // 10:
                self._lex_error("Число превышает максимально возможное")
            value = value * 10 + digit
            src.next_ch()
        self.num_value = value
        self.lex = Lex.NUM

    def _skip_comment(self) -> None:
        src = self.source
        src.next_ch()
        while True:
            while src.ch not in ("*", CH_EOT):
                src.next_ch()
                if src.ch == "(":
                    src.next_ch()
                    if src.ch == "*":
                        self._skip_comment()
            if src.ch == CH_EOT:
                self._lex_error("Нет конца комментария")
            src.next_ch()
            if src.ch == ")":
                break
        src.next_ch()