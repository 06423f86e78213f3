r"""Lexical analysis for JIPL. Turns source text into a flat list of tokens in a single left-to-right pass.

Tokens can be loosely defined as follows:

```
<nline>      ::= "\n" | ";"                         ; both separate statements
<number>     ::= <digit>+ ("." <digit>*)?           ; a second "." ends the literal
<string>     ::= '"' (<char> | "\" <char>)* '"'     ; \n, \t and \\ are escapes, "\x" is x
<identifier> ::= <letter> (<letter> | <digit> | "_")*
<keyword>    ::= "var" | "and" | "or" | "not" | "if" | "elseif" | "else" | "for" | "to" | "by" | "while"
               | "function" | "return" | "continue" | "break" | "new" | "object"
<operator>   ::= "+" | "-" | "*" | "/" | "^" | "=" | "==" | "!=" | "<" | "<=" | ">" | ">="
<symbol>     ::= "(" | ")" | "[" | "]" | "{" | "}" | ":" | "," | "."
<comment>    ::= "#" <char>*                        ; up to (not including) the end of the line
```

An unterminated string is not an error: it silently closes at the end of its line (or of the source). Any character
outside of the rules above is fatal: lexing stops and the tokens produced so far are returned with the error.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from jipl.lang.error import illegal_character

logger = logging.getLogger(__name__)


class TokenKind(enum.Enum):
    INT = "INT"
    FLOAT = "FLOAT"
    STRING = "STRING"
    IDENTIFIER = "IDENTIFIER"
    KEYWORD = "KEYWORD"

    PLUS = "+"
    MINUS = "-"
    MULT = "*"
    DIV = "/"
    POW = "^"

    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    LESS = "<"
    GREATER = ">"
    LESS_EQUALS = "<="
    GREATER_EQUALS = ">="

    LPAREN = "("
    RPAREN = ")"
    LSQUARE = "["
    RSQUARE = "]"
    LBRA = "{"
    RBRA = "}"
    COLON = ":"
    COMMA = ","
    POINT = "."

    NLINE = "NLINE"
    END_OF_CODE = "END_OF_CODE"


@dataclass(frozen=True)
class Span:
    """Position of a token in the source: 1-based line, absolute character offset and length."""
    line: int
    offset: int
    length: int

    def __str__(self):
        return f"line {self.line}"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    span: Span
    literal: Optional[str] = None

    def matches(self, *kinds):
        """Whether or not this token is of one of kinds."""
        return self.kind in kinds

    def is_keyword(self, *words):
        """Whether or not this token is one of the keywords in words."""
        return self.kind is TokenKind.KEYWORD and self.literal in words

    def __str__(self):
        if self.literal is None:
            return self.kind.name
        return f"{self.kind.name}:{self.literal}"


class Lexer:
    """Single-pass tokenizer. Use tokenize() rather than instantiating this directly."""
    DIGITS = "0123456789"
    LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
    LEGAL_CHARS = LETTERS + DIGITS + "_"

    KEYWORDS = ("var", "and", "or", "not", "if", "elseif", "else", "for", "to", "by", "while", "function", "return",
                "continue", "break", "new", "object")

    SINGLE = {
        "(": TokenKind.LPAREN,
        ")": TokenKind.RPAREN,
        "[": TokenKind.LSQUARE,
        "]": TokenKind.RSQUARE,
        "{": TokenKind.LBRA,
        "}": TokenKind.RBRA,
        ".": TokenKind.POINT,
        "+": TokenKind.PLUS,
        "-": TokenKind.MINUS,
        "*": TokenKind.MULT,
        "/": TokenKind.DIV,
        "^": TokenKind.POW,
        ":": TokenKind.COLON,
        ",": TokenKind.COMMA,
    }

    # first char: (kind if followed by "=", kind otherwise)
    COMPARATORS = {
        "=": (TokenKind.DOUBLE_EQUALS, TokenKind.EQUALS),
        "<": (TokenKind.LESS_EQUALS, TokenKind.LESS),
        ">": (TokenKind.GREATER_EQUALS, TokenKind.GREATER),
    }

    ESCAPES = {"n": "\n", "t": "\t", "\\": "\\"}

    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.line = 1
        self.tokens = []

    def _add(self, kind, start, length, literal=None):
        self.tokens.append(Token(kind, Span(self.line, start, length), literal))

    def _peek(self, ahead=1):
        idx = self.pos + ahead
        return self.source[idx] if idx < len(self.source) else None

    def tokenize(self):
        """Returns (tokens, error). error is None unless an illegal character was found."""
        source = self.source

        while self.pos < len(source):
            char = source[self.pos]

            if char in " \t":
                self.pos += 1
            elif char == "\n":
                self._add(TokenKind.NLINE, self.pos, 1)
                self.line += 1
                self.pos += 1
            elif char == ";":
                self._add(TokenKind.NLINE, self.pos, 1)
                self.pos += 1
            elif char in Lexer.SINGLE:
                self._add(Lexer.SINGLE[char], self.pos, 1)
                self.pos += 1
            elif char in Lexer.COMPARATORS:
                self._comparator()
            elif char == "!":
                if self._peek() != "=":
                    return self.tokens, illegal_character("!", Span(self.line, self.pos, 1))
                self._add(TokenKind.NOT_EQUALS, self.pos, 2)
                self.pos += 2
            elif char == "\"":
                self._string()
            elif char == "#":
                self._comment()
            elif char in Lexer.DIGITS:
                self._number()
            elif char in Lexer.LETTERS:
                self._identifier()
            else:
                return self.tokens, illegal_character(char, Span(self.line, self.pos, 1))

        self._add(TokenKind.END_OF_CODE, len(source), 0)
        logger.debug("lexed %d tokens", len(self.tokens))
        return self.tokens, None

    def _comparator(self):
        double, single = Lexer.COMPARATORS[self.source[self.pos]]
        if self._peek() == "=":
            self._add(double, self.pos, 2)
            self.pos += 2
        else:
            self._add(single, self.pos, 1)
            self.pos += 1

    def _comment(self):
        """Skips up to the end of the line. The newline itself is left to emit its NLINE token."""
        end = self.source.find("\n", self.pos)
        self.pos = end if end != -1 else len(self.source)

    def _number(self):
        start = self.pos
        kind = TokenKind.INT

        while self.pos < len(self.source):
            char = self.source[self.pos]
            if char in Lexer.DIGITS:
                self.pos += 1
            elif char == "." and kind is TokenKind.INT:
                kind = TokenKind.FLOAT
                self.pos += 1
            else:
                break

        literal = self.source[start:self.pos]
        self._add(kind, start, len(literal), literal)

    def _string(self):
        start = self.pos
        self.pos += 1
        chars = []

        while self.pos < len(self.source):
            char = self.source[self.pos]

            escaped = self._peek()
            if char == "\\" and escaped not in (None, "\n"):
                chars.append(Lexer.ESCAPES.get(escaped, escaped))
                self.pos += 2
                continue

            if char == "\n":  # unterminated: close here, leave the newline for the main loop
                break

            self.pos += 1
            if char == "\"":
                break
            chars.append(char)

        self._add(TokenKind.STRING, start, self.pos - start, "".join(chars))

    def _identifier(self):
        start = self.pos
        while self.pos < len(self.source) and self.source[self.pos] in Lexer.LEGAL_CHARS:
            self.pos += 1

        word = self.source[start:self.pos]
        kind = TokenKind.KEYWORD if word in Lexer.KEYWORDS else TokenKind.IDENTIFIER
        self._add(kind, start, len(word), word)


def tokenize(source):
    """Tokenizes source. Returns (tokens, error); tokens always ends with END_OF_CODE unless error is set."""
    return Lexer(source).tokenize()
