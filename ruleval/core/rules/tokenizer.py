"""
Tokenizer for the rules language.

Rules files are line oriented. Each non-blank, non-comment line becomes a
SourceLine holding its tokens. A comment is a line whose first non-whitespace
characters are ``//``; there are no trailing comments.
"""

import re
from dataclasses import dataclass
from enum import Enum

from ruleval.core.errors import ParseError


class TokenType(str, Enum):
    WORD = "word"
    STRING = "string"
    NUMBER = "number"
    PATTERN = "pattern"
    OPERATOR = "operator"
    COLON = "colon"
    LBRACKET = "lbracket"
    RBRACKET = "rbracket"
    COMMA = "comma"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int


@dataclass(frozen=True)
class SourceLine:
    """Tokens of one physical line, with its 1-based line number."""

    number: int
    text: str
    tokens: tuple[Token, ...]


_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"[A-Za-z_][A-Za-z0-9_\-]*")
_STRING = re.compile(r"\"((?:[^\"\\]|\\.)*)\"|'((?:[^'\\]|\\.)*)'")
_PATTERN = re.compile(r"/((?:[^/\\]|\\.)+)/")
_OPERATOR = re.compile(r"==|!=|>=|<=|>|<")
# Digit groups may use any thousands separator; the parser validates them
_NUMBER = re.compile(r"[+-]?(?:\d(?:[\d.,_']*\d)?|\.\d+)(?:[eE][+-]?\d+)?")
# Inside a list a comma always separates items
_LIST_NUMBER = re.compile(r"[+-]?(?:\d(?:[\d._']*\d)?|\.\d+)(?:[eE][+-]?\d+)?")
_ESCAPE = re.compile(r"\\(.)")

_PUNCTUATION = {
    ":": TokenType.COLON,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
}


def is_comment(line: str) -> bool:
    return line.lstrip().startswith("//")


def tokenize_line(text: str, number: int) -> tuple[Token, ...]:
    """
    Split one line into tokens.

    Raises:
        ParseError: On an unterminated string or an unexpected character
    """
    tokens = []
    pos = 0
    depth = 0

    while pos < len(text):
        match = _WHITESPACE.match(text, pos)
        if match:
            pos = match.end()
            continue

        char = text[pos]
        column = pos + 1

        if char in _PUNCTUATION:
            token_type = _PUNCTUATION[char]
            if token_type is TokenType.LBRACKET:
                depth += 1
            elif token_type is TokenType.RBRACKET:
                depth = max(0, depth - 1)
            tokens.append(Token(token_type, char, number, column))
            pos += 1
            continue

        if char in "\"'":
            match = _STRING.match(text, pos)
            if not match:
                raise ParseError(number, f"unterminated string at column {column}", text)
            body = match.group(1) if match.group(1) is not None else match.group(2)
            tokens.append(Token(TokenType.STRING, _ESCAPE.sub(r"\1", body), number, column))
            pos = match.end()
            continue

        if char == "/":
            match = _PATTERN.match(text, pos)
            if not match:
                raise ParseError(number, f"unterminated pattern at column {column}", text)
            body = match.group(1).replace("\\/", "/")
            tokens.append(Token(TokenType.PATTERN, body, number, column))
            pos = match.end()
            continue

        number_pattern = _LIST_NUMBER if depth else _NUMBER
        match = number_pattern.match(text, pos)
        if match:
            tokens.append(Token(TokenType.NUMBER, match.group(0), number, column))
            pos = match.end()
            continue

        match = _OPERATOR.match(text, pos)
        if match:
            tokens.append(Token(TokenType.OPERATOR, match.group(0), number, column))
            pos = match.end()
            continue

        match = _WORD.match(text, pos)
        if match:
            tokens.append(Token(TokenType.WORD, match.group(0), number, column))
            pos = match.end()
            continue

        raise ParseError(number, f"unexpected character {char!r} at column {column}", text)

    return tuple(tokens)


def tokenize(source: str) -> list[SourceLine]:
    """
    Tokenize rules-file text.

    Args:
        source: Complete rules-file text

    Returns:
        One SourceLine per line that carries tokens (comments and blank lines
        are dropped)
    """
    lines = []
    for number, text in enumerate(source.splitlines(), start=1):
        if not text.strip() or is_comment(text):
            continue
        lines.append(SourceLine(number, text, tokenize_line(text, number)))
    return lines
