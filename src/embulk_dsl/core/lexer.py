"""Tokenizer for the configuration DSL.

The tokenizer turns DSL text into a flat list of tokens with 1-based
line and column positions. Whitespace, newlines and `#` comments are
skipped; statement boundaries are recovered by the parser from token
line numbers.
"""

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from re import ASCII
from re import compile as regexp
from typing import TYPE_CHECKING

from embulk_dsl.errors import DSLSyntaxError
from embulk_dsl.names import IDENTIFIER_PATTERN

if TYPE_CHECKING:
    from embulk_dsl.values import Scalar

logger = getLogger(__name__)

NUMBER_PATTERN = regexp(
    r'-?\d[\d_]*(?P<fraction>\.\d[\d_]*)?(?P<exponent>[eE][+-]?\d+)?',
    flags=ASCII,
)
SPACE_PATTERN = regexp(r'[ \t\r\f\v]+')

#: Escapes decoded inside double-quoted strings. A backslash before any
#: other character is dropped.
ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    's': ' ',
    '0': '\0',
    'a': '\a',
    'b': '\b',
    'e': '\x1b',
    'f': '\f',
    'v': '\v',
    '\n': '',
}

#: Escapes decoded inside single-quoted strings. Any other backslash is
#: kept literally.
RAW_ESCAPES = frozenset(('\\', "'"))

KEYWORDS: dict[str, 'Scalar'] = {
    'true': True,
    'false': False,
    'nil': None,
    'null': None,
}


class TokenKind(StrEnum):
    """Kinds of tokens produced by the tokenizer."""

    IDENTIFIER = 'identifier'
    STRING = 'string'
    NUMBER = 'number'
    KEYWORD = 'keyword'
    LPAREN = '('
    RPAREN = ')'
    LBRACE = '{'
    RBRACE = '}'
    LBRACKET = '['
    RBRACKET = ']'
    COMMA = ','
    COLON = ':'
    SEMICOLON = ';'
    PIPE = '|'
    ARROW = '=>'
    EOF = 'end of input'


PUNCTUATION = {
    kind.value: kind
    for kind in (
        TokenKind.LPAREN, TokenKind.RPAREN,
        TokenKind.LBRACE, TokenKind.RBRACE,
        TokenKind.LBRACKET, TokenKind.RBRACKET,
        TokenKind.COMMA, TokenKind.COLON,
        TokenKind.SEMICOLON, TokenKind.PIPE,
    )
}


@dataclass(frozen=True, slots=True)
class Token:
    """Single token with its literal value and position."""

    kind: TokenKind
    text: str
    value: 'Scalar'
    line: int
    column: int

    def describe(self) -> str:
        """Human-readable token description for error messages."""
        if self.kind is TokenKind.EOF:
            return str(self.kind)

        return f'{self.kind.value} {self.text!r}'


class Tokenizer:
    """Single-pass tokenizer over DSL source text."""

    def __init__(self, source: str, filename: str | None = None) -> None:
        self.source = source
        self.filename = filename
        self._position = 0
        self._line = 1
        self._line_start = 0

    @property
    def column(self) -> int:
        return self._position - self._line_start + 1

    def error(self, message: str, line: int | None = None,
              column: int | None = None) -> DSLSyntaxError:
        """Build a syntax error at the current or given position."""
        return DSLSyntaxError.at(
            message,
            self.source,
            line if line is not None else self._line,
            column if column is not None else self.column,
            filename=self.filename,
        )

    def tokenize(self) -> list[Token]:
        """Tokenize the whole source.

        Returns:
            Tokens in source order, terminated by an EOF token.

        Raises:
            DSLSyntaxError: On an unexpected character or an
                unterminated string literal.
        """
        tokens: list[Token] = []

        while (token := self._next()) is not None:
            tokens.append(token)

        tokens.append(Token(TokenKind.EOF, '', None, self._line, self.column))
        logger.debug('Tokenized %s into %d tokens', self.filename or '<string>', len(tokens))

        return tokens

    def _skip(self) -> None:
        """Skip whitespace, newlines and comments."""
        source = self.source
        while self._position < len(source):
            char = source[self._position]
            if char == '\n':
                self._position += 1
                self._line += 1
                self._line_start = self._position
            elif char == '#':
                end = source.find('\n', self._position)
                self._position = len(source) if end < 0 else end
            elif match := SPACE_PATTERN.match(source, self._position):
                self._position = match.end()
            else:
                return

    def _next(self) -> Token | None:
        self._skip()
        if self._position >= len(self.source):
            return None

        source = self.source
        start, line, column = self._position, self._line, self.column
        char = source[start]

        if char in ('"', "'"):
            return self._string(char)

        if source.startswith('=>', start):
            self._position += 2
            return Token(TokenKind.ARROW, '=>', None, line, column)

        if char in PUNCTUATION:
            self._position += 1
            return Token(PUNCTUATION[char], char, None, line, column)

        if match := NUMBER_PATTERN.match(source, start):
            text = match.group()
            self._position = match.end()
            digits = text.replace('_', '')
            value: Scalar = int(digits)
            if match.group('fraction') or match.group('exponent'):
                value = float(digits)
            return Token(TokenKind.NUMBER, text, value, line, column)

        if match := IDENTIFIER_PATTERN.match(source, start):
            text = match.group()
            self._position = match.end()
            if text in KEYWORDS:
                return Token(TokenKind.KEYWORD, text, KEYWORDS[text], line, column)
            return Token(TokenKind.IDENTIFIER, text, text, line, column)

        raise self.error(f'Unexpected character {char!r}')

    def _string(self, quote: str) -> Token:
        """Read a quoted string literal starting at the current position."""
        source = self.source
        line, column = self._line, self.column
        start = self._position
        self._position += 1

        chunks: list[str] = []
        while self._position < len(source):
            char = source[self._position]
            if char == quote:
                self._position += 1
                return Token(
                    TokenKind.STRING,
                    source[start:self._position],
                    ''.join(chunks),
                    line,
                    column,
                )
            if char == '\\' and self._position + 1 < len(source):
                escaped = source[self._position + 1]
                chunks.append(self._unescape(quote, escaped))
                self._position += 2
                if escaped == '\n':
                    self._line += 1
                    self._line_start = self._position
                continue
            if char == '\n':
                self._line += 1
                self._line_start = self._position + 1
            chunks.append(char)
            self._position += 1

        raise self.error('Unterminated string literal', line, column)

    @staticmethod
    def _unescape(quote: str, escaped: str) -> str:
        """Decode the character following a backslash."""
        if quote == "'":
            return escaped if escaped in RAW_ESCAPES else f'\\{escaped}'

        return ESCAPES.get(escaped, escaped)


def tokenize(source: str, filename: str | None = None) -> list[Token]:
    """Tokenize DSL source text.

    Args:
        source: DSL text.
        filename: Optional source name used in error messages.

    Returns:
        Tokens in source order, terminated by an EOF token.

    Raises:
        DSLSyntaxError: If the text contains invalid tokens.
    """
    return Tokenizer(source, filename).tokenize()
