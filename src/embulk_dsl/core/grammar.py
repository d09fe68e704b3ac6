"""Recursive-descent parser producing the DSL syntax tree.

Grammar (informal):

    program   := statement*
    statement := name ( "(" arguments ")" | arguments )? block? ";"?
    block     := "{" ( "|" name ("," name)* "|" )? program "}"
    arguments := value ("," value)* ","?
    value     := string | number | true | false | nil | ":" name
               | sequence | mapping | name
    sequence  := "[" (value ("," value)* ","?)? "]"
    mapping   := "{" (key value ("," key value)* ","?)? "}"
    key       := name ":" | string ":" | string "=>" | ":" name "=>"

Arguments without parentheses must start on the same line as the call
name. A `{` following a call always opens a block, so a mapping can only
be passed inside parentheses. Arity is not checked here.
"""

from typing import TYPE_CHECKING, NoReturn

from embulk_dsl.errors import DSLSyntaxError
from embulk_dsl.models import DEFAULT_MAX_DEPTH

from .lexer import TokenKind
from .syntax import Block, Call, Program, Reference

if TYPE_CHECKING:
    from embulk_dsl.values import RuntimeValue

    from .lexer import Token

#: Tokens that may start a value without parentheses.
VALUE_START = frozenset({
    TokenKind.STRING,
    TokenKind.NUMBER,
    TokenKind.KEYWORD,
    TokenKind.COLON,
    TokenKind.LBRACKET,
    TokenKind.IDENTIFIER,
})


class SyntaxParser:
    """Parser over a token list produced by the tokenizer."""

    def __init__(self, tokens: list['Token'], *,
                 source: str | None = None,
                 filename: str | None = None,
                 max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Initialize the parser.

        Args:
            tokens: Tokens terminated by an EOF token.
            source: Original text, used for error snippets.
            filename: Optional source name used in error messages.
            max_depth: Maximum nesting of blocks and literals.
        """
        self.tokens = tokens
        self.source = source
        self.filename = filename
        self.max_depth = max_depth
        self._index = 0

    def parse(self) -> Program:
        """Parse the whole token stream.

        Returns:
            The program with its top-level calls.

        Raises:
            DSLSyntaxError: If the tokens do not form a valid program.
        """
        calls = self._statements(TokenKind.EOF, depth=0)
        return Program(calls=calls, filename=self.filename)

    @property
    def _peek(self) -> 'Token':
        return self.tokens[self._index]

    def _advance(self) -> 'Token':
        token = self.tokens[self._index]
        if token.kind is not TokenKind.EOF:
            self._index += 1
        return token

    def _accept(self, kind: TokenKind) -> 'Token | None':
        if self._peek.kind is kind:
            return self._advance()
        return None

    def _expect(self, kind: TokenKind, what: str | None = None) -> 'Token':
        if self._peek.kind is not kind:
            self._fail(what or repr(kind.value))
        return self._advance()

    def _fail(self, expected: str, token: 'Token | None' = None) -> NoReturn:
        token = token or self._peek
        raise DSLSyntaxError.at(
            f'Unexpected {token.describe()}, expected {expected}',
            self.source,
            token.line,
            token.column,
            filename=self.filename,
        )

    def _enter(self, depth: int, token: 'Token') -> int:
        depth += 1
        if depth > self.max_depth:
            raise DSLSyntaxError.at(
                f'Nesting is deeper than {self.max_depth} levels',
                self.source,
                token.line,
                token.column,
                filename=self.filename,
            )
        return depth

    def _statements(self, end: TokenKind, depth: int) -> tuple[Call, ...]:
        calls: list[Call] = []
        while True:
            while self._accept(TokenKind.SEMICOLON):
                pass
            if self._peek.kind is end:
                return tuple(calls)
            if self._peek.kind is not TokenKind.IDENTIFIER:
                self._fail('a call name' if end is TokenKind.EOF else f'a call name or {end.value!r}')
            calls.append(self._call(depth))

    def _call(self, depth: int) -> Call:
        name = self._advance()
        args: tuple[RuntimeValue, ...] = ()

        if self._peek.kind is TokenKind.LPAREN and self._peek.line == name.line:
            self._advance()
            args = self._values(TokenKind.RPAREN, depth)
            self._expect(TokenKind.RPAREN)
        elif self._peek.kind in VALUE_START and self._peek.line == name.line:
            args = self._bare_values(depth)

        block = None
        if self._peek.kind is TokenKind.LBRACE:
            block = self._block(depth)

        return Call(
            name=name.text,
            args=args,
            block=block,
            line=name.line,
            column=name.column,
        )

    def _block(self, depth: int) -> Block:
        opening = self._advance()
        depth = self._enter(depth, opening)

        params: list[str] = []
        if self._accept(TokenKind.PIPE):
            while not self._accept(TokenKind.PIPE):
                params.append(self._expect(TokenKind.IDENTIFIER, 'a parameter name').text)
                if not self._accept(TokenKind.COMMA) and self._peek.kind is not TokenKind.PIPE:
                    self._fail("',' or '|'")

        body = self._statements(TokenKind.RBRACE, depth)
        self._expect(TokenKind.RBRACE)

        return Block(
            params=tuple(params),
            body=body,
            line=opening.line,
            column=opening.column,
        )

    def _bare_values(self, depth: int) -> tuple['RuntimeValue', ...]:
        values = [self._value(depth)]
        while self._accept(TokenKind.COMMA):
            values.append(self._value(depth))
        return tuple(values)

    def _values(self, end: TokenKind, depth: int) -> tuple['RuntimeValue', ...]:
        values: list[RuntimeValue] = []
        while self._peek.kind is not end:
            values.append(self._value(depth))
            if not self._accept(TokenKind.COMMA):
                break
        return tuple(values)

    def _value(self, depth: int) -> 'RuntimeValue':
        token = self._peek

        if token.kind in (TokenKind.STRING, TokenKind.NUMBER, TokenKind.KEYWORD):
            return self._advance().value

        if token.kind is TokenKind.COLON:
            self._advance()
            return self._expect(TokenKind.IDENTIFIER, 'a symbol name').text

        if token.kind is TokenKind.IDENTIFIER:
            self._advance()
            return Reference(name=token.text, line=token.line, column=token.column)

        if token.kind is TokenKind.LBRACKET:
            self._advance()
            items = self._values(TokenKind.RBRACKET, self._enter(depth, token))
            self._expect(TokenKind.RBRACKET)
            return list(items)

        if token.kind is TokenKind.LBRACE:
            return self._mapping(self._enter(depth, token))

        self._fail('a value')

    def _mapping(self, depth: int) -> dict[str, 'RuntimeValue']:
        self._advance()
        mapping: dict[str, RuntimeValue] = {}

        while self._peek.kind is not TokenKind.RBRACE:
            key = self._key()
            mapping[key] = self._value(depth)
            if not self._accept(TokenKind.COMMA):
                break

        self._expect(TokenKind.RBRACE)

        return mapping

    def _key(self) -> str:
        token = self._peek

        if token.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
            self._advance()
            self._expect(TokenKind.COLON)
            return token.text

        if token.kind is TokenKind.STRING:
            self._advance()
            if not (self._accept(TokenKind.COLON) or self._accept(TokenKind.ARROW)):
                self._fail("':' or '=>'")
            return str(token.value)

        if token.kind is TokenKind.COLON:
            self._advance()
            name = self._expect(TokenKind.IDENTIFIER, 'a symbol name')
            self._expect(TokenKind.ARROW)
            return name.text

        self._fail('a mapping key')
