"""DSL parser entry point.

This module defines the high-level parser turning configuration text
into a `RootConfig`. Parsing runs in three stages:
- tokenizing the text;
- building the syntax tree with a recursive-descent parser;
- interpreting the tree against a fresh top-level builder.

Any failure aborts the whole parse; no partial tree is returned.
"""

from logging import getLogger
from typing import TYPE_CHECKING

from embulk_dsl.events import RootConfig
from embulk_dsl.models import ParserSettings

from .builder import ElementBuilder
from .evaluator import Evaluator
from .grammar import SyntaxParser
from .lexer import tokenize

if TYPE_CHECKING:
    from io import TextIOBase

    from .syntax import Program

logger = getLogger(__name__)


class DSLParser:
    """Configuration DSL parser.

    The parser is stateless between calls: every `parse` builds a new
    top-level builder and event registry.
    """

    def __init__(self, max_depth: int | None = None,
                 settings: ParserSettings | None = None) -> None:
        """Initialize the parser.

        Args:
            max_depth: Maximum nesting of blocks and literals. Overrides
                the value resolved from settings.
            settings: Settings to use instead of resolving them from
                the environment.
        """
        self.settings = settings or ParserSettings()
        self.max_depth = max_depth if max_depth is not None else self.settings.max_depth

    def parse_program(self, content: 'TextIOBase | str',
                      filename: str | None = None) -> 'Program':
        """Parse text into a syntax tree without interpreting it.

        Args:
            content: DSL text as a string or file-like object.
            filename: Optional source name used in error messages.

        Returns:
            The parsed program.

        Raises:
            DSLSyntaxError: If the text is not valid DSL syntax.
        """
        source = content if isinstance(content, str) else content.read()

        tokens = tokenize(source, filename)
        parser = SyntaxParser(
            tokens,
            source=source,
            filename=filename,
            max_depth=self.max_depth,
        )

        return parser.parse()

    def parse(self, content: 'TextIOBase | str',
              filename: str | None = None) -> RootConfig:
        """Parse and interpret DSL text.

        Args:
            content: DSL text as a string or file-like object.
            filename: Optional source name used in error messages.

        Returns:
            The finalized configuration tree with registered callbacks.

        Raises:
            DSLSyntaxError: If the text is not valid DSL syntax.
            ArityError: If a call has an unsupported number of arguments.
            MissingBlockError: If a call requiring a body has none.
            UndefinedNameError: If a bare name is used outside a callback.
        """
        source = content if isinstance(content, str) else content.read()
        program = self.parse_program(source, filename)

        builder = ElementBuilder()
        Evaluator(source=source, filename=filename).run(program.calls, builder)

        root = RootConfig(element=builder.finalize(), events=builder.events)
        logger.debug(
            'Parsed %s: %d top-level keys',
            filename or '<string>',
            len(root.root_element()),
        )

        return root


def parse(content: 'TextIOBase | str', filename: str | None = None) -> RootConfig:
    """Parse DSL text with default settings.

    Args:
        content: DSL text as a string or file-like object.
        filename: Optional source name used in error messages.

    Returns:
        The finalized configuration tree with registered callbacks.
    """
    return DSLParser().parse(content, filename)
