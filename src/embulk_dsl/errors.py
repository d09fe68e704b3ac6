"""Core exception hierarchy.

This module defines the error types raised while tokenizing, parsing
and interpreting DSL configuration text, while dispatching lifecycle
events, and while loading configuration files.

All errors share a formatter that renders the source location and a
short snippet of the failing element, so that a single `str(error)`
is enough to point the user at the problem.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump

from embulk_dsl.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from typing import Self

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values. Line and column numbers are 1-based.
    """

    #: Name of the source file where the error occurred.
    filename: str | None

    #: Line number in the source text.
    line_num: int | None
    #: Column number in the source text.
    column_num: int | None

    #: Full text of the offending source line.
    source_line: str | None

    #: Element (call, value) associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting DSL-related errors.

    This formatter produces human-readable error messages with optional
    source location and either a caret-marked source line or a YAML
    rendering of the failing element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including filename, line
            and column numbers when available.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename')
        if not filename:
            filename = FORMAT_FILENAME

        message = f'{indent}in "{filename}"'
        if (line_num := context.get('line_num')) is not None:
            message += f', line {line_num}'
            if (column_num := context.get('column_num')) is not None:
                message += f', column {column_num}'
        message += linesep

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing source or element data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        if source_line := context.get('source_line'):
            return cls._make_caret(source_line, context.get('column_num'), indent)

        if (element := context.get('element')) is not None:
            snippet = f'{indent}{SNIPPET_ELLIPSIS}'
            snippet += cls._make_yaml(element, indent)
            snippet += linesep
            return snippet

        return ''

    @classmethod
    def _make_caret(cls, source_line: str, column_num: int | None, indent: str) -> str:
        """Render a source line with a caret under the failing column.

        Args:
            source_line: Text of the offending line.
            column_num: 1-based column of the failure, if known.
            indent: String indentation prefix.

        Returns:
            The indented line followed by a caret line.
        """
        snippet = f'{indent}{source_line.rstrip()}{linesep}'
        if column_num is not None and column_num > 0:
            snippet += f'{indent}{" " * (column_num - 1)}^{linesep}'

        return snippet

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for safe YAML serialization.

        Non-scalar and non-container objects are replaced with
        a placeholder to prevent leaking executable or opaque data.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                key: cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to a YAML-formatted string.

        Args:
            value: Arbitrary value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
            default_flow_style=None,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.

        Args:
            value: Original multi-line string.
            indent: Indentation prefix.

        Returns:
            Indented string.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input.

        Args:
            indent: Indentation as string or number of spaces.

        Returns:
            A string consisting of spaces or the provided string.
        """
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class DSLError(Exception, ErrorFormatter):
    """Base exception for all embulk-dsl errors.

    All custom exceptions raised by the library inherit from this
    class to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location data.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)

    @classmethod
    def at(cls, message: str, source: str | None, line_num: int, column_num: int,
           filename: str | None = None) -> 'Self':
        """Create an error pointing at a position in source text.

        Args:
            message: Human-readable error message.
            source: Full source text, used to extract the offending line.
            line_num: 1-based line number.
            column_num: 1-based column number.
            filename: Optional name of the source file.

        Returns:
            An initialized error with location context.
        """
        return cls(message, context=ErrorContext(
            filename=filename,
            line_num=line_num,
            column_num=column_num,
            source_line=cls._get_source_line(source, line_num),
        ))

    def locate(self, line_num: int, column_num: int, *,
               source: str | None = None,
               filename: str | None = None,
               element: Any = None) -> 'Self':  # noqa: ANN401
        """Attach a source location to an error raised without one.

        Errors that already carry a location are left untouched, so the
        innermost failing call wins when errors cross nested blocks.

        Args:
            line_num: 1-based line number of the failing call.
            column_num: 1-based column number of the failing call.
            source: Full source text, used to extract the offending line.
            filename: Optional name of the source file.
            element: Element rendered as a snippet when no source is known.

        Returns:
            The same error instance.
        """
        if self.context and self.context.get('line_num') is not None:
            return self

        self.context = ErrorContext(
            filename=filename,
            line_num=line_num,
            column_num=column_num,
            source_line=self._get_source_line(source, line_num),
            element=element,
        )

        return self

    @staticmethod
    def _get_source_line(source: str | None, line_num: int) -> str | None:
        if source is None:
            return None

        lines = source.splitlines()
        if 0 < line_num <= len(lines):
            return lines[line_num - 1]

        return None


class DSLSyntaxError(DSLError):
    """Error raised when DSL text cannot be tokenized or parsed.

    This covers unexpected characters, unterminated strings, unexpected
    tokens and nesting deeper than the configured limit.
    """


class ArityError(DSLError):
    """Error raised when a call receives an unsupported number of arguments.

    Generic calls accept zero or one positional argument, `input` and
    `output` require exactly one, lifecycle callbacks accept none.
    """


class MissingBlockError(DSLError):
    """Error raised when a call that requires a nested body has none."""


class UnknownEventError(DSLError):
    """Error raised when dispatching an event outside the fixed set."""


class UndefinedNameError(DSLError):
    """Error raised when a callback body references an unbound name."""


class ConfigLoadError(DSLError):
    """Error raised when a configuration source cannot be loaded.

    This exception wraps I/O and YAML/JSON decoding failures and
    reports sources whose top level is not a mapping.
    """
