"""Interpreter walking the DSL syntax tree against builder scopes.

Calls are dispatched through a table of reserved handlers, with the
generic rule applied to every other name. Nested blocks are turned into
body functions evaluated against the child builder; nothing in the text
is ever executed as Python code.

Lifecycle callbacks written in the text are kept as `BlockCallback`
objects and interpreted only when the event is dispatched.
"""

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

from embulk_dsl.errors import ArityError, DSLError, MissingBlockError, UndefinedNameError
from embulk_dsl.names import INPUT, ON_COMPLETE, ON_START, OUTPUT
from embulk_dsl.values import MAPPINGS, SEQUENCES

from .builder import ElementBuilder
from .syntax import Reference

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from embulk_dsl.events import EventRegistry
    from embulk_dsl.values import ConfigNode, RuntimeValue

    from .builder import BodyFunction
    from .syntax import Block, Call

logger = getLogger(__name__)

#: Names bound inside a callback body, or None outside callbacks.
type Scope = Mapping[str, RuntimeValue] | None

type Handler = Callable[['Call', ElementBuilder, Scope], Any]


class BlockCallback:
    """Lifecycle callback defined by a block in the DSL text.

    When invoked, positional arguments are bound to the block parameters
    (missing ones are bound to None, extra ones are ignored) and the body
    is interpreted against a fresh builder. The resulting node is
    returned to the dispatcher.

    The fresh builder shares the event registry of the tree the callback
    was declared in, so `on_start`/`on_complete` inside the body replace
    the registered callbacks of that tree.
    """

    def __init__(self, name: str, block: 'Block', evaluator: 'Evaluator',
                 scope: Scope = None, events: 'EventRegistry | None' = None) -> None:
        self.name = name
        self.block = block
        self.evaluator = evaluator
        self.scope = scope
        self.events = events

    def __repr__(self) -> str:
        params = ', '.join(self.block.params)
        return f'<{type(self).__name__} {self.name} |{params}|>'

    def __call__(self, *args: 'RuntimeValue') -> 'ConfigNode':
        """Interpret the block body with bound parameters."""
        bound = dict(self.scope or {})
        for position, param in enumerate(self.block.params):
            bound[param] = args[position] if position < len(args) else None

        builder = ElementBuilder(self.events)
        self.evaluator.run(self.block.body, builder, bound)

        return builder.finalize()


class Evaluator:
    """Tree-walking interpreter applying calls to builder scopes."""

    def __init__(self, *, source: str | None = None,
                 filename: str | None = None) -> None:
        """Initialize the interpreter.

        Args:
            source: Original text, used for error snippets.
            filename: Optional source name used in error messages.
        """
        self.source = source
        self.filename = filename

        self.handlers: dict[str, Handler] = {
            INPUT: self._input,
            OUTPUT: self._output,
            ON_START: self._on_start,
            ON_COMPLETE: self._on_complete,
        }

    def run(self, calls: 'Iterable[Call]', builder: ElementBuilder,
            scope: Scope = None) -> ElementBuilder:
        """Evaluate calls in order against a builder.

        Args:
            calls: Calls of one program or block body.
            builder: Open builder receiving the entries.
            scope: Names bound by an enclosing callback, if any.

        Returns:
            The same builder.

        Raises:
            DSLError: On any arity, block or name violation, located at
                the innermost failing call.
        """
        for call in calls:
            self.evaluate(call, builder, scope)

        return builder

    def evaluate(self, call: 'Call', builder: ElementBuilder, scope: Scope = None) -> None:
        """Evaluate a single call."""
        handler = self.handlers.get(call.name, self._generic)

        try:
            handler(call, builder, scope)
        except DSLError as error:
            error.locate(
                call.line,
                call.column,
                source=self.source,
                filename=self.filename,
                element=call.describe(),
            )
            raise

    def resolve(self, value: 'RuntimeValue', scope: Scope) -> 'RuntimeValue':
        """Replace references inside an argument with bound values.

        Raises:
            UndefinedNameError: If a reference is not bound in scope.
        """
        if isinstance(value, Reference):
            if scope is None or value.name not in scope:
                raise UndefinedNameError.at(
                    f'Undefined name {value.name!r}',
                    self.source,
                    value.line,
                    value.column,
                    filename=self.filename,
                )
            return scope[value.name]

        if isinstance(value, MAPPINGS):
            return {
                key: self.resolve(item, scope)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                self.resolve(item, scope)
                for item in value
            ]

        return value

    def _args(self, call: 'Call', scope: Scope) -> list['RuntimeValue']:
        return [self.resolve(arg, scope) for arg in call.args]

    def _body(self, call: 'Call', scope: Scope) -> 'BodyFunction | None':
        if call.block is None:
            return None

        body = call.block.body

        def run_body(child: ElementBuilder) -> ElementBuilder:
            """Evaluate the block body against a child builder."""
            return self.run(body, child, scope)

        return run_body

    def _generic(self, call: 'Call', builder: ElementBuilder, scope: Scope) -> None:
        builder.dispatch(call.name, *self._args(call, scope), body=self._body(call, scope))

    def _input(self, call: 'Call', builder: ElementBuilder, scope: Scope) -> None:
        builder.define_input(*self._args(call, scope), body=self._body(call, scope))

    def _output(self, call: 'Call', builder: ElementBuilder, scope: Scope) -> None:
        builder.define_output(*self._args(call, scope), body=self._body(call, scope))

    def _on_start(self, call: 'Call', builder: ElementBuilder, scope: Scope) -> None:
        builder.register_on_start(self._callback(call, builder, scope))

    def _on_complete(self, call: 'Call', builder: ElementBuilder, scope: Scope) -> None:
        builder.register_on_complete(self._callback(call, builder, scope))

    def _callback(self, call: 'Call', builder: ElementBuilder, scope: Scope) -> BlockCallback:
        if call.args:
            raise ArityError(f'{call.name} does not accept arguments')

        if call.block is None:
            raise MissingBlockError(f'{call.name} block must be specified')

        logger.debug('Registering %s callback with params %s', call.name, call.block.params)

        return BlockCallback(call.name, call.block, self, scope, builder.events)
