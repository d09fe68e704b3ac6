"""Scoped accumulator of configuration entries.

An `ElementBuilder` collects the key/value entries of one nesting level.
Nested bodies are built by child builders and folded into the parent as
configuration nodes. All builders of one tree share a single event
registry, so lifecycle callbacks may be registered at any depth.

The builder is usable directly from Python, with body functions taking
the child builder:

    builder = ElementBuilder()
    builder.define_input('file', body=lambda b: b.set_scalar('path_prefix', 'data_'))
    builder.finalize()  # {'in': {'path_prefix': 'data_', 'type': 'file'}}
"""

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

from embulk_dsl.errors import ArityError, MissingBlockError
from embulk_dsl.events import COMPLETE, START, EventRegistry
from embulk_dsl.names import INPUT, INPUT_KEY, OUTPUT, OUTPUT_KEY, TYPE_KEY
from embulk_dsl.values import is_structured, stringify

if TYPE_CHECKING:
    from typing import Self

    from embulk_dsl.events import Callback
    from embulk_dsl.values import ConfigNode, RuntimeValue, Structured

logger = getLogger(__name__)

#: Body of a nested block, run against a fresh child builder.
type BodyFunction = Callable[['ElementBuilder'], Any]


class ElementBuilder:
    """Mutable accumulator for one nesting level of the configuration.

    A builder is open until `finalize` returns its node; it is not
    reused afterward. Writing the same key twice keeps the last value.
    """

    def __init__(self, events: EventRegistry | None = None) -> None:
        """Initialize an empty builder scope.

        Args:
            events: Registry shared with the enclosing scope. A new empty
                registry is created for a top-level builder.
        """
        self.events = events if events is not None else EventRegistry()
        self._element: ConfigNode = {}

    def child(self) -> 'Self':
        """Create a child scope sharing this scope's event registry."""
        return type(self)(self.events)

    def set_scalar(self, name: str, value: 'RuntimeValue') -> 'Self':
        """Store the string form of a scalar under a key."""
        self._element[name] = stringify(value)
        return self

    def set_structured(self, name: str, value: 'Structured') -> 'Self':
        """Store a sequence or mapping verbatim under a key.

        Nested contents are not interpreted or converted.
        """
        self._element[name] = value
        return self

    def define_block(self, name: str, type_arg: 'RuntimeValue',
                     body: BodyFunction | None) -> 'Self':
        """Build a nested node with a child scope and store it under a key.

        Args:
            name: Key under which the nested node is stored.
            type_arg: Optional value merged as the node `type` entry,
                overwriting a `type` set by the body itself.
            body: Function run against the child builder.

        Returns:
            This builder.

        Raises:
            MissingBlockError: If no body function is given.
        """
        if body is None:
            raise MissingBlockError(f'{name} block must be specified')

        child = self.child()
        body(child)
        self._element[name] = child.finalize()

        if type_arg is not None:
            self._element[name][TYPE_KEY] = type_arg

        return self

    def define_input(self, *args: 'RuntimeValue', body: BodyFunction | None = None) -> 'Self':
        """Define the `in` node; exactly one type argument is required."""
        self._require_one(INPUT, args)
        return self.define_block(INPUT_KEY, args[0], body)

    def define_output(self, *args: 'RuntimeValue', body: BodyFunction | None = None) -> 'Self':
        """Define the `out` node; exactly one type argument is required."""
        self._require_one(OUTPUT, args)
        return self.define_block(OUTPUT_KEY, args[0], body)

    def register_on_start(self, callback: 'Callback') -> 'Self':
        """Register the `start` lifecycle callback."""
        self.events.register(START, callback)
        return self

    def register_on_complete(self, callback: 'Callback') -> 'Self':
        """Register the `complete` lifecycle callback."""
        self.events.register(COMPLETE, callback)
        return self

    def dispatch(self, name: str, *args: 'RuntimeValue',
                 body: BodyFunction | None = None) -> 'Self':
        """Apply the generic rule to a call with a non-reserved name.

        With a body, the call defines a nested node whose `type` is the
        single argument, if given. Without a body, a sequence or mapping
        argument is stored verbatim and anything else is stringified.

        Args:
            name: Call name, used as the key.
            *args: Positional arguments; at most one is allowed.
            body: Optional nested body function.

        Returns:
            This builder.

        Raises:
            ArityError: If more than one argument is given.
        """
        if len(args) > 1:
            raise ArityError('only one argument allowed')

        value = args[0] if args else None

        if body is not None:
            return self.define_block(name, value, body)

        if is_structured(value):
            return self.set_structured(name, value)

        return self.set_scalar(name, value)

    def finalize(self) -> 'ConfigNode':
        """Return the accumulated node."""
        logger.debug('Finalized scope with %d entries', len(self._element))
        return self._element

    @staticmethod
    def _require_one(name: str, args: tuple['RuntimeValue', ...]) -> None:
        if len(args) != 1:
            raise ArityError(f'{name} block requires one argument')
