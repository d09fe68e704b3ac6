"""Lifecycle event registry and the parsed root configuration.

The registry holds one optional callback per fixed event name. The root
configuration pairs it with the finalized configuration tree and lets an
external driver dispatch events by name once parsing has completed.
"""

from collections.abc import Callable  # noqa: TC003
from logging import getLogger
from typing import Any

from pydantic import ConfigDict, Field

from embulk_dsl.errors import UnknownEventError
from embulk_dsl.models import SchemaModel
from embulk_dsl.values import ConfigNode, RuntimeValue  # noqa: TC001

logger = getLogger(__name__)

START = 'start'
COMPLETE = 'complete'

#: Closed set of event names accepted by dispatch.
EVENTS = (START, COMPLETE)

type Callback = Callable[..., Any]


class EventRegistry(SchemaModel):
    """Fixed table of optional lifecycle callbacks.

    Exactly one slot exists per event name. Registering a callback for
    a slot that is already set replaces the previous callback.
    """

    model_config = ConfigDict(
        frozen=False,
    )

    on_start: Callback | None = Field(
        default=None,
        title='Start callback',
        description='Invoked once before processing begins.',
    )

    on_complete: Callback | None = Field(
        default=None,
        title='Complete callback',
        description='Invoked once after processing ends with the result diff.',
    )

    @staticmethod
    def slot(name: str) -> str:
        """Map an event name to its slot attribute.

        Args:
            name: Event name, one of `EVENTS`.

        Returns:
            The slot attribute name (`on_<name>`).

        Raises:
            UnknownEventError: If the name is not a known event.
        """
        if name not in EVENTS:
            raise UnknownEventError(
                f'Unknown event {name!r}, expected one of: {", ".join(EVENTS)}',
            )

        return f'on_{name}'

    def register(self, name: str, callback: Callback) -> None:
        """Store a callback under an event slot, replacing any previous one."""
        slot = self.slot(name)
        if getattr(self, slot) is not None:
            logger.debug('Replacing callback for event %r', name)
        setattr(self, slot, callback)

    def lookup(self, name: str) -> Callback | None:
        """Return the callback registered for an event, if any."""
        return getattr(self, self.slot(name))


class RootConfig(SchemaModel):
    """Finalized configuration tree with its lifecycle callbacks.

    Both parts are fixed at construction. The tree is never mutated by
    this object; callbacks are invoked only through `dispatch_event`.
    """

    element: dict[str, Any] = Field(
        default_factory=dict,
        title='Configuration tree',
    )

    events: EventRegistry = Field(
        default_factory=EventRegistry,
        title='Lifecycle callbacks',
    )

    def root_element(self) -> ConfigNode:
        """Return the top-level configuration node."""
        return self.element

    def dispatch_event(self, name: str, *args: RuntimeValue) -> RuntimeValue:
        """Invoke the callback registered for an event.

        Dispatching an event with no registered callback is a no-op.
        Errors raised by the callback propagate unchanged.

        Args:
            name: Event name, `start` or `complete`.
            *args: Positional arguments forwarded to the callback.

        Returns:
            The callback result, or None when nothing is registered.

        Raises:
            UnknownEventError: If the name is not a known event.
        """
        callback = self.events.lookup(name)
        if callback is None:
            logger.debug('No callback registered for event %r', name)
            return None

        logger.info('Run event: %r', name)

        return callback(*args)

    def on_start(self) -> RuntimeValue:
        """Dispatch the `start` event."""
        return self.dispatch_event(START)

    def on_complete(self, diff: RuntimeValue) -> RuntimeValue:
        """Dispatch the `complete` event with the driver result diff."""
        return self.dispatch_event(COMPLETE, diff)
