"""Tests for lifecycle event registration and dispatch."""

from typing import TYPE_CHECKING

import pytest

from embulk_dsl.core import BlockCallback, DSLParser, ElementBuilder
from embulk_dsl.errors import ArityError, MissingBlockError, UndefinedNameError, UnknownEventError
from embulk_dsl.events import EventRegistry, RootConfig

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def test_dispatch_python_callback(mocker: 'MockerFixture') -> None:
    """Forward dispatch arguments to a registered callable."""
    callback = mocker.Mock(return_value='done')

    builder = ElementBuilder().register_on_complete(callback)
    root = RootConfig(element=builder.finalize(), events=builder.events)

    assert root.dispatch_event('complete', 42) == 'done'
    callback.assert_called_once_with(42)


def test_dispatch_captures_result() -> None:
    """Let a callback observe the driver-supplied diff."""
    result = {}

    def on_complete(diff: int) -> None:
        result['diff'] = diff

    root = RootConfig(events=EventRegistry(on_complete=on_complete))
    root.on_complete(42)

    assert result == {'diff': 42}


def test_dispatch_without_callback() -> None:
    """Treat dispatch of an unregistered event as a no-op."""
    root = RootConfig()

    assert root.dispatch_event('start') is None
    assert root.on_start() is None


@pytest.mark.parametrize('name', (
    pytest.param('bogus', id='unknown'),
    pytest.param('on_start', id='slot name'),
    pytest.param('Start', id='case sensitive'),
))
def test_dispatch_unknown_event(name: str) -> None:
    """Reject event names outside the fixed set."""
    with pytest.raises(UnknownEventError, match=rf'^Unknown event {name!r}'):
        RootConfig().dispatch_event(name)


def test_register_unknown_event() -> None:
    """Reject registration for an unknown event name."""
    with pytest.raises(UnknownEventError):
        EventRegistry().register('finish', print)


def test_callback_errors_propagate(mocker: 'MockerFixture') -> None:
    """Propagate errors raised by callbacks unchanged."""
    error = RuntimeError('boom')
    root = RootConfig(events=EventRegistry(on_start=mocker.Mock(side_effect=error)))

    with pytest.raises(RuntimeError, match=r'^boom$') as raised:
        root.dispatch_event('start')

    assert raised.value is error


def test_dsl_callback_binds_parameters(parser: DSLParser) -> None:
    """Interpret a DSL callback body with bound parameters."""
    root = parser.parse('on_complete { |diff| result diff }')

    assert isinstance(root.events.on_complete, BlockCallback)
    assert root.dispatch_event('complete', 42) == {'result': '42'}
    assert root.dispatch_event('complete', {'rows': 10}) == {'result': {'rows': 10}}


def test_dsl_callback_missing_arguments(parser: DSLParser) -> None:
    """Bind missing parameters to None and ignore extra arguments."""
    root = parser.parse('on_complete { |a, b| first a; second b }')

    assert root.dispatch_event('complete', 1) == {'first': '1', 'second': ''}
    assert root.dispatch_event('complete', 1, 2, 3) == {'first': '1', 'second': '2'}


def test_dsl_callback_nested_references(parser: DSLParser) -> None:
    """Resolve references inside literals and nested blocks."""
    root = parser.parse(
        'on_complete { |diff|\n'
        '  report([diff, {value: diff}])\n'
        '  notify("mail") { body diff }\n'
        '}\n',
    )

    assert root.dispatch_event('complete', 7) == {
        'report': [7, {'value': 7}],
        'notify': {'body': '7', 'type': 'mail'},
    }


def test_dsl_callback_is_deferred(parser: DSLParser) -> None:
    """Report unbound names only when the callback runs."""
    root = parser.parse('on_start { x y }')

    with pytest.raises(UndefinedNameError, match=r"^Undefined name 'y'") as error:
        root.dispatch_event('start')

    assert error.value.context['line_num'] == 1
    assert error.value.context['column_num'] == 14


def test_dsl_callback_overwrites(parser: DSLParser) -> None:
    """Keep the last callback registered for an event."""
    root = parser.parse('on_start { a 1 }\non_start { b 2 }')

    assert root.dispatch_event('start') == {'b': '2'}


def test_dsl_callback_nested_registration(parser: DSLParser) -> None:
    """Register callbacks declared inside nested blocks on the root."""
    root = parser.parse('input("file") {\n  on_start { started true }\n}')

    assert root.root_element() == {'in': {'type': 'file'}}
    assert root.dispatch_event('start') == {'started': 'true'}


def test_dsl_callback_registers_on_root(parser: DSLParser) -> None:
    """Register callbacks declared inside a callback body on the root."""
    root = parser.parse(
        'on_start {\n'
        '  started true\n'
        '  on_complete { |diff| finished diff }\n'
        '}\n',
    )

    assert root.events.on_complete is None
    assert root.dispatch_event('start') == {'started': 'true'}
    assert isinstance(root.events.on_complete, BlockCallback)
    assert root.dispatch_event('complete', 3) == {'finished': '3'}


@pytest.mark.parametrize('text, error, message', (
    pytest.param('on_start(1) { }', ArityError, r'^on_start does not accept arguments', id='argument'),
    pytest.param('on_complete', MissingBlockError, r'^on_complete block must be specified', id='no block'),
))
def test_dsl_callback_errors(parser: DSLParser, text: str,
                             error: type[Exception], message: str) -> None:
    """Reject callbacks with arguments or without a body."""
    with pytest.raises(error, match=message):
        parser.parse(text)
