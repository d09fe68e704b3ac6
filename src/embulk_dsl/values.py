"""Core type definitions for configuration values.

This module defines the value model produced by the DSL builder. A value
is either a scalar string, a structured literal (sequence or mapping)
passed through verbatim, or a nested configuration node.

It also provides the scalar stringification rule used when a generic
call stores a single non-structured argument.
"""

from collections.abc import Mapping, Sequence
from typing import Any

#: Scalars are atomic literal values accepted by the DSL.
type Scalar = str | int | float | bool | None

#: Structured values are literal sequences or mappings stored unconverted.
type Structured = Sequence['LiteralValue'] | Mapping[str, 'LiteralValue']

#: Any literal that may appear as a call argument.
type LiteralValue = Scalar | Structured

#: A node is a mapping from unique string keys to configuration values.
type ConfigNode = dict[str, 'ConfigValue']

#: A configuration value stored in a node.
type ConfigValue = str | Structured | ConfigNode

#: A value received from user code or a YAML loader prior to inspection.
type RuntimeValue = Any

MAPPINGS = (dict,)
SCALARS = (str, int, float, bool)
SEQUENCES = (list, tuple)


def is_structured(value: RuntimeValue) -> bool:
    """Check whether a value is stored verbatim by the generic rule.

    Args:
        value: Candidate argument value.

    Returns:
        True for sequences and mappings, otherwise False.
    """
    return isinstance(value, (*SEQUENCES, *MAPPINGS))


def stringify(value: RuntimeValue) -> str:
    """Convert a scalar argument into its stored string form.

    Booleans are rendered in lower case and a missing value becomes an
    empty string, so `true`, `1.5` and `nil` in the source text are stored
    as `'true'`, `'1.5'` and `''` respectively.

    Args:
        value: Scalar value to convert.

    Returns:
        The string representation of the value.
    """
    if value is None:
        return ''

    if isinstance(value, bool):
        return 'true' if value else 'false'

    return str(value)
