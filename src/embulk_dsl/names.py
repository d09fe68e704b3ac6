"""DSL names primitive types and validation rules.

This module defines the identifier pattern shared by the tokenizer and
the syntax tree, and the reserved names that receive special handling.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Base pattern for all DSL identifiers.
#: Identifiers start with a letter or underscore and may contain letters,
#: digits, or underscores. A trailing `?` or `!` is accepted as in Ruby.
_NAME_PATTERN = r'[a-zA-Z_]\w*[?!]?'

#: Compiled pattern matching an identifier at a position.
IDENTIFIER_PATTERN = regexp(_NAME_PATTERN, flags=ASCII)

INPUT = 'input'
OUTPUT = 'output'
ON_START = 'on_start'
ON_COMPLETE = 'on_complete'

#: Keys under which `input` and `output` bodies are stored.
INPUT_KEY = 'in'
OUTPUT_KEY = 'out'

#: Key merged into a block node when a type argument is given.
TYPE_KEY = 'type'

Identifier = Annotated[
    str, Field(
        pattern=rf'^{_NAME_PATTERN}$',
        title='Identifier',
        description=(
            'Name of a call or a callback parameter. '
            'Identifiers are limited to ASCII letters, digits, and underscores.'
        ),
        examples=[
            'input',
            'path_prefix',
        ],
    ),
]
