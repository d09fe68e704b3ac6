"""Abstract syntax tree of the configuration DSL.

Nodes are immutable Pydantic models. A program is a sequence of calls;
each call has a name, positional arguments and an optional block whose
body is again a sequence of calls.
"""

from pydantic import Field

from embulk_dsl.models import SchemaModel
from embulk_dsl.names import Identifier  # noqa: TC001
from embulk_dsl.values import RuntimeValue  # noqa: TC001


class Node(SchemaModel):
    """Base node with a 1-based source position."""

    line: int = Field(default=1, ge=1, title='Line')
    column: int = Field(default=1, ge=1, title='Column')


class Reference(Node):
    """Bare identifier in argument position.

    References resolve to bound callback parameters and are only
    meaningful inside a callback body.
    """

    name: Identifier


class Block(Node):
    """Nested body of a call, with optional callback parameters."""

    params: tuple[Identifier, ...] = Field(
        default=(),
        title='Block parameters',
        description='Names declared as `|a, b|` at the start of the block.',
    )

    body: tuple['Call', ...] = Field(
        default=(),
        title='Block body',
    )


class Call(Node):
    """Single `name(args) { body }` expression."""

    name: Identifier

    args: tuple[RuntimeValue, ...] = Field(
        default=(),
        title='Positional arguments',
        description=(
            'Literal values (strings, numbers, booleans, sequences, '
            'mappings) or references, in source order.'
        ),
    )

    block: Block | None = Field(
        default=None,
        title='Nested block',
    )

    def describe(self) -> dict[str, RuntimeValue]:
        """Render the call as a plain mapping for error snippets."""
        args = [
            f'<{arg.name}>' if isinstance(arg, Reference) else arg
            for arg in self.args
        ]
        element: dict[str, RuntimeValue] = {'call': self.name, 'args': args}
        if self.block is not None:
            element['block'] = f'<{len(self.block.body)} calls>'

        return element


class Program(SchemaModel):
    """Top-level sequence of calls parsed from one source."""

    calls: tuple[Call, ...] = ()

    filename: str | None = None


Block.model_rebuild()
