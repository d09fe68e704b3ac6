"""Core DSL runtime and configuration loading.

This package turns configuration text into a configuration tree:
- a tokenizer and a recursive-descent parser build a syntax tree;
- an evaluator interprets the tree against nested element builders;
- the top-level builder is finalized into a `RootConfig`.

The primary public entry points are `DSLParser`, `parse` and
`ConfigLoader`, which also loads YAML, JSON and property sources.
"""

from .builder import ElementBuilder
from .evaluator import BlockCallback, Evaluator
from .loader import ConfigLoader, ExecConfig
from .parser import DSLParser, parse

__all__ = (
    'BlockCallback',
    'ConfigLoader',
    'DSLParser',
    'ElementBuilder',
    'Evaluator',
    'ExecConfig',
    'parse',
)
