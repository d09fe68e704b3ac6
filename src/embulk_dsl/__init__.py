"""Configuration DSL interpreter.

The `embulk_dsl` package reads a nested, call-with-optional-block
configuration language and produces a configuration tree together with
a small registry of lifecycle callbacks:

    input("file") {
      path_prefix "data_"
      parser("csv") { charset "UTF-8" }
    }
    output("stdout") {}
    on_complete { |diff| result diff }

Key features:
- an explicit tokenizer, parser and interpreter, never evaluating the
  text as Python code;
- `input`/`output` blocks stored under `in`/`out` with a `type` entry;
- `start`/`complete` events dispatched by an external driver;
- loading of DSL, YAML, JSON and property configuration sources.
"""

from embulk_dsl.core import ConfigLoader, DSLParser, ElementBuilder, ExecConfig, parse
from embulk_dsl.errors import (
    ArityError,
    ConfigLoadError,
    DSLError,
    DSLSyntaxError,
    MissingBlockError,
    UndefinedNameError,
    UnknownEventError,
)
from embulk_dsl.events import EventRegistry, RootConfig

__all__ = (
    'ArityError',
    'ConfigLoadError',
    'ConfigLoader',
    'DSLError',
    'DSLParser',
    'DSLSyntaxError',
    'ElementBuilder',
    'EventRegistry',
    'ExecConfig',
    'MissingBlockError',
    'RootConfig',
    'UndefinedNameError',
    'UnknownEventError',
    'parse',
)
