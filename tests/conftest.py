"""Tests configurations and fixtures."""

from os import environ
from typing import TYPE_CHECKING

import pytest

from embulk_dsl.core import DSLParser
from embulk_dsl.models import ParserSettings

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> 'Iterator[None]':
    """Remove `EMBULK_DSL_*` variables so settings resolve to defaults."""
    for name in list(environ):
        if name.startswith('EMBULK_DSL_'):
            monkeypatch.delenv(name)

    yield


@pytest.fixture
def settings() -> ParserSettings:
    """Provide default parser settings."""
    return ParserSettings()


@pytest.fixture
def parser(settings: ParserSettings) -> DSLParser:
    """Provide a parser built from default settings."""
    return DSLParser(settings=settings)
