"""Tests for configuration loading from files, strings and properties."""

from typing import TYPE_CHECKING

import pytest

from embulk_dsl.core import ConfigLoader
from embulk_dsl.errors import ArityError, ConfigLoadError
from embulk_dsl.models import ParserSettings

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem

DSL_CONTENT = (
    'input("file") { path_prefix "data_" }\n'
    'output("stdout") {}\n'
    'on_complete { |diff| result diff }\n'
)

YAML_CONTENT = (
    'in:\n'
    '  type: file\n'
    '  path_prefix: data_\n'
    'out:\n'
    '  type: stdout\n'
)


@pytest.mark.parametrize('filename', (
    pytest.param('job.rb', id='rb'),
    pytest.param('job.dsl', id='dsl'),
))
def test_load_dsl_path(fs: 'FakeFilesystem', filename: str) -> None:
    """Load DSL files with their lifecycle callbacks."""
    fs.create_file(filename, contents=DSL_CONTENT)

    loaded = ConfigLoader().load_path(filename)

    assert loaded.config == {
        'in': {'path_prefix': 'data_', 'type': 'file'},
        'out': {'type': 'stdout'},
    }
    assert loaded.event is not None
    assert loaded.event.on_complete(3) == {'result': '3'}


@pytest.mark.parametrize('filename', (
    pytest.param('job.yml', id='yml'),
    pytest.param('job.yaml', id='yaml'),
))
def test_load_yaml_path(fs: 'FakeFilesystem', filename: str) -> None:
    """Load YAML files without lifecycle callbacks."""
    fs.create_file(filename, contents=YAML_CONTENT)

    loaded = ConfigLoader().load_path(filename)

    assert loaded.config == {
        'in': {'type': 'file', 'path_prefix': 'data_'},
        'out': {'type': 'stdout'},
    }
    assert loaded.event is None


def test_custom_dsl_suffixes(fs: 'FakeFilesystem') -> None:
    """Choose DSL files by configured suffixes."""
    fs.create_file('job.embulk', contents='foo "bar"')
    fs.create_file('job.rb', contents='foo: bar\n')

    loader = ConfigLoader(settings=ParserSettings(dsl_suffixes=('.embulk',)))

    assert loader.load_path('job.embulk').config == {'foo': 'bar'}
    assert loader.load_path('job.rb').config == {'foo': 'bar'}
    assert loader.load_path('job.rb').event is None


def test_dsl_errors_propagate(fs: 'FakeFilesystem') -> None:
    """Report DSL errors with the file name."""
    fs.create_file('job.rb', contents='foo 1\nbar(1, 2)\n')

    with pytest.raises(ArityError) as error:
        ConfigLoader().load_path('job.rb')

    assert error.value.context['filename'] == 'job.rb'
    assert error.value.context['line_num'] == 2


def test_missing_file(fs: 'FakeFilesystem') -> None:
    """Wrap read failures into load errors."""
    with pytest.raises(ConfigLoadError, match=r"^Can not read config file 'missing.yml'") as error:
        ConfigLoader().load_path('missing.yml')

    assert isinstance(error.value.__cause__, OSError)


@pytest.mark.parametrize('content, message', (
    pytest.param('- a\n- b\n', r'^Expected a mapping at the top level', id='sequence'),
    pytest.param('', r'^Expected a mapping at the top level', id='empty'),
    pytest.param('a: [\n', r'^Invalid YAML', id='malformed'),
))
def test_invalid_yaml(fs: 'FakeFilesystem', content: str, message: str) -> None:
    """Reject YAML files without a top-level mapping."""
    fs.create_file('job.yml', contents=content)

    with pytest.raises(ConfigLoadError, match=message):
        ConfigLoader().from_yaml_file('job.yml')


def test_from_json() -> None:
    """Load a configuration tree from JSON text."""
    assert ConfigLoader().from_json('{"in": {"type": "file"}}') == {'in': {'type': 'file'}}


@pytest.mark.parametrize('content, message', (
    pytest.param('[1]', r"^Expected a mapping at the top level of '<json>', got list", id='array'),
    pytest.param('{', r'^Invalid JSON', id='malformed'),
))
def test_invalid_json(content: str, message: str) -> None:
    """Reject JSON text without a top-level object."""
    with pytest.raises(ConfigLoadError, match=message):
        ConfigLoader().from_json(content)


def test_from_properties() -> None:
    """Parse prefixed property values as YAML literals."""
    props = {
        'embulk.log_level': 'debug',
        'embulk.threads': '4',
        'embulk.guess_plugins': '[csv, json]',
        'java.version': '21',
    }

    assert ConfigLoader().from_properties(props, 'embulk.') == {
        'log_level': 'debug',
        'threads': 4,
        'guess_plugins': ['csv', 'json'],
    }


def test_from_properties_invalid() -> None:
    """Reject property values that are not YAML literals."""
    with pytest.raises(ConfigLoadError, match=r"^Invalid YAML literal in property 'embulk.x'"):
        ConfigLoader().from_properties({'embulk.x': '[a'}, 'embulk.')


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Resolve settings from `EMBULK_DSL_*` variables."""
    monkeypatch.setenv('EMBULK_DSL_MAX_DEPTH', '3')
    monkeypatch.setenv('EMBULK_DSL_DSL_SUFFIXES', '[".conf"]')

    settings = ParserSettings()

    assert settings.max_depth == 3
    assert settings.dsl_suffixes == ('.conf',)
    assert ConfigLoader(settings=settings).parser.max_depth == 3
