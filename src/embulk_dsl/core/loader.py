"""Configuration loading from files, strings and properties.

This module loads a configuration tree from DSL text, YAML files, JSON
strings or prefixed property mappings. Only DSL sources can register
lifecycle callbacks; other sources produce a configuration without
events.
"""

from json import JSONDecodeError, loads
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import Field
from yaml import YAMLError, safe_load

from embulk_dsl.errors import ConfigLoadError
from embulk_dsl.events import RootConfig  # noqa: TC001
from embulk_dsl.models import ParserSettings, SchemaModel

from .parser import DSLParser

if TYPE_CHECKING:
    from collections.abc import Mapping

    from embulk_dsl.values import ConfigNode, RuntimeValue

logger = getLogger(__name__)


class ExecConfig(SchemaModel):
    """Loaded configuration with its optional lifecycle events."""

    config: dict[str, Any] = Field(
        default_factory=dict,
        title='Configuration tree',
    )

    event: RootConfig | None = Field(
        default=None,
        title='Lifecycle events',
        description='Present only for configurations loaded from DSL text.',
    )


class ConfigLoader:
    """Loader resolving configuration sources into trees."""

    def __init__(self, parser: DSLParser | None = None,
                 settings: ParserSettings | None = None) -> None:
        """Initialize the loader.

        Args:
            parser: DSL parser to use. A parser built from settings is
                created when omitted.
            settings: Settings to use instead of resolving them from
                the environment.
        """
        self.settings = settings or ParserSettings()
        self.parser = parser or DSLParser(settings=self.settings)

    def from_dsl(self, content: str, filename: str | None = None) -> ExecConfig:
        """Load a configuration from DSL text.

        Raises:
            DSLError: If the text cannot be parsed.
        """
        root = self.parser.parse(content, filename)
        return ExecConfig(config=root.root_element(), event=root)

    def from_dsl_file(self, path: Path | str) -> ExecConfig:
        """Load a configuration from a UTF-8 DSL file.

        Raises:
            ConfigLoadError: If the file cannot be read.
            DSLError: If the file content cannot be parsed.
        """
        path = Path(path)
        content = self._read(path)
        logger.info('Loading DSL config %s', path)

        return self.from_dsl(content, str(path))

    def from_yaml_file(self, path: Path | str) -> ExecConfig:
        """Load a configuration from a YAML file.

        Raises:
            ConfigLoadError: If the file cannot be read, is not valid YAML
                or does not hold a mapping.
        """
        path = Path(path)
        content = self._read(path)
        logger.info('Loading YAML config %s', path)

        try:
            data = safe_load(content)
        except YAMLError as base:
            raise ConfigLoadError(f'Invalid YAML in {str(path)!r}') from base

        return ExecConfig(config=self._ensure_mapping(data, str(path)))

    def from_json(self, content: str) -> 'ConfigNode':
        """Load a configuration tree from a JSON string.

        Raises:
            ConfigLoadError: If the string is not valid JSON or does not
                hold an object.
        """
        try:
            data = loads(content)
        except JSONDecodeError as base:
            raise ConfigLoadError(f'Invalid JSON: {base.msg}') from base

        return self._ensure_mapping(data, '<json>')

    def from_properties(self, props: 'Mapping[str, str]', prefix: str) -> 'ConfigNode':
        """Load a configuration tree from prefixed properties.

        Each property whose key starts with `prefix` becomes an entry
        named after the rest of the key; its value is parsed as a YAML
        literal, so `'1'` becomes `1` and `'[a, b]'` becomes a list.

        Args:
            props: Property mapping, such as environment variables.
            prefix: Key prefix selecting the properties to load.

        Returns:
            The configuration tree.

        Raises:
            ConfigLoadError: If a value is not a valid YAML literal.
        """
        config: ConfigNode = {}

        for key, value in props.items():
            if not key.startswith(prefix):
                continue
            name = key[len(prefix):]
            try:
                config[name] = safe_load(value)
            except YAMLError as base:
                raise ConfigLoadError(f'Invalid YAML literal in property {key!r}') from base

        return config

    def load_path(self, path: Path | str) -> ExecConfig:
        """Load a configuration file, choosing the format by suffix.

        Files whose suffix is one of the configured DSL suffixes are
        parsed as DSL text; anything else is loaded as YAML.
        """
        path = Path(path)
        if path.suffix in self.settings.dsl_suffixes:
            return self.from_dsl_file(path)

        return self.from_yaml_file(path)

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding='utf-8')
        except OSError as base:
            raise ConfigLoadError(f'Can not read config file {str(path)!r}') from base

    @staticmethod
    def _ensure_mapping(data: 'RuntimeValue', source: str) -> 'ConfigNode':
        if not isinstance(data, dict):
            raise ConfigLoadError(
                f'Expected a mapping at the top level of {source!r}, '
                f'got {type(data).__name__}',
            )

        return data
