"""Base Pydantic models and runtime settings.

This module defines the foundational model classes used by the syntax
tree and the loader, and the settings model resolving parser options
from the environment.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_DEPTH = 64
DEFAULT_DSL_SUFFIXES = ('.rb', '.dsl')


class SchemaModel(BaseModel):
    """Base immutable model for parsed DSL elements.

    Design principles enforced by this model:
        - Immutability: syntax nodes cannot be modified after creation,
          so a parsed program can be interpreted any number of times.
        - Strict schema: unknown or extra fields are rejected.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Unknown or extra fields are ignored, so the surrounding environment
    may contain unrelated variables without breaking resolution.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )


class ParserSettings(SettingsModel):
    """Parser and loader settings resolved from `EMBULK_DSL_*` variables."""

    model_config = SettingsConfigDict(
        env_prefix='EMBULK_DSL_',
    )

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        gt=0,
        title='Maximum nesting depth',
        description=(
            'Maximum nesting of blocks and literals accepted by the parser. '
            'Deeper input is rejected as a syntax error.'
        ),
    )

    dsl_suffixes: tuple[str, ...] = Field(
        default=DEFAULT_DSL_SUFFIXES,
        title='DSL file suffixes',
        description=(
            'File name suffixes loaded as DSL text. '
            'Any other file is loaded as YAML.'
        ),
    )

    log_level: str = Field(
        default='WARNING',
        title='Log level',
        description='Logging level used by the command-line interface.',
    )
