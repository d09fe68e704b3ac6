"""CLI utilities for inspecting DSL configuration files.

The commands load a configuration by path (DSL or YAML, chosen by file
suffix) and print the resulting tree, validate it, or list registered
lifecycle callbacks. No pipeline is ever run.
"""

from json import dumps
from logging import basicConfig
from pathlib import Path

from click import Choice, ClickException, Context, argument, echo, group, option, pass_context
from click import Path as PathParam
from yaml import safe_dump

from embulk_dsl.core import ConfigLoader, ExecConfig
from embulk_dsl.errors import DSLError
from embulk_dsl.events import EVENTS
from embulk_dsl.models import ParserSettings

ConfigFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)


@group(help='Command-line utilities for DSL configuration files.')
@option(
    '--log-level',
    type=Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Logging level. Defaults to EMBULK_DSL_LOG_LEVEL or WARNING.',
)
@pass_context
def cli(ctx: Context, log_level: str | None) -> None:
    """Root CLI group configuring logging and the loader."""
    settings = ParserSettings()
    basicConfig(
        level=(log_level or settings.log_level).upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    ctx.obj = ConfigLoader(settings=settings)


def _load(ctx: Context, path: Path) -> ExecConfig:
    """Load a configuration, turning DSL errors into CLI errors."""
    loader: ConfigLoader = ctx.obj
    try:
        return loader.load_path(path)
    except DSLError as error:
        raise ClickException(str(error)) from error


@cli.command(
    name='show',
    help='Print the configuration tree parsed from CONFIG.',
)
@option(
    '-f', '--format', 'output_format',
    type=Choice(['yaml', 'json']),
    default='yaml',
    help='Output format of the tree.',
)
@argument('config', type=ConfigFilepath)
@pass_context
def show_config(ctx: Context, output_format: str, config: Path) -> None:
    """Print the parsed configuration tree."""
    loaded = _load(ctx, config)

    if output_format == 'json':
        echo(dumps(loaded.config, ensure_ascii=False, indent=2))
    else:
        echo(safe_dump(loaded.config, sort_keys=False, allow_unicode=True), nl=False)


@cli.command(
    name='check',
    help='Parse CONFIG and report whether it is valid.',
)
@argument('config', type=ConfigFilepath)
@pass_context
def check_config(ctx: Context, config: Path) -> None:
    """Validate the configuration syntax."""
    _load(ctx, config)
    echo('OK')


@cli.command(
    name='events',
    help='List lifecycle callbacks registered by CONFIG.',
)
@argument('config', type=ConfigFilepath)
@pass_context
def list_events(ctx: Context, config: Path) -> None:
    """Print each event with its registration state."""
    loaded = _load(ctx, config)

    for name in EVENTS:
        callback = loaded.event.events.lookup(name) if loaded.event else None
        echo(f'{name}: {"registered" if callback is not None else "-"}')


if __name__ == '__main__':
    cli()
