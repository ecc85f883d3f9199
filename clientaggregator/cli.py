import functools
import logging
from typing import Any, Callable

import click

from clientaggregator._cogs.helpers import loggers
from clientaggregator._cogs.structs import references
from clientaggregator._core import tables

logger = logging.getLogger(__name__)


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='plain')
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.PLAIN,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet, log_format=log_format)
        return fn(*args, **kwargs)

    return wrapper


def _load(path: str) -> tables.RoutingTable:
    try:
        return tables.load_table(path)
    except ValueError as e:
        raise click.ClickException(f"Malformed routing table {path}: {e}") from e


@click.version_option(prog_name='clientaggregator')
@click.group(name='clientaggregator', context_settings=dict(
    auto_envvar_prefix='CLIENTAGGREGATOR',
))
def main() -> None:
    pass


@main.command()
@logging_options
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def show(path: str) -> None:
    """ Show the routes of a routing table. """
    table = _load(path)
    click.echo(f"default: {table.default}")
    for group, name in sorted(table.groups.items()):
        click.echo(f"group {group or '(core)'}: {name}")
    for gk, name in sorted(table.kinds.items(), key=lambda item: tuple(item[0])):
        click.echo(f"kind {gk!r}: {name}")
    click.echo(f"precedence: {table.settings.routing.precedence.value}")
    click.echo(f"strict: {str(table.settings.routing.strict).lower()}")


@main.command()
@logging_options
@click.option('-a', '--api-version', required=True)
@click.option('-k', '--kind', required=True)
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def resolve(path: str, api_version: str, kind: str) -> None:
    """ Print the backend's name serving the kind of resources. """
    table = _load(path)
    try:
        gvk = references.GroupVersionKind.from_api_version(api_version, kind)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--api-version') from e

    routes = table.as_routes()
    name = routes.select(gvk, precedence=table.settings.routing.precedence)
    logger.debug(f"Resolved {gvk!r} to {name!r} with the {table.settings.routing.precedence.value} precedence.")
    click.echo(name)
