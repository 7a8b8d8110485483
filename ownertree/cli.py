import asyncio
import functools
import logging
from typing import Any, Callable, List, Optional

import click

from ownertree import errors
from ownertree.clients import auth, login
from ownertree.engines import loggers, resolving, viewing
from ownertree.helpers import versions
from ownertree.structs import bodies, configuration, credentials, ownership, references

logger = logging.getLogger(__name__)

NO_OWNED_MESSAGE = "No resources are owned by this object through ownerReferences."


def _parse_log_format(ctx: click.Context, param: click.Parameter, value: str) -> loggers.LogFormat:
    return loggers.LogFormat[value.upper()]


LOGGING_OPTIONS = [
    click.option('-v', '--verbose', is_flag=True, help="Log the debug messages."),
    click.option('-d', '--debug', is_flag=True,
                 help="Log the debug messages, also of asyncio & aiohttp."),
    click.option('-q', '--quiet', is_flag=True, help="Log only the warnings & errors."),
    click.option('--log-format', default='full', callback=_parse_log_format,
                 type=click.Choice([fmt.name.lower() for fmt in loggers.LogFormat],
                                   case_sensitive=False)),
    click.option('--log-prefix/--no-log-prefix', default=None,
                 help="Prefix the messages with the resource (default for text formats)."),
    click.option('--log-refkey', type=str, help="The JSON field for the resource."),
]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ Add the logging options to the command, and configure the logging before it runs. """
    @functools.wraps(fn)
    def wrapper(
            *args: Any,
            verbose: bool,
            debug: bool,
            quiet: bool,
            log_format: loggers.LogFormat,
            log_prefix: Optional[bool],
            log_refkey: Optional[str],
            **kwargs: Any,
    ) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet, log_format=log_format,
                          log_prefix=log_prefix, log_refkey=log_refkey)
        return fn(*args, **kwargs)

    for option in reversed(LOGGING_OPTIONS):
        wrapper = option(wrapper)
    return wrapper


@click.command(name='ownertree', context_settings=dict(
    auto_envvar_prefix='OWNERTREE',
))
@click.version_option(version=versions.version or 'unknown', prog_name='ownertree')
@logging_options
@click.option('-n', '--namespace', type=str,
              help="The namespace of the object (default: as in the credentials).")
@click.option('--kubeconfig', type=click.Path(dir_okay=False), help="The kubeconfig file(s).")
@click.option('--context', 'kubecontext', type=str, help="The kubeconfig context.")
@click.option('--page-size', type=click.IntRange(min=1), help="Objects per page when listing.")
@click.option('--max-concurrency', type=click.IntRange(min=1),
              help="Resources listed at once (default: unlimited).")
@click.argument('kind')
@click.argument('name')
def main(
        kind: str,
        name: str,
        namespace: Optional[str],
        kubeconfig: Optional[str],
        kubecontext: Optional[str],
        page_size: Optional[int],
        max_concurrency: Optional[int],
) -> None:
    """ Show the resources owned by the object KIND/NAME through ownerReferences. """
    settings = configuration.OwnerTreeSettings()
    if page_size is not None:
        settings.fetching.page_size = page_size
    if max_concurrency is not None:
        settings.fetching.max_concurrency = max_concurrency

    try:
        info = login.login(kubeconfig=kubeconfig, context=kubecontext, logger=logger)
    except credentials.LoginError as e:
        raise click.ClickException(str(e)) from e

    scope = references.NamespaceName(namespace or info.default_namespace or 'default')
    try:
        lines = asyncio.run(inspect(
            info=info,
            settings=settings,
            kind=kind,
            name=name,
            namespace=scope,
        ))
    except errors.OwnerTreeError as e:
        raise click.ClickException(str(e)) from e

    for line in lines:
        click.echo(line)


async def inspect(
        *,
        info: credentials.ConnectionInfo,
        settings: configuration.OwnerTreeSettings,
        kind: str,
        name: str,
        namespace: references.Namespace,
) -> List[str]:
    async with auth.connected(info):
        catalog = await viewing.scan_resources(settings=settings)
        resource = resolving.resolve(kind, catalog)
        root = await viewing.get_object(resource, namespace, name, settings=settings)
        directory = await viewing.build_ownership_view(namespace, catalog=catalog, settings=settings)
    return render(directory, root)


def render(directory: ownership.OwnershipDirectory, root: bodies.ObjectRecord) -> List[str]:
    if not ownership.children_of(directory, root.uid):
        return [NO_OWNED_MESSAGE]
    lines = [str(root)]
    for depth, uid in directory.descendants(root.uid):
        record = directory.get(uid)
        lines.append('  ' * depth + (str(record) if record is not None else uid))
    return lines
