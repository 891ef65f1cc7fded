import asyncio
import dataclasses
import functools
import json
from typing import Any, Callable, Coroutine, Dict, Optional, Tuple, TypeVar

import aiohttp
import click

from kubecall._cogs.clients import errors
from kubecall._cogs.structs import credentials
from kubecall._core import clients
from kubecall._core.engines import loggers

_T = TypeVar('_T')


@dataclasses.dataclass()
class CLIControls:
    """ Per-invocation options shared by all commands. """
    namespace: str = clients.DEFAULT_NAMESPACE
    fake: bool = False


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


class LabelParamType(click.ParamType):
    name = 'label'

    def convert(self, value: Any, param: Any, ctx: Any) -> Tuple[str, str]:
        key, sep, val = str(value).partition('=')
        if not sep or not key:
            self.fail(f"{value!r} is not a key=value label.", param, ctx)
        return key.strip(), val.strip()


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet, log_format=log_format)
        return fn(*args, **kwargs)

    return wrapper


def run_with_client(
        controls: CLIControls,
        fn: Callable[[clients.Client], Coroutine[Any, Any, _T]],
) -> _T:
    """ Create the client as requested, run the call, and convert the errors to CLI errors. """

    async def _run() -> _T:
        client: clients.Client
        if controls.fake:
            client = clients.Client.fake(controls.namespace)
        else:
            client = clients.Client.in_cluster(controls.namespace)
        async with client:
            return await fn(client)

    try:
        return asyncio.run(_run())
    except (credentials.LoginError, errors.APIError, errors.APIPayloadError) as e:
        raise click.ClickException(str(e)) from e
    except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
        raise click.ClickException(f"Cannot reach the API: {e!r}") from e


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, sort_keys=True))


@click.version_option(prog_name='kubecall')
@click.group(name='kubecall', context_settings=dict(
    auto_envvar_prefix='KUBECALL',
))
@click.option('-n', '--namespace', default=clients.DEFAULT_NAMESPACE, show_default=True)
@click.option('--fake', is_flag=True, help="Do not talk to the API; return empty results.")
@click.pass_context
def main(ctx: click.Context, namespace: str, fake: bool) -> None:
    ctx.obj = CLIControls(namespace=namespace, fake=fake)


@main.command('get-pod')
@logging_options
@click.argument('name')
@click.pass_obj
def get_pod(controls: CLIControls, name: str) -> None:
    echo_json(run_with_client(controls, lambda client: client.get_pod(name)))


@main.command('list-pods')
@logging_options
@click.option('-l', '--label', 'labels', type=LabelParamType(), multiple=True)
@click.pass_obj
def list_pods(controls: CLIControls, labels: Tuple[Tuple[str, str], ...]) -> None:
    selector: Dict[str, str] = dict(labels)
    echo_json(run_with_client(controls, lambda client: client.list_pods(selector)))


@main.command('get-job')
@logging_options
@click.argument('name')
@click.pass_obj
def get_job(controls: CLIControls, name: str) -> None:
    echo_json(run_with_client(controls, lambda client: client.get_job(name)))


@main.command('list-jobs')
@logging_options
@click.option('-l', '--label', 'labels', type=LabelParamType(), multiple=True)
@click.pass_obj
def list_jobs(controls: CLIControls, labels: Tuple[Tuple[str, str], ...]) -> None:
    selector: Dict[str, str] = dict(labels)
    echo_json(run_with_client(controls, lambda client: client.list_jobs(selector)))


@main.command('logs')
@logging_options
@click.argument('pod')
@click.pass_obj
def logs(controls: CLIControls, pod: str) -> None:
    data: Optional[bytes] = run_with_client(controls, lambda client: client.get_log(pod))
    click.echo(data or b'', nl=False)
