"""BOOTKERNEL CLI entry point.

Defines the top-level ``bootkernel`` command (via Click-Extra). The group
configures logging and builds a `Kernel` from ``--env``, ``--app-path`` and
``--no-cache``; subcommands use that kernel.

Commands
- ``bootkernel run ARGS...``: boot and call the ``app`` service's ``run``.
- ``bootkernel params``: list the registry parameters.
- ``bootkernel paths``: show the resolved directory layout.
- ``bootkernel layers``: show the config cascade and which layers exist.
- ``bootkernel cache path|status|clear``: inspect or delete the cached registry.

Examples
    $ bootkernel --env console --app-path /var/www/app run import --dry-run
    $ BOOTKERNEL_ENV=web bootkernel cache clear
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import click_extra as clickx

from bootkernel import __version__, config
from bootkernel.bootstrap import Kernel
from bootkernel.logging import config_console_handler, config_flight_recorder, log_startup

from .cache import cache as cache_group
from .errors import kernel_errors
from .helpers import parse_log_level

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """BOOTKERNEL command-line interface.

    Boots an application from its directory layout: parameters and services
    are read from config/{env}.yml and config/{env}.{sub_env}.yml, the compiled
    registry is cached under storage/cache, and commands are dispatched to the
    registry's 'app' service.
    """


def _default_app_path() -> Path:
    try:
        return config.get_env_app_path()
    except config.AppPathNotSetError:
        return Path.cwd()


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--env",
    "-e",
    "environment",
    default=config.DEFAULT_ENVIRONMENT,
    envvar="BOOTKERNEL_ENV",
    show_default=True,
    show_envvar=True,
    help="Environment name; selects config/{env}.yml.",
)
@click.option(
    "--app-path",
    "-a",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help=(
        f"Application root (contains config/). Defaults to ${config.APP_PATH_ENVVAR} "
        "or the current directory."
    ),
)
@click.option(
    "--no-cache",
    "no_cache",
    is_flag=True,
    default=False,
    envvar="BOOTKERNEL_NO_CACHE",
    show_envvar=True,
    help="Boot the kernel in debug mode: rebuild the registry and never cache it.",
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    default=0,
    help="Lower the console threshold one level below WARNING per repetition.",
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    default=0,
    help="Raise the console threshold one level above WARNING per repetition.",
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    default=False,
    help="Log everything with timestamps, logger names and source locations.",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    default=False,
    envvar="BOOTKERNEL_FLIGHT_RECORDER",
    show_envvar=True,
    help=(
        "Buffer the last records of this run at DEBUG granularity and write them "
        "to the kernel's log directory when a WARNING or ERROR occurs."
    ),
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="BOOTKERNEL_LOG_PATH",
    show_envvar=True,
    help="Flight recorder file. Defaults to storage/log/bootkernel.log of the app.",
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush",
    is_flag=True,
    default=False,
    help="Also write the flight recorder buffer on a clean exit.",
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    envvar="BOOTKERNEL_LOGGER_LEVELS",
    show_envvar=True,
    help=(
        "Set the minimum level of a logger (NAME=LEVEL), e.g. -L myapp.mail=DEBUG "
        "to trace a service while the kernel stays quiet. Repeatable."
    ),
)
@clickx.pass_context
def bootkernel(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    environment: str,
    app_path: Path | None,
    no_cache: bool,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    flight_recorder: bool,
    log_path: Path | None,
    force_flush: bool,
    logger_levels: dict[str, int],
) -> None:
    """BOOTKERNEL command-line interface."""
    # constructing the kernel touches nothing on disk
    kernel = Kernel(environment, app_path or _default_app_path(), debug=no_cache)
    ctx.obj = kernel

    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = [
        config_console_handler(
            kernel, level=level, debug_mode=debug, color=ctx.color is not False
        )
    ]
    recorder = None
    if flight_recorder:
        recorder = config_flight_recorder(kernel, log_path, flush_on_close=force_flush)
        handlers.append(recorder)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        kernel,
        app_version=__version__,
        level=level,
        recorder=recorder,
        logger_levels=logger_levels,
    )

    ctx.call_on_close(logging.shutdown)


@bootkernel.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def run(kernel: Kernel, args: tuple[str, ...]) -> None:
    """Boot the kernel and call the app service's run(*ARGS)."""
    with kernel_errors():
        result = kernel.run(*args)
    if result is not None:
        click.echo(result)


@bootkernel.command()
@click.option("--prefix", default="", help="Only show parameters starting with PREFIX.")
@click.option("--json", "as_json", is_flag=True, help="Print parameters as JSON.")
@click.pass_obj
def params(kernel: Kernel, prefix: str, as_json: bool) -> None:
    """List the registry parameters."""
    with kernel_errors():
        parameters: dict[str, Any] = {
            name: kernel.container.get_parameter(name)
            for name in sorted(kernel.container.parameters)
            if name.startswith(prefix)
        }
    if as_json:
        click.echo(json.dumps(parameters, indent=2, default=str))
        return
    for name, value in parameters.items():
        click.echo(f"{name} = {value!r}")


@bootkernel.command()
@click.pass_obj
def paths(kernel: Kernel) -> None:
    """Show the resolved directory layout."""
    for name, path in vars(kernel.paths.resolve()).items():
        click.echo(f"{name:<13} {path}")


@bootkernel.command()
@click.pass_obj
def layers(kernel: Kernel) -> None:
    """Show the config layers for the environment and whether they exist.

    The override layer is the one boot would pick, including a
    sub-environment set by the base layer.
    """
    with kernel_errors():
        layer_names = kernel.get_config_layers()
    for layer in layer_names:
        state = "present" if (kernel.config_path / layer).is_file() else "missing"
        click.echo(f"{layer:<30} {state}")


bootkernel.add_command(cache_group)
