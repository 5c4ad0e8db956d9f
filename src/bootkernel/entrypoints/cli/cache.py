"""BOOTKERNEL cache CLI: inspect and invalidate the compiled registry.

The kernel trusts an existing artifact and never refreshes it; after changing
config layers in a non-debug deployment, clear the cache so the next boot
rebuilds it.
"""

from __future__ import annotations

import click
import click_extra as clickx

from bootkernel.bootstrap import Kernel

from .helpers import success, warn


@click.group(cls=clickx.ExtraGroup)
def cache() -> None:
    """Compiled registry cache commands."""


@cache.command()
@click.pass_obj
def path(kernel: Kernel) -> None:
    """Print the cache artifact path for this environment and app path."""
    click.echo(kernel.get_container_cache_filename())


@cache.command()
@click.pass_obj
def status(kernel: Kernel) -> None:
    """Report whether a cache artifact exists."""
    container_cache = kernel.get_container_cache()
    if container_cache.exists():
        click.echo(f"cached: {container_cache.path}")
    else:
        click.echo(f"not cached: {container_cache.path}")


@cache.command()
@click.pass_obj
def clear(kernel: Kernel) -> None:
    """Delete the cache artifact so the next boot rebuilds the registry."""
    container_cache = kernel.get_container_cache()
    if container_cache.clear():
        success(f"Removed {container_cache.path}")
    else:
        warn(f"Nothing to remove at {container_cache.path}")
