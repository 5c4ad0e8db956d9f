"""Translate kernel failures into user-facing CLI errors."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

import click

from bootkernel.bootstrap import CacheLoadError, KernelError
from bootkernel.interfaces.errors import (
    CompilerError,
    ConfigLayerLoadError,
    RegistryError,
)

STALE_CACHE_HINT = "Run 'bootkernel cache clear' to delete it and rebuild on the next boot."


@contextlib.contextmanager
def kernel_errors() -> Iterator[None]:
    """Re-raise boot and registry failures as `click.ClickException`."""
    try:
        yield
    except CacheLoadError as e:
        raise click.ClickException(f"{e}\n{STALE_CACHE_HINT}") from e
    except (KernelError, RegistryError, ConfigLayerLoadError, CompilerError) as e:
        raise click.ClickException(str(e)) from e
