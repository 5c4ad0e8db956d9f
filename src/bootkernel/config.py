"""Configuration constants and ambient helpers for BOOTKERNEL.

This module centralizes the fixed names the kernel relies on (defaults,
well-known registry parameters, artifact naming) and the few helpers that read
the process environment.
"""

import os
from pathlib import Path

DEFAULT_ENVIRONMENT = "app"
DEFAULT_SUB_ENVIRONMENT = "local"
DEFAULT_VERSION = "1.0"
DEFAULT_CHARSET = "UTF-8"

APP_SERVICE_ID = "app"
CACHE_PARAMETER = "container.cache"  # pragma: no mutate
SUB_ENVIRONMENT_PARAMETER = "app.sub_environment"  # pragma: no mutate

CONFIG_EXTENSION = ".yml"
CACHE_FILE_PREFIX = "container_"
CACHE_FILE_SUFFIX = ".yml"

APP_PATH_ENVVAR = "BOOTKERNEL_APP_PATH"


class AppPathNotSetError(Exception):
    """Raised when the BOOTKERNEL_APP_PATH environment variable is not set."""


def process_environment() -> dict[str, str]:
    """Return a snapshot of the process environment.

    The kernel reads the environment exactly once per parameter build, through
    this function, so callers and tests can substitute an explicit mapping.
    """
    return dict(os.environ)


def get_env_app_path() -> Path:
    """Get the application root from the environment.

    Returns:
        The value of `BOOTKERNEL_APP_PATH` as a `Path`.

    Raises:
        AppPathNotSetError: If `BOOTKERNEL_APP_PATH` is not set.
    """
    if not (path := os.environ.get(APP_PATH_ENVVAR)):
        raise AppPathNotSetError
    return Path(path)
