"""The flat parameter set seeded into a freshly built registry."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .paths import AppPaths


def env_parameters(environ: Mapping[str, str]) -> dict[str, str]:
    """Expose process environment variables as parameters.

    Names are lower-cased with ``__`` rewritten to ``.``, so
    ``MAILER__HOST`` becomes ``mailer.host``.
    """
    return {key.replace("__", ".").lower(): value for key, value in environ.items()}


def build_parameters(  # pylint: disable=too-many-arguments
    *,
    name: str,
    version: str,
    environment: str,
    sub_environment: str,
    debug: bool,
    charset: str,
    paths: AppPaths,
    environ: Mapping[str, str],
) -> Mapping[str, Any]:
    """Build the read-only parameter mapping for a registry.

    Kernel-derived ``app.*`` keys are merged last and therefore win over
    environment variables that map to the same key. Paths are rendered as
    strings so they can be interpolated into other parameters.
    """
    app_parameters = {
        "app.name": name,
        "app.version": version,
        "app.environment": environment,
        "app.sub_environment": sub_environment,
        "app.debug": debug,
        "app.charset": charset,
        "app.path": str(paths.app_path),
        "app.config_path": str(paths.config_path),
        "app.base_path": str(paths.base_path),
        "app.storage_path": str(paths.storage_path),
        "app.log_path": str(paths.log_path),
        "app.cache_path": str(paths.cache_path),
        "app.src_path": str(paths.src_path),
    }
    return MappingProxyType({**env_parameters(environ), **app_parameters})
