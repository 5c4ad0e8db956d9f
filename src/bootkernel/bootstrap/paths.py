"""Conventional directory layout of an application.

Given one application root (``app_path``), every other location is derived:

    base_path    = parent of app_path
    config_path  = app_path/config
    storage_path = base_path/storage
    log_path     = storage_path/log
    cache_path   = storage_path/cache
    src_path     = base_path/src

Each path is computed on first access and then memoized; an explicitly set
path always wins over the derived default. Derived paths are plain
concatenations and are never canonicalized, so they are valid before the
directories exist. Callers create storage directories as needed.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

PathLike = str | os.PathLike[str]

NAME_STRIP_RE = re.compile(r"[^a-zA-Z0-9_]+")


@dataclass(frozen=True)
class AppPaths:
    """A consistent snapshot of every resolved application path."""

    app_path: Path
    config_path: Path
    base_path: Path
    storage_path: Path
    log_path: Path
    cache_path: Path
    src_path: Path


def derive_name(app_path: PathLike) -> str:
    """Derive an application name from the last segment of its root path.

    Characters outside ``[A-Za-z0-9_]`` are stripped and the first character
    is upper-cased, e.g. ``/srv/my-app!2`` gives ``"MyApp2"``.
    """
    name = NAME_STRIP_RE.sub("", Path(app_path).name)
    return name[:1].upper() + name[1:]


def _as_path(value: PathLike | None) -> Path | None:
    # empty means "unset", as for a missing value
    if value is None or str(value) == "":
        return None
    return Path(os.path.abspath(value))


class PathResolver:
    """Lazily derives and memoizes the application directory layout."""

    def __init__(
        self,
        app_path: PathLike | None = None,
        *,
        default_app_path: Callable[[], PathLike] | None = None,
    ) -> None:
        self._default_app_path = default_app_path
        self._app_path = _as_path(app_path)
        self._config_path: Path | None = None
        self._base_path: Path | None = None
        self._storage_path: Path | None = None
        self._log_path: Path | None = None
        self._cache_path: Path | None = None
        self._src_path: Path | None = None

    @property
    def app_path(self) -> Path:
        """Application root, e.g. ``/var/www/app``."""
        if self._app_path is None:
            if self._default_app_path is None:
                raise ValueError("app_path is not set and has no default")
            self._app_path = _as_path(self._default_app_path())
        return self._app_path

    @app_path.setter
    def app_path(self, value: PathLike) -> None:
        self._app_path = _as_path(value)

    @property
    def config_path(self) -> Path:
        """Config layer directory, e.g. ``/var/www/app/config``."""
        if self._config_path is None:
            self._config_path = self.app_path / "config"
        return self._config_path

    @config_path.setter
    def config_path(self, value: PathLike) -> None:
        self._config_path = _as_path(value)

    @property
    def base_path(self) -> Path:
        """Project root, e.g. ``/var/www``."""
        if self._base_path is None:
            self._base_path = self.app_path.parent
        return self._base_path

    @base_path.setter
    def base_path(self, value: PathLike) -> None:
        self._base_path = _as_path(value)

    @property
    def storage_path(self) -> Path:
        """Writable storage root, e.g. ``/var/www/storage``."""
        if self._storage_path is None:
            self._storage_path = self.base_path / "storage"
        return self._storage_path

    @storage_path.setter
    def storage_path(self, value: PathLike) -> None:
        self._storage_path = _as_path(value)

    @property
    def log_path(self) -> Path:
        """Log directory, e.g. ``/var/www/storage/log``."""
        if self._log_path is None:
            self._log_path = self.storage_path / "log"
        return self._log_path

    @log_path.setter
    def log_path(self, value: PathLike) -> None:
        self._log_path = _as_path(value)

    @property
    def cache_path(self) -> Path:
        """Cache directory holding compiled registries, e.g. ``/var/www/storage/cache``."""
        if self._cache_path is None:
            self._cache_path = self.storage_path / "cache"
        return self._cache_path

    @cache_path.setter
    def cache_path(self, value: PathLike) -> None:
        self._cache_path = _as_path(value)

    @property
    def src_path(self) -> Path:
        """Source directory, e.g. ``/var/www/src``."""
        if self._src_path is None:
            self._src_path = self.base_path / "src"
        return self._src_path

    @src_path.setter
    def src_path(self, value: PathLike) -> None:
        self._src_path = _as_path(value)

    def resolve(self) -> AppPaths:
        """Resolve (and memoize) every path and return them as one snapshot."""
        return AppPaths(
            app_path=self.app_path,
            config_path=self.config_path,
            base_path=self.base_path,
            storage_path=self.storage_path,
            log_path=self.log_path,
            cache_path=self.cache_path,
            src_path=self.src_path,
        )
