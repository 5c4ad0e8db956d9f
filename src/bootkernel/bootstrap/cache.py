"""Compiled-registry cache.

A non-debug kernel persists its compiled registry to
``{cache_path}/container_{md5(environment + app_path)}.yml`` and adopts that
file on later boots instead of rebuilding. The file's existence is trusted:
it is never checked for freshness and never rewritten in place. Invalidation
is deleting the file (see `ContainerCache.clear`) or changing the key inputs.
"""

from __future__ import annotations

import enum
import hashlib
import logging
import os
import tempfile
from pathlib import Path

from bootkernel.config import CACHE_FILE_PREFIX, CACHE_FILE_SUFFIX, CACHE_PARAMETER
from bootkernel.interfaces.compiler import AbstractCompiler
from bootkernel.interfaces.errors import CompilerError
from bootkernel.interfaces.registry import AbstractRegistry

from .errors import CacheLoadError, CacheWriteError

logger = logging.getLogger(__name__)


class BootState(enum.Enum):
    """How a kernel obtained its registry."""

    UNBOOTED = "unbooted"
    ADOPTED = "adopted"
    FRESH_DEBUG = "fresh-debug"
    FRESH_NOCACHE = "fresh-nocache"
    FRESH_CACHED = "fresh-cached"
    LOADED_FROM_CACHE = "loaded-from-cache"


def cache_key(environment: str, app_path: str | os.PathLike[str]) -> str:
    """Stable key of the artifact for an (environment, app_path) pair."""
    data = (environment + str(app_path)).encode("utf-8")
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def cache_filename(
    cache_path: Path, environment: str, app_path: str | os.PathLike[str]
) -> Path:
    """Artifact path, e.g. ``/var/www/storage/cache/container_8a4b....yml``."""
    key = cache_key(environment, app_path)
    return Path(cache_path) / f"{CACHE_FILE_PREFIX}{key}{CACHE_FILE_SUFFIX}"


def is_cacheable(registry: AbstractRegistry) -> bool:
    """Return the registry's ``container.cache`` flag (True when undefined)."""
    if registry.has_parameter(CACHE_PARAMETER):
        return bool(registry.get_parameter(CACHE_PARAMETER))
    return True


class ContainerCache:
    """One cache artifact and the compiler that reads and writes it."""

    def __init__(self, path: Path, compiler: AbstractCompiler) -> None:
        self.path = Path(path)
        self.compiler = compiler

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> AbstractRegistry:
        """Materialize the registry stored in the artifact.

        Raises:
            CacheLoadError: If the file is missing, unreadable or corrupt.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheLoadError(self.path, e.strerror or str(e)) from e
        try:
            registry = self.compiler.load(text)
        except CompilerError as e:
            raise CacheLoadError(self.path, str(e)) from e

        logger.debug("Container loaded from %s", self.path)
        return registry

    def persist(self, registry: AbstractRegistry) -> None:
        """Write a compiled registry to the artifact path atomically.

        The dump goes to a temporary file in the cache directory which is then
        renamed into place, so concurrent readers never see a partial file.

        Raises:
            CacheWriteError: If the registry cannot be dumped or written.
        """
        try:
            text = self.compiler.dump(registry)
        except CompilerError as e:
            raise CacheWriteError(self.path, str(e)) from e

        tmp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(text)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise CacheWriteError(self.path, e.strerror or str(e)) from e

        logger.info("Container cached to %s", self.path)

    def clear(self) -> bool:
        """Delete the artifact; return True if a file was removed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Container cache %s removed", self.path)
        return True
