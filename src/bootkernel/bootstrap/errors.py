"""Errors raised while booting a kernel."""

from pathlib import Path


class KernelError(Exception):
    """Base class for all kernel errors."""


class ContainerAlreadySetError(KernelError):
    """Raised when a registry is set on a kernel that already has one."""

    def __init__(self) -> None:
        super().__init__("Container already set")


class ContainerNotFoundError(KernelError):
    """Raised when boot finished without producing a registry."""

    def __init__(self) -> None:
        super().__init__("Container not found: boot did not produce a registry")


class CacheError(KernelError):
    """Base class for errors involving the cached registry artifact."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class CacheWriteError(CacheError):
    """Raised when the compiled registry cannot be persisted."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(path, f"Cannot write container cache {str(path)!r}: {reason}")


class CacheLoadError(CacheError):
    """Raised when an existing artifact cannot be turned into a registry.

    The artifact is never regenerated automatically; delete it to rebuild.
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            path,
            f"Cannot load container cache {str(path)!r}: {reason} "
            "(delete the file to rebuild it)",
        )
