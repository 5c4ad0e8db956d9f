"""Bootstrap (composition root) for BOOTKERNEL.

Resolves an application's directory layout, assembles its registry from
layered configuration, caches the compiled registry, and dispatches calls to
the registry's ``app`` service.

Import rules:
- Entry points and host applications import *this* package.
- This package may import: `bootkernel.adapters`, `bootkernel.interfaces`,
  and `bootkernel.config`.
- Adapters and interfaces must not import `bootkernel.bootstrap`.

Public surface:
- `Kernel` and its `BootState`, plus the kernel error taxonomy.
"""

from .cache import BootState
from .errors import (
    CacheError,
    CacheLoadError,
    CacheWriteError,
    ContainerAlreadySetError,
    ContainerNotFoundError,
    KernelError,
)
from .kernel import Kernel

__all__ = [
    "BootState",
    "CacheError",
    "CacheLoadError",
    "CacheWriteError",
    "ContainerAlreadySetError",
    "ContainerNotFoundError",
    "Kernel",
    "KernelError",
]
