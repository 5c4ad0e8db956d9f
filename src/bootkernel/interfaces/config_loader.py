"""Configuration loader interface definitions."""

import abc
from pathlib import Path

from .registry import AbstractRegistry


class AbstractConfigLoader(abc.ABC):
    """Parses configuration layer files directly into a registry.

    Loaders are not responsible for deciding whether a layer exists; the
    configuration cascade checks for the file before calling `load`.
    """

    def __init__(self, registry: AbstractRegistry, base_path: Path) -> None:
        self.registry = registry
        self.base_path = Path(base_path)

    @abc.abstractmethod
    def load(self, resource: str) -> None:
        """Load one layer file, relative to `base_path`, into the registry.

        Raises:
            ConfigLayerLoadError: If the file is malformed or cannot be applied.
        """
