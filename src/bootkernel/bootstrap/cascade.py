"""Environment / sub-environment configuration cascade.

For an environment ``console`` and sub-environment ``local`` the cascade is:

1. ``console.yml``       base layer, always attempted
2. ``console.local.yml`` override layer

Layers that do not exist are skipped. Layers are applied in order, so later
layers override earlier ones. Application is not atomic: if layer 2 fails,
layer 1's definitions stay applied to the registry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from bootkernel.config import CONFIG_EXTENSION
from bootkernel.interfaces.config_loader import AbstractConfigLoader

logger = logging.getLogger(__name__)


def base_layer(environment: str) -> str:
    """File name of the base layer, e.g. ``console.yml``."""
    return f"{environment}{CONFIG_EXTENSION}"


def override_layer(environment: str, sub_environment: str) -> str:
    """File name of the override layer, e.g. ``console.local.yml``."""
    return f"{environment}.{sub_environment}{CONFIG_EXTENSION}"


def layers_for(environment: str, sub_environment: str) -> list[str]:
    """Ordered layer names for an (environment, sub-environment) pair."""
    return [base_layer(environment), override_layer(environment, sub_environment)]


class ConfigCascade:
    """Applies the layers found in one config directory through a loader."""

    def __init__(self, loader: AbstractConfigLoader, config_path: Path) -> None:
        self.loader = loader
        self.config_path = Path(config_path)

    def load(self, layers: Iterable[str]) -> list[str]:
        """Load each present layer in order and return the names loaded."""
        loaded = []
        for layer in layers:
            if not (self.config_path / layer).is_file():
                logger.debug("Config layer %s not present in %s", layer, self.config_path)
                continue
            self.loader.load(layer)
            logger.debug("Config layer %s loaded", layer)
            loaded.append(layer)
        return loaded

    def apply(
        self, environment: str, sub_environment: Callable[[], str]
    ) -> list[str]:
        """Load the base layer, then the override layer.

        ``sub_environment`` is called after the base layer is applied, so the
        base layer itself may choose the override layer by setting the
        ``app.sub_environment`` parameter.
        """
        loaded = self.load([base_layer(environment)])
        loaded += self.load([override_layer(environment, sub_environment())])
        return loaded
