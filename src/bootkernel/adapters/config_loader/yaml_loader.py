"""YAML configuration layer loader.

A layer file is a YAML mapping with up to three top-level sections:

    imports:
      - { resource: common.yml }
      - { resource: optional.yml, ignore_errors: true }
    parameters:
      mailer.transport: smtp
    services:
      app:
        class: myapp.App
        arguments: ["@mailer"]

Imports are resolved relative to the importing file and applied before the
importing file's own parameters and services, so the importing file wins.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from bootkernel.interfaces.config_loader import AbstractConfigLoader
from bootkernel.interfaces.errors import ConfigLayerLoadError, RegistryError

logger = logging.getLogger(__name__)

SECTIONS = frozenset({"imports", "parameters", "services"})


class YamlFileLoader(AbstractConfigLoader):
    """Loads YAML layer files into a registry."""

    def load(self, resource: str) -> None:
        self._load_file(self.base_path / resource, [])

    def _load_file(self, path: Path, stack: list[Path]) -> None:
        if path in stack:
            raise ConfigLayerLoadError(path, "circular import")

        content = self._parse(path)
        if unknown := set(content) - SECTIONS:
            raise ConfigLayerLoadError(path, f"unknown sections {sorted(unknown)!r}")

        for resource, ignore_errors in self._imports(path, content.get("imports")):
            imported = path.parent / resource
            if not imported.is_file() and ignore_errors:
                logger.debug("Skipping missing optional import %s", imported)
                continue
            self._load_file(imported, [*stack, path])

        parameters = self._section(path, content, "parameters")
        services = self._section(path, content, "services")
        try:
            for name, value in parameters.items():
                self.registry.set_parameter(str(name), value)
            for service_id, definition in services.items():
                self.registry.set_definition(str(service_id), definition)
        except RegistryError as e:
            raise ConfigLayerLoadError(path, str(e)) from e

        logger.debug(
            "Loaded %s: %d parameters, %d services",
            path,
            len(parameters),
            len(services),
        )

    @staticmethod
    def _parse(path: Path) -> dict[str, Any]:
        try:
            content = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigLayerLoadError(path, e.strerror or str(e)) from e
        except yaml.YAMLError as e:
            raise ConfigLayerLoadError(path, f"invalid YAML: {e}") from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigLayerLoadError(path, "top level must be a mapping")
        return content

    @staticmethod
    def _section(path: Path, content: Mapping[str, Any], name: str) -> Mapping[str, Any]:
        section = content.get(name)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise ConfigLayerLoadError(path, f"'{name}' must be a mapping")
        return section

    @staticmethod
    def _imports(path: Path, imports: Any) -> list[tuple[str, bool]]:
        if imports is None:
            return []
        if not isinstance(imports, list):
            raise ConfigLayerLoadError(path, "'imports' must be a list")

        result = []
        for entry in imports:
            if isinstance(entry, str):
                result.append((entry, False))
            elif isinstance(entry, Mapping) and isinstance(entry.get("resource"), str):
                result.append((entry["resource"], bool(entry.get("ignore_errors", False))))
            else:
                raise ConfigLayerLoadError(path, f"malformed import {entry!r}")
        return result
