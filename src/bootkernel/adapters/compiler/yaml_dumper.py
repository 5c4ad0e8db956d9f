"""YAML compiler for `ServiceRegistry`.

Dumps the resolved parameters and service definitions of a compiled registry
into a versioned YAML document and restores them into a compiled registry.

The artifact is written with PyYAML's safe dumper and read back with its safe
loader, the same value model the config layers are parsed with, so whatever a
layer can define survives the cache unchanged (dates and timestamps, mappings
with integer keys, sets). Service references are tagged scalars:

    arguments:
      mailer: !service mailer

Synthetic service instances are runtime state and are not dumped.
"""

from __future__ import annotations

from typing import Any

import yaml

from bootkernel.adapters.registry.memory import (
    Reference,
    ServiceDefinition,
    ServiceRegistry,
)
from bootkernel.interfaces.compiler import AbstractCompiler
from bootkernel.interfaces.errors import CompilerError
from bootkernel.interfaces.registry import AbstractRegistry

FORMAT_VERSION = 1
REFERENCE_TAG = "!service"  # pragma: no mutate


class _RegistryDumper(yaml.SafeDumper):  # pylint: disable=too-many-ancestors
    # the artifact is read by machines; anchors only obscure it
    def ignore_aliases(self, data: Any) -> bool:
        return True


class _RegistryLoader(yaml.SafeLoader):  # pylint: disable=too-many-ancestors
    pass


def _represent_reference(dumper: yaml.SafeDumper, reference: Reference) -> yaml.Node:
    return dumper.represent_scalar(REFERENCE_TAG, reference.service_id)


def _construct_reference(loader: yaml.SafeLoader, node: yaml.Node) -> Reference:
    return Reference(str(loader.construct_scalar(node)))


_RegistryDumper.add_representer(Reference, _represent_reference)
_RegistryLoader.add_constructor(REFERENCE_TAG, _construct_reference)


class YamlCompiler(AbstractCompiler):
    """Serializes compiled `ServiceRegistry` instances to YAML."""

    def dump(self, registry: AbstractRegistry) -> str:
        if not isinstance(registry, ServiceRegistry):
            raise CompilerError(
                f"Cannot dump {type(registry).__name__}; expected ServiceRegistry"
            )
        if not registry.is_compiled:
            raise CompilerError("Cannot dump a registry that has not been compiled")

        document = {
            "format": FORMAT_VERSION,
            "parameters": dict(registry.parameters),
            "services": {
                service_id: definition.to_mapping()
                for service_id, definition in registry.definitions.items()
            },
        }
        try:
            return yaml.dump(
                document,
                Dumper=_RegistryDumper,
                sort_keys=False,
                default_flow_style=False,
                allow_unicode=True,
            )
        except yaml.YAMLError as e:
            raise CompilerError(f"Registry is not serializable: {e}") from e

    def load(self, text: str) -> ServiceRegistry:
        try:
            document = yaml.load(text, Loader=_RegistryLoader)
        except yaml.YAMLError as e:
            raise CompilerError(f"Corrupt registry dump: {e}") from e

        if not isinstance(document, dict) or document.get("format") != FORMAT_VERSION:
            raise CompilerError("Incompatible registry dump format")

        try:
            definitions = {
                service_id: ServiceDefinition(
                    class_path=raw["class"],
                    arguments=raw["arguments"],
                    calls=[(method, args) for method, args in raw["calls"]],
                    shared=raw["shared"],
                )
                for service_id, raw in document["services"].items()
            }
            parameters = document["parameters"]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CompilerError(f"Corrupt registry dump: {e!r}") from e

        return ServiceRegistry.from_compiled(parameters, definitions)
