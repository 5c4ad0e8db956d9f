"""In-memory service registry.

This module provides the registry the kernel builds by default: a mapping of
parameters plus a mapping of service definitions, assembled from config layers
and then compiled (frozen) before use.

Exports
-------
- Reference: Marker for a reference to another service (``@id`` in config).
- ServiceDefinition: Immutable description of how to build one service.
- ServiceRegistry: Concrete `AbstractRegistry`.

Parameter placeholders
----------------------
String values may embed other parameters as ``%name%``. A value that is
*exactly* one placeholder takes the referenced value with its type intact;
otherwise the referenced values are interpolated as text. ``%%`` stands for a
literal percent sign. Parameters seeded through the constructor are literal:
they are never scanned for placeholders, so arbitrary process-environment
values cannot break compilation.

Service definitions
-------------------
    class: package.module.Class      # or package.module:Class
    arguments: ["%param%", "@other"]  # positional; a mapping means keywords
    calls:
      - [set_logger, ["@logger"]]
    shared: true                     # default; false builds a new instance per get()

``@id`` references another service; ``@@text`` is the literal ``@text``.
"""

from __future__ import annotations

import importlib
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from bootkernel.interfaces.errors import (
    CircularReferenceError,
    FrozenRegistryError,
    InvalidDefinitionError,
    ParameterNotFoundError,
    ServiceNotFoundError,
)
from bootkernel.interfaces.registry import AbstractRegistry

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"%%|%([^%\s]+)%")
SINGLE_PLACEHOLDER_RE = re.compile(r"%([^%\s]+)%")
DEFINITION_KEYS = frozenset({"class", "arguments", "calls", "shared"})


@dataclass(frozen=True)
class Reference:
    """A reference to another service by id."""

    service_id: str

    def __str__(self) -> str:
        return f"@{self.service_id}"


@dataclass(frozen=True)
class ServiceDefinition:
    """How to build one service.

    Attributes:
        class_path: Import path of the factory (``pkg.mod.Attr`` or ``pkg.mod:Attr``).
        arguments: Positional arguments, or keyword arguments when a mapping.
        calls: ``(method, arguments)`` pairs invoked after construction.
        shared: When True, the first instance is reused for every `get`.
    """

    class_path: str
    arguments: list[Any] | dict[str, Any] = field(default_factory=list)
    calls: list[tuple[str, list[Any]]] = field(default_factory=list)
    shared: bool = True

    @classmethod
    def from_mapping(cls, service_id: str, raw: Mapping[str, Any]) -> ServiceDefinition:
        """Build a definition from a raw configuration mapping.

        Raises:
            InvalidDefinitionError: If the mapping is malformed.
        """
        if not isinstance(raw, Mapping):
            raise InvalidDefinitionError(service_id, "expected a mapping")
        if unknown := set(raw) - DEFINITION_KEYS:
            raise InvalidDefinitionError(
                service_id, f"unknown keys {sorted(unknown)!r}"
            )

        class_path = raw.get("class")
        if not isinstance(class_path, str) or not class_path:
            raise InvalidDefinitionError(service_id, "'class' must be a non-empty string")

        arguments = raw.get("arguments") or []
        if not isinstance(arguments, (list, Mapping)):
            raise InvalidDefinitionError(service_id, "'arguments' must be a list or mapping")

        calls = []
        for call in raw.get("calls") or []:
            if not isinstance(call, (list, tuple)) or not 1 <= len(call) <= 2:
                raise InvalidDefinitionError(
                    service_id, "each call must be [method] or [method, [arguments]]"
                )
            method, call_args = call[0], call[1] if len(call) == 2 else []
            if not isinstance(method, str) or not isinstance(call_args, list):
                raise InvalidDefinitionError(service_id, f"malformed call {call!r}")
            calls.append((method, _parse_references(call_args)))

        shared = raw.get("shared", True)
        if not isinstance(shared, bool):
            raise InvalidDefinitionError(service_id, "'shared' must be a boolean")

        return cls(
            class_path=class_path,
            arguments=_parse_references(
                dict(arguments) if isinstance(arguments, Mapping) else list(arguments)
            ),
            calls=calls,
            shared=shared,
        )

    def to_mapping(self) -> dict[str, Any]:
        """Return the definition as a plain mapping (references kept as `Reference`)."""
        return {
            "class": self.class_path,
            "arguments": self.arguments,
            "calls": [[method, args] for method, args in self.calls],
            "shared": self.shared,
        }


def _parse_references(value: Any) -> Any:
    """Replace ``@id`` strings with `Reference` markers, recursively."""
    if isinstance(value, str) and value.startswith("@"):
        if value.startswith("@@"):
            return value[1:]
        return Reference(value[1:])
    if isinstance(value, list):
        return [_parse_references(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _parse_references(v) for k, v in value.items()}
    return value


def import_object(path: str) -> Any:
    """Import an object from ``pkg.mod.Attr`` or ``pkg.mod:Attr.Nested``."""
    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")
    if not module_name or not attr_path:
        raise ImportError(f"{path!r} is not an importable object path")

    obj: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    return obj


class ServiceRegistry(AbstractRegistry):
    """Registry of parameters and lazily built services."""

    def __init__(self, parameters: Mapping[str, Any] | None = None) -> None:
        self._parameters: dict[str, Any] = dict(parameters or {})
        self._literals: set[str] = set(self._parameters)
        self._definitions: dict[str, ServiceDefinition] = {}
        self._instances: dict[str, Any] = {}
        self._loading: list[str] = []
        self._compiled = False

    @classmethod
    def from_compiled(
        cls,
        parameters: Mapping[str, Any],
        definitions: Mapping[str, ServiceDefinition],
    ) -> ServiceRegistry:
        """Rebuild an already compiled registry without resolving anything again."""
        registry = cls(parameters)
        registry._definitions = dict(definitions)  # pylint: disable=protected-access
        registry._compiled = True  # pylint: disable=protected-access
        return registry

    # --- Parameters ---

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def get_parameter(self, name: str) -> Any:
        if name not in self._parameters:
            raise ParameterNotFoundError(name)
        if self._compiled:
            return self._parameters[name]
        return self._resolve_parameter(name, [])

    def set_parameter(self, name: str, value: Any) -> None:
        if self._compiled:
            raise FrozenRegistryError("parameters")
        self._parameters[name] = value
        self._literals.discard(name)

    @property
    def parameters(self) -> Mapping[str, Any]:
        return MappingProxyType(self._parameters)

    # --- Services ---

    @property
    def definitions(self) -> Mapping[str, ServiceDefinition]:
        """Read-only view of all service definitions."""
        return MappingProxyType(self._definitions)

    def has(self, service_id: str) -> bool:
        return service_id in self._definitions or service_id in self._instances

    def set_definition(self, service_id: str, definition: Mapping[str, Any]) -> None:
        if self._compiled:
            raise FrozenRegistryError("service definitions")
        self._definitions[service_id] = ServiceDefinition.from_mapping(
            service_id, definition
        )
        self._instances.pop(service_id, None)

    def set(self, service_id: str, instance: Any) -> None:
        """Register a ready-made (synthetic) service instance.

        Synthetic instances are runtime state, not definitions: they may be set
        on a compiled registry and are never serialized.
        """
        self._instances[service_id] = instance

    def get(self, service_id: str) -> Any:
        if service_id in self._instances:
            return self._instances[service_id]
        if service_id not in self._definitions:
            raise ServiceNotFoundError(service_id)
        if service_id in self._loading:
            raise CircularReferenceError("service", [*self._loading, service_id])

        definition = self._definitions[service_id]
        self._loading.append(service_id)
        try:
            instance = self._build(service_id, definition)
        finally:
            self._loading.pop()

        if definition.shared:
            self._instances[service_id] = instance
        return instance

    # --- Lifecycle ---

    def compile(self) -> None:
        if self._compiled:
            return
        self._parameters = {
            name: self._resolve_parameter(name, []) for name in self._parameters
        }
        self._definitions = {
            service_id: ServiceDefinition(
                class_path=definition.class_path,
                arguments=self._resolve_value(definition.arguments, []),
                calls=[
                    (method, self._resolve_value(args, []))
                    for method, args in definition.calls
                ],
                shared=definition.shared,
            )
            for service_id, definition in self._definitions.items()
        }
        self._compiled = True
        logger.debug(
            "Registry compiled: %d parameters, %d services",
            len(self._parameters),
            len(self._definitions),
        )

    @property
    def is_compiled(self) -> bool:
        return self._compiled

    # --- Internal Helpers ---

    def _build(self, service_id: str, definition: ServiceDefinition) -> Any:
        try:
            factory = import_object(definition.class_path)
        except (ImportError, AttributeError) as e:
            raise InvalidDefinitionError(
                service_id, f"cannot import {definition.class_path!r}"
            ) from e

        arguments = self._resolve_services(self._final_value(definition.arguments))
        if isinstance(arguments, Mapping):
            instance = factory(**arguments)
        else:
            instance = factory(*arguments)

        for method, args in definition.calls:
            resolved = self._resolve_services(self._final_value(args))
            getattr(instance, method)(*resolved)

        logger.debug("Service %r built from %s", service_id, definition.class_path)
        return instance

    def _final_value(self, value: Any) -> Any:
        # compiled definitions already hold resolved values
        return value if self._compiled else self._resolve_value(value, [])

    def _resolve_services(self, value: Any) -> Any:
        if isinstance(value, Reference):
            return self.get(value.service_id)
        if isinstance(value, list):
            return [self._resolve_services(v) for v in value]
        if isinstance(value, Mapping):
            return {k: self._resolve_services(v) for k, v in value.items()}
        return value

    def _resolve_parameter(self, name: str, stack: list[str]) -> Any:
        if name in stack:
            raise CircularReferenceError("parameter", [*stack, name])
        if name not in self._parameters:
            raise ParameterNotFoundError(name)
        value = self._parameters[name]
        if self._compiled or name in self._literals:
            return value
        return self._resolve_value(value, [*stack, name])

    def _resolve_value(self, value: Any, stack: list[str]) -> Any:
        if isinstance(value, str):
            return self._resolve_string(value, stack)
        if isinstance(value, list):
            return [self._resolve_value(v, stack) for v in value]
        if isinstance(value, Mapping):
            return {k: self._resolve_value(v, stack) for k, v in value.items()}
        return value

    def _resolve_string(self, value: str, stack: list[str]) -> Any:
        if match := SINGLE_PLACEHOLDER_RE.fullmatch(value):
            return self._resolve_parameter(match.group(1), stack)

        def substitute(match: re.Match[str]) -> str:
            if match.group(0) == "%%":  # pylint: disable=magic-value-comparison
                return "%"
            return str(self._resolve_parameter(match.group(1), stack))

        return PLACEHOLDER_RE.sub(substitute, value)
