"""Service registry interface definitions."""

import abc
from collections.abc import Mapping
from typing import Any


class AbstractRegistry(abc.ABC):
    """Abstract base class for the registry of parameters and services.

    Implementations are constructed with an optional initial parameter
    mapping. A registry is built in two phases. While *open*, parameters and
    service definitions can be added or replaced (later definitions win). After
    `compile()`, definitions are frozen, parameter placeholders are resolved,
    and services can be resolved by id.
    """

    # --- Parameters ---

    @abc.abstractmethod
    def has_parameter(self, name: str) -> bool:
        """Return True if the parameter is defined."""

    @abc.abstractmethod
    def get_parameter(self, name: str) -> Any:
        """Return the value of a parameter.

        Raises:
            ParameterNotFoundError: If the parameter is not defined.
        """

    @abc.abstractmethod
    def set_parameter(self, name: str, value: Any) -> None:
        """Define or replace a parameter.

        Raises:
            FrozenRegistryError: If the registry has been compiled.
        """

    @property
    @abc.abstractmethod
    def parameters(self) -> Mapping[str, Any]:
        """Read-only view of all parameters."""

    # --- Services ---

    @abc.abstractmethod
    def has(self, service_id: str) -> bool:
        """Return True if a service definition or instance exists for the id."""

    @abc.abstractmethod
    def get(self, service_id: str) -> Any:
        """Resolve a service instance by id.

        Raises:
            ServiceNotFoundError: If no such service is defined.
        """

    @abc.abstractmethod
    def set_definition(self, service_id: str, definition: Mapping[str, Any]) -> None:
        """Define or replace a service from a raw configuration mapping.

        Raises:
            InvalidDefinitionError: If the mapping is not a valid definition.
            FrozenRegistryError: If the registry has been compiled.
        """

    # --- Lifecycle ---

    @abc.abstractmethod
    def compile(self) -> None:
        """Resolve parameter placeholders and freeze all definitions."""

    @property
    @abc.abstractmethod
    def is_compiled(self) -> bool:
        """Return True once `compile()` has run."""
