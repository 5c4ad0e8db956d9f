"""Errors raised by registry, config loader and compiler implementations."""


class RegistryError(Exception):
    """Base class for all registry-related errors."""


class ParameterNotFoundError(RegistryError, KeyError):
    """Raised when a parameter is not defined in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Parameter {name!r} is not defined")
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


class ServiceNotFoundError(RegistryError, KeyError):
    """Raised when a service is not defined in the registry."""

    def __init__(self, service_id: str) -> None:
        super().__init__(f"Service {service_id!r} is not defined")
        self.service_id = service_id

    def __str__(self) -> str:
        return str(self.args[0])


class FrozenRegistryError(RegistryError):
    """Raised when a compiled registry is asked to change its definitions."""

    def __init__(self, what: str) -> None:
        super().__init__(f"Cannot modify {what} of a compiled registry")


class CircularReferenceError(RegistryError):
    """Raised when parameters or services reference each other in a cycle."""

    def __init__(self, kind: str, path: list[str]) -> None:
        super().__init__(f"Circular {kind} reference: {' -> '.join(path)}")
        self.path = path


class InvalidDefinitionError(RegistryError):
    """Raised when a service definition is malformed or cannot be built."""

    def __init__(self, service_id: str, reason: str) -> None:
        super().__init__(f"Invalid definition for service {service_id!r}: {reason}")
        self.service_id = service_id


class ConfigLayerLoadError(Exception):
    """Raised when a present configuration layer cannot be parsed or applied."""

    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f"Cannot load configuration layer {str(path)!r}: {reason}")
        self.path = path


class CompilerError(Exception):
    """Raised when a registry cannot be dumped or a dump cannot be restored."""
