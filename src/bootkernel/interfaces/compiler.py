"""Registry compiler interface definitions."""

import abc

from .registry import AbstractRegistry


class AbstractCompiler(abc.ABC):
    """Serializes compiled registries and restores them without recomputation."""

    @abc.abstractmethod
    def dump(self, registry: AbstractRegistry) -> str:
        """Serialize a compiled registry to text.

        Raises:
            CompilerError: If the registry is not compiled or cannot be serialized.
        """

    @abc.abstractmethod
    def load(self, text: str) -> AbstractRegistry:
        """Reconstruct a compiled registry from text produced by `dump`.

        Raises:
            CompilerError: If the text is corrupt or in an incompatible format.
        """
