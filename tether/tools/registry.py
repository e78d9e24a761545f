"""Per-connection cache of the tool server's tools and their declarations."""

import logging
from typing import Iterator, Protocol

from ..errors import ToolConnectionError
from .schema import FunctionDeclaration, ToolDescriptor, translate

_log = logging.getLogger(__name__)


class ToolLister(Protocol):
    def list_tools(self) -> list[ToolDescriptor]:
        ...


class ToolRegistryCache:
    """Tools and declarations for one tool-server connection.

    Built once by :meth:`load` and read-only afterwards. Reconnecting
    means loading a new cache.
    """

    def __init__(self, descriptors: tuple[ToolDescriptor, ...] = ()):
        self._descriptors: dict[str, ToolDescriptor] = {}
        self._declarations: dict[str, FunctionDeclaration] = {}
        for descriptor in descriptors:
            if descriptor.name in self._declarations:
                _log.warning("Duplicate tool name %r ignored", descriptor.name)
                continue
            self._descriptors[descriptor.name] = descriptor
            self._declarations[descriptor.name] = translate(descriptor)

    @classmethod
    def load(cls, executor: ToolLister) -> "ToolRegistryCache":
        """List the executor's tools and translate each one.

        Raises:
            ToolConnectionError: If the listing call fails. Not retried.
        """
        try:
            descriptors = executor.list_tools()
        except ToolConnectionError:
            raise
        except Exception as e:
            raise ToolConnectionError(f"Failed to list tools: {e}") from e

        cache = cls(tuple(descriptors))
        _log.debug("Loaded %d tools: %s", len(cache), cache.allowed_names())
        return cache

    def allowed_names(self) -> tuple[str, ...]:
        """Names of every loaded tool, in listing order."""
        return tuple(self._declarations.keys())

    @property
    def declarations(self) -> tuple[FunctionDeclaration, ...]:
        return tuple(self._declarations.values())

    def has_tool(self, name: str) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._declarations)

    def __iter__(self) -> Iterator[FunctionDeclaration]:
        return iter(self.declarations)
