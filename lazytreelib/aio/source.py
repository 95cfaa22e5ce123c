"""Async node source abstraction.

A node source is the only I/O boundary of the library: it delivers the
top-level nodes and, on demand, the children of a node. Both calls may
fail; failures are handled by the expansion orchestrator.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Mapping

RawNode = Mapping[str, Any]


class NodeSource(ABC):
    """Abstract base class for node sources.

    Sources bridge between the tree-state engine and a concrete backend
    (HTTP API, database, filesystem...). They return raw nodes; the engine
    builds its own immutable nodes from them.
    """

    def __init__(self, max_concurrent: int = 100):
        """Initialize source with concurrency control.

        Args:
            max_concurrent: Maximum concurrent fetches
        """
        self.max_concurrent = max_concurrent
        self.semaphore = asyncio.Semaphore(max_concurrent)

    @abstractmethod
    async def fetch_top_level_nodes(self) -> List[RawNode]:
        """Fetch the root nodes of the tree.

        Returns:
            Raw nodes, each with ``children`` None (unloaded) or empty
        """
        pass

    @abstractmethod
    async def fetch_children_for_node(self, parent_id: str) -> List[RawNode]:
        """Fetch the direct children of ``parent_id``.

        Args:
            parent_id: Node whose children are requested

        Returns:
            Raw child nodes; they must never arrive with populated children
        """
        pass

    async def get_stats(self) -> Dict[str, Any]:
        """Get source statistics.

        Returns:
            Dictionary of statistics
        """
        return {
            'max_concurrent': self.max_concurrent,
            'available_permits': self.semaphore._value if hasattr(self.semaphore, '_value') else None,
        }

    async def close(self):
        """Clean up source resources.

        Override if the source holds connections or sessions.
        """
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


class CallableNodeSource(NodeSource):
    """Node source built from two plain async functions.

    Example:
        async def fetch_top():
            return await api.get('/nodes')

        async def fetch_children(parent_id):
            return await api.get(f'/nodes/{parent_id}/children')

        source = CallableNodeSource(fetch_top, fetch_children)
    """

    def __init__(self,
                 fetch_top_level: Callable[[], Awaitable[List[RawNode]]],
                 fetch_children: Callable[[str], Awaitable[List[RawNode]]],
                 max_concurrent: int = 100):
        super().__init__(max_concurrent)
        self._fetch_top_level = fetch_top_level
        self._fetch_children = fetch_children

    async def fetch_top_level_nodes(self) -> List[RawNode]:
        return list(await self._fetch_top_level())

    async def fetch_children_for_node(self, parent_id: str) -> List[RawNode]:
        return list(await self._fetch_children(parent_id))
