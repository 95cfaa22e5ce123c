"""Test fixtures for LazyTreeLib consumers.

These fixtures stand in for a real backend and a real view so that code
driving a ``TreeViewState`` can be tested deterministically: fetch results
are scripted, failures are injected per node and the order in which
concurrent fetches complete can be controlled with gates.
"""

import asyncio
from collections import Counter
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from ..aio.source import NodeSource, RawNode
from ..errors import TreeStateError

# Key used for the top-level fetch in failures, gates and counters.
TOP_LEVEL = None


class InMemoryNodeSource(NodeSource):
    """Node source serving scripted raw nodes from memory.

    Example:
        source = InMemoryNodeSource(
            top_level=[{'id': 'A', 'name': 'A', 'hasChildren': True}],
            children={'A': [{'id': 'A1', 'name': 'A1'}]},
        )
        source.fail('A')             # next fetches of A raise
        gate = source.gate('A')      # fetches of A wait until gate.set()
        assert source.fetch_counts['A'] == 0
    """

    def __init__(self,
                 top_level: Iterable[RawNode] = (),
                 children: Optional[Mapping[str, Iterable[RawNode]]] = None,
                 max_concurrent: int = 100):
        """Initialize the source.

        Args:
            top_level: Raw root nodes
            children: Raw children per parent id; unknown ids get []
            max_concurrent: Semaphore size
        """
        super().__init__(max_concurrent)
        self.top_level: List[RawNode] = list(top_level)
        self.children: Dict[str, List[RawNode]] = {
            parent_id: list(raws) for parent_id, raws in (children or {}).items()
        }
        self.failures: Dict[Optional[str], Exception] = {}
        self.gates: Dict[Optional[str], asyncio.Event] = {}

        # Statistics
        self.fetch_counts: Counter = Counter()
        self.calls: List[Optional[str]] = []
        self.in_flight: set = set()
        self.max_in_flight = 0

    def fail(self, node_id: Optional[str] = TOP_LEVEL, error: Optional[Exception] = None) -> None:
        """Make fetches for ``node_id`` (None: top level) raise ``error``."""
        self.failures[node_id] = error or RuntimeError(f"Failed to load {node_id or 'top level'}")

    def succeed(self, node_id: Optional[str] = TOP_LEVEL) -> None:
        self.failures.pop(node_id, None)

    def gate(self, node_id: Optional[str] = TOP_LEVEL) -> asyncio.Event:
        """Hold fetches for ``node_id`` until the returned event is set."""
        event = asyncio.Event()
        self.gates[node_id] = event
        return event

    async def fetch_top_level_nodes(self) -> List[RawNode]:
        await self._serve(TOP_LEVEL)
        return [dict(raw) for raw in self.top_level]

    async def fetch_children_for_node(self, parent_id: str) -> List[RawNode]:
        await self._serve(parent_id)
        return [dict(raw) for raw in self.children.get(parent_id, [])]

    async def get_stats(self) -> Dict[str, Any]:
        stats = await super().get_stats()
        stats.update({
            'total_fetches': sum(self.fetch_counts.values()),
            'max_in_flight': self.max_in_flight,
        })
        return stats

    async def _serve(self, key: Optional[str]) -> None:
        self.calls.append(key)
        self.fetch_counts[key] += 1
        self.in_flight.add(key)
        self.max_in_flight = max(self.max_in_flight, len(self.in_flight))
        try:
            gate = self.gates.get(key)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(0)
            error = self.failures.get(key)
            if error is not None:
                raise error
        finally:
            self.in_flight.discard(key)


class NotificationRecorder:
    """Records every notification a tree view emits.

    Example:
        recorder = NotificationRecorder()
        view = TreeViewState(source, **recorder.listeners())
        ...
        assert recorder.selected_ids == ['A', None]
    """

    def __init__(self):
        self.selections: List[Tuple[Optional[str], Optional[Dict[str, Any]]]] = []
        self.errors: List[TreeStateError] = []
        self.checked_changes: List[FrozenSet[str]] = []

    def on_node_select(self, node_id: Optional[str], data: Optional[Dict[str, Any]]) -> None:
        self.selections.append((node_id, data))

    def on_error(self, error: TreeStateError) -> None:
        self.errors.append(error)

    def on_checked_nodes_change(self, checked: FrozenSet[str]) -> None:
        self.checked_changes.append(checked)

    def listeners(self) -> Dict[str, Callable]:
        """Keyword arguments for ``TreeViewState`` / ``create_tree_view``."""
        return {
            'on_node_select': self.on_node_select,
            'on_error': self.on_error,
            'on_checked_nodes_change': self.on_checked_nodes_change,
        }

    @property
    def selected_ids(self) -> List[Optional[str]]:
        return [node_id for node_id, _ in self.selections]

    @property
    def error_messages(self) -> List[str]:
        return [str(error) for error in self.errors]

    def clear(self) -> None:
        self.selections.clear()
        self.errors.clear()
        self.checked_changes.clear()


def sample_source(**kwargs) -> InMemoryNodeSource:
    """A small file-browser tree: two root folders and a root file.

    ``root-1`` holds a file and a nested folder; ``root-3`` was delivered
    already loaded and empty.
    """
    return InMemoryNodeSource(
        top_level=[
            {'id': 'root-1', 'name': 'Root Folder 1', 'hasChildren': True,
             'children': None, 'type': 'folder', 'icon': '📁'},
            {'id': 'root-2', 'name': 'Root File 1', 'hasChildren': False,
             'children': [], 'type': 'file', 'icon': '📄'},
            {'id': 'root-3', 'name': 'Root Folder 2 (Empty)', 'hasChildren': True,
             'children': [], 'type': 'folder', 'icon': '📁'},
        ],
        children={
            'root-1': [
                {'id': 'child-1-1', 'name': 'Child File 1.1', 'hasChildren': False,
                 'children': [], 'type': 'file', 'icon': '📄', 'customData': 'abc'},
                {'id': 'child-1-2', 'name': 'Child Folder 1.2', 'hasChildren': True,
                 'children': None, 'type': 'folder', 'icon': '📁'},
            ],
            'child-1-2': [
                {'id': 'sub-child-1', 'name': 'Sub Child File', 'hasChildren': False,
                 'children': [], 'type': 'file', 'icon': '📄'},
            ],
        },
        **kwargs
    )
