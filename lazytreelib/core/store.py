"""Holder of the current tree snapshot and its auxiliary id sets.

The store is the one place the current values live. Each value is
immutable and is only ever replaced, never edited; a replacement happens
only when the value really changes, so derived state keyed on identity
stays cached across no-op updates.
"""

from contextlib import contextmanager
from typing import Dict, FrozenSet, Iterable, Iterator, List, Sequence, Tuple

from .cache import IdentityCache
from .flatten import FlatNode, flatten_tree
from .index import NodeIndex, build_index
from .node import TreeNode


class TreeStore:
    """Current tree plus open, loading and checked id sets.

    Attributes:
        tree: Tuple of root nodes
        open_ids: Expanded node ids
        loading_ids: Ids with a child fetch in flight
        checked_ids: Checked node ids
    """

    def __init__(self, tree: Sequence[TreeNode] = (), cache_size: int = 8):
        self.tree: Tuple[TreeNode, ...] = tuple(tree)
        self.open_ids: FrozenSet[str] = frozenset()
        self.loading_ids: FrozenSet[str] = frozenset()
        self.checked_ids: FrozenSet[str] = frozenset()
        self._index_cache = IdentityCache(maxsize=cache_size)
        self._flat_cache = IdentityCache(maxsize=cache_size)

    @property
    def index(self) -> NodeIndex:
        """Node index of the current tree, rebuilt when the tree changes."""
        tree = self.tree
        return self._index_cache.get_or_compute((tree,), lambda: build_index(tree))

    @property
    def flat_nodes(self) -> List[FlatNode]:
        """Visible rows, recomputed when tree, open or loading ids change."""
        tree, open_ids, loading_ids = self.tree, self.open_ids, self.loading_ids
        return self._flat_cache.get_or_compute(
            (tree, open_ids, loading_ids),
            lambda: flatten_tree(tree, open_ids, loading_ids),
        )

    def set_tree(self, tree: Sequence[TreeNode]) -> bool:
        """Replace the tree. Returns True if it is a different object."""
        if tree is self.tree:
            return False
        self.tree = tuple(tree)
        return True

    def open(self, node_ids: Iterable[str]) -> bool:
        new_ids = self.open_ids.union(node_ids)
        if new_ids == self.open_ids:
            return False
        self.open_ids = new_ids
        return True

    def close(self, node_ids: Iterable[str]) -> bool:
        new_ids = self.open_ids.difference(node_ids)
        if new_ids == self.open_ids:
            return False
        self.open_ids = new_ids
        return True

    def set_checked(self, checked_ids: Iterable[str]) -> bool:
        new_ids = frozenset(checked_ids)
        if new_ids == self.checked_ids:
            return False
        self.checked_ids = new_ids
        return True

    def is_loading(self, node_id: str) -> bool:
        return node_id in self.loading_ids

    @contextmanager
    def loading(self, node_id: str) -> Iterator[None]:
        """Mark ``node_id`` as loading for the duration of the block.

        The flag is released exactly once when the block exits, whether
        the fetch inside it succeeded or raised.
        """
        self.loading_ids = self.loading_ids | {node_id}
        try:
            yield
        finally:
            self.loading_ids = self.loading_ids - {node_id}

    def get_cache_stats(self) -> Dict[str, Dict]:
        return {
            'index': self._index_cache.get_cache_stats(),
            'flat_nodes': self._flat_cache.get_cache_stats(),
        }
