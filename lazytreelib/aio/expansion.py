"""Async expansion orchestrator.

Coordinates the open and loading sets with on-demand child fetching. The
only suspension points are the fetch calls themselves; everything else
runs synchronously, so each fetched result is applied atomically to the
tree that is current at the moment it arrives.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from ..errors import FetchError, NotFoundError, TreeStateError
from ..core.index import collect_loaded_descendant_ids
from ..core.mutations import check_unique_ids, update_node_in_children
from ..core.node import TreeNode, tree_from_raw, validate_raw_node
from ..core.store import TreeStore
from .source import NodeSource, RawNode

Reporter = Callable[[TreeStateError, str], None]


class ExpansionOrchestrator:
    """
    Expands and collapses nodes, fetching children on demand.

    A node is fetched at most once at a time. A second request for a node
    whose fetch is in flight waits on the first one through a shared
    future instead of issuing another fetch.

    Example:
        orchestrator = ExpansionOrchestrator(store, source, report)
        await orchestrator.load_top_level()
        await orchestrator.expand('node-A', recursive=True)
    """

    def __init__(
        self,
        store: TreeStore,
        source: NodeSource,
        report: Reporter,
        on_children_loaded: Optional[Callable[[str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Holder of the current tree and id sets
            source: Fetch collaborator
            report: Called with (error, operation) for every failure
            on_children_loaded: Called with the node id after children
                were attached to the tree
            logger: Logger for fetch progress (defaults to module logger)
        """
        self.store = store
        self.source = source
        self._report = report
        self._on_children_loaded = on_children_loaded
        self._logger = logger or logging.getLogger(__name__)
        self._fetches_in_progress: Dict[str, asyncio.Future] = {}

        # Statistics
        self.fetch_count = 0
        self.concurrent_waits = 0

    async def load_top_level(self) -> bool:
        """
        Replace the tree with freshly fetched top-level nodes.

        On failure the tree is left as it was and a FetchError is reported.
        """
        try:
            async with self.source.semaphore:
                self.fetch_count += 1
                raw_nodes = await self.source.fetch_top_level_nodes()
            nodes = self._build_nodes(raw_nodes, existing_ids=frozenset())
        except Exception as e:
            self._report(FetchError(None, e), "fetching initial nodes")
            return False

        self.store.set_tree(nodes)
        self.store.open_ids = frozenset()
        self._logger.debug("Loaded %d top-level nodes", len(nodes))
        return True

    async def expand(self, node_id: str, recursive: bool = False) -> bool:
        """
        Open ``node_id``, fetching its children if they are not loaded.

        Args:
            node_id: Node to expand
            recursive: Also expand every descendant that has children,
                fetching as needed. Sibling branches are fetched
                concurrently.

        Returns:
            True if every needed fetch succeeded. Successful results are
            kept even when others fail; each failure is reported once.
        """
        if node_id not in self.store.index:
            self._report(NotFoundError(node_id, "expansion"), "expanding node")
            return False

        self.store.open([node_id])
        if not recursive:
            return await self._ensure_loaded(node_id)
        return await self._expand_recursive(node_id)

    def collapse(self, node_id: str, recursive: bool = False) -> bool:
        """
        Close ``node_id`` and, if recursive, every loaded descendant.

        Data is never unloaded; only visibility changes. The open set is
        replaced in a single update.
        """
        index = self.store.index
        if node_id not in index:
            self._report(NotFoundError(node_id, "collapse"), "collapsing node")
            return False

        to_close = [node_id]
        if recursive:
            to_close.extend(collect_loaded_descendant_ids(index, node_id))
        self.store.close(to_close)
        return True

    async def toggle(self, node_id: str) -> bool:
        """Collapse an open node, expand a closed one."""
        if node_id in self.store.open_ids:
            return self.collapse(node_id)
        return await self.expand(node_id)

    def is_fetching(self, node_id: str) -> bool:
        return node_id in self._fetches_in_progress

    async def _expand_recursive(self, root_id: str) -> bool:
        """Breadth-first fan-out: each node's children are queued as soon
        as that node is loaded, without waiting for its siblings."""
        visited = {root_id}
        pending: Dict[asyncio.Task, str] = {
            asyncio.ensure_future(self._ensure_loaded(root_id)): root_id
        }
        all_loaded = True

        try:
            while pending:
                done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    node_id = pending.pop(task)
                    if not task.result():
                        all_loaded = False
                        continue

                    node = self.store.index.get(node_id)
                    if node is None or not node.children:
                        continue

                    expandable = [
                        child.id for child in node.children
                        if child.effective_has_children and child.id not in visited
                    ]
                    visited.update(expandable)
                    self.store.open(expandable)
                    for child_id in expandable:
                        pending[asyncio.ensure_future(self._ensure_loaded(child_id))] = child_id
        finally:
            for task in pending:
                task.cancel()

        return all_loaded

    async def _ensure_loaded(self, node_id: str) -> bool:
        """
        Make sure the children of ``node_id`` are loaded.

        Returns:
            True if the children are loaded afterwards, or the node
            declares none so there is nothing to fetch
        """
        in_flight = self._fetches_in_progress.get(node_id)
        if in_flight is not None:
            self.concurrent_waits += 1
            return await asyncio.shield(in_flight)

        node = self.store.index.get(node_id)
        if node is None:
            return False
        if node.is_loaded or not node.has_children:
            return True
        return await self._fetch_children(node_id)

    async def _fetch_children(self, node_id: str) -> bool:
        future = asyncio.get_running_loop().create_future()
        self._fetches_in_progress[node_id] = future
        success = False

        try:
            with self.store.loading(node_id):
                try:
                    async with self.source.semaphore:
                        self.fetch_count += 1
                        self._logger.debug("Fetching children for %s", node_id)
                        raw_children = await self.source.fetch_children_for_node(node_id)
                    self._apply_children(node_id, raw_children)
                    success = True
                except Exception as e:
                    # Roll back the speculative open; the node stays unloaded.
                    self.store.close([node_id])
                    self._report(FetchError(node_id, e), f"fetching children for {node_id}")
        finally:
            del self._fetches_in_progress[node_id]
            future.set_result(success)

        return success

    def _apply_children(self, node_id: str, raw_children: List[RawNode]) -> None:
        """Attach children to ``node_id`` in the tree current right now."""
        index = self.store.index
        if node_id not in index:
            self._logger.debug("Node %s was removed before its children arrived", node_id)
            self.store.close([node_id])
            return

        # Replacing already loaded children may reuse their ids.
        existing_ids = set(index).difference(collect_loaded_descendant_ids(index, node_id))
        children = self._build_nodes(raw_children, existing_ids)

        self.store.set_tree(update_node_in_children(self.store.tree, node_id, children))
        self._logger.debug("Attached %d children to %s", len(children), node_id)
        if self._on_children_loaded is not None:
            self._on_children_loaded(node_id)

    @staticmethod
    def _build_nodes(raw_nodes: List[RawNode], existing_ids) -> List[TreeNode]:
        raw_nodes = list(raw_nodes)
        for raw in raw_nodes:
            validate_raw_node(raw)
        nodes = list(tree_from_raw(raw_nodes))
        check_unique_ids(existing_ids, nodes)
        return nodes
