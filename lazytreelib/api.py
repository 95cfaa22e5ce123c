"""High-level API for LazyTreeLib.

Convenience functions for the common case: a tree view fed by two plain
async functions.
"""

from typing import Any, Awaitable, Callable, List, Optional

from .aio.source import CallableNodeSource, RawNode
from .aio.tree_view import TreeViewState
from .config import TreeViewConfig


def create_tree_view(
    fetch_top_level: Callable[[], Awaitable[List[RawNode]]],
    fetch_children: Callable[[str], Awaitable[List[RawNode]]],
    config: Optional[TreeViewConfig] = None,
    **listeners: Any
) -> TreeViewState:
    """Create a tree view over two async fetch functions.

    Args:
        fetch_top_level: Returns the raw root nodes
        fetch_children: Returns the raw children of a node id
        config: View configuration; its ``max_concurrent_fetches`` bounds
            concurrent calls to the fetch functions
        **listeners: ``on_node_select``, ``on_error``,
            ``on_checked_nodes_change`` or ``error_policy``

    Returns:
        A TreeViewState that has not loaded anything yet
    """
    config = config or TreeViewConfig()
    source = CallableNodeSource(
        fetch_top_level,
        fetch_children,
        max_concurrent=config.max_concurrent_fetches,
    )
    return TreeViewState(source, config=config, **listeners)


async def open_tree_view(
    fetch_top_level: Callable[[], Awaitable[List[RawNode]]],
    fetch_children: Callable[[str], Awaitable[List[RawNode]]],
    config: Optional[TreeViewConfig] = None,
    **listeners: Any
) -> TreeViewState:
    """Create a tree view and load its top-level nodes.

    A failed initial load is reported through the view (see
    ``last_error``); the view is returned either way.

    Example:
        view = await open_tree_view(api.roots, api.children)
        if view.last_error:
            print(view.last_error)
    """
    view = create_tree_view(fetch_top_level, fetch_children, config, **listeners)
    await view.load()
    return view
