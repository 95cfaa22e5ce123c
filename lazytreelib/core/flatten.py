"""Project the hierarchy onto the linear sequence of visible rows.

The flattened sequence is the single source of "row at index k" for both
windowed rendering and keyboard navigation.
"""

from dataclasses import dataclass
from typing import AbstractSet, List, Optional, Sequence

from .node import TreeNode


@dataclass(frozen=True)
class FlatNode:
    """One visible row. Derived from the tree, never stored back into it."""

    id: str
    name: str
    depth: int
    has_children: bool
    declared_has_children: bool
    is_loaded: bool
    is_loading_children: bool
    is_open: bool
    type: Optional[str] = None
    icon: Optional[str] = None


def _flat_node(node: TreeNode, depth: int,
               open_ids: AbstractSet[str],
               loading_ids: AbstractSet[str]) -> FlatNode:
    return FlatNode(
        id=node.id,
        name=node.name,
        depth=depth,
        has_children=node.effective_has_children,
        declared_has_children=node.has_children,
        is_loaded=node.is_loaded,
        is_loading_children=node.id in loading_ids,
        is_open=node.id in open_ids,
        type=node.type,
        icon=node.icon,
    )


def flatten_tree(tree: Sequence[TreeNode],
                 open_ids: AbstractSet[str],
                 loading_ids: AbstractSet[str]) -> List[FlatNode]:
    """Pre-order list of visible rows.

    A node's children follow it iff the node is open AND its children are
    loaded AND there is at least one child. Work is proportional to the
    number of visible rows, closed subtrees are never entered.

    Args:
        tree: Root nodes
        open_ids: Ids of expanded nodes
        loading_ids: Ids with a fetch in flight

    Returns:
        List of FlatNode in display order
    """
    rows: List[FlatNode] = []
    # Stack of (node, depth), reversed so the first sibling pops first
    stack = [(node, 0) for node in reversed(tree)]
    while stack:
        node, depth = stack.pop()
        row = _flat_node(node, depth, open_ids, loading_ids)
        rows.append(row)
        if row.is_open and node.children:
            stack.extend((child, depth + 1) for child in reversed(node.children))
    return rows


def index_of(rows: Sequence[FlatNode], node_id: Optional[str]) -> int:
    """Row index of ``node_id``, or -1 when it is not visible."""
    if node_id is None:
        return -1
    for i, row in enumerate(rows):
        if row.id == node_id:
            return i
    return -1
