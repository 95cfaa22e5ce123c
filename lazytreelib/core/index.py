"""Id to node lookup table for a tree snapshot."""

from collections import deque
from typing import Dict, List, Sequence

from .node import TreeNode

Tree = Sequence[TreeNode]
NodeIndex = Dict[str, TreeNode]


def build_index(tree: Tree) -> NodeIndex:
    """Map every node id of ``tree`` to its node.

    Full depth-first traversal, O(n) in total node count. The result is only
    valid for this exact tree object; callers memoize it on tree identity.

    Args:
        tree: Root nodes

    Returns:
        Dictionary of node id -> TreeNode
    """
    index: NodeIndex = {}
    stack = list(reversed(tree))
    while stack:
        node = stack.pop()
        index[node.id] = node
        if node.children:
            stack.extend(reversed(node.children))
    return index


def collect_loaded_descendant_ids(index: NodeIndex, node_id: str) -> List[str]:
    """Breadth-first ids of every loaded descendant of ``node_id``.

    Unloaded children stop the descent; the node itself is not included.
    Returns an empty list for unknown ids.
    """
    node = index.get(node_id)
    if node is None or not node.children:
        return []

    descendant_ids = []
    queue = deque(node.children)
    while queue:
        current = queue.popleft()
        descendant_ids.append(current.id)
        if current.children:
            queue.extend(current.children)
    return descendant_ids
