"""Locate a node together with the chain of its ancestor ids."""

from typing import List, NamedTuple, Optional, Sequence

from .node import TreeNode


class NodePath(NamedTuple):
    """A located node and its ancestor ids, root first, node excluded."""
    node: TreeNode
    path: List[str]


def find_node_and_path(tree: Sequence[TreeNode], node_id: str) -> Optional[NodePath]:
    """Depth-first search for ``node_id``.

    Only loaded children are searched; nodes below an unloaded node do not
    exist yet as far as the tree is concerned.

    Args:
        tree: Root nodes
        node_id: Id to look for

    Returns:
        NodePath, or None if the id is not in the tree
    """
    # Stack of (nodes-iterator, ancestor path for those nodes)
    stack = [(iter(tree), [])]
    while stack:
        nodes, path = stack[-1]
        node = next(nodes, None)
        if node is None:
            stack.pop()
            continue
        if node.id == node_id:
            return NodePath(node, list(path))
        if node.children:
            stack.append((iter(node.children), path + [node.id]))
    return None


def get_node_hierarchy(tree: Sequence[TreeNode], node_id: str) -> Optional[List[str]]:
    """Ids from the root down to and including ``node_id``, or None."""
    found = find_node_and_path(tree, node_id)
    if found is None:
        return None
    return found.path + [node_id]
