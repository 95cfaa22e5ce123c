"""Copy-on-write mutations of a tree snapshot.

Every function takes a tree (tuple of root nodes) and returns a new tree.
Only the nodes on the root-to-target path are rebuilt; every other subtree
keeps its reference identity. When nothing changes, the very same tree
object is returned, which callers use as the no-op signal.
"""

import logging
from typing import (
    AbstractSet, Any, Callable, Iterable, Mapping, NamedTuple, Optional,
    Sequence, Tuple, Union,
)

from ..errors import NotFoundError, ValidationError
from .node import RawNode, TreeNode, build_new_node
from .paths import NodePath, find_node_and_path

logger = logging.getLogger(__name__)

Tree = Tuple[TreeNode, ...]


class RemovalResult(NamedTuple):
    tree: Tree
    removed: Optional[TreeNode]


class UpdateResult(NamedTuple):
    tree: Tree
    success: bool


def _update_at(tree: Sequence[TreeNode], path: Sequence[str],
               update: Callable[[TreeNode], TreeNode]) -> Tree:
    """Replace the node at the end of ``path`` with ``update(node)``.

    ``path`` lists ids from a root node down to the target, inclusive.
    Ancestors are rebuilt with their new child tuple; siblings are reused.
    Returns ``tree`` itself if the path does not resolve or ``update``
    hands back the same node.
    """
    def descend(nodes: Tree, remaining: Sequence[str]) -> Tree:
        head = remaining[0]
        for position, node in enumerate(nodes):
            if node.id == head:
                break
        else:
            return nodes

        if len(remaining) == 1:
            replacement = update(node)
        else:
            if not node.children:
                return nodes
            new_children = descend(node.children, remaining[1:])
            if new_children is node.children:
                return nodes
            replacement = node.with_children(new_children)

        if replacement is node:
            return nodes
        return nodes[:position] + (replacement,) + nodes[position + 1:]

    if not path:
        return tree
    nodes = tuple(tree)
    result = descend(nodes, path)
    return tree if result is nodes else result


def add_node_at_path(tree: Sequence[TreeNode],
                     path: Sequence[str],
                     data: Union[RawNode, TreeNode],
                     defaults: Optional[RawNode] = None) -> Tree:
    """Append a node as the last child of the parent at ``path``.

    Args:
        tree: Current tree
        path: Ancestor ids from the root to the parent, inclusive. An empty
            path appends to the root list.
        data: Raw node (gaps filled from ``defaults``) or an existing
            TreeNode to reinsert
        defaults: Raw-format defaults for new nodes

    Returns:
        New tree, or ``tree`` unchanged when the path does not resolve or
        the parent's children are not loaded yet
    """
    new_node = build_new_node(data, defaults)
    if not path:
        return tuple(tree) + (new_node,)

    def append(parent: TreeNode) -> TreeNode:
        if parent.children is None:
            logger.debug("Cannot add node %s: children of %s not loaded",
                         new_node.id, parent.id)
            return parent
        return parent.with_children(parent.children + (new_node,))

    return _update_at(tree, path, append)


def find_and_remove_node(tree: Sequence[TreeNode], node_id: str) -> RemovalResult:
    """Detach ``node_id`` (and its subtree) from wherever it lives.

    A parent left without children becomes loaded-empty, never unloaded.

    Returns:
        RemovalResult with the new tree and the detached node; the tree is
        returned unchanged with ``removed=None`` if the id is absent
    """
    found = find_node_and_path(tree, node_id)
    if found is None:
        return RemovalResult(tree, None)

    if not found.path:
        remaining = tuple(node for node in tree if node.id != node_id)
        return RemovalResult(remaining, found.node)

    def detach(parent: TreeNode) -> TreeNode:
        return parent.with_children(
            child for child in parent.children if child.id != node_id
        )

    return RemovalResult(_update_at(tree, found.path, detach), found.node)


def update_node_data(tree: Sequence[TreeNode], node_id: str,
                     fields: Mapping[str, Any]) -> UpdateResult:
    """Apply raw-format ``fields`` to a node via ``TreeNode.clone``.

    ``id`` and ``children`` are never taken from ``fields``; children are
    only changed by add/remove/move and by attaching fetched data.
    """
    found = find_node_and_path(tree, node_id)
    if found is None:
        return UpdateResult(tree, False)

    updates = {k: v for k, v in fields.items() if k not in ('id', 'children')}
    new_tree = _update_at(tree, found.path + [node_id],
                          lambda node: node.clone(updates))
    return UpdateResult(new_tree, True)


def update_node_in_children(tree: Sequence[TreeNode], node_id: str,
                            raw_children: Iterable[RawNode]) -> Tree:
    """Attach freshly fetched children to ``node_id``.

    This is the only operation that moves a node out of the unloaded state.
    Applying it again to an already loaded node replaces the children.
    """
    found = find_node_and_path(tree, node_id)
    if found is None:
        return tree

    children = tuple(TreeNode.from_raw(raw) for raw in raw_children)
    return _update_at(tree, found.path + [node_id],
                      lambda node: node.with_children(children))


def validate_move(tree: Sequence[TreeNode], node_id: str,
                  target_parent_id: Optional[str]) -> Tuple[NodePath, Optional[NodePath]]:
    """Check that ``node_id`` may become the last child of the target.

    Checks, in order: no self-move, target not inside the moved subtree,
    target children loaded.

    Returns:
        (moved node path, target node path or None for the root list)

    Raises:
        NotFoundError: If the node or the target does not exist
        ValidationError: If the move would break the hierarchy
    """
    if target_parent_id == node_id:
        raise ValidationError("Cannot move a node into itself.", node_id)

    moved = find_node_and_path(tree, node_id)
    if moved is None:
        raise NotFoundError(node_id, "move")

    if target_parent_id is None:
        return moved, None

    target = find_node_and_path(tree, target_parent_id)
    if target is None:
        raise NotFoundError(target_parent_id, "move target")
    if node_id in target.path:
        raise ValidationError("Cannot move a node into its own descendant.", node_id)
    if target.node.children is None:
        raise ValidationError(
            f'Target parent "{target.node.name}" must be expanded first.',
            target_parent_id,
        )
    return moved, target


def move_node(tree: Sequence[TreeNode], node_id: str,
              target_parent_id: Optional[str]) -> Tree:
    """Move ``node_id`` to the end of ``target_parent_id``'s children.

    ``None`` as target moves the node to the end of the root list. The
    move is remove-then-add after ``validate_move`` succeeds.

    Raises:
        NotFoundError, ValidationError: see ``validate_move``
    """
    _, target = validate_move(tree, node_id, target_parent_id)

    removal = find_and_remove_node(tree, node_id)
    target_path = [] if target is None else target.path + [target_parent_id]
    new_tree = add_node_at_path(removal.tree, target_path, removal.removed)
    logger.debug("Moved %s to %s", node_id, target_parent_id or "root")
    return new_tree


def check_unique_ids(existing_ids: AbstractSet[str],
                     nodes: Iterable[TreeNode]) -> None:
    """Raise ValidationError if any id in ``nodes`` (or below) already
    exists or appears twice among them."""
    seen = set()
    stack = list(nodes)
    while stack:
        node = stack.pop()
        if node.id in existing_ids or node.id in seen:
            raise ValidationError(f"Node with ID {node.id} already exists.", node.id)
        seen.add(node.id)
        if node.children:
            stack.extend(node.children)
