"""Tri-state checkbox cascade.

The checked set is the only stored checkbox state. Indeterminate is
computed on read: a node with loaded, non-empty children is indeterminate
when some but not all of those children are checked and the node itself
is not.

Cascades only follow loaded children. An unloaded subtree keeps its state
until its children are loaded, at which point ``inherit_checked`` brings
them in line with their parent.
"""

from enum import Enum
from typing import AbstractSet, FrozenSet, Iterable, Sequence

from ..errors import NotFoundError
from .index import NodeIndex, collect_loaded_descendant_ids
from .node import TreeNode
from .paths import find_node_and_path


class CheckState(Enum):
    """Checkbox state of a single node as seen by a renderer."""
    UNCHECKED = 0
    CHECKED = 1
    INDETERMINATE = 2


def _frozen(result: set, original: AbstractSet[str]) -> FrozenSet[str]:
    # Hand back the original object when nothing changed so listeners
    # keyed on identity are not woken up.
    if result == original and isinstance(original, frozenset):
        return original
    return frozenset(result)


def reconcile_ancestors(index: NodeIndex, checked: AbstractSet[str],
                        path: Sequence[str]) -> FrozenSet[str]:
    """Recompute ancestors bottom-up from their direct loaded children.

    Args:
        index: Node index of the current tree
        checked: Checked ids
        path: Ancestor ids, root first (as returned by the path finder)

    Returns:
        Checked set where each ancestor with loaded, non-empty children is
        checked iff all of those children are
    """
    result = set(checked)
    for ancestor_id in reversed(path):
        ancestor = index.get(ancestor_id)
        if ancestor is None or not ancestor.children:
            continue
        if all(child.id in result for child in ancestor.children):
            result.add(ancestor_id)
        else:
            result.discard(ancestor_id)
    return _frozen(result, checked)


def toggle_checked(tree: Sequence[TreeNode], index: NodeIndex,
                   checked: AbstractSet[str], node_id: str) -> FrozenSet[str]:
    """Flip ``node_id`` and cascade down through loaded children and up
    through its ancestors.

    Returns:
        The new checked set as one value

    Raises:
        NotFoundError: If ``node_id`` is not in the tree
    """
    found = find_node_and_path(tree, node_id)
    if found is None:
        raise NotFoundError(node_id, "checkbox toggle")

    target = node_id not in checked
    affected = [node_id] + collect_loaded_descendant_ids(index, node_id)

    result = set(checked)
    if target:
        result.update(affected)
    else:
        result.difference_update(affected)

    return reconcile_ancestors(index, frozenset(result), found.path)


def inherit_checked(index: NodeIndex, checked: AbstractSet[str],
                    parent_id: str) -> FrozenSet[str]:
    """Check the loaded descendants of ``parent_id`` if it is checked.

    Called after children are attached to a node, so freshly loaded
    children of a checked folder show as checked.
    """
    if parent_id not in checked:
        return _frozen(set(checked), checked)
    result = set(checked)
    result.update(collect_loaded_descendant_ids(index, parent_id))
    return _frozen(result, checked)


def prune_checked(checked: AbstractSet[str], removed_ids: Iterable[str]) -> FrozenSet[str]:
    """Drop ids of nodes that left the tree."""
    result = set(checked)
    result.difference_update(removed_ids)
    return _frozen(result, checked)


def checkbox_state(index: NodeIndex, checked: AbstractSet[str], node_id: str) -> CheckState:
    """Checked, unchecked or indeterminate, computed on read."""
    if node_id in checked:
        return CheckState.CHECKED
    node = index.get(node_id)
    if node is not None and node.children:
        count = sum(1 for child in node.children if child.id in checked)
        if 0 < count < len(node.children):
            return CheckState.INDETERMINATE
    return CheckState.UNCHECKED


def is_indeterminate(index: NodeIndex, checked: AbstractSet[str], node_id: str) -> bool:
    return checkbox_state(index, checked, node_id) is CheckState.INDETERMINATE
