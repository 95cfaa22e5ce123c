"""Core abstractions for LazyTreeLib.

Pure, synchronous building blocks: the immutable node model, the node
index and path finder, the flattener, copy-on-write mutations, the
checkbox cascade and the selection/navigation state machine. None of these
perform I/O.
"""

from .node import TreeNode, NEW_NODE_DEFAULTS, build_new_node, tree_from_raw, validate_raw_node
from .index import build_index, collect_loaded_descendant_ids
from .paths import NodePath, find_node_and_path, get_node_hierarchy
from .flatten import FlatNode, flatten_tree, index_of
from .mutations import (
    RemovalResult,
    UpdateResult,
    add_node_at_path,
    check_unique_ids,
    find_and_remove_node,
    move_node,
    update_node_data,
    update_node_in_children,
    validate_move,
)
from .checkbox import (
    CheckState,
    checkbox_state,
    inherit_checked,
    is_indeterminate,
    prune_checked,
    reconcile_ancestors,
    toggle_checked,
)
from .navigation import (
    KEY_BINDINGS,
    NavigationDecision,
    NavigationKey,
    SelectionMachine,
    SelectionMode,
    SelectionState,
    plan_navigation,
)
from .cache import IdentityCache
from .store import TreeStore

__all__ = [
    # Node model
    'TreeNode',
    'NEW_NODE_DEFAULTS',
    'build_new_node',
    'tree_from_raw',
    'validate_raw_node',
    # Index and paths
    'build_index',
    'collect_loaded_descendant_ids',
    'NodePath',
    'find_node_and_path',
    'get_node_hierarchy',
    # Flattening
    'FlatNode',
    'flatten_tree',
    'index_of',
    # Mutations
    'RemovalResult',
    'UpdateResult',
    'add_node_at_path',
    'check_unique_ids',
    'find_and_remove_node',
    'move_node',
    'update_node_data',
    'update_node_in_children',
    'validate_move',
    # Checkboxes
    'CheckState',
    'checkbox_state',
    'inherit_checked',
    'is_indeterminate',
    'prune_checked',
    'reconcile_ancestors',
    'toggle_checked',
    # Selection and navigation
    'KEY_BINDINGS',
    'NavigationDecision',
    'NavigationKey',
    'SelectionMachine',
    'SelectionMode',
    'SelectionState',
    'plan_navigation',
    # State holding
    'IdentityCache',
    'TreeStore',
]
