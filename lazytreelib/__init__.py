"""LazyTreeLib - Headless state for lazily loaded, virtualized tree views.

LazyTreeLib keeps the state behind a tree view whose children are fetched
on demand: an immutable node tree with structural sharing, the flattened
list of visible rows, expansion and loading state, selection and move mode,
keyboard navigation and tri-state checkboxes. It renders nothing.

Typical use:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from lazytreelib import open_tree_view

    view = await open_tree_view(fetch_top_level, fetch_children)
    await view.expand_node('node-A')
    rows = view.flat_nodes
━━━━━━━━━━━━━━━━━━━━━━━━━━

The pure building blocks live in ``lazytreelib.core``; everything that
awaits a node source lives in ``lazytreelib.aio``.
"""

__version__ = "0.1.0"

from . import core
from . import aio
from .aio import (
    NodeSource,
    CallableNodeSource,
    TreeViewState,
    ErrorPolicy,
    ContinueOnErrorsPolicy,
    CollectErrorsPolicy,
)
from .api import create_tree_view, open_tree_view
from .config import TreeViewConfig
from .core import CheckState, FlatNode, NavigationKey, SelectionMode, TreeNode
from .errors import FetchError, NotFoundError, TreeStateError, ValidationError

__all__ = [
    "__version__",
    "core",
    "aio",
    # Entry points
    "create_tree_view",
    "open_tree_view",
    "TreeViewState",
    "TreeViewConfig",
    # Sources and policies
    "NodeSource",
    "CallableNodeSource",
    "ErrorPolicy",
    "ContinueOnErrorsPolicy",
    "CollectErrorsPolicy",
    # Data types
    "TreeNode",
    "FlatNode",
    "CheckState",
    "NavigationKey",
    "SelectionMode",
    # Errors
    "TreeStateError",
    "ValidationError",
    "NotFoundError",
    "FetchError",
]
