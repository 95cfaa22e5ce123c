"""Exception types raised by the tree-state engine.

The core functions raise these; ``TreeViewState`` catches them at the
command boundary and reports them through its error policy instead of
letting them escape.
"""

from typing import Optional


class TreeStateError(Exception):
    """Base class for every error the engine reports."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.node_id = node_id


class ValidationError(TreeStateError):
    """A command was rejected because it would break a tree invariant.

    Covers self-moves, moves into a descendant, moves or adds under a
    parent whose children are not loaded yet, and duplicate ids.
    """


class NotFoundError(TreeStateError):
    """A command referenced an id that is not in the tree."""

    def __init__(self, node_id: str, context: str = "operation"):
        super().__init__(f"Node with ID {node_id} not found for {context}.", node_id)
        self.context = context


class FetchError(TreeStateError):
    """A fetch collaborator call failed or returned unusable data."""

    def __init__(self, node_id: Optional[str], cause: Exception):
        target = f"children for {node_id}" if node_id else "top-level nodes"
        super().__init__(f"Error fetching {target}: {cause}", node_id)
        self.cause = cause
