"""Asynchronous layer of LazyTreeLib.

Everything that touches a node source lives here: the source abstraction,
the expansion orchestrator that fetches children on demand, the error
policies and the ``TreeViewState`` command surface built on top of them.
"""

from .source import NodeSource, CallableNodeSource, RawNode
from .error_policies import (
    ErrorPolicy,
    ContinueOnErrorsPolicy,
    CollectErrorsPolicy,
    create_error_policy,
)
from .expansion import ExpansionOrchestrator
from .tree_view import TreeViewState

__all__ = [
    # Sources
    'NodeSource',
    'CallableNodeSource',
    'RawNode',
    # Error policies
    'ErrorPolicy',
    'ContinueOnErrorsPolicy',
    'CollectErrorsPolicy',
    'create_error_policy',
    # Orchestration
    'ExpansionOrchestrator',
    'TreeViewState',
]
