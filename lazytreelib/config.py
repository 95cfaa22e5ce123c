"""Configuration system for LazyTreeLib.

This module defines how users tune a tree view: initial selection, the
defaults applied to newly added nodes, fetch concurrency, cache sizes and
how errors are logged.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .core.node import NEW_NODE_DEFAULTS


@dataclass
class TreeViewConfig:
    """Complete configuration for a ``TreeViewState``.

    The tree view validates this on construction and refuses an invalid
    configuration.
    """

    # Selection after the top-level nodes are loaded
    initial_selected_id: Optional[str] = None
    select_first_on_load: bool = True  # Used only when initial_selected_id is None

    # Raw-format defaults for nodes created through add_node
    new_node_defaults: Dict[str, Any] = field(default_factory=lambda: dict(NEW_NODE_DEFAULTS))

    # Fetching
    max_concurrent_fetches: int = 100  # Semaphore size of the node source

    # Derived-state caches (entries per cache)
    cache_size: int = 8

    # Error reporting
    verbose_errors: bool = True  # Log a warning for every reported error
    logger: Optional[logging.Logger] = None  # Defaults to the module logger

    @classmethod
    def headless(cls) -> 'TreeViewConfig':
        """Create config for programmatic use without a visible view.

        Nothing is auto-selected and errors are only collected, not logged.

        Returns:
            TreeViewConfig for headless use
        """
        return cls(
            select_first_on_load=False,
            verbose_errors=False,
        )

    def get_logger(self) -> logging.Logger:
        return self.logger or logging.getLogger('lazytreelib')

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.max_concurrent_fetches <= 0:
            errors.append("max_concurrent_fetches must be positive")

        if self.cache_size <= 0:
            errors.append("cache_size must be positive")

        if self.initial_selected_id is not None and not isinstance(self.initial_selected_id, str):
            errors.append("initial_selected_id must be a string")

        if 'id' in self.new_node_defaults:
            errors.append("new_node_defaults cannot provide an id")

        children = self.new_node_defaults.get('children')
        if children:
            errors.append("new_node_defaults cannot provide pre-populated children")

        return errors
