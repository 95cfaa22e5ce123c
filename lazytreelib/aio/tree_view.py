"""Tree view state: the command surface of the library.

``TreeViewState`` owns one tree store, one expansion orchestrator and one
selection machine, and exposes the imperative commands a view (or any
other consumer) drives: add, remove, update, move, expand, collapse,
select, navigate and check.

Commands never raise. Validation, not-found and fetch errors are routed
through the configured error policy, stored in ``last_error`` and passed to
the ``on_error`` listener; the command then returns False or None.
"""

from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from ..config import TreeViewConfig
from ..errors import NotFoundError, TreeStateError, ValidationError
from ..core.checkbox import (
    CheckState,
    checkbox_state,
    inherit_checked,
    prune_checked,
    reconcile_ancestors,
    toggle_checked,
)
from ..core.flatten import FlatNode, index_of
from ..core.index import NodeIndex, build_index
from ..core.mutations import (
    add_node_at_path,
    check_unique_ids,
    find_and_remove_node,
    move_node,
    update_node_data,
)
from ..core.navigation import (
    KEY_BINDINGS,
    NavigationKey,
    SelectionMachine,
    SelectionMode,
    SelectionState,
    plan_navigation,
)
from ..core.node import TreeNode, build_new_node, validate_raw_node
from ..core.paths import find_node_and_path, get_node_hierarchy
from ..core.store import TreeStore
from .error_policies import ErrorPolicy, create_error_policy
from .expansion import ExpansionOrchestrator
from .source import NodeSource

NodeSelectListener = Callable[[Optional[str], Optional[Dict[str, Any]]], None]
ErrorListener = Callable[[TreeStateError], None]
CheckedListener = Callable[[FrozenSet[str]], None]


class TreeViewState:
    """Headless state of a lazily loaded, virtualized tree view.

    Example:
        view = TreeViewState(source, on_node_select=print)
        await view.load()
        await view.expand_node('node-A')
        for row in view.flat_nodes:
            print('  ' * row.depth + row.name)
    """

    def __init__(
        self,
        source: NodeSource,
        config: Optional[TreeViewConfig] = None,
        on_node_select: Optional[NodeSelectListener] = None,
        on_error: Optional[ErrorListener] = None,
        on_checked_nodes_change: Optional[CheckedListener] = None,
        error_policy: Optional[ErrorPolicy] = None,
    ):
        """Initialize the view state.

        Args:
            source: Fetch collaborator for top-level nodes and children
            config: View configuration (validated here)
            on_node_select: Called with (id, raw data) or (None, None)
                whenever the selected node changes
            on_error: Called with every reported error
            on_checked_nodes_change: Called with the new checked set
            error_policy: How errors are recorded and logged

        Raises:
            ValueError: If the configuration is invalid
        """
        self.config = config or TreeViewConfig()
        errors = self.config.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {', '.join(errors)}")

        self._logger = self.config.get_logger()
        self.source = source
        self.store = TreeStore(cache_size=self.config.cache_size)
        self.error_policy = error_policy or create_error_policy(
            self.config.verbose_errors, self._logger)

        self.on_node_select = on_node_select
        self.on_error = on_error
        self.on_checked_nodes_change = on_checked_nodes_change

        self.last_error: Optional[TreeStateError] = None
        self.is_loading_initial = False

        self._selection = SelectionMachine(self._complete_move)
        self._expansion = ExpansionOrchestrator(
            self.store,
            source,
            self._report,
            on_children_loaded=self._children_loaded,
            logger=self._logger,
        )

    # === Read-only state ===

    @property
    def tree(self) -> Tuple[TreeNode, ...]:
        return self.store.tree

    @property
    def index(self) -> NodeIndex:
        return self.store.index

    @property
    def flat_nodes(self) -> List[FlatNode]:
        """Visible rows in display order (row k of the virtualized list)."""
        return self.store.flat_nodes

    @property
    def open_ids(self) -> FrozenSet[str]:
        return self.store.open_ids

    @property
    def loading_ids(self) -> FrozenSet[str]:
        return self.store.loading_ids

    @property
    def selection(self) -> SelectionState:
        return self._selection.state

    @property
    def selected_id(self) -> Optional[str]:
        return self._selection.state.selected_id

    @property
    def moving_id(self) -> Optional[str]:
        return self._selection.state.moving_id

    @property
    def selected_index(self) -> int:
        """Row of the selected node, -1 if none or hidden. Used to scroll
        the selection into view."""
        return index_of(self.flat_nodes, self.selected_id)

    @property
    def focus_index(self) -> int:
        """Row keyboard navigation starts from."""
        return index_of(self.flat_nodes, self._selection.state.focus_id)

    @property
    def expansion(self) -> ExpansionOrchestrator:
        return self._expansion

    def get_node(self, node_id: str) -> Optional[TreeNode]:
        return self.index.get(node_id)

    def is_move_target_candidate(self, node_id: str) -> bool:
        moving_id = self.moving_id
        return moving_id is not None and node_id != moving_id

    # === Loading ===

    async def load(self) -> bool:
        """Fetch the top-level nodes and apply the initial selection.

        Returns:
            True on success. On failure the tree stays as it was and the
            error is reported.
        """
        self.last_error = None
        previous = self.selected_id
        self.is_loading_initial = True
        try:
            loaded = await self._expansion.load_top_level()
        finally:
            self.is_loading_initial = False
        if not loaded:
            return False

        initial_id = self.config.initial_selected_id
        if initial_id is None and self.config.select_first_on_load and self.tree:
            initial_id = self.tree[0].id
        if initial_id is not None and initial_id not in self.index:
            self._logger.debug("Initial selection %s is not a top-level node", initial_id)
            initial_id = None
        self._selection.set_selected(initial_id)
        self._notify_selection(previous)
        return True

    # === Mutations ===

    def add_node(self, data: Mapping[str, Any], parent_id: Optional[str] = None) -> bool:
        """Append a new node under ``parent_id`` (or at the root).

        Gaps in ``data`` are filled from ``config.new_node_defaults``. The
        parent's children must be loaded; expand it first otherwise.
        """
        self.last_error = None
        target_path: List[str] = []
        if parent_id is not None:
            found = find_node_and_path(self.tree, parent_id)
            if found is None:
                self._report(NotFoundError(parent_id, "adding node"), "adding node")
                return False
            if found.node.children is None:
                self._report(ValidationError(
                    f"Parent node {parent_id} children not loaded. Expand first.", parent_id),
                    "adding node")
                return False
            target_path = found.path + [parent_id]

        try:
            validate_raw_node(data, fetched=False)
            new_node = build_new_node(data, self.config.new_node_defaults)
            check_unique_ids(self.index.keys(), [new_node])
        except ValueError as e:
            self._report(ValidationError(str(e)), "adding node")
            return False
        except ValidationError as e:
            self._report(e, "adding node")
            return False

        self.store.set_tree(add_node_at_path(self.tree, target_path, new_node))
        self._update_checked(reconcile_ancestors(self.index, self.store.checked_ids, target_path))
        self._logger.debug("Added %s under %s", new_node.id, parent_id or "root")
        return True

    def remove_node(self, node_id: str) -> bool:
        """Remove ``node_id`` and its subtree.

        If the selected node is removed (directly or as a descendant) the
        selection is cleared and the listener is told once.
        """
        self.last_error = None
        found = find_node_and_path(self.tree, node_id)
        if found is None:
            self._report(NotFoundError(node_id, "removal"), "removing node")
            return False

        previous = self.selected_id
        removal = find_and_remove_node(self.tree, node_id)
        removed_ids = set(build_index((removal.removed,)))

        self.store.set_tree(removal.tree)
        self.store.close(removed_ids)
        checked = prune_checked(self.store.checked_ids, removed_ids)
        self._update_checked(reconcile_ancestors(self.index, checked, found.path))

        state = self._selection.state
        if state.node_id in removed_ids:
            self._selection.clear()
        elif state.mode is SelectionMode.MOVING and state.cursor_id in removed_ids:
            self._selection.move_cursor(state.node_id)
        self._notify_selection(previous)

        self._logger.debug("Removed %s (%d nodes)", node_id, len(removed_ids))
        return True

    def update_node(self, node_id: str, data: Mapping[str, Any]) -> bool:
        """Merge raw-format ``data`` into a node; ``id`` and ``children``
        are ignored."""
        self.last_error = None
        result = update_node_data(self.tree, node_id, data)
        if not result.success:
            self._report(NotFoundError(node_id, "update"), "updating node")
            return False
        self.store.set_tree(result.tree)
        return True

    def move_node(self, node_id: str, target_parent_id: Optional[str]) -> bool:
        """Move ``node_id`` to the end of ``target_parent_id``'s children
        (``None`` for the root list)."""
        self.last_error = None
        found = find_node_and_path(self.tree, node_id)
        try:
            new_tree = move_node(self.tree, node_id, target_parent_id)
        except TreeStateError as e:
            self._report(e, "moving node")
            return False

        self.store.set_tree(new_tree)
        index = self.index
        checked = reconcile_ancestors(index, self.store.checked_ids, found.path)
        moved = find_node_and_path(self.tree, node_id)
        self._update_checked(reconcile_ancestors(index, checked, moved.path))
        return True

    def get_node_hierarchy(self, node_id: str) -> Optional[List[str]]:
        """Ids from the root down to ``node_id`` inclusive, or None."""
        return get_node_hierarchy(self.tree, node_id)

    # === Expansion ===

    async def expand_node(self, node_id: str, recursive: bool = False) -> bool:
        self.last_error = None
        return await self._expansion.expand(node_id, recursive)

    def collapse_node(self, node_id: str, recursive: bool = False) -> bool:
        self.last_error = None
        return self._expansion.collapse(node_id, recursive)

    async def toggle_node(self, node_id: str) -> bool:
        """Row toggle: collapse if open, expand (fetching if needed) if not."""
        self.last_error = None
        return await self._expansion.toggle(node_id)

    # === Selection and move mode ===

    def select_node(self, node_id: Optional[str]) -> bool:
        """Programmatically select ``node_id``, or clear with None.

        Leaves move mode if it was active.
        """
        self.last_error = None
        if node_id is not None and node_id not in self.index:
            self._report(NotFoundError(node_id, "selection"), "selecting node")
            return False
        previous = self.selected_id
        self._selection.set_selected(node_id)
        self._notify_selection(previous)
        return True

    def activate_node(self, node_id: str) -> bool:
        """Row click: toggle selection, or complete a pending move."""
        self.last_error = None
        if node_id not in self.index:
            self._report(NotFoundError(node_id, "selection"), "selecting node")
            return False
        previous = self.selected_id
        self._selection.select(node_id)
        self._notify_selection(previous)
        return self.last_error is None

    def start_move(self) -> bool:
        """Enter move mode for the selected node; selection is cleared."""
        self.last_error = None
        previous = self.selected_id
        if not self._selection.start_move():
            self._report(ValidationError("No node selected to move."), "starting move")
            return False
        self._notify_selection(previous)
        self._logger.debug("Ready to move node %s", self.moving_id)
        return True

    def cancel_move(self) -> bool:
        self.last_error = None
        return self._selection.cancel_move()

    def _complete_move(self, node_id: str, target_id: str) -> bool:
        return self.move_node(node_id, target_id)

    # === Keyboard navigation ===

    async def navigate(self, key: NavigationKey) -> Optional[str]:
        """Apply a navigation key to the focused row.

        Returns:
            Id of the focused row afterwards, or None
        """
        rows = self.flat_nodes
        state = self._selection.state
        current = index_of(rows, state.focus_id)

        if key is NavigationKey.CANCEL:
            self.cancel_move()
        elif key is NavigationKey.ACTIVATE:
            if current != -1:
                self.activate_node(rows[current].id)
        else:
            decision = plan_navigation(rows, current, key)
            if decision.toggle_id is not None:
                await self.toggle_node(decision.toggle_id)
            if decision.index not in (-1, current):
                target_id = rows[decision.index].id
                if state.mode is SelectionMode.MOVING:
                    self._selection.move_cursor(target_id)
                else:
                    self.select_node(target_id)

        return self._selection.state.focus_id

    async def handle_key(self, key_name: str) -> Optional[str]:
        """Navigate using a key name such as 'ArrowDown' or 'Escape'.

        Unbound keys are ignored.
        """
        key = KEY_BINDINGS.get(key_name)
        if key is None:
            return self._selection.state.focus_id
        return await self.navigate(key)

    # === Checkboxes ===

    def toggle_checked(self, node_id: str) -> bool:
        self.last_error = None
        try:
            checked = toggle_checked(self.tree, self.index, self.store.checked_ids, node_id)
        except NotFoundError as e:
            self._report(e, "toggling checkbox")
            return False
        self._update_checked(checked)
        return True

    def get_checked_nodes(self) -> List[str]:
        return sorted(self.store.checked_ids)

    def set_checked_nodes(self, node_ids: Iterable[str]) -> None:
        """Replace the checked set wholesale (no cascade)."""
        self._update_checked(frozenset(node_ids))

    def checkbox_state(self, node_id: str) -> CheckState:
        return checkbox_state(self.index, self.store.checked_ids, node_id)

    def is_indeterminate(self, node_id: str) -> bool:
        return self.checkbox_state(node_id) is CheckState.INDETERMINATE

    # === Lifecycle ===

    async def close(self):
        await self.source.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # === Internals ===

    def _report(self, error: TreeStateError, operation: str) -> None:
        self.last_error = error
        self.error_policy.handle(error, operation, error.node_id)
        if self.on_error is not None:
            self.on_error(error)

    def _notify_selection(self, previous: Optional[str]) -> None:
        current = self.selected_id
        if current == previous or self.on_node_select is None:
            return
        if current is None:
            self.on_node_select(None, None)
            return
        node = self.index.get(current)
        self.on_node_select(current, node.to_raw() if node is not None else None)

    def _update_checked(self, checked: FrozenSet[str]) -> None:
        if self.store.set_checked(checked) and self.on_checked_nodes_change is not None:
            self.on_checked_nodes_change(self.store.checked_ids)

    def _children_loaded(self, node_id: str) -> None:
        self._update_checked(inherit_checked(self.index, self.store.checked_ids, node_id))
