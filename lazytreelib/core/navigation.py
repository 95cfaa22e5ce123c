"""Selection, move mode and keyboard navigation decisions.

Navigation works purely on the flattened row sequence: a key press is
turned into a ``NavigationDecision`` (which row to land on, and which node
to expand or collapse as a side effect). Applying the decision, and any
fetching it implies, is up to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional, Sequence

from .flatten import FlatNode


class SelectionMode(Enum):
    NONE = "none"
    SELECTED = "selected"
    MOVING = "moving"


@dataclass(frozen=True)
class SelectionState:
    """Current selection mode.

    Attributes:
        mode: NONE, SELECTED or MOVING
        node_id: Selected node (SELECTED) or node being moved (MOVING)
        cursor_id: Row highlighted by keyboard navigation while MOVING
    """

    mode: SelectionMode = SelectionMode.NONE
    node_id: Optional[str] = None
    cursor_id: Optional[str] = None

    @classmethod
    def none(cls) -> 'SelectionState':
        return cls()

    @classmethod
    def selected(cls, node_id: str) -> 'SelectionState':
        return cls(SelectionMode.SELECTED, node_id)

    @classmethod
    def moving(cls, node_id: str, cursor_id: Optional[str] = None) -> 'SelectionState':
        return cls(SelectionMode.MOVING, node_id, cursor_id or node_id)

    @property
    def selected_id(self) -> Optional[str]:
        return self.node_id if self.mode is SelectionMode.SELECTED else None

    @property
    def moving_id(self) -> Optional[str]:
        return self.node_id if self.mode is SelectionMode.MOVING else None

    @property
    def focus_id(self) -> Optional[str]:
        """Row keyboard navigation starts from."""
        if self.mode is SelectionMode.MOVING:
            return self.cursor_id
        return self.selected_id


class SelectionMachine:
    """Drives ``SelectionState`` transitions.

    The machine does not touch the tree itself. Completing a move is
    delegated to ``move(node_id, target_id)``, which performs the
    mutation, reports any failure and returns whether it succeeded.
    """

    def __init__(self, move: Callable[[str, str], bool]):
        self.state = SelectionState.none()
        self._move = move

    def select(self, node_id: str) -> SelectionState:
        """Row click semantics.

        Selects ``node_id``, or clears the selection if it was already
        selected. While moving, tries to move the node under ``node_id``;
        on success the moved node becomes selected, on failure the machine
        stays in move mode.
        """
        state = self.state
        if state.mode is SelectionMode.MOVING:
            if self._move(state.node_id, node_id):
                self.state = SelectionState.selected(state.node_id)
            return self.state

        if state.mode is SelectionMode.SELECTED and state.node_id == node_id:
            self.state = SelectionState.none()
        else:
            self.state = SelectionState.selected(node_id)
        return self.state

    def set_selected(self, node_id: Optional[str]) -> SelectionState:
        """Programmatic selection; leaves move mode if active."""
        self.state = SelectionState.none() if node_id is None else SelectionState.selected(node_id)
        return self.state

    def start_move(self) -> bool:
        if self.state.mode is not SelectionMode.SELECTED:
            return False
        self.state = SelectionState.moving(self.state.node_id)
        return True

    def cancel_move(self) -> bool:
        if self.state.mode is not SelectionMode.MOVING:
            return False
        self.state = SelectionState.none()
        return True

    def move_cursor(self, node_id: str) -> None:
        if self.state.mode is SelectionMode.MOVING:
            self.state = SelectionState.moving(self.state.node_id, node_id)

    def clear(self) -> None:
        self.state = SelectionState.none()


class NavigationKey(Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    FIRST_CHILD = "first_child"
    PARENT = "parent"
    HOME = "home"
    END = "end"
    ACTIVATE = "activate"
    CANCEL = "cancel"


KEY_BINDINGS: Dict[str, NavigationKey] = {
    'ArrowDown': NavigationKey.NEXT,
    'ArrowUp': NavigationKey.PREVIOUS,
    'ArrowRight': NavigationKey.FIRST_CHILD,
    'ArrowLeft': NavigationKey.PARENT,
    'Home': NavigationKey.HOME,
    'End': NavigationKey.END,
    'Enter': NavigationKey.ACTIVATE,
    ' ': NavigationKey.ACTIVATE,
    'Escape': NavigationKey.CANCEL,
}


class NavigationDecision(NamedTuple):
    """Outcome of a navigation key.

    Attributes:
        index: Row to focus afterwards, -1 for none
        toggle_id: Node to expand (closed) or collapse (open), if any
    """
    index: int
    toggle_id: Optional[str] = None


def find_parent_row(rows: Sequence[FlatNode], index: int) -> int:
    """Nearest earlier row one level shallower than ``rows[index]``."""
    depth = rows[index].depth
    for i in range(index - 1, -1, -1):
        if rows[i].depth == depth - 1:
            return i
    return -1


def plan_navigation(rows: Sequence[FlatNode], current_index: int,
                    key: NavigationKey) -> NavigationDecision:
    """Decide where ``key`` leads from ``current_index``.

    Args:
        rows: Flattened visible rows
        current_index: Focused row, -1 if nothing is focused
        key: Navigation key

    Returns:
        NavigationDecision. ACTIVATE and CANCEL keep the current index;
        acting on them is up to the caller.
    """
    if not rows:
        return NavigationDecision(-1)

    last = len(rows) - 1
    if not 0 <= current_index <= last:
        if key is NavigationKey.NEXT:
            return NavigationDecision(0)
        if key is NavigationKey.PREVIOUS:
            return NavigationDecision(last)
        return NavigationDecision(-1)

    row = rows[current_index]

    if key is NavigationKey.NEXT:
        return NavigationDecision(min(current_index + 1, last))
    if key is NavigationKey.PREVIOUS:
        return NavigationDecision(max(current_index - 1, 0))
    if key is NavigationKey.HOME:
        return NavigationDecision(0)
    if key is NavigationKey.END:
        return NavigationDecision(last)

    if key is NavigationKey.FIRST_CHILD:
        if row.has_children:
            if not row.is_open:
                return NavigationDecision(current_index, row.id)
            if current_index < last and rows[current_index + 1].depth > row.depth:
                return NavigationDecision(current_index + 1)
        return NavigationDecision(current_index)

    if key is NavigationKey.PARENT:
        if row.is_open and row.has_children:
            return NavigationDecision(current_index, row.id)
        if row.depth > 0:
            parent_index = find_parent_row(rows, current_index)
            if parent_index != -1:
                return NavigationDecision(parent_index)
        return NavigationDecision(current_index)

    return NavigationDecision(current_index)
