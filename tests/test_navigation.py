"""
Tests for the selection machine and keyboard navigation planning.
"""

import pytest

from lazytreelib.core import (
    KEY_BINDINGS,
    NavigationDecision,
    NavigationKey,
    SelectionMachine,
    SelectionMode,
    SelectionState,
    flatten_tree,
    plan_navigation,
    tree_from_raw,
)


class RecordingMove:
    """Stand-in for the move callback."""

    def __init__(self, succeed=True):
        self.succeed = succeed
        self.calls = []

    def __call__(self, node_id, target_id):
        self.calls.append((node_id, target_id))
        return self.succeed


class TestSelectionMachine:

    def test_starts_with_nothing_selected(self):
        machine = SelectionMachine(RecordingMove())

        assert machine.state == SelectionState.none()
        assert machine.state.selected_id is None
        assert machine.state.focus_id is None

    def test_select_toggles(self):
        machine = SelectionMachine(RecordingMove())

        machine.select('A')
        assert machine.state.selected_id == 'A'
        machine.select('B')
        assert machine.state.selected_id == 'B'
        machine.select('B')
        assert machine.state.mode is SelectionMode.NONE

    def test_start_move_requires_selection(self):
        machine = SelectionMachine(RecordingMove())

        assert not machine.start_move()
        machine.select('A')
        assert machine.start_move()
        assert machine.state.moving_id == 'A'
        assert machine.state.selected_id is None
        assert machine.state.focus_id == 'A'

    def test_successful_move_selects_moved_node(self):
        move = RecordingMove(succeed=True)
        machine = SelectionMachine(move)
        machine.select('A')
        machine.start_move()

        machine.select('B')

        assert move.calls == [('A', 'B')]
        assert machine.state == SelectionState.selected('A')

    def test_failed_move_stays_in_move_mode(self):
        move = RecordingMove(succeed=False)
        machine = SelectionMachine(move)
        machine.select('A')
        machine.start_move()

        machine.select('A')

        assert machine.state.mode is SelectionMode.MOVING
        assert machine.state.moving_id == 'A'

    def test_cancel_move(self):
        machine = SelectionMachine(RecordingMove())
        assert not machine.cancel_move()

        machine.select('A')
        machine.start_move()
        assert machine.cancel_move()
        assert machine.state.mode is SelectionMode.NONE

    def test_cursor_moves_only_while_moving(self):
        machine = SelectionMachine(RecordingMove())
        machine.select('A')
        machine.move_cursor('B')
        assert machine.state == SelectionState.selected('A')

        machine.start_move()
        machine.move_cursor('B')
        assert machine.state.cursor_id == 'B'
        assert machine.state.focus_id == 'B'
        assert machine.state.moving_id == 'A'

    def test_set_selected_leaves_move_mode(self):
        machine = SelectionMachine(RecordingMove())
        machine.select('A')
        machine.start_move()

        machine.set_selected('C')

        assert machine.state == SelectionState.selected('C')


@pytest.fixture
def rows():
    """
    0 A (open)
    1   A1
    2   A2 (closed folder)
    3 B (closed, unloaded folder)
    4 C (leaf)
    """
    tree = tree_from_raw([
        {'id': 'A', 'name': 'A', 'hasChildren': True, 'children': [
            {'id': 'A1', 'name': 'A1', 'children': []},
            {'id': 'A2', 'name': 'A2', 'hasChildren': True, 'children': None},
        ]},
        {'id': 'B', 'name': 'B', 'hasChildren': True, 'children': None},
        {'id': 'C', 'name': 'C', 'children': []},
    ])
    return flatten_tree(tree, {'A'}, frozenset())


class TestPlanNavigation:

    def test_next_and_previous_clamp(self, rows):
        assert plan_navigation(rows, 0, NavigationKey.NEXT) == NavigationDecision(1)
        assert plan_navigation(rows, 4, NavigationKey.NEXT) == NavigationDecision(4)
        assert plan_navigation(rows, 0, NavigationKey.PREVIOUS) == NavigationDecision(0)
        assert plan_navigation(rows, 3, NavigationKey.PREVIOUS) == NavigationDecision(2)

    def test_without_focus(self, rows):
        assert plan_navigation(rows, -1, NavigationKey.NEXT).index == 0
        assert plan_navigation(rows, -1, NavigationKey.PREVIOUS).index == 4
        assert plan_navigation(rows, -1, NavigationKey.FIRST_CHILD).index == -1

    def test_home_and_end(self, rows):
        assert plan_navigation(rows, 2, NavigationKey.HOME).index == 0
        assert plan_navigation(rows, 2, NavigationKey.END).index == 4

    def test_first_child_expands_closed_folder(self, rows):
        decision = plan_navigation(rows, 3, NavigationKey.FIRST_CHILD)
        assert decision == NavigationDecision(3, 'B')

    def test_first_child_enters_open_folder(self, rows):
        assert plan_navigation(rows, 0, NavigationKey.FIRST_CHILD) == NavigationDecision(1)

    def test_first_child_on_leaf_stays(self, rows):
        assert plan_navigation(rows, 4, NavigationKey.FIRST_CHILD) == NavigationDecision(4)

    def test_parent_collapses_open_folder(self, rows):
        assert plan_navigation(rows, 0, NavigationKey.PARENT) == NavigationDecision(0, 'A')

    def test_parent_goes_to_parent_row(self, rows):
        assert plan_navigation(rows, 2, NavigationKey.PARENT) == NavigationDecision(0)

    def test_parent_on_closed_root_stays(self, rows):
        assert plan_navigation(rows, 3, NavigationKey.PARENT) == NavigationDecision(3)

    def test_empty_rows(self):
        assert plan_navigation([], -1, NavigationKey.NEXT) == NavigationDecision(-1)

    def test_key_bindings(self):
        assert KEY_BINDINGS['ArrowDown'] is NavigationKey.NEXT
        assert KEY_BINDINGS['ArrowLeft'] is NavigationKey.PARENT
        assert KEY_BINDINGS['Enter'] is KEY_BINDINGS[' '] is NavigationKey.ACTIVATE
        assert KEY_BINDINGS['Escape'] is NavigationKey.CANCEL
