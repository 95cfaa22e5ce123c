"""
Tests for flattening the tree into visible rows.
"""

from lazytreelib.core import flatten_tree, index_of, tree_from_raw


def make_tree():
    return tree_from_raw([
        {'id': 'A', 'name': 'A', 'hasChildren': True, 'children': [
            {'id': 'A1', 'name': 'A1', 'hasChildren': False, 'children': []},
            {'id': 'A2', 'name': 'A2', 'hasChildren': True, 'children': None},
        ]},
        {'id': 'B', 'name': 'B', 'hasChildren': True, 'children': None},
        {'id': 'C', 'name': 'C', 'hasChildren': True, 'children': []},
    ])


def test_nothing_open_shows_roots_at_depth_zero():
    tree = make_tree()

    rows = flatten_tree(tree, frozenset(), frozenset())

    assert [row.id for row in rows] == ['A', 'B', 'C']
    assert all(row.depth == 0 for row in rows)


def test_open_node_shows_children_in_order():
    rows = flatten_tree(make_tree(), {'A'}, frozenset())

    assert [(row.id, row.depth) for row in rows] == [
        ('A', 0), ('A1', 1), ('A2', 1), ('B', 0), ('C', 0),
    ]


def test_children_of_closed_ancestor_are_hidden():
    # A2 open but A closed: nothing below A is visible
    rows = flatten_tree(make_tree(), {'A2'}, frozenset())
    assert [row.id for row in rows] == ['A', 'B', 'C']


def test_open_unloaded_node_shows_no_children():
    rows = flatten_tree(make_tree(), {'B'}, {'B'})

    row_b = rows[index_of(rows, 'B')]
    assert [row.id for row in rows] == ['A', 'B', 'C']
    assert row_b.is_open
    assert row_b.is_loading_children
    assert not row_b.is_loaded


def test_row_flags():
    rows = flatten_tree(make_tree(), {'A', 'C'}, frozenset())
    by_id = {row.id: row for row in rows}

    assert by_id['A'].has_children and by_id['A'].is_loaded
    assert not by_id['A1'].has_children
    # Declared but never fetched
    assert by_id['A2'].has_children and not by_id['A2'].is_loaded
    # Declared, fetched, empty: still shown as expandable
    assert by_id['C'].declared_has_children
    assert by_id['C'].is_open


def test_index_of():
    rows = flatten_tree(make_tree(), {'A'}, frozenset())

    assert index_of(rows, 'A2') == 2
    assert index_of(rows, 'missing') == -1
    assert index_of(rows, None) == -1


def test_empty_tree():
    assert flatten_tree((), {'A'}, frozenset()) == []
