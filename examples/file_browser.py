#!/usr/bin/env python3
"""
File browser example driving a tree view without any UI.

This example demonstrates:
- Loading top-level nodes from a (simulated) slow API
- Expanding folders on demand, recursively and with the keyboard
- Selection, move mode and checkboxes
- Printing the visible rows the way a virtualized list would render them
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from lazytreelib import TreeViewConfig, open_tree_view


async def fetch_top_level_nodes():
    """Simulated API call for the root folder."""
    await asyncio.sleep(0.5)
    return [
        {'id': 'root-1', 'name': 'Root Folder 1', 'hasChildren': True, 'children': None,
         'type': 'folder', 'icon': '📁'},
        {'id': 'root-2', 'name': 'Root File 1', 'hasChildren': False, 'children': [],
         'type': 'file', 'icon': '📄'},
        {'id': 'root-3', 'name': 'Root Folder 2 (Empty)', 'hasChildren': True, 'children': [],
         'type': 'folder', 'icon': '📁'},
    ]


async def fetch_children_for_node(parent_id):
    """Simulated API call for the children of a folder."""
    await asyncio.sleep(0.6)
    if parent_id == 'root-1':
        return [
            {'id': 'child-1-1', 'name': 'Child File 1.1', 'hasChildren': False, 'children': [],
             'type': 'file', 'icon': '📄', 'customData': 'abc'},
            {'id': 'child-1-2', 'name': 'Child Folder 1.2', 'hasChildren': True, 'children': None,
             'type': 'folder', 'icon': '📁'},
        ]
    if parent_id == 'child-1-2':
        return [
            {'id': 'sub-child-1', 'name': 'Sub Child File', 'hasChildren': False, 'children': [],
             'type': 'file', 'icon': '📄'},
        ]
    return []


def print_rows(view, title):
    print(f"\n{title}")
    print("-" * 50)
    for row in view.flat_nodes:
        marker = '>' if row.id in (view.selected_id, view.moving_id) else ' '
        toggle = ' '
        if row.has_children:
            toggle = '-' if row.is_open else '+'
        box = {'CHECKED': '[x]', 'UNCHECKED': '[ ]', 'INDETERMINATE': '[-]'}[
            view.checkbox_state(row.id).name]
        loading = ' (loading...)' if row.is_loading_children else ''
        print(f"{marker} {'  ' * row.depth}{toggle} {box} {row.icon or ''} {row.name}{loading}")


async def main():
    """Walk through the main tree view commands."""
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    def on_node_select(node_id, data):
        print(f"  selected: {node_id} {data['name'] if data else ''}")

    def on_error(error):
        print(f"  error: {error}")

    view = await open_tree_view(
        fetch_top_level_nodes,
        fetch_children_for_node,
        TreeViewConfig(),
        on_node_select=on_node_select,
        on_error=on_error,
    )
    print_rows(view, "After load")

    await view.expand_node('root-1', recursive=True)
    print_rows(view, "After recursive expand of root-1")

    view.toggle_checked('child-1-2')
    print_rows(view, "After checking child-1-2")

    # Move a file into a folder: select it, enter move mode, pick the target
    view.select_node('root-2')
    view.start_move()
    view.activate_node('child-1-2')
    print_rows(view, "After moving root-2 into child-1-2")
    print(f"\nHierarchy of root-2: {view.get_node_hierarchy('root-2')}")

    # Invalid: a folder cannot move into its own descendant
    view.select_node('root-1')
    view.start_move()
    view.activate_node('sub-child-1')
    view.cancel_move()

    for key in ('Home', 'ArrowLeft', 'ArrowDown'):
        await view.handle_key(key)
    print_rows(view, "After Home, ArrowLeft, ArrowDown")

    print(f"\nChecked nodes: {view.get_checked_nodes()}")
    print(f"Cache stats: {view.store.get_cache_stats()}")


if __name__ == "__main__":
    asyncio.run(main())
