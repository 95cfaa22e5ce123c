"""Immutable tree node model.

A node is a plain data container: identity, display data and a tri-valued
``children`` field. ``None`` means the children were never fetched, an
empty tuple means they were fetched and there are none, and a non-empty
tuple holds the loaded child nodes.

Nodes are never changed in place. Every edit goes through ``clone`` or
``with_children`` and produces a new node, so a tree of nodes can be
shared freely between snapshots.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

# Keys of the raw (wire) format that map onto TreeNode fields. Every other
# key of a raw node is an extension attribute.
CORE_FIELDS = frozenset({'id', 'name', 'hasChildren', 'children', 'type', 'icon'})

# Applied underneath the data of a node created through add_node.
NEW_NODE_DEFAULTS: Dict[str, Any] = {
    'hasChildren': False,
    'children': [],
    'type': 'file',
    'icon': '📄',
}

RawNode = Mapping[str, Any]


def _frozen_mapping(data: Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(data, MappingProxyType):
        return data
    return MappingProxyType(dict(data))


@dataclass(frozen=True, eq=False)
class TreeNode:
    """A node of the hierarchy.

    Equality is identity: two snapshots share a subtree only when they hold
    the very same node objects, which is what consumers diff on.

    Attributes:
        id: Globally unique identifier
        name: Display name
        has_children: Hint from the data source that children exist
        children: None (unloaded) or a tuple of child nodes (loaded)
        type: Optional node type, e.g. 'folder' or 'file'
        icon: Optional icon (emoji, class name, URL...)
        attributes: Read-only mapping of extension fields
    """

    id: str
    name: str
    has_children: bool = False
    children: Optional[Tuple['TreeNode', ...]] = None
    type: Optional[str] = None
    icon: Optional[str] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.children is not None and not isinstance(self.children, tuple):
            object.__setattr__(self, 'children', tuple(self.children))
        object.__setattr__(self, 'attributes', _frozen_mapping(self.attributes))

    @classmethod
    def from_raw(cls, raw: Union[RawNode, 'TreeNode']) -> 'TreeNode':
        """Build a node (and any given children) from a raw node dict.

        Args:
            raw: Raw node as delivered by a fetch collaborator. A TreeNode
                is returned unchanged so callers can mix both forms.

        Returns:
            The constructed TreeNode
        """
        if isinstance(raw, TreeNode):
            return raw

        raw_children = raw.get('children')
        children = None
        if raw_children is not None:
            children = tuple(cls.from_raw(child) for child in raw_children)

        return cls(
            id=raw['id'],
            name=raw.get('name', ''),
            has_children=bool(raw.get('hasChildren', False)),
            children=children,
            type=raw.get('type'),
            icon=raw.get('icon'),
            attributes={k: v for k, v in raw.items() if k not in CORE_FIELDS},
        )

    @property
    def is_loaded(self) -> bool:
        """True once children were fetched (even when there are none)."""
        return self.children is not None

    @property
    def is_folder(self) -> bool:
        return self.type == 'folder'

    @property
    def effective_has_children(self) -> bool:
        """Declared hint OR actually holding loaded children."""
        return self.has_children or bool(self.children)

    def clone(self, overrides: Optional[RawNode] = None) -> 'TreeNode':
        """Return a copy with raw-format ``overrides`` merged over this node.

        Children resolution, in order:
          1. ``children`` explicitly None: result is unloaded, has_children
             comes from ``hasChildren`` in overrides (default False)
          2. ``children`` given as a list: nodes are built from it
          3. no children override and this node is loaded: the same child
             nodes are kept
          4. otherwise the result stays unloaded

        Args:
            overrides: Raw-format fields to apply. Unknown keys become
                extension attributes.

        Returns:
            New TreeNode
        """
        overrides = dict(overrides or {})

        attributes = dict(self.attributes)
        attributes.update({k: v for k, v in overrides.items() if k not in CORE_FIELDS})

        if 'children' in overrides and overrides['children'] is None:
            children = None
            has_children = bool(overrides.get('hasChildren', False))
        elif overrides.get('children') is not None:
            children = tuple(TreeNode.from_raw(child) for child in overrides['children'])
            has_children = len(children) > 0
        elif self.children is not None:
            children = self.children
            has_children = len(children) > 0
        else:
            children = None
            has_children = bool(overrides.get('hasChildren', self.has_children))

        return TreeNode(
            id=overrides.get('id', self.id),
            name=overrides.get('name', self.name),
            has_children=has_children,
            children=children,
            type=overrides.get('type', self.type),
            icon=overrides.get('icon', self.icon),
            attributes=attributes,
        )

    def with_children(self, children: Optional[Iterable['TreeNode']]) -> 'TreeNode':
        """Return a copy holding ``children``, has_children recomputed."""
        if children is None:
            return replace(self, children=None, has_children=False)
        children = tuple(children)
        return replace(self, children=children, has_children=len(children) > 0)

    def to_raw(self) -> Dict[str, Any]:
        """Raw-format description of this node, without its children."""
        raw = {
            'id': self.id,
            'name': self.name,
            'hasChildren': self.has_children,
            'children': None,
            'type': self.type,
            'icon': self.icon,
        }
        raw.update(self.attributes)
        return raw

    def __repr__(self) -> str:
        if self.children is None:
            state = 'unloaded'
        else:
            state = f'{len(self.children)} children'
        return f"TreeNode({self.id!r}, {self.name!r}, {state})"


def build_new_node(data: Union[RawNode, TreeNode],
                   defaults: Optional[RawNode] = None) -> TreeNode:
    """Build a node for insertion, filling gaps in ``data`` from ``defaults``.

    An existing TreeNode (e.g. a subtree being moved) is inserted as is.
    """
    if isinstance(data, TreeNode):
        return data
    merged = dict(NEW_NODE_DEFAULTS if defaults is None else defaults)
    merged.update(data)
    return TreeNode.from_raw(merged)


def validate_raw_node(raw: Any, fetched: bool = True) -> None:
    """Check a raw node against the wire contract.

    Args:
        raw: Candidate raw node
        fetched: True for data coming from a fetch collaborator, which must
            never arrive with pre-populated children

    Raises:
        ValueError: If the raw node breaks the contract
    """
    if not isinstance(raw, Mapping):
        raise ValueError(f"Raw node must be a mapping, got {type(raw).__name__}")
    node_id = raw.get('id')
    if not isinstance(node_id, str) or not node_id:
        raise ValueError(f"Raw node id must be a non-empty string, got {node_id!r}")
    if fetched and raw.get('children'):
        raise ValueError(f"Fetched node {node_id} arrived with pre-populated children")


def tree_from_raw(raw_nodes: Iterable[RawNode]) -> Tuple[TreeNode, ...]:
    """Build a tree (tuple of root nodes) from raw top-level nodes."""
    return tuple(TreeNode.from_raw(raw) for raw in raw_nodes)
