# butterknife_removal/translator/layout_resolver.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from ..constants import CLICKABLE_ATTR, DEFAULT_ELEMENT_ROLE, ELEMENT_ROLES, FOCUSABLE_ATTR, ID_ATTR, ID_SEPARATOR
from ..errors import LayoutParseError
from ..logging_config import get_logger
from ..parser.resource_resolver import LayoutIndex
from ..parser.xml_parser import LayoutFile, LayoutNode, parse_layout_xml
from ..utils import layout_name_from_class_name, root_id_for_layout, simple_type_name, unique_name

logger = get_logger(__name__)

# visit(node, include_chain) -> True stops the walk at that node
Visitor = Callable[[LayoutNode, Tuple[str, ...]], bool]


@dataclass
class IdLocation:
    """Where a resource id lives, seen from the layout that was searched."""

    node: LayoutNode
    include_chain: List[str] = field(default_factory=list)   # identified includes, outermost first
    is_include_tag: bool = False


class LayoutSession:
    """
    Layout files loaded during one rewrite pass.

    Every lookup in the pass shares the parsed trees, so an id added to a
    file is seen by later lookups and each file is written once.
    """

    def __init__(self, index: LayoutIndex):
        self.index = index
        self._layouts: Dict[str, Optional[LayoutFile]] = {}

    def load(self, name: Optional[str]) -> Optional[LayoutFile]:
        if not name:
            return None
        if name not in self._layouts:
            path = self.index.find(name)
            layout = None
            if path is not None:
                try:
                    layout = parse_layout_xml(path, name)
                except LayoutParseError as exc:
                    logger.warning("Skipping malformed layout %s", exc)
            self._layouts[name] = layout
        return self._layouts[name]

    def dirty_layouts(self) -> List[LayoutFile]:
        return [lf for lf in self._layouts.values() if lf is not None and lf.dirty]


def element_role(tag: str) -> str:
    """Role fragment of a synthesized id (``ImageButton`` -> ``Button``)."""
    simple = tag.rsplit(".", 1)[-1]
    for needle, role in ELEMENT_ROLES:
        if needle in simple:
            return role
    return DEFAULT_ELEMENT_ROLE


def _has_id(node: LayoutNode) -> bool:
    # any android:id counts, @android:id/... included
    return node.has_android_attr(ID_ATTR)


class LayoutResolver:
    def __init__(self, index: LayoutIndex, session: Optional[LayoutSession] = None):
        self.index = index
        self.session = session or LayoutSession(index)

    def load(self, name: Optional[str]) -> Optional[LayoutFile]:
        return self.session.load(name)

    def layout_name_for_class(self, class_name: Optional[str]) -> Optional[str]:
        """Name guessed from the class, or the closest existing layout file."""
        guess = layout_name_from_class_name(class_name)
        if guess is None or self.index.find(guess) is not None:
            return guess
        return self.index.best_match(class_name, guess) or guess

    # ============================
    # Generic traversal
    # ============================

    def walk(self, root: LayoutNode, visit: Visitor, descend_includes: bool = True) -> Optional[LayoutNode]:
        """
        Pre-order walk of ``root`` and, through include tags, of the layouts
        they reference. Returns the node where ``visit`` stopped, if any.

        An include is not followed into a layout already open on the current
        path. Identified includes extend the chain passed to ``visit``;
        unidentified ones are flattened into their parent.
        """
        visited = {root.layout_name} if root.layout_name else set()
        return self._walk(root, visit, descend_includes, frozenset(visited), ())

    def _walk(self, node, visit, descend, visited, chain) -> Optional[LayoutNode]:
        if visit(node, chain):
            return node
        if node.is_include:
            name = node.included_layout
            if not descend or not name:
                return None
            if name in visited:
                logger.warning("Include cycle through layout '%s' not followed", name)
                return None
            layout = self.session.load(name)
            if layout is None:
                return None
            inner_chain = chain + (node.resource_id,) if node.resource_id else chain
            return self._walk(layout.root, visit, descend, visited | {name}, inner_chain)
        for child in node.children:
            found = self._walk(child, visit, descend, visited, chain)
            if found is not None:
                return found
        return None

    # ============================
    # Queries
    # ============================

    def collect_existing_ids(self, root: LayoutNode) -> Set[str]:
        ids: Set[str] = set()

        def visit(node, chain):
            if node.resource_id:
                ids.add(node.resource_id)
            return False

        self.walk(root, visit)
        return ids

    def find_first_untagged_of_type(self, root: LayoutNode, type_name: Optional[str]) -> Optional[LayoutNode]:
        wanted = simple_type_name(type_name).lower()
        if not wanted:
            return None
        return self.walk(
            root,
            lambda node, chain: (
                not node.is_include
                and node.simple_tag.lower() == wanted
                and not _has_id(node)
            ),
        )

    def find_include_node_by_id(self, root: LayoutNode, resource_id: str) -> Optional[LayoutNode]:
        return self.walk(root, lambda node, chain: node.is_include and node.resource_id == resource_id)

    def locate_id(self, root: LayoutNode, resource_id: str) -> Optional[IdLocation]:
        found: List[IdLocation] = []

        def visit(node, chain):
            if node.resource_id == resource_id:
                found.append(IdLocation(node, list(chain), node.is_include))
                return True
            return False

        self.walk(root, visit)
        return found[0] if found else None

    # ============================
    # Repairs (additive only)
    # ============================

    def find_or_assign_root_id(self, layout: LayoutFile) -> Optional[str]:
        """
        Id of the layout's root tag, assigned when missing.

        A freshly identified root is also made clickable and focusable, and
        every element inside it gets an id. A ``<merge>`` root cannot carry
        an id and yields None.
        """
        root = layout.root
        if root.resource_id:
            return root.resource_id
        if root.tag == "merge" or _has_id(root):
            return None

        existing = self.collect_existing_ids(root)
        resource_id = unique_name(root_id_for_layout(layout.name), existing)
        root.assign_id(resource_id)
        for attr in (CLICKABLE_ATTR, FOCUSABLE_ATTR):
            if not root.has_android_attr(attr):
                root.set_android_attr(attr, "true")
        logger.info("Assigned root id '%s' in %s", resource_id, layout.name)

        self.ensure_all_children_have_ids(layout)
        return resource_id

    def ensure_all_children_have_ids(self, layout: LayoutFile) -> List[str]:
        """Give every element of the layout (includes excepted) an id; returns the new ids."""
        existing = self.collect_existing_ids(layout.root)
        base = layout.name.replace(ID_SEPARATOR, "")
        missing: List[LayoutNode] = []

        def visit(node, chain):
            if node is not layout.root and not node.is_include and not _has_id(node):
                missing.append(node)
            return False

        self.walk(layout.root, visit, descend_includes=False)

        created = []
        for node in missing:
            resource_id = unique_name(base + element_role(node.tag), existing)
            node.assign_id(resource_id)
            existing.add(resource_id)
            created.append(resource_id)
        if created:
            logger.debug("Assigned %d element ids in %s", len(created), layout.name)
        return created
