# butterknife_removal/parser/xml_parser.py
from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from lxml import etree

from ..constants import ANDROID_NS, ID_ATTR, ID_PREFIX, INCLUDE_TAG, LAYOUT_REF_PREFIX, NEW_ID_PREFIX
from ..errors import LayoutParseError


@dataclass(eq=False)
class LayoutNode:
    """One tag of a layout file, backed by its lxml element."""

    tag: str
    attrs: Dict[str, str]
    children: List["LayoutNode"]
    element: etree._Element
    owner: "LayoutFile" = field(default=None, repr=False)

    @property
    def layout_name(self) -> Optional[str]:
        return self.owner.name if self.owner is not None else None

    @property
    def simple_tag(self) -> str:
        # androidx.constraintlayout.widget.ConstraintLayout -> ConstraintLayout
        return self.tag.rsplit(".", 1)[-1]

    @property
    def is_include(self) -> bool:
        return self.tag == INCLUDE_TAG

    @property
    def included_layout(self) -> Optional[str]:
        """``<include layout="@layout/x">`` -> ``x``."""
        if not self.is_include:
            return None
        ref = self.element.get("layout") or ""
        if ref.startswith(LAYOUT_REF_PREFIX):
            return ref[len(LAYOUT_REF_PREFIX):]
        return None

    @property
    def resource_id(self) -> Optional[str]:
        """``@+id/x`` / ``@id/x`` -> ``x``."""
        raw = self.attrs.get(ID_ATTR)
        if not raw:
            return None
        for prefix in (NEW_ID_PREFIX, ID_PREFIX):
            if raw.startswith(prefix):
                return raw[len(prefix):]
        return None

    def has_android_attr(self, name: str) -> bool:
        return name in self.attrs

    def set_android_attr(self, name: str, value: str) -> None:
        self.element.set(ANDROID_NS + name, value)
        self.attrs[name] = value
        if self.owner is not None:
            self.owner.dirty = True

    def assign_id(self, resource_id: str) -> None:
        self.set_android_attr(ID_ATTR, NEW_ID_PREFIX + resource_id)

    def has_comment(self, text: str) -> bool:
        return any(
            child.tag is etree.Comment and child.text == text
            for child in self.element
        )

    def insert_comment(self, text: str) -> None:
        """Insert ``<!--text-->`` as the first child of this tag."""
        comment = etree.Comment(text)
        # keep the indentation the first child already had
        comment.tail = self.element.text
        self.element.insert(0, comment)
        if self.owner is not None:
            self.owner.dirty = True


@dataclass(eq=False)
class LayoutFile:
    """A parsed layout resource (``res/layout/<name>.xml``)."""

    name: str
    path: Path
    root: LayoutNode
    tree: etree._ElementTree
    declaration: bytes = b""
    trailing_newline: bool = True
    dirty: bool = False

    def serialize(self) -> bytes:
        encoding = self.tree.docinfo.encoding or "utf-8"
        # the original declaration is written back verbatim
        data = self.declaration + etree.tostring(self.tree, encoding=encoding, xml_declaration=False)
        return data + b"\n" if self.trailing_newline else data


def _parse_node(el: etree._Element, owner: LayoutFile = None) -> LayoutNode:
    node = LayoutNode(
        tag=el.tag.split("}")[-1],
        attrs={},
        children=[],
        element=el,
        owner=owner,
    )
    # android: attributes only, by local name
    for k, v in el.attrib.items():
        if k.startswith(ANDROID_NS):
            node.attrs[k.split("}")[-1]] = v
    for child in el:
        if isinstance(child.tag, str):  # comments and PIs are skipped
            node.children.append(_parse_node(child, owner))
    return node


def _attach_owner(node: LayoutNode, owner: LayoutFile) -> None:
    node.owner = owner
    for child in node.children:
        _attach_owner(child, owner)


def _declaration_of(raw: bytes) -> bytes:
    """The ``<?xml ...?>`` line plus the line break after it, or b""."""
    stripped = raw.lstrip()
    if not stripped.startswith(b"<?xml"):
        return b""
    end = stripped.index(b"?>") + 2
    while end < len(stripped) and stripped[end:end + 1] in (b"\r", b"\n"):
        end += 1
    return stripped[:end]


def parse_layout_xml(xml_path, name: Optional[str] = None) -> LayoutFile:
    """
    xml_path: res/layout/xxx.xml
    name: layout name, defaults to the file stem
    return: LayoutFile
    """
    path = Path(xml_path)
    try:
        raw = path.read_bytes()
        parser = etree.XMLParser(remove_blank_text=False, strip_cdata=False)
        tree = etree.parse(io.BytesIO(raw), parser)
    except (OSError, etree.XMLSyntaxError) as exc:
        raise LayoutParseError(path, str(exc)) from exc

    root = _parse_node(tree.getroot())
    layout = LayoutFile(
        name=name or path.stem,
        path=path,
        root=root,
        tree=tree,
        declaration=_declaration_of(raw),
        trailing_newline=raw.endswith(b"\n"),
    )
    _attach_owner(root, layout)
    return layout
