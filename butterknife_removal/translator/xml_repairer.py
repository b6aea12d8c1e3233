# butterknife_removal/translator/xml_repairer.py
from __future__ import annotations

from typing import Dict, Iterable, Optional

from ..logging_config import get_logger
from ..utils import is_valid_id_name, simple_type_name, suggest_identifier
from .annotation_extractor import FieldBinding
from .layout_resolver import LayoutResolver

logger = get_logger(__name__)

LAYOUT_NOT_FOUND = "Layout file not found - assuming ID exists"
ID_EXISTS = "ID exists"
ID_CREATED = "ID created on {tag} in {layout}"
ID_MISSING = "ID missing - marker comment added"
FRAMEWORK_ID = "Framework ID - not checked"

MARKER_COMMENT = ' TODO: Add android:id="@+id/{resource_id}" to a {type_name} view for field \'{field}\' '


class XmlRepairer:
    """
    Checks the ids bound in code against a layout and adds the missing ones.

    Existing ids are never renamed or removed. An id with no element to
    carry it becomes a marker comment at the top of the root tag.
    """

    def __init__(self, resolver: LayoutResolver):
        self.resolver = resolver

    def validate_and_ensure_ids(
        self,
        field_bindings: Iterable[FieldBinding],
        layout_name: Optional[str],
    ) -> Dict[str, str]:
        """Returns one result message per resource id."""
        bindings = list(field_bindings)
        results: Dict[str, str] = {}

        layout = self.resolver.load(layout_name)
        if layout is None:
            logger.info("Layout '%s' not found, ids are not checked", layout_name)
            for fb in bindings:
                results[fb.resource_id] = LAYOUT_NOT_FOUND
            return results

        existing = self.resolver.collect_existing_ids(layout.root)
        for fb in bindings:
            resource_id = fb.resource_id
            if fb.is_framework_id:
                message = FRAMEWORK_ID
            elif resource_id in existing:
                message = ID_EXISTS
            else:
                message = self._place_id(layout, fb)
                existing.add(resource_id)

            if not fb.is_framework_id and not is_valid_id_name(resource_id):
                message += f" (suggested name: {suggest_identifier(fb.name, fb.type_name)})"
            results[resource_id] = message
        return results

    def _place_id(self, layout, fb: FieldBinding) -> str:
        node = self.resolver.find_first_untagged_of_type(layout.root, fb.type_name)
        if node is not None:
            node.assign_id(fb.resource_id)
            logger.info(
                "Added android:id '%s' to <%s> in %s",
                fb.resource_id, node.simple_tag, node.layout_name,
            )
            return ID_CREATED.format(tag=node.simple_tag, layout=node.layout_name)

        text = MARKER_COMMENT.format(
            resource_id=fb.resource_id,
            type_name=simple_type_name(fb.type_name),
            field=fb.name,
        )
        if not layout.root.has_comment(text):
            layout.root.insert_comment(text)
        logger.warning(
            "No untagged <%s> in %s for id '%s'; marker comment added",
            simple_type_name(fb.type_name), layout.name, fb.resource_id,
        )
        return ID_MISSING
