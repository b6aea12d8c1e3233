# butterknife_removal/translator/annotation_extractor.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..constants import BIND_VIEW, BUTTERKNIFE_PACKAGE
from ..logging_config import get_logger
from ..parser.java_parser import Annotation, JavaClass, JavaField, JavaMethod, JavaSource
from .listener_rules import ListenerKind, build_call_expression

logger = get_logger(__name__)

# R.id.name, R2.id.name, com.example.R.id.name, android.R.id.name
_ID_REF_RE = re.compile(r"^((?:[A-Za-z_]\w*\.)*R2?)\.id\.([A-Za-z_]\w*)$")
_NAMED_ARG_RE = re.compile(r"^\s*(\w+)\s*=(?!=)\s*(.*)$", re.S)


# ============================
# 1. Bindings
# ============================

@dataclass(frozen=True)
class FieldBinding:
    """One ``@BindView`` field."""
    name: str
    type_name: str
    resource_id: str
    id_ref: str             # the reference to emit: R.id.x / android.R.id.x

    @property
    def is_framework_id(self) -> bool:
        return self.id_ref.startswith("android.R.")


@dataclass(frozen=True)
class MethodBinding:
    """One listener annotation on a handler method."""
    method_name: str
    has_parameters: bool
    resource_ids: Tuple[str, ...]
    kind: ListenerKind
    call_expression: str
    callback: str           # listener method forwarding the call
    returns_boolean: bool = False
    id_refs: Tuple[str, ...] = ()

    def id_ref(self, resource_id: str) -> str:
        for rid, ref in zip(self.resource_ids, self.id_refs):
            if rid == resource_id:
                return ref
        return f"R.id.{resource_id}"


@dataclass
class BindingSet:
    fields: Dict[str, FieldBinding] = field(default_factory=dict)            # id -> binding, last wins
    all_fields: List[FieldBinding] = field(default_factory=list)             # source order
    methods: Dict[ListenerKind, Dict[str, MethodBinding]] = field(default_factory=dict)
    method_bindings: List[MethodBinding] = field(default_factory=list)       # source order
    duplicate_ids: List[str] = field(default_factory=list)
    unsupported: List[str] = field(default_factory=list)
    # recognized annotations to delete, and the fields they sit on
    annotations: List[Annotation] = field(default_factory=list)
    declarations: Dict[str, JavaField] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.all_fields and not self.method_bindings

    def listener_registrations(self) -> List[Tuple[MethodBinding, str]]:
        """(binding, id) pairs in source order; a later handler for the same kind and id wins."""
        pairs = []
        for mb in self.method_bindings:
            for rid in mb.resource_ids:
                if self.methods[mb.kind].get(rid) is mb:
                    pairs.append((mb, rid))
        return pairs


# ============================
# 2. Annotation arguments
# ============================

def split_arguments(args: str) -> List[str]:
    parts, depth, current = [], 0, []
    for ch in args:
        if ch in "({[":
            depth += 1
        elif ch in ")}]":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def annotation_attributes(args: Optional[str]) -> Dict[str, str]:
    """``value``/unnamed argument and named ones: ``{"value": "...", "callback": "..."}``."""
    attrs: Dict[str, str] = {}
    if not args or not args.strip():
        return attrs
    for part in split_arguments(args):
        m = _NAMED_ARG_RE.match(part)
        if m:
            attrs[m.group(1)] = m.group(2).strip()
        else:
            attrs["value"] = part
    return attrs


def parse_id_refs(value: Optional[str]) -> List[Tuple[str, str]]:
    """
    ``R.id.a`` or ``{R.id.a, R.id.b}`` -> [(id, reference), ...].

    ``R2`` references (library modules) come back as ``R``.
    """
    if not value:
        return []
    value = value.strip()
    if value.startswith("{") and value.endswith("}"):
        items = split_arguments(value[1:-1])
    else:
        items = [value]

    refs = []
    for item in items:
        ref = re.sub(r"\s+", "", item)
        m = _ID_REF_RE.match(ref)
        if not m:
            logger.warning("Unrecognized resource reference '%s'", item)
            continue
        qualifier = m.group(1)
        if qualifier.endswith("R2"):
            qualifier = qualifier[:-1]
        refs.append((m.group(2), f"{qualifier}.id.{m.group(2)}"))
    return refs


def _callback_constant(value: Optional[str]) -> Optional[str]:
    # OnTextChanged.Callback.AFTER_TEXT_CHANGED -> AFTER_TEXT_CHANGED
    if not value:
        return None
    return value.strip().rsplit(".", 1)[-1]


# ============================
# 3. Recognition
# ============================

class ButterknifeNames:
    """Which annotation names refer to ButterKnife in one compilation unit."""

    def __init__(self, source: JavaSource):
        prefix = BUTTERKNIFE_PACKAGE + "."
        self.wildcard = any(imp.name == prefix + "*" for imp in source.imports if not imp.is_static)
        self.imported: Set[str] = {
            imp.name[len(prefix):]
            for imp in source.imports
            if not imp.is_static and imp.name.startswith(prefix) and imp.name.count(".") == 1
            and not imp.name.endswith("*")
        }

    def recognizes(self, annotation: Annotation) -> bool:
        if "." in annotation.name:
            return annotation.name.rsplit(".", 1)[0] == BUTTERKNIFE_PACKAGE
        return self.wildcard or annotation.name in self.imported


# ============================
# 4. Extraction
# ============================

def _extract_field(bs: BindingSet, jf: JavaField, ann: Annotation) -> None:
    refs = parse_id_refs(annotation_attributes(ann.args).get("value"))
    if len(refs) != 1:
        logger.warning("@%s on field '%s' has no single resource id", BIND_VIEW, jf.name)
        bs.unsupported.append(BIND_VIEW)
        return
    resource_id, id_ref = refs[0]
    binding = FieldBinding(name=jf.name, type_name=jf.type_name, resource_id=resource_id, id_ref=id_ref)
    if resource_id in bs.fields:
        logger.warning(
            "Resource id '%s' is bound by both '%s' and '%s'; '%s' is kept",
            resource_id, bs.fields[resource_id].name, jf.name, jf.name,
        )
        bs.duplicate_ids.append(resource_id)
    bs.fields[resource_id] = binding
    bs.all_fields.append(binding)
    bs.annotations.append(ann)
    bs.declarations[jf.name] = jf


def _extract_method(bs: BindingSet, method: JavaMethod, ann: Annotation, kind: ListenerKind) -> None:
    attrs = annotation_attributes(ann.args)
    refs = parse_id_refs(attrs.get("value"))
    if not refs:
        logger.warning("@%s on '%s' has no resource id", kind.annotation, method.name)
        bs.unsupported.append(kind.annotation)
        return
    call, callback = build_call_expression(kind, method, _callback_constant(attrs.get("callback")))
    binding = MethodBinding(
        method_name=method.name,
        has_parameters=bool(method.params),
        resource_ids=tuple(rid for rid, _ in refs),
        kind=kind,
        call_expression=call,
        callback=callback,
        returns_boolean=method.return_type == "boolean",
        id_refs=tuple(ref for _, ref in refs),
    )
    by_id = bs.methods.setdefault(kind, {})
    for rid in binding.resource_ids:
        by_id[rid] = binding
    bs.method_bindings.append(binding)
    bs.annotations.append(ann)


def extract_bindings(java_class: JavaClass, source: JavaSource) -> BindingSet:
    """
    Collect the ButterKnife bindings declared in one class.

    Fields carry ``@BindView``; methods carry one or more listener
    annotations. Annotations this tool does not convert are listed in
    ``unsupported`` and left in place.
    """
    names = ButterknifeNames(source)
    bs = BindingSet()

    for jf in java_class.fields:
        for ann in jf.annotations:
            if not names.recognizes(ann):
                continue
            if ann.simple_name == BIND_VIEW:
                _extract_field(bs, jf, ann)
            else:
                bs.unsupported.append(ann.simple_name)

    for method in java_class.methods:
        for ann in method.annotations:
            if not names.recognizes(ann):
                continue
            kind = ListenerKind.from_annotation(ann.simple_name)
            if kind is not None:
                _extract_method(bs, method, ann, kind)
            else:
                bs.unsupported.append(ann.simple_name)

    logger.debug(
        "%s: %d field(s), %d handler(s)",
        java_class.name, len(bs.all_fields), len(bs.method_bindings),
    )
    return bs
