# butterknife_removal/translator/generator.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..config import ConversionMode, Settings
from ..constants import (
    ACTIVITY_INIT,
    ACTIVITY_TEARDOWN,
    BUTTERKNIFE_CLASS,
    BUTTERKNIFE_PACKAGE,
    DEFAULT_FIELD_NAME,
    FRAGMENT_INIT,
    FRAGMENT_TEARDOWN,
    R_LAYOUT_MARKER,
    SET_CONTENT_VIEW,
    UNBINDER_TYPE,
    UNSUPPORTED_ANNOTATIONS,
)
from ..logging_config import get_logger
from ..parser.java_parser import (
    JavaClass,
    JavaMethod,
    JavaSource,
    SourceEditor,
    Statement,
    find_identifier_references,
    find_matching,
    parse_java_source,
    shadowing_scopes,
    split_statements,
)
from ..parser.resource_resolver import LayoutIndex
from ..parser.xml_parser import LayoutFile, LayoutNode
from ..utils import indent, simple_type_name, to_binding_class_name, to_camel_case
from .annotation_extractor import BindingSet, MethodBinding, extract_bindings, split_arguments
from .layout_resolver import LayoutResolver
from .listener_rules import ListenerKind, render_listener, render_template, required_imports
from .xml_repairer import XmlRepairer

logger = get_logger(__name__)

_LAYOUT_REF_RE = re.compile(r"\bR\s*\.\s*layout\s*\.\s*(\w+)")
# receiver chain: inflater. / LayoutInflater.from(getContext()).
_INFLATE_CALL_RE = re.compile(
    r"(?<![\w$.])((?:[A-Za-z_$][\w$]*(?:\s*\((?:[^()]|\([^()]*\))*\))?\s*\.\s*)*)inflate\s*\("
)
_SET_CONTENT_RE = re.compile(r"(?<![\w$.])(?:(?:this|super)\s*\.\s*)?%s\s*\(" % SET_CONTENT_VIEW)
_BIND_CALL_RE = re.compile(
    r"(?<![\w$.])(?:(?:final\s+)?(?:[\w$.<>]+\s+)?(?:this\s*\.\s*)?[\w$]+\s*=\s*)?"
    r"(?:%s\s*\.\s*)?%s\s*\.\s*bind\s*\(" % (BUTTERKNIFE_PACKAGE, BUTTERKNIFE_CLASS)
)

# listener setters that need more than a View receiver
_RECEIVER_TYPES = {
    ListenerKind.CHECKED_CHANGED: ("CompoundButton", "android.widget.CompoundButton"),
    ListenerKind.TEXT_CHANGED: ("TextView", "android.widget.TextView"),
    ListenerKind.EDITOR_ACTION: ("TextView", "android.widget.TextView"),
    ListenerKind.ITEM_CLICK: ("AdapterView<?>", "android.widget.AdapterView"),
    ListenerKind.ITEM_LONG_CLICK: ("AdapterView<?>", "android.widget.AdapterView"),
    ListenerKind.ITEM_SELECTED: ("AdapterView<?>", "android.widget.AdapterView"),
}


# ============================
# 1. Results
# ============================

@dataclass
class ClassOutcome:
    name: str
    converted: bool = False
    imports: Set[str] = field(default_factory=set)      # imports the generated code needs


@dataclass
class RewriteResult:
    text: str
    changed: bool
    layouts: List[LayoutFile] = field(default_factory=list)    # modified layout files
    report: List[str] = field(default_factory=list)
    classes: List[ClassOutcome] = field(default_factory=list)


@dataclass
class _ClassPlan:
    """Working set for one class."""
    source: JavaSource
    cls: JavaClass
    editor: SourceEditor
    resolver: LayoutResolver
    report: List[str]
    bindings: BindingSet
    outcome: ClassOutcome
    init: Optional[JavaMethod] = None
    is_fragment: bool = False
    content: Optional[Statement] = None
    layout_name: Optional[str] = None
    layout: Optional[LayoutFile] = None
    unit: str = "    "
    paths: Dict[str, str] = field(default_factory=dict)

    def note(self, message: str) -> None:
        self.report.append(f"{self.cls.name}: {message}")

    def warn(self, message: str) -> None:
        logger.warning("%s: %s", self.cls.name, message)
        self.note(message)


# ============================
# 2. Engine
# ============================

class RewriteEngine:
    """
    Rewrites ButterKnife classes into findViewById or View Binding code.

    One ``process_source`` call is one pass: layouts touched by any class of
    the file are loaded once and returned with the new source text.
    """

    def __init__(self, settings: Settings, layout_index: LayoutIndex, xml_validation: Optional[bool] = None):
        self.settings = settings
        self.index = layout_index
        self.xml_validation = settings.validate_xml if xml_validation is None else xml_validation

    @property
    def binding_mode(self) -> bool:
        return self.settings.mode == ConversionMode.VIEW_BINDING

    @property
    def holder(self) -> str:
        return self.settings.binding_field_name

    def process_source(self, text: str, path=None) -> RewriteResult:
        source = parse_java_source(text)
        resolver = LayoutResolver(self.index)
        editor = SourceEditor(text)
        report: List[str] = []

        outcomes = [
            self.process_class(source, cls, editor, report, resolver)
            for cls in source.classes
            if cls.kind == "class"
        ]
        if not any(o.converted for o in outcomes):
            return RewriteResult(text=text, changed=False, report=report, classes=outcomes)

        needed: Set[str] = set()
        for o in outcomes:
            needed |= o.imports
        self._update_imports(source, editor, needed)

        new_text = editor.apply()
        layouts = resolver.session.dirty_layouts()
        logger.debug("%s: %d layout(s) modified", path or "<source>", len(layouts))
        return RewriteResult(
            text=new_text,
            changed=new_text != text,
            layouts=layouts,
            report=report,
            classes=outcomes,
        )

    def process_class(
        self,
        source: JavaSource,
        java_class: JavaClass,
        editor: SourceEditor,
        report: List[str],
        resolver: Optional[LayoutResolver] = None,
    ) -> ClassOutcome:
        """Record the edits converting one class; nothing is applied here."""
        outcome = ClassOutcome(name=java_class.name)

        # 1. bindings
        bindings = extract_bindings(java_class, source)
        if bindings.is_empty:
            if bindings.unsupported:
                logger.info("%s: only unsupported annotations, left as is", java_class.name)
            return outcome

        plan = _ClassPlan(
            source=source,
            cls=java_class,
            editor=editor,
            resolver=resolver or LayoutResolver(self.index),
            report=report,
            bindings=bindings,
            outcome=outcome,
        )
        plan.unit = self._indent_unit(source, java_class)
        for rid in bindings.duplicate_ids:
            plan.warn(f"resource id '{rid}' is bound by more than one field")

        # 2. anchor and layout
        self._locate_anchor(plan)
        plan.layout = plan.resolver.load(plan.layout_name)
        plan.note(f"layout {plan.layout_name} ({to_binding_class_name(plan.layout_name)})")

        # 3. layout ids
        if self.xml_validation and bindings.all_fields:
            results = XmlRepairer(plan.resolver).validate_and_ensure_ids(bindings.all_fields, plan.layout_name)
            for rid, message in results.items():
                plan.note(f"{rid}: {message}")

        # 4. annotations
        for ann in bindings.annotations:
            editor.remove(ann.start, ann.end)

        # 5-8. initialization, references, declarations, listeners
        if self.binding_mode:
            self._convert_to_binding(plan)
        else:
            self._convert_to_find_view_by_id(plan)

        # 9. ButterKnife calls
        if bindings.unsupported:
            names = ", ".join(sorted({f"@{n}" for n in bindings.unsupported}))
            plan.warn(f"{names} not converted; ButterKnife.bind kept")
        else:
            self._remove_butterknife_calls(plan)

        outcome.converted = True
        logger.info(
            "%s: converted %d field(s) and %d listener(s)",
            java_class.name, len(bindings.all_fields), len(bindings.listener_registrations()),
        )
        return outcome

    # ============================
    # 3. Anchors
    # ============================

    @staticmethod
    def _indent_unit(source: JavaSource, cls: JavaClass) -> str:
        class_indent = source.line_indent(cls.start)
        member = cls.member_indent
        if member.startswith(class_indent) and len(member) > len(class_indent):
            return member[len(class_indent):]
        return "    "

    def _locate_anchor(self, plan: _ClassPlan) -> None:
        cls = plan.cls
        fragment_init = cls.find_methods(*FRAGMENT_INIT)
        activity_init = cls.find_methods(*ACTIVITY_INIT)
        if fragment_init:
            plan.init, plan.is_fragment = fragment_init[0], True
        elif activity_init:
            plan.init = activity_init[0]

        if plan.init is not None:
            masked = plan.source.masked
            for stmt in split_statements(plan.source, plan.init):
                code = masked[stmt.start:stmt.end]
                if plan.is_fragment:
                    hit = _INFLATE_CALL_RE.search(code) and R_LAYOUT_MARKER in re.sub(r"\s+", "", code)
                else:
                    hit = _SET_CONTENT_RE.search(code)
                if hit:
                    plan.content = stmt
                    break

        layout_m = None
        if plan.content is not None:
            layout_m = _LAYOUT_REF_RE.search(plan.source.masked, plan.content.start, plan.content.end)
        if layout_m:
            plan.layout_name = layout_m.group(1)
        else:
            plan.layout_name = plan.resolver.layout_name_for_class(cls.name)

        if plan.init is None:
            plan.warn("no onCreate/onCreateView method; initialization not generated")
        elif plan.content is None:
            what = "inflate(R.layout...)" if plan.is_fragment else f"{SET_CONTENT_VIEW}(...)"
            plan.warn(f"no {what} statement in {plan.init.name}; initialization not generated")

    # ============================
    # 4. Statement assembly
    # ============================

    def _replace_content(self, plan: _ClassPlan, before: List[str], statement: Optional[str], after: List[str]) -> None:
        """
        Replace the content statement by ``before`` + ``statement`` + ``after``.
        ``statement`` None keeps the original text.
        """
        content = plan.content
        pad = plan.source.line_indent(content.start)
        parts = [indent(code, pad) for code in before]
        # the statement keeps its own continuation-line indentation
        parts.append(pad + (content.text if statement is None else statement))
        parts.extend(indent(code, pad) for code in after)
        plan.editor.replace(content.start, content.end, "\n".join(parts)[len(pad):])

    def _listeners(self, plan: _ClassPlan, target_for) -> List[str]:
        statements = []
        for mb, rid in plan.bindings.listener_registrations():
            target = target_for(mb, rid)
            statements.append(render_listener(
                mb.kind, target, mb.call_expression, mb.callback, mb.returns_boolean, plan.unit,
            ))
            plan.outcome.imports.update(required_imports(mb.kind))
        return statements

    # ============================
    # 5. findViewById mode
    # ============================

    def _view_variable(self, plan: _ClassPlan) -> Optional[str]:
        # View view = inflater.inflate(...) / rootView = inflater.inflate(...)
        m = re.match(r"(?:final\s+)?(?:[\w.]+\s+)?([A-Za-z_$][\w$]*)\s*=(?!=)", plan.content.text)
        return m.group(1) if m else None

    def _convert_to_find_view_by_id(self, plan: _ClassPlan) -> None:
        if plan.content is None:
            return
        bindings = plan.bindings
        receiver = ""
        statement = None
        tail: List[str] = []

        if plan.is_fragment:
            var = self._view_variable(plan)
            if var is None and re.match(r"return\b", plan.content.text):
                var = DEFAULT_FIELD_NAME
                statement = f"View {var} = {plan.content.text[len('return'):].strip()}"
                tail = [f"return {var};"]
            if var is None:
                plan.warn("inflated view is not stored in a variable; findViewById not generated")
                return
            receiver = var + "."

        inits = [f"{fb.name} = {receiver}findViewById({fb.id_ref});" for fb in bindings.all_fields]

        def target_for(mb: MethodBinding, rid: str) -> str:
            fb = bindings.fields.get(rid)
            if fb is not None:
                return fb.name
            lookup = f"{receiver}findViewById({mb.id_ref(rid)})"
            cast = _RECEIVER_TYPES.get(mb.kind)
            if cast is None:
                return lookup
            plan.outcome.imports.add(cast[1])
            return f"(({cast[0]}) {lookup})"

        listeners = self._listeners(plan, target_for)
        if not inits and not listeners and statement is None:
            return
        self._replace_content(plan, [], statement, inits + listeners + tail)

    # ============================
    # 6. View Binding mode
    # ============================

    def _convert_to_binding(self, plan: _ClassPlan) -> None:
        if plan.content is None:
            # fields keep their declarations so the class still compiles
            return
        binding_class = to_binding_class_name(plan.layout_name)
        if plan.is_fragment:
            before, statement, is_return = self._fragment_inflate(plan, binding_class)
        else:
            before, statement, is_return = self._activity_inflate(plan, binding_class)
        if statement is None:
            plan.warn("content statement not understood; initialization not generated")
            return
        self._declare_holder(plan, binding_class)

        listeners = self._listeners(plan, lambda mb, rid: self._access_path(plan, rid))
        if is_return:
            self._replace_content(plan, before + listeners, statement, [])
        else:
            self._replace_content(plan, before, statement, listeners)

        self._add_teardown(plan)
        self._rewrite_references(plan)
        for fb in plan.bindings.all_fields:
            decl = plan.bindings.declarations[fb.name]
            plan.editor.remove(decl.start, decl.end)

    def _declare_holder(self, plan: _ClassPlan, binding_class: str) -> None:
        cls = plan.cls
        if any(self.holder in f.names for f in cls.fields):
            plan.warn(f"field '{self.holder}' already declared; reused as the binding holder")
            return
        text = plan.source.text
        pos = cls.first_member_start
        line_start = text.rfind("\n", 0, pos) + 1
        declaration = f"private {binding_class} {self.holder};"
        if text[line_start:pos].strip():
            plan.editor.insert(pos, f"{declaration} ")
            return
        # the blank line after removed bound fields stays in place
        removed = any(d.start == pos for d in plan.bindings.declarations.values())
        gap = "\n" if removed else "\n\n"
        plan.editor.insert(line_start, f"{cls.member_indent}{declaration}{gap}")

    def _activity_inflate(self, plan: _ClassPlan, binding_class: str) -> Tuple[List[str], Optional[str], bool]:
        content = plan.content
        masked = plan.source.masked
        m = _SET_CONTENT_RE.search(masked, content.start, content.end)
        open_paren = m.end() - 1
        close_paren = find_matching(masked, open_paren)
        rel_open, rel_close = open_paren - content.start, close_paren - content.start
        statement = content.text[:rel_open + 1] + f"{self.holder}.getRoot()" + content.text[rel_close:]
        before = [f"{self.holder} = {binding_class}.inflate(getLayoutInflater());"]
        return before, statement, False

    def _fragment_inflate(self, plan: _ClassPlan, binding_class: str) -> Tuple[List[str], Optional[str], bool]:
        content = plan.content
        masked = plan.source.masked
        m = _INFLATE_CALL_RE.search(masked, content.start, content.end)
        if m is None:
            return [], None, False
        open_paren = m.end() - 1
        close_paren = find_matching(masked, open_paren)

        args = split_arguments(plan.source.text[open_paren + 1:close_paren])
        params = plan.init.params
        receiver = plan.source.text[m.start(1):m.end(1)].strip().rstrip(".").strip()
        inflater = receiver or params[0].name
        if len(args) >= 2:
            attach = args[2] if len(args) >= 3 else "false"
            inflate_args = f"{inflater}, {args[1]}, {attach}"
        else:
            inflate_args = inflater

        rel_start, rel_end = m.start() - content.start, close_paren + 1 - content.start
        statement = content.text[:rel_start] + f"{self.holder}.getRoot()" + content.text[rel_end:]
        before = [f"{self.holder} = {binding_class}.inflate({inflate_args});"]
        return before, statement, bool(re.match(r"return\b", content.text))

    def _add_teardown(self, plan: _ClassPlan) -> None:
        cls = plan.cls
        source = plan.source
        name = FRAGMENT_TEARDOWN if plan.is_fragment else ACTIVITY_TEARDOWN
        release = f"{self.holder} = null;"
        existing = cls.find_methods(name, 0)

        if existing:
            method = existing[0]
            statements = split_statements(source, method)
            if any(re.sub(r"\s+", "", s.text) == release.replace(" ", "") for s in statements):
                return
            pad = source.line_indent(statements[0].start) if statements else cls.member_indent + plan.unit
            super_call = next(
                (s for s in statements if re.match(r"super\s*\.\s*%s\s*\(" % name, s.text)),
                None,
            )
            if super_call is not None:
                plan.editor.insert(super_call.end, f"\n{pad}{release}")
            else:
                line_start = source.text.rfind("\n", 0, method.body_end) + 1
                if source.text[line_start:method.body_end].strip():
                    plan.editor.insert(method.body_end, f" {release} ")
                else:
                    plan.editor.insert(line_start, f"{pad}{release}\n")
            return

        visibility = "public" if plan.is_fragment else "protected"
        method_text = render_template(
            "teardown.java.j2",
            visibility=visibility,
            method_name=name,
            field=self.holder,
            unit=plan.unit,
        )
        plan.editor.insert(plan.init.end, "\n\n" + indent(method_text, cls.member_indent))

    # ============================
    # 7. References
    # ============================

    def _access_path(self, plan: _ClassPlan, resource_id: str) -> str:
        """``binding.field``, ``binding.include.field`` or ``binding.include.rootId``."""
        if resource_id in plan.paths:
            return plan.paths[resource_id]
        parts = [self.holder]
        location = plan.resolver.locate_id(plan.layout.root, resource_id) if plan.layout else None
        if location is not None:
            parts.extend(to_camel_case(i) for i in location.include_chain)
        parts.append(to_camel_case(resource_id))
        if location is not None and location.is_include_tag:
            parts.append(self._include_root(plan, location.node))
        path = ".".join(parts)
        plan.paths[resource_id] = path
        return path

    def _include_root(self, plan: _ClassPlan, node: LayoutNode) -> str:
        included = plan.resolver.load(node.included_layout)
        if included is None:
            plan.warn(
                f"include '{node.resource_id}' refers to missing layout "
                f"'{node.included_layout}'; using getRoot()"
            )
            return "getRoot()"
        if not self.xml_validation:
            return "getRoot()"
        root_id = plan.resolver.find_or_assign_root_id(included)
        return to_camel_case(root_id) if root_id else "getRoot()"

    def _rewrite_references(self, plan: _ClassPlan) -> None:
        cls = plan.cls
        for fb in plan.bindings.all_fields:
            path = self._access_path(plan, fb.resource_id)
            # methods with a parameter of the same name, locals and lambda
            # parameters in their scope, and nested types declaring one,
            # keep their references
            shadowed = [
                (m.start, m.end) for m in cls.methods
                if any(p.name == fb.name for p in m.params)
            ]
            for m in cls.methods:
                if m.has_body:
                    shadowed.extend(shadowing_scopes(plan.source, m.body_start, m.body_end, fb.name))
            declares = re.compile(r"[\w>\]]\s+%s\s*[;=,)]" % re.escape(fb.name))
            shadowed.extend(
                (s, e) for s, e in cls.nested_spans
                if declares.search(plan.source.masked, s, e)
            )
            spans = find_identifier_references(plan.source, cls.body_start + 1, cls.body_end, fb.name)
            for start, end in spans:
                if any(s <= start < e for s, e in shadowed):
                    continue
                plan.editor.replace(start, end, path)

    # ============================
    # 8. ButterKnife cleanup
    # ============================

    def _remove_butterknife_calls(self, plan: _ClassPlan) -> None:
        source = plan.source
        masked = source.masked
        for method in plan.cls.methods:
            if not method.has_body:
                continue
            for m in _BIND_CALL_RE.finditer(masked, method.body_start, method.body_end):
                close = find_matching(masked, m.end() - 1)
                semi = close + 1
                while semi < method.body_end and masked[semi].isspace():
                    semi += 1
                before = masked[method.body_start:m.start()].rstrip()
                at_statement_start = before[-1:] in ("{", "}", ";")
                if at_statement_start and semi < method.body_end and masked[semi] == ";":
                    plan.editor.remove(m.start(), semi + 1)
                else:
                    plan.warn(f"ButterKnife.bind inside an expression in {method.name}; left in place")

        for jf in plan.cls.fields:
            if simple_type_name(jf.type_name) != UNBINDER_TYPE:
                continue
            plan.editor.remove(jf.start, jf.end)
            for name in jf.names:
                self._remove_unbinder_uses(plan, name)

    def _remove_unbinder_uses(self, plan: _ClassPlan, name: str) -> None:
        masked = plan.source.masked
        ref = r"(?:this\s*\.\s*)?%s" % re.escape(name)
        unbind = r"%s\s*\.\s*unbind\s*\(\s*\)\s*;" % ref
        patterns = (
            # if (unbinder != null) { unbinder.unbind(); }
            r"if\s*\(\s*%s\s*!=\s*null\s*\)\s*(?:\{\s*%s\s*\}|%s)" % (ref, unbind, unbind),
            unbind,
            r"(?<![\w$.])%s\s*=\s*null\s*;" % ref,
        )
        for method in plan.cls.methods:
            if not method.has_body:
                continue
            for pattern in patterns:
                for m in re.compile(pattern).finditer(masked, method.body_start, method.body_end):
                    plan.editor.remove(m.start(), m.end())

    # ============================
    # 9. Imports
    # ============================

    def _update_imports(self, source: JavaSource, editor: SourceEditor, needed: Set[str]) -> None:
        masked = source.masked
        removable: List[Tuple[int, int]] = []
        for imp in source.imports:
            if imp.is_static or not imp.name.startswith(BUTTERKNIFE_PACKAGE + "."):
                continue
            simple = imp.name.rsplit(".", 1)[-1]
            if simple == "*":
                still_used = self._uses_butterknife(source, editor)
            else:
                still_used = any(
                    not editor.covers(m.start())
                    for m in re.finditer(r"(?<![\w$])%s(?![\w$])" % re.escape(simple), masked)
                    if not any(i.start <= m.start() < i.end for i in source.imports)
                )
            if not still_used:
                removable.append((imp.start, imp.end))

        # consecutive import lines go as one block
        merged: List[List[int]] = []
        for start, end in removable:
            if merged and merged[-1][1] == start:
                merged[-1][1] = end
            else:
                merged.append([start, end])
        for start, end in merged:
            editor.remove(start, end - 1 if source.text[end - 1:end] == "\n" else end)

        missing = sorted(name for name in needed if not source.has_import(name))
        if missing:
            lines = "".join(f"import {name};\n" for name in missing)
            # after the last kept import; a removed block may swallow imports_end
            kept = [imp.end for imp in source.imports if (imp.start, imp.end) not in removable]
            if kept:
                anchor = max(kept)
            elif removable:
                anchor = removable[0][0]
            else:
                anchor = source.imports_end
                lines = "\n" + lines
            editor.insert(anchor, lines)

    @staticmethod
    def _uses_butterknife(source: JavaSource, editor: SourceEditor) -> bool:
        names = {BUTTERKNIFE_CLASS, UNBINDER_TYPE, "BindView"} | UNSUPPORTED_ANNOTATIONS
        names |= {k.annotation for k in ListenerKind}
        pattern = r"(?<![\w$])(?:%s)(?![\w$])" % "|".join(sorted(names))
        for m in re.finditer(pattern, source.masked):
            if any(i.start <= m.start() < i.end for i in source.imports):
                continue
            if not editor.covers(m.start()):
                return True
        return False

