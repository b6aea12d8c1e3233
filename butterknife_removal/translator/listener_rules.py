# butterknife_removal/translator/listener_rules.py
"""
Listener shapes for every supported ButterKnife method annotation.

``LISTENER_SPECS`` maps each ``ListenerKind`` to the Android setter, the
callback(s) of the listener interface and how the registration is written
(a lambda, or an anonymous class when the interface has several methods).
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Optional, Set, Tuple

from jinja2 import Environment, FileSystemLoader

from ..logging_config import get_logger
from ..parser.java_parser import JavaMethod, Parameter
from ..utils import simple_type_name

logger = get_logger(__name__)


class ListenerKind(Enum):
    """Interaction kinds, valued by their annotation's simple name."""

    CLICK = "OnClick"
    LONG_CLICK = "OnLongClick"
    CHECKED_CHANGED = "OnCheckedChanged"
    TEXT_CHANGED = "OnTextChanged"
    EDITOR_ACTION = "OnEditorAction"
    FOCUS_CHANGE = "OnFocusChange"
    ITEM_CLICK = "OnItemClick"
    ITEM_LONG_CLICK = "OnItemLongClick"
    ITEM_SELECTED = "OnItemSelected"
    TOUCH = "OnTouch"

    @property
    def annotation(self) -> str:
        return self.value

    @classmethod
    def from_annotation(cls, simple_name: str) -> Optional["ListenerKind"]:
        for kind in cls:
            if kind.value == simple_name:
                return kind
        return None


@dataclass(frozen=True)
class Callback:
    name: str
    params: Tuple[Tuple[str, str], ...]     # (type, name)
    returns: str = "void"

    @property
    def param_names(self) -> List[str]:
        return [name for _, name in self.params]

    @property
    def signature(self) -> str:
        args = ", ".join(f"{t} {n}" for t, n in self.params)
        return f"public {self.returns} {self.name}({args})"


@dataclass(frozen=True)
class ListenerSpec:
    setter: str
    callbacks: Tuple[Callback, ...]
    anonymous_type: Optional[str] = None    # None: registered with a lambda
    imports: Tuple[str, ...] = ()
    default: Optional[str] = None           # callback used when none is named

    @property
    def macro(self) -> str:
        return "anonymous_listener" if self.anonymous_type else "lambda_listener"

    @property
    def default_callback(self) -> Callback:
        for cb in self.callbacks:
            if cb.name == self.default:
                return cb
        return self.callbacks[0]

    def callback(self, name: Optional[str]) -> Callback:
        for cb in self.callbacks:
            if cb.name == name:
                return cb
        return self.default_callback


_ITEM_PARAMS = (("AdapterView<?>", "parent"), ("View", "view"), ("int", "position"), ("long", "id"))

LISTENER_SPECS = MappingProxyType({
    ListenerKind.CLICK: ListenerSpec(
        "setOnClickListener", (Callback("onClick", (("View", "v"),)),),
    ),
    ListenerKind.LONG_CLICK: ListenerSpec(
        "setOnLongClickListener", (Callback("onLongClick", (("View", "v"),), "boolean"),),
    ),
    ListenerKind.CHECKED_CHANGED: ListenerSpec(
        "setOnCheckedChangeListener",
        (Callback("onCheckedChanged", (("CompoundButton", "buttonView"), ("boolean", "isChecked"))),),
    ),
    ListenerKind.TEXT_CHANGED: ListenerSpec(
        "addTextChangedListener",
        (
            Callback("beforeTextChanged", (("CharSequence", "s"), ("int", "start"), ("int", "count"), ("int", "after"))),
            Callback("onTextChanged", (("CharSequence", "s"), ("int", "start"), ("int", "before"), ("int", "count"))),
            Callback("afterTextChanged", (("Editable", "s"),)),
        ),
        anonymous_type="TextWatcher",
        imports=("android.text.Editable", "android.text.TextWatcher"),
        default="onTextChanged",
    ),
    ListenerKind.EDITOR_ACTION: ListenerSpec(
        "setOnEditorActionListener",
        (Callback("onEditorAction", (("TextView", "v"), ("int", "actionId"), ("KeyEvent", "event")), "boolean"),),
    ),
    ListenerKind.FOCUS_CHANGE: ListenerSpec(
        "setOnFocusChangeListener",
        (Callback("onFocusChange", (("View", "v"), ("boolean", "hasFocus"))),),
    ),
    ListenerKind.ITEM_CLICK: ListenerSpec(
        "setOnItemClickListener", (Callback("onItemClick", _ITEM_PARAMS),),
    ),
    ListenerKind.ITEM_LONG_CLICK: ListenerSpec(
        "setOnItemLongClickListener", (Callback("onItemLongClick", _ITEM_PARAMS, "boolean"),),
    ),
    ListenerKind.ITEM_SELECTED: ListenerSpec(
        "setOnItemSelectedListener",
        (
            Callback("onItemSelected", _ITEM_PARAMS),
            Callback("onNothingSelected", (("AdapterView<?>", "parent"),)),
        ),
        anonymous_type="AdapterView.OnItemSelectedListener",
        imports=("android.view.View", "android.widget.AdapterView"),
    ),
    ListenerKind.TOUCH: ListenerSpec(
        "setOnTouchListener",
        (Callback("onTouch", (("View", "v"), ("MotionEvent", "event")), "boolean"),),
    ),
})

# ButterKnife "callback = ..." constants -> listener method
_CALLBACK_CONSTANTS = {
    "TEXT_CHANGED": "onTextChanged",
    "BEFORE_TEXT_CHANGED": "beforeTextChanged",
    "AFTER_TEXT_CHANGED": "afterTextChanged",
    "ITEM_SELECTED": "onItemSelected",
    "NOTHING_SELECTED": "onNothingSelected",
}

_PRIMITIVE_DEFAULTS = {
    "int": "0", "long": "0L", "boolean": "false", "float": "0f",
    "double": "0d", "short": "(short) 0", "byte": "(byte) 0", "char": "'\\0'",
}

# callback parameter types a declared View subtype can be cast from
_VIEW_TYPES = frozenset({"View", "TextView", "CompoundButton", "AdapterView"})
_NON_VIEW_OBJECTS = frozenset({"CharSequence", "Editable", "KeyEvent", "MotionEvent", "String", "Object"})


def resolve_callback(kind: ListenerKind, method: JavaMethod, callback: Optional[str] = None) -> Callback:
    """The listener method a handler is called from."""
    spec = LISTENER_SPECS[kind]
    if kind is ListenerKind.TEXT_CHANGED:
        declares_editable = any(simple_type_name(p.type_name) == "Editable" for p in method.params)
        if declares_editable and callback is None:
            return spec.callback("afterTextChanged")
    return spec.callback(_CALLBACK_CONSTANTS.get(callback or "", None))


def _match_argument(param: Parameter, callback: Callback, used: Set[str]) -> str:
    wanted = simple_type_name(param.type_name)
    free = [(simple_type_name(t), n) for t, n in callback.params if n not in used]

    for cb_type, name in free:
        if cb_type == wanted:
            used.add(name)
            return name
    if wanted == "CharSequence":
        for cb_type, name in free:
            if cb_type == "Editable":
                used.add(name)
                return name
    if wanted not in _PRIMITIVE_DEFAULTS and wanted not in _NON_VIEW_OBJECTS:
        for cb_type, name in free:
            if cb_type in _VIEW_TYPES:
                used.add(name)
                return f"({param.type_name}) {name}"

    logger.warning(
        "%s() has no argument for parameter '%s %s'",
        callback.name, param.type_name, param.name,
    )
    return _PRIMITIVE_DEFAULTS.get(wanted, "null")


def build_call_expression(kind: ListenerKind, method: JavaMethod, callback: Optional[str] = None) -> Tuple[str, str]:
    """
    Call forwarding a listener callback to ``method``.

    Returns (expression, callback name). A handler without parameters is
    called with none; otherwise every declared parameter receives the
    callback argument of the same type, View subtypes through a cast.
    """
    cb = resolve_callback(kind, method, callback)
    if not method.params:
        return f"{method.name}()", cb.name
    used: Set[str] = set()
    args = [_match_argument(p, cb, used) for p in method.params]
    return f"{method.name}({', '.join(args)})", cb.name


def required_imports(kind: ListenerKind) -> Tuple[str, ...]:
    return LISTENER_SPECS[kind].imports


# ============================
# Rendering
# ============================

def _template_env() -> Environment:
    # templates/ sits next to the translator package
    template_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")
    return Environment(
        loader=FileSystemLoader(template_dir),
        trim_blocks=True,
        lstrip_blocks=True,
        autoescape=False,
    )


_ENV = _template_env()


def render_template(name: str, **ctx) -> str:
    return _ENV.get_template(name).render(**ctx).strip("\n")


def render_listener(
    kind: ListenerKind,
    target: str,
    call: str,
    callback: Optional[str] = None,
    returns_boolean: bool = False,
    unit: str = "    ",
) -> str:
    """
    One listener registration statement, without leading indentation.

    ``returns_boolean`` tells whether the handler itself returns a boolean;
    otherwise a boolean listener returns ``true`` after calling it.
    """
    spec = LISTENER_SPECS[kind]
    cb = spec.callback(callback)
    macro = getattr(_ENV.get_template("listeners.java.j2").module, spec.macro)
    if spec.anonymous_type:
        methods: List[Dict[str, Optional[str]]] = [
            {"signature": c.signature, "body": call if c.name == cb.name else None}
            for c in spec.callbacks
        ]
        text = macro(
            target=target, setter=spec.setter, type_name=spec.anonymous_type,
            methods=methods, unit=unit,
        )
    else:
        text = macro(
            target=target, setter=spec.setter, params=cb.param_names, call=call,
            wrap=cb.returns == "boolean" and not returns_boolean, unit=unit,
        )
    return str(text).strip("\n")
