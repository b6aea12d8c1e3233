from __future__ import annotations

import re
from typing import List, Optional, Union

from .constants import (
    BINDING_SUFFIX,
    DEFAULT_BINDING_CLASS,
    DEFAULT_FIELD_NAME,
    DEFAULT_LAYOUT_NAME,
    DEFAULT_TYPE_PREFIX,
    ID_SEPARATOR,
    ROLE_LAYOUT_PREFIXES,
    ROOT_ID_SUFFIX,
    TYPE_PREFIXES,
)

_VALID_ID = re.compile(r"^[a-z][a-z0-9_]*$")


def indent(code: str, spaces: Union[int, str] = 4) -> str:
    """Indent every non-blank line by a number of spaces or by a literal prefix."""
    pad = spaces if isinstance(spaces, str) else " " * spaces
    return "\n".join(pad + line if line.strip() else line for line in code.splitlines())


def _segments(identifier: str) -> List[str]:
    return [p for p in identifier.split(ID_SEPARATOR) if p]


def to_camel_case(identifier: Optional[str]) -> str:
    """Resource id -> View Binding field name.

    ``checkout_button`` -> ``checkoutButton``; ids without a separator are
    already camelCase and come back unchanged.
    """
    if not identifier:
        return DEFAULT_FIELD_NAME
    if ID_SEPARATOR not in identifier:
        return identifier

    parts = _segments(identifier)
    if not parts:
        return DEFAULT_FIELD_NAME
    return parts[0].lower() + "".join(p[0].upper() + p[1:].lower() for p in parts[1:])


def to_binding_class_name(layout_name: Optional[str]) -> str:
    """Layout name -> generated binding class (``activity_main`` -> ``ActivityMainBinding``)."""
    if not layout_name:
        return DEFAULT_BINDING_CLASS
    parts = _segments(layout_name)
    if not parts:
        return DEFAULT_BINDING_CLASS
    return "".join(p[0].upper() + p[1:].lower() for p in parts) + BINDING_SUFFIX


def camel_to_snake_case(name: Optional[str]) -> str:
    """``CheckoutNew`` -> ``checkout_new``; an empty name becomes ``layout``."""
    if not name:
        return DEFAULT_LAYOUT_NAME
    out: List[str] = []
    for i, ch in enumerate(name):
        if ch.isupper() and i > 0:
            out.append("_")
        out.append(ch.lower())
    return "".join(out)


def layout_name_from_class_name(class_name: Optional[str]) -> Optional[str]:
    """Guess a layout name from a class name.

    ``MainActivity`` -> ``activity_main``, ``LoginFragment`` -> ``fragment_login``,
    ``UserAdapter`` -> ``user_adapter``.
    """
    if not class_name:
        return None
    for suffix, prefix in ROLE_LAYOUT_PREFIXES:
        if class_name.endswith(suffix):
            return prefix + camel_to_snake_case(class_name[: -len(suffix)])
    return camel_to_snake_case(class_name)


def type_prefix_for(type_name: Optional[str]) -> str:
    """Short id prefix for a view type (``Button`` -> ``btn``)."""
    if not type_name:
        return DEFAULT_TYPE_PREFIX
    lowered = type_name.lower()
    for needle, prefix in TYPE_PREFIXES:
        if needle in lowered:
            return prefix
    return DEFAULT_TYPE_PREFIX


def is_valid_id_name(identifier: Optional[str]) -> bool:
    return bool(identifier) and bool(_VALID_ID.match(identifier))


def suggest_identifier(field_name: Optional[str], type_name: Optional[str]) -> str:
    """Conventional id for a field: ``loginButton``/``Button`` -> ``btn_login_button``."""
    base = camel_to_snake_case(field_name or DEFAULT_FIELD_NAME)
    prefix = type_prefix_for(type_name)
    if not base.startswith(prefix):
        base = f"{prefix}_{base}"
    return base


def root_id_for_layout(layout_name: Optional[str]) -> str:
    """Id given to an included layout's root (``item_header`` -> ``itemHeaderRoot``)."""
    if not layout_name:
        return DEFAULT_LAYOUT_NAME + ROOT_ID_SUFFIX
    return to_camel_case(layout_name) + ROOT_ID_SUFFIX


def simple_type_name(type_name: Optional[str]) -> str:
    """Drop package qualification and generic arguments (``a.b.Spinner<T>`` -> ``Spinner``)."""
    if not type_name:
        return ""
    base = type_name.split("<", 1)[0].strip()
    return base.rsplit(".", 1)[-1]


def unique_name(base: str, used) -> str:
    """``base`` or ``base1``, ``base2``, ... whichever is not in ``used``."""
    name = base
    counter = 1
    while name in used:
        name = f"{base}{counter}"
        counter += 1
    return name
