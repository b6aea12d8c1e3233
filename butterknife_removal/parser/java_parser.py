# butterknife_removal/parser/java_parser.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..errors import EditConflictError, JavaParseError


# ============================
# 1. Masking and bracket matching
# ============================

_PAIRS = {"(": ")", "{": "}", "[": "]"}


def _blank(chars: List[str], start: int, end: int) -> None:
    for i in range(start, end):
        if chars[i] != "\n":
            chars[i] = " "


def mask_source(text: str) -> str:
    """
    Same-length copy of ``text`` with comments and the contents of string,
    text-block and char literals replaced by spaces (newlines are kept).
    Offsets in the mask are offsets in the original.
    """
    chars = list(text)
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""
        if ch == "/" and nxt == "/":
            end = text.find("\n", i)
            end = n if end == -1 else end
            _blank(chars, i, end)
            i = end
        elif ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            _blank(chars, i, end)
            i = end
        elif text.startswith('"""', i):
            end = text.find('"""', i + 3)
            end = n if end == -1 else end + 3
            _blank(chars, i + 3, max(i + 3, end - 3))
            i = end
        elif ch in "\"'":
            j = i + 1
            while j < n and text[j] != ch and text[j] != "\n":
                j += 2 if text[j] == "\\" else 1
            j = min(j, n)
            _blank(chars, i + 1, j)
            i = j + 1
        else:
            i += 1
    return "".join(chars)


def find_matching(masked: str, open_index: int) -> int:
    """Index of the bracket closing the one at ``open_index``."""
    opener = masked[open_index]
    closer = _PAIRS.get(opener)
    if closer is None:
        raise JavaParseError(f"no bracket at offset {open_index}")
    depth = 0
    for i in range(open_index, len(masked)):
        c = masked[i]
        if c == opener:
            depth += 1
        elif c == closer:
            depth -= 1
            if depth == 0:
                return i
    raise JavaParseError(f"unbalanced '{opener}' at offset {open_index}")


def _skip_ws(masked: str, i: int, end: int) -> int:
    while i < end and masked[i].isspace():
        i += 1
    return i


def _split_top_level(masked: str, start: int, end: int, sep: str = ",") -> List[Tuple[int, int]]:
    """Spans of ``masked[start:end]`` split on ``sep`` outside any brackets or generics."""
    spans = []
    depth = 0
    piece = start
    for i in range(start, end):
        c = masked[i]
        if c in "({[<":
            depth += 1
        elif c in ")}]>":
            depth -= 1
        elif c == sep and depth == 0:
            spans.append((piece, i))
            piece = i + 1
    spans.append((piece, end))
    return spans


# ============================
# 2. Structural model
# ============================

@dataclass
class Annotation:
    name: str               # as written, e.g. "OnClick" or "butterknife.OnClick"
    args: Optional[str]     # text between the parentheses, None without them
    start: int
    end: int

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]


@dataclass
class Parameter:
    type_name: str
    name: str


@dataclass
class JavaField:
    type_name: str
    names: List[str]
    modifiers: List[str]
    annotations: List[Annotation]
    start: int              # first annotation or modifier
    end: int                # just past the ';'

    @property
    def name(self) -> str:
        return self.names[0]


@dataclass
class JavaMethod:
    name: str
    params: List[Parameter]
    return_type: Optional[str]      # None for constructors
    modifiers: List[str]
    annotations: List[Annotation]
    start: int
    end: int
    body_start: Optional[int] = None    # index of '{'
    body_end: Optional[int] = None      # index of the matching '}'

    @property
    def has_body(self) -> bool:
        return self.body_start is not None


@dataclass
class Statement:
    text: str
    start: int
    end: int


@dataclass
class JavaClass:
    name: str
    kind: str                   # class / interface / enum / record
    superclass: Optional[str]
    start: int
    body_start: int             # index of '{'
    body_end: int               # index of the matching '}'
    member_indent: str
    first_member_start: Optional[int] = None
    fields: List[JavaField] = field(default_factory=list)
    methods: List[JavaMethod] = field(default_factory=list)
    nested_spans: List[Tuple[int, int]] = field(default_factory=list)  # nested types, opaque

    def find_methods(self, name: str, param_count: Optional[int] = None) -> List[JavaMethod]:
        return [
            m for m in self.methods
            if m.name == name and m.has_body
            and (param_count is None or len(m.params) == param_count)
        ]


@dataclass
class ImportDecl:
    name: str               # "butterknife.BindView", "butterknife.*"
    is_static: bool
    start: int
    end: int

    @property
    def package(self) -> str:
        return self.name.rsplit(".", 1)[0]


@dataclass
class JavaSource:
    text: str
    masked: str
    imports: List[ImportDecl]
    classes: List[JavaClass]
    package: Optional[str] = None
    imports_end: int = 0    # where a new import line goes

    def line_indent(self, pos: int) -> str:
        """Leading whitespace of the line holding ``pos``."""
        line_start = self.text.rfind("\n", 0, pos) + 1
        m = re.match(r"[ \t]*", self.text[line_start:])
        return m.group(0)

    def has_import(self, name: str) -> bool:
        package = name.rsplit(".", 1)[0]
        return any(
            not imp.is_static and (imp.name == name or imp.name == package + ".*")
            for imp in self.imports
        )


# ============================
# 3. Parsing
# ============================

_IMPORT_RE = re.compile(r"^[ \t]*import\s+(static\s+)?([\w.]+(?:\.\*)?)\s*;[ \t]*\n?", re.M)
_PACKAGE_RE = re.compile(r"^[ \t]*package\s+([\w.]+)\s*;[ \t]*\n?", re.M)
_TYPE_DECL_RE = re.compile(r"\b(class|interface|enum|record)\s+(\w+)")
_ANNOTATION_RE = re.compile(r"@\s*([A-Za-z_][\w.]*)")
_NESTED_TYPE_RE = re.compile(r"(?:^|[\s>])(class|interface|enum|record|@\s*interface)\s+\w+")
_WORD_RE = re.compile(r"[A-Za-z_$][\w$]*")
_EXTENDS_RE = re.compile(r"\bextends\s+([\w.]+)")
_MEMBER_STOP_RE = re.compile(r"[;{=(]")

MODIFIERS = frozenset({
    "public", "protected", "private", "static", "final", "abstract",
    "synchronized", "native", "transient", "volatile", "strictfp",
    "default", "sealed", "non-sealed",
})


def _parse_annotation(text: str, masked: str, i: int) -> Tuple[Annotation, int]:
    m = _ANNOTATION_RE.match(masked, i)
    if not m:
        raise JavaParseError(f"malformed annotation at offset {i}")
    name = re.sub(r"\s+", "", m.group(1))
    j = _skip_ws(masked, m.end(), len(masked))
    if j < len(masked) and masked[j] == "(":
        close = find_matching(masked, j)
        return Annotation(name, text[j + 1:close], i, close + 1), close + 1
    return Annotation(name, None, i, m.end()), m.end()


def _parse_annotations(text: str, masked: str, i: int, end: int) -> Tuple[List[Annotation], int]:
    annotations = []
    i = _skip_ws(masked, i, end)
    while i < end and masked[i] == "@" and not re.match(r"@\s*interface\b", masked[i:]):
        ann, i = _parse_annotation(text, masked, i)
        annotations.append(ann)
        i = _skip_ws(masked, i, end)
    return annotations, i


def _split_modifiers(words: List[str]) -> Tuple[List[str], List[str]]:
    mods = []
    idx = 0
    while idx < len(words) and words[idx] in MODIFIERS:
        mods.append(words[idx])
        idx += 1
    return mods, words[idx:]


def _squash(s: str) -> str:
    # "Map< String , X >" -> "Map<String, X>"
    s = re.sub(r"\s+", " ", s).strip()
    s = re.sub(r"\s*([<>\[\]])\s*", r"\1", s)
    return re.sub(r"\s*,\s*", ", ", s)


def _parse_parameters(masked: str, start: int, end: int) -> List[Parameter]:
    params = []
    if not masked[start:end].strip():
        return params
    for s, e in _split_top_level(masked, start, end):
        piece = masked[s:e]
        # parameter annotations (@NonNull, @Nullable(...)) and final
        piece = re.sub(r"@\s*[\w.]+(\s*\([^)]*\))?", " ", piece)
        piece = re.sub(r"\bfinal\b", " ", piece).strip()
        m = re.match(r"(.*?)\s*\b(\w+)\s*((?:\[\s*\]\s*)*)$", piece, re.S)
        if not m:
            continue
        type_name = _squash(m.group(1) + m.group(3))
        params.append(Parameter(type_name=type_name, name=m.group(2)))
    return params


def _member_indent(text: str, pos: int, fallback: str) -> str:
    line_start = text.rfind("\n", 0, pos) + 1
    prefix = text[line_start:pos]
    return prefix if prefix and not prefix.strip() else fallback


def _declaration_end(masked: str, i: int, end: int) -> int:
    """Index just past the ';' ending a field declaration."""
    depth = 0
    while i < end:
        c = masked[i]
        if c in "({[":
            depth += 1
        elif c in ")}]":
            depth -= 1
        elif c == ";" and depth == 0:
            return i + 1
        i += 1
    raise JavaParseError(f"unterminated declaration before offset {end}")


def _parse_members(text: str, masked: str, cls: JavaClass) -> None:
    i = cls.body_start + 1
    end = cls.body_end
    while True:
        i = _skip_ws(masked, i, end)
        if i >= end:
            break
        if masked[i] == ";":
            i += 1
            continue
        member_start = i
        annotations, i = _parse_annotations(text, masked, i, end)

        m = _MEMBER_STOP_RE.search(masked, i, end)
        if not m:
            raise JavaParseError(f"unterminated member in class {cls.name}")
        stop = m.start()
        header = masked[i:stop]

        if cls.first_member_start is None:
            cls.first_member_start = member_start

        # nested types and initializer blocks are opaque
        if _NESTED_TYPE_RE.search(" " + header) or masked[stop] == "{":
            brace = masked.find("{", stop, end)
            if brace == -1:
                raise JavaParseError(f"nested type without a body in class {cls.name}")
            i = find_matching(masked, brace) + 1
            if _NESTED_TYPE_RE.search(" " + header):
                cls.nested_spans.append((member_start, i))
            continue

        if masked[stop] == "(":
            close = find_matching(masked, stop)
            name_m = re.search(r"(\w+)\s*$", header)
            if not name_m:
                raise JavaParseError(f"unnamed method in class {cls.name}")
            prefix = header[:name_m.start()]
            mods, _ = _split_modifiers(_WORD_RE.findall(prefix))
            # drop method type parameters: <T extends View>
            prefix_rest = re.sub(r"^\s*(?:(?:%s)\s+)*" % "|".join(MODIFIERS), "", prefix)
            prefix_rest = re.sub(r"^\s*<[^(]*?>\s*(?=\w)", "", prefix_rest)
            return_type = _squash(prefix_rest) or None
            method = JavaMethod(
                name=name_m.group(1),
                params=_parse_parameters(masked, stop + 1, close),
                return_type=return_type,
                modifiers=mods,
                annotations=annotations,
                start=member_start,
                end=close + 1,
            )
            body_m = re.compile(r"[;{]").search(masked, close + 1, end)
            if not body_m:
                raise JavaParseError(f"method {method.name} has no body or ';'")
            if masked[body_m.start()] == "{":
                method.body_start = body_m.start()
                method.body_end = find_matching(masked, body_m.start())
                method.end = method.body_end + 1
            else:
                method.end = body_m.start() + 1
            cls.methods.append(method)
            i = method.end
            continue

        # field declaration
        decl_end = _declaration_end(masked, i, end)
        pieces = _split_top_level(masked, i, decl_end - 1)
        first = masked[pieces[0][0]:pieces[0][1]].split("=", 1)[0]
        mods, rest = _split_modifiers(_WORD_RE.findall(first))
        name_m = re.search(r"(\w+)\s*((?:\[\s*\]\s*)*)$", first.strip())
        if not rest or not name_m:
            i = decl_end
            continue
        type_text = first.strip()[:name_m.start()]
        type_text = re.sub(r"^(?:(?:%s)\s+)*" % "|".join(MODIFIERS), "", type_text.strip())
        names = [name_m.group(1)]
        for s, e in pieces[1:]:
            extra = re.match(r"\s*(\w+)", masked[s:e].split("=", 1)[0])
            if extra:
                names.append(extra.group(1))
        cls.fields.append(JavaField(
            type_name=_squash(type_text),
            names=names,
            modifiers=mods,
            annotations=annotations,
            start=member_start,
            end=decl_end,
        ))
        i = decl_end


def parse_java_source(text: str) -> JavaSource:
    """
    Structural view of one compilation unit: package, imports and the
    top-level types with their fields and methods. Nested types are skipped.
    """
    masked = mask_source(text)

    imports = [
        ImportDecl(name=m.group(2), is_static=bool(m.group(1)), start=m.start(), end=m.end())
        for m in _IMPORT_RE.finditer(masked)
    ]
    pkg = _PACKAGE_RE.search(masked)
    if imports:
        imports_end = imports[-1].end
    elif pkg:
        imports_end = pkg.end()
    else:
        imports_end = 0

    classes: List[JavaClass] = []
    pos = imports_end
    while True:
        m = _TYPE_DECL_RE.search(masked, pos)
        if not m:
            break
        brace = masked.find("{", m.end())
        if brace == -1:
            raise JavaParseError(f"type {m.group(2)} has no body")
        header = masked[m.end():brace]
        sup = _EXTENDS_RE.search(header)
        body_end = find_matching(masked, brace)
        cls = JavaClass(
            name=m.group(2),
            kind=m.group(1),
            superclass=sup.group(1).rsplit(".", 1)[-1] if sup else None,
            start=m.start(),
            body_start=brace,
            body_end=body_end,
            member_indent="",
        )
        if cls.kind == "class":
            _parse_members(text, masked, cls)
        class_indent = _member_indent(text, m.start(), "")
        if cls.first_member_start is not None:
            cls.member_indent = _member_indent(text, cls.first_member_start, class_indent + "    ")
        else:
            cls.member_indent = class_indent + "    "
        classes.append(cls)
        pos = body_end + 1

    return JavaSource(
        text=text,
        masked=masked,
        imports=imports,
        classes=classes,
        package=pkg.group(1) if pkg else None,
        imports_end=imports_end,
    )


# ============================
# 4. Statements and references
# ============================

def _statement_end(masked: str, i: int, end: int) -> int:
    """Index just past the statement starting at ``i``."""
    if masked[i] == "{":
        return find_matching(masked, i) + 1
    if masked[i] == ";":
        return i + 1

    word_m = _WORD_RE.match(masked, i)
    word = word_m.group(0) if word_m else ""

    if word in ("if", "for", "while", "switch", "synchronized"):
        j = _skip_ws(masked, word_m.end(), end)
        if j < end and masked[j] == "(":
            j = find_matching(masked, j) + 1
        j = _statement_end(masked, _skip_ws(masked, j, end), end)
        if word == "if":
            k = _skip_ws(masked, j, end)
            if re.match(r"else\b", masked[k:k + 5]):
                j = _statement_end(masked, _skip_ws(masked, k + 4, end), end)
        return j

    if word == "do":
        j = _statement_end(masked, _skip_ws(masked, word_m.end(), end), end)
        return _declaration_end(masked, j, end)

    if word == "try":
        j = _skip_ws(masked, word_m.end(), end)
        if masked[j] == "(":
            j = _skip_ws(masked, find_matching(masked, j) + 1, end)
        j = find_matching(masked, j) + 1
        while True:
            k = _skip_ws(masked, j, end)
            clause = _WORD_RE.match(masked, k)
            if clause and clause.group(0) == "catch":
                p = _skip_ws(masked, clause.end(), end)
                b = _skip_ws(masked, find_matching(masked, p) + 1, end)
                j = find_matching(masked, b) + 1
            elif clause and clause.group(0) == "finally":
                b = _skip_ws(masked, clause.end(), end)
                j = find_matching(masked, b) + 1
            else:
                return j

    return _declaration_end(masked, i, end)


def split_statements(source: JavaSource, method: JavaMethod) -> List[Statement]:
    """Top-level statements of a method body, in order."""
    if not method.has_body:
        return []
    masked = source.masked
    end = method.body_end
    statements = []
    i = method.body_start + 1
    while True:
        i = _skip_ws(masked, i, end)
        if i >= end:
            break
        stmt_end = _statement_end(masked, i, end)
        statements.append(Statement(source.text[i:stmt_end], i, stmt_end))
        i = stmt_end
    return statements


# words after which an identifier is an expression, not a declaration
_EXPRESSION_KEYWORDS = frozenset({
    "return", "throw", "case", "else", "yield", "assert", "new", "do", "instanceof",
})


def _prev_code_index(masked: str, pos: int) -> int:
    """Index of the last non-space character before ``pos``, or -1."""
    k = pos - 1
    while k >= 0 and masked[k].isspace():
        k -= 1
    return k


def _is_declared_here(masked: str, k: int) -> bool:
    """True when the token ending at ``k`` is a type, making the next name a declaration."""
    c = masked[k]
    if c == "]":
        return True
    if c == ">":
        # List<View> name, but not "->" or "a > name"
        return k > 0 and masked[k - 1] != "-" and (masked[k - 1].isalnum() or masked[k - 1] in "_$>?]")
    if c.isalnum() or c in "_$":
        word_start = k
        while word_start > 0 and (masked[word_start - 1].isalnum() or masked[word_start - 1] in "_$"):
            word_start -= 1
        return masked[word_start:k + 1] not in _EXPRESSION_KEYWORDS
    return False


def find_identifier_references(source: JavaSource, start: int, end: int, name: str) -> List[Tuple[int, int]]:
    """
    Spans of code references to the variable ``name`` inside [start, end).

    Member selections on other objects (``x.name``), calls (``name(``),
    annotations and declarations are skipped. ``this.name`` is returned
    with its ``this.`` prefix.
    """
    masked = source.masked
    spans = []
    for m in re.compile(r"(?<![\w$])%s(?![\w$])" % re.escape(name)).finditer(masked, start, end):
        s, e = m.start(), m.end()

        after = _skip_ws(masked, e, len(masked))
        if after < len(masked) and masked[after] == "(":
            continue

        k = _prev_code_index(masked, s)
        if k < 0:
            spans.append((s, e))
            continue
        if masked[k] == "@":
            continue
        if masked[k] == ".":
            this_m = re.search(r"(?<![\w$.])this\s*\.$", masked[max(0, k - 32):k + 1])
            if this_m:
                spans.append((max(0, k - 32) + this_m.start(), e))
            continue
        if _is_declared_here(masked, k):
            continue
        spans.append((s, e))
    return spans


def _enclosing_opener(masked: str, limit: int, pos: int) -> int:
    """Index of the innermost unclosed bracket in [limit, pos), or -1."""
    depth = 0
    for i in range(pos - 1, limit - 1, -1):
        c = masked[i]
        if c in ")]}":
            depth += 1
        elif c in "([{":
            if depth == 0:
                return i
            depth -= 1
    return -1


def _expression_end(masked: str, i: int, end: int) -> int:
    """End of the expression starting at ``i``: the first top-level ``,`` ``;`` or unmatched closer."""
    depth = 0
    while i < end:
        c = masked[i]
        if c in "([{":
            depth += 1
        elif c in ")]}":
            if depth == 0:
                return i
            depth -= 1
        elif c in ",;" and depth == 0:
            return i
        i += 1
    return end


def _body_end(masked: str, i: int, end: int) -> int:
    """End of the block or single statement/expression starting at ``i``."""
    i = _skip_ws(masked, i, end)
    if i < end and masked[i] == "{":
        return find_matching(masked, i) + 1
    stop = _expression_end(masked, i, end)
    return stop + 1 if stop < end and masked[stop] == ";" else stop


def shadowing_scopes(source: JavaSource, start: int, end: int, name: str) -> List[Tuple[int, int]]:
    """
    Spans inside the block [start, end) where a local variable or lambda
    parameter called ``name`` hides a field of the same name.

    A local is in scope from its declaration to the end of the enclosing
    block; a variable declared in a ``for``/``catch``/``try`` header or a
    lambda parameter list covers the statement or lambda body that follows.
    """
    masked = source.masked
    scopes = []
    for m in re.compile(r"(?<![\w$])%s(?![\w$])" % re.escape(name)).finditer(masked, start, end):
        s, e = m.start(), m.end()
        after = _skip_ws(masked, e, end)
        nxt = masked[after] if after < end else ""

        # x -> ...
        if masked.startswith("->", after):
            scopes.append((s, _body_end(masked, after + 2, end)))
            continue

        opener = _enclosing_opener(masked, start, s)
        if opener >= 0 and masked[opener] == "(" and nxt in (",", ")"):
            close = find_matching(masked, opener)
            arrow = _skip_ws(masked, close + 1, end)
            # (a, x) -> ... and (View x) -> ...
            if masked.startswith("->", arrow):
                scopes.append((s, _body_end(masked, arrow + 2, end)))
                continue

        k = _prev_code_index(masked, s)
        if k < start or not nxt or nxt not in "=;,:)" or not _is_declared_here(masked, k):
            continue
        if opener < 0:
            scopes.append((s, end))
        elif masked[opener] == "(":
            close = find_matching(masked, opener)
            scopes.append((s, _body_end(masked, close + 1, end)))
        else:
            scopes.append((s, find_matching(masked, opener) + 1))
    return scopes


# ============================
# 5. Structural edits
# ============================

def _line_is_blank(text: str, line_start: int) -> bool:
    line_end = text.find("\n", line_start)
    line_end = len(text) if line_end == -1 else line_end
    return not text[line_start:line_end].strip()


def removal_span(text: str, start: int, end: int) -> Tuple[int, int]:
    """
    Widen [start, end) so deleting it leaves no stray whitespace: a span
    that is alone on its line(s) takes the whole lines, and a blank line
    left between two blank lines goes too.
    """
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    line_end = len(text) if line_end == -1 else line_end

    if text[line_start:start].strip() or text[end:line_end].strip():
        while end < line_end and text[end] in " \t":
            end += 1
        return start, end

    start = line_start
    end = min(line_end + 1, len(text))
    prev_blank = start > 0 and _line_is_blank(text, text.rfind("\n", 0, start - 1) + 1)
    if prev_blank and end < len(text) and _line_is_blank(text, end):
        next_end = text.find("\n", end)
        if next_end != -1:
            end = next_end + 1
    return start, end


@dataclass
class _Edit:
    start: int
    end: int
    text: str
    order: int

    @property
    def is_insert(self) -> bool:
        return self.start == self.end


class SourceEditor:
    """
    Collects insert/delete/replace edits against the original text and
    applies them in one pass. An edit inside a wider deletion or
    replacement is dropped; partially overlapping edits are a conflict.
    """

    def __init__(self, text: str):
        self.text = text
        self._edits: List[_Edit] = []

    def _add(self, start: int, end: int, text: str) -> None:
        if start > end or end > len(self.text):
            raise EditConflictError(f"edit [{start}, {end}) outside the source")
        self._edits.append(_Edit(start, end, text, len(self._edits)))

    def insert(self, pos: int, text: str) -> None:
        if text:
            self._add(pos, pos, text)

    def delete(self, start: int, end: int) -> None:
        if end > start:
            self._add(start, end, "")

    def replace(self, start: int, end: int, text: str) -> None:
        self._add(start, end, text)

    def remove(self, start: int, end: int) -> None:
        """Delete [start, end) together with the whitespace it leaves behind."""
        self.delete(*removal_span(self.text, start, end))

    @property
    def has_edits(self) -> bool:
        return bool(self._edits)

    def covers(self, pos: int) -> bool:
        """True when a recorded deletion or replacement includes ``pos``."""
        return any(e.start <= pos < e.end for e in self._edits if not e.is_insert)

    def _resolve_ranges(self) -> List[_Edit]:
        kept: List[_Edit] = []
        ranges = sorted(
            (e for e in self._edits if not e.is_insert),
            key=lambda e: (e.start, -e.end, e.order),
        )
        for edit in ranges:
            outer = kept[-1] if kept else None
            if outer is None or edit.start >= outer.end:
                kept.append(edit)
            elif edit.end <= outer.end:
                if (edit.start, edit.end) == (outer.start, outer.end) and edit.text and outer.text and edit.text != outer.text:
                    raise EditConflictError(
                        f"two different replacements for [{edit.start}, {edit.end})"
                    )
                continue
            else:
                raise EditConflictError(
                    f"edit [{edit.start}, {edit.end}) overlaps [{outer.start}, {outer.end})"
                )
        return kept

    def apply(self) -> str:
        ranges = self._resolve_ranges()
        inserts = [
            e for e in self._edits
            if e.is_insert and not any(r.start < e.start < r.end for r in ranges)
        ]
        ops = sorted(ranges + inserts, key=lambda e: (e.start, not e.is_insert, e.order))

        out = []
        cursor = 0
        for op in ops:
            out.append(self.text[cursor:op.start])
            out.append(op.text)
            cursor = max(cursor, op.end)
        out.append(self.text[cursor:])
        return "".join(out)
