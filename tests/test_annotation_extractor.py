from butterknife_removal.parser.java_parser import parse_java_source
from butterknife_removal.translator.annotation_extractor import (
    annotation_attributes,
    extract_bindings,
    parse_id_refs,
    split_arguments,
)
from butterknife_removal.translator.listener_rules import ListenerKind

HEADER = """\
package com.example;

import butterknife.BindView;
import butterknife.OnClick;
import butterknife.OnTextChanged;

"""


def bindings_of(body: str, header: str = HEADER):
    source = parse_java_source(header + "public class Screen extends Activity {\n" + body + "}\n")
    return extract_bindings(source.classes[0], source)


class TestArguments:
    def test_split_arguments_respects_brackets(self):
        assert split_arguments("a, f(b, c), {d, e}") == ["a", "f(b, c)", "{d, e}"]

    def test_annotation_attributes(self):
        attrs = annotation_attributes("value = R.id.name, callback = OnTextChanged.Callback.AFTER_TEXT_CHANGED")
        assert attrs == {"value": "R.id.name", "callback": "OnTextChanged.Callback.AFTER_TEXT_CHANGED"}
        assert annotation_attributes("R.id.name") == {"value": "R.id.name"}
        assert annotation_attributes(None) == {}

    def test_parse_id_refs(self):
        assert parse_id_refs("R.id.save") == [("save", "R.id.save")]
        assert parse_id_refs("{R.id.a, R.id.b}") == [("a", "R.id.a"), ("b", "R.id.b")]
        assert parse_id_refs("R2.id.save") == [("save", "R.id.save")]
        assert parse_id_refs("com.example.lib.R2.id.save") == [("save", "com.example.lib.R.id.save")]
        assert parse_id_refs("android.R.id.list") == [("list", "android.R.id.list")]
        assert parse_id_refs("SOME_CONSTANT") == []


class TestFieldBindings:
    def test_field_map(self):
        bs = bindings_of("""
    @BindView(R.id.title_text) TextView titleText;
    @BindView(R.id.save_button)
    Button saveButton;
    private int count;
""")
        assert set(bs.fields) == {"title_text", "save_button"}
        assert bs.fields["save_button"].name == "saveButton"
        assert bs.fields["save_button"].type_name == "Button"
        assert [fb.name for fb in bs.all_fields] == ["titleText", "saveButton"]
        assert len(bs.annotations) == 2

    def test_duplicate_id_keeps_last(self):
        bs = bindings_of("""
    @BindView(R.id.title) TextView first;
    @BindView(R.id.title) TextView second;
""")
        assert bs.fields["title"].name == "second"
        assert bs.duplicate_ids == ["title"]
        assert len(bs.all_fields) == 2

    def test_framework_id(self):
        bs = bindings_of("    @BindView(android.R.id.list) ListView list;\n")
        assert bs.fields["list"].is_framework_id
        assert bs.fields["list"].id_ref == "android.R.id.list"

    def test_generic_field_type(self):
        bs = bindings_of("    @BindView(R.id.spinner) Spinner<String> spinner;\n")
        assert bs.fields["spinner"].type_name == "Spinner<String>"

    def test_annotation_without_import_is_ignored(self):
        bs = bindings_of("    @BindView(R.id.title) TextView title;\n", header="package com.example;\n\n")
        assert bs.is_empty

    def test_qualified_annotation(self):
        bs = bindings_of("    @butterknife.BindView(R.id.title) TextView title;\n", header="package com.example;\n\n")
        assert set(bs.fields) == {"title"}

    def test_wildcard_import(self):
        bs = bindings_of("    @BindView(R.id.title) TextView title;\n", header="import butterknife.*;\n\n")
        assert set(bs.fields) == {"title"}

    def test_unsupported_annotation(self):
        header = HEADER + "import butterknife.BindString;\n\n"
        bs = bindings_of("""
    @BindString(R.string.app_name) String appName;
    @BindView(R.id.title) TextView title;
""", header=header)
        assert bs.unsupported == ["BindString"]
        assert set(bs.fields) == {"title"}


class TestMethodBindings:
    def test_click_with_id_list(self):
        bs = bindings_of("""
    @OnClick({R.id.ok, R.id.cancel})
    void close() {
    }
""")
        clicks = bs.methods[ListenerKind.CLICK]
        assert set(clicks) == {"ok", "cancel"}
        assert clicks["ok"] is clicks["cancel"]
        assert clicks["ok"].call_expression == "close()"
        assert not clicks["ok"].has_parameters

    def test_method_counts(self):
        bs = bindings_of("""
    @OnClick(R.id.a)
    void a() {}

    @OnClick(R.id.b)
    void b(View v) {}

    @OnTextChanged(R.id.query)
    void onQuery(CharSequence text) {}
""")
        assert len(bs.methods[ListenerKind.CLICK]) == 2
        assert len(bs.methods[ListenerKind.TEXT_CHANGED]) == 1
        assert bs.methods[ListenerKind.CLICK]["b"].call_expression == "b(v)"
        assert bs.methods[ListenerKind.TEXT_CHANGED]["query"].call_expression == "onQuery(s)"
        assert bs.methods[ListenerKind.TEXT_CHANGED]["query"].callback == "onTextChanged"

    def test_text_changed_callback_attribute(self):
        bs = bindings_of("""
    @OnTextChanged(value = R.id.query, callback = OnTextChanged.Callback.AFTER_TEXT_CHANGED)
    void afterQuery(Editable text) {}
""")
        mb = bs.methods[ListenerKind.TEXT_CHANGED]["query"]
        assert mb.callback == "afterTextChanged"
        assert mb.call_expression == "afterQuery(s)"

    def test_listener_registrations_in_source_order(self):
        bs = bindings_of("""
    @OnClick({R.id.b, R.id.a})
    void first() {}

    @OnClick(R.id.c)
    void second() {}
""")
        pairs = [(mb.method_name, rid) for mb, rid in bs.listener_registrations()]
        assert pairs == [("first", "b"), ("first", "a"), ("second", "c")]

    def test_later_handler_wins(self):
        bs = bindings_of("""
    @OnClick(R.id.a)
    void first() {}

    @OnClick(R.id.a)
    void second() {}
""")
        pairs = [(mb.method_name, rid) for mb, rid in bs.listener_registrations()]
        assert pairs == [("second", "a")]

    def test_boolean_handler(self):
        header = HEADER + "import butterknife.OnLongClick;\n\n"
        bs = bindings_of("""
    @OnLongClick(R.id.a)
    boolean hold() { return true; }
""", header=header)
        assert bs.methods[ListenerKind.LONG_CLICK]["a"].returns_boolean

    def test_no_annotations(self):
        bs = bindings_of("    private TextView title;\n\n    void run() {}\n")
        assert bs.is_empty
        assert bs.unsupported == []
