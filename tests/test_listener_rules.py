import pytest

from butterknife_removal.parser.java_parser import parse_java_source
from butterknife_removal.translator.listener_rules import (
    LISTENER_SPECS,
    ListenerKind,
    build_call_expression,
    render_listener,
    render_template,
    required_imports,
)


def method(signature: str):
    source = parse_java_source("class Handlers {\n    " + signature + " {}\n}\n")
    return source.classes[0].methods[0]


class TestCallExpressions:
    @pytest.mark.parametrize("kind, signature, expected", [
        (ListenerKind.CLICK, "void go()", "go()"),
        (ListenerKind.CLICK, "void go(View view)", "go(v)"),
        (ListenerKind.CLICK, "void go(Button button)", "go((Button) v)"),
        (ListenerKind.CHECKED_CHANGED, "void toggle(boolean checked)", "toggle(isChecked)"),
        (ListenerKind.CHECKED_CHANGED, "void toggle(CompoundButton b, boolean on)", "toggle(buttonView, isChecked)"),
        (ListenerKind.ITEM_CLICK, "void pick(int position)", "pick(position)"),
        (ListenerKind.ITEM_CLICK, "void pick(AdapterView<?> parent, int position, long id)", "pick(parent, position, id)"),
        (ListenerKind.EDITOR_ACTION, "boolean done(int actionId)", "done(actionId)"),
        (ListenerKind.FOCUS_CHANGE, "void focus(boolean hasFocus)", "focus(hasFocus)"),
        (ListenerKind.TOUCH, "boolean touch(MotionEvent event)", "touch(event)"),
    ])
    def test_arguments_by_type(self, kind, signature, expected):
        call, _ = build_call_expression(kind, method(signature))
        assert call == expected

    def test_unmatched_parameter_gets_default(self):
        call, _ = build_call_expression(ListenerKind.CLICK, method("void go(int count, String label)"))
        assert call == "go(0, null)"

    def test_text_changed_callbacks(self):
        _, callback = build_call_expression(ListenerKind.TEXT_CHANGED, method("void q(CharSequence s)"))
        assert callback == "onTextChanged"
        call, callback = build_call_expression(ListenerKind.TEXT_CHANGED, method("void q(Editable e)"))
        assert (call, callback) == ("q(s)", "afterTextChanged")
        _, callback = build_call_expression(
            ListenerKind.TEXT_CHANGED, method("void q(CharSequence s)"), "BEFORE_TEXT_CHANGED",
        )
        assert callback == "beforeTextChanged"

    def test_item_selected_nothing(self):
        call, callback = build_call_expression(
            ListenerKind.ITEM_SELECTED, method("void none(AdapterView<?> parent)"), "NOTHING_SELECTED",
        )
        assert (call, callback) == ("none(parent)", "onNothingSelected")


class TestRendering:
    def test_click_lambda(self):
        text = render_listener(ListenerKind.CLICK, "binding.checkoutButton", "onCheckoutClicked()")
        assert text == "binding.checkoutButton.setOnClickListener(v -> onCheckoutClicked());"

    def test_two_parameter_lambda(self):
        text = render_listener(ListenerKind.CHECKED_CHANGED, "agree", "onAgree(isChecked)")
        assert text == "agree.setOnCheckedChangeListener((buttonView, isChecked) -> onAgree(isChecked));"

    def test_boolean_listener_wraps_void_handler(self):
        text = render_listener(ListenerKind.LONG_CLICK, "row", "onHold()", unit="\t")
        assert text == "row.setOnLongClickListener(v -> {\n\tonHold();\n\treturn true;\n});"

    def test_boolean_handler_returned_directly(self):
        text = render_listener(ListenerKind.LONG_CLICK, "row", "onHold()", returns_boolean=True)
        assert text == "row.setOnLongClickListener(v -> onHold());"

    def test_text_watcher(self):
        text = render_listener(
            ListenerKind.TEXT_CHANGED, "binding.query", "afterQuery(s)", callback="afterTextChanged",
        )
        lines = text.splitlines()
        assert lines[0] == "binding.query.addTextChangedListener(new TextWatcher() {"
        assert lines[-1] == "});"
        assert "    public void beforeTextChanged(CharSequence s, int start, int count, int after) {" in lines
        assert "    public void afterTextChanged(Editable s) {" in lines
        assert "        afterQuery(s);" in lines
        assert text.count("@Override") == 3
        assert text.count("afterQuery(s);") == 1

    def test_item_selected_listener(self):
        text = render_listener(ListenerKind.ITEM_SELECTED, "spinner", "pick(position)", callback="onItemSelected")
        assert "spinner.setOnItemSelectedListener(new AdapterView.OnItemSelectedListener() {" in text
        assert "public void onNothingSelected(AdapterView<?> parent) {" in text
        assert "        pick(position);" in text

    def test_teardown_template(self):
        text = render_template(
            "teardown.java.j2", visibility="protected", method_name="onDestroy", field="binding", unit="    ",
        )
        assert text == (
            "@Override\n"
            "protected void onDestroy() {\n"
            "    super.onDestroy();\n"
            "    binding = null;\n"
            "}"
        )

    def test_every_kind_has_a_spec(self):
        assert set(LISTENER_SPECS) == set(ListenerKind)
        assert required_imports(ListenerKind.TEXT_CHANGED) == ("android.text.Editable", "android.text.TextWatcher")
        assert required_imports(ListenerKind.CLICK) == ()
