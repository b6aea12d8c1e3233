from butterknife_removal.parser.resource_resolver import LayoutIndex
from butterknife_removal.translator.annotation_extractor import FieldBinding
from butterknife_removal.translator.layout_resolver import LayoutResolver
from butterknife_removal.translator.xml_repairer import (
    FRAMEWORK_ID,
    ID_EXISTS,
    ID_MISSING,
    LAYOUT_NOT_FOUND,
    XmlRepairer,
)

from .conftest import write

XMLNS = 'xmlns:android="http://schemas.android.com/apk/res/android"'

SIGNUP_LAYOUT = f"""\
<?xml version="1.0" encoding="utf-8"?>
<LinearLayout {XMLNS}>
    <EditText android:id="@+id/email_input" />
    <Button android:text="Sign up" />
</LinearLayout>
"""


def binding(name, type_name, resource_id, ref=None):
    return FieldBinding(name, type_name, resource_id, ref or f"R.id.{resource_id}")


def repairer(android_project, layout_dir):
    write(layout_dir / "activity_signup.xml", SIGNUP_LAYOUT)
    return XmlRepairer(LayoutResolver(LayoutIndex.build(android_project)))


class TestValidateAndEnsureIds:
    def test_existing_id(self, android_project, layout_dir):
        results = repairer(android_project, layout_dir).validate_and_ensure_ids(
            [binding("emailInput", "EditText", "email_input")], "activity_signup",
        )
        assert results == {"email_input": ID_EXISTS}

    def test_id_created_on_untagged_element(self, android_project, layout_dir):
        rep = repairer(android_project, layout_dir)
        results = rep.validate_and_ensure_ids(
            [binding("signupButton", "Button", "signup_button")], "activity_signup",
        )
        assert results == {"signup_button": "ID created on Button in activity_signup"}
        layout = rep.resolver.load("activity_signup")
        assert layout.root.children[1].resource_id == "signup_button"
        assert layout.dirty

    def test_missing_element_gets_marker_comment(self, android_project, layout_dir):
        rep = repairer(android_project, layout_dir)
        results = rep.validate_and_ensure_ids(
            [binding("avatar", "ImageView", "avatar_image")], "activity_signup",
        )
        assert results == {"avatar_image": ID_MISSING}
        data = rep.resolver.load("activity_signup").serialize()
        assert b'<!-- TODO: Add android:id="@+id/avatar_image" to a ImageView view' in data

    def test_marker_comment_written_once(self, android_project, layout_dir):
        rep = repairer(android_project, layout_dir)
        fields = [binding("avatar", "ImageView", "avatar_image")]
        rep.validate_and_ensure_ids(fields, "activity_signup")
        rep.validate_and_ensure_ids(fields, "activity_signup")
        data = rep.resolver.load("activity_signup").serialize()
        assert data.count(b'android:id="@+id/avatar_image"') == 1

    def test_layout_not_found(self, android_project, layout_dir):
        results = repairer(android_project, layout_dir).validate_and_ensure_ids(
            [binding("a", "Button", "a"), binding("b", "TextView", "b")], "activity_missing",
        )
        assert results == {"a": LAYOUT_NOT_FOUND, "b": LAYOUT_NOT_FOUND}

    def test_framework_id_not_checked(self, android_project, layout_dir):
        results = repairer(android_project, layout_dir).validate_and_ensure_ids(
            [binding("list", "ListView", "list", "android.R.id.list")], "activity_signup",
        )
        assert results == {"list": FRAMEWORK_ID}

    def test_invalid_name_gets_suggestion(self, android_project, layout_dir):
        results = repairer(android_project, layout_dir).validate_and_ensure_ids(
            [binding("loginButton", "Button", "LoginButton")], "activity_signup",
        )
        message = results["LoginButton"]
        assert message.startswith("ID created on Button")
        assert message.endswith("(suggested name: btn_login_button)")

    def test_ids_in_included_layouts_exist(self, android_project):
        rep = XmlRepairer(LayoutResolver(LayoutIndex.build(android_project)))
        results = rep.validate_and_ensure_ids(
            [binding("titleText", "TextView", "title_text")], "fragment_profile",
        )
        assert results == {"title_text": ID_EXISTS}

    def test_second_field_does_not_reuse_new_element(self, android_project, layout_dir):
        rep = repairer(android_project, layout_dir)
        results = rep.validate_and_ensure_ids(
            [binding("first", "Button", "first_button"), binding("second", "Button", "second_button")],
            "activity_signup",
        )
        assert results["first_button"].startswith("ID created")
        assert results["second_button"] == ID_MISSING
