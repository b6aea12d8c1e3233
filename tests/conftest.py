"""
Shared fixtures: a tiny Gradle/Android project laid out in tmp_path.
"""
from pathlib import Path
from textwrap import dedent

import pytest

from butterknife_removal.config import Settings
from butterknife_removal.parser.resource_resolver import LayoutIndex
from butterknife_removal.translator.generator import RewriteEngine


# ============================================================================
# Layout resources
# ============================================================================

CHECKOUT_LAYOUT = """\
<?xml version="1.0" encoding="utf-8"?>
<LinearLayout xmlns:android="http://schemas.android.com/apk/res/android"
    android:layout_width="match_parent"
    android:layout_height="match_parent"
    android:orientation="vertical">

    <EditText
        android:id="@+id/username_input"
        android:layout_width="match_parent"
        android:layout_height="wrap_content" />

    <EditText
        android:id="@+id/password_input"
        android:layout_width="match_parent"
        android:layout_height="wrap_content" />

    <Button
        android:id="@+id/checkout_button"
        android:layout_width="wrap_content"
        android:layout_height="wrap_content" />
</LinearLayout>
"""

PROFILE_LAYOUT = """\
<?xml version="1.0" encoding="utf-8"?>
<LinearLayout xmlns:android="http://schemas.android.com/apk/res/android"
    android:layout_width="match_parent"
    android:layout_height="match_parent">

    <TextView
        android:id="@+id/name_text"
        android:layout_width="wrap_content"
        android:layout_height="wrap_content" />

    <include
        android:id="@+id/header"
        layout="@layout/item_header" />
</LinearLayout>
"""

HEADER_LAYOUT = """\
<?xml version="1.0" encoding="utf-8"?>
<LinearLayout xmlns:android="http://schemas.android.com/apk/res/android"
    android:layout_width="match_parent"
    android:layout_height="wrap_content">

    <TextView
        android:id="@+id/title_text"
        android:layout_width="wrap_content"
        android:layout_height="wrap_content" />

    <TextView
        android:layout_width="wrap_content"
        android:layout_height="wrap_content" />
</LinearLayout>
"""

LAYOUTS = {
    "activity_checkout_new": CHECKOUT_LAYOUT,
    "fragment_profile": PROFILE_LAYOUT,
    "item_header": HEADER_LAYOUT,
}


# ============================================================================
# Java sources
# ============================================================================

CHECKOUT_ACTIVITY = """\
package com.example.shop;

import android.os.Bundle;
import android.widget.Button;
import android.widget.EditText;

import androidx.appcompat.app.AppCompatActivity;

import butterknife.BindView;
import butterknife.ButterKnife;
import butterknife.OnClick;

public class CheckoutActivity extends AppCompatActivity {

    @BindView(R.id.username_input)
    EditText usernameInput;
    @BindView(R.id.password_input)
    EditText passwordInput;
    @BindView(R.id.checkout_button)
    Button checkoutButton;

    @Override
    protected void onCreate(Bundle savedInstanceState) {
        super.onCreate(savedInstanceState);
        setContentView(R.layout.activity_checkout_new);
        ButterKnife.bind(this);
    }

    @OnClick(R.id.checkout_button)
    void onCheckoutClicked() {
        String user = usernameInput.getText().toString();
        String pass = passwordInput.getText().toString();
        submit(user, pass);
    }

    private void submit(String user, String pass) {
    }
}
"""

PROFILE_FRAGMENT = """\
package com.example.shop;

import android.os.Bundle;
import android.view.LayoutInflater;
import android.view.View;
import android.view.ViewGroup;
import android.widget.TextView;

import androidx.fragment.app.Fragment;

import butterknife.BindView;
import butterknife.ButterKnife;
import butterknife.Unbinder;

public class ProfileFragment extends Fragment {

    @BindView(R.id.name_text)
    TextView nameText;
    @BindView(R.id.title_text)
    TextView titleText;
    private Unbinder unbinder;

    @Override
    public View onCreateView(LayoutInflater inflater, ViewGroup container, Bundle savedInstanceState) {
        View view = inflater.inflate(R.layout.fragment_profile, container, false);
        unbinder = ButterKnife.bind(this, view);
        nameText.setText("Hello");
        titleText.setText("Profile");
        return view;
    }

    @Override
    public void onDestroyView() {
        super.onDestroyView();
        unbinder.unbind();
    }
}
"""

PLAIN_ACTIVITY = """\
package com.example.shop;

import android.os.Bundle;

import androidx.appcompat.app.AppCompatActivity;

public class PlainActivity extends AppCompatActivity {

    @Override
    protected void onCreate(Bundle savedInstanceState) {
        super.onCreate(savedInstanceState);
        setContentView(R.layout.activity_checkout_new);
    }
}
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def android_project(tmp_path: Path) -> Path:
    """Gradle project with three layouts and an empty Java source root."""
    write(tmp_path / "settings.gradle", "include ':app'\n")
    write(tmp_path / "app" / "build.gradle", "android { buildFeatures { viewBinding true } }\n")
    layout_dir = tmp_path / "app" / "src" / "main" / "res" / "layout"
    for name, xml in LAYOUTS.items():
        write(layout_dir / f"{name}.xml", xml)
    (tmp_path / "app" / "src" / "main" / "java" / "com" / "example" / "shop").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def java_dir(android_project: Path) -> Path:
    return android_project / "app" / "src" / "main" / "java" / "com" / "example" / "shop"


@pytest.fixture
def layout_dir(android_project: Path) -> Path:
    return android_project / "app" / "src" / "main" / "res" / "layout"


@pytest.fixture
def layout_index(android_project: Path) -> LayoutIndex:
    return LayoutIndex.build(android_project)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def engine(settings: Settings, layout_index: LayoutIndex) -> RewriteEngine:
    return RewriteEngine(settings, layout_index)


@pytest.fixture
def java_source():
    """Dedent helper for inline Java snippets."""
    return lambda text: dedent(text).lstrip("\n")
