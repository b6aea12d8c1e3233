"""
Fixed names and tables shared across the converter.
"""

# ===========================================
# ANDROID XML
# ===========================================
ANDROID_NS = "{http://schemas.android.com/apk/res/android}"
ID_ATTR = "id"
CLICKABLE_ATTR = "clickable"
FOCUSABLE_ATTR = "focusable"
NEW_ID_PREFIX = "@+id/"
ID_PREFIX = "@id/"
LAYOUT_REF_PREFIX = "@layout/"
INCLUDE_TAG = "include"

# ===========================================
# NAMING
# ===========================================
ID_SEPARATOR = "_"
BINDING_SUFFIX = "Binding"
ROOT_ID_SUFFIX = "Root"
DEFAULT_BINDING_CLASS = "ActivityMainBinding"
DEFAULT_FIELD_NAME = "view"
DEFAULT_LAYOUT_NAME = "layout"
DEFAULT_TYPE_PREFIX = "view"

# class-name suffix -> layout prefix
ROLE_LAYOUT_PREFIXES = (
    ("Activity", "activity_"),
    ("Fragment", "fragment_"),
    ("Dialog", "dialog_"),
)

# lowercase type substring -> id prefix (first match wins)
TYPE_PREFIXES = (
    ("radiobutton", "rb"),
    ("checkbox", "cb"),
    ("edittext", "et"),
    ("textview", "tv"),
    ("imageview", "iv"),
    ("recyclerview", "rv"),
    ("listview", "lv"),
    ("scrollview", "sv"),
    ("switch", "sw"),
    ("spinner", "sp"),
    ("progressbar", "pb"),
    ("seekbar", "sb"),
    ("webview", "wv"),
    ("cardview", "cv"),
    ("toolbar", "tb"),
    ("button", "btn"),
    ("layout", "layout"),
)

# tag-name substring -> role fragment for synthesized child ids
ELEMENT_ROLES = (
    ("Button", "Button"),
    ("TextView", "Text"),
    ("ImageView", "Image"),
    ("LinearLayout", "Linear"),
    ("RelativeLayout", "Relative"),
    ("Layout", "Layout"),
)
DEFAULT_ELEMENT_ROLE = "View"

# ===========================================
# JAVA / BUTTERKNIFE
# ===========================================
BUTTERKNIFE_PACKAGE = "butterknife"
BIND_VIEW = "BindView"
BUTTERKNIFE_CLASS = "ButterKnife"
UNBINDER_TYPE = "Unbinder"
R_LAYOUT_MARKER = "R.layout."
SET_CONTENT_VIEW = "setContentView"

# butterknife annotations this tool does not convert
UNSUPPORTED_ANNOTATIONS = frozenset({
    "BindViews",
    "BindAnim",
    "BindArray",
    "BindBitmap",
    "BindBool",
    "BindColor",
    "BindDimen",
    "BindDrawable",
    "BindFloat",
    "BindFont",
    "BindInt",
    "BindString",
    "OnPageChange",
    "Optional",
})

# lifecycle method name -> parameter count
ACTIVITY_INIT = ("onCreate", 1)
FRAGMENT_INIT = ("onCreateView", 3)
ACTIVITY_TEARDOWN = "onDestroy"
FRAGMENT_TEARDOWN = "onDestroyView"

# ===========================================
# PROJECT SCAN
# ===========================================
JAVA_EXTENSION = ".java"
PROJECT_MARKERS = (
    "settings.gradle",
    "settings.gradle.kts",
    "build.gradle",
    "build.gradle.kts",
)
SKIPPED_DIRS = frozenset({"build", ".git", ".gradle", ".idea", "node_modules"})

# ===========================================
# LOGGING
# ===========================================
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_MAX_SIZE_MB = 5
LOG_BACKUP_COUNT = 3
