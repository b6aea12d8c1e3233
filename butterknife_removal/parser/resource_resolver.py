# butterknife_removal/parser/resource_resolver.py
import os
from pathlib import Path
from typing import Dict, List, Optional

from ..constants import PROJECT_MARKERS, ROLE_LAYOUT_PREFIXES, SKIPPED_DIRS
from ..logging_config import get_logger
from ..utils import camel_to_snake_case

logger = get_logger(__name__)


class LayoutIndex:
    """Layout name -> layout file, for every ``res/layout*/`` below a project root."""

    def __init__(self, layouts: Optional[Dict[str, Path]] = None):
        self.layouts: Dict[str, Path] = dict(layouts or {})

    @classmethod
    def build(cls, project_root) -> "LayoutIndex":
        index = cls()
        root = Path(project_root)
        if not root.is_dir():
            return index

        # plain layout/ wins over layout-land/, layout-v21/ ...
        qualified: Dict[str, Path] = {}
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRS)
            here = Path(dirpath)
            if here.parent.name != "res" or not here.name.startswith("layout"):
                continue
            target = index.layouts if here.name == "layout" else qualified
            for fn in sorted(filenames):
                if not fn.endswith(".xml"):
                    continue
                target.setdefault(fn[:-4], here / fn)

        for name, path in qualified.items():
            index.layouts.setdefault(name, path)
        logger.debug("Indexed %d layouts under %s", len(index.layouts), root)
        return index

    def find(self, name: Optional[str]) -> Optional[Path]:
        if not name:
            return None
        return self.layouts.get(name)

    def names(self) -> List[str]:
        return sorted(self.layouts)

    def best_match(self, class_name: Optional[str], guess: Optional[str] = None) -> Optional[str]:
        """
        Layout that most likely belongs to ``class_name``.

        The exact guess wins; otherwise layouts are scored by the snake_case
        tokens they share with the class name, with a bonus when the layout
        carries the class's role prefix (activity_, fragment_, dialog_).
        """
        if guess and guess in self.layouts:
            return guess
        if not class_name:
            return None

        role_prefix = ""
        base = class_name
        for suffix, prefix in ROLE_LAYOUT_PREFIXES:
            if class_name.endswith(suffix) and class_name != suffix:
                role_prefix = prefix
                base = class_name[: -len(suffix)]
                break
        tokens = set(camel_to_snake_case(base).split("_"))

        best = None
        best_key = None
        for name in self.layouts:
            score = len(tokens & set(name.split("_")))
            if score == 0:
                continue
            if role_prefix and name.startswith(role_prefix):
                score += 1
            key = (-score, len(name), name)
            if best_key is None or key < best_key:
                best, best_key = name, key
        return best


def find_project_root(path) -> Path:
    """
    Root of the Gradle project holding ``path``: the nearest ancestor with a
    settings script, else the nearest with a build script, else the
    directory itself.
    """
    start = Path(path).resolve()
    if start.is_file():
        start = start.parent
    candidates = (start, *start.parents)
    for kind in ("settings", "build"):
        markers = [m for m in PROJECT_MARKERS if m.startswith(kind)]
        for candidate in candidates:
            if any((candidate / marker).is_file() for marker in markers):
                return candidate
    return start
