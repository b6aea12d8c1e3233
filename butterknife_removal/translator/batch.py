# butterknife_removal/translator/batch.py
from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..config import Settings
from ..constants import JAVA_EXTENSION
from ..errors import ButterknifeRemovalError
from ..logging_config import get_logger
from ..parser.resource_resolver import LayoutIndex, find_project_root
from .generator import RewriteEngine

logger = get_logger(__name__)

SKIPPED = "skipped"
UNCHANGED = "unchanged"
CONVERTED = "converted"
FAILED = "failed"


@dataclass
class FileOutcome:
    path: Path
    status: str
    message: str = ""
    report: List[str] = field(default_factory=list)


class ChangeSet:
    """
    Pending file writes of one conversion.

    Nothing touches the disk until ``commit``; each file is written to a
    temporary sibling first and moved over the original.
    """

    def __init__(self):
        self.pending: Dict[Path, bytes] = {}

    def add(self, path, data: bytes) -> None:
        self.pending[Path(path)] = data

    def __len__(self) -> int:
        return len(self.pending)

    def commit(self) -> List[Path]:
        written = []
        for path, data in self.pending.items():
            fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp, path)
            except OSError:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
            written.append(path)
        self.pending.clear()
        return written


def _read_java(path: Path) -> str:
    # newline="" keeps \r\n line endings as they are
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def process_file(path, engine: RewriteEngine) -> FileOutcome:
    """Convert one Java file and write it back with the layouts it touched."""
    path = Path(path)
    try:
        text = _read_java(path)
        result = engine.process_source(text, path)
    except (ButterknifeRemovalError, OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to convert %s: %s", path, exc)
        return FileOutcome(path, FAILED, str(exc))
    except Exception as exc:
        logger.exception("Unexpected error while converting %s", path)
        return FileOutcome(path, FAILED, str(exc))

    converted = any(c.converted for c in result.classes)
    if not converted:
        status = SKIPPED if not result.report else UNCHANGED
        return FileOutcome(path, status, report=result.report)
    if not result.changed and not result.layouts:
        return FileOutcome(path, UNCHANGED, report=result.report)

    changes = ChangeSet()
    changes.add(path, result.text.encode("utf-8"))
    for layout in result.layouts:
        changes.add(layout.path, layout.serialize())

    if engine.settings.dry_run:
        logger.info("Dry run: %d file(s) not written for %s", len(changes), path)
        return FileOutcome(path, CONVERTED, "dry run", result.report)

    try:
        written = changes.commit()
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
        return FileOutcome(path, FAILED, str(exc), result.report)

    for p in written:
        logger.debug("Wrote %s", p)
    return FileOutcome(path, CONVERTED, report=result.report)


def discover_java_files(root: Path, settings: Settings) -> List[Path]:
    """Every ``.java`` file below ``root`` in sorted order, ignore globs applied."""
    found = []
    for p in sorted(root.rglob("*" + JAVA_EXTENSION)):
        if not p.is_file():
            continue
        if settings.should_ignore(p.relative_to(root)):
            logger.debug("Ignored %s", p)
            continue
        found.append(p)
    return found


def process_path(
    path,
    settings: Settings,
    file_only: bool = False,
    project_root: Optional[Path] = None,
) -> List[FileOutcome]:
    """
    Convert a single file, or every Java file below a directory.

    Each file is independent: a failure is logged and the batch goes on.
    """
    path = Path(path)
    root = Path(project_root) if project_root else find_project_root(path)
    engine = RewriteEngine(settings, LayoutIndex.build(root))
    logger.info("Project root: %s", root)

    if file_only or path.is_file():
        return [process_file(path, engine)]

    outcomes = []
    for java_file in discover_java_files(path, settings):
        outcomes.append(process_file(java_file, engine))
    return outcomes
