"""
Settings - converter configuration.

Values come from (lowest to highest precedence) the defaults below,
``BUTTERKNIFE_*`` environment variables, and CLI flags applied with
``Settings.with_overrides``.
"""
from __future__ import annotations

from enum import Enum
from fnmatch import fnmatch
from pathlib import PurePath
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConversionMode(str, Enum):
    """What the annotated fields turn into."""

    VIEW_BINDING = "view_binding"
    FIND_VIEW_BY_ID = "find_view_by_id"


class Settings(BaseSettings):
    """Converter settings"""

    model_config = SettingsConfigDict(env_prefix="BUTTERKNIFE_", extra="ignore")

    # ========== Conversion ==========
    mode: ConversionMode = ConversionMode.VIEW_BINDING
    binding_field_name: str = "binding"

    # XML id validation/repair is an optional capability of the engine
    validate_xml: bool = True

    # ========== File selection ==========
    ignore_patterns: List[str] = [
        "**/test/**",
        "**/androidTest/**",
        "**/*Test.java",
    ]

    # ========== Output ==========
    dry_run: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("binding_field_name")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"not a Java identifier: {value!r}")
        return value

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        update = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=update)

    def should_ignore(self, file_path) -> bool:
        """True when the path matches one of the ignore globs."""
        posix = PurePath(file_path).as_posix()
        for pattern in self.ignore_patterns:
            if fnmatch(posix, pattern):
                return True
            # "**/x/**" should also match a relative path starting with "x/"
            if pattern.startswith("**/") and fnmatch(posix, pattern[3:]):
                return True
        return False


def get_settings(**overrides) -> Settings:
    """Settings from the environment with CLI overrides on top."""
    return Settings().with_overrides(**overrides)
