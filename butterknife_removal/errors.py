"""
Exceptions raised by the converter.

Conditions the converter degrades around (missing anchors, layouts that cannot
be found, ids that cannot be placed) are reported, not raised. These classes
cover the failures that abort one file.
"""


class ButterknifeRemovalError(Exception):
    """Base class for converter failures."""


class JavaParseError(ButterknifeRemovalError):
    """The Java source could not be split into classes and members."""


class LayoutParseError(ButterknifeRemovalError):
    """A layout XML file is malformed."""

    def __init__(self, path, reason):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class EditConflictError(ButterknifeRemovalError):
    """Two structural edits touch the same source range."""
