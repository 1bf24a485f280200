"""Exception types raised by pi-sdif."""

from __future__ import annotations


class SdifError(Exception):
    """Base class for pi-sdif errors."""


class AlignmentError(SdifError, ValueError):
    """A context hunk body does not follow diff(1) marker grouping."""


class DiffSyncError(SdifError):
    """The diff stream and the original files disagree on unchanged lines."""


class ColorSpecError(SdifError, ValueError):
    """A color specification string could not be parsed."""
