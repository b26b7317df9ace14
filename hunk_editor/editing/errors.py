"""
Hunk errors — every failure the hunk engine reports.

Each error names the file and line range it concerns so a caller can decide
whether to re-run the locator instead of retrying the same coordinates.
"""

from __future__ import annotations


class HunkError(Exception):
    """Base class for all hunk engine failures."""

    reason = "hunk_error"

    def __init__(
        self,
        message: str = "",
        file: str | None = None,
        start_line: int | None = None,
        end_line: int | None = None,
    ) -> None:
        self.file = file
        self.start_line = start_line
        self.end_line = end_line
        super().__init__(message or self._default_message())

    @property
    def location(self) -> str:
        if self.file is None:
            return "<unknown>"
        if self.start_line is None or self.end_line is None:
            return self.file
        return f"{self.file}:{self.start_line}-{self.end_line}"

    def _default_message(self) -> str:
        return f"{self.reason.replace('_', ' ')} ({self.location})"


class HunkFileNotFoundError(HunkError):
    """The hunk's file could not be read."""

    reason = "file_not_found"


class InvalidStartLineError(HunkError):
    """start_line is below 1 (and the range is not the empty-file sentinel)."""

    reason = "invalid_start_line"


class InvalidEndLineError(HunkError):
    """end_line precedes start_line."""

    reason = "invalid_end_line"


class RangeExceedsFileError(HunkError):
    """end_line is past the last line of the file."""

    reason = "end_line_exceeds_file_length"


class StaleHunkError(HunkError):
    """The file changed since the hunk was captured."""

    reason = "hunk_is_stale"


class InvalidHunkContentsError(HunkError):
    """The file changed inside the hunk's range."""

    reason = "invalid_hunk_contents"


class NotStagedError(HunkError):
    """A diff or commit was requested before staging."""

    reason = "not_staged"


class HunkCommittedError(HunkError):
    """The hunk was already committed and must not be reused."""

    reason = "hunk_committed"


class DiffToolError(HunkError):
    """The diff mechanism failed unexpectedly."""

    reason = "diff_tool_failure"

    def __init__(self, message: str = "", output: str = "", **kwargs) -> None:
        self.output = output
        super().__init__(message, **kwargs)
