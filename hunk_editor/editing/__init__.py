"""Hunk engine — line-range capture, staleness checks, staged edits."""

from .errors import (
    HunkError, HunkFileNotFoundError, InvalidStartLineError,
    InvalidEndLineError, RangeExceedsFileError, StaleHunkError,
    InvalidHunkContentsError, NotStagedError, HunkCommittedError,
    DiffToolError,
)
from .hunk import Hunk, DEFAULT_CONTEXT_LINES
from .differ import (
    TextDiffer, DifflibDiffer, ExternalDiffer, NO_DIFFERENCES,
    get_differ, format_colored_diff,
)
from .scratch import ScratchFiles, default_scratch
from .text_ops import numbered_lines
from .session import EditSession, EditOutcome, HunkLocator, ReplacementConformer
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "HunkError", "HunkFileNotFoundError", "InvalidStartLineError",
    "InvalidEndLineError", "RangeExceedsFileError", "StaleHunkError",
    "InvalidHunkContentsError", "NotStagedError", "HunkCommittedError",
    "DiffToolError",
    "Hunk", "DEFAULT_CONTEXT_LINES",
    "TextDiffer", "DifflibDiffer", "ExternalDiffer", "NO_DIFFERENCES",
    "get_differ", "format_colored_diff",
    "ScratchFiles", "default_scratch",
    "numbered_lines",
    "EditSession", "EditOutcome", "HunkLocator", "ReplacementConformer",
    "log_edit_metric", "read_edit_stats",
]
