"""Safe, previewable line-range edits for files that may change underneath you."""

from .config import Config
from .editing import (
    Hunk, EditSession, EditOutcome, HunkError, NO_DIFFERENCES,
)

__all__ = ["Config", "Hunk", "EditSession", "EditOutcome", "HunkError", "NO_DIFFERENCES"]

__version__ = "0.1.0"
