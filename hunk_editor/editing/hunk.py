"""
Hunk — a line range of a file captured together with a whole-file
fingerprint, and the stage → diff → commit workflow built on it.

A hunk never locks its file.  Conflicting writes are *detected*, not
prevented: :meth:`Hunk.is_stale` says whether anything in the file changed
and :meth:`Hunk.is_valid` says whether the captured range itself changed.

.. warning::
   Another writer can still change the file between your last
   :meth:`Hunk.is_valid` call and :meth:`Hunk.apply_staged_changes` or
   :meth:`Hunk.replace_in_file`, and that change will be overwritten.
   Re-check validity immediately before committing, particularly after any
   slow step such as a round trip to a language model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from .differ import TextDiffer, get_differ
from .errors import (
    HunkCommittedError,
    HunkFileNotFoundError,
    InvalidEndLineError,
    InvalidHunkContentsError,
    InvalidStartLineError,
    NotStagedError,
    RangeExceedsFileError,
    StaleHunkError,
)
from .scratch import ScratchFiles, default_scratch
from .text_ops import (
    decode,
    digest,
    file_digest,
    read_bytes,
    read_text,
    slice_lines,
    splice_lines,
    split_lines,
    write_text,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LINES = 10


@dataclass(frozen=True)
class Hunk:
    """A captured, line-addressed slice of a file.

    ``start_line`` and ``end_line`` are 1-based and inclusive.  The range
    ``(0, 0)`` on an empty file means "insert into the empty file".
    Staging and committing return new ``Hunk`` values; the file and range
    never change.
    """
    file: str
    start_line: int
    end_line: int
    contents: str
    content_hash: str
    staged_path: Optional[str] = None
    committed: bool = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def new(cls, file: str, start_line: int, end_line: int) -> "Hunk":
        """Capture lines ``start_line..end_line`` of *file*.

        Raises
        ------
        HunkFileNotFoundError
            The file cannot be read.
        InvalidStartLineError
            ``start_line < 1`` outside the empty-file sentinel.
        InvalidEndLineError
            ``end_line < start_line``.
        RangeExceedsFileError
            ``end_line`` is past the end of the file.
        """
        try:
            data = read_bytes(file)
        except OSError as exc:
            raise HunkFileNotFoundError(
                f"Cannot read {file}: {exc}",
                file=file, start_line=start_line, end_line=end_line,
            ) from exc

        text = decode(data)
        if text == "" and start_line == 0 and end_line == 0:
            contents = ""
        else:
            contents = _find_contents(split_lines(text), file, start_line, end_line)

        hunk = cls(
            file=file,
            start_line=start_line,
            end_line=end_line,
            contents=contents,
            content_hash=digest(data),
        )
        logger.debug("[Hunk] Captured %s (%d chars)", hunk.describe(), len(contents))
        return hunk

    @classmethod
    def for_empty_file(cls, file: str) -> "Hunk":
        """Capture the ``(0, 0)`` insertion point of an empty file."""
        return cls.new(file, 0, 0)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_empty_file_sentinel(self) -> bool:
        return self.start_line == 0 and self.end_line == 0

    @property
    def line_count(self) -> int:
        if self.is_empty_file_sentinel:
            return 0
        return self.end_line - self.start_line + 1

    @property
    def is_staged(self) -> bool:
        return self.staged_path is not None

    def describe(self) -> str:
        return f"{self.file}:{self.start_line}-{self.end_line}"

    # ------------------------------------------------------------------
    # Freshness
    # ------------------------------------------------------------------

    def is_stale(self) -> bool:
        """Return ``True`` if the file changed (or vanished) since capture."""
        try:
            return file_digest(self.file) != self.content_hash
        except OSError:
            return True

    def is_valid(self) -> bool:
        """Return ``True`` if the captured range can still be trusted.

        An unchanged file is valid.  A changed file is still valid when the
        lines at the captured range are exactly what was captured, i.e. the
        change happened somewhere else.
        """
        if not self.is_stale():
            return True

        try:
            text = read_text(self.file)
        except OSError:
            return False

        if self.is_empty_file_sentinel:
            return text == ""

        lines = split_lines(text)
        if self.start_line < 1 or self.end_line > len(lines):
            return False
        return slice_lines(lines, self.start_line, self.end_line) == self.contents

    def _stale_error(self, cls=StaleHunkError) -> Exception:
        differs = "range contents changed" if not self.is_valid() else "file changed elsewhere"
        return cls(
            f"{self.describe()} is out of date: {differs}",
            file=self.file, start_line=self.start_line, end_line=self.end_line,
        )

    def _ensure_not_committed(self) -> None:
        if self.committed:
            raise HunkCommittedError(
                f"{self.describe()} was already committed; locate the range again",
                file=self.file, start_line=self.start_line, end_line=self.end_line,
            )

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    def change_context(
        self,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        pre_anchor: str = "",
        post_anchor: str = "",
    ) -> str:
        """Return the hunk body surrounded by up to *context_lines* lines.

        *pre_anchor* and *post_anchor* are inserted as lines of their own
        directly before and after the body (an empty anchor is left out),
        so a reader can see the replacement boundary without counting
        lines.  The window is clamped to the file.  The result always ends
        with a newline.

        Raises :class:`StaleHunkError` if the hunk is no longer valid.
        """
        if not self.is_valid():
            raise self._stale_error()

        try:
            lines = split_lines(read_text(self.file))
        except OSError as exc:
            raise HunkFileNotFoundError(
                f"Cannot read {self.file}: {exc}",
                file=self.file, start_line=self.start_line, end_line=self.end_line,
            ) from exc

        context_lines = max(0, context_lines)
        if self.is_empty_file_sentinel:
            before: list[str] = []
            body: list[str] = []
            after: list[str] = []
        else:
            start_idx = self.start_line - 1
            end_idx = self.end_line  # exclusive
            before = lines[max(0, start_idx - context_lines):start_idx]
            body = lines[start_idx:end_idx]
            after = lines[end_idx:min(len(lines), end_idx + context_lines)]

        snippet_lines = list(before)
        if pre_anchor:
            snippet_lines.append(pre_anchor)
        snippet_lines.extend(body)
        if post_anchor:
            snippet_lines.append(post_anchor)
        snippet_lines.extend(after)

        snippet = "\n".join(snippet_lines)
        if not snippet.endswith("\n"):
            snippet += "\n"
        return snippet

    # ------------------------------------------------------------------
    # Staged application
    # ------------------------------------------------------------------

    def stage_changes(
        self,
        replacement: str,
        scratch: ScratchFiles | None = None,
    ) -> "Hunk":
        """Write the post-edit file to a scratch file, leaving *file* alone.

        The scratch file starts as a verbatim copy of the current file; the
        hunk's range is then replaced by *replacement*.  Returns a hunk
        whose ``staged_path`` points at the candidate.
        """
        self._ensure_not_committed()
        scratch = scratch or default_scratch()

        if not self.is_valid():
            logger.warning("[Hunk] Staging %s although its range changed on disk",
                           self.describe())

        try:
            staged_path = scratch.copy_of(self.file)
        except OSError as exc:
            raise HunkFileNotFoundError(
                f"Cannot copy {self.file}: {exc}",
                file=self.file, start_line=self.start_line, end_line=self.end_line,
            ) from exc

        try:
            current = read_text(staged_path)
            write_text(staged_path, self._spliced(current, replacement), atomic=False)
        except Exception:
            scratch.release(staged_path)
            raise

        # The previous candidate goes only once its replacement exists
        if self.staged_path is not None:
            scratch.release(self.staged_path)

        logger.debug("[Hunk] Staged %s at %s", self.describe(), staged_path)
        return replace(self, staged_path=staged_path)

    def build_diff(self, differ: TextDiffer | None = None) -> str:
        """Return a unified diff from the file to its staged candidate.

        Headers are labelled ``original`` and ``modified``.  Identical files
        give :data:`~hunk_editor.editing.differ.NO_DIFFERENCES`.

        Raises :class:`NotStagedError` before staging and
        :class:`DiffToolError` if the diff itself fails.
        """
        staged_path = self._require_staged()
        if differ is None:
            from ..config import get_config

            differ = get_differ(get_config().DIFF_TOOL)
        return differ.diff(self.file, staged_path, "original", "modified")

    def apply_staged_changes(
        self,
        scratch: ScratchFiles | None = None,
        atomic: bool | None = None,
    ) -> "Hunk":
        """Copy the staged candidate over the file.

        The returned hunk is marked ``committed`` and refuses further
        staging or replacing: its fingerprint describes the file as it was
        *before* this write.  Removing the scratch file is best effort.
        """
        self._ensure_not_committed()
        staged_path = self._require_staged()
        scratch = scratch or default_scratch()

        try:
            candidate = read_text(staged_path)
        except OSError as exc:
            raise NotStagedError(
                f"Staged candidate {staged_path} is gone: {exc}",
                file=self.file, start_line=self.start_line, end_line=self.end_line,
            ) from exc

        write_text(self.file, candidate, atomic=_atomic(atomic))
        scratch.release(staged_path)

        logger.info("[Hunk] Committed %s", self.describe())
        return replace(self, staged_path=None, committed=True)

    def discard_staged_changes(self, scratch: ScratchFiles | None = None) -> "Hunk":
        """Drop the staged candidate without touching the file."""
        if self.staged_path is None:
            return self
        (scratch or default_scratch()).release(self.staged_path)
        logger.debug("[Hunk] Discarded staged changes for %s", self.describe())
        return replace(self, staged_path=None)

    # ------------------------------------------------------------------
    # Direct replace
    # ------------------------------------------------------------------

    def replace_in_file(self, replacement: str, atomic: bool | None = None) -> None:
        """Splice *replacement* into the file in one step, without staging.

        Raises
        ------
        HunkFileNotFoundError
            The file no longer exists.
        InvalidHunkContentsError
            The captured range changed.
        StaleHunkError
            The file changed anywhere since capture.
        """
        self._ensure_not_committed()

        try:
            current = read_text(self.file)
        except OSError as exc:
            raise HunkFileNotFoundError(
                f"Cannot read {self.file}: {exc}",
                file=self.file, start_line=self.start_line, end_line=self.end_line,
            ) from exc

        if not self.is_valid():
            raise self._stale_error(InvalidHunkContentsError)
        if self.is_stale():
            raise self._stale_error(StaleHunkError)

        write_text(self.file, self._spliced(current, replacement), atomic=_atomic(atomic))
        logger.info("[Hunk] Replaced %s in place", self.describe())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_staged(self) -> str:
        if self.staged_path is None:
            raise NotStagedError(
                f"{self.describe()} has no staged changes",
                file=self.file, start_line=self.start_line, end_line=self.end_line,
            )
        return self.staged_path

    def _spliced(self, current: str, replacement: str) -> str:
        if current == "" and self.is_empty_file_sentinel:
            return replacement
        lines = splice_lines(
            split_lines(current), self.start_line, self.end_line, replacement,
        )
        return "\n".join(lines)


def _find_contents(lines: list[str], file: str, start_line: int, end_line: int) -> str:
    if start_line < 1:
        raise InvalidStartLineError(
            f"Start line {start_line} is before line 1 of {file}",
            file=file, start_line=start_line, end_line=end_line,
        )
    if end_line < start_line:
        raise InvalidEndLineError(
            f"End line {end_line} precedes start line {start_line} in {file}",
            file=file, start_line=start_line, end_line=end_line,
        )
    if end_line > len(lines):
        raise RangeExceedsFileError(
            f"End line {end_line} is past the end of {file} ({len(lines)} lines)",
            file=file, start_line=start_line, end_line=end_line,
        )
    return slice_lines(lines, start_line, end_line)


def _atomic(atomic: bool | None) -> bool:
    if atomic is not None:
        return atomic
    from ..config import get_config

    return get_config().ATOMIC_COMMIT
