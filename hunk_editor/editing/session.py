"""
Edit session — drives one edit through locate → conform → stage → review →
commit, re-locating when the captured range goes out of date.

The engine itself never retries; this is the caller-side policy that
decides a stale or mislocated hunk is worth another locator round.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from ..config import Config, get_config
from .differ import TextDiffer, format_colored_diff, get_differ
from .errors import HunkError
from .hunk import Hunk
from .metrics import log_edit_metric
from .scratch import ScratchFiles, default_scratch
from .text_ops import read_text

logger = logging.getLogger(__name__)


class HunkLocator(Protocol):
    """Chooses the line range an edit should replace."""

    def locate(
        self,
        file: str,
        contents: str,
        criteria: str,
        replacement: str,
    ) -> tuple[int, int]:
        ...


class ReplacementConformer(Protocol):
    """Adapts replacement text to the style of its surroundings."""

    def conform(
        self,
        context: str,
        replacement: str,
        pre_anchor: str,
        post_anchor: str,
    ) -> str:
        ...


@dataclass
class EditOutcome:
    """Result of one :meth:`EditSession.run`."""
    success: bool
    file: str
    outcome: str              # "committed" | "rejected" | "stale" | "failed"
    hunk: Optional[Hunk] = None
    diff: str = ""
    attempts: int = 0
    error: str = ""


class _Retry(Exception):
    """Internal signal: the current attempt should re-locate."""


class EditSession:
    """Apply a single edit to a file through the hunk engine."""

    def __init__(
        self,
        locator: HunkLocator,
        conformer: ReplacementConformer | None = None,
        config: Config | None = None,
        differ: TextDiffer | None = None,
        scratch: ScratchFiles | None = None,
        reviewer: Callable[[str], bool] | None = None,
        colored_preview: bool = False,
        record_metrics: bool = False,
        project_root: str | None = None,
    ) -> None:
        self._locator = locator
        self._conformer = conformer
        self._config = config or get_config()
        self._differ = differ or get_differ(self._config.DIFF_TOOL)
        self._scratch = scratch or default_scratch()
        self._reviewer = reviewer
        self._colored_preview = colored_preview
        self._record_metrics = record_metrics
        self._project_root = project_root

    def run(self, file: str, criteria: str, replacement: str) -> EditOutcome:
        """Locate, stage and commit *replacement* in *file*.

        A range error from the locator or a hunk that goes out of date
        before commit costs one attempt; up to ``LOCATE_MAX_RETRIES``
        attempts are made.
        """
        max_attempts = max(1, self._config.LOCATE_MAX_RETRIES)
        last_error = ""

        for attempt in range(1, max_attempts + 1):
            logger.info("[EditSession] %s: attempt %d/%d", file, attempt, max_attempts)
            try:
                outcome = self._attempt(file, criteria, replacement)
            except _Retry as exc:
                last_error = str(exc)
                logger.warning("[EditSession] %s: %s, re-locating", file, last_error)
                continue
            outcome.attempts = attempt
            return self._finish(outcome)

        logger.error("[EditSession] %s: giving up after %d attempts", file, max_attempts)
        return self._finish(EditOutcome(
            success=False,
            file=file,
            outcome="stale",
            attempts=max_attempts,
            error=last_error,
        ))

    # ------------------------------------------------------------------
    # One attempt
    # ------------------------------------------------------------------

    def _attempt(self, file: str, criteria: str, replacement: str) -> EditOutcome:
        try:
            contents = read_text(file)
        except OSError as exc:
            return EditOutcome(success=False, file=file, outcome="failed",
                               error=f"Cannot read {file}: {exc}")

        hunk = self._capture(file, contents, criteria, replacement)

        cfg = self._config
        try:
            context = hunk.change_context(
                cfg.CONTEXT_LINES, cfg.PRE_ANCHOR, cfg.POST_ANCHOR,
            )
        except HunkError as exc:
            raise _Retry(str(exc)) from exc

        if self._conformer is not None:
            replacement = self._conformer.conform(
                context, replacement, cfg.PRE_ANCHOR, cfg.POST_ANCHOR,
            )

        # The conformer may have taken a while; check again before staging
        if not hunk.is_valid():
            raise _Retry(f"{hunk.describe()} changed while conforming")

        try:
            staged = hunk.stage_changes(replacement, scratch=self._scratch)
        except HunkError as exc:
            raise _Retry(str(exc)) from exc

        try:
            diff = staged.build_diff(self._differ)
            logger.debug("[EditSession] Staged diff for %s:\n%s", hunk.describe(), diff)

            preview = format_colored_diff(diff) if self._colored_preview else diff
            if self._reviewer is not None and not self._reviewer(preview):
                staged.discard_staged_changes(self._scratch)
                return EditOutcome(success=False, file=file, outcome="rejected",
                                   hunk=hunk, diff=diff, error="Changes rejected")

            if not staged.is_valid():
                staged.discard_staged_changes(self._scratch)
                raise _Retry(f"{hunk.describe()} changed before commit")

            committed = staged.apply_staged_changes(scratch=self._scratch)
        except HunkError as exc:
            staged.discard_staged_changes(self._scratch)
            return EditOutcome(success=False, file=file, outcome="failed",
                               hunk=hunk, error=str(exc))

        return EditOutcome(success=True, file=file, outcome="committed",
                           hunk=committed, diff=diff)

    def _capture(self, file: str, contents: str, criteria: str, replacement: str) -> Hunk:
        try:
            if contents == "":
                return Hunk.for_empty_file(file)
            start_line, end_line = self._locator.locate(
                file, contents, criteria, replacement,
            )
            return Hunk.new(file, start_line, end_line)
        except HunkError as exc:
            raise _Retry(str(exc)) from exc

    def _finish(self, outcome: EditOutcome) -> EditOutcome:
        if outcome.success:
            logger.info("[EditSession] %s: committed after %d attempt(s)",
                        outcome.file, outcome.attempts)
        else:
            logger.warning("[EditSession] %s: %s (%s)",
                           outcome.file, outcome.outcome, outcome.error)

        if self._record_metrics:
            hunk = outcome.hunk
            log_edit_metric({
                "file": outcome.file,
                "outcome": outcome.outcome,
                "attempts": outcome.attempts,
                "start_line": hunk.start_line if hunk else None,
                "end_line": hunk.end_line if hunk else None,
                "lines_removed": hunk.line_count if hunk else 0,
            }, project_root=self._project_root)
        return outcome
