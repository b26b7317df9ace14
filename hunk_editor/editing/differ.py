"""
Differ — unified diffs between an original file and its staged candidate.

Two interchangeable implementations share one output contract: a unified
diff whose headers carry the given labels, or :data:`NO_DIFFERENCES` when
the files are textually identical.
"""

from __future__ import annotations

import difflib
import logging
import subprocess
from typing import Protocol

from .errors import DiffToolError
from .text_ops import read_text

logger = logging.getLogger(__name__)

NO_DIFFERENCES = "No differences"


class TextDiffer(Protocol):
    def diff(
        self,
        original_path: str,
        modified_path: str,
        from_label: str = "original",
        to_label: str = "modified",
    ) -> str:
        ...


class DifflibDiffer:
    """In-process unified diff built on :mod:`difflib`."""

    def __init__(self, context_lines: int = 3) -> None:
        self._context = context_lines

    def diff(
        self,
        original_path: str,
        modified_path: str,
        from_label: str = "original",
        to_label: str = "modified",
    ) -> str:
        try:
            old_content = read_text(original_path)
            new_content = read_text(modified_path)
        except OSError as exc:
            raise DiffToolError(f"Cannot read files to diff: {exc}",
                                output=str(exc), file=original_path) from exc

        if old_content == new_content:
            return NO_DIFFERENCES

        diff = difflib.unified_diff(
            _diff_lines(old_content),
            _diff_lines(new_content),
            fromfile=from_label,
            tofile=to_label,
            n=self._context,
        )
        return "".join(_terminate(line) for line in diff)


class ExternalDiffer:
    """Unified diff produced by an external ``diff -u`` process.

    ``diff`` exits 0 for identical input, 1 when differences were found and
    anything else on trouble; the last case becomes a :class:`DiffToolError`
    carrying the tool's output.
    """

    def __init__(self, command: str = "diff") -> None:
        self._command = command

    def diff(
        self,
        original_path: str,
        modified_path: str,
        from_label: str = "original",
        to_label: str = "modified",
    ) -> str:
        cmd = [
            self._command, "-u",
            "--label", from_label, "--label", to_label,
            original_path, modified_path,
        ]
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True,
                errors="replace", check=False,
            )
        except OSError as exc:
            raise DiffToolError(f"Could not run {self._command}: {exc}",
                                output=str(exc), file=original_path) from exc

        if result.returncode == 0:
            return NO_DIFFERENCES
        if result.returncode == 1:
            return result.stdout

        output = (result.stdout + result.stderr).strip()
        logger.warning("[Diff] %s exited %d for %s: %s",
                       self._command, result.returncode, original_path, output)
        raise DiffToolError(
            f"{self._command} failed with exit code {result.returncode}",
            output=output, file=original_path,
        )


_DIFFERS = {
    "difflib": DifflibDiffer,
    "diff": ExternalDiffer,
}


def get_differ(name: str) -> TextDiffer:
    """Return a differ by name: ``"difflib"`` or ``"diff"``."""
    try:
        return _DIFFERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown diff tool {name!r}; expected one of {sorted(_DIFFERS)}"
        ) from None


_RESET = "\033[0m"
_STYLES = (
    ("+++", "\033[1m"),
    ("---", "\033[1m"),
    ("@@", "\033[36m"),
    ("+", "\033[32m"),
    ("-", "\033[31m"),
    ("\\", "\033[2m"),
)


def format_colored_diff(diff_text: str) -> str:
    """ANSI-colour a unified diff for a terminal reviewer.

    Headers are bold, ``@@`` ranges cyan, additions green, deletions red
    and ``\\ No newline`` markers dim.  Line endings are kept as they are;
    :data:`NO_DIFFERENCES` comes back unchanged.
    """
    if diff_text == NO_DIFFERENCES:
        return diff_text

    out: list[str] = []
    for line in diff_text.split("\n"):
        style = next((s for prefix, s in _STYLES if line.startswith(prefix)), None)
        out.append(f"{style}{line}{_RESET}" if style else line)
    return "\n".join(out)


def _diff_lines(text: str) -> list[str]:
    # Only "\n" ends a line; form feeds and lone CRs stay inside it
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _terminate(line: str) -> str:
    # Last lines without a newline would run into the next diff line
    if line.endswith("\n"):
        return line
    return line + "\n\\ No newline at end of file\n"
