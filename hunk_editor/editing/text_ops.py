"""
Text operations — the line model shared by every hunk operation.

A file is split on ``"\\n"`` exactly, so ``"a\\nb\\n"`` has three lines
(the last one empty) and an empty file has a single empty line.  Files are
read and written without newline translation so that ``\\r\\n`` and stray
bytes survive a round trip untouched.
"""

from __future__ import annotations

import hashlib
import os

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"
_ATOMIC_SUFFIX = ".hunk_editor_tmp"


def read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def decode(data: bytes) -> str:
    return data.decode(_ENCODING, errors=_ERRORS)


def read_text(path: str) -> str:
    """Read a file as text with no newline translation."""
    with open(path, "r", encoding=_ENCODING, errors=_ERRORS, newline="") as f:
        return f.read()


def digest(data: bytes) -> str:
    """Fingerprint used for change detection only, never for security."""
    return hashlib.md5(data).hexdigest()


def file_digest(path: str) -> str:
    """Return the hex digest of a file's bytes.

    Raises OSError when the file cannot be read.
    """
    h = hashlib.md5()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def split_lines(text: str) -> list[str]:
    return text.split("\n")


def slice_lines(lines: list[str], start_line: int, end_line: int) -> str:
    """Join lines ``start_line..end_line`` (1-based, inclusive)."""
    return "\n".join(lines[start_line - 1:end_line])


def splice_lines(
    lines: list[str],
    start_line: int,
    end_line: int,
    replacement: str,
) -> list[str]:
    """Replace lines ``start_line..end_line`` with the lines of *replacement*.

    Both boundaries are clamped at zero, so degenerate ranges never index
    from the end of the list.
    """
    before = lines[:max(0, start_line - 1)]
    after = lines[max(0, end_line):]
    return before + split_lines(replacement) + after


def numbered_lines(text: str, sep: str = "|", start: int = 1) -> str:
    """Prefix every line of *text* with its line number.

    ``numbered_lines("a\\nb")`` gives ``"1|a\\n2|b"``.  Used to show a file
    to a range locator, which answers in these numbers.
    """
    return "\n".join(
        f"{number}{sep}{line}"
        for number, line in enumerate(split_lines(text), start)
    )


def write_text(path: str, content: str, atomic: bool = True) -> None:
    """Write *content* to *path*.

    With *atomic* the content goes to a sibling temp file which is then
    renamed over the target, so a crash never leaves a truncated file.
    Otherwise the target is overwritten in place.
    """
    if not atomic:
        with open(path, "w", encoding=_ENCODING, errors=_ERRORS, newline="") as f:
            f.write(content)
        return

    # Write through symlinks to the real file
    abs_path = os.path.realpath(path)
    tmp_path = abs_path + _ATOMIC_SUFFIX

    try:
        with open(tmp_path, "w", encoding=_ENCODING, errors=_ERRORS, newline="") as f:
            f.write(content)
        if os.path.exists(abs_path):
            # Keep the target's permission bits across the rename
            os.chmod(tmp_path, os.stat(abs_path).st_mode & 0o7777)
        os.replace(tmp_path, abs_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
