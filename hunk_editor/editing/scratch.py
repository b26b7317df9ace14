"""
Scratch files — disposable temp files that hold staged candidates.

Every file handed out is tracked so that anything a caller forgets to
release is reclaimed by :meth:`ScratchFiles.sweep`, which the default
registry runs at interpreter exit.
"""

from __future__ import annotations

import atexit
import logging
import os
import shutil
import tempfile
import threading

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = ".hunk_editor_"


class ScratchFiles:
    """Allocate, track and reclaim scratch files."""

    def __init__(
        self,
        directory: str | None = None,
        prefix: str = DEFAULT_PREFIX,
        suffix: str = ".tmp",
    ) -> None:
        self._directory = directory
        self._prefix = prefix
        self._suffix = suffix
        self._paths: set[str] = set()
        self._lock = threading.Lock()

    @property
    def tracked(self) -> list[str]:
        with self._lock:
            return sorted(self._paths)

    def create(self, contents: str = "") -> str:
        """Create a scratch file holding *contents* and return its path."""
        path = self._new_path()
        try:
            with open(path, "w", encoding="utf-8", errors="surrogateescape",
                      newline="") as f:
                f.write(contents)
        except Exception:
            self.release(path)
            raise
        return path

    def copy_of(self, source: str) -> str:
        """Create a scratch file holding a byte-for-byte copy of *source*."""
        path = self._new_path()
        try:
            shutil.copyfile(source, path)
        except Exception:
            self.release(path)
            raise
        logger.debug("[Scratch] Copied %s to %s", source, path)
        return path

    def release(self, path: str) -> bool:
        """Delete a scratch file.  Returns ``True`` if the file was removed.

        Never raises: a file that cannot be removed now is retried by
        :meth:`sweep`.
        """
        try:
            os.unlink(path)
        except FileNotFoundError:
            with self._lock:
                self._paths.discard(path)
            return False
        except OSError as exc:
            logger.warning("[Scratch] Could not remove %s: %s", path, exc)
            return False

        with self._lock:
            self._paths.discard(path)
        return True

    def sweep(self) -> int:
        """Remove every tracked scratch file.  Returns the number removed."""
        removed = 0
        for path in self.tracked:
            if self.release(path):
                removed += 1
        if removed:
            logger.debug("[Scratch] Swept %d stray scratch file(s)", removed)
        return removed

    def _new_path(self) -> str:
        if self._directory:
            os.makedirs(self._directory, exist_ok=True)
        fd, path = tempfile.mkstemp(
            suffix=self._suffix, prefix=self._prefix, dir=self._directory,
        )
        os.close(fd)
        with self._lock:
            self._paths.add(path)
        return path


_default: ScratchFiles | None = None
_default_lock = threading.Lock()


def default_scratch() -> ScratchFiles:
    """Return the process-wide registry, swept at interpreter exit."""
    global _default
    with _default_lock:
        if _default is None:
            from ..config import get_config

            cfg = get_config()
            _default = ScratchFiles(
                directory=cfg.SCRATCH_DIR, prefix=cfg.SCRATCH_PREFIX,
            )
            atexit.register(_default.sweep)
        return _default
