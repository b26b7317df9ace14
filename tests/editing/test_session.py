"""Tests for the EditSession retry / review policy."""

import os

from hunk_editor.config import Config
from hunk_editor.editing.errors import HunkFileNotFoundError
from hunk_editor.editing.hunk import Hunk
from hunk_editor.editing.metrics import read_edit_stats
from hunk_editor.editing.session import EditSession


ABCDE = "a\nb\nc\nd\ne"


def _read(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


class FixedLocator:
    """Returns the queued ranges in order, repeating the last one."""

    def __init__(self, *ranges):
        self.ranges = list(ranges)
        self.calls = []

    def locate(self, file, contents, criteria, replacement):
        self.calls.append((file, contents, criteria, replacement))
        if len(self.ranges) > 1:
            return self.ranges.pop(0)
        return self.ranges[0]


class UpperConformer:
    def __init__(self):
        self.contexts = []

    def conform(self, context, replacement, pre_anchor, post_anchor):
        self.contexts.append(context)
        return replacement.upper()


def _session(locator, scratch, **kwargs):
    config = kwargs.pop("config", None) or Config({"locate_max_retries": 3})
    return EditSession(locator, config=config, scratch=scratch, **kwargs)


class TestRun:
    def test_commits_located_edit(self, make_file, scratch):
        path = make_file(ABCDE)
        locator = FixedLocator((2, 3))

        outcome = _session(locator, scratch).run(path, "replace b and c", "X\nY\nZ")

        assert outcome.success is True
        assert outcome.outcome == "committed"
        assert outcome.attempts == 1
        assert outcome.hunk.committed is True
        assert "+X" in outcome.diff.splitlines()
        assert _read(path) == "a\nX\nY\nZ\nd\ne"
        assert locator.calls == [(path, ABCDE, "replace b and c", "X\nY\nZ")]
        assert scratch.tracked == []

    def test_conformer_sees_anchored_context(self, make_file, scratch):
        path = make_file(ABCDE)
        conformer = UpperConformer()
        config = Config({"pre_anchor": "<<S>>", "post_anchor": "<<E>>", "context_lines": 1})

        outcome = _session(FixedLocator((3, 3)), scratch, conformer=conformer,
                           config=config).run(path, "c", "new")

        assert outcome.success is True
        assert conformer.contexts == ["b\n<<S>>\nc\n<<E>>\nd\n"]
        assert _read(path) == "a\nb\nNEW\nd\ne"

    def test_bad_range_is_relocated(self, make_file, scratch):
        path = make_file(ABCDE)
        locator = FixedLocator((4, 9), (4, 4))

        outcome = _session(locator, scratch).run(path, "d", "D")

        assert outcome.success is True
        assert outcome.attempts == 2
        assert len(locator.calls) == 2
        assert _read(path) == "a\nb\nc\nD\ne"

    def test_gives_up_after_max_attempts(self, make_file, scratch):
        path = make_file(ABCDE)
        locator = FixedLocator((0, 1))

        outcome = _session(locator, scratch).run(path, "?", "x")

        assert outcome.success is False
        assert outcome.outcome == "stale"
        assert outcome.attempts == 3
        assert "Start line 0" in outcome.error
        assert _read(path) == ABCDE

    def test_range_changed_while_conforming(self, make_file, scratch):
        path = make_file(ABCDE)

        class MeddlingConformer:
            def __init__(self):
                self.calls = 0

            def conform(self, context, replacement, pre_anchor, post_anchor):
                self.calls += 1
                if self.calls == 1:
                    with open(path, "w", encoding="utf-8", newline="") as f:
                        f.write("a\nB\nc\nd\ne")
                return replacement

        locator = FixedLocator((2, 2))
        outcome = _session(locator, scratch, conformer=MeddlingConformer()).run(
            path, "b", "beta",
        )

        assert outcome.success is True
        assert outcome.attempts == 2
        assert _read(path) == "a\nbeta\nc\nd\ne"

    def test_reviewer_rejects(self, make_file, scratch):
        path = make_file(ABCDE)
        seen = []

        def reviewer(diff):
            seen.append(diff)
            return False

        outcome = _session(FixedLocator((1, 1)), scratch, reviewer=reviewer).run(
            path, "a", "A",
        )

        assert outcome.success is False
        assert outcome.outcome == "rejected"
        assert seen and "-a" in seen[0].splitlines()
        assert _read(path) == ABCDE
        assert scratch.tracked == []

    def test_empty_file_skips_locator(self, make_file, scratch):
        path = make_file("")
        locator = FixedLocator((1, 1))

        outcome = _session(locator, scratch).run(path, "start", "print('hi')\n")

        assert outcome.success is True
        assert locator.calls == []
        assert _read(path) == "print('hi')\n"

    def test_missing_file(self, tmp_path, scratch):
        outcome = _session(FixedLocator((1, 1)), scratch).run(
            str(tmp_path / "gone.txt"), "x", "y",
        )
        assert outcome.success is False
        assert outcome.outcome == "failed"
        assert outcome.attempts == 1

    def test_records_metrics(self, make_file, scratch, tmp_path):
        path = make_file(ABCDE)
        root = str(tmp_path / "project")

        _session(FixedLocator((2, 3)), scratch, record_metrics=True,
                 project_root=root).run(path, "b", "B")

        stats = read_edit_stats(project_root=root)
        assert stats["total_edits"] == 1
        assert stats["success_rate"] == 100.0
        assert os.path.isdir(os.path.join(root, ".hunk_editor"))

    def test_file_vanishing_during_context_is_relocated(self, make_file, scratch,
                                                        monkeypatch):
        path = make_file(ABCDE)
        original = Hunk.change_context
        calls = []

        def flaky_context(self, *args, **kwargs):
            calls.append(self.describe())
            if len(calls) == 1:
                raise HunkFileNotFoundError("gone for a moment", file=self.file)
            return original(self, *args, **kwargs)

        monkeypatch.setattr(Hunk, "change_context", flaky_context)

        outcome = _session(FixedLocator((2, 2)), scratch).run(path, "b", "B")

        assert outcome.success is True
        assert outcome.attempts == 2
        assert len(calls) == 2
        assert _read(path) == "a\nB\nc\nd\ne"


class TestColoredPreview:
    def test_reviewer_sees_colored_diff(self, make_file, scratch):
        path = make_file(ABCDE)
        seen = []

        def reviewer(diff):
            seen.append(diff)
            return True

        outcome = _session(FixedLocator((1, 1)), scratch, reviewer=reviewer,
                           colored_preview=True).run(path, "a", "A")

        assert outcome.success is True
        assert "\033[31m-a\033[0m" in seen[0].split("\n")
        assert "\033[32m+A\033[0m" in seen[0].split("\n")
        # The recorded diff stays plain
        assert "\033[" not in outcome.diff
        assert "+A" in outcome.diff.splitlines()

    def test_plain_by_default(self, make_file, scratch):
        path = make_file(ABCDE)
        seen = []

        _session(FixedLocator((1, 1)), scratch,
                 reviewer=lambda diff: seen.append(diff) or True).run(path, "a", "A")

        assert "\033[" not in seen[0]
