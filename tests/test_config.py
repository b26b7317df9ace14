"""Tests for configuration loading."""

import os

from hunk_editor.config import Config, _find_config_file, _load_yaml, get_config, set_config


class TestDefaults:
    def test_defaults(self, monkeypatch):
        for key in list(os.environ):
            if key.startswith("HUNK_"):
                monkeypatch.delenv(key)

        cfg = Config({})

        assert cfg.CONTEXT_LINES == 10
        assert cfg.DIFF_TOOL == "difflib"
        assert cfg.ATOMIC_COMMIT is True
        assert cfg.SCRATCH_DIR is None
        assert cfg.SCRATCH_PREFIX == ".hunk_editor_"
        assert cfg.LOCATE_MAX_RETRIES == 3
        assert cfg.PRE_ANCHOR and cfg.POST_ANCHOR


class TestPrecedence:
    def test_yaml_over_defaults(self, monkeypatch):
        monkeypatch.delenv("HUNK_CONTEXT_LINES", raising=False)
        cfg = Config({"context_lines": 4, "diff_tool": "diff", "atomic_commit": False})
        assert cfg.CONTEXT_LINES == 4
        assert cfg.DIFF_TOOL == "diff"
        assert cfg.ATOMIC_COMMIT is False

    def test_env_over_yaml(self, monkeypatch):
        monkeypatch.setenv("HUNK_CONTEXT_LINES", "7")
        monkeypatch.setenv("HUNK_ATOMIC_COMMIT", "false")
        cfg = Config({"context_lines": 4, "atomic_commit": True})
        assert cfg.CONTEXT_LINES == 7
        assert cfg.ATOMIC_COMMIT is False


class TestLoad:
    def test_load_from_explicit_path(self, tmp_path, monkeypatch):
        monkeypatch.delenv("HUNK_PRE_ANCHOR", raising=False)
        path = tmp_path / "custom.yaml"
        path.write_text("pre_anchor: '### BEGIN'\nlocate_max_retries: 5\n", encoding="utf-8")

        cfg = Config.load(str(path))

        assert cfg.PRE_ANCHOR == "### BEGIN"
        assert cfg.LOCATE_MAX_RETRIES == 5

    def test_missing_explicit_path(self, tmp_path):
        assert _find_config_file(str(tmp_path / "absent.yaml")) is None

    def test_finds_file_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / ".hunk_editor.yml").write_text("context_lines: 2\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert _find_config_file() == os.path.join(str(tmp_path), ".hunk_editor.yml")

    def test_bad_yaml_gives_empty_dict(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unclosed\n", encoding="utf-8")
        assert _load_yaml(str(path)) == {}

    def test_non_mapping_yaml_gives_empty_dict(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert _load_yaml(str(path)) == {}


class TestProcessConfig:
    def test_set_and_get(self):
        cfg = Config({"context_lines": 1})
        set_config(cfg)
        assert get_config() is cfg
