"""
Configuration — loads settings from .hunk_editor.yaml, environment variables,
and built-in defaults (in that priority order: call arguments > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "context_lines": 10,
    "pre_anchor": "<<<<<<< REPLACE START",
    "post_anchor": ">>>>>>> REPLACE END",
    "diff_tool": "difflib",
    "atomic_commit": True,
    "scratch_dir": None,
    "scratch_prefix": ".hunk_editor_",
    "locate_max_retries": 3,
    "log_dir": ".hunk_editor/logs",
}

# Config file search locations
_CONFIG_FILENAMES = [".hunk_editor.yaml", ".hunk_editor.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Hunk engine configuration.

    Settings are resolved in priority order:
    1. Explicit arguments (handled by caller)
    2. Environment variables
    3. .hunk_editor.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, cast=str):
            default = _DEFAULTS[yaml_key]
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() in ("1", "true", "yes")
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[yaml_key]

        self.CONTEXT_LINES = _get("HUNK_CONTEXT_LINES", "context_lines", cast=int)
        self.PRE_ANCHOR = _get("HUNK_PRE_ANCHOR", "pre_anchor")
        self.POST_ANCHOR = _get("HUNK_POST_ANCHOR", "post_anchor")

        self.DIFF_TOOL = _get("HUNK_DIFF_TOOL", "diff_tool")
        self.ATOMIC_COMMIT = _get_bool("HUNK_ATOMIC_COMMIT", "atomic_commit")

        # Scratch files for staged candidates
        self.SCRATCH_DIR = _get("HUNK_SCRATCH_DIR", "scratch_dir")
        self.SCRATCH_PREFIX = _get("HUNK_SCRATCH_PREFIX", "scratch_prefix")

        self.LOCATE_MAX_RETRIES = _get("HUNK_LOCATE_MAX_RETRIES",
                                       "locate_max_retries", cast=int)
        self.LOG_DIR = _get("HUNK_LOG_DIR", "log_dir")

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)


_config: Config | None = None


def get_config() -> Config:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def set_config(config: Config | None) -> None:
    """Replace the process-wide config (``None`` reloads on next use)."""
    global _config
    _config = config
