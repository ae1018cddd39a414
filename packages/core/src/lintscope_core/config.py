import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "linters": ["rubocop", "haml-lint"],
    "policy": "strike",  # "strike" keeps struck-through old results; "replace" deletes them
    "severe_severities": ["error", "fatal"],  # always reported, even on untouched lines
    "unchanged_files": "drop",  # "keep" reports every offense in files outside the diff
    "post_success_comment": True,
    "comment_header": "Checked commits",
    "continuation_marker": "...continued",
    "max_comment_chars": 65535,
    "struck_lines": 2,
    "process_timeout": 600,
    "git_timeout": 120,
    "checkout_lock_timeout": 600,  # seconds to wait for another run to release the working copy
    "rubocop_config": None,  # path passed to rubocop --config
    "github_token": None,
}

_LIST_KEYS = ("linters", "severe_severities")


def load_config(config_path: str = ".lintscope.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .lintscope.yml in the current directory
      3. CLI argument overrides (None values are ignored)

    ``github_token`` comes from GITHUB_TOKEN, falling back to the file.
    """
    config = {**DEFAULT_CONFIG, **{key: list(DEFAULT_CONFIG[key]) for key in _LIST_KEYS}}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # The environment wins over a token committed to the config file.
    config["github_token"] = os.environ.get("GITHUB_TOKEN") or config.get("github_token")

    return config
