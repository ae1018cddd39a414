from __future__ import annotations

from pathlib import PurePosixPath

from lintscope_core.linters.base import BaseLinter


class RubocopLinter(BaseLinter):
    NAME = "rubocop"
    COMMAND = "rubocop"
    VERSION_KEY = "rubocop_version"
    RULE_KEY = "cop_name"

    EXTENSIONS = (".rb", ".ru", ".rake", ".gemspec")
    FILENAMES = ("Gemfile", "Rakefile")

    def __init__(self, config_path: str | None = None):
        self.config_path = config_path

    def handles(self, path: str) -> bool:
        return path.endswith(self.EXTENSIONS) or PurePosixPath(path).name in self.FILENAMES

    def build_args(self, files: list[str]) -> list[str]:
        args = ["--format", "json"]
        if self.config_path:
            args += ["--config", self.config_path]
        # Explicit file arguments bypass rubocop's own exclusion list otherwise.
        args.append("--force-exclusion")
        return args + list(files)
