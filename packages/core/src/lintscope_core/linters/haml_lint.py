from __future__ import annotations

from lintscope_core.linters.base import BaseLinter


class HamlLintLinter(BaseLinter):
    NAME = "haml-lint"
    COMMAND = "haml-lint"
    VERSION_KEY = "hamllint_version"
    RULE_KEY = "linter_name"

    def handles(self, path: str) -> bool:
        return path.endswith(".haml")

    def build_args(self, files: list[str]) -> list[str]:
        return ["--reporter", "json", *files]
