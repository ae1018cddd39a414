"""Base linter implementing the Template Method pattern.

Every supported linter follows the same shape:
    handles(path)        ← which repository files belong to this linter
    build_args(files)    ← command line for one invocation
    parse(stdout)        → LintReport, from the tool's JSON report

Both rubocop and haml-lint emit the same JSON layout (metadata / files / summary)
so parsing lives here. Subclasses declare the command, the file domain and the
few keys that differ.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod

from lintscope_core.errors import LinterExecutionFailed
from lintscope_core.models import FileOffenses, LintReport, Offense, Severity

logger = logging.getLogger(__name__)


class BaseLinter(ABC):
    NAME: str = ""
    COMMAND: str = ""
    VERSION_KEY: str = ""
    RULE_KEY: str = ""

    # ------------------------------------------------------------------ #
    # Abstract: implement in each linter                                 #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def handles(self, path: str) -> bool:
        """Return True if ``path`` is in this linter's file domain."""

    @abstractmethod
    def build_args(self, files: list[str]) -> list[str]:
        """Return the arguments for one run over ``files`` with JSON output."""

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def parse(self, output: str) -> LintReport:
        try:
            data = json.loads(output.strip() or "{}")
        except json.JSONDecodeError as e:
            raise LinterExecutionFailed(self.NAME, f"Unparseable output ({e}): {output[:500]}") from e

        files = tuple(self._parse_file(f) for f in data.get("files", []))
        summary = data.get("summary", {})
        version = data.get("metadata", {}).get(self.VERSION_KEY)

        return LintReport(
            files=files,
            target_file_count=summary.get("target_file_count", len(files)),
            inspected_file_count=summary.get("inspected_file_count", len(files)),
            tools=(f"{self.NAME} {version}" if version else self.NAME,),
        )

    def _parse_file(self, file_data: dict) -> FileOffenses:
        path = file_data["path"]
        # Older rubocop releases spell it "offences".
        raw_offenses = file_data.get("offenses", file_data.get("offences", []))
        return FileOffenses(path=path, offenses=tuple(self._parse_offense(path, o) for o in raw_offenses))

    def _parse_offense(self, path: str, data: dict) -> Offense:
        location = data.get("location") or {}
        return Offense(
            path=path,
            line=int(location.get("line", location.get("start_line", 0))),
            column=location.get("column", location.get("start_column")),
            severity=Severity.parse(data.get("severity")),
            rule_id=data.get(self.RULE_KEY, ""),
            message=data.get("message", ""),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
