"""External process invocation with timeout handling."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600


@dataclass
class ProcessResult:
    exit_status: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.exit_status == 0 and not self.timed_out


class ProcessRunner:
    """Runs a command to completion and captures its output.

    Never raises for process-level failures. A timeout or a missing executable is
    reported as a non-zero exit status with the reason on stderr, so callers
    treat it like any other crashed tool.
    """

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def run(self, command: str, args: list[str], cwd: str | Path) -> ProcessResult:
        cmd = [command, *args]
        logger.info("Executing: %s (cwd=%s)", shlex.join(cmd), cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return ProcessResult(
                exit_status=-1,
                stdout="",
                stderr=f"{command} timed out after {self.timeout}s",
                timed_out=True,
            )
        except FileNotFoundError as e:
            return ProcessResult(exit_status=127, stdout="", stderr=f"{command}: {e}")

        return ProcessResult(exit_status=result.returncode, stdout=result.stdout, stderr=result.stderr)
