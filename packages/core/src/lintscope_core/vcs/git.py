"""Git working copy: changed-line index and scoped checkouts."""

from __future__ import annotations

import fcntl
import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, TypeVar

from lintscope_core.diff_index import parse_unified_diff
from lintscope_core.errors import LintScopeError
from lintscope_core.vcs.process import ProcessRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_GIT_TIMEOUT = 120
DEFAULT_LOCK_TIMEOUT = 600
LOCK_FILENAME = "lintscope-checkout.lock"
_LOCK_POLL_INTERVAL = 0.1


class GitError(LintScopeError):
    """A git command exited non-zero."""


class CheckoutLockTimeout(GitError):
    """Another run kept the working copy checked out for longer than the lock timeout."""


@contextmanager
def _exclusive_lock(lock_file: Path, timeout: int) -> Iterator[None]:
    """Hold an exclusive flock on ``lock_file`` for the duration of the block.

    flock locks belong to the open file, so this serialises separate processes as
    well as threads of one process that each open the file.
    """
    with open(lock_file, "w") as fd:
        start = time.monotonic()
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() - start > timeout:
                    raise CheckoutLockTimeout(f"Could not lock {lock_file} within {timeout}s")
                time.sleep(_LOCK_POLL_INTERVAL)

        try:
            fd.write(f"{os.getpid()}\n")
            fd.flush()
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)


class GitRepository:
    """VersionControlService backed by a local git working copy."""

    def __init__(
        self,
        path: str | Path,
        timeout: int = DEFAULT_GIT_TIMEOUT,
        runner: ProcessRunner | None = None,
        lock_timeout: int = DEFAULT_LOCK_TIMEOUT,
    ):
        self.path = Path(path).resolve()
        self._runner = runner if runner is not None else ProcessRunner(timeout=timeout)
        self.lock_timeout = lock_timeout

    @property
    def lock_file(self) -> Path:
        """One lock file per working copy, inside .git when it is a directory."""
        git_dir = self.path / ".git"
        return (git_dir if git_dir.is_dir() else self.path) / LOCK_FILENAME

    def _git(self, *args: str) -> str:
        result = self._runner.run("git", ["-C", str(self.path), *args], cwd=self.path)
        if not result.success:
            raise GitError(f"git {' '.join(args)} failed ({result.exit_status}): {result.stderr.strip()}")
        return result.stdout

    def diff_index(self, base: str, head: str) -> dict[str, set[int]]:
        """Return changed head-side lines per path between the merge base of ``base`` and ``head``."""
        diff = self._git("diff", "--no-color", "--no-ext-diff", "--unified=0", f"{base}...{head}")
        return parse_unified_diff(diff)

    def current_revision(self) -> str:
        """Return the checked-out branch name, or the commit SHA when HEAD is detached."""
        branch = self._git("rev-parse", "--abbrev-ref", "HEAD").strip()
        if branch != "HEAD":
            return branch
        return self._git("rev-parse", "HEAD").strip()

    @contextmanager
    def checkout(self, revision: str) -> Iterator[Path]:
        """Check out ``revision`` for the duration of the block, then restore the previous one.

        Holds the working copy lock file for the whole block, so runs against the
        same working copy take turns even when they are separate processes. The
        previous revision is restored on every exit path, including when the block
        raises.
        """
        with _exclusive_lock(self.lock_file, self.lock_timeout):
            previous = self.current_revision()
            logger.debug("Checking out %s in %s (was %s)", revision, self.path, previous)
            self._git("checkout", "--quiet", "--detach", revision)
            try:
                yield self.path
            finally:
                try:
                    self._git("checkout", "--quiet", previous)
                except GitError as e:
                    logger.error("Could not restore %s to %s: %s", self.path, previous, e)
                    raise

    def with_checkout(self, revision: str, fn: Callable[[], T]) -> T:
        with self.checkout(revision):
            return fn()
