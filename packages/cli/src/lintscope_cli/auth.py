"""GitHub token resolution for the check command.

Sources, first hit wins:
  1. The token already in the loaded config. ``load_config`` fills it from the
     GITHUB_TOKEN environment variable, or from ``github_token`` in the config
     file when the variable is unset. This is the path a job runner uses.
  2. `gh auth token`, so someone re-running a check by hand on their own machine
     can reuse their GitHub CLI login.
"""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)


def resolve_github_token(configured: str | None = None) -> str | None:
    """Return a GitHub token, or None if no source has one.

    Never raises; the caller turns None into a UsageError.
    """
    if configured:
        return configured

    # A missing or hung gh binary is the same as not being logged in.
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None

    if result.returncode == 0 and result.stdout.strip():
        logger.debug("Resolved GitHub token via gh CLI session.")
        return result.stdout.strip()
    return None
