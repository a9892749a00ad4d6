"""
Git Sync — Read and copy refs between two repository URLs.

Uses the git command line over SSH (push URLs), so credentials come from
the user's SSH agent and never pass through this process.

- ref_state():        git ls-remote --heads <url>
- find_differences(): compare two ref states branch by branch
- push():             bare clone of the source, then push heads and tags
                      (with --prune) to the destination
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import GitCommandError
from ..models.refs import DifferenceState, compare_ref_states
from ..models.repository import Repository

logger = logging.getLogger(__name__)

HEADS_PREFIX = "refs/heads/"
PUSH_REFSPECS = ["+refs/heads/*:refs/heads/*", "+refs/tags/*:refs/tags/*"]

DEFAULT_TIMEOUT = 60
DEFAULT_PUSH_TIMEOUT = 1800


def _git_env() -> Dict[str, str]:
    # Never wait on a credential prompt
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


def run_git(
    args: List[str],
    cwd: Optional[Path] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> subprocess.CompletedProcess:
    """Run a git command, capturing output. Timeouts raise GitCommandError."""
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=_git_env(),
        )
    except subprocess.TimeoutExpired as e:
        raise GitCommandError(args[0], f"timed out after {timeout}s") from e
    except OSError as e:
        raise GitCommandError(args[0], str(e)) from e


def parse_ls_remote(output: str) -> Dict[str, str]:
    """Parse `git ls-remote --heads` output into {branch: sha}."""
    refs: Dict[str, str] = {}
    for line in output.splitlines():
        parts = line.strip().split("\t")
        if len(parts) != 2:
            continue
        sha, ref = parts
        if ref.startswith(HEADS_PREFIX):
            refs[ref[len(HEADS_PREFIX):]] = sha
    return refs


class GitMirror:
    """
    Ref comparison and mirroring between repositories.

    Ref states are fetched lazily and cached by push URL for the lifetime
    of the instance (one run).
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        push_timeout: float = DEFAULT_PUSH_TIMEOUT,
    ):
        self.timeout = timeout
        self.push_timeout = push_timeout
        self._ref_cache: Dict[str, Dict[str, str]] = {}

    def ref_state(self, repository: Repository) -> Dict[str, str]:
        """Branch → sha for a repository. An empty repository has no branches."""
        url = repository.push_url
        if url in self._ref_cache:
            return self._ref_cache[url]

        result = run_git(["ls-remote", "--heads", url], timeout=self.timeout)
        if result.returncode != 0:
            error = result.stderr.strip() or result.stdout.strip() or "ls-remote failed"
            raise GitCommandError("ls-remote", f"{url}: {error}")

        refs = parse_ls_remote(result.stdout)
        logger.debug(f"[mirror-git] {url}: {len(refs)} branch(es)")
        self._ref_cache[url] = refs
        return refs

    def find_differences(self, left: Repository, right: Repository) -> DifferenceState:
        """Per-branch differences between two repositories (empty = identical)."""
        return compare_ref_states(self.ref_state(left), self.ref_state(right))

    def push(self, source: Repository, destination: Repository) -> bool:
        """
        Copy all branches and tags from source to destination.

        Returns True on success. Failures are logged, never raised.
        """
        with tempfile.TemporaryDirectory(prefix="repupdate-") as tmp:
            workdir = Path(tmp) / "mirror.git"

            try:
                result = run_git(
                    ["clone", "--bare", "--quiet", source.push_url, str(workdir)],
                    timeout=self.push_timeout,
                )
                if result.returncode != 0:
                    logger.error(
                        f"[mirror-git] Clone of {source.push_url} failed: "
                        f"{result.stderr.strip()}"
                    )
                    return False

                logger.info(f"[mirror-git] Pushing {source.push_url} → {destination.push_url}")
                result = run_git(
                    ["push", "--prune", "--quiet", destination.push_url, *PUSH_REFSPECS],
                    cwd=workdir,
                    timeout=self.push_timeout,
                )
            except GitCommandError as e:
                logger.error(f"[mirror-git] {e}")
                return False
            finally:
                self._ref_cache.pop(destination.push_url, None)

        if result.returncode != 0:
            logger.error(
                f"[mirror-git] Push to {destination.push_url} failed: "
                f"{result.stderr.strip() or result.stdout.strip()}"
            )
            return False

        logger.info(f"[mirror-git] {destination.web_url}: up to date with {source.web_url}")
        return True
