# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Tag repository backed by the git command line.

Every call runs ``git`` in an explicit working directory with a timeout.
Failures, including timeouts, are raised as ``RepositoryError``.

References:
    - git-tag: https://git-scm.com/docs/git-tag
    - git-push: https://git-scm.com/docs/git-push
    - git-ls-remote: https://git-scm.com/docs/git-ls-remote
"""

from __future__ import annotations

import functools
import logging
import subprocess
from pathlib import Path
from typing import Protocol

from semrel.errors import RepositoryError
from semrel.version import compare_versions, is_full_version_tag

logger = logging.getLogger(__name__)

__all__ = ["GitRepository", "TagRepository"]

DEFAULT_TIMEOUT = 60.0


class TagRepository(Protocol):
    """Tag operations required by the release orchestrator."""

    def fetch_tags(self) -> None: ...

    def list_full_version_tags(self) -> list[str]: ...

    def tag_exists(self, tag_name: str) -> bool: ...

    def create_tag(self, tag_name: str, message: str) -> None: ...

    def delete_tag(self, tag_name: str) -> None: ...

    def push_tag(self, tag_name: str) -> None: ...

    def push_pending_commits(self) -> None: ...

    def commit_subjects(self, since: str | None = None) -> list[str]: ...

    def configure_identity(self, name: str, email: str) -> None: ...

    def commit_pending_changes(self, message: str) -> bool: ...


class GitRepository:
    """Tag repository implementation that shells out to git.

    Tags are created on HEAD of the working copy at ``path``.
    """

    def __init__(
        self,
        path: Path | str = ".",
        remote: str = "origin",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._path = Path(path)
        self._remote = remote
        self._timeout = timeout

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        cmd = ["git", *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(self._path),
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise RepositoryError(f"'{' '.join(cmd)}' timed out after {e.timeout}s") from e
        except OSError as e:
            raise RepositoryError(f"Failed to run '{' '.join(cmd)}': {e}") from e

        if check and proc.returncode != 0:
            raise RepositoryError(f"'{' '.join(cmd)}' failed ({proc.returncode}): {proc.stderr.strip()}")
        return proc

    def fetch_tags(self) -> None:
        """Fetch tags from the remote, overwriting moved local tags."""
        self._run("fetch", "--tags", "--force", self._remote)

    def list_full_version_tags(self) -> list[str]:
        """List full-version tags (vX.Y.Z...) sorted by version, highest first.

        Major-tracking tags (vX) are excluded.
        """
        proc = self._run("tag", "--list", "v*")
        tags = [line.strip() for line in proc.stdout.splitlines() if is_full_version_tag(line.strip())]
        return sorted(tags, key=functools.cmp_to_key(compare_versions), reverse=True)

    def tag_exists(self, tag_name: str) -> bool:
        """Check if a tag exists locally."""
        proc = self._run("rev-parse", "--quiet", "--verify", f"refs/tags/{tag_name}", check=False)
        return proc.returncode == 0

    def remote_tag_exists(self, tag_name: str) -> bool:
        """Check if a tag exists on the remote."""
        proc = self._run("ls-remote", "--tags", self._remote, f"refs/tags/{tag_name}")
        return bool(proc.stdout.strip())

    def create_tag(self, tag_name: str, message: str) -> None:
        """Create an annotated tag on HEAD."""
        logger.info("Creating tag '%s'", tag_name)
        self._run("tag", "--annotate", tag_name, "--message", message)

    def delete_tag(self, tag_name: str) -> None:
        """Delete a tag locally and on the remote. Missing tags are ignored."""
        if self.tag_exists(tag_name):
            logger.debug("Deleting local tag '%s'", tag_name)
            self._run("tag", "--delete", tag_name)

        if self.remote_tag_exists(tag_name):
            logger.debug("Deleting remote tag '%s'", tag_name)
            self._run("push", self._remote, f":refs/tags/{tag_name}")

    def push_tag(self, tag_name: str) -> None:
        """Push a single tag to the remote."""
        self._run("push", self._remote, f"refs/tags/{tag_name}")

    def push_pending_commits(self) -> None:
        """Push HEAD so tagged commits exist on the remote."""
        self._run("push", self._remote, "HEAD")

    def head_commit(self) -> str:
        """Return the SHA of HEAD."""
        return self._run("rev-parse", "HEAD").stdout.strip()

    def commit_subjects(self, since: str | None = None) -> list[str]:
        """List commits as '- subject (short sha)' lines, newest first.

        Args:
            since: Tag to start from (exclusive). None lists all of HEAD's history.
        """
        revision = f"{since}..HEAD" if since else "HEAD"
        proc = self._run("log", "--pretty=format:- %s (%h)", revision)
        return [line for line in proc.stdout.splitlines() if line.strip()]

    def configure_identity(self, name: str, email: str) -> None:
        """Set the committer identity for this repository."""
        self._run("config", "--local", "user.name", name)
        self._run("config", "--local", "user.email", email)

    def commit_pending_changes(self, message: str) -> bool:
        """Commit all working tree changes.

        Returns:
            True if a commit was created, False if the tree was clean.
        """
        status = self._run("status", "--porcelain")
        if not status.stdout.strip():
            logger.info("No changes to commit")
            return False

        logger.info("Committing version changes")
        self._run("add", "--all")
        self._run("commit", "--message", message)
        return True
