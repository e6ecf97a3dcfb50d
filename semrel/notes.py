# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Release notes for full-version and major-version releases."""

from __future__ import annotations

from collections.abc import Sequence

from semrel.releases import Release

__all__ = ["create_major_release_notes", "generate_release_notes"]

INITIAL_VERSION = "v0.0.0"


def generate_release_notes(
    previous_version: str,
    new_version: str,
    commits: Sequence[str] | None,
    repository_url: str = "",
    auto_generate: bool = True,
) -> str:
    """Build the body of a full-version release.

    Args:
        previous_version: Version being superseded ('v0.0.0' for a first release).
        new_version: Version being released.
        commits: Commit lines ('- subject (sha)'), or None if they could not be listed.
        repository_url: Web URL of the repository, used for the compare link.
        auto_generate: If False, return a one-line body.

    Examples:
        >>> generate_release_notes("v1.0.0", "v1.1.0", None, auto_generate=False)
        'Release v1.1.0'
    """
    if not auto_generate or commits is None:
        return f"Release {new_version}"

    notes = "## What's Changed\n\n" + "\n".join(commits)

    if previous_version != INITIAL_VERSION and repository_url:
        notes += f"\n\n**Full Changelog**: {repository_url}/compare/{previous_version}...{new_version}"

    return notes


def create_major_release_notes(major_version: str, full_version: str, release: Release) -> str:
    """Build the body of a major version release.

    The body names the full version it tracks and embeds that release's notes.
    """
    return f"""# {major_version}

This major version tag points to the latest stable release: **{full_version}**

## Latest Release: {release.name}

{release.body}

---
*This is an automatically generated major version release that tracks the latest stable release in the {major_version}.x series.*"""
