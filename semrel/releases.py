# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Release value types and the release repository contract.

References:
    - Releases: https://docs.github.com/en/rest/releases/releases
    - Release assets: https://docs.github.com/en/rest/releases/assets
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["Release", "ReleaseAsset", "ReleaseRepository"]


@dataclass(frozen=True)
class ReleaseAsset:
    """A binary file attached to a release."""

    id: int
    name: str
    content_type: str = "application/octet-stream"
    size: int = 0


@dataclass
class Release:
    """A release bound to a tag."""

    id: int
    tag_name: str
    name: str
    body: str
    prerelease: bool = False
    html_url: str = ""
    assets: list[ReleaseAsset] = field(default_factory=list)


class ReleaseRepository(Protocol):
    """Release operations required by the release orchestrator.

    ``get_release_by_tag`` returns None when no release exists, and
    ``delete_release`` treats an already-deleted release as success.
    Other failures raise ``RepositoryError``.
    """

    def get_release_by_tag(self, tag_name: str) -> Release | None: ...

    def create_release(self, tag_name: str, name: str, body: str, prerelease: bool = False) -> Release: ...

    def update_release(self, release: Release, name: str, body: str, prerelease: bool = False) -> Release: ...

    def delete_release(self, release: Release) -> None: ...

    def list_assets(self, release: Release) -> list[ReleaseAsset]: ...

    def copy_asset(self, source: Release, target: Release, asset: ReleaseAsset) -> None: ...
