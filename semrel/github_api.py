# Copyright (c) 2026 Mark Ferrell. MIT License.
"""GitHub API wrapper for release and release asset operations.

References:
    - GitHub REST API: https://docs.github.com/en/rest
    - PyGithub Documentation: https://pygithub.readthedocs.io/
"""

from __future__ import annotations

import io
import logging
import os
from typing import TYPE_CHECKING

import requests
from github import Auth, Github
from github.GithubException import GithubException, UnknownObjectException
from requests.exceptions import RequestException

from semrel.errors import AssetCopyError, RepositoryError
from semrel.releases import Release, ReleaseAsset

if TYPE_CHECKING:
    from github.GitRelease import GitRelease

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30
DEFAULT_RETRIES = 3

# PyGithub lets transport failures such as read timeouts escape as requests exceptions.
API_ERRORS = (GithubException, RequestException)


def _to_release(git_release: GitRelease) -> Release:
    return Release(
        id=git_release.id,
        tag_name=git_release.tag_name,
        name=git_release.title or "",
        body=git_release.body or "",
        prerelease=bool(git_release.prerelease),
        html_url=git_release.html_url or "",
    )


class GitHubAPI:
    """Wrapper around PyGithub implementing the release repository.

    Handles authentication via token input, defaulting to GITHUB_TOKEN
    environment variable if not provided. Every request is bounded by
    ``timeout`` seconds and retried by PyGithub on transient failures.

    References:
        - Authentication: https://docs.github.com/en/rest/authentication
        - GITHUB_TOKEN: https://docs.github.com/en/actions/security-for-github-actions/security-guides/automatic-token-authentication
    """

    def __init__(
        self,
        token: str | None = None,
        repository: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        base_url: str = DEFAULT_API_URL,
    ) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub token for authentication. Defaults to GITHUB_TOKEN env var.
            repository: Repository in 'owner/repo' format. Defaults to GITHUB_REPOSITORY env var.
            timeout: Per-request timeout in seconds.
            retries: Number of retries for transient failures.
            base_url: REST API root (override for GitHub Enterprise).

        References:
            - Get a repository: https://docs.github.com/en/rest/repos/repos#get-a-repository
        """
        self._token = token or os.environ.get("GITHUB_TOKEN", "")
        self._repository = repository or os.environ.get("GITHUB_REPOSITORY", "")
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

        if not self._token:
            raise ValueError("GitHub token is required. Set GITHUB_TOKEN or pass token parameter.")
        if not self._repository:
            raise ValueError("Repository is required. Set GITHUB_REPOSITORY or pass repository parameter.")

        self._github = Github(
            auth=Auth.Token(self._token),
            base_url=self._base_url,
            timeout=timeout,
            retry=retries,
        )
        try:
            self._repo = self._github.get_repo(self._repository)
        except API_ERRORS as e:
            raise RepositoryError(f"Cannot access repository '{self._repository}': {e}") from e

        self._session = requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {self._token}"})

    def _get_git_release(self, release_id: int | str) -> GitRelease | None:
        try:
            return self._repo.get_release(release_id)
        except UnknownObjectException:
            return None
        except API_ERRORS as e:
            raise RepositoryError(f"Failed to get release '{release_id}': {e}") from e

    def get_release_by_tag(self, tag_name: str) -> Release | None:
        """Get the release bound to a tag.

        Returns:
            The Release, or None if no release exists for the tag.

        References:
            - Get a release by tag name: https://docs.github.com/en/rest/releases/releases#get-a-release-by-tag-name
        """
        git_release = self._get_git_release(tag_name)
        if git_release is None:
            return None
        return _to_release(git_release)

    def create_release(self, tag_name: str, name: str, body: str, prerelease: bool = False) -> Release:
        """Create a published (non-draft) release for an existing tag.

        Raises:
            RepositoryError: If release creation fails.

        References:
            - Create a release: https://docs.github.com/en/rest/releases/releases#create-a-release
        """
        logger.info("Creating release: %s", name)
        try:
            git_release = self._repo.create_git_release(
                tag=tag_name,
                name=name,
                message=body,
                draft=False,
                prerelease=prerelease,
            )
        except API_ERRORS as e:
            raise RepositoryError(f"Failed to create release '{name}': {e}") from e
        return _to_release(git_release)

    def update_release(self, release: Release, name: str, body: str, prerelease: bool = False) -> Release:
        """Update the title, body and prerelease flag of a release.

        References:
            - Update a release: https://docs.github.com/en/rest/releases/releases#update-a-release
        """
        git_release = self._get_git_release(release.id)
        if git_release is None:
            raise RepositoryError(f"Release {release.id} ({release.tag_name}) no longer exists")
        try:
            updated = git_release.update_release(name=name, message=body, draft=False, prerelease=prerelease)
        except API_ERRORS as e:
            raise RepositoryError(f"Failed to update release '{release.tag_name}': {e}") from e
        return _to_release(updated)

    def delete_release(self, release: Release) -> None:
        """Delete a release. A release that is already gone is not an error.

        References:
            - Delete a release: https://docs.github.com/en/rest/releases/releases#delete-a-release
        """
        git_release = self._get_git_release(release.id)
        if git_release is None:
            logger.debug("Release %s already deleted", release.id)
            return
        try:
            git_release.delete_release()
        except UnknownObjectException:
            logger.debug("Release %s already deleted", release.id)
        except API_ERRORS as e:
            raise RepositoryError(f"Failed to delete release '{release.tag_name}': {e}") from e

    def list_assets(self, release: Release) -> list[ReleaseAsset]:
        """List the assets attached to a release.

        References:
            - List release assets: https://docs.github.com/en/rest/releases/assets#list-release-assets
        """
        git_release = self._get_git_release(release.id)
        if git_release is None:
            raise RepositoryError(f"Release {release.id} ({release.tag_name}) not found")
        try:
            return [
                ReleaseAsset(
                    id=asset.id,
                    name=asset.name,
                    content_type=asset.content_type or "application/octet-stream",
                    size=asset.size,
                )
                for asset in git_release.get_assets()
            ]
        except API_ERRORS as e:
            raise RepositoryError(f"Failed to list assets of '{release.tag_name}': {e}") from e

    def download_asset(self, asset: ReleaseAsset) -> bytes:
        """Download the binary content of a release asset.

        References:
            - Get a release asset: https://docs.github.com/en/rest/releases/assets#get-a-release-asset
        """
        url = f"{self._base_url}/repos/{self._repository}/releases/assets/{asset.id}"
        try:
            response = self._session.get(
                url,
                headers={"Accept": "application/octet-stream"},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except RequestException as e:
            raise AssetCopyError(f"Failed to download asset '{asset.name}': {e}") from e
        return response.content

    def copy_asset(self, source: Release, target: Release, asset: ReleaseAsset) -> None:
        """Copy one asset from the source release to the target release.

        Raises:
            AssetCopyError: If download or upload fails.

        References:
            - Upload a release asset: https://docs.github.com/en/rest/releases/assets#upload-a-release-asset
        """
        logger.debug("Copying asset '%s' from %s to %s", asset.name, source.tag_name, target.tag_name)
        data = self.download_asset(asset)

        try:
            git_release = self._get_git_release(target.id)
        except RepositoryError as e:
            raise AssetCopyError(str(e)) from e
        if git_release is None:
            raise AssetCopyError(f"Target release {target.tag_name} not found")

        try:
            git_release.upload_asset_from_memory(
                io.BytesIO(data),
                len(data),
                asset.name,
                content_type=asset.content_type,
            )
        except API_ERRORS as e:
            raise AssetCopyError(f"Failed to upload asset '{asset.name}': {e}") from e
