# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Unit tests for github_api.py - GitHubAPI release repository methods."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from github.GithubException import GithubException, UnknownObjectException
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import ReadTimeout, RetryError

from semrel.errors import AssetCopyError, RepositoryError
from semrel.github_api import GitHubAPI
from semrel.releases import Release, ReleaseAsset
from tests.conftest import make_asset, make_git_release


def _release(release_id: int = 7, tag_name: str = "v1.0.0") -> Release:
    return Release(id=release_id, tag_name=tag_name, name=f"Release {tag_name}", body="")


class TestGitHubAPIInit:
    """Tests for GitHubAPI initialization and token handling."""

    def test_init_with_explicit_token_and_repo(self, mock_pygithub: dict[str, Any]) -> None:
        """GitHubAPI initializes with explicit token, repository, timeout and retries."""
        GitHubAPI(token="test-token", repository="owner/repo", timeout=10, retries=5)

        kwargs = mock_pygithub["github"].call_args.kwargs
        assert kwargs["auth"].token == "test-token"
        assert kwargs["timeout"] == 10
        assert kwargs["retry"] == 5
        mock_pygithub["github"].return_value.get_repo.assert_called_once_with("owner/repo")

    def test_init_with_env_vars(self, monkeypatch: pytest.MonkeyPatch, mock_pygithub: dict[str, Any]) -> None:
        """GitHubAPI uses environment variables when parameters not provided."""
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        monkeypatch.setenv("GITHUB_REPOSITORY", "env-owner/env-repo")

        GitHubAPI()

        assert mock_pygithub["github"].call_args.kwargs["auth"].token == "env-token"
        mock_pygithub["github"].return_value.get_repo.assert_called_once_with("env-owner/env-repo")

    def test_init_missing_token_raises_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """GitHubAPI raises ValueError when token is missing."""
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.setenv("GITHUB_REPOSITORY", "owner/repo")

        with pytest.raises(ValueError, match="GitHub token is required"):
            GitHubAPI()

    def test_init_missing_repository_raises_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """GitHubAPI raises ValueError when repository is missing."""
        monkeypatch.setenv("GITHUB_TOKEN", "test-token")
        monkeypatch.delenv("GITHUB_REPOSITORY", raising=False)

        with pytest.raises(ValueError, match="Repository is required"):
            GitHubAPI()

    def test_init_inaccessible_repository(self) -> None:
        """GitHubAPI raises RepositoryError when the repository cannot be fetched."""
        with patch("semrel.github_api.Github") as mock_github:
            mock_github.return_value.get_repo.side_effect = GithubException(404, "Not Found", None)

            with pytest.raises(RepositoryError, match="Cannot access repository"):
                GitHubAPI(token="test-token", repository="owner/missing")


class TestGetReleaseByTag:
    """Tests for GitHubAPI.get_release_by_tag method."""

    def test_returns_release(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].get_release.return_value = make_git_release(42, "v1.2.0", body="Notes")

        api = GitHubAPI(token="test-token", repository="owner/repo")
        release = api.get_release_by_tag("v1.2.0")

        assert release == Release(
            id=42,
            tag_name="v1.2.0",
            name="Release v1.2.0",
            body="Notes",
            prerelease=False,
            html_url="https://github.com/owner/repo/releases/tag/v1.2.0",
        )
        mock_pygithub["repo"].get_release.assert_called_once_with("v1.2.0")

    def test_missing_release_returns_none(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].get_release.side_effect = UnknownObjectException(404, "Not Found", None)

        api = GitHubAPI(token="test-token", repository="owner/repo")

        assert api.get_release_by_tag("v9") is None

    def test_other_errors_raise(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].get_release.side_effect = GithubException(500, "Server Error", None)

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError):
            api.get_release_by_tag("v1")


class TestCreateRelease:
    """Tests for GitHubAPI.create_release method."""

    def test_creates_published_release(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].create_git_release.return_value = make_git_release(3, "v1.1.0-beta.1", prerelease=True)

        api = GitHubAPI(token="test-token", repository="owner/repo")
        release = api.create_release("v1.1.0-beta.1", "Release v1.1.0-beta.1", "body", prerelease=True)

        mock_pygithub["repo"].create_git_release.assert_called_once_with(
            tag="v1.1.0-beta.1",
            name="Release v1.1.0-beta.1",
            message="body",
            draft=False,
            prerelease=True,
        )
        assert release.id == 3
        assert release.prerelease is True

    def test_api_failure(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].create_git_release.side_effect = GithubException(422, "Validation Failed", None)

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError, match="Failed to create release"):
            api.create_release("v1.0.0", "Release v1.0.0", "body")


class TestUpdateRelease:
    """Tests for GitHubAPI.update_release method."""

    def test_updates_release(self, mock_pygithub: dict[str, Any]) -> None:
        git_release = make_git_release(7, "v1.0.0")
        git_release.update_release.return_value = make_git_release(7, "v1.0.0", body="new body")
        mock_pygithub["repo"].get_release.return_value = git_release

        api = GitHubAPI(token="test-token", repository="owner/repo")
        updated = api.update_release(_release(), "Release v1.0.0", "new body")

        mock_pygithub["repo"].get_release.assert_called_once_with(7)
        git_release.update_release.assert_called_once_with(
            name="Release v1.0.0", message="new body", draft=False, prerelease=False
        )
        assert updated.body == "new body"

    def test_missing_release(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].get_release.side_effect = UnknownObjectException(404, "Not Found", None)

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError, match="no longer exists"):
            api.update_release(_release(), "name", "body")


class TestDeleteRelease:
    """Tests for GitHubAPI.delete_release method."""

    def test_deletes_release(self, mock_pygithub: dict[str, Any]) -> None:
        git_release = make_git_release(7, "v1")
        mock_pygithub["repo"].get_release.return_value = git_release

        api = GitHubAPI(token="test-token", repository="owner/repo")
        api.delete_release(_release(7, "v1"))

        git_release.delete_release.assert_called_once()

    def test_already_deleted_is_success(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].get_release.side_effect = UnknownObjectException(404, "Not Found", None)

        api = GitHubAPI(token="test-token", repository="owner/repo")
        api.delete_release(_release(7, "v1"))

    def test_delete_race_is_success(self, mock_pygithub: dict[str, Any]) -> None:
        git_release = make_git_release(7, "v1")
        git_release.delete_release.side_effect = UnknownObjectException(404, "Not Found", None)
        mock_pygithub["repo"].get_release.return_value = git_release

        api = GitHubAPI(token="test-token", repository="owner/repo")
        api.delete_release(_release(7, "v1"))

    def test_delete_failure(self, mock_pygithub: dict[str, Any]) -> None:
        git_release = make_git_release(7, "v1")
        git_release.delete_release.side_effect = GithubException(403, "Forbidden", None)
        mock_pygithub["repo"].get_release.return_value = git_release

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError, match="Failed to delete release"):
            api.delete_release(_release(7, "v1"))


class TestAssets:
    """Tests for GitHubAPI.list_assets and copy_asset methods."""

    def test_list_assets(self, mock_pygithub: dict[str, Any]) -> None:
        git_asset = MagicMock(id=11, content_type="application/zip", size=2048)
        git_asset.name = "dist.zip"
        git_release = make_git_release(7, "v1.0.0")
        git_release.get_assets.return_value = [git_asset]
        mock_pygithub["repo"].get_release.return_value = git_release

        api = GitHubAPI(token="test-token", repository="owner/repo")
        assets = api.list_assets(_release())

        assert assets == [ReleaseAsset(11, "dist.zip", "application/zip", 2048)]

    def test_copy_asset_downloads_and_uploads(self, mock_pygithub: dict[str, Any]) -> None:
        session = mock_pygithub["session"]
        session.get.return_value.content = b"binary"
        target = make_git_release(8, "v1")
        mock_pygithub["repo"].get_release.return_value = target

        api = GitHubAPI(token="test-token", repository="owner/repo", timeout=15)
        api.copy_asset(_release(7, "v1.0.0"), _release(8, "v1"), make_asset(11, "dist.zip"))

        session.get.assert_called_once_with(
            "https://api.github.com/repos/owner/repo/releases/assets/11",
            headers={"Accept": "application/octet-stream"},
            timeout=15,
        )
        mock_pygithub["repo"].get_release.assert_called_once_with(8)
        file_like, size, name = target.upload_asset_from_memory.call_args.args
        assert file_like.read() == b"binary"
        assert size == 6
        assert name == "dist.zip"
        assert target.upload_asset_from_memory.call_args.kwargs == {"content_type": "application/zip"}

    def test_copy_asset_download_failure(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["session"].get.side_effect = RequestsConnectionError("reset")

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(AssetCopyError, match="Failed to download asset 'dist.zip'"):
            api.copy_asset(_release(7), _release(8, "v1"), make_asset(11, "dist.zip"))

    def test_copy_asset_upload_failure(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["session"].get.return_value.content = b"binary"
        target = make_git_release(8, "v1")
        target.upload_asset_from_memory.side_effect = GithubException(422, "already_exists", None)
        mock_pygithub["repo"].get_release.return_value = target

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(AssetCopyError, match="Failed to upload asset"):
            api.copy_asset(_release(7), _release(8, "v1"), make_asset(11, "dist.zip"))


class TestTransportFailures:
    """Timeouts and connection failures surface as RepositoryError."""

    def test_get_release_timeout(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].get_release.side_effect = ReadTimeout("read timed out")

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError, match="read timed out"):
            api.get_release_by_tag("v1.0.0")

    def test_create_release_connection_error(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["repo"].create_git_release.side_effect = RequestsConnectionError("connection reset")

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError, match="Failed to create release"):
            api.create_release("v1.0.0", "Release v1.0.0", "body")

    def test_update_release_timeout(self, mock_pygithub: dict[str, Any]) -> None:
        git_release = make_git_release(7, "v1.0.0")
        git_release.update_release.side_effect = ReadTimeout("read timed out")
        mock_pygithub["repo"].get_release.return_value = git_release

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError, match="Failed to update release"):
            api.update_release(_release(), "Release v1.0.0", "body")

    def test_delete_release_retries_exhausted(self, mock_pygithub: dict[str, Any]) -> None:
        git_release = make_git_release(7, "v1")
        git_release.delete_release.side_effect = RetryError("max retries exceeded")
        mock_pygithub["repo"].get_release.return_value = git_release

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError, match="Failed to delete release"):
            api.delete_release(_release(7, "v1"))

    def test_list_assets_timeout(self, mock_pygithub: dict[str, Any]) -> None:
        git_release = make_git_release(7, "v1.0.0")
        git_release.get_assets.side_effect = ReadTimeout("read timed out")
        mock_pygithub["repo"].get_release.return_value = git_release

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(RepositoryError, match="Failed to list assets"):
            api.list_assets(_release())

    def test_upload_timeout_is_asset_copy_error(self, mock_pygithub: dict[str, Any]) -> None:
        mock_pygithub["session"].get.return_value.content = b"binary"
        target = make_git_release(8, "v1")
        target.upload_asset_from_memory.side_effect = ReadTimeout("read timed out")
        mock_pygithub["repo"].get_release.return_value = target

        api = GitHubAPI(token="test-token", repository="owner/repo")

        with pytest.raises(AssetCopyError, match="Failed to upload asset 'dist.zip'"):
            api.copy_asset(_release(7), _release(8, "v1"), make_asset(11, "dist.zip"))

    def test_repository_lookup_timeout(self) -> None:
        with patch("semrel.github_api.Github") as mock_github:
            mock_github.return_value.get_repo.side_effect = ReadTimeout("read timed out")

            with pytest.raises(RepositoryError, match="Cannot access repository"):
                GitHubAPI(token="test-token", repository="owner/repo")
