"""Shared pytest fixtures for the test suite."""

from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from semrel.orchestrator import ReleaseConfig
from semrel.releases import ReleaseAsset
from tests.fakes import InMemoryReleaseRepository, InMemoryTagRepository


def make_asset(asset_id: int, name: str) -> ReleaseAsset:
    """Create a release asset with the given id and name."""
    return ReleaseAsset(id=asset_id, name=name, content_type="application/zip", size=1024)


def make_git_release(release_id: int = 1, tag_name: str = "v1.0.0", **kwargs: Any) -> MagicMock:
    """Create a mock PyGithub GitRelease object.

    This is a shared helper for tests that patch PyGithub.
    """
    git_release = MagicMock()
    git_release.id = release_id
    git_release.tag_name = tag_name
    git_release.title = kwargs.get("title", f"Release {tag_name}")
    git_release.body = kwargs.get("body", "notes")
    git_release.prerelease = kwargs.get("prerelease", False)
    git_release.html_url = kwargs.get("html_url", f"https://github.com/owner/repo/releases/tag/{tag_name}")
    return git_release


@pytest.fixture
def tag_repo() -> InMemoryTagRepository:
    """Create an in-memory tag repository with no tags."""
    return InMemoryTagRepository()


@pytest.fixture
def release_repo() -> InMemoryReleaseRepository:
    """Create an in-memory release repository with no releases."""
    return InMemoryReleaseRepository()


@pytest.fixture
def release_config() -> ReleaseConfig:
    """Release configuration with major tracking and asset copying enabled."""
    return ReleaseConfig(
        repository_url="https://github.com/owner/repo",
        create_major_release=True,
        copy_assets=True,
    )


@pytest.fixture
def mock_github_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock GitHub environment variables."""
    env_vars = {
        "GITHUB_EVENT_NAME": "workflow_dispatch",
        "GITHUB_REF": "refs/heads/main",
        "GITHUB_SHA": "abc123def456",
        "GITHUB_REPOSITORY": "owner/repo",
        "GITHUB_SERVER_URL": "https://github.com",
        "GITHUB_OUTPUT": "/dev/null",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)
    return env_vars


@pytest.fixture
def mock_pygithub() -> Generator[dict[str, Any], None, None]:
    """Patch PyGithub and requests for GitHubAPI unit tests."""
    with patch("semrel.github_api.Github") as mock_github, patch("semrel.github_api.requests") as mock_requests:
        mock_repo = MagicMock()
        mock_github.return_value.get_repo.return_value = mock_repo
        yield {"github": mock_github, "repo": mock_repo, "session": mock_requests.Session.return_value}
