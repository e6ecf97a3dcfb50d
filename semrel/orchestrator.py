# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Release orchestration.

Drives one release end to end:

    IDLE -> VERSION_RESOLVED -> TAGGED -> RELEASED -> (MAJOR_RECONCILED) -> DONE

Any failure before the full-version release exists moves the run to FAILED
and stops it. The tag step deletes before it creates, so a retried run on
the same commit is safe. Major version reconciliation runs last and its
failures are reported as warnings only, since the full-version release has
already been published by then.
"""

from __future__ import annotations

import enum
import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path

from semrel.calculator import calculate_next_version, increment_prerelease
from semrel.commands import resolve_project_commands, run_command
from semrel.errors import (
    MajorReconciliationError,
    ReleaseCreationError,
    RepositoryError,
    SemrelError,
    TagOperationError,
)
from semrel.git import TagRepository
from semrel.intent import ReleaseIntent
from semrel.manifest import update_manifest_version
from semrel.notes import create_major_release_notes, generate_release_notes
from semrel.releases import Release, ReleaseRepository
from semrel.version import Version, compare_versions, major_tag_name, parse_version, validate_version

logger = logging.getLogger(__name__)

__all__ = [
    "ReleaseConfig",
    "ReleaseOrchestrator",
    "ReleaseOutputs",
    "ReleaseResult",
    "ReleaseState",
]


class ReleaseState(str, enum.Enum):
    """Progress of a release run."""

    IDLE = "idle"
    VERSION_RESOLVED = "version-resolved"
    TAGGED = "tagged"
    RELEASED = "released"
    MAJOR_RECONCILED = "major-reconciled"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ReleaseConfig:
    """Settings for a release run, passed explicitly to the orchestrator."""

    prerelease_suffix: str = "beta"
    prerelease_number: str = "1"
    continue_prerelease: bool = False
    create_major_release: bool = True
    copy_assets: bool = True
    auto_generate_notes: bool = True
    repository_url: str = ""
    previous_version: str = ""
    dry_run: bool = False
    working_directory: Path = field(default_factory=lambda: Path("."))
    update_manifest: bool = False
    manifest_path: str = "package.json"
    package_manager: str = ""
    install_command: str = ""
    test_command: str = ""
    build_command: str = ""
    command_timeout: float | None = None
    git_user_name: str = ""
    git_user_email: str = ""


@dataclass
class ReleaseOutputs:
    """Values reported to the caller once established."""

    released: bool = False
    release_type: str = ""
    is_prerelease: bool = False
    version: str = ""
    previous_version: str = ""
    tag_name: str = ""
    release_url: str = ""
    release_id: int | None = None
    major_version: str = ""
    major_release_url: str = ""

    def as_dict(self) -> dict[str, str]:
        """Render outputs as action output names and string values."""
        values = {
            "released": str(self.released).lower(),
            "release-type": self.release_type,
        }
        if self.version:
            values["version"] = self.version
            values["previous-version"] = self.previous_version
            values["is-prerelease"] = str(self.is_prerelease).lower()
            values["tag-name"] = self.tag_name
        if self.release_id is not None:
            values["release-url"] = self.release_url
            values["release-id"] = str(self.release_id)
        if self.major_version:
            values["major-version"] = self.major_version
            values["major-release-url"] = self.major_release_url
        return values


@dataclass
class ReleaseResult:
    """Outcome of a release run."""

    outputs: ReleaseOutputs
    state: ReleaseState = ReleaseState.IDLE
    transitions: list[ReleaseState] = field(default_factory=lambda: [ReleaseState.IDLE])
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is not ReleaseState.FAILED


class ReleaseOrchestrator:
    """Runs the resolve, tag, release and reconcile sequence.

    Args:
        tags: Tag repository used for tag discovery and mutation.
        releases: Release repository used to publish releases and assets.
        config: Run settings.
    """

    def __init__(
        self,
        tags: TagRepository,
        releases: ReleaseRepository,
        config: ReleaseConfig | None = None,
    ) -> None:
        self._tags = tags
        self._releases = releases
        self._config = config or ReleaseConfig()
        self._result = ReleaseResult(outputs=ReleaseOutputs())
        # Tag the latest version was read from, kept verbatim for git ranges.
        self._latest_tag: str | None = None

    @property
    def state(self) -> ReleaseState:
        return self._result.state

    def _transition(self, state: ReleaseState) -> None:
        logger.debug("Release state: %s -> %s", self._result.state.value, state.value)
        self._result.state = state
        self._result.transitions.append(state)

    def _fail(self, error: SemrelError) -> ReleaseResult:
        logger.error("Release failed: %s", error)
        self._result.error = str(error)
        self._transition(ReleaseState.FAILED)
        return self._result

    def _warn(self, message: str) -> None:
        logger.warning("%s", message)
        self._result.warnings.append(message)

    def run(self, intent: ReleaseIntent) -> ReleaseResult:
        """Run a release for the given intent.

        Returns:
            ReleaseResult with the final state, outputs established so far,
            the failure reason (if any) and non-fatal warnings.
        """
        self._result = ReleaseResult(outputs=ReleaseOutputs())
        outputs = self._result.outputs
        outputs.release_type = getattr(intent.release_type, "value", str(intent.release_type))

        if not intent.should_release:
            logger.info("No release requested. Skipping release creation.")
            self._transition(ReleaseState.DONE)
            return self._result

        logger.info("Release type: %s%s", outputs.release_type, " (prerelease)" if intent.is_prerelease else "")

        try:
            latest = self.resolve_latest_version()
            new_version = self.compute_version(latest, intent)
        except SemrelError as e:
            return self._fail(e)

        tag_name = str(new_version)
        outputs.previous_version = str(latest)
        outputs.version = tag_name
        outputs.tag_name = tag_name
        outputs.is_prerelease = new_version.is_prerelease
        self._transition(ReleaseState.VERSION_RESOLVED)
        logger.info("Latest version: %s", latest)
        logger.info("New version: %s", new_version)

        if self._config.dry_run:
            logger.info("[DRY-RUN] Would create tag '%s' and release 'Release %s'", tag_name, tag_name)
            if self._config.create_major_release and not new_version.is_prerelease:
                logger.info("[DRY-RUN] Would update major version tag '%s'", major_tag_name(new_version))
            self._transition(ReleaseState.DONE)
            return self._result

        try:
            self.prepare_commit(new_version)
            self.tag_version(tag_name)
            self._transition(ReleaseState.TAGGED)
            release = self.publish_release(latest, new_version)
        except SemrelError as e:
            return self._fail(e)

        outputs.released = True
        outputs.release_url = release.html_url
        outputs.release_id = release.id
        self._transition(ReleaseState.RELEASED)
        logger.info("Created release: %s", release.html_url)

        if self._config.create_major_release and not new_version.is_prerelease:
            try:
                major_release = self.reconcile_major(new_version, release)
            except MajorReconciliationError as e:
                self._warn(str(e))
            else:
                outputs.major_version = major_release.tag_name
                outputs.major_release_url = major_release.html_url
                self._transition(ReleaseState.MAJOR_RECONCILED)
                logger.info("Created major version release: %s", major_release.html_url)

        self._transition(ReleaseState.DONE)
        logger.info("Semantic release completed successfully")
        return self._result

    def resolve_latest_version(self) -> Version:
        """Find the highest full-version tag, or v0.0.0 if there is none.

        A configured previous version overrides tag discovery and must be
        strictly valid.

        Raises:
            InvalidVersionFormatError: If the configured previous version is malformed.
            RepositoryError: If tags cannot be listed.
        """
        self._latest_tag = None
        if self._config.previous_version:
            validate_version(self._config.previous_version)
            latest = parse_version(self._config.previous_version)
            self._latest_tag = str(latest)
            return latest

        try:
            self._tags.fetch_tags()
        except RepositoryError as e:
            self._warn(f"Could not fetch remote tags, using local tags: {e}")

        tags = self._tags.list_full_version_tags()
        if not tags:
            logger.info("No previous tags found, starting from v0.0.0")
            return Version()

        self._latest_tag = max(tags, key=functools.cmp_to_key(compare_versions))
        return parse_version(self._latest_tag)

    def compute_version(self, latest: Version, intent: ReleaseIntent) -> Version:
        """Compute the version to release.

        Raises:
            InvalidIntentError: If the release type is not major, minor or patch.
        """
        config = self._config
        if config.continue_prerelease and intent.is_prerelease and latest.is_prerelease:
            logger.info("Continuing prerelease stream from %s", latest)
            return parse_version(increment_prerelease(str(latest), config.prerelease_suffix, config.prerelease_number))

        return calculate_next_version(
            latest,
            intent.release_type,
            intent.is_prerelease,
            config.prerelease_suffix,
            config.prerelease_number,
        )

    def prepare_commit(self, version: Version) -> None:
        """Update the manifest, run project commands and commit the result.

        Raises:
            CommandError: If an install, test or build command fails.
            RepositoryError: If pending changes cannot be committed.
        """
        config = self._config
        workdir = config.working_directory

        if config.update_manifest:
            try:
                update_manifest_version(workdir / config.manifest_path, str(version))
            except (OSError, ValueError) as e:
                self._warn(f"Failed to update manifest: {e}")

        commands = resolve_project_commands(
            workdir,
            config.package_manager,
            config.install_command,
            config.test_command,
            config.build_command,
        )
        run_command("install", commands.install, workdir, config.command_timeout)
        run_command("test", commands.test, workdir, config.command_timeout)
        run_command("build", commands.build, workdir, config.command_timeout)

        if config.git_user_name and config.git_user_email:
            self._tags.configure_identity(config.git_user_name, config.git_user_email)
        self._tags.commit_pending_changes(f"chore: bump version to {version}")

    def tag_version(self, tag_name: str) -> None:
        """Point the full-version tag at the current commit and push it.

        Raises:
            TagOperationError: If any tag or push operation fails.
        """
        logger.info("Creating and pushing tag: %s", tag_name)
        try:
            self._tags.delete_tag(tag_name)
            self._tags.create_tag(tag_name, f"Release {tag_name}")
            self._tags.push_pending_commits()
            self._tags.push_tag(tag_name)
        except RepositoryError as e:
            raise TagOperationError(f"Failed to create tag '{tag_name}': {e}") from e

    def release_notes(self, latest: Version, new_version: Version) -> str:
        """Generate the body of the full-version release."""
        previous_tag = self._latest_tag or str(latest)
        commits: list[str] | None = None
        if self._config.auto_generate_notes:
            since = None if latest == Version() else previous_tag
            try:
                commits = self._tags.commit_subjects(since)
            except RepositoryError as e:
                self._warn(f"Failed to generate detailed release notes: {e}")

        return generate_release_notes(
            previous_tag,
            str(new_version),
            commits,
            self._config.repository_url,
            self._config.auto_generate_notes,
        )

    def publish_release(self, latest: Version, new_version: Version) -> Release:
        """Create the release for the full-version tag.

        An existing release for the tag, left behind by an earlier attempt,
        is updated in place.

        Raises:
            ReleaseCreationError: If the release cannot be created or updated.
        """
        tag_name = str(new_version)
        title = f"Release {tag_name}"
        body = self.release_notes(latest, new_version)

        try:
            existing = self._releases.get_release_by_tag(tag_name)
            if existing is not None:
                logger.info("Release for '%s' already exists, updating it", tag_name)
                return self._releases.update_release(existing, title, body, new_version.is_prerelease)
            return self._releases.create_release(tag_name, title, body, new_version.is_prerelease)
        except RepositoryError as e:
            raise ReleaseCreationError(f"Failed to create release '{title}': {e}") from e

    def reconcile_major(self, version: Version, release: Release) -> Release:
        """Repoint the major version tag and recreate its release.

        Returns:
            The new major version release.

        Raises:
            MajorReconciliationError: If the tag or release cannot be reconciled.
        """
        major_version = major_tag_name(version)
        logger.info("Updating major version tag %s to point to %s", major_version, version)

        try:
            self._tags.delete_tag(major_version)
            self._tags.create_tag(major_version, f"Major version tag pointing to {version}")
            self._tags.push_tag(major_version)

            existing = self._releases.get_release_by_tag(major_version)
            if existing is not None:
                logger.info("Deleting existing major release: %s", major_version)
                self._releases.delete_release(existing)

            body = create_major_release_notes(major_version, str(version), release)
            major_release = self._releases.create_release(major_version, major_version, body, prerelease=False)
        except RepositoryError as e:
            raise MajorReconciliationError(f"Failed to create major version release {major_version}: {e}") from e

        if self._config.copy_assets:
            self.copy_assets(release, major_release)

        return major_release

    def copy_assets(self, source: Release, target: Release) -> list[str]:
        """Copy every asset of source to target, skipping assets that fail.

        Returns:
            Names of the assets that were copied.
        """
        try:
            assets = self._releases.list_assets(source)
        except RepositoryError as e:
            self._warn(f"Failed to copy release assets: {e}")
            return []

        if not assets:
            logger.info("No assets to copy from source release")
            return []

        logger.info("Copying %d assets to major release", len(assets))
        copied = []
        for asset in assets:
            try:
                self._releases.copy_asset(source, target, asset)
            except RepositoryError as e:
                self._warn(f"Failed to copy asset {asset.name}: {e}")
                continue
            copied.append(asset.name)
            logger.info("Copied asset: %s", asset.name)
        return copied
