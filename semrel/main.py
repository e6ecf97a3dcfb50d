# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Main entry point for the Semantic Release Action.

This module reads action inputs and the GitHub event context, resolves the
release intent and runs the release orchestrator.

References:
    - GitHub Actions Environment Variables:
      https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/store-information-in-variables#default-environment-variables
    - GitHub Actions Outputs:
      https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/passing-information-between-jobs#setting-an-output-parameter
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from semrel.commands import PACKAGE_MANAGERS
from semrel.errors import InvalidIntentError, InvalidVersionFormatError, RepositoryError
from semrel.git import GitRepository
from semrel.github_api import GitHubAPI
from semrel.intent import (
    AUTO_DETECT,
    LabelConfig,
    ReleaseIntent,
    detect_trigger_mode,
    pull_request_labels,
    resolve_intent,
)
from semrel.orchestrator import ReleaseConfig, ReleaseOrchestrator, ReleaseOutputs
from semrel.version import validate_version

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


@dataclass
class ActionInputs:
    """Parsed action inputs from CLI arguments or environment variables."""

    token: str
    debug: bool = False
    dry_run: bool = False
    trigger_mode: str = AUTO_DETECT
    labels: LabelConfig = field(default_factory=LabelConfig)
    release_type: str = ""
    is_prerelease: bool = False
    prerelease_suffix: str = "beta"
    prerelease_number: str = "1"
    continue_prerelease: bool = False
    create_major_release: bool = True
    copy_assets: bool = True
    auto_generate_notes: bool = True
    update_manifest: bool = False
    manifest_path: str = "package.json"
    working_directory: str = "."
    package_manager: str = "npm"
    install_command: str = ""
    test_command: str = ""
    build_command: str = ""
    git_user_name: str = "github-actions[bot]"
    git_user_email: str = "github-actions[bot]@users.noreply.github.com"
    previous_version: str = ""
    timeout: float = 60.0
    command_timeout: float = 1800.0

    def to_release_config(self, repository_url: str = "") -> ReleaseConfig:
        """Build the orchestrator configuration for these inputs."""
        return ReleaseConfig(
            prerelease_suffix=self.prerelease_suffix,
            prerelease_number=self.prerelease_number,
            continue_prerelease=self.continue_prerelease,
            create_major_release=self.create_major_release,
            copy_assets=self.copy_assets,
            auto_generate_notes=self.auto_generate_notes,
            repository_url=repository_url,
            previous_version=self.previous_version,
            dry_run=self.dry_run,
            working_directory=Path(self.working_directory),
            update_manifest=self.update_manifest,
            manifest_path=self.manifest_path,
            package_manager=self.package_manager,
            install_command=self.install_command,
            test_command=self.test_command,
            build_command=self.build_command,
            command_timeout=self.command_timeout,
            git_user_name=self.git_user_name,
            git_user_email=self.git_user_email,
        )


@dataclass
class GitHubContext:
    """GitHub event context from environment variables."""

    event_name: str
    ref: str
    sha: str
    repository: str
    server_url: str = "https://github.com"
    api_url: str = "https://api.github.com"
    payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def repository_url(self) -> str:
        if not self.repository:
            return ""
        return f"{self.server_url.rstrip('/')}/{self.repository}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Semantic Release Action - label-driven versioning and GitHub releases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables (used as defaults when CLI args not provided):
  INPUT_GITHUB_TOKEN, GITHUB_TOKEN   GitHub token for authentication
  INPUT_<OPTION>                     Any option below, upper-cased with '-' as '_'

Examples:
  # Run with environment variables (GitHub Actions mode)
  python -m semrel.main

  # Run with CLI arguments (local testing)
  python -m semrel.main --token ghp_xxx --trigger-mode manual --release-type minor --dry-run
        """,
    )

    def flag(name: str, default: str, help_text: str) -> None:
        env_name = "INPUT_" + name.upper().replace("-", "_")
        parser.add_argument(
            f"--{name}",
            action=argparse.BooleanOptionalAction,
            default=_env_flag(env_name, default),
            help=f"{help_text} (env: {env_name})",
        )

    def option(name: str, default: str, help_text: str) -> None:
        env_name = "INPUT_" + name.upper().replace("-", "_")
        parser.add_argument(
            f"--{name}",
            default=os.environ.get(env_name, default),
            help=f"{help_text} (env: {env_name}, default: {default!r})",
        )

    parser.add_argument(
        "--token",
        default=os.environ.get("INPUT_GITHUB_TOKEN", os.environ.get("GITHUB_TOKEN", "")),
        help="GitHub token for authentication (default: from INPUT_GITHUB_TOKEN or GITHUB_TOKEN env)",
    )
    flag("debug", "false", "Enable debug logging")
    flag("dry-run", "false", "Compute the next version without tagging or releasing")
    option("trigger-mode", AUTO_DETECT, "pr-merge, manual, workflow-call or auto-detect")
    option("major-label", "release:major", "PR label requesting a major release")
    option("minor-label", "release:minor", "PR label requesting a minor release")
    option("patch-label", "release:patch", "PR label requesting a patch release")
    option("prerelease-label", "prerelease", "PR label marking the release as a prerelease")
    option("release-type", "", "Release type for manual or workflow_call runs")
    flag("is-prerelease", "false", "Mark a manual or workflow_call release as a prerelease")
    option("prerelease-suffix", "beta", "Prerelease identifier")
    option("prerelease-number", "1", "Prerelease counter for a new prerelease")
    flag("continue-prerelease", "false", "Bump the counter of an existing prerelease instead of the version")
    flag("create-major-release", "true", "Maintain the vX major version tag and release")
    flag("copy-assets", "true", "Copy release assets to the major version release")
    flag("auto-generate-notes", "true", "Generate release notes from the commit log")
    flag("update-manifest", "false", "Write the new version into the manifest file")
    option("manifest-path", "package.json", "Manifest file, relative to the working directory")
    option("working-directory", ".", "Directory of the repository to release")
    option("package-manager", "npm", "npm, yarn or pnpm, used to derive commands from package.json")
    option("install-command", "", "Dependency installation command")
    option("test-command", "", "Test command run before tagging")
    option("build-command", "", "Build command run before tagging")
    option("git-user-name", "github-actions[bot]", "Committer name for version commits")
    option("git-user-email", "github-actions[bot]@users.noreply.github.com", "Committer email")
    option("previous-version", "", "Override the latest version instead of reading tags")
    option("timeout", "60", "Timeout in seconds for each git and GitHub call")
    option("command-timeout", "1800", "Timeout in seconds for each install, test and build command")
    return parser


def _parse_seconds(name: str, value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        seconds = 0.0
    if not seconds > 0:
        logger.error("Invalid %s '%s': must be a positive number of seconds", name, value)
        sys.exit(1)
    return seconds


def parse_inputs(args: list[str] | None = None) -> ActionInputs:
    """Parse action inputs from CLI arguments or environment variables.

    CLI arguments take precedence over environment variables.
    When run as a GitHub Action, environment variables are used.

    Args:
        args: Optional list of CLI arguments. If None, uses environment
              variables only (GitHub Actions mode).

    Returns:
        ActionInputs with parsed values.
    """
    parsed = _build_parser().parse_args(args if args is not None else [])

    if parsed.previous_version:
        try:
            validate_version(parsed.previous_version)
        except InvalidVersionFormatError as e:
            logger.error("Invalid previous-version: %s", e)
            sys.exit(1)

    if parsed.package_manager not in PACKAGE_MANAGERS:
        logger.error(
            "Invalid package-manager '%s': must be one of %s", parsed.package_manager, ", ".join(PACKAGE_MANAGERS)
        )
        sys.exit(1)

    timeout = _parse_seconds("timeout", parsed.timeout)
    command_timeout = _parse_seconds("command-timeout", parsed.command_timeout)

    return ActionInputs(
        token=parsed.token,
        debug=parsed.debug,
        dry_run=parsed.dry_run,
        trigger_mode=parsed.trigger_mode,
        labels=LabelConfig(
            major=parsed.major_label,
            minor=parsed.minor_label,
            patch=parsed.patch_label,
            prerelease=parsed.prerelease_label,
        ),
        release_type=parsed.release_type,
        is_prerelease=parsed.is_prerelease,
        prerelease_suffix=parsed.prerelease_suffix,
        prerelease_number=parsed.prerelease_number,
        continue_prerelease=parsed.continue_prerelease,
        create_major_release=parsed.create_major_release,
        copy_assets=parsed.copy_assets,
        auto_generate_notes=parsed.auto_generate_notes,
        update_manifest=parsed.update_manifest,
        manifest_path=parsed.manifest_path,
        working_directory=parsed.working_directory,
        package_manager=parsed.package_manager,
        install_command=parsed.install_command,
        test_command=parsed.test_command,
        build_command=parsed.build_command,
        git_user_name=parsed.git_user_name,
        git_user_email=parsed.git_user_email,
        previous_version=parsed.previous_version,
        timeout=timeout,
        command_timeout=command_timeout,
    )


def load_event_payload(event_path: str) -> dict[str, Any]:
    """Load the webhook payload written by the runner, or {} if unavailable."""
    if not event_path:
        return {}
    try:
        with open(event_path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read event payload %s: %s", event_path, e)
        return {}
    return payload if isinstance(payload, dict) else {}


def parse_context() -> GitHubContext:
    """Parse GitHub context from environment variables.

    References:
        - https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/store-information-in-variables#default-environment-variables
    """
    return GitHubContext(
        event_name=os.environ.get("GITHUB_EVENT_NAME", ""),
        ref=os.environ.get("GITHUB_REF", ""),
        sha=os.environ.get("GITHUB_SHA", ""),
        repository=os.environ.get("GITHUB_REPOSITORY", ""),
        server_url=os.environ.get("GITHUB_SERVER_URL", "https://github.com"),
        api_url=os.environ.get("GITHUB_API_URL", "https://api.github.com"),
        payload=load_event_payload(os.environ.get("GITHUB_EVENT_PATH", "")),
    )


def set_outputs(outputs: ReleaseOutputs) -> None:
    """Write action outputs to GITHUB_OUTPUT file.

    References:
        - https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/passing-information-between-jobs#setting-an-output-parameter
    """
    values = outputs.as_dict()
    output_file = os.environ.get("GITHUB_OUTPUT", "")
    if not output_file:
        logger.warning("GITHUB_OUTPUT not set, outputs will not be written")
        return

    with open(output_file, "a", encoding="utf-8") as f:
        for key, value in values.items():
            f.write(f"{key}={value}\n")

    logger.info("Set outputs: released=%s, version=%s", values["released"], values.get("version", ""))


def configure_logging(debug: bool) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def resolve_release_intent(context: GitHubContext, inputs: ActionInputs) -> ReleaseIntent:
    """Classify the trigger and resolve the release intent.

    Raises:
        InvalidIntentError: If a manual release type is not recognized.
    """
    trigger_mode = detect_trigger_mode(inputs.trigger_mode, context.event_name, context.payload, context.ref)
    logger.info("Detected trigger mode: %s", trigger_mode)
    return resolve_intent(
        trigger_mode,
        labels=pull_request_labels(context.payload),
        label_config=inputs.labels,
        release_type=inputs.release_type,
        is_prerelease=inputs.is_prerelease,
    )


def main(args: list[str] | None = None) -> None:
    """Main entry point for the action."""
    inputs = parse_inputs(sys.argv[1:] if args is None else args)
    configure_logging(inputs.debug)

    context = parse_context()
    logger.debug("Event: %s, Ref: %s, SHA: %s", context.event_name, context.ref, context.sha[:7])

    try:
        intent = resolve_release_intent(context, inputs)
    except InvalidIntentError as e:
        logger.error("%s", e)
        sys.exit(1)

    if not intent.should_release:
        logger.info("No release labels found. Skipping release creation.")
        set_outputs(ReleaseOutputs(released=False, release_type=intent.release_type.value))
        return

    if not inputs.token:
        logger.error("GitHub token is required. Set INPUT_GITHUB_TOKEN or GITHUB_TOKEN.")
        sys.exit(1)

    try:
        releases = GitHubAPI(
            token=inputs.token,
            repository=context.repository,
            timeout=inputs.timeout,
            base_url=context.api_url,
        )
    except (ValueError, RepositoryError) as e:
        logger.error("Failed to initialize GitHub API: %s", e)
        sys.exit(1)

    tags = GitRepository(inputs.working_directory, timeout=inputs.timeout)
    orchestrator = ReleaseOrchestrator(tags, releases, inputs.to_release_config(context.repository_url))
    result = orchestrator.run(intent)

    set_outputs(result.outputs)
    if result.warnings:
        logger.warning("Completed with %d warning(s)", len(result.warnings))

    if not result.ok:
        logger.error("Action failed: %s", result.error)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
