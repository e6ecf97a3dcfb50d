# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Release intent resolution from GitHub events.

Determines how the workflow was triggered and which release type
(major, minor, patch or none) plus prerelease flag it asks for.

References:
    - Events that trigger workflows:
      https://docs.github.com/en/actions/writing-workflows/choosing-when-your-workflow-runs/events-that-trigger-workflows
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from semrel.errors import InvalidIntentError

logger = logging.getLogger(__name__)

__all__ = [
    "AUTO_DETECT",
    "LabelConfig",
    "ReleaseIntent",
    "ReleaseType",
    "TriggerMode",
    "detect_trigger_mode",
    "resolve_intent",
]

AUTO_DETECT = "auto-detect"


class ReleaseType(str, enum.Enum):
    """Kind of version bump requested."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"

    @classmethod
    def from_token(cls, token: str) -> ReleaseType:
        """Convert an input token to a ReleaseType.

        Raises:
            InvalidIntentError: If the token is not a known release type.
        """
        try:
            return cls(token.strip().lower())
        except ValueError:
            raise InvalidIntentError(f"Invalid release type: {token}") from None


class TriggerMode(str, enum.Enum):
    """How the release workflow was triggered."""

    PR_MERGE = "pr-merge"
    MANUAL = "manual"
    WORKFLOW_CALL = "workflow-call"
    PUSH_MAIN = "push-main"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ReleaseIntent:
    """Release type plus prerelease flag."""

    release_type: ReleaseType
    is_prerelease: bool = False

    @property
    def should_release(self) -> bool:
        """False when no release should occur."""
        return self.release_type is not ReleaseType.NONE


@dataclass(frozen=True)
class LabelConfig:
    """Pull request label names mapped to release intents."""

    major: str = "release:major"
    minor: str = "release:minor"
    patch: str = "release:patch"
    prerelease: str = "prerelease"


def detect_trigger_mode(
    input_mode: str,
    event_name: str,
    payload: Mapping[str, Any] | None = None,
    ref: str = "",
) -> str:
    """Determine the trigger mode for this run.

    An explicit mode wins; 'auto-detect' inspects the event.

    Args:
        input_mode: Configured trigger mode or 'auto-detect'.
        event_name: GITHUB_EVENT_NAME value.
        payload: Parsed webhook event payload.
        ref: GITHUB_REF value (e.g., 'refs/heads/main').

    Returns:
        The trigger mode string.

    Examples:
        >>> detect_trigger_mode("auto-detect", "workflow_dispatch")
        'manual'
    """
    if input_mode and input_mode != AUTO_DETECT:
        return input_mode

    payload = payload or {}
    pull_request = payload.get("pull_request") or {}

    if event_name == "pull_request" and pull_request.get("merged"):
        return TriggerMode.PR_MERGE.value
    if event_name == "workflow_dispatch":
        return TriggerMode.MANUAL.value
    if event_name == "workflow_call":
        return TriggerMode.WORKFLOW_CALL.value
    if event_name == "push" and ref == "refs/heads/main":
        return TriggerMode.PUSH_MAIN.value
    return TriggerMode.UNKNOWN.value


def pull_request_labels(payload: Mapping[str, Any] | None) -> list[str]:
    """Extract label names from a pull_request event payload."""
    pull_request = (payload or {}).get("pull_request") or {}
    return [label["name"] for label in pull_request.get("labels") or [] if label.get("name")]


def resolve_intent(
    trigger_mode: str,
    labels: Iterable[str] = (),
    label_config: LabelConfig | None = None,
    release_type: str = "",
    is_prerelease: bool = False,
) -> ReleaseIntent:
    """Resolve the release intent for a trigger mode.

    Pull request merges read labels (major beats minor beats patch).
    Manual and workflow_call runs use the given release type, defaulting
    to patch. Any other trigger yields no release.

    Raises:
        InvalidIntentError: If a manual release type is not recognized.

    Examples:
        >>> resolve_intent("pr-merge", ["release:minor"])
        ReleaseIntent(release_type=<ReleaseType.MINOR: 'minor'>, is_prerelease=False)
    """
    config = label_config or LabelConfig()

    if trigger_mode == TriggerMode.PR_MERGE.value:
        label_set = set(labels)
        logger.info("PR labels: %s", ", ".join(sorted(label_set)))

        prerelease = config.prerelease in label_set
        if config.major in label_set:
            return ReleaseIntent(ReleaseType.MAJOR, prerelease)
        if config.minor in label_set:
            return ReleaseIntent(ReleaseType.MINOR, prerelease)
        if config.patch in label_set:
            return ReleaseIntent(ReleaseType.PATCH, prerelease)
        return ReleaseIntent(ReleaseType.NONE, prerelease)

    if trigger_mode in (TriggerMode.MANUAL.value, TriggerMode.WORKFLOW_CALL.value):
        return ReleaseIntent(ReleaseType.from_token(release_type or "patch"), is_prerelease)

    logger.info("Trigger mode '%s' does not request a release", trigger_mode)
    return ReleaseIntent(ReleaseType.NONE, False)
