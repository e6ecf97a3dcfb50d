# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Next-version calculation from a release intent.

References:
    - Semantic Versioning 2.0.0: https://semver.org/
"""

from __future__ import annotations

import logging
import re

from semrel.errors import InvalidIntentError
from semrel.intent import ReleaseType
from semrel.version import Version, format_version, parse_version

logger = logging.getLogger(__name__)

__all__ = [
    "calculate_next_version",
    "increment_prerelease",
    "parse_existing_prerelease",
]

_EXISTING_PRERELEASE = re.compile(r"^(\w+)\.(\d+)$")


def calculate_next_version(
    current: Version | str,
    release_type: ReleaseType | str,
    is_prerelease: bool = False,
    prerelease_suffix: str = "beta",
    prerelease_number: str | int = "1",
) -> Version:
    """Compute the next version for a release intent.

    Args:
        current: The latest released version.
        release_type: One of 'major', 'minor' or 'patch'.
        is_prerelease: If True, append '{suffix}.{number}' to the new triple.
        prerelease_suffix: Prerelease identifier (e.g., 'beta', 'rc').
        prerelease_number: Prerelease counter, used as given.

    Returns:
        The next Version.

    Raises:
        InvalidIntentError: If release_type is not major, minor or patch.

    Examples:
        >>> str(calculate_next_version("v1.2.3", "minor"))
        'v1.3.0'
        >>> str(calculate_next_version("v1.2.3", "minor", True, "beta", "1"))
        'v1.3.0-beta.1'
    """
    version = current if isinstance(current, Version) else parse_version(current)
    major, minor, patch = version.major, version.minor, version.patch

    token = release_type.value if isinstance(release_type, ReleaseType) else release_type
    if token == ReleaseType.MAJOR.value:
        major, minor, patch = major + 1, 0, 0
    elif token == ReleaseType.MINOR.value:
        minor, patch = minor + 1, 0
    elif token == ReleaseType.PATCH.value:
        patch += 1
    else:
        raise InvalidIntentError(f"Invalid release type: {token}")

    prerelease = f"{prerelease_suffix}.{prerelease_number}" if is_prerelease else None
    return Version(major, minor, patch, prerelease)


def parse_existing_prerelease(version: str) -> tuple[str, int] | None:
    """Extract (suffix, number) from version text carrying a word.N prerelease.

    Examples:
        >>> parse_existing_prerelease("v1.3.0-beta.2")
        ('beta', 2)
        >>> parse_existing_prerelease("v1.3.0") is None
        True
    """
    _, sep, prerelease = version.partition("-")
    if not sep:
        return None

    match = _EXISTING_PRERELEASE.match(prerelease)
    if match is None:
        return None
    return match.group(1), int(match.group(2))


def increment_prerelease(version: str, suffix: str, number: str | int = "1") -> str:
    """Continue a prerelease stream without bumping the version triple.

    If the version already carries a prerelease with the same suffix, its
    counter is bumped and ``number`` is ignored. Otherwise a fresh
    '{suffix}.{number}' prerelease is started on the current triple.

    Examples:
        >>> increment_prerelease("v1.3.0-beta.1", "beta", "1")
        'v1.3.0-beta.2'
        >>> increment_prerelease("v1.3.0", "rc", "1")
        'v1.3.0-rc.1'
    """
    current = parse_version(version)
    existing = parse_existing_prerelease(version)

    if existing is not None and existing[0] == suffix:
        prerelease = f"{suffix}.{existing[1] + 1}"
    else:
        if existing is not None:
            logger.debug("Switching prerelease stream from '%s' to '%s'", existing[0], suffix)
        prerelease = f"{suffix}.{number}"

    return format_version(current.major, current.minor, current.patch, prerelease)
