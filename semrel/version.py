# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Version model: parsing, formatting, validation and ordering of version tags.

Two parsers coexist on purpose. ``parse_version`` is lenient and never fails,
so legacy or malformed tags found while resolving the latest release still
produce a usable value. ``validate_version`` is strict and is only called
where untrusted version text enters the system.

References:
    - Semantic Versioning 2.0.0: https://semver.org/
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

from semrel.errors import InvalidVersionFormatError

__all__ = [
    "FULL_VERSION_TAG_PATTERN",
    "STRICT_VERSION_PATTERN",
    "Version",
    "compare_versions",
    "format_version",
    "is_full_version_tag",
    "major_tag_name",
    "parse_version",
    "validate_version",
]

# Full-version tags: vX.Y.Z with an optional suffix. Excludes bare major tags (vX).
FULL_VERSION_TAG_PATTERN = re.compile(r"^v\d+\.\d+\.\d+")

STRICT_VERSION_PATTERN = re.compile(r"^v?\d+\.\d+\.\d+(-\w+\.\d+)?$")

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")
_PRERELEASE_RUNS = re.compile(r"\d+|\D+")


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """An immutable semantic version.

    ``Version()`` is the zero value ``v0.0.0`` used when no release exists yet.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    prerelease: str | None = None

    def __str__(self) -> str:
        """Return the canonical tag text (e.g., 'v1.2.3-beta.1')."""
        return format_version(self.major, self.minor, self.patch, self.prerelease)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) < 0

    @property
    def is_prerelease(self) -> bool:
        """True if the version carries a prerelease suffix."""
        return bool(self.prerelease)

    @property
    def core(self) -> Version:
        """The same version with the prerelease suffix dropped."""
        return Version(self.major, self.minor, self.patch)


def _leading_int(part: str | None) -> int:
    if not part:
        return 0
    match = _LEADING_DIGITS.match(part)
    if match is None:
        return 0
    return int(match.group(1))


def parse_version(text: str) -> Version:
    """Parse version text leniently.

    Missing or non-numeric components default to 0, so this never raises.

    Args:
        text: Version text (e.g., 'v1.2.3', '1.2.3-beta.1', 'v2').

    Returns:
        The parsed Version.

    Examples:
        >>> parse_version("v1.2.3-beta.1")
        Version(major=1, minor=2, patch=3, prerelease='beta.1')
        >>> parse_version("garbage")
        Version(major=0, minor=0, patch=0, prerelease=None)
    """
    clean = text[1:] if text.startswith("v") else text

    core, sep, prerelease = clean.partition("-")
    parts = core.split(".")

    def part(index: int) -> str | None:
        return parts[index] if index < len(parts) else None

    return Version(
        major=_leading_int(part(0)),
        minor=_leading_int(part(1)),
        patch=_leading_int(part(2)),
        prerelease=prerelease if sep and prerelease else None,
    )


def format_version(major: int, minor: int, patch: int, prerelease: str | None = None) -> str:
    """Format version components as tag text.

    Examples:
        >>> format_version(1, 2, 3)
        'v1.2.3'
        >>> format_version(1, 2, 3, "beta.1")
        'v1.2.3-beta.1'
    """
    version = f"v{major}.{minor}.{patch}"
    if prerelease:
        version += f"-{prerelease}"
    return version


def validate_version(text: str) -> None:
    """Strictly validate version text.

    Raises:
        InvalidVersionFormatError: If the text is not vX.Y.Z or vX.Y.Z-word.N.
    """
    if not STRICT_VERSION_PATTERN.match(text):
        raise InvalidVersionFormatError(f"Invalid version format: {text}")


def _prerelease_key(prerelease: str) -> tuple[tuple[int, int | str], ...]:
    # Digit runs compare numerically and sort before text runs, so beta.10 follows beta.2.
    return tuple((0, int(run)) if run.isdecimal() else (1, run) for run in _PRERELEASE_RUNS.findall(prerelease))


def _compare_prerelease(a: str, b: str) -> int:
    key_a = _prerelease_key(a)
    key_b = _prerelease_key(b)
    return (key_a > key_b) - (key_a < key_b)


def compare_versions(a: Version | str, b: Version | str) -> int:
    """Compare two versions.

    A prerelease sorts before the release of the same triple.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b.

    Examples:
        >>> compare_versions("v1.0.0-beta.1", "v1.0.0")
        -1
        >>> compare_versions("v1.0.0-beta.10", "v1.0.0-beta.2")
        1
    """
    v1 = a if isinstance(a, Version) else parse_version(a)
    v2 = b if isinstance(b, Version) else parse_version(b)

    triple_1 = (v1.major, v1.minor, v1.patch)
    triple_2 = (v2.major, v2.minor, v2.patch)
    if triple_1 != triple_2:
        return 1 if triple_1 > triple_2 else -1

    if v1.prerelease and v2.prerelease:
        return _compare_prerelease(v1.prerelease, v2.prerelease)
    if v1.prerelease:
        return -1
    if v2.prerelease:
        return 1
    return 0


def is_full_version_tag(tag_name: str) -> bool:
    """Check if a tag names a full version (vX.Y.Z...) rather than a major tag (vX)."""
    return FULL_VERSION_TAG_PATTERN.match(tag_name) is not None


def major_tag_name(version: Version | str) -> str:
    """Return the major-tracking tag name for a version (e.g., 'v2' for 'v2.1.0')."""
    parsed = version if isinstance(version, Version) else parse_version(version)
    return f"v{parsed.major}"
