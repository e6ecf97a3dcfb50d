# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Semantic Release Action - Core modules."""

from semrel.calculator import calculate_next_version, increment_prerelease
from semrel.intent import ReleaseIntent, ReleaseType
from semrel.orchestrator import ReleaseConfig, ReleaseOrchestrator, ReleaseResult, ReleaseState
from semrel.version import Version, compare_versions, format_version, parse_version, validate_version

__all__ = [
    "ReleaseConfig",
    "ReleaseIntent",
    "ReleaseOrchestrator",
    "ReleaseResult",
    "ReleaseState",
    "ReleaseType",
    "Version",
    "calculate_next_version",
    "compare_versions",
    "format_version",
    "increment_prerelease",
    "parse_version",
    "validate_version",
]
