# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Exception types raised by the release engine.

Steps that resolve, tag and publish the full version raise fatal errors that
abort the run. Major version reconciliation raises ``MajorReconciliationError``,
which the orchestrator downgrades to a warning.
"""

from __future__ import annotations


class SemrelError(Exception):
    """Base class for all release engine errors."""


class InvalidIntentError(SemrelError, ValueError):
    """Release type is not one of major, minor or patch."""


class InvalidVersionFormatError(SemrelError, ValueError):
    """Version text does not match the canonical vX.Y.Z[-word.N] grammar."""


class RepositoryError(SemrelError):
    """A tag or release collaborator call failed (including timeouts)."""


class AssetCopyError(RepositoryError):
    """A single release asset could not be copied."""


class CommandError(SemrelError):
    """An install, test or build command exited unsuccessfully."""


class TagOperationError(SemrelError):
    """The full-version tag could not be created or pushed."""


class ReleaseCreationError(SemrelError):
    """The release for the full-version tag could not be created."""


class MajorReconciliationError(SemrelError):
    """The major version tag or release could not be reconciled."""
