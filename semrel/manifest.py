# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Project manifest version updates (e.g., package.json)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def update_manifest_version(manifest_path: Path | str, version: str) -> bool:
    """Write a version into the 'version' field of a JSON manifest.

    The leading 'v' is dropped. A missing manifest is skipped with a warning.

    Args:
        manifest_path: Path to the manifest file.
        version: New version (e.g., 'v1.2.3').

    Returns:
        True if the manifest was updated, False if it does not exist.

    Raises:
        ValueError: If the manifest is not a JSON object.
        OSError: If the manifest cannot be read or written.
    """
    path = Path(manifest_path)
    if not path.is_file():
        logger.warning("Manifest not found at %s, skipping version update", path)
        return False

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Manifest {path} does not contain a JSON object")

    bare_version = version[1:] if version.startswith("v") else version
    data["version"] = bare_version
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    logger.info("Updated %s version to %s", path, bare_version)
    return True
