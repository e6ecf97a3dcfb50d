# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Install, test and build command execution.

Commands left empty can be derived from a ``package.json`` in the working
directory for the configured package manager:

- install: the package manager's lockfile install, when package.json exists
- test: ``<pm> test``, when ``scripts.test`` is defined
- build: ``<pm> run build``, when ``scripts.build`` is defined

Explicitly configured commands always take precedence.
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from semrel.errors import CommandError

logger = logging.getLogger(__name__)

PACKAGE_MANAGERS = ("npm", "yarn", "pnpm")

INSTALL_COMMANDS = {
    "npm": "npm ci",
    "yarn": "yarn install --frozen-lockfile",
    "pnpm": "pnpm install --frozen-lockfile",
}


@dataclass(frozen=True)
class ProjectCommands:
    """Install, test and build command lines. Empty strings are skipped."""

    install: str = ""
    test: str = ""
    build: str = ""


def _package_scripts(package_json: Path) -> dict[str, Any]:
    with open(package_json, encoding="utf-8") as f:
        data = json.load(f)
    scripts = data.get("scripts") if isinstance(data, dict) else None
    return scripts if isinstance(scripts, dict) else {}


def resolve_project_commands(
    cwd: Path | str,
    package_manager: str = "",
    install_command: str = "",
    test_command: str = "",
    build_command: str = "",
) -> ProjectCommands:
    """Fill in missing commands from package.json for a package manager.

    Args:
        cwd: Directory that may contain package.json.
        package_manager: One of PACKAGE_MANAGERS, or '' to disable detection.
        install_command: Explicit install command.
        test_command: Explicit test command.
        build_command: Explicit build command.

    Raises:
        CommandError: If package_manager is not supported.

    Examples:
        >>> resolve_project_commands("/nonexistent", "", "make deps")
        ProjectCommands(install='make deps', test='', build='')
    """
    explicit = ProjectCommands(install_command.strip(), test_command.strip(), build_command.strip())
    if not package_manager:
        return explicit
    if package_manager not in PACKAGE_MANAGERS:
        supported = ", ".join(PACKAGE_MANAGERS)
        raise CommandError(f"Unsupported package manager '{package_manager}', expected one of: {supported}")

    package_json = Path(cwd) / "package.json"
    if not package_json.is_file():
        return explicit

    try:
        scripts = _package_scripts(package_json)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s, skipping script detection: %s", package_json, e)
        scripts = {}

    commands = ProjectCommands(
        install=explicit.install or INSTALL_COMMANDS[package_manager],
        test=explicit.test or (f"{package_manager} test" if scripts.get("test") else ""),
        build=explicit.build or (f"{package_manager} run build" if scripts.get("build") else ""),
    )
    logger.debug("Resolved project commands for %s: %s", package_manager, commands)
    return commands


def run_command(label: str, command: str, cwd: Path | str = ".", timeout: float | None = None) -> None:
    """Run a project command, streaming its output to the job log.

    Empty commands are skipped.

    Args:
        label: Step name used in log messages (e.g., 'test').
        command: Command line, split with shell-like quoting rules.
        cwd: Directory to run the command in.
        timeout: Seconds before the command is killed, or None for no limit.

    Raises:
        CommandError: If the command cannot start, times out or exits non-zero.
    """
    if not command.strip():
        logger.info("No %s command specified, skipping", label)
        return

    args = shlex.split(command)
    logger.info("Running %s command: %s", label, command)
    try:
        proc = subprocess.run(args, cwd=str(cwd), timeout=timeout, check=False)
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"{label} command timed out after {e.timeout}s: {command}") from e
    except OSError as e:
        raise CommandError(f"{label} command could not start: {e}") from e

    if proc.returncode != 0:
        raise CommandError(f"{label} command failed with exit code {proc.returncode}: {command}")
