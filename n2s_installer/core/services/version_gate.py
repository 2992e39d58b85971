"""
Version gate — refuse to touch anything but the exact supported npm.

For an explicit target path the ``package.json`` found there is the only
authority: the npm on the PATH may be a different installation entirely
(e.g. one on a USB drive meant for another machine).  Without a path the
live ``npm --version`` is asked instead.

The comparison is an exact string match, not a semver range; the
patched files only fit one npm release.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from n2s_installer.adapters.base import Adapter
from n2s_installer.core.models.errors import ExitCode, OperationError
from n2s_installer.core.models.profile import PatchProfile
from n2s_installer.core.services.npm_cli import query_live_version

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def check_version(
    profile: PatchProfile,
    npm_home: Path | None = None,
    *,
    shell: Adapter | None = None,
) -> None:
    """Raise unless the target npm is ``profile.target_version``.

    Args:
        profile: Patch profile holding the expected identity.
        npm_home: Explicit npm home; None means the live npm.
        shell: Adapter for the live query (tests pass a MockAdapter).

    Raises:
        OperationError: MANAGER_NOT_FOUND, WRONG_VERSION or BAD_INSTALLATION.
    """
    if npm_home is not None:
        check_package_manifest(profile, npm_home)
        return

    actual = query_live_version(profile, shell)
    if actual != profile.target_version:
        raise OperationError(
            f"wrong version of {profile.package_name}: found {actual}",
            ExitCode.WRONG_VERSION,
        )
    logger.info("Live %s version %s matches", profile.package_name, actual)


def check_package_manifest(profile: PatchProfile, npm_home: Path) -> None:
    """Verify identity and version from ``<npm_home>/package.json``."""
    manifest_path = npm_home / profile.manifest_file
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise OperationError.from_os_error(e, ExitCode.MANAGER_NOT_FOUND) from e
    except OSError as e:
        raise OperationError.from_os_error(e, ExitCode.BAD_INSTALLATION) from e
    except UnicodeDecodeError as e:
        raise OperationError(
            f"failed to read {profile.manifest_file} at {npm_home}",
            ExitCode.BAD_INSTALLATION,
        ) from e

    if text.startswith(_BOM):
        text = text[1:]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise OperationError(
            f"failed to parse {profile.manifest_file} at {npm_home}",
            ExitCode.BAD_INSTALLATION,
        ) from e

    if not isinstance(data, dict):
        raise OperationError(
            f"failed to parse {profile.manifest_file} at {npm_home}",
            ExitCode.BAD_INSTALLATION,
        )

    if data.get("name") != profile.package_name:
        raise OperationError(
            f"package at {npm_home} is not {profile.package_name}",
            ExitCode.MANAGER_NOT_FOUND,
        )

    version = data.get("version")
    if version != profile.target_version:
        raise OperationError(
            f"wrong version of {profile.package_name}: found {version}",
            ExitCode.WRONG_VERSION,
        )
    logger.info("%s at %s is version %s", profile.package_name, npm_home, version)
