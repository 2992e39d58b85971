"""
Target resolution — which npm installation an operation acts on.

An explicit path wins; otherwise the live global npm is located with
``npm root -g``.  Everything downstream works on absolute paths; nothing
here changes the process working directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from n2s_installer.adapters.base import Adapter
from n2s_installer.core.models.errors import ExitCode, OperationError
from n2s_installer.core.models.profile import PatchProfile
from n2s_installer.core.observability.progress import ProgressSink
from n2s_installer.core.services.npm_cli import query_global_root

logger = logging.getLogger(__name__)


def explicit_npm_home(npm_dir: str | os.PathLike[str] | None) -> Path | None:
    """Absolute form of a user-given npm path, or None when none was given."""
    if npm_dir is None or npm_dir == "":
        return None
    return Path(npm_dir).expanduser().resolve()


def resolve_npm_home(
    profile: PatchProfile,
    npm_dir: str | os.PathLike[str] | None = None,
    *,
    shell: Adapter | None = None,
) -> Path:
    """Return the npm home (the directory holding ``package.json``)."""
    explicit = explicit_npm_home(npm_dir)
    if explicit is not None:
        return explicit
    global_root = query_global_root(profile, shell)
    home = Path(global_root) / profile.package_name
    logger.debug("Live npm root is %s", global_root)
    return home


def library_dir(profile: PatchProfile, npm_home: Path) -> Path:
    """Return ``<npm_home>/lib`` after checking it can be opened.

    Raises:
        OperationError: BAD_INSTALLATION if the directory is absent,
            FILESYSTEM_ACTION_FAILED for any other access problem.
    """
    lib = npm_home / profile.lib_dir
    try:
        with os.scandir(lib):
            pass
    except (FileNotFoundError, NotADirectoryError) as e:
        raise OperationError(
            "Unable to access lib directory at supposed npm path",
            ExitCode.BAD_INSTALLATION,
            code="ENOENT" if isinstance(e, FileNotFoundError) else "ENOTDIR",
        ) from e
    except OSError as e:
        raise OperationError.from_os_error(e, ExitCode.FILESYSTEM_ACTION_FAILED) from e
    return lib


def announce_version_check(npm_dir: str | os.PathLike[str] | None, sink: ProgressSink) -> None:
    where = "at given path" if explicit_npm_home(npm_dir) is not None else "(live)"
    sink.emit(f"Checking npm version {where}...")


def report_fault(err: OperationError, profile: PatchProfile, sink: ProgressSink) -> None:
    """Add a user-facing hint for the failure classes that have one."""
    if err.exit_code == ExitCode.WRONG_VERSION:
        sink.emit(
            f"Wrong version of {profile.package_name} for this version of {profile.product}."
        )
    elif err.exit_code == ExitCode.MANAGER_NOT_FOUND:
        sink.emit(f"{profile.package_name} not found at given location.")
    elif err.exit_code == ExitCode.BAD_INSTALLATION:
        sink.emit(err.message)
