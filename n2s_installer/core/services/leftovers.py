"""
Leftover detector — refuse to install over traces of an earlier run.

Three checks, in order; the first hit aborts:

1. ``lib/`` must not already list a top-level added file or directory.
2. ``lib/`` and every directory holding a changed file must not contain
   any name ending in the backup suffix.  Which file the backup belongs
   to does not matter: any stray backup means an install or uninstall
   was interrupted.
3. Added files that live in subdirectories must not exist.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from n2s_installer.core.models.errors import ExitCode, OperationError
from n2s_installer.core.models.profile import PatchProfile

logger = logging.getLogger(__name__)


def leftovers_error(item: str, profile: PatchProfile) -> OperationError:
    return OperationError(
        f"evidence of previous {profile.product} installation ({item}) in target location",
        ExitCode.LEFTOVERS_DETECTED,
    )


def _list_dir(path: Path) -> list[str]:
    try:
        return os.listdir(path)
    except OSError as e:
        raise OperationError.from_os_error(e, ExitCode.BAD_INSTALLATION) from e


def expect_no_leftovers(lib_dir: Path, profile: PatchProfile) -> None:
    """Raise LEFTOVERS_DETECTED if ``lib_dir`` shows an earlier install.

    Raises:
        OperationError: LEFTOVERS_DETECTED, or BAD_INSTALLATION when a
            directory that must exist cannot be listed.
    """
    entries = set(_list_dir(lib_dir))
    for item in profile.top_level_added():
        if item in entries:
            raise leftovers_error(item, profile)

    suffix = profile.backup_suffix
    for rel_dir in profile.changed_dirs():
        for name in _list_dir(lib_dir / rel_dir):
            if name.endswith(suffix):
                raise OperationError(
                    f"old backup {name} in target location",
                    ExitCode.LEFTOVERS_DETECTED,
                )

    for item in profile.deep_added_files():
        try:
            (lib_dir / item).lstat()
        except FileNotFoundError:
            continue
        except OSError as e:
            raise OperationError.from_os_error(e, ExitCode.BAD_INSTALLATION) from e
        raise leftovers_error(item, profile)

    logger.debug("No leftovers under %s", lib_dir)
