"""
Backup/restore engine — rename changed files aside, and back again.

The two directions fail differently:

- ``backup_all`` is all-or-nothing.  On the first failed rename every
  rename already done is undone, then the error propagates.
- ``restore_all`` is best-effort.  Every name is attempted; failures are
  reported one by one and raised together once the last name has been
  tried.  Uninstall has to recover as much as it can from a damaged tree.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from n2s_installer.core.models.errors import ExitCode, OperationError, classify, errno_symbol
from n2s_installer.core.models.profile import PatchProfile
from n2s_installer.core.observability.progress import ProgressSink, ensure_sink

logger = logging.getLogger(__name__)


def backup_all(
    lib_dir: Path,
    names: Sequence[str],
    profile: PatchProfile,
    *,
    sink: ProgressSink | None = None,
) -> None:
    """Rename each ``<name>.js`` to ``<name>_ORIG.js``, in order.

    Raises:
        OperationError: BAD_INSTALLATION (unless already classified) after
            every completed rename has been reversed.
    """
    sink = ensure_sink(sink)
    done: list[str] = []
    for name in names:
        original = lib_dir / profile.file_name(name)
        backup = lib_dir / profile.backup_file_name(name)
        try:
            original.rename(backup)
        except OSError as e:
            sink.emit("Error while renaming files; restoring original names...")
            logger.warning("Backup of %s failed (%s); rolling back %d rename(s)",
                           original, errno_symbol(e), len(done))
            # rollback errors propagate as-is
            for restored in done:
                os.replace(
                    lib_dir / profile.backup_file_name(restored),
                    lib_dir / profile.file_name(restored),
                )
            raise classify(e, ExitCode.BAD_INSTALLATION) from e
        done.append(name)
        logger.debug("Backed up %s -> %s", original.name, backup.name)


def restore_all(
    lib_dir: Path,
    names: Sequence[str],
    profile: PatchProfile,
    *,
    sink: ProgressSink | None = None,
) -> None:
    """Rename each ``<name>_ORIG.js`` back to ``<name>.js``.

    Every name is attempted regardless of earlier failures.  An existing
    file at the original name is replaced.

    Raises:
        OperationError: FILESYSTEM_ACTION_FAILED, once, after all attempts,
            if any restore failed.
    """
    sink = ensure_sink(sink)
    failed: list[tuple[str, OSError]] = []
    for name in names:
        original_name = profile.file_name(name)
        try:
            os.replace(lib_dir / profile.backup_file_name(name), lib_dir / original_name)
        except OSError as e:
            sink.emit(f"Unable to restore {original_name} ({errno_symbol(e)})")
            failed.append((original_name, e))
            continue
        logger.debug("Restored %s", original_name)

    if failed:
        listing = ", ".join(n for n, _ in failed)
        raise OperationError(
            f"Unable to restore {len(failed)} of {len(names)} backed-up file(s): {listing}",
            ExitCode.FILESYSTEM_ACTION_FAILED,
            code=errno_symbol(failed[0][1]),
        ) from failed[0][1]
