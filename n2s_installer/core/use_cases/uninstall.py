"""
Uninstall use case — take the patch out and put the originals back.

Specifying the npm path allows restoring an installation other than the
active one, e.g. one on a USB drive meant for another machine.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from n2s_installer.adapters.base import Adapter
from n2s_installer.core.config.loader import load_profile
from n2s_installer.core.models.errors import ExitCode, OperationError, classify
from n2s_installer.core.models.profile import PatchProfile
from n2s_installer.core.observability.progress import ProgressSink, ensure_sink
from n2s_installer.core.services.added_items import describe_copy_list, remove_added_items
from n2s_installer.core.services.backup_ops import restore_all
from n2s_installer.core.services.npm_target import (
    announce_version_check,
    explicit_npm_home,
    library_dir,
    report_fault,
    resolve_npm_home,
)
from n2s_installer.core.services.version_gate import check_version

logger = logging.getLogger(__name__)


@dataclass
class UninstallResult:
    """Outcome of a successful uninstall."""

    npm_home: Path
    lib_dir: Path
    removed: list[str] = field(default_factory=list)
    restored: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "npm_home": str(self.npm_home),
            "lib_dir": str(self.lib_dir),
            "removed": self.removed,
            "restored": self.restored,
        }


def run_uninstall(
    npm_dir: str | os.PathLike[str] | None = None,
    *,
    profile: PatchProfile | None = None,
    sink: ProgressSink | None = None,
    shell: Adapter | None = None,
) -> UninstallResult:
    """Remove the patch from the npm at ``npm_dir`` (or the live npm).

    Added items that are already gone are reported and skipped.  Every
    backup is attempted even if an earlier one could not be restored.

    Raises:
        OperationError: classified failure (FILESYSTEM_ACTION_FAILED by
            default).
    """
    profile = profile or load_profile()
    sink = ensure_sink(sink)

    try:
        announce_version_check(npm_dir, sink)
        npm_home = resolve_npm_home(profile, npm_dir, shell=shell)
        check_version(profile, explicit_npm_home(npm_dir), shell=shell)
        sink.emit(f"Target {profile.package_name} home is {npm_home}")
        lib = library_dir(profile, npm_home)

        removed = describe_copy_list(profile)
        sink.emit(f"Removing items added by {profile.product} install:")
        for name in removed:
            sink.emit("  " + name)
        remove_added_items(lib, profile, sink=sink)

        restored = [profile.file_name(n) for n in profile.targets.changed_files]
        sink.emit("Restoring backed-up original files:")
        for name in restored:
            sink.emit("  " + name)
        restore_all(lib, profile.targets.changed_files, profile, sink=sink)
    except (OperationError, OSError) as e:
        err = classify(e, ExitCode.FILESYSTEM_ACTION_FAILED)
        logger.info("Uninstall failed (%s): %s", err.exit_code.name, err.message)
        report_fault(err, profile, sink)
        if err is e:
            raise
        raise err from e

    logger.info("Removed %s from %s", profile.product, lib)
    return UninstallResult(npm_home=npm_home, lib_dir=lib, removed=removed, restored=restored)
