"""
Install use case — patch an npm installation in place.

Phases run strictly in order:

    resolving target → checking version → expecting no leftovers
        → backing up → copying in → done

A failure before copying in needs no cleanup: nothing was changed, or
``backup_all`` already undid its own renames.  A failure while copying
in goes through cleanup (remove added items, restore backups) before the
original error is re-raised.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from n2s_installer.adapters.base import Adapter
from n2s_installer.core.config.loader import load_profile, resolve_source_dir
from n2s_installer.core.models.errors import ExitCode, OperationError, classify
from n2s_installer.core.models.profile import PatchProfile
from n2s_installer.core.observability.progress import ProgressSink, ensure_sink
from n2s_installer.core.services.added_items import (
    copy_in,
    describe_copy_list,
    remove_added_items,
)
from n2s_installer.core.services.backup_ops import backup_all, restore_all
from n2s_installer.core.services.leftovers import expect_no_leftovers
from n2s_installer.core.services.npm_target import (
    announce_version_check,
    explicit_npm_home,
    library_dir,
    report_fault,
    resolve_npm_home,
)
from n2s_installer.core.services.version_gate import check_version

logger = logging.getLogger(__name__)


class InstallPhase(str, Enum):
    RESOLVING_TARGET = "resolving_target"
    CHECKING_VERSION = "checking_version"
    EXPECTING_NO_LEFTOVERS = "expecting_no_leftovers"
    BACKING_UP = "backing_up"
    COPYING_IN = "copying_in"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


@dataclass
class InstallResult:
    """Outcome of a successful install."""

    npm_home: Path
    lib_dir: Path
    source_dir: Path
    backed_up: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)
    phase: InstallPhase = InstallPhase.DONE

    def to_dict(self) -> dict:
        return {
            "npm_home": str(self.npm_home),
            "lib_dir": str(self.lib_dir),
            "source_dir": str(self.source_dir),
            "backed_up": self.backed_up,
            "copied": self.copied,
            "phase": self.phase.value,
        }


def run_install(
    npm_dir: str | os.PathLike[str] | None = None,
    *,
    profile: PatchProfile | None = None,
    source_dir: str | os.PathLike[str] | None = None,
    sink: ProgressSink | None = None,
    shell: Adapter | None = None,
) -> InstallResult:
    """Install the patch over the npm at ``npm_dir`` (or the live npm).

    Args:
        npm_dir: npm home to patch; None means the global npm.
        profile: Patch profile; the packaged default when None.
        source_dir: Project source tree with the replacement files.
        sink: Receives progress messages.
        shell: Adapter for live npm queries.

    Returns:
        InstallResult describing what was changed.

    Raises:
        OperationError: classified failure; the target is left as it was.
    """
    profile = profile or load_profile()
    sink = ensure_sink(sink)
    src = resolve_source_dir(profile, source_dir)
    phase = InstallPhase.RESOLVING_TARGET
    lib: Path | None = None

    def advance(next_phase: InstallPhase) -> None:
        nonlocal phase
        logger.debug("install: %s -> %s", phase.value, next_phase.value)
        phase = next_phase

    try:
        announce_version_check(npm_dir, sink)
        npm_home = resolve_npm_home(profile, npm_dir, shell=shell)

        advance(InstallPhase.CHECKING_VERSION)
        check_version(profile, explicit_npm_home(npm_dir), shell=shell)
        sink.emit(f"Target {profile.package_name} home is {npm_home}")
        lib = library_dir(profile, npm_home)

        advance(InstallPhase.EXPECTING_NO_LEFTOVERS)
        expect_no_leftovers(lib, profile)

        advance(InstallPhase.BACKING_UP)
        backed_up = [profile.file_name(n) for n in profile.targets.changed_files]
        sink.emit("Backing up files to be replaced:")
        for name in backed_up:
            sink.emit("  " + name)
        backup_all(lib, profile.targets.changed_files, profile, sink=sink)

        advance(InstallPhase.COPYING_IN)
        copied = describe_copy_list(profile)
        sink.emit("Copying into target directory:")
        for name in copied:
            sink.emit("  " + name)
        copy_in(src, lib, profile, sink=sink)
    except (OperationError, OSError) as e:
        err = classify(e, ExitCode.FILESYSTEM_ACTION_FAILED)
        if phase is InstallPhase.COPYING_IN and lib is not None:
            advance(InstallPhase.CLEANING_UP)
            _clean_up(lib, profile, sink)
        advance(InstallPhase.FAILED)
        logger.info("Install failed (%s): %s", err.exit_code.name, err.message)
        report_fault(err, profile, sink)
        if err is e:
            raise
        raise err from e

    advance(InstallPhase.DONE)
    logger.info("Installed %s into %s", profile.product, lib)
    return InstallResult(
        npm_home=npm_home,
        lib_dir=lib,
        source_dir=src,
        backed_up=backed_up,
        copied=copied,
    )


def _clean_up(lib: Path, profile: PatchProfile, sink: ProgressSink) -> None:
    """Undo a partial copy-in. Never raises."""
    try:
        remove_added_items(lib, profile, sink=sink)
    except OperationError as e:
        logger.warning("Cleanup could not remove added items: %s", e.message)
    try:
        restore_all(lib, profile.targets.changed_files, profile, sink=sink)
    except OperationError as e:
        logger.warning("Cleanup could not restore backups: %s", e.message)
