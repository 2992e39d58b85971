"""
Added items — copying the patch into ``lib/`` and taking it out again.
"""

from __future__ import annotations

import logging
from pathlib import Path

from n2s_installer.adapters.shell.filesystem import copy_file, graft, prune, remove_files
from n2s_installer.core.models.errors import ExitCode, OperationError, classify, errno_symbol
from n2s_installer.core.models.profile import PatchProfile
from n2s_installer.core.observability.progress import ProgressSink, ensure_sink

logger = logging.getLogger(__name__)


def copy_in(
    source_dir: Path,
    lib_dir: Path,
    profile: PatchProfile,
    *,
    sink: ProgressSink | None = None,
) -> None:
    """Copy replacement and new files, then graft every new directory.

    Nothing is overwritten: the changed files were renamed aside and the
    leftover check guaranteed the new names are free.  So a failing flat
    copy points at the project source, and is classified
    BAD_PROJECT_SOURCE.  Graft failures keep their default class.
    """
    sink = ensure_sink(sink)
    if not source_dir.is_dir():
        raise OperationError(
            f"{profile.product} source directory not found: {source_dir}",
            ExitCode.BAD_PROJECT_SOURCE,
            code="ENOENT",
        )

    for rel in profile.copy_list():
        try:
            copy_file(source_dir / rel, lib_dir / rel)
        except OSError as e:
            raise classify(e, ExitCode.BAD_PROJECT_SOURCE) from e
        logger.debug("Copied %s", rel)

    for name in profile.targets.added_dirs:
        graft(source_dir / name, lib_dir, sink=sink)
        logger.debug("Grafted %s/", name)


def remove_added_items(
    lib_dir: Path,
    profile: PatchProfile,
    *,
    sink: ProgressSink | None = None,
) -> None:
    """Delete every added file and directory that is present.

    Missing items are reported and skipped, so this also cleans up after
    an install that stopped halfway.

    Raises:
        OperationError: FILESYSTEM_ACTION_FAILED for any other failure.
    """
    sink = ensure_sink(sink)
    added_files = [profile.file_name(f) for f in profile.targets.added_files]
    try:
        remove_files(added_files, base=lib_dir, sink=sink)
    except OSError as e:
        raise classify(e, ExitCode.FILESYSTEM_ACTION_FAILED) from e

    for name in profile.targets.added_dirs:
        try:
            prune(lib_dir / name)
        except FileNotFoundError:
            sink.emit(f"Could not find directory {name} for removal")
        except OSError as e:
            sink.emit(f"Unable to remove directory {name} ({errno_symbol(e)})")
            raise classify(e, ExitCode.FILESYSTEM_ACTION_FAILED) from e


def describe_copy_list(profile: PatchProfile) -> list[str]:
    """Everything install copies in, as shown to the user."""
    return profile.copy_list() + [d + "/" for d in profile.targets.added_dirs]
