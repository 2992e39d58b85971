"""
Status use case — report which patch artifacts an npm installation holds.

Read-only: nothing under the target is modified.
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
from n2s_installer.core.models.state import (
    InstallationState,
    PresenceTally,
    StatusClassification,
)
from n2s_installer.core.observability.progress import ProgressSink, ensure_sink
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
class StatusReport:
    """Aggregated status of one npm installation."""

    npm_home: Path
    lib_dir: Path
    state: InstallationState = field(default_factory=InstallationState)
    lines: list[str] = field(default_factory=list)

    @property
    def classification(self) -> StatusClassification:
        return self.state.classification

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "npm_home": str(self.npm_home),
            "lib_dir": str(self.lib_dir),
            **self.state.to_dict(),
            "summary": self.lines[-1] if self.lines else "",
        }


def get_status(
    npm_dir: str | os.PathLike[str] | None = None,
    *,
    profile: PatchProfile | None = None,
    sink: ProgressSink | None = None,
    shell: Adapter | None = None,
) -> StatusReport:
    """Inspect the npm at ``npm_dir`` (or the live npm) and report.

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
        state = inspect_installation(lib, profile)
    except (OperationError, OSError) as e:
        err = classify(e, ExitCode.FILESYSTEM_ACTION_FAILED)
        report_fault(err, profile, sink)
        if err is e:
            raise
        raise err from e

    lines = describe_state(state, profile)
    for line in lines:
        sink.emit(line)
    logger.info("Status of %s: %s", lib, state.classification.value)
    return StatusReport(npm_home=npm_home, lib_dir=lib, state=state, lines=lines)


def inspect_installation(lib_dir: Path, profile: PatchProfile) -> InstallationState:
    """Probe ``lib_dir`` for standard, backup and added files.

    Raises:
        OSError: any probe failure other than "not found".
    """
    state = InstallationState()
    for name in profile.targets.changed_files:
        key = profile.file_name(name)
        state.backup.record(key, _exists(lib_dir / profile.backup_file_name(name)))
        state.standard.record(key, _exists(lib_dir / key))

    entries = set(os.listdir(lib_dir))
    for item in profile.top_level_added():
        state.added.record(item, item in entries)

    for item in profile.deep_added_files():
        state.added.record(item, _exists(lib_dir / item))

    return state


def _exists(path: Path) -> bool:
    try:
        path.stat()
    except FileNotFoundError:
        return False
    return True


def describe_state(state: InstallationState, profile: PatchProfile) -> list[str]:
    """Human-readable lines for each tally, then the summary line."""
    lines: list[str] = []

    lines.extend(_describe_tally(
        state.backup,
        none="No backups present.",
        all_="All backups present.",
        some="Incomplete set of backups present.",
    ))

    if not state.standard.missing:
        lines.append("No standard files missing.")
    else:
        lines.append("Some standard files are missing.")
        lines.append(_missing_line(state.standard))

    lines.extend(_describe_tally(
        state.added,
        none="No new files present.",
        all_="All expected new files present.",
        some="Some expected new files are missing.",
    ))

    lines.append(_summary(state.classification, profile))
    return lines


def _describe_tally(tally: PresenceTally, *, none: str, all_: str, some: str) -> list[str]:
    if not tally.present:
        return [none]
    if not tally.missing:
        return [all_]
    return [some, _missing_line(tally)]


def _missing_line(tally: PresenceTally) -> str:
    return "Missing: " + ", ".join(tally.missing_names())


def _summary(classification: StatusClassification, profile: PatchProfile) -> str:
    product = profile.product
    if classification is StatusClassification.FULLY_INSTALLED:
        return f"{product} is fully installed at this location."
    if classification is StatusClassification.INCOMPLETE:
        return f"Incomplete {product} installation found - cleanup required."
    if classification is StatusClassification.NOT_INSTALLED:
        return f"{product} is not installed at this location."
    return f"Files expected in a standard {profile.package_name} installation are missing!"
