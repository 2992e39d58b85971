"""
InstallationState — what the status check found on disk.

Built fresh for every status query and thrown away after reporting.
Three tallies, one per kind of evidence: the stock files npm ships
(``standard``), the renamed originals (``backup``), and the files and
directories install adds (``added``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class StatusClassification(str, Enum):
    """Overall health of an npm installation with respect to the patch."""

    NOT_INSTALLED = "not_installed"
    FULLY_INSTALLED = "fully_installed"
    INCOMPLETE = "incomplete"
    STANDARD_FILES_MISSING = "standard_files_missing"


@dataclass
class PresenceTally:
    """Presence flag per expected path, with running counts."""

    files: dict[str, bool] = field(default_factory=dict)
    present: int = 0
    missing: int = 0

    def record(self, name: str, is_present: bool) -> None:
        self.files[name] = is_present
        if is_present:
            self.present += 1
        else:
            self.missing += 1

    def missing_names(self) -> list[str]:
        return [name for name, found in self.files.items() if not found]

    def to_dict(self) -> dict:
        return {
            "files": dict(self.files),
            "present": self.present,
            "missing": self.missing,
        }


@dataclass
class InstallationState:
    """Evidence gathered by one status query."""

    standard: PresenceTally = field(default_factory=PresenceTally)
    backup: PresenceTally = field(default_factory=PresenceTally)
    added: PresenceTally = field(default_factory=PresenceTally)

    @property
    def classification(self) -> StatusClassification:
        # Missing stock files outrank every other finding.
        if self.standard.missing:
            return StatusClassification.STANDARD_FILES_MISSING
        if not self.backup.missing and not self.added.missing:
            return StatusClassification.FULLY_INSTALLED
        if self.backup.present or self.added.present:
            return StatusClassification.INCOMPLETE
        return StatusClassification.NOT_INSTALLED

    def to_dict(self) -> dict:
        return {
            "classification": self.classification.value,
            "standard": self.standard.to_dict(),
            "backup": self.backup.to_dict(),
            "added": self.added.to_dict(),
        }
