"""
Tests for the status use case.
"""

import json
import shutil
from pathlib import Path

import pytest

from n2s_installer.adapters.mock import MockAdapter
from n2s_installer.core.models.errors import ExitCode, OperationError
from n2s_installer.core.models.state import StatusClassification
from n2s_installer.core.observability.progress import RecordingSink
from n2s_installer.core.use_cases.install import run_install
from n2s_installer.core.use_cases.status import get_status
from tests.npm_trees import take_snapshot


@pytest.fixture
def installed(npm_home: Path, source_dir: Path) -> Path:
    run_install(str(npm_home), source_dir=source_dir)
    return npm_home


class TestStatusReport:
    def test_not_installed(self, npm_home: Path, sink: RecordingSink):
        report = get_status(str(npm_home), sink=sink)
        assert report.classification is StatusClassification.NOT_INSTALLED
        assert sink.messages == [
            "Checking npm version at given path...",
            f"Target npm home is {npm_home.resolve()}",
            "No backups present.",
            "No standard files missing.",
            "No new files present.",
            "npm-two-stage is not installed at this location.",
        ]

    def test_fully_installed(self, installed: Path, sink: RecordingSink):
        report = get_status(str(installed), sink=sink)
        assert report.classification is StatusClassification.FULLY_INSTALLED
        assert sink.messages[2:] == [
            "All backups present.",
            "No standard files missing.",
            "All expected new files present.",
            "npm-two-stage is fully installed at this location.",
        ]

    def test_added_items_missing(self, installed: Path, sink: RecordingSink):
        shutil.rmtree(installed / "lib" / "offliner")
        report = get_status(str(installed), sink=sink)
        assert report.classification is StatusClassification.INCOMPLETE
        assert sink.messages[2:] == [
            "All backups present.",
            "No standard files missing.",
            "Some expected new files are missing.",
            "Missing: offliner",
            "Incomplete npm-two-stage installation found - cleanup required.",
        ]

    def test_backup_missing(self, installed: Path, sink: RecordingSink):
        (installed / "lib" / "commands" / "install_ORIG.js").unlink()
        report = get_status(str(installed), sink=sink)
        assert report.classification is StatusClassification.INCOMPLETE
        assert "Incomplete set of backups present." in sink.messages
        assert "Missing: commands/install.js" in sink.messages

    def test_only_deep_added_file_present(self, npm_home: Path, sink: RecordingSink):
        (npm_home / "lib" / "commands" / "download.js").write_text("")
        report = get_status(str(npm_home), sink=sink)
        assert report.classification is StatusClassification.INCOMPLETE
        assert "Missing: download, offliner" in sink.messages

    def test_standard_file_missing(self, npm_home: Path, sink: RecordingSink):
        (npm_home / "lib" / "npm.js").unlink()
        report = get_status(str(npm_home), sink=sink)
        assert report.classification is StatusClassification.STANDARD_FILES_MISSING
        assert sink.messages[-3:] == [
            "Missing: npm.js",
            "No new files present.",
            "Files expected in a standard npm installation are missing!",
        ]

    def test_read_only(self, installed: Path):
        before = take_snapshot(installed)
        get_status(str(installed))
        assert take_snapshot(installed) == before

    def test_live_npm(self, installed: Path, shell: MockAdapter):
        report = get_status(shell=shell)
        assert report.npm_home == installed
        assert report.classification is StatusClassification.FULLY_INSTALLED

    def test_to_dict(self, installed: Path):
        d = json.loads(json.dumps(get_status(str(installed)).to_dict()))
        assert d["classification"] == "fully_installed"
        assert d["added"]["files"] == {
            "download": True,
            "offliner": True,
            "commands/download.js": True,
        }
        assert d["summary"] == "npm-two-stage is fully installed at this location."


class TestStatusFailures:
    def test_missing_lib(self, npm_home: Path, sink: RecordingSink):
        shutil.rmtree(npm_home / "lib")
        with pytest.raises(OperationError) as exc:
            get_status(str(npm_home), sink=sink)
        assert exc.value.exit_code == ExitCode.BAD_INSTALLATION

    def test_wrong_version(self, npm_home: Path, sink: RecordingSink):
        (npm_home / "package.json").write_text(json.dumps({"name": "npm", "version": "9.0.0"}))
        with pytest.raises(OperationError) as exc:
            get_status(str(npm_home), sink=sink)
        assert exc.value.exit_code == ExitCode.WRONG_VERSION
        assert sink.messages[-1] == "Wrong version of npm for this version of npm-two-stage."
