"""
Tests for the install use case — end to end on a miniature npm tree.

Every failing install must leave the target tree exactly as it was.
"""

import errno
import json
from pathlib import Path

import pytest

from n2s_installer.adapters.mock import MockAdapter
from n2s_installer.adapters.shell import filesystem
from n2s_installer.core.models.errors import ExitCode, OperationError
from n2s_installer.core.observability.progress import RecordingSink
from n2s_installer.core.services.npm_cli import VERSION_ACTION
from n2s_installer.core.use_cases.install import InstallPhase, run_install
from tests.npm_trees import PATCH_FILES, STOCK_FILES, take_snapshot


def _install_fails(npm_home, source_dir, sink, **kwargs) -> OperationError:
    with pytest.raises(OperationError) as exc:
        run_install(str(npm_home), source_dir=source_dir, sink=sink, **kwargs)
    return exc.value


class TestInstallSuccess:
    def test_fresh_install(self, npm_home: Path, source_dir: Path, sink: RecordingSink):
        result = run_install(str(npm_home), source_dir=source_dir, sink=sink)

        lib = npm_home / "lib"
        for name in ("npm", "commands/install", "utils/cmd-list"):
            assert (lib / f"{name}_ORIG.js").read_text() == STOCK_FILES[f"{name}.js"]
            assert (lib / f"{name}.js").read_text() == PATCH_FILES[f"{name}.js"]
        assert (lib / "commands" / "download.js").read_text() == PATCH_FILES["commands/download.js"]
        assert take_snapshot(lib / "download") == take_snapshot(source_dir / "download")
        assert take_snapshot(lib / "offliner") == take_snapshot(source_dir / "offliner")
        # untouched stock files
        assert (lib / "cli.js").read_text() == STOCK_FILES["cli.js"]

        assert result.phase is InstallPhase.DONE
        assert result.lib_dir == npm_home.resolve() / "lib"
        assert result.backed_up == ["npm.js", "commands/install.js", "utils/cmd-list.js"]

    def test_progress_messages(self, npm_home: Path, source_dir: Path, sink: RecordingSink):
        run_install(str(npm_home), source_dir=source_dir, sink=sink)
        assert sink.messages == [
            "Checking npm version at given path...",
            f"Target npm home is {npm_home.resolve()}",
            "Backing up files to be replaced:",
            "  npm.js",
            "  commands/install.js",
            "  utils/cmd-list.js",
            "Copying into target directory:",
            "  npm.js",
            "  commands/install.js",
            "  utils/cmd-list.js",
            "  commands/download.js",
            "  download/",
            "  offliner/",
        ]

    def test_live_npm(self, npm_home: Path, source_dir: Path, sink: RecordingSink,
                      shell: MockAdapter):
        result = run_install(source_dir=source_dir, sink=sink, shell=shell)
        assert result.npm_home == npm_home
        assert sink.messages[0] == "Checking npm version (live)..."
        assert (npm_home / "lib" / "npm_ORIG.js").exists()

    def test_source_from_environment(self, npm_home: Path, source_dir: Path,
                                     sink: RecordingSink, monkeypatch):
        monkeypatch.setenv("N2S_SOURCE_DIR", str(source_dir))
        result = run_install(str(npm_home), sink=sink)
        assert result.source_dir == source_dir.resolve()

    def test_to_dict(self, npm_home: Path, source_dir: Path):
        d = run_install(str(npm_home), source_dir=source_dir).to_dict()
        assert json.loads(json.dumps(d))["phase"] == "done"
        assert d["copied"][-1] == "offliner/"


class TestInstallRefused:
    """Failures before anything is changed."""

    def test_second_install(self, npm_home: Path, source_dir: Path, sink: RecordingSink):
        run_install(str(npm_home), source_dir=source_dir)
        before = take_snapshot(npm_home)

        err = _install_fails(npm_home, source_dir, sink)

        assert err.exit_code == ExitCode.LEFTOVERS_DETECTED
        assert "previous npm-two-stage installation" in err.message
        assert take_snapshot(npm_home) == before

    def test_wrong_version(self, npm_home: Path, source_dir: Path, sink: RecordingSink):
        (npm_home / "package.json").write_text(json.dumps({"name": "npm", "version": "9.8.0"}))
        before = take_snapshot(npm_home)

        err = _install_fails(npm_home, source_dir, sink)

        assert err.exit_code == ExitCode.WRONG_VERSION
        assert sink.messages[-1] == "Wrong version of npm for this version of npm-two-stage."
        assert take_snapshot(npm_home) == before

    def test_live_wrong_version(self, source_dir: Path, sink: RecordingSink, shell: MockAdapter):
        shell.set_output(VERSION_ACTION, "10.0.0")
        with pytest.raises(OperationError) as exc:
            run_install(source_dir=source_dir, sink=sink, shell=shell)
        assert exc.value.exit_code == ExitCode.WRONG_VERSION

    def test_not_an_npm_directory(self, tmp_path: Path, source_dir: Path, sink: RecordingSink):
        err = _install_fails(tmp_path, source_dir, sink)
        assert err.exit_code == ExitCode.MANAGER_NOT_FOUND
        assert sink.messages[-1] == "npm not found at given location."

    def test_missing_lib(self, npm_home: Path, source_dir: Path, sink: RecordingSink):
        (npm_home / "lib").rename(npm_home / "lib-moved")
        err = _install_fails(npm_home, source_dir, sink)
        assert err.exit_code == ExitCode.BAD_INSTALLATION
        assert sink.messages[-1] == "Unable to access lib directory at supposed npm path"

    def test_stray_backup(self, npm_home: Path, source_dir: Path, sink: RecordingSink):
        (npm_home / "lib" / "commands" / "install_ORIG.js").write_text("")
        before = take_snapshot(npm_home)
        err = _install_fails(npm_home, source_dir, sink)
        assert err.exit_code == ExitCode.LEFTOVERS_DETECTED
        assert take_snapshot(npm_home) == before


class TestInstallRollback:
    """Failures after the target was modified."""

    def test_backup_failure(self, npm_home: Path, source_dir: Path, sink: RecordingSink):
        (npm_home / "lib" / "utils" / "cmd-list.js").unlink()
        before = take_snapshot(npm_home)

        err = _install_fails(npm_home, source_dir, sink)

        assert err.exit_code == ExitCode.BAD_INSTALLATION
        assert "Error while renaming files; restoring original names..." in sink.messages
        assert take_snapshot(npm_home) == before

    def test_missing_source_dir(self, tmp_path: Path, npm_home: Path, sink: RecordingSink):
        before = take_snapshot(npm_home)
        err = _install_fails(npm_home, tmp_path / "no-source", sink)
        assert err.exit_code == ExitCode.BAD_PROJECT_SOURCE
        assert take_snapshot(npm_home) == before

    def test_incomplete_source(self, npm_home: Path, source_dir: Path, sink: RecordingSink):
        (source_dir / "commands" / "download.js").unlink()
        before = take_snapshot(npm_home)

        err = _install_fails(npm_home, source_dir, sink)

        assert err.exit_code == ExitCode.BAD_PROJECT_SOURCE
        assert take_snapshot(npm_home) == before

    def test_graft_failure(self, npm_home: Path, source_dir: Path, sink: RecordingSink,
                           monkeypatch):
        real_copy = filesystem.copy_file

        def copy_or_fail(src, dst):
            if Path(src).parent.name == "offliner":
                raise PermissionError(errno.EACCES, "Permission denied", str(src))
            real_copy(src, dst)

        monkeypatch.setattr(filesystem, "copy_file", copy_or_fail)
        before = take_snapshot(npm_home)

        err = _install_fails(npm_home, source_dir, sink)

        assert err.exit_code == ExitCode.FILESYSTEM_ACTION_FAILED
        assert err.code == "EACCES"
        assert take_snapshot(npm_home) == before

    def test_cleanup_problems_do_not_mask_error(self, npm_home: Path, source_dir: Path,
                                                sink: RecordingSink, monkeypatch):
        (source_dir / "commands" / "download.js").unlink()

        def broken_restore(*args, **kwargs):
            raise OperationError("restore broke", ExitCode.FILESYSTEM_ACTION_FAILED)

        monkeypatch.setattr("n2s_installer.core.use_cases.install.restore_all", broken_restore)

        err = _install_fails(npm_home, source_dir, sink)

        assert err.exit_code == ExitCode.BAD_PROJECT_SOURCE
