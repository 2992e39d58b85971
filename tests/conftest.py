"""
Shared test fixtures and configuration.

``npm_home`` is a miniature npm 9.8.1 global install; ``source_dir`` a
miniature npm-two-stage source tree.  Both live under ``tmp_path``.
"""

from pathlib import Path

import pytest

from n2s_installer.adapters.mock import MockAdapter
from n2s_installer.core.config.loader import load_profile
from n2s_installer.core.observability.progress import RecordingSink
from n2s_installer.core.services.npm_cli import ROOT_ACTION, VERSION_ACTION
from tests.npm_trees import PATCH_FILES, make_npm_home, write_tree


@pytest.fixture
def profile():
    """The packaged default profile (npm 9.8.1)."""
    return load_profile()


@pytest.fixture
def npm_home(tmp_path: Path) -> Path:
    """A clean npm 9.8.1 home under a fake global node_modules."""
    return make_npm_home(tmp_path / "global" / "node_modules")


@pytest.fixture
def lib(npm_home: Path) -> Path:
    return npm_home / "lib"


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """An npm-two-stage source tree with every file install copies."""
    src = tmp_path / "n2s" / "src"
    write_tree(src, PATCH_FILES)
    return src


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def shell(npm_home: Path) -> MockAdapter:
    """Answers the live npm queries as if ``npm_home`` were the global npm."""
    mock = MockAdapter()
    mock.set_output(VERSION_ACTION, "9.8.1")
    mock.set_output(ROOT_ACTION, str(npm_home.parent))
    return mock
