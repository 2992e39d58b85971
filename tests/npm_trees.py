"""
Miniature npm and npm-two-stage trees for the installer tests.

The stock files stand in for the ones npm 9.8.1 ships under ``lib/``;
the patch files for the npm-two-stage source tree.
"""

import json
from pathlib import Path

STOCK_FILES = {
    "npm.js": "// stock npm.js\n",
    "commands/install.js": "// stock commands/install.js\n",
    "utils/cmd-list.js": "// stock utils/cmd-list.js\n",
    "cli.js": "// stock cli.js\n",
    "commands/ci.js": "// stock commands/ci.js\n",
}

PATCH_FILES = {
    "npm.js": "// n2s npm.js\n",
    "commands/install.js": "// n2s commands/install.js\n",
    "commands/download.js": "// n2s commands/download.js\n",
    "utils/cmd-list.js": "// n2s utils/cmd-list.js\n",
    "download/index.js": "// n2s download/index.js\n",
    "download/git-aux.js": "// n2s download/git-aux.js\n",
    "download/lib/fetch.js": "// n2s download/lib/fetch.js\n",
    "offliner/index.js": "// n2s offliner/index.js\n",
    "offliner/readme.md": "offline mode\n",
}


def write_tree(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def make_npm_home(base: Path, version: str = "9.8.1", name: str = "npm") -> Path:
    """Create ``<base>/npm`` shaped like a global npm install."""
    home = base / "npm"
    home.mkdir(parents=True)
    (home / "package.json").write_text(json.dumps({"name": name, "version": version}))
    write_tree(home / "lib", STOCK_FILES)
    return home


def take_snapshot(root: Path) -> dict[str, bytes | None]:
    """Every path under ``root`` with its content (None for directories)."""
    return {
        p.relative_to(root).as_posix(): (None if p.is_dir() else p.read_bytes())
        for p in sorted(root.rglob("*"))
    }
