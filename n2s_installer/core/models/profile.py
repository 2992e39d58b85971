"""
Patch profile — the static description of what install touches.

Loaded once from ``profile.yml`` and never mutated afterwards: both
models are frozen, and list fields are stored as tuples.

All target paths are relative to the npm ``lib`` directory, use ``/`` as
separator, and carry no file extension; the profile adds the extension
and the backup flag.
"""

from __future__ import annotations

import posixpath

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _check_relative(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("empty path")
    if value.startswith("/") or "\\" in value or ":" in value:
        raise ValueError(f"path must be relative and use '/': {value!r}")
    parts = value.split("/")
    if any(p in ("", ".", "..") for p in parts):
        raise ValueError(f"path must be normalized: {value!r}")
    return value


def _check_unique(values: tuple[str, ...]) -> tuple[str, ...]:
    seen: set[str] = set()
    for v in values:
        if v in seen:
            raise ValueError(f"duplicate entry: {v!r}")
        seen.add(v)
    return values


class TargetManifest(BaseModel):
    """Which files install replaces, and which files/dirs it adds."""

    model_config = ConfigDict(frozen=True)

    changed_files: tuple[str, ...] = ()
    added_files: tuple[str, ...] = ()
    added_dirs: tuple[str, ...] = ()

    @field_validator("changed_files", "added_files")
    @classmethod
    def _valid_files(cls, values: tuple[str, ...]) -> tuple[str, ...]:
        for v in values:
            _check_relative(v)
        return _check_unique(values)

    @field_validator("added_dirs")
    @classmethod
    def _valid_dirs(cls, values: tuple[str, ...]) -> tuple[str, ...]:
        for v in values:
            _check_relative(v)
            if "/" in v:
                raise ValueError(f"added directories must be top-level: {v!r}")
        return _check_unique(values)

    @property
    def top_level_added_files(self) -> tuple[str, ...]:
        return tuple(f for f in self.added_files if "/" not in f)

    @property
    def deep_added_files(self) -> tuple[str, ...]:
        return tuple(f for f in self.added_files if "/" in f)


class PatchProfile(BaseModel):
    """Root configuration — loaded from ``profile.yml``."""

    model_config = ConfigDict(frozen=True)

    product: str = "npm-two-stage"
    package_name: str = "npm"
    target_version: str
    lib_dir: str = "lib"
    manifest_file: str = "package.json"
    file_extension: str = ".js"
    backup_flag: str = "_ORIG"

    version_command: str = "npm --version"
    root_command: str = "npm root -g"
    source_dir: str = "node_modules/npm-two-stage/src"

    targets: TargetManifest = Field(default_factory=TargetManifest)

    @field_validator("target_version", "package_name", "backup_flag", "lib_dir")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("file_extension")
    @classmethod
    def _dotted(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError(f"extension must start with '.': {value!r}")
        return value

    @model_validator(mode="after")
    def _backups_do_not_collide(self) -> PatchProfile:
        expected = {
            self.file_name(f)
            for f in self.targets.changed_files + self.targets.added_files
        }
        for name in self.targets.changed_files:
            backup = self.backup_file_name(name)
            if backup in expected:
                raise ValueError(f"backup name {backup!r} collides with an expected file")
        return self

    # ── Derived names ───────────────────────────────────────────

    @property
    def backup_suffix(self) -> str:
        """Tail shared by every backup file name (e.g. ``_ORIG.js``)."""
        return self.backup_flag + self.file_extension

    def file_name(self, name: str) -> str:
        return name + self.file_extension

    def backup_file_name(self, name: str) -> str:
        return name + self.backup_suffix

    def top_level_added(self) -> list[str]:
        """Entries expected directly in ``lib/``: new files, then new dirs."""
        files = [self.file_name(f) for f in self.targets.top_level_added_files]
        return files + list(self.targets.added_dirs)

    def deep_added_files(self) -> list[str]:
        return [self.file_name(f) for f in self.targets.deep_added_files]

    def changed_dirs(self) -> list[str]:
        """``"."`` plus every distinct parent of a nested changed file."""
        dirs = ["."]
        for name in self.targets.changed_files:
            parent = posixpath.dirname(name)
            if parent and parent not in dirs:
                dirs.append(parent)
        return dirs

    def copy_list(self) -> list[str]:
        """Flat files copied in by install: replacements, then new files."""
        names = self.targets.changed_files + self.targets.added_files
        return [self.file_name(n) for n in names]
