"""
Filesystem primitives — exclusive copy, graft, prune, and file removal.

These raise plain ``OSError``s; classifying them is the caller's job.
Only argument errors are raised as ``InvalidArgumentError``, and always
before anything on disk is touched.

    graft(src, dest)        cp -R src dest/   (all-or-nothing, never overwrites)
    prune(dir)              rm -r dir
    remove_files([...])     rm f1 f2 ...      (missing files are not an error)
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Sequence, Union

from n2s_installer.core.models.errors import InvalidArgumentError
from n2s_installer.core.observability.progress import ProgressSink, ensure_sink

logger = logging.getLogger(__name__)

PathArg = Union[str, "os.PathLike[str]"]


def _require_path(value: PathArg | None, label: str) -> Path:
    if value is None or value == "":
        raise InvalidArgumentError(f"{label} argument must not be empty")
    try:
        return Path(value)
    except TypeError as e:
        raise InvalidArgumentError(f"{label} argument must be a path") from e


def copy_file(src: PathArg, dst: PathArg) -> None:
    """Copy one regular file; fails if ``dst`` already exists.

    Permission bits are copied too.  A partially written ``dst`` is
    removed before the error propagates.
    """
    with open(src, "rb") as fsrc:
        with open(dst, "xb") as fdst:
            try:
                shutil.copyfileobj(fsrc, fdst)
            except BaseException:
                fdst.close()
                os.unlink(dst)
                raise
    shutil.copymode(src, dst)


def graft(src: PathArg, dest: PathArg, *, sink: ProgressSink | None = None) -> None:
    """Copy directory ``src`` into existing directory ``dest``.

    Creates ``dest/<basename of src>`` and fills it.  Regular files are
    copied exclusively, directories are created; anything else (symlinks,
    FIFOs, sockets, devices) is skipped with a message to ``sink``.

    If anything fails after the new directory was created, the partial
    tree is pruned before the error is re-raised.  If creating it fails,
    nothing is cleaned up.

    Raises:
        InvalidArgumentError: empty argument, or ``dest`` inside ``src``.
        OSError: any filesystem failure.
    """
    src_path = _require_path(src, "Source")
    dest_path = _require_path(dest, "Destination")
    sink = ensure_sink(sink)

    target = dest_path / src_path.name
    if dest_path.resolve().is_relative_to(src_path.resolve()):
        raise InvalidArgumentError(
            f"Destination {dest_path} must not be inside source {src_path}"
        )

    target.mkdir()
    logger.debug("graft: %s -> %s", src_path, target)

    try:
        _copy_tree(src_path, target, sink)
    except Exception:
        logger.debug("graft of %s failed; removing partial copy %s", src_path, target)
        prune(target)
        raise


def _copy_tree(src: Path, dst: Path, sink: ProgressSink) -> None:
    # dst exists and is empty; each pushed pair likewise
    pending: list[tuple[Path, Path]] = [(src, dst)]
    while pending:
        src_dir, dst_dir = pending.pop()
        for name in sorted(os.listdir(src_dir)):
            src_item = src_dir / name
            dst_item = dst_dir / name
            mode = src_item.lstat().st_mode
            if stat.S_ISDIR(mode):
                dst_item.mkdir()
                pending.append((src_item, dst_item))
            elif stat.S_ISREG(mode):
                copy_file(src_item, dst_item)
            else:
                sink.emit(f"Not a regular file or a directory, omitting {src_item}")


def prune(dir_path: PathArg) -> None:
    """Delete directory ``dir_path`` and everything under it.

    Entry kinds are probed with ``lstat``, so a symlink to a directory is
    unlinked rather than followed.  The first failure aborts the walk.
    """
    root = _require_path(dir_path, "Target directory")

    # (path, children_removed)
    pending: list[tuple[Path, bool]] = [(root, False)]
    while pending:
        current, emptied = pending.pop()
        if emptied:
            current.rmdir()
            continue
        pending.append((current, True))
        for name in os.listdir(current):
            entry = current / name
            if stat.S_ISDIR(entry.lstat().st_mode):
                pending.append((entry, False))
            else:
                entry.unlink()

    logger.debug("pruned %s", root)


def remove_files(
    paths: Sequence[str],
    *,
    base: PathArg | None = None,
    sink: ProgressSink | None = None,
) -> None:
    """Delete each listed file in order.

    Relative paths resolve against ``base`` (or the working directory).
    A file that is already gone is reported to ``sink`` and skipped;
    every other error (e.g. the path is a directory) propagates.
    """
    if paths is None:
        raise InvalidArgumentError("Path list must be given")
    if not isinstance(paths, (list, tuple)):
        raise InvalidArgumentError("Path list must be a list")
    for item in paths:
        if not isinstance(item, str):
            raise InvalidArgumentError("Path list can only contain strings")
    sink = ensure_sink(sink)

    for item in paths:
        target = Path(base, item) if base is not None else Path(item)
        try:
            target.unlink()
        except FileNotFoundError:
            sink.emit(f"Could not find file {item} for removal")
