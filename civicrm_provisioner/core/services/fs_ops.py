"""
Filesystem helper — remove, mirror and filtered-mirror directory trees.

Thin layer over ``shutil``/``pathlib``.  Every ``OSError`` comes back
out as ``FilesystemError`` chained to the original, so callers only
deal with the provisioning error taxonomy.  Nothing here retries.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable
from pathlib import Path

from civicrm_provisioner.core.errors import FilesystemError

logger = logging.getLogger(__name__)


def remove_directory_recursively(path: Path) -> None:
    """Delete a directory tree.  A missing path is not an error.

    A file or symlink sitting at ``path`` is unlinked instead.
    """
    path = Path(path)
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        else:
            return
    except OSError as e:
        raise FilesystemError(f"Cannot remove {path}: {e}") from e
    logger.debug("Removed %s", path)


def _normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """``".js"`` and ``"js"`` are the same entry."""
    return frozenset(ext[1:] if ext.startswith(".") else ext for ext in extensions)


def mirror_files_with_extensions(
    source: Path,
    destination: Path,
    extensions: Iterable[str],
) -> int:
    """Copy every file under ``source`` whose extension is allow-listed.

    Matching is exact (case-sensitive) against the last suffix of the
    file name.  Relative paths are preserved; intermediate directories
    are created only for files that are copied.  The source is left
    untouched.

    Returns:
        Number of files copied.
    """
    source = Path(source)
    destination = Path(destination)
    allowed = _normalize_extensions(extensions)

    if not source.is_dir():
        raise FilesystemError(f"Source directory not found: {source}")

    copied = 0
    try:
        for dirpath, _dirnames, filenames in os.walk(source):
            rel_dir = Path(dirpath).relative_to(source)
            for filename in filenames:
                _, dot, ext = filename.rpartition(".")
                if not dot or ext not in allowed:
                    continue
                src_file = Path(dirpath) / filename
                if not src_file.is_file():
                    continue
                dest_file = destination / rel_dir / filename
                dest_file.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src_file, dest_file)
                copied += 1
    except OSError as e:
        raise FilesystemError(
            f"Cannot mirror {source} to {destination}: {e}"
        ) from e

    logger.debug("Mirrored %d files from %s to %s", copied, source, destination)
    return copied


def mirror_directory(source: Path, destination: Path) -> None:
    """Make ``destination`` an exact copy of ``source``.

    Files and directories already in ``destination`` but absent from
    ``source`` are deleted; everything in ``source`` is copied over,
    overwriting files with the same relative path.
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_dir():
        raise FilesystemError(f"Source directory not found: {source}")

    try:
        if destination.is_dir():
            _prune_extraneous(source, destination)
        elif destination.exists() or destination.is_symlink():
            destination.unlink()
        shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
    except OSError as e:
        raise FilesystemError(
            f"Cannot mirror {source} to {destination}: {e}"
        ) from e

    logger.debug("Mirrored %s to %s", source, destination)


def _prune_extraneous(source: Path, destination: Path) -> None:
    """Delete entries of ``destination`` that ``source`` does not have."""
    for entry in list(destination.iterdir()):
        counterpart = source / entry.name
        if entry.is_symlink():
            # copytree recreates links, it cannot overwrite them
            entry.unlink()
        elif entry.is_dir():
            if counterpart.is_dir() and not counterpart.is_symlink():
                _prune_extraneous(counterpart, entry)
            else:
                shutil.rmtree(entry)
        elif not counterpart.is_file() or counterpart.is_symlink():
            entry.unlink()


def copy_file(source: Path, destination: Path) -> None:
    """Copy one file, overwriting unconditionally."""
    source = Path(source)
    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
    except OSError as e:
        raise FilesystemError(f"Cannot copy {source} to {destination}: {e}") from e


def read_file(path: Path) -> str:
    """Read a UTF-8 text file."""
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Cannot read {path}: {e}") from e


def write_file(path: Path, content: str) -> None:
    """Write UTF-8 text, creating the parent directory."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Cannot write {path}: {e}") from e
