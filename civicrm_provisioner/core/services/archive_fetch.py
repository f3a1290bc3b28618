"""
Archive fetcher — download to a temp file, extract tar.gz / zip.

Every temporary file or directory handed out here is owned by exactly
one operation.  ``downloaded_archive()`` and ``temporary_directory()``
are the scopes that guarantee removal, success or failure.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import tempfile
import urllib.error
import urllib.request
import zipfile
import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from civicrm_provisioner import __version__
from civicrm_provisioner.core.errors import ExtractError, FetchError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192
_USER_AGENT = f"civicrm-provisioner/{__version__}"


def download(
    url: str,
    *,
    timeout: float | None = None,
    prefix: str = "civicrm-archive-",
) -> Path:
    """Stream ``url`` into a new temporary file and return its path.

    The caller owns the returned file.  On failure the partial file is
    removed before ``FetchError`` is raised.

    Args:
        url: Any URL ``urllib`` can open (http, https, file).
        timeout: Socket timeout in seconds; None blocks indefinitely.
        prefix: Temporary file name prefix.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=prefix)
    tmp_path = Path(tmp_name)

    try:
        req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        with os.fdopen(fd, "wb") as f, urllib.request.urlopen(req, timeout=timeout) as resp:
            downloaded = 0
            while True:
                chunk = resp.read(_CHUNK_SIZE)
                if not chunk:
                    break
                f.write(chunk)
                downloaded += len(chunk)
    except (urllib.error.URLError, OSError, ValueError) as e:
        tmp_path.unlink(missing_ok=True)
        raise FetchError(f"Download failed for {url}: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.debug("Downloaded %d bytes from %s to %s", downloaded, url, tmp_path)
    return tmp_path


@contextmanager
def downloaded_archive(
    url: str,
    *,
    timeout: float | None = None,
    prefix: str = "civicrm-archive-",
) -> Iterator[Path]:
    """Download ``url`` and yield the file; it is deleted on exit."""
    path = download(url, timeout=timeout, prefix=prefix)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


@contextmanager
def temporary_directory(prefix: str = "civicrm-extract-") -> Iterator[Path]:
    """Yield a fresh temporary directory; it is removed on exit."""
    path = Path(tempfile.mkdtemp(prefix=prefix))
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


def extract_tar_gz(archive: Path, dest_dir: Path) -> None:
    """Extract a gzip-compressed tarball into an existing directory."""
    dest_dir = Path(dest_dir)
    if not dest_dir.is_dir():
        raise ExtractError(f"Extraction directory does not exist: {dest_dir}")

    try:
        with tarfile.open(archive, "r:gz") as tf:
            tf.extractall(dest_dir, filter="data")
    except (tarfile.TarError, zlib.error, OSError, EOFError) as e:
        raise ExtractError(f"Cannot extract {archive}: {e}") from e

    logger.debug("Extracted %s into %s", archive, dest_dir)


def extract_zip(archive: Path, dest_dir: Path) -> None:
    """Extract a zip archive; ``dest_dir`` is created if missing."""
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            zf.extractall(dest_dir)
    except (
        zipfile.BadZipFile,
        zlib.error,
        NotImplementedError,  # unsupported compression method
        RuntimeError,         # encrypted entry
        OSError,
    ) as e:
        raise ExtractError(f"Cannot extract {archive}: {e}") from e

    logger.debug("Extracted %s into %s", archive, dest_dir)


def first_zip_entry(archive: Path) -> str:
    """Name of the first entry in a zip, read without extracting."""
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            names = zf.namelist()
    except (zipfile.BadZipFile, OSError) as e:
        raise ExtractError(f"Cannot read {archive}: {e}") from e

    if not names:
        raise ExtractError(f"Archive {archive} has no entries")
    return names[0]
