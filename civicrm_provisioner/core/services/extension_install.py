"""
Extension installer — unpack declared extension zips into tools/extensions.

Extension archives unpack into a directory named after the release
(``myext-1.0/``), not after the extension.  The first zip entry tells
us that directory; it is renamed to the declared name so the install
location is predictable.

Known gap: a flat archive (first entry without a ``/``) has no
top-level directory to rename, so its files land directly in
``tools/extensions``.  This is logged and left as is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from civicrm_provisioner.core.errors import ExtensionInstallError, ProvisionError
from civicrm_provisioner.core.observability.progress import ProgressReporter
from civicrm_provisioner.core.services.archive_fetch import (
    downloaded_archive,
    extract_zip,
    first_zip_entry,
)

logger = logging.getLogger(__name__)

EXTENSIONS_SUBDIR = "tools/extensions"

ErrorMode = Literal["abort", "continue"]


@dataclass
class InstalledExtension:
    """One extension placed on disk."""

    name: str
    url: str
    path: Path
    renamed_from: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "url": self.url,
            "path": str(self.path),
            "renamed_from": self.renamed_from,
        }


@dataclass
class ExtensionReport:
    """Outcome of installing every declared extension."""

    installed: list[InstalledExtension] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "installed": [ext.to_dict() for ext in self.installed],
            "failed": self.failed,
        }


def extensions_dir(package_path: Path) -> Path:
    """Where extensions live inside the installed package."""
    return Path(package_path) / EXTENSIONS_SUBDIR


def install_extension(
    name: str,
    url: str,
    package_path: Path,
    *,
    timeout: float | None = None,
    reporter: ProgressReporter | None = None,
) -> InstalledExtension:
    """Download the zip at ``url`` and install it as extension ``name``.

    Raises:
        FetchError: The URL could not be read.
        ExtractError: The zip is corrupt or empty.
        ExtensionInstallError: The rename target already exists, or
            the rename itself failed.
    """
    reporter = reporter or ProgressReporter()
    target_root = extensions_dir(package_path)

    reporter.info(f"Downloading CiviCRM extension {name} from {url}...")
    with downloaded_archive(url, timeout=timeout, prefix="civicrm-extension-") as archive:
        first_entry = first_zip_entry(archive)
        extract_zip(archive, target_root)

    top_level, sep, _ = first_entry.partition("/")
    if not sep:
        logger.warning(
            "Extension %s: first archive entry %r has no directory, "
            "left unpacked in %s",
            name, first_entry, target_root,
        )
        return InstalledExtension(name=name, url=url, path=target_root)

    extracted = target_root / top_level
    destination = target_root / name
    if top_level == name:
        return InstalledExtension(name=name, url=url, path=destination)

    if destination.exists():
        raise ExtensionInstallError(
            f"Cannot rename {extracted} to {destination}: target already exists"
        )
    try:
        extracted.rename(destination)
    except OSError as e:
        raise ExtensionInstallError(
            f"Cannot rename {extracted} to {destination}: {e}"
        ) from e

    logger.debug("Renamed %s to %s", extracted, destination)
    return InstalledExtension(
        name=name, url=url, path=destination, renamed_from=top_level,
    )


def install_extensions(
    declarations: dict[str, str],
    package_path: Path,
    *,
    on_error: ErrorMode = "abort",
    timeout: float | None = None,
    reporter: ProgressReporter | None = None,
) -> ExtensionReport:
    """Install every declared extension, one at a time, in order.

    With ``on_error="abort"`` the first failure propagates and later
    extensions are not attempted.  With ``"continue"`` every extension
    is attempted and failures are collected in the report.
    """
    report = ExtensionReport()

    for name, url in declarations.items():
        try:
            installed = install_extension(
                name, url, package_path, timeout=timeout, reporter=reporter,
            )
        except ProvisionError as e:
            if on_error == "abort":
                raise
            logger.error("Extension %s failed: %s", name, e)
            report.failed[name] = str(e)
            continue
        report.installed.append(installed)

    return report
