"""
Release reconciler — fill in what the package manager leaves out.

The civicrm-core package is a git export: it lacks the bundled
``packages``/``sql`` trees and a handful of generated files that only
exist in the official release tarball.  This step downloads the
tarball for the installed release and copies those pieces across.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from civicrm_provisioner.core.observability.progress import ProgressReporter
from civicrm_provisioner.core.services import fs_ops
from civicrm_provisioner.core.services.archive_fetch import (
    downloaded_archive,
    extract_tar_gz,
    temporary_directory,
)

logger = logging.getLogger(__name__)

RELEASE_URL_TEMPLATE = "https://download.civicrm.org/civicrm-{version}-drupal.tar.gz"

# Top-level directory inside the release tarball
RELEASE_ROOT = "civicrm"

MIRRORED_DIRECTORIES = ("packages", "sql")

VERSION_FILE = "civicrm-version.php"
VERSION_PLATFORM_TAG = ("Drupal", "Drupal8")

COPIED_FILES = (
    "civicrm.config.php",
    "CRM/Core/I18n/SchemaStructure.php",
    "install/langs.php",
)


@dataclass
class ReconcileReport:
    """What the reconciler took from the release."""

    version: str
    url: str
    mirrored: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "url": self.url,
            "mirrored": self.mirrored,
            "copied": self.copied,
        }


def release_url(version: str, template: str = RELEASE_URL_TEMPLATE) -> str:
    """Download URL of the release tarball for ``version``."""
    return template.format(version=version)


def reconcile_release(
    version: str,
    package_path: Path,
    *,
    url_template: str = RELEASE_URL_TEMPLATE,
    timeout: float | None = None,
    reporter: ProgressReporter | None = None,
) -> ReconcileReport:
    """Copy the release-only files of ``version`` into ``package_path``.

    The downloaded tarball and its extraction directory are removed
    whether or not the copy succeeds.  Files already written before a
    failure stay in place.
    """
    reporter = reporter or ProgressReporter()
    package_path = Path(package_path)
    url = release_url(version, url_template)
    report = ReconcileReport(version=version, url=url)

    reporter.info(f"Downloading CiviCRM {version} release...")
    with downloaded_archive(url, timeout=timeout, prefix="civicrm-release-") as archive, \
            temporary_directory(prefix="civicrm-release-extract-") as extract_dir:
        reporter.info(f"Extracting CiviCRM {version} release...")
        extract_tar_gz(archive, extract_dir)
        release_root = extract_dir / RELEASE_ROOT

        reporter.info("Copying missing files from CiviCRM release...")
        for name in MIRRORED_DIRECTORIES:
            fs_ops.mirror_directory(release_root / name, package_path / name)
            report.mirrored.append(name)

        search, replace = VERSION_PLATFORM_TAG
        version_php = fs_ops.read_file(release_root / VERSION_FILE)
        fs_ops.write_file(package_path / VERSION_FILE, version_php.replace(search, replace))
        report.copied.append(VERSION_FILE)

        for rel_path in COPIED_FILES:
            fs_ops.copy_file(release_root / rel_path, package_path / rel_path)
            report.copied.append(rel_path)

    logger.info(
        "Reconciled %s from %s (%d dirs, %d files)",
        package_path, url, len(report.mirrored), len(report.copied),
    )
    return report
