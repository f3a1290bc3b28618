"""
Web asset syncer — publish CiviCRM's static files under the web root.

The vendor directory is not web-accessible, so browser-facing files are
copied to ``web/libraries/civicrm``.  The destination is rebuilt from
scratch on every run: whatever was there before is gone afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from civicrm_provisioner.core.observability.progress import ProgressReporter
from civicrm_provisioner.core.services import fs_ops

logger = logging.getLogger(__name__)

DEFAULT_WEB_ROOT = "web/libraries/civicrm"

ASSET_EXTENSIONS = (
    "html",
    "js",
    "css",
    "svg",
    "png",
    "jpg",
    "jpeg",
    "ico",
    "gif",
    "woff",
    "woff2",
    "ttf",
    "eot",
    "swf",
)

# Test fixtures match the allow-list but must not be published
EXCLUDED_SUBDIR = "tests"

# Vendored third-party code, published whole
EXTERN_SUBDIR = "extern"

CONFIG_FILE = "civicrm.config.php"

SETTINGS_LOCATION_FILE = "settings_location.php"
SETTINGS_LOCATION_PHP = """<?php

define('CIVICRM_CONFDIR', '../../../sites');"""


@dataclass
class SyncReport:
    """Result of one web asset sync."""

    destination: Path
    assets_copied: int = 0

    def to_dict(self) -> dict:
        return {
            "destination": str(self.destination),
            "assets_copied": self.assets_copied,
        }


def sync_web_assets(
    package_path: Path,
    destination: Path,
    extensions: tuple[str, ...] | list[str] = ASSET_EXTENSIONS,
    *,
    reporter: ProgressReporter | None = None,
) -> SyncReport:
    """Rebuild ``destination`` from the package's web assets."""
    reporter = reporter or ProgressReporter()
    package_path = Path(package_path)
    destination = Path(destination)

    reporter.info(f"Syncing CiviCRM web assets to {destination}...")

    fs_ops.remove_directory_recursively(destination)
    copied = fs_ops.mirror_files_with_extensions(package_path, destination, extensions)
    fs_ops.remove_directory_recursively(destination / EXCLUDED_SUBDIR)

    fs_ops.mirror_directory(package_path / EXTERN_SUBDIR, destination / EXTERN_SUBDIR)
    fs_ops.copy_file(package_path / CONFIG_FILE, destination / CONFIG_FILE)
    fs_ops.write_file(destination / SETTINGS_LOCATION_FILE, SETTINGS_LOCATION_PHP)

    logger.info("Synced %d asset files to %s", copied, destination)
    return SyncReport(destination=destination, assets_copied=copied)
