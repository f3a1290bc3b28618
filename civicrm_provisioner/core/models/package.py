"""
Package models — what the package manager tells us and where it put it.

A ``PackageEvent`` is the only thing the dependency manager hands over:
"package X at version Y was installed/updated". An ``InstalledPackage``
binds that identity to its directory on disk.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel

from civicrm_provisioner.core.errors import VersionParseError

# First MAJOR.MINOR.PATCH run found anywhere in the version string
_RELEASE_VERSION_RE = re.compile(r"(\d+\.\d+\.\d+)")


def parse_release_version(pretty_version: str) -> str:
    """Extract the release number from a human-readable version string.

    ``"5.10.2"``, ``"v5.10.2"`` and ``"5.10.2-patch1"`` all yield
    ``"5.10.2"``.  Branch aliases such as ``"dev-master"`` carry no
    release number and are rejected.

    Raises:
        VersionParseError: If no MAJOR.MINOR.PATCH substring exists.
    """
    match = _RELEASE_VERSION_RE.search(pretty_version or "")
    if match is None:
        raise VersionParseError(
            f"Unable to determine CiviCRM release version from {pretty_version!r}"
        )
    return match.group(1)


class PackageEvent(BaseModel):
    """An install or update notification from the package manager."""

    operation: Literal["install", "update"] = "install"
    name: str
    version: str


class InstalledPackage(BaseModel):
    """A package the package manager has placed on disk."""

    name: str
    pretty_version: str
    path: Path

    @classmethod
    def from_event(cls, event: PackageEvent, vendor_dir: Path) -> InstalledPackage:
        """Locate the package for an event: ``<vendor_dir>/<name>``."""
        return cls(
            name=event.name,
            pretty_version=event.version,
            path=vendor_dir / event.name,
        )

    @property
    def release_version(self) -> str:
        """The MAJOR.MINOR.PATCH release this package corresponds to."""
        return parse_release_version(self.pretty_version)
