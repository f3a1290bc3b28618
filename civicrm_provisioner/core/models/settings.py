"""
Provisioner settings — loaded from provision.yml or composer.json.

Everything the provisioning steps need that is not hard-wired into the
CiviCRM release layout lives here.  Paths are kept as written in the
config file and resolved against the project root by the caller.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from civicrm_provisioner.core.services.asset_sync import (
    ASSET_EXTENSIONS,
    DEFAULT_WEB_ROOT,
)
from civicrm_provisioner.core.services.release_reconcile import RELEASE_URL_TEMPLATE

CIVICRM_PACKAGE = "civicrm/civicrm-core"


class CivicrmExtra(BaseModel):
    """The ``civicrm`` block: extension name → zip URL."""

    extensions: dict[str, str] = Field(default_factory=dict)

    @field_validator("extensions", mode="before")
    @classmethod
    def _none_is_empty(cls, value: object) -> object:
        # ``extensions:`` with nothing under it parses to None; PHP writes
        # an empty map as []
        return {} if value is None or value == [] else value

    @field_validator("extensions")
    @classmethod
    def _names_and_urls_present(cls, value: dict[str, str]) -> dict[str, str]:
        for name, url in value.items():
            if not name.strip():
                raise ValueError("extension names must be non-empty")
            if not url or not url.strip():
                raise ValueError(f"extension '{name}' has no download URL")
        return value


class ProvisionSettings(BaseModel):
    """Root settings for a provisioning run."""

    package_name: str = CIVICRM_PACKAGE
    vendor_dir: str = "vendor"
    web_root: str = DEFAULT_WEB_ROOT
    release_url_template: str = RELEASE_URL_TEMPLATE
    asset_build_command: str = "bower install"
    asset_extensions: list[str] = Field(default_factory=lambda: list(ASSET_EXTENSIONS))
    on_extension_error: Literal["abort", "continue"] = "abort"
    download_timeout: float | None = None   # None = block until the transport gives up

    civicrm: CivicrmExtra = Field(default_factory=CivicrmExtra)

    @field_validator("civicrm", mode="before")
    @classmethod
    def _none_is_default(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("release_url_template")
    @classmethod
    def _template_has_version(cls, value: str) -> str:
        if "{version}" not in value:
            raise ValueError("release_url_template must contain '{version}'")
        return value

    @property
    def extensions(self) -> dict[str, str]:
        """Declared extensions, in declaration order."""
        return self.civicrm.extensions

    def vendor_path(self, project_root: Path) -> Path:
        """Absolute vendor directory for a project."""
        return (project_root / self.vendor_dir).resolve()

    def package_path(self, project_root: Path) -> Path:
        """Where the package manager installs the target package."""
        return self.vendor_path(project_root) / self.package_name

    def web_root_path(self, project_root: Path) -> Path:
        """Absolute destination for synced web assets."""
        return (project_root / self.web_root).resolve()
