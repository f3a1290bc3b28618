"""
Config check use case — validate provisioner settings and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from civicrm_provisioner.core.config.loader import (
    ConfigError,
    find_config_file,
    load_settings,
    project_root,
)
from civicrm_provisioner.core.models.settings import ProvisionSettings

_FETCHABLE_SCHEMES = {"http", "https", "file"}


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    settings: ProvisionSettings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "package_name": self.settings.package_name if self.settings else None,
            "extension_count": len(self.settings.extensions) if self.settings else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate provisioner configuration and report issues.

    Args:
        config_path: Optional explicit path to provision.yml / composer.json.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.errors.append("No provision.yml or composer.json found.")
        return result
    result.config_path = config_path

    try:
        settings = load_settings(config_path)
        result.settings = settings
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Semantic checks
    for name, url in settings.extensions.items():
        scheme = urlparse(url).scheme
        if scheme not in _FETCHABLE_SCHEMES:
            result.errors.append(
                f"Extension '{name}' URL has unsupported scheme '{scheme}': {url}"
            )
        elif not url.endswith(".zip"):
            result.warnings.append(f"Extension '{name}' URL does not end in .zip: {url}")

    root = project_root(config_path)
    package_path = settings.package_path(root)
    if not package_path.is_dir():
        result.warnings.append(
            f"Package directory does not exist yet: {package_path}"
        )

    if not settings.asset_build_command.strip():
        result.warnings.append("No asset build command configured; the build step is skipped.")

    web_root = settings.web_root_path(root)
    if web_root == root or root.is_relative_to(web_root):
        result.errors.append(
            f"web_root {settings.web_root!r} would wipe the project directory on every sync"
        )
    elif (
        settings.vendor_path(root).is_relative_to(web_root)
        or package_path.is_relative_to(web_root)
    ):
        result.errors.append(
            f"web_root {settings.web_root!r} would wipe the installed packages on every sync"
        )
    elif web_root.is_relative_to(package_path):
        result.errors.append(
            f"web_root {settings.web_root!r} lies inside the package it is synced from"
        )

    result.valid = len(result.errors) == 0
    return result
