"""
Provision use case — react to a civicrm-core install/update.

This is the top-level handler: it filters package events, parses the
release version, then runs the four steps in order:

    asset build  →  reconcile release  →  install extensions  →  sync web assets

Steps are not transactional.  The first ``ProvisionError`` stops the
run; whatever earlier steps wrote stays on disk.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from civicrm_provisioner.adapters.base import Adapter
from civicrm_provisioner.core.errors import ProvisionError, VersionParseError
from civicrm_provisioner.core.models.package import InstalledPackage, PackageEvent
from civicrm_provisioner.core.models.settings import ProvisionSettings
from civicrm_provisioner.core.observability.progress import ProgressReporter
from civicrm_provisioner.core.services.asset_build import run_asset_build
from civicrm_provisioner.core.services.asset_sync import SyncReport, sync_web_assets
from civicrm_provisioner.core.services.extension_install import (
    ExtensionReport,
    install_extensions,
)
from civicrm_provisioner.core.services.release_reconcile import (
    ReconcileReport,
    reconcile_release,
)

logger = logging.getLogger(__name__)

STEP_VERSION = "version"
STEP_ASSET_BUILD = "asset-build"
STEP_RECONCILE = "reconcile"
STEP_EXTENSIONS = "extensions"
STEP_WEB_ASSETS = "web-assets"


@dataclass
class ProvisionResult:
    """Outcome of handling one package event."""

    package: str
    pretty_version: str
    version: str | None = None
    package_path: Path | None = None
    handled: bool = False

    steps_completed: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: str | None = None

    reconcile: ReconcileReport | None = None
    extensions: ExtensionReport | None = None
    web_assets: SyncReport | None = None

    @property
    def status(self) -> str:
        """``ignored``, ``failed``, ``partial`` (some extensions failed) or ``ok``."""
        if not self.handled:
            return "ignored"
        if self.error:
            return "failed"
        if self.extensions and not self.extensions.ok:
            return "partial"
        return "ok"

    @property
    def ok(self) -> bool:
        return self.status in ("ok", "ignored")

    def to_dict(self) -> dict:
        result: dict = {
            "package": self.package,
            "pretty_version": self.pretty_version,
            "status": self.status,
        }
        if not self.handled:
            return result

        result["version"] = self.version
        result["package_path"] = str(self.package_path) if self.package_path else None
        result["steps_completed"] = self.steps_completed
        if self.error:
            result["failed_step"] = self.failed_step
            result["error"] = self.error
        if self.reconcile:
            result["reconcile"] = self.reconcile.to_dict()
        if self.extensions:
            result["extensions"] = self.extensions.to_dict()
        if self.web_assets:
            result["web_assets"] = self.web_assets.to_dict()
        return result


def handle_package_event(
    event: PackageEvent,
    settings: ProvisionSettings,
    project_root: Path,
    *,
    adapter: Adapter | None = None,
    reporter: ProgressReporter | None = None,
) -> ProvisionResult:
    """Provision if ``event`` concerns the configured package, else ignore it."""
    if event.name != settings.package_name:
        logger.debug("Ignoring %s event for %s", event.operation, event.name)
        return ProvisionResult(package=event.name, pretty_version=event.version)

    logger.info("Handling %s of %s %s", event.operation, event.name, event.version)
    package = InstalledPackage.from_event(event, settings.vendor_path(project_root))
    return run_provisioning(
        package, settings, project_root, adapter=adapter, reporter=reporter,
    )


def run_provisioning(
    package: InstalledPackage,
    settings: ProvisionSettings,
    project_root: Path,
    *,
    adapter: Adapter | None = None,
    reporter: ProgressReporter | None = None,
) -> ProvisionResult:
    """Run every provisioning step for an installed package.

    The version is parsed before anything touches the network or disk,
    so an unparseable version leaves the project untouched.
    """
    reporter = reporter or ProgressReporter()
    result = ProvisionResult(
        package=package.name,
        pretty_version=package.pretty_version,
        package_path=package.path,
        handled=True,
    )

    try:
        version = package.release_version
    except VersionParseError as e:
        logger.error("Not provisioning %s: %s", package.name, e)
        result.failed_step = STEP_VERSION
        result.error = str(e)
        return result
    result.version = version

    def _build() -> None:
        run_asset_build(
            package.path,
            settings.asset_build_command,
            adapter=adapter,
            reporter=reporter,
        )

    def _reconcile() -> None:
        result.reconcile = reconcile_release(
            version,
            package.path,
            url_template=settings.release_url_template,
            timeout=settings.download_timeout,
            reporter=reporter,
        )

    def _extensions() -> None:
        result.extensions = install_extensions(
            settings.extensions,
            package.path,
            on_error=settings.on_extension_error,
            timeout=settings.download_timeout,
            reporter=reporter,
        )

    def _web_assets() -> None:
        result.web_assets = sync_web_assets(
            package.path,
            settings.web_root_path(project_root),
            settings.asset_extensions,
            reporter=reporter,
        )

    steps: list[tuple[str, Callable[[], None]]] = [
        (STEP_ASSET_BUILD, _build),
        (STEP_RECONCILE, _reconcile),
        (STEP_EXTENSIONS, _extensions),
        (STEP_WEB_ASSETS, _web_assets),
    ]
    for name, step in steps:
        if not _run_step(result, name, step):
            reporter.info(f"Provisioning failed during {name}: {result.error}")
            return result

    if result.status == "partial":
        reporter.info(
            "Provisioning finished, failed extensions: "
            + ", ".join(sorted(result.extensions.failed))
        )
    return result


def _run_step(result: ProvisionResult, name: str, step: Callable[[], None]) -> bool:
    """Run one step; record success or the error that stopped it."""
    try:
        step()
    except ProvisionError as e:
        logger.error("Step %s failed: %s", name, e)
        result.failed_step = name
        result.error = str(e)
        return False
    result.steps_completed.append(name)
    return True
