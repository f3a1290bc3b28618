"""
Asset build — run the front-end dependency tool inside civicrm-core.

civicrm-core ships a ``bower.json`` but not the libraries it lists;
``bower install`` fetches them into ``bower_components`` before the
web assets are synced.
"""

from __future__ import annotations

import logging
from pathlib import Path

from civicrm_provisioner.adapters.base import Adapter, ExecutionContext
from civicrm_provisioner.adapters.shell.command import ShellCommandAdapter
from civicrm_provisioner.core.errors import SubprocessError
from civicrm_provisioner.core.models.action import Action, Receipt
from civicrm_provisioner.core.observability.progress import ProgressReporter

logger = logging.getLogger(__name__)

ASSET_BUILD_ACTION = "asset-build"


def run_asset_build(
    package_path: Path,
    command: str,
    *,
    adapter: Adapter | None = None,
    reporter: ProgressReporter | None = None,
) -> Receipt:
    """Run ``command`` in ``package_path``; a failed run raises.

    An empty command skips the step.

    Raises:
        SubprocessError: The command could not start or exited non-zero.
    """
    reporter = reporter or ProgressReporter()
    adapter = adapter or ShellCommandAdapter()

    if not command.strip():
        logger.info("No asset build command configured, skipping")
        return Receipt.skip(
            adapter=adapter.name,
            action_id=ASSET_BUILD_ACTION,
            reason="no command configured",
        )

    tool = command.split()[0]
    reporter.info(f"Running {tool} for CiviCRM...")

    context = ExecutionContext(
        action=Action(
            id=ASSET_BUILD_ACTION,
            name=f"Run {tool}",
            adapter=adapter.name,
            params={"command": command, "timeout": None},
        ),
        working_dir=str(package_path),
    )

    if not adapter.is_available():
        raise SubprocessError(f"Cannot run '{command}': {adapter.name} adapter is not available")

    valid, error = adapter.validate(context)
    if not valid:
        raise SubprocessError(f"Cannot run '{command}': {error}")

    receipt = adapter.execute(context)
    if receipt.failed:
        raise SubprocessError(f"'{command}' failed in {package_path}: {receipt.error}")

    reporter.detail(receipt.output)
    logger.debug("'%s' finished in %dms", command, receipt.duration_ms)
    return receipt
