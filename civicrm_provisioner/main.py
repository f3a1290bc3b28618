"""
CiviCRM provisioner — CLI entrypoint.

Usage:
    python -m civicrm_provisioner.main --help
    civicrm-provisioner handle-event install civicrm/civicrm-core 5.10.2
    civicrm-provisioner provision 5.10.2
    civicrm-provisioner config check
"""

from __future__ import annotations

import functools
import json
import sys
from pathlib import Path

import click

from civicrm_provisioner import __version__
from civicrm_provisioner.core.observability.logging_config import (
    resolve_level,
    setup_logging,
)
from civicrm_provisioner.core.observability.progress import ProgressReporter


@click.group()
@click.version_option(version=__version__, prog_name="civicrm-provisioner")
@click.option("--verbose", "-v", is_flag=True, help="Show build tool output and info logs.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress progress output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to provision.yml or composer.json (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """CiviCRM provisioner — complete a civicrm-core install after the package manager."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


# ── Helpers ─────────────────────────────────────────────────────────


def _load(ctx: click.Context):
    """Load settings or exit with the configuration error."""
    from civicrm_provisioner.core.config.loader import (
        ConfigError,
        find_config_file,
        load_settings,
        project_root,
    )

    config_path: Path | None = ctx.obj.get("config_path") or find_config_file()
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    assert config_path is not None  # load_settings raised otherwise
    return settings, project_root(config_path)


def _reporter(ctx: click.Context, as_json: bool = False) -> ProgressReporter:
    """Progress lines on stdout, or stderr when stdout carries JSON."""
    if ctx.obj.get("quiet"):
        return ProgressReporter(verbose=False)
    write = functools.partial(click.echo, err=True) if as_json else click.echo
    return ProgressReporter(write=write, verbose=ctx.obj.get("verbose", False))


def _adapter(mock: bool):
    if mock:
        from civicrm_provisioner.adapters.mock import MockAdapter

        return MockAdapter()
    from civicrm_provisioner.adapters.shell.command import ShellCommandAdapter

    return ShellCommandAdapter()


def _print_result(result, as_json: bool) -> None:
    """Render a ProvisionResult and exit non-zero unless it is ok."""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.status == "ignored":
        click.echo(f"   {result.package} is not the provisioned package, nothing to do.")
        return

    if result.error:
        click.secho(f"❌ {result.failed_step}: {result.error}", fg="red", err=True)
        sys.exit(1)

    click.echo()
    click.secho(f"✓ {result.package} {result.version} provisioned", fg="green", bold=True)
    for step in result.steps_completed:
        click.echo(f"   • {step}")

    if result.extensions and result.extensions.failed:
        click.echo()
        click.secho("⚠️  Failed extensions:", fg="yellow")
        for name, error in result.extensions.failed.items():
            click.echo(f"   • {name}: {error}")
        sys.exit(1)


# ── Event commands ──────────────────────────────────────────────────


@cli.command("handle-event")
@click.argument("operation", type=click.Choice(["install", "update"]))
@click.argument("name")
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--mock", is_flag=True, help="Do not run the asset build tool.")
@click.pass_context
def handle_event(
    ctx: click.Context,
    operation: str,
    name: str,
    version: str,
    as_json: bool,
    mock: bool,
) -> None:
    """React to a package install/update reported by the package manager.

    Events for any package other than the configured one are ignored.

    Examples:

        civicrm-provisioner handle-event install civicrm/civicrm-core 5.10.2

        civicrm-provisioner handle-event update civicrm/civicrm-core 5.11.0
    """
    from civicrm_provisioner.core.models.package import PackageEvent
    from civicrm_provisioner.core.use_cases.provision import handle_package_event

    settings, root = _load(ctx)
    event = PackageEvent(operation=operation, name=name, version=version)
    result = handle_package_event(
        event,
        settings,
        root,
        adapter=_adapter(mock),
        reporter=_reporter(ctx, as_json),
    )
    _print_result(result, as_json)


@cli.command()
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--mock", is_flag=True, help="Do not run the asset build tool.")
@click.pass_context
def provision(ctx: click.Context, version: str, as_json: bool, mock: bool) -> None:
    """Run every provisioning step for the configured package at VERSION."""
    from civicrm_provisioner.core.models.package import PackageEvent
    from civicrm_provisioner.core.use_cases.provision import handle_package_event

    settings, root = _load(ctx)
    event = PackageEvent(operation="install", name=settings.package_name, version=version)
    result = handle_package_event(
        event,
        settings,
        root,
        adapter=_adapter(mock),
        reporter=_reporter(ctx, as_json),
    )
    _print_result(result, as_json)


# ── Single-step commands ────────────────────────────────────────────


@cli.command()
@click.argument("version")
@click.pass_context
def reconcile(ctx: click.Context, version: str) -> None:
    """Copy release-only files for VERSION into the installed package."""
    from civicrm_provisioner.core.errors import ProvisionError
    from civicrm_provisioner.core.models.package import parse_release_version
    from civicrm_provisioner.core.services.release_reconcile import reconcile_release

    settings, root = _load(ctx)
    try:
        report = reconcile_release(
            parse_release_version(version),
            settings.package_path(root),
            url_template=settings.release_url_template,
            timeout=settings.download_timeout,
            reporter=_reporter(ctx),
        )
    except ProvisionError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    click.secho(
        f"✓ Reconciled {len(report.mirrored)} directories and "
        f"{len(report.copied)} files from {report.url}",
        fg="green",
    )


@cli.command("install-extensions")
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Attempt every extension and report failures at the end.",
)
@click.pass_context
def install_extensions_cmd(ctx: click.Context, continue_on_error: bool) -> None:
    """Download and install every declared extension."""
    from civicrm_provisioner.core.errors import ProvisionError
    from civicrm_provisioner.core.services.extension_install import install_extensions

    settings, root = _load(ctx)
    if not settings.extensions:
        click.echo("   No extensions declared.")
        return

    on_error = "continue" if continue_on_error else settings.on_extension_error
    try:
        report = install_extensions(
            settings.extensions,
            settings.package_path(root),
            on_error=on_error,
            timeout=settings.download_timeout,
            reporter=_reporter(ctx),
        )
    except ProvisionError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    for ext in report.installed:
        click.secho(f"   ✓ {ext.name}", fg="green", nl=False)
        click.echo(f"  → {ext.path}")
    for name, error in report.failed.items():
        click.secho(f"   ✗ {name}", fg="red", nl=False)
        click.echo(f"  {error}")

    if not report.ok:
        sys.exit(1)


@cli.command("sync-assets")
@click.pass_context
def sync_assets(ctx: click.Context) -> None:
    """Rebuild the web root copy of CiviCRM's static assets."""
    from civicrm_provisioner.core.errors import ProvisionError
    from civicrm_provisioner.core.services.asset_sync import sync_web_assets

    settings, root = _load(ctx)
    try:
        report = sync_web_assets(
            settings.package_path(root),
            settings.web_root_path(root),
            settings.asset_extensions,
            reporter=_reporter(ctx),
        )
    except ProvisionError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    click.secho(
        f"✓ {report.assets_copied} assets synced to {report.destination}",
        fg="green",
    )


# ── Config ──────────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Provisioner configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate provision.yml / composer.json settings."""
    from civicrm_provisioner.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.settings is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Package:    {result.settings.package_name}")
        click.echo(f"   Extensions: {len(result.settings.extensions)}")
        click.echo(f"   Web root:   {result.settings.web_root}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


if __name__ == "__main__":
    cli()
