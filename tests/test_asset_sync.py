"""
Tests for the web asset syncer.
"""

import shutil
from pathlib import Path

import pytest

from civicrm_provisioner.core.errors import FilesystemError
from civicrm_provisioner.core.services.asset_sync import (
    SETTINGS_LOCATION_PHP,
    sync_web_assets,
)
from tests.builders import write_tree


@pytest.fixture
def web_root(project_dir: Path) -> Path:
    return project_dir / "web" / "libraries" / "civicrm"


class TestSyncWebAssets:
    def test_publishes_assets(self, package_path: Path, web_root: Path):
        report = sync_web_assets(package_path, web_root)

        assert (web_root / "js" / "crm.js").is_file()
        assert (web_root / "js" / "lib" / "Common.js").is_file()
        assert (web_root / "css" / "civicrm.css").is_file()
        assert report.assets_copied == 4  # includes tests/fixtures/fixture.js
        assert report.destination == web_root

    def test_skips_non_assets(self, package_path: Path, web_root: Path):
        sync_web_assets(package_path, web_root)
        assert not (web_root / "CRM").exists()
        assert not (web_root / "templates").exists()
        assert not (web_root / "bower.json").exists()
        assert not (web_root / "i" / "logo.PNG").exists()

    def test_tests_directory_excluded(self, package_path: Path, web_root: Path):
        sync_web_assets(package_path, web_root)
        assert not (web_root / "tests").exists()

    def test_extern_copied_whole(self, package_path: Path, web_root: Path):
        sync_web_assets(package_path, web_root)
        assert (web_root / "extern" / "rest.php").is_file()
        assert (web_root / "extern" / "lib" / "helper.inc").is_file()

    def test_config_and_settings_location(self, package_path: Path, web_root: Path):
        sync_web_assets(package_path, web_root)
        assert (web_root / "civicrm.config.php").read_text() == "<?php // core config"
        assert (web_root / "settings_location.php").read_text() == SETTINGS_LOCATION_PHP
        assert SETTINGS_LOCATION_PHP == (
            "<?php\n\ndefine('CIVICRM_CONFDIR', '../../../sites');"
        )

    def test_destination_rebuilt(self, package_path: Path, web_root: Path):
        write_tree(web_root, {"stale.js": "old", "custom/thing.css": "old"})
        sync_web_assets(package_path, web_root)
        assert not (web_root / "stale.js").exists()
        assert not (web_root / "custom").exists()

    def test_repeated_sync_gives_identical_tree(self, package_path: Path, web_root: Path):
        def listing() -> list[tuple[str, bytes]]:
            return sorted(
                (p.relative_to(web_root).as_posix(), p.read_bytes())
                for p in web_root.rglob("*") if p.is_file()
            )

        first = sync_web_assets(package_path, web_root)
        before = listing()
        second = sync_web_assets(package_path, web_root)

        assert listing() == before
        assert first.assets_copied == second.assets_copied

    def test_source_untouched(self, package_path: Path, web_root: Path):
        sync_web_assets(package_path, web_root)
        assert (package_path / "tests" / "fixtures" / "fixture.js").is_file()
        assert (package_path / "CRM" / "Core" / "Config.php").is_file()

    def test_custom_extension_list(self, package_path: Path, web_root: Path):
        report = sync_web_assets(package_path, web_root, [".css"])
        assert report.assets_copied == 1
        assert not (web_root / "js").exists()

    def test_missing_extern_raises(self, package_path: Path, web_root: Path):
        shutil.rmtree(package_path / "extern")
        with pytest.raises(FilesystemError):
            sync_web_assets(package_path, web_root)
