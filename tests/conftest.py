"""
Shared test fixtures: a fake civicrm-core checkout, a release tarball
and extension zips served over ``file://`` URLs.
"""

import tempfile
from pathlib import Path

import pytest

from tests.builders import (
    CORE_FILES,
    RELEASE_FILES,
    build_tarball,
    build_zip,
    write_tree,
)


@pytest.fixture(autouse=True)
def temp_area(tmp_path: Path, monkeypatch) -> Path:
    """Point ``tempfile`` at a per-test directory so leftovers are visible."""
    area = tmp_path / "tmp"
    area.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(area))
    return area


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project with civicrm-core installed under vendor/."""
    root = tmp_path / "project"
    write_tree(root / "vendor" / "civicrm" / "civicrm-core", CORE_FILES)
    return root


@pytest.fixture
def package_path(project_dir: Path) -> Path:
    return project_dir / "vendor" / "civicrm" / "civicrm-core"


@pytest.fixture
def release_dir(tmp_path: Path) -> Path:
    """A download area holding the 5.10.2 release tarball."""
    downloads = tmp_path / "downloads"
    build_tarball(downloads / "civicrm-5.10.2-drupal.tar.gz", RELEASE_FILES)
    return downloads


@pytest.fixture
def release_url_template(release_dir: Path) -> str:
    return release_dir.as_uri() + "/civicrm-{version}-drupal.tar.gz"


@pytest.fixture
def extension_zip(tmp_path: Path) -> Path:
    """An extension archive that unpacks into a versioned directory."""
    return build_zip(
        tmp_path / "downloads" / "foobar-1.0.zip",
        [
            ("foobar-1.0/", ""),
            ("foobar-1.0/info.xml", "<extension key='foobar'/>"),
            ("foobar-1.0/foobar.php", "<?php // foobar"),
        ],
    )
