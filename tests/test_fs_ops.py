"""
Tests for filesystem helpers — remove, mirror, filtered mirror.
"""

from pathlib import Path

import pytest

from civicrm_provisioner.core.errors import FilesystemError
from civicrm_provisioner.core.services import fs_ops
from tests.builders import write_tree


class TestRemoveDirectoryRecursively:
    def test_removes_tree(self, tmp_path: Path):
        target = write_tree(tmp_path / "doomed", {"a/b/c.txt": "x", "d.txt": "y"})
        fs_ops.remove_directory_recursively(target)
        assert not target.exists()

    def test_missing_path_is_noop(self, tmp_path: Path):
        fs_ops.remove_directory_recursively(tmp_path / "never-existed")

    def test_repeated_removal(self, tmp_path: Path):
        target = write_tree(tmp_path / "twice", {"a/b.txt": "x"})
        fs_ops.remove_directory_recursively(target)
        fs_ops.remove_directory_recursively(target)
        assert not target.exists()

    def test_file_is_unlinked(self, tmp_path: Path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        fs_ops.remove_directory_recursively(target)
        assert not target.exists()

    def test_symlink_removed_without_touching_target(self, tmp_path: Path):
        real = write_tree(tmp_path / "real", {"keep.txt": "x"})
        link = tmp_path / "link"
        link.symlink_to(real)
        fs_ops.remove_directory_recursively(link)
        assert not link.is_symlink()
        assert (real / "keep.txt").is_file()


class TestMirrorFilesWithExtensions:
    def test_copies_only_allowed(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {
            "a/b/x.js": "js",
            "a/b/y.php": "php",
            "z.css": "css",
            "README": "no extension",
        })
        dest = tmp_path / "dest"

        copied = fs_ops.mirror_files_with_extensions(src, dest, ["js", "css"])

        assert copied == 2
        assert (dest / "a" / "b" / "x.js").read_text() == "js"
        assert (dest / "z.css").is_file()
        assert not (dest / "a" / "b" / "y.php").exists()
        assert not (dest / "README").exists()

    def test_dotted_extension_list(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {
            "a.js": "a", "b.css": "b", "c.php": "c", "sub/d.js": "d", "sub/e.txt": "e",
        })
        dest = tmp_path / "dest"
        fs_ops.mirror_files_with_extensions(src, dest, [".js", ".css"])
        copied = sorted(p.relative_to(dest).as_posix() for p in dest.rglob("*") if p.is_file())
        assert copied == ["a.js", "b.css", "sub/d.js"]

    def test_no_empty_directories_created(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"only/php/here.php": "php", "x.js": "js"})
        dest = tmp_path / "dest"
        fs_ops.mirror_files_with_extensions(src, dest, ["js"])
        assert not (dest / "only").exists()

    def test_matching_is_case_sensitive(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"logo.PNG": "upper", "icon.png": "lower"})
        dest = tmp_path / "dest"
        fs_ops.mirror_files_with_extensions(src, dest, ["png"])
        assert (dest / "icon.png").is_file()
        assert not (dest / "logo.PNG").exists()

    def test_leading_dot_accepted(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"x.js": "js"})
        dest = tmp_path / "dest"
        assert fs_ops.mirror_files_with_extensions(src, dest, [".js"]) == 1

    def test_last_suffix_only(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"bundle.js.map": "map", "app.min.js": "js"})
        dest = tmp_path / "dest"
        fs_ops.mirror_files_with_extensions(src, dest, ["js"])
        assert (dest / "app.min.js").is_file()
        assert not (dest / "bundle.js.map").exists()

    def test_source_untouched(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"x.js": "js"})
        fs_ops.mirror_files_with_extensions(src, tmp_path / "dest", ["js"])
        assert (src / "x.js").read_text() == "js"

    def test_missing_source_raises(self, tmp_path: Path):
        with pytest.raises(FilesystemError, match="not found"):
            fs_ops.mirror_files_with_extensions(tmp_path / "nope", tmp_path / "dest", ["js"])


class TestMirrorDirectory:
    def test_creates_destination(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"a.txt": "a", "sub/b.txt": "b"})
        dest = tmp_path / "deep" / "dest"
        fs_ops.mirror_directory(src, dest)
        assert (dest / "a.txt").read_text() == "a"
        assert (dest / "sub" / "b.txt").read_text() == "b"

    def test_overwrites_and_prunes(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"a.txt": "new", "sub/b.txt": "b"})
        dest = write_tree(tmp_path / "dest", {
            "a.txt": "old",
            "stale.txt": "stale",
            "sub/stale.txt": "stale",
            "gone/x.txt": "x",
        })

        fs_ops.mirror_directory(src, dest)

        assert (dest / "a.txt").read_text() == "new"
        assert (dest / "sub" / "b.txt").is_file()
        assert not (dest / "stale.txt").exists()
        assert not (dest / "sub" / "stale.txt").exists()
        assert not (dest / "gone").exists()

    def test_file_replaced_by_directory(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"thing/inner.txt": "x"})
        dest = write_tree(tmp_path / "dest", {"thing": "was a file"})
        fs_ops.mirror_directory(src, dest)
        assert (dest / "thing" / "inner.txt").is_file()

    def test_missing_source_raises(self, tmp_path: Path):
        with pytest.raises(FilesystemError):
            fs_ops.mirror_directory(tmp_path / "nope", tmp_path / "dest")


class TestFileHelpers:
    def test_copy_file_creates_parents(self, tmp_path: Path):
        src = tmp_path / "a.txt"
        src.write_text("hello")
        dest = tmp_path / "x" / "y" / "a.txt"
        fs_ops.copy_file(src, dest)
        assert dest.read_text() == "hello"

    def test_copy_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FilesystemError, match="Cannot copy"):
            fs_ops.copy_file(tmp_path / "nope", tmp_path / "dest")

    def test_write_then_read(self, tmp_path: Path):
        path = tmp_path / "out" / "file.php"
        fs_ops.write_file(path, "<?php")
        assert fs_ops.read_file(path) == "<?php"

    def test_read_missing_raises(self, tmp_path: Path):
        with pytest.raises(FilesystemError, match="Cannot read"):
            fs_ops.read_file(tmp_path / "nope")
