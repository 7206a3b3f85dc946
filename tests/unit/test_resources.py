"""Unit tests for bundle lookup and library filename mapping."""
import zipfile

import pytest

from nativelib.exceptions import ResourceNotFoundError
from nativelib.resources import ResourceBundle, library_filenames, locate
from nativelib.schemas import OsFamily


class TestLibraryFilenames:
    """Tests for logical to physical filename mapping."""

    def test_linux(self):
        assert library_filenames("dummy", OsFamily.LINUX) == ["libdummy.so"]

    def test_windows(self):
        assert library_filenames("dummy", OsFamily.WINDOWS) == ["dummy.dll"]

    def test_osx_has_alternate_suffix(self):
        assert library_filenames("dummy", OsFamily.OSX) == ["libdummy.dylib", "libdummy.jnilib"]

    def test_unix_families_follow_linux(self):
        for family in (OsFamily.AIX, OsFamily.SOLARIS):
            assert library_filenames("dummy", family) == ["libdummy.so"]


class TestResourceBundle:
    """Tests for bundle roots and lookup order."""

    def test_find_in_directory(self, make_bundle):
        root = make_bundle({"natives/linux_64/libdummy.so": b"abc"})
        bundle = ResourceBundle.from_paths(root)
        found = bundle.find("natives/linux_64/libdummy.so")
        assert found is not None
        assert found.read_bytes() == b"abc"

    def test_missing_file(self, make_bundle):
        bundle = ResourceBundle.from_paths(make_bundle({}))
        assert bundle.find("natives/linux_64/libdummy.so") is None

    def test_directory_is_not_a_match(self, make_bundle):
        root = make_bundle({"natives/linux_64/libdummy.so": b"abc"})
        assert ResourceBundle.from_paths(root).find("natives/linux_64") is None

    def test_roots_searched_in_order(self, make_bundle):
        first = make_bundle({"libdummy.so": b"first"}, name="first")
        second = make_bundle({"libdummy.so": b"second"}, name="second")
        bundle = ResourceBundle.from_paths(first, second)

        assert bundle.find("libdummy.so").read_bytes() == b"first"
        assert [r.read_bytes() for r in bundle.find_all("libdummy.so")] == [b"first", b"second"]

    def test_zip_archive_root(self, tmp_path):
        archive = tmp_path / "natives.whl"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("natives/linux-x86_64-64/libdummy.so", b"zipped")

        bundle = ResourceBundle.from_paths(archive)
        found = bundle.find("natives/linux-x86_64-64/libdummy.so")
        assert found is not None
        assert found.read_bytes() == b"zipped"

    def test_package_root(self):
        bundle = ResourceBundle.from_package("nativelib")
        assert bundle.find("schemas.py") is not None

    def test_backslashes_are_accepted(self, make_bundle):
        root = make_bundle({"natives/linux_64/libdummy.so": b"abc"})
        assert ResourceBundle.from_paths(root).find("natives\\linux_64\\libdummy.so") is not None


class TestLocate:
    """Tests for locating a library across candidate directories."""

    def test_first_directory_wins(self, make_bundle):
        root = make_bundle({
            "natives/linux-x86_64-64/libdummy.so": b"canonical",
            "natives/linux_64/libdummy.so": b"legacy",
        })
        located = locate(
            ResourceBundle.from_paths(root),
            ["natives/linux-x86_64-64/", "natives/linux_64/"],
            "dummy",
            OsFamily.LINUX,
        )
        assert located.path == "natives/linux-x86_64-64/libdummy.so"
        assert located.filename == "libdummy.so"
        with located.open() as f:
            assert f.read() == b"canonical"

    def test_falls_through_to_later_directory(self, make_bundle):
        root = make_bundle({"natives/linux_64/libdummy.so": b"legacy"})
        located = locate(
            ResourceBundle.from_paths(root),
            ["natives/linux-x86_64-64/", "natives/linux_64"],
            "dummy",
            OsFamily.LINUX,
        )
        assert located.path == "natives/linux_64/libdummy.so"

    def test_osx_alternate_suffix(self, make_bundle):
        root = make_bundle({"natives/osx_64/libdummy.jnilib": b"old"})
        located = locate(ResourceBundle.from_paths(root), ["natives/osx_64/"], "dummy", OsFamily.OSX)
        assert located.filename == "libdummy.jnilib"

    def test_alternate_suffix_checked_before_next_directory(self, make_bundle):
        root = make_bundle({
            "a/libdummy.jnilib": b"a",
            "b/libdummy.dylib": b"b",
        })
        located = locate(ResourceBundle.from_paths(root), ["a/", "b/"], "dummy", OsFamily.OSX)
        assert located.path == "a/libdummy.jnilib"

    def test_not_found_lists_probed_paths(self, make_bundle):
        bundle = ResourceBundle.from_paths(make_bundle({}))
        with pytest.raises(ResourceNotFoundError) as exc_info:
            locate(bundle, ["natives/linux-x86_64-64/", "natives/linux_64/"], "dummy", OsFamily.LINUX)

        assert exc_info.value.name == "dummy"
        assert exc_info.value.probed == [
            "natives/linux-x86_64-64/libdummy.so",
            "natives/linux_64/libdummy.so",
        ]
        assert "dummy" in str(exc_info.value)
