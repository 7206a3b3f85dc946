"""Locating native libraries inside resource bundles.

A bundle is an ordered list of ``Traversable`` roots: plain directories,
zip-format archives (wheels, eggs, jars) or a package's resource tree. Looking
up a relative path walks the roots in order, like a classpath.
"""
import logging
import sys
import zipfile
from dataclasses import dataclass
from importlib import resources as importlib_resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import platform_adapters

from .exceptions import ResourceNotFoundError
from .schemas import OsFamily

logger = logging.getLogger(__name__)

BundleRoot = Union[str, Path, Traversable]


@dataclass(frozen=True)
class LocatedResource:
    """A library found in a bundle, with the filename it must be extracted as."""

    resource: Traversable
    path: str
    filename: str

    def open(self):
        return self.resource.open("rb")


def _to_traversable(root: BundleRoot) -> Traversable:
    if isinstance(root, (str, Path)):
        path = Path(root)
        if path.is_file() and zipfile.is_zipfile(path):
            return zipfile.Path(path)
        return path
    return root


class ResourceBundle:
    """Ordered set of roots searched for bundle-relative paths."""

    def __init__(self, roots: Iterable[BundleRoot]):
        self.roots: List[Traversable] = [_to_traversable(root) for root in roots]

    @classmethod
    def from_package(cls, package: str) -> "ResourceBundle":
        """Bundle rooted at an importable package's resources."""
        return cls([importlib_resources.files(package)])

    @classmethod
    def from_paths(cls, *paths: BundleRoot) -> "ResourceBundle":
        """Bundle over directories and archives, searched in the given order."""
        return cls(paths)

    @classmethod
    def from_sys_path(cls) -> "ResourceBundle":
        """Bundle over every directory and archive on sys.path."""
        roots: List[BundleRoot] = []
        for entry in sys.path:
            path = Path(entry or ".")
            if path.is_dir() or (path.is_file() and zipfile.is_zipfile(path)):
                roots.append(path)
        return cls(roots)

    @staticmethod
    def _resolve(root: Traversable, relative_path: str) -> Optional[Traversable]:
        node = root
        for part in relative_path.replace("\\", "/").split("/"):
            if part:
                node = node / part
        try:
            if node.is_file():
                return node
        except OSError:
            pass
        return None

    def find(self, relative_path: str) -> Optional[Traversable]:
        """Return the first file matching a bundle-relative path."""
        for root in self.roots:
            found = self._resolve(root, relative_path)
            if found is not None:
                return found
        return None

    def find_all(self, relative_path: str) -> List[Traversable]:
        """Return every file matching a bundle-relative path, in root order."""
        matches = []
        for root in self.roots:
            found = self._resolve(root, relative_path)
            if found is not None:
                matches.append(found)
        return matches

    def __repr__(self) -> str:
        return f"ResourceBundle({self.roots!r})"


def library_filenames(name: str, family: OsFamily) -> List[str]:
    """Return the accepted physical filenames for a library, preferred first."""
    return platform_adapters.get_adapter(family).library_names(name)


def locate(
    bundle: ResourceBundle,
    candidate_directories: Sequence[str],
    library_name: str,
    family: OsFamily,
) -> LocatedResource:
    """Find the first candidate directory holding the library.

    Within a directory the conventional filename is probed first, then the
    alternate suffix for families that have one.

    Raises:
        ResourceNotFoundError: If no candidate directory contains the library.
    """
    filenames = library_filenames(library_name, family)
    logger.debug(f"Mapped library {library_name} to {filenames}")

    probed: List[str] = []
    for directory in candidate_directories:
        if directory and not directory.endswith("/"):
            directory += "/"
        for filename in filenames:
            path = directory + filename
            probed.append(path)
            resource = bundle.find(path)
            if resource is not None:
                logger.debug(f"Found {library_name} at {path}")
                return LocatedResource(resource=resource, path=path, filename=filename)

    logger.info(f"Couldn't find resource {library_name} in {len(probed)} locations")
    raise ResourceNotFoundError(library_name, probed)
