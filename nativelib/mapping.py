"""Platform to bundle directory mapping.

Each known platform maps to its canonical directory name followed by the
legacy directory names older bundles were published under. Legacy names are
never removed: a bundle may only ship its libraries under an old name.
"""
import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .architectures import (
    ARCH_AARCH_64,
    ARCH_ARM_32,
    ARCH_ITANIUM_64,
    ARCH_PPC_64,
    ARCH_PPCLE_32,
    ARCH_PPCLE_64,
    ARCH_SPARC_32,
    ARCH_SPARC_64,
    ARCH_X86_32,
    ARCH_X86_64,
)
from .exceptions import UnmappedPlatformError
from .platform import path_for_platform, platform_from_values
from .schemas import OsFamily, PathMappingEntry, PlatformTuple

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_ROOT = "natives"

# Roots probed after the caller's own roots, for bundles laid out the old way.
LEGACY_SEARCH_ROOTS: Tuple[str, ...] = ("", "META-INF/lib")


class DefaultPlatform(Enum):
    """Catalog of platforms with a published directory layout."""

    # 32 bit
    AIX_PPC_32 = (OsFamily.AIX, ARCH_PPCLE_32, 32, ("aix_32",))
    LINUX_ARM_32 = (OsFamily.LINUX, ARCH_ARM_32, 32, ("linux_arm",))
    LINUX_X86_32 = (OsFamily.LINUX, ARCH_X86_32, 32, ("linux_32",))
    MACOS_PPC_32 = (OsFamily.OSX, ARCH_PPCLE_32, 32, ("osx_32",))
    SOLARIS_SPARC_32 = (OsFamily.SOLARIS, ARCH_SPARC_32, 32, ("solaris_32",))
    WINDOWS_X86_32 = (OsFamily.WINDOWS, ARCH_X86_32, 32, ("windows_32",))
    # 64 bit
    AIX_PPC64_64 = (OsFamily.AIX, ARCH_PPC_64, 64, ("aix_64",))
    LINUX_X86_64 = (OsFamily.LINUX, ARCH_X86_64, 64, ("linux_64",))
    LINUX_AARCH_64 = (OsFamily.LINUX, ARCH_AARCH_64, 64, ("linux_arm64",))
    LINUX_PPC64LE_64 = (OsFamily.LINUX, ARCH_PPCLE_64, 64, ("linux_64",))
    MACOS_X86_64 = (OsFamily.OSX, ARCH_X86_64, 64, ("osx_64",))
    SOLARIS_SPARCV9_64 = (OsFamily.SOLARIS, ARCH_SPARC_64, 64, ("solaris_64",))
    WINDOWS_X86_64 = (OsFamily.WINDOWS, ARCH_X86_64, 64, ("windows_64",))
    WINDOWS_EM64T_64 = (OsFamily.WINDOWS, "em64t", 64, ("windows_64",))
    WINDOWS_IA64_64 = (OsFamily.WINDOWS, ARCH_ITANIUM_64, 64, ("windows_64",))

    def __init__(self, family: OsFamily, architecture: str, bitness: int, legacy_paths: Tuple[str, ...]):
        self.platform: PlatformTuple = platform_from_values(family, architecture, bitness)
        self.legacy_paths = legacy_paths


def _create_default_mapping() -> Mapping[PlatformTuple, PathMappingEntry]:
    mapping: Dict[PlatformTuple, PathMappingEntry] = {}
    for default in DefaultPlatform:
        paths = (path_for_platform(default.platform),) + default.legacy_paths
        mapping[default.platform] = PathMappingEntry(platform=default.platform, paths=paths)
    return MappingProxyType(mapping)


DEFAULT_PATH_MAPPING = _create_default_mapping()


def get_path_mapping() -> Mapping[PlatformTuple, PathMappingEntry]:
    """Return the read-only default mapping table."""
    return DEFAULT_PATH_MAPPING


def _as_directory(root: str) -> str:
    root = root.replace("\\", "/").strip("/")
    return f"{root}/" if root else ""


def _join(root: str, directory: str) -> str:
    return f"{_as_directory(root)}{directory}/"


def resolve_directories(platform: PlatformTuple) -> List[str]:
    """Return the directory names to probe for a platform, canonical first.

    Raises:
        UnmappedPlatformError: If the platform is not in the mapping table.
    """
    entry = DEFAULT_PATH_MAPPING.get(platform)
    if entry is None:
        raise UnmappedPlatformError(platform)
    return list(entry.paths)


def resolve_search_paths(platform: PlatformTuple, search_root: Optional[str] = None) -> List[str]:
    """Return full bundle paths for a platform under one search root.

    Every path ends with '/'. The root defaults to DEFAULT_SEARCH_ROOT.
    """
    root = DEFAULT_SEARCH_ROOT if search_root is None else search_root
    return [_join(root, directory) for directory in resolve_directories(platform)]


def default_search_paths(
    platform: PlatformTuple,
    override_roots: Optional[Iterable[str]] = None,
    default_root: str = DEFAULT_SEARCH_ROOT,
) -> List[str]:
    """Return every bundle path to probe for a platform, in priority order.

    Roots are tried as: the default root, the caller's override roots, then
    the bundle root and 'META-INF/lib'. Within each root the canonical
    directory precedes the legacy ones.

    An unmapped platform is only acceptable when override roots are given;
    those roots are then probed directly.

    Raises:
        UnmappedPlatformError: If the platform is unmapped and no override
            roots were supplied.
    """
    overrides = list(override_roots or [])

    if platform not in DEFAULT_PATH_MAPPING:
        if not overrides:
            raise UnmappedPlatformError(platform)
        logger.debug(f"No mapping for {platform}, probing override roots only")
        return [_as_directory(root) for root in overrides]

    roots: List[str] = []
    for root in (default_root, *overrides, *LEGACY_SEARCH_ROOTS):
        normalized = root.replace("\\", "/").strip("/")
        if normalized not in roots:
            roots.append(normalized)

    paths: List[str] = []
    for root in roots:
        paths.extend(resolve_search_paths(platform, root))
    return paths
