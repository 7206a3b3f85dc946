"""Loading bundled native libraries by logical name.

Bundles lay out one directory per platform under a search root::

    natives/
        linux-x86_64-64/libfoo[-1.2.0].so
        osx-x86_64-64/libfoo[-1.2.0].dylib
        windows-x86_64-64/foo[-1.2.0].dll
        linux_64/libfoo.so          (legacy name, still searched)

The platform is resolved once per call and passed down; a library is located,
copied to a staging directory and handed to the OS loader.
"""
import logging
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import platform_adapters

from .config import LoaderConfig, get_config
from .exceptions import NativeLoadError, PlatformError
from .extractors import BaseExtractor, SharedExtractor
from .mapping import default_search_paths
from .platform import resolve_platform
from .resources import ResourceBundle, locate
from .schemas import PlatformTuple, SystemSignals

logger = logging.getLogger(__name__)


def get_versioned_library_name(distribution: str, library_name: str) -> str:
    """Append the distribution's version to a library name.

    Returns the name unchanged when the distribution is not installed or
    records no version.
    """
    try:
        version = metadata.version(distribution)
    except metadata.PackageNotFoundError:
        version = None

    if version:
        return f"{library_name}-{version}"
    return library_name


class NativeLoader:
    """Resolves, extracts and loads native libraries from a bundle."""

    def __init__(
        self,
        bundle: Optional[ResourceBundle] = None,
        extractor: Optional[BaseExtractor] = None,
        config: Optional[LoaderConfig] = None,
        signals: Optional[SystemSignals] = None,
        load_function: Optional[Callable[[Path], Any]] = None,
    ):
        """Initialize the loader.

        Args:
            bundle: Where libraries are looked up. Defaults to the extractor's
                bundle, or sys.path.
            extractor: Extractor to stage files with. A SharedExtractor is
                created on first use if None.
            config: Loader configuration. Defaults to the global config.
            signals: Platform signals to resolve from instead of the live
                interpreter's.
            load_function: Replaces the family adapter's native loader.
        """
        self.config = config or get_config()
        if bundle is None:
            bundle = extractor.bundle if extractor is not None else ResourceBundle.from_sys_path()
        self.bundle = bundle
        self._extractor = extractor
        self._signals = signals
        self._load_function = load_function
        self.handles: Dict[str, Any] = {}

    @property
    def extractor(self) -> BaseExtractor:
        if self._extractor is None:
            self._extractor = SharedExtractor(bundle=self.bundle, config=self.config)
        return self._extractor

    def resolve_platform(self) -> PlatformTuple:
        """Resolve the platform from the process signals. No side effects."""
        return resolve_platform(self._signals)

    def search_paths(self, platform: PlatformTuple, search_roots: Optional[Iterable[str]] = None) -> List[str]:
        """Return the bundle directories to probe for a platform, in order."""
        return default_search_paths(platform, search_roots, self.config.search_root)

    def stage(
        self,
        library_name: str,
        search_roots: Optional[Iterable[str]] = None,
        platform: Optional[PlatformTuple] = None,
    ) -> Path:
        """Locate and extract a library without loading it.

        Raises:
            UnsupportedPlatformError: If the platform cannot be determined.
            UnmappedPlatformError: If the platform has no directory mapping
                and no search roots were given.
            ResourceNotFoundError: If no candidate directory holds the library.
            ExtractionIOError: If the copy fails.
        """
        platform = platform or self.resolve_platform()
        paths = self.search_paths(platform, search_roots)
        located = locate(self.bundle, paths, library_name, platform.family)
        return self.extractor.extract(located)

    def _load(self, path: Path, platform: PlatformTuple) -> Any:
        load = self._load_function or platform_adapters.get_adapter(platform.family).load_library
        try:
            return load(path)
        except NativeLoadError:
            raise
        except OSError as e:
            raise NativeLoadError(path, str(e)) from e

    def load_library(self, library_name: str, *search_roots: str) -> Any:
        """Stage and load a library, returning the OS handle.

        Unlike ``stage_and_load`` every failure is raised, including an
        unsupported platform.
        A library this loader already loaded returns its existing handle.
        """
        if library_name in self.handles:
            return self.handles[library_name]

        platform = self.resolve_platform()
        path = self.stage(library_name, search_roots, platform)
        handle = self._load(path, platform)
        self.handles[library_name] = handle
        logger.info(f"Loaded native library {library_name} from {path}")
        return handle

    def stage_and_load(self, library_name: str, search_roots: Optional[Iterable[str]] = None) -> bool:
        """Stage and load a library.

        Returns:
            False if there is no native library for this platform, so the
            caller can carry on without it; True once the library is loaded.
            A library this loader already loaded is not extracted again.

        Raises:
            ResourceNotFoundError: If no candidate directory holds the library.
            ExtractionIOError: If the copy fails.
            NativeLoadError: If the OS rejects the extracted file.
        """
        if library_name in self.handles:
            logger.debug(f"Native library {library_name} already loaded")
            return True

        try:
            platform = self.resolve_platform()
            paths = self.search_paths(platform, search_roots)
        except PlatformError as e:
            logger.warning(f"No native library available for this platform: {e}")
            return False

        located = locate(self.bundle, paths, library_name, platform.family)
        path = self.extractor.extract(located)
        self.handles[library_name] = self._load(path, platform)
        logger.info(f"Loaded native library {library_name} from {path}")
        return True

    def load_versioned_library(
        self,
        distribution: str,
        library_name: str,
        search_roots: Optional[Iterable[str]] = None,
    ) -> bool:
        """Like ``stage_and_load``, with the distribution version appended to the name."""
        return self.stage_and_load(get_versioned_library_name(distribution, library_name), search_roots)


# Lazy singleton pattern
_loader_instance: Optional[NativeLoader] = None


def get_loader() -> NativeLoader:
    """Get the process-wide loader (lazy initialization)."""
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = NativeLoader()
    return _loader_instance


def reset_loader() -> None:
    """Reset the process-wide loader. Useful for testing."""
    global _loader_instance
    _loader_instance = None


def stage_and_load(library_name: str, search_roots: Optional[Iterable[str]] = None) -> bool:
    """Stage and load a library with the process-wide loader."""
    return get_loader().stage_and_load(library_name, search_roots)


def load_library(library_name: str, *search_roots: str) -> Any:
    """Stage and load a library with the process-wide loader, raising on failure."""
    return get_loader().load_library(library_name, *search_roots)
