"""
Native library loader - finds, extracts and loads bundled native libraries.
"""
__version__ = "0.1.0"

from .exceptions import (
    NativeLibError,
    PlatformError,
    UnsupportedPlatformError,
    UnmappedPlatformError,
    ResourceNotFoundError,
    ExtractionIOError,
    NativeLoadError,
)
from .schemas import OsFamily, PlatformTuple, SystemSignals, PathMappingEntry, ExtractionRequest
from .config import get_config, get_config_manager
from .platform import normalize, resolve_platform, path_for_platform
from .mapping import resolve_directories, resolve_search_paths, default_search_paths
from .resources import ResourceBundle, LocatedResource, locate
from .extractors import SharedExtractor, ContextExtractor
from .loader import (
    NativeLoader,
    get_loader,
    get_versioned_library_name,
    load_library,
    stage_and_load,
)

__all__ = [
    "__version__",
    # Exceptions
    "NativeLibError",
    "PlatformError",
    "UnsupportedPlatformError",
    "UnmappedPlatformError",
    "ResourceNotFoundError",
    "ExtractionIOError",
    "NativeLoadError",
    # Types
    "OsFamily",
    "PlatformTuple",
    "SystemSignals",
    "PathMappingEntry",
    "ExtractionRequest",
    # Config
    "get_config",
    "get_config_manager",
    # Platform
    "normalize",
    "resolve_platform",
    "path_for_platform",
    "resolve_directories",
    "resolve_search_paths",
    "default_search_paths",
    # Resources
    "ResourceBundle",
    "LocatedResource",
    "locate",
    # Extraction and loading
    "SharedExtractor",
    "ContextExtractor",
    "NativeLoader",
    "get_loader",
    "get_versioned_library_name",
    "load_library",
    "stage_and_load",
]
