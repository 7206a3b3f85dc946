"""Native library loader exception hierarchy."""
from typing import Iterable, Optional


class NativeLibError(Exception):
    """Base exception for all native library loader errors."""
    pass


class PlatformError(NativeLibError):
    """Base exception for platform detection and mapping errors."""
    pass


class UnsupportedPlatformError(PlatformError):
    """Raised when the OS family cannot be determined."""
    def __init__(self, os_name: str):
        self.os_name = os_name
        super().__init__(f"OS family cannot be determined: {os_name!r}")


class UnmappedPlatformError(PlatformError):
    """Raised when a platform has no entry in the path mapping table."""
    def __init__(self, platform):
        self.platform = platform
        super().__init__(f"No library path mapping for platform: {platform}")


class ResourceNotFoundError(NativeLibError):
    """Raised when no candidate directory contains the requested library."""
    def __init__(self, name: str, probed: Optional[Iterable[str]] = None):
        self.name = name
        self.probed = list(probed or [])
        msg = f"Couldn't find resource {name}"
        if self.probed:
            msg += f" (searched: {', '.join(self.probed)})"
        super().__init__(msg)


class ExtractionIOError(NativeLibError):
    """Raised when a staging directory or extracted file cannot be written."""
    def __init__(self, path, reason: str = ""):
        self.path = path
        self.reason = reason
        msg = f"Failed to extract to {path}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class NativeLoadError(NativeLibError):
    """Raised when the OS rejects an extracted library."""
    def __init__(self, path, reason: str = ""):
        self.path = path
        self.reason = reason
        msg = f"Failed to load native library: {path}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
