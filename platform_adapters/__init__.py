"""Platform adapters for family-specific library naming and loading."""
from typing import Dict, Optional

from .base import PlatformAdapter
from .windows_adapter import WindowsAdapter
from .linux_adapter import LinuxAdapter
from .macos_adapter import MacOSAdapter
from nativelib.schemas import OsFamily

# One adapter instance per family
_adapter_instances: Dict[OsFamily, PlatformAdapter] = {}


def get_adapter(family: Optional[OsFamily] = None) -> PlatformAdapter:
    """Get the adapter for an OS family, defaulting to the running interpreter's.

    Raises:
        UnsupportedPlatformError: If no family is given and the host's
            cannot be determined.
    """
    if family is None:
        from nativelib.platform import resolve_platform
        family = resolve_platform().family

    adapter = _adapter_instances.get(family)
    if adapter is None:
        if family == OsFamily.WINDOWS:
            adapter = WindowsAdapter()
        elif family == OsFamily.OSX:
            adapter = MacOSAdapter()
        else:
            adapter = LinuxAdapter()
        _adapter_instances[family] = adapter
    return adapter


def reset_adapters() -> None:
    """Reset the adapter cache. Useful for testing."""
    _adapter_instances.clear()


__all__ = [
    "PlatformAdapter",
    "WindowsAdapter",
    "LinuxAdapter",
    "MacOSAdapter",
    "get_adapter",
    "reset_adapters",
]
