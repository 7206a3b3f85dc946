import ctypes
from pathlib import Path
from typing import Any

from nativelib.exceptions import NativeLoadError

from .base import PlatformAdapter


class LinuxAdapter(PlatformAdapter):
    """Adapter for Linux and the other ELF-style Unix families (AIX, Solaris, z/OS)."""

    @property
    def library_prefix(self) -> str:
        return "lib"

    @property
    def library_suffix(self) -> str:
        return ".so"

    def load_library(self, path: Path) -> Any:
        try:
            return ctypes.CDLL(str(path))
        except OSError as e:
            raise NativeLoadError(path, str(e)) from e
