import ctypes
import os
from pathlib import Path
from typing import Any

from nativelib.exceptions import NativeLoadError

from .base import PlatformAdapter


class WindowsAdapter(PlatformAdapter):
    @property
    def library_prefix(self) -> str:
        return ""

    @property
    def library_suffix(self) -> str:
        return ".dll"

    def load_library(self, path: Path) -> Any:
        try:
            # Let dependencies extracted next to the library resolve
            if hasattr(os, "add_dll_directory"):
                with os.add_dll_directory(str(path.parent)):
                    return ctypes.CDLL(str(path))
            return ctypes.CDLL(str(path))
        except OSError as e:
            raise NativeLoadError(path, str(e)) from e
