import ctypes
from pathlib import Path
from typing import Any

from nativelib.exceptions import NativeLoadError

from .base import PlatformAdapter


class MacOSAdapter(PlatformAdapter):
    # Older runtimes mapped names to .jnilib, newer ones to .dylib
    alternate_suffixes = {
        ".jnilib": ".dylib",
        ".dylib": ".jnilib",
    }

    @property
    def library_prefix(self) -> str:
        return "lib"

    @property
    def library_suffix(self) -> str:
        return ".dylib"

    def load_library(self, path: Path) -> Any:
        try:
            return ctypes.CDLL(str(path))
        except OSError as e:
            raise NativeLoadError(path, str(e)) from e
