from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List


class PlatformAdapter(ABC):
    """Abstract base class for family-specific library naming and loading."""

    # Suffixes that older runtimes used interchangeably for the same library
    alternate_suffixes: Dict[str, str] = {}

    @property
    @abstractmethod
    def library_prefix(self) -> str:
        """Filename prefix for shared libraries (e.g. 'lib')."""
        raise NotImplementedError

    @property
    @abstractmethod
    def library_suffix(self) -> str:
        """Filename suffix for shared libraries (e.g. '.so')."""
        raise NotImplementedError

    @abstractmethod
    def load_library(self, path: Path) -> Any:
        """Load a shared library from disk and return its handle.

        Raises:
            NativeLoadError: If the OS rejects the file.
        """
        raise NotImplementedError

    def map_library_name(self, name: str) -> str:
        """Return the physical filename for a logical library name."""
        return f"{self.library_prefix}{name}{self.library_suffix}"

    def library_names(self, name: str) -> List[str]:
        """Return the accepted filenames for a library, preferred first."""
        mapped = self.map_library_name(name)
        names = [mapped]
        for suffix, alternate in self.alternate_suffixes.items():
            if mapped.endswith(suffix):
                names.append(mapped[: -len(suffix)] + alternate)
                break
        return names
