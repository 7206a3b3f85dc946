"""Pydantic value types shared across the loader.

All models here are frozen: a platform tuple is computed once at the start of
a load and passed down the call chain by value.
"""
import platform
import struct
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .architectures import normalize_architecture


class OsFamily(str, Enum):
    """Top-level OS category."""

    LINUX = "linux"
    WINDOWS = "windows"
    OSX = "osx"
    AIX = "aix"
    SOLARIS = "solaris"
    ZOS = "zos"
    UNKNOWN = "unknown"


class PlatformTuple(BaseModel):
    """Canonical (family, architecture, bitness, special) description of a platform."""
    model_config = ConfigDict(frozen=True)

    family: OsFamily
    architecture: str
    bitness: int
    special: str = ""

    @field_validator("family", "special", mode="before")
    @classmethod
    def _lowercase(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("architecture", mode="before")
    @classmethod
    def _canonical_architecture(cls, value):
        if isinstance(value, str):
            return normalize_architecture(value).lower()
        return value

    def __str__(self) -> str:
        text = f"{self.family.value}/{self.architecture}/{self.bitness}"
        if self.special:
            text += f"/{self.special}"
        return text


class SystemSignals(BaseModel):
    """Raw platform signals as reported by the running interpreter.

    ``data_model`` is the generic pointer-width signal and ``vm_bitmode`` the
    alternate one; either may be missing or non-numeric.
    """
    model_config = ConfigDict(frozen=True)

    os_name: str
    arch: str
    data_model: Optional[str] = None
    vm_bitmode: Optional[str] = None

    @classmethod
    def current(cls) -> "SystemSignals":
        """Capture the signals of the live interpreter."""
        bits = platform.architecture()[0]
        return cls(
            os_name=platform.system(),
            arch=platform.machine(),
            data_model=str(struct.calcsize("P") * 8),
            vm_bitmode=bits[:-3] if bits.endswith("bit") else bits,
        )


class PathMappingEntry(BaseModel):
    """Ordered directory names for one platform; canonical path first."""
    model_config = ConfigDict(frozen=True)

    platform: PlatformTuple
    paths: Tuple[str, ...]

    @field_validator("paths")
    @classmethod
    def _non_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("a path mapping needs at least the canonical path")
        return value

    @property
    def canonical(self) -> str:
        return self.paths[0]

    @property
    def legacy(self) -> Tuple[str, ...]:
        return self.paths[1:]


class ExtractionRequest(BaseModel):
    """One lookup of a logical library name inside a bundle directory."""
    model_config = ConfigDict(frozen=True)

    search_directory: str
    library_name: str

    @field_validator("search_directory")
    @classmethod
    def _terminate_directory(cls, value: str) -> str:
        value = value.replace("\\", "/")
        if value and not value.endswith("/"):
            value += "/"
        return value
