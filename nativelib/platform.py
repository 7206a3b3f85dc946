"""Platform detection utilities.

Turns the raw, inconsistent OS name and architecture strings reported by the
interpreter into a canonical ``PlatformTuple``.
"""
import logging
from typing import Optional, Tuple

from .architectures import normalize_architecture
from .exceptions import UnsupportedPlatformError
from .schemas import OsFamily, PlatformTuple, SystemSignals

logger = logging.getLogger(__name__)

# Checked in order: "darwin" contains "win", so it has to come before windows.
FAMILY_TOKENS: Tuple[Tuple[OsFamily, Tuple[str, ...]], ...] = (
    (OsFamily.SOLARIS, ("solaris", "sunos")),
    (OsFamily.LINUX, ("nix", "nux")),
    (OsFamily.OSX, ("darwin",)),
    (OsFamily.WINDOWS, ("win",)),
    (OsFamily.OSX, ("mac",)),
    (OsFamily.AIX, ("aix",)),
    (OsFamily.ZOS, ("z/os", "os/390")),
)


def determine_os_family(os_name: Optional[str]) -> OsFamily:
    """Return the OS family for a raw OS name like 'Linux' or 'Mac OS X'.

    Raises:
        UnsupportedPlatformError: If no family token matches.
    """
    if not os_name:
        raise UnsupportedPlatformError(str(os_name))

    lowered = os_name.lower()
    for family, tokens in FAMILY_TOKENS:
        if any(token in lowered for token in tokens):
            return family

    raise UnsupportedPlatformError(os_name)


def guess_bitness_from_architecture(architecture: str) -> int:
    """Last-resort bitness guess: anything mentioning 64 is 64-bit."""
    if "64" in architecture:
        return 64
    return 32


def _parse_bitness(value: Optional[str]) -> Optional[int]:
    if value and value.isdigit():
        return int(value, 10)
    return None


def determine_bitness(signals: SystemSignals) -> int:
    """Derive the pointer width from the available signals.

    The generic signal wins over the alternate one; the architecture name is
    only consulted when neither is usable.
    """
    for value in (signals.data_model, signals.vm_bitmode):
        bitness = _parse_bitness(value)
        if bitness is not None:
            return bitness

    return guess_bitness_from_architecture(signals.arch)


def platform_from_values(
    family: str,
    architecture: str,
    bitness: int,
    special: str = "",
) -> PlatformTuple:
    """Build a tuple from an already known family, normalizing the architecture."""
    return PlatformTuple(
        family=family,
        architecture=normalize_architecture(architecture),
        bitness=bitness,
        special=special,
    )


def normalize(
    os_name: str,
    architecture: str,
    bitness: Optional[int] = None,
    special: str = "",
) -> PlatformTuple:
    """Build a tuple from a raw OS name and architecture.

    Args:
        os_name: OS name as reported by the runtime (e.g. "Windows 10").
        architecture: Raw architecture string (e.g. "amd64").
        bitness: Explicit pointer width; guessed from the architecture if None.
        special: Optional free-form qualifier.

    Raises:
        UnsupportedPlatformError: If the OS family cannot be determined.
    """
    family = determine_os_family(os_name)
    arch = normalize_architecture(architecture)
    if bitness is None:
        bitness = guess_bitness_from_architecture(arch)
    return PlatformTuple(family=family, architecture=arch, bitness=bitness, special=special)


def platform_from_signals(signals: SystemSignals) -> PlatformTuple:
    """Build a tuple from a full set of system signals."""
    family = determine_os_family(signals.os_name)
    tuple_ = PlatformTuple(
        family=family,
        architecture=normalize_architecture(signals.arch),
        bitness=determine_bitness(signals),
    )
    logger.debug(f"Platform for {signals.os_name}/{signals.arch} is {tuple_}")
    return tuple_


def resolve_platform(signals: Optional[SystemSignals] = None) -> PlatformTuple:
    """Resolve the platform of the running interpreter. No side effects."""
    return platform_from_signals(signals or SystemSignals.current())


def path_for_platform(platform: PlatformTuple) -> str:
    """Return the canonical directory name, e.g. 'linux-x86_64-64'."""
    base = f"{platform.family.value}-{normalize_architecture(platform.architecture)}-{platform.bitness}"
    if not platform.special:
        return base
    return f"{base}-{platform.special}"
