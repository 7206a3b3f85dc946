"""Host "sysinfo" string used to namespace bulk-extraction manifests.

The string has the form ``{arch}-{os}-{extra}``. On Linux ``extra`` encodes
the C and C++ runtime versions (e.g. ``c231cxx628``); elsewhere, or when the
runtimes cannot be identified, it is ``unknown``.
"""
import logging
import os
import platform
import re
from typing import Optional, Tuple

from .config import LoaderConfig, get_config

logger = logging.getLogger(__name__)

LIBSTDCXX_CANDIDATES: Tuple[str, ...] = (
    "/usr/lib/libstdc++.so.6",
    "/usr/lib/libstdc++.so.5",
)

_LIBC_VERSION = re.compile(r"^(\d+)\.(\d+)")
_LIBSTDCXX_TARGET = re.compile(r".*/libstdc\+\+\.so\.(\d+)\.0\.(\d+)$")


def _libc_tag() -> str:
    lib, version = platform.libc_ver()
    match = _LIBC_VERSION.match(version or "")
    if lib != "glibc" or not match:
        raise ValueError(f"unrecognized C runtime: {lib} {version}")
    return f"c{match.group(1)}{match.group(2)}"


def _libstdcxx_tag() -> str:
    candidate = next((path for path in LIBSTDCXX_CANDIDATES if os.path.exists(path)), None)
    if candidate is None:
        raise ValueError("libstdc++ not found")

    target = os.path.realpath(candidate)
    match = _LIBSTDCXX_TARGET.match(target)
    if not match:
        raise ValueError(f"libstdc++ symlink contains unexpected destination: {target}")

    major, minor = match.group(1), match.group(2)
    if major == "5":
        return "cxx5"
    if major == "6":
        return "cxx6" if int(minor) < 9 else f"cxx6{minor}"
    return f"cxx{major}{minor}"


def guess_sysinfo() -> str:
    """Make a best guess at the sysinfo string for this interpreter."""
    arch = platform.machine()
    os_name = platform.system()
    extra = "unknown"

    if os_name == "Linux":
        try:
            extra = _libc_tag() + _libstdcxx_tag()
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot identify C/C++ runtimes: {e}")
            extra = "unknown"

    return f"{arch}-{os_name}-{extra}"


def get_sysinfo(config: Optional[LoaderConfig] = None) -> str:
    """Return the configured sysinfo string, or a guessed one."""
    config = config or get_config()
    return config.sysinfo or guess_sysinfo()
