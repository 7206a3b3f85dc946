"""Canonical architecture names and the aliases runtimes report for them.

The alias table is plain ordered data so new aliases can be added without
touching the lookup code.
"""
from typing import Tuple

ARCH_X86_32 = "x86_32"
ARCH_X86_64 = "x86_64"
ARCH_ITANIUM_32 = "itanium_32"
ARCH_ITANIUM_64 = "itanium_64"
ARCH_SPARC_32 = "sparc_32"
ARCH_SPARC_64 = "sparc_64"
ARCH_ARM_32 = "arm_32"
ARCH_AARCH_64 = "aarch_64"
ARCH_PPC_32 = "ppc_32"
ARCH_PPC_64 = "ppc_64"
ARCH_PPCLE_32 = "ppcle"
ARCH_PPCLE_64 = "ppcle_64"

# (canonical, aliases); first matching set wins
ARCHITECTURE_ALIASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (ARCH_X86_32, ("x8632", "x86", "i386", "i486", "i586", "i686", "ia32", "x32")),
    (ARCH_X86_64, ("x8664", "amd64", "ia32e", "em64t", "x64")),
    (ARCH_ITANIUM_32, ("ia64n",)),
    (ARCH_ITANIUM_64, ("ia64", "ia64w", "itanium64")),
    (ARCH_SPARC_32, ("sparc", "sparc32")),
    (ARCH_SPARC_64, ("sparcv9", "sparc64")),
    (ARCH_AARCH_64, ("aarch64", "arm64")),
    (ARCH_ARM_32, ("arm", "arm32", "armv6l", "armv7l")),
    (ARCH_PPC_32, ("ppc",)),
    (ARCH_PPC_64, ("ppc64",)),
    (ARCH_PPCLE_32, ("ppcle", "ppc32le")),
    (ARCH_PPCLE_64, ("ppc64le",)),
)


def normalize_architecture(architecture: str) -> str:
    """Map a reported architecture onto its canonical name.

    Unknown architectures are returned unchanged.
    """
    lowered = architecture.lower()
    for canonical, aliases in ARCHITECTURE_ALIASES:
        if lowered in aliases:
            return canonical
    return architecture
