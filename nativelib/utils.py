"""Utility functions for the native library loader."""
import hashlib
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def delete_recursively(path: Path) -> bool:
    """Delete a directory tree, tolerating failures.

    Files still mapped by a running process (e.g. a loaded DLL on Windows)
    cannot be removed; such failures are logged and reported as False.

    Returns:
        True if the directory no longer exists.
    """
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.debug(f"Could not delete {path}: {e}")
        return False
    return True


def calculate_sha256(file_path: Path) -> str:
    """Calculate SHA256 hash of a file.

    Args:
        file_path: Path to the file to hash.

    Returns:
        Hexadecimal string of the SHA256 hash.
    """
    sha256_hash = hashlib.sha256()
    with open(file_path, "rb") as f:
        for byte_block in iter(lambda: f.read(8192), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def format_bytes(size_bytes: int) -> str:
    """Format bytes into human-readable string.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Human-readable string like "1.5 MB", "256 B".
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
