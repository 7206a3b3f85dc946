"""Extraction of bundled native libraries to a staging directory on disk.

Each extractor owns one staging directory for its lifetime, created lazily
under the temp root with a name starting with TMP_PREFIX. Creating an
extractor also deletes prefixed directories left behind by earlier runs, but
only once they are older than the configured minimum age, so a sibling
process that has not yet loaded its own copy is left alone. That cleanup is
advisory: failures are logged and ignored.
"""
import atexit
import logging
import shutil
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from .config import LoaderConfig, get_config
from .exceptions import ExtractionIOError, ResourceNotFoundError
from .platform import resolve_platform
from .resources import LocatedResource, ResourceBundle, locate
from .schemas import ExtractionRequest, OsFamily
from .sysinfo import get_sysinfo
from .utils import delete_recursively

logger = logging.getLogger(__name__)

TMP_PREFIX = "nativelib-loader_"
MANIFEST_ROOT = "META-INF/lib/"
MANIFEST_NAME = "AUTOEXTRACT.LIST"

# Staging directories still owned by an extractor, removed at interpreter exit
_pending_cleanup: List[Path] = []
_exit_hook_registered = False


def _register_for_exit_cleanup(directory: Path) -> None:
    global _exit_hook_registered
    if not _exit_hook_registered:
        atexit.register(cleanup_pending_directories)
        _exit_hook_registered = True
    _pending_cleanup.append(directory)


def _release(directory: Path) -> None:
    if directory in _pending_cleanup:
        _pending_cleanup.remove(directory)


def cleanup_pending_directories() -> None:
    """Best-effort removal of every staging directory not yet cleaned up."""
    for directory in reversed(_pending_cleanup):
        delete_recursively(directory)
    _pending_cleanup.clear()


def _is_plain_name(name: str) -> bool:
    return bool(name) and not any(sep in name for sep in ("/", "\\")) and name not in (".", "..")


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents), tolerating a concurrent creator."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExtractionIOError(path, f"unable to create directory: {e}") from e
    if not path.is_dir():
        raise ExtractionIOError(path, "unable to create directory")
    return path


def create_unique_directory(parent: Path, prefix: str) -> Path:
    """Create ``{prefix}{millis}.{attempt}`` under parent.

    The attempt counter is bumped until a name is free, so concurrent
    extractors never share a directory.

    Raises:
        ExtractionIOError: If the directory cannot be created.
    """
    ensure_directory(parent)
    now = int(time.time() * 1000)
    attempt = 0
    while True:
        candidate = parent / f"{prefix}{now}.{attempt}"
        try:
            candidate.mkdir()
        except FileExistsError:
            attempt += 1
            continue
        except OSError as e:
            raise ExtractionIOError(candidate, f"unable to create directory: {e}") from e
        return candidate


class BaseExtractor(ABC):
    """Copies bundled libraries out to a staging directory.

    Subclasses decide where the staging directories live:

    - ``native_dir``: dependencies listed in AUTOEXTRACT.LIST manifests.
    - ``jni_dir``: libraries extracted for direct loading.
    """

    def __init__(
        self,
        bundle: Optional[ResourceBundle] = None,
        config: Optional[LoaderConfig] = None,
        cleanup_leftovers: bool = True,
    ):
        self.config = config or get_config()
        self.bundle = bundle or ResourceBundle.from_sys_path()
        self.temp_root = self.config.temp_root()

        sysinfo = get_sysinfo(self.config)
        self.manifest_roots = [f"{MANIFEST_ROOT}{sysinfo}/", MANIFEST_ROOT]

        self._owned_dirs: List[Path] = []

        if cleanup_leftovers:
            self.delete_leftover_files()

    @property
    @abstractmethod
    def native_dir(self) -> Path:
        """Directory for manifest-listed dependencies (created on first use)."""
        raise NotImplementedError

    @property
    @abstractmethod
    def jni_dir(self) -> Path:
        """Directory for directly loaded libraries (created on first use)."""
        raise NotImplementedError

    def _own(self, directory: Path) -> Path:
        self._owned_dirs.append(directory)
        _register_for_exit_cleanup(directory)
        return directory

    def _new_staging_dir(self, parent: Path, prefix: str = TMP_PREFIX) -> Path:
        directory = create_unique_directory(parent, prefix)
        logger.debug(f"Created staging directory {directory}")
        return self._own(directory)

    def extract(
        self,
        located: LocatedResource,
        target_name: Optional[str] = None,
        directory: Optional[Path] = None,
    ) -> Path:
        """Copy a located library into the staging directory.

        Args:
            located: Library found by ``locate``.
            target_name: File name to write; defaults to the located filename
                so later loads by that name succeed.
            directory: Destination; defaults to ``jni_dir``.

        Returns:
            Path of the extracted file.

        Raises:
            ExtractionIOError: If the copy fails. No partial file is left behind.
        """
        target_dir = directory if directory is not None else self.jni_dir
        target = target_dir / (target_name or located.filename)
        logger.debug(f"Extracting '{located.path}' to '{target}'")

        try:
            with located.open() as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
        except OSError as e:
            try:
                target.unlink(missing_ok=True)
            except OSError:
                logger.debug(f"Could not remove partial file {target}")
            raise ExtractionIOError(target, str(e)) from e

        return target

    def extract_jni(self, library_path: str, library_name: str, family: Optional[OsFamily] = None) -> Path:
        """Locate a library in one bundle directory and extract it.

        Args:
            library_path: Bundle directory, e.g. 'natives/linux-x86_64-64'.
            library_name: Logical library name, e.g. 'dummy'.
            family: OS family whose filename convention applies; defaults to
                the running interpreter's.

        Raises:
            ResourceNotFoundError: If the library is not in that directory.
            ExtractionIOError: If the copy fails.
        """
        request = ExtractionRequest(search_directory=library_path, library_name=library_name)
        if family is None:
            family = resolve_platform().family
        located = locate(self.bundle, [request.search_directory], request.library_name, family)
        return self.extract(located)

    def extract_all(self, manifest) -> List[Path]:
        """Extract every library listed in one AUTOEXTRACT.LIST manifest.

        Each line names a library file, looked up under the manifest roots and
        copied into ``native_dir`` under the same name.

        Raises:
            ResourceNotFoundError: If a listed library is not in the bundle.
            ValueError: If a line is not a plain file name.
        """
        logger.debug(f"Extracting libraries listed in {manifest}")
        extracted = []
        for line in manifest.read_text(encoding="utf-8").splitlines():
            name = line.strip()
            if not name:
                continue
            if not _is_plain_name(name):
                raise ValueError(f"Invalid library name in {manifest}: {name!r}")

            located = None
            for root in self.manifest_roots:
                resource = self.bundle.find(root + name)
                if resource is not None:
                    located = LocatedResource(resource=resource, path=root + name, filename=name)
                    break

            if located is None:
                raise ResourceNotFoundError(name, [root + name for root in self.manifest_roots])
            extracted.append(self.extract(located, directory=self.native_dir))
        return extracted

    def extract_registered(self) -> List[Path]:
        """Extract the libraries of every manifest found in the bundle."""
        logger.debug(f"Extracting libraries registered in {self.bundle}")
        extracted = []
        for root in self.manifest_roots:
            for manifest in self.bundle.find_all(root + MANIFEST_NAME):
                extracted.extend(self.extract_all(manifest))
        return extracted

    def leftover_roots(self) -> List[Path]:
        """Directories scanned for leftovers of previous runs."""
        return [self.temp_root]

    def delete_leftover_files(self) -> int:
        """Delete staging directories left behind by earlier runs.

        Only directories whose names start with TMP_PREFIX and whose last
        modification is at least ``leftover_min_age_ms`` ago are removed.

        Returns:
            Number of directories deleted.
        """
        min_age_ms = self.config.leftover_min_age_ms
        deleted = 0
        for root in self.leftover_roots():
            try:
                folders = [p for p in root.iterdir() if p.name.startswith(TMP_PREFIX) and p.is_dir()]
            except OSError:
                continue

            for folder in folders:
                if folder in self._owned_dirs:
                    continue
                try:
                    age_ms = (time.time() - folder.stat().st_mtime) * 1000
                except OSError:
                    continue
                if age_ms < min_age_ms:
                    logger.debug(f"Not deleting leftover folder {folder}: is {age_ms:.0f}ms old")
                    continue
                logger.debug(f"Deleting leftover folder: {folder}")
                if delete_recursively(folder):
                    deleted += 1
        return deleted

    def cleanup(self) -> None:
        """Best-effort removal of this extractor's staging directories."""
        for directory in reversed(self._owned_dirs):
            delete_recursively(directory)
            _release(directory)

    def keep(self) -> None:
        """Leave this extractor's staging directories in place at exit."""
        for directory in self._owned_dirs:
            _release(directory)


class SharedExtractor(BaseExtractor):
    """Extractor using one staging directory for every extraction.

    A library can only be attached once per process, so this extractor is
    unsuitable when several isolated contexts load the same library. Use
    ContextExtractor for that.
    """

    def __init__(
        self,
        bundle: Optional[ResourceBundle] = None,
        config: Optional[LoaderConfig] = None,
        cleanup_leftovers: bool = True,
    ):
        self._staging_dir: Optional[Path] = None
        super().__init__(bundle=bundle, config=config, cleanup_leftovers=cleanup_leftovers)

    @property
    def staging_root(self) -> Path:
        if self.config.library_tmp_dir:
            return Path(self.config.library_tmp_dir).expanduser()
        return self.temp_root

    def leftover_roots(self) -> List[Path]:
        roots = [self.temp_root]
        if self.staging_root != self.temp_root:
            roots.append(self.staging_root)
        return roots

    @property
    def jni_dir(self) -> Path:
        if self._staging_dir is None:
            self._staging_dir = self._new_staging_dir(self.staging_root)
        return self._staging_dir

    @property
    def native_dir(self) -> Path:
        return self.jni_dir


class ContextExtractor(BaseExtractor):
    """Extractor giving each isolated context its own copy of a library.

    Libraries are extracted to ``{native_dir}/{context}.{millis}.{attempt}/``
    so two contexts in one process load two distinct files.
    """

    def __init__(
        self,
        context_name: str,
        bundle: Optional[ResourceBundle] = None,
        config: Optional[LoaderConfig] = None,
        cleanup_leftovers: bool = True,
    ):
        if not _is_plain_name(context_name):
            raise ValueError(f"Invalid context name: {context_name!r}")
        self.context_name = context_name
        self._native_dir: Optional[Path] = None
        self._jni_dir: Optional[Path] = None
        super().__init__(bundle=bundle, config=config, cleanup_leftovers=cleanup_leftovers)

    @property
    def native_dir(self) -> Path:
        if self._native_dir is None:
            self._native_dir = self._new_staging_dir(self.temp_root)
        return self._native_dir

    @property
    def jni_dir(self) -> Path:
        if self._jni_dir is None:
            self._jni_dir = self._new_staging_dir(self.native_dir, f"{self.context_name}.")
        return self._jni_dir
