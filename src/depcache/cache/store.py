import logging
from pathlib import Path
from typing import List

from .. import constants
from ..constants import CacheMode
from ..io import FileSystem
from ..exceptions import RestoreError

logger = logging.getLogger(__name__)


class CacheStore:
    """
    Persistent cache of dependency directories, addressed by the same
    relative paths they have in the build tree.
    """

    def __init__(self, fs: FileSystem, root: Path, mode: CacheMode = constants.DEFAULT_MODE):
        """
        Initialize cache store

        Args:
            fs: File system instance
            root: Cache root directory, persisted across builds
            mode: Link or copy strategy used by ``restore``
        """
        self.fs = fs
        self.root = Path(root)
        self.mode = CacheMode(mode)
        self._ensure_root()

    def _ensure_root(self):
        """Ensure cache directory exists"""
        if not self.fs.exists(self.root):
            self.fs.mkdir(self.root, parents=True, exist_ok=True)
            logger.debug(f"Created cache directory: {self.root}")

    def path(self, rel: str) -> Path:
        return self.root / rel

    def aux_path(self, name: str) -> Path:
        return self.root / constants.AUX_CACHE_SUBDIR / name

    def exists(self, rel: str) -> bool:
        """Whether real cached content is stored at ``rel``."""
        return self.fs.is_dir(self.path(rel))

    def restore(self, rel: str, build_root: Path) -> Path:
        """
        Place the cached directory ``rel`` at the same relative path under
        ``build_root``: a symbolic link in link mode, a full copy in copy mode.

        Raises:
            RestoreError: if the destination is already a real entry

        Returns:
            Path: the placed directory
        """
        source = self.path(rel)
        target = Path(build_root) / rel
        if self.fs.is_symlink(target):
            logger.debug(f"Replacing stale link at '{target}'")
            self.fs.remove(target)
        elif self.fs.lexists(target):
            raise RestoreError(f"Cannot restore '{rel}': '{target}' already exists and is not a link")

        if self.mode is CacheMode.LINK:
            self.fs.symlink(source.absolute(), target)
            logger.debug(f"Linked '{target}' -> '{source}'")
        else:
            self.fs.copytree(source, target)
            logger.debug(f"Copied '{source}' to '{target}'")
        return target

    def save(self, source: Path, dest: Path) -> int:
        """
        Mirror ``source`` into the cache location ``dest`` after removing any
        stale placeholder (a link or a plain file) left there.

        Returns:
            int: number of filesystem writes performed
        """
        writes = 0
        if self.fs.lexists(dest) and (self.fs.is_symlink(dest) or not self.fs.is_dir(dest)):
            logger.debug(f"Removing stale cache placeholder '{dest}'")
            self.fs.remove(dest)
            writes += 1
        writes += self.fs.mirror(source, dest)
        return writes

    def delete(self, rel: str) -> bool:
        """
        Delete the cached entry ``rel``.

        Returns:
            bool: whether anything was removed
        """
        target = self.path(rel)
        if not self.fs.lexists(target):
            logger.debug(f"No cache entry to delete at '{rel}'")
            return False
        self.fs.remove(target)
        logger.info(f"Deleted cache entry '{rel}'")
        return True

    def entries(self) -> List[str]:
        """Top-level names stored in the cache, auxiliary caches excluded."""
        if not self.fs.is_dir(self.root):
            return []
        return [e.name for e in self.fs.scandir(self.root) if e.name != constants.AUX_CACHE_SUBDIR]
