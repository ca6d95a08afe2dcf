import logging
import posixpath
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Set

from . import constants
from .io import FileSystem
from .exceptions import DepCacheIOError

logger = logging.getLogger(__name__)


def normalize_rel_path(path: str) -> str:
    """Lexically normalize a relative path to POSIX form ('a/./b/../c' -> 'a/c')."""
    norm = posixpath.normpath(PurePosixPath(str(path).replace("\\", "/")).as_posix())
    return norm.lstrip("/") or "."


class DirectoryScanner:
    """
    Finds dependency directories anywhere below a root.

    The walk is an explicit depth-first traversal. A matched directory is
    reported and never entered, so matches are never nested; excluded
    subtrees are neither reported nor entered; symbolic links are never
    followed.
    """

    def __init__(
        self,
        fs: FileSystem,
        dep_dir_name: str = constants.DEPENDENCY_DIR_NAME,
        exclude_paths: Iterable[str] = (),
    ):
        self.fs = fs
        self.dep_dir_name = dep_dir_name
        self.excluded: Set[str] = {normalize_rel_path(p) for p in exclude_paths}

    def scan(self, root: Path, include_links: bool = False) -> List[str]:
        """
        Scan ``root`` for dependency directories.

        Args:
            root: Directory to scan
            include_links: Also report symbolic links carrying the dependency
                directory name (restoration in link mode creates those)

        Returns:
            List[str]: unique POSIX paths relative to ``root``, in discovery order
        """
        root = Path(root)
        if not self.fs.is_dir(root):
            logger.debug(f"Scan root '{root}' does not exist, nothing to scan")
            return []

        found: List[str] = []
        stack: List[PurePosixPath] = [PurePosixPath(".")]
        while stack:
            rel = stack.pop()
            try:
                entries = self.fs.scandir(root / rel)
            except DepCacheIOError as e:
                logger.warning(f"Skipping unreadable directory '{root / rel}': {e}")
                continue

            children = []
            for entry in entries:
                child = rel / entry.name
                key = child.as_posix()
                if key in self.excluded:
                    logger.debug(f"Excluded from scan: {key}")
                    continue
                if self._is_match(entry.name, entry.is_dir, entry.is_symlink, include_links):
                    found.append(key)
                    continue
                if entry.is_dir:
                    children.append(child)
            # reversed so that siblings pop in name order
            stack.extend(reversed(children))

        logger.debug(f"Found {len(found)} dependency directories under '{root}': {found}")
        return found

    def _is_match(self, name: str, is_dir: bool, is_symlink: bool, include_links: bool) -> bool:
        if name != self.dep_dir_name:
            return False
        return is_dir or (include_links and is_symlink)
