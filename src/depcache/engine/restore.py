import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, List

from .. import constants
from ..io import FileSystem
from ..cache import CacheStore
from ..tools import PackageManager
from ..datacls import BuildReport
from ..exceptions import (
    CollaboratorMissingError,
    DepCacheIOError,
    PruneError,
    RestoreError,
)

logger = logging.getLogger(__name__)


class Restorer:
    """
    Puts cached dependency directories back into the build tree before
    install, then prunes each one against its current manifest.

    A directory qualifies when it is cached, is not already in the build
    tree, and its parent in the build tree still holds a manifest. Pruning
    keeps a cache that predates a manifest edit from leaving removed
    packages installed.
    """

    def __init__(
        self,
        fs: FileSystem,
        store: CacheStore,
        package_manager: PackageManager,
        build_root: Path,
        manifest: str = constants.MANIFEST_FILENAME,
    ):
        self.fs = fs
        self.store = store
        self.package_manager = package_manager
        self.build_root = Path(build_root)
        self.manifest = manifest

    def candidates(self, cached: Iterable[str], present: Iterable[str]) -> List[str]:
        """Cached paths eligible for restoration, in discovery order."""
        present = set(present)
        eligible = []
        for rel in cached:
            if rel in present:
                logger.debug(f"'{rel}' already in build tree, not restoring")
                continue
            manifest_path = self._parent(rel) / self.manifest
            if not self.fs.is_file(manifest_path):
                logger.debug(f"No '{self.manifest}' next to '{rel}', not restoring")
                continue
            eligible.append(rel)
        return eligible

    def run(self, cached: Iterable[str], present: Iterable[str], report: BuildReport) -> List[str]:
        """
        Restore every eligible directory. One directory failing does not stop
        the others; failures are raised together once the loop is done.

        Raises:
            RestoreError: if any directory could not be placed
        """
        restored = []
        failures = []
        for rel in self.candidates(cached, present):
            try:
                self.store.restore(rel, self.build_root)
            except (RestoreError, DepCacheIOError) as e:
                logger.error(f"Failed to restore '{rel}': {e}")
                failures.append(f"{rel}: {e}")
                continue
            logger.info(f"Restored '{rel}' from cache ({self.store.mode.value})")
            restored.append(rel)
            report.restored.append(rel)
            self._prune(rel, report)

        if failures:
            raise RestoreError(f"Failed to restore {len(failures)} cached directories: " + "; ".join(failures))
        return restored

    def _prune(self, rel: str, report: BuildReport) -> bool:
        try:
            exit_code = self.package_manager.prune(self._parent(rel))
            if exit_code != 0:
                raise PruneError(f"prune exited with code {exit_code}")
        except (PruneError, CollaboratorMissingError) as e:
            if not self.fs.lexists(self.build_root / rel):
                raise RestoreError(f"'{rel}' disappeared after a failed prune: {e}") from e
            report.warn("prune", str(e), rel)
            return False
        report.pruned.append(rel)
        return True

    def _parent(self, rel: str) -> Path:
        return self.build_root / PurePosixPath(rel).parent
