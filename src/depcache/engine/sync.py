import logging
from pathlib import Path
from typing import Dict, List, Optional

from .. import constants
from ..constants import CacheMode
from ..io import FileSystem
from ..cache import CacheStore
from ..scanner import DirectoryScanner
from ..datacls import BuildReport, SyncOutcome
from ..exceptions import DepCacheIOError, SyncError

logger = logging.getLogger(__name__)


class Synchronizer:
    """
    Writes the final state of the build tree back into the cache.

    The build tree is rescanned (links included) so the cache reflects what
    install and the build tool actually left behind. In link mode an entry
    that is already cached is skipped: the link in the build tree already
    points at it.
    """

    def __init__(
        self,
        fs: FileSystem,
        store: CacheStore,
        scanner: DirectoryScanner,
        build_root: Path,
        aux_caches: Optional[Dict[str, Path]] = None,
    ):
        self.fs = fs
        self.store = store
        self.scanner = scanner
        self.build_root = Path(build_root)
        self.aux_caches = dict(aux_caches or {})

    def run(self, report: BuildReport) -> List[SyncOutcome]:
        outcomes = []
        for rel in self.scanner.scan(self.build_root, include_links=True):
            outcomes.append(self._sync(rel, self.build_root / rel, self.store.path(rel), report))

        for name, source in self.aux_caches.items():
            if not self.fs.is_dir(source):
                logger.debug(f"Auxiliary cache '{name}' not found at '{source}', skipping")
                continue
            label = f"{constants.AUX_CACHE_SUBDIR}/{name}"
            outcomes.append(self._sync(label, Path(source), self.store.aux_path(name), report))

        report.synced.extend(outcomes)
        mirrored = sum(1 for o in outcomes if o.action == "mirrored")
        logger.info(f"Synced {mirrored} of {len(outcomes)} directories back to cache")
        return outcomes

    def _sync(self, label: str, source: Path, dest: Path, report: BuildReport) -> SyncOutcome:
        if self.store.mode is CacheMode.LINK and self.fs.is_dir(dest):
            logger.debug(f"'{label}' already cached, nothing to sync in link mode")
            return SyncOutcome(path=label, action="skipped")
        try:
            writes = self._mirror(label, source, dest)
        except SyncError as e:
            report.warn("sync", str(e), label)
            return SyncOutcome(path=label, action="failed")
        logger.info(f"Cached '{label}' ({writes} changes)")
        return SyncOutcome(path=label, action="mirrored", writes=writes)

    def _mirror(self, label: str, source: Path, dest: Path) -> int:
        try:
            return self.store.save(source, dest)
        except DepCacheIOError as e:
            raise SyncError(f"Could not cache '{label}': {e}") from e
