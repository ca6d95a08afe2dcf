import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from ..tools import PackageManager
from ..datacls import BuildReport
from ..exceptions import RebuildError

logger = logging.getLogger(__name__)


class NativeRebuilder:
    """
    Rebuilds native extensions of dependency directories that are already in
    the build tree (committed with the sources) instead of restoring them.
    """

    def __init__(self, package_manager: PackageManager, build_root: Path):
        self.package_manager = package_manager
        self.build_root = Path(build_root)

    def run(self, paths: Iterable[str], report: Optional[BuildReport] = None) -> List[str]:
        """
        Raises:
            RebuildError: on the first non-zero exit; the build must stop
        """
        rebuilt = []
        for rel in paths:
            cwd = self.build_root / PurePosixPath(rel).parent
            logger.info(f"'{rel}' is checked in, rebuilding instead of restoring")
            exit_code = self.package_manager.rebuild(cwd)
            if exit_code != 0:
                raise RebuildError(f"Rebuilding '{rel}' failed with exit code {exit_code}", exit_code=exit_code)
            rebuilt.append(rel)
            if report is not None:
                report.rebuilt.append(rel)
        return rebuilt
