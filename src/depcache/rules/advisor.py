import json
import logging
from pathlib import Path
from typing import Iterator, Tuple

from .. import constants
from ..io import FileSystem
from ..datacls import BuildReport
from ..exceptions import DepCacheIOError
from .range import RangeRule

logger = logging.getLogger(__name__)


class PinningAdvisor:
    """Reports loosely pinned versions in the root manifest as advisories."""

    def __init__(self, fs: FileSystem, manifest: str = constants.MANIFEST_FILENAME):
        self.fs = fs
        self.manifest = manifest

    def check(self, build_root: Path, report: BuildReport) -> int:
        """
        Returns:
            int: number of advisories added
        """
        before = len(report.advisories)
        for subject, message in self._findings(Path(build_root) / self.manifest):
            report.advise(subject, message)
        return len(report.advisories) - before

    def _findings(self, manifest_path: Path) -> Iterator[Tuple[str, str]]:
        if not self.fs.is_file(manifest_path):
            return
        try:
            data = json.loads(self.fs.read_text(manifest_path))
        except (json.JSONDecodeError, DepCacheIOError) as e:
            logger.debug(f"Cannot read '{manifest_path}' for advisories: {e}")
            return
        if not isinstance(data, dict):
            return

        engines = data.get("engines") if isinstance(data.get("engines"), dict) else {}
        node_range = engines.get("node")
        if node_range is None:
            yield "engines.node", "no runtime version is declared; the default runtime may change between builds"
        elif RangeRule(str(node_range)).is_loose:
            yield "engines.node", f"runtime range '{node_range}' has no upper bound"

        dependencies = data.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            return
        for name, range_str in dependencies.items():
            rule = RangeRule(str(range_str))
            if rule.is_loose:
                yield name, f"version range '{rule}' is loosely pinned and may pull breaking releases"
