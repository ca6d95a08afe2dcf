import logging
from pathlib import Path
from typing import List, Mapping, Optional

from .. import constants
from ..io import FileSystem
from ..exceptions import BuildStepError
from .command import run_command

logger = logging.getLogger(__name__)


class BuildTool:
    """Secondary build tool, run once after install when its marker file is present."""

    def __init__(
        self,
        fs: FileSystem,
        name: str = constants.BUILD_TOOL,
        markers: Optional[List[str]] = None,
        args: Optional[List[str]] = None,
    ):
        self.fs = fs
        self.name = name
        self.markers = list(constants.BUILD_TOOL_MARKERS if markers is None else markers)
        self.args = list(constants.BUILD_TOOL_ARGS if args is None else args)

    def detect(self, root: Path) -> Optional[Path]:
        """Return the first marker file found in ``root``, if any."""
        for marker in self.markers:
            candidate = Path(root) / marker
            if self.fs.is_file(candidate):
                logger.debug(f"Detected {self.name} via '{candidate}'")
                return candidate
        return None

    def run(self, root: Path, env: Optional[Mapping[str, str]] = None) -> bool:
        """
        Run ``<tool> build`` in ``root`` if the tool is detected.

        Returns:
            bool: whether the tool ran

        Raises:
            BuildStepError: if the tool exits non-zero
        """
        if self.detect(root) is None:
            logger.debug(f"No {self.name} marker in '{root}', skipping")
            return False
        logger.info(f"Running {self.name} {' '.join(self.args)}")
        result = run_command([self.name, *self.args], root, env)
        if not result.ok:
            raise BuildStepError(f"{self.name} {' '.join(self.args)} failed with exit code {result.exit_code}", exit_code=result.exit_code)
        return True
