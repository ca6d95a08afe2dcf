import logging
from pathlib import Path
from typing import List, Mapping, Optional

from .. import constants
from .command import CommandResult, run_command

logger = logging.getLogger(__name__)


class PackageManager:
    """
    The package manager collaborator (npm by default).

    Exposes the three operations the cache engines rely on: ``install`` for
    the whole build tree, and ``rebuild`` and ``prune`` for the component
    owning one dependency directory.
    """

    def __init__(self, executable: str = constants.PACKAGE_MANAGER, install_flags: Optional[List[str]] = None):
        self.executable = executable
        self.install_flags = list(constants.INSTALL_FLAGS if install_flags is None else install_flags)

    def install(self, cwd: Path, env: Optional[Mapping[str, str]] = None) -> CommandResult:
        logger.info(f"Installing dependencies with {self.executable} in '{cwd}'")
        return run_command([self.executable, "install", *self.install_flags], cwd, env)

    def rebuild(self, cwd: Path, env: Optional[Mapping[str, str]] = None) -> int:
        logger.info(f"Rebuilding native extensions in '{cwd}'")
        return run_command([self.executable, "rebuild"], cwd, env).exit_code

    def prune(self, cwd: Path, env: Optional[Mapping[str, str]] = None) -> int:
        logger.info(f"Pruning undeclared dependencies in '{cwd}'")
        return run_command([self.executable, "prune"], cwd, env).exit_code

    def __repr__(self):
        return f"PackageManager('{self.executable}')"
