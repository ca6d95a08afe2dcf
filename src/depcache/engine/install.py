import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from .. import constants
from ..env import ScopedEnvironment
from ..tools import PackageManager, CommandResult
from ..exceptions import InstallError

logger = logging.getLogger(__name__)


class Installer:
    """Runs the package manager's install step once for the whole build tree."""

    def __init__(
        self,
        package_manager: PackageManager,
        build_root: Path,
        env_file: Optional[Path] = None,
        denylist: Iterable[str] = constants.ENV_DENYLIST,
    ):
        self.package_manager = package_manager
        self.build_root = Path(build_root)
        self.env_file = Path(env_file) if env_file else None
        self.denylist = frozenset(denylist)

    def scoped_environment(self, overrides: Optional[Dict[str, str]] = None) -> ScopedEnvironment:
        scope = ScopedEnvironment.from_env_file(self.env_file, self.denylist)
        if overrides:
            scope = scope.with_overrides(**overrides)
        return scope

    def run(self, overrides: Optional[Dict[str, str]] = None) -> CommandResult:
        """
        Raises:
            InstallError: if install exits non-zero, with its exit code
        """
        scope = self.scoped_environment(overrides)
        logger.debug(f"Install environment: {scope!r}")
        result = self.package_manager.install(self.build_root, env=scope.env)
        if not result.ok:
            raise InstallError(f"Install failed with exit code {result.exit_code}", exit_code=result.exit_code)
        logger.info("Install finished")
        return result
