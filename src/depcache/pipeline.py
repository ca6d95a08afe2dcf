import logging
import signal
import tempfile
import threading
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Optional

from . import constants
from .config import Config
from .env import ScopedEnvironment
from .scanner import DirectoryScanner
from .cache import CacheStore
from .tools import PackageManager, BuildTool
from .engine import NativeRebuilder, Restorer, Installer, Synchronizer
from .rules import PinningAdvisor
from .datacls import BuildReport
from .exceptions import DepCacheIOError

logger = logging.getLogger(__name__)


@contextmanager
def terminate_on_signals(signums=(signal.SIGTERM, signal.SIGINT)):
    """
    Turn termination signals into SystemExit for the duration of the block so
    that pending cleanups run. Previous handlers are restored on exit.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum, frame):
        logger.warning(f"Received signal {signum}, aborting build")
        raise SystemExit(128 + signum)

    previous = {signum: signal.signal(signum, handler) for signum in signums}
    try:
        yield
    finally:
        for signum, old in previous.items():
            signal.signal(signum, old)


class CachePipeline:
    """
    Runs one build against the dependency cache:

    scan → rebuild committed dirs | restore cached dirs → install →
    build tool → rescan → sync back
    """

    def __init__(
        self,
        config: Config,
        package_manager: Optional[PackageManager] = None,
        build_tool: Optional[BuildTool] = None,
        run_build_tool: bool = True,
        home: Optional[Path] = None,
    ):
        self.config = config
        self.fs = config.fs
        self.build_root = config.build_dir
        self.temp_dir: Optional[Path] = None

        self.scanner = DirectoryScanner(self.fs, config.dependency_dir, config.exclude)
        # auxiliary caches live inside the cache root and are never scanned
        self.cache_scanner = DirectoryScanner(
            self.fs, config.dependency_dir, config.exclude + [constants.AUX_CACHE_SUBDIR]
        )
        self.store = CacheStore(self.fs, config.cache_dir, config.mode)
        self.package_manager = package_manager or PackageManager(config.package_manager, config.install_flags)
        tool_conf = config.build_tool
        self.build_tool = build_tool or BuildTool(self.fs, tool_conf.name, tool_conf.markers, tool_conf.args)
        self.run_build_tool = run_build_tool and tool_conf.enabled

        self.advisor = PinningAdvisor(self.fs, config.manifest)
        self.rebuilder = NativeRebuilder(self.package_manager, self.build_root)
        self.restorer = Restorer(self.fs, self.store, self.package_manager, self.build_root, config.manifest)
        self.installer = Installer(self.package_manager, self.build_root, config.env_file)
        self.synchronizer = Synchronizer(
            self.fs, self.store, self.scanner, self.build_root, config.aux_cache_paths(home)
        )

    def run(self) -> BuildReport:
        """
        Run the whole build. The temporary directory is removed on every exit
        path; fatal errors propagate unchanged.
        """
        report = BuildReport(
            mode=self.config.mode,
            build_dir=str(self.build_root),
            cache_dir=str(self.store.root),
        )
        logger.info(f"Starting cached build of '{self.build_root}'")

        with ExitStack() as stack:
            self.temp_dir = Path(tempfile.mkdtemp(prefix=constants.TEMP_DIR_PREFIX))
            stack.callback(self._remove_temp_dir, self.temp_dir)
            stack.enter_context(terminate_on_signals())

            self.advisor.check(self.build_root, report)

            # Step 1: directories committed with the sources get rebuilt
            present = self.scanner.scan(self.build_root)
            self.rebuilder.run(present, report)

            # Step 2: everything else comes from the cache
            cached = self.cache_scanner.scan(self.store.root)
            self.restorer.run(cached, present, report)

            # Step 3: install, scoped environment only
            self.installer.run(overrides={"TMPDIR": str(self.temp_dir)})
            report.installed = True

            # Step 4: extra build steps
            if self.run_build_tool:
                tool_env = ScopedEnvironment().with_overrides(TMPDIR=str(self.temp_dir))
                report.build_tool_ran = self.build_tool.run(self.build_root, env=tool_env.env)

            # Step 5: write the final state back
            self.synchronizer.run(report)

        report.finish()
        logger.info(
            f"Build finished: {len(report.restored)} restored, {len(report.rebuilt)} rebuilt, "
            f"{len(report.warnings)} warnings"
        )
        return report

    def _remove_temp_dir(self, path: Path):
        logger.debug(f"Removing temporary directory '{path}'")
        try:
            self.fs.remove(path)
        except DepCacheIOError as e:
            # must not replace the error that is unwinding the build
            logger.warning(f"Could not remove temporary directory '{path}': {e}")
