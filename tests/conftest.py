import json
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

from depcache.io import DiskFileSystem
from depcache.tools import PackageManager, CommandResult
from depcache.datacls import BuildReport
from depcache.constants import CacheMode


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create ``files`` (relative path -> content) below ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def read_tree(root: Path) -> Dict[str, str]:
    """Relative path -> content for every regular file below ``root``, links followed at the top only."""
    root = root.resolve()
    return {
        p.relative_to(root).as_posix(): p.read_text()
        for p in sorted(root.rglob("*"))
        if p.is_file() and not p.is_symlink()
    }


def manifest(dependencies: Optional[Dict[str, str]] = None, **extra) -> str:
    data = {"name": "app", "version": "1.0.0", "dependencies": dependencies or {}}
    data.update(extra)
    return json.dumps(data)


class FakePackageManager(PackageManager):
    """Records every call instead of running npm."""

    def __init__(
        self,
        install_code: int = 0,
        rebuild_code: int = 0,
        prune_code: int = 0,
        on_install: Optional[Callable[[Path], None]] = None,
        on_prune: Optional[Callable[[Path], None]] = None,
    ):
        super().__init__("fake-npm")
        self.install_code = install_code
        self.rebuild_code = rebuild_code
        self.prune_code = prune_code
        self.on_install = on_install
        self.on_prune = on_prune
        self.calls = []

    def install(self, cwd, env=None):
        self.calls.append(("install", Path(cwd), dict(env) if env is not None else None))
        if self.on_install:
            self.on_install(Path(cwd))
        return CommandResult(self.install_code, "added 1 package\n")

    def rebuild(self, cwd, env=None):
        self.calls.append(("rebuild", Path(cwd), None))
        return self.rebuild_code

    def prune(self, cwd, env=None):
        self.calls.append(("prune", Path(cwd), None))
        if self.on_prune:
            self.on_prune(Path(cwd))
        return self.prune_code

    @property
    def ops(self):
        return [call[0] for call in self.calls]

    def cwds(self, op: str):
        return [call[1] for call in self.calls if call[0] == op]


@pytest.fixture
def fs():
    return DiskFileSystem()


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    path = tmp_path / "build"
    path.mkdir()
    return path


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def report(build_dir: Path, cache_dir: Path) -> BuildReport:
    return BuildReport(mode=CacheMode.COPY, build_dir=str(build_dir), cache_dir=str(cache_dir))
