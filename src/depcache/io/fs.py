from abc import ABC, abstractmethod
from typing import List, NamedTuple
import errno
import filecmp
import functools
import logging
import os
import shutil
from pathlib import Path

import fsspec

from ..utils.typing_compat import override
from ..exceptions import (
    DepCacheIOError,
    DepCachePathExistsError,
    DepCachePathNotFoundError,
    DepCacheNotAFileError,
    DepCacheNotADirectoryError,
)

logger = logging.getLogger(__name__)


def wrap_io_error(func):
    """Decorator to wrap IO errors into depcache exceptions."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FileExistsError as e:
            raise DepCachePathExistsError(e) from e
        except FileNotFoundError as e:
            raise DepCachePathNotFoundError(e) from e
        except IsADirectoryError as e:
            raise DepCacheNotAFileError(e) from e
        except NotADirectoryError as e:
            raise DepCacheNotADirectoryError(e) from e
        except (OSError, shutil.Error) as e:
            raise DepCacheIOError(e) from e

    return wrapper


class DirEntry(NamedTuple):
    """One directory entry, typed without following symbolic links."""

    name: str
    path: Path
    is_dir: bool
    is_symlink: bool


# --------------------
#
# Abstract FileSystem
#
# --------------------

class FileSystem(ABC):
    """depcache File System Abstract Base Class"""

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Read text from a file"""
        pass

    @abstractmethod
    def write_text(self, path: Path, content: str):
        """Write text to a file"""
        pass

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Check if a path exists, following symbolic links"""
        pass

    @abstractmethod
    def lexists(self, path: Path) -> bool:
        """Check if a path exists, a dangling symbolic link included"""
        pass

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory"""
        pass

    @abstractmethod
    def is_file(self, path: Path) -> bool:
        """Check if a path is a file"""
        pass

    @abstractmethod
    def is_symlink(self, path: Path) -> bool:
        """Check if a path is a symbolic link"""
        pass

    @abstractmethod
    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False):
        """Create a directory"""
        pass

    @abstractmethod
    def scandir(self, path: Path) -> List[DirEntry]:
        """List directory entries in name order"""
        pass

    @abstractmethod
    def remove(self, path: Path):
        """Remove a file, a symbolic link or a whole directory"""
        pass

    @abstractmethod
    def symlink(self, target: Path, link: Path):
        """Create ``link`` pointing at ``target``"""
        pass

    @abstractmethod
    def copytree(self, src: Path, dst: Path):
        """Copy a directory tree, preserving file attributes"""
        pass

    @abstractmethod
    def mirror(self, src: Path, dst: Path) -> int:
        """Make ``dst`` identical to ``src``; return the number of writes"""
        pass


# --------------------
#
# Disk FileSystem
#
# --------------------

class DiskFileSystem(FileSystem):
    """Local disk file system using fsspec, with symlink-aware tree operations"""

    def __init__(self):
        self.fs = fsspec.filesystem("file")
        self.name = "DiskFS"

    @override
    @wrap_io_error
    def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        logger.debug(f"[{self.name}] Reading from: {path}")
        with self.fs.open(str(path), "r", encoding=encoding) as f:
            return f.read()

    @override
    @wrap_io_error
    def write_text(self, path: Path, content: str, encoding: str = "utf-8"):
        logger.debug(f"[{self.name}] Writing to: {path}")
        self.fs.mkdirs(str(Path(path).parent), exist_ok=True)
        with self.fs.open(str(path), "w", encoding=encoding) as f:
            f.write(content)

    @override
    def exists(self, path: Path) -> bool:
        return self.fs.exists(str(path))

    @override
    def lexists(self, path: Path) -> bool:
        return os.path.lexists(path)

    @override
    def is_dir(self, path: Path) -> bool:
        return self.fs.isdir(str(path))

    @override
    def is_file(self, path: Path) -> bool:
        return self.fs.isfile(str(path))

    @override
    def is_symlink(self, path: Path) -> bool:
        return os.path.islink(path)

    @override
    @wrap_io_error
    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False):
        if parents:
            self.fs.makedirs(str(path), exist_ok=exist_ok)
        else:
            self.fs.mkdir(str(path), create_parents=False)

    @override
    @wrap_io_error
    def scandir(self, path: Path) -> List[DirEntry]:
        with os.scandir(path) as it:
            entries = [
                DirEntry(
                    name=e.name,
                    path=Path(e.path),
                    is_dir=e.is_dir(follow_symlinks=False),
                    is_symlink=e.is_symlink(),
                )
                for e in it
            ]
        return sorted(entries, key=lambda e: e.name)

    @override
    @wrap_io_error
    def remove(self, path: Path):
        if os.path.islink(path) or os.path.isfile(path):
            logger.debug(f"[{self.name}] Unlinking: {path}")
            os.unlink(path)
        elif self.fs.isdir(str(path)):
            logger.debug(f"[{self.name}] Removing tree: {path}")
            self.fs.rm(str(path), recursive=True)
        else:
            logger.debug(f"Path {path} does not exist, skipping remove.")

    @override
    @wrap_io_error
    def symlink(self, target: Path, link: Path):
        logger.debug(f"[{self.name}] Linking '{link}' -> '{target}'")
        self.fs.makedirs(str(Path(link).parent), exist_ok=True)
        os.symlink(target, link, target_is_directory=True)

    @override
    @wrap_io_error
    def copytree(self, src: Path, dst: Path):
        logger.debug(f"[{self.name}] Copying tree '{src}' to '{dst}'")
        self.fs.makedirs(str(Path(dst).parent), exist_ok=True)
        shutil.copytree(src, dst, symlinks=True, copy_function=shutil.copy2)

    @override
    @wrap_io_error
    def mirror(self, src: Path, dst: Path) -> int:
        """
        Mirror ``src`` into ``dst`` with delete-extraneous semantics, like
        ``rsync -a --delete``. A top-level symbolic link at ``src`` is followed;
        links inside the tree are reproduced as links. Files with the same
        size, mode and content are left alone.

        Returns:
            int: number of entries written or removed under ``dst``
        """
        src = Path(src).resolve()
        dst = Path(dst)
        if not os.path.isdir(src):
            raise FileNotFoundError(errno.ENOENT, "Mirror source is not a directory", str(src))
        logger.debug(f"[{self.name}] Mirroring '{src}' to '{dst}'")
        writes = 0
        if self.lexists(dst) and (self.is_symlink(dst) or not self.is_dir(dst)):
            self.remove(dst)
            writes += 1
        if not self.exists(dst):
            self.fs.makedirs(str(dst), exist_ok=True)
            shutil.copymode(src, dst)
            writes += 1

        stack = [Path(".")]
        while stack:
            rel = stack.pop()
            src_entries = {e.name: e for e in self.scandir(src / rel)}
            for entry in self.scandir(dst / rel):
                if entry.name not in src_entries:
                    self.remove(entry.path)
                    writes += 1
            for name, entry in src_entries.items():
                target = dst / rel / name
                if entry.is_symlink:
                    writes += self._mirror_link(entry.path, target)
                elif entry.is_dir:
                    writes += self._mirror_dir(entry.path, target)
                    stack.append(rel / name)
                else:
                    writes += self._mirror_file(entry.path, target)
        return writes

    def _mirror_link(self, src: Path, target: Path) -> int:
        link_to = os.readlink(src)
        if self.is_symlink(target) and os.readlink(target) == link_to:
            return 0
        if self.lexists(target):
            self.remove(target)
        os.symlink(link_to, target)
        return 1

    def _mirror_dir(self, src: Path, target: Path) -> int:
        if self.lexists(target) and (self.is_symlink(target) or not self.is_dir(target)):
            self.remove(target)
        if self.is_dir(target):
            return 0
        os.mkdir(target)
        shutil.copymode(src, target)
        return 1

    def _mirror_file(self, src: Path, target: Path) -> int:
        if self.lexists(target):
            if self.is_symlink(target) or self.is_dir(target):
                self.remove(target)
            elif _same_file(src, target):
                return 0
        shutil.copy2(src, target)
        return 1


def _same_file(a: Path, b: Path) -> bool:
    sa, sb = os.stat(a), os.stat(b)
    if sa.st_size != sb.st_size or sa.st_mode != sb.st_mode:
        return False
    # npm stamps every extracted file with the same mtime, so only content tells versions apart
    return filecmp.cmp(a, b, shallow=False)


def create_fs() -> FileSystem:
    """Create the file system used for both the build tree and the cache."""
    return DiskFileSystem()
