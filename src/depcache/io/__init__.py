"""
depcache IO Module

- FileSystem: Abstract file system interface
- DiskFileSystem: Local disk file system (fsspec) with symlink-aware copy and mirror
- DirEntry: Directory entry typed without following links
- wrap_io_error: Decorator mapping OS errors onto depcache exceptions

Usage:
    from depcache.io import create_fs

    fs = create_fs()
    fs.mirror(Path("build/node_modules"), Path("cache/node_modules"))
"""

from .fs import (
    FileSystem,
    DiskFileSystem,
    DirEntry,
    wrap_io_error,
    create_fs,
)

__all__ = [
    'FileSystem',
    'DiskFileSystem',
    'DirEntry',
    'wrap_io_error',
    'create_fs',
]
