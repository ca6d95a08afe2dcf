"""
depcache - build-time dependency cache manager

Restores cached dependency directories into a build tree before install,
prunes them against their manifests, and mirrors the installed result back
into the cache for the next build.

Main modules:
- scanner: Discovery of dependency directories in a tree
- cache: The persistent cache store
- engine: Rebuild, restore, install and sync-back steps
- tools: Package manager and build tool collaborators
- pipeline: Orchestration of one build
- config: Mode selection and project configuration
- env: Scoped environment for the install step
- rules: Version pinning advisories
- datacls: Build report models
- io: File system layer
- utils: Utility functions

Quick start example:
```python
from depcache import Config, CachePipeline

config = Config("./app", "/var/cache/app", "./app.env", mode="link")
report = CachePipeline(config).run()
```
"""

__version__ = "0.4.0"

from .constants import CacheMode
from .config import Config, ProjectModel
from .scanner import DirectoryScanner
from .cache import CacheStore
from .pipeline import CachePipeline
from .env import ScopedEnvironment
from .io import FileSystem, DiskFileSystem, create_fs
from .datacls import BuildReport
from .exceptions import (
    DepCacheError,
    FatalError,
    ConfigurationError,
    InstallError,
    RestoreError,
    RecoverableError,
)

__all__ = [
    # Version
    '__version__',
    # Core
    'CacheMode',
    'Config',
    'ProjectModel',
    'DirectoryScanner',
    'CacheStore',
    'CachePipeline',
    'ScopedEnvironment',
    'BuildReport',
    # IO
    'FileSystem',
    'DiskFileSystem',
    'create_fs',
    # Exceptions
    'DepCacheError',
    'FatalError',
    'ConfigurationError',
    'InstallError',
    'RestoreError',
    'RecoverableError',
]
