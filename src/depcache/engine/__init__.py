"""
depcache Engine Module

The stateful steps of a build, in the order they run:
- NativeRebuilder: rebuild dependency directories checked into the tree
- Restorer: restore cached directories, then prune them
- Installer: one install call inside a scoped environment
- Synchronizer: mirror the final tree back into the cache
"""

from .rebuild import NativeRebuilder
from .restore import Restorer
from .install import Installer
from .sync import Synchronizer

__all__ = [
    'NativeRebuilder',
    'Restorer',
    'Installer',
    'Synchronizer',
]
