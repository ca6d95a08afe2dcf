"""
depcache Tools Module

External collaborators invoked as subprocesses:
- PackageManager: install, rebuild and prune (npm by default)
- BuildTool: secondary build tool detected by marker files
- run_command: synchronous runner logging indented output
"""

from .command import CommandResult, run_command
from .package_manager import PackageManager
from .build_tool import BuildTool

__all__ = [
    'CommandResult',
    'run_command',
    'PackageManager',
    'BuildTool',
]
