"""
depcache Utils Module

- logger: Logging setup and configuration
- typing_compat: Type compatibility utilities
- output: Indenting subprocess output for the surrounding build log

Usage:
    from depcache.utils import setup_logger, override, indent_lines
"""

from .logger import setup_logger
from .typing_compat import override
from .output import indent_lines

__all__ = [
    'setup_logger',
    'override',
    'indent_lines',
]
