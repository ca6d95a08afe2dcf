"""
depcache Rules Module

- is_exact_version: Whether a range string names a single release
- RangeRule: npm range pinning classification
- PinningAdvisor: Advisories for loosely pinned manifest entries

Usage:
    from depcache.rules import RangeRule, PinningAdvisor
"""

from .version import is_exact_version
from .range import RangeRule, Pinning
from .advisor import PinningAdvisor

__all__ = [
    'is_exact_version',
    'RangeRule',
    'Pinning',
    'PinningAdvisor',
]
