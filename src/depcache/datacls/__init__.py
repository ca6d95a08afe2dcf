"""
depcache Data Classes Module

- BuildReport: Outcome of one build, serializable to JSON
- RecoverableWarning: Per-directory failure that did not stop the build
- PolicyAdvisory: Informational project finding
- SyncOutcome: Sync-back result for one directory
"""

from .report import BuildReport, RecoverableWarning, PolicyAdvisory, SyncOutcome

__all__ = [
    'BuildReport',
    'RecoverableWarning',
    'PolicyAdvisory',
    'SyncOutcome',
]
