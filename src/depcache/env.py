import logging
import os
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from dotenv import dotenv_values

from . import constants

logger = logging.getLogger(__name__)


class ScopedEnvironment:
    """
    Environment for a single subprocess call.

    Holds a private copy of the parent environment with the imported
    variables laid over it. Nothing here touches ``os.environ``; callers hand
    ``env`` to the one subprocess that needs it, so the imported values are
    gone as soon as that call returns.
    """

    def __init__(self, imported: Optional[Mapping[str, str]] = None, base: Optional[Mapping[str, str]] = None):
        self.imported: Dict[str, str] = dict(imported or {})
        self._base: Dict[str, str] = dict(os.environ if base is None else base)

    @classmethod
    def from_env_file(
        cls,
        path: Optional[Path],
        denylist: Iterable[str] = constants.ENV_DENYLIST,
        base: Optional[Mapping[str, str]] = None,
    ) -> "ScopedEnvironment":
        """
        Load ``KEY=VALUE`` pairs from ``path``, dropping denylisted names.
        A missing file imports nothing.
        """
        blocked: FrozenSet[str] = frozenset(denylist)
        imported: Dict[str, str] = {}
        if path is None or not Path(path).is_file():
            logger.debug(f"No env-file at '{path}', importing nothing")
            return cls(imported, base)

        for key, value in dotenv_values(path).items():
            if value is None:
                continue
            if key in blocked:
                logger.debug(f"Not importing denylisted variable '{key}'")
                continue
            imported[key] = value
        logger.info(f"Imported {len(imported)} variables from '{path}' for install")
        return cls(imported, base)

    def with_overrides(self, **overrides: str) -> "ScopedEnvironment":
        """Return a new scope with ``overrides`` laid over the imported values."""
        merged = dict(self.imported)
        merged.update(overrides)
        return ScopedEnvironment(merged, self._base)

    @property
    def env(self) -> Dict[str, str]:
        merged = dict(self._base)
        merged.update(self.imported)
        return merged

    def __contains__(self, key: str) -> bool:
        return key in self.imported or key in self._base

    def __repr__(self):
        return f"ScopedEnvironment(imported={sorted(self.imported)})"
