import logging
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict

from ..constants import CacheMode

logger = logging.getLogger(__name__)


class RecoverableWarning(BaseModel):
    """A per-directory failure that was reported while the build continued."""
    step: str
    path: Optional[str] = None
    message: str


class PolicyAdvisory(BaseModel):
    """Informational finding about the project, never affects control flow."""
    subject: str
    message: str


class SyncOutcome(BaseModel):
    """What sync-back did with one directory."""
    path: str
    action: Literal["skipped", "mirrored", "failed"]
    writes: int = 0


class BuildReport(BaseModel):
    """
        Class describe the result of one build invocation
    """
    mode: CacheMode
    build_dir: str
    cache_dir: str
    rebuilt: List[str] = Field(default_factory=list)
    restored: List[str] = Field(default_factory=list)
    pruned: List[str] = Field(default_factory=list)
    installed: bool = False
    build_tool_ran: bool = False
    synced: List[SyncOutcome] = Field(default_factory=list)
    warnings: List[RecoverableWarning] = Field(default_factory=list)
    advisories: List[PolicyAdvisory] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    model_config = ConfigDict(use_enum_values=True)

    def warn(self, step: str, message: str, path: Optional[str] = None) -> RecoverableWarning:
        warning = RecoverableWarning(step=step, path=path, message=message)
        self.warnings.append(warning)
        logger.warning(f"[{step}] {path + ': ' if path else ''}{message}")
        return warning

    def advise(self, subject: str, message: str) -> PolicyAdvisory:
        advisory = PolicyAdvisory(subject=subject, message=message)
        self.advisories.append(advisory)
        logger.info(f"Advisory for '{subject}': {message}")
        return advisory

    def finish(self):
        self.finished_at = datetime.now()
