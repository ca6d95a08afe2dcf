import logging
import subprocess
from pathlib import Path
from typing import List, Mapping, NamedTuple, Optional

from ..utils import indent_lines
from ..exceptions import CollaboratorMissingError

logger = logging.getLogger(__name__)


class CommandResult(NamedTuple):
    """Exit code and combined stdout/stderr of one collaborator call."""

    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def run_command(cmd: List[str], cwd: Path, env: Optional[Mapping[str, str]] = None) -> CommandResult:
    """
    Run ``cmd`` synchronously in ``cwd``, capturing stdout and stderr together.
    Every captured line is logged indented beneath the step that ran it.

    Raises:
        CollaboratorMissingError: if the executable cannot be found
    """
    logger.debug(f"Running {cmd} in '{cwd}'")
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise CollaboratorMissingError(f"Required executable '{cmd[0]}' was not found: {e}") from e

    for line in indent_lines(result.stdout):
        logger.info(line)
    logger.debug(f"{cmd[0]} exited with code {result.returncode}")
    return CommandResult(result.returncode, result.stdout or "")
