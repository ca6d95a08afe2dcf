from typing import Iterable, List

from .. import constants


def indent_lines(text: str, indent: str = constants.OUTPUT_INDENT) -> List[str]:
    """
    Split captured subprocess output into lines prefixed with ``indent``.
    Blank lines are kept so the log mirrors the tool's own layout.
    """
    return [f"{indent}{line}" if line else indent.rstrip() for line in _lines(text)]


def _lines(text: str) -> Iterable[str]:
    if not text:
        return []
    return text.rstrip("\n").splitlines()
