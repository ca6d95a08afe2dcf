import logging
import os
import sys
from typing import Dict, Optional, TextIO

import colorlog

from .. import constants

PACKAGE_PREFIX = "depcache."


class StepNameFilter(logging.Filter):
    """Adds ``record.step``: the logger name with the package prefix dropped."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        record.step = name[len(PACKAGE_PREFIX):] if name.startswith(PACKAGE_PREFIX) else name
        return True


def setup_logger(debug: bool = False, module_levels: Optional[Dict[str, str]] = None, log_file: Optional[str] = None):
    """
    Configure the root logger for a build.

    Console output goes to stderr so that ``depcache scan`` can print paths on
    stdout. Colors are used on a terminal unless ``NO_COLOR`` is set. Calling
    this again only re-applies the per-module levels.

    Args:
        debug: Log at DEBUG instead of INFO
        module_levels: Logger name or alias -> level name
        log_file: Also write a timestamped log to this file
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    if not root.handlers:
        root.addHandler(_console_handler(sys.stderr))
        if log_file:
            _add_file_handler(root, log_file)

    apply_module_levels(module_levels)


def _console_handler(stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.addFilter(StepNameFilter())
    if stream.isatty() and not os.environ.get("NO_COLOR"):
        handler.setFormatter(colorlog.ColoredFormatter(
            constants.COLOR_LOG_FORMAT,
            log_colors=constants.LOG_COLORS,
            reset=True,
        ))
    else:
        handler.setFormatter(logging.Formatter(constants.CONSOLE_LOG_FORMAT))
    return handler


def _add_file_handler(root: logging.Logger, log_file: str):
    try:
        handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    except OSError as e:
        root.error(f"Cannot write log file '{log_file}': {e}")
        return
    handler.setFormatter(logging.Formatter(constants.FILE_LOG_FORMAT, datefmt=constants.FILE_LOG_DATEFMT))
    root.addHandler(handler)
    root.info(f"Logging to file: {log_file}")


def parse_module_levels(spec: Optional[str]) -> Optional[Dict[str, str]]:
    """Parse 'name=LEVEL,name=LEVEL'; pairs without '=' are skipped."""
    pairs = [item.split('=', 1) for item in (spec or '').split(',') if '=' in item]
    levels = {name.strip(): level.strip().upper() for name, level in pairs if name.strip()}
    return levels or None


def apply_module_levels(module_levels: Optional[Dict[str, str]] = None):
    """
    Set per-module levels, e.g. ``{"scan": "DEBUG", "engine.sync": "WARNING"}``.
    Without an explicit mapping, ``DEPCACHE_LOG_LEVELS`` is read instead.
    Unknown level names are ignored.
    """
    if module_levels is None:
        module_levels = parse_module_levels(os.environ.get(constants.LOG_LEVELS_ENV))
    for name, level_name in (module_levels or {}).items():
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            logging.getLogger(__name__).debug(f"Ignoring unknown log level '{level_name}' for '{name}'")
            continue
        logging.getLogger(resolve_logger_name(name)).setLevel(level)


def resolve_logger_name(name: str) -> str:
    """
    Map a short name onto a depcache logger: aliases from ``LOG_ALIAS_MAP``,
    ``engine.*`` for a whole subpackage, and bare subpackage names such as
    ``engine.sync``. Anything else is taken as a foreign logger name.
    """
    alias = constants.LOG_ALIAS_MAP.get(name)
    if alias:
        return alias
    name = name.removesuffix('.*')
    if name.split('.', 1)[0] in constants.KNOWN_TOP_MODULES:
        return PACKAGE_PREFIX + name
    return name
