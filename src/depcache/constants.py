from enum import Enum

# --- Log and Debug ---
# Short aliases for module names to keep CLI/env concise
LOG_ALIAS_MAP = {
    "scan": "depcache.scanner",
    "scn": "depcache.scanner",
    "store": "depcache.cache.store",
    "cache": "depcache.cache",
    "cc": "depcache.cache",
    "restore": "depcache.engine.restore",
    "rst": "depcache.engine.restore",
    "rebuild": "depcache.engine.rebuild",
    "install": "depcache.engine.install",
    "ins": "depcache.engine.install",
    "sync": "depcache.engine.sync",
    "pm": "depcache.tools.package_manager",
    "npm": "depcache.tools.package_manager",
    "tool": "depcache.tools.build_tool",
    "io": "depcache.io",
    "fs": "depcache.io.fs",
    "conf": "depcache.config",
    "env": "depcache.env",
    "pipe": "depcache.pipeline",
    "rules": "depcache.rules",
}

# Top-level modules within depcache for auto-prefixing
KNOWN_TOP_MODULES = {
    "scanner",
    "cache",
    "engine",
    "tools",
    "io",
    "rules",
    "datacls",
    "utils",
    "exceptions",
    "config",
    "env",
    "pipeline",
}

LOG_LEVELS_ENV = "DEPCACHE_LOG_LEVELS"

# Console lines name the build step (logger name without the package prefix)
CONSOLE_LOG_FORMAT = "[%(levelname).4s] %(step)s: %(message)s"
COLOR_LOG_FORMAT = "%(log_color)s[%(levelname).4s]%(reset)s %(cyan)s%(step)s%(reset)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s [%(levelname).4s] %(name)s: %(message)s"
FILE_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


# --- Mode ---
class CacheMode(str, Enum):
    """Strategy for moving dependency directories between cache and build tree."""

    LINK = "link"
    COPY = "copy"


MODE_ENV = "DEPCACHE_MODE"
LEGACY_LINK_ENV = "DEPCACHE_LINK"
DEFAULT_MODE = CacheMode.COPY


# --- Filenames and Paths ---
PROJECT_CONFIG_FILENAME = "depcache.yml"
DEPENDENCY_DIR_NAME = "node_modules"
MANIFEST_FILENAME = "package.json"
# vendored runtime lives here and is never scanned
VENDOR_RUNTIME_PATHS = [".heroku/node"]
AUX_CACHE_SUBDIR = ".aux"
TEMP_DIR_PREFIX = "depcache-"


# --- Collaborators ---
PACKAGE_MANAGER = "npm"
INSTALL_FLAGS = ["--production", "--unsafe-perm"]
BUILD_TOOL = "gulp"
BUILD_TOOL_MARKERS = ["gulpfile.js", "gulpfile.babel.js"]
BUILD_TOOL_ARGS = ["build"]
OUTPUT_INDENT = " " * 7

# Well-known auxiliary cache locations, relative to $HOME
AUX_CACHES = {
    "npm": ".npm",
    "build-tool": f".cache/{BUILD_TOOL}",
}


# --- Environment import ---
# Never imported from the env-file into the install environment
ENV_DENYLIST = frozenset({
    "PATH",
    "GIT_DIR",
    "CPATH",
    "CPPATH",
    "LD_PRELOAD",
    "LIBRARY_PATH",
    "LD_LIBRARY_PATH",
    "PYTHONHOME",
    "JAVA_OPTS",
    "JAVA_TOOL_OPTIONS",
})


# --- Version pinning ---
LOOSE_RANGES = {"", "*", "x", "X", "latest", "next"}
