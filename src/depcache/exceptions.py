class DepCacheError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Fatal errors: abort the build and propagate an exit code ---
class FatalError(DepCacheError):
    """Base class for errors that abort the whole build."""

    exit_code = 1

    def __init__(self, message: str = "", exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


# --- 2. Errors related to loading and parsing configuration ---
class ConfigurationError(FatalError):
    """Base class for errors encountered while finding, reading, or parsing config files."""

    pass


class ConfigFileMissingError(ConfigurationError):
    """Raised when a required configuration file cannot be found."""

    pass


class ConfigParsingError(ConfigurationError):
    """Raised when a YAML configuration file is syntactically incorrect."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when the configuration fails structural validation (e.g., Pydantic)."""

    pass


# --- 3. Errors raised by the external collaborators ---
class CollaboratorMissingError(FatalError):
    """Raised when a required executable (package manager, build tool) is not installed."""

    exit_code = 127


class InstallError(FatalError):
    """Raised when the package manager's install step exits non-zero."""

    pass


class RebuildError(FatalError):
    """Raised when rebuilding native extensions of a committed dependency directory fails."""

    pass


class BuildStepError(FatalError):
    """Raised when the secondary build tool exits non-zero."""

    pass


class RestoreError(FatalError):
    """Raised when a cached dependency directory cannot be placed into the build tree."""

    pass


# --- 4. Errors related to IO operations ---
class DepCacheIOError(FatalError):
    """Base class for IO-related errors."""

    pass


class DepCachePathExistsError(DepCacheIOError):
    """Raised when a file or directory already exists."""

    pass


class DepCachePathNotFoundError(DepCacheIOError):
    """Raised when a file or directory is not found."""

    pass


class DepCacheNotAFileError(DepCacheIOError):
    """Raised when a file is expected, but a directory is found."""

    pass


class DepCacheNotADirectoryError(DepCacheIOError):
    """Raised when a directory is expected, but a file is found."""

    pass


# --- 5. Recoverable errors: reported, the build continues ---
class RecoverableError(DepCacheError):
    """Base class for per-directory failures that must not stop the build."""

    pass


class PruneError(RecoverableError):
    """Raised when pruning a restored dependency directory fails."""

    pass


class SyncError(RecoverableError):
    """Raised when mirroring one directory back into the cache fails."""

    pass
