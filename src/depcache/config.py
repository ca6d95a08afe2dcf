import os
import yaml
import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Any, List, Mapping, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator, ConfigDict

from . import constants
from .constants import CacheMode
from .io import FileSystem, create_fs
from .exceptions import (
    ConfigParsingError,
    ConfigFileMissingError,
    ConfigValidationError,
)


logger = logging.getLogger(__name__)


class BuildToolModel(BaseModel):
    """
        Class Config-Validation Model describe `build_tool`
    """
    name: str = constants.BUILD_TOOL
    markers: List[str] = Field(default_factory=lambda: list(constants.BUILD_TOOL_MARKERS))
    args: List[str] = Field(default_factory=lambda: list(constants.BUILD_TOOL_ARGS))
    enabled: bool = True
    model_config = ConfigDict(extra="forbid")


class ProjectModel(BaseModel):
    """
        Class Config-Validation Model describe top-level of `depcache.yml`
    """
    dependency_dir: str = constants.DEPENDENCY_DIR_NAME
    manifest: str = constants.MANIFEST_FILENAME
    exclude: List[str] = Field(default_factory=lambda: list(constants.VENDOR_RUNTIME_PATHS))
    package_manager: str = constants.PACKAGE_MANAGER
    install_flags: List[str] = Field(default_factory=lambda: list(constants.INSTALL_FLAGS))
    build_tool: BuildToolModel = Field(default_factory=BuildToolModel)
    aux_caches: Dict[str, str] = Field(default_factory=lambda: dict(constants.AUX_CACHES))
    model_config = ConfigDict(extra="forbid")

    @field_validator('dependency_dir', 'manifest')
    @classmethod
    def check_plain_name(cls, value: str) -> str:
        """Directory and manifest conventions are names, not paths"""
        if not value or '/' in value or '\\' in value or value in ('.', '..'):
            raise ValueError(f"must be a plain file name, got '{value}'")
        return value

    @field_validator('exclude')
    @classmethod
    def check_relative_paths(cls, value: List[str]) -> List[str]:
        """Excluded subtrees are relative to the build root and stay inside it"""
        for path in value:
            parts = PurePosixPath(path).parts
            if PurePosixPath(path).is_absolute() or '..' in parts:
                raise ValueError(f"exclude path '{path}' must be relative to the build directory")
        return value

    @field_validator('aux_caches')
    @classmethod
    def check_aux_names(cls, value: Dict[str, str]) -> Dict[str, str]:
        for name in value:
            if '/' in name or name in ('', '.', '..'):
                raise ValueError(f"auxiliary cache name '{name}' must be a plain name")
        return value


def resolve_mode(override: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> CacheMode:
    """
    Pick link or copy mode: an explicit override wins, then DEPCACHE_MODE,
    then the legacy DEPCACHE_LINK=true toggle, then the default.
    """
    environ = os.environ if environ is None else environ
    raw = override or environ.get(constants.MODE_ENV)
    if raw:
        try:
            return CacheMode(raw.strip().lower())
        except ValueError:
            allowed = ", ".join(m.value for m in CacheMode)
            raise ConfigValidationError(f"Invalid cache mode '{raw}', must be one of: {allowed}")
    if environ.get(constants.LEGACY_LINK_ENV, "").strip().lower() in ("1", "true", "yes"):
        return CacheMode.LINK
    return constants.DEFAULT_MODE


class Config:
    """
    Run configuration: the positional directories, the mode read once at
    start, and the optional `depcache.yml` project file validated with Pydantic.
    """
    def __init__(
        self,
        build_dir: str,
        cache_dir: str,
        env_file: Optional[str] = None,
        fs: Optional[FileSystem] = None,
        mode: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.fs = fs or create_fs()
        self.build_dir = Path(build_dir).absolute()
        self.cache_dir = Path(cache_dir).absolute()
        self.env_file = Path(env_file).absolute() if env_file else None
        self._environ = os.environ if environ is None else environ

        if not self.fs.is_dir(self.build_dir):
            raise ConfigFileMissingError(f"Build directory not found at: {self.build_dir}")

        self.mode = resolve_mode(mode, self._environ)
        logger.info(f"Cache mode: {self.mode.value}")

        raw_data = self._load_raw_config()
        try:
            self.model = ProjectModel.model_validate(raw_data)
            logger.debug(f"Project configuration validated: \n{self.model.model_dump_json(indent=2)}")
        except ValidationError as e:
            raise ConfigValidationError(f"Configuration validation failed:\n{e}")

    @property
    def project_file(self) -> Path:
        return self.build_dir / constants.PROJECT_CONFIG_FILENAME

    def _load_raw_config(self) -> Dict[str, Any]:
        if not self.fs.is_file(self.project_file):
            logger.debug(f"No '{constants.PROJECT_CONFIG_FILENAME}' in build directory, using defaults")
            return {}
        logger.info(f"Loading project configuration from '{self.project_file}'...")
        try:
            config_data = yaml.safe_load(self.fs.read_text(self.project_file))
        except yaml.YAMLError as e:
            raise ConfigParsingError(f"Error parsing YAML file: {e}")
        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigParsingError("Configuration file must be a YAML document containing a dictionary.")
        return config_data

    @property
    def dependency_dir(self) -> str:
        return self.model.dependency_dir

    @property
    def manifest(self) -> str:
        return self.model.manifest

    @property
    def exclude(self) -> List[str]:
        return list(self.model.exclude)

    @property
    def package_manager(self) -> str:
        return self.model.package_manager

    @property
    def install_flags(self) -> List[str]:
        return list(self.model.install_flags)

    @property
    def build_tool(self) -> BuildToolModel:
        return self.model.build_tool

    def aux_cache_paths(self, home: Optional[Path] = None) -> Dict[str, Path]:
        """Auxiliary cache sources; relative locations are resolved against $HOME."""
        if home is None:
            home = Path(self._environ.get("HOME") or Path.home())
        return {
            name: (Path(location) if Path(location).is_absolute() else Path(home) / location)
            for name, location in self.model.aux_caches.items()
        }
