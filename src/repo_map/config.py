"""Configuration management using Pydantic."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".repo-map.yaml")


class ScanConfig(BaseModel):
    """Batch scanning limits."""
    batch_size: int = 100
    batch_timeout: float = 300.0  # seconds, multi-file invocations
    single_file_timeout: float = 30.0
    hash_workers: int = 8
    extension_sample_limit: int = 500
    strict_walk: bool = False  # report unreadable directories as walk errors

    @field_validator('batch_size', 'hash_workers')
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1, got {v}")
        return v

    @field_validator('batch_timeout', 'single_file_timeout')
    @classmethod
    def validate_timeout(cls, v: float, info) -> float:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0, got {v}")
        return v


class CacheConfig(BaseModel):
    """Location of the on-disk index inside the repository."""
    state_dir: str = ".claude"
    filename: str = "repo-map.json"
    stale_marker: str = "repo-map.stale"


class RepoMapConfig(BaseSettings):
    """Main repo-map configuration."""
    tool_command: Optional[str] = None  # explicit ast-grep binary; PATH lookup otherwise
    languages: List[str] = Field(default_factory=list)  # empty means auto-detect
    exclude_dirs: List[str] = Field(default_factory=list)
    respect_ignore_file: bool = True

    scan: ScanConfig = Field(default_factory=ScanConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = SettingsConfigDict(
        env_prefix="REPO_MAP_",
        env_nested_delimiter="__",
        extra="ignore",
    )


# Module-level mtime-based config cache: path -> (parsed_config, file_mtime)
_config_cache: Dict[str, tuple] = {}


def _get_cached_or_load(resolved_path: Path, loader):
    """Return cached config if file mtime unchanged, else reload."""
    key = str(resolved_path)
    try:
        current_mtime = resolved_path.stat().st_mtime
    except FileNotFoundError:
        _config_cache.pop(key, None)
        return None

    cached = _config_cache.get(key)
    if cached is not None:
        cached_result, cached_mtime = cached
        if cached_mtime == current_mtime:
            return cached_result

    result = loader(resolved_path)
    _config_cache[key] = (result, current_mtime)
    return result


def _load_config_from_file(config_path: Path) -> RepoMapConfig:
    """Internal loader (no caching)."""
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping, got {type(data).__name__}")

    data = _expand_env_vars(data)
    return RepoMapConfig(**data)


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> RepoMapConfig:
    """Load repo-map configuration from a YAML file.

    Uses mtime-based caching: returns the cached config if the file has not changed.
    A missing file yields the defaults (plus any REPO_MAP_* environment values).
    """
    if not config_path.exists():
        logger.debug(f"Config file not found: {config_path}. Using default configuration.")
        return RepoMapConfig()

    result = _get_cached_or_load(config_path.resolve(), _load_config_from_file)
    return result if result is not None else RepoMapConfig()


def clear_config_cache() -> None:
    """Clear the module-level config cache. Useful for tests."""
    _config_cache.clear()


def _expand_env_vars(data: Any, _path: str = "") -> Any:
    """Recursively expand ``${VAR}`` string values from the environment.

    Args:
        data: Config data to process
        _path: Internal tracking for error messages (e.g., "scan.batch_size")
    """
    if isinstance(data, dict):
        return {k: _expand_env_vars(v, f"{_path}.{k}" if _path else k) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item, f"{_path}[{i}]") for i, item in enumerate(data)]
    elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
        env_var = data[2:-1]
        value = os.environ.get(env_var)
        if value is None:
            logger.warning(
                f"Environment variable '{env_var}' not set (referenced at config path: {_path or 'root'}). "
                f"The literal string '{data}' will be used."
            )
            return data
        return value
    return data
