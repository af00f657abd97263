# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/config/manager.py

from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from linkview.data.filters import ItemFilter
from linkview.data.models import LinkType, SyncMode, coerce_mode
from linkview.system.exceptions import ConfigError, LinkViewError


# ---- Constants ----

USER_CFG: Final = "linkview.yml"
VIEW_CFG: Final = ".linkview.yml"

DEFAULT_SYNC_INTERVAL: Final = 180  # seconds

_LEGACY_KEYS: Final[dict[str, str]] = {
    "targetPath": "target",
    "libraryPath": "library",
    "dirLinkType": "link_type",
    "linkType": "link_type",
}

_LEGACY_MODES: Final[dict[str, str]] = {"entry-dir": SyncMode.ENTRY_DIRECTORY.value}
_LEGACY_LINK_TYPES: Final[dict[str, str]] = {"dir": LinkType.SYMBOLIC_DIRECTORY_LINK.value}


def _default_state_dir() -> Path:
    return Path.home() / ".config" / "linkview" / "state"


def _get_user_config_search_paths() -> tuple[Path, ...]:
    """Get config file search paths (ordered by priority: lowest to highest).

    Evaluated at call time so tests can override the environment.
    """
    return (
        Path("/etc/linkview") / USER_CFG,  # System defaults
        Path.home() / ".config" / "linkview" / USER_CFG,  # User config
        Path(os.getenv("XDG_CONFIG_HOME", "")) / "linkview" / USER_CFG,  # XDG override
        Path(os.getenv("LINKVIEW_CONFIG_HOME", "")) / USER_CFG,  # Explicit override (highest priority)
    )


def _load_merged_config_data(candidates: tuple[Path, ...]) -> dict:
    """Load and merge config data from candidate paths; later files win."""
    merged_data = {}
    found_configs = []

    for candidate in candidates:
        # unset env vars collapse to a bare relative filename
        if candidate == Path(USER_CFG) or candidate == Path("linkview") / USER_CFG:
            continue
        if not candidate.exists():
            continue
        try:
            with candidate.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            merged_data.update(data)
            found_configs.append(str(candidate))
            logger.debug(f"Loaded config from {candidate}")
        except Exception as e:
            logger.warning(f"Failed to load config from {candidate}: {e}")

    if found_configs:
        logger.debug(f"Merged config from: {', '.join(found_configs)}")
    else:
        logger.debug(f"No {USER_CFG} found, using defaults")
    return merged_data


# ---- Legacy Config Migration ----

def migrate_legacy_view_data(data: dict) -> tuple[dict, bool]:
    """Migrate camelCase plugin-style settings to the current view format.

    Handles:
    - targetPath/libraryPath/dirLinkType keys -> target/library/link_type
    - syncInterval in milliseconds -> sync_interval in seconds
    - mode 'entry-dir' -> 'entry-directory', link type 'dir' -> 'symbolic-directory-link'

    Returns:
        Tuple of (migrated_config_dict, was_migrated_flag)
    """
    if not isinstance(data, dict):
        return data, False

    migrated = data.copy()
    was_migrated = False

    for old_key, new_key in _LEGACY_KEYS.items():
        if old_key in migrated:
            value = migrated.pop(old_key)
            migrated.setdefault(new_key, value)
            was_migrated = True

    if "syncInterval" in migrated:
        interval_ms = migrated.pop("syncInterval")
        if "sync_interval" not in migrated and isinstance(interval_ms, (int, float)):
            migrated["sync_interval"] = max(1, int(interval_ms) // 1000)
        was_migrated = True

    if migrated.get("mode") in _LEGACY_MODES:
        migrated["mode"] = _LEGACY_MODES[migrated["mode"]]
        was_migrated = True

    if migrated.get("link_type") in _LEGACY_LINK_TYPES:
        migrated["link_type"] = _LEGACY_LINK_TYPES[migrated["link_type"]]
        was_migrated = True

    return migrated, was_migrated


# ---- View Config ----

class ViewConfig(BaseModel):
    """One filtered view of a library, materialized in a target directory."""
    name: str = "default"
    library: Path
    target: Path
    mode: SyncMode = SyncMode.ENTRY_FILE
    link_type: LinkType = LinkType.JUNCTION
    active: bool = False
    sync_interval: int = Field(default=DEFAULT_SYNC_INTERVAL, ge=1, description="Seconds between scheduled runs")
    filter: ItemFilter = Field(default_factory=ItemFilter)

    migrated: bool = Field(default=False, description="True if config was migrated from legacy format")

    @field_validator("library", "target", mode="before")
    @classmethod
    def expand_user(cls, value):
        if isinstance(value, (str, Path)):
            return Path(value).expanduser()
        return value

    @field_validator("mode", mode="before")
    @classmethod
    def recognize_mode(cls, value):
        return coerce_mode(value)

    @classmethod
    def load(cls, config_path: Path) -> "ViewConfig":
        """Load a view config from file with auto-migration from legacy format."""
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} does not contain a mapping")

        migrated_data, was_migrated = migrate_legacy_view_data(data)
        try:
            config = cls.model_validate(migrated_data)
        except LinkViewError:
            raise
        except Exception as e:
            raise ConfigError(str(e)) from e

        # relative paths are relative to the config file, not the cwd
        base_dir = config_path.absolute().parent
        if not config.library.is_absolute():
            config.library = Path(os.path.normpath(base_dir / config.library))
        if not config.target.is_absolute():
            config.target = Path(os.path.normpath(base_dir / config.target))

        if was_migrated:
            logger.info(f"Migrated legacy settings in {config_path}")
        config.migrated = was_migrated
        return config


# ---- User Config ----

class UserConfig(BaseModel):
    """Machine-wide settings shared by all views."""
    local_log: Optional[Path] = None
    state_dir: Path = Field(default_factory=_default_state_dir)

    @field_validator("local_log", "state_dir", mode="before")
    @classmethod
    def expand_user(cls, value):
        if isinstance(value, (str, Path)):
            return Path(value).expanduser()
        return value


def load_merged_user_config() -> UserConfig:
    """Load and merge user config from all locations (system defaults + user overrides)."""
    merged_data = _load_merged_config_data(_get_user_config_search_paths())
    try:
        return UserConfig.model_validate(merged_data)
    except Exception as e:
        raise ConfigError(f"Invalid user config: {e}") from e


def find_view_config_path(start: Path | None = None) -> Path:
    """Walk up from start path looking for .linkview.yml."""
    current = (start or Path.cwd()).resolve()
    for parent in [current] + list(current.parents):
        candidate = parent / VIEW_CFG
        if candidate.exists():
            return candidate

    raise FileNotFoundError(f"No {VIEW_CFG} found in this or any parent directory")


# ---- Main Config Class ----

class Config(BaseModel):
    """Combined user and view configuration."""
    user: UserConfig
    view: ViewConfig
    view_path: Path = Field(exclude=True)

    @classmethod
    def load(cls, config_path: Path | None = None, start_path: Path | None = None) -> Config:
        """Load the user config and a view config.

        Args:
            config_path: Explicit view config file; searched for when None
            start_path: Where to start searching for .linkview.yml
        """
        user_config = load_merged_user_config()
        view_path = Path(config_path) if config_path else find_view_config_path(start_path)
        if not view_path.exists():
            raise FileNotFoundError(f"View config not found: {view_path}")
        view_config = ViewConfig.load(view_path)
        return cls(user=user_config, view=view_config, view_path=view_path)


# ---- Validation Function ----

def _check_writable_dir(path: Path, label: str) -> Optional[str]:
    probe_root = path
    while not probe_root.exists() and probe_root != probe_root.parent:
        probe_root = probe_root.parent
    if not probe_root.is_dir():
        return f"{label} is not inside a directory: {path}"
    if not os.access(probe_root, os.W_OK):
        return f"{label} is not writable: {probe_root}"
    return None


def validate_config(config_path: Path | None = None) -> list[str]:
    """Return a list of validation errors. Empty list means config is valid."""
    errors = []

    try:
        cfg = Config.load(config_path)
    except FileNotFoundError as e:
        errors.append(f"Missing view config file: {e}")
        return errors
    except Exception as e:
        errors.append(f"Error loading config: {e}")
        return errors

    view = cfg.view
    if not (view.library / "images").is_dir():
        errors.append(f"Library not found or has no images/ directory: {view.library}")

    if view.target.exists() and not view.target.is_dir():
        errors.append(f"Target exists but is not a directory: {view.target}")
    else:
        problem = _check_writable_dir(view.target, "Target directory")
        if problem:
            errors.append(problem)

    try:
        if view.target.resolve().is_relative_to(view.library.resolve()):
            errors.append(f"Target directory must not be inside the library: {view.target}")
    except OSError as e:
        errors.append(f"Cannot resolve paths: {e}")

    problem = _check_writable_dir(cfg.user.state_dir, "State directory")
    if problem:
        errors.append(problem)

    if cfg.user.local_log:
        if not cfg.user.local_log.is_absolute():
            errors.append(f"local_log path must be absolute: {cfg.user.local_log}")
        else:
            problem = _check_writable_dir(cfg.user.local_log, "local_log directory")
            if problem:
                errors.append(problem)

    return errors


# done.
