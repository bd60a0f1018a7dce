"""
Configuration management for atask.

Provides a hierarchical configuration system with sensible defaults.
Supports both global (~/.config/atask/config.toml) and local (atask.toml)
configurations.
"""
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict, fields

from atask.constants import DEFAULT_SORT, SORT_KEYS
from atask.query.evaluator import DEFAULT_SOON_HORIZON, EvalConfig


def user_config_path() -> Path:
    """Location of the per-user config file."""
    return Path.home() / ".config" / "atask" / "config.toml"


ENV_PREFIX = "ATASK_"


@dataclass
class AtaskConfig:
    """
    atask configuration with sensible defaults.

    Configuration hierarchy (highest to lowest priority):
    1. Command-line arguments
    2. Environment variables (ATASK_*)
    3. Explicit config file (--config)
    4. Local config file (./atask.toml, ./.ataskrc or ./.atask/config.toml)
    5. User config file (~/.config/atask/config.toml)
    6. System defaults
    """

    # Where task and project files live
    notes_directory: str = field(default="~/notes")

    # Query evaluation
    soon_horizon: int = field(default=DEFAULT_SOON_HORIZON)  # Days counted as "due soon"
    filter_workers: int = field(default=1)  # Threads used to evaluate queries

    # Display settings
    default_sort: str = field(default=DEFAULT_SORT)
    output_format: str = field(default="table")  # table, json, plain
    color_output: bool = field(default=True)

    # Advanced
    log_level: str = field(default="WARNING")

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "AtaskConfig":
        """
        Load configuration from files and environment.

        Args:
            config_file: Specific config file to load (applied after the
                user and local files)

        Returns:
            Merged configuration object
        """
        config = cls()

        user_path = user_config_path()
        if user_path.exists():
            config._merge(cls._load_toml(user_path))

        local_paths = [
            Path.cwd() / "atask.toml",
            Path.cwd() / ".ataskrc",
            Path.cwd() / ".atask" / "config.toml",
        ]

        for path in local_paths:
            if path.exists():
                config._merge(cls._load_toml(path))
                break

        if config_file and config_file.exists():
            config._merge(cls._load_toml(config_file))

        config._apply_env_vars()
        config._expand_paths()
        config.validate()

        return config

    @staticmethod
    def _load_toml(path: Path) -> Dict[str, Any]:
        """Load TOML configuration file."""
        with open(path, "rb") as f:
            return tomli.load(f)

    def _merge(self, data: Dict[str, Any]):
        """Merge configuration data into this instance; unknown keys are ignored."""
        for key, value in data.items():
            if key in self.keys():
                setattr(self, key, value)

    def _apply_env_vars(self):
        """Apply environment variables with ATASK_ prefix."""
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                config_key = key[len(ENV_PREFIX):].lower()
                if config_key in self.keys():
                    self.set_value(config_key, value)

    def _expand_paths(self):
        """Expand ~ and environment variables in paths."""
        self.notes_directory = os.path.expanduser(os.path.expandvars(self.notes_directory))

    def set_value(self, key: str, value: str):
        """
        Set a key from its string form, converting to the field's type.

        Raises:
            KeyError: For an unknown key
            ValueError: If the value cannot be converted
        """
        if key not in self.keys():
            raise KeyError(f"Unknown config key: {key}")
        current_value = getattr(self, key)
        if isinstance(current_value, bool):
            setattr(self, key, value.lower() in ("true", "1", "yes"))
        elif isinstance(current_value, int):
            setattr(self, key, int(value))
        else:
            setattr(self, key, value)

    @classmethod
    def keys(cls):
        """Names of all configuration keys."""
        return [f.name for f in fields(cls)]

    def validate(self):
        """
        Check values that would otherwise fail later.

        Raises:
            ValueError: On a negative horizon, bad worker count or sort key
        """
        if self.soon_horizon < 0:
            raise ValueError(f"soon_horizon must be non-negative, got {self.soon_horizon}")
        if self.filter_workers < 1:
            raise ValueError(f"filter_workers must be at least 1, got {self.filter_workers}")
        if self.default_sort not in SORT_KEYS:
            raise ValueError(
                f"default_sort must be one of {', '.join(SORT_KEYS)}, got {self.default_sort!r}"
            )

    def save(self, path: Optional[Path] = None):
        """
        Save current configuration to TOML file.

        Args:
            path: Path to save to (defaults to user config)
        """
        if path is None:
            path = user_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "wb") as f:
            tomli_w.dump(asdict(self), f)

    def get_notes_path(self) -> Path:
        """Get the resolved notes directory."""
        path = Path(self.notes_directory)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path

    def eval_config(self) -> EvalConfig:
        """Settings handed to the query evaluator."""
        return EvalConfig(soon_horizon=self.soon_horizon)


# Global configuration instance
_config: Optional[AtaskConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> AtaskConfig:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload configuration from files
        config_file: Specific config file to load

    Returns:
        Global configuration instance
    """
    global _config
    if _config is None or reload:
        _config = AtaskConfig.load(config_file)
    return _config


def init_config(notes_directory: Optional[str] = None,
                config_file: Optional[Path] = None, **kwargs) -> AtaskConfig:
    """
    Initialize configuration with command-line overrides.

    Args:
        notes_directory: Notes directory override
        config_file: Config file to load before applying overrides
        **kwargs: Other configuration overrides

    Returns:
        Configured instance
    """
    config = get_config(reload=config_file is not None, config_file=config_file)

    if notes_directory:
        config.notes_directory = os.path.expanduser(notes_directory)

    for key, value in kwargs.items():
        if hasattr(config, key) and value is not None:
            setattr(config, key, value)

    config.validate()
    return config
