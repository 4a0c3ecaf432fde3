"""
Configuration management for sqlsend.

Loads configuration from multiple sources in order of priority:
1. Environment variables (SQLSEND_*)
2. User config (~/.config/sqlsend/config.toml)
3. System config (/etc/sqlsend/config.toml)
4. Default config (bundled with package)
"""

import os
import sys
from pathlib import Path
from typing import Any, Literal, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError

UnitName = Literal["statement", "paragraph", "line", "region", "buffer"]


class RouterConfig(BaseModel):
    """Session routing configuration."""
    persist_implicit: bool = Field(
        default=False,
        description="Bind a surface to the session picked by the recency heuristic"
    )
    default_unit: UnitName = Field(default="statement", description="Unit sent when none is given")


class UIConfig(BaseModel):
    """UI configuration."""
    use_colors: bool = Field(default=True, description="Use colors in output")
    echo_sql: bool = Field(default=True, description="Show the SQL being sent")
    show_technical_details: bool = Field(default=False, description="Show technical details")
    max_rows: int = Field(default=50, ge=1, description="Rows shown per result")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    enabled: bool = Field(default=False, description="Write a log file")
    path: str = Field(default="~/.config/sqlsend/sqlsend.log", description="Log file path")
    level: str = Field(default="info", description="Log level")


class HistoryConfig(BaseModel):
    """Dispatch history configuration."""
    max_entries: int = Field(default=200, ge=1, description="Sends kept in memory")


class SQLSendConfig(BaseModel):
    """Main sqlsend configuration."""
    router: RouterConfig = Field(default_factory=RouterConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)


def get_config_paths() -> list[Path]:
    """Config files, highest priority first."""
    paths = []

    # User config (highest priority)
    paths.append(Path.home() / ".config" / "sqlsend" / "config.toml")

    # System config
    paths.append(Path("/etc/sqlsend/config.toml"))

    # Default config (bundled inside package)
    paths.append(Path(__file__).parent / "data" / "default.toml")

    return paths


def load_toml_config(path: Path) -> dict[str, Any]:
    """Parse one TOML file; a missing file is an empty config."""
    if path.exists():
        try:
            with open(path, "rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(
                f"Invalid TOML in {path}: {e}",
                suggested_action=f"Fix or remove {path}."
            ) from e
    return {}


def merge_configs(base: dict, override: dict) -> dict:
    """Merge override into base, recursing into tables."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_env_overrides() -> dict[str, Any]:
    """SQLSEND_* variables as a config fragment."""
    overrides: dict[str, Any] = {}

    persist = os.environ.get("SQLSEND_PERSIST_IMPLICIT")
    if persist:
        overrides.setdefault("router", {})["persist_implicit"] = _env_flag(persist)

    level = os.environ.get("SQLSEND_LOG_LEVEL")
    if level:
        overrides.setdefault("logging", {})["level"] = level.lower()

    # Debug mode
    if os.environ.get("SQLSEND_DEBUG"):
        overrides.setdefault("ui", {})["show_technical_details"] = True
        overrides.setdefault("logging", {})["level"] = "debug"

    return overrides


def load_config(extra_path: Optional[Path] = None) -> SQLSendConfig:
    """Load configuration from all sources.

    Args:
        extra_path: Config file given on the command line, above user config
    """
    config_data: dict[str, Any] = {}

    paths = get_config_paths()
    if extra_path is not None:
        paths.insert(0, Path(extra_path).expanduser())

    # Bundled defaults first, so later files win
    for path in reversed(paths):
        config_data = merge_configs(config_data, load_toml_config(path))

    # Environment beats every file
    config_data = merge_configs(config_data, load_env_overrides())

    try:
        return SQLSendConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


# Loaded lazily by get_config
_config: Optional[SQLSendConfig] = None


def get_config() -> SQLSendConfig:
    """Process-wide config, loaded on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: SQLSendConfig) -> None:
    """Replace the global configuration, e.g. after loading --config."""
    global _config
    _config = config


def reset_config() -> None:
    """Forget the process-wide config so the next get_config reloads it."""
    global _config
    _config = None
