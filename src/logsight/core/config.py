"""
Configuration Management for LogSight

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables
- Command line arguments

Configuration precedence (highest to lowest):
1. Command line arguments
2. Environment variables (LOGSIGHT_*)
3. Configuration file
4. Default values
"""

import json
import logging
import logging.handlers
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class ParserConfig:
    """Configuration for log parsing."""

    # Match log served by the API when no path is given explicitly
    log_path: str | None = None
    encoding: str = "utf-8"


@dataclass
class ExportConfig:
    """Configuration for data export."""

    output_path: str = "match.json"
    # None writes compact JSON, which is what the static dashboard loads
    json_indent: int | None = None
    csv_delimiter: str = ","


@dataclass
class ServerConfig:
    """Configuration for the HTTP API."""

    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class LogSightConfig:
    """Main configuration container."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    paths = []

    # Current directory
    paths.append(Path.cwd() / "logsight.yaml")
    paths.append(Path.cwd() / "logsight.toml")
    paths.append(Path.cwd() / "logsight.json")
    paths.append(Path.cwd() / ".logsight.yaml")

    # User home directory
    home = Path.home()
    paths.append(home / ".config" / "logsight" / "config.yaml")
    paths.append(home / ".config" / "logsight" / "config.toml")
    paths.append(home / ".logsight.yaml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "logsight" / "config.yaml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Load configuration from a file, detecting format from extension.

    Raises:
        ValueError: If the file does not parse to a mapping
    """
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = load_yaml_config(path)
        elif suffix == ".toml":
            data = load_toml_config(path)
        elif suffix == ".json":
            data = load_json_config(path)
        else:
            logger.warning(f"Unknown config file format: {suffix}")
            return {}
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    env_mappings = {
        "LOGSIGHT_LOG_PATH": ("parser", "log_path"),
        "LOGSIGHT_OUTPUT_PATH": ("export", "output_path"),
        "LOGSIGHT_LOG_LEVEL": ("logging", "level"),
        "LOGSIGHT_LOG_FILE": ("logging", "file"),
        "LOGSIGHT_HOST": ("server", "host"),
        "LOGSIGHT_PORT": ("server", "port"),
    }

    for env_var, (section, key) in env_mappings.items():
        value: Any = os.environ.get(env_var)
        if value is not None:
            if section not in config:
                config[section] = {}

            # Type conversion
            if value.lower() in ("true", "false"):
                value = value.lower() == "true"
            elif value.isdigit():
                value = int(value)

            config[section][key] = value

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> LogSightConfig:
    """Convert a dictionary to LogSightConfig."""
    config = LogSightConfig()

    for section_name in ("parser", "export", "server", "logging"):
        section = getattr(config, section_name)
        values = data.get(section_name) or {}
        if not isinstance(values, dict):
            raise ValueError(f"Config section '{section_name}' must be a mapping")
        for key, value in values.items():
            if hasattr(section, key):
                setattr(section, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {section_name}.{key}")

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> LogSightConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged LogSightConfig
    """
    config_data: dict[str, Any] = {}

    # Try to find and load a config file
    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    # Merge environment variables
    if include_env:
        env_config = load_env_config()
        config_data = merge_configs(config_data, env_config)

    return dict_to_config(config_data)


# ============================================================================
# Configuration Saving
# ============================================================================


def config_to_dict(config: LogSightConfig) -> dict[str, Any]:
    """Convert LogSightConfig to a dictionary."""
    return asdict(config)


def save_config(config: LogSightConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (YAML or JSON, detected from extension)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


# ============================================================================
# Logging Setup
# ============================================================================


def configure_logging(settings: LoggingConfig) -> None:
    """
    Apply logging settings to the root logger.

    Adds a rotating file handler when ``settings.file`` is set. A file that
    already has a handler attached is not added twice.
    """
    root = logging.getLogger()
    level = getattr(logging, str(settings.level).upper(), logging.INFO)
    formatter = logging.Formatter(settings.format)

    if not root.handlers:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)
    root.setLevel(level)

    if settings.file:
        log_file = os.path.abspath(settings.file)
        for handler in root.handlers:
            if (
                isinstance(handler, logging.handlers.RotatingFileHandler)
                and handler.baseFilename == log_file
            ):
                return
        file_handler = logging.handlers.RotatingFileHandler(
            settings.file,
            maxBytes=settings.file_max_bytes,
            backupCount=settings.file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: LogSightConfig | None = None


def get_config() -> LogSightConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: LogSightConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None


# ============================================================================
# Configuration Templates
# ============================================================================

DEFAULT_CONFIG_YAML = """# LogSight Configuration

# Parser settings
parser:
  # log_path: /path/to/match.log  # served by the API
  encoding: utf-8

# Export settings
export:
  output_path: match.json
  # json_indent: 2  # omit for compact output
  csv_delimiter: ","

# HTTP API settings
server:
  host: 0.0.0.0
  port: 3001

# Logging settings
logging:
  level: INFO
  # file: /path/to/logsight.log
"""


def generate_default_config(path: Path) -> None:
    """Generate a default configuration file."""
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        path.write_text(DEFAULT_CONFIG_YAML)
    else:
        save_config(LogSightConfig(), path)

    logger.info(f"Generated default config at: {path}")
