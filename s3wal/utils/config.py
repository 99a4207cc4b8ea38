"""
Configuration management for s3wal.

Handles loading and merging configuration from:
- Default configuration file (config/default.yaml)
- A user supplied YAML file
- A .env file (python-dotenv), never overriding variables already set
- Environment variables
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        "bucket": None,
        "prefix": "wal",
        "region": None,
        "endpoint_url": None,
        "delete_batch_size": 1000,
    },
    "logging": {
        "level": "INFO",
        "format": "console",
        "output": "stderr",
    },
}


class Config:
    """Configuration manager for s3wal."""

    def __init__(self, config_file: Optional[str] = None, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file. If None, only the
                defaults and environment are used.
            env_file: Path to a .env file. If None, a .env file in the
                working directory or its parents is used when present.
        """
        self._config: Dict[str, Any] = self._deep_merge({}, DEFAULT_CONFIG)
        self._load_default_config()

        if config_file:
            self._load_config_file(config_file)

        self._load_env_file(env_file)
        self._apply_env_overrides()

    def _load_default_config(self) -> None:
        """Load default configuration file shipped next to the package."""
        default_config_path = Path(__file__).parent.parent.parent / "config" / "default.yaml"
        if default_config_path.exists():
            self._load_config_file(str(default_config_path))

    def _load_config_file(self, config_file: str) -> None:
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML configuration file
        """
        with open(config_file, "r") as f:
            file_config = yaml.safe_load(f)
        if file_config:
            self._merge_config(file_config)

    def _load_env_file(self, env_file: Optional[str]) -> None:
        """
        Export variables from a .env file into the process environment.

        Variables that are already set keep their values. The file also
        feeds boto3's credential chain (AWS_ACCESS_KEY_ID, AWS_PROFILE, ...).

        Args:
            env_file: Explicit .env path; must exist when given

        Raises:
            FileNotFoundError: If env_file is given but does not exist
        """
        if env_file is None:
            env_file = find_dotenv(usecwd=True)
            if not env_file:
                return
        elif not Path(env_file).is_file():
            raise FileNotFoundError(f"No such .env file: {env_file}")

        load_dotenv(env_file, override=False)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        self._config = self._deep_merge(self._config, new_config)

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two dictionaries.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            elif isinstance(value, dict):
                result[key] = self._deep_merge({}, value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if bucket := os.getenv("AWS_BUCKET_NAME"):
            self.set("storage.bucket", bucket)

        if prefix := os.getenv("AWS_PREFIX"):
            self.set("storage.prefix", prefix)

        if region := os.getenv("AWS_REGION"):
            self.set("storage.region", region)

        if endpoint_url := os.getenv("AWS_ENDPOINT_URL"):
            self.set("storage.endpoint_url", endpoint_url)

        if batch_size := os.getenv("S3WAL_DELETE_BATCH_SIZE"):
            try:
                self.set("storage.delete_batch_size", int(batch_size))
            except ValueError:
                raise ValueError(
                    f"S3WAL_DELETE_BATCH_SIZE must be an integer, got {batch_size!r}"
                ) from None

        if log_level := os.getenv("LOG_LEVEL"):
            self.set("logging.level", log_level)

        if log_format := os.getenv("LOG_FORMAT"):
            self.set("logging.format", log_format)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "storage.bucket")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
            value: Value to set
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Get entire configuration as dictionary.

        Returns:
            Configuration dictionary
        """
        return self._deep_merge({}, self._config)


# Global configuration instance
_config: Optional[Config] = None


def get_config(config_file: Optional[str] = None, env_file: Optional[str] = None) -> Config:
    """
    Get global configuration instance.

    Args:
        config_file: Optional configuration file path
        env_file: Optional .env file path

    Returns:
        Configuration instance
    """
    global _config
    if _config is None:
        _config = Config(config_file, env_file=env_file)
    return _config


def reset_config() -> None:
    """Reset global configuration (mainly for testing)."""
    global _config
    _config = None
