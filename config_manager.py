"""
Configuration management for the visitor log import.
Handles loading, validating, and providing access to import settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class ImportConfig:
    """Log import settings."""
    log_dir: str
    file_prefix: str
    batch_size: int
    noise_prefixes: list[str]
    exempt_addresses: list[str]


@dataclass
class StorageConfig:
    """Visitor store settings."""
    database_url: str
    echo: bool


@dataclass
class LoggingSettings:
    """Logging settings."""
    debug: bool
    log_file: Optional[str]


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class ConfigManager:
    """Manages import configuration loading and access."""

    def __init__(self, config_file: str = "visitor_import_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        # Start with default config
        self._config = self._get_default_config()

        # Load base config from file
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    # Merge file config with defaults
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        # Override with environment variables
        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "import": {
                "log_dir": "/etc/httpd/logs",
                "file_prefix": "access",
                "batch_size": 1000,
                "noise_prefixes": ["/assets", "/css", "/favicon"],
                "exempt_addresses": []
            },
            "storage": {
                "database_url": "sqlite:///visitors.db",
                "echo": False
            },
            "logging": {
                "debug": False,
                "log_file": None
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # Import settings
        if os.getenv("VISITOR_LOG_DIR"):
            self._config["import"]["log_dir"] = os.getenv("VISITOR_LOG_DIR")

        if os.getenv("VISITOR_FILE_PREFIX"):
            self._config["import"]["file_prefix"] = os.getenv("VISITOR_FILE_PREFIX")

        if os.getenv("VISITOR_BATCH_SIZE"):
            self._config["import"]["batch_size"] = int(os.getenv("VISITOR_BATCH_SIZE"))

        if os.getenv("VISITOR_NOISE_PREFIXES") is not None:
            self._config["import"]["noise_prefixes"] = _split_list(os.getenv("VISITOR_NOISE_PREFIXES"))

        if os.getenv("VISITOR_EXEMPT_ADDRESSES"):
            self._config["import"]["exempt_addresses"] = _split_list(os.getenv("VISITOR_EXEMPT_ADDRESSES"))

        # Storage settings
        if os.getenv("VISITOR_DATABASE_URL"):
            self._config["storage"]["database_url"] = os.getenv("VISITOR_DATABASE_URL")

        if os.getenv("VISITOR_DB_ECHO"):
            self._config["storage"]["echo"] = os.getenv("VISITOR_DB_ECHO").lower() == "true"

    def get_import_config(self) -> ImportConfig:
        """Get import configuration."""
        import_config = self._config["import"]
        batch_size = int(import_config["batch_size"])
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        return ImportConfig(
            log_dir=import_config["log_dir"],
            file_prefix=import_config["file_prefix"],
            batch_size=batch_size,
            noise_prefixes=list(import_config["noise_prefixes"]),
            exempt_addresses=list(import_config["exempt_addresses"])
        )

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration."""
        storage_config = self._config["storage"]
        return StorageConfig(
            database_url=storage_config["database_url"],
            echo=bool(storage_config["echo"])
        )

    def get_logging_settings(self) -> LoggingSettings:
        """Get logging configuration."""
        logging_config = self._config["logging"]
        return LoggingSettings(
            debug=bool(logging_config["debug"]),
            log_file=logging_config["log_file"]
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_import_config() -> ImportConfig:
    """Get import configuration."""
    return config_manager.get_import_config()


def get_storage_config() -> StorageConfig:
    """Get storage configuration."""
    return config_manager.get_storage_config()


def get_logging_settings() -> LoggingSettings:
    """Get logging configuration."""
    return config_manager.get_logging_settings()
