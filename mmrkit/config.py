"""
mmrkit configuration.

Configuration Hierarchy (highest to lowest priority):
1. Environment variables (MMRKIT_<SECTION>_<FIELD>)
2. Config file (JSON, TOML or YAML)
3. Default values

Example:
    config = MMRConfig.load("mmrkit.toml")
    store = open_store(config.store)

    # MMRKIT_STORE_RETAIN_PAYLOADS=false drops payloads, keeps hashes
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "file")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")


# =============================================================================
# Configuration Sections
# =============================================================================

@dataclass
class StoreConfig:
    """Backing store configuration."""
    backend: str = "memory"
    path: Optional[str] = None
    retain_payloads: bool = True

    def __post_init__(self):
        if self.path is not None:
            self.path = str(self.path)
        if self.backend not in STORE_BACKENDS:
            raise ValueError(f"backend must be one of {STORE_BACKENDS}, got {self.backend!r}")
        if self.backend == "file" and not self.path:
            raise ValueError("file backend requires a path")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"  # "json" or "text"
    file: Optional[str] = None
    max_size_mb: int = 100
    backup_count: int = 5
    include_timestamps: bool = True

    def __post_init__(self):
        self.level = str(self.level).upper()
        self.format = str(self.format).lower()


# =============================================================================
# Main Configuration
# =============================================================================

@dataclass
class MMRConfig:
    """Top-level configuration combining all sections."""
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(
        cls,
        config_file: Optional[Union[str, Path]] = None,
        env_prefix: str = "MMRKIT",
    ) -> "MMRConfig":
        """
        Load configuration with hierarchy: env vars > config file > defaults.

        Args:
            config_file: Path to config file (JSON, TOML or YAML)
            env_prefix: Prefix for environment variables

        Returns:
            Loaded and validated configuration
        """
        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = cls._load_file(Path(config_file))

        config_dict = cls._apply_env_overrides(config_dict, env_prefix)

        config = cls._from_dict(config_dict)
        config.validate()
        return config

    @classmethod
    def _load_file(cls, path: Path) -> Dict[str, Any]:
        """Load configuration from file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return {}

        content = path.read_text()

        if path.suffix == ".json":
            return json.loads(content)
        elif path.suffix == ".toml":
            return tomllib.loads(content)
        elif path.suffix in {".yaml", ".yml"}:
            parsed = yaml.safe_load(content)
            if isinstance(parsed, dict):
                return parsed
            logger.warning("YAML config must be a mapping at top level")
            return {}
        else:
            logger.warning(f"Unknown config file format: {path.suffix}")
            return {}

    @classmethod
    def _apply_env_overrides(cls, config: Dict[str, Any], prefix: str) -> Dict[str, Any]:
        """Apply environment variable overrides."""
        for key, value in os.environ.items():
            if not key.startswith(f"{prefix}_"):
                continue

            # MMRKIT_STORE_RETAIN_PAYLOADS -> store.retain_payloads
            parts = key[len(prefix) + 1:].lower().split("_")

            if len(parts) < 2:
                continue

            section = parts[0]
            field_name = "_".join(parts[1:])

            config.setdefault(section, {})[field_name] = cls._parse_env_value(value)

        return config

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    @classmethod
    def _from_dict(cls, config_dict: Dict[str, Any]) -> "MMRConfig":
        """Build config object from dictionary."""
        return cls(
            store=StoreConfig(**config_dict.get("store", {})),
            logging=LoggingConfig(**config_dict.get("logging", {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def validate(self) -> None:
        """Validate cross-field settings not covered by the sections."""
        if self.logging.level not in LOG_LEVELS:
            raise ValueError(f"Invalid logging level: {self.logging.level}")

        if self.logging.format not in LOG_FORMATS:
            raise ValueError(f"Invalid logging format: {self.logging.format}")

        if self.logging.max_size_mb <= 0:
            raise ValueError("max_size_mb must be positive")


# =============================================================================
# Global Config Instance
# =============================================================================

_global_config: Optional[MMRConfig] = None


def get_config() -> MMRConfig:
    """Get global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = MMRConfig.load()
    return _global_config


def set_config(config: MMRConfig) -> None:
    """Set global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset global configuration to None (forces reload)."""
    global _global_config
    _global_config = None
