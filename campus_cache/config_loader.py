"""
Configuration loader for the campus cache service.

Looks for config.yaml in this order:
1. Explicit path passed to Config
2. Environment variable CONFIG_PATH
3. ./config.yaml (local development)
4. Falls back to default config
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .models import CachePolicy

logger = logging.getLogger(__name__)

# Built-in purposes; a config file may override any field or add purposes.
DEFAULT_CACHES: dict[str, dict[str, Any]] = {
    "leaderboard": {
        "max_entries": 500,
        "default_ttl_seconds": 300,
        "eviction": "expiry",
        "sweep_interval_seconds": 300,
    },
    "student-data": {
        "max_entries": 2000,
        "default_ttl_seconds": 120,
        "eviction": "lru",
    },
    "procedures": {
        "max_entries": 1000,
        "default_ttl_seconds": 300,
        "eviction": "expiry",
    },
    "teacher-portal": {
        "max_entries": 500,
        "default_ttl_seconds": 300,
        "eviction": "lru",
        "sweep_interval_seconds": 120,
    },
    "topics": {
        "max_entries": 200,
        "default_ttl_seconds": 1800,
        "eviction": "expiry",
        "sweep_interval_seconds": 300,
    },
}


class Config:
    def __init__(self, config_path: str | None = None):
        # Determine config path in order of priority
        if config_path:
            self.config_path = Path(config_path)
        elif os.getenv("CONFIG_PATH"):
            self.config_path = Path(os.getenv("CONFIG_PATH"))
        elif Path("./config.yaml").exists():
            self.config_path = Path("./config.yaml")
        else:
            # No config found, will use defaults
            self.config_path = None

        self._config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """
        Load configuration from the YAML file.

        Returns an empty mapping (all defaults) if the file is missing. A file
        that exists but cannot be parsed is an error: running with silently
        different cache sizes is worse than not starting.
        """
        if self.config_path is None:
            logger.info("Config file not found, using defaults")
            return {}
        if not self.config_path.exists():
            logger.warning("Config file %s does not exist, using defaults", self.config_path)
            return {}

        with open(self.config_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ValueError(f"{self.config_path} must contain a mapping, got {type(config_data).__name__}")
        logger.info("Loaded config from: %s", self.config_path)
        return config_data

    def _section(self, name: str) -> dict[str, Any]:
        return self._config.get("campus_cache", {}).get(name, {}) or {}

    @property
    def server_host(self) -> str:
        return self._section("server").get("host", "0.0.0.0")

    @property
    def server_port(self) -> int:
        return self._section("server").get("port", 8002)

    @property
    def log_level(self) -> str:
        level = os.getenv("LOG_LEVEL") or self._config.get("campus_cache", {}).get("log_level", "INFO")
        return str(level).upper()

    @property
    def sweep_interval_seconds(self) -> float:
        """Sweep period for caches that do not set their own (default 60s)."""
        return self._section("cache").get("sweep_interval_seconds", 60)

    @property
    def cache_policies(self) -> dict[str, CachePolicy]:
        """
        Policy per cache purpose.

        Built-in purposes are merged field by field with the ``cache.caches``
        section of the file, so overriding one field keeps the others.

        Raises:
            pydantic.ValidationError: On invalid sizes, TTLs or eviction names
        """
        overrides = self._section("cache").get("caches", {}) or {}
        purposes = {**DEFAULT_CACHES, **{name: {} for name in overrides}}
        policies: dict[str, CachePolicy] = {}
        for name in purposes:
            fields = {
                "sweep_interval_seconds": self.sweep_interval_seconds,
                **DEFAULT_CACHES.get(name, {}),
                **(overrides.get(name) or {}),
            }
            policies[name] = CachePolicy(**fields)
        return policies


# Global config singleton read by the application entry point
config = Config()
