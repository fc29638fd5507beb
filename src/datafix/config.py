"""
Configuration loader for DataFix.
Loads configuration from YAML files and environment variables.

Resolution order (later wins):
    config/default.yaml
    config/<DATAFIX_ENV>.yaml
    environment variables
"""

from typing import Dict, Any, Optional
from pathlib import Path
import logging
import os

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class SupabaseConfig(BaseModel):
    """Connection settings for the hosted Supabase project."""

    url: str = ""
    key: str = ""
    attachment_bucket: str = "ticket-attachments"

    model_config = ConfigDict(extra="allow")


class TablesConfig(BaseModel):
    """Backend table and RPC names."""

    tickets: str = "datafix_tickets"
    detail_lines: str = "ticket_detail_lines"
    attachments: str = "ticket_attachments"
    status_history: str = "ticket_status_history"
    branches: str = "m_branches"
    features: str = "m_features"
    profiles: str = "profiles"
    stats_rpc: str = "get_ticket_stats"

    model_config = ConfigDict(extra="allow")


class TicketsConfig(BaseModel):
    """Ticket workflow and view settings."""

    max_attachment_bytes: int = 5 * 1024 * 1024
    page_size: int = 10
    recent_limit: int = 5
    redirect_delay_seconds: float = 2.0
    transition_policy: str = "open"  # open | strict
    other_feature_name: str = "Lainnya"
    trend_months: int = 3
    top_features: int = 4

    model_config = ConfigDict(extra="allow")


class DataFixConfig(BaseModel):
    """Main DataFix configuration."""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Logging
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8001

    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    tables: TablesConfig = Field(default_factory=TablesConfig)
    tickets: TicketsConfig = Field(default_factory=TicketsConfig)

    model_config = ConfigDict(extra="allow")


class ConfigLoader:
    """Load and manage DataFix configuration."""

    def __init__(self, config_dir: str = "config"):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
        """
        self.config_dir = Path(config_dir)
        self.config: Optional[DataFixConfig] = None
        self.load()

    def load(self) -> DataFixConfig:
        """Load configuration from YAML and environment variables."""
        env = os.getenv("DATAFIX_ENV", "development")
        config_file = self.config_dir / f"{env}.yaml"

        merged = self._load_yaml(self.config_dir / "default.yaml")

        if config_file.exists():
            _deep_update(merged, self._load_yaml(config_file))
        else:
            logger.debug(f"Config file not found: {config_file}, using defaults")

        _deep_update(merged, self._load_from_env())
        merged["environment"] = env

        self.config = DataFixConfig(**merged)
        logger.info(f"Configuration loaded (environment: {self.config.environment})")
        return self.config

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML config file."""
        if not path.exists():
            return {}

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
                return data or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load YAML config {path}: {e}")
            return {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        supabase = {}
        if supabase_url := os.getenv("SUPABASE_URL"):
            supabase["url"] = supabase_url
        if supabase_key := os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY"):
            supabase["key"] = supabase_key
        if bucket := os.getenv("DATAFIX_ATTACHMENT_BUCKET"):
            supabase["attachment_bucket"] = bucket
        if supabase:
            config["supabase"] = supabase

        if policy := os.getenv("DATAFIX_TRANSITION_POLICY"):
            config["tickets"] = {"transition_policy": policy}

        if log_level := os.getenv("DATAFIX_LOG_LEVEL"):
            config["log_level"] = log_level
        if api_port := os.getenv("DATAFIX_API_PORT"):
            config["api_port"] = int(api_port)

        return config

    def get(self) -> DataFixConfig:
        """Get current configuration."""
        if not self.config:
            self.load()
        return self.config

    def reload(self):
        """Reload configuration."""
        logger.info("Reloading configuration...")
        self.load()


def _deep_update(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


# Global config instance
_global_config_loader: Optional[ConfigLoader] = None


def get_config() -> DataFixConfig:
    """Get the global DataFix configuration."""
    global _global_config_loader
    if _global_config_loader is None:
        _global_config_loader = ConfigLoader()
    return _global_config_loader.get()


def initialize_config(config_dir: str = "config") -> DataFixConfig:
    """Initialize the global configuration loader."""
    global _global_config_loader
    _global_config_loader = ConfigLoader(config_dir)
    return _global_config_loader.get()


def reset_config():
    """Drop the cached configuration so the next get_config() reloads it."""
    global _global_config_loader
    _global_config_loader = None
