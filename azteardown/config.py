"""Configuration loading.

Settings come from a YAML file (default: ~/.azteardown/config.yaml) and are
overridden by environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".azteardown" / "config.yaml"

# Environment variable -> config attribute
ENV_OVERRIDES = {
    "AZURE_SUBSCRIPTION_ID": "subscription_id",
    "AZTEARDOWN_RESOURCE_GROUP_PREFIX": "resource_group_prefix",
    "AZTEARDOWN_DELETE_TIMEOUT": "delete_timeout",
    "AZTEARDOWN_POLL_INTERVAL": "poll_interval",
    "AZTEARDOWN_AUDIT_DIR": "audit_dir",
    "AZTEARDOWN_LOG_LEVEL": "log_level",
}

FLOAT_SETTINGS = {"delete_timeout", "poll_interval"}


@dataclass
class Config:
    """Runtime configuration.

    Attributes:
        subscription_id: Azure subscription ID
        resource_group_prefix: Prefix of per-region resource groups (optional)
        delete_timeout: Seconds to wait for a deletion to complete
        poll_interval: Seconds between deletion status polls
        audit_dir: Audit log directory (optional, default: ~/.azteardown/audit-logs)
        log_level: Logging level name
        wait_for_root: Wait for the virtual machine deletion to complete
    """

    subscription_id: Optional[str] = None
    resource_group_prefix: Optional[str] = None
    delete_timeout: float = 600.0
    poll_interval: float = 5.0
    audit_dir: Optional[str] = None
    log_level: str = "WARNING"
    wait_for_root: bool = True

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Config:
        """Load configuration from file and environment.

        Args:
            path: Config file path (default: ~/.azteardown/config.yaml). A missing
                file is not an error.

        Returns:
            Config instance

        Raises:
            ValueError: If the file or an environment variable holds an invalid value
        """
        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        values: dict = {}

        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Invalid config file {config_path}: expected a mapping")

            known = {f.name for f in fields(cls)}
            for key, value in data.items():
                if key in known:
                    values[key] = value
                else:
                    logger.warning(f"Ignoring unknown config key '{key}' in {config_path}")
        elif path:
            logger.warning(f"Config file {config_path} not found, using defaults")

        for env_var, attribute in ENV_OVERRIDES.items():
            env_value = os.environ.get(env_var)
            if env_value:
                values[attribute] = env_value

        for attribute in FLOAT_SETTINGS:
            if attribute in values:
                try:
                    values[attribute] = float(values[attribute])
                except (TypeError, ValueError):
                    raise ValueError(f"Invalid value for {attribute}: {values[attribute]!r}")

        config = cls(**values)
        config.validate()
        return config

    def validate(self) -> bool:
        """Validate settings.

        Raises:
            ValueError: If a timeout or interval is not positive, or log_level is unknown
        """
        if self.delete_timeout <= 0:
            raise ValueError("delete_timeout must be positive")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise ValueError(f"Invalid log_level: {self.log_level!r}")
        return True
