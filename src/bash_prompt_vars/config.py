"""Configuration management using Pydantic Settings.

Settings come from environment variables, with an optional YAML file in the
user's home directory or /etc as a fallback for values the environment does
not provide.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATHS = [
    Path.home() / ".bash_prompt_vars.yml",
    Path("/etc/bash_prompt_vars.yml"),
]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables.

    No ``.env`` file is read: the program runs from whatever directory the
    shell happens to be in.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
    )

    BASH_PROMPT_SKIP_VCS_CHECK: str | None = None
    """When set to any value (even empty), repository detection is skipped."""

    BASH_PROMPT_LOG_LEVEL: str = "WARNING"
    """Python logging level for diagnostics written to stderr."""

    BASH_PROMPT_HG_EXECUTABLE: str = "hg"
    """Mercurial executable used to start the command server."""

    def __init__(self, **data) -> None:
        """Initialize settings, then fill unset values from the YAML file."""
        super().__init__(**data)
        explicit = set(data) | {name for name in type(self).model_fields if name in os.environ}
        self._load_file_config(explicit)

    @property
    def skip_vcs_check(self) -> bool:
        return self.BASH_PROMPT_SKIP_VCS_CHECK is not None

    def _load_file_config(self, explicit: set[str]) -> None:
        """Apply YAML file values for fields not given explicitly or via env."""
        config_file_path = None
        for path in CONFIG_PATHS:
            if path.exists():
                config_file_path = path
                break

        if not config_file_path:
            return

        try:
            with open(config_file_path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {config_file_path}: {e}")
            return

        if not isinstance(file_config, dict):
            logger.warning(f"Ignoring config file {config_file_path}: expected a mapping")
            return

        logger.debug(f"Loaded config from {config_file_path}")

        if "BASH_PROMPT_SKIP_VCS_CHECK" not in explicit and file_config.get("skip_vcs_check"):
            self.BASH_PROMPT_SKIP_VCS_CHECK = "1"

        if "BASH_PROMPT_LOG_LEVEL" not in explicit and file_config.get("log_level"):
            self.BASH_PROMPT_LOG_LEVEL = str(file_config["log_level"])

        if "BASH_PROMPT_HG_EXECUTABLE" not in explicit and file_config.get("hg_executable"):
            self.BASH_PROMPT_HG_EXECUTABLE = str(file_config["hg_executable"])
