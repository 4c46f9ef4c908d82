"""Configuration management for environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

from offwiki.utils.exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Load configuration from .env file and environment."""
        env_path = Path(".env")
        if env_path.exists():
            load_dotenv(env_path)

        # Archive locations, used when the CLI is not given explicit paths
        self.index_path = self.get_optional("OFFWIKI_INDEX_PATH")
        self.dump_path = self.get_optional("OFFWIKI_DUMP_PATH")

        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = os.getenv("LOG_FORMAT", "auto").lower()
        self.link_prefix = os.getenv("OFFWIKI_LINK_PREFIX", "/")
        self.strict_markup = os.getenv("OFFWIKI_STRICT_MARKUP", "").lower() in _TRUE_VALUES

    def resolve_index_path(self, explicit: Path | None) -> Path:
        """Index file from the command line, else OFFWIKI_INDEX_PATH.

        Raises:
            ConfigurationError: If neither source provides a path
        """
        return self._resolve_path(explicit, self.index_path, "OFFWIKI_INDEX_PATH")

    def resolve_dump_path(self, explicit: Path | None) -> Path:
        """Dump file from the command line, else OFFWIKI_DUMP_PATH.

        Raises:
            ConfigurationError: If neither source provides a path
        """
        return self._resolve_path(explicit, self.dump_path, "OFFWIKI_DUMP_PATH")

    @staticmethod
    def _resolve_path(explicit: Path | None, configured: str | None, key: str) -> Path:
        """Pick an explicit path, falling back to the configured value.

        Args:
            explicit: Path given on the command line, if any
            configured: Value read from the environment at load time
            key: Environment variable the configured value came from

        Returns:
            The resolved path

        Raises:
            ConfigurationError: If neither source provides a path
        """
        if explicit is not None:
            return explicit
        if not configured:
            raise ConfigurationError(f"{key} environment variable is not set")
        return Path(configured)

    @staticmethod
    def get_optional(key: str, default: str | None = None) -> str | None:
        """Get optional environment variable with default value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            Environment variable value or default
        """
        return os.getenv(key, default)
