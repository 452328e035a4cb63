"""Issuing configuration."""

import logging
import os
import tomllib
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOGGER = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error."""


class ConfigFileNotFoundError(ConfigError):
    """Raised on configuration file not found."""


class IssuingConfig(BaseSettings):
    """Issuing configuration.

    Values are read from the environment (prefixed with ``ISSUING_``), from a
    ``.env`` file or from a TOML file through ``from_config_file``.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="ISSUING_")

    revocation_contract_address: str
    metadata_registry_contract_address: str
    credential_extensions_context_url: str | None = None
    credential_subject_context: bool = False
    revocation_list_size: int = 10240
    metadata_list_size: int = 10000
    list_index_origin: int = 0
    credential_id_content_hash_suffix: bool = False

    @model_validator(mode="after")
    def check_list_sizes(self) -> "IssuingConfig":
        """List sizes must leave room for at least one allocation."""
        if self.revocation_list_size < 1 or self.metadata_list_size < 1:
            raise ConfigError("List sizes must be positive")
        if self.list_index_origin < 0:
            raise ConfigError("list_index_origin must not be negative")
        return self

    @staticmethod
    def search_default_config_locations() -> Path:
        """Find the first readable config file in the default locations."""
        user = os.getuid()
        for path in (
            "/run/secrets/issuing.toml",
            "/run/issuing.toml",
            "/etc/velocity-issuing/issuing.toml",
        ):
            path = Path(path)
            if not path.is_file():
                continue
            if path.stat().st_uid != user and not (path.stat().st_mode & 0o004):
                continue

            LOGGER.debug("Loading issuing config from %s", path)
            return path

        raise ConfigFileNotFoundError("Could not find issuing.toml")

    @classmethod
    def from_config_file(cls, path: Path | str | None = None) -> "IssuingConfig":
        """Load from a config file.

        File values take precedence; settings missing from the file are read
        from the environment and `.env`.
        """
        if isinstance(path, str):
            path = Path(path)
        elif path is None:
            path = cls.search_default_config_locations()

        with path.open("rb") as f:
            raw = tomllib.load(f)

        return cls(**raw)
