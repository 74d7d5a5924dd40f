"""Configuration management using pydantic-settings.

**Not a singleton**: each call to ``get_client_config()`` re-reads the
sources so edits to the YAML file or the environment are picked up.

Priority order (highest first):

1. Init arguments
2. Environment variables (``VECINITA_`` prefix, ``__`` for nesting)
3. ``.env`` dotenv file
4. YAML file (path from ``VECINITA_CONFIG_FILE``, else ``configs/client.yaml``)
5. Field defaults
"""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import GatewayConfig, LoggingConfig

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path.cwd()
CONFIG_DIR = PROJECT_ROOT / "configs"

_config_file_env = os.environ.get("VECINITA_CONFIG_FILE")
STATIC_CONFIG_FILE = (
    Path(_config_file_env) if _config_file_env else CONFIG_DIR / "client.yaml"
)

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"  # Nested environment variable delimiter
ENV_PREFIX = "VECINITA_"

DEFAULT_ENCODING = "utf-8"


class ClientConfig(BaseSettings):
    """Agent gateway client configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    gateway: GatewayConfig = Field(
        default_factory=GatewayConfig,
        description="Agent gateway endpoint and timeouts",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging output settings",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def get_client_config() -> ClientConfig:
    """Load the client configuration from all sources."""
    return ClientConfig()
