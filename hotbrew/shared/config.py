"""Environment configuration using pydantic-settings."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from hotbrew.shared.constants import DEFAULT_SERVER_URL


class HotbrewSettings(BaseSettings):
    """Process-level settings read from the environment."""
    log_level: str = Field(default="warning", validation_alias="HOTBREW_LOG_LEVEL")
    server_url: str = Field(
        default=DEFAULT_SERVER_URL, validation_alias="HOTBREW_SERVER"
    )
    xdg_config_home: str = Field(default="", validation_alias="XDG_CONFIG_HOME")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class ServerSettings(HotbrewSettings):
    """Settings for the subscription server."""
    log_level: str = Field(default="info", validation_alias="HOTBREW_LOG_LEVEL")
    data_dir: str = Field(default="", validation_alias="HOTBREW_DATA_DIR")
