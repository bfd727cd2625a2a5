import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

_CONFIG_PATH = os.getenv("TIMERS_MANAGER_CONFIG", "timers.toml")
_ENV_PATH = os.getenv("TIMERS_MANAGER_ENV", ".env")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TIMERS_",
        env_nested_delimiter="__",
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
        extra="ignore",
    )

    # Accepted delay range for timer descriptors, in milliseconds
    min_delay_ms: float = 0
    max_delay_ms: float = 5000

    # APScheduler treats a zero interval as one second, so recurring timers are clamped
    min_interval_ms: float = Field(default=1, gt=0)
    max_instances: int = Field(default=1, ge=1)

    log_level: str = "INFO"
    logs_dir: Optional[Path] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env > timers.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()
