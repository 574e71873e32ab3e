"""
carve configuration.

Settings are read, highest priority first, from keyword arguments, the TOML
file named by CARVE_CONFIG (default: ./carve.toml), CARVE_* environment
variables, a .env file and secrets. Nested keys use a double underscore:

    CARVE_INGEST__FLUSH_INTERVAL=500
"""
import os
from pathlib import Path
from typing import Callable, Literal, Tuple, Type

import pyarrow as pa
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
    TomlConfigSettingsSource,
    InitSettingsSource,
    EnvSettingsSource,
    DotEnvSettingsSource,
    SecretsSettingsSource,
)

TOML_PATH = Path(os.environ.get("CARVE_CONFIG", "carve.toml"))


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_to_file: bool = False
    log_file: str = "carve.log"
    rotation_size_mb: int = 10
    rotation_backup_count: int = 5
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


MemoryPoolName = Literal["default", "system", "jemalloc", "mimalloc"]


class IngestConfig(BaseModel):
    """Batching and input limits for a conversion run."""

    flush_interval: int = Field(
        default=10000, ge=0, description="Rows per record batch (0 = single batch)"
    )
    max_rows: int = Field(default=0, ge=0, description="Row limit (0 = unlimited)")
    memory_pool: MemoryPoolName = "default"


class AppSettings(BaseSettings):
    """
    Main settings class that loads configuration from various sources.
    Uses defaults if the file or keys are missing.
    """

    logging: LoggingConfig = LoggingConfig()
    ingest: IngestConfig = IngestConfig()

    model_config = SettingsConfigDict(
        env_prefix="CARVE_",
        env_nested_delimiter="__",
        extra="forbid",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: InitSettingsSource,
        env_settings: EnvSettingsSource,
        dotenv_settings: DotEnvSettingsSource,
        file_secret_settings: SecretsSettingsSource,
    ) -> Tuple[Callable, ...]:
        """
        Define the priority order for loading settings sources.
        The TOML file sits right after explicit keyword arguments.
        """
        return (
            init_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=TOML_PATH),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )


def load_settings(**overrides) -> AppSettings:
    return AppSettings(**overrides)


def resolve_memory_pool(name: str) -> pa.MemoryPool:
    """Map a configured pool name to a pyarrow MemoryPool."""
    factories = {
        "default": pa.default_memory_pool,
        "system": pa.system_memory_pool,
        "jemalloc": pa.jemalloc_memory_pool,
        "mimalloc": pa.mimalloc_memory_pool,
    }
    if name not in factories:
        raise ValueError(f"Unknown memory pool: {name}")
    try:
        return factories[name]()
    except NotImplementedError as e:
        raise ValueError(f"Memory pool '{name}' is not available in this pyarrow build") from e


settings = load_settings()
