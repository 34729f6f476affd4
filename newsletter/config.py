from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    storage_dir: str = Field(default="storage", alias="STORAGE_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")
    host: str = Field(default="localhost", alias="HOST")
    port: int = Field(default=8080, alias="PORT")
    enable_metrics_endpoint: bool = Field(default=True, alias="ENABLE_METRICS_ENDPOINT")

    @property
    def storage_path(self) -> Path:
        return Path(self.storage_dir)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
