from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # General
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    COLLECTOR_MODE: Literal["production", "mock"] = "production"

    # Meter (host:port, the CLI argument wins)
    METER: str = ""
    MODBUS_TIMEOUT: float = 3.0
    VERBOSE: bool = False

    # Web
    NO_WEB: bool = False
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8081
    INDEX_HTML: str = "sharkmon.html"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
