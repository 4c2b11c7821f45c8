from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="appkit", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Request logging
    request_logger_name: str = Field(default="app.request", alias="REQUEST_LOGGER_NAME")
    request_id_token_length: int = Field(default=8, ge=1, alias="REQUEST_ID_TOKEN_LENGTH")


settings = Settings()
