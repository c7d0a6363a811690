"""Configuration settings for cronloop."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Scheduler
    timezone: str = "UTC"
    ticker_interval_ms: int = 500

    # Command jobs
    command_timeout: int = 300
    allow_host_commands: bool = True
    allowed_commands: list = []  # Empty means all commands allowed

    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    class Config:
        env_prefix = "CRONLOOP_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
