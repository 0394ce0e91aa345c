"""Application settings loaded from environment variables using pydantic-settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Tractionboard application configuration.

    All settings can be overridden via environment variables or a ``.env``
    file in the working directory.
    """

    DATABASE_DIR: str = "./data"
    FRONTEND_URL: str = "http://localhost:3000"
    MAX_UPLOAD_MB: int = 10
    SNAPSHOT_KEY: str = "ninetyData"
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024
