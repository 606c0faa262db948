import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator

class Settings(BaseSettings):
    # Database: a SQLite file by default
    database_url: str = "sqlite:///maintenance.db"
    # seconds a writer waits on a locked SQLite file before giving up
    sqlite_timeout: float = 30.0

    # Engineer resolution. Creating users from a submission is off unless enabled.
    auto_create_engineers: bool = False
    password_hash_rounds: int = 12

    # Example .env
    # MAINTENANCE_DATABASE_URL=sqlite:///data/maintenance.db
    # MAINTENANCE_LOG_LEVEL=DEBUG
    # MAINTENANCE_AUTO_CREATE_ENGINEERS=true

    # Other settings
    debug: bool = False
    log_level: str = "INFO"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @model_validator(mode='after')
    def check_required_fields(self):
        if not self.database_url:
            raise ValueError("database_url is empty, check the environment or the .env file")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"unknown log level: {self.log_level}")
        self.log_level = self.log_level.upper()
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MAINTENANCE_",
        env_nested_delimiter="__",
        env_ignore_empty=True
    )

settings = Settings()
