from functools import lru_cache
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    # app settings
    app_name: str = "DashQuery"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = ""
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Path = Path("./logs/app.log")

    # Query history
    query_history_default_limit: int = Field(default=100, gt=0)

    # Dashboard panel queries
    validated_queries_enabled: bool = True

    # Identity forwarded by the authenticating proxy
    auth_user_id_header: str = "X-User-Id"
    auth_org_id_header: str = "X-Org-Id"

    @field_validator("log_level", mode="before")
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
