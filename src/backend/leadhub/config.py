from typing import List, Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    environment: str = Field("development", validation_alias="ENVIRONMENT")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    # Database connection parameters. DATABASE_URL wins when present;
    # the legacy POSTGRES_* names are read when DB_* is absent.
    database_url: Optional[str] = Field(None, validation_alias="DATABASE_URL")
    db_host: Optional[str] = Field(None, validation_alias=AliasChoices("DB_HOST", "POSTGRES_HOST"))
    db_port: int = Field(5432, validation_alias=AliasChoices("DB_PORT", "POSTGRES_PORT"))
    db_name: Optional[str] = Field(None, validation_alias=AliasChoices("DB_NAME", "POSTGRES_DB"))
    db_user: Optional[str] = Field(None, validation_alias=AliasChoices("DB_USER", "POSTGRES_USER"))
    db_password: Optional[str] = Field(
        None, validation_alias=AliasChoices("DB_PASSWORD", "POSTGRES_PASSWORD")
    )
    db_conn_retries: int = Field(10, validation_alias="DB_CONN_RETRIES")
    db_conn_retry_delay: float = Field(2.0, validation_alias="DB_CONN_RETRY_DELAY")
    init_schema_on_startup: bool = Field(True, validation_alias="INIT_SCHEMA_ON_STARTUP")

    # Tokens
    jwt_secret: str = Field(DEV_JWT_SECRET, validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", validation_alias="JWT_ALGORITHM")
    jwt_expire_days: int = Field(30, validation_alias="JWT_EXPIRE_DAYS")

    cors_origins: List[str] = Field(["*"], validation_alias="CORS_ORIGINS")

    # Listing / reporting
    default_page_limit: int = 10
    max_page_limit: int = 100
    recent_leads_limit: int = 5
    stats_window_days: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def require_jwt_secret(self) -> "Settings":
        if self.is_production and self.jwt_secret == DEV_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
