"""Application settings loaded from .env file."""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Documented database
    DATABASE_URL: str = "sqlite:///./app.db"
    DB_SCHEMA: Optional[str] = None
    EXCLUDE_TABLES: str = "alembic_version,migrations"

    # Metadata store
    METADATA_PATH: str = "table_metadata.yaml"
    BACKUP_ON_UPDATE: bool = True

    # Exported documents
    OUTPUT_DIR: str = "table-documents"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def exclude_table_list(self) -> list[str]:
        return [t.strip() for t in self.EXCLUDE_TABLES.split(",") if t.strip()]


settings = Settings()
