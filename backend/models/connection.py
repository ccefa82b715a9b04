"""Pydantic schema for the documented database's connection parameters."""
from typing import Optional, Literal
from pydantic import BaseModel, Field


class ConnectionRequest(BaseModel):
    db_type: Literal["sqlite", "postgresql", "mysql"] = Field(..., description="Database engine type")

    # Full SQLAlchemy URL; takes precedence over the individual fields below
    url: Optional[str] = Field(None, description="SQLAlchemy database URL")

    # SQLite only
    file_path: Optional[str] = Field(None, description="Path to .db file (SQLite only)")

    # Server databases
    host: Optional[str] = Field(None, description="Database host")
    port: Optional[int] = Field(None, description="Database port")
    database: Optional[str] = Field(None, description="Database name")
    username: Optional[str] = Field(None, description="Username")
    password: Optional[str] = Field(None, description="Password")
    db_schema: Optional[str] = Field(None, description="Schema to document (dialect default if empty)")

    def get_sqlalchemy_url(self) -> str:
        if self.url:
            return self.url
        if self.db_type == "sqlite":
            return f"sqlite:///{self.file_path}"
        if self.db_type == "mysql":
            return (
                f"mysql+pymysql://{self.username}:{self.password}"
                f"@{self.host}:{self.port or 3306}/{self.database}"
            )
        return (
            f"postgresql+psycopg2://{self.username}:{self.password}"
            f"@{self.host}:{self.port or 5432}/{self.database}"
        )

    @property
    def database_label(self) -> str:
        if self.database:
            return self.database
        if self.file_path:
            return self.file_path.replace("\\", "/").split("/")[-1]
        return self.db_type

    @classmethod
    def from_url(cls, url: str, db_schema: Optional[str] = None) -> "ConnectionRequest":
        scheme = url.split(":", 1)[0].split("+", 1)[0]
        db_type = {"postgres": "postgresql"}.get(scheme, scheme)
        file_path = url[len("sqlite:///"):] if url.startswith("sqlite:///") else None
        database = None if file_path is not None else url.rsplit("/", 1)[-1].split("?", 1)[0] or None
        return cls(db_type=db_type, url=url, file_path=file_path, database=database, db_schema=db_schema)
