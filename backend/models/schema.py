"""Pydantic schemas for the reflected database schema (one snapshot per introspection call)."""
from typing import Optional, Any
from pydantic import BaseModel, Field


class SchemaIndex(BaseModel):
    name: Optional[str] = None
    columns: list[str] = Field(default_factory=list)
    is_unique: bool = False
    is_primary: bool = False


class SchemaForeignKey(BaseModel):
    name: Optional[str] = None
    columns: list[str] = Field(default_factory=list)
    foreign_table: str
    foreign_columns: list[str] = Field(default_factory=list)
    on_delete: Optional[str] = None
    on_update: Optional[str] = None


class SchemaColumn(BaseModel):
    name: str
    type: str                                   # lower-case base type, e.g. "varchar", "enum"
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    unsigned: bool = False
    nullable: bool = True
    default: Optional[str] = None
    comment: Optional[str] = None
    auto_increment: bool = False
    enum_values: Optional[list[str]] = None
    constraints: dict[str, Any] = Field(default_factory=dict)


class SchemaTable(BaseModel):
    name: str
    comment: Optional[str] = None
    columns: list[SchemaColumn] = Field(default_factory=list)
    indexes: list[SchemaIndex] = Field(default_factory=list)
    foreign_keys: list[SchemaForeignKey] = Field(default_factory=list)
    primary_key: Optional[list[str]] = None
    engine: Optional[str] = None
    collation: Optional[str] = None

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]
