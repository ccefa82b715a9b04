"""Pydantic schemas for enriched (render-ready) table documentation."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from models.metadata import ColumnReference
from models.schema import SchemaColumn, SchemaTable


class EnrichedColumn(SchemaColumn):
    logical_name: Optional[str] = None
    description: Optional[str] = None
    enum_labels: Optional[dict[str, str]] = None      # only when the column has enum values
    boolean_labels: Optional[dict[str, str]] = None   # only for boolean-like types
    reference: Optional[ColumnReference] = None
    type_label: str = ""


class EnrichedTable(SchemaTable):
    logical_name: Optional[str] = None
    description: Optional[str] = None
    columns: list[EnrichedColumn] = Field(default_factory=list)


class DocumentInfo(BaseModel):
    """Sidecar written next to an exported document."""
    path: str
    format: str
    generated_at: datetime = Field(default_factory=datetime.now)
    table_count: int = 0
    database: Optional[str] = None
    file_size: int = 0
    has_metadata: bool = False
    regenerated: bool = True
