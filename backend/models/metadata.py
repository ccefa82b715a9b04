"""Pydantic schemas for the human-authored metadata store and reconciliation results.

Tombstoned entries carry ``status=REMOVED`` and a ``removed_at`` timestamp and
live in their own mappings (``removed_tables`` / ``removed_columns``), keyed by
the bare element name. The ``_removed_`` key prefix is an on-disk convention
handled by ``core.metadata_store`` only.
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntryStatus(str, Enum):
    ACTIVE = "active"
    REMOVED = "removed"


def scalar_text(value: Any) -> str:
    # YAML turns `true:` into a boolean, `1:` into an int and `2024-01-01` into a date
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _optional_text(value: Any) -> Any:
    if value is None or isinstance(value, (dict, list)):
        return value
    return scalar_text(value)


def _normalize_labels(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    return {scalar_text(k): scalar_text(v) for k, v in value.items()}


class ColumnReference(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    table: str
    column: str
    label: Optional[str] = None

    @field_validator("table", "column", "label", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> Any:
        return _optional_text(v)


class ColumnMetadata(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    logical_name: Optional[str] = None
    description: Optional[str] = None
    enum_labels: Optional[dict[str, str]] = None
    boolean_labels: Optional[dict[str, str]] = None
    constraints: Optional[dict[str, Any]] = None
    references: Optional[ColumnReference] = None

    # in-memory tombstone state, never written under these names
    status: EntryStatus = EntryStatus.ACTIVE
    removed_at: Optional[datetime] = None

    @field_validator("logical_name", "description", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> Any:
        return _optional_text(v)

    @field_validator("enum_labels", "boolean_labels", mode="before")
    @classmethod
    def normalize_labels(cls, v: Any) -> Any:
        return _normalize_labels(v)

    @property
    def is_removed(self) -> bool:
        return self.status == EntryStatus.REMOVED


class TableMetadata(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    logical_name: Optional[str] = None
    description: Optional[str] = None
    columns: dict[str, ColumnMetadata] = Field(default_factory=dict)
    removed_columns: dict[str, ColumnMetadata] = Field(default_factory=dict)

    status: EntryStatus = EntryStatus.ACTIVE
    removed_at: Optional[datetime] = None

    @field_validator("logical_name", "description", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> Any:
        return _optional_text(v)

    @property
    def is_removed(self) -> bool:
        return self.status == EntryStatus.REMOVED


class GlobalSettings(BaseModel):
    """Fallbacks consulted when a table-specific annotation is absent."""
    model_config = ConfigDict(extra="allow")

    common_columns: dict[str, ColumnMetadata] = Field(default_factory=dict)
    type_labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("type_labels", mode="before")
    @classmethod
    def normalize_labels(cls, v: Any) -> Any:
        return _normalize_labels(v)


class MetadataStore(BaseModel):
    model_config = ConfigDict(extra="allow")

    tables: dict[str, TableMetadata] = Field(default_factory=dict)
    removed_tables: dict[str, TableMetadata] = Field(default_factory=dict)
    settings: Optional[GlobalSettings] = None   # None = absent from the file


def default_global_settings() -> GlobalSettings:
    """Settings written into a freshly bootstrapped store."""
    return GlobalSettings(
        common_columns={
            "created_at": ColumnMetadata(
                logical_name="Created at",
                description="Timestamp at which the record was created",
            ),
            "updated_at": ColumnMetadata(
                logical_name="Updated at",
                description="Timestamp at which the record was last updated",
            ),
            "deleted_at": ColumnMetadata(
                logical_name="Deleted at",
                description="Timestamp at which the record was soft-deleted",
            ),
        },
        type_labels={},
    )


# ── Reconciliation results ────────────────────────────────────────────────────

class UpdateStats(BaseModel):
    new_tables: int = 0
    new_columns: int = 0
    removed_tables: int = 0
    removed_columns: int = 0
    preserved_items: int = 0
    backup_path: Optional[str] = None
    backup_failed: bool = False


class TableDiff(BaseModel):
    new_columns: list[str] = Field(default_factory=list)
    removed_columns: list[str] = Field(default_factory=list)


class MetadataDiff(BaseModel):
    new_tables: list[str] = Field(default_factory=list)
    removed_tables: list[str] = Field(default_factory=list)
    modified_tables: dict[str, TableDiff] = Field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.new_tables or self.removed_tables or self.modified_tables)
