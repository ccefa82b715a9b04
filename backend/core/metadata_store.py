"""
Metadata store — YAML persistence for human-authored table/column annotations.

On disk, tombstoned entries are kept under a "_removed_<name>" key and carry
"_removed_at" / "_status" fields. In memory they are split out into
MetadataStore.removed_tables and TableMetadata.removed_columns.
"""
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from core.exceptions import BackupError, CorruptStoreError
from models.metadata import ColumnMetadata, EntryStatus, MetadataStore, TableMetadata, scalar_text

logger = logging.getLogger(__name__)

REMOVED_PREFIX = "_removed_"
REMOVED_AT_KEY = "_removed_at"
STATUS_KEY = "_status"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
BACKUP_STAMP_FORMAT = "%Y%m%d%H%M%S"

_ENTRY_STATE = {"status", "removed_at"}

_BOOL_TAG = "tag:yaml.org,2002:bool"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class StoreLoader(yaml.SafeLoader):
    """SafeLoader that keeps `yes`, `No`, `on`, `off` and dates as plain text.

    Labels such as `logical_name: No` are common in hand-edited files; only
    `true` / `false` still load as booleans.
    """


StoreLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_BOOL_TAG, _TIMESTAMP_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
StoreLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


# ── Document ⇄ model conversion ───────────────────────────────────────────────

def _entry_fields(key: str, data: Any) -> tuple[str, dict]:
    """Strip on-disk tombstone markers. Returns (bare name, model fields)."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"entry '{key}' must be a mapping, got {type(data).__name__}")
    fields = dict(data)
    removed_at = fields.pop(REMOVED_AT_KEY, None)
    fields.pop(STATUS_KEY, None)
    if key.startswith(REMOVED_PREFIX):
        fields["status"] = EntryStatus.REMOVED
        fields["removed_at"] = removed_at
        return key[len(REMOVED_PREFIX):], fields
    return key, fields


def _table_from_document(key: str, data: Any) -> tuple[str, TableMetadata]:
    name, fields = _entry_fields(key, data)
    columns_doc = fields.pop("columns", None) or {}
    if not isinstance(columns_doc, dict):
        raise ValueError(f"'columns' of table '{key}' must be a mapping")

    columns: dict[str, ColumnMetadata] = {}
    removed_columns: dict[str, ColumnMetadata] = {}
    for col_key, col_data in columns_doc.items():
        col_name, col_fields = _entry_fields(scalar_text(col_key), col_data)
        column = ColumnMetadata.model_validate(col_fields)
        if column.is_removed:
            removed_columns[col_name] = column
        else:
            columns[col_name] = column

    fields["columns"] = columns
    fields["removed_columns"] = removed_columns
    return name, TableMetadata.model_validate(fields)


def store_from_document(doc: dict) -> MetadataStore:
    tables_doc = doc.get("tables") or {}
    if not isinstance(tables_doc, dict):
        raise ValueError("'tables' must be a mapping")

    tables: dict[str, TableMetadata] = {}
    removed_tables: dict[str, TableMetadata] = {}
    for key, data in tables_doc.items():
        name, table = _table_from_document(scalar_text(key), data)
        if table.is_removed:
            removed_tables[name] = table
        else:
            tables[name] = table

    extra = {k: v for k, v in doc.items() if k not in ("tables", "settings")}
    return MetadataStore.model_validate({
        **extra,
        "tables": tables,
        "removed_tables": removed_tables,
        "settings": doc.get("settings"),
    })


def _with_tombstone(data: dict, entry: Union[TableMetadata, ColumnMetadata]) -> dict:
    if entry.is_removed:
        if entry.removed_at is not None:
            data[REMOVED_AT_KEY] = entry.removed_at.strftime(TIMESTAMP_FORMAT)
        data[STATUS_KEY] = EntryStatus.REMOVED.value
    return data


def _column_to_document(column: ColumnMetadata) -> dict:
    data = column.model_dump(exclude_unset=True, exclude=_ENTRY_STATE)
    return _with_tombstone(data, column)


def _table_to_document(table: TableMetadata) -> dict:
    data = table.model_dump(exclude_unset=True, exclude=_ENTRY_STATE | {"columns", "removed_columns"})
    columns = {name: _column_to_document(c) for name, c in table.columns.items()}
    for name, c in table.removed_columns.items():
        columns[REMOVED_PREFIX + name] = _column_to_document(c)
    data["columns"] = columns
    return _with_tombstone(data, table)


def store_to_document(store: MetadataStore) -> dict:
    tables = {name: _table_to_document(t) for name, t in store.tables.items()}
    for name, t in store.removed_tables.items():
        tables[REMOVED_PREFIX + name] = _table_to_document(t)

    doc: dict[str, Any] = {"tables": tables}
    doc["settings"] = store.settings.model_dump(exclude_unset=True) if store.settings is not None else {}
    doc.update(store.model_extra or {})
    return doc


def dump_store(store: MetadataStore) -> str:
    return yaml.safe_dump(
        store_to_document(store),
        sort_keys=False,
        allow_unicode=True,
        indent=2,
        default_flow_style=False,
    )


# ── File access ───────────────────────────────────────────────────────────────

class MetadataFileStore:
    """Reads, writes and backs up the metadata YAML file at a fixed path."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> MetadataStore:
        """Parse the file. A missing or empty file yields an empty store."""
        if not self.exists():
            return MetadataStore()
        try:
            raw = yaml.load(self.path.read_text(encoding="utf-8"), Loader=StoreLoader)
        except yaml.YAMLError as e:
            raise CorruptStoreError(str(self.path), str(e)) from e

        if raw is None:
            return MetadataStore()
        if not isinstance(raw, dict):
            raise CorruptStoreError(str(self.path), "top level is not a mapping")
        try:
            return store_from_document(raw)
        except (ValidationError, ValueError) as e:
            raise CorruptStoreError(str(self.path), str(e)) from e

    def persist(self, store: MetadataStore) -> None:
        """Replace the file with the serialized store."""
        text = dump_store(store)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding="utf-8")
        logger.debug("Wrote %d bytes of metadata to %s", len(text), self.path)

    def backup_path_for(self, when: datetime) -> Path:
        return self.path.with_name(f"{self.path.name}.backup.{when.strftime(BACKUP_STAMP_FORMAT)}")

    def backup(self, now: Optional[datetime] = None, strict: bool = False) -> Optional[Path]:
        """
        Copy the current file to "<path>.backup.<YYYYMMDDHHMMSS>".
        Returns None when there is nothing to back up, or when the copy fails
        and strict is False.
        """
        if not self.exists():
            return None
        target = self.backup_path_for(now or datetime.now())
        try:
            shutil.copy2(self.path, target)
        except OSError as e:
            if strict:
                raise BackupError(f"Could not back up {self.path} to {target}: {e}") from e
            logger.warning("Metadata backup to %s failed: %s", target, e)
            return None
        logger.info("Backed up metadata to %s", target)
        return target
