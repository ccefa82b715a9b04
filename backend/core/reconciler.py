"""
Reconciliation engine — keeps the hand-edited metadata store in step with the
live schema without ever discarding human-authored content.

  generate  bootstrap a store from a schema snapshot (delegates to update
            unless forced when a store already exists)
  update    merge a snapshot into the store: preserve known entries, seed new
            ones from catalog comments, tombstone vanished ones
  cleanup   permanently drop tombstoned entries
  diff      read-only preview of what update would change
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from core.comment_parser import parse_comment
from core.exceptions import BackupError
from core.metadata_store import REMOVED_PREFIX, MetadataFileStore
from models.metadata import (
    ColumnMetadata,
    EntryStatus,
    GlobalSettings,
    MetadataDiff,
    MetadataStore,
    TableDiff,
    TableMetadata,
    UpdateStats,
    default_global_settings,
)
from models.schema import SchemaColumn, SchemaTable

logger = logging.getLogger(__name__)


# ── Seeding from catalog comments ─────────────────────────────────────────────

def seed_table(table: SchemaTable) -> TableMetadata:
    parsed = parse_comment(table.comment)
    return TableMetadata(
        logical_name=parsed["logical_name"],
        description=parsed["description"],
        columns={},
    )


def seed_column(column: SchemaColumn) -> ColumnMetadata:
    """New column entry; enum values get identity labels so they can be edited in place."""
    parsed = parse_comment(column.comment)
    if column.enum_values:
        return ColumnMetadata(
            logical_name=parsed["logical_name"],
            description=parsed["description"],
            enum_labels={value: value for value in column.enum_values},
        )
    return ColumnMetadata(logical_name=parsed["logical_name"], description=parsed["description"])


def _tombstone(entry, removed_at: datetime):
    return entry.model_copy(update={"status": EntryStatus.REMOVED, "removed_at": removed_at}, deep=True)


def _archive_tombstone(removed: dict, name: str) -> str:
    """Move the tombstone under `name` one prefix deeper so a newer one can take its key.

    A table removed twice ends up as `_removed_orders` (latest) and
    `_removed__removed_orders` (earlier) on disk. Returns the archived key.
    """
    archived = REMOVED_PREFIX + name
    if archived in removed:
        _archive_tombstone(removed, archived)
    removed[archived] = removed.pop(name)
    return archived


# ── Engine ────────────────────────────────────────────────────────────────────

class MetadataReconciler:
    """Merges schema snapshots into a MetadataFileStore.

    Attributes:
        store: File-backed metadata store.
        defaults: Settings used when the store carries none.
        metadata: In-memory copy of the store, refreshed after every write.
    """

    def __init__(
        self,
        store: MetadataFileStore,
        defaults: Optional[GlobalSettings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.defaults = defaults if defaults is not None else default_global_settings()
        self._clock = clock
        self.metadata: MetadataStore = store.load()

    def reload(self) -> None:
        self.metadata = self.store.load()

    def exists(self) -> bool:
        return self.store.exists()

    def _now(self) -> datetime:
        return self._clock().replace(microsecond=0)

    def _write(self, metadata: MetadataStore) -> None:
        self.store.persist(metadata)
        self.reload()

    # ── Bootstrap ─────────────────────────────────────────────────────────────

    def generate(self, tables: list[SchemaTable], force: bool = False) -> Optional[UpdateStats]:
        """Write a brand-new store. Without force, an existing store is updated instead."""
        if not force and self.store.exists():
            logger.info("Metadata file %s exists; merging instead of overwriting", self.store.path)
            return self.update(tables)

        metadata = MetadataStore(settings=self.defaults.model_copy(deep=True))
        for table in tables:
            entry = seed_table(table)
            for column in table.columns:
                entry.columns[column.name] = seed_column(column)
            metadata.tables[table.name] = entry

        self._write(metadata)
        logger.info("Generated metadata for %d tables at %s", len(tables), self.store.path)
        return None

    # ── Update ────────────────────────────────────────────────────────────────

    def update(self, tables: list[SchemaTable], backup: bool = True) -> UpdateStats:
        stats = UpdateStats()
        now = self._now()

        if backup and self.store.exists():
            try:
                path = self.store.backup(now=now, strict=True)
                stats.backup_path = str(path) if path else None
            except BackupError as e:
                logger.warning("Continuing update without a backup: %s", e)
                stats.backup_failed = True

        existing = self.metadata
        merged = MetadataStore(
            settings=existing.settings if existing.settings is not None else self.defaults.model_copy(deep=True),
            **(existing.model_extra or {}),
        )

        current_names = set()
        for table in tables:
            current_names.add(table.name)
            old_table = existing.tables.get(table.name)

            if old_table is not None:
                entry = TableMetadata(
                    logical_name=old_table.logical_name,
                    description=old_table.description,
                    columns={},
                    **(old_table.model_extra or {}),
                )
                stats.preserved_items += 1
            else:
                entry = seed_table(table)
                stats.new_tables += 1

            for column in table.columns:
                old_column = old_table.columns.get(column.name) if old_table is not None else None
                if old_column is not None:
                    entry.columns[column.name] = old_column.model_copy(deep=True)
                    stats.preserved_items += 1
                else:
                    entry.columns[column.name] = seed_column(column)
                    stats.new_columns += 1

            # tombstones go in after the live columns
            current_columns = set(table.column_names)
            carried = old_table.removed_columns if old_table is not None else {}
            entry.removed_columns = {
                name: c.model_copy(deep=True) for name, c in carried.items()
            }
            if old_table is not None:
                for name, old_column in old_table.columns.items():
                    if name in current_columns:
                        continue
                    if name in entry.removed_columns:
                        archived = _archive_tombstone(entry.removed_columns, name)
                        logger.warning(
                            "Column %s.%s removed again; earlier tombstone kept as %s", table.name, name, archived,
                        )
                    entry.removed_columns[name] = _tombstone(old_column, now)
                    stats.removed_columns += 1

            merged.tables[table.name] = entry

        merged.removed_tables = {name: t.model_copy(deep=True) for name, t in existing.removed_tables.items()}
        for name, old_table in existing.tables.items():
            if name in current_names:
                continue
            if name in merged.removed_tables:
                archived = _archive_tombstone(merged.removed_tables, name)
                logger.warning("Table %s removed again; earlier tombstone kept as %s", name, archived)
            merged.removed_tables[name] = _tombstone(old_table, now)
            stats.removed_tables += 1

        self._write(merged)
        logger.info(
            "Metadata updated: %d new tables, %d new columns, %d removed tables, "
            "%d removed columns, %d preserved",
            stats.new_tables, stats.new_columns, stats.removed_tables,
            stats.removed_columns, stats.preserved_items,
        )
        return stats

    # ── Cleanup ───────────────────────────────────────────────────────────────

    def cleanup_removed_items(self) -> int:
        """Drop every tombstone. Columns of a dropped table are not counted separately."""
        count = len(self.metadata.removed_tables)
        for table in self.metadata.tables.values():
            count += len(table.removed_columns)
        if count == 0:
            return 0

        cleaned = self.metadata.model_copy(deep=True)
        cleaned.removed_tables = {}
        for table in cleaned.tables.values():
            table.removed_columns = {}

        self._write(cleaned)
        logger.info("Cleaned up %d removed metadata entries", count)
        return count

    # ── Diff ──────────────────────────────────────────────────────────────────

    def get_diff(self, tables: list[SchemaTable]) -> MetadataDiff:
        """Compare a snapshot with the store without touching either.

        Tombstoned names count as absent, so a re-introduced table or column
        is reported as new, matching what update would do.
        """
        stored = self.metadata.tables
        current_names = {t.name for t in tables}
        diff = MetadataDiff(
            new_tables=[t.name for t in tables if t.name not in stored],
            removed_tables=[name for name in stored if name not in current_names],
        )

        for table in tables:
            old_table = stored.get(table.name)
            if old_table is None:
                continue
            current_columns = set(table.column_names)
            new_columns = [c for c in table.column_names if c not in old_table.columns]
            removed_columns = [c for c in old_table.columns if c not in current_columns]
            if new_columns or removed_columns:
                diff.modified_tables[table.name] = TableDiff(
                    new_columns=new_columns,
                    removed_columns=removed_columns,
                )
        return diff
