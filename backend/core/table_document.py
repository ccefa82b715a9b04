"""
Table document service — wires schema reflection, the metadata reconciler and
enrichment together for the API routes and the command line.
"""
from typing import Iterable, Optional

from config import settings
from core.db_connector import reflect_schema
from core.enrichment import enrich_table_info
from core.exceptions import TableNotFoundError
from core.export_builder import export_document
from core.metadata_store import MetadataFileStore
from core.reconciler import MetadataReconciler
from models.connection import ConnectionRequest
from models.documentation import DocumentInfo, EnrichedTable
from models.schema import SchemaTable


class TableDocumentService:
    def __init__(
        self,
        connection: ConnectionRequest,
        reconciler: MetadataReconciler,
        exclude_tables: Iterable[str] = (),
    ) -> None:
        self.connection = connection
        self.reconciler = reconciler
        self.exclude_tables = list(exclude_tables)

    def get_schema(self) -> list[SchemaTable]:
        return reflect_schema(self.connection, self.exclude_tables)

    def get_all_tables_info(self) -> list[EnrichedTable]:
        metadata = self.reconciler.metadata
        return [enrich_table_info(t, metadata) for t in self.get_schema()]

    def get_table_info(self, table_name: str) -> EnrichedTable:
        for table in self.get_schema():
            if table.name == table_name:
                return enrich_table_info(table, self.reconciler.metadata)
        raise TableNotFoundError(table_name)

    def export(self, fmt: str, output_dir: Optional[str] = None, force: bool = False) -> DocumentInfo:
        self.reconciler.reload()
        return export_document(
            self.get_all_tables_info(),
            output_dir or settings.OUTPUT_DIR,
            fmt=fmt,
            database=self.connection.database_label,
            has_metadata=self.reconciler.exists(),
            force=force,
        )


def get_service() -> TableDocumentService:
    """Build a service from the current settings. The metadata file is read on every call."""
    connection = ConnectionRequest.from_url(settings.DATABASE_URL, db_schema=settings.DB_SCHEMA)
    reconciler = MetadataReconciler(MetadataFileStore(settings.METADATA_PATH))
    return TableDocumentService(connection, reconciler, settings.exclude_table_list)
