from models.connection import ConnectionRequest  # noqa: F401
from models.schema import SchemaTable, SchemaColumn, SchemaIndex, SchemaForeignKey  # noqa: F401
from models.metadata import MetadataStore, TableMetadata, ColumnMetadata, GlobalSettings, UpdateStats, MetadataDiff  # noqa: F401
from models.documentation import EnrichedTable, EnrichedColumn, DocumentInfo  # noqa: F401
