from core.comment_parser import parse_comment  # noqa: F401
from core.metadata_store import MetadataFileStore  # noqa: F401
from core.reconciler import MetadataReconciler  # noqa: F401
from core.enrichment import enrich_table_info  # noqa: F401
from core.db_connector import create_engine_from_request, reflect_schema  # noqa: F401
from core.export_builder import build_json, build_markdown, export_document  # noqa: F401
