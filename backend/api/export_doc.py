"""GET /api/tables, /api/export — enriched table definitions and rendered documents."""
import logging
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse

from core.exceptions import CorruptStoreError, IntrospectionError, TableNotFoundError
from core.export_builder import build_json, build_markdown
from core.table_document import get_service
from models.documentation import DocumentInfo, EnrichedTable

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/tables", response_model=list[EnrichedTable])
def list_tables():
    try:
        return get_service().get_all_tables_info()
    except CorruptStoreError as e:
        raise HTTPException(409, detail=str(e))
    except IntrospectionError as e:
        raise HTTPException(502, detail=str(e))


@router.get("/tables/{table_name}", response_model=EnrichedTable)
def get_table(table_name: str):
    try:
        return get_service().get_table_info(table_name)
    except TableNotFoundError:
        raise HTTPException(404, detail=f"Table '{table_name}' not found")
    except CorruptStoreError as e:
        raise HTTPException(409, detail=str(e))
    except IntrospectionError as e:
        raise HTTPException(502, detail=str(e))


@router.get("/export")
def export(format: str = Query("json", pattern="^(json|markdown)$")):
    try:
        service = get_service()
        tables = service.get_all_tables_info()
    except CorruptStoreError as e:
        raise HTTPException(409, detail=str(e))
    except IntrospectionError as e:
        raise HTTPException(502, detail=str(e))

    database = service.connection.database_label
    if format == "json":
        return build_json(tables, database)
    md = build_markdown(tables, database)
    return PlainTextResponse(content=md, media_type="text/markdown")


@router.post("/export", response_model=DocumentInfo)
def export_to_disk(
    format: str = Query("markdown", pattern="^(json|markdown)$"),
    force: bool = False,
):
    try:
        return get_service().export(format, force=force)
    except CorruptStoreError as e:
        raise HTTPException(409, detail=str(e))
    except IntrospectionError as e:
        raise HTTPException(502, detail=str(e))
    except OSError as e:
        logger.exception("Export failed")
        raise HTTPException(500, detail=f"Export failed: {e}")
