"""POST/GET /api/metadata/* — bootstrap, update, diff and cleanup of the metadata store."""
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from config import settings
from core.exceptions import CorruptStoreError, IntrospectionError
from core.table_document import TableDocumentService, get_service
from models.metadata import MetadataDiff, UpdateStats

router = APIRouter()
logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    force: bool = False


class GenerateResponse(BaseModel):
    mode: str                           # "generated" | "updated"
    metadata_path: str
    tables: int
    stats: Optional[UpdateStats] = None


class UpdateRequest(BaseModel):
    backup: Optional[bool] = None       # None = settings.BACKUP_ON_UPDATE


class CleanupResponse(BaseModel):
    removed: int


def _service() -> TableDocumentService:
    try:
        return get_service()
    except CorruptStoreError as e:
        raise HTTPException(409, detail=str(e))


def _schema(service: TableDocumentService):
    try:
        return service.get_schema()
    except IntrospectionError as e:
        raise HTTPException(502, detail=str(e))


@router.post("/metadata/generate", response_model=GenerateResponse)
def generate_metadata(req: GenerateRequest):
    service = _service()
    tables = _schema(service)
    try:
        stats = service.reconciler.generate(tables, force=req.force)
    except Exception as e:
        logger.exception("Metadata generation failed")
        raise HTTPException(500, detail=f"Metadata generation failed: {e}")
    return GenerateResponse(
        mode="updated" if stats is not None else "generated",
        metadata_path=str(service.reconciler.store.path),
        tables=len(tables),
        stats=stats,
    )


@router.post("/metadata/update", response_model=UpdateStats)
def update_metadata(req: UpdateRequest):
    service = _service()
    tables = _schema(service)
    backup = settings.BACKUP_ON_UPDATE if req.backup is None else req.backup
    try:
        return service.reconciler.update(tables, backup=backup)
    except Exception as e:
        logger.exception("Metadata update failed")
        raise HTTPException(500, detail=f"Metadata update failed: {e}")


@router.get("/metadata/diff", response_model=MetadataDiff)
def diff_metadata():
    service = _service()
    return service.reconciler.get_diff(_schema(service))


@router.post("/metadata/cleanup", response_model=CleanupResponse)
def cleanup_metadata():
    service = _service()
    try:
        removed = service.reconciler.cleanup_removed_items()
    except Exception as e:
        logger.exception("Metadata cleanup failed")
        raise HTTPException(500, detail=f"Metadata cleanup failed: {e}")
    return CleanupResponse(removed=removed)
