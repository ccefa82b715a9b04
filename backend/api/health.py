"""GET /api/health — database and metadata file check."""
import logging
from fastapi import APIRouter
from sqlalchemy import create_engine, text

from config import settings
from core.exceptions import CorruptStoreError
from core.metadata_store import MetadataFileStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    db_status = _check_database()
    md_status = _check_metadata()
    overall = "ok" if db_status["status"] == "up" and md_status["status"] != "corrupt" else "degraded"
    return {
        "status": overall,
        "services": {
            "database": db_status,
            "metadata": md_status,
        },
    }


def _check_database() -> dict:
    try:
        engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        finally:
            engine.dispose()
        return {"status": "up", "dialect": engine.dialect.name}
    except Exception as e:
        return {"status": "down", "error": str(e)}


def _check_metadata() -> dict:
    store = MetadataFileStore(settings.METADATA_PATH)
    if not store.exists():
        return {"status": "missing", "path": str(store.path)}
    try:
        metadata = store.load()
    except CorruptStoreError as e:
        logger.warning("Health check found corrupt metadata: %s", e)
        return {"status": "corrupt", "path": str(store.path), "error": e.reason}
    return {
        "status": "present",
        "path": str(store.path),
        "tables": len(metadata.tables),
        "removed_tables": len(metadata.removed_tables),
    }
