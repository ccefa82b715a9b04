"""
tabledoc — database table definition documents with a hand-edited metadata store.
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import health, metadata, export_doc
from config import settings

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("tabledoc")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("tabledoc starting up (metadata: %s)", settings.METADATA_PATH)
    yield
    logger.info("tabledoc shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="tabledoc",
    description="Table definition documents enriched with a reconciled metadata store.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router,     prefix="/api")
app.include_router(metadata.router,   prefix="/api")
app.include_router(export_doc.router, prefix="/api")
