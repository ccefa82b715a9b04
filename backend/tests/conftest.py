import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
from datetime import datetime
from fastapi.testclient import TestClient

from config import settings
from core.metadata_store import MetadataFileStore
from core.reconciler import MetadataReconciler
from models.schema import SchemaColumn, SchemaTable

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5)

DDL = [
    """
    CREATE TABLE customers (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        VARCHAR(100) NOT NULL,
        email       VARCHAR(255) UNIQUE NOT NULL,
        is_active   BOOLEAN DEFAULT 1,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE orders (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id     INTEGER NOT NULL REFERENCES customers(id) ON DELETE CASCADE,
        status          VARCHAR(20) NOT NULL,
        total_amount    NUMERIC(10, 2),
        CHECK (status IN ('PENDING','SHIPPED','CANCELLED'))
    )""",
    "CREATE INDEX ix_orders_status ON orders (status)",
    "CREATE TABLE migrations (id INTEGER PRIMARY KEY, name TEXT)",
]


@pytest.fixture
def temp_sqlite_db(tmp_path):
    path = tmp_path / "demo.db"
    conn = sqlite3.connect(path)
    cur = conn.cursor()
    for stmt in DDL:
        cur.execute(stmt)
    conn.commit()
    conn.close()
    yield str(path)


@pytest.fixture
def metadata_path(tmp_path):
    return tmp_path / "table_metadata.yaml"


@pytest.fixture
def file_store(metadata_path):
    return MetadataFileStore(metadata_path)


@pytest.fixture
def make_reconciler(file_store):
    def _make(clock=lambda: FIXED_NOW):
        return MetadataReconciler(file_store, clock=clock)
    return _make


@pytest.fixture
def schema_tables():
    return [
        SchemaTable(
            name="users",
            comment="User|Registered application users",
            columns=[
                SchemaColumn(name="id", type="bigint", nullable=False, auto_increment=True),
                SchemaColumn(name="name", type="varchar", length=100, comment="User name|Display name"),
                SchemaColumn(name="role", type="enum", enum_values=["admin", "member"], comment="Role"),
                SchemaColumn(name="is_active", type="tinyint"),
                SchemaColumn(name="created_at", type="timestamp"),
            ],
            primary_key=["id"],
        ),
        SchemaTable(
            name="orders",
            comment="Orders",
            columns=[
                SchemaColumn(name="id", type="bigint", nullable=False),
                SchemaColumn(name="status", type="varchar", length=20, comment="Status"),
                SchemaColumn(name="total", type="decimal(10,2)"),
            ],
            primary_key=["id"],
        ),
    ]


@pytest.fixture
def app_settings(monkeypatch, temp_sqlite_db, metadata_path, tmp_path):
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{temp_sqlite_db}")
    monkeypatch.setattr(settings, "METADATA_PATH", str(metadata_path))
    monkeypatch.setattr(settings, "OUTPUT_DIR", str(tmp_path / "docs"))
    monkeypatch.setattr(settings, "EXCLUDE_TABLES", "migrations")
    return settings


@pytest.fixture
def client(app_settings):
    from main import app
    with TestClient(app) as test_client:
        yield test_client
