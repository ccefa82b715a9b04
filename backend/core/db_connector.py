"""
Database connector — SQLAlchemy engine factory and schema reflection.
Produces one SchemaTable per table: columns (in ordinal order), indexes,
foreign keys, primary key, catalog comments and derived value constraints.
"""
import logging
import re
from typing import Iterable, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy import types as sqltypes
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from core.exceptions import IntrospectionError
from models.connection import ConnectionRequest
from models.schema import SchemaColumn, SchemaForeignKey, SchemaIndex, SchemaTable

logger = logging.getLogger(__name__)

INTEGER_RANGES = {
    "tinyint":   (-128, 127, 255),
    "smallint":  (-32768, 32767, 65535),
    "mediumint": (-8388608, 8388607, 16777215),
    "int":       (-2147483648, 2147483647, 4294967295),
    "bigint":    ("-9223372036854775808", "9223372036854775807", "18446744073709551615"),
}

CHARACTER_TYPES = {"char", "varchar", "nchar", "nvarchar", "character varying", "character"}

# CHECK (status IN ('a', 'b')), column name quoted or bare
_CHECK_IN = re.compile(r"""^\s*\(?\s*["`\[]?(\w+)["`\]]?\s+IN\s*\((.*)\)\s*\)?\s*$""", re.IGNORECASE | re.DOTALL)
_QUOTED = re.compile(r"'((?:[^']|'')*)'")


def create_engine_from_request(req: ConnectionRequest):
    """Build and test a SQLAlchemy engine from a ConnectionRequest."""
    url = req.get_sqlalchemy_url()
    engine = create_engine(url, pool_pre_ping=True)
    # Validate the connection immediately
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except OperationalError as e:
        engine.dispose()
        raise IntrospectionError(f"Could not connect to database: {e}") from e
    return engine


def _get_default_schema(engine, req: ConnectionRequest) -> Optional[str]:
    if req.db_schema:
        return req.db_schema
    if engine.dialect.name == "postgresql":
        return "public"
    return None   # SQLite has no schema concept, MySQL uses the database


def reflect_schema(req: ConnectionRequest, exclude_tables: Iterable[str] = ()) -> list[SchemaTable]:
    """
    Reflect all tables from the target database.
    Raises IntrospectionError on any failure; never returns a partial snapshot.
    """
    engine = create_engine_from_request(req)
    try:
        insp = inspect(engine)
        schema_name = _get_default_schema(engine, req)
        excluded = set(exclude_tables)
        table_names = [t for t in insp.get_table_names(schema=schema_name) if t not in excluded]
        logger.info("Discovered %d tables in %s", len(table_names), req.database_label)
        return [_reflect_table(insp, name, schema_name) for name in table_names]
    except SQLAlchemyError as e:
        raise IntrospectionError(f"Schema reflection failed: {e}") from e
    finally:
        engine.dispose()


def _reflect_table(insp, table_name: str, schema: Optional[str]) -> SchemaTable:
    checks = _check_constraints(insp, table_name, schema)
    pk = insp.get_pk_constraint(table_name, schema=schema) or {}
    pk_cols = pk.get("constrained_columns") or []

    options = {}
    try:
        options = insp.get_table_options(table_name, schema=schema)
    except NotImplementedError:
        pass

    return SchemaTable(
        name=table_name,
        comment=_table_comment(insp, table_name, schema),
        columns=[_reflect_column(col, checks, insp.dialect.name) for col in insp.get_columns(table_name, schema=schema)],
        indexes=_reflect_indexes(insp, table_name, schema, pk_cols),
        foreign_keys=_reflect_foreign_keys(insp, table_name, schema),
        primary_key=list(pk_cols) or None,
        engine=options.get("mysql_engine") or options.get("mariadb_engine"),
        collation=options.get("mysql_collate") or options.get("mariadb_collate"),
    )


def _table_comment(insp, table_name: str, schema: Optional[str]) -> Optional[str]:
    try:
        return insp.get_table_comment(table_name, schema=schema).get("text")
    except NotImplementedError:
        return None


def _check_constraints(insp, table_name: str, schema: Optional[str]) -> list[dict]:
    try:
        return insp.get_check_constraints(table_name, schema=schema)
    except NotImplementedError:
        return []


def type_name(col_type) -> str:
    """Lower-case base type name: VARCHAR(100) → varchar, Enum → enum."""
    if isinstance(col_type, sqltypes.Enum):
        return "enum"
    try:
        compiled = str(col_type)
    except Exception:
        compiled = col_type.__class__.__name__
    return compiled.lower().split("(")[0].replace(" unsigned", "").replace(" zerofill", "").strip()


def _enum_from_checks(column_name: str, checks: list[dict]) -> Optional[list[str]]:
    for check in checks:
        m = _CHECK_IN.match(check.get("sqltext") or "")
        if m and m.group(1) == column_name:
            values = [v.replace("''", "'") for v in _QUOTED.findall(m.group(2))]
            if values:
                return values
    return None


def column_constraints(
    base: str, unsigned: bool, length: Optional[int],
    precision: Optional[int], scale: Optional[int],
    column_name: str, checks: list[dict], dialect: str = "",
) -> dict:
    constraints: dict = {}

    range_key = "int" if base == "integer" and dialect != "sqlite" else base
    if range_key in INTEGER_RANGES:
        lo, hi, unsigned_hi = INTEGER_RANGES[range_key]
        constraints["min_value"] = 0 if unsigned else lo
        constraints["max_value"] = unsigned_hi if unsigned else hi

    if base in ("decimal", "numeric") and precision is not None and scale is not None:
        max_value = "9" * (precision - scale) + "." + "9" * scale
        constraints["max_value"] = max_value
        constraints["min_value"] = "-" + max_value
        constraints["precision"] = precision
        constraints["scale"] = scale

    if base in CHARACTER_TYPES and length:
        constraints["max_length"] = length

    mentioned = [
        {"name": c.get("name"), "clause": c.get("sqltext")}
        for c in checks
        if re.search(rf"\b{re.escape(column_name)}\b", c.get("sqltext") or "")
    ]
    if mentioned:
        constraints["check_constraints"] = mentioned
    return constraints


def _reflect_column(col: dict, checks: list[dict], dialect: str) -> SchemaColumn:
    col_type = col["type"]
    base = type_name(col_type)
    length = getattr(col_type, "length", None)
    precision = getattr(col_type, "precision", None) if isinstance(col_type, sqltypes.Numeric) else None
    scale = getattr(col_type, "scale", None) if isinstance(col_type, sqltypes.Numeric) else None
    unsigned = bool(getattr(col_type, "unsigned", False))

    enum_values = None
    if isinstance(col_type, sqltypes.Enum):
        enum_values = list(col_type.enums) or None
    else:
        enum_values = _enum_from_checks(col["name"], checks)

    default = col.get("default")
    return SchemaColumn(
        name=col["name"],
        type=base,
        length=length if isinstance(length, int) else None,
        precision=precision,
        scale=scale,
        unsigned=unsigned,
        nullable=col.get("nullable", True),
        default=str(default) if default is not None else None,
        comment=col.get("comment"),
        auto_increment=col.get("autoincrement") is True,
        enum_values=enum_values,
        constraints=column_constraints(base, unsigned, length, precision, scale, col["name"], checks, dialect),
    )


def _reflect_indexes(insp, table_name: str, schema: Optional[str], pk_cols: list[str]) -> list[SchemaIndex]:
    indexes = []
    if pk_cols:
        indexes.append(SchemaIndex(name="PRIMARY", columns=list(pk_cols), is_unique=True, is_primary=True))
    for idx in insp.get_indexes(table_name, schema=schema):
        indexes.append(SchemaIndex(
            name=idx.get("name"),
            columns=[c for c in idx.get("column_names", []) if c],
            is_unique=bool(idx.get("unique")),
        ))
    for uc in insp.get_unique_constraints(table_name, schema=schema):
        if any(i.name == uc.get("name") for i in indexes if uc.get("name")):
            continue
        indexes.append(SchemaIndex(name=uc.get("name"), columns=uc.get("column_names", []), is_unique=True))
    return indexes


def _reflect_foreign_keys(insp, table_name: str, schema: Optional[str]) -> list[SchemaForeignKey]:
    fks = []
    for fk in insp.get_foreign_keys(table_name, schema=schema):
        options = fk.get("options") or {}
        fks.append(SchemaForeignKey(
            name=fk.get("name"),
            columns=fk.get("constrained_columns", []),
            foreign_table=fk["referred_table"],
            foreign_columns=fk.get("referred_columns", []),
            on_delete=options.get("ondelete"),
            on_update=options.get("onupdate"),
        ))
    return fks
