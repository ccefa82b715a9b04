"""
Enrichment projector — overlays metadata annotations on a reflected table for rendering.

Lookup order for logical names and descriptions:
  1. table/column specific metadata
  2. settings.common_columns (by column name, columns only)
  3. the raw catalog comment, parsed, when both are still empty
"""
import re
from typing import Optional

from core.comment_parser import parse_comment
from models.documentation import EnrichedColumn, EnrichedTable
from models.metadata import ColumnMetadata, ColumnReference, MetadataStore
from models.schema import SchemaTable

BOOLEAN_TYPES = {"boolean", "bool", "tinyint"}
DEFAULT_BOOLEAN_LABELS = {"true": "Enabled", "false": "Disabled"}

_TYPE_SUFFIX = re.compile(r"\(.*\)")


def _column_meta(metadata: MetadataStore, table_name: str, column_name: str) -> Optional[ColumnMetadata]:
    table = metadata.tables.get(table_name)
    if table is None:
        return None
    return table.columns.get(column_name)


def _common_column(metadata: MetadataStore, column_name: str) -> Optional[ColumnMetadata]:
    if metadata.settings is None:
        return None
    return metadata.settings.common_columns.get(column_name)


def get_table_logical_name(metadata: MetadataStore, table_name: str) -> Optional[str]:
    table = metadata.tables.get(table_name)
    return table.logical_name if table else None


def get_table_description(metadata: MetadataStore, table_name: str) -> Optional[str]:
    table = metadata.tables.get(table_name)
    return table.description if table else None


def get_column_logical_name(metadata: MetadataStore, table_name: str, column_name: str) -> Optional[str]:
    meta = _column_meta(metadata, table_name, column_name)
    value = meta.logical_name if meta else None
    if not value:
        common = _common_column(metadata, column_name)
        if common is not None:
            value = common.logical_name
    return value


def get_column_description(metadata: MetadataStore, table_name: str, column_name: str) -> Optional[str]:
    meta = _column_meta(metadata, table_name, column_name)
    value = meta.description if meta else None
    if not value:
        common = _common_column(metadata, column_name)
        if common is not None:
            value = common.description
    return value


def get_enum_labels(metadata: MetadataStore, table_name: str, column_name: str) -> dict[str, str]:
    meta = _column_meta(metadata, table_name, column_name)
    return dict(meta.enum_labels) if meta and meta.enum_labels else {}


def get_boolean_labels(metadata: MetadataStore, table_name: str, column_name: str) -> dict[str, str]:
    meta = _column_meta(metadata, table_name, column_name)
    if meta and meta.boolean_labels:
        return dict(meta.boolean_labels)
    return dict(DEFAULT_BOOLEAN_LABELS)


def get_column_constraints(metadata: MetadataStore, table_name: str, column_name: str) -> dict:
    meta = _column_meta(metadata, table_name, column_name)
    return dict(meta.constraints) if meta and meta.constraints else {}


def get_column_reference(metadata: MetadataStore, table_name: str, column_name: str) -> Optional[ColumnReference]:
    meta = _column_meta(metadata, table_name, column_name)
    return meta.references if meta else None


def base_type(type_name: str) -> str:
    """varchar(100) → varchar"""
    return _TYPE_SUFFIX.sub("", type_name.lower()).strip()


def get_type_label(metadata: MetadataStore, type_name: str) -> str:
    if metadata.settings is None:
        return type_name
    return metadata.settings.type_labels.get(base_type(type_name), type_name)


def enrich_table_info(table: SchemaTable, metadata: MetadataStore) -> EnrichedTable:
    name = table.name
    logical_name = get_table_logical_name(metadata, name)
    description = get_table_description(metadata, name)
    if not logical_name and not description and table.comment:
        parsed = parse_comment(table.comment)
        logical_name, description = parsed["logical_name"], parsed["description"]

    columns: list[EnrichedColumn] = []
    for column in table.columns:
        col = EnrichedColumn(**column.model_dump())
        col.logical_name = get_column_logical_name(metadata, name, column.name)
        col.description = get_column_description(metadata, name, column.name)
        if not col.logical_name and not col.description and column.comment:
            parsed = parse_comment(column.comment)
            col.logical_name, col.description = parsed["logical_name"], parsed["description"]

        if column.enum_values:
            labels = get_enum_labels(metadata, name, column.name)
            if labels:
                col.enum_labels = labels

        if base_type(column.type) in BOOLEAN_TYPES:
            col.boolean_labels = get_boolean_labels(metadata, name, column.name)

        extra_constraints = get_column_constraints(metadata, name, column.name)
        if extra_constraints:
            col.constraints = {**column.constraints, **extra_constraints}

        col.reference = get_column_reference(metadata, name, column.name)
        col.type_label = get_type_label(metadata, column.type)
        columns.append(col)

    return EnrichedTable(
        **table.model_dump(exclude={"columns"}),
        logical_name=logical_name,
        description=description,
        columns=columns,
    )
