"""
Document builders — JSON and Markdown table definitions from enriched tables,
plus on-disk export with a meta.json sidecar.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from models.documentation import DocumentInfo, EnrichedColumn, EnrichedTable

logger = logging.getLogger(__name__)

DOCUMENT_BASENAME = "table_definition"
SIDECAR_NAME = "meta.json"
EXTENSIONS = {"json": "json", "markdown": "md"}


def build_json(tables: list[EnrichedTable], database: Optional[str] = None) -> dict:
    return {
        "database": database,
        "generated_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "table_count": len(tables),
        "tables": [t.model_dump(mode="json") for t in tables],
    }


def _cell(value) -> str:
    if value is None or value == "":
        return ""
    return str(value).replace("|", "\\|").replace("\n", " ")


def _type_text(col: EnrichedColumn) -> str:
    text = col.type
    if col.length:
        text += f"({col.length})"
    elif col.precision is not None and col.scale is not None and col.type in ("decimal", "numeric"):
        text += f"({col.precision},{col.scale})"
    if col.unsigned:
        text += " unsigned"
    if col.type_label and col.type_label != col.type:
        text += f" — {col.type_label}"
    return text


def _notes(col: EnrichedColumn) -> str:
    notes = []
    if col.enum_values:
        labels = col.enum_labels or {}
        notes.append(", ".join(f"{v}: {labels.get(v, v)}" for v in col.enum_values))
    if col.boolean_labels:
        notes.append(", ".join(f"{k}: {v}" for k, v in col.boolean_labels.items()))
    c = col.constraints
    if "min_value" in c or "max_value" in c:
        notes.append(f"range {c.get('min_value', '')} … {c.get('max_value', '')}")
    if "max_length" in c:
        notes.append(f"max length {c['max_length']}")
    checks = c.get("check_constraints") or []
    if not isinstance(checks, list):
        checks = [checks]
    for check in checks:
        # hand-written constraints may be plain clause strings
        clause = check.get("clause") if isinstance(check, dict) else check
        notes.append(f"CHECK {clause}")
    if col.reference:
        ref = f"→ {col.reference.table}.{col.reference.column}"
        if col.reference.label:
            ref += f" ({col.reference.label})"
        notes.append(ref)
    if col.auto_increment:
        notes.append("auto increment")
    return "; ".join(notes)


def build_markdown(tables: list[EnrichedTable], database: Optional[str] = None) -> str:
    lines = [f"# Table definitions{f' — {database}' if database else ''}", ""]
    lines.append(f"_Generated {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} · {len(tables)} tables_")
    lines.append("")

    for t in tables:
        heading = f"## {t.name}"
        if t.logical_name:
            heading += f" ({t.logical_name})"
        lines += [heading, ""]
        if t.description:
            lines += [t.description, ""]
        if t.primary_key:
            lines += [f"Primary key: `{', '.join(t.primary_key)}`", ""]

        lines.append("| # | Column | Logical name | Type | Null | Default | Description | Notes |")
        lines.append("|---|---|---|---|---|---|---|---|")
        for i, col in enumerate(t.columns, 1):
            lines.append(
                f"| {i} | `{col.name}` | {_cell(col.logical_name)} | {_cell(_type_text(col))} "
                f"| {'YES' if col.nullable else 'NO'} | {_cell(col.default)} "
                f"| {_cell(col.description)} | {_cell(_notes(col))} |"
            )
        lines.append("")

        secondary = [i for i in t.indexes if not i.is_primary]
        if secondary:
            lines.append("**Indexes**")
            lines.append("")
            for idx in secondary:
                kind = "UNIQUE " if idx.is_unique else ""
                lines.append(f"- {kind}`{idx.name or '(unnamed)'}` ({', '.join(idx.columns)})")
            lines.append("")

        if t.foreign_keys:
            lines.append("**Foreign keys**")
            lines.append("")
            for fk in t.foreign_keys:
                rule = ""
                if fk.on_delete or fk.on_update:
                    rule = f" ON DELETE {fk.on_delete or '-'} ON UPDATE {fk.on_update or '-'}"
                lines.append(
                    f"- `{fk.name or '(unnamed)'}`: ({', '.join(fk.columns)}) → "
                    f"{fk.foreign_table}({', '.join(fk.foreign_columns)}){rule}"
                )
            lines.append("")

    return "\n".join(lines)


def read_document_info(output_dir: Union[str, Path]) -> Optional[DocumentInfo]:
    path = Path(output_dir) / SIDECAR_NAME
    if not path.exists():
        return None
    try:
        return DocumentInfo.model_validate_json(path.read_text(encoding="utf-8"))
    except ValueError as e:
        logger.warning("Ignoring unreadable document info %s: %s", path, e)
        return None


def export_document(
    tables: list[EnrichedTable],
    output_dir: Union[str, Path],
    fmt: str = "markdown",
    database: Optional[str] = None,
    has_metadata: bool = False,
    force: bool = False,
) -> DocumentInfo:
    """Write the document and its sidecar. Without force, an existing document is kept."""
    if fmt not in EXTENSIONS:
        raise ValueError(f"Unknown format '{fmt}'. Use one of: {', '.join(EXTENSIONS)}")
    out_dir = Path(output_dir)
    path = out_dir / f"{DOCUMENT_BASENAME}.{EXTENSIONS[fmt]}"

    if not force and path.exists():
        info = read_document_info(out_dir)
        if info is not None and info.path == str(path):
            return info.model_copy(update={"regenerated": False})
        return DocumentInfo(path=str(path), format=fmt, file_size=path.stat().st_size, regenerated=False)

    if fmt == "json":
        content = json.dumps(build_json(tables, database), indent=2, ensure_ascii=False)
    else:
        content = build_markdown(tables, database)

    out_dir.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")

    info = DocumentInfo(
        path=str(path),
        format=fmt,
        table_count=len(tables),
        database=database,
        file_size=path.stat().st_size,
        has_metadata=has_metadata,
    )
    (out_dir / SIDECAR_NAME).write_text(info.model_dump_json(indent=2), encoding="utf-8")
    logger.info("Exported %d tables to %s", len(tables), path)
    return info
