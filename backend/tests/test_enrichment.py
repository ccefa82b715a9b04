import pytest
from core.enrichment import base_type, enrich_table_info, get_type_label, DEFAULT_BOOLEAN_LABELS
from models.metadata import (
    ColumnMetadata,
    ColumnReference,
    GlobalSettings,
    MetadataStore,
    TableMetadata,
    default_global_settings,
)
from models.schema import SchemaColumn, SchemaTable


@pytest.fixture
def table():
    return SchemaTable(
        name="orders",
        comment="Raw order|From the catalog",
        columns=[
            SchemaColumn(name="id", type="bigint", comment="Identifier"),
            SchemaColumn(name="status", type="enum", enum_values=["new", "paid"], constraints={"max_length": 10}),
            SchemaColumn(name="is_gift", type="tinyint"),
            SchemaColumn(name="amount", type="decimal(10,2)", comment="Amount|Total incl. tax"),
            SchemaColumn(name="customer_id", type="bigint"),
            SchemaColumn(name="created_at", type="timestamp", comment="Catalog created"),
        ],
    )


@pytest.fixture
def metadata():
    settings = default_global_settings()
    settings.type_labels = {"decimal": "Decimal number", "bigint": "Big integer"}
    return MetadataStore(
        tables={
            "orders": TableMetadata(
                logical_name="Order",
                description="Customer orders",
                columns={
                    "status": ColumnMetadata(
                        logical_name="Status",
                        enum_labels={"new": "New", "paid": "Paid"},
                        constraints={"min_length": 3},
                    ),
                    "is_gift": ColumnMetadata(logical_name="Gift", boolean_labels={"true": "Gift", "false": "Normal"}),
                    "customer_id": ColumnMetadata(
                        logical_name="Customer",
                        references=ColumnReference(table="customers", column="id", label="Buyer"),
                    ),
                    "amount": ColumnMetadata(logical_name="", description=""),
                },
            ),
        },
        settings=settings,
    )


def _col(enriched, name):
    return next(c for c in enriched.columns if c.name == name)


def test_table_metadata_takes_precedence(table, metadata):
    enriched = enrich_table_info(table, metadata)
    assert enriched.logical_name == "Order"
    assert enriched.description == "Customer orders"
    assert enriched.comment == "Raw order|From the catalog"


def test_table_comment_fallback(table):
    enriched = enrich_table_info(table, MetadataStore())
    assert enriched.logical_name == "Raw order"
    assert enriched.description == "From the catalog"


def test_column_lookup_precedence(table, metadata):
    enriched = enrich_table_info(table, metadata)
    # metadata
    assert _col(enriched, "status").logical_name == "Status"
    # common column default beats the catalog comment
    assert _col(enriched, "created_at").logical_name == "Created at"
    # empty metadata falls through to the parsed comment
    assert _col(enriched, "amount").logical_name == "Amount"
    assert _col(enriched, "amount").description == "Total incl. tax"
    # no metadata entry at all
    assert _col(enriched, "id").logical_name == "Identifier"


def test_enum_and_boolean_labels(table, metadata):
    enriched = enrich_table_info(table, metadata)
    assert _col(enriched, "status").enum_labels == {"new": "New", "paid": "Paid"}
    assert _col(enriched, "is_gift").boolean_labels == {"true": "Gift", "false": "Normal"}
    assert _col(enriched, "id").enum_labels is None
    assert _col(enriched, "id").boolean_labels is None


def test_boolean_labels_default(table):
    enriched = enrich_table_info(table, MetadataStore())
    assert _col(enriched, "is_gift").boolean_labels == DEFAULT_BOOLEAN_LABELS


def test_constraints_are_merged(table, metadata):
    enriched = enrich_table_info(table, metadata)
    assert _col(enriched, "status").constraints == {"max_length": 10, "min_length": 3}
    assert table.columns[1].constraints == {"max_length": 10}


def test_reference(table, metadata):
    ref = _col(enrich_table_info(table, metadata), "customer_id").reference
    assert (ref.table, ref.column, ref.label) == ("customers", "id", "Buyer")


def test_type_labels(table, metadata):
    enriched = enrich_table_info(table, metadata)
    assert _col(enriched, "amount").type_label == "Decimal number"
    assert _col(enriched, "id").type_label == "Big integer"
    assert _col(enriched, "created_at").type_label == "timestamp"


def test_absent_settings_never_raise(table):
    store = MetadataStore(tables={"orders": TableMetadata(columns={"id": ColumnMetadata()})})
    enriched = enrich_table_info(table, store)
    assert _col(enriched, "id").logical_name == "Identifier"
    assert _col(enriched, "created_at").logical_name == "Catalog created"
    assert _col(enriched, "amount").type_label == "decimal(10,2)"


def test_tombstoned_entries_are_ignored(table):
    store = MetadataStore(
        removed_tables={"orders": TableMetadata(logical_name="Old order")},
        settings=GlobalSettings(),
    )
    assert enrich_table_info(table, store).logical_name == "Raw order"


def test_base_type_and_label_lookup():
    assert base_type("VARCHAR(255)") == "varchar"
    assert base_type("decimal(10, 2) unsigned") == "decimal unsigned"
    store = MetadataStore(settings=GlobalSettings(type_labels={"varchar": "Text"}))
    assert get_type_label(store, "varchar(64)") == "Text"
    assert get_type_label(store, "json") == "json"
