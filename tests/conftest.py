"""
tests/conftest.py
Shared fixtures for the schemagen test suite.

Catalog access is faked with an in-memory ``FakeCatalog`` or, for the
integration tests, a SQLite database with an attached ``information_schema``
database.  Real file I/O is performed inside pytest's ``tmp_path``.
"""

from __future__ import annotations

import pathlib
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import pytest
import yaml
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine

from schemagen.models import (
    ColumnSchema,
    ForeignKeySchema,
    GeneratorConfig,
    SchemaGraph,
    TableSchema,
)
from schemagen.templates import BUNDLED_STUBS_DIR


# ---------------------------------------------------------------------------
# In-memory catalog
# ---------------------------------------------------------------------------


class FakeCatalog:
    """
    Catalog double returning the same row shapes as
    ``InformationSchemaCatalog``.

    ``tables`` maps a table name to a dict with optional ``columns``,
    ``primary_key`` (list of column names) and ``foreign_keys`` entries.
    """

    def __init__(self, tables: Dict[str, Dict[str, Any]]) -> None:
        self.tables = tables
        self.calls: List[Tuple[str, Optional[str]]] = []

    def list_tables(self) -> List[str]:
        self.calls.append(("list_tables", None))
        return sorted(self.tables)

    def list_columns(self, table: str) -> List[Dict[str, Any]]:
        self.calls.append(("list_columns", table))
        return list(self.tables[table].get("columns", []))

    def primary_key_columns(self, table: str) -> List[str]:
        self.calls.append(("primary_key_columns", table))
        return list(self.tables[table].get("primary_key", []))

    def list_foreign_keys(self, table: str) -> List[Dict[str, Any]]:
        self.calls.append(("list_foreign_keys", table))
        return list(self.tables[table].get("foreign_keys", []))


def column_row(
    name: str,
    data_type: str = "int",
    nullable: bool = False,
    default: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "column_name": name,
        "data_type": data_type,
        "is_nullable": "YES" if nullable else "NO",
        "column_default": default,
    }


def fk_row(column: str, table: str, referenced_column: str = "id") -> Dict[str, Any]:
    return {
        "column_name": column,
        "referenced_table_name": table,
        "referenced_column_name": referenced_column,
    }


@pytest.fixture()
def shop_catalog_data() -> Dict[str, Dict[str, Any]]:
    """products ← order_items, plus an isolated tags table."""
    return {
        "products": {
            "columns": [
                column_row("id"),
                column_row("name", "varchar"),
                column_row("price", "decimal", default="0.00"),
            ],
            "primary_key": ["id"],
        },
        "order_items": {
            "columns": [
                column_row("id"),
                column_row("product_id"),
                column_row("quantity", default="1"),
                column_row("note", "text", nullable=True),
            ],
            "primary_key": ["id"],
            "foreign_keys": [fk_row("product_id", "products")],
        },
        "tags": {
            "columns": [column_row("id"), column_row("label", "varchar")],
            "primary_key": ["id"],
        },
    }


@pytest.fixture()
def fake_catalog(shop_catalog_data: Dict[str, Dict[str, Any]]) -> FakeCatalog:
    return FakeCatalog(shop_catalog_data)


# ---------------------------------------------------------------------------
# Schema model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def shop_tables() -> List[TableSchema]:
    """Structural records without relationships, in catalog order."""
    return [
        TableSchema(
            name="order_items",
            columns=(
                ColumnSchema(name="id", data_type="int", nullable=False),
                ColumnSchema(name="product_id", data_type="int", nullable=False),
            ),
            foreign_keys=(
                ForeignKeySchema(
                    column="product_id",
                    referenced_table="products",
                    referenced_column="id",
                ),
            ),
        ),
        TableSchema(
            name="products",
            columns=(
                ColumnSchema(name="id", data_type="int", nullable=False),
                ColumnSchema(name="name", data_type="varchar", nullable=False),
            ),
        ),
        TableSchema(
            name="tags",
            columns=(ColumnSchema(name="id", data_type="int", nullable=False),),
        ),
    ]


@pytest.fixture()
def shop_graph(shop_tables: List[TableSchema]) -> SchemaGraph:
    from schemagen.introspection import derive_relationships

    return derive_relationships(shop_tables)


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "generated"


@pytest.fixture()
def complete_config(output_dir: pathlib.Path) -> GeneratorConfig:
    return GeneratorConfig(
        db_host="localhost",
        db_name="shop",
        db_user="root",
        db_password="secret",
        output_directory=str(output_dir),
        namespace="App",
    )


@pytest.fixture()
def config_yaml_path(tmp_path: pathlib.Path, output_dir: pathlib.Path) -> pathlib.Path:
    """Write a complete settings file and return its path."""
    path = tmp_path / "schemagen.yaml"
    data = {
        "db_host": "localhost",
        "db_name": "shop",
        "db_user": "root",
        "db_password": "secret",
        "db_options": {"charset": "utf8"},
        "output_directory": str(output_dir),
        "namespace": "App",
    }
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False)
    return path


# ---------------------------------------------------------------------------
# Template fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def model_template_text() -> str:
    return (BUNDLED_STUBS_DIR / "model.stub").read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def service_template_text() -> str:
    return (BUNDLED_STUBS_DIR / "service.stub").read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# SQLite-backed information_schema
# ---------------------------------------------------------------------------

_CATALOG_DDL: Sequence[str] = (
    """
    CREATE TABLE information_schema.TABLES (
        TABLE_SCHEMA TEXT, TABLE_NAME TEXT
    )
    """,
    """
    CREATE TABLE information_schema.COLUMNS (
        TABLE_SCHEMA TEXT, TABLE_NAME TEXT, COLUMN_NAME TEXT,
        ORDINAL_POSITION INTEGER, DATA_TYPE TEXT, IS_NULLABLE TEXT,
        COLUMN_DEFAULT TEXT
    )
    """,
    """
    CREATE TABLE information_schema.KEY_COLUMN_USAGE (
        TABLE_SCHEMA TEXT, TABLE_NAME TEXT, COLUMN_NAME TEXT,
        CONSTRAINT_NAME TEXT, ORDINAL_POSITION INTEGER,
        REFERENCED_TABLE_NAME TEXT, REFERENCED_COLUMN_NAME TEXT
    )
    """,
)


@pytest.fixture()
def sqlite_catalog_engine(tmp_path: pathlib.Path) -> Iterator[Engine]:
    """
    Engine whose connections see an ``information_schema`` database
    describing the shop schema (plus one table in another schema).
    """
    catalog_path = tmp_path / "catalog.db"
    engine = create_engine(f"sqlite:///{tmp_path / 'main.db'}")

    @event.listens_for(engine, "connect")
    def _attach_catalog(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute(f"ATTACH DATABASE '{catalog_path}' AS information_schema")
        cursor.close()

    tables = [("shop", "products"), ("shop", "order_items"), ("other", "invoices")]
    columns = [
        ("shop", "products", "id", 1, "int", "NO", None),
        ("shop", "products", "name", 2, "varchar", "NO", None),
        ("shop", "order_items", "product_id", 2, "int", "NO", None),
        ("shop", "order_items", "id", 1, "int", "NO", None),
        ("shop", "order_items", "note", 3, "text", "YES", "n/a"),
        ("other", "invoices", "id", 1, "int", "NO", None),
    ]
    key_usage = [
        ("shop", "products", "id", "PRIMARY", 1, None, None),
        ("shop", "order_items", "id", "PRIMARY", 1, None, None),
        ("shop", "order_items", "product_id", "fk_items_product", 1, "products", "id"),
        ("other", "invoices", "id", "PRIMARY", 1, None, None),
    ]

    with engine.begin() as conn:
        for ddl in _CATALOG_DDL:
            conn.execute(text(ddl))
        conn.execute(
            text("INSERT INTO information_schema.TABLES VALUES (:s, :t)"),
            [{"s": s, "t": t} for s, t in tables],
        )
        conn.execute(
            text(
                "INSERT INTO information_schema.COLUMNS "
                "VALUES (:s, :t, :c, :p, :d, :n, :default)"
            ),
            [
                {"s": s, "t": t, "c": c, "p": p, "d": d, "n": n, "default": dflt}
                for s, t, c, p, d, n, dflt in columns
            ],
        )
        conn.execute(
            text(
                "INSERT INTO information_schema.KEY_COLUMN_USAGE "
                "VALUES (:s, :t, :c, :k, :p, :rt, :rc)"
            ),
            [
                {"s": s, "t": t, "c": c, "k": k, "p": p, "rt": rt, "rc": rc}
                for s, t, c, k, p, rt, rc in key_usage
            ],
        )

    yield engine
    engine.dispose()


# ---------------------------------------------------------------------------
# Factories exposed as fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_catalog():
    """Return the ``FakeCatalog`` class for tests that build their own data."""
    return FakeCatalog


@pytest.fixture()
def rows():
    """Row builders: ``rows.column(...)`` and ``rows.fk(...)``."""

    class _Rows:
        column = staticmethod(column_row)
        fk = staticmethod(fk_row)

    return _Rows
