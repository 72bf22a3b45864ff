# File: schemagen/introspection.py
"""
SchemaGen - Schema Introspection & Relationship Derivation
===========================================================

Turns ``INFORMATION_SCHEMA`` catalog rows into a ``SchemaGraph``:

    1. List every table of the configured database (none → empty graph).
    2. Per table, read columns, the primary-key column (fallback ``"id"``)
       and the outgoing foreign keys.
    3. Run one whole-graph derivation pass: for each foreign key
       ``A.col → B.refcol`` add ``belongsTo(B)`` to A and ``hasMany(A)`` to B.

The derivation never mutates a table in place; it builds new frozen
``TableSchema`` instances and a new ``SchemaGraph``.  Iteration follows
catalog order (tables by name, foreign keys by the position of their
column in the table), which fixes the order of generated accessor methods.

The catalog connection is opened once, shared by all per-table queries, and
released on every exit path.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from schemagen.errors import CatalogConnectionError, IntrospectionError
from schemagen.models import (
    DEFAULT_PRIMARY_KEY,
    BelongsToRelation,
    ColumnSchema,
    ForeignKeySchema,
    GeneratorConfig,
    HasManyRelation,
    RelationshipSet,
    SchemaGraph,
    TableSchema,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.introspection")

# ---------------------------------------------------------------------------
# Catalog queries
# ---------------------------------------------------------------------------

_TABLES_SQL = text(
    """
    SELECT TABLE_NAME AS table_name
    FROM INFORMATION_SCHEMA.TABLES
    WHERE TABLE_SCHEMA = :schema
    ORDER BY TABLE_NAME
    """
)

_COLUMNS_SQL = text(
    """
    SELECT COLUMN_NAME AS column_name,
           DATA_TYPE AS data_type,
           IS_NULLABLE AS is_nullable,
           COLUMN_DEFAULT AS column_default
    FROM INFORMATION_SCHEMA.COLUMNS
    WHERE TABLE_SCHEMA = :schema AND TABLE_NAME = :table
    ORDER BY ORDINAL_POSITION
    """
)

_PRIMARY_KEY_SQL = text(
    """
    SELECT COLUMN_NAME AS column_name
    FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE
    WHERE TABLE_SCHEMA = :schema
      AND TABLE_NAME = :table
      AND CONSTRAINT_NAME = 'PRIMARY'
    ORDER BY ORDINAL_POSITION
    """
)

_FOREIGN_KEYS_SQL = text(
    """
    SELECT k.COLUMN_NAME AS column_name,
           k.REFERENCED_TABLE_NAME AS referenced_table_name,
           k.REFERENCED_COLUMN_NAME AS referenced_column_name
    FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE AS k
    JOIN INFORMATION_SCHEMA.COLUMNS AS c
      ON c.TABLE_SCHEMA = k.TABLE_SCHEMA
     AND c.TABLE_NAME = k.TABLE_NAME
     AND c.COLUMN_NAME = k.COLUMN_NAME
    WHERE k.TABLE_SCHEMA = :schema
      AND k.TABLE_NAME = :table
      AND k.REFERENCED_TABLE_NAME IS NOT NULL
    ORDER BY c.ORDINAL_POSITION, k.ORDINAL_POSITION
    """
)


class InformationSchemaCatalog:
    """
    Thin query surface over ``INFORMATION_SCHEMA`` for one database.

    Every method returns plain dict rows keyed by lower-case column aliases.
    """

    def __init__(self, connection: Connection, schema: str) -> None:
        self._connection: Connection = connection
        self._schema: str = schema

    def _fetch(self, statement: Any, **params: Any) -> List[Dict[str, Any]]:
        result = self._connection.execute(statement, {"schema": self._schema, **params})
        return [dict(row) for row in result.mappings().all()]

    def list_tables(self) -> List[str]:
        return [row["table_name"] for row in self._fetch(_TABLES_SQL)]

    def list_columns(self, table: str) -> List[Dict[str, Any]]:
        return self._fetch(_COLUMNS_SQL, table=table)

    def primary_key_columns(self, table: str) -> List[str]:
        return [row["column_name"] for row in self._fetch(_PRIMARY_KEY_SQL, table=table)]

    def list_foreign_keys(self, table: str) -> List[Dict[str, Any]]:
        return self._fetch(_FOREIGN_KEYS_SQL, table=table)


CatalogFactory = Callable[[Connection, str], Any]
EngineFactory = Callable[..., Engine]


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def _column_from_row(row: Mapping[str, Any]) -> ColumnSchema:
    default: Any = row["column_default"]
    return ColumnSchema(
        name=row["column_name"],
        data_type=row["data_type"],
        nullable=str(row["is_nullable"]).upper() == "YES",
        default_value=None if default is None else str(default),
    )


def _foreign_key_from_row(row: Mapping[str, Any]) -> ForeignKeySchema:
    return ForeignKeySchema(
        column=row["column_name"],
        referenced_table=row["referenced_table_name"],
        referenced_column=row["referenced_column_name"],
    )


def read_table(catalog: Any, table_name: str) -> TableSchema:
    """
    Build the structural record of one table from the catalog.

    Relationships are left empty; ``derive_relationships`` fills them in.

    Raises:
        IntrospectionError: if the catalog rows are malformed.
    """
    try:
        columns = tuple(_column_from_row(r) for r in catalog.list_columns(table_name))
        pk_columns: List[str] = list(catalog.primary_key_columns(table_name))
        foreign_keys = tuple(
            _foreign_key_from_row(r) for r in catalog.list_foreign_keys(table_name)
        )
        if pk_columns:
            primary_key: str = pk_columns[0]
            if len(pk_columns) > 1:
                logger.debug(
                    "Table '%s' has a composite primary key %s; using '%s'.",
                    table_name,
                    pk_columns,
                    primary_key,
                )
        else:
            primary_key = DEFAULT_PRIMARY_KEY
            logger.debug(
                "Table '%s' reports no primary key; defaulting to '%s'.",
                table_name,
                DEFAULT_PRIMARY_KEY,
            )
        table = TableSchema(
            name=table_name,
            columns=columns,
            primary_key=primary_key,
            foreign_keys=foreign_keys,
        )
    except (KeyError, TypeError, ValidationError) as exc:
        raise IntrospectionError(
            f"Malformed catalog data for table '{table_name}': {exc}"
        ) from exc

    logger.debug("Introspected %r.", table)
    return table


# ---------------------------------------------------------------------------
# Relationship derivation
# ---------------------------------------------------------------------------


def derive_relationships(tables: Sequence[TableSchema]) -> SchemaGraph:
    """
    Derive ``belongsTo`` / ``hasMany`` sets for every table in one pass.

    For each foreign key ``A.col → B.refcol`` (tables and keys in the given
    order) ``{B, col, refcol}`` is appended to A's ``belongs_to`` and
    ``{A, col, refcol}`` to B's ``has_many``.  Any relationships already on
    the input tables are discarded.

    Returns a new graph; the input tables are not modified.

    Raises:
        IntrospectionError: on duplicate table names or a foreign key that
            references a table absent from *tables*.
    """
    try:
        SchemaGraph(tables=tuple(tables))
    except ValidationError as exc:
        raise IntrospectionError(f"Inconsistent table list: {exc}") from exc

    belongs_to: Dict[str, List[BelongsToRelation]] = {t.name: [] for t in tables}
    has_many: Dict[str, List[HasManyRelation]] = {t.name: [] for t in tables}

    for table in tables:
        for fk in table.foreign_keys:
            if fk.referenced_table not in has_many:
                raise IntrospectionError(
                    f"Table '{table.name}' has a foreign key on '{fk.column}' "
                    f"referencing '{fk.referenced_table}', which is not in the "
                    f"introspected table list."
                )
            belongs_to[table.name].append(
                BelongsToRelation(
                    target_table=fk.referenced_table,
                    foreign_key=fk.column,
                    owner_key=fk.referenced_column,
                )
            )
            has_many[fk.referenced_table].append(
                HasManyRelation(
                    target_table=table.name,
                    foreign_key=fk.column,
                    local_key=fk.referenced_column,
                )
            )

    derived: List[TableSchema] = [
        table.model_copy(
            update={
                "relationships": RelationshipSet(
                    belongs_to=tuple(belongs_to[table.name]),
                    has_many=tuple(has_many[table.name]),
                )
            }
        )
        for table in tables
    ]
    graph: SchemaGraph = SchemaGraph(tables=tuple(derived))

    logger.info(
        "Derived relationships: %d tables, %d foreign keys.",
        len(graph),
        graph.total_foreign_keys,
    )
    return graph


# ---------------------------------------------------------------------------
# SchemaIntrospector
# ---------------------------------------------------------------------------


class SchemaIntrospector:
    """
    Reads the catalog of the configured database and returns the derived
    ``SchemaGraph``.

    Usage::

        graph = SchemaIntrospector(config).introspect()

    ``engine_factory`` and ``catalog_factory`` default to SQLAlchemy's
    ``create_engine`` and ``InformationSchemaCatalog``.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        *,
        engine_factory: EngineFactory = create_engine,
        catalog_factory: CatalogFactory = InformationSchemaCatalog,
    ) -> None:
        self._config: GeneratorConfig = config
        self._engine_factory: EngineFactory = engine_factory
        self._catalog_factory: CatalogFactory = catalog_factory

    def _create_engine(self) -> Engine:
        try:
            return self._engine_factory(self._config.database_url())
        except SQLAlchemyError as exc:
            raise CatalogConnectionError(
                f"Could not set up database engine: {exc}"
            ) from exc

    def introspect(self) -> SchemaGraph:
        """
        Run the full introspection.

        Raises:
            CatalogConnectionError: if the catalog cannot be reached.
            IntrospectionError: on malformed or inconsistent catalog data.
        """
        engine: Engine = self._create_engine()
        try:
            try:
                connection: Connection = engine.connect()
            except SQLAlchemyError as exc:
                raise CatalogConnectionError(
                    f"Database connection failed: {exc}"
                ) from exc

            with connection:
                logger.info(
                    "Connected to %s@%s/%s.",
                    self._config.db_user,
                    self._config.db_host,
                    self._config.db_name,
                )
                catalog = self._catalog_factory(connection, self._config.db_name or "")
                tables: List[TableSchema] = self._read_tables(catalog)
        finally:
            engine.dispose()
            logger.debug("Catalog connection released.")

        graph: SchemaGraph = derive_relationships(tables)

        logger.info("Introspection complete: %d tables.", len(graph))
        return graph

    def _read_tables(self, catalog: Any) -> List[TableSchema]:
        try:
            table_names: List[str] = list(catalog.list_tables())
            if not table_names:
                logger.warning(
                    "Database '%s' has no tables; nothing to generate.",
                    self._config.db_name,
                )
                return []
            return [read_table(catalog, name) for name in table_names]
        except SQLAlchemyError as exc:
            raise IntrospectionError(f"Catalog query failed: {exc}") from exc
        except KeyError as exc:
            raise IntrospectionError(f"Malformed table list from catalog: {exc}") from exc


def introspect(
    config: GeneratorConfig,
    *,
    engine_factory: Optional[EngineFactory] = None,
    catalog_factory: Optional[CatalogFactory] = None,
) -> SchemaGraph:
    """Convenience wrapper: ``SchemaIntrospector(config).introspect()``."""
    return SchemaIntrospector(
        config,
        engine_factory=engine_factory or create_engine,
        catalog_factory=catalog_factory or InformationSchemaCatalog,
    ).introspect()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "InformationSchemaCatalog",
    "SchemaIntrospector",
    "derive_relationships",
    "introspect",
    "read_table",
]

logger.debug("schemagen.introspection loaded.")
