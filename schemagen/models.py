# File: schemagen/models.py
"""
SchemaGen - Core Data Models
=============================
Pydantic V2 models for the introspected schema, the derived relationship
graph, and the generator configuration.  These models are the single source
of truth for the pipeline: Catalog Introspection → Relationship Derivation →
Model / Service Code Generation.

Schema models are frozen: the ``SchemaGraph`` is built once per run and every
downstream generator treats it as read-only.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    computed_field,
    field_validator,
    model_validator,
)
from sqlalchemy.engine import URL

from schemagen.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.models")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

DEFAULT_PRIMARY_KEY: str = "id"
DEFAULT_CHARSET: str = "utf8mb4"
DEFAULT_PORT: int = 3306
DATABASE_DRIVER: str = "mysql+pymysql"


# ---------------------------------------------------------------------------
# Columns & foreign keys
# ---------------------------------------------------------------------------


class ColumnSchema(BaseModel):
    """One column as reported by the catalog."""

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    data_type: str = Field(..., min_length=1, description="Declared data type.")
    nullable: bool = Field(default=True, description="Whether NULL is allowed.")
    default_value: Optional[str] = Field(
        default=None, description="Column default as reported by the catalog."
    )

    def __repr__(self) -> str:
        null_flag: str = " NULL" if self.nullable else " NOT NULL"
        return f"<Column {self.name} {self.data_type}{null_flag}>"


class ForeignKeySchema(BaseModel):
    """An outgoing foreign key: ``column`` → ``referenced_table.referenced_column``."""

    model_config = _FROZEN_CONFIG

    column: str = Field(..., min_length=1, description="Local column name.")
    referenced_table: str = Field(..., min_length=1, description="Target table.")
    referenced_column: str = Field(..., min_length=1, description="Target column.")

    def __repr__(self) -> str:
        return f"<FK {self.column} → {self.referenced_table}.{self.referenced_column}>"


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------


class BelongsToRelation(BaseModel):
    """Many-to-one: this table holds ``foreign_key`` pointing at ``target_table``."""

    model_config = _FROZEN_CONFIG

    target_table: str = Field(..., min_length=1)
    foreign_key: str = Field(..., min_length=1)
    owner_key: str = Field(..., min_length=1)


class HasManyRelation(BaseModel):
    """One-to-many: ``target_table`` holds ``foreign_key`` pointing back here."""

    model_config = _FROZEN_CONFIG

    target_table: str = Field(..., min_length=1)
    foreign_key: str = Field(..., min_length=1)
    local_key: str = Field(..., min_length=1)


class RelationshipSet(BaseModel):
    """
    Relationships derived for one table.

    ``belongs_to_many`` is always empty; junction tables are not inferred.
    """

    model_config = _FROZEN_CONFIG

    belongs_to: Tuple[BelongsToRelation, ...] = ()
    has_many: Tuple[HasManyRelation, ...] = ()
    belongs_to_many: Tuple[BelongsToRelation, ...] = ()

    @computed_field  # type: ignore[misc]
    @property
    def is_empty(self) -> bool:
        return not (self.belongs_to or self.has_many or self.belongs_to_many)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class TableSchema(BaseModel):
    """
    Structural record of a single table plus its derived relationships.

    One ``TableSchema`` drives one model file and one service file.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Catalog table name.")
    columns: Tuple[ColumnSchema, ...] = Field(default=(), description="Ordered columns.")
    primary_key: str = Field(default=DEFAULT_PRIMARY_KEY, min_length=1)
    foreign_keys: Tuple[ForeignKeySchema, ...] = Field(
        default=(), description="Outgoing foreign keys in declaration order."
    )
    relationships: RelationshipSet = Field(default_factory=RelationshipSet)

    @computed_field  # type: ignore[misc]
    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def __repr__(self) -> str:
        return (
            f"<Table {self.name} "
            f"({len(self.columns)} cols, {len(self.foreign_keys)} FKs, "
            f"{len(self.relationships.belongs_to)} belongsTo, "
            f"{len(self.relationships.has_many)} hasMany)>"
        )


# ---------------------------------------------------------------------------
# Schema graph
# ---------------------------------------------------------------------------


class SchemaGraph(BaseModel):
    """
    Every discovered table, keyed by name, in stable catalog order.

    Invariant: table names are unique.  ``_table_map`` is an O(1) lookup
    cache built once at construction.
    """

    model_config = _FROZEN_CONFIG

    tables: Tuple[TableSchema, ...] = ()

    _table_map: Dict[str, TableSchema] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _validate_unique_table_names(self) -> "SchemaGraph":
        names: List[str] = [t.name for t in self.tables]
        if len(names) != len(set(names)):
            dupes: List[str] = [n for n in names if names.count(n) > 1]
            raise ValueError(f"Duplicate table names: {sorted(set(dupes))}")
        return self

    def model_post_init(self, __context: Any) -> None:
        self._table_map = {t.name: t for t in self.tables}

    def get_table(self, name: str) -> Optional[TableSchema]:
        """O(1) table lookup."""
        return self._table_map.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._table_map

    def __len__(self) -> int:
        return len(self.tables)

    @computed_field  # type: ignore[misc]
    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]

    @computed_field  # type: ignore[misc]
    @property
    def total_foreign_keys(self) -> int:
        return sum(len(t.foreign_keys) for t in self.tables)

    def __repr__(self) -> str:
        return (
            f"<SchemaGraph {len(self.tables)} tables, "
            f"{self.total_foreign_keys} foreign keys>"
        )


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Settings for one generation run: catalog connection, output root and
    PHP namespace prefix.

    Fields are optional so the config can be filled in step by step (CLI
    flags, config file, fluent setters); ``validate_complete()`` enforces
    that everything required is present before any I/O happens.
    """

    model_config = _SETTINGS_CONFIG

    # -- Database -----------------------------------------------------------
    db_host: Optional[str] = Field(default=None, description="Database host.")
    db_name: Optional[str] = Field(default=None, description="Database / schema name.")
    db_user: Optional[str] = Field(default=None, description="Database user.")
    db_password: Optional[str] = Field(default=None, description="Database password.")
    db_options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Driver options; 'charset' and 'port' are recognised.",
    )

    # -- Output -------------------------------------------------------------
    output_directory: Optional[str] = Field(
        default=None, description="Root directory for generated files."
    )
    namespace: Optional[str] = Field(
        default=None, description="PHP namespace prefix, e.g. 'App'."
    )
    templates_directory: Optional[str] = Field(
        default=None,
        description="Directory searched for model.stub / service.stub first.",
    )

    # -- Normalisation ------------------------------------------------------

    @field_validator("output_directory")
    @classmethod
    def _strip_trailing_separators(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        separators: str = "/" + os.sep + (os.altsep or "")
        # A bare root such as "/" stays as it is.
        return v.rstrip(separators) or v[:1]

    @field_validator("namespace")
    @classmethod
    def _strip_namespace_separators(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip("\\")

    # -- Derived values -----------------------------------------------------

    @computed_field  # type: ignore[misc]
    @property
    def charset(self) -> str:
        return str(self.db_options.get("charset") or DEFAULT_CHARSET)

    @computed_field  # type: ignore[misc]
    @property
    def port(self) -> int:
        return int(self.db_options.get("port") or DEFAULT_PORT)

    @computed_field  # type: ignore[misc]
    @property
    def models_namespace(self) -> str:
        return f"{self.namespace}\\Models"

    @computed_field  # type: ignore[misc]
    @property
    def services_namespace(self) -> str:
        return f"{self.namespace}\\Services"

    def database_url(self) -> URL:
        """SQLAlchemy URL for the catalog connection."""
        return URL.create(
            DATABASE_DRIVER,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.port,
            database=self.db_name,
            query={"charset": self.charset},
        )

    # -- Validation ---------------------------------------------------------

    def validate_complete(self) -> None:
        """
        Fail fast when required settings are missing.

        Raises:
            ConfigurationError: if connection parameters, the output
                directory or the namespace are unset.
        """
        if (
            not self.db_host
            or not self.db_name
            or not self.db_user
            or self.db_password is None
        ):
            raise ConfigurationError("Database configuration is incomplete.")

        if not self.output_directory:
            raise ConfigurationError("Output directory is not set.")

        if not self.namespace:
            raise ConfigurationError("Namespace is not set.")

        logger.debug(
            "Configuration valid: %s@%s/%s → %s (namespace %s).",
            self.db_user,
            self.db_host,
            self.db_name,
            self.output_directory,
            self.namespace,
        )

    def __repr__(self) -> str:
        # Never expose the password.
        return (
            f"<GeneratorConfig {self.db_user}@{self.db_host}/{self.db_name} "
            f"output={self.output_directory!r} namespace={self.namespace!r}>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_PRIMARY_KEY",
    "DEFAULT_CHARSET",
    "DEFAULT_PORT",
    "ColumnSchema",
    "ForeignKeySchema",
    "BelongsToRelation",
    "HasManyRelation",
    "RelationshipSet",
    "TableSchema",
    "SchemaGraph",
    "GeneratorConfig",
]

logger.debug("schemagen.models loaded — %d public symbols.", len(__all__))
