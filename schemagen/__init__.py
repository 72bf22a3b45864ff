# File: schemagen/__init__.py
"""
SchemaGen — PHP Model & Service Generator
==========================================

Reads a MySQL database's ``INFORMATION_SCHEMA``, derives ``belongsTo`` /
``hasMany`` relationships purely from foreign-key metadata, and renders one
model class and one service class per table from ``{{token}}`` stubs.

Architecture overview::

    ┌──────────────┐     ┌───────────────┐     ┌────────────────────┐
    │  CLI / Entry │────▶│ CodeGenerator │────▶│ SchemaIntrospector │
    │   (cli.py)   │     │ (generator.py)│     │ (introspection.py) │
    └──────────────┘     └───────┬───────┘     └────────────────────┘
                                 │
                    ┌────────────┼──────────────┐
                    ▼            ▼              ▼
             ┌────────────┐ ┌──────────┐ ┌──────────────────┐
             │ templates  │ │  model_  │ │ service_         │
             │   (.py)    │ │generator │ │ generator        │
             └────────────┘ └──────────┘ └──────────────────┘

Usage::

    # As a library
    from schemagen import CodeGenerator
    report = (
        CodeGenerator()
        .set_db_configuration("localhost", "shop", "root", "secret")
        .set_output_directory("./generated")
        .set_namespace("App")
        .generate()
    )

    # From the command line
    python -m schemagen --host localhost --database shop --user root \\
        --password secret -o ./generated -n App
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from schemagen.errors import (
    CatalogConnectionError,
    ConfigurationError,
    GenerationError,
    IntrospectionError,
    SchemaGenError,
    TemplateError,
)
from schemagen.models import (
    BelongsToRelation,
    ColumnSchema,
    ForeignKeySchema,
    GeneratorConfig,
    HasManyRelation,
    RelationshipSet,
    SchemaGraph,
    TableSchema,
)
from schemagen.utils import class_name_of, relation_accessor_name, substitute_tokens
from schemagen.templates import TemplateEmitter, TemplateLoader
from schemagen.introspection import (
    InformationSchemaCatalog,
    SchemaIntrospector,
    derive_relationships,
    introspect,
)
from schemagen.model_generator import ModelCodeGenerator
from schemagen.service_generator import ServiceCodeGenerator
from schemagen.generator import CodeGenerator, GenerationReport, build_config, load_config_file

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrator
    "CodeGenerator",
    "GenerationReport",
    "build_config",
    "load_config_file",
    # Errors
    "SchemaGenError",
    "ConfigurationError",
    "CatalogConnectionError",
    "IntrospectionError",
    "TemplateError",
    "GenerationError",
    # Models
    "BelongsToRelation",
    "ColumnSchema",
    "ForeignKeySchema",
    "GeneratorConfig",
    "HasManyRelation",
    "RelationshipSet",
    "SchemaGraph",
    "TableSchema",
    # Introspection
    "InformationSchemaCatalog",
    "SchemaIntrospector",
    "derive_relationships",
    "introspect",
    # Generation
    "ModelCodeGenerator",
    "ServiceCodeGenerator",
    "TemplateEmitter",
    "TemplateLoader",
    # Utilities
    "class_name_of",
    "relation_accessor_name",
    "substitute_tokens",
]
