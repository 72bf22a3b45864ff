# File: schemagen/model_generator.py
"""
SchemaGen - Model Class Generator
==================================
Renders one PHP model class per table into ``<output>/Models/<Class>.php``.

Each model carries an accessor method per derived relationship: every
``belongsTo`` first (singular name), then every ``hasMany`` (plural name).
Each accessor declares the association kind, the target class's
fully-qualified name, the foreign key and the owner / local key.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from schemagen.models import RelationshipSet, SchemaGraph, TableSchema
from schemagen.templates import MODEL_TEMPLATE, TemplateEmitter
from schemagen.utils import class_name_of, relation_accessor_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.model_generator")

MODELS_DIRECTORY: str = "Models"

_ACCESSOR_TEMPLATE: str = (
    "\n"
    "    public function {method}()\n"
    "    {{\n"
    "        return $this->{kind}(\\{namespace}\\{target}::class, '{foreign_key}', '{key}');\n"
    "    }}\n"
)


def build_accessor(
    kind: str,
    method: str,
    namespace: str,
    target: str,
    foreign_key: str,
    key: str,
) -> str:
    """One association accessor method (``belongsTo`` or ``hasMany``)."""
    return _ACCESSOR_TEMPLATE.format(
        method=method,
        kind=kind,
        namespace=namespace,
        target=target,
        foreign_key=foreign_key,
        key=key,
    )


def build_relationships_block(relationships: RelationshipSet, namespace: str) -> str:
    """
    Accessor methods for all relationships of one table.

    ``belongs_to_many`` never produces output.
    """
    parts: List[str] = []

    for rel in relationships.belongs_to:
        parts.append(
            build_accessor(
                "belongsTo",
                relation_accessor_name(rel.target_table, plural=False),
                namespace,
                class_name_of(rel.target_table),
                rel.foreign_key,
                rel.owner_key,
            )
        )

    for rel in relationships.has_many:
        parts.append(
            build_accessor(
                "hasMany",
                relation_accessor_name(rel.target_table, plural=True),
                namespace,
                class_name_of(rel.target_table),
                rel.foreign_key,
                rel.local_key,
            )
        )

    return "".join(parts)


class ModelCodeGenerator:
    """
    Stateless model-class renderer.

    Usage::

        gen = ModelCodeGenerator()
        written = gen.generate(graph, template_text, "App", Path("./out"))
    """

    def __init__(self) -> None:
        self._emitter: TemplateEmitter = TemplateEmitter(MODEL_TEMPLATE)

    def render(self, table: TableSchema, template_text: str, namespace: str) -> str:
        """Render the model file content for one table."""
        models_namespace: str = f"{namespace}\\{MODELS_DIRECTORY}"
        values: Dict[str, str] = {
            "namespace": models_namespace,
            "className": class_name_of(table.name),
            "tableName": table.name,
            "relationships": build_relationships_block(
                table.relationships, models_namespace
            ),
        }
        return self._emitter.render(template_text, values)

    def generate(
        self,
        graph: SchemaGraph,
        template_text: str,
        namespace: str,
        output_root: Path,
    ) -> List[Path]:
        """
        Write one model file per table, in graph order.

        Returns the written paths.

        Raises:
            GenerationError: if ``Models/`` cannot be created or a file
                cannot be written.
        """
        models_dir: Path = self._emitter.prepare_directory(
            Path(output_root) / MODELS_DIRECTORY
        )
        written: List[Path] = []
        for table in graph.tables:
            content: str = self.render(table, template_text, namespace)
            written.append(
                self._emitter.emit(models_dir, f"{class_name_of(table.name)}.php", content)
            )

        logger.info("Generated %d model classes in %s.", len(written), models_dir)
        return written


__all__: List[str] = [
    "MODELS_DIRECTORY",
    "ModelCodeGenerator",
    "build_accessor",
    "build_relationships_block",
]
